"""
Typed-value deserialization

Stream images carry every attribute wrapped in its DynamoDB type descriptor,
e.g. {"title": {"S": "Dune"}, "year": {"N": "1965"}}. The search index wants
plain JSON documents, so the wrapping is removed and the boto3 types that
come out of TypeDeserializer are turned into JSON-native values:

- Decimal -> int when integral, float otherwise
- Binary  -> base64 string (what OpenSearch "binary" fields accept)
- set     -> sorted list
"""

import base64
from decimal import Decimal
from typing import Any, Dict

from boto3.dynamodb.types import Binary, TypeDeserializer


class StreamImageDeserializer(TypeDeserializer):
    """TypeDeserializer accepting binary values as Lambda delivers them.

    Stream events reach the function as JSON, so B and BS members are base64
    strings rather than bytes.
    """

    def _deserialize_b(self, value):
        if isinstance(value, str):
            value = base64.b64decode(value)
        return super()._deserialize_b(value)


_deserializer = StreamImageDeserializer()


def to_native(value: Any) -> Any:
    if isinstance(value, bool) or value is None:
        return value
    if isinstance(value, Decimal):
        return int(value) if value == value.to_integral_value() else float(value)
    if isinstance(value, Binary):
        value = value.value
    if isinstance(value, (bytes, bytearray)):
        return base64.b64encode(bytes(value)).decode('ascii')
    if isinstance(value, dict):
        return {k: to_native(v) for k, v in value.items()}
    if isinstance(value, list):
        return [to_native(v) for v in value]
    if isinstance(value, (set, frozenset)):
        return sorted(to_native(v) for v in value)
    return value


def deserialize(typed: Dict[str, Any]) -> Any:
    return to_native(_deserializer.deserialize(typed))


def to_document(image: Dict[str, Dict[str, Any]]) -> Dict[str, Any]:
    return {name: deserialize(typed) for name, typed in image.items()}
