from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from stream_indexer.documents import deserialize

INSERT = 'INSERT'
MODIFY = 'MODIFY'
REMOVE = 'REMOVE'

KEY_FIELD = 'id'


class ChangeRecord(BaseModel):
    """One row mutation delivered by the table's change stream."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    event_name: str = Field(alias='eventName')
    keys: Dict[str, Dict[str, Any]] = Field(alias='Keys')
    new_image: Optional[Dict[str, Dict[str, Any]]] = Field(default=None, alias='NewImage')

    @field_validator('keys')
    @classmethod
    def _require_id(cls, keys):
        if not keys.get(KEY_FIELD):
            raise ValueError(f'stream record keys have no {KEY_FIELD!r} attribute')
        try:
            value = deserialize(keys[KEY_FIELD])
        except TypeError as e:
            raise ValueError(f'stream record has a malformed {KEY_FIELD!r} key: {e}') from e
        if value is None or value == '':
            raise ValueError(f'stream record has an empty {KEY_FIELD!r} key')
        return keys

    @model_validator(mode='after')
    def _require_image_for_upserts(self):
        # Indexing without the new row would blank the stored document
        if self.event_name in (INSERT, MODIFY) and self.new_image is None:
            raise ValueError(f'{self.event_name} stream record has no NewImage')
        return self

    @classmethod
    def from_stream_record(cls, raw: Dict[str, Any]) -> 'ChangeRecord':
        # Keys and NewImage sit under the "dynamodb" member of a stream record
        data = dict(raw.get('dynamodb') or {})
        data['eventName'] = raw.get('eventName')
        return cls.model_validate(data)

    @property
    def document_id(self) -> str:
        return str(deserialize(self.keys[KEY_FIELD]))


def records_from_event(event: Dict[str, Any]) -> List[ChangeRecord]:
    return [ChangeRecord.from_stream_record(raw) for raw in event.get('Records', [])]
