import os
from typing import Mapping, Optional

from pydantic import BaseModel

INDEX_NAME = 'books'
DEFAULT_REGION = 'ap-northeast-1'


class MissingSettingError(RuntimeError):
    pass


class Settings(BaseModel):
    aoss_endpoint: str
    aws_region: str = DEFAULT_REGION
    index_name: str = INDEX_NAME


def load_settings(environ: Optional[Mapping[str, str]] = None) -> Settings:
    """Read function settings from the Lambda environment.

    AOSS_ENDPOINT is set by the stack to the collection endpoint, AWS_REGION
    is provided by the Lambda runtime and picks the SigV4 signing region.
    """
    environ = os.environ if environ is None else environ
    endpoint = environ.get('AOSS_ENDPOINT')
    if not endpoint:
        raise MissingSettingError('AOSS_ENDPOINT is not set')
    return Settings(
        aoss_endpoint=endpoint,
        aws_region=environ.get('AWS_REGION') or DEFAULT_REGION,
    )
