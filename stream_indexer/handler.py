import json

from stream_indexer.client import default_credentials_provider
from stream_indexer.config import load_settings
from stream_indexer.records import records_from_event
from stream_indexer.translator import StreamToIndexTranslator


def make_handler(translator_factory):
    """Lambda handler translating stream records with a lazily built translator.

    The translator (and its HTTP connection pool) is built on the first
    invocation and reused while the execution environment stays warm.
    """
    translator = None

    def handler(event, context=None):
        nonlocal translator
        print(json.dumps(event, default=str))
        if translator is None:
            translator = translator_factory()
        for record in records_from_event(event):
            translator.handle(record)

    return handler


def _build_translator():
    return StreamToIndexTranslator.from_settings(load_settings(), default_credentials_provider())


lambda_handler = make_handler(_build_translator)
