"""
Stream-to-index translator

Maps one change record to one call against the search index:

    INSERT / MODIFY  ->  index (upsert) the deserialized NewImage under id
    REMOVE           ->  delete id, tolerating an already-absent document
    anything else    ->  nothing

There is no retry here. The event source mapping redelivers a record whose
invocation failed, so every backend error except not-found-on-delete is left
to propagate.
"""

from opensearchpy.exceptions import NotFoundError

from stream_indexer.config import INDEX_NAME, Settings
from stream_indexer.client import CredentialsProvider, build_client
from stream_indexer.documents import to_document
from stream_indexer.records import INSERT, MODIFY, REMOVE, ChangeRecord


def is_document_not_found(error: NotFoundError) -> bool:
    # A missing index is also a 404 but carries an "error" body instead
    info = error.info
    return isinstance(info, dict) and info.get('result') == 'not_found'


class StreamToIndexTranslator:

    def __init__(self, client, index_name: str = INDEX_NAME):
        self.client = client
        self.index_name = index_name

    @classmethod
    def from_settings(cls, settings: Settings, credentials_provider: CredentialsProvider):
        client = build_client(settings.aoss_endpoint, settings.aws_region, credentials_provider)
        return cls(client, index_name=settings.index_name)

    def handle(self, record: ChangeRecord):
        if record.event_name in (INSERT, MODIFY):
            return self.upsert(record)
        if record.event_name == REMOVE:
            return self.delete(record)
        return None

    def upsert(self, record: ChangeRecord):
        doc_id = record.document_id
        print(f'Upserting document {doc_id} into {self.index_name}')
        body = to_document(record.new_image)
        response = self.client.index(index=self.index_name, id=doc_id, body=body)
        print(response)
        return response

    def delete(self, record: ChangeRecord):
        doc_id = record.document_id
        print(f'Deleting document {doc_id} from {self.index_name}')
        try:
            response = self.client.delete(index=self.index_name, id=doc_id)
        except NotFoundError as e:
            if not is_document_not_found(e):
                raise
            print(f'Document {doc_id} not found, nothing to delete')
            return None
        print(response)
        return response
