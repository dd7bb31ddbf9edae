import pytest
from opensearchpy.exceptions import ConnectionError, NotFoundError, TransportError

from stream_indexer.records import ChangeRecord
from stream_indexer.translator import StreamToIndexTranslator
from tests.helpers import FakeSearchClient, stream_record


def record(event_name, **kwargs):
    return ChangeRecord.from_stream_record(stream_record(event_name, **kwargs))


def document_missing():
    return NotFoundError(404, 'not_found', {'_index': 'books', '_id': '42', 'result': 'not_found'})


def index_missing():
    return NotFoundError(
        404,
        'index_not_found_exception',
        {'error': {'type': 'index_not_found_exception', 'index': 'books'}, 'status': 404},
    )


def server_error():
    return TransportError(500, 'internal_server_error', {'error': 'boom'})


def test_insert_upserts_deserialized_image(client):
    translator = StreamToIndexTranslator(client)

    translator.handle(record('INSERT', new_image={'title': {'S': 'Dune'}, 'year': {'N': '1965'}}))

    assert client.calls == [('index', 'books', '42', {'title': 'Dune', 'year': 1965})]


def test_modify_upserts_like_insert(client):
    translator = StreamToIndexTranslator(client)

    translator.handle(record('MODIFY', doc_id='7', new_image={'title': {'S': 'Children of Dune'}}))

    assert client.calls == [('index', 'books', '7', {'title': 'Children of Dune'})]


def test_remove_deletes_without_reading_image(client, monkeypatch):
    def fail(image):
        raise AssertionError('image deserialized on delete')

    monkeypatch.setattr('stream_indexer.translator.to_document', fail)
    translator = StreamToIndexTranslator(client)

    translator.handle(record('REMOVE', new_image={'title': {'S': 'Dune'}}))

    assert client.calls == [('delete', 'books', '42')]


@pytest.mark.parametrize('event_name', ['UPDATE', 'insert', ''])
def test_unknown_event_is_ignored(client, event_name):
    translator = StreamToIndexTranslator(client)

    assert translator.handle(record(event_name)) is None
    assert client.calls == []


def test_delete_of_missing_document_succeeds(capsys):
    client = FakeSearchClient(delete_error=document_missing())
    translator = StreamToIndexTranslator(client)

    assert translator.handle(record('REMOVE')) is None
    assert client.calls == [('delete', 'books', '42')]
    assert 'not found' in capsys.readouterr().out


def test_delete_with_missing_index_raises():
    error = index_missing()
    translator = StreamToIndexTranslator(FakeSearchClient(delete_error=error))

    with pytest.raises(NotFoundError) as excinfo:
        translator.handle(record('REMOVE'))
    assert excinfo.value is error


@pytest.mark.parametrize('make_error', [server_error, lambda: ConnectionError('N/A', 'timed out', None)])
def test_delete_failure_propagates_unchanged(make_error):
    error = make_error()
    translator = StreamToIndexTranslator(FakeSearchClient(delete_error=error))

    with pytest.raises(TransportError) as excinfo:
        translator.handle(record('REMOVE'))
    assert excinfo.value is error


@pytest.mark.parametrize('make_error', [server_error, document_missing])
def test_upsert_failure_propagates_unchanged(make_error):
    error = make_error()
    client = FakeSearchClient(index_error=error)
    translator = StreamToIndexTranslator(client)

    with pytest.raises(TransportError) as excinfo:
        translator.handle(record('INSERT', new_image={'title': {'S': 'Dune'}}))
    assert excinfo.value is error
    assert len(client.calls) == 1


def test_custom_index_name(client):
    translator = StreamToIndexTranslator(client, index_name='novels')

    translator.handle(record('REMOVE'))

    assert client.calls == [('delete', 'novels', '42')]


def test_response_is_logged(client, capsys):
    StreamToIndexTranslator(client).handle(record('INSERT', new_image={'title': {'S': 'Dune'}}))

    out = capsys.readouterr().out
    assert 'Upserting document 42' in out
    assert "'result': 'created'" in out
