def stream_record(event_name, doc_id='42', new_image=None):
    dynamodb = {'Keys': {'id': {'S': doc_id}}, 'StreamViewType': 'NEW_IMAGE'}
    if new_image is not None:
        dynamodb['NewImage'] = new_image
    return {
        'eventID': 'c4ca4238a0b923820dcc509a6f75849b',
        'eventName': event_name,
        'eventSource': 'aws:dynamodb',
        'awsRegion': 'ap-northeast-1',
        'dynamodb': dynamodb,
    }


def stream_event(*records):
    return {'Records': list(records)}


class FakeSearchClient:
    """Records index/delete calls and optionally fails them."""

    def __init__(self, index_error=None, delete_error=None):
        self.index_error = index_error
        self.delete_error = delete_error
        self.calls = []

    def index(self, index, id, body):
        self.calls.append(('index', index, id, body))
        if self.index_error is not None:
            raise self.index_error
        return {'_index': index, '_id': id, 'result': 'created'}

    def delete(self, index, id):
        self.calls.append(('delete', index, id))
        if self.delete_error is not None:
            raise self.delete_error
        return {'_index': index, '_id': id, 'result': 'deleted'}
