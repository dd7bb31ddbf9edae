"""
Collection client function

Runs a search against the books index from inside the VPC, where the
collection's network policy allows access. Accepted events:

    {"q": "dune"}                      simple_query_string over all fields
    {"query": {"match": {...}}}        raw query DSL, passed through
    {}                                 match_all

An optional "size" limits the number of hits (default 10).
"""

import json

from stream_indexer.client import build_client, default_credentials_provider
from stream_indexer.config import INDEX_NAME, load_settings

DEFAULT_SIZE = 10


def build_query(event):
    if event.get('query'):
        return event['query']
    if event.get('q'):
        return {'simple_query_string': {'query': event['q']}}
    return {'match_all': {}}


def search_documents(client, index_name, query, size=DEFAULT_SIZE):
    response = client.search(index=index_name, body={'query': query, 'size': size})
    hits = response.get('hits', {})
    total = hits.get('total', 0)
    if isinstance(total, dict):
        total = total.get('value', 0)
    return {
        'total': total,
        'hits': [
            {'id': hit.get('_id'), 'score': hit.get('_score'), 'document': hit.get('_source')}
            for hit in hits.get('hits', [])
        ],
    }


def make_search_handler(client_factory, index_name):
    client = None

    def handler(event, context=None):
        nonlocal client
        print(json.dumps(event, default=str))
        if client is None:
            client = client_factory()
        size = int(event.get('size') or DEFAULT_SIZE)
        result = search_documents(client, index_name, build_query(event), size=size)
        print(f"Found {result['total']} documents")
        return result

    return handler


def _build_client():
    settings = load_settings()
    return build_client(settings.aoss_endpoint, settings.aws_region, default_credentials_provider())


lambda_handler = make_search_handler(_build_client, INDEX_NAME)
