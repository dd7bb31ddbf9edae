from typing import Callable, Optional

import boto3
from botocore.credentials import Credentials
from opensearchpy import AWSV4SignerAuth, OpenSearch, RequestsHttpConnection

SERVICE = 'aoss'

CredentialsProvider = Callable[[], Credentials]


def default_credentials_provider(session: Optional[boto3.Session] = None) -> CredentialsProvider:
    """Credentials of a boto3 session (the function's execution role on Lambda)."""
    session = session or boto3.Session()
    return session.get_credentials


def build_client(endpoint: str, region: str, credentials_provider: CredentialsProvider) -> OpenSearch:
    """OpenSearch Serverless client signing every request with SigV4."""
    credentials = credentials_provider()
    if credentials is None:
        raise RuntimeError('no AWS credentials available to sign OpenSearch requests')
    auth = AWSV4SignerAuth(credentials, region, SERVICE)
    return OpenSearch(
        hosts=[endpoint],
        http_auth=auth,
        use_ssl=True,
        verify_certs=True,
        connection_class=RequestsHttpConnection,
        pool_maxsize=20,
    )
