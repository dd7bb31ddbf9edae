"""DynamoDB stream to OpenSearch Serverless indexing functions."""

__version__ = '0.1.0'
