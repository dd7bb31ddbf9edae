#!/usr/bin/env python3
"""
AWS CDK App for the DynamoDB to OpenSearch Serverless pipeline

This CDK app deploys the complete infrastructure for mirroring a DynamoDB
table into an OpenSearch Serverless search collection, including:
- DynamoDB table with streams enabled
- OpenSearch Serverless collection, policies and VPC endpoint
- ECR repository for the Lambda image
- Lambda functions for stream translation and collection access
- VPC, security groups, bastion host and IAM roles

Usage:
    cdk deploy --all        # Deploy everything
    cdk destroy --all       # Clean up everything
"""

import aws_cdk as cdk
from stacks.pipeline_stack import DdbToAossStack

app = cdk.App()

# Get configuration from context or use defaults
account = app.node.try_get_context("account") or None
region = app.node.try_get_context("region") or "ap-northeast-1"
alias = app.node.try_get_context("alias") or "ryu"
image_tag = app.node.try_get_context("image_tag") or "latest"

DdbToAossStack(
    app,
    "Ddb2AossStack",
    alias=alias,
    image_tag=image_tag,
    env=cdk.Environment(
        account=account,
        region=region
    ),
    description="DynamoDB stream to OpenSearch Serverless indexing pipeline"
)

app.synth()
