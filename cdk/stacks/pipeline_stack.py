"""
DDB to AOSS Stack

This stack creates all AWS resources needed for the indexing pipeline:
- DynamoDB table with a NEW_IMAGE stream
- VPC, security groups and a bastion host
- OpenSearch Serverless collection with its data access, network and
  encryption policies and a VPC endpoint
- ECR repository for the Lambda container image
- Lambda functions (stream translator, collection client)
- IAM roles and a console user
- Event source mapping from the table stream to the translator
"""

import json

from aws_cdk import (
    Stack,
    Duration,
    RemovalPolicy,
    CfnOutput,
    aws_dynamodb as dynamodb,
    aws_ec2 as ec2,
    aws_ecr as ecr,
    aws_iam as iam,
    aws_lambda as lambda_,
    aws_opensearchserverless as opensearchserverless,
)
from constructs import Construct

TRANSLATOR_HANDLER = "stream_indexer.handler.lambda_handler"
SEARCH_HANDLER = "stream_indexer.search.lambda_handler"


class DdbToAossStack(Stack):
    """Change-data-capture link from a DynamoDB table to a search collection."""

    def __init__(
        self,
        scope: Construct,
        construct_id: str,
        alias: str,
        image_tag: str = "latest",
        **kwargs
    ) -> None:
        super().__init__(scope, construct_id, **kwargs)

        # ========================================
        # DYNAMODB TABLE
        # ========================================
        # Every change is published to the stream with the full new row

        self.table = dynamodb.Table(
            self, "Table",
            partition_key=dynamodb.Attribute(
                name="id",
                type=dynamodb.AttributeType.STRING
            ),
            stream=dynamodb.StreamViewType.NEW_IMAGE,
            billing_mode=dynamodb.BillingMode.PAY_PER_REQUEST,
            removal_policy=RemovalPolicy.DESTROY,
        )

        # ========================================
        # IAM ROLES FOR LAMBDA
        # ========================================

        self.translator_role = iam.Role(
            self, "DdbToAossFnRole",
            assumed_by=iam.ServicePrincipal("lambda.amazonaws.com"),
            managed_policies=[
                iam.ManagedPolicy.from_aws_managed_policy_name(
                    "service-role/AWSLambdaDynamoDBExecutionRole"
                ),
                iam.ManagedPolicy.from_aws_managed_policy_name(
                    "service-role/AWSLambdaVPCAccessExecutionRole"
                ),
            ],
        )

        self.client_role = iam.Role(
            self, "AossClientFnRole",
            assumed_by=iam.ServicePrincipal("lambda.amazonaws.com"),
            managed_policies=[
                iam.ManagedPolicy.from_aws_managed_policy_name(
                    "service-role/AWSLambdaVPCAccessExecutionRole"
                ),
            ],
        )

        # ========================================
        # NETWORK
        # ========================================

        self.vpc = ec2.Vpc(self, "Vpc")

        self.collection_sg = ec2.SecurityGroup(self, "Sg", vpc=self.vpc)
        self.function_sg = ec2.SecurityGroup(self, "FnSg", vpc=self.vpc)
        self.collection_sg.add_ingress_rule(
            ec2.Peer.security_group_id(self.function_sg.security_group_id),
            ec2.Port.all_tcp()
        )

        # Bastion for reaching the collection dashboards through the VPC
        ec2.BastionHostLinux(self, "BastionHost", vpc=self.vpc)

        # ========================================
        # OPENSEARCH SERVERLESS
        # ========================================

        self.user = iam.User(self, "User", user_name=alias)

        opensearchserverless.CfnAccessPolicy(
            self, "AccessPolicy",
            name=alias,
            type="data",
            policy=json.dumps([{
                "Description": "Allow access",
                "Rules": [
                    {
                        "ResourceType": "index",
                        "Resource": ["index/*/*"],
                        "Permission": ["aoss:*"],
                    },
                    {
                        "ResourceType": "collection",
                        "Resource": [f"collection/{alias}"],
                        "Permission": ["aoss:*"],
                    },
                ],
                "Principal": [
                    self.user.user_arn,
                    self.translator_role.role_arn,
                    self.client_role.role_arn,
                ],
            }]),
        )

        self.vpc_endpoint = opensearchserverless.CfnVpcEndpoint(
            self, "VpcEndpoint",
            name=alias,
            subnet_ids=[subnet.subnet_id for subnet in self.vpc.private_subnets],
            security_group_ids=[self.collection_sg.security_group_id],
            vpc_id=self.vpc.vpc_id,
        )

        # Collection and dashboards only reachable through the VPC endpoint
        network_policy = opensearchserverless.CfnSecurityPolicy(
            self, "NetworkPolicy",
            name=alias,
            type="network",
            policy=json.dumps([{
                "Rules": [
                    {"ResourceType": "collection", "Resource": [f"collection/{alias}"]},
                    {"ResourceType": "dashboard", "Resource": [f"collection/{alias}"]},
                ],
                "AllowFromPublic": False,
                "SourceVPCEs": [self.vpc_endpoint.attr_id],
            }]),
        )
        network_policy.add_dependency(self.vpc_endpoint)

        encryption_policy = opensearchserverless.CfnSecurityPolicy(
            self, "SecurityPolicy",
            name=alias,
            type="encryption",
            policy=json.dumps({
                "Rules": [
                    {"ResourceType": "collection", "Resource": [f"collection/{alias}"]},
                ],
                "AWSOwnedKey": True,
            }),
        )

        self.collection = opensearchserverless.CfnCollection(
            self, "Collection",
            name=alias,
            type="SEARCH",
            description="search collection",
        )
        # A collection cannot be created before a matching encryption policy
        self.collection.add_dependency(encryption_policy)

        # ========================================
        # ECR REPOSITORY
        # ========================================

        self.ecr_repo = ecr.Repository(
            self, "LambdaRepo",
            repository_name=f"ddb-to-aoss-{alias}",
            removal_policy=RemovalPolicy.DESTROY,
            empty_on_delete=True,
        )

        # ========================================
        # LAMBDA FUNCTIONS
        # ========================================

        # Note: both functions run the same container image with a different
        # handler. The image must be built and pushed before deploying.

        environment = {
            "AOSS_ENDPOINT": self.collection.attr_collection_endpoint,
        }

        # Translator - mirrors table changes into the index
        self.translator_lambda = lambda_.DockerImageFunction(
            self, "DdbToAossFn",
            code=lambda_.DockerImageCode.from_ecr(
                repository=self.ecr_repo,
                tag_or_digest=image_tag,
                cmd=[TRANSLATOR_HANDLER],
            ),
            role=self.translator_role,
            timeout=Duration.seconds(10),
            environment=environment,
            vpc=self.vpc,
            security_groups=[self.function_sg],
        )

        # Collection client - ad hoc searches from inside the VPC
        self.client_lambda = lambda_.DockerImageFunction(
            self, "AossClientFn",
            code=lambda_.DockerImageCode.from_ecr(
                repository=self.ecr_repo,
                tag_or_digest=image_tag,
                cmd=[SEARCH_HANDLER],
            ),
            role=self.client_role,
            timeout=Duration.seconds(10),
            environment=environment,
            vpc=self.vpc,
            security_groups=[self.function_sg],
        )

        # ========================================
        # STREAM TRIGGER
        # ========================================

        # One record per invocation, failed invocations are redelivered
        self.translator_lambda.add_event_source_mapping(
            "EventSourceMapping",
            event_source_arn=self.table.table_stream_arn,
            enabled=True,
            batch_size=1,
            starting_position=lambda_.StartingPosition.LATEST,
        )

        # ========================================
        # OUTPUTS
        # ========================================

        CfnOutput(self, "TableName",
            value=self.table.table_name,
            description="Source DynamoDB table"
        )

        CfnOutput(self, "CollectionEndpoint",
            value=self.collection.attr_collection_endpoint,
            description="OpenSearch Serverless collection endpoint"
        )

        CfnOutput(self, "ECRRepository",
            value=self.ecr_repo.repository_uri,
            description="ECR repository URI for pushing Docker images"
        )

        CfnOutput(self, "TranslatorLambdaArn",
            value=self.translator_lambda.function_arn,
            description="Stream translator Lambda function ARN"
        )

        CfnOutput(self, "ClientLambdaArn",
            value=self.client_lambda.function_arn,
            description="Collection client Lambda function ARN"
        )
