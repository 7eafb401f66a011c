from typing import Any

from aws_cdk import CfnOutput, RemovalPolicy, Stack
from aws_cdk import aws_dynamodb as dynamodb
from constructs import Construct

from items_infra import constants


class DatabaseStack(Stack):
    """
    DynamoDB table holding the items.

    On-demand billing, AWS-managed encryption at rest and point-in-time
    recovery. The table is retained when the prod stack is deleted.
    """

    def __init__(
        self,
        scope: Construct,
        id: str,
        stage: str,
        primary_key: str = constants.PRIMARY_KEY,
        **kwargs: Any,
    ) -> None:
        super().__init__(scope, id, **kwargs)

        self.stage = stage
        self.primary_key = primary_key

        self.items_table = self._create_table()

        CfnOutput(
            self,
            "ItemsTableName",
            value=self.items_table.table_name,
            description="DynamoDB table name",
        )

        CfnOutput(
            self,
            "ItemsTableArn",
            value=self.items_table.table_arn,
            description="DynamoDB table ARN",
        )

        CfnOutput(
            self,
            "ItemsTableEncryption",
            value="AWS_MANAGED (SSE)",
            description="Encryption at rest of the DynamoDB table",
        )

        CfnOutput(
            self,
            "ItemsTableGSI",
            value=f"{constants.CATEGORY_INDEX_NAME} (partition key: {constants.CATEGORY_ATTRIBUTE}, "
            f"sort key: {constants.CREATED_AT_ATTRIBUTE})",
            description="Global secondary index of the DynamoDB table",
        )

    def _create_table(self) -> dynamodb.Table:
        """Create the items table and its category index."""
        table = dynamodb.Table(
            self,
            "ItemsTable",
            partition_key=dynamodb.Attribute(
                name=self.primary_key,
                type=dynamodb.AttributeType.STRING,
            ),
            billing_mode=dynamodb.BillingMode.PAY_PER_REQUEST,
            encryption=dynamodb.TableEncryption.AWS_MANAGED,
            point_in_time_recovery=True,
            removal_policy=RemovalPolicy.RETAIN if self.stage == "prod" else RemovalPolicy.DESTROY,
        )

        table.add_global_secondary_index(
            index_name=constants.CATEGORY_INDEX_NAME,
            partition_key=dynamodb.Attribute(
                name=constants.CATEGORY_ATTRIBUTE,
                type=dynamodb.AttributeType.STRING,
            ),
            sort_key=dynamodb.Attribute(
                name=constants.CREATED_AT_ATTRIBUTE,
                type=dynamodb.AttributeType.STRING,
            ),
        )

        return table
