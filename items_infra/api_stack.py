"""
API stack.

A REST API in front of a single Lambda function that serves every item route,
with read/write access to the items table.
"""

from typing import Any

from aws_cdk import CfnOutput, Duration, RemovalPolicy, Stack
from aws_cdk import aws_apigateway as apigateway
from aws_cdk import aws_dynamodb as dynamodb
from aws_cdk import aws_iam as iam
from aws_cdk import aws_lambda as lambda_
from aws_cdk import aws_logs as logs
from cdk_nag import NagSuppressions
from constructs import Construct

from items_infra import constants


class ApiStack(Stack):
    """
    API Gateway + Lambda for the items resource.

    Routes:
    - GET/POST /items
    - GET/PUT/DELETE /items/{id}
    """

    def __init__(
        self,
        scope: Construct,
        id: str,
        stage: str,
        items_table: dynamodb.ITable,
        primary_key: str = constants.PRIMARY_KEY,
        code: lambda_.Code | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(scope, id, **kwargs)

        self.stage = stage
        self.items_table = items_table
        self.primary_key = primary_key

        self.powertools_layer = lambda_.LayerVersion.from_layer_version_arn(
            self,
            "PowertoolsLayer",
            f"arn:aws:lambda:{self.region}:{constants.POWERTOOLS_LAYER_ACCOUNT}:layer:"
            f"{constants.POWERTOOLS_LAYER_NAME}:{constants.POWERTOOLS_LAYER_VERSION}",
        )

        self.lambda_role = self._create_lambda_role()
        self.items_function = self._create_lambda_function(
            code or lambda_.Code.from_asset(constants.SERVICE_BUILD_FOLDER)
        )

        # Get/scan/put/update/delete on the table only
        self.items_table.grant_read_write_data(self.items_function)

        self.api = self._create_api()

        CfnOutput(
            self,
            "ApiUrl",
            value=self.api.url,
            description="The URL of the API Gateway",
        )

        CfnOutput(
            self,
            "LambdaFunctionArn",
            value=self.items_function.function_arn,
            description="Items Lambda function ARN",
        )

        CfnOutput(
            self,
            "ApiGatewayId",
            value=self.api.rest_api_id,
            description="The ID of the API Gateway",
        )

        CfnOutput(
            self,
            "ApiGatewayStageName",
            value=constants.API_STAGE_NAME,
            description="The stage name of the API Gateway",
        )

        self._add_nag_suppressions()

    def _create_lambda_role(self) -> iam.Role:
        """Create IAM role for the Lambda function."""
        role = iam.Role(
            self,
            "LambdaRole",
            assumed_by=iam.ServicePrincipal("lambda.amazonaws.com"),
            managed_policies=[
                iam.ManagedPolicy.from_aws_managed_policy_name(f"service-role/{constants.LAMBDA_BASIC_EXECUTION_ROLE}")
            ],
        )

        # Add X-Ray tracing permissions
        role.add_to_policy(
            iam.PolicyStatement(
                actions=[
                    "xray:PutTraceSegments",
                    "xray:PutTelemetryRecords",
                ],
                resources=["*"],
            )
        )

        return role

    def _create_lambda_function(self, code: lambda_.Code) -> lambda_.Function:
        log_group = logs.LogGroup(
            self,
            "ItemsFunctionLogGroup",
            retention=logs.RetentionDays.ONE_WEEK if self.stage == "dev" else logs.RetentionDays.ONE_MONTH,
            removal_policy=RemovalPolicy.DESTROY,
        )

        return lambda_.Function(
            self,
            "ItemsFunction",
            runtime=lambda_.Runtime.PYTHON_3_13,
            architecture=lambda_.Architecture.X86_64,
            handler=constants.LAMBDA_HANDLER,
            code=code,
            timeout=Duration.seconds(constants.LAMBDA_TIMEOUT),
            memory_size=constants.LAMBDA_MEMORY_SIZE,
            layers=[self.powertools_layer],
            role=self.lambda_role,
            log_group=log_group,
            environment={
                constants.TABLE_NAME_ENV_VAR: self.items_table.table_name,
                constants.PRIMARY_KEY_ENV_VAR: self.primary_key,
                constants.POWERTOOLS_SERVICE_NAME: constants.SERVICE_NAME,
                constants.POWERTOOLS_LOG_LEVEL: "DEBUG" if self.stage == "dev" else "INFO",
                "STAGE": self.stage,
            },
            tracing=lambda_.Tracing.ACTIVE,
            logging_format=lambda_.LoggingFormat.JSON,
            description="Handles CRUD operations for items",
        )

    def _create_api(self) -> apigateway.RestApi:
        api = apigateway.RestApi(
            self,
            "ItemsApi",
            rest_api_name="Items Service",
            description="This service handles CRUD operations for items",
            cloud_watch_role=True,
            deploy_options=apigateway.StageOptions(
                stage_name=constants.API_STAGE_NAME,
                logging_level=apigateway.MethodLoggingLevel.INFO,
                data_trace_enabled=True,
                tracing_enabled=True,
            ),
            default_cors_preflight_options=apigateway.CorsOptions(
                allow_origins=apigateway.Cors.ALL_ORIGINS,
                allow_methods=apigateway.Cors.ALL_METHODS,
            ),
        )

        integration = apigateway.LambdaIntegration(self.items_function)

        items = api.root.add_resource(constants.ITEMS_RESOURCE)
        items.add_method("GET", integration)
        items.add_method("POST", integration)

        single_item = items.add_resource(constants.ITEM_ID_PATH_PARAMETER)
        single_item.add_method("GET", integration)
        single_item.add_method("PUT", integration)
        single_item.add_method("DELETE", integration)

        return api

    def _add_nag_suppressions(self) -> None:
        """Add cdk-nag suppressions for expected security findings."""
        NagSuppressions.add_resource_suppressions(
            self.lambda_role,
            suppressions=[
                {
                    "id": "AwsSolutions-IAM4",
                    "reason": "Using AWS managed policy for Lambda basic execution role.",
                },
                {
                    "id": "AwsSolutions-IAM5",
                    "reason": "X-Ray tracing requires wildcard permissions.",
                },
            ],
            apply_to_children=True,
        )

        NagSuppressions.add_resource_suppressions(
            self.items_function,
            suppressions=[
                {
                    "id": "AwsSolutions-L1",
                    "reason": "Using Python 3.13 which is the latest supported runtime.",
                },
            ],
        )

        NagSuppressions.add_resource_suppressions(
            self.api,
            suppressions=[
                {
                    "id": "AwsSolutions-IAM4",
                    "reason": "API Gateway CloudWatch role uses the AWS managed push-to-logs policy.",
                },
                {
                    "id": "AwsSolutions-APIG1",
                    "reason": "Execution logging is enabled on the stage; access logs are not required.",
                },
                {
                    "id": "AwsSolutions-APIG2",
                    "reason": "Items are schema-free; the Lambda validates request bodies.",
                },
                {
                    "id": "AwsSolutions-APIG3",
                    "reason": "No WAF in front of the items API.",
                },
                {
                    "id": "AwsSolutions-APIG4",
                    "reason": "The items API is intentionally unauthenticated.",
                },
                {
                    "id": "AwsSolutions-COG4",
                    "reason": "The items API is intentionally unauthenticated.",
                },
            ],
            apply_to_children=True,
        )
