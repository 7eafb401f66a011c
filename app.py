import os

from aws_cdk import App, Aspects, Environment, Tags
from cdk_nag import AwsSolutionsChecks

from constants import ENV_CONFIG, PREFIX
from items_infra.api_stack import ApiStack
from items_infra.database_stack import DatabaseStack

app = App()

stage = os.getenv("ENV", "dev")
config = ENV_CONFIG.get(stage)

# Ensure config exists for the specified environment
if config is None:
    raise ValueError(f"Environment '{stage}' is not defined in constants.py")

environment = Environment(account=config["account"], region=config["region"])

database_stack = DatabaseStack(
    app,
    f"{PREFIX}-database-{stage}",
    stage=stage,
    description="DynamoDB table for the items service",
    env=environment,
)

ApiStack(
    app,
    f"{PREFIX}-api-{stage}",
    stage=stage,
    items_table=database_stack.items_table,
    description="API Gateway and Lambda function for the items service",
    env=environment,
)

# Add tags to all resources
Tags.of(app).add("Environment", stage)
Tags.of(app).add("Project", PREFIX)

# Add cdk-nag checks
Aspects.of(app).add(AwsSolutionsChecks())

app.synth()
