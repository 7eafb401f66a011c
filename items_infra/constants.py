"""
CDK constants for the items service infrastructure.
"""

# Service configuration
SERVICE_NAME = "ItemsService"
POWERTOOLS_SERVICE_NAME = "POWERTOOLS_SERVICE_NAME"
POWERTOOLS_LOG_LEVEL = "LOG_LEVEL"
TABLE_NAME_ENV_VAR = "TABLE_NAME"
PRIMARY_KEY_ENV_VAR = "PRIMARY_KEY"
PRIMARY_KEY = "id"

# Build paths
SERVICE_BUILD_FOLDER = ".build/service"

# Lambda configuration
LAMBDA_HANDLER = "items_service.handlers.items.handler"
LAMBDA_MEMORY_SIZE = 256  # MB
LAMBDA_TIMEOUT = 30  # seconds

# AWS-published Powertools layer (ships pydantic and the X-Ray SDK)
POWERTOOLS_LAYER_ACCOUNT = "017000801446"
POWERTOOLS_LAYER_NAME = "AWSLambdaPowertoolsPythonV3-python313-x86_64"
POWERTOOLS_LAYER_VERSION = 7

# IAM
LAMBDA_BASIC_EXECUTION_ROLE = "AWSLambdaBasicExecutionRole"

# API Gateway
API_STAGE_NAME = "prod"
ITEMS_RESOURCE = "items"
ITEM_ID_PATH_PARAMETER = "{id}"

# DynamoDB
CATEGORY_INDEX_NAME = "category-index"
CATEGORY_ATTRIBUTE = "category"
CREATED_AT_ATTRIBUTE = "createdAt"
