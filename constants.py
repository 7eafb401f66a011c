import os

# =============================================================================
# PROJECT CONFIGURATION
# =============================================================================

# Environment-specific AWS account configuration
ENV_CONFIG = {
    "dev": {
        "account": os.getenv("CDK_DEFAULT_ACCOUNT"),
        "region": os.getenv("CDK_DEFAULT_REGION", "us-west-2"),
    },
    "prod": {
        "account": os.getenv("CDK_DEFAULT_ACCOUNT"),
        "region": os.getenv("CDK_DEFAULT_REGION", "us-west-2"),
    },
}

# Project prefix used for resource naming (keep short, lowercase, alphanumeric)
PREFIX = "items"

PROJECT_ROOT = os.path.dirname(os.path.abspath(__file__))
