"""
Runtime configuration read from the Lambda environment.
"""

import os

from pydantic import BaseModel, ConfigDict, Field

TABLE_NAME_ENV_VAR = "TABLE_NAME"
PRIMARY_KEY_ENV_VAR = "PRIMARY_KEY"
DEFAULT_PRIMARY_KEY = "id"


class ServiceSettings(BaseModel):
    model_config = ConfigDict(frozen=True)

    table_name: str = Field(..., min_length=1, description="DynamoDB table holding the items")
    primary_key: str = Field(default=DEFAULT_PRIMARY_KEY, min_length=1, description="Name of the key attribute")

    @classmethod
    def from_env(cls) -> "ServiceSettings":
        """
        Build settings from environment variables.

        Raises:
            KeyError: If TABLE_NAME is not set
        """
        return cls(
            table_name=os.environ[TABLE_NAME_ENV_VAR],
            primary_key=os.environ.get(PRIMARY_KEY_ENV_VAR) or DEFAULT_PRIMARY_KEY,
        )
