"""
Request and response descriptors for the item handler.
"""

from http import HTTPStatus
from typing import Any

from aws_lambda_powertools.utilities.data_classes import APIGatewayProxyEvent
from pydantic import BaseModel, Field

from items_service import serialization

# Items are schema-free; only the key and the bookkeeping timestamps are interpreted.
Item = dict[str, Any]

CREATED_AT = "createdAt"
UPDATED_AT = "updatedAt"
ID_PATH_PARAMETER = "id"

CORS_HEADERS = {
    "Content-Type": "application/json",
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "Content-Type,X-Amz-Date,Authorization,X-Api-Key,X-Amz-Security-Token",
    "Access-Control-Allow-Methods": "OPTIONS,GET,POST,PUT,DELETE",
}


class ItemRequest(BaseModel):
    method: str | None = Field(default=None, description="HTTP verb, upper-cased")
    item_id: str | None = Field(default=None, description="Identifier from the request path")
    body: str | None = Field(default=None, description="Raw JSON body")
    resource: str | None = Field(default=None, description="Collection or single-item resource template")

    @classmethod
    def from_event(cls, event: APIGatewayProxyEvent) -> "ItemRequest":
        # Direct invocations may omit any of these keys, so read them leniently.
        path_params = event.get("pathParameters") or {}
        method = event.get("httpMethod")
        return cls(
            method=method.upper() if method else None,
            item_id=path_params.get(ID_PATH_PARAMETER) or None,
            body=event.decoded_body if event.body is not None else None,
            resource=event.get("resource"),
        )

    @property
    def targets_single_item(self) -> bool:
        """True when the request was routed to the single-item resource, e.g. /items/{id}."""
        return bool(self.resource) and self.resource.rstrip("/").endswith("}")


class ItemResponse(BaseModel):
    status_code: int = Field(default=HTTPStatus.OK)
    body: Any = None
    headers: dict[str, str] = Field(default_factory=lambda: dict(CORS_HEADERS))

    @classmethod
    def error(cls, status_code: int, message: str) -> "ItemResponse":
        return cls(status_code=status_code, body={"error": message})

    def to_proxy_result(self) -> dict[str, Any]:
        """Render as an API Gateway proxy integration result."""
        return {
            "statusCode": int(self.status_code),
            "headers": self.headers,
            "body": serialization.dumps(self.body),
        }
