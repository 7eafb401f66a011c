"""
Items Lambda handler.

Serves GET/POST /items and GET/PUT/DELETE /items/{id} behind an API Gateway
REST proxy integration.
"""

from functools import lru_cache
from http import HTTPStatus
from typing import Any

from aws_lambda_powertools import Logger, Tracer
from aws_lambda_powertools.utilities.data_classes import APIGatewayProxyEvent, event_source
from aws_lambda_powertools.utilities.typing import LambdaContext

from items_service.config import ServiceSettings
from items_service.core.item_handler import ItemHandler
from items_service.dal.container import dynamodb_item_access
from items_service.models.item import ItemRequest, ItemResponse

logger = Logger()
tracer = Tracer()


@lru_cache(maxsize=1)
def get_item_handler() -> ItemHandler:
    settings = ServiceSettings.from_env()
    return ItemHandler(
        data_access=dynamodb_item_access(settings),
        primary_key=settings.primary_key,
    )


@logger.inject_lambda_context
@tracer.capture_lambda_handler(capture_response=False)
@event_source(data_class=APIGatewayProxyEvent)
def handler(event: APIGatewayProxyEvent, context: LambdaContext) -> dict[str, Any]:
    """
    Lambda handler for item CRUD requests.

    Args:
        event: API Gateway proxy event
        context: Lambda context

    Returns:
        API Gateway proxy result with statusCode, headers and body
    """
    request = ItemRequest.from_event(event)
    logger.info(
        "Processing item request",
        extra={"method": request.method, "resource": request.resource, "item_id": request.item_id},
    )

    try:
        item_handler = get_item_handler()
    except Exception as e:
        logger.exception("Failed to initialise item handler")
        return ItemResponse.error(HTTPStatus.INTERNAL_SERVER_ERROR, str(e)).to_proxy_result()

    response = item_handler.handle(request)

    logger.info("Item request completed", extra={"status_code": response.status_code})
    return response.to_proxy_result()
