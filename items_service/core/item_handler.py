"""
Request handling for the items resource.

Translates a normalized request into conditional store operations and maps
every outcome, including failures, to a status code and JSON body.
"""

import uuid
from collections.abc import Callable
from datetime import UTC, datetime
from http import HTTPStatus
from typing import Any

from aws_lambda_powertools import Logger

from items_service.dal.interface import IItemDataAccess
from items_service.errors import (
    AlreadyExistsError,
    ConditionFailedError,
    ItemServiceError,
    MissingIdentifierError,
    NotFoundError,
    UnsupportedMethodError,
    ValidationError,
)
from items_service.models.item import CREATED_AT, UPDATED_AT, Item, ItemRequest, ItemResponse
from items_service.serialization import parse_item_body

logger = Logger()

LIST_FAILED_MESSAGE = "Failed to list items"


def _new_id() -> str:
    return str(uuid.uuid4())


def _utc_now() -> str:
    return datetime.now(UTC).isoformat()


class ItemHandler:
    """Stateless CRUD handler over an item store."""

    def __init__(
        self,
        data_access: IItemDataAccess,
        primary_key: str = "id",
        id_factory: Callable[[], str] = _new_id,
        clock: Callable[[], str] = _utc_now,
    ) -> None:
        self.data_access = data_access
        self.primary_key = primary_key
        self.id_factory = id_factory
        self.clock = clock

    def handle(self, request: ItemRequest) -> ItemResponse:
        """
        Dispatch a request and build its response.

        Args:
            request: Normalized request descriptor

        Returns:
            Response descriptor; errors never escape this method
        """
        try:
            body = self._dispatch(request)
        except ItemServiceError as e:
            if e.status_code >= HTTPStatus.INTERNAL_SERVER_ERROR:
                logger.exception("Item request failed", extra={"method": request.method, "item_id": request.item_id})
            else:
                logger.warning(
                    "Rejected item request",
                    extra={"method": request.method, "item_id": request.item_id, "error": e.message},
                )
            return ItemResponse.error(e.status_code, e.message)
        except Exception as e:
            logger.exception("Unexpected error handling item request", extra={"method": request.method})
            return ItemResponse.error(HTTPStatus.INTERNAL_SERVER_ERROR, str(e))

        return ItemResponse(status_code=HTTPStatus.OK, body=body)

    def _dispatch(self, request: ItemRequest) -> Any:
        method = request.method
        if method == "GET":
            if request.item_id:
                return self.get_item(request.item_id)
            if request.targets_single_item:
                raise MissingIdentifierError()
            return self.list_items()
        elif method == "POST":
            return self.create_item(parse_item_body(request.body))
        elif method == "PUT":
            item_id = self._require_id(request)
            return self.update_item(item_id, parse_item_body(request.body))
        elif method == "DELETE":
            return self.delete_item(self._require_id(request))
        raise UnsupportedMethodError(method)

    @staticmethod
    def _require_id(request: ItemRequest) -> str:
        if not request.item_id:
            raise MissingIdentifierError()
        return request.item_id

    def list_items(self) -> list[Item]:
        try:
            items = self.data_access.scan_items()
        except Exception as e:
            raise ItemServiceError(LIST_FAILED_MESSAGE) from e
        logger.info("Listed items", extra={"count": len(items)})
        return items

    def get_item(self, item_id: str) -> Item:
        item = self.data_access.get_item(item_id)
        if item is None:
            raise NotFoundError()
        logger.info("Item retrieved successfully", extra={"item_id": item_id})
        return item

    def create_item(self, item: Item) -> Item:
        key = item.get(self.primary_key)
        if not key:
            key = self.id_factory()
            item[self.primary_key] = key
        elif not isinstance(key, str):
            raise ValidationError(f"{self.primary_key} must be a string")

        item.pop(UPDATED_AT, None)
        item[CREATED_AT] = self.clock()

        try:
            self.data_access.put_item_if_absent(item)
        except ConditionFailedError as e:
            raise AlreadyExistsError(key) from e

        logger.info("Item created successfully", extra={"item_id": key})
        return item

    def update_item(self, item_id: str, item: Item) -> Item:
        # The path identifier always wins over a key in the body.
        item[self.primary_key] = item_id
        item.pop(CREATED_AT, None)
        item[UPDATED_AT] = self.clock()

        try:
            stored = self.data_access.put_item_if_present(item)
        except ConditionFailedError as e:
            raise NotFoundError() from e

        logger.info("Item updated successfully", extra={"item_id": item_id})
        return stored

    def delete_item(self, item_id: str) -> Item:
        try:
            prior = self.data_access.delete_item_if_present(item_id)
        except ConditionFailedError as e:
            raise NotFoundError() from e

        logger.info("Item deleted successfully", extra={"item_id": item_id})
        return prior
