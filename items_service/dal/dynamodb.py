"""
DynamoDB data access for items.
"""

from typing import Any

import boto3
from aws_lambda_powertools import Logger, Tracer
from boto3.dynamodb.conditions import Attr
from botocore.exceptions import BotoCoreError, ClientError

from items_service.dal.interface import IItemDataAccess
from items_service.errors import ConditionFailedError, StoreUnavailableError
from items_service.models.item import CREATED_AT, UPDATED_AT, Item

logger = Logger()
tracer = Tracer()

CONDITIONAL_CHECK_FAILED = "ConditionalCheckFailedException"


def _is_conditional_check_failed(exc: Exception) -> bool:
    if not isinstance(exc, ClientError):
        return False
    return exc.response.get("Error", {}).get("Code") == CONDITIONAL_CHECK_FAILED


def _error_message(exc: Exception) -> str:
    if isinstance(exc, ClientError):
        return exc.response.get("Error", {}).get("Message") or str(exc)
    return str(exc)


def _store_error(action: str, exc: Exception) -> StoreUnavailableError:
    return StoreUnavailableError(f"Failed to {action}: {_error_message(exc)}")


class DynamoDBItemDataAccess(IItemDataAccess):
    """Items stored one per key in a DynamoDB table."""

    def __init__(self, table_name: str, primary_key: str = "id") -> None:
        self.table_name = table_name
        self.primary_key = primary_key
        self.dynamodb = boto3.resource("dynamodb")
        self.table = self.dynamodb.Table(table_name)

    def _key(self, key: str) -> dict[str, str]:
        return {self.primary_key: key}

    @tracer.capture_method
    def get_item(self, key: str) -> Item | None:
        try:
            response = self.table.get_item(Key=self._key(key), ConsistentRead=True)
        except (ClientError, BotoCoreError) as e:
            raise _store_error("get item", e) from e

        item: Item | None = response.get("Item")
        if item:
            logger.debug("Retrieved item from DynamoDB", extra={"key": key})
        else:
            logger.debug("Item not found in DynamoDB", extra={"key": key})
        return item

    @tracer.capture_method
    def scan_items(self) -> list[Item]:
        """
        Read the whole table.

        Follows LastEvaluatedKey until the scan is exhausted, so callers always
        get every item.
        """
        kwargs: dict[str, Any] = {}
        items: list[Item] = []
        try:
            while True:
                response = self.table.scan(**kwargs)
                items.extend(response.get("Items", []))
                last_key = response.get("LastEvaluatedKey")
                if not last_key:
                    break
                kwargs["ExclusiveStartKey"] = last_key
        except (ClientError, BotoCoreError) as e:
            raise _store_error("scan items", e) from e

        logger.debug("Scanned DynamoDB", extra={"count": len(items)})
        return items

    @tracer.capture_method
    def put_item_if_absent(self, item: Item) -> None:
        key = item[self.primary_key]
        try:
            self.table.put_item(
                Item=item,
                ConditionExpression=Attr(self.primary_key).not_exists(),
            )
        except ClientError as e:
            if _is_conditional_check_failed(e):
                raise ConditionFailedError(key) from e
            raise _store_error("put item", e) from e
        except BotoCoreError as e:
            raise _store_error("put item", e) from e
        logger.debug("Stored item in DynamoDB", extra={"key": key})

    @tracer.capture_method
    def put_item_if_present(self, item: Item) -> Item:
        """
        Replace the fields of an existing item.

        The new fields are written with one conditional UpdateItem so createdAt
        survives. Attributes the new item no longer has are then removed, guarded
        by the updatedAt value just written: if another update landed in between,
        the removal is skipped and the later writer's field set stands.
        """
        key = item[self.primary_key]
        fields = {name: value for name, value in item.items() if name not in (self.primary_key, CREATED_AT)}

        kwargs: dict[str, Any] = {
            "Key": self._key(key),
            "ConditionExpression": Attr(self.primary_key).exists(),
            "ReturnValues": "ALL_NEW",
        }
        if fields:
            names = {f"#field{i}": name for i, name in enumerate(fields)}
            values = {f":field{i}": value for i, value in enumerate(fields.values())}
            kwargs["UpdateExpression"] = "SET " + ", ".join(f"#field{i} = :field{i}" for i in range(len(fields)))
            kwargs["ExpressionAttributeNames"] = names
            kwargs["ExpressionAttributeValues"] = values

        try:
            response = self.table.update_item(**kwargs)
        except ClientError as e:
            if _is_conditional_check_failed(e):
                raise ConditionFailedError(key) from e
            raise _store_error("update item", e) from e
        except BotoCoreError as e:
            raise _store_error("update item", e) from e

        stored: Item = response.get("Attributes", {})
        stale = [name for name in stored if name not in item and name not in (self.primary_key, CREATED_AT)]
        if stale:
            self._remove_attributes(key, stale, item.get(UPDATED_AT))
            stored = {name: value for name, value in stored.items() if name not in stale}

        logger.debug("Updated item in DynamoDB", extra={"key": key, "removed": stale})
        return stored

    def _remove_attributes(self, key: str, names: list[str], written_updated_at: Any) -> None:
        condition = Attr(self.primary_key).exists()
        if written_updated_at is not None:
            condition = condition & Attr(UPDATED_AT).eq(written_updated_at)

        try:
            self.table.update_item(
                Key=self._key(key),
                UpdateExpression="REMOVE " + ", ".join(f"#stale{i}" for i in range(len(names))),
                ExpressionAttributeNames={f"#stale{i}": name for i, name in enumerate(names)},
                ConditionExpression=condition,
            )
        except ClientError as e:
            if _is_conditional_check_failed(e):
                logger.debug("Item changed before stale attributes were removed", extra={"key": key})
                return
            raise self._partial_update_error(key, names, e) from e
        except BotoCoreError as e:
            raise self._partial_update_error(key, names, e) from e

    def _partial_update_error(self, key: str, names: list[str], exc: Exception) -> StoreUnavailableError:
        # The SET already committed; only the removal of dropped fields is missing.
        logger.error(
            "Item updated but stale attributes were not removed",
            extra={"key": key, "stale_attributes": names, "error": str(exc)},
        )
        return StoreUnavailableError(
            f"Item {key} was updated but stale attributes were not removed ({', '.join(names)}): {_error_message(exc)}"
        )

    @tracer.capture_method
    def delete_item_if_present(self, key: str) -> Item:
        try:
            response = self.table.delete_item(
                Key=self._key(key),
                ConditionExpression=Attr(self.primary_key).exists(),
                ReturnValues="ALL_OLD",
            )
        except ClientError as e:
            if _is_conditional_check_failed(e):
                raise ConditionFailedError(key) from e
            raise _store_error("delete item", e) from e
        except BotoCoreError as e:
            raise _store_error("delete item", e) from e

        logger.debug("Deleted item from DynamoDB", extra={"key": key})
        attributes: Item = response.get("Attributes", {})
        return attributes
