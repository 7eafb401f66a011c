from functools import lru_cache

from items_service.config import ServiceSettings
from items_service.dal.dynamodb import DynamoDBItemDataAccess
from items_service.dal.interface import IItemDataAccess


@lru_cache(maxsize=1)
def dynamodb_item_access(settings: ServiceSettings) -> IItemDataAccess:
    """One DynamoDB client per process, created on first use and reused across invocations."""
    return DynamoDBItemDataAccess(
        table_name=settings.table_name,
        primary_key=settings.primary_key,
    )
