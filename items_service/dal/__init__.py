"""
Data access layer for service.
"""

from items_service.dal.dynamodb import DynamoDBItemDataAccess
from items_service.dal.in_memory import ItemDataAccessInMemory
from items_service.dal.interface import IItemDataAccess

__all__ = ["DynamoDBItemDataAccess", "IItemDataAccess", "ItemDataAccessInMemory"]
