import copy
import threading

from items_service.dal.interface import IItemDataAccess
from items_service.errors import ConditionFailedError
from items_service.models.item import CREATED_AT, Item


class ItemDataAccessInMemory(IItemDataAccess):
    def __init__(self, primary_key: str = "id"):
        self.primary_key = primary_key
        self._items: dict[str, Item] = {}
        self._lock = threading.Lock()

    def get_item(self, key: str) -> Item | None:
        with self._lock:
            item = self._items.get(key)
            return copy.deepcopy(item) if item is not None else None

    def scan_items(self) -> list[Item]:
        with self._lock:
            return [copy.deepcopy(item) for item in self._items.values()]

    def put_item_if_absent(self, item: Item):
        key = item[self.primary_key]
        with self._lock:
            if key in self._items:
                raise ConditionFailedError(key)
            self._items[key] = copy.deepcopy(item)

    def put_item_if_present(self, item: Item) -> Item:
        key = item[self.primary_key]
        with self._lock:
            existing = self._items.get(key)
            if existing is None:
                raise ConditionFailedError(key)
            stored = copy.deepcopy(item)
            if CREATED_AT in existing:
                stored[CREATED_AT] = existing[CREATED_AT]
            self._items[key] = stored
            return copy.deepcopy(stored)

    def delete_item_if_present(self, key: str) -> Item:
        with self._lock:
            if key not in self._items:
                raise ConditionFailedError(key)
            return self._items.pop(key)
