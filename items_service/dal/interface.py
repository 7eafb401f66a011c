from abc import ABC, abstractmethod

from items_service.models.item import Item


class IItemDataAccess(ABC):
    """
    Key-value store for items.

    Mutations are single atomic conditional operations on key presence; no
    implementation may emulate them with a read followed by a write.
    """

    @abstractmethod
    def get_item(self, key: str) -> Item | None:
        pass

    @abstractmethod
    def scan_items(self) -> list[Item]:
        pass

    @abstractmethod
    def put_item_if_absent(self, item: Item) -> None:
        """Store ``item``; raise ConditionFailedError if its key is already taken."""

    @abstractmethod
    def put_item_if_present(self, item: Item) -> Item:
        """
        Replace the stored fields of an existing item, keeping its createdAt.

        Returns the item as stored. Raises ConditionFailedError if the key is absent.
        """

    @abstractmethod
    def delete_item_if_present(self, key: str) -> Item:
        """Remove the item and return its prior fields; raise ConditionFailedError if absent."""
