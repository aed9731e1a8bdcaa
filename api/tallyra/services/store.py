from typing import Protocol

from tallyra.schemas.catalog import CatalogItem
from tallyra.schemas.inventory import InventoryMovement, StockUpdate
from tallyra.schemas.sales import Transaction, TransactionRecord


class TransactionStore(Protocol):
    def list_active_items(self, shop_id: str) -> list[CatalogItem]:
        ...

    def get_item(self, item_id: str) -> CatalogItem | None:
        ...

    def insert_transaction(self, record: TransactionRecord) -> Transaction:
        ...

    def decrement_stock(self, item_id: str, by: int, expected_prior: int) -> StockUpdate | None:
        """Lower stock iff it still equals expected_prior. None when it moved."""
        ...

    def record_inventory_movement(self, entry: InventoryMovement) -> None:
        ...
