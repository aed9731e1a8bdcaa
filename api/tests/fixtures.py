import uuid
from datetime import datetime, timezone

from tallyra.schemas.catalog import CatalogItem
from tallyra.schemas.inventory import InventoryMovement, StockUpdate
from tallyra.schemas.sales import Transaction, TransactionRecord
from tallyra.schemas.session import ShopProfile


class FakeStore:
    def __init__(self, items: list[CatalogItem] | None = None, shop: ShopProfile | None = None) -> None:
        self.shop = shop
        self.items = {item.id: item for item in items or []}
        self.transactions: list[Transaction] = []
        self.movements: list[InventoryMovement] = []
        self.fail_insert = False
        self.fail_decrement = False
        self.lost_races = 0
        self.insert_attempts = 0

    def get_shop(self, shop_id: str) -> ShopProfile | None:
        if self.shop is not None and self.shop.id == shop_id:
            return self.shop
        return None

    def list_active_items(self, shop_id: str) -> list[CatalogItem]:
        return [item for item in self.items.values() if item.is_active]

    def get_item(self, item_id: str) -> CatalogItem | None:
        return self.items.get(item_id)

    def insert_transaction(self, record: TransactionRecord) -> Transaction:
        self.insert_attempts += 1
        if self.fail_insert:
            raise ConnectionError("database unavailable")
        transaction = Transaction(
            id=str(uuid.uuid4()),
            created_at=datetime.now(timezone.utc),
            **record.model_dump(),
        )
        self.transactions.append(transaction)
        return transaction

    def decrement_stock(self, item_id: str, by: int, expected_prior: int) -> StockUpdate | None:
        if self.fail_decrement:
            raise ConnectionError("database unavailable")
        item = self.items[item_id]
        if self.lost_races:
            # another till sold one unit in between
            self.lost_races -= 1
            self.items[item_id] = item.model_copy(
                update={"stock_quantity": max(0, item.stock_quantity - 1)}
            )
            return None
        if item.stock_quantity != expected_prior:
            return None
        new_quantity = max(0, expected_prior - by)
        self.items[item_id] = item.model_copy(update={"stock_quantity": new_quantity})
        return StockUpdate(item_id=item_id, previous_quantity=expected_prior, new_quantity=new_quantity)

    def record_inventory_movement(self, entry: InventoryMovement) -> None:
        self.movements.append(entry)
