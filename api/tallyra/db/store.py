import uuid
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any

from sqlalchemy import DateTime, Numeric, bindparam, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from tallyra.schemas.catalog import CatalogItem
from tallyra.schemas.inventory import InventoryMovement, StockUpdate
from tallyra.schemas.session import ShopProfile
from tallyra.schemas.sales import Transaction, TransactionRecord

ITEM_COLUMNS = """
  id,
  name,
  base_price,
  stock_quantity,
  min_stock_alert,
  max_discount_percentage,
  max_discount_fixed,
  is_active
"""

INSERT_TRANSACTION = text(
    """
    INSERT INTO transactions (
      id,
      shop_id,
      staff_id,
      entered_amount,
      inferred_item_id,
      base_price,
      discount_amount,
      discount_percentage,
      payment_mode,
      cash_received,
      change_amount,
      is_discount_override,
      is_credit_settled,
      notes,
      created_at
    )
    VALUES (
      :id,
      :shop_id,
      :staff_id,
      :entered_amount,
      :inferred_item_id,
      :base_price,
      :discount_amount,
      :discount_percentage,
      :payment_mode,
      :cash_received,
      :change_amount,
      :is_discount_override,
      :is_credit_settled,
      :notes,
      :created_at
    )
    """
).bindparams(
    bindparam("entered_amount", type_=Numeric(12, 2)),
    bindparam("base_price", type_=Numeric(12, 2)),
    bindparam("discount_amount", type_=Numeric(12, 2)),
    bindparam("discount_percentage", type_=Numeric(5, 2)),
    bindparam("cash_received", type_=Numeric(12, 2)),
    bindparam("change_amount", type_=Numeric(12, 2)),
    bindparam("created_at", type_=DateTime(timezone=True)),
)


def _decimal(value: Any) -> Decimal:
    return value if isinstance(value, Decimal) else Decimal(str(value))


def _item_from_row(row) -> CatalogItem:
    return CatalogItem(
        id=row["id"],
        name=row["name"],
        base_price=_decimal(row["base_price"]),
        stock_quantity=int(row["stock_quantity"]),
        min_stock_alert=int(row["min_stock_alert"]),
        max_discount_percentage=_decimal(row["max_discount_percentage"]),
        max_discount_fixed=_decimal(row["max_discount_fixed"]),
        is_active=bool(row["is_active"]),
    )


class SqlTransactionStore:
    """TransactionStore over a SQLAlchemy session. Every write commits on its own."""

    def __init__(self, db: Session) -> None:
        self.db = db

    def get_shop(self, shop_id: str) -> ShopProfile | None:
        row = self.db.execute(
            text(
                """
                SELECT id, name, currency, upi_id, upi_qr_url
                FROM shops
                WHERE id = :shop_id
                """
            ),
            {"shop_id": shop_id},
        ).mappings().first()

        return ShopProfile(**row) if row else None

    def list_active_items(self, shop_id: str) -> list[CatalogItem]:
        rows = self.db.execute(
            text(
                f"""
                SELECT {ITEM_COLUMNS}
                FROM items
                WHERE shop_id = :shop_id
                  AND is_active = TRUE
                ORDER BY created_at ASC, name ASC
                """
            ),
            {"shop_id": shop_id},
        ).mappings().all()

        return [_item_from_row(row) for row in rows]

    def get_item(self, item_id: str) -> CatalogItem | None:
        row = self.db.execute(
            text(f"SELECT {ITEM_COLUMNS} FROM items WHERE id = :item_id"),
            {"item_id": item_id},
        ).mappings().first()

        return _item_from_row(row) if row else None

    def low_stock_items(self, shop_id: str) -> list[CatalogItem]:
        rows = self.db.execute(
            text(
                f"""
                SELECT {ITEM_COLUMNS}
                FROM items
                WHERE shop_id = :shop_id
                  AND is_active = TRUE
                  AND stock_quantity <= min_stock_alert
                ORDER BY stock_quantity ASC, name ASC
                """
            ),
            {"shop_id": shop_id},
        ).mappings().all()

        return [_item_from_row(row) for row in rows]

    def insert_transaction(self, record: TransactionRecord) -> Transaction:
        transaction = Transaction(
            id=str(uuid.uuid4()),
            created_at=datetime.now(timezone.utc),
            **record.model_dump(),
        )
        params = transaction.model_dump()
        params["payment_mode"] = transaction.payment_mode.value

        try:
            self.db.execute(INSERT_TRANSACTION, params)
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            raise

        return transaction

    def decrement_stock(self, item_id: str, by: int, expected_prior: int) -> StockUpdate | None:
        new_quantity = max(0, expected_prior - by)

        try:
            result = self.db.execute(
                text(
                    """
                    UPDATE items
                    SET stock_quantity = :new_quantity,
                        updated_at = CURRENT_TIMESTAMP
                    WHERE id = :item_id
                      AND stock_quantity = :expected_prior
                    """
                ),
                {"new_quantity": new_quantity, "item_id": item_id, "expected_prior": expected_prior},
            )
            if result.rowcount != 1:
                self.db.rollback()
                return None
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            raise

        return StockUpdate(item_id=item_id, previous_quantity=expected_prior, new_quantity=new_quantity)

    def record_inventory_movement(self, entry: InventoryMovement) -> None:
        try:
            self.db.execute(
                text(
                    """
                    INSERT INTO inventory_movements (
                      id,
                      shop_id,
                      item_id,
                      transaction_id,
                      movement_type,
                      quantity_change,
                      previous_quantity,
                      new_quantity,
                      notes
                    )
                    VALUES (
                      :id,
                      :shop_id,
                      :item_id,
                      :transaction_id,
                      :movement_type,
                      :quantity_change,
                      :previous_quantity,
                      :new_quantity,
                      :notes
                    )
                    """
                ),
                {
                    "id": str(uuid.uuid4()),
                    **entry.model_dump(),
                    "movement_type": entry.movement_type.value,
                },
            )
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            raise

    def increase_stock(self, shop_id: str, item_id: str, by: int) -> StockUpdate | None:
        try:
            result = self.db.execute(
                text(
                    """
                    UPDATE items
                    SET stock_quantity = stock_quantity + :by,
                        updated_at = CURRENT_TIMESTAMP
                    WHERE id = :item_id
                      AND shop_id = :shop_id
                    """
                ),
                {"by": by, "item_id": item_id, "shop_id": shop_id},
            )
            if result.rowcount != 1:
                self.db.rollback()
                return None
            new_quantity = self.db.execute(
                text("SELECT stock_quantity FROM items WHERE id = :item_id"),
                {"item_id": item_id},
            ).scalar_one()
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            raise

        return StockUpdate(item_id=item_id, previous_quantity=new_quantity - by, new_quantity=new_quantity)
