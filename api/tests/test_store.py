from decimal import Decimal

from sqlalchemy import text

from tallyra.core.enums import MovementType, PaymentMode
from tallyra.db.store import SqlTransactionStore
from tallyra.schemas.catalog import RealItem
from tallyra.schemas.inventory import InventoryMovement
from tallyra.schemas.sales import TransactionDraft, TransactionRecord
from tallyra.services.commit import commit
from tallyra.services.discount import assess


def test_get_shop(db):
    shop = SqlTransactionStore(db).get_shop("shop-1")

    assert shop.name == "Corner Chai"
    assert shop.upi_id == "cornerchai@upi"
    assert SqlTransactionStore(db).get_shop("missing") is None


def test_list_active_items_skips_inactive(db, add_item):
    add_item("tea", "Tea", "20", max_pct="5", max_fixed="1.50")
    add_item("coffee", "Coffee", "35.50", active=False)

    items = SqlTransactionStore(db).list_active_items("shop-1")

    assert [item.id for item in items] == ["tea"]
    assert items[0].base_price == Decimal("20")
    assert items[0].max_discount_percentage == Decimal("5")
    assert items[0].max_discount_fixed == Decimal("1.5")


def test_insert_transaction_round_trips(db, add_item):
    add_item("tea", "Tea", "20")
    store = SqlTransactionStore(db)

    transaction = store.insert_transaction(
        TransactionRecord(
            shop_id="shop-1",
            staff_id="staff-1",
            entered_amount=Decimal("18"),
            inferred_item_id="tea",
            base_price=Decimal("20"),
            discount_amount=Decimal("2"),
            discount_percentage=Decimal("10.00"),
            payment_mode=PaymentMode.CASH,
            cash_received=Decimal("20"),
            change_amount=Decimal("2"),
            is_discount_override=True,
        )
    )

    row = db.execute(
        text("SELECT * FROM transactions WHERE id = :id"), {"id": transaction.id}
    ).mappings().one()
    assert row["payment_mode"] == "CASH"
    assert Decimal(str(row["entered_amount"])) == Decimal("18")
    assert Decimal(str(row["change_amount"])) == Decimal("2")
    assert bool(row["is_discount_override"])
    assert bool(row["is_credit_settled"])


def test_decrement_stock_is_conditional(db, add_item):
    add_item("tea", "Tea", "20", stock=10)
    store = SqlTransactionStore(db)

    assert store.decrement_stock("tea", 1, expected_prior=9) is None
    assert store.get_item("tea").stock_quantity == 10

    update = store.decrement_stock("tea", 3, expected_prior=10)
    assert update.previous_quantity == 10
    assert update.new_quantity == 7
    assert store.get_item("tea").stock_quantity == 7


def test_decrement_stock_floors_at_zero(db, add_item):
    add_item("tea", "Tea", "20", stock=2)
    store = SqlTransactionStore(db)

    update = store.decrement_stock("tea", 5, expected_prior=2)

    assert update.new_quantity == 0
    assert store.get_item("tea").stock_quantity == 0


def test_record_inventory_movement(db, add_item):
    add_item("tea", "Tea", "20")
    store = SqlTransactionStore(db)

    store.record_inventory_movement(
        InventoryMovement(
            shop_id="shop-1",
            item_id="tea",
            movement_type=MovementType.RESTOCK,
            quantity_change=5,
            previous_quantity=10,
            new_quantity=15,
            notes="delivery",
        )
    )

    row = db.execute(text("SELECT * FROM inventory_movements")).mappings().one()
    assert row["movement_type"] == "RESTOCK"
    assert row["new_quantity"] == 15
    assert row["transaction_id"] is None


def test_increase_stock(db, add_item):
    add_item("tea", "Tea", "20", stock=3)
    store = SqlTransactionStore(db)

    update = store.increase_stock("shop-1", "tea", 4)

    assert (update.previous_quantity, update.new_quantity) == (3, 7)
    assert store.get_item("tea").stock_quantity == 7


def test_increase_stock_is_scoped_to_shop(db, add_item):
    add_item("tea", "Tea", "20", stock=3)
    store = SqlTransactionStore(db)

    assert store.increase_stock("other-shop", "tea", 4) is None
    assert store.increase_stock("shop-1", "missing", 4) is None
    assert store.get_item("tea").stock_quantity == 3


def test_low_stock_items(db, add_item):
    add_item("tea", "Tea", "20", stock=2, min_alert=3)
    add_item("milk", "Milk", "30", stock=3, min_alert=3)
    add_item("rusk", "Rusk", "15", stock=8, min_alert=3)
    add_item("old", "Old stock", "5", stock=0, min_alert=3, active=False)

    items = SqlTransactionStore(db).low_stock_items("shop-1")

    assert [item.id for item in items] == ["tea", "milk"]


def test_commit_against_database(db, add_item, staff_session):
    add_item("tea", "Tea", "20", stock=10, min_alert=2)
    store = SqlTransactionStore(db)
    item = store.get_item("tea")
    match = RealItem(item=item)
    draft = TransactionDraft(
        entered_amount=Decimal("20"),
        matched_item=match,
        discount=assess(match, Decimal("20")),
        payment_mode=PaymentMode.UPI,
    )

    outcome = commit(draft, staff_session, store)

    assert outcome.new_stock_quantity == 9
    assert store.get_item("tea").stock_quantity == 9
    movement = db.execute(text("SELECT * FROM inventory_movements")).mappings().one()
    assert movement["transaction_id"] == outcome.transaction.id
    assert movement["quantity_change"] == -1
