from tallyra.core.enums import MovementType
from tallyra.core.logging import get_logger
from tallyra.db.store import SqlTransactionStore
from tallyra.schemas.inventory import InventoryMovement, StockUpdate
from tallyra.schemas.session import OperatorSession

logger = get_logger(__name__)


def restock(
    store: SqlTransactionStore,
    session: OperatorSession,
    item_id: str,
    quantity: int,
    reason: str | None = None,
) -> StockUpdate | None:
    update = store.increase_stock(session.shop.id, item_id, quantity)
    if update is None:
        return None

    store.record_inventory_movement(
        InventoryMovement(
            shop_id=session.shop.id,
            item_id=item_id,
            movement_type=MovementType.RESTOCK,
            quantity_change=quantity,
            previous_quantity=update.previous_quantity,
            new_quantity=update.new_quantity,
            notes=reason or "Stock increase",
        )
    )
    logger.info("stock_increased", item_id=item_id, quantity=quantity, new_quantity=update.new_quantity)
    return update
