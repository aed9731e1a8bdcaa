from tallyra.core.config import settings
from tallyra.core.enums import MovementType, PaymentMode
from tallyra.core.exceptions import (
    CommitFailure,
    InvalidTransition,
    PartialCommitFailure,
    StockConflict,
)
from tallyra.core.logging import get_logger
from tallyra.schemas.catalog import RealItem, VirtualItem
from tallyra.schemas.inventory import InventoryMovement, StockUpdate
from tallyra.schemas.sales import CommitOutcome, TransactionDraft, TransactionRecord
from tallyra.schemas.session import OperatorSession
from tallyra.services.store import TransactionStore

logger = get_logger(__name__)


def build_record(draft: TransactionDraft, session: OperatorSession) -> TransactionRecord:
    if draft.payment_mode is None:
        raise InvalidTransition("Payment mode not selected")

    match = draft.matched_item
    cash_received = draft.cash_received if draft.payment_mode == PaymentMode.CASH else None

    return TransactionRecord(
        shop_id=session.shop.id,
        staff_id=session.staff_id,
        entered_amount=draft.entered_amount,
        inferred_item_id=match.item_id,
        base_price=match.base_price,
        discount_amount=draft.discount.amount,
        discount_percentage=draft.discount.percentage,
        payment_mode=draft.payment_mode,
        cash_received=cash_received,
        change_amount=draft.change_amount,
        is_discount_override=not draft.discount.within_policy,
        is_credit_settled=draft.payment_mode != PaymentMode.CREDIT,
        notes=None if isinstance(match, RealItem) else match.name,
    )


def decrement_stock(
    store: TransactionStore,
    item_id: str,
    quantity: int,
    expected_prior: int,
    attempts: int,
) -> StockUpdate:
    """Compare-and-set decrement, re-reading the item after each lost race."""
    for attempt in range(attempts):
        update = store.decrement_stock(item_id, quantity, expected_prior)
        if update is not None:
            return update

        logger.warning("stock_changed_concurrently", item_id=item_id, attempt=attempt + 1)
        current = store.get_item(item_id)
        if current is None:
            raise StockConflict("Item no longer exists", {"item_id": item_id})
        expected_prior = current.stock_quantity

    raise StockConflict("Stock kept changing, giving up", {"item_id": item_id, "attempts": attempts})


def commit(
    draft: TransactionDraft,
    session: OperatorSession,
    store: TransactionStore,
    attempts: int | None = None,
) -> CommitOutcome:
    record = build_record(draft, session)

    try:
        transaction = store.insert_transaction(record)
    except Exception as exc:
        logger.error("transaction_insert_failed", shop_id=record.shop_id, error=str(exc))
        raise CommitFailure("Transaction failed, please try again") from exc

    logger.info(
        "transaction_committed",
        transaction_id=transaction.id,
        amount=str(transaction.entered_amount),
        payment_mode=transaction.payment_mode.value,
    )

    match = draft.matched_item
    if not isinstance(match, (RealItem, VirtualItem)):
        return CommitOutcome(transaction=transaction)

    item = match.item
    try:
        update = decrement_stock(
            store,
            item.id,
            match.quantity,
            item.stock_quantity,
            attempts or settings.stock_update_retries,
        )
        store.record_inventory_movement(
            InventoryMovement(
                shop_id=session.shop.id,
                item_id=item.id,
                transaction_id=transaction.id,
                movement_type=MovementType.SALE,
                quantity_change=update.new_quantity - update.previous_quantity,
                previous_quantity=update.previous_quantity,
                new_quantity=update.new_quantity,
            )
        )
    except Exception as exc:
        logger.error(
            "stock_update_failed",
            transaction_id=transaction.id,
            item_id=item.id,
            error=str(exc),
        )
        raise PartialCommitFailure(
            "Sale recorded but stock was not updated",
            transaction,
            {"item_id": item.id, "quantity": match.quantity},
        ) from exc

    return CommitOutcome(
        transaction=transaction,
        new_stock_quantity=update.new_quantity,
        low_stock=item.model_copy(update={"stock_quantity": update.new_quantity}).is_low_stock,
    )
