from fastapi import Depends, FastAPI, HTTPException, status
from fastapi.middleware.cors import CORSMiddleware

from tallyra.core.config import settings
from tallyra.core.enums import PaymentMode, WorkflowState
from tallyra.core.logging import get_logger, setup_logging
from tallyra.db.store import SqlTransactionStore
from tallyra.schemas.catalog import (
    CatalogItem,
    CatalogItemResponse,
    InferRequest,
    InferResponse,
    MatchedItem,
    MatchedItemResponse,
)
from tallyra.schemas.inventory import LowStockItem, RestockRequest
from tallyra.schemas.sales import CheckoutRequest, CheckoutResponse
from tallyra.schemas.session import OperatorSession
from tallyra.services.deps import get_current_session, get_store
from tallyra.services.discount import assess, requires_override
from tallyra.services.inference import infer, price_selected
from tallyra.services.inventory import restock
from tallyra.services.workflow import INSUFFICIENT_CASH, TransactionWorkflow

setup_logging(log_level=settings.log_level, is_debug=settings.debug)
logger = get_logger(__name__)

app = FastAPI(title="Tallyra API", version="0.1.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def find_item(catalog: list[CatalogItem], item_id: str) -> CatalogItem:
    for item in catalog:
        if item.id == item_id:
            return item
    raise HTTPException(status_code=404, detail="Item not found")


def matched_item_response(match: MatchedItem) -> MatchedItemResponse:
    return MatchedItemResponse(
        kind=match.kind,
        item_id=match.item_id,
        name=match.name,
        quantity=match.quantity,
        base_price=float(match.base_price),
    )


@app.get("/health")
def health():
    return {"status": "ok"}


@app.get("/catalog/items", response_model=list[CatalogItemResponse])
def catalog_items(
    store: SqlTransactionStore = Depends(get_store),
    session: OperatorSession = Depends(get_current_session),
):
    return [
        CatalogItemResponse(
            id=item.id,
            name=item.name,
            base_price=float(item.base_price),
            stock_quantity=item.stock_quantity,
            min_stock_alert=item.min_stock_alert,
            max_discount_percentage=float(item.max_discount_percentage),
            max_discount_fixed=float(item.max_discount_fixed),
        )
        for item in store.list_active_items(session.shop.id)
    ]


@app.post("/calculator/infer", response_model=InferResponse)
def infer_item(
    payload: InferRequest,
    store: SqlTransactionStore = Depends(get_store),
    session: OperatorSession = Depends(get_current_session),
):
    catalog = store.list_active_items(session.shop.id)

    if payload.selected_item_id:
        result = price_selected(payload.entered_amount, find_item(catalog, payload.selected_item_id))
    else:
        result = infer(payload.entered_amount, catalog)

    if result.item is None:
        raise HTTPException(status_code=404, detail="No matching item")

    assessment = assess(result.item, payload.entered_amount)
    return InferResponse(
        item=matched_item_response(result.item),
        discount_amount=float(assessment.amount),
        discount_percentage=float(assessment.percentage),
        within_policy=assessment.within_policy,
        requires_override=requires_override(assessment, session),
    )


@app.post("/sales/checkout", response_model=CheckoutResponse)
def checkout(
    payload: CheckoutRequest,
    store: SqlTransactionStore = Depends(get_store),
    session: OperatorSession = Depends(get_current_session),
):
    workflow = TransactionWorkflow(session, store)

    if payload.selected_item_id:
        workflow.select_item(find_item(workflow.catalog, payload.selected_item_id))

    if not workflow.confirm_amount(payload.entered_amount):
        code = 400 if workflow.error == "invalid amount" else 404
        raise HTTPException(status_code=code, detail=workflow.error)

    workflow.proceed()
    if workflow.state == WorkflowState.DISCOUNT_REVIEW:
        if not payload.override_approved:
            logger.info("checkout_needs_override", staff_id=session.staff_id)
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail=(
                    f"Discount of {workflow.draft.discount.percentage}% on "
                    f"{workflow.draft.matched_item.name} needs override approval"
                ),
            )
        workflow.approve_override()

    workflow.select_payment_mode(payload.payment_mode)
    if payload.payment_mode == PaymentMode.CASH:
        workflow.set_cash_received(payload.cash_received)
    if payload.payment_mode != PaymentMode.CREDIT:
        workflow.confirm_payment()

    if workflow.state != WorkflowState.COMMITTED:
        if workflow.error == INSUFFICIENT_CASH:
            raise HTTPException(status_code=400, detail=workflow.error)
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=workflow.error)

    transaction = workflow.outcome.transaction
    if workflow.error:
        raise HTTPException(
            status_code=500,
            detail=f"{workflow.error} (transaction {transaction.id})",
        )

    change = transaction.change_amount
    return CheckoutResponse(
        transaction_id=transaction.id,
        item_name=workflow.draft.matched_item.name,
        entered_amount=float(transaction.entered_amount),
        base_price=float(transaction.base_price),
        discount_amount=float(transaction.discount_amount),
        discount_percentage=float(transaction.discount_percentage),
        payment_mode=transaction.payment_mode,
        change_amount=float(change) if change is not None else None,
        is_discount_override=transaction.is_discount_override,
        is_credit_settled=transaction.is_credit_settled,
        low_stock=workflow.outcome.low_stock,
        currency=session.shop.currency,
    )


@app.get("/inventory/alerts/low-stock", response_model=list[LowStockItem])
def low_stock_alerts(
    store: SqlTransactionStore = Depends(get_store),
    session: OperatorSession = Depends(get_current_session),
):
    return [
        LowStockItem(
            item_id=item.id,
            name=item.name,
            base_price=float(item.base_price),
            stock_quantity=item.stock_quantity,
            min_stock_alert=item.min_stock_alert,
        )
        for item in store.low_stock_items(session.shop.id)
    ]


@app.post("/inventory/restock")
def restock_item(
    payload: RestockRequest,
    store: SqlTransactionStore = Depends(get_store),
    session: OperatorSession = Depends(get_current_session),
):
    update = restock(store, session, payload.item_id, payload.quantity, payload.reason)
    if update is None:
        raise HTTPException(status_code=404, detail="Item not found")
    return {"ok": True, "updated_stock": update.new_quantity}
