from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

from tallyra.core.enums import PaymentMode
from tallyra.schemas.catalog import MatchedItem


class DiscountAssessment(BaseModel):
    model_config = ConfigDict(frozen=True)

    amount: Decimal = Field(ge=0)
    percentage: Decimal = Field(ge=0)
    within_policy: bool


class TransactionDraft(BaseModel):
    entered_amount: Decimal
    matched_item: MatchedItem
    discount: DiscountAssessment
    payment_mode: PaymentMode | None = None
    cash_received: Decimal | None = None
    override_approved: bool = False

    @property
    def change_amount(self) -> Decimal | None:
        if self.payment_mode != PaymentMode.CASH or self.cash_received is None:
            return None
        return max(Decimal("0"), self.cash_received - self.entered_amount)


class TransactionRecord(BaseModel):
    shop_id: str
    staff_id: str | None = None
    entered_amount: Decimal
    inferred_item_id: str | None = None
    base_price: Decimal
    discount_amount: Decimal
    discount_percentage: Decimal
    payment_mode: PaymentMode
    cash_received: Decimal | None = None
    change_amount: Decimal | None = None
    is_discount_override: bool = False
    is_credit_settled: bool = True
    notes: str | None = None


class Transaction(TransactionRecord):
    model_config = ConfigDict(frozen=True)

    id: str
    created_at: datetime


class CommitOutcome(BaseModel):
    transaction: Transaction
    new_stock_quantity: int | None = None
    low_stock: bool = False


class CheckoutRequest(BaseModel):
    entered_amount: str = Field(min_length=1, max_length=32)
    selected_item_id: str | None = None
    payment_mode: PaymentMode
    cash_received: Decimal | None = Field(default=None, ge=0)
    override_approved: bool = False


class CheckoutResponse(BaseModel):
    transaction_id: str
    item_name: str
    entered_amount: float
    base_price: float
    discount_amount: float
    discount_percentage: float
    payment_mode: PaymentMode
    change_amount: float | None
    is_discount_override: bool
    is_credit_settled: bool
    low_stock: bool
    currency: str
