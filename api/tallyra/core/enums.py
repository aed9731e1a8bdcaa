from enum import Enum


class Role(str, Enum):
    OWNER = "owner"
    STAFF = "staff"


class PaymentMode(str, Enum):
    CASH = "CASH"
    UPI = "UPI"
    CREDIT = "CREDIT"


class MovementType(str, Enum):
    SALE = "SALE"
    RESTOCK = "RESTOCK"


class WorkflowState(str, Enum):
    ENTERING_AMOUNT = "ENTERING_AMOUNT"
    ITEM_CONFIRMED = "ITEM_CONFIRMED"
    DISCOUNT_REVIEW = "DISCOUNT_REVIEW"
    PAYMENT_MODE_SELECTION = "PAYMENT_MODE_SELECTION"
    PAYMENT_DETAIL_CAPTURE = "PAYMENT_DETAIL_CAPTURE"
    COMMITTED = "COMMITTED"
