from decimal import Decimal

from tallyra.schemas.catalog import MatchedItem
from tallyra.schemas.sales import DiscountAssessment
from tallyra.schemas.session import OperatorSession
from tallyra.services.money import round2

ZERO = Decimal("0")


def assess(item: MatchedItem, entered_amount: Decimal) -> DiscountAssessment:
    """Within policy only when both the percentage and the fixed cap hold."""
    amount = max(ZERO, item.base_price - entered_amount)
    if item.base_price > 0:
        percentage = round2(amount / item.base_price * 100)
    else:
        percentage = ZERO

    within_policy = (
        percentage <= item.max_discount_percentage
        and amount <= item.max_discount_fixed
    )
    return DiscountAssessment(amount=amount, percentage=percentage, within_policy=within_policy)


def requires_override(assessment: DiscountAssessment, session: OperatorSession) -> bool:
    return not assessment.within_policy and not session.is_owner
