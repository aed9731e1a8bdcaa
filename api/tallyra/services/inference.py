from decimal import Decimal
from typing import Sequence

from tallyra.core.logging import get_logger
from tallyra.schemas.catalog import (
    CatalogItem,
    CustomItem,
    InferenceResult,
    MatchedItem,
    RealItem,
    VirtualItem,
)

logger = get_logger(__name__)

BULK_QUANTITIES = (1, 2, 3, 4, 5, 6, 7, 8, 9, 10, 12, 15, 20, 24, 25, 30, 50, 100)
ROUND_AMOUNTS = frozenset(Decimal(v) for v in (10, 20, 50, 100, 200, 500, 1000))
ROUND_AMOUNT_TOLERANCE = Decimal("0.10")

ZERO = Decimal("0")
HUNDRED = Decimal("100")


def _as_match(item: CatalogItem, quantity: int) -> MatchedItem:
    if quantity == 1:
        return RealItem(item=item)
    return VirtualItem(item=item, quantity=quantity)


def max_discount_for(item: CatalogItem, quantity: int = 1) -> Decimal:
    # percentage and fixed caps are alternative ceilings here, the larger wins
    total = item.base_price * quantity
    return max(
        total * item.max_discount_percentage / HUNDRED,
        item.max_discount_fixed * quantity,
    )


def _exact_single(amount: Decimal, catalog: Sequence[CatalogItem]) -> InferenceResult | None:
    for item in catalog:
        if item.base_price == amount:
            return InferenceResult(item=RealItem(item=item))
    return None


def _exact_bulk(amount: Decimal, catalog: Sequence[CatalogItem]) -> InferenceResult | None:
    for item in catalog:
        for quantity in BULK_QUANTITIES:
            if item.base_price * quantity == amount:
                return InferenceResult(item=_as_match(item, quantity))
    return None


def _discounted(amount: Decimal, catalog: Sequence[CatalogItem]) -> InferenceResult | None:
    best: tuple[Decimal, CatalogItem, int] | None = None

    for item in catalog:
        for quantity in BULK_QUANTITIES:
            total = item.base_price * quantity
            if not total - max_discount_for(item, quantity) <= amount < total:
                continue
            discount = total - amount
            if best is None or discount < best[0]:
                best = (discount, item, quantity)

    if best is None:
        return None
    discount, item, quantity = best
    return InferenceResult(item=_as_match(item, quantity), discount_amount=discount)


def _closest(amount: Decimal, catalog: Sequence[CatalogItem]) -> CatalogItem:
    best = catalog[0]
    for item in catalog[1:]:
        if abs(item.base_price - amount) < abs(best.base_price - amount):
            best = item
    return best


def _round_amount_nudge(amount: Decimal, catalog: Sequence[CatalogItem]) -> CatalogItem | None:
    if amount not in ROUND_AMOUNTS:
        return None
    tolerance = amount * ROUND_AMOUNT_TOLERANCE
    for item in catalog:
        if abs(item.base_price - amount) <= tolerance:
            return item
    return None


def infer(entered_amount: Decimal, catalog: Sequence[CatalogItem]) -> InferenceResult:
    if not catalog:
        return InferenceResult()

    for rule, matcher in (
        ("exact", _exact_single),
        ("bulk", _exact_bulk),
        ("discounted", _discounted),
    ):
        result = matcher(entered_amount, catalog)
        if result is not None:
            logger.debug(
                "item_inferred",
                rule=rule,
                amount=str(entered_amount),
                item=result.item.name,
                discount=str(result.discount_amount),
            )
            return result

    item = _round_amount_nudge(entered_amount, catalog)
    rule = "round_amount"
    if item is None:
        item = _closest(entered_amount, catalog)
        rule = "closest"

    logger.debug("item_inferred", rule=rule, amount=str(entered_amount), item=item.name)
    return InferenceResult(
        item=RealItem(item=item),
        discount_amount=max(ZERO, item.base_price - entered_amount),
    )


def price_selected(entered_amount: Decimal, selected: CatalogItem | CustomItem) -> InferenceResult:
    match = selected if isinstance(selected, CustomItem) else RealItem(item=selected)
    return InferenceResult(
        item=match,
        discount_amount=max(ZERO, match.base_price - entered_amount),
    )
