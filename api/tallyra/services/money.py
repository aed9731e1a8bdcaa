from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from tallyra.core.exceptions import InvalidAmount

CENT = Decimal("0.01")


def round2(value: Decimal) -> Decimal:
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def to_decimal(value) -> Decimal:
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        return Decimal(str(value))
    return Decimal(value)


def parse_amount(raw) -> Decimal:
    """Parse an operator-entered amount, rejecting anything not strictly positive."""
    try:
        amount = to_decimal(raw.strip() if isinstance(raw, str) else raw)
    except (InvalidOperation, TypeError, ValueError):
        raise InvalidAmount("invalid amount", {"raw": str(raw)})

    if not amount.is_finite() or amount <= 0:
        raise InvalidAmount("invalid amount", {"raw": str(raw)})
    return amount
