from __future__ import annotations

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP


MONEY_PLACES = Decimal("0.01")

# Characters the delimited record format cannot carry inside a text field.
FORBIDDEN_TEXT_CHARS = ('"', "\n", "\r")


class ValidationError(ValueError):
    """Constraint violated; the operation is aborted with no state change."""


class NotFoundError(LookupError):
    """Referenced record id is absent from its store."""


class AuthenticationError(Exception):
    """Login rejected (unknown user, wrong password, or inactive account)."""


def to_money(value, field: str = "amount") -> Decimal:
    """
    Coerce int/float/str/Decimal to a two-place Decimal.

    Floats go through str() so 9.99 stays 9.99 instead of its binary expansion.
    """
    if isinstance(value, bool):
        raise ValidationError(f"{field} must be a number")
    if isinstance(value, float):
        value = str(value)
    try:
        amount = Decimal(value)
    except (InvalidOperation, TypeError, ValueError):
        raise ValidationError(f"{field} must be a number")
    if not amount.is_finite():
        raise ValidationError(f"{field} must be a finite number")
    try:
        return amount.quantize(MONEY_PLACES, rounding=ROUND_HALF_UP)
    except InvalidOperation:
        # more digits than the decimal context can hold
        raise ValidationError(f"{field} is out of range")


def require_int(value, field: str, *, minimum: int | None = None) -> int:
    # bool is an int subclass; reject it explicitly
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(f"{field} must be an integer")
    if minimum is not None and value < minimum:
        raise ValidationError(f"{field} must be >= {minimum}")
    return value


def require_text(value, field: str) -> str:
    """Non-empty, stripped text that the record format can store."""
    if not isinstance(value, str):
        raise ValidationError(f"{field} must be text")
    text = value.strip()
    if not text:
        raise ValidationError(f"{field} cannot be empty")
    for ch in FORBIDDEN_TEXT_CHARS:
        if ch in text:
            raise ValidationError(f"{field} cannot contain {ch!r}")
    return text


def enforce_rules_product(*, cost_price: Decimal, sell_price: Decimal, stock: int, min_stock_level: int) -> None:
    if cost_price < 0:
        raise ValidationError("cost_price must be >= 0")
    if sell_price < cost_price:
        raise ValidationError("sell_price must be >= cost_price")
    require_int(stock, "stock", minimum=0)
    require_int(min_stock_level, "min_stock_level", minimum=0)
