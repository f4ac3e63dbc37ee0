"""Helpers shared by the ledger services."""

from decimal import ROUND_HALF_UP, Decimal
from math import ceil

from finledger.core.exceptions import ValidationError

CENTS = Decimal("0.01")
# Largest value a NUMERIC(12, 2) column holds
MAX_MONEY = Decimal("9999999999.99")


def to_money(value) -> Decimal:
    """Coerce a DB/JSON number to a Decimal with two places."""
    if value is None:
        return Decimal("0.00")
    if not isinstance(value, Decimal):
        value = Decimal(str(value))
    return value.quantize(CENTS, rounding=ROUND_HALF_UP)


def parse_money(value) -> Decimal | None:
    """Round a client-supplied amount to cents, rejecting what the columns cannot store."""
    if value is None:
        return None
    if not isinstance(value, Decimal):
        value = Decimal(str(value))
    if not value.is_finite() or abs(value) > MAX_MONEY:
        raise ValidationError("Amount is out of range")
    return to_money(value)


def check_pagination(page: int, page_size: int) -> int:
    """Validate page/page_size and return the row offset."""
    if page < 1:
        raise ValidationError("Page must be greater than 0")
    if page_size < 1:
        raise ValidationError("Page size must be greater than 0")
    return (page - 1) * page_size


def build_page(items: list, total: int, page: int, page_size: int) -> dict:
    return {
        "items": items,
        "total": total,
        "page": page,
        "page_size": page_size,
        "total_pages": ceil(total / page_size) if total else 0,
    }
