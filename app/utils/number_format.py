"""Parsing helpers for numeric and date fields of JSON payloads."""
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Optional

from app.exceptions import BusinessLogicError


def parse_amount(value: Any, field: str, default: Optional[Decimal] = Decimal('0'), allow_negative: bool = False) -> Decimal:
    """
    Parse a numeric payload field to Decimal.

    Accepts ints, floats and numeric strings ("12.5"). Empty values return
    default (or raise if default is None).

    Raises:
        BusinessLogicError: value is not numeric, missing without default, or negative
    """
    if value is None or value == '':
        if default is None:
            raise BusinessLogicError(f'{field} is required')
        return default

    try:
        amount = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        raise BusinessLogicError(f'{field} must be a number')

    if not amount.is_finite():
        raise BusinessLogicError(f'{field} must be a number')
    if amount < 0 and not allow_negative:
        raise BusinessLogicError(f'{field} cannot be negative')
    return amount


def parse_date(value: Any, field: str) -> Optional[date]:
    """Parse an ISO date (YYYY-MM-DD, optionally with a time part)."""
    if value in (None, ''):
        return None
    if isinstance(value, date):
        return value
    try:
        return datetime.fromisoformat(str(value).replace('Z', '+00:00')).date()
    except ValueError:
        raise BusinessLogicError(f'{field} must be an ISO date')
