"""
Central coercion policy for loosely typed request fields.

Malformed input is degraded rather than rejected: numbers that cannot be
parsed become zero (or None where a stored value may be absent) and dates
that cannot be parsed become None. Numeric strings are read like a
JavaScript parseFloat: the longest leading number counts ("100 USD" is 100).
"""
import re
from datetime import date, datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import Any, Optional

from dateutil import parser as date_parser

ZERO = Decimal("0")

NUMBER_PREFIX = re.compile(r"[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?")


def to_decimal_or_none(value: Any) -> Optional[Decimal]:
    """Parse a JSON scalar into a finite Decimal, or None."""
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, Decimal):
        number = value
    elif isinstance(value, (int, float)):
        number = Decimal(str(value))
    elif isinstance(value, str):
        match = NUMBER_PREFIX.match(value.lstrip())
        if not match:
            return None
        try:
            number = Decimal(match.group(0))
        except InvalidOperation:
            return None
    else:
        return None

    if not number.is_finite():
        return None
    return number


def to_decimal(value: Any) -> Decimal:
    number = to_decimal_or_none(value)
    return ZERO if number is None else number


def to_text(value: Any) -> Optional[str]:
    """Store free-text fields as strings whatever JSON type they arrived as."""
    if value is None or isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def to_iso_date(value: Any) -> Optional[str]:
    """Normalize any parseable calendar date to YYYY-MM-DD, else None."""
    if value is None or isinstance(value, bool) or value == "":
        return None

    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()

    # Numbers are epoch milliseconds, as JavaScript clients send them
    if isinstance(value, (int, float)):
        try:
            return datetime.fromtimestamp(value / 1000, tz=timezone.utc).date().isoformat()
        except (OverflowError, OSError, ValueError):
            return None

    if isinstance(value, str):
        try:
            return date_parser.parse(value.strip()).date().isoformat()
        except (ValueError, OverflowError):
            return None

    return None
