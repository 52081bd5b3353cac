"""Wire codec for MNB values.

MNB sends rates with a comma as the decimal separator ("209,44") and
dates as YYYY-MM-DD. Rates are kept as Decimal, never float.
"""

from __future__ import annotations

import re
from datetime import date, datetime
from decimal import Decimal, InvalidOperation

from .exceptions import ConfigError, ParseError

DATE_FORMAT = "%Y-%m-%d"
_DATE_RE = re.compile(r"\d{4}-\d{2}-\d{2}", re.ASCII)
# plain ASCII decimal; Decimal() alone also takes "1_000" and non-ASCII digits
_DECIMAL_RE = re.compile(r"[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?", re.ASCII)


def parse_decimal(text: str) -> Decimal:
    """Parse a comma-decimal wire literal.

    Only the first comma is rewritten; "1" (no separator) is valid.

    Raises:
        ParseError: when the literal is not a finite decimal number
    """
    literal = (text or "").strip().replace(",", ".", 1)
    if not _DECIMAL_RE.fullmatch(literal):
        raise ParseError("decimal", text)
    try:
        value = Decimal(literal)
    except (InvalidOperation, ValueError) as exc:
        raise ParseError("decimal", text) from exc
    if not value.is_finite():
        raise ParseError("decimal", text)
    return value


def format_decimal(value: Decimal) -> str:
    """Render a Decimal in fixed-point notation, keeping its scale."""
    return format(value, "f")


def parse_date(text: str) -> date:
    """Parse a YYYY-MM-DD literal.

    Raises:
        ParseError: carrying the offending literal
    """
    literal = (text or "").strip()
    if not _DATE_RE.fullmatch(literal):
        raise ParseError("date", text)
    try:
        return datetime.strptime(literal, DATE_FORMAT).date()
    except ValueError as exc:
        raise ParseError("date", text) from exc


def format_date(value: date) -> str:
    # strftime does not zero-pad years below 1000 on every platform
    return f"{value.year:04d}-{value.month:02d}-{value.day:02d}"


def coerce_date(value: date | datetime | str) -> date:
    """Normalize a caller-supplied range bound to a date.

    Raises:
        ConfigError: for strings that are not YYYY-MM-DD
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return parse_date(str(value))
    except ParseError as exc:
        raise ConfigError("date", exc.literal) from exc
