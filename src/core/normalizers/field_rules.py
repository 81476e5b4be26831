"""
Scalar field rules for the bronze -> silver normalizer.

Every rule degrades instead of failing: unparseable input becomes None,
and unmapped enumerated codes become the caller's fallback label.
"""

from datetime import date, datetime, timezone
from decimal import Decimal, InvalidOperation

# Recency assigned to rows whose timestamp does not parse, so they never win
# against a parseable one.
EPOCH_SENTINEL = datetime(1900, 1, 1)

YYYYMMDD_LENGTH = 8

# Integer widths of the silver columns (INTEGER / BIGINT)
INT32_BITS = 32
INT64_BITS = 64


def fits_signed(number: int, bits: int = INT32_BITS) -> bool:
    """Whether number fits a signed integer column of the given width."""
    bound = 2 ** (bits - 1)
    return -bound <= number < bound


def clean_string(value: str | None) -> str | None:
    """Trim surrounding whitespace; None stays None, "" stays ""."""
    if value is None:
        return None
    return value.strip()


def is_blank(value: str | None) -> bool:
    return value is None or value.strip() == ""


def lookup_code(value: str | None, table: dict[str, str], fallback: str) -> str:
    """
    Resolve an enumerated code against a fixed table.

    Args:
        value: Raw code
        table: Upper-cased code -> canonical value
        fallback: Returned for blank or unmapped codes

    Returns:
        Canonical value, never None
    """
    if is_blank(value):
        return fallback
    return table.get(value.strip().upper(), fallback)


def to_int(value: str | None, bits: int = INT32_BITS) -> int | None:
    """
    Coerce text to an integer, truncating decimals toward zero.

    Args:
        value: Raw text
        bits: Width of the target signed integer column

    Returns:
        The integer, or None for blank, non-numeric, non-finite or
        out-of-range input
    """
    if is_blank(value):
        return None
    try:
        number = Decimal(value.strip())
    except InvalidOperation:
        return None
    if not number.is_finite():
        return None
    number = int(number)
    if not fits_signed(number, bits):
        return None
    return number


def parse_timestamp(value: str | None) -> datetime | None:
    """
    Parse ISO date or date-time text; None when unparseable.

    Offset-bearing values are converted to UTC and returned naive, so all
    parsed timestamps compare on the same clock.
    """
    if is_blank(value):
        return None
    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def parse_date(value: str | None) -> date | None:
    """Parse the date part of ISO date or date-time text."""
    parsed = parse_timestamp(value)
    return parsed.date() if parsed else None


def parse_yyyymmdd(value: str | None) -> date | None:
    """
    Parse an integer-encoded YYYYMMDD date.

    The value must coerce to an integer with exactly eight digits; the
    sentinel 0 and any other length map to None before date parsing.
    Out-of-range months or days also map to None.
    """
    number = to_int(value)
    if number is None or number == 0:
        return None
    digits = str(number)
    if len(digits) != YYYYMMDD_LENGTH:
        return None
    try:
        return datetime.strptime(digits, "%Y%m%d").date()
    except ValueError:
        return None
