"""
Text Coercion Helpers

The bronze table stores every column as text. These helpers convert that text
into Python types the way a SQL TRY_CAST would: a value that cannot be
converted becomes None instead of raising.

Key Concepts:
- Never raise: bad input degrades to None
- Strict formats: "12_000", "1e3" or non-ASCII digits are not integers,
  "2024/01/05" is not a date
- INT range: values outside a 32-bit signed integer are rejected
"""

import re
from datetime import date, datetime
from typing import Any, Optional

INT32_MIN = -2**31
INT32_MAX = 2**31 - 1

_INTEGER_PATTERN = re.compile(r'^[+-]?[0-9]+$')

# A bare year, read as January 1 of that year
_YEAR_PATTERN = re.compile(r'^[0-9]{4}$')


def clean_text(value: Any) -> Optional[str]:
    """
    Trim surrounding whitespace, keeping None as None.

    Examples:
        >>> clean_text("  Up  ")
        'Up'
        >>> clean_text(None) is None
        True
    """
    if value is None:
        return None
    return str(value).strip()


def parse_int(value: Any) -> Optional[int]:
    """
    Parse an integer from text.

    Surrounding whitespace and a leading sign are accepted. Anything else
    (decimals, underscores, exponents, empty text) yields None, as does a
    value that does not fit in a 32-bit signed integer.

    Args:
        value: Raw value (usually a string from the bronze table)

    Returns:
        Parsed integer or None

    Examples:
        >>> parse_int(" 42 ")
        42
        >>> parse_int("4.2") is None
        True
    """
    if value is None:
        return None

    if isinstance(value, bool):
        return None

    if isinstance(value, int):
        number = value
    else:
        text = str(value).strip()
        if not _INTEGER_PATTERN.match(text):
            return None
        number = int(text)

    if number < INT32_MIN or number > INT32_MAX:
        return None
    return number


def parse_int_dropping_decimal_zero(value: Any) -> Optional[int]:
    """
    Remove every literal ".0" substring, then parse as an integer.

    The CSV export writes integer columns as floats ("123456.0"). The
    replacement is applied everywhere in the string, not only at the end.

    Examples:
        >>> parse_int_dropping_decimal_zero("123456.0")
        123456
        >>> parse_int_dropping_decimal_zero("abc") is None
        True
    """
    if value is None:
        return None
    return parse_int(str(value).replace('.0', ''))


def parse_date(value: Any) -> Optional[date]:
    """
    Parse an ISO calendar date (YYYY-MM-DD).

    Args:
        value: Raw value; date objects are passed through

    Returns:
        date or None if the value is missing or not a valid date
    """
    if value is None:
        return None

    if isinstance(value, datetime):
        return value.date()

    if isinstance(value, date):
        return value

    text = str(value).strip()
    # strptime accepts "2024-1-5"; the export always zero-pads
    if len(text) != 10 or not text.isascii():
        return None

    try:
        return datetime.strptime(text, '%Y-%m-%d').date()
    except ValueError:
        return None


def parse_release_date(value: Any) -> Optional[date]:
    """
    Parse a release date, which the export writes at day or year precision.

    A bare four-digit year becomes January 1 of that year; anything else goes
    through parse_date.

    Examples:
        >>> parse_release_date("2019")
        datetime.date(2019, 1, 1)
        >>> parse_release_date("2019-06-30")
        datetime.date(2019, 6, 30)
    """
    if isinstance(value, str):
        text = value.strip()
        if _YEAR_PATTERN.match(text):
            year = int(text)
            # date() rejects year 0
            return date(year, 1, 1) if year >= 1 else None
    return parse_date(value)
