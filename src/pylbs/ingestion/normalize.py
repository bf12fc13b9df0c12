"""Normalization helpers for dataset fields.

Each helper parses one CSV field and raises :class:`RowParseError` naming
the row and field when the text is not acceptable.
"""

from __future__ import annotations

import math

from pylbs.exceptions import RowParseError


def parse_uint(line: int, field: str, text: str, maximum: int) -> int:
    """Parse an unsigned decimal integer no larger than *maximum*."""
    value = text.strip()
    if not value.isascii() or not value.isdigit():
        raise RowParseError(line, field, text)
    result = int(value)
    if result > maximum:
        raise RowParseError(line, field, text)
    return result


def parse_int(line: int, field: str, text: str, maximum: int) -> int:
    """Parse a signed decimal integer within ``[-maximum - 1, maximum]``."""
    value = text.strip()
    digits = value[1:] if value[:1] in ("-", "+") else value
    if not digits.isascii() or not digits.isdigit():
        raise RowParseError(line, field, text)
    result = int(value)
    if not -maximum - 1 <= result <= maximum:
        raise RowParseError(line, field, text)
    return result


def parse_finite_float(line: int, field: str, text: str, *, non_negative: bool = False) -> float:
    try:
        result = float(text)
    except ValueError:
        raise RowParseError(line, field, text) from None
    if not math.isfinite(result):
        raise RowParseError(line, field, text)
    if non_negative and result < 0:
        raise RowParseError(line, field, text)
    return result


def normalize_radio_field(line: int, text: str) -> str:
    radio = text.strip().lower()
    if not radio:
        raise RowParseError(line, "radio", text)
    return radio
