"""
Value Formatter - Scalar Formatting per Column Directive.

Numeric formatting (fixed decimals, comma grouping) and token based datetime
formatting. Unparseable values always fall back to their original text.
"""

import math
import re
from datetime import date, datetime
from typing import Any, Optional

from querycanvas.display.directives import ColumnDirective, FormatKind

_GROUPS = re.compile(r"\B(?=(\d{3})+(?!\d))")

# plain decimal text with an optional exponent; rejects "1_000", "inf" and "nan"
_NUMERIC = re.compile(r"\s*[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?\s*")

_DATETIME_FALLBACKS = (
    "%Y/%m/%d %H:%M:%S",
    "%Y/%m/%d %H:%M",
    "%Y/%m/%d",
)

# substitution order matters: MM is replaced before mm
_DATETIME_TOKENS = (
    ("yyyy", lambda d: f"{d.year:04d}"),
    ("MM", lambda d: f"{d.month:02d}"),
    ("dd", lambda d: f"{d.day:02d}"),
    ("HH", lambda d: f"{d.hour:02d}"),
    ("mm", lambda d: f"{d.minute:02d}"),
    ("ss", lambda d: f"{d.second:02d}"),
)


def to_text(value: Any) -> str:
    """Default string form of a scalar; integral floats drop the trailing .0"""
    if isinstance(value, float) and value.is_integer() and abs(value) < 1e21:
        return str(int(value))
    return str(value)


def to_number(value: Any) -> Optional[int | float]:
    """Coerce a scalar to a number, or None when it does not parse."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str) and not _NUMERIC.fullmatch(value):
        return None
    try:
        n = float(value)
    except (TypeError, ValueError):
        return None
    return None if math.isnan(n) else n


def to_datetime(value: Any) -> Optional[datetime]:
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    if not isinstance(value, str) or not (text := value.strip()):
        return None
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        pass
    for fmt in _DATETIME_FALLBACKS:
        try:
            return datetime.strptime(text, fmt)
        except ValueError:
            continue
    return None


def group_thousands(text: str) -> str:
    integer, dot, fraction = text.partition(".")
    return _GROUPS.sub(",", integer) + dot + fraction


def format_number(value: Any, decimal: Optional[int] = None, comma: bool = False):
    if (n := to_number(value)) is None or math.isinf(n):
        return to_text(value)
    text = f"{n:.{decimal}f}" if decimal is not None else to_text(n)
    return group_thousands(text) if comma else text


def format_datetime(value: Any, pattern: str) -> str:
    if (d := to_datetime(value)) is None:
        return to_text(value)
    text = pattern
    for token, part in _DATETIME_TOKENS:
        # only the first occurrence of each token is substituted
        text = text.replace(token, part(d), 1)
    return text


class ValueFormatter:
    """
    Formats single values for display.

    Args:
        null_text: Text returned for null values. The live table shows a
            visible marker while clipboard and export output use "".
    """

    def __init__(self, null_text: str = ""):
        self.null_text = null_text

    def format(self, value: Any, directive: Optional[ColumnDirective] = None) -> str:
        if value is None:
            return self.null_text
        if directive is None:
            return to_text(value)

        match directive.format:
            case FormatKind.NUMBER:
                return format_number(value, directive.decimal, directive.comma)
            case FormatKind.DATETIME if directive.pattern:
                return format_datetime(value, directive.pattern)
        return to_text(value)
