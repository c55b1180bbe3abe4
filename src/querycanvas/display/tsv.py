"""
Tab separated export of result sets.

Tabs, newlines and carriage returns inside values are written as the two
character sequences ``\\t``, ``\\n`` and ``\\r``. Null values are written as
a marker; saved results use ``NULL`` while clipboard text uses "".
"""

from typing import Any, Optional

from querycanvas.display.directives import ResultSet
from querycanvas.display.formatter import to_text

NULL_MARKER = "NULL"

_ESCAPES = (("\t", "\\t"), ("\n", "\\n"), ("\r", "\\r"))


def escape_field(value: Any, null_marker: str = NULL_MARKER) -> str:
    if value is None:
        return null_marker
    text = to_text(value)
    for raw, escaped in _ESCAPES:
        text = text.replace(raw, escaped)
    return text


def unescape_field(text: str, null_marker: Optional[str] = NULL_MARKER):
    if null_marker is not None and text == null_marker:
        return None
    for raw, escaped in _ESCAPES:
        text = text.replace(escaped, raw)
    return text


def dumps(result: ResultSet, null_marker: str = NULL_MARKER) -> str:
    lines = ["\t".join(result.columns)]
    for row in result.rows:
        lines.append(
            "\t".join(escape_field(row.get(c), null_marker) for c in result.columns)
        )
    return "\n".join(lines)


def loads(text: str, null_marker: Optional[str] = NULL_MARKER) -> ResultSet:
    """
    Parse exported text back into a ResultSet of string values.

    Leading and trailing blank lines are dropped. Other blank lines are rows
    only when there is a single column, where they hold an empty string; an
    input without a header yields an empty result.
    """
    lines = text.split("\n")
    while lines and not lines[-1].strip():
        lines.pop()
    while lines and not lines[0].strip():
        lines.pop(0)
    if not lines:
        return ResultSet(columns=())
    columns = lines[0].split("\t")
    body = lines[1:]
    if len(columns) > 1:
        body = [line for line in body if line.strip()]
    return ResultSet.from_rows(
        columns,
        ([unescape_field(v, null_marker) for v in line.split("\t")] for line in body),
    )
