"""
Directive Parser - Display Options Embedded in Query Comments.

This module extracts the first ``/** ... */`` doc comment from a query and
turns its ``@column``, ``@cell``, ``@row`` and ``@chart`` lines into an
immutable DirectiveSet. Parsing never fails: malformed or unknown tokens are
dropped and the affected column falls back to default rendering.

Example::

    /**
     * @column sales align=right format=number comma=true decimal=2
     * @cell sales < 0 color=#cc0000 bold=true
     * @row status == "error" bg=#ffdddd
     * @chart type=bar x=region y=sales,profit title="Sales by region"
     */
    SELECT region, sales, profit, status FROM report
"""

import re
from dataclasses import replace
from typing import Any, Callable, Optional

import structlog

from querycanvas.display.directives import (
    Align,
    ChartDirective,
    ChartKind,
    ColumnDirective,
    ConditionalStyleRule,
    DirectiveSet,
    FormatKind,
    Operator,
    RowStyleRule,
    StylePatch,
)
from querycanvas.display.formatter import to_number

logger = structlog.get_logger(__name__)

_DOC_COMMENT = re.compile(r"/\*\*(.*?)\*/", re.DOTALL)
_DIRECTIVE = re.compile(r"@(column|cell|row|chart)\b[ \t]*([^\n]*)")
_OPTION = re.compile(r"(\w+)=(\"[^\"]*\"|'[^']*'|\S+)")
_COLUMN_HEAD = re.compile(r"(\S+)\s*(.*)")
_CONDITION_HEAD = re.compile(
    r"([^\s<>=!]+)\s*(<=|>=|==|!=|<|>)\s*(\"[^\"]*\"|'[^']*'|[^\s]+)\s*(.*)"
)

# A parsed option is a (field, typed value) pair; None means the token is dropped
Option = Optional[tuple[str, Any]]


def _unquote(value: str) -> str:
    if len(value) >= 2 and value[0] == value[-1] and value[0] in "\"'":
        return value[1:-1]
    return value


def _strip_quotes(value: str) -> str:
    return value.replace('"', "").replace("'", "")


def _as_bool(value: str) -> bool:
    return _unquote(value) == "true"


def _as_choice(enum_type, value: str):
    try:
        return enum_type(_unquote(value))
    except ValueError:
        return None


def _as_non_negative_int(value: str) -> Optional[int]:
    if m := re.match(r"\s*([+-]?\d+)", _unquote(value)):
        n = int(m.group(1))
        return n if n >= 0 else None
    return None


def _as_float(value: str) -> Optional[float]:
    n = to_number(value)
    return float(n) if n is not None else None


def _as_list(value: str) -> tuple[str, ...]:
    return tuple(v.strip() for v in _unquote(value).split(",") if v.strip())


def _choice(field: str, enum_type) -> Callable[[str], Option]:
    def parse(value: str) -> Option:
        v = _as_choice(enum_type, value)
        return (field, v) if v is not None else None

    return parse


def _text(field: str, transform: Callable[[str], str] = _unquote):
    return lambda value: (field, transform(value))


def _flag(field: str):
    return lambda value: (field, _as_bool(value))


def _decimal(value: str) -> Option:
    return ("decimal", _as_non_negative_int(value))


def _bold(value: str) -> Option:
    return ("font_weight", "bold") if _as_bool(value) else None


def _kinds(value: str) -> Option:
    kinds = tuple(_as_choice(ChartKind, k) for k in _as_list(value))
    return ("series_kinds", tuple(k or ChartKind.BAR for k in kinds))


# each recognized key validates its value once, here
_STYLE_KEYS: dict[str, Callable[[str], Option]] = {
    "bg": _text("background_color"),
    "backgroundColor": _text("background_color"),
    "color": _text("color"),
    "bold": _bold,
}

_COLUMN_KEYS: dict[str, Callable[[str], Option]] = {
    "align": _choice("align", Align),
    "format": _choice("format", FormatKind),
    "comma": _flag("comma"),
    "decimal": _decimal,
    "pattern": _text("pattern", _strip_quotes),
    "width": _text("width"),
    **_STYLE_KEYS,
}

_CHART_KEYS: dict[str, Callable[[str], Option]] = {
    "type": _choice("kind", ChartKind),
    "kind": _choice("kind", ChartKind),
    "x": _text("x"),
    "y": lambda v: ("y", _as_list(v)),
    "series": _kinds,
    "types": _kinds,
    "colors": lambda v: ("colors", _as_list(v)),
    "curve": lambda v: ("curve", _unquote(v) in ("true", "smooth")),
    "stack": _flag("stack"),
    "legend": _flag("legend"),
    "grid": _flag("grid"),
    "title": _text("title", _strip_quotes),
}

_STYLE_FIELDS = ("color", "background_color", "font_weight")


def _parse_options(
    text: str, keys: dict[str, Callable[[str], Option]], directive: str
) -> dict[str, Any]:
    options = {}
    for m in _OPTION.finditer(text):
        key, value = m.group(1), m.group(2)
        if (parse := keys.get(key)) is None:
            logger.debug("directive_key_ignored", directive=directive, key=key)
            continue
        if (option := parse(value)) is None:
            logger.debug(
                "directive_value_ignored", directive=directive, key=key, value=value
            )
            continue
        name, typed = option
        options[name] = typed
    return options


def _split_style(options: dict[str, Any]) -> tuple[StylePatch, dict[str, Any]]:
    style = StylePatch(**{k: options.pop(k) for k in _STYLE_FIELDS if k in options})
    return style, options


def _literal(token: str) -> float | str:
    if token[:1] in "\"'":
        return _unquote(token)
    f = _as_float(token)
    return f if f is not None else token


class DirectiveParser:
    """
    Parser for display directives embedded in query text.

    The parser is stateless; parse() is a pure function of the query text.
    """

    def parse(self, query: Optional[str]) -> DirectiveSet:
        if not query or not (comment := _DOC_COMMENT.search(query)):
            return DirectiveSet()

        columns: dict[str, ColumnDirective] = {}
        cell_rules: dict[str, list[ConditionalStyleRule]] = {}
        rows: list[RowStyleRule] = []
        chart: Optional[ChartDirective] = None

        for m in _DIRECTIVE.finditer(comment.group(1)):
            kind, body = m.group(1), m.group(2).strip()
            match kind:
                case "column":
                    if (cd := self._column(body)) is not None:
                        # later directives for the same column replace earlier ones
                        columns[cd.column_name] = cd
                case "cell":
                    if (rule := self._cell(body)) is not None:
                        name, cr = rule
                        cell_rules.setdefault(name, []).append(cr)
                case "row":
                    if (rr := self._row(body)) is not None:
                        rows.append(rr)
                case "chart":
                    if (cd := self._chart(body)) is not None:
                        chart = cd

        for name, rules in cell_rules.items():
            base = columns.get(name) or ColumnDirective(column_name=name)
            columns[name] = replace(base, rules=tuple(rules))

        directives = DirectiveSet(columns=columns, rows=tuple(rows), chart=chart)
        logger.debug(
            "directives_parsed",
            columns=list(directives.columns),
            row_rules=len(directives.rows),
            chart=chart.kind.value if chart else None,
        )
        return directives

    def _column(self, body: str) -> Optional[ColumnDirective]:
        if not (m := _COLUMN_HEAD.match(body)):
            logger.debug("directive_malformed", directive="column", text=body)
            return None
        style, options = _split_style(
            _parse_options(m.group(2), _COLUMN_KEYS, "column")
        )
        return ColumnDirective(column_name=m.group(1), style=style, **options)

    def _cell(self, body: str) -> Optional[tuple[str, ConditionalStyleRule]]:
        if not (m := _CONDITION_HEAD.match(body)):
            logger.debug("directive_malformed", directive="cell", text=body)
            return None
        name, op, token, rest = m.groups()
        if (threshold := _as_float(_unquote(token))) is None:
            logger.debug("cell_threshold_not_numeric", column=name, value=token)
            return None
        style, _ = _split_style(_parse_options(rest, _STYLE_KEYS, "cell"))
        return name, ConditionalStyleRule(
            operator=Operator(op), value=threshold, style=style
        )

    def _row(self, body: str) -> Optional[RowStyleRule]:
        if not (m := _CONDITION_HEAD.match(body)):
            logger.debug("directive_malformed", directive="row", text=body)
            return None
        name, op, token, rest = m.groups()
        style, _ = _split_style(_parse_options(rest, _STYLE_KEYS, "row"))
        return RowStyleRule(
            column_name=name, operator=Operator(op), value=_literal(token), style=style
        )

    def _chart(self, body: str) -> Optional[ChartDirective]:
        options = _parse_options(body, _CHART_KEYS, "chart")
        if not options.get("x") or not options.get("y"):
            logger.warning(
                "chart_directive_incomplete", x=options.get("x"), y=options.get("y")
            )
            return None
        options.setdefault("kind", ChartKind.BAR)
        return ChartDirective(**options)


_parser = DirectiveParser()


def parse_directives(query: Optional[str]) -> DirectiveSet:
    """Parse the directives of a query; an absent doc comment yields an empty set."""
    return _parser.parse(query)
