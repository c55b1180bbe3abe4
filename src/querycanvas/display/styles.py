"""
Style Rule Evaluator - Conditional Cell and Row Styling.

Rules are evaluated in declaration order and every matching rule contributes a
StylePatch; the patches are folded with merge_styles so the last match wins per
style property.
"""

import operator as op
from typing import Any, Callable, Mapping, Optional, Sequence

import structlog

from querycanvas.display.directives import (
    EMPTY_STYLE,
    ColumnDirective,
    Operator,
    RowStyleRule,
    StylePatch,
    merge_styles,
)
from querycanvas.display.formatter import to_number, to_text

logger = structlog.get_logger(__name__)

_COMPARATORS: dict[Operator, Callable[[Any, Any], bool]] = {
    Operator.LT: op.lt,
    Operator.GT: op.gt,
    Operator.LE: op.le,
    Operator.GE: op.ge,
    Operator.EQ: op.eq,
    Operator.NE: op.ne,
}


def compare(actual: Any, operator: Operator, literal: float | str) -> bool:
    """
    Compare a cell value against a rule literal.

    The literal's type picks the comparison: numbers compare numerically
    (a cell that does not coerce to a number never matches), strings compare
    the cell's text lexicographically.
    """
    if actual is None:
        return False
    fn = _COMPARATORS[Operator(operator)]
    if isinstance(literal, str):
        return fn(to_text(actual), literal)
    if (n := to_number(actual)) is None:
        return False
    return fn(n, literal)


class StyleRuleEvaluator:
    """Resolves the style of cells and rows from their directives."""

    def resolve_cell_style(
        self, value: Any, directive: Optional[ColumnDirective]
    ) -> StylePatch:
        if directive is None:
            return EMPTY_STYLE
        if not directive.rules or (n := to_number(value)) is None:
            return directive.style

        # conditional rules replace the base style of the column entirely
        return merge_styles(
            *(
                rule.style
                for rule in directive.rules
                if compare(n, rule.operator, rule.value)
            )
        )

    def resolve_row_style(
        self, row: Mapping[str, Any], rules: Sequence[RowStyleRule]
    ) -> StylePatch:
        matched = []
        for rule in rules:
            if (value := row.get(rule.column_name)) is None:
                continue
            if compare(value, rule.operator, rule.value):
                matched.append(rule.style)
        if matched:
            logger.debug("row_rules_matched", count=len(matched))
        return merge_styles(*matched)
