"""
Display Directives - Data Model.

This module holds the immutable types shared by the display pipeline: the
tabular ResultSet produced by query execution, the directives parsed from the
query's doc comment, and the style patches the rule evaluator produces.
"""

from dataclasses import dataclass, field, fields
from enum import StrEnum
from types import MappingProxyType
from typing import Any, Iterable, Mapping, Optional, Sequence


class Align(StrEnum):
    """Horizontal text alignment."""

    LEFT = "left"
    CENTER = "center"
    RIGHT = "right"


class FormatKind(StrEnum):
    """Value format kinds."""

    NUMBER = "number"
    DATETIME = "datetime"
    TEXT = "text"


class Operator(StrEnum):
    """Comparison operators accepted by style rules."""

    LT = "<"
    GT = ">"
    LE = "<="
    GE = ">="
    EQ = "=="
    NE = "!="


class ChartKind(StrEnum):
    """Chart kinds accepted by the chart directive."""

    LINE = "line"
    BAR = "bar"
    PIE = "pie"
    AREA = "area"
    MIXED = "mixed"


@dataclass(frozen=True)
class StylePatch:
    """A partial set of style properties; unset properties are None."""

    color: Optional[str] = None
    background_color: Optional[str] = None
    font_weight: Optional[str] = None

    @property
    def is_empty(self) -> bool:
        return all(getattr(self, f.name) is None for f in fields(self))

    def merge(self, other: "StylePatch") -> "StylePatch":
        """Return a patch with other's set properties applied over this one."""
        return StylePatch(
            **{
                f.name: (
                    getattr(other, f.name)
                    if getattr(other, f.name) is not None
                    else getattr(self, f.name)
                )
                for f in fields(self)
            }
        )

    def to_css(self) -> str:
        styles = []
        if self.background_color:
            styles.append(f"background-color: {self.background_color}")
        if self.color:
            styles.append(f"color: {self.color}")
        if self.font_weight:
            styles.append(f"font-weight: {self.font_weight}")
        return "; ".join(styles)


EMPTY_STYLE = StylePatch()


def merge_styles(*patches: StylePatch) -> StylePatch:
    """Apply patches in order; the last set value of each property wins."""
    result = EMPTY_STYLE
    for patch in patches:
        result = result.merge(patch)
    return result


@dataclass(frozen=True)
class ConditionalStyleRule:
    """Numeric threshold rule styling a single cell."""

    operator: Operator
    value: float
    style: StylePatch


@dataclass(frozen=True)
class RowStyleRule:
    """Rule styling a whole row when one of its cells satisfies the test."""

    column_name: str
    operator: Operator
    value: float | str
    style: StylePatch


@dataclass(frozen=True)
class ColumnDirective:
    """Formatting and styling options bound to one result column."""

    column_name: str
    align: Optional[Align] = None
    format: Optional[FormatKind] = None
    comma: bool = False
    decimal: Optional[int] = None
    pattern: Optional[str] = None
    width: Optional[str] = None
    style: StylePatch = EMPTY_STYLE
    rules: tuple[ConditionalStyleRule, ...] = ()

    def column_css(self) -> str:
        """Layout styles shared by the header and body cells of the column."""
        styles = []
        if self.align:
            styles.append(f"text-align: {self.align}")
        if self.width:
            styles.append(f"width: {self.width}")
            styles.append(f"min-width: {self.width}")
        return "; ".join(styles)


@dataclass(frozen=True)
class ChartDirective:
    """Chart configuration declared by an @chart directive."""

    kind: ChartKind
    x: str
    y: tuple[str, ...]
    series_kinds: tuple[ChartKind, ...] = ()
    colors: tuple[str, ...] = ()
    curve: bool = False
    stack: bool = False
    legend: bool = True
    grid: bool = True
    title: Optional[str] = None


@dataclass(frozen=True)
class DirectiveSet:
    """All directives parsed from one query."""

    columns: Mapping[str, ColumnDirective] = field(
        default_factory=lambda: MappingProxyType({})
    )
    rows: tuple[RowStyleRule, ...] = ()
    chart: Optional[ChartDirective] = None

    def __post_init__(self):
        if not isinstance(self.columns, MappingProxyType):
            object.__setattr__(self, "columns", MappingProxyType(dict(self.columns)))

    @property
    def is_empty(self) -> bool:
        return not self.columns and not self.rows and self.chart is None

    def column(self, name: str) -> Optional[ColumnDirective]:
        return self.columns.get(name)


@dataclass(frozen=True)
class ResultSet:
    """Ordered columns and rows produced by query execution."""

    columns: tuple[str, ...]
    rows: tuple[Mapping[str, Any], ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "columns", tuple(self.columns))
        object.__setattr__(
            self, "rows", tuple(MappingProxyType(dict(r)) for r in self.rows)
        )
        if len(set(self.columns)) != len(self.columns):
            raise ValueError(f"duplicate column names: {list(self.columns)}")

    @classmethod
    def from_records(
        cls,
        records: Iterable[Mapping[str, Any]],
        columns: Optional[Sequence[str]] = None,
    ) -> "ResultSet":
        records = list(records)
        if columns is None:
            columns = list(records[0].keys()) if records else []
        return cls(columns=tuple(columns), rows=tuple(records))

    @classmethod
    def from_rows(
        cls, columns: Sequence[str], rows: Iterable[Sequence[Any]]
    ) -> "ResultSet":
        return cls(
            columns=tuple(columns),
            rows=tuple(dict(zip(columns, row)) for row in rows),
        )

    @property
    def row_count(self) -> int:
        return len(self.rows)
