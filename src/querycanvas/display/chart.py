"""
Chart Config Deriver - Series and Category Data for a Charting Surface.

Maps an @chart directive and the result rows onto a chart configuration:
one category axis taken from the x column in row order, and one series per
y column in declaration order.
"""

from dataclasses import dataclass, field
from typing import Any, Optional, Sequence

import structlog

from querycanvas.config import settings
from querycanvas.display.directives import (
    ChartDirective,
    ChartKind,
    DirectiveSet,
    Operator,
    ResultSet,
)
from querycanvas.display.formatter import to_number, to_text

logger = structlog.get_logger(__name__)

CURVE_TENSION = 0.4


@dataclass
class ChartSeries:
    """One data series; pie series carry a colour per data point."""

    label: str
    kind: ChartKind
    data: list[float]
    color: Optional[str] = None
    point_colors: list[str] = field(default_factory=list)
    fill: bool = False
    tension: float = 0.0


@dataclass
class ChartConfig:
    kind: ChartKind
    categories: list[str]
    series: list[ChartSeries]
    title: Optional[str] = None
    legend: bool = True
    grid: bool = True
    stacked: bool = False

    @property
    def is_pie(self) -> bool:
        return self.kind == ChartKind.PIE

    def to_dict(self) -> dict[str, Any]:
        """Chart.js shaped configuration."""
        datasets = []
        for s in self.series:
            ds = {
                "type": s.kind.value,
                "label": s.label,
                "data": list(s.data),
                "fill": s.fill,
                "tension": s.tension,
            }
            if s.point_colors:
                ds["backgroundColor"] = list(s.point_colors)
            elif s.color:
                ds["borderColor"] = s.color
                ds["backgroundColor"] = s.color
            datasets.append(ds)

        options: dict[str, Any] = {
            "plugins": {
                "legend": {"display": self.legend},
                "title": {"display": bool(self.title), "text": self.title or ""},
            }
        }
        if not self.is_pie:
            options["scales"] = {
                axis: {"stacked": self.stacked, "grid": {"display": self.grid}}
                for axis in ("x", "y")
            }

        kind = ChartKind.BAR if self.kind == ChartKind.MIXED else self.kind
        if kind == ChartKind.AREA:
            kind = ChartKind.LINE
        return {
            "type": kind.value,
            "data": {"labels": list(self.categories), "datasets": datasets},
            "options": options,
        }


def _series_kind(directive: ChartDirective, index: int) -> ChartKind:
    if directive.kind != ChartKind.MIXED:
        return directive.kind
    if index < len(directive.series_kinds):
        kind = directive.series_kinds[index]
        if kind in (ChartKind.LINE, ChartKind.BAR, ChartKind.AREA):
            return kind
    return ChartKind.BAR


def _cycle(colors: Sequence[str], index: int) -> Optional[str]:
    return colors[index % len(colors)] if colors else None


class ChartConfigDeriver:
    """
    Derives chart configuration from directives and result rows.

    Args:
        palette: Default colours, cycled by series (or by row for pie charts)
    """

    def __init__(self, palette: Optional[Sequence[str]] = None):
        self.palette = list(palette or settings.instance().chart.palette)

    def derive(
        self, result: ResultSet, directives: DirectiveSet
    ) -> Optional[ChartConfig]:
        if (chart := directives.chart) is None:
            return None

        categories = [
            "" if (v := row.get(chart.x)) is None else to_text(v)
            for row in result.rows
        ]
        series = []
        for index, column in enumerate(chart.y):
            kind = _series_kind(chart, index)
            data = [
                float(n) if (n := to_number(row.get(column))) is not None else 0.0
                for row in result.rows
            ]
            s = ChartSeries(
                label=column,
                kind=ChartKind.LINE if kind == ChartKind.AREA else kind,
                data=data,
                fill=kind == ChartKind.AREA,
                tension=CURVE_TENSION if chart.curve else 0.0,
            )
            if kind == ChartKind.PIE:
                s.point_colors = self._point_colors(chart, directives, categories)
            else:
                s.color = self._series_color(chart, directives, column, index)
            series.append(s)

        missing = [c for c in (chart.x, *chart.y) if c not in result.columns]
        if missing:
            logger.warning("chart_columns_missing", columns=missing)

        logger.info(
            "chart_derived",
            kind=chart.kind.value,
            series=len(series),
            categories=len(categories),
        )
        return ChartConfig(
            kind=chart.kind,
            categories=categories,
            series=series,
            title=chart.title,
            legend=chart.legend,
            grid=chart.grid,
            stacked=chart.stack,
        )

    def _series_color(
        self,
        chart: ChartDirective,
        directives: DirectiveSet,
        column: str,
        index: int,
    ) -> str:
        if (cd := directives.column(column)) and cd.style.color:
            return cd.style.color
        return _cycle(chart.colors, index) or _cycle(self.palette, index)

    def _point_colors(
        self, chart: ChartDirective, directives: DirectiveSet, categories: list[str]
    ) -> list[str]:
        colors = []
        for index, category in enumerate(categories):
            color = None
            for rule in directives.rows:
                if (
                    rule.column_name == chart.x
                    and rule.operator == Operator.EQ
                    and to_text(rule.value) == category
                ):
                    color = (
                        rule.style.background_color or rule.style.color or color
                    )
            colors.append(
                color or _cycle(chart.colors, index) or _cycle(self.palette, index)
            )
        return colors


def derive_chart(
    result: ResultSet, directives: DirectiveSet
) -> Optional[ChartConfig]:
    return ChartConfigDeriver().derive(result, directives)
