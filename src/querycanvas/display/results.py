"""
Display Processor - Directive Driven Rendering of Query Results.

This module ties the display components together for one query execution:
directives are parsed fresh from the query text and every output encoding is
derived from the same DirectiveSet and ResultSet.
"""

from dataclasses import dataclass
from typing import Any, Optional

import structlog

from querycanvas.display.chart import ChartConfig, ChartConfigDeriver
from querycanvas.display.directives import DirectiveSet, ResultSet
from querycanvas.display.parser import DirectiveParser
from querycanvas.display.surface import ChartSurface, RenderedChart
from querycanvas.display.table import ClipboardPayload, RenderedTable, TableRenderer

logger = structlog.get_logger(__name__)


@dataclass
class DisplayResult:
    """Every rendering of one query result."""

    result: ResultSet
    directives: DirectiveSet
    table: RenderedTable
    html: str
    tsv: str
    clipboard: ClipboardPayload
    chart: Optional[ChartConfig] = None
    rendered_chart: Optional[RenderedChart] = None
    execution_time: Optional[float] = None


class DisplayProcessor:
    """
    Display processor for query results.

    This component:
    1. Parses display directives from the query text
    2. Renders the live table, TSV text and clipboard markup
    3. Derives the chart configuration and draws it on the surface, if any
    """

    def __init__(
        self,
        renderer: Optional[TableRenderer] = None,
        deriver: Optional[ChartConfigDeriver] = None,
        surface: Optional[ChartSurface] = None,
    ):
        """
        Initialize the Display Processor.

        Args:
            renderer: Table renderer, built from settings when omitted
            deriver: Chart config deriver, built from settings when omitted
            surface: Chart surface; without one charts are derived but not drawn
        """
        self.parser = DirectiveParser()
        self.renderer = renderer or TableRenderer()
        self.deriver = deriver or ChartConfigDeriver()
        self.surface = surface

    def process(
        self,
        query: str,
        result: ResultSet,
        execution_time: Optional[float] = None,
    ) -> DisplayResult:
        """
        Render a query result according to the directives in its query.

        Args:
            query: Query text, possibly carrying a directive doc comment
            result: Rows returned by the query
            execution_time: Query runtime in seconds

        Returns:
            DisplayResult with every output encoding

        Raises:
            ChartRenderError: The chart could not be drawn on the surface
        """
        logger.info("processing_results", rows=result.row_count)

        directives = self.parser.parse(query)
        chart = self.deriver.derive(result, directives)
        rendered = None
        if chart is not None and self.surface is not None:
            rendered = self.surface.render(chart)

        display = DisplayResult(
            result=result,
            directives=directives,
            table=self.renderer.build_table(result, directives),
            html=self.renderer.render_html(result, directives),
            tsv=self.renderer.render_tsv(result),
            clipboard=self.renderer.render_clipboard(result, directives),
            chart=chart,
            rendered_chart=rendered,
            execution_time=execution_time,
        )

        logger.info(
            "results_processed",
            columns=len(directives.columns),
            row_rules=len(directives.rows),
            chart=chart.kind.value if chart else None,
            rows=result.row_count,
        )
        return display

    def format_for_webview(self, display: DisplayResult) -> dict[str, Any]:
        """
        Format a result as the message posted to the host web view.

        Args:
            display: DisplayResult

        Returns:
            queryResult message
        """
        response = {
            "type": "queryResult",
            "success": True,
            "columns": list(display.result.columns),
            "rows": [dict(r) for r in display.result.rows],
            "rowCount": display.result.row_count,
            "html": display.html,
            "tsv": display.tsv,
        }

        if display.execution_time is not None:
            response["executionTime"] = display.execution_time

        if display.chart:
            response["chart"] = display.chart.to_dict()

        if display.rendered_chart and display.rendered_chart.labels:
            response["pieLabels"] = display.rendered_chart.instructions()

        return response
