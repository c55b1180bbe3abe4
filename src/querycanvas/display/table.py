"""
Table Renderer - Live Table, Delimited Text and Clipboard Markup.

Each artifact is derived independently from the ResultSet and DirectiveSet;
none is built from another so null handling and escaping stay per artifact.
"""

from dataclasses import dataclass, field
from html import escape
from typing import Optional

import structlog

from querycanvas.config import settings
from querycanvas.display import tsv
from querycanvas.display.directives import (
    Align,
    DirectiveSet,
    ResultSet,
    StylePatch,
    merge_styles,
)
from querycanvas.display.formatter import ValueFormatter
from querycanvas.display.styles import StyleRuleEvaluator

logger = structlog.get_logger(__name__)


@dataclass
class RenderedCell:
    """A formatted body cell with its resolved style."""

    text: str
    align: Optional[Align] = None
    width: Optional[str] = None
    style: StylePatch = field(default_factory=StylePatch)


@dataclass
class RenderedHeader:
    name: str
    align: Optional[Align] = None
    width: Optional[str] = None


@dataclass
class RenderedRow:
    cells: list[RenderedCell]
    style: StylePatch = field(default_factory=StylePatch)


@dataclass
class RenderedTable:
    """Structured live table, ready to be serialized by a host."""

    headers: list[RenderedHeader]
    rows: list[RenderedRow]


@dataclass
class ClipboardPayload:
    """Rich and plain text representations placed on the clipboard together."""

    html: str
    text: str


def _join_css(*parts: str) -> str:
    return "; ".join(p for p in parts if p)


def _style_attr(css: str) -> str:
    return f' style="{escape(css)}"' if css else ""


class TableRenderer:
    """
    Renders a ResultSet according to its display directives.

    Args:
        null_marker: Text shown for null cells in the live table
        zebra_background: Background of odd body rows in clipboard markup
        header_background: Background of header cells in clipboard markup
        border: Cell border used in clipboard markup
    """

    def __init__(
        self,
        null_marker: Optional[str] = None,
        zebra_background: Optional[str] = None,
        header_background: Optional[str] = None,
        border: Optional[str] = None,
    ):
        display = settings.instance().display
        self.null_marker = (
            null_marker if null_marker is not None else display.null_marker
        )
        self.zebra_background = zebra_background or display.zebra_background
        self.header_background = header_background or display.header_background
        self.border = border or display.border
        self.evaluator = StyleRuleEvaluator()

    def build_table(
        self, result: ResultSet, directives: DirectiveSet
    ) -> RenderedTable:
        formatter = ValueFormatter(null_text=self.null_marker)
        headers = []
        for name in result.columns:
            cd = directives.column(name)
            headers.append(
                RenderedHeader(
                    name=name,
                    align=cd.align if cd else None,
                    width=cd.width if cd else None,
                )
            )

        rows = []
        for row in result.rows:
            cells = []
            for name in result.columns:
                cd = directives.column(name)
                value = row.get(name)
                cells.append(
                    RenderedCell(
                        text=formatter.format(value, cd),
                        align=cd.align if cd else None,
                        width=cd.width if cd else None,
                        style=self.evaluator.resolve_cell_style(value, cd),
                    )
                )
            rows.append(
                RenderedRow(
                    cells=cells,
                    style=self.evaluator.resolve_row_style(row, directives.rows),
                )
            )

        logger.debug("table_built", columns=len(headers), rows=len(rows))
        return RenderedTable(headers=headers, rows=rows)

    def render_html(self, result: ResultSet, directives: DirectiveSet) -> str:
        """
        Live table markup; row styles sit on <tr>, cell styles on <td>.

        Header cells carry the column layout and the column's base style.
        """
        table = self.build_table(result, directives)
        parts = ['<table class="query-result">', "<thead><tr>"]
        for name in result.columns:
            cd = directives.column(name)
            css = _join_css(cd.column_css(), cd.style.to_css()) if cd else ""
            parts.append(f"<th{_style_attr(css)}>{escape(name)}</th>")
        parts.append("</tr></thead><tbody>")

        for row in table.rows:
            parts.append(f"<tr{_style_attr(row.style.to_css())}>")
            for name, cell in zip(result.columns, row.cells):
                cd = directives.column(name)
                css = _join_css(cd.column_css() if cd else "", cell.style.to_css())
                parts.append(f"<td{_style_attr(css)}>{escape(cell.text)}</td>")
            parts.append("</tr>")
        parts.append("</tbody></table>")
        return "".join(parts)

    def render_tsv(self, result: ResultSet) -> str:
        """Raw tab separated data; column directives are ignored and nulls are empty."""
        return tsv.dumps(result, null_marker="")

    def render_clipboard(
        self, result: ResultSet, directives: DirectiveSet
    ) -> ClipboardPayload:
        formatter = ValueFormatter(null_text="")
        zebra = StylePatch(background_color=self.zebra_background)
        header = StylePatch(
            background_color=self.header_background, font_weight="bold"
        )
        cell_base = f"border: {self.border}; padding: 4px 8px"

        parts = ['<table style="border-collapse: collapse">', "<thead><tr>"]
        for name in result.columns:
            cd = directives.column(name)
            css = _join_css(
                cell_base,
                merge_styles(header, cd.style if cd else StylePatch()).to_css(),
                cd.column_css() if cd else "",
            )
            parts.append(f"<th{_style_attr(css)}>{escape(name)}</th>")
        parts.append("</tr></thead><tbody>")

        for index, row in enumerate(result.rows):
            row_style = self.evaluator.resolve_row_style(row, directives.rows)
            base = zebra if index % 2 == 1 else StylePatch()
            parts.append("<tr>")
            for name in result.columns:
                cd = directives.column(name)
                value = row.get(name)
                style = merge_styles(
                    base, row_style, self.evaluator.resolve_cell_style(value, cd)
                )
                css = _join_css(
                    cell_base, cd.column_css() if cd else "", style.to_css()
                )
                parts.append(
                    f"<td{_style_attr(css)}>{escape(formatter.format(value, cd))}</td>"
                )
            parts.append("</tr>")
        parts.append("</tbody></table>")

        logger.debug("clipboard_rendered", rows=result.row_count)
        return ClipboardPayload(html="".join(parts), text=self.render_tsv(result))
