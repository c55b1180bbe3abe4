"""
Result display components for QueryCanvas.

This package turns query results into rendered output:
- Directives: Data model for results, directives and style patches
- Parser: Display directives embedded in the query's doc comment
- Formatter: Number and datetime formatting of single values
- Styles: Conditional cell and row styling
- Table: Live table, TSV text and clipboard markup
- Chart: Chart series configuration
- Pie: Pie label and leader line layout
- Surface: Chart lifecycle and rendering plugins
- Results: The display pipeline for one query execution
"""

from .directives import DirectiveSet, ResultSet, StylePatch, merge_styles
from .parser import DirectiveParser, parse_directives
from .formatter import ValueFormatter
from .styles import StyleRuleEvaluator
from .table import TableRenderer, ClipboardPayload, RenderedTable
from .chart import ChartConfigDeriver, ChartConfig, derive_chart
from .pie import PieLabelLayoutEngine, PieLabel
from .surface import ChartSurface, ChartRenderError, default_registry
from .results import DisplayProcessor, DisplayResult

__all__ = [
    "DirectiveSet",
    "ResultSet",
    "StylePatch",
    "merge_styles",
    "DirectiveParser",
    "parse_directives",
    "ValueFormatter",
    "StyleRuleEvaluator",
    "TableRenderer",
    "ClipboardPayload",
    "RenderedTable",
    "ChartConfigDeriver",
    "ChartConfig",
    "derive_chart",
    "PieLabelLayoutEngine",
    "PieLabel",
    "ChartSurface",
    "ChartRenderError",
    "default_registry",
    "DisplayProcessor",
    "DisplayResult",
]
