"""
Chart Surface - Chart Lifecycle and Rendering Plugins.

A ChartSurface holds at most one rendered chart; rendering a new chart tears
down the previous one first. Plugins extend the rendering step and are kept in
a registry keyed by plugin id, where registering an id twice is a no-op.

Failing to build a chart is the one error in the display pipeline that is not
degraded locally: it is raised as ChartRenderError.
"""

from dataclasses import dataclass, field
from typing import Callable, Optional

import structlog

from querycanvas.config import settings
from querycanvas.config.settings import LabelLayout
from querycanvas.display.chart import ChartConfig
from querycanvas.display.pie import (
    Canvas,
    PieGeometry,
    PieLabel,
    PieLabelLayoutEngine,
    PieSegment,
    TextMeasurer,
    approximate_text_width,
    fit_pie,
    label_text,
    percentages,
    segment_geometry,
)

logger = structlog.get_logger(__name__)

PIE_SIZE = "pie-size"
LABEL_LINE = "label-line"


class ChartRenderError(Exception):
    """Raised when a chart cannot be constructed on the surface."""


@dataclass
class RenderedChart:
    """A chart instance owned by a ChartSurface."""

    config: ChartConfig
    canvas: Canvas
    geometry: Optional[PieGeometry] = None
    segments: list[PieSegment] = field(default_factory=list)
    labels: list[PieLabel] = field(default_factory=list)
    destroyed: bool = False

    def instructions(self) -> list[dict]:
        return [step for label in self.labels for step in label.instructions()]

    def destroy(self):
        self.labels = []
        self.segments = []
        self.destroyed = True


@dataclass(frozen=True)
class ChartPlugin:
    """
    A rendering hook run for every chart on the surface.

    Args:
        id: Registry key
        after_layout: Called with the chart and the surface once data is laid out
    """

    id: str
    after_layout: Callable[["RenderedChart", "ChartSurface"], None]


class PluginRegistry:
    def __init__(self):
        self._plugins: dict[str, ChartPlugin] = {}

    def register(self, plugin: ChartPlugin) -> bool:
        """Register a plugin; returns False when the id was already present."""
        if plugin.id in self._plugins:
            logger.debug("plugin_already_registered", plugin=plugin.id)
            return False
        self._plugins[plugin.id] = plugin
        logger.debug("plugin_registered", plugin=plugin.id)
        return True

    def __contains__(self, plugin_id: str) -> bool:
        return plugin_id in self._plugins

    def __iter__(self):
        return iter(self._plugins.values())

    def get(self, plugin_id: str) -> Optional[ChartPlugin]:
        return self._plugins.get(plugin_id)

    @property
    def ids(self) -> list[str]:
        return list(self._plugins)


def _pie_size(chart: RenderedChart, surface: "ChartSurface"):
    if not chart.config.is_pie or not chart.config.series:
        return
    series = chart.config.series[0]
    chart.segments = segment_geometry(
        series.data, chart.config.categories, series.point_colors
    )
    engine = surface.label_engine
    shares = percentages(series.data)
    texts = [label_text(s.label, p) for s, p in zip(chart.segments, shares)]
    chart.geometry = fit_pie(chart.canvas, texts, engine.options, engine.measure)


def _label_line(chart: RenderedChart, surface: "ChartSurface"):
    if not chart.config.is_pie or chart.geometry is None:
        return
    chart.labels = surface.label_engine.layout(
        chart.segments, chart.geometry, chart.canvas
    )


def register_default_plugins(registry: PluginRegistry):
    registry.register(ChartPlugin(PIE_SIZE, _pie_size))
    registry.register(ChartPlugin(LABEL_LINE, _label_line))


_registry: Optional[PluginRegistry] = None


def default_registry() -> PluginRegistry:
    """The process-wide registry, created with the built-in plugins on first use."""
    global _registry
    if _registry is None:
        _registry = PluginRegistry()
        register_default_plugins(_registry)
    return _registry


class ChartSurface:
    """
    Owns the lifecycle of one chart at a time.

    Args:
        width: Canvas width, defaults to the configured chart width
        height: Canvas height, defaults to the configured chart height
        registry: Plugin registry, defaults to the process-wide registry
        options: Label layout constants
        measure: Text width measurement used for pie labels
    """

    def __init__(
        self,
        width: Optional[float] = None,
        height: Optional[float] = None,
        registry: Optional[PluginRegistry] = None,
        options: Optional[LabelLayout] = None,
        measure: TextMeasurer = approximate_text_width,
    ):
        chart = settings.instance().chart
        self.canvas = Canvas(width or chart.width, height or chart.height)
        self.registry = registry if registry is not None else default_registry()
        self.label_engine = PieLabelLayoutEngine(
            options or chart.label_layout, measure
        )
        self.current: Optional[RenderedChart] = None

    def render(self, config: ChartConfig) -> RenderedChart:
        self.destroy()

        if not config.series:
            raise ChartRenderError("chart has no data series")
        if self.canvas.width <= 0 or self.canvas.height <= 0:
            raise ChartRenderError(
                f"invalid canvas size {self.canvas.width}x{self.canvas.height}"
            )
        if config.is_pie:
            required = (PIE_SIZE, LABEL_LINE)
            if missing := [pid for pid in required if pid not in self.registry]:
                raise ChartRenderError(f"pie chart plugins not registered: {missing}")

        chart = RenderedChart(config=config, canvas=self.canvas)
        for plugin in self.registry:
            try:
                plugin.after_layout(chart, self)
            except Exception as e:
                logger.error("chart_plugin_failed", plugin=plugin.id, error=str(e))
                raise ChartRenderError(f"plugin {plugin.id} failed: {e}") from e

        self.current = chart
        logger.info(
            "chart_rendered",
            kind=config.kind.value,
            series=len(config.series),
            labels=len(chart.labels),
        )
        return chart

    def destroy(self):
        if self.current is not None:
            self.current.destroy()
            logger.debug("chart_destroyed", kind=self.current.config.kind.value)
            self.current = None
