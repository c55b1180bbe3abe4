"""
Pie Label Layout - Leader Lines and External Labels for Pie Charts.

Canvas coordinates are used throughout: the origin is the top left corner and
y grows downwards. Segments start at twelve o'clock and run clockwise.

Each label is placed outside the pie:
1. The segment bisector gives an edge point on the outer radius and an elbow
   point ``extension`` beyond it
2. Right-side labels start a fixed offset right of the pie
3. Left-side labels are right-aligned a fixed gap left of the pie, the swatch
   is positioned from the measured text width
4. The vertical anchor is clamped to the canvas margins; a clamped label gets
   a vertical leader segment so the final segment stays horizontal

Labels are not de-overlapped beyond the vertical clamp.
"""

import math
import unicodedata
from dataclasses import dataclass, replace
from enum import StrEnum
from typing import Any, Callable, Optional, Sequence

import structlog

from querycanvas.config.settings import LabelLayout

logger = structlog.get_logger(__name__)

TextMeasurer = Callable[[str, float], float]

START_ANGLE = -math.pi / 2
LINE_HEIGHT = 1.2


def approximate_text_width(text: str, font_size: float) -> float:
    """Estimate rendered text width; wide East Asian characters count double."""
    units = sum(
        1.0 if unicodedata.east_asian_width(ch) in ("W", "F") else 0.6 for ch in text
    )
    return units * font_size


def percentages(values: Sequence[float]) -> list[float]:
    """Share of each value in the total, in percent, rounded to one decimal."""
    total = sum(max(v, 0.0) for v in values)
    if total <= 0:
        return [0.0 for _ in values]
    return [round(max(v, 0.0) / total * 100, 1) for v in values]


def label_text(label: str, percentage: float) -> str:
    return f"{label} ({percentage:.1f}%)"


class Side(StrEnum):
    LEFT = "left"
    RIGHT = "right"


@dataclass(frozen=True)
class Point:
    x: float
    y: float


@dataclass(frozen=True)
class Canvas:
    width: float
    height: float


@dataclass(frozen=True)
class PieGeometry:
    center_x: float
    center_y: float
    inner_radius: float
    outer_radius: float

    @property
    def left(self) -> float:
        return self.center_x - self.outer_radius

    @property
    def right(self) -> float:
        return self.center_x + self.outer_radius


@dataclass(frozen=True)
class PieSegment:
    index: int
    label: str
    value: float
    start_angle: float
    end_angle: float
    color: Optional[str] = None

    @property
    def bisector(self) -> float:
        return (self.start_angle + self.end_angle) / 2


@dataclass(frozen=True)
class PieLabel:
    index: int
    label: str
    value: float
    percentage: float
    color: Optional[str]
    side: Side
    leader: tuple[Point, ...]
    text_x: float
    text_y: float
    swatch: tuple[float, float, float]
    font_size: float
    clamped: bool = False

    @property
    def text(self) -> str:
        return label_text(self.label, self.percentage)

    @property
    def text_align(self) -> str:
        return "left" if self.side == Side.RIGHT else "right"

    def instructions(self) -> list[dict[str, Any]]:
        """Literal drawing steps: leader line, colour swatch, label text."""
        sx, sy, size = self.swatch
        return [
            {
                "op": "line",
                "points": [[p.x, p.y] for p in self.leader],
                "color": self.color,
            },
            {
                "op": "rect",
                "x": sx,
                "y": sy,
                "width": size,
                "height": size,
                "fill": self.color,
            },
            {
                "op": "text",
                "x": self.text_x,
                "y": self.text_y,
                "text": self.text,
                "align": self.text_align,
                "baseline": "middle",
                "font_size": self.font_size,
            },
        ]


def segment_geometry(
    values: Sequence[float],
    labels: Sequence[str],
    colors: Sequence[str] = (),
) -> list[PieSegment]:
    """Angular extent of every segment; negative values take no space."""
    total = sum(max(v, 0.0) for v in values)
    segments = []
    angle = START_ANGLE
    for index, value in enumerate(values):
        span = max(value, 0.0) / total * 2 * math.pi if total > 0 else 0.0
        segments.append(
            PieSegment(
                index=index,
                label=labels[index] if index < len(labels) else "",
                value=value,
                start_angle=angle,
                end_angle=angle + span,
                color=colors[index] if index < len(colors) else None,
            )
        )
        angle += span
    return segments


def fit_pie(
    canvas: Canvas,
    texts: Sequence[str],
    options: Optional[LabelLayout] = None,
    measure: TextMeasurer = approximate_text_width,
    cutout: float = 0.0,
) -> PieGeometry:
    """Size the pie so the widest label fits beside it on either side."""
    options = options or LabelLayout()
    widest = max((measure(t, options.font_size) for t in texts), default=0.0)
    label_space = (
        max(options.right_offset, options.left_gap + options.text_gap)
        + options.swatch_size
        + options.text_gap
        + widest
    )
    usable_height = canvas.height - options.margin_top - options.margin_bottom
    radius = min((canvas.width - 2 * label_space) / 2, usable_height / 2)
    floor = min(canvas.width, canvas.height) * 0.1
    if radius < floor:
        logger.debug("pie_radius_clamped", radius=radius, floor=floor)
        radius = floor
    return PieGeometry(
        center_x=canvas.width / 2,
        center_y=options.margin_top + usable_height / 2,
        inner_radius=radius * cutout,
        outer_radius=radius,
    )


class PieLabelLayoutEngine:
    """
    Computes leader lines and label anchors for pie segments.

    Args:
        options: Layout constants (extension, offsets, margins, font size)
        measure: Text width measurement, (text, font_size) -> width
    """

    def __init__(
        self,
        options: Optional[LabelLayout] = None,
        measure: TextMeasurer = approximate_text_width,
    ):
        self.options = options or LabelLayout()
        self.measure = measure

    def layout(
        self,
        segments: Sequence[PieSegment],
        geometry: PieGeometry,
        canvas: Canvas,
    ) -> list[PieLabel]:
        """Return one label per segment, in draw order (largest value first)."""
        shares = percentages([s.value for s in segments])
        labels = [
            self._place(segment, share, geometry, canvas)
            for segment, share in zip(segments, shares)
        ]
        return sorted(labels, key=lambda label: -label.value)

    def _place(
        self,
        segment: PieSegment,
        share: float,
        geometry: PieGeometry,
        canvas: Canvas,
    ) -> PieLabel:
        o = self.options
        angle = segment.bisector
        cos, sin = math.cos(angle), math.sin(angle)
        edge = Point(
            geometry.center_x + geometry.outer_radius * cos,
            geometry.center_y + geometry.outer_radius * sin,
        )
        reach = geometry.outer_radius + o.extension
        elbow = Point(geometry.center_x + reach * cos, geometry.center_y + reach * sin)

        half_line = o.font_size * LINE_HEIGHT / 2
        top = o.margin_top + half_line
        bottom = canvas.height - o.margin_bottom - half_line
        y = max(top, min(bottom, elbow.y))
        clamped = not math.isclose(y, elbow.y)

        base = PieLabel(
            index=segment.index,
            label=segment.label,
            value=segment.value,
            percentage=share,
            color=segment.color,
            side=Side.RIGHT if cos >= 0 else Side.LEFT,
            leader=(),
            text_x=0.0,
            text_y=y,
            swatch=(0.0, 0.0, 0.0),
            font_size=o.font_size,
            clamped=clamped,
        )
        if base.side == Side.RIGHT:
            swatch_x = geometry.right + o.right_offset
            text_x = swatch_x + o.swatch_size + o.text_gap
            end_x = max(elbow.x, swatch_x - o.text_gap)
        else:
            width = self.measure(base.text, o.font_size)
            text_x = geometry.left - o.left_gap
            swatch_x = text_x - width - o.text_gap - o.swatch_size
            end_x = min(elbow.x, text_x + o.text_gap)

        leader = (edge, elbow)
        if clamped:
            leader += (Point(elbow.x, y),)
        leader += (Point(end_x, y),)

        return replace(
            base,
            leader=leader,
            text_x=text_x,
            swatch=(swatch_x, y - o.swatch_size / 2, o.swatch_size),
        )
