from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Callable, Literal, Sequence

import logging
import math

from chart_layout.primitives import LayoutRect, require_non_negative
from chart_layout.styling import DEFAULT_THEME, ChartTheme, ChartTypography, LegendStyle, RgbaColor


LOGGER = logging.getLogger(__name__)

SeriesKind = Literal["line", "area", "band", "scatter", "bar", "heatmap"]
LegendOrientation = Literal["vertical", "horizontal"]
LegendPosition = Literal[
    "inside_top_left",
    "inside_top_right",
    "inside_bottom_left",
    "inside_bottom_right",
    "outside_top",
    "outside_bottom",
]

SERIES_KINDS: frozenset[str] = frozenset({"line", "area", "band", "scatter", "bar", "heatmap"})
LEGEND_POSITIONS: frozenset[str] = frozenset(
    {
        "inside_top_left",
        "inside_top_right",
        "inside_bottom_left",
        "inside_bottom_right",
        "outside_top",
        "outside_bottom",
    }
)

PLACEMENT_MARGIN = 8.0
GLYPH_WIDTH_FACTOR = 0.6

TextMeasurer = Callable[[str, ChartTypography], float]


def estimate_label_width(label: str, typography: ChartTypography) -> float:
    """Heuristic label width; inject a real measurer for glyph-accurate layout."""

    if not label:
        return 0.0
    return typography.font_size * GLYPH_WIDTH_FACTOR * len(label)


@dataclass(frozen=True)
class LegendItem:
    label: str
    color: RgbaColor
    kind: SeriesKind = "line"
    stroke_width: float = 1.0
    fill_opacity: float = 1.0
    marker_size: float = 0.0

    def __post_init__(self) -> None:
        if self.kind not in SERIES_KINDS:
            raise ValueError(f"unknown series kind: {self.kind!r}")
        object.__setattr__(self, "stroke_width", require_non_negative("legend item stroke_width", self.stroke_width))
        object.__setattr__(self, "marker_size", require_non_negative("legend item marker_size", self.marker_size))
        if not math.isfinite(self.fill_opacity) or not 0.0 <= self.fill_opacity <= 1.0:
            raise ValueError("legend item fill_opacity must be within [0, 1]")


@dataclass(frozen=True)
class LegendItemVisual:
    label: str
    color: RgbaColor
    kind: SeriesKind
    stroke_width: float
    fill_opacity: float
    marker_x: float
    marker_y: float
    marker_size: float
    text_x: float
    text_y: float
    typography: ChartTypography


@dataclass(frozen=True)
class LegendDefinition:
    id: str
    orientation: LegendOrientation = "vertical"
    position: LegendPosition = "inside_top_right"
    items: tuple[LegendItem, ...] = ()

    def __post_init__(self) -> None:
        if self.orientation not in ("vertical", "horizontal"):
            raise ValueError(f"unknown legend orientation: {self.orientation!r}")
        if self.position not in LEGEND_POSITIONS:
            raise ValueError(f"unknown legend position: {self.position!r}")
        object.__setattr__(self, "items", tuple(self.items))


@dataclass(frozen=True)
class LegendVisual:
    definition: LegendDefinition
    bounds: LayoutRect
    style: LegendStyle
    items: tuple[LegendItemVisual, ...]


def resolve_marker_size(item: LegendItem, style: LegendStyle) -> float:
    if item.kind == "scatter":
        return max(style.marker_size, item.marker_size)
    if item.kind == "bar":
        return max(style.marker_size * 0.8, style.marker_size)
    return style.marker_size


def _max_marker_size(items: Sequence[LegendItem], style: LegendStyle) -> float:
    return max((resolve_marker_size(item, style) for item in items), default=style.marker_size)


def position_legend(position: LegendPosition, plot_area: LayoutRect, width: float, height: float) -> LayoutRect:
    m = PLACEMENT_MARGIN
    if position == "inside_top_left":
        return LayoutRect(plot_area.x + m, plot_area.y + m, width, height)
    if position == "inside_bottom_left":
        return LayoutRect(plot_area.x + m, plot_area.bottom - height - m, width, height)
    if position == "inside_bottom_right":
        return LayoutRect(plot_area.right - width - m, plot_area.bottom - height - m, width, height)
    if position == "outside_top":
        return LayoutRect(plot_area.x + (plot_area.width - width) / 2.0, max(0.0, plot_area.y - height - m), width, height)
    if position == "outside_bottom":
        return LayoutRect(plot_area.x + (plot_area.width - width) / 2.0, plot_area.bottom + m, width, height)
    return LayoutRect(plot_area.right - width - m, plot_area.y + m, width, height)


class LegendLayoutEngine:
    """Lays out legend entries in a strip and anchors it to the plot rectangle."""

    def __init__(self, measure_text: TextMeasurer = estimate_label_width) -> None:
        self._measure_text = measure_text

    def layout(
        self,
        definition: LegendDefinition,
        plot_area: LayoutRect,
        theme: ChartTheme = DEFAULT_THEME,
    ) -> LegendVisual:
        style = theme.legend
        line_height = style.label_typography.resolved_line_height
        if definition.orientation == "vertical":
            width, height, items = self._layout_vertical(definition, style, line_height)
        else:
            width, height, items = self._layout_horizontal(definition, style, line_height)

        bounds = position_legend(definition.position, plot_area, width, height)
        if definition.position.startswith("inside") and (width > plot_area.width or height > plot_area.height):
            LOGGER.debug("legend `%s` (%.1fx%.1f) overflows the plot area", definition.id, width, height)
        offset = tuple(
            replace(
                item,
                marker_x=item.marker_x + bounds.x,
                marker_y=item.marker_y + bounds.y,
                text_x=item.text_x + bounds.x,
                text_y=item.text_y + bounds.y,
            )
            for item in items
        )
        return LegendVisual(definition=definition, bounds=bounds, style=style, items=offset)

    def _item_visual(
        self,
        item: LegendItem,
        style: LegendStyle,
        *,
        marker_x: float,
        marker_y: float,
        marker_size: float,
        text_y: float,
    ) -> LegendItemVisual:
        return LegendItemVisual(
            label=item.label,
            color=item.color,
            kind=item.kind,
            stroke_width=item.stroke_width,
            fill_opacity=item.fill_opacity,
            marker_x=marker_x,
            marker_y=marker_y,
            marker_size=marker_size,
            text_x=marker_x + marker_size + style.label_spacing,
            text_y=text_y,
            typography=style.label_typography,
        )

    def _layout_vertical(
        self,
        definition: LegendDefinition,
        style: LegendStyle,
        line_height: float,
    ) -> tuple[float, float, list[LegendItemVisual]]:
        typography = style.label_typography
        count = len(definition.items)
        max_label_w = max((self._measure_text(item.label, typography) for item in definition.items), default=0.0)
        max_marker = _max_marker_size(definition.items, style)
        row_h = max(line_height, max_marker)
        width = style.padding * 2.0 + max_marker + style.label_spacing + max_label_w
        height = style.padding * 2.0 + count * row_h + max(0, count - 1) * style.item_spacing

        items: list[LegendItemVisual] = []
        y = style.padding
        for item in definition.items:
            marker = resolve_marker_size(item, style)
            items.append(
                self._item_visual(
                    item,
                    style,
                    marker_x=style.padding,
                    marker_y=y + (row_h - marker) / 2.0,
                    marker_size=marker,
                    text_y=y + row_h / 2.0,
                )
            )
            y += row_h + style.item_spacing
        return width, height, items

    def _layout_horizontal(
        self,
        definition: LegendDefinition,
        style: LegendStyle,
        line_height: float,
    ) -> tuple[float, float, list[LegendItemVisual]]:
        typography = style.label_typography
        max_marker = _max_marker_size(definition.items, style)
        row_h = max(line_height, max_marker)
        height = style.padding * 2.0 + row_h
        if not definition.items:
            return style.padding * 2.0, height, []

        items: list[LegendItemVisual] = []
        x = style.padding
        for item in definition.items:
            marker = resolve_marker_size(item, style)
            visual = self._item_visual(
                item,
                style,
                marker_x=x,
                marker_y=style.padding + (row_h - marker) / 2.0,
                marker_size=marker,
                text_y=style.padding + row_h / 2.0,
            )
            items.append(visual)
            x = visual.text_x + self._measure_text(item.label, typography) + style.item_spacing

        width = x - style.item_spacing + style.padding
        return width, height, items
