from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Literal, Sequence

from chart_layout.layout import (
    AxisLayout,
    AxisLayoutRequest,
    AxisOrientation,
    ChartLayoutEngine,
    ChartLayoutRequest,
)
from chart_layout.primitives import LayoutRect
from chart_layout.scales import Scale
from chart_layout.styling import DEFAULT_THEME, AxisStyle, ChartTypography, RgbaColor
from chart_layout.ticks import AxisTick, TickGenerationOptions, TickGenerator, TickGeneratorRegistry


TextAlignment = Literal["start", "center", "end"]


@dataclass(frozen=True)
class AxisDefinition:
    id: str
    orientation: AxisOrientation
    thickness: float
    scale: Scale[Any]
    style: AxisStyle | None = None
    tick_options: TickGenerationOptions[Any] | None = None
    tick_generator: TickGenerator[Any] | None = None
    min_thickness: float | None = None
    max_thickness: float | None = None

    def __post_init__(self) -> None:
        if not self.id.strip():
            raise ValueError("axis id must be non-empty")

    def layout_request(self) -> AxisLayoutRequest:
        return AxisLayoutRequest(
            orientation=self.orientation,
            thickness=self.thickness,
            min_thickness=self.min_thickness,
            max_thickness=self.max_thickness,
        )


@dataclass(frozen=True)
class AxisRenderModel:
    id: str
    orientation: AxisOrientation
    layout: AxisLayout
    style: AxisStyle
    ticks: tuple[AxisTick[Any], ...]


@dataclass(frozen=True)
class AxisRenderSurface:
    plot_area: LayoutRect
    axes: tuple[AxisRenderModel, ...]

    def axis(self, axis_id: str) -> AxisRenderModel | None:
        for model in self.axes:
            if model.id == axis_id:
                return model
        return None


class AxisComposer:
    """Arranges axis bands and attaches generated ticks to each axis."""

    def __init__(
        self,
        engine: ChartLayoutEngine | None = None,
        registry: TickGeneratorRegistry | None = None,
    ) -> None:
        self._engine = engine or ChartLayoutEngine()
        self._registry = registry or TickGeneratorRegistry.create_default()

    def compose(
        self,
        width: float,
        height: float,
        device_pixel_ratio: float,
        axes: Sequence[AxisDefinition],
    ) -> AxisRenderSurface:
        request = ChartLayoutRequest(
            viewport_width=width,
            viewport_height=height,
            device_pixel_ratio=device_pixel_ratio,
            axes=tuple(axis.layout_request() for axis in axes),
        )
        result = self._engine.arrange(request)

        models: list[AxisRenderModel] = []
        for axis in axes:
            layout = result.axis(axis.orientation)
            if layout is None:
                continue
            if axis.tick_generator is not None:
                ticks = axis.tick_generator.generate(axis.scale, axis.tick_options)
            else:
                ticks = self._registry.generate(axis.scale, axis.tick_options)
            models.append(
                AxisRenderModel(
                    id=axis.id,
                    orientation=axis.orientation,
                    layout=layout,
                    style=axis.style or DEFAULT_THEME.axis,
                    ticks=tuple(ticks),
                )
            )
        return AxisRenderSurface(plot_area=result.plot_area, axes=tuple(models))


@dataclass(frozen=True)
class AxisLineVisual:
    x1: float
    y1: float
    x2: float
    y2: float
    color: RgbaColor


@dataclass(frozen=True)
class AxisTickVisual:
    x1: float
    y1: float
    x2: float
    y2: float
    color: RgbaColor


@dataclass(frozen=True)
class AxisLabelVisual:
    x: float
    y: float
    text: str
    typography: ChartTypography
    orientation: AxisOrientation
    horizontal_alignment: TextAlignment
    vertical_alignment: TextAlignment
    color: RgbaColor


@dataclass(frozen=True)
class AxisVisual:
    model: AxisRenderModel
    axis_line: AxisLineVisual
    ticks: tuple[AxisTickVisual, ...]
    labels: tuple[AxisLabelVisual, ...]


def _axis_line(orientation: AxisOrientation, bounds: LayoutRect, color: RgbaColor) -> AxisLineVisual:
    if orientation == "left":
        return AxisLineVisual(bounds.right, bounds.y, bounds.right, bounds.bottom, color)
    if orientation == "right":
        return AxisLineVisual(bounds.x, bounds.y, bounds.x, bounds.bottom, color)
    if orientation == "top":
        return AxisLineVisual(bounds.x, bounds.bottom, bounds.right, bounds.bottom, color)
    if orientation == "bottom":
        return AxisLineVisual(bounds.x, bounds.y, bounds.right, bounds.y, color)
    raise ValueError(f"unknown axis orientation: {orientation!r}")


def _tick_visual(
    orientation: AxisOrientation,
    bounds: LayoutRect,
    style: AxisStyle,
    tick: AxisTick[Any],
) -> tuple[AxisTickVisual, AxisLabelVisual]:
    color = style.tick_color
    reach = style.tick_length + style.label_margin
    if orientation in ("left", "right"):
        y = bounds.bottom - tick.unit_position * bounds.height
        if orientation == "left":
            x = bounds.right
            mark = AxisTickVisual(x, y, x - style.tick_length, y, color)
            label = AxisLabelVisual(x - reach, y, tick.label, style.label_typography, orientation, "end", "center", color)
        else:
            x = bounds.x
            mark = AxisTickVisual(x, y, x + style.tick_length, y, color)
            label = AxisLabelVisual(x + reach, y, tick.label, style.label_typography, orientation, "start", "center", color)
        return mark, label

    x = bounds.x + tick.unit_position * bounds.width
    if orientation == "top":
        y = bounds.bottom
        mark = AxisTickVisual(x, y, x, y - style.tick_length, color)
        label = AxisLabelVisual(x, y - reach, tick.label, style.label_typography, orientation, "center", "end", color)
    elif orientation == "bottom":
        y = bounds.y
        mark = AxisTickVisual(x, y, x, y + style.tick_length, color)
        label = AxisLabelVisual(x, y + reach, tick.label, style.label_typography, orientation, "center", "start", color)
    else:
        raise ValueError(f"unknown axis orientation: {orientation!r}")
    return mark, label


def build_axis_visual(model: AxisRenderModel) -> AxisVisual:
    bounds = model.layout.bounds
    marks: list[AxisTickVisual] = []
    labels: list[AxisLabelVisual] = []
    for tick in model.ticks:
        mark, label = _tick_visual(model.orientation, bounds, model.style, tick)
        marks.append(mark)
        labels.append(label)
    return AxisVisual(
        model=model,
        axis_line=_axis_line(model.orientation, bounds, model.style.line_color),
        ticks=tuple(marks),
        labels=tuple(labels),
    )


def build_axis_visuals(surface: AxisRenderSurface) -> tuple[AxisVisual, ...]:
    return tuple(build_axis_visual(model) for model in surface.axes)
