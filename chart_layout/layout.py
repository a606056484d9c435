from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal

import math

from chart_layout.primitives import LayoutRect, require_non_negative
from chart_layout.styling import DARK_THEME, LIGHT_THEME, ChartTheme


AxisOrientation = Literal["left", "right", "top", "bottom"]

AXIS_ORIENTATIONS: tuple[AxisOrientation, ...] = ("left", "right", "top", "bottom")


def align_to_pixel(value: float, dpr: float) -> float:
    """Round ``value`` up to the next whole device pixel, in logical units."""

    return math.ceil(value * dpr) / dpr


@dataclass(frozen=True)
class AxisLayoutRequest:
    orientation: AxisOrientation
    thickness: float
    min_thickness: float | None = None
    max_thickness: float | None = None

    def __post_init__(self) -> None:
        if self.orientation not in AXIS_ORIENTATIONS:
            raise ValueError(f"unknown axis orientation: {self.orientation!r}")
        thickness = require_non_negative("axis thickness", self.thickness)
        lo = None if self.min_thickness is None else require_non_negative("axis min_thickness", self.min_thickness)
        hi = None if self.max_thickness is None else require_non_negative("axis max_thickness", self.max_thickness)
        if lo is not None and hi is not None and lo > hi:
            raise ValueError("axis min_thickness must be <= max_thickness")
        if lo is not None:
            thickness = max(thickness, lo)
        if hi is not None:
            thickness = min(thickness, hi)
        object.__setattr__(self, "thickness", thickness)
        object.__setattr__(self, "min_thickness", lo)
        object.__setattr__(self, "max_thickness", hi)


@dataclass(frozen=True)
class AxisLayout:
    orientation: AxisOrientation
    bounds: LayoutRect
    actual_thickness: float


@dataclass(frozen=True)
class ChartLayoutRequest:
    viewport_width: float
    viewport_height: float
    device_pixel_ratio: float = 1.0
    axes: tuple[AxisLayoutRequest, ...] = ()

    def __post_init__(self) -> None:
        require_non_negative("viewport width", self.viewport_width)
        require_non_negative("viewport height", self.viewport_height)
        if not math.isfinite(self.device_pixel_ratio) or self.device_pixel_ratio <= 0:
            raise ValueError("device_pixel_ratio must be finite and > 0")
        object.__setattr__(self, "axes", tuple(self.axes))


@dataclass(frozen=True)
class ChartLayoutResult:
    plot_area: LayoutRect
    axes: tuple[AxisLayout, ...] = ()

    def axis(self, orientation: AxisOrientation) -> AxisLayout | None:
        for layout in self.axes:
            if layout.orientation == orientation:
                return layout
        return None


class ChartLayoutEngine:
    """Carves the plot rectangle and axis bands out of a viewport."""

    def arrange(self, request: ChartLayoutRequest) -> ChartLayoutResult:
        width = float(request.viewport_width)
        height = float(request.viewport_height)
        dpr = float(request.device_pixel_ratio)

        # first request per orientation wins
        by_orientation: dict[AxisOrientation, AxisLayoutRequest] = {}
        for axis in request.axes:
            by_orientation.setdefault(axis.orientation, axis)

        left = self._resolve_thickness(by_orientation.get("left"), dpr)
        right = self._resolve_thickness(by_orientation.get("right"), dpr)
        top = self._resolve_thickness(by_orientation.get("top"), dpr)
        bottom = self._resolve_thickness(by_orientation.get("bottom"), dpr)

        plot_w = max(0.0, width - left - right)
        plot_h = max(0.0, height - top - bottom)
        plot_area = LayoutRect(left, top, plot_w, plot_h)

        bands: dict[AxisOrientation, LayoutRect] = {
            "left": LayoutRect(0.0, top, left, plot_h),
            "right": LayoutRect(width - right, top, right, plot_h),
            "top": LayoutRect(left, 0.0, plot_w, top),
            "bottom": LayoutRect(left, height - bottom, plot_w, bottom),
        }
        thickness = {"left": left, "right": right, "top": top, "bottom": bottom}
        axes = tuple(
            AxisLayout(orientation=o, bounds=bands[o], actual_thickness=thickness[o])
            for o in AXIS_ORIENTATIONS
            if o in by_orientation
        )
        return ChartLayoutResult(plot_area=plot_area, axes=axes)

    @staticmethod
    def _resolve_thickness(request: AxisLayoutRequest | None, dpr: float) -> float:
        if request is None:
            return 0.0
        thickness = align_to_pixel(request.thickness, dpr)
        if request.min_thickness is not None:
            thickness = max(thickness, align_to_pixel(request.min_thickness, dpr))
        if request.max_thickness is not None:
            thickness = min(thickness, align_to_pixel(request.max_thickness, dpr))
        return thickness


@dataclass(frozen=True)
class ChartLayoutPreset:
    id: str
    display_name: str
    description: str
    theme: ChartTheme = field(compare=False)
    left: float
    bottom: float
    right: float | None = None
    top: float | None = None

    def axis_requests(self) -> tuple[AxisLayoutRequest, ...]:
        axes = [
            AxisLayoutRequest("left", self.left, min_thickness=self.left * 0.75, max_thickness=self.left * 1.1),
            AxisLayoutRequest("bottom", self.bottom, min_thickness=self.bottom * 0.75, max_thickness=self.bottom * 1.1),
        ]
        if self.right is not None:
            axes.append(AxisLayoutRequest("right", self.right, min_thickness=self.right * 0.6))
        if self.top is not None:
            axes.append(AxisLayoutRequest("top", self.top, min_thickness=self.top * 0.6))
        return tuple(axes)

    def arrange(self, request: ChartLayoutRequest, engine: ChartLayoutEngine | None = None) -> ChartLayoutResult:
        """Arrange the viewport of ``request`` with this preset's axes; its own axes are ignored."""

        adjusted = ChartLayoutRequest(
            viewport_width=request.viewport_width,
            viewport_height=request.viewport_height,
            device_pixel_ratio=request.device_pixel_ratio,
            axes=self.axis_requests(),
        )
        return (engine or ChartLayoutEngine()).arrange(adjusted)


LAYOUT_PRESETS: tuple[ChartLayoutPreset, ...] = (
    ChartLayoutPreset(
        id="single-pane-dark",
        display_name="Single Pane (Dark)",
        description="Responsive layout tuned for dark dashboards with generous left axis padding.",
        theme=DARK_THEME,
        left=72.0,
        bottom=60.0,
    ),
    ChartLayoutPreset(
        id="single-pane-light",
        display_name="Single Pane (Light)",
        description="Balanced light layout with compact axes that favour content over chrome.",
        theme=LIGHT_THEME,
        left=56.0,
        bottom=48.0,
    ),
    ChartLayoutPreset(
        id="split-pane-analytics",
        display_name="Split Pane (Analytics)",
        description="Two-pane layout reserving room for comparative indicators under the main series.",
        theme=DARK_THEME,
        left=68.0,
        bottom=52.0,
        top=32.0,
    ),
)


def layout_preset(preset_id: str) -> ChartLayoutPreset:
    for preset in LAYOUT_PRESETS:
        if preset.id == preset_id:
            return preset
    raise KeyError(f"unknown layout preset: {preset_id}")
