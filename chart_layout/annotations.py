from __future__ import annotations

from dataclasses import dataclass
from enum import Flag
from typing import ClassVar, Literal, Protocol, Sequence, Union

import math

from chart_layout.primitives import ChartPoint, LayoutRect, clamp, require_non_negative
from chart_layout.styling import RgbaColor


class SnapMode(Flag):
    """Whether a renderer should align annotation coordinates to generated ticks."""

    NONE = 0
    TIME_TO_TICKS = 1
    VALUE_TO_TICKS = 2
    BOTH = TIME_TO_TICKS | VALUE_TO_TICKS


CalloutPlacement = Literal["auto", "top_left", "top_right", "bottom_left", "bottom_right"]
CALLOUT_PLACEMENTS = ("auto", "top_left", "top_right", "bottom_left", "bottom_right")


def _require_finite(name: str, value: float) -> float:
    value = float(value)
    if not math.isfinite(value):
        raise ValueError(f"{name} must be finite")
    return value


class _PaneTargeted(Protocol):
    target_pane_id: str | None
    snap_mode: SnapMode


def _check_common(annotation: _PaneTargeted) -> None:
    target = annotation.target_pane_id
    if target is not None and not target.strip():
        object.__setattr__(annotation, "target_pane_id", None)
    if not isinstance(annotation.snap_mode, SnapMode):
        raise ValueError("snap_mode must be a SnapMode")


@dataclass(frozen=True)
class HorizontalLineAnnotation:
    kind: ClassVar[str] = "horizontal_line"

    value: float
    label: str | None = None
    color: RgbaColor | None = None
    thickness: float = 1.0
    target_pane_id: str | None = None
    snap_mode: SnapMode = SnapMode.NONE

    def __post_init__(self) -> None:
        _require_finite("value", self.value)
        require_non_negative("thickness", self.thickness)
        _check_common(self)


@dataclass(frozen=True)
class VerticalLineAnnotation:
    kind: ClassVar[str] = "vertical_line"

    timestamp_seconds: float
    label: str | None = None
    color: RgbaColor | None = None
    thickness: float = 1.0
    target_pane_id: str | None = None
    snap_mode: SnapMode = SnapMode.NONE

    def __post_init__(self) -> None:
        _require_finite("timestamp_seconds", self.timestamp_seconds)
        require_non_negative("thickness", self.thickness)
        _check_common(self)


@dataclass(frozen=True)
class ValueZoneAnnotation:
    kind: ClassVar[str] = "value_zone"

    min_value: float
    max_value: float
    label: str | None = None
    fill: RgbaColor | None = None
    border: RgbaColor | None = None
    border_thickness: float = 0.0
    target_pane_id: str | None = None
    snap_mode: SnapMode = SnapMode.NONE

    def __post_init__(self) -> None:
        _require_finite("min_value", self.min_value)
        _require_finite("max_value", self.max_value)
        require_non_negative("border_thickness", self.border_thickness)
        _check_common(self)

    @property
    def bounds(self) -> tuple[float, float]:
        return (min(self.min_value, self.max_value), max(self.min_value, self.max_value))


@dataclass(frozen=True)
class GradientZoneAnnotation:
    kind: ClassVar[str] = "gradient_zone"

    min_value: float
    max_value: float
    start_color: RgbaColor
    end_color: RgbaColor
    fill_opacity: float = 1.0
    border_thickness: float = 0.0
    label: str | None = None
    target_pane_id: str | None = None
    snap_mode: SnapMode = SnapMode.NONE

    def __post_init__(self) -> None:
        _require_finite("min_value", self.min_value)
        _require_finite("max_value", self.max_value)
        if self.max_value <= self.min_value:
            raise ValueError("gradient zone max_value must be greater than min_value")
        if not 0.0 <= _require_finite("fill_opacity", self.fill_opacity) <= 1.0:
            raise ValueError("fill_opacity must be within [0, 1]")
        require_non_negative("border_thickness", self.border_thickness)
        _check_common(self)


@dataclass(frozen=True)
class TimeRangeAnnotation:
    kind: ClassVar[str] = "time_range"

    start_seconds: float
    end_seconds: float
    label: str | None = None
    fill: RgbaColor | None = None
    border: RgbaColor | None = None
    border_thickness: float = 0.0
    target_pane_id: str | None = None
    snap_mode: SnapMode = SnapMode.NONE

    def __post_init__(self) -> None:
        _require_finite("start_seconds", self.start_seconds)
        _require_finite("end_seconds", self.end_seconds)
        require_non_negative("border_thickness", self.border_thickness)
        _check_common(self)

    @property
    def bounds(self) -> tuple[float, float]:
        return (min(self.start_seconds, self.end_seconds), max(self.start_seconds, self.end_seconds))


@dataclass(frozen=True)
class CalloutAnnotation:
    kind: ClassVar[str] = "callout"

    timestamp_seconds: float
    value: float
    label: str
    color: RgbaColor | None = None
    text_color: RgbaColor | None = None
    border: RgbaColor | None = None
    background: RgbaColor | None = None
    padding: float = 6.0
    pointer_length: float = 12.0
    placement: CalloutPlacement = "auto"
    target_pane_id: str | None = None
    snap_mode: SnapMode = SnapMode.NONE

    def __post_init__(self) -> None:
        _require_finite("timestamp_seconds", self.timestamp_seconds)
        _require_finite("value", self.value)
        require_non_negative("padding", self.padding)
        require_non_negative("pointer_length", self.pointer_length)
        if self.placement not in CALLOUT_PLACEMENTS:
            raise ValueError(f"unknown callout placement: {self.placement!r}")
        _check_common(self)


ChartAnnotation = Union[
    HorizontalLineAnnotation,
    VerticalLineAnnotation,
    ValueZoneAnnotation,
    GradientZoneAnnotation,
    TimeRangeAnnotation,
    CalloutAnnotation,
]

ANNOTATION_TYPES: tuple[type, ...] = (
    HorizontalLineAnnotation,
    VerticalLineAnnotation,
    ValueZoneAnnotation,
    GradientZoneAnnotation,
    TimeRangeAnnotation,
    CalloutAnnotation,
)


def snap_to_ticks(value: float, range_min: float, range_max: float, tick_positions: Sequence[float]) -> float:
    """Move ``value`` onto the nearest tick, comparing in unit space."""

    span = range_max - range_min
    if not tick_positions or span == 0.0:
        return value
    target = (value - range_min) / span
    best = min(tick_positions, key=lambda unit: abs(unit - target))
    return range_min + best * span


def snap_value(
    value: float,
    snap_mode: SnapMode,
    range_min: float,
    range_max: float,
    tick_positions: Sequence[float],
) -> float:
    if SnapMode.VALUE_TO_TICKS not in snap_mode:
        return value
    return snap_to_ticks(value, range_min, range_max, tick_positions)


def snap_time(
    timestamp_seconds: float,
    snap_mode: SnapMode,
    range_start_seconds: float,
    range_end_seconds: float,
    tick_positions: Sequence[float],
) -> float:
    if SnapMode.TIME_TO_TICKS not in snap_mode:
        return timestamp_seconds
    return snap_to_ticks(timestamp_seconds, range_start_seconds, range_end_seconds, tick_positions)


def value_to_y(value: float, pane_bounds: LayoutRect, value_min: float, value_max: float) -> float:
    span = value_max - value_min
    if span == 0.0:
        return pane_bounds.y + pane_bounds.height / 2.0
    unit = clamp((value - value_min) / span, 0.0, 1.0)
    return pane_bounds.y + (1.0 - unit) * pane_bounds.height


def time_to_x(timestamp_seconds: float, plot_area: LayoutRect, range_start: float, range_end: float) -> float:
    span = range_end - range_start
    if span == 0.0:
        return plot_area.x
    unit = clamp((timestamp_seconds - range_start) / span, 0.0, 1.0)
    return plot_area.x + unit * plot_area.width


def choose_callout_placement(
    anchor: ChartPoint,
    plot_area: LayoutRect,
    pane_bounds: LayoutRect,
) -> CalloutPlacement:
    left = anchor.x > plot_area.x + plot_area.width * 0.66
    below = anchor.y > pane_bounds.y + pane_bounds.height * 0.5
    if below:
        return "bottom_left" if left else "bottom_right"
    return "top_left" if left else "top_right"


def position_callout(
    placement: CalloutPlacement,
    anchor: ChartPoint,
    width: float,
    height: float,
    pointer_length: float,
    plot_area: LayoutRect,
    pane_bounds: LayoutRect,
) -> LayoutRect:
    """Place a callout box next to ``anchor`` and keep it inside the pane."""

    if placement == "auto":
        placement = choose_callout_placement(anchor, plot_area, pane_bounds)
    if placement in ("top_left", "bottom_left"):
        x = anchor.x - pointer_length - width
    else:
        x = anchor.x + pointer_length
    if placement in ("bottom_left", "bottom_right"):
        y = anchor.y + pointer_length
    else:
        y = anchor.y - pointer_length - height

    min_x, max_x = plot_area.x, max(plot_area.x, plot_area.right - width)
    min_y, max_y = pane_bounds.y, max(pane_bounds.y, pane_bounds.bottom - height)
    return LayoutRect(clamp(x, min_x, max_x), clamp(y, min_y, max_y), width, height)


def nearest_point_on_rect(rect: LayoutRect, point: ChartPoint) -> ChartPoint:
    return ChartPoint(clamp(point.x, rect.x, rect.right), clamp(point.y, rect.y, rect.bottom))
