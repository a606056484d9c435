from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Generic, TypeVar

import math

from chart_layout.primitives import ChartPoint, LayoutRect
from chart_layout.scales import Scale


TX = TypeVar("TX")
TY = TypeVar("TY")


@dataclass(frozen=True)
class UnitRange:
    start: float
    end: float

    def from_unit(self, unit: float) -> float:
        return self.start + unit * (self.end - self.start)

    def to_unit(self, value: float) -> float:
        span = self.end - self.start
        if span == 0.0:
            return 0.0
        return (value - self.start) / span


@dataclass(frozen=True)
class CoordinateTransformer(Generic[TX, TY]):
    """Converts between data-domain coordinates and render units."""

    x_scale: Scale[TX]
    y_scale: Scale[TY]
    x_range: UnitRange
    y_range: UnitRange
    invert_y: bool = True

    @classmethod
    def for_size(
        cls,
        x_scale: Scale[Any],
        y_scale: Scale[Any],
        width: float,
        height: float,
        *,
        invert_y: bool = True,
    ) -> "CoordinateTransformer[Any, Any]":
        return cls(x_scale, y_scale, UnitRange(0.0, width), UnitRange(0.0, height), invert_y)

    @classmethod
    def for_rect(
        cls,
        x_scale: Scale[Any],
        y_scale: Scale[Any],
        rect: LayoutRect,
        *,
        invert_y: bool = True,
    ) -> "CoordinateTransformer[Any, Any]":
        return cls(
            x_scale,
            y_scale,
            UnitRange(rect.x, rect.right),
            UnitRange(rect.y, rect.bottom),
            invert_y,
        )

    def project_x(self, x: TX) -> float:
        return self.x_range.from_unit(self.x_scale.project(x))

    def project_y(self, y: TY) -> float:
        uy = self.y_scale.project(y)
        if self.invert_y:
            uy = 1.0 - uy
        return self.y_range.from_unit(uy)

    def project(self, x: TX, y: TY) -> ChartPoint:
        return ChartPoint(self.project_x(x), self.project_y(y))

    def unproject(self, x: float, y: float) -> tuple[TX, TY]:
        if not (math.isfinite(x) and math.isfinite(y)):
            raise ValueError("point coordinates must be finite")
        ux = self.x_range.to_unit(x)
        uy = self.y_range.to_unit(y)
        if self.invert_y:
            uy = 1.0 - uy
        return (self.x_scale.unproject(ux), self.y_scale.unproject(uy))
