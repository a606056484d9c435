from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, TypeVar

import math


T = TypeVar("T")


@dataclass(frozen=True)
class Range(Generic[T]):
    start: T
    end: T

    def normalize(self) -> "Range[T]":
        if self.end < self.start:  # type: ignore[operator]
            return Range(self.end, self.start)
        return self


@dataclass(frozen=True)
class LayoutRect:
    x: float
    y: float
    width: float
    height: float

    def __post_init__(self) -> None:
        if self.width < 0 or self.height < 0:
            raise ValueError("LayoutRect width/height must be >= 0")

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height

    def contains(self, x: float, y: float) -> bool:
        return self.x <= x <= self.right and self.y <= y <= self.bottom


@dataclass(frozen=True)
class ChartPoint:
    x: float
    y: float


def require_non_negative(name: str, value: float) -> float:
    value = float(value)
    if not math.isfinite(value) or value < 0:
        raise ValueError(f"{name} must be finite and >= 0")
    return value


def clamp(value: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, value))
