from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Generic, Hashable, Literal, Protocol, Sequence, TypeVar

import math

from chart_layout.errors import CategoryNotFoundError, ScaleDomainError
from chart_layout.primitives import Range, clamp


ScaleKind = Literal["linear", "logarithmic", "time", "ordinal"]

T = TypeVar("T")

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
_SMALLEST_POSITIVE = math.ulp(0.0)


class Scale(Protocol[T]):
    """Maps a domain value onto the unit interval and back."""

    @property
    def kind(self) -> ScaleKind:
        ...

    @property
    def clamp_to_domain(self) -> bool:
        ...

    @property
    def domain_type(self) -> type:
        ...

    @property
    def domain(self) -> Range[T]:
        ...

    def project(self, value: T) -> float:
        ...

    def try_project(self, value: T) -> tuple[bool, float]:
        ...

    def unproject(self, unit: float) -> T:
        ...


def _check_unit(unit: float) -> float:
    unit = float(unit)
    if not math.isfinite(unit):
        raise ValueError(f"unit value must be finite, got {unit!r}")
    return unit


def _linear_ratio(value: float, start: float, span: float) -> float:
    if span == 0.0:
        return 0.0
    return (value - start) / span


@dataclass(frozen=True)
class LinearScale:
    start: float
    end: float
    clamp_to_domain: bool = True

    def __post_init__(self) -> None:
        if not (math.isfinite(self.start) and math.isfinite(self.end)):
            raise ScaleDomainError("linear scale bounds must be finite")
        object.__setattr__(self, "start", float(self.start))
        object.__setattr__(self, "end", float(self.end))

    @property
    def kind(self) -> ScaleKind:
        return "linear"

    @property
    def domain_type(self) -> type:
        return float

    @property
    def domain(self) -> Range[float]:
        return Range(self.start, self.end)

    def project(self, value: float) -> float:
        value = float(value)
        lo, hi = min(self.start, self.end), max(self.start, self.end)
        if not math.isfinite(value):
            if not self.clamp_to_domain:
                return math.nan
            value = hi if value == math.inf else lo
        elif self.clamp_to_domain:
            value = clamp(value, lo, hi)
        return _linear_ratio(value, self.start, self.end - self.start)

    def try_project(self, value: float) -> tuple[bool, float]:
        unit = self.project(value)
        return math.isfinite(unit), unit

    def unproject(self, unit: float) -> float:
        unit = _check_unit(unit)
        if self.clamp_to_domain:
            unit = clamp(unit, 0.0, 1.0)
        return self.start + unit * (self.end - self.start)


@dataclass(frozen=True)
class LogarithmicScale:
    start: float
    end: float
    log_base: float = 10.0
    clamp_to_domain: bool = True
    _log_start: float = field(init=False, repr=False, compare=False)
    _log_span: float = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        if not math.isfinite(self.log_base) or self.log_base <= 0 or self.log_base == 1.0:
            raise ScaleDomainError(f"logarithm base must be positive and not equal to 1, got {self.log_base!r}")
        if not (math.isfinite(self.start) and math.isfinite(self.end)):
            raise ScaleDomainError("logarithmic scale bounds must be finite")
        if self.start <= 0 or self.end <= 0:
            raise ScaleDomainError("logarithmic scale requires a strictly positive domain")
        log_start = self._log(self.start)
        object.__setattr__(self, "_log_start", log_start)
        object.__setattr__(self, "_log_span", self._log(self.end) - log_start)

    @property
    def kind(self) -> ScaleKind:
        return "logarithmic"

    @property
    def domain_type(self) -> type:
        return float

    @property
    def domain(self) -> Range[float]:
        return Range(float(self.start), float(self.end))

    def _log(self, value: float) -> float:
        if self.log_base == 10.0:
            return math.log10(value)
        if self.log_base == 2.0:
            return math.log2(value)
        return math.log(value, self.log_base)

    def _clamp_positive(self, value: float) -> float:
        lo, hi = min(self.start, self.end), max(self.start, self.end)
        positive_min = max(lo, _SMALLEST_POSITIVE)
        if math.isnan(value) or value < positive_min:
            return positive_min
        return min(value, hi)

    def project(self, value: float) -> float:
        value = float(value)
        if value <= 0 or not math.isfinite(value):
            if not self.clamp_to_domain:
                return math.nan
            value = self._clamp_positive(value)

        log_value = self._log(value)
        if self.clamp_to_domain:
            log_end = self._log_start + self._log_span
            log_value = clamp(log_value, min(self._log_start, log_end), max(self._log_start, log_end))
        if self._log_span == 0.0:
            return 0.0
        return (log_value - self._log_start) / self._log_span

    def try_project(self, value: float) -> tuple[bool, float]:
        unit = self.project(value)
        return math.isfinite(unit), unit

    def unproject(self, unit: float) -> float:
        unit = _check_unit(unit)
        if self.clamp_to_domain:
            unit = clamp(unit, 0.0, 1.0)
        if self._log_span == 0.0:
            return float(self.start)
        try:
            return math.pow(self.log_base, self._log_start + unit * self._log_span)
        except OverflowError:
            return math.inf


def to_epoch_ms(value: datetime) -> float:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    delta = value - _EPOCH
    return (delta.days * 86_400 + delta.seconds) * 1000.0 + delta.microseconds / 1000.0


def from_epoch_ms(ms: float, *, like: datetime | None = None) -> datetime:
    out = _EPOCH + timedelta(milliseconds=ms)
    if like is None:
        return out
    if like.tzinfo is None:
        return out.replace(tzinfo=None)
    return out.astimezone(like.tzinfo)


@dataclass(frozen=True)
class TimeScale:
    start: datetime
    end: datetime
    clamp_to_domain: bool = True

    @property
    def kind(self) -> ScaleKind:
        return "time"

    @property
    def domain_type(self) -> type:
        return datetime

    @property
    def domain(self) -> Range[datetime]:
        return Range(self.start, self.end)

    def project(self, value: datetime) -> float:
        start_ms = to_epoch_ms(self.start)
        end_ms = to_epoch_ms(self.end)
        value_ms = to_epoch_ms(value)
        if self.clamp_to_domain:
            value_ms = clamp(value_ms, min(start_ms, end_ms), max(start_ms, end_ms))
        return _linear_ratio(value_ms, start_ms, end_ms - start_ms)

    def try_project(self, value: datetime) -> tuple[bool, float]:
        unit = self.project(value)
        return math.isfinite(unit), unit

    def unproject(self, unit: float) -> datetime:
        unit = _check_unit(unit)
        if self.clamp_to_domain:
            unit = clamp(unit, 0.0, 1.0)
        start_ms = to_epoch_ms(self.start)
        span_ms = to_epoch_ms(self.end) - start_ms
        if span_ms == 0.0:
            return self.start
        return from_epoch_ms(start_ms + unit * span_ms, like=self.start)


class OrdinalScale(Generic[T]):
    """Evenly spaced categorical scale; membership lookups fail loud."""

    def __init__(
        self,
        categories: Sequence[T],
        *,
        clamp_to_domain: bool = True,
        key: Callable[[T], Hashable] | None = None,
        domain_type: type | None = None,
    ) -> None:
        values = tuple(categories)
        if not values:
            raise ScaleDomainError("ordinal scale requires at least one category")
        self._key: Callable[[Any], Hashable] = key if key is not None else (lambda v: v)
        lookup: dict[Hashable, int] = {}
        for index, value in enumerate(values):
            k = self._key(value)
            if k in lookup:
                raise ScaleDomainError(f"duplicate ordinal category: {value!r}")
            lookup[k] = index
        self._values = values
        self._lookup = lookup
        self._clamp_to_domain = bool(clamp_to_domain)
        self._domain_type = domain_type if domain_type is not None else type(values[0])

    def __repr__(self) -> str:
        return f"OrdinalScale(categories={list(self._values)!r}, clamp_to_domain={self._clamp_to_domain})"

    @property
    def kind(self) -> ScaleKind:
        return "ordinal"

    @property
    def clamp_to_domain(self) -> bool:
        return self._clamp_to_domain

    @property
    def domain_type(self) -> type:
        return self._domain_type

    @property
    def domain(self) -> Range[T]:
        return Range(self._values[0], self._values[-1])

    @property
    def categories(self) -> tuple[T, ...]:
        return self._values

    def unit_for_index(self, index: int) -> float:
        count = len(self._values)
        if count == 1:
            return 0.0
        return index / float(count - 1)

    def try_project(self, value: T) -> tuple[bool, float]:
        try:
            index = self._lookup.get(self._key(value))
        except TypeError:
            # unhashable value
            index = None
        if index is None:
            return False, math.nan
        return True, self.unit_for_index(index)

    def project(self, value: T) -> float:
        ok, unit = self.try_project(value)
        if not ok:
            raise CategoryNotFoundError(value)
        return unit

    def unproject(self, unit: float) -> T:
        unit = _check_unit(unit)
        if self._clamp_to_domain:
            unit = clamp(unit, 0.0, 1.0)
        count = len(self._values)
        if count == 1:
            return self._values[0]
        scaled = unit * (count - 1)
        # round half away from zero
        index = int(math.floor(abs(scaled) + 0.5)) * (1 if scaled >= 0 else -1)
        return self._values[int(clamp(index, 0, count - 1))]
