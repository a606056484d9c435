from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from decimal import Decimal, InvalidOperation
from typing import Any, Callable, Generic, Hashable, Iterable, Protocol, Sequence, TypeVar

import logging

import numpy as np

from chart_layout.errors import ScaleMismatchError, TickGeneratorNotFoundError
from chart_layout.scales import OrdinalScale, Scale, ScaleKind, from_epoch_ms, to_epoch_ms


LOGGER = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_TARGET_TICK_COUNT = 6

_MS_PER_SECOND = 1000
_MS_PER_DAY = 86_400 * _MS_PER_SECOND
# 0001-01-01 to 1970-01-01
_CLOCK_ORIGIN_MS = 719_162 * _MS_PER_DAY

CANDIDATE_TIME_INTERVALS: tuple[timedelta, ...] = (
    timedelta(seconds=1),
    timedelta(seconds=5),
    timedelta(seconds=15),
    timedelta(seconds=30),
    timedelta(minutes=1),
    timedelta(minutes=5),
    timedelta(minutes=15),
    timedelta(minutes=30),
    timedelta(hours=1),
    timedelta(hours=3),
    timedelta(hours=6),
    timedelta(hours=12),
    timedelta(days=1),
    timedelta(days=2),
    timedelta(days=7),
    timedelta(days=14),
    timedelta(days=30),
    timedelta(days=90),
    timedelta(days=180),
    timedelta(days=365),
)


@dataclass(frozen=True)
class AxisTick(Generic[T]):
    value: T
    unit_position: float
    label: str


@dataclass(frozen=True)
class TickGenerationOptions(Generic[T]):
    target_tick_count: int = DEFAULT_TARGET_TICK_COUNT
    label_formatter: Callable[[T], str] | None = None

    def __post_init__(self) -> None:
        if self.target_tick_count <= 0:
            raise ValueError("target_tick_count must be > 0")


class TickGenerator(Protocol[T]):
    domain_type: type

    def generate(self, scale: Scale[T], options: TickGenerationOptions[T] | None = None) -> list[AxisTick[T]]:
        ...


def nice_number(value: float, *, round_result: bool) -> float:
    """Snap ``value`` onto the ``{1, 2, 2.5, 5, 10} x 10^k`` ladder."""

    if not np.isfinite(value) or value <= 0:
        return 0.0
    exp = np.floor(np.log10(value))
    frac = value / (10**exp)

    if round_result:
        if frac < 1.5:
            nice_frac = 1.0
        elif frac < 3.0:
            nice_frac = 2.0
        elif frac < 4.5:
            nice_frac = 2.5
        elif frac < 7.0:
            nice_frac = 5.0
        else:
            nice_frac = 10.0
    else:
        if frac <= 1.0:
            nice_frac = 1.0
        elif frac <= 2.0:
            nice_frac = 2.0
        elif frac <= 2.5:
            nice_frac = 2.5
        elif frac <= 5.0:
            nice_frac = 5.0
        else:
            nice_frac = 10.0

    return float(nice_frac * (10**exp))


def nice_tick_values(vmin: float, vmax: float, target: int) -> tuple[np.ndarray, float]:
    """Return nice tick values covering ``[vmin, vmax]`` and their spacing."""

    if target <= 0:
        raise ValueError("target must be > 0")
    lo, hi = min(vmin, vmax), max(vmin, vmax)
    if lo == hi:
        return np.asarray([lo], dtype=np.float64), 0.0

    span = nice_number(hi - lo, round_result=False)
    step = nice_number(span / max(target - 1, 1), round_result=True)
    if step <= 0:
        return np.asarray([lo], dtype=np.float64), 0.0
    tick_min = np.floor(lo / step) * step
    tick_max = np.ceil(hi / step) * step

    ticks = np.arange(tick_min, tick_max + 0.5 * step, step, dtype=np.float64)
    # Normalize floating-point drift so values like -4.44e-16 become 0.
    ticks = np.rint(ticks / step) * step
    ticks[np.isclose(ticks, 0.0, rtol=0.0, atol=step * 1e-9)] = 0.0
    return ticks, step


def format_tick(value: float, *, step: float | None = None) -> str:
    if not np.isfinite(value):
        return str(value)
    if step is not None and np.isfinite(step) and step > 0 and abs(value) <= step * 1e-9:
        value = 0.0
    abs_v = abs(value)
    decimals = _decimals_from_step(step) if step is not None else 6
    if abs_v != 0 and (abs_v >= 1e6 or (step is not None and 0 < abs(step) < 1e-4) or abs_v < 1e-6):
        return f"{value:.4e}"

    d = Decimal(str(value))
    quant = Decimal("1").scaleb(-decimals)
    try:
        q = d.quantize(quant)
    except InvalidOperation:
        q = d
    out = format(q, "f")
    if "." in out:
        out = out.rstrip("0").rstrip(".")
    if out == "-0":
        out = "0"
    return out


def format_time_tick(value: datetime) -> str:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).strftime("%Y-%m-%d %H:%M:%SZ")


def _decimals_from_step(step: float | None) -> int:
    if step is None or step <= 0 or not np.isfinite(step):
        return 6
    d = Decimal(str(step)).normalize()
    exp = d.as_tuple().exponent
    decimals = max(0, -int(exp))
    return min(12, decimals)


class LinearTickGenerator:
    """Nice-number ticks for numeric scales (linear and logarithmic)."""

    domain_type: type = float

    def generate(
        self,
        scale: Scale[float],
        options: TickGenerationOptions[float] | None = None,
    ) -> list[AxisTick[float]]:
        options = options or TickGenerationOptions()
        domain = scale.domain.normalize()
        values, step = nice_tick_values(float(domain.start), float(domain.end), options.target_tick_count)
        ticks: list[AxisTick[float]] = []
        for raw in values.tolist():
            value = float(raw)
            label = (
                options.label_formatter(value)
                if options.label_formatter is not None
                else format_tick(value, step=step if step > 0 else None)
            )
            ticks.append(AxisTick(value=value, unit_position=scale.project(value), label=label))
        return ticks


def select_time_interval(span: timedelta, target_ticks: int) -> timedelta:
    total_seconds = span.total_seconds()
    if total_seconds <= 0:
        return timedelta(seconds=1)

    for candidate in CANDIDATE_TIME_INTERVALS:
        if total_seconds / candidate.total_seconds() <= target_ticks * 1.5:
            return candidate

    years = max(1, round(total_seconds / 86_400 / 365 / target_ticks))
    LOGGER.debug("time span %s exceeds candidate intervals; using %d-year ticks", span, years)
    return timedelta(days=365 * years)


def align_time_forward(value_ms: int, interval_ms: int, *, offset_ms: int = 0) -> int:
    """Align ``value_ms`` forward to the next interval boundary on the local clock.

    Boundaries are counted from local midnight of 0001-01-01, so weekly
    ticks land on Mondays.
    """

    if interval_ms <= 0:
        return value_ms
    remainder = (value_ms + offset_ms + _CLOCK_ORIGIN_MS) % interval_ms
    if remainder == 0:
        return value_ms
    return value_ms + (interval_ms - remainder)


class TimeTickGenerator:
    """Ticks on fixed human-friendly intervals; months and years are fixed-width buckets."""

    domain_type: type = datetime

    def generate(
        self,
        scale: Scale[datetime],
        options: TickGenerationOptions[datetime] | None = None,
    ) -> list[AxisTick[datetime]]:
        options = options or TickGenerationOptions()
        domain = scale.domain
        start, end = domain.start, domain.end
        start_ms = int(round(to_epoch_ms(start)))
        end_ms = int(round(to_epoch_ms(end)))
        if end_ms < start_ms:
            start, end = end, start
            start_ms, end_ms = end_ms, start_ms

        if start_ms == end_ms:
            return [AxisTick(value=start, unit_position=scale.project(start), label=self._format(options, start))]

        interval = select_time_interval(timedelta(milliseconds=end_ms - start_ms), options.target_tick_count)
        interval_ms = int(interval.total_seconds() * _MS_PER_SECOND)
        utc_offset = start.utcoffset()
        offset_ms = int(utc_offset.total_seconds() * _MS_PER_SECOND) if utc_offset is not None else 0

        ticks: list[AxisTick[datetime]] = []
        current = align_time_forward(start_ms, interval_ms, offset_ms=offset_ms)
        while current <= end_ms:
            if current >= start_ms:
                value = from_epoch_ms(current, like=start)
                ticks.append(AxisTick(value=value, unit_position=scale.project(value), label=self._format(options, value)))
            current += interval_ms
        return ticks

    @staticmethod
    def _format(options: TickGenerationOptions[datetime], value: datetime) -> str:
        if options.label_formatter is not None:
            return options.label_formatter(value)
        return format_time_tick(value)


class OrdinalTickGenerator(Generic[T]):
    """One tick per category, in declared order."""

    def __init__(self, category_type: type = str) -> None:
        self.domain_type = category_type

    def generate(self, scale: Scale[T], options: TickGenerationOptions[T] | None = None) -> list[AxisTick[T]]:
        if not isinstance(scale, OrdinalScale):
            raise ScaleMismatchError(
                f"OrdinalTickGenerator requires an OrdinalScale, got {type(scale).__name__}"
            )
        options = options or TickGenerationOptions()
        ticks: list[AxisTick[T]] = []
        for index, value in enumerate(scale.categories):
            label = options.label_formatter(value) if options.label_formatter is not None else str(value)
            ticks.append(AxisTick(value=value, unit_position=scale.unit_for_index(index), label=label))
        return ticks


class TickGeneratorRegistry:
    """Resolves tick generators by ``(scale kind, domain type)``."""

    def __init__(self) -> None:
        self._generators: dict[tuple[ScaleKind, Hashable], TickGenerator[Any]] = {}

    def register(
        self,
        kind: ScaleKind,
        generator: TickGenerator[Any],
        *,
        domain_type: type | None = None,
    ) -> "TickGeneratorRegistry":
        key_type = domain_type if domain_type is not None else generator.domain_type
        key = (kind, key_type)
        if key in self._generators:
            LOGGER.debug("replacing tick generator for (%s, %s)", kind, key_type.__name__)
        self._generators[key] = generator
        return self

    def is_registered(self, kind: ScaleKind, domain_type: type) -> bool:
        return (kind, domain_type) in self._generators

    def resolve(self, kind: ScaleKind, domain_type: type) -> TickGenerator[Any]:
        generator = self._generators.get((kind, domain_type))
        if generator is None:
            raise TickGeneratorNotFoundError(
                f"no tick generator registered for scale kind `{kind}` and domain type `{domain_type.__name__}`"
            )
        return generator

    def generate(self, scale: Scale[T], options: TickGenerationOptions[T] | None = None) -> list[AxisTick[T]]:
        generator = self.resolve(scale.kind, scale.domain_type)
        return generator.generate(scale, options)

    @classmethod
    def create_default(cls, category_types: Iterable[type] = (str,)) -> "TickGeneratorRegistry":
        registry = cls()
        linear = LinearTickGenerator()
        registry.register("linear", linear)
        registry.register("logarithmic", linear)
        registry.register("time", TimeTickGenerator())
        for category_type in category_types:
            registry.register("ordinal", OrdinalTickGenerator(category_type))
        return registry


def tick_positions(ticks: Sequence[AxisTick[Any]]) -> tuple[float, ...]:
    return tuple(tick.unit_position for tick in ticks)
