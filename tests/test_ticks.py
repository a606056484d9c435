from __future__ import annotations

from datetime import datetime, timedelta, timezone
import unittest

import numpy as np

from chart_layout.errors import ScaleMismatchError, TickGeneratorNotFoundError
from chart_layout.scales import LinearScale, LogarithmicScale, OrdinalScale, TimeScale
from chart_layout.ticks import (
    LinearTickGenerator,
    OrdinalTickGenerator,
    TickGenerationOptions,
    TickGeneratorRegistry,
    TimeTickGenerator,
    align_time_forward,
    format_tick,
    format_time_tick,
    nice_number,
    nice_tick_values,
    select_time_interval,
    tick_positions,
)


class NiceNumberTests(unittest.TestCase):
    def test_rounded_ladder(self) -> None:
        self.assertEqual(nice_number(1.2, round_result=True), 1.0)
        self.assertEqual(nice_number(2.0, round_result=True), 2.0)
        self.assertEqual(nice_number(4.0, round_result=True), 2.5)
        self.assertEqual(nice_number(6.0, round_result=True), 5.0)
        self.assertEqual(nice_number(8.0, round_result=True), 10.0)
        self.assertAlmostEqual(nice_number(0.021, round_result=True), 0.02, places=12)

    def test_ceiling_ladder(self) -> None:
        self.assertEqual(nice_number(1.0, round_result=False), 1.0)
        self.assertEqual(nice_number(2.2, round_result=False), 2.5)
        self.assertEqual(nice_number(99.0, round_result=False), 100.0)

    def test_degenerate_input_returns_zero(self) -> None:
        self.assertEqual(nice_number(0.0, round_result=True), 0.0)
        self.assertEqual(nice_number(-3.0, round_result=False), 0.0)
        self.assertEqual(nice_number(float("nan"), round_result=True), 0.0)

    def test_tick_values_are_multiples_of_step(self) -> None:
        ticks, step = nice_tick_values(-0.3, 0.7, 6)
        self.assertGreater(step, 0.0)
        np.testing.assert_allclose(np.rint(ticks / step) * step, ticks)
        self.assertLessEqual(ticks[0], -0.3)
        self.assertGreaterEqual(ticks[-1], 0.7)
        self.assertIn(0.0, ticks.tolist())

    def test_degenerate_domain(self) -> None:
        ticks, step = nice_tick_values(4.0, 4.0, 6)
        self.assertEqual(ticks.tolist(), [4.0])
        self.assertEqual(step, 0.0)


class FormatTickTests(unittest.TestCase):
    def test_format_tick_normalizes_near_zero(self) -> None:
        self.assertEqual(format_tick(-4.440892098500626e-16, step=1.0), "0")
        self.assertEqual(format_tick(0.0, step=0.2), "0")

    def test_format_tick_uses_step_precision(self) -> None:
        self.assertEqual(format_tick(0.30000000000000004, step=0.1), "0.3")
        self.assertEqual(format_tick(2.5, step=0.5), "2.5")
        self.assertEqual(format_tick(10.0, step=2.0), "10")

    def test_format_tick_switches_to_scientific(self) -> None:
        self.assertEqual(format_tick(2_500_000.0, step=500_000.0), "2.5000e+06")

    def test_format_time_tick_is_utc(self) -> None:
        local = datetime(2024, 1, 1, 12, 0, tzinfo=timezone(timedelta(hours=2)))
        self.assertEqual(format_time_tick(local), "2024-01-01 10:00:00Z")
        self.assertEqual(format_time_tick(datetime(2024, 1, 1, 10, 0)), "2024-01-01 10:00:00Z")


class LinearTickGeneratorTests(unittest.TestCase):
    def test_zero_to_ten(self) -> None:
        ticks = LinearTickGenerator().generate(LinearScale(0.0, 10.0), TickGenerationOptions(target_tick_count=6))
        self.assertEqual([t.value for t in ticks], [0.0, 2.0, 4.0, 6.0, 8.0, 10.0])
        self.assertEqual([t.label for t in ticks], ["0", "2", "4", "6", "8", "10"])
        self.assertEqual([t.unit_position for t in ticks], [0.0, 0.2, 0.4, 0.6, 0.8, 1.0])

    def test_custom_formatter(self) -> None:
        options = TickGenerationOptions(target_tick_count=3, label_formatter=lambda v: f"{v:.0f}%")
        ticks = LinearTickGenerator().generate(LinearScale(0.0, 100.0), options)
        self.assertTrue(all(t.label.endswith("%") for t in ticks))
        self.assertEqual(ticks[0].label, "0%")

    def test_reversed_domain_still_ascending(self) -> None:
        ticks = LinearTickGenerator().generate(LinearScale(10.0, 0.0))
        values = [t.value for t in ticks]
        self.assertEqual(values, sorted(values))
        self.assertEqual(ticks[0].unit_position, 1.0)
        self.assertEqual(ticks[-1].unit_position, 0.0)

    def test_degenerate_domain_emits_single_tick(self) -> None:
        ticks = LinearTickGenerator().generate(LinearScale(3.0, 3.0))
        self.assertEqual(len(ticks), 1)
        self.assertEqual(ticks[0].value, 3.0)
        self.assertEqual(ticks[0].unit_position, 0.0)

    def test_target_must_be_positive(self) -> None:
        with self.assertRaisesRegex(ValueError, "target_tick_count"):
            TickGenerationOptions(target_tick_count=0)


class TimeTickGeneratorTests(unittest.TestCase):
    def setUp(self) -> None:
        self.start = datetime(2024, 1, 1, 10, 0, tzinfo=timezone.utc)
        self.end = datetime(2024, 1, 1, 11, 0, tzinfo=timezone.utc)

    def test_one_hour_uses_quarter_hours(self) -> None:
        ticks = TimeTickGenerator().generate(TimeScale(self.start, self.end))
        self.assertEqual([t.value for t in ticks], [self.start + timedelta(minutes=15 * i) for i in range(5)])
        self.assertEqual([t.unit_position for t in ticks], [0.0, 0.25, 0.5, 0.75, 1.0])
        self.assertEqual(ticks[1].label, "2024-01-01 10:15:00Z")

    def test_unaligned_start_aligns_forward(self) -> None:
        start = self.start + timedelta(minutes=7)
        ticks = TimeTickGenerator().generate(TimeScale(start, self.end))
        self.assertEqual(len(ticks), 4)
        self.assertEqual(ticks[0].value, self.start + timedelta(minutes=15))
        self.assertTrue(all(start <= t.value <= self.end for t in ticks))

    def test_alignment_follows_local_clock(self) -> None:
        tz = timezone(timedelta(hours=5, minutes=30))
        start = datetime(2024, 1, 1, 0, 0, tzinfo=tz)
        ticks = TimeTickGenerator().generate(TimeScale(start, start + timedelta(days=5)))
        self.assertEqual(ticks[0].value, start)
        self.assertEqual(ticks[0].value.utcoffset(), timedelta(hours=5, minutes=30))
        self.assertEqual(ticks[1].value - ticks[0].value, timedelta(days=1))

    def test_weekly_ticks_fall_on_mondays(self) -> None:
        monday = datetime(2024, 1, 1, tzinfo=timezone.utc)
        ticks = TimeTickGenerator().generate(TimeScale(monday, monday + timedelta(days=30)))
        self.assertEqual(ticks[0].value, monday)
        self.assertEqual(len(ticks), 5)
        self.assertTrue(all(t.value.weekday() == 0 for t in ticks))

        wednesday = datetime(2024, 1, 3, tzinfo=timezone.utc)
        ticks = TimeTickGenerator().generate(TimeScale(wednesday, wednesday + timedelta(days=30)))
        self.assertEqual(ticks[0].value, datetime(2024, 1, 8, tzinfo=timezone.utc))

    def test_reversed_domain_is_swapped(self) -> None:
        ticks = TimeTickGenerator().generate(TimeScale(self.end, self.start))
        self.assertEqual(len(ticks), 5)
        self.assertEqual(ticks[0].value, self.start)
        self.assertEqual(ticks[0].unit_position, 1.0)

    def test_degenerate_domain(self) -> None:
        ticks = TimeTickGenerator().generate(TimeScale(self.start, self.start))
        self.assertEqual(len(ticks), 1)
        self.assertEqual(ticks[0].value, self.start)

    def test_interval_selection(self) -> None:
        self.assertEqual(select_time_interval(timedelta(seconds=5), 6), timedelta(seconds=1))
        self.assertEqual(select_time_interval(timedelta(hours=1), 6), timedelta(minutes=15))
        self.assertEqual(select_time_interval(timedelta(days=30), 6), timedelta(days=7))
        self.assertEqual(select_time_interval(timedelta(0), 6), timedelta(seconds=1))

    def test_long_spans_fall_back_to_years(self) -> None:
        self.assertEqual(select_time_interval(timedelta(days=3650), 6), timedelta(days=730))
        with self.assertLogs("chart_layout.ticks", level="DEBUG"):
            select_time_interval(timedelta(days=365 * 40), 6)

    def test_align_time_forward(self) -> None:
        self.assertEqual(align_time_forward(1_000, 1_000), 1_000)
        self.assertEqual(align_time_forward(1_001, 1_000), 2_000)
        self.assertEqual(align_time_forward(1_001, 1_000, offset_ms=500), 1_500)
        self.assertEqual(align_time_forward(1_001, 0), 1_001)


class OrdinalTickGeneratorTests(unittest.TestCase):
    def test_one_tick_per_category(self) -> None:
        ticks = OrdinalTickGenerator().generate(OrdinalScale(["Q1", "Q2", "Q3"]))
        self.assertEqual([t.label for t in ticks], ["Q1", "Q2", "Q3"])
        self.assertEqual(tick_positions(ticks), (0.0, 0.5, 1.0))

    def test_requires_ordinal_scale(self) -> None:
        with self.assertRaises(ScaleMismatchError):
            OrdinalTickGenerator().generate(LinearScale(0.0, 1.0))


class TickGeneratorRegistryTests(unittest.TestCase):
    def test_default_registry_resolves_builtin_scales(self) -> None:
        registry = TickGeneratorRegistry.create_default()
        self.assertTrue(registry.is_registered("linear", float))
        self.assertTrue(registry.is_registered("logarithmic", float))
        self.assertTrue(registry.is_registered("time", datetime))
        self.assertTrue(registry.is_registered("ordinal", str))
        ticks = registry.generate(LogarithmicScale(1.0, 100.0))
        self.assertTrue(all(0.0 <= t.unit_position <= 1.0 for t in ticks))

    def test_missing_generator_raises(self) -> None:
        registry = TickGeneratorRegistry.create_default()
        with self.assertRaises(TickGeneratorNotFoundError):
            registry.generate(OrdinalScale([1, 2, 3]))
        with self.assertRaises(LookupError):
            TickGeneratorRegistry().resolve("linear", float)

    def test_extra_category_types(self) -> None:
        registry = TickGeneratorRegistry.create_default(category_types=(str, int))
        ticks = registry.generate(OrdinalScale([10, 20, 30]))
        self.assertEqual([t.label for t in ticks], ["10", "20", "30"])

    def test_register_replaces_and_chains(self) -> None:
        class Fixed:
            domain_type = float

            def generate(self, scale, options=None):  # noqa: ANN001
                return []

        registry = TickGeneratorRegistry.create_default()
        with self.assertLogs("chart_layout.ticks", level="DEBUG"):
            returned = registry.register("linear", Fixed())
        self.assertIs(returned, registry)
        self.assertEqual(registry.generate(LinearScale(0.0, 1.0)), [])


if __name__ == "__main__":
    unittest.main()
