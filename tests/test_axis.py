from __future__ import annotations

from datetime import datetime, timedelta, timezone
import unittest

from chart_layout.axis import AxisComposer, AxisDefinition, build_axis_visual, build_axis_visuals
from chart_layout.scales import LinearScale, OrdinalScale, TimeScale
from chart_layout.styling import DARK_THEME, DEFAULT_THEME
from chart_layout.ticks import AxisTick, TickGenerationOptions


class _EndpointsOnly:
    domain_type = float

    def generate(self, scale, options=None):  # noqa: ANN001
        return [AxisTick(value=v, unit_position=scale.project(v), label=f"<{v:g}>") for v in (scale.domain.start, scale.domain.end)]


class AxisComposerTests(unittest.TestCase):
    def _compose(self):  # noqa: ANN202
        axes = [
            AxisDefinition("value", "left", 40.0, LinearScale(0.0, 100.0)),
            AxisDefinition(
                "time",
                "bottom",
                30.0,
                TimeScale(
                    datetime(2024, 1, 1, 10, 0, tzinfo=timezone.utc),
                    datetime(2024, 1, 1, 11, 0, tzinfo=timezone.utc),
                ),
                style=DARK_THEME.axis,
            ),
        ]
        return AxisComposer().compose(800.0, 600.0, 1.0, axes)

    def test_compose_attaches_layout_and_ticks(self) -> None:
        surface = self._compose()
        value_axis = surface.axis("value")
        time_axis = surface.axis("time")
        self.assertEqual(surface.plot_area.x, 40.0)
        self.assertEqual(value_axis.layout.bounds.height, 570.0)
        self.assertEqual([t.label for t in value_axis.ticks], ["0", "20", "40", "60", "80", "100"])
        self.assertEqual(len(time_axis.ticks), 5)
        self.assertIs(value_axis.style, DEFAULT_THEME.axis)
        self.assertIs(time_axis.style, DARK_THEME.axis)
        self.assertIsNone(surface.axis("missing"))

    def test_custom_generator_overrides_registry(self) -> None:
        axis = AxisDefinition("v", "right", 50.0, LinearScale(0.0, 7.0), tick_generator=_EndpointsOnly())
        surface = AxisComposer().compose(300.0, 200.0, 1.0, [axis])
        self.assertEqual([t.label for t in surface.axis("v").ticks], ["<0>", "<7>"])

    def test_tick_options_are_forwarded(self) -> None:
        options = TickGenerationOptions(target_tick_count=4, label_formatter=lambda c: c.upper())
        axis = AxisDefinition("cat", "bottom", 24.0, OrdinalScale(["a", "b"]), tick_options=options)
        surface = AxisComposer().compose(300.0, 200.0, 1.0, [axis])
        self.assertEqual([t.label for t in surface.axis("cat").ticks], ["A", "B"])

    def test_duplicate_orientation_keeps_first_axis(self) -> None:
        axes = [
            AxisDefinition("first", "left", 40.0, LinearScale(0.0, 1.0)),
            AxisDefinition("second", "left", 80.0, LinearScale(0.0, 1.0)),
        ]
        surface = AxisComposer().compose(300.0, 200.0, 1.0, axes)
        self.assertEqual(surface.plot_area.x, 40.0)
        self.assertEqual(surface.axis("second").layout.actual_thickness, 40.0)

    def test_compose_is_repeatable(self) -> None:
        self.assertEqual(self._compose(), self._compose())

    def test_blank_axis_id_rejected(self) -> None:
        with self.assertRaises(ValueError):
            AxisDefinition("  ", "left", 40.0, LinearScale(0.0, 1.0))


class AxisVisualTests(unittest.TestCase):
    def setUp(self) -> None:
        axes = [
            AxisDefinition("value", "left", 40.0, LinearScale(0.0, 100.0)),
            AxisDefinition("x", "bottom", 30.0, LinearScale(0.0, 10.0)),
        ]
        self.surface = AxisComposer().compose(800.0, 600.0, 1.0, axes)

    def test_left_axis_ticks_and_labels(self) -> None:
        visual = build_axis_visual(self.surface.axis("value"))
        style = DEFAULT_THEME.axis
        self.assertEqual((visual.axis_line.x1, visual.axis_line.y1, visual.axis_line.y2), (40.0, 0.0, 570.0))
        bottom_tick = visual.ticks[0]
        self.assertEqual((bottom_tick.x1, bottom_tick.y1), (40.0, 570.0))
        self.assertEqual(bottom_tick.x2, 40.0 - style.tick_length)
        self.assertEqual(visual.ticks[-1].y1, 0.0)
        label = visual.labels[0]
        self.assertEqual(label.x, 40.0 - style.tick_length - style.label_margin)
        self.assertEqual((label.horizontal_alignment, label.vertical_alignment), ("end", "center"))
        self.assertEqual(label.text, "0")

    def test_bottom_axis_ticks_and_labels(self) -> None:
        visual = build_axis_visual(self.surface.axis("x"))
        style = DEFAULT_THEME.axis
        xs = [tick.x1 for tick in visual.ticks]
        self.assertEqual(xs[0], 40.0)
        self.assertEqual(xs[-1], 800.0)
        self.assertTrue(all(tick.y1 == 570.0 and tick.y2 == 570.0 + style.tick_length for tick in visual.ticks))
        label = visual.labels[1]
        self.assertEqual(label.y, 570.0 + style.tick_length + style.label_margin)
        self.assertEqual((label.horizontal_alignment, label.vertical_alignment), ("center", "start"))

    def test_build_axis_visuals_covers_every_axis(self) -> None:
        visuals = build_axis_visuals(self.surface)
        self.assertEqual([v.model.id for v in visuals], ["value", "x"])
        self.assertTrue(all(len(v.ticks) == len(v.labels) for v in visuals))


class AxisTimeLabelTests(unittest.TestCase):
    def test_time_axis_labels_are_positioned_in_order(self) -> None:
        start = datetime(2024, 3, 1, tzinfo=timezone.utc)
        axis = AxisDefinition("t", "top", 20.0, TimeScale(start, start + timedelta(days=3)))
        surface = AxisComposer().compose(400.0, 300.0, 1.0, [axis])
        visual = build_axis_visual(surface.axis("t"))
        xs = [label.x for label in visual.labels]
        self.assertEqual(xs, sorted(xs))
        self.assertTrue(all(label.vertical_alignment == "end" for label in visual.labels))


if __name__ == "__main__":
    unittest.main()
