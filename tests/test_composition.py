from __future__ import annotations

import unittest

from chart_layout.annotations import (
    CalloutAnnotation,
    HorizontalLineAnnotation,
    ValueZoneAnnotation,
    VerticalLineAnnotation,
)
from chart_layout.composition import ChartComposition, ChartCompositionBuilder, assign_annotations
from chart_layout.errors import CompositionError


class CompositionBuilderTests(unittest.TestCase):
    def test_height_ratios_are_normalized(self) -> None:
        composition = (
            ChartCompositionBuilder()
            .pane("price").with_series(0, 1).with_height_ratio(3.0).done()
            .pane("volume").with_series(2).share_x_axis_with_primary(False).done()
            .build()
        )
        price, volume = composition.panes
        self.assertEqual(price.series_ids, (0, 1))
        self.assertEqual(price.normalized_ratio, 0.75)
        self.assertEqual(volume.normalized_ratio, 0.25)
        self.assertFalse(volume.share_x_axis_with_primary)
        self.assertAlmostEqual(sum(p.normalized_ratio for p in composition.panes), 1.0)
        self.assertIs(composition.primary_pane, price)

    def test_create_with_configure_callback(self) -> None:
        composition = ChartComposition.create(lambda b: b.pane("main").with_series(0))
        self.assertEqual([p.id for p in composition.panes], ["main"])
        self.assertEqual(composition.pane("MAIN").id, "main")
        self.assertIsNone(composition.pane("other"))

    def test_build_without_panes_fails(self) -> None:
        with self.assertRaisesRegex(CompositionError, "at least one pane"):
            ChartCompositionBuilder().build()

    def test_direct_construction_requires_a_pane(self) -> None:
        with self.assertRaisesRegex(CompositionError, "at least one pane"):
            ChartComposition(panes=())

    def test_duplicate_pane_ids_fail_case_insensitively(self) -> None:
        builder = ChartCompositionBuilder()
        builder.pane("Price")
        with self.assertRaises(CompositionError):
            builder.pane("price")
        with self.assertRaises(ValueError):
            builder.pane("  ")

    def test_invalid_ratio_and_series(self) -> None:
        pane = ChartCompositionBuilder().pane("p")
        with self.assertRaises(CompositionError):
            pane.with_height_ratio(0.0)
        with self.assertRaises(CompositionError):
            pane.with_height_ratio(float("nan"))
        with self.assertRaises(CompositionError):
            pane.with_series(-1)

    def test_annotation_layers(self) -> None:
        zone = ValueZoneAnnotation(10.0, 20.0, label="band")
        composition = (
            ChartCompositionBuilder()
            .pane("price").done()
            .pane("volume").done()
            .annotation_layer("marks", "above_series", lambda layer: layer.add(HorizontalLineAnnotation(5.0)))
            .annotation_layer("zones", "below_series", lambda layer: layer.for_panes("price", "PRICE", " ").add(zone))
            .build()
        )
        zones = composition.annotation_layers[1]
        self.assertEqual(zones.target_pane_ids, ("price",))
        self.assertEqual(zones.annotations, (zone,))
        self.assertTrue(zones.applies_to("Price"))
        self.assertFalse(zones.applies_to("volume"))
        self.assertTrue(composition.annotation_layers[0].applies_to("volume"))
        self.assertEqual([layer.id for layer in composition.layers_in_draw_order()], ["zones", "marks"])

    def test_layer_rejects_bad_input(self) -> None:
        builder = ChartCompositionBuilder()
        with self.assertRaises(CompositionError):
            builder.annotation_layer("x", "middle")  # type: ignore[arg-type]
        with self.assertRaises(CompositionError):
            builder.annotation_layer("x", "overlay", lambda layer: layer.add("not an annotation"))  # type: ignore[arg-type]


class AssignAnnotationsTests(unittest.TestCase):
    def setUp(self) -> None:
        self.shared = HorizontalLineAnnotation(1.0)
        self.targeted = VerticalLineAnnotation(1_700_000_000.0, target_pane_id="VOLUME")
        self.orphan = HorizontalLineAnnotation(2.0, target_pane_id="missing")
        self.zone = ValueZoneAnnotation(0.0, 5.0)
        self.composition = (
            ChartCompositionBuilder()
            .pane("price").done()
            .pane("volume").done()
            .annotation_layer("all", "overlay", lambda layer: layer.add(self.shared, self.targeted, self.orphan))
            .annotation_layer("price-only", "below_series", lambda layer: layer.for_panes("price").add(self.zone))
            .build()
        )

    def test_layer_filter_and_target_override(self) -> None:
        buckets = assign_annotations(self.composition)
        self.assertEqual(set(buckets), {"price", "volume"})
        self.assertEqual(buckets["price"].overlay, (self.shared,))
        self.assertEqual(buckets["volume"].overlay, (self.shared, self.targeted))
        self.assertEqual(buckets["price"].below_series, (self.zone,))
        self.assertEqual(buckets["volume"].below_series, ())
        self.assertEqual(buckets["price"].for_z_order("above_series"), ())

    def test_loose_annotations_go_to_overlay(self) -> None:
        callout = CalloutAnnotation(1_700_000_000.0, 3.0, "peak")
        aimed = HorizontalLineAnnotation(4.0, target_pane_id="volume")
        buckets = assign_annotations(self.composition, [callout, aimed])
        self.assertEqual(buckets["price"].overlay[-1], callout)
        self.assertEqual(buckets["volume"].overlay[-1], aimed)


if __name__ == "__main__":
    unittest.main()
