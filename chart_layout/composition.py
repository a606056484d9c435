from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Iterable, Literal

import math

from chart_layout.annotations import ANNOTATION_TYPES, ChartAnnotation
from chart_layout.errors import CompositionError


AnnotationZOrder = Literal["below_series", "overlay", "above_series"]
Z_ORDERS: tuple[AnnotationZOrder, ...] = ("below_series", "overlay", "above_series")


@dataclass(frozen=True)
class ChartPaneDefinition:
    id: str
    series_ids: tuple[int, ...] = ()
    height_ratio: float = 1.0
    normalized_ratio: float = 1.0
    share_x_axis_with_primary: bool = True


@dataclass(frozen=True)
class AnnotationLayer:
    id: str
    z_order: AnnotationZOrder
    target_pane_ids: tuple[str, ...] = ()
    annotations: tuple[ChartAnnotation, ...] = ()

    def applies_to(self, pane_id: str) -> bool:
        if not self.target_pane_ids:
            return True
        key = pane_id.casefold()
        return any(target.casefold() == key for target in self.target_pane_ids)


@dataclass(frozen=True)
class ChartComposition:
    """Declarative multi-pane chart: panes plus z-ordered annotation layers."""

    panes: tuple[ChartPaneDefinition, ...]
    annotation_layers: tuple[AnnotationLayer, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "panes", tuple(self.panes))
        object.__setattr__(self, "annotation_layers", tuple(self.annotation_layers))
        if not self.panes:
            raise CompositionError("at least one pane must be added to the composition")

    @classmethod
    def create(cls, configure: Callable[["ChartCompositionBuilder"], object]) -> "ChartComposition":
        builder = ChartCompositionBuilder()
        configure(builder)
        return builder.build()

    @property
    def primary_pane(self) -> ChartPaneDefinition:
        return self.panes[0]

    def pane(self, pane_id: str) -> ChartPaneDefinition | None:
        key = pane_id.casefold()
        for pane in self.panes:
            if pane.id.casefold() == key:
                return pane
        return None

    def layers_in_draw_order(self) -> tuple[AnnotationLayer, ...]:
        return tuple(sorted(self.annotation_layers, key=lambda layer: Z_ORDERS.index(layer.z_order)))


@dataclass
class _PaneDraft:
    id: str
    series_ids: list[int] = field(default_factory=list)
    height_ratio: float = 1.0
    share_x_axis_with_primary: bool = True


class PaneBuilder:
    def __init__(self, draft: _PaneDraft, owner: "ChartCompositionBuilder") -> None:
        self._draft = draft
        self._owner = owner

    def with_series(self, *series_ids: int) -> "PaneBuilder":
        for series_id in series_ids:
            if isinstance(series_id, bool) or not isinstance(series_id, int) or series_id < 0:
                raise CompositionError(f"series id must be a non-negative int, got {series_id!r}")
            self._draft.series_ids.append(series_id)
        return self

    def share_x_axis_with_primary(self, share: bool = True) -> "PaneBuilder":
        self._draft.share_x_axis_with_primary = bool(share)
        return self

    def with_height_ratio(self, ratio: float) -> "PaneBuilder":
        if not math.isfinite(ratio) or ratio <= 0:
            raise CompositionError(f"pane height ratio must be positive and finite, got {ratio!r}")
        self._draft.height_ratio = float(ratio)
        return self

    def done(self) -> "ChartCompositionBuilder":
        return self._owner


class AnnotationLayerBuilder:
    def __init__(self, layer_id: str, z_order: AnnotationZOrder) -> None:
        self.id = layer_id
        self.z_order = z_order
        self._targets: list[str] = []
        self._annotations: list[ChartAnnotation] = []

    def for_panes(self, *pane_ids: str) -> "AnnotationLayerBuilder":
        for pane_id in pane_ids:
            if not pane_id or not pane_id.strip():
                continue
            if all(existing.casefold() != pane_id.casefold() for existing in self._targets):
                self._targets.append(pane_id)
        return self

    def add(self, *annotations: ChartAnnotation) -> "AnnotationLayerBuilder":
        for annotation in annotations:
            if not isinstance(annotation, ANNOTATION_TYPES):
                raise CompositionError(f"unsupported annotation type: {type(annotation).__name__}")
            self._annotations.append(annotation)
        return self

    def build(self) -> AnnotationLayer:
        return AnnotationLayer(
            id=self.id,
            z_order=self.z_order,
            target_pane_ids=tuple(self._targets),
            annotations=tuple(self._annotations),
        )


class ChartCompositionBuilder:
    def __init__(self) -> None:
        self._panes: list[_PaneDraft] = []
        self._layers: list[AnnotationLayerBuilder] = []

    def pane(self, pane_id: str) -> PaneBuilder:
        if not pane_id or not pane_id.strip():
            raise CompositionError("pane id must be specified")
        if any(p.id.casefold() == pane_id.casefold() for p in self._panes):
            raise CompositionError(f"a pane with id `{pane_id}` has already been added to this composition")
        draft = _PaneDraft(id=pane_id)
        self._panes.append(draft)
        return PaneBuilder(draft, self)

    def annotation_layer(
        self,
        layer_id: str,
        z_order: AnnotationZOrder,
        configure: Callable[[AnnotationLayerBuilder], object] | None = None,
    ) -> "ChartCompositionBuilder":
        if not layer_id or not layer_id.strip():
            raise CompositionError("annotation layer id must be specified")
        if z_order not in Z_ORDERS:
            raise CompositionError(f"unknown annotation z-order: {z_order!r}")
        layer = AnnotationLayerBuilder(layer_id, z_order)
        if configure is not None:
            configure(layer)
        self._layers.append(layer)
        return self

    def build(self) -> ChartComposition:
        if not self._panes:
            raise CompositionError("at least one pane must be added to the composition")
        total = sum(p.height_ratio for p in self._panes)
        panes = tuple(
            ChartPaneDefinition(
                id=p.id,
                series_ids=tuple(p.series_ids),
                height_ratio=p.height_ratio,
                normalized_ratio=p.height_ratio / total,
                share_x_axis_with_primary=p.share_x_axis_with_primary,
            )
            for p in self._panes
        )
        return ChartComposition(panes=panes, annotation_layers=tuple(layer.build() for layer in self._layers))


@dataclass(frozen=True)
class PaneAnnotations:
    pane_id: str
    below_series: tuple[ChartAnnotation, ...] = ()
    overlay: tuple[ChartAnnotation, ...] = ()
    above_series: tuple[ChartAnnotation, ...] = ()

    def for_z_order(self, z_order: AnnotationZOrder) -> tuple[ChartAnnotation, ...]:
        return getattr(self, z_order)


def assign_annotations(
    composition: ChartComposition,
    loose_annotations: Iterable[ChartAnnotation] = (),
) -> dict[str, PaneAnnotations]:
    """Bucket annotations per pane and z-order.

    An annotation's own ``target_pane_id`` wins over its layer's pane filter;
    annotations aimed at unknown panes are dropped. Loose annotations land in
    the overlay bucket of their target pane, or of the primary pane.
    """

    buckets: dict[str, dict[AnnotationZOrder, list[ChartAnnotation]]] = {
        pane.id: {z: [] for z in Z_ORDERS} for pane in composition.panes
    }

    def _add(pane_id: str | None, z_order: AnnotationZOrder, annotation: ChartAnnotation) -> None:
        if pane_id is None:
            return
        pane = composition.pane(pane_id)
        if pane is not None:
            buckets[pane.id][z_order].append(annotation)

    for layer in composition.annotation_layers:
        for annotation in layer.annotations:
            if annotation.target_pane_id is not None:
                _add(annotation.target_pane_id, layer.z_order, annotation)
                continue
            for pane in composition.panes:
                if layer.applies_to(pane.id):
                    _add(pane.id, layer.z_order, annotation)

    for annotation in loose_annotations:
        _add(annotation.target_pane_id or composition.primary_pane.id, "overlay", annotation)

    return {
        pane_id: PaneAnnotations(
            pane_id=pane_id,
            below_series=tuple(by_z["below_series"]),
            overlay=tuple(by_z["overlay"]),
            above_series=tuple(by_z["above_series"]),
        )
        for pane_id, by_z in buckets.items()
    }
