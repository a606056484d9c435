from chart_layout.annotations import (
    CalloutAnnotation,
    ChartAnnotation,
    GradientZoneAnnotation,
    HorizontalLineAnnotation,
    SnapMode,
    TimeRangeAnnotation,
    ValueZoneAnnotation,
    VerticalLineAnnotation,
)
from chart_layout.axis import AxisComposer, AxisDefinition, AxisRenderSurface, build_axis_visual
from chart_layout.composition import ChartComposition, ChartCompositionBuilder, assign_annotations
from chart_layout.coordinates import CoordinateTransformer
from chart_layout.errors import (
    CategoryNotFoundError,
    ChartLayoutError,
    CompositionError,
    ScaleDomainError,
    ScaleMismatchError,
    TickGeneratorNotFoundError,
)
from chart_layout.layout import (
    AxisLayout,
    AxisLayoutRequest,
    ChartLayoutEngine,
    ChartLayoutRequest,
    ChartLayoutResult,
    align_to_pixel,
    layout_preset,
)
from chart_layout.legend import LegendDefinition, LegendItem, LegendLayoutEngine, LegendVisual
from chart_layout.primitives import LayoutRect, Range
from chart_layout.scales import LinearScale, LogarithmicScale, OrdinalScale, Scale, TimeScale
from chart_layout.styling import DARK_THEME, DEFAULT_THEME, LIGHT_THEME, ChartTheme, RgbaColor
from chart_layout.ticks import (
    AxisTick,
    LinearTickGenerator,
    OrdinalTickGenerator,
    TickGenerationOptions,
    TickGeneratorRegistry,
    TimeTickGenerator,
)

__all__ = [
    "AxisComposer",
    "AxisDefinition",
    "AxisLayout",
    "AxisLayoutRequest",
    "AxisRenderSurface",
    "AxisTick",
    "CalloutAnnotation",
    "CategoryNotFoundError",
    "ChartAnnotation",
    "ChartComposition",
    "ChartCompositionBuilder",
    "ChartLayoutEngine",
    "ChartLayoutError",
    "ChartLayoutRequest",
    "ChartLayoutResult",
    "ChartTheme",
    "CompositionError",
    "CoordinateTransformer",
    "DARK_THEME",
    "DEFAULT_THEME",
    "GradientZoneAnnotation",
    "HorizontalLineAnnotation",
    "LIGHT_THEME",
    "LayoutRect",
    "LegendDefinition",
    "LegendItem",
    "LegendLayoutEngine",
    "LegendVisual",
    "LinearScale",
    "LinearTickGenerator",
    "LogarithmicScale",
    "OrdinalScale",
    "OrdinalTickGenerator",
    "Range",
    "RgbaColor",
    "Scale",
    "ScaleDomainError",
    "ScaleMismatchError",
    "SnapMode",
    "TickGenerationOptions",
    "TickGeneratorNotFoundError",
    "TickGeneratorRegistry",
    "TimeRangeAnnotation",
    "TimeScale",
    "ValueZoneAnnotation",
    "VerticalLineAnnotation",
    "align_to_pixel",
    "assign_annotations",
    "build_axis_visual",
    "layout_preset",
]
