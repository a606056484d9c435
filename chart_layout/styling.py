from __future__ import annotations

from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Any, Mapping, Sequence

import math
import re

from chart_layout.primitives import require_non_negative

_HEX_COLOR = re.compile(r"^#[0-9a-fA-F]{6}([0-9a-fA-F]{2})?$")


@dataclass(frozen=True)
class RgbaColor:
    r: int
    g: int
    b: int
    a: int = 255

    def __post_init__(self) -> None:
        for name in ("r", "g", "b", "a"):
            value = getattr(self, name)
            if not isinstance(value, int) or not 0 <= value <= 255:
                raise ValueError(f"color channel `{name}` must be an int in [0, 255]")

    @classmethod
    def from_hex(cls, value: str | int) -> "RgbaColor":
        """Parse ``#RRGGBB`` / ``#RRGGBBAA`` strings or packed ``0xRRGGBBAA`` ints."""

        if isinstance(value, int):
            if not 0 <= value <= 0xFFFFFFFF:
                raise ValueError("packed color must fit in 32 bits (0xRRGGBBAA)")
            return cls((value >> 24) & 0xFF, (value >> 16) & 0xFF, (value >> 8) & 0xFF, value & 0xFF)
        if not isinstance(value, str) or not _HEX_COLOR.match(value):
            raise ValueError(f"color must be a hex color (#RRGGBB or #RRGGBBAA), got {value!r}")
        digits = value[1:]
        r, g, b = (int(digits[i : i + 2], 16) for i in (0, 2, 4))
        a = int(digits[6:8], 16) if len(digits) == 8 else 255
        return cls(r, g, b, a)

    def with_alpha(self, alpha: int) -> "RgbaColor":
        return replace(self, a=max(0, min(255, int(alpha))))

    def as_tuple(self) -> tuple[int, int, int, int]:
        return (self.r, self.g, self.b, self.a)

    def to_hex(self) -> str:
        return f"#{self.r:02X}{self.g:02X}{self.b:02X}{self.a:02X}"


@dataclass(frozen=True)
class ChartTypography:
    font_family: str
    font_size: float
    line_height: float | None = None
    letter_spacing: float | None = None
    font_weight: str | None = None

    def __post_init__(self) -> None:
        if not self.font_family.strip():
            raise ValueError("typography font_family must be non-empty")
        if not math.isfinite(self.font_size) or self.font_size <= 0:
            raise ValueError("typography font_size must be a positive number")
        if self.line_height is not None:
            require_non_negative("typography line_height", self.line_height)
        if self.letter_spacing is not None and not math.isfinite(self.letter_spacing):
            raise ValueError("typography letter_spacing must be finite")

    @property
    def resolved_line_height(self) -> float:
        return self.line_height if self.line_height is not None else self.font_size * 1.4


DEFAULT_TYPOGRAPHY = ChartTypography("Segoe UI", 12.0)


@dataclass(frozen=True)
class ChartPalette:
    background: RgbaColor
    foreground: RgbaColor
    axis_line: RgbaColor
    axis_tick: RgbaColor
    grid_line: RgbaColor
    legend_background: RgbaColor
    legend_border: RgbaColor
    series: tuple[RgbaColor, ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "series", tuple(self.series))
        if not self.series:
            raise ValueError("palette requires at least one series color")

    def series_color(self, index: int) -> RgbaColor:
        return self.series[index % len(self.series)]


@dataclass(frozen=True)
class AxisStyle:
    line_color: RgbaColor
    tick_color: RgbaColor
    tick_length: float
    label_typography: ChartTypography
    label_margin: float = 4.0

    def __post_init__(self) -> None:
        object.__setattr__(self, "tick_length", require_non_negative("axis tick_length", self.tick_length))
        object.__setattr__(self, "label_margin", require_non_negative("axis label_margin", self.label_margin))

    @classmethod
    def from_palette(
        cls,
        palette: ChartPalette,
        typography: ChartTypography,
        *,
        tick_length: float = 6.0,
        label_margin: float = 4.0,
    ) -> "AxisStyle":
        return cls(
            line_color=palette.axis_line,
            tick_color=palette.axis_tick,
            tick_length=tick_length,
            label_typography=typography,
            label_margin=label_margin,
        )


@dataclass(frozen=True)
class LegendStyle:
    background: RgbaColor
    border: RgbaColor
    border_thickness: float
    label_typography: ChartTypography
    marker_size: float = 10.0
    item_spacing: float = 6.0
    padding: float = 12.0
    label_spacing: float = 6.0

    def __post_init__(self) -> None:
        for name in ("border_thickness", "marker_size", "item_spacing", "padding", "label_spacing"):
            object.__setattr__(self, name, require_non_negative(f"legend {name}", getattr(self, name)))


@dataclass(frozen=True)
class ChartTheme:
    name: str
    palette: ChartPalette
    axis: AxisStyle
    legend: LegendStyle
    typography_variants: Mapping[str, ChartTypography] = field(default_factory=dict, hash=False)

    def __post_init__(self) -> None:
        if not self.name.strip():
            raise ValueError("theme name is required")
        variants = {str(k).lower(): v for k, v in self.typography_variants.items()}
        object.__setattr__(self, "typography_variants", MappingProxyType(variants))

    def typography(self, variant: str, default: ChartTypography | None = None) -> ChartTypography | None:
        return self.typography_variants.get(variant.lower(), default)

    def __str__(self) -> str:
        return self.name


def _build_theme(name: str, colors: Mapping[str, int], series: Sequence[int]) -> ChartTheme:
    palette = ChartPalette(
        background=RgbaColor.from_hex(colors["background"]),
        foreground=RgbaColor.from_hex(colors["foreground"]),
        axis_line=RgbaColor.from_hex(colors["axis_line"]),
        axis_tick=RgbaColor.from_hex(colors["axis_tick"]),
        grid_line=RgbaColor.from_hex(colors["grid_line"]),
        legend_background=RgbaColor.from_hex(colors["legend_background"]),
        legend_border=RgbaColor.from_hex(colors["legend_border"]),
        series=tuple(RgbaColor.from_hex(c) for c in series),
    )
    axis_typography = ChartTypography("Segoe UI", 11.0)
    legend_typography = ChartTypography("Segoe UI", 11.0)
    return ChartTheme(
        name=name,
        palette=palette,
        axis=AxisStyle.from_palette(palette, axis_typography, tick_length=6.0, label_margin=6.0),
        legend=LegendStyle(
            background=palette.legend_background,
            border=palette.legend_border,
            border_thickness=1.0,
            label_typography=legend_typography,
            marker_size=10.0,
            item_spacing=6.0,
            padding=12.0,
            label_spacing=6.0,
        ),
        typography_variants={
            "AxisLabel": axis_typography,
            "LegendLabel": legend_typography,
            "Body": ChartTypography("Segoe UI", 12.0),
        },
    )


_SERIES_COLORS = (0x3AB8FFFF, 0xF45E8CFF, 0x81FFF9FF, 0xFFD14FFF)

LIGHT_THEME = _build_theme(
    "Light",
    {
        "background": 0xF5F7FBFF,
        "foreground": 0x1F2430FF,
        "axis_line": 0x5A6478FF,
        "axis_tick": 0x5A6478FF,
        "grid_line": 0xD4DAE6FF,
        "legend_background": 0xFFFFFFFF,
        "legend_border": 0xCED7EAFF,
    },
    _SERIES_COLORS,
)

DARK_THEME = _build_theme(
    "Dark",
    {
        "background": 0x10151FFF,
        "foreground": 0xECEFF4FF,
        "axis_line": 0x8FA2C3FF,
        "axis_tick": 0x8FA2C3FF,
        "grid_line": 0x1E2838FF,
        "legend_background": 0x1B2333FF,
        "legend_border": 0x2F3A4FFF,
    },
    _SERIES_COLORS,
)

DEFAULT_THEME = LIGHT_THEME

_COLOR_TOKENS = {
    "axis_line_color": ("axis", "line_color"),
    "axis_tick_color": ("axis", "tick_color"),
    "legend_background": ("legend", "background"),
    "legend_border": ("legend", "border"),
}
_NUMBER_TOKENS = {
    "axis_tick_length": ("axis", "tick_length"),
    "axis_label_margin": ("axis", "label_margin"),
    "legend_border_thickness": ("legend", "border_thickness"),
    "legend_marker_size": ("legend", "marker_size"),
    "legend_item_spacing": ("legend", "item_spacing"),
    "legend_padding": ("legend", "padding"),
    "legend_label_spacing": ("legend", "label_spacing"),
}


def theme_with_overrides(theme: ChartTheme, overrides: Mapping[str, Any] | None = None) -> ChartTheme:
    """Validate flat token overrides and return a derived theme.

    Colors take ``#RRGGBB`` / ``#RRGGBBAA`` strings; numeric tokens must be
    finite and non-negative.
    """

    if not overrides:
        return theme
    sections: dict[str, dict[str, Any]] = {"axis": {}, "legend": {}}
    name = theme.name
    for key, value in overrides.items():
        if key == "name":
            if not isinstance(value, str) or not value.strip():
                raise ValueError("Token `name` must be a non-empty string")
            name = value
        elif key in _COLOR_TOKENS:
            section, attr = _COLOR_TOKENS[key]
            if not isinstance(value, str) or not _HEX_COLOR.match(value):
                raise ValueError(f"Token `{key}` must be a hex color (#RRGGBB or #RRGGBBAA)")
            sections[section][attr] = RgbaColor.from_hex(value)
        elif key in _NUMBER_TOKENS:
            section, attr = _NUMBER_TOKENS[key]
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise ValueError(f"Token `{key}` must be a number")
            sections[section][attr] = float(value)
        else:
            raise ValueError(f"Unknown theme token: {key}")

    return replace(
        theme,
        name=name,
        axis=replace(theme.axis, **sections["axis"]),
        legend=replace(theme.legend, **sections["legend"]),
        typography_variants=dict(theme.typography_variants),
    )
