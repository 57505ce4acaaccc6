"""Static lookup tables: colour presets, aspect classes and output resolutions.

All tables are read-only at runtime.  Mappings are wrapped in
:class:`types.MappingProxyType` so that nothing can mutate them by accident,
and every key is a member of a closed :class:`enum.Enum`.

The internal drawing size (the SVG ``viewBox``) depends only on the aspect
class.  Resolution tiers change the *declared* pixel size of the document,
never the coordinate space, so every tier renders the same pattern.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType


class ColorPreset(str, Enum):
    """Primary marble colours.  Each maps to a base/vein colour pair."""

    WHITE = "white"
    BLACK = "black"
    BLUE = "blue"
    RED = "red"


class SizeClass(str, Enum):
    """Aspect-ratio classes."""

    LANDSCAPE = "16:9"
    PORTRAIT = "9:16"
    SQUARE = "1:1"


class Resolution(str, Enum):
    """Declared output resolution tiers."""

    NATIVE = "native"
    R2K = "2k"
    R4K = "4k"
    R8K = "8k"


class OutputType(str, Enum):
    SVG = "svg"
    PNG = "png"


@dataclass(frozen=True)
class ColorPair:
    """Base slab colour and vein colour, as ``#rrggbb`` hex strings."""

    base: str
    vein: str


COLOR_PAIRS = MappingProxyType(
    {
        ColorPreset.WHITE: ColorPair(base="#ffffff", vein="#0a0a0a"),  # black veins
        ColorPreset.BLACK: ColorPair(base="#0b0b0b", vein="#d4af37"),  # gold veins
        ColorPreset.BLUE: ColorPair(base="#1e3a8a", vein="#7c3aed"),  # purple veins
        ColorPreset.RED: ColorPair(base="#7f1d1d", vein="#111111"),  # black veins
    }
)

# Colours whose veins are drawn from the stronger opacity bands.
DARK_PRIMARY = ColorPreset.BLACK
LIGHT_PRIMARY = ColorPreset.WHITE

DEFAULT_COLOR = ColorPreset.BLACK
DEFAULT_SIZE = SizeClass.SQUARE
DEFAULT_RESOLUTION = Resolution.NATIVE

_INTERNAL_SIZES = MappingProxyType(
    {
        SizeClass.LANDSCAPE: (1600, 900),
        SizeClass.PORTRAIT: (900, 1600),
        SizeClass.SQUARE: (1000, 1000),
    }
)

_OUTPUT_SIZES = MappingProxyType(
    {
        Resolution.R2K: {
            SizeClass.LANDSCAPE: (2560, 1440),
            SizeClass.PORTRAIT: (1440, 2560),
            SizeClass.SQUARE: (2048, 2048),
        },
        Resolution.R4K: {
            SizeClass.LANDSCAPE: (3840, 2160),
            SizeClass.PORTRAIT: (2160, 3840),
            SizeClass.SQUARE: (3840, 3840),
        },
        Resolution.R8K: {
            SizeClass.LANDSCAPE: (7680, 4320),
            SizeClass.PORTRAIT: (4320, 7680),
            SizeClass.SQUARE: (7680, 7680),
        },
    }
)


def internal_dimensions(size: SizeClass) -> tuple[int, int]:
    """Return the ``(width, height)`` of the drawing coordinate space."""
    return _INTERNAL_SIZES[SizeClass(size)]


def output_dimensions(
    size: SizeClass, resolution: Resolution | None = None
) -> tuple[int, int]:
    """Return the declared output ``(width, height)`` in pixels.

    ``native`` (or ``None``) uses the internal size unchanged.
    """
    resolution = Resolution(resolution or DEFAULT_RESOLUTION)
    if resolution is Resolution.NATIVE:
        return internal_dimensions(size)
    return _OUTPUT_SIZES[resolution][SizeClass(size)]
