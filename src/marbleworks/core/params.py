"""Pattern parameter derivation.

:func:`derive_params` consumes a random stream and produces a frozen
:class:`PatternParams` bundle describing everything the composer needs.

Draw order
----------
Values are drawn from the stream in a single fixed order.  Reordering any
draw shifts every later value and changes the image produced for an existing
seed key, so the order below is part of the output format:

==  ==========================  =========================================
#   Value                       Formula (``r`` = next draw)
==  ==========================  =========================================
1   base frequency              ``0.005 + r * 0.01``
2   octaves                     ``3 + floor(r * 3)``
3   noise seed                  ``floor(r * 4096)``
4   rotation                    ``floor(r * 360)``  (not rendered)
5   contrast                    ``0.6 + r * 0.6``   (not rendered)
6   primary vein opacity        colour dependent band
7   secondary vein opacity      colour dependent band
8   pulse count                 ``10 + floor(r * 6)``
9   pulse width                 ``0.12 + r * 0.06``
10  layer 1 vein octaves        ``2 + floor(r * 2)``
11  layer 1 gamma R, G, B       ``2.2 + r * 1.5`` (three draws)
14  layer 1 displacement        ``round(40 + r * 80)``
15  layer 1 blur                ``0.8 + r * 0.8``
16  layer 2 vein octaves        ``2 + floor(r * 2)``
17  layer 2 displacement        ``round(55 + r * 65)``
18  layer 2 blur                ``0.7 + r * 1.1``
==  ==========================  =========================================

Rotation and contrast are kept in the bundle for stream compatibility even
though nothing renders them.
"""

from __future__ import annotations

import math
from collections.abc import Callable
from dataclasses import dataclass, field

from marbleworks.core.presets import DARK_PRIMARY, LIGHT_PRIMARY, ColorPreset

TABLE_ENTRIES = 64
NOISE_SEED_RANGE = 4096

Draw = Callable[[], float]


def round_half_up(value: float) -> int:
    """Round to the nearest integer, ties towards positive infinity."""
    return math.floor(value + 0.5)


def _band(draw: Draw, low: float, span: float) -> float:
    return low + draw() * span


@dataclass(frozen=True)
class LayerRecipe:
    """Fixed coefficients for one vein layer.

    Attributes:
        warp_multipliers: ``(x, y)`` multiples of the base frequency for the
            low-frequency warp noise.
        vein_multipliers: ``(x, y)`` multiples of the base frequency for the
            vein noise.
        warp_seed_offset: Added to the noise seed for the warp field.
        vein_seed_offset: Added to the noise seed for the vein field.
        contrast_curve: Whether the layer draws and applies per-channel gamma.
        alpha_boost: Gamma exponent applied to the final alpha, or ``None``.
        opacity_bands: ``(colour, (low, span))`` pairs; ``default_opacity_band``
            applies to colours not listed.
        displacement_band: ``(low, span)`` for the displacement scale.
        blur_band: ``(low, span)`` for the blur standard deviation.
    """

    warp_multipliers: tuple[float, float]
    vein_multipliers: tuple[float, float]
    warp_seed_offset: int
    vein_seed_offset: int
    contrast_curve: bool
    alpha_boost: float | None
    opacity_bands: tuple[tuple[ColorPreset, tuple[float, float]], ...]
    default_opacity_band: tuple[float, float]
    displacement_band: tuple[float, float]
    blur_band: tuple[float, float]

    def opacity_band(self, color: ColorPreset) -> tuple[float, float]:
        return dict(self.opacity_bands).get(color, self.default_opacity_band)


PRIMARY_LAYER = LayerRecipe(
    warp_multipliers=(0.35, 1.4),
    vein_multipliers=(1.6, 0.9),
    warp_seed_offset=0,
    vein_seed_offset=137,
    contrast_curve=True,
    alpha_boost=0.7,
    opacity_bands=((DARK_PRIMARY, (0.35, 0.10)), (LIGHT_PRIMARY, (0.35, 0.15))),
    default_opacity_band=(0.22, 0.10),
    displacement_band=(40, 80),
    blur_band=(0.8, 0.8),
)

SECONDARY_LAYER = LayerRecipe(
    warp_multipliers=(0.45, 1.2),
    vein_multipliers=(1.3, 1.0),
    warp_seed_offset=251,
    vein_seed_offset=587,
    contrast_curve=False,
    alpha_boost=None,
    opacity_bands=((DARK_PRIMARY, (0.20, 0.08)), (LIGHT_PRIMARY, (0.18, 0.10))),
    default_opacity_band=(0.10, 0.08),
    displacement_band=(55, 65),
    blur_band=(0.7, 1.1),
)

LAYER_RECIPES = (PRIMARY_LAYER, SECONDARY_LAYER)


@dataclass(frozen=True)
class LayerParams:
    """Concrete values for one vein layer."""

    recipe: LayerRecipe
    opacity: float
    warp_frequency: tuple[float, float]
    vein_frequency: tuple[float, float]
    warp_seed: int
    vein_seed: int
    vein_octaves: int
    gamma: tuple[float, float, float] | None
    displacement_scale: int
    blur_std: float


@dataclass(frozen=True)
class PatternParams:
    """Every derived value for one marble, in draw order."""

    base_frequency: float
    octaves: int
    noise_seed: int
    rotation: int
    contrast: float
    pulses: int
    pulse_width: float
    threshold_table: tuple[int, ...]
    layers: tuple[LayerParams, ...] = field(default=())

    @property
    def vein_opacities(self) -> tuple[float, ...]:
        return tuple(layer.opacity for layer in self.layers)


def threshold_table(
    pulses: int, width: float, entries: int = TABLE_ENTRIES
) -> tuple[int, ...]:
    """Build the pulsed band mask used to carve thin veins out of noise.

    Entry ``i`` is on when its phase within the current pulse lies within
    ``width`` (as a fraction of one period) of the pulse centre.
    """
    table = []
    for i in range(entries):
        phase = ((i / (entries - 1)) * pulses) % 1
        table.append(1 if abs(phase - 0.5) * 2 < width else 0)
    return tuple(table)


def _scale(base: float, multipliers: tuple[float, float]) -> tuple[float, float]:
    return (base * multipliers[0], base * multipliers[1])


def _derive_layer(
    draw: Draw,
    recipe: LayerRecipe,
    opacity: float,
    base_frequency: float,
    noise_seed: int,
) -> LayerParams:
    vein_octaves = 2 + math.floor(draw() * 2)
    gamma = None
    if recipe.contrast_curve:
        gamma = (
            _band(draw, 2.2, 1.5),
            _band(draw, 2.2, 1.5),
            _band(draw, 2.2, 1.5),
        )
    displacement = round_half_up(_band(draw, *recipe.displacement_band))
    blur = _band(draw, *recipe.blur_band)
    return LayerParams(
        recipe=recipe,
        opacity=opacity,
        warp_frequency=_scale(base_frequency, recipe.warp_multipliers),
        vein_frequency=_scale(base_frequency, recipe.vein_multipliers),
        warp_seed=(noise_seed + recipe.warp_seed_offset) % NOISE_SEED_RANGE,
        vein_seed=(noise_seed + recipe.vein_seed_offset) % NOISE_SEED_RANGE,
        vein_octaves=vein_octaves,
        gamma=gamma,
        displacement_scale=displacement,
        blur_std=blur,
    )


def derive_params(draw: Draw, color: ColorPreset) -> PatternParams:
    """Derive all pattern parameters from a random stream.

    Args:
        draw: Random stream; each call returns the next float in ``[0, 1)``.
        color: Selected colour preset.  Only the vein opacity bands depend on it.

    Returns:
        Frozen :class:`PatternParams`.  Exactly 18 values are drawn.
    """
    color = ColorPreset(color)

    base_frequency = _band(draw, 0.005, 0.01)
    octaves = 3 + math.floor(draw() * 3)
    noise_seed = math.floor(draw() * NOISE_SEED_RANGE)
    rotation = math.floor(draw() * 360)
    contrast = _band(draw, 0.6, 0.6)

    opacities = [_band(draw, *recipe.opacity_band(color)) for recipe in LAYER_RECIPES]

    pulses = 10 + math.floor(draw() * 6)
    pulse_width = _band(draw, 0.12, 0.06)

    layers = tuple(
        _derive_layer(draw, recipe, opacity, base_frequency, noise_seed)
        for recipe, opacity in zip(LAYER_RECIPES, opacities)
    )

    return PatternParams(
        base_frequency=base_frequency,
        octaves=octaves,
        noise_seed=noise_seed,
        rotation=rotation,
        contrast=contrast,
        pulses=pulses,
        pulse_width=pulse_width,
        threshold_table=threshold_table(pulses, pulse_width),
        layers=layers,
    )
