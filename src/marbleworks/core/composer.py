"""SVG composition for marble patterns.

The document is a base slab with two translucent vein layers on top.  Each
vein layer is a rectangle in the vein colour drawn through its own SVG filter
graph::

    feTurbulence (warp field, low frequency)
    feTurbulence (vein noise, higher frequency)
      -> feColorMatrix saturate 0          grayscale
      -> feComponentTransfer gamma         optional contrast curve
      -> feComponentTransfer table         64-entry band threshold
      -> feDisplacementMap by warp field   flowing veins
      -> feGaussianBlur                    soften
      -> feColorMatrix luminanceToAlpha
      -> feComponentTransfer alpha gamma   optional boost
      -> feComposite in SourceGraphic

The viewBox always matches the internal drawing size; only the declared
``width``/``height`` change with the output resolution.

Numbers are written with half-up rounding of their exact binary value so
that the markup for a given seed is stable across implementations.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal

from marbleworks.core.params import LayerParams, PatternParams
from marbleworks.core.presets import ColorPair

SVG_NS = "http://www.w3.org/2000/svg"
SHARPEN_KERNEL = "0 -1 0 -1 5 -1 0 -1 0"


def fixed(value: float, digits: int) -> str:
    """Format *value* with exactly *digits* decimals, rounding ties upward."""
    quantum = Decimal(1).scaleb(-digits)
    return f"{Decimal(value).quantize(quantum, rounding=ROUND_HALF_UP):f}"


def _frequency(pair: tuple[float, float]) -> str:
    return f"{fixed(pair[0], 4)} {fixed(pair[1], 4)}"


def _channel_funcs(channels: str, indent: str, **attrs: str) -> list[str]:
    rendered = " ".join(f'{name}="{value}"' for name, value in attrs.items())
    return [f"{indent}<feFunc{channel} {rendered}/>" for channel in channels]


def _vein_filter(
    filter_id: str, layer: LayerParams, octaves: int, table: str, suffix: str
) -> list[str]:
    """Build one vein filter element as a list of lines.

    Args:
        filter_id: ``id`` attribute of the ``<filter>``.
        layer: Derived values for this layer.
        octaves: Octave count of the warp field (shared by both layers).
        table: Space-separated threshold table.
        suffix: Appended to every intermediate result name so the two
            layers stay distinguishable in the markup.
    """
    pad = "      "
    lines = [
        f'    <filter id="{filter_id}" x="-40%" y="-40%" width="180%" height="180%" '
        'color-interpolation-filters="sRGB">',
        f'{pad}<feTurbulence type="fractalNoise" baseFrequency="{_frequency(layer.warp_frequency)}" '
        f'numOctaves="{octaves}" seed="{layer.warp_seed}" result="warpMap{suffix}"/>',
        f'{pad}<feTurbulence type="fractalNoise" baseFrequency="{_frequency(layer.vein_frequency)}" '
        f'numOctaves="{layer.vein_octaves}" seed="{layer.vein_seed}" result="veinNoise{suffix}"/>',
        f'{pad}<feColorMatrix in="veinNoise{suffix}" type="saturate" values="0" '
        f'result="veinGray{suffix}"/>',
    ]

    mask_source = f"veinGray{suffix}"
    if layer.gamma is not None:
        lines.append(
            f'{pad}<feComponentTransfer in="{mask_source}" result="veinContrast{suffix}">'
        )
        for channel, exponent in zip("RGB", layer.gamma):
            lines += _channel_funcs(
                channel,
                pad + "  ",
                type="gamma",
                amplitude="1",
                exponent=fixed(exponent, 2),
                offset="0",
            )
        lines.append(f"{pad}</feComponentTransfer>")
        mask_source = f"veinContrast{suffix}"

    lines.append(f'{pad}<feComponentTransfer in="{mask_source}" result="veinBand{suffix}">')
    lines += _channel_funcs("RGB", pad + "  ", type="table", tableValues=table)
    lines += [
        f"{pad}</feComponentTransfer>",
        f'{pad}<feDisplacementMap in="veinBand{suffix}" in2="warpMap{suffix}" '
        f'xChannelSelector="R" yChannelSelector="G" scale="{layer.displacement_scale}" '
        f'result="veinWarped{suffix}"/>',
        f'{pad}<feGaussianBlur in="veinWarped{suffix}" stdDeviation="{fixed(layer.blur_std, 2)}" '
        f'result="veinSoft{suffix}"/>',
        f'{pad}<feColorMatrix in="veinSoft{suffix}" type="luminanceToAlpha" '
        f'result="veinAlpha{suffix}"/>',
    ]

    if layer.recipe.alpha_boost is not None:
        lines.append(
            f'{pad}<feComponentTransfer in="veinAlpha{suffix}" result="veinAlpha{suffix}">'
        )
        lines += _channel_funcs(
            "A",
            pad + "  ",
            type="gamma",
            amplitude="1",
            exponent=str(layer.recipe.alpha_boost),
            offset="0",
        )
        lines.append(f"{pad}</feComponentTransfer>")

    lines += [
        f'{pad}<feComposite in="SourceGraphic" in2="veinAlpha{suffix}" operator="in"/>',
        "    </filter>",
    ]
    return lines


def format_table(table: tuple[int, ...]) -> str:
    return " ".join(str(entry) for entry in table)


def compose_svg(
    params: PatternParams,
    pair: ColorPair,
    size: tuple[int, int],
    output_size: tuple[int, int] | None = None,
    sharp: bool = False,
) -> str:
    """Assemble the complete SVG document.

    Args:
        params: Derived pattern parameters.
        pair: Base and vein colours.
        size: Internal ``(width, height)``, used for the viewBox.
        output_size: Declared ``(width, height)`` in pixels.  Defaults to
            *size*.
        sharp: Wrap the composition in a 3x3 sharpening convolution.

    Returns:
        The SVG markup.  Identical arguments always give identical output.
    """
    width, height = size
    out_width, out_height = output_size or size
    table = format_table(params.threshold_table)

    lines = [
        f'<svg xmlns="{SVG_NS}" width="{out_width}" height="{out_height}" '
        f'viewBox="0 0 {width} {height}">',
        "  <defs>",
        '    <filter id="postsharp" x="-2%" y="-2%" width="104%" height="104%" '
        'color-interpolation-filters="sRGB">',
        f'      <feConvolveMatrix order="3" kernelMatrix="{SHARPEN_KERNEL}" divisor="1" '
        'preserveAlpha="true"/>',
        "    </filter>",
    ]

    filter_ids = []
    for index, layer in enumerate(params.layers, start=1):
        filter_id = "veinFilter" if index == 1 else f"veinFilter{index}"
        suffix = "" if index == 1 else str(index)
        filter_ids.append(filter_id)
        lines += _vein_filter(filter_id, layer, params.octaves, table, suffix)

    lines += [
        "  </defs>",
        '  <g filter="url(#postsharp)">' if sharp else "  <g>",
        f'    <rect width="100%" height="100%" fill="{pair.base}"/>',
    ]
    for filter_id, layer in zip(filter_ids, params.layers):
        # Rotation is drawn but never applied.
        lines.append(
            f'    <rect width="100%" height="100%" fill="{pair.vein}" '
            f'filter="url(#{filter_id})" opacity="{fixed(layer.opacity, 2)}"/>'
        )
    lines += ["  </g>", "</svg>"]
    return "\n".join(lines) + "\n"
