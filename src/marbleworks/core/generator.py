"""Marble generation pipeline.

Data flow for one request::

    MarbleOptions -> seed key -> random stream -> PatternParams
                  -> SVG document -> (optional) PNG -> RenderedImage

Everything up to the SVG is a pure function of the options.  PNG output is
best effort: if rasterization fails the SVG is returned instead and the
result is flagged as a fallback.

Usage
-----
::

    from marbleworks.core.generator import MarbleOptions, build_svg

    svg = build_svg(MarbleOptions(username="alice", timestamp=1700000000000))
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from starlette.concurrency import run_in_threadpool

from marbleworks.core.composer import compose_svg
from marbleworks.core.params import PatternParams, derive_params
from marbleworks.core.presets import (
    COLOR_PAIRS,
    DEFAULT_COLOR,
    DEFAULT_RESOLUTION,
    DEFAULT_SIZE,
    ColorPreset,
    OutputType,
    Resolution,
    SizeClass,
    internal_dimensions,
    output_dimensions,
)
from marbleworks.core.raster import RasterizationError, Rasterizer
from marbleworks.core.rng import seed_key, stream_for, timestamp_ms

logger = logging.getLogger(__name__)

SVG_MEDIA_TYPE = "image/svg+xml"
PNG_MEDIA_TYPE = "image/png"
FALLBACK_HEADER = "X-Marble-PNG-Fallback"


@dataclass(frozen=True)
class MarbleOptions:
    """Already-validated generation options.

    Attributes:
        color: Colour preset.
        timestamp: Milliseconds since the Unix epoch.  ``None`` means "now"
            and is resolved once, when the seed key is built.
        username: Optional user name mixed into the seed key.
        size: Aspect class.
        resolution: Declared output resolution tier.
        sharp: Apply the sharpening convolution.
        output: Requested output format.
    """

    color: ColorPreset = DEFAULT_COLOR
    timestamp: int | None = None
    username: str | None = None
    size: SizeClass = DEFAULT_SIZE
    resolution: Resolution = DEFAULT_RESOLUTION
    sharp: bool = False
    output: OutputType = OutputType.SVG

    def seed_key(self) -> str:
        millis = self.timestamp if self.timestamp is not None else timestamp_ms()
        return seed_key(self.username, millis)


@dataclass(frozen=True)
class RenderedImage:
    """Encoded image ready to be sent to a client."""

    body: bytes
    media_type: str
    fallback: bool = False

    @property
    def filename(self) -> str:
        return "marble.png" if self.media_type == PNG_MEDIA_TYPE else "marble.svg"

    @property
    def headers(self) -> dict[str, str]:
        headers = {"Content-Disposition": f'attachment; filename="{self.filename}"'}
        if self.media_type == PNG_MEDIA_TYPE:
            headers["Cache-Control"] = "no-store"
        if self.fallback:
            headers[FALLBACK_HEADER] = "true"
        return headers


def pattern_params(options: MarbleOptions, key: str | None = None) -> PatternParams:
    """Derive the parameter bundle for *options* (or an explicit seed *key*)."""
    rng = stream_for(key if key is not None else options.seed_key())
    return derive_params(rng, options.color)


def build_svg(options: MarbleOptions, key: str | None = None) -> str:
    """Render the SVG document for *options*.

    Args:
        options: Generation options.
        key: Seed key override.  When omitted it is built from the options'
            username and timestamp.

    Returns:
        SVG markup.  For a fixed key the markup is byte-identical across calls.
    """
    params = pattern_params(options, key)
    return compose_svg(
        params,
        COLOR_PAIRS[ColorPreset(options.color)],
        internal_dimensions(options.size),
        output_dimensions(options.size, options.resolution),
        sharp=options.sharp,
    )


async def render_marble(options: MarbleOptions, rasterizer: Rasterizer) -> RenderedImage:
    """Produce the final image for *options*.

    SVG requests return the markup directly.  PNG requests rasterize in a
    worker thread; on :class:`RasterizationError` the failure is logged and
    the SVG is returned with ``fallback=True``.
    """
    svg = build_svg(options)
    if OutputType(options.output) is not OutputType.PNG:
        return RenderedImage(body=svg.encode("utf-8"), media_type=SVG_MEDIA_TYPE)

    width, height = output_dimensions(options.size, options.resolution)
    try:
        png = await run_in_threadpool(rasterizer.render_png, svg, width, height)
    except RasterizationError:
        logger.exception("PNG rasterization failed; falling back to SVG.")
        return RenderedImage(
            body=svg.encode("utf-8"), media_type=SVG_MEDIA_TYPE, fallback=True
        )
    return RenderedImage(body=png, media_type=PNG_MEDIA_TYPE)
