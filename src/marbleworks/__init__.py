"""Marbleworks - deterministic procedural marble images over HTTP."""

__version__ = "0.1.0"

from marbleworks.core.config import MarbleworksConfig, config
from marbleworks.core.generator import MarbleOptions, RenderedImage, build_svg, render_marble

__all__ = [
    "MarbleOptions",
    "MarbleworksConfig",
    "RenderedImage",
    "build_svg",
    "config",
    "render_marble",
]
