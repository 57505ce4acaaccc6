"""Core functionality for marble generation.

Architecture Overview
---------------------
The core module is layered, leaves first:

1. **Random stream** (rng.py):
   - String hash from the seed key (username + millisecond timestamp)
   - 32-bit mixing generator producing floats in [0, 1)

2. **Static tables** (presets.py):
   - Colour presets and their base/vein colour pairs
   - Aspect classes, resolution tiers and their pixel sizes

3. **Parameter derivation** (params.py):
   - Fixed-order draws into a frozen PatternParams bundle
   - Pulsed threshold table

4. **Composition** (composer.py):
   - SVG filter graph for two vein layers over a base slab

5. **Rasterization** (raster.py):
   - Lazily initialised resvg backend with a size cap

6. **Pipeline** (generator.py):
   - Options in, RenderedImage out, with SVG fallback on PNG failure

Configuration lives in config.py (Pydantic Settings, MARBLEWORKS_ prefix).

Usage Example
-------------
    from marbleworks.core import MarbleOptions, build_svg

    svg = build_svg(MarbleOptions(username="alice", timestamp=1700000000000))
"""

from marbleworks.core.config import MarbleworksConfig, config
from marbleworks.core.generator import MarbleOptions, RenderedImage, build_svg, render_marble
from marbleworks.core.raster import RasterizationError, Rasterizer

__all__ = [
    "MarbleOptions",
    "MarbleworksConfig",
    "RasterizationError",
    "Rasterizer",
    "RenderedImage",
    "build_svg",
    "config",
    "render_marble",
]
