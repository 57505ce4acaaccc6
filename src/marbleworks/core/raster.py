"""PNG rasterization of marble SVG documents.

Rasterization is delegated to resvg (via the ``resvg_py`` bindings), which
implements the SVG filter primitives the vein layers depend on
(``feTurbulence``, ``feComponentTransfer``, ``feDisplacementMap``,
``feGaussianBlur``, ``feComposite``).  The backend is imported lazily the
first time it is needed and then reused for the life of the process; the
import loads a compiled extension, which may be missing on a given host.
Any backend failure, including a failed import, surfaces as
:class:`RasterizationError` so that callers can fall back to the SVG.

Very large outputs are capped by :func:`cap_dimensions` before rendering to
keep memory use bounded.
"""

from __future__ import annotations

import logging
import math
import threading

logger = logging.getLogger(__name__)

DEFAULT_MAX_DIMENSION = 4096


class RasterizationError(RuntimeError):
    """Raised when an SVG document cannot be rendered to PNG."""


def cap_dimensions(
    width: int, height: int, max_dimension: int = DEFAULT_MAX_DIMENSION
) -> tuple[int, int]:
    """Scale ``(width, height)`` down so neither side exceeds *max_dimension*.

    Aspect ratio is preserved; results are floored and never below 1.
    Sizes already within the cap are returned unchanged.
    """
    if width <= max_dimension and height <= max_dimension:
        return width, height
    scale = min(max_dimension / width, max_dimension / height)
    return max(1, math.floor(width * scale)), max(1, math.floor(height * scale))


class Rasterizer:
    """Process-wide wrapper around the resvg backend.

    Attributes:
        max_dimension: Cap applied to the larger output side.
    """

    def __init__(self, max_dimension: int = DEFAULT_MAX_DIMENSION) -> None:
        self.max_dimension = max_dimension
        self._backend = None
        self._lock = threading.Lock()

    @property
    def is_initialized(self) -> bool:
        return self._backend is not None

    def initialize(self) -> None:
        """Import the backend.  Safe to call repeatedly and from many threads.

        Raises:
            RasterizationError: If the resvg bindings are not installed or fail to load.
        """
        if self._backend is not None:
            return
        with self._lock:
            if self._backend is not None:
                return
            try:
                import resvg_py
            except (ImportError, OSError) as e:
                raise RasterizationError(f"resvg is not available: {e}") from e
            self._backend = resvg_py
            logger.info("resvg rasterizer initialised.")

    def render_png(self, svg: str, width: int, height: int) -> bytes:
        """Render *svg* to PNG bytes on a transparent background.

        Args:
            svg: Complete SVG document.
            width: Requested output width in pixels.
            height: Requested output height in pixels.

        Returns:
            PNG-encoded image no larger than ``max_dimension`` on either side.

        Raises:
            RasterizationError: On any backend failure.
        """
        self.initialize()
        target_width, target_height = cap_dimensions(width, height, self.max_dimension)
        if (target_width, target_height) != (width, height):
            logger.debug(
                "Capped PNG output from %dx%d to %dx%d",
                width,
                height,
                target_width,
                target_height,
            )
        try:
            # Fit to width; the viewBox fixes the height.  No background keeps
            # the canvas transparent.
            png = bytes(
                self._backend.svg_to_bytes(svg_string=svg, width=target_width)
            )
        except Exception as e:
            raise RasterizationError(f"PNG rendering failed: {e}") from e
        logger.debug("Rendered %d PNG bytes at %dx%d", len(png), target_width, target_height)
        return png
