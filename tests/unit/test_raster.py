"""Tests for marbleworks.core.raster — PNG rasterization.

Most tests use a mocked ``resvg_py`` module so that they run without the
compiled backend.  ``TestRealBackend`` renders through resvg itself and is
skipped only when the bindings are not installed.  Tests cover:

- Output size capping.
- Lazy, idempotent backend initialisation.
- Backend invocation arguments.
- Error wrapping for import and render failures.
- Vein structure surviving rasterization.

Implementation Note
-------------------
``Rasterizer.initialize()`` imports ``resvg_py`` inside the method body, so
the import is mocked with ``sys.modules`` injection rather than ``@patch``.
"""

from __future__ import annotations

import io
import sys
from unittest.mock import MagicMock

import pytest

from marbleworks.core.generator import build_svg
from marbleworks.core.presets import COLOR_PAIRS, ColorPreset
from marbleworks.core.raster import RasterizationError, Rasterizer, cap_dimensions


class TestCapDimensions:
    """Verify the resolution cap."""

    @pytest.mark.parametrize(
        "size, expected",
        [
            ((7680, 4320), (4096, 2304)),
            ((4320, 7680), (2304, 4096)),
            ((7680, 7680), (4096, 4096)),
            ((3840, 3840), (3840, 3840)),
            ((3840, 2160), (3840, 2160)),
            ((4096, 4096), (4096, 4096)),
        ],
    )
    def test_default_cap(self, size, expected):
        assert cap_dimensions(*size) == expected

    def test_custom_cap(self):
        assert cap_dimensions(1600, 900, 800) == (800, 450)

    def test_never_below_one(self):
        assert cap_dimensions(100000, 1, 100) == (100, 1)


class TestInitialize:
    """Verify lazy backend loading."""

    def test_not_initialised_on_construction(self):
        assert Rasterizer().is_initialized is False

    def test_initialise_imports_backend(self, monkeypatch):
        fake = MagicMock()
        monkeypatch.setitem(sys.modules, "resvg_py", fake)
        r = Rasterizer()
        r.initialize()
        assert r.is_initialized
        assert r._backend is fake

    def test_initialise_is_idempotent(self, monkeypatch):
        first = MagicMock()
        monkeypatch.setitem(sys.modules, "resvg_py", first)
        r = Rasterizer()
        r.initialize()
        monkeypatch.setitem(sys.modules, "resvg_py", MagicMock())
        r.initialize()
        assert r._backend is first

    def test_missing_backend_raises(self, monkeypatch):
        # A None entry in sys.modules makes the import raise ImportError.
        monkeypatch.setitem(sys.modules, "resvg_py", None)
        r = Rasterizer()
        with pytest.raises(RasterizationError):
            r.initialize()
        assert r.is_initialized is False


class TestRenderPng:
    """Verify rendering calls and error handling."""

    def test_returns_backend_bytes(self, rasterizer, fake_backend):
        png = rasterizer.render_png("<svg/>", 1000, 1000)
        assert png == fake_backend.svg_to_bytes.return_value

    def test_list_result_converted_to_bytes(self, rasterizer, fake_backend):
        """Older bindings return a list of ints."""
        fake_backend.svg_to_bytes.return_value = [137, 80, 78, 71]
        assert rasterizer.render_png("<svg/>", 10, 10) == b"\x89PNG"

    def test_fits_to_width_without_background(self, rasterizer, fake_backend):
        rasterizer.render_png("<svg/>", 1600, 900)
        kwargs = fake_backend.svg_to_bytes.call_args.kwargs
        assert kwargs["svg_string"] == "<svg/>"
        assert kwargs["width"] == 1600
        assert "background" not in kwargs

    def test_large_output_is_capped(self, rasterizer, fake_backend):
        rasterizer.render_png("<svg/>", 7680, 4320)
        assert fake_backend.svg_to_bytes.call_args.kwargs["width"] == 4096

    def test_tall_output_is_capped_by_height(self, rasterizer, fake_backend):
        rasterizer.render_png("<svg/>", 4320, 7680)
        assert fake_backend.svg_to_bytes.call_args.kwargs["width"] == 2304

    def test_backend_error_is_wrapped(self, rasterizer, fake_backend):
        fake_backend.svg_to_bytes.side_effect = ValueError("bad svg")
        with pytest.raises(RasterizationError, match="bad svg"):
            rasterizer.render_png("<svg/>", 100, 100)


class TestRealBackend:
    """Render the reference marble through resvg and inspect the pixels."""

    @pytest.fixture
    def rendered(self, alice_options):
        pytest.importorskip("resvg_py")
        from PIL import Image

        png = Rasterizer(max_dimension=400).render_png(build_svg(alice_options), 1000, 1000)
        return Image.open(io.BytesIO(png)).convert("RGB")

    def test_output_is_capped(self, rendered):
        assert rendered.size == (400, 400)

    def test_veins_are_drawn(self, rendered):
        """A flat slab would contain a single colour."""
        colours = rendered.getcolors(maxcolors=400 * 400)
        assert len(colours) > 10

    def test_base_shows_between_veins(self, rendered):
        base = tuple(int(COLOR_PAIRS[ColorPreset.BLACK].base[i : i + 2], 16) for i in (1, 3, 5))
        counts = {colour: count for count, colour in rendered.getcolors(maxcolors=400 * 400)}
        assert base in counts
        assert counts[base] < 400 * 400
