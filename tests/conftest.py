"""Shared pytest fixtures for Marbleworks tests."""

from collections.abc import Generator
from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient

from marbleworks.core.generator import MarbleOptions
from marbleworks.core.presets import ColorPreset, SizeClass
from marbleworks.core.raster import Rasterizer

# Seed key "alice" + 1700000000000 (2023-11-14T22:13:20Z).
ALICE_TIMESTAMP = 1700000000000


@pytest.fixture
def alice_options() -> MarbleOptions:
    """Options for the reference scenario: alice, black, 1:1.

    Returns:
        MarbleOptions with a fixed timestamp
    """
    return MarbleOptions(
        color=ColorPreset.BLACK,
        timestamp=ALICE_TIMESTAMP,
        username="alice",
        size=SizeClass.SQUARE,
    )


@pytest.fixture
def fake_backend() -> MagicMock:
    """Create a mock resvg_py module returning a tiny PNG payload.

    Returns:
        MagicMock whose ``svg_to_bytes`` returns PNG-signature bytes
    """
    backend = MagicMock()
    backend.svg_to_bytes.return_value = b"\x89PNG\r\n\x1a\nfake"
    return backend


@pytest.fixture
def rasterizer(fake_backend: MagicMock) -> Rasterizer:
    """Create a Rasterizer with the mock backend already installed.

    Args:
        fake_backend: Mock resvg_py module from fixture

    Returns:
        Initialised Rasterizer that never loads the compiled backend
    """
    r = Rasterizer()
    r._backend = fake_backend
    return r


@pytest.fixture
def test_client(rasterizer: Rasterizer) -> Generator[TestClient, None, None]:
    """Create a TestClient with the mock rasterizer on ``app.state``.

    The lifespan runs when the client is entered, so the rasterizer is
    replaced afterwards.

    Args:
        rasterizer: Mock-backed rasterizer from fixture

    Yields:
        TestClient bound to the application
    """
    from marbleworks.api.main import app

    with TestClient(app) as client:
        app.state.rasterizer = rasterizer
        yield client
