"""Integration tests for marbleworks.api.main — FastAPI REST API endpoints.

All tests use the FastAPI TestClient with a mocked resvg backend so that
the compiled bindings are not required.  Tests cover:

- ``GET /`` — interactive API documentation.
- ``GET /api/v1/marbleImage`` — SVG and PNG generation, headers, fallback,
  and query validation.
"""

from __future__ import annotations

import xml.etree.ElementTree as ET

import pytest

ENDPOINT = "/api/v1/marbleImage"
ALICE = {"username": "alice", "datetime": "2023-11-14T22:13:20.000Z"}


class TestDocs:
    """Test GET / — OpenAPI documentation."""

    def test_docs_served_at_root(self, test_client):
        resp = test_client.get("/")
        assert resp.status_code == 200
        assert "text/html" in resp.headers["content-type"]

    def test_openapi_lists_endpoint(self, test_client):
        schema = test_client.get("/openapi.json").json()
        assert ENDPOINT in schema["paths"]
        params = {p["name"] for p in schema["paths"][ENDPOINT]["get"]["parameters"]}
        assert {"color", "datetime", "username", "size", "resolution", "sharp", "type"} <= params


class TestMarbleSvg:
    """Test SVG output."""

    def test_default_request(self, test_client):
        resp = test_client.get(ENDPOINT)
        assert resp.status_code == 200
        assert resp.headers["content-type"] == "image/svg+xml"
        assert resp.headers["content-disposition"] == 'attachment; filename="marble.svg"'
        assert "x-marble-png-fallback" not in resp.headers
        root = ET.fromstring(resp.content)
        assert root.get("viewBox") == "0 0 1000 1000"

    def test_reference_scenario(self, test_client):
        resp = test_client.get(ENDPOINT, params={**ALICE, "color": "black", "size": "1:1"})
        assert resp.status_code == 200
        assert 'width="1000" height="1000" viewBox="0 0 1000 1000"' in resp.text
        assert 'fill="#0b0b0b"' in resp.text
        assert 'opacity="0.38"' in resp.text

    def test_same_query_same_bytes(self, test_client):
        first = test_client.get(ENDPOINT, params=ALICE)
        second = test_client.get(ENDPOINT, params=ALICE)
        assert first.content == second.content

    def test_username_changes_image(self, test_client):
        alice = test_client.get(ENDPOINT, params=ALICE)
        bob = test_client.get(ENDPOINT, params={**ALICE, "username": "bob"})
        assert alice.content != bob.content

    def test_resolution_and_size(self, test_client):
        resp = test_client.get(ENDPOINT, params={**ALICE, "size": "16:9", "resolution": "4k"})
        root = ET.fromstring(resp.content)
        assert root.get("width") == "3840"
        assert root.get("height") == "2160"
        assert root.get("viewBox") == "0 0 1600 900"

    def test_sharp(self, test_client):
        resp = test_client.get(ENDPOINT, params={**ALICE, "sharp": "true"})
        assert '<g filter="url(#postsharp)">' in resp.text


class TestMarblePng:
    """Test PNG output and fallback."""

    def test_png(self, test_client, fake_backend):
        resp = test_client.get(ENDPOINT, params={**ALICE, "type": "png"})
        assert resp.status_code == 200
        assert resp.headers["content-type"] == "image/png"
        assert resp.headers["content-disposition"] == 'attachment; filename="marble.png"'
        assert resp.headers["cache-control"] == "no-store"
        assert resp.content == fake_backend.svg_to_bytes.return_value

    def test_png_8k_capped(self, test_client, fake_backend):
        resp = test_client.get(
            ENDPOINT, params={**ALICE, "type": "png", "resolution": "8k", "size": "9:16"}
        )
        assert resp.status_code == 200
        assert fake_backend.svg_to_bytes.call_args.kwargs["width"] == 2304

    def test_fallback(self, test_client, fake_backend):
        fake_backend.svg_to_bytes.side_effect = MemoryError("too big")
        resp = test_client.get(ENDPOINT, params={**ALICE, "type": "png"})
        assert resp.status_code == 200
        assert resp.headers["content-type"] == "image/svg+xml"
        assert resp.headers["x-marble-png-fallback"] == "true"
        assert resp.headers["content-disposition"] == 'attachment; filename="marble.svg"'
        root = ET.fromstring(resp.content)
        assert root.tag == "{http://www.w3.org/2000/svg}svg"


class TestValidation:
    """Test query validation errors."""

    def test_unknown_color(self, test_client):
        assert test_client.get(ENDPOINT, params={"color": "green"}).status_code == 422

    def test_bad_size(self, test_client):
        assert test_client.get(ENDPOINT, params={"size": "4:3"}).status_code == 422

    def test_bad_datetime(self, test_client):
        assert test_client.get(ENDPOINT, params={"datetime": "yesterday"}).status_code == 422

    @pytest.mark.parametrize("value", ["yes", "1", "on", "y"])
    def test_sharp_accepts_only_true_or_false(self, test_client, value):
        assert test_client.get(ENDPOINT, params={**ALICE, "sharp": value}).status_code == 422
