"""Marbleworks — FastAPI Application.

This module is the single entry point for the web service.  It defines the
FastAPI ``app`` instance, the marble image route, and the ``main()`` CLI
function that launches the uvicorn server.

Architecture
------------
The application is stateless:

- **Query validation** is performed by FastAPI against
  :class:`~marbleworks.api.models.MarbleQuery`; invalid values produce a
  422 response before any generation happens.
- **Generation** is delegated to :func:`~marbleworks.core.generator.render_marble`,
  which builds the SVG deterministically from the query.
- **Rasterization** uses one :class:`~marbleworks.core.raster.Rasterizer`
  per process, stored on ``app.state``.  The backend is loaded on the first
  PNG request.
- **Interactive API docs** are served at ``/``.

Endpoints
---------
========  ==========================  ====================================
Method    Path                        Purpose
========  ==========================  ====================================
GET       ``/``                       OpenAPI (Swagger UI) documentation
GET       ``/api/v1/marbleImage``     Generate a marble image (SVG or PNG)
========  ==========================  ====================================

Usage
-----
CLI (installed entry point)::

    marbleworks

Direct invocation::

    python -m marbleworks.api.main
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Annotated

from fastapi import FastAPI, Query, Request
from fastapi.responses import Response

from marbleworks import __version__
from marbleworks.api.models import MarbleQuery
from marbleworks.core.config import config
from marbleworks.core.generator import PNG_MEDIA_TYPE, SVG_MEDIA_TYPE, render_marble
from marbleworks.core.raster import Rasterizer

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Create the shared rasterizer on startup.

    The resvg backend is not imported here; that happens lazily on the
    first PNG request so the service starts even where resvg is missing.

    Args:
        app: The FastAPI application instance.

    Yields:
        Control back to the application for the duration of its lifetime.
    """
    app.state.rasterizer = Rasterizer(max_dimension=config.raster_max_dimension)
    logger.info(
        "Rasterizer created (max dimension %d px).", config.raster_max_dimension
    )
    yield


app = FastAPI(
    title="Marbleworks Marble Image Generation API",
    description="Create cool looking marble images in the colours you specify.",
    version=__version__,
    docs_url="/",
    lifespan=lifespan,
)


@app.get(
    "/api/v1/marbleImage",
    summary="Generate a marble pattern image",
    response_class=Response,
    responses={
        200: {
            "description": "Marble image (SVG or PNG)",
            "content": {
                SVG_MEDIA_TYPE: {"schema": {"type": "string", "format": "binary"}},
                PNG_MEDIA_TYPE: {"schema": {"type": "string", "format": "binary"}},
            },
        }
    },
)
async def marble_image(
    request: Request, query: Annotated[MarbleQuery, Query()]
) -> Response:
    """Generate a marble image.

    The same ``username`` and ``datetime`` always produce the same pattern.
    When PNG output is requested but rasterization fails, the SVG is
    returned instead with an ``X-Marble-PNG-Fallback: true`` header.

    Args:
        request: Incoming request; used to reach the shared rasterizer.
        query: Validated query parameters.

    Returns:
        Binary response with ``Content-Type`` and ``Content-Disposition``
        headers set.
    """
    options = query.to_options()
    image = await render_marble(options, request.app.state.rasterizer)
    logger.debug(
        "Generated %s marble (%d bytes, fallback=%s)",
        image.media_type,
        len(image.body),
        image.fallback,
    )
    return Response(content=image.body, media_type=image.media_type, headers=image.headers)


# ---------------------------------------------------------------------------
# CLI entry point.
# ---------------------------------------------------------------------------


def main() -> None:
    """Launch the uvicorn ASGI server.

    Reads host, port and log level from :data:`~marbleworks.core.config.config`
    (``MARBLEWORKS_SERVER_HOST``, ``MARBLEWORKS_SERVER_PORT``,
    ``MARBLEWORKS_LOG_LEVEL``).

    This function is registered as the ``marbleworks`` console script in
    ``pyproject.toml``.
    """
    import uvicorn

    logging.basicConfig(
        level=config.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    uvicorn.run(
        "marbleworks.api.main:app",
        host=config.server_host,
        port=config.server_port,
        log_level=config.log_level.lower(),
        reload=False,
    )


if __name__ == "__main__":
    main()
