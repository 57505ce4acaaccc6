"""Pydantic query model for the marble image API.

FastAPI uses :class:`MarbleQuery` to parse and validate the query string of
``GET /api/v1/marbleImage`` and to document it in the OpenAPI schema.  Once
validated, :meth:`MarbleQuery.to_options` converts it into the
:class:`~marbleworks.core.generator.MarbleOptions` the generator consumes.
"""

from __future__ import annotations

import datetime as dt
from typing import Literal

from pydantic import BaseModel, Field

from marbleworks.core.generator import MarbleOptions
from marbleworks.core.presets import (
    DEFAULT_COLOR,
    DEFAULT_RESOLUTION,
    DEFAULT_SIZE,
    ColorPreset,
    OutputType,
    Resolution,
    SizeClass,
)
from marbleworks.core.rng import timestamp_ms


class MarbleQuery(BaseModel):
    """Query parameters for ``GET /api/v1/marbleImage``.

    Attributes:
        color: Primary colour preset.
        datetime: Timestamp mixed into the seed.  Defaults to the current
            time, so omitting it yields a new pattern on every request.
        username: Optional name mixed into the seed.
        size: Aspect ratio class.
        resolution: Declared output size tier.  The pattern itself is the
            same at every tier.
        sharp: ``"true"`` to apply a subtle sharpening filter.
        type: Output format.
    """

    color: ColorPreset = Field(
        default=DEFAULT_COLOR,
        description="Primary colour preset.",
    )
    datetime: dt.datetime | None = Field(
        default=None,
        description="ISO-8601 timestamp used for the seed (defaults to now).",
    )
    username: str | None = Field(
        default=None,
        description="Optional username used for the seed.",
    )
    size: SizeClass = Field(
        default=DEFAULT_SIZE,
        description="Aspect ratio: 16:9, 9:16 or 1:1.",
    )
    resolution: Resolution = Field(
        default=DEFAULT_RESOLUTION,
        description="Output resolution: native, 2k, 4k or 8k.",
    )
    sharp: Literal["true", "false"] = Field(
        default="false",
        description="Apply a subtle sharpening filter ('true' or 'false').",
    )
    type: OutputType = Field(
        default=OutputType.SVG,
        description="Output format: svg or png.",
    )

    def to_options(self) -> MarbleOptions:
        """Convert to generator options, resolving the timestamp to milliseconds."""
        return MarbleOptions(
            color=self.color,
            timestamp=timestamp_ms(self.datetime),
            username=self.username,
            size=self.size,
            resolution=self.resolution,
            sharp=self.sharp == "true",
            output=self.type,
        )
