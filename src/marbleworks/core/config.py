"""Configuration management for Marbleworks.

This module provides centralized configuration management using Pydantic Settings.
All configuration is loaded from environment variables with the MARBLEWORKS_
prefix, allowing easy customization without code changes.

Environment Variable Loading
-----------------------------
Configuration values are loaded in the following priority order:
1. Environment variables (MARBLEWORKS_* prefix)
2. .env file in the project root
3. Default values defined in MarbleworksConfig

Example .env file:
    MARBLEWORKS_SERVER_PORT=8787
    MARBLEWORKS_RASTER_MAX_DIMENSION=4096
    MARBLEWORKS_LOG_LEVEL=DEBUG

Global Configuration Instance
------------------------------
A global `config` instance is created automatically at module import time.
Generation itself holds no configuration: the pattern depends only on the
request parameters, so the same request renders the same SVG regardless of
how the server is configured.

Usage Example
-------------
    from marbleworks.core.config import config

    print(config.server_port)
    print(config.raster_max_dimension)
"""

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class MarbleworksConfig(BaseSettings):
    """Main configuration for the Marbleworks service.

    Attributes
    ----------
    Server Settings:
        server_host : str
            Bind address for uvicorn (0.0.0.0 for all interfaces)
        server_port : int
            Port for uvicorn (1024-65535)

    Rendering Settings:
        raster_max_dimension : int
            Largest PNG side the rasterizer is asked to produce. Larger
            declared output sizes are scaled down preserving aspect ratio.

    Logging:
        log_level : Literal["DEBUG", "INFO", "WARNING", "ERROR"]
            Root log level applied by the ``marbleworks`` entry point

    Examples
    --------
        >>> custom_config = MarbleworksConfig(server_port=9000, _env_file=None)
        >>> custom_config.raster_max_dimension
        4096
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="MARBLEWORKS_",
        case_sensitive=False,
        extra="ignore",
    )

    # Server settings
    server_host: str = Field(
        default="0.0.0.0",
        description="Server bind address (0.0.0.0 for local network)",
    )
    server_port: int = Field(
        default=8787,
        description="Server port",
        ge=1024,
        le=65535,
    )

    # Rendering settings
    raster_max_dimension: int = Field(
        default=4096,
        description="Cap on the larger PNG dimension handed to the rasterizer",
        ge=64,
        le=16384,
    )

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO",
        description="Log level used when the server is started via main()",
    )


# Global configuration instance
# Loads values from environment variables (MARBLEWORKS_* prefix) and .env file.
config = MarbleworksConfig()
