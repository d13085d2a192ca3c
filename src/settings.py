"""Library settings and configuration."""

from __future__ import annotations

from functools import lru_cache
from typing import Annotated, Literal, TypeAlias

from loguru import logger
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from utils.logger import configure_logging

LogLevel: TypeAlias = Literal["TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL"]


class HeatmapSettings(BaseSettings):
    """
    Heatmap decoding configuration settings.

    Settings can be configured via:

    1. Environment variables (e.g., HEATMAP_FETCH_TIMEOUT=2.5)
    2. .env file in the working directory
    3. Default values defined below

    All settings use the HEATMAP_ prefix for environment variables.

    .. rubric:: Examples

    Set the fetch timeout via environment::

        export HEATMAP_FETCH_TIMEOUT=2.5
        export HEATMAP_MAX_IMAGE_BYTES=5242880  # 5MB
    """

    fetch_timeout: Annotated[
        float,
        Field(
            default=10.0,
            description="Timeout in seconds for fetching a heatmap image from a URL",
            gt=0,
        ),
    ]

    max_image_bytes: Annotated[
        int,
        Field(
            default=20 * 1024 * 1024,  # 20MB
            description="Maximum size in bytes of an encoded heatmap image",
            gt=0,
        ),
    ]

    log_level: Annotated[
        LogLevel,
        Field(default="INFO", description="Minimum level of emitted log records"),
    ]

    model_config = SettingsConfigDict(
        env_prefix="HEATMAP_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        frozen=True,
        extra="ignore",
    )

    def log_config(self) -> None:
        logger.info(
            f"Heatmap settings: fetch timeout {self.fetch_timeout}s, "
            f"max image size {self.max_image_bytes / 1024 / 1024:.1f}MB, "
            f"log level {self.log_level}"
        )


@lru_cache
def get_settings() -> HeatmapSettings:
    """Get the cached settings instance."""
    return HeatmapSettings()  # type: ignore


def setup_logging(settings: HeatmapSettings | None = None) -> int:
    """Configure loguru at the configured level and log the active settings."""
    settings = settings or get_settings()
    handler_id = configure_logging(settings.log_level)
    settings.log_config()
    return handler_id
