"""
Configuration for imagecore.

Settings are grouped by concern in pydantic models and can be overridden
through IMAGECORE_* environment variables. Use get_settings() to obtain the
process-wide instance.
"""

import logging
import os
from functools import lru_cache
from typing import Any, Dict, Literal, Mapping, Optional

from pydantic import BaseModel, Field

ENV_PREFIX = "IMAGECORE_"

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class SystemSettings(BaseModel):
    """Process level settings"""

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="WARNING", description="Level applied by configure_logging()"
    )
    environment: str = Field(default="production", description="Deployment environment name")


class ImageSettings(BaseModel):
    """Behaviour of image containers"""

    return_source_on_full_selection: bool = Field(
        default=True,
        description="Return the image itself when a slice selects every element",
    )
    percentile_sort_kind: Literal["quicksort", "mergesort", "heapsort", "stable"] = Field(
        default="quicksort", description="numpy sort algorithm used by percentile()"
    )


class Settings(BaseModel):
    """Aggregate settings"""

    system: SystemSettings = Field(default_factory=SystemSettings)
    image: ImageSettings = Field(default_factory=ImageSettings)

    @property
    def environment(self) -> str:
        return self.system.environment

    def to_dict(self) -> Dict[str, Any]:
        """Export settings to dictionary"""
        return self.model_dump()

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        """
        Build settings from IMAGECORE_* environment variables.

        Args:
            environ: Mapping to read instead of os.environ

        Returns:
            Validated Settings instance
        """
        environ = os.environ if environ is None else environ

        system: Dict[str, Any] = {}
        image: Dict[str, Any] = {}

        if f"{ENV_PREFIX}LOG_LEVEL" in environ:
            system["log_level"] = environ[f"{ENV_PREFIX}LOG_LEVEL"].upper()
        if f"{ENV_PREFIX}ENVIRONMENT" in environ:
            system["environment"] = environ[f"{ENV_PREFIX}ENVIRONMENT"]
        if f"{ENV_PREFIX}RETURN_SOURCE_ON_FULL_SELECTION" in environ:
            image["return_source_on_full_selection"] = environ[
                f"{ENV_PREFIX}RETURN_SOURCE_ON_FULL_SELECTION"
            ]
        if f"{ENV_PREFIX}PERCENTILE_SORT_KIND" in environ:
            image["percentile_sort_kind"] = environ[f"{ENV_PREFIX}PERCENTILE_SORT_KIND"].lower()

        return cls(system=SystemSettings(**system), image=ImageSettings(**image))


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings.from_env()


def configure_logging(settings: Optional[Settings] = None) -> None:
    """
    Configure root logging for applications embedding imagecore.

    Args:
        settings: Settings to apply (defaults to get_settings())
    """
    settings = settings or get_settings()
    logging.basicConfig(level=getattr(logging, settings.system.log_level), format=LOG_FORMAT)
    logging.getLogger(__name__).debug(f"Logging configured at {settings.system.log_level}")
