"""
Runtime configuration.

Settings are read from TYRETRACK_* environment variables once and then
passed explicitly to the application factory.
"""

import logging
import os
from pathlib import Path
from typing import Mapping, Optional

from pydantic import BaseModel, Field, field_validator


ENV_PREFIX = "TYRETRACK_"
LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")


class Settings(BaseModel):
    """Server settings."""
    data_path: Optional[Path] = Field(
        default=None,
        description="JSON snapshot file or directory. When unset, data lives in memory only.",
    )
    log_level: str = Field(default="INFO", description="Root log level")
    cors_origins: list[str] = Field(default_factory=lambda: ["*"], description="Allowed CORS origins")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        v = v.upper()
        if v not in LOG_LEVELS:
            raise ValueError(f"Unknown log level: {v}")
        return v

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        """Build settings from environment variables."""
        env = os.environ if environ is None else environ
        values: dict = {}
        if env.get(f"{ENV_PREFIX}DATA_PATH"):
            values["data_path"] = env[f"{ENV_PREFIX}DATA_PATH"]
        if env.get(f"{ENV_PREFIX}LOG_LEVEL"):
            values["log_level"] = env[f"{ENV_PREFIX}LOG_LEVEL"]
        if env.get(f"{ENV_PREFIX}CORS_ORIGINS"):
            values["cors_origins"] = [
                o.strip() for o in env[f"{ENV_PREFIX}CORS_ORIGINS"].split(",") if o.strip()
            ]
        return cls(**values)


def configure_logging(settings: Settings) -> None:
    """Configure root logging once for the process."""
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
