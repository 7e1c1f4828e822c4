from __future__ import annotations
import os
from typing import Any, Dict, Optional
import yaml  # type: ignore
from pydantic import BaseModel, ConfigDict, ValidationError, field_validator
from ..obs.logging import get_logger
from ..utils.paths import config_file

"""
Run settings loaded from <config>/vulcano.yml.

Only `backend` and `log_level` are read by vulcano itself. Any other key is
kept on the model and handed to the backend untouched.
"""

SETTINGS_FILE = "vulcano.yml"

LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG", "NOTSET")

logger = get_logger("vulcano.config")


class Settings(BaseModel):
    model_config = ConfigDict(extra="allow")

    backend: str = "local"
    log_level: str = "INFO"

    @field_validator("log_level")
    @classmethod
    def _known_level(cls, v: str) -> str:
        level = v.upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"unknown log level: {v}")
        return level


def load_settings(path: Optional[str] = None) -> Settings:
    """
    Load settings from `path` (default <config>/vulcano.yml) if present, else defaults.
    A malformed file is logged and ignored.
    """
    path = path or config_file(SETTINGS_FILE)
    if not os.path.exists(path):
        return Settings()
    try:
        with open(path, "r", encoding="utf-8") as f:
            doc: Dict[str, Any] = yaml.safe_load(f) or {}
        if not isinstance(doc, dict):
            raise ValueError(f"expected a mapping, got {type(doc).__name__}")
        return Settings.model_validate(doc)
    except (OSError, yaml.YAMLError, TypeError, ValueError, ValidationError) as e:
        logger.warning(f"Ignoring settings file {path}", extra={"path": path, "error": str(e)})
        return Settings()
