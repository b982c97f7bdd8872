from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path

from .snippet.storage import default_storage_dir

logger = logging.getLogger("omnisnip")

DEFAULT_LOG_LEVEL = "WARNING"
_LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")


@dataclass(slots=True)
class Settings:
    """Runtime configuration for the command-line front end."""

    storage_dir: Path
    log_level: str = DEFAULT_LOG_LEVEL

    @classmethod
    def from_env(cls) -> "Settings":
        raw_dir = os.getenv("OMNISNIP_HOME")
        storage_dir = Path(raw_dir).expanduser() if raw_dir else default_storage_dir()
        return cls(
            storage_dir=storage_dir,
            log_level=normalize_log_level(os.getenv("OMNISNIP_LOG_LEVEL")),
        )


def normalize_log_level(raw: str | None, default: str = DEFAULT_LOG_LEVEL) -> str:
    if not raw:
        return default
    level = raw.strip().upper()
    if level not in _LOG_LEVELS:
        logger.warning("Invalid log level %s, using %s", raw, default)
        return default
    return level


__all__ = ["DEFAULT_LOG_LEVEL", "Settings", "normalize_log_level"]
