import logging
import traceback
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from .errors import (
    StorageDirectoryError,
    StorageError,
    StorageReadError,
    StorageWriteError,
)


class ErrorHandler:
    """Centralized error logging and user-facing messages for the CLI."""

    def __init__(self, log_level: str = "WARNING"):
        self.logger = self._setup_logging(log_level)
        self.errors: List[Dict[str, Any]] = []

    def _setup_logging(self, level: str) -> logging.Logger:
        """Configure the package logger."""
        logger = logging.getLogger("omnisnip")
        logger.setLevel(getattr(logging, level.upper()))

        if not logger.handlers:
            handler = logging.StreamHandler()
            formatter = logging.Formatter(
                '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
            )
            handler.setFormatter(formatter)
            logger.addHandler(handler)

        return logger

    def handle_error(self, error: Exception, context: Dict[str, Any]) -> Dict[str, Any]:
        """Log the error with its context and return a summary of it."""
        error_info = {
            "type": type(error).__name__,
            "message": str(error),
            "context": context,
            "user_message": self.describe(error),
            "traceback": traceback.format_exc() if self.logger.level <= logging.DEBUG else None,
        }

        self.logger.error(
            "%s: %s | Context: %s", error_info["type"], error_info["message"], context
        )
        if error_info["traceback"]:
            self.logger.debug(error_info["traceback"])

        self.errors.append(error_info)
        return error_info

    def collect_storage_error(self, error: StorageError, command: str) -> Dict[str, Any]:
        context = {
            "command": command,
            "path": str(error.path),
        }
        return self.handle_error(error, context)

    @staticmethod
    def describe(error: Exception) -> str:
        """Turn an error into a specific, actionable message."""
        if isinstance(error, StorageDirectoryError):
            return (
                f"Cannot create or remove the storage directory {error.path}. "
                "Check that the path is valid and writable, or choose another one with --dir."
            )
        if isinstance(error, StorageReadError):
            return (
                f"Cannot read snippets from {error.path}. "
                "The file may be corrupt or unreadable; fix or move it aside and retry."
            )
        if isinstance(error, StorageWriteError):
            return (
                f"Cannot save snippets to {error.path}. "
                "Check file permissions and free disk space."
            )
        if isinstance(error, ValidationError):
            fields = ", ".join(
                ".".join(str(part) for part in detail["loc"]) for detail in error.errors()
            )
            return f"Invalid snippet data ({fields or 'input'})."
        return f"Unexpected error: {error}"

    def last_error(self) -> Optional[Dict[str, Any]]:
        return self.errors[-1] if self.errors else None

    def clear_errors(self):
        self.errors.clear()
