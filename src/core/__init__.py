"""Core application modules and shared utilities."""

from .exceptions import DriveUploaderError
from .logging import setup_logging, get_logger

__all__ = [
    "DriveUploaderError",
    "setup_logging",
    "get_logger"
]
