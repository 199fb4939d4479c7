"""Core application components."""

from .config import Settings, settings
from .logging import get_logger, setup_logging

__all__ = [
    "settings",
    "Settings",
    "get_logger",
    "setup_logging",
]
