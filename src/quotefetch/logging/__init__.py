"""Logging helpers."""

from .logger import LOGGER_NAME, FetchLogger, setup_logger

__all__ = ["FetchLogger", "LOGGER_NAME", "setup_logger"]
