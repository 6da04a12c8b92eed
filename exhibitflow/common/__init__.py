"""Common utilities for ExhibitFlow."""

from .logger import configure_from_settings, get_logger, setup_logger

__all__ = ["configure_from_settings", "get_logger", "setup_logger"]
