"""Logging utilities for noteplug."""

from noteplug.logging.config import JsonFormatter, setup_logging

__all__ = ["JsonFormatter", "setup_logging"]
