"""
Stamping Core Module
====================
Shared configuration and logging.
"""

from .config import Settings, get_settings
from .logger import logger, setup_logger, get_logger

__all__ = ["Settings", "get_settings", "logger", "setup_logger", "get_logger"]
