"""
Core Module - Foundation components for Pattern Responder
=========================================================

This module provides the foundational components including:
- Configuration management
- Logging setup
- Exception handling
"""

from .config import Config, MatcherConfig, WebConfig, load_config, save_config
from .exceptions import (
    ResponderError,
    ConfigError,
    PatternSourceError,
    PatternValidationError,
)
from .logging import setup_logging, get_logger

__all__ = [
    "Config",
    "MatcherConfig",
    "WebConfig",
    "load_config",
    "save_config",
    "ResponderError",
    "ConfigError",
    "PatternSourceError",
    "PatternValidationError",
    "setup_logging",
    "get_logger",
]
