"""Core module exports."""

from parsereflect.core.errors import (
    ConfigError,
    ErrorCode,
    NotFoundError,
    ParseReflectError,
    ResolutionError,
    SyntaxLayerError,
)
from parsereflect.core.logging import configure_logging, get_logger

__all__ = [
    # Errors
    "ParseReflectError",
    "ConfigError",
    "ErrorCode",
    "NotFoundError",
    "ResolutionError",
    "SyntaxLayerError",
    # Logging
    "configure_logging",
    "get_logger",
]
