"""Config module exports."""

from parsereflect.config.loader import load_config
from parsereflect.config.models import (
    CacheConfig,
    HostConfig,
    LoggingConfig,
    LogOutputConfig,
    ReflectConfig,
)

__all__ = [
    "load_config",
    "ReflectConfig",
    "CacheConfig",
    "HostConfig",
    "LoggingConfig",
    "LogOutputConfig",
]
