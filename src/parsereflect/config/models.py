"""Pydantic configuration models with env var support.

Configuration Hierarchy (highest to lowest precedence):
1. Direct kwargs to load_config()
2. Environment variables (PARSEREFLECT__SECTION__KEY)
3. Project YAML (.parsereflect/config.yaml)
4. Global YAML (~/.config/parsereflect/config.yaml)
5. Built-in defaults (this file)

Environment Variable Format:
    PARSEREFLECT__<SECTION>__<KEY>=<VALUE>

Examples:
    PARSEREFLECT__LOGGING__LEVEL=DEBUG
    PARSEREFLECT__CACHE__MAX_CACHED_FILES=200
"""

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, field_validator

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]

ScalarValue = int | float | str | bool | None


class LogOutputConfig(BaseModel):
    """Single logging output configuration.

    Env vars: Not directly configurable via env (use YAML for multi-output).
    """

    format: Literal["json", "console"] = "console"
    destination: str = "stderr"  # stderr, stdout, or absolute file path
    level: LogLevel | None = None  # Inherits from parent if None

    @field_validator("destination")
    @classmethod
    def validate_destination(cls, v: str) -> str:
        if v in ("stderr", "stdout"):
            return v
        path = Path(v).expanduser()
        if not path.is_absolute():
            raise ValueError(f"File destination must be absolute path: {v}")
        return str(path)


class LoggingConfig(BaseModel):
    """Logging configuration.

    Env vars:
        PARSEREFLECT__LOGGING__LEVEL: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """

    level: LogLevel = Field(
        default="WARNING",
        description="Root log level. DEBUG logs every cache hit and unresolved expression.",
    )
    outputs: list[LogOutputConfig] = Field(default_factory=lambda: [LogOutputConfig()])


class CacheConfig(BaseModel):
    """Parsed-file cache configuration.

    Env vars:
        PARSEREFLECT__CACHE__MAX_CACHED_FILES: Max syntax trees kept in memory
    """

    max_cached_files: int | None = Field(
        default=None,
        description="Max parsed files kept in memory; oldest are evicted first. "
        "None keeps every parsed file, 0 disables caching.",
    )

    @field_validator("max_cached_files")
    @classmethod
    def validate_max_cached_files(cls, v: int | None) -> int | None:
        if v is not None and v < 0:
            raise ValueError(f"max_cached_files must be >= 0, got {v}")
        return v


class HostConfig(BaseModel):
    """Host environment emulation.

    Constants listed here are treated as already defined by the runtime,
    in addition to the built-in predefined constants.
    """

    constants: dict[str, ScalarValue] = Field(
        default_factory=dict,
        description="Extra predefined constants (name -> scalar value).",
    )


class ReflectConfig(BaseModel):
    """Root configuration for parsereflect.

    All settings can be configured via:
    1. Environment variables: PARSEREFLECT__SECTION__KEY
    2. YAML config files (project or global)
    3. Direct kwargs to load_config()
    """

    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    cache: CacheConfig = Field(default_factory=CacheConfig)
    host: HostConfig = Field(default_factory=HostConfig)
