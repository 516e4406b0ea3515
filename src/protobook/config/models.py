"""Pydantic configuration models.

Configuration Hierarchy (highest to lowest precedence):
1. Direct kwargs to load_config()
2. Environment variables (PROTOBOOK__KEY, PROTOBOOK__SECTION__KEY)
3. The `[preprocessor.protobuf]` table of book.toml
4. Built-in defaults (this file)

Examples:
    PROTOBOOK__LOGGING__LEVEL=DEBUG
    PROTOBOOK__NEST_UNDER=Reference
"""

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, field_validator

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class LogOutputConfig(BaseModel):
    """Single logging output configuration."""

    format: Literal["json", "console"] = "console"
    destination: str = "stderr"  # stderr or absolute file path
    level: LogLevel | None = None  # Inherits from parent if None

    @field_validator("destination")
    @classmethod
    def validate_destination(cls, v: str) -> str:
        if v == "stderr":
            return v
        if v == "stdout":
            raise ValueError("stdout carries the book JSON and cannot receive logs")
        path = Path(v).expanduser()
        if not path.is_absolute():
            raise ValueError(f"File destination must be absolute path: {v}")
        return str(path)


class LoggingConfig(BaseModel):
    """Logging configuration.

    Env vars:
        PROTOBOOK__LOGGING__LEVEL: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """

    level: LogLevel = Field(
        default="INFO",
        description="Root log level.",
    )
    outputs: list[LogOutputConfig] = Field(default_factory=lambda: [LogOutputConfig()])

    @field_validator("level", mode="before")
    @classmethod
    def normalize_level(cls, v: object) -> object:
        return v.upper() if isinstance(v, str) else v


class PreprocessorConfig(BaseModel):
    """Resolved `[preprocessor.protobuf]` settings for one build."""

    descriptor_path: Path = Field(
        description="Absolute path of the compiled FileDescriptorSet.",
    )
    nest_under: str | None = Field(
        default=None,
        description="Name of a top-level chapter to place the generated pages under.",
    )
    proto_url_root: str | None = Field(
        default=None,
        description="Base URL of the .proto sources, used for 'view source' links.",
    )
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @field_validator("proto_url_root")
    @classmethod
    def strip_trailing_slash(cls, v: str | None) -> str | None:
        return v.rstrip("/") if v else v
