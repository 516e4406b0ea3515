"""Core module exports."""

from protobook.core.errors import (
    ConfigError,
    ContentError,
    DescriptorError,
    ErrorCode,
    ProtobookError,
    ResolutionError,
)
from protobook.core.logging import configure_logging, get_logger
from protobook.core.progress import status

__all__ = [
    # Errors
    "ConfigError",
    "ContentError",
    "DescriptorError",
    "ErrorCode",
    "ProtobookError",
    "ResolutionError",
    # Logging
    "configure_logging",
    "get_logger",
    # Progress
    "status",
]
