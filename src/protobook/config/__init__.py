"""Config module exports."""

from protobook.config.loader import PREPROCESSOR_NAME, load_config, preprocessor_table
from protobook.config.models import (
    LoggingConfig,
    LogOutputConfig,
    PreprocessorConfig,
)

__all__ = [
    "PREPROCESSOR_NAME",
    "load_config",
    "preprocessor_table",
    "LoggingConfig",
    "LogOutputConfig",
    "PreprocessorConfig",
]
