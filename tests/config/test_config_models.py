"""Tests for configuration models."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from protobook.config.models import LoggingConfig, LogOutputConfig, PreprocessorConfig


class TestLogOutputConfig:
    """Log destination validation."""

    def test_defaults(self) -> None:
        output = LogOutputConfig()
        assert (output.format, output.destination, output.level) == ("console", "stderr", None)

    def test_rejects_stdout(self) -> None:
        """stdout belongs to the book JSON."""
        with pytest.raises(ValidationError):
            LogOutputConfig(destination="stdout")

    def test_rejects_relative_path(self) -> None:
        with pytest.raises(ValidationError):
            LogOutputConfig(destination="logs/protobook.log")

    def test_accepts_absolute_path(self, tmp_path: Path) -> None:
        destination = str(tmp_path / "protobook.log")
        assert LogOutputConfig(destination=destination).destination == destination


class TestLoggingConfig:
    @pytest.mark.parametrize("level", ["debug", "Debug", "DEBUG"])
    def test_level_uppercased(self, level: str) -> None:
        assert LoggingConfig(level=level).level == "DEBUG"

    def test_rejects_unknown_level(self) -> None:
        with pytest.raises(ValidationError):
            LoggingConfig(level="LOUD")

    def test_default_single_stderr_output(self) -> None:
        config = LoggingConfig()
        assert len(config.outputs) == 1
        assert config.outputs[0].destination == "stderr"


class TestPreprocessorConfig:
    def test_url_root_trailing_slash_stripped(self, tmp_path: Path) -> None:
        config = PreprocessorConfig(descriptor_path=tmp_path / "p.pb", proto_url_root="https://x.y/protos/")
        assert config.proto_url_root == "https://x.y/protos"

    def test_optional_settings_unset(self, tmp_path: Path) -> None:
        config = PreprocessorConfig(descriptor_path=tmp_path / "p.pb")
        assert config.nest_under is None
        assert config.proto_url_root is None
