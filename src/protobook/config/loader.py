"""Configuration loading with pydantic-settings.

mdBook hands every preprocessor its own `[preprocessor.<name>]` table from
book.toml inside the JSON context. That table is the file-level source here;
environment variables and explicit kwargs override it.
"""

from pathlib import Path
from typing import Any

from pydantic import ValidationError
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, SettingsConfigDict

from protobook.config.models import LoggingConfig, PreprocessorConfig
from protobook.core.errors import ConfigError

PREPROCESSOR_NAME = "protobuf"


class _BookTableSource(PydanticBaseSettingsSource):
    """Settings source that reads from the preprocessor's book.toml table."""

    def __init__(self, settings_cls: type[BaseSettings], table: dict[str, Any]) -> None:
        super().__init__(settings_cls)
        self._table = table

    def get_field_value(
        self,
        field: Any,  # noqa: ARG002
        field_name: str,
    ) -> tuple[Any, str, bool]:
        val = self._table.get(field_name)
        return val, field_name, val is not None

    def __call__(self) -> dict[str, Any]:
        return self._table


def _make_settings_class(table: dict[str, Any]) -> type[BaseSettings]:
    """Create a Settings class bound to one book.toml table."""

    class ProtobookSettings(BaseSettings):
        """Env vars: PROTOBOOK__NEST_UNDER, PROTOBOOK__LOGGING__LEVEL, etc."""

        model_config = SettingsConfigDict(
            env_prefix="PROTOBOOK__",
            env_nested_delimiter="__",
            case_sensitive=False,
            # book.toml also carries mdBook's own keys (command, renderers, ...)
            extra="ignore",
        )

        proto_descriptor: str | None = None
        nest_under: str | None = None
        proto_url_root: str | None = None
        logging: LoggingConfig = LoggingConfig()

        @classmethod
        def settings_customise_sources(
            cls,
            settings_cls: type[BaseSettings],
            init_settings: PydanticBaseSettingsSource,
            env_settings: PydanticBaseSettingsSource,
            dotenv_settings: PydanticBaseSettingsSource,  # noqa: ARG003
            file_secret_settings: PydanticBaseSettingsSource,  # noqa: ARG003
        ) -> tuple[PydanticBaseSettingsSource, ...]:
            # Precedence (first wins): init kwargs > env vars > book.toml
            return (init_settings, env_settings, _BookTableSource(settings_cls, table))

    return ProtobookSettings


def preprocessor_table(book_config: dict[str, Any]) -> dict[str, Any] | None:
    """Return the `[preprocessor.protobuf]` table from mdBook's config, if any."""
    preprocessors = book_config.get("preprocessor") or {}
    table = preprocessors.get(PREPROCESSOR_NAME)
    return table if isinstance(table, dict) else None


def load_config(book_root: Path, book_config: dict[str, Any], **kwargs: Any) -> PreprocessorConfig:
    """Load config: defaults < book.toml < env vars < kwargs.

    Args:
        book_root: Book root directory; relative paths resolve against it.
        book_config: The parsed book.toml as passed in mdBook's context.
        **kwargs: Override values (highest precedence).

    Returns:
        Fully resolved configuration object.

    Raises:
        ConfigError: Missing table or key, invalid values, or a descriptor
            path that does not exist.
    """
    table = preprocessor_table(book_config)
    if table is None:
        raise ConfigError.missing_required(f"preprocessor.{PREPROCESSOR_NAME}")

    settings_cls = _make_settings_class(table)
    try:
        settings = settings_cls(**kwargs)
    except ValidationError as e:
        err = e.errors()[0]
        field = ".".join(str(loc) for loc in err["loc"])
        raise ConfigError.invalid_value(field, err.get("input"), err["msg"]) from e

    if not settings.proto_descriptor:
        raise ConfigError.missing_required(f"preprocessor.{PREPROCESSOR_NAME}.proto_descriptor")

    descriptor_path = Path(book_root) / settings.proto_descriptor
    if not descriptor_path.is_file():
        raise ConfigError.input_not_found("proto_descriptor", str(descriptor_path))

    try:
        return PreprocessorConfig(
            descriptor_path=descriptor_path.resolve(),
            nest_under=settings.nest_under,
            proto_url_root=settings.proto_url_root,
            logging=settings.logging,
        )
    except ValidationError as e:
        err = e.errors()[0]
        field = ".".join(str(loc) for loc in err["loc"])
        raise ConfigError.invalid_value(field, err.get("input"), err["msg"]) from e
