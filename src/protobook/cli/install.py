"""mdbook-protobuf install - register the preprocessor in a book."""

from dataclasses import dataclass
from pathlib import Path

import click
import structlog
import tomlkit
from tomlkit.exceptions import ParseError
from tomlkit.items import Array, Table
from tomlkit.toml_document import TOMLDocument

from protobook.assets import STYLESHEET_NAME, get_stylesheet
from protobook.config import PREPROCESSOR_NAME
from protobook.core.errors import ConfigError, ProtobookError
from protobook.core.progress import status

log = structlog.get_logger(__name__)

BOOK_CONFIG = "book.toml"
COMMAND = "mdbook-protobuf"


@dataclass
class InstallResult:
    config_path: Path
    added_preprocessor: bool = False
    added_stylesheet: bool = False
    wrote_stylesheet: bool = False

    @property
    def config_changed(self) -> bool:
        return self.added_preprocessor or self.added_stylesheet


def _preprocessor_table() -> Table:
    table = tomlkit.table()
    table.add("command", COMMAND)

    descriptor = tomlkit.item("./path/to/your/proto_file_descriptor_set.pb")
    descriptor.comment("Edit this!")
    table.add("proto_descriptor", descriptor)

    table.add(tomlkit.comment('nest_under = "protocol" # place the reference below this chapter'))

    url_root = tomlkit.item("https://example.com/path/to/your/proto/directory")
    url_root.comment("remove this if you don't have a source to link to")
    table.add("proto_url_root", url_root)
    return table


def add_preprocessor(doc: TOMLDocument) -> bool:
    """Add `[preprocessor.protobuf]` unless present. Returns True if added."""
    if "preprocessor" not in doc:
        doc["preprocessor"] = tomlkit.table(is_super_table=True)

    preprocessors = doc["preprocessor"]
    if PREPROCESSOR_NAME in preprocessors:
        return False

    preprocessors[PREPROCESSOR_NAME] = _preprocessor_table()
    return True


def add_stylesheet(doc: TOMLDocument, config_path: Path) -> bool:
    """Register the stylesheet in `output.html.additional-css` unless present."""
    if "output" not in doc:
        doc["output"] = tomlkit.table(is_super_table=True)
    output = doc["output"]
    if "html" not in output:
        output["html"] = tomlkit.table()
    html = output["html"]

    if "additional-css" not in html:
        html["additional-css"] = tomlkit.array()
    css = html["additional-css"]
    if not isinstance(css, Array):
        raise ConfigError.invalid_value(
            "output.html.additional-css", css, f"expected a list of paths in {config_path}"
        )

    if any(str(entry).endswith(STYLESHEET_NAME) for entry in css):
        return False

    css.append(STYLESHEET_NAME)
    return True


def install(book_dir: Path) -> InstallResult:
    """Edit `book.toml` in place (comments kept) and write the stylesheet.

    Raises:
        ConfigError: book.toml is missing, unparsable or has an unexpected
            `additional-css` value.
    """
    config_path = book_dir / BOOK_CONFIG
    if not config_path.is_file():
        raise ConfigError.file_not_found(str(config_path))

    try:
        doc = tomlkit.parse(config_path.read_text(encoding="utf-8"))
    except ParseError as e:
        raise ConfigError.parse_error(str(config_path), str(e)) from e

    result = InstallResult(config_path=config_path)
    result.added_preprocessor = add_preprocessor(doc)
    result.added_stylesheet = add_stylesheet(doc, config_path)

    if result.config_changed:
        config_path.write_text(tomlkit.dumps(doc), encoding="utf-8")
        log.info("install.config_saved", path=str(config_path))

    stylesheet_path = book_dir / STYLESHEET_NAME
    if stylesheet_path.exists():
        log.debug("install.stylesheet_exists", path=str(stylesheet_path))
    else:
        stylesheet_path.write_text(get_stylesheet(), encoding="utf-8")
        result.wrote_stylesheet = True

    return result


@click.command()
@click.argument("book_dir", default=".", type=click.Path(file_okay=False, path_type=Path))
def install_command(book_dir: Path) -> None:
    """Add the preprocessor and its stylesheet to the book in BOOK_DIR.

    BOOK_DIR must contain book.toml. Existing settings and comments are kept.
    """
    try:
        result = install(book_dir)
    except ProtobookError as e:
        log.error("install.failed", **e.to_dict())
        raise click.ClickException(e.message) from e

    if result.added_preprocessor:
        status(f"Added [preprocessor.{PREPROCESSOR_NAME}] to {result.config_path}", style="success")
    if result.added_stylesheet:
        status(f"Registered {STYLESHEET_NAME} in output.html.additional-css", style="success")
    if result.wrote_stylesheet:
        status(f"Wrote {book_dir / STYLESHEET_NAME}", style="success")
    if not (result.config_changed or result.wrote_stylesheet):
        status("Already installed, nothing to do", style="info")
        return

    status("Now set proto_descriptor in book.toml to your compiled descriptor set", style="info")
