"""mdbook-protobuf CLI.

Invoked by mdBook in two ways:

- `mdbook-protobuf supports <renderer>` before a build
- `mdbook-protobuf` with `[context, book]` JSON on stdin, expecting the
  processed book as JSON on stdout
"""

from typing import IO, Any

import click
import structlog

from protobook import __version__
from protobook.book.models import parse_input
from protobook.book.preprocessor import ProtobufPreprocessor
from protobook.cli.install import install_command
from protobook.core.errors import ProtobookError
from protobook.core.logging import configure_logging

log = structlog.get_logger(__name__)

# mdBook release line the JSON models follow
SUPPORTED_MDBOOK = "0.4"


def mdbook_version_supported(version: str) -> bool:
    return version == SUPPORTED_MDBOOK or version.startswith(f"{SUPPORTED_MDBOOK}.")


def preprocess(stdin: IO[str], stdout: IO[str], *, verbose: bool = False) -> None:
    """Read mdBook's input, run the preprocessor, write the book back.

    Nothing is written to `stdout` unless the whole run succeeds.
    """
    ctx, book = parse_input(stdin.read())

    if not mdbook_version_supported(ctx.mdbook_version):
        log.warning(
            "cli.mdbook_version_mismatch",
            supported=SUPPORTED_MDBOOK,
            actual=ctx.mdbook_version,
        )

    overrides: dict[str, Any] = {}
    if verbose:
        overrides["logging"] = {"level": "DEBUG"}

    processed = ProtobufPreprocessor().run(ctx, book, **overrides)
    stdout.write(processed.to_json())


@click.group(invoke_without_command=True)
@click.version_option(version=__version__, prog_name="mdbook-protobuf")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx: click.Context, verbose: bool) -> None:
    """mdBook preprocessor that documents a protobuf descriptor set.

    Without a command, reads mdBook's preprocessor JSON from stdin and
    writes the processed book to stdout.
    """
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    configure_logging(level="DEBUG" if verbose else "INFO")

    if ctx.invoked_subcommand is not None:
        return

    try:
        preprocess(click.get_text_stream("stdin"), click.get_text_stream("stdout"), verbose=verbose)
    except ProtobookError as e:
        log.error("cli.preprocess_failed", **e.to_dict())
        raise click.ClickException(e.message) from e


@click.command()
@click.argument("renderer")
def supports_command(renderer: str) -> None:
    """Exit with 0 if RENDERER is supported, 1 otherwise."""
    supported = ProtobufPreprocessor().supports_renderer(renderer)
    log.debug("cli.supports", renderer=renderer, supported=supported)
    raise SystemExit(0 if supported else 1)


cli.add_command(supports_command, name="supports")
cli.add_command(install_command, name="install")


if __name__ == "__main__":
    cli()
