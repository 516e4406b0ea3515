"""Static files installed into a book by `mdbook-protobuf install`."""

from pathlib import Path

STYLESHEET_NAME = "mdbook-protobuf.css"


def get_stylesheet() -> str:
    """Return the stylesheet registered under `output.html.additional-css`."""
    return (Path(__file__).parent / STYLESHEET_NAME).read_text(encoding="utf-8")


__all__ = ["STYLESHEET_NAME", "get_stylesheet"]
