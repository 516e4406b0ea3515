"""HTML/markdown rendering of links and namespace pages.

Templates ship as package data under `templates/` and are rendered with a
strict Jinja2 environment: a missing variable is an error, never an empty
string.
"""

import re
import textwrap
from functools import lru_cache

from jinja2 import Environment, PackageLoader, StrictUndefined

from protobook.descriptor.models import MapType, Message, Namespace, OneOf, ScalarType, SymbolType
from protobook.descriptor.primitives import Primitive
from protobook.links.symbol import SymbolLink
from protobook.links.usages import SymbolBacklink

_BLANK_LINE = re.compile(r"\n\s*\n")


def paragraphs(text: str) -> list[str]:
    """Split a proto comment into paragraphs, dropping protoc's indentation."""
    text = textwrap.dedent(text).strip()
    if not text:
        return []
    return [p.strip() for p in _BLANK_LINE.split(text) if p.strip()]


def scalar_types(namespace: Namespace) -> list[Primitive]:
    """Scalar types used by any field on the page, in first-use order."""
    seen: dict[int, Primitive] = {}

    def visit(t: ScalarType | SymbolType | MapType) -> None:
        if isinstance(t, ScalarType):
            seen.setdefault(t.type, t.primitive)
        elif isinstance(t, MapType):
            visit(t.key)
            visit(t.value)

    def walk(messages: list[Message]) -> None:
        for message in messages:
            for field in message.fields():
                visit(field.type)
            walk(message.messages)

    for file in namespace.files:
        walk(file.messages)
    return list(seen.values())


@lru_cache(maxsize=1)
def get_environment() -> Environment:
    """Shared template environment.

    Autoescaping is on for every template; values that already hold markup
    (primitive notes) are marked `|safe` where they are used.
    """
    env = Environment(
        loader=PackageLoader("protobook.render", "templates"),
        undefined=StrictUndefined,
        autoescape=True,
        trim_blocks=True,
        lstrip_blocks=True,
    )
    env.filters["paragraphs"] = paragraphs
    env.globals["scalar_types"] = scalar_types
    env.tests["map_type"] = lambda value: isinstance(value, MapType)
    env.tests["symbol_type"] = lambda value: isinstance(value, SymbolType)
    env.tests["oneof"] = lambda value: isinstance(value, OneOf)
    env.tests["symbol_backlink"] = lambda value: isinstance(value, SymbolBacklink)
    return env


def render_symbol_link(link: SymbolLink) -> str:
    """Inline anchor for a link, e.g. `<a href="/proto/hello.md#HelloWorld">HelloWorld</a>`."""
    macros = get_environment().get_template("_macros.html.j2").module
    return str(macros.symbol_link(link))


def render_namespace(namespace: Namespace, url_root: str | None = None) -> str:
    """Page content for one package: every file, service, message and enum."""
    template = get_environment().get_template("namespace.md.j2")
    return template.render(namespace=namespace, url_root=url_root)


__all__ = ["get_environment", "paragraphs", "render_namespace", "render_symbol_link", "scalar_types"]
