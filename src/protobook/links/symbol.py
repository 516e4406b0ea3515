"""Addressable identities for protobuf symbols.

A `SymbolLink` names one documentation-visible entity: a message, enum,
service, or a member of one of those (a method or field) via `property`.
It is built from a fully-qualified symbol link (FQSL) such as
`.package.deeper.Message.Nested` or `.package.Service::FooCall`.

Equality and hashing consider `path`, `symbol` and `property` only; the
display-only `label_override` and `own_id` never change identity.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field, replace

PROPERTY_SEPARATOR = "::"

# Generated namespace pages live under this directory of the book
ROUTING_ROOT = "proto"
# Page for files that declare no package
ROOT_NAMESPACE_PAGE = "_root"


def routing_path(path: str) -> str:
    """Book path (without extension) of the page documenting a package path."""
    return f"{ROUTING_ROOT}/{path or ROOT_NAMESPACE_PAGE}"


def split_property(name: str) -> tuple[str, str | None]:
    """Split `Name::property` into its parts; property is None if absent."""
    if PROPERTY_SEPARATOR in name:
        head, prop = name.split(PROPERTY_SEPARATOR, 1)
        return head, prop
    return name, None


def match_package(name: str, packages: Iterable[str]) -> str | None:
    """Return the longest package that is a segment-aligned prefix of name.

    `name` is dotted and has no leading separator. Package `ab` does not
    match `abc.X`; it matches `ab.X` and `ab.c.X`.
    """
    best: str | None = None
    for package in packages:
        if not package or not name.startswith(package + "."):
            continue
        if best is None or len(package) > len(best):
            best = package
    return best


@dataclass(frozen=True, slots=True)
class SymbolLink:
    """Immutable address of a documented protobuf entity."""

    path: str
    symbol: str
    property: str | None = None
    label_override: str | None = field(default=None, compare=False)
    own_id: str | None = field(default=None, compare=False)

    @classmethod
    def from_fqsl(cls, fqsl: str, packages: Iterable[str]) -> SymbolLink:
        """Build a link from a fully-qualified name and the known packages.

        The longest known package prefix becomes `path` (with `/` separators)
        and the remainder becomes `symbol`. An optional `::property` suffix
        is split off first.
        """
        name, prop = split_property(fqsl)
        if name.startswith("."):
            name = name[1:]

        package = match_package(name, packages)
        if package is None:
            return cls(path="", symbol=name, property=prop)

        return cls(
            path=package.replace(".", "/"),
            symbol=name[len(package) + 1 :],
            property=prop,
        )

    def package(self) -> str:
        """Dotted package name, empty for package-less symbols."""
        return self.path.replace("/", ".")

    def id(self) -> str:
        """Property-qualified id: `Symbol` or `Symbol::property`."""
        if self.property:
            return f"{self.symbol}{PROPERTY_SEPARATOR}{self.property}"
        return self.symbol

    def fqsl(self) -> str:
        """Canonical display string, e.g. `.hello.Greeter::SayHello`."""
        if self.package():
            return f".{self.package()}.{self.id()}"
        return f".{self.id()}"

    def name_segments(self) -> tuple[str, ...]:
        """Dotted segments of package and symbol."""
        parts: list[str] = []
        if self.package():
            parts.extend(self.package().split("."))
        parts.extend(self.symbol.split("."))
        return tuple(parts)

    def segments(self) -> tuple[str, ...]:
        """Name segments, then the property if any."""
        if self.property:
            return (*self.name_segments(), self.property)
        return self.name_segments()

    def label(self) -> str:
        """Display text: the override, or the last dotted segment of the FQSL."""
        if self.label_override is not None:
            return self.label_override
        fqsl = self.fqsl()
        return fqsl[fqsl.rfind(".") + 1 :]

    def routing_path(self) -> str:
        return routing_path(self.path)

    def href(self) -> str:
        return f"/{self.routing_path()}.md#{self.id()}"

    def with_property(self, name: str) -> SymbolLink:
        """Address one member (field or method) of this symbol."""
        return replace(self, property=name, label_override=None, own_id=None)

    def with_label(self, label: str | None) -> SymbolLink:
        return replace(self, label_override=label)

    def with_own_id(self, own_id: str) -> SymbolLink:
        return replace(self, own_id=own_id)
