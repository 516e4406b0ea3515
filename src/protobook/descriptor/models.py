"""Entity tree built from a descriptor set.

Plain dataclasses, grouped per package into `Namespace`. Addressable
entities (messages, enums, services, methods) carry a `self_link` and a
`backlinks` list that is filled in once, after every page was rewritten.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import Protocol

from protobook.descriptor.primitives import Primitive, primitive
from protobook.descriptor.source import Comments, Source
from protobook.links.symbol import SymbolLink, routing_path
from protobook.links.usages import Backlink


class Linked(Protocol):
    """An entity with its own address in the generated pages."""

    name: str
    self_link: SymbolLink
    backlinks: list[Backlink]


# Field types


@dataclass(frozen=True, slots=True)
class ScalarType:
    type: int  # FieldDescriptorProto.Type value

    @property
    def primitive(self) -> Primitive:
        return primitive(self.type)

    @property
    def name(self) -> str:
        return self.primitive.proto


@dataclass(frozen=True, slots=True)
class SymbolType:
    link: SymbolLink

    @property
    def name(self) -> str:
        return self.link.fqsl()


@dataclass(frozen=True, slots=True)
class MapType:
    key: ScalarType
    value: ScalarType | SymbolType

    @property
    def name(self) -> str:
        return f"map<{self.key.name}, {self.value.name}>"


FieldType = ScalarType | SymbolType | MapType


# Members


@dataclass
class Field:
    name: str
    number: int
    type: FieldType
    self_link: SymbolLink  # owning message + field name as property
    repeated: bool = False
    optional: bool = False  # proto3 `optional`
    deprecated: bool = False
    json_name: str | None = None
    comments: Comments = field(default_factory=Comments)
    source: Source | None = None

    def referenced(self) -> SymbolLink | None:
        """The message or enum this field's values point at, if any."""
        if isinstance(self.type, SymbolType):
            return self.type.link
        if isinstance(self.type, MapType) and isinstance(self.type.value, SymbolType):
            return self.type.value.link
        return None


@dataclass
class OneOf:
    name: str
    fields: list[Field] = field(default_factory=list)
    comments: Comments = field(default_factory=Comments)
    source: Source | None = None


Member = Field | OneOf


@dataclass
class EnumValue:
    name: str
    number: int
    deprecated: bool = False
    comments: Comments = field(default_factory=Comments)


# Addressable entities


@dataclass
class Enum:
    name: str
    self_link: SymbolLink
    values: list[EnumValue] = field(default_factory=list)
    namespace: list[str] = field(default_factory=list)  # enclosing message names
    deprecated: bool = False
    comments: Comments = field(default_factory=Comments)
    source: Source | None = None
    backlinks: list[Backlink] = field(default_factory=list)


@dataclass
class Message:
    name: str
    self_link: SymbolLink
    members: list[Member] = field(default_factory=list)  # declaration order
    messages: list[Message] = field(default_factory=list)
    enums: list[Enum] = field(default_factory=list)
    namespace: list[str] = field(default_factory=list)  # enclosing message names
    deprecated: bool = False
    comments: Comments = field(default_factory=Comments)
    source: Source | None = None
    backlinks: list[Backlink] = field(default_factory=list)

    def fields(self) -> Iterator[Field]:
        """Every field, with oneof members flattened in place."""
        for member in self.members:
            if isinstance(member, OneOf):
                yield from member.fields
            else:
                yield member


@dataclass
class Method:
    name: str
    self_link: SymbolLink  # service + method name as property
    request: SymbolLink
    response: SymbolLink
    client_streaming: bool = False
    server_streaming: bool = False
    deprecated: bool = False
    comments: Comments = field(default_factory=Comments)
    source: Source | None = None
    backlinks: list[Backlink] = field(default_factory=list)


@dataclass
class Service:
    name: str
    self_link: SymbolLink
    methods: list[Method] = field(default_factory=list)
    deprecated: bool = False
    comments: Comments = field(default_factory=Comments)
    source: Source | None = None
    backlinks: list[Backlink] = field(default_factory=list)


# Containers


@dataclass
class ProtoFile:
    name: str  # path as given to protoc, e.g. "hello/v1/hello.proto"
    package: str
    syntax: str = "proto2"
    messages: list[Message] = field(default_factory=list)
    enums: list[Enum] = field(default_factory=list)
    services: list[Service] = field(default_factory=list)


@dataclass
class Namespace:
    """All files sharing one package; rendered as a single page."""

    package: str
    files: list[ProtoFile] = field(default_factory=list)

    @property
    def path(self) -> str:
        return self.package.replace(".", "/")

    @property
    def title(self) -> str:
        return self.package or "(root)"

    def routing_path(self) -> str:
        return routing_path(self.path)

    def iter_linked(self) -> Iterator[Linked]:
        """Every addressable entity, in page order.

        Messages come first (pre-order, each followed by its nested enums),
        then top-level enums, then each service followed by its methods.
        """
        for file in self.files:
            for message in file.messages:
                yield from _walk_message(message)
            yield from file.enums
            for service in file.services:
                yield service
                yield from service.methods


def _walk_message(message: Message) -> Iterator[Linked]:
    yield message
    for nested in message.messages:
        yield from _walk_message(nested)
    yield from message.enums
