"""Descriptor indexer: entity tree plus type-usage edges.

One walk over the descriptor set, in declaration order. Every node is
handled in two steps: compute its identity (and register it in the usage
graph so prose can link to it), then emit the edges its declaration
implies:

- a field typed as a message or enum (map values included) yields a
  backlink from `message::field` onto that type;
- a method yields a backlink from `service::method` onto both its request
  and its response type.
"""

from __future__ import annotations

from collections.abc import Iterable

import structlog
from google.protobuf import descriptor_pb2

from protobook.core.errors import DescriptorError
from protobook.descriptor.models import (
    Enum,
    EnumValue,
    Field,
    FieldType,
    MapType,
    Message,
    Method,
    Namespace,
    OneOf,
    ProtoFile,
    ScalarType,
    Service,
    SymbolType,
)
from protobook.descriptor.source import (
    ENUM_VALUE_TAG,
    FILE_ENUM_TAG,
    FILE_MESSAGE_TAG,
    FILE_SERVICE_TAG,
    MESSAGE_ENUM_TAG,
    MESSAGE_FIELD_TAG,
    MESSAGE_NESTED_TAG,
    MESSAGE_ONEOF_TAG,
    SERVICE_METHOD_TAG,
    LocationIndex,
    LocationPath,
)
from protobook.links.symbol import SymbolLink
from protobook.links.usages import SymbolBacklink, SymbolUsages

log = structlog.get_logger(__name__)

FieldProto = descriptor_pb2.FieldDescriptorProto

_REFERENCE_TYPES = frozenset({FieldProto.TYPE_MESSAGE, FieldProto.TYPE_ENUM, FieldProto.TYPE_GROUP})


def known_packages(descriptor_set: descriptor_pb2.FileDescriptorSet) -> set[str]:
    return {file.package for file in descriptor_set.file}


class DescriptorIndexer:
    """Builds namespaces from a descriptor set and seeds the usage graph."""

    def __init__(self, packages: Iterable[str], usages: SymbolUsages) -> None:
        self.packages = frozenset(packages)
        self.usages = usages

    def index(self, files: Iterable[descriptor_pb2.FileDescriptorProto]) -> dict[str, Namespace]:
        """Index every file, grouped by package and sorted by package name."""
        grouped: dict[str, Namespace] = {}
        for file in files:
            namespace = grouped.setdefault(file.package, Namespace(package=file.package))
            namespace.files.append(self.index_file(file))

        return {package: grouped[package] for package in sorted(grouped)}

    def index_file(self, file: descriptor_pb2.FileDescriptorProto) -> ProtoFile:
        locations = LocationIndex(file)
        proto_file = ProtoFile(
            name=file.name,
            package=file.package,
            syntax=file.syntax or "proto2",
        )

        for i, message in enumerate(file.message_type):
            if message.options.map_entry:
                continue
            proto_file.messages.append(
                self._message(file.package, message, [], (FILE_MESSAGE_TAG, i), locations)
            )

        for i, enum in enumerate(file.enum_type):
            proto_file.enums.append(self._enum(file.package, enum, [], (FILE_ENUM_TAG, i), locations))

        for i, service in enumerate(file.service):
            proto_file.services.append(self._service(file.package, service, (FILE_SERVICE_TAG, i), locations))

        log.debug(
            "indexer.file",
            file=file.name,
            messages=len(proto_file.messages),
            enums=len(proto_file.enums),
            services=len(proto_file.services),
        )
        return proto_file

    # Identity

    def link(self, fqsl: str) -> SymbolLink:
        return SymbolLink.from_fqsl(fqsl, self.packages)

    def _declare(self, package: str, names: list[str]) -> SymbolLink:
        dotted = ".".join(names)
        link = self.link(f".{package}.{dotted}" if package else f".{dotted}")
        self.usages.register(link)
        return link

    # Messages

    def _message(
        self,
        package: str,
        descriptor: descriptor_pb2.DescriptorProto,
        parents: list[str],
        path: LocationPath,
        locations: LocationIndex,
    ) -> Message:
        names = [*parents, descriptor.name]
        self_link = self._declare(package, names)

        message = Message(
            name=descriptor.name,
            self_link=self_link,
            namespace=list(parents),
            deprecated=descriptor.options.deprecated,
            comments=locations.comments(path),
            source=locations.source(path),
        )

        # Keyed by full name, as field type names are
        map_entries = {
            f"{self_link.fqsl()}.{nested.name}": nested
            for nested in descriptor.nested_type
            if nested.options.map_entry
        }
        message.members = self._members(descriptor, self_link, map_entries, path, locations)
        self._emit_field_edges(message)

        for i, nested in enumerate(descriptor.nested_type):
            if nested.options.map_entry:
                continue
            message.messages.append(
                self._message(package, nested, names, (*path, MESSAGE_NESTED_TAG, i), locations)
            )

        for i, enum in enumerate(descriptor.enum_type):
            message.enums.append(self._enum(package, enum, names, (*path, MESSAGE_ENUM_TAG, i), locations))

        return message

    def _members(
        self,
        descriptor: descriptor_pb2.DescriptorProto,
        owner: SymbolLink,
        map_entries: dict[str, descriptor_pb2.DescriptorProto],
        path: LocationPath,
        locations: LocationIndex,
    ) -> list[Field | OneOf]:
        """Fields in declaration order; each real oneof sits where its first member does."""
        oneofs: dict[int, OneOf] = {}
        members: list[Field | OneOf] = []

        for i, proto_field in enumerate(descriptor.field):
            field = self._field(proto_field, owner, map_entries, (*path, MESSAGE_FIELD_TAG, i), locations)

            if proto_field.HasField("oneof_index") and not proto_field.proto3_optional:
                index = proto_field.oneof_index
                group = oneofs.get(index)
                if group is None:
                    oneof_path = (*path, MESSAGE_ONEOF_TAG, index)
                    group = OneOf(
                        name=descriptor.oneof_decl[index].name,
                        comments=locations.comments(oneof_path),
                        source=locations.source(oneof_path),
                    )
                    oneofs[index] = group
                    members.append(group)
                group.fields.append(field)
            else:
                members.append(field)

        return members

    def _field(
        self,
        descriptor: FieldProto,
        owner: SymbolLink,
        map_entries: dict[str, descriptor_pb2.DescriptorProto],
        path: LocationPath,
        locations: LocationIndex,
    ) -> Field:
        field_type = self._field_type(descriptor, owner, map_entries)
        return Field(
            name=descriptor.name,
            number=descriptor.number,
            type=field_type,
            self_link=owner.with_property(descriptor.name),
            repeated=(
                descriptor.label == FieldProto.LABEL_REPEATED and not isinstance(field_type, MapType)
            ),
            optional=descriptor.proto3_optional,
            deprecated=descriptor.options.deprecated,
            json_name=descriptor.json_name if descriptor.HasField("json_name") else None,
            comments=locations.comments(path),
            source=locations.source(path),
        )

    def _field_type(
        self,
        descriptor: FieldProto,
        owner: SymbolLink,
        map_entries: dict[str, descriptor_pb2.DescriptorProto],
    ) -> FieldType:
        if descriptor.HasField("type") and descriptor.type not in _REFERENCE_TYPES:
            return ScalarType(descriptor.type)

        if not descriptor.type_name:
            raise DescriptorError.missing_type(owner.fqsl(), descriptor.name)

        entry = map_entries.get(descriptor.type_name)
        if entry is not None and descriptor.label == FieldProto.LABEL_REPEATED:
            return self._map_type(entry, owner, descriptor.name)

        return SymbolType(self.link(descriptor.type_name))

    def _map_type(self, entry: descriptor_pb2.DescriptorProto, owner: SymbolLink, field_name: str) -> MapType:
        by_name = {f.name: f for f in entry.field}
        key, value = by_name.get("key"), by_name.get("value")
        if key is None or value is None:
            raise DescriptorError.missing_type(owner.fqsl(), field_name)

        value_type = self._field_type(value, owner, {})
        if isinstance(value_type, MapType):
            raise DescriptorError.missing_type(owner.fqsl(), field_name)
        return MapType(key=ScalarType(key.type), value=value_type)

    def _emit_field_edges(self, message: Message) -> None:
        for field in message.fields():
            target = field.referenced()
            if target is not None:
                self.usages.add(target, SymbolBacklink(field.self_link))

    # Enums

    def _enum(
        self,
        package: str,
        descriptor: descriptor_pb2.EnumDescriptorProto,
        parents: list[str],
        path: LocationPath,
        locations: LocationIndex,
    ) -> Enum:
        self_link = self._declare(package, [*parents, descriptor.name])
        return Enum(
            name=descriptor.name,
            self_link=self_link,
            namespace=list(parents),
            deprecated=descriptor.options.deprecated,
            comments=locations.comments(path),
            source=locations.source(path),
            values=[
                EnumValue(
                    name=value.name,
                    number=value.number,
                    deprecated=value.options.deprecated,
                    comments=locations.comments((*path, ENUM_VALUE_TAG, i)),
                )
                for i, value in enumerate(descriptor.value)
            ],
        )

    # Services

    def _service(
        self,
        package: str,
        descriptor: descriptor_pb2.ServiceDescriptorProto,
        path: LocationPath,
        locations: LocationIndex,
    ) -> Service:
        self_link = self._declare(package, [descriptor.name])
        service = Service(
            name=descriptor.name,
            self_link=self_link,
            deprecated=descriptor.options.deprecated,
            comments=locations.comments(path),
            source=locations.source(path),
        )

        for i, method_descriptor in enumerate(descriptor.method):
            method = self._method(self_link, method_descriptor, (*path, SERVICE_METHOD_TAG, i), locations)
            self._emit_method_edges(method)
            service.methods.append(method)

        return service

    def _method(
        self,
        service: SymbolLink,
        descriptor: descriptor_pb2.MethodDescriptorProto,
        path: LocationPath,
        locations: LocationIndex,
    ) -> Method:
        self_link = service.with_property(descriptor.name)
        self.usages.register(self_link)

        if not descriptor.input_type or not descriptor.output_type:
            raise DescriptorError.missing_type(service.fqsl(), descriptor.name)

        return Method(
            name=descriptor.name,
            self_link=self_link,
            request=self.link(descriptor.input_type),
            response=self.link(descriptor.output_type),
            client_streaming=descriptor.client_streaming,
            server_streaming=descriptor.server_streaming,
            deprecated=descriptor.options.deprecated,
            comments=locations.comments(path),
            source=locations.source(path),
        )

    def _emit_method_edges(self, method: Method) -> None:
        backlink = SymbolBacklink(method.self_link)
        self.usages.add(method.request, backlink)
        self.usages.add(method.response, backlink)


def index_descriptor_set(
    descriptor_set: descriptor_pb2.FileDescriptorSet,
    usages: SymbolUsages,
) -> dict[str, Namespace]:
    """Build the namespace tree and seed `usages` with type-usage edges.

    Raises:
        DescriptorError: A field or method without a type name, or a
            malformed source span.
    """
    indexer = DescriptorIndexer(known_packages(descriptor_set), usages)
    namespaces = indexer.index(descriptor_set.file)
    log.info(
        "indexer.done",
        namespaces=len(namespaces),
        symbols=len(usages),
        edges=usages.edge_count(),
    )
    return namespaces
