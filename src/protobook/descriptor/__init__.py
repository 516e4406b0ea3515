"""Descriptor set decoding and indexing."""

from protobook.descriptor.indexer import DescriptorIndexer, index_descriptor_set, known_packages
from protobook.descriptor.models import (
    Enum,
    EnumValue,
    Field,
    Linked,
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
from protobook.descriptor.reader import read_descriptor_set

__all__ = [
    "DescriptorIndexer",
    "index_descriptor_set",
    "known_packages",
    "read_descriptor_set",
    "Enum",
    "EnumValue",
    "Field",
    "Linked",
    "MapType",
    "Message",
    "Method",
    "Namespace",
    "OneOf",
    "ProtoFile",
    "ScalarType",
    "Service",
    "SymbolType",
]
