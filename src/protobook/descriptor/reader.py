"""Decoding of compiled descriptor sets (`protoc --descriptor_set_out`)."""

from pathlib import Path

import structlog
from google.protobuf import descriptor_pb2
from google.protobuf.message import DecodeError

from protobook.core.errors import DescriptorError

log = structlog.get_logger(__name__)


def read_descriptor_set(path: Path) -> descriptor_pb2.FileDescriptorSet:
    """Read and decode a binary `FileDescriptorSet`.

    Raises:
        DescriptorError: The file cannot be read or is not a descriptor set.
    """
    try:
        data = Path(path).read_bytes()
    except OSError as e:
        raise DescriptorError.unreadable(str(path), e.strerror or str(e)) from e

    descriptor_set = descriptor_pb2.FileDescriptorSet()
    try:
        descriptor_set.ParseFromString(data)
    except DecodeError as e:
        raise DescriptorError.decode_failed(str(path), str(e)) from e

    log.info("descriptor.loaded", path=str(path), files=len(descriptor_set.file))
    return descriptor_set
