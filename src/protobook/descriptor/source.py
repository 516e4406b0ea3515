"""Source locations and comments recorded in `SourceCodeInfo`.

Each location is keyed by a path vector of field numbers and indices into
`FileDescriptorProto`, e.g. `[4, 0, 2, 1]` for the second field of the first
top-level message.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field

from google.protobuf import descriptor_pb2

from protobook.core.errors import DescriptorError

# Field numbers of the repeated members in descriptor.proto
FILE_MESSAGE_TAG = 4
FILE_ENUM_TAG = 5
FILE_SERVICE_TAG = 6
MESSAGE_FIELD_TAG = 2
MESSAGE_NESTED_TAG = 3
MESSAGE_ENUM_TAG = 4
MESSAGE_ONEOF_TAG = 8
ENUM_VALUE_TAG = 2
SERVICE_METHOD_TAG = 2

LocationPath = tuple[int, ...]


@dataclass(slots=True)
class Comments:
    leading: str | None = None
    trailing: str | None = None
    leading_detached: list[str] = field(default_factory=list)

    @classmethod
    def from_location(cls, location: descriptor_pb2.SourceCodeInfo.Location | None) -> Comments:
        if location is None:
            return cls()
        return cls(
            leading=location.leading_comments if location.HasField("leading_comments") else None,
            trailing=location.trailing_comments if location.HasField("trailing_comments") else None,
            leading_detached=list(location.leading_detached_comments),
        )

    def __bool__(self) -> bool:
        return bool(self.leading or self.trailing or self.leading_detached)


@dataclass(frozen=True, slots=True)
class Source:
    """1-based line/column span of a declaration in its .proto file."""

    file_path: str
    start_line: int
    start_column: int
    end_line: int
    end_column: int

    @classmethod
    def from_span(cls, file_path: str, span: Sequence[int]) -> Source:
        """Decode a `[start_line, start_col, (end_line,) end_col]` span.

        Raises:
            DescriptorError: The span has neither 3 nor 4 elements.
        """
        if len(span) == 4:
            start_line, start_column, end_line, end_column = span
        elif len(span) == 3:
            start_line, start_column, end_column = span
            end_line = start_line
        else:
            raise DescriptorError.malformed_span(file_path, list(span))

        return cls(
            file_path=file_path,
            start_line=start_line + 1,
            start_column=start_column + 1,
            end_line=end_line + 1,
            end_column=end_column + 1,
        )

    def fragment(self) -> str:
        if self.start_line == self.end_line:
            return f"L{self.start_line}"
        return f"L{self.start_line}-L{self.end_line}"

    def href(self, url_root: str | None = None) -> str:
        relative = f"{self.file_path}#{self.fragment()}"
        if url_root:
            return f"{url_root}/{relative}"
        return relative


class LocationIndex:
    """Path-vector lookup over one file's `SourceCodeInfo`."""

    def __init__(self, file: descriptor_pb2.FileDescriptorProto) -> None:
        self.file_path = file.name
        self._locations: dict[LocationPath, descriptor_pb2.SourceCodeInfo.Location] = {}
        for location in file.source_code_info.location:
            # First record wins, matching protoc's declaration-first ordering
            self._locations.setdefault(tuple(location.path), location)

    def __len__(self) -> int:
        return len(self._locations)

    def get(self, path: LocationPath) -> descriptor_pb2.SourceCodeInfo.Location | None:
        return self._locations.get(path)

    def comments(self, path: LocationPath) -> Comments:
        return Comments.from_location(self.get(path))

    def source(self, path: LocationPath) -> Source | None:
        location = self.get(path)
        if location is None:
            return None
        return Source.from_span(self.file_path, location.span)
