"""Protobook error types with typed error codes.

Error code ranges:
- 2xxx: Config
- 3xxx: Descriptor (structural, the descriptor set is inconsistent)
- 4xxx: Resolution and page content
"""

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any


class ErrorCode(IntEnum):
    """Typed error codes for programmatic handling."""

    # Config (2xxx)
    CONFIG_PARSE_ERROR = 2001
    CONFIG_INVALID_VALUE = 2002
    CONFIG_MISSING_REQUIRED = 2003
    CONFIG_FILE_NOT_FOUND = 2004

    # Descriptor (3xxx)
    DESCRIPTOR_UNREADABLE = 3001
    DESCRIPTOR_DECODE_FAILED = 3002
    DESCRIPTOR_MISSING_TYPE = 3003
    DESCRIPTOR_MALFORMED_SPAN = 3004

    # Resolution (4xxx)
    RESOLUTION_AMBIGUOUS = 4001
    RESOLUTION_NO_MATCH = 4002
    CONTENT_UNLOCATED_LINK = 4003


@dataclass(frozen=True, slots=True)
class ProtobookError(Exception):
    """Base error with structured context."""

    code: ErrorCode
    message: str
    retryable: bool = False
    details: dict[str, Any] = field(default_factory=dict)

    @property
    def error_name(self) -> str:
        """String identifier for logging (e.g., 'CONFIG_PARSE_ERROR')."""
        return self.code.name

    def to_dict(self) -> dict[str, Any]:
        """Serialize for JSON output."""
        return {
            "code": self.code.value,
            "error": self.error_name,
            "message": self.message,
            "retryable": self.retryable,
            "details": self.details,
        }

    def __str__(self) -> str:
        return f"[{self.code.value}] {self.error_name}: {self.message}"


class ConfigError(ProtobookError):
    """Configuration-related errors."""

    @classmethod
    def parse_error(cls, path: str, reason: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_PARSE_ERROR,
            message=f"Failed to parse config at {path}: {reason}",
            details={"path": path, "reason": reason},
        )

    @classmethod
    def invalid_value(cls, field: str, value: Any, reason: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_INVALID_VALUE,
            message=f"Invalid value for '{field}': {reason}",
            details={"field": field, "value": str(value), "reason": reason},
        )

    @classmethod
    def missing_required(cls, field: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_MISSING_REQUIRED,
            message=f"Missing required config field: {field}",
            details={"field": field},
        )

    @classmethod
    def file_not_found(cls, path: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_FILE_NOT_FOUND,
            message=f"Config file not found: {path}",
            details={"path": path},
        )

    @classmethod
    def input_not_found(cls, field: str, path: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_FILE_NOT_FOUND,
            message=f"File configured by '{field}' not found: {path}",
            details={"field": field, "path": path},
        )


class DescriptorError(ProtobookError):
    """The descriptor set is unreadable or not internally consistent."""

    @classmethod
    def unreadable(cls, path: str, reason: str) -> "DescriptorError":
        return cls(
            code=ErrorCode.DESCRIPTOR_UNREADABLE,
            message=f"Cannot read descriptor set at {path}: {reason}",
            details={"path": path, "reason": reason},
        )

    @classmethod
    def decode_failed(cls, path: str, reason: str) -> "DescriptorError":
        return cls(
            code=ErrorCode.DESCRIPTOR_DECODE_FAILED,
            message=f"Cannot decode descriptor set at {path}: {reason}",
            details={"path": path, "reason": reason},
        )

    @classmethod
    def missing_type(cls, owner: str, member: str) -> "DescriptorError":
        return cls(
            code=ErrorCode.DESCRIPTOR_MISSING_TYPE,
            message=f"No type name declared for {owner}::{member}",
            details={"owner": owner, "member": member},
        )

    @classmethod
    def malformed_span(cls, file: str, span: list[int]) -> "DescriptorError":
        return cls(
            code=ErrorCode.DESCRIPTOR_MALFORMED_SPAN,
            message=f"Unexpected location span {span} in {file}",
            details={"file": file, "span": list(span)},
        )


class ResolutionError(ProtobookError):
    """A `proto!(...)` query did not resolve to exactly one symbol.

    The message text is consumed verbatim by book authors and tooling.
    """

    @classmethod
    def ambiguous(cls, query: str, candidates: list[str]) -> "ResolutionError":
        replacements = "\n".join(f"proto!({c})" for c in candidates)
        return cls(
            code=ErrorCode.RESOLUTION_AMBIGUOUS,
            message=(
                "More than one protobuf symbol matched your query. "
                f"Replace your link with one of the following:\n{replacements}"
            ),
            details={"query": query, "candidates": list(candidates)},
        )

    @classmethod
    def no_match(cls, query: str, suggestions: list[str]) -> "ResolutionError":
        lines = "\n".join(f"proto!({s})" for s in suggestions)
        return cls(
            code=ErrorCode.RESOLUTION_NO_MATCH,
            message=(
                f"No protobuf symbol matched your query `{query}`, "
                f"consider one of the following near matches:\n{lines}"
            ),
            details={"query": query, "suggestions": list(suggestions)},
        )

    @classmethod
    def no_match_sample(cls, query: str, sample: list[str]) -> "ResolutionError":
        lines = "\n".join(f"proto!({s})" for s in sample)
        return cls(
            code=ErrorCode.RESOLUTION_NO_MATCH,
            message=(
                f"No protobuf symbol matched your query `{query}`, "
                f"or was similar. Sample of valid formats:\n{lines}"
            ),
            details={"query": query, "sample": list(sample)},
        )


class ContentError(ProtobookError):
    """A reference could not be mapped back onto the page text."""

    @classmethod
    def unlocated_link(cls, chapter: str, query: str) -> "ContentError":
        return cls(
            code=ErrorCode.CONTENT_UNLOCATED_LINK,
            message=f"Could not find the source of link proto!({query}) in chapter '{chapter}'",
            details={"chapter": chapter, "query": query},
        )
