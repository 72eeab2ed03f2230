"""graphdelta error types with typed error codes.

Error code ranges:
- 2xxx: Config
- 3xxx: Diff
- 4xxx: Patch
- 5xxx: Store / lookup
"""

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any


class ErrorCode(IntEnum):
    """Typed error codes for programmatic handling."""

    # Config (2xxx)
    CONFIG_PARSE_ERROR = 2001
    CONFIG_INVALID_VALUE = 2002

    # Diff (3xxx)
    DIFF_DEPTH_EXCEEDED = 3001

    # Patch (4xxx)
    PATCH_INVALID_OPERATION = 4001
    PATCH_CHECKSUM_MISMATCH = 4002
    PATCH_MALFORMED = 4003

    # Store (5xxx)
    VERSION_NOT_FOUND = 5001
    ENTITY_NOT_FOUND = 5002


@dataclass(frozen=True, slots=True)
class GraphDeltaError(Exception):
    """Base error with structured context."""

    code: ErrorCode
    message: str
    retryable: bool = False
    details: dict[str, Any] = field(default_factory=dict)

    @property
    def error_name(self) -> str:
        """String identifier for logging (e.g., 'VERSION_NOT_FOUND')."""
        return self.code.name

    def to_dict(self) -> dict[str, Any]:
        """Serialize for JSON responses."""
        return {
            "code": self.code.value,
            "error": self.error_name,
            "message": self.message,
            "retryable": self.retryable,
            "details": self.details,
        }

    def __str__(self) -> str:
        return f"[{self.code.value}] {self.error_name}: {self.message}"


class ConfigError(GraphDeltaError):
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


class DiffError(GraphDeltaError):
    """Errors raised while comparing snapshots."""

    @classmethod
    def depth_exceeded(cls, path: tuple[str, ...], max_depth: int) -> "DiffError":
        shown = ".".join(path[:8]) + (".…" if len(path) > 8 else "")
        return cls(
            code=ErrorCode.DIFF_DEPTH_EXCEEDED,
            message=f"Nesting deeper than {max_depth} levels at '{shown}' (cyclic input?)",
            details={"max_depth": max_depth, "path": list(path[:8])},
        )


class PatchError(GraphDeltaError):
    """Errors raised while compiling, decoding or applying patches."""

    @classmethod
    def invalid_operation(cls, index: int, op: str, path: str, reason: str) -> "PatchError":
        return cls(
            code=ErrorCode.PATCH_INVALID_OPERATION,
            message=f"Operation #{index} ({op} {path}) is invalid: {reason}",
            details={"index": index, "op": op, "path": path, "reason": reason},
        )

    @classmethod
    def malformed(cls, reason: str) -> "PatchError":
        return cls(
            code=ErrorCode.PATCH_MALFORMED,
            message=f"Malformed patch document: {reason}",
            details={"reason": reason},
        )


class IntegrityError(PatchError):
    """Patch content does not match its checksum."""

    @classmethod
    def checksum_mismatch(cls, patch_id: str, expected: str, actual: str) -> "IntegrityError":
        return cls(
            code=ErrorCode.PATCH_CHECKSUM_MISMATCH,
            message=f"Checksum mismatch for patch {patch_id}; refusing to apply",
            details={"patch_id": patch_id, "expected": expected, "actual": actual},
        )


class NotFoundError(GraphDeltaError):
    """A referenced version or entity does not exist."""

    @classmethod
    def version(cls, version_id: str) -> "NotFoundError":
        return cls(
            code=ErrorCode.VERSION_NOT_FOUND,
            message=f"Version not found: {version_id}",
            details={"version_id": version_id},
        )

    @classmethod
    def entity(
        cls, collection: str, entity_id: str, *, index: int | None = None
    ) -> "NotFoundError":
        details: dict[str, Any] = {"collection": collection, "entity_id": entity_id}
        if index is not None:
            details["index"] = index
        return cls(
            code=ErrorCode.ENTITY_NOT_FOUND,
            message=f"No {collection[:-1]} with id '{entity_id}' in snapshot",
            details=details,
        )
