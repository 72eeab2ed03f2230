"""Patch compilation and application."""

from graphdelta.patch.applier import PatchApplier
from graphdelta.patch.compiler import PatchCompiler, compute_checksum, verify_checksum
from graphdelta.patch.models import (
    GraphPatch,
    NonPatchableChange,
    OperationFailure,
    PatchMetadata,
    PatchOperation,
    PatchResult,
)
from graphdelta.patch.pointer import entity_path, escape_token, parse_path, unescape_token

__all__ = [
    "GraphPatch",
    "NonPatchableChange",
    "OperationFailure",
    "PatchApplier",
    "PatchCompiler",
    "PatchMetadata",
    "PatchOperation",
    "PatchResult",
    "compute_checksum",
    "entity_path",
    "escape_token",
    "parse_path",
    "unescape_token",
    "verify_checksum",
]
