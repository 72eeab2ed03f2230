"""Patch models.

A ``GraphPatch`` is an ordered list of RFC 6902 style operations over the
``/nodes/{id}`` and ``/edges/{id}`` address space, plus a checksum over the
operations. All models are frozen; ``to_dict`` output is JSON-safe.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any, Literal

from graphdelta.config.constants import DEFAULT_PATCH_AUTHOR
from graphdelta.core.errors import PatchError
from graphdelta.diff.models import MISSING
from graphdelta.graph.models import GraphSnapshot

OpName = Literal["add", "remove", "replace", "move", "copy", "test"]


@dataclass(frozen=True, slots=True)
class PatchOperation:
    """One patch step.

    ``value`` is ``MISSING`` for operations that carry none (``remove``,
    ``move``, ``copy``). ``from_`` serializes as ``"from"``.
    """

    op: OpName
    path: str
    value: Any = MISSING
    from_: str | None = None

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"op": self.op, "path": self.path}
        if self.value is not MISSING:
            out["value"] = self.value
        if self.from_ is not None:
            out["from"] = self.from_
        return out

    @classmethod
    def from_dict(cls, raw: Any) -> PatchOperation:
        if not isinstance(raw, dict):
            raise PatchError.malformed(f"operation must be an object, got {type(raw).__name__}")
        op = raw.get("op")
        path = raw.get("path")
        if not isinstance(op, str) or not isinstance(path, str):
            raise PatchError.malformed("operation requires string 'op' and 'path'")
        from_ = raw.get("from")
        return cls(
            op=op,  # type: ignore[arg-type]
            path=path,
            value=raw["value"] if "value" in raw else MISSING,
            from_=from_ if isinstance(from_, str) else None,
        )


@dataclass(frozen=True, slots=True)
class PatchMetadata:
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    created_by: str = DEFAULT_PATCH_AUTHOR
    description: str = ""


@dataclass(frozen=True, slots=True)
class NonPatchableChange:
    """A modification the operation set cannot express."""

    change_id: str
    entity_id: str
    reason: str


@dataclass(frozen=True, slots=True)
class GraphPatch:
    id: str
    source_version: str
    target_version: str
    operations: tuple[PatchOperation, ...]
    checksum: str
    metadata: PatchMetadata = field(default_factory=PatchMetadata)
    unpatched: tuple[NonPatchableChange, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "operations", tuple(self.operations))
        object.__setattr__(self, "unpatched", tuple(self.unpatched))

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "source_version": self.source_version,
            "target_version": self.target_version,
            "operations": [op.to_dict() for op in self.operations],
            "checksum": self.checksum,
            "metadata": {
                "created_at": self.metadata.created_at.isoformat(),
                "created_by": self.metadata.created_by,
                "description": self.metadata.description,
            },
            "unpatched": [
                {"change_id": u.change_id, "entity_id": u.entity_id, "reason": u.reason}
                for u in self.unpatched
            ],
        }

    @classmethod
    def from_dict(cls, raw: Any) -> GraphPatch:
        """Decode a patch document.

        Raises:
            PatchError: required fields are missing or have the wrong shape.
        """
        if not isinstance(raw, dict):
            raise PatchError.malformed("patch must be an object")
        missing = [k for k in ("id", "operations", "checksum") if k not in raw]
        if missing:
            raise PatchError.malformed(f"missing fields: {', '.join(missing)}")
        if not isinstance(raw["operations"], list):
            raise PatchError.malformed("'operations' must be a list")

        meta_raw = raw.get("metadata") or {}
        try:
            created_at = (
                datetime.fromisoformat(meta_raw["created_at"])
                if meta_raw.get("created_at")
                else datetime.now(UTC)
            )
        except (TypeError, ValueError) as e:
            raise PatchError.malformed(f"bad metadata.created_at: {e}") from e

        return cls(
            id=str(raw["id"]),
            source_version=str(raw.get("source_version", "")),
            target_version=str(raw.get("target_version", "")),
            operations=tuple(PatchOperation.from_dict(op) for op in raw["operations"]),
            checksum=str(raw["checksum"]),
            metadata=PatchMetadata(
                created_at=created_at,
                created_by=str(meta_raw.get("created_by", DEFAULT_PATCH_AUTHOR)),
                description=str(meta_raw.get("description", "")),
            ),
            unpatched=tuple(
                NonPatchableChange(
                    change_id=str(u.get("change_id", "")),
                    entity_id=str(u.get("entity_id", "")),
                    reason=str(u.get("reason", "")),
                )
                for u in raw.get("unpatched") or []
            ),
        )


@dataclass(frozen=True, slots=True)
class OperationFailure:
    """A skipped operation and why it was skipped."""

    index: int
    op: str
    path: str
    reason: str


@dataclass(frozen=True, slots=True)
class PatchResult:
    snapshot: GraphSnapshot
    applied: int
    failures: tuple[OperationFailure, ...] = ()

    @property
    def ok(self) -> bool:
        return not self.failures
