"""GraphDiffEngine: the facade tying comparison, patches and versions together.

Typical use::

    engine = GraphDiffEngine()
    diff = engine.compare_graphs(before, after, DiffOptions(semantic_diff=True))
    patch = engine.create_patch(diff)
    result = engine.apply_patch(before, patch)
"""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path
from typing import Any

import structlog

from graphdelta.config.loader import load_config
from graphdelta.config.models import GraphDeltaConfig
from graphdelta.core.ids import new_id
from graphdelta.diff.classifier import ChangeClassifier
from graphdelta.diff.comparator import compare_snapshots
from graphdelta.diff.conflicts import detect_conflicts
from graphdelta.diff.deep import DeepDiffer
from graphdelta.diff.highlights import build_highlights
from graphdelta.diff.models import Change, Conflict, DiffHighlight, DiffOptions, GraphDiff
from graphdelta.diff.rules import RuleRegistry
from graphdelta.diff.statistics import calculate_statistics
from graphdelta.graph.models import GraphSnapshot, GraphVersion
from graphdelta.patch.applier import PatchApplier
from graphdelta.patch.compiler import PatchCompiler
from graphdelta.patch.models import GraphPatch, PatchResult
from graphdelta.store import VersionStore

log = structlog.get_logger(__name__)

SnapshotLike = GraphSnapshot | dict[str, Any]


class GraphDiffEngine:
    """Compare snapshots, compile and replay patches, track versions.

    Comparison and patching are pure over their arguments; the only state
    is the injected ``VersionStore``.
    """

    def __init__(
        self,
        store: VersionStore | None = None,
        config: GraphDeltaConfig | None = None,
        rules: RuleRegistry | None = None,
    ) -> None:
        self.store = store if store is not None else VersionStore()
        self.config = config if config is not None else GraphDeltaConfig()
        self.classifier = ChangeClassifier(rules)

    def default_options(self, **overrides: Any) -> DiffOptions:
        return DiffOptions.from_config(self.config.diff, **overrides)

    # =========================================================================
    # Comparison
    # =========================================================================

    def compare_graphs(
        self,
        source: SnapshotLike,
        target: SnapshotLike,
        options: DiffOptions | None = None,
        *,
        register: bool = True,
        source_version: str = "source",
        target_version: str = "target",
    ) -> GraphDiff:
        """Diff two snapshots.

        Args:
            source: Base snapshot (or its dict form)
            target: Compared snapshot (or its dict form)
            options: Comparison options; defaults come from config
            register: Keep the diff in the store for ``get_diff``
            source_version: Label recorded on the diff
            target_version: Label recorded on the diff

        Raises:
            DiffError: data payload nesting exceeds ``options.max_depth``.
        """
        source = _as_snapshot(source)
        target = _as_snapshot(target)
        options = options if options is not None else self.default_options()

        differ = DeepDiffer(options)
        raw = compare_snapshots(source, target, options, differ=differ)
        changes = self.classifier.classify(raw, source, target, semantic=options.semantic_diff)

        conflicts: list[Conflict] = []
        if options.include_conflict_resolution:
            conflicts = detect_conflicts(
                changes,
                source=source,
                target=target,
                forbidden_transitions=options.forbidden_transitions,
            )

        diff = GraphDiff(
            id=new_id("diff"),
            source_version=source_version,
            target_version=target_version,
            changes=tuple(changes),
            statistics=calculate_statistics(changes, source, target),
            conflicts=tuple(conflicts),
        )
        if register:
            self.store.register_diff(diff)

        log.info(
            "diff_computed",
            diff_id=diff.id,
            source_version=source_version,
            target_version=target_version,
            changes=len(changes),
            conflicts=len(conflicts),
            similarity=round(diff.statistics.similarity, 4),
        )
        if differ.comparator_failures:
            log.warning(
                "comparator_failures", diff_id=diff.id, count=differ.comparator_failures
            )
        return diff

    def compare_versions(
        self,
        source_id: str,
        target_id: str,
        options: DiffOptions | None = None,
    ) -> GraphDiff:
        """Diff two stored versions.

        Raises:
            NotFoundError: either version id is not in the store.
        """
        source = self.store.require_version(source_id)
        target = self.store.require_version(target_id)
        return self.compare_graphs(
            source.graph,
            target.graph,
            options,
            source_version=source_id,
            target_version=target_id,
        )

    def detect_conflicts(
        self,
        changes: Iterable[Change],
        source: SnapshotLike | None = None,
        target: SnapshotLike | None = None,
    ) -> list[Conflict]:
        return detect_conflicts(
            changes,
            source=_as_snapshot(source) if source is not None else None,
            target=_as_snapshot(target) if target is not None else None,
            forbidden_transitions=self.config.diff.transition_pairs(),
        )

    def highlights(self, diff: GraphDiff) -> list[DiffHighlight]:
        return build_highlights(diff)

    # =========================================================================
    # Patches
    # =========================================================================

    def create_patch(self, diff: GraphDiff, *, description: str | None = None) -> GraphPatch:
        compiler = PatchCompiler(created_by=self.config.patch.created_by)
        return compiler.compile(diff, description=description)

    def apply_patch(
        self,
        snapshot: SnapshotLike,
        patch: GraphPatch,
        *,
        strict: bool | None = None,
    ) -> PatchResult:
        """Replay ``patch`` on a copy of ``snapshot``.

        Raises:
            IntegrityError: checksum mismatch (when verification is enabled).
            NotFoundError: remove/replace targets an absent entity.
            PatchError: invalid operation in strict mode.
        """
        applier = PatchApplier(
            verify_checksum=self.config.patch.verify_checksum,
            strict=self.config.patch.strict if strict is None else strict,
        )
        return applier.apply(_as_snapshot(snapshot), patch)

    # =========================================================================
    # Versions
    # =========================================================================

    def store_version(self, version: GraphVersion) -> None:
        self.store.store_version(version)

    def get_version_history(self) -> list[GraphVersion]:
        return self.store.get_version_history()

    def get_diff(self, diff_id: str) -> GraphDiff | None:
        return self.store.get_diff(diff_id)


def create_engine(root: Path | None = None, **config_overrides: Any) -> GraphDiffEngine:
    """Build an engine from layered configuration (see ``load_config``)."""
    return GraphDiffEngine(config=load_config(root, **config_overrides))


def _as_snapshot(value: SnapshotLike) -> GraphSnapshot:
    if isinstance(value, GraphSnapshot):
        return value
    return GraphSnapshot.from_dict(value)
