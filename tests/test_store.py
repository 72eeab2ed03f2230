"""Tests for the in-memory version store."""

import threading
from datetime import UTC, datetime, timedelta

import pytest

from graphdelta.core.errors import ErrorCode, NotFoundError
from graphdelta.diff.models import DiffStatistics, GraphDiff
from graphdelta.graph.models import GraphSnapshot, GraphVersion, Node
from graphdelta.store import VersionStore

T0 = datetime(2024, 1, 1, tzinfo=UTC)


def _version(version_id: str, minutes: int = 0) -> GraphVersion:
    return GraphVersion(
        id=version_id,
        graph=GraphSnapshot(nodes=(Node(id=version_id, type="t"),)),
        timestamp=T0 + timedelta(minutes=minutes),
    )


class TestVersions:
    def test_starts_empty(self) -> None:
        store = VersionStore()
        assert len(store) == 0
        assert store.get_version_history() == []

    def test_store_and_get(self) -> None:
        store = VersionStore()
        version = _version("v1")

        store.store_version(version)

        assert store.get_version("v1") is version
        assert store.get_version("missing") is None

    def test_same_id_replaces(self) -> None:
        store = VersionStore()
        store.store_version(_version("v1"))
        replacement = _version("v1", minutes=5)

        store.store_version(replacement)

        assert len(store) == 1
        assert store.require_version("v1") is replacement

    def test_history_is_newest_first(self) -> None:
        store = VersionStore()
        for version_id, minutes in [("old", 0), ("newest", 20), ("middle", 10)]:
            store.store_version(_version(version_id, minutes))

        assert [v.id for v in store.get_version_history()] == ["newest", "middle", "old"]

    def test_require_missing_version_raises(self) -> None:
        with pytest.raises(NotFoundError) as exc_info:
            VersionStore().require_version("nope")

        assert exc_info.value.code == ErrorCode.VERSION_NOT_FOUND
        assert exc_info.value.details == {"version_id": "nope"}

    def test_concurrent_writes(self) -> None:
        store = VersionStore()

        def write(prefix: str) -> None:
            for i in range(50):
                store.store_version(_version(f"{prefix}-{i}", i))

        threads = [threading.Thread(target=write, args=(p,)) for p in "abcd"]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(store) == 200


class TestDiffs:
    def test_register_and_get(self) -> None:
        store = VersionStore()
        diff = GraphDiff(
            id="diff_1",
            source_version="a",
            target_version="b",
            changes=(),
            statistics=DiffStatistics(),
        )

        store.register_diff(diff)

        assert store.get_diff("diff_1") is diff
        assert store.get_diff("diff_2") is None
        # diffs do not count as versions
        assert len(store) == 0
