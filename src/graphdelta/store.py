"""In-memory registry of graph versions and computed diffs."""

from __future__ import annotations

import threading

import structlog

from graphdelta.core.errors import NotFoundError
from graphdelta.diff.models import GraphDiff
from graphdelta.graph.models import GraphVersion

log = structlog.get_logger(__name__)


class VersionStore:
    """Thread-safe store for versions and diffs.

    Starts empty and never evicts. Storing an id that already exists
    replaces the previous entry.
    """

    def __init__(self) -> None:
        self._versions: dict[str, GraphVersion] = {}
        self._diffs: dict[str, GraphDiff] = {}
        self._lock = threading.Lock()

    def store_version(self, version: GraphVersion) -> None:
        with self._lock:
            replaced = version.id in self._versions
            self._versions[version.id] = version
        log.debug("version_stored", version_id=version.id, replaced=replaced)

    def get_version(self, version_id: str) -> GraphVersion | None:
        with self._lock:
            return self._versions.get(version_id)

    def require_version(self, version_id: str) -> GraphVersion:
        """Like ``get_version`` but raises ``NotFoundError`` when absent."""
        version = self.get_version(version_id)
        if version is None:
            raise NotFoundError.version(version_id)
        return version

    def get_version_history(self) -> list[GraphVersion]:
        """All versions, newest first."""
        with self._lock:
            versions = list(self._versions.values())
        return sorted(versions, key=lambda v: v.timestamp, reverse=True)

    def register_diff(self, diff: GraphDiff) -> None:
        with self._lock:
            self._diffs[diff.id] = diff

    def get_diff(self, diff_id: str) -> GraphDiff | None:
        with self._lock:
            return self._diffs.get(diff_id)

    def __len__(self) -> int:
        with self._lock:
            return len(self._versions)
