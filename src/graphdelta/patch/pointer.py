"""JSON-Pointer style paths for patch operations.

Every operation path has the shape ``/{collection}/{entity_id}[/{field}...]``
where collection is ``nodes`` or ``edges``. Tokens are escaped per RFC 6901
so ids and data keys may contain ``/`` and ``~``.
"""

from __future__ import annotations

from graphdelta.core.errors import PatchError

COLLECTIONS = ("nodes", "edges")


def escape_token(token: str) -> str:
    return token.replace("~", "~0").replace("/", "~1")


def unescape_token(token: str) -> str:
    return token.replace("~1", "/").replace("~0", "~")


def entity_path(collection: str, entity_id: str, *segments: str) -> str:
    """Build ``/collection/id/seg...`` with every token escaped."""
    tokens = (collection, entity_id, *segments)
    return "/" + "/".join(escape_token(str(t)) for t in tokens)


def parse_path(path: str) -> tuple[str, str, tuple[str, ...]]:
    """Split a pointer into (collection, entity_id, field segments).

    Raises:
        PatchError: path is not a string, lacks a leading slash, names an
            unknown collection or has no entity id.
    """
    if not isinstance(path, str) or not path.startswith("/"):
        raise PatchError.malformed(f"path must start with '/': {path!r}")

    tokens = [unescape_token(t) for t in path[1:].split("/")]
    if len(tokens) < 2 or not tokens[1]:
        raise PatchError.malformed(f"path has no entity id: {path!r}")

    collection, entity_id, *segments = tokens
    if collection not in COLLECTIONS:
        raise PatchError.malformed(f"unknown collection {collection!r} in {path!r}")
    return collection, entity_id, tuple(segments)
