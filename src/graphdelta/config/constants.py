"""Configuration constants.

This module contains truly constant values that should NOT be user-configurable.
These are comparison vocabularies, protocol constraints and hard limits.

For configurable values, see models.py (DiffConfig, PatchConfig, etc.).
"""

# =============================================================================
# Deep Differ Key Sets
# =============================================================================

METADATA_FIELDS = frozenset({"metadata", "createdAt", "updatedAt", "version"})
"""Keys skipped when DiffOptions.ignore_metadata is set."""

TIMESTAMP_FIELDS = frozenset({"timestamp", "createdAt", "updatedAt", "lastModified"})
"""Keys skipped when DiffOptions.ignore_timestamps is set."""

BEHAVIORAL_PATH_KEYS = frozenset({"type", "behavior"})
"""Path segments that make a change behavioral (and breaking) under semantic analysis."""

# =============================================================================
# Depth Limits
# =============================================================================

MAX_DIFF_DEPTH_DEFAULT = 64
"""Default nesting bound for the deep differ."""

MAX_DIFF_DEPTH_LIMIT = 512
"""Hard cap on the configurable nesting bound.

Each level costs a Python stack frame, so this must stay well below
``sys.getrecursionlimit()`` (1000 by default).
"""

# =============================================================================
# Conflict Detection
# =============================================================================

DEFAULT_FORBIDDEN_TRANSITIONS: tuple[str, ...] = (
    "component->function",
    "class->interface",
    "sync->async",
)
"""Type transitions reported as incompatible unless configured otherwise."""

TRANSITION_SEPARATOR = "->"

# =============================================================================
# Identifiers
# =============================================================================

ID_HEX_LENGTH = 12
"""Length of the random hex suffix in generated ids (diff_…, patch_…)."""

DEFAULT_PATCH_AUTHOR = "system"

SUMMARY_NAME_LIMIT = 5
"""Max entity ids named in the breaking-change summary line."""
