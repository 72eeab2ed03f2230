"""Pydantic configuration models with env var support.

Configuration Hierarchy (highest to lowest precedence):
1. Direct kwargs to load_config()
2. Environment variables (GRAPHDELTA__SECTION__KEY)
3. Repo YAML (.graphdelta/config.yaml)
4. Global YAML (~/.config/graphdelta/config.yaml)
5. Built-in defaults (this file)

Environment Variable Format:
    GRAPHDELTA__<SECTION>__<KEY>=<VALUE>

Examples:
    GRAPHDELTA__LOGGING__LEVEL=DEBUG
    GRAPHDELTA__DIFF__SEMANTIC_DIFF=true
    GRAPHDELTA__DIFF__MAX_DEPTH=128
    GRAPHDELTA__PATCH__CREATED_BY=ci
"""

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, field_validator

from graphdelta.config.constants import (
    DEFAULT_FORBIDDEN_TRANSITIONS,
    DEFAULT_PATCH_AUTHOR,
    MAX_DIFF_DEPTH_DEFAULT,
    MAX_DIFF_DEPTH_LIMIT,
    TRANSITION_SEPARATOR,
)

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class LogOutputConfig(BaseModel):
    """Single logging output configuration.

    Env vars: Not directly configurable via env (use YAML for multi-output).
    """

    format: Literal["json", "console"] = "console"
    destination: str = "stderr"  # stderr, stdout, or absolute file path
    level: LogLevel | None = None  # Inherits from parent if None

    @field_validator("destination")
    @classmethod
    def validate_destination(cls, v: str) -> str:
        if v in ("stderr", "stdout"):
            return v
        path = Path(v).expanduser()
        if not path.is_absolute():
            raise ValueError(f"File destination must be absolute path: {v}")
        return str(path)


class LoggingConfig(BaseModel):
    """Logging configuration.

    Env vars:
        GRAPHDELTA__LOGGING__LEVEL: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """

    level: LogLevel = Field(
        default="WARNING",
        description="Root log level. DEBUG logs every comparator fallback and patch step.",
    )
    outputs: list[LogOutputConfig] = Field(default_factory=lambda: [LogOutputConfig()])


class DiffConfig(BaseModel):
    """Default comparison options.

    Env vars:
        GRAPHDELTA__DIFF__IGNORE_METADATA: Skip metadata/createdAt/updatedAt/version keys
        GRAPHDELTA__DIFF__IGNORE_TIMESTAMPS: Skip timestamp-like keys
        GRAPHDELTA__DIFF__SEMANTIC_DIFF: Run connectivity/behavioral analysis
        GRAPHDELTA__DIFF__INCLUDE_CONFLICT_RESOLUTION: Run the conflict detector
        GRAPHDELTA__DIFF__MAX_DEPTH: Nesting bound for data payload comparison
    """

    ignore_metadata: bool = Field(
        default=False,
        description="Skip metadata, createdAt, updatedAt and version keys in data payloads.",
    )
    ignore_timestamps: bool = Field(
        default=False,
        description="Skip timestamp, createdAt, updatedAt and lastModified keys.",
    )
    semantic_diff: bool = Field(
        default=False,
        description="Reclassify edge removals by connectivity and flag behavioral paths.",
    )
    include_conflict_resolution: bool = Field(
        default=False,
        description="Detect orphaned edges and incompatible type transitions.",
    )
    max_depth: int = Field(
        default=MAX_DIFF_DEPTH_DEFAULT,
        description="Maximum nesting depth compared inside data payloads. "
        "Deeper input is treated as a fatal error (usually a cycle).",
    )
    forbidden_transitions: list[str] = Field(
        default_factory=lambda: list(DEFAULT_FORBIDDEN_TRANSITIONS),
        description="Type transitions reported as conflicts, written as 'old->new'.",
    )

    @field_validator("max_depth")
    @classmethod
    def validate_max_depth(cls, v: int) -> int:
        if not (1 <= v <= MAX_DIFF_DEPTH_LIMIT):
            raise ValueError(f"max_depth must be 1-{MAX_DIFF_DEPTH_LIMIT}, got {v}")
        return v

    @field_validator("forbidden_transitions")
    @classmethod
    def validate_transitions(cls, v: list[str]) -> list[str]:
        for item in v:
            old, sep, new = item.partition(TRANSITION_SEPARATOR)
            if not sep or not old.strip() or not new.strip():
                raise ValueError(f"Transition must look like 'old->new', got {item!r}")
        return v

    def transition_pairs(self) -> frozenset[tuple[str, str]]:
        """Parsed forbidden transitions as (old, new) pairs."""
        return parse_transitions(self.forbidden_transitions)


class PatchConfig(BaseModel):
    """Patch compilation and application defaults.

    Env vars:
        GRAPHDELTA__PATCH__CREATED_BY: Author recorded in patch metadata
        GRAPHDELTA__PATCH__VERIFY_CHECKSUM: Refuse patches with a bad checksum
        GRAPHDELTA__PATCH__STRICT: Raise on the first invalid operation
    """

    created_by: str = Field(
        default=DEFAULT_PATCH_AUTHOR,
        description="Author recorded in GraphPatch metadata.",
    )
    verify_checksum: bool = Field(
        default=True,
        description="Verify the checksum before applying. "
        "RISK: Disabling allows tampered or reordered patches to apply.",
    )
    strict: bool = Field(
        default=False,
        description="Raise on the first malformed operation instead of skipping it.",
    )


class GraphDeltaConfig(BaseModel):
    """Root configuration for graphdelta.

    All settings can be configured via:
    1. Environment variables: GRAPHDELTA__SECTION__KEY
    2. YAML config files (repo or global)
    3. Direct kwargs to load_config()
    """

    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    diff: DiffConfig = Field(default_factory=DiffConfig)
    patch: PatchConfig = Field(default_factory=PatchConfig)


def parse_transitions(items: list[str] | tuple[str, ...]) -> frozenset[tuple[str, str]]:
    """Parse 'old->new' strings into (old, new) pairs."""
    pairs: set[tuple[str, str]] = set()
    for item in items:
        old, _, new = item.partition(TRANSITION_SEPARATOR)
        pairs.add((old.strip(), new.strip()))
    return frozenset(pairs)
