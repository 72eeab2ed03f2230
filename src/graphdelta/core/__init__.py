"""Core module exports."""

from graphdelta.core.errors import (
    ConfigError,
    DiffError,
    ErrorCode,
    GraphDeltaError,
    IntegrityError,
    NotFoundError,
    PatchError,
)
from graphdelta.core.logging import (
    clear_correlation_id,
    configure_logging,
    get_correlation_id,
    get_logger,
    set_correlation_id,
)

__all__ = [
    # Errors
    "ConfigError",
    "DiffError",
    "ErrorCode",
    "GraphDeltaError",
    "IntegrityError",
    "NotFoundError",
    "PatchError",
    # Logging
    "clear_correlation_id",
    "configure_logging",
    "get_correlation_id",
    "get_logger",
    "set_correlation_id",
]
