"""Config module exports."""

from graphdelta.config.loader import load_config
from graphdelta.config.models import (
    DiffConfig,
    GraphDeltaConfig,
    LoggingConfig,
    LogOutputConfig,
    PatchConfig,
)

__all__ = [
    "load_config",
    "DiffConfig",
    "GraphDeltaConfig",
    "LoggingConfig",
    "LogOutputConfig",
    "PatchConfig",
]
