"""Identifier generation for diffs, changes, conflicts and patches."""

from uuid import uuid4

from graphdelta.config.constants import ID_HEX_LENGTH


def new_id(prefix: str) -> str:
    """Random id such as ``diff_3f9a0c1b2d4e``."""
    return f"{prefix}_{uuid4().hex[:ID_HEX_LENGTH]}"
