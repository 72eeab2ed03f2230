"""CLI utilities: JSON file IO and engine construction."""

import json
from pathlib import Path
from typing import Any

import click

from graphdelta.core.errors import GraphDeltaError
from graphdelta.engine import GraphDiffEngine, create_engine
from graphdelta.graph.models import GraphSnapshot
from graphdelta.patch.models import GraphPatch


def read_json(path: Path) -> Any:
    """Parse a JSON file.

    Raises:
        click.ClickException: If the file is not valid JSON
    """
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise click.ClickException(f"{path}: invalid JSON ({e})") from e


def write_json(data: Any, output: Path | None) -> None:
    """Write JSON to ``output``, or to stdout when no path is given."""
    text = json.dumps(data, indent=2, default=str)
    if output is None:
        click.echo(text)
    else:
        output.write_text(text + "\n", encoding="utf-8")


def load_snapshot(path: Path) -> GraphSnapshot:
    raw = read_json(path)
    if not isinstance(raw, dict):
        raise click.ClickException(f"{path}: snapshot must be an object with nodes and edges")
    try:
        return GraphSnapshot.from_dict(raw)
    except (KeyError, TypeError) as e:
        raise click.ClickException(f"{path}: malformed snapshot ({e})") from e


def load_patch(path: Path) -> GraphPatch:
    try:
        return GraphPatch.from_dict(read_json(path))
    except GraphDeltaError as e:
        raise click.ClickException(f"{path}: {e.message}") from e


def build_engine(ctx: click.Context | None = None) -> GraphDiffEngine:
    """Engine for a command, reusing the config the group already loaded."""
    config = ctx.obj.get("config") if ctx is not None and ctx.obj else None
    if config is not None:
        return GraphDiffEngine(config=config)
    try:
        return create_engine(Path.cwd())
    except GraphDeltaError as e:
        raise click.ClickException(str(e)) from e
