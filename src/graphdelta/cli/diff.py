"""graphdelta diff command - compare two snapshot files."""

from pathlib import Path
from typing import Any

import click
from rich.console import Console
from rich.table import Table

from graphdelta.cli.utils import build_engine, load_snapshot, write_json
from graphdelta.core.errors import GraphDeltaError
from graphdelta.diff.highlights import build_breaking_summary, build_summary
from graphdelta.diff.models import GraphDiff

_IMPACT_STYLE = {
    "breaking": "red",
    "compatible": "green",
    "enhancement": "cyan",
    "cosmetic": "dim",
}


@click.command()
@click.argument("source", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.argument("target", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--semantic", is_flag=True, help="Run connectivity and behavioral analysis")
@click.option("--conflicts", is_flag=True, help="Detect conflicts")
@click.option("--ignore-metadata", is_flag=True, help="Skip metadata keys in data payloads")
@click.option("--ignore-timestamps", is_flag=True, help="Skip timestamp keys in data payloads")
@click.option("--json", "as_json", is_flag=True, help="Output the full diff as JSON")
@click.pass_context
def diff_command(
    ctx: click.Context,
    source: Path,
    target: Path,
    semantic: bool,
    conflicts: bool,
    ignore_metadata: bool,
    ignore_timestamps: bool,
    as_json: bool,
) -> None:
    """Compare SOURCE and TARGET snapshot files.

    Flags only switch features on; anything not given falls back to
    configuration.
    """
    engine = build_engine(ctx)
    overrides: dict[str, Any] = {}
    if semantic:
        overrides["semantic_diff"] = True
    if conflicts:
        overrides["include_conflict_resolution"] = True
    if ignore_metadata:
        overrides["ignore_metadata"] = True
    if ignore_timestamps:
        overrides["ignore_timestamps"] = True

    try:
        diff = engine.compare_graphs(
            load_snapshot(source),
            load_snapshot(target),
            engine.default_options(**overrides),
            source_version=source.name,
            target_version=target.name,
        )
    except GraphDeltaError as e:
        raise click.ClickException(str(e)) from e

    if as_json:
        write_json(diff.to_dict(), None)
        return

    _print_diff(diff)


def _print_diff(diff: GraphDiff) -> None:
    console = Console()
    if diff.has_changes:
        console.print(_make_change_table(diff))

    click.echo(build_summary(diff.changes))
    breaking = build_breaking_summary(diff.changes)
    if breaking:
        click.echo(breaking)

    stats = diff.statistics
    click.echo(f"Similarity: {stats.similarity:.2f}  Complexity: {stats.complexity:.2f}")

    for conflict in diff.conflicts:
        click.echo(
            f"Conflict [{conflict.severity}] {conflict.type}: {conflict.description} "
            f"({', '.join(conflict.entities)})"
        )


def _make_change_table(diff: GraphDiff) -> Table:
    table = Table(title=f"{diff.source_version} -> {diff.target_version}")
    table.add_column("entity", style="cyan")
    table.add_column("change")
    table.add_column("path")
    table.add_column("impact")
    table.add_column("description")
    for change in diff.changes:
        impact = change.semantic.impact
        table.add_row(
            change.entity_id,
            change.type,
            ".".join(change.path) if change.path else "",
            f"[{_IMPACT_STYLE[impact]}]{impact}[/{_IMPACT_STYLE[impact]}]",
            change.semantic.description,
        )
    return table
