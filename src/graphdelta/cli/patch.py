"""graphdelta patch/apply commands - compile and replay patches."""

from pathlib import Path

import click
from rich.console import Console

from graphdelta.cli.utils import build_engine, load_patch, load_snapshot, write_json
from graphdelta.core.errors import GraphDeltaError


@click.command()
@click.argument("source", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.argument("target", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "-o", "--output", type=click.Path(dir_okay=False, path_type=Path), help="Write patch here"
)
@click.pass_context
def patch_command(ctx: click.Context, source: Path, target: Path, output: Path | None) -> None:
    """Compile a patch turning SOURCE into TARGET."""
    console = Console(stderr=True)
    engine = build_engine(ctx)
    try:
        diff = engine.compare_graphs(
            load_snapshot(source),
            load_snapshot(target),
            source_version=source.name,
            target_version=target.name,
        )
    except GraphDeltaError as e:
        raise click.ClickException(str(e)) from e

    patch = engine.create_patch(diff)
    write_json(patch.to_dict(), output)

    console.print(f"[green]✓[/green] {len(patch.operations)} operations")
    for item in patch.unpatched:
        console.print(f"  [yellow]![/yellow] {item.entity_id}: {item.reason}")


@click.command()
@click.argument("snapshot", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.argument("patch", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "-o", "--output", type=click.Path(dir_okay=False, path_type=Path), help="Write result here"
)
@click.option("--strict", is_flag=True, help="Fail on the first invalid operation")
@click.pass_context
def apply_command(
    ctx: click.Context, snapshot: Path, patch: Path, output: Path | None, strict: bool
) -> None:
    """Apply PATCH to SNAPSHOT and print the resulting snapshot."""
    console = Console(stderr=True)
    engine = build_engine(ctx)
    try:
        result = engine.apply_patch(
            load_snapshot(snapshot), load_patch(patch), strict=True if strict else None
        )
    except GraphDeltaError as e:
        raise click.ClickException(str(e)) from e

    write_json(result.snapshot.to_dict(), output)

    console.print(f"[green]✓[/green] {result.applied} operations applied")
    for failure in result.failures:
        console.print(
            f"  [red]✗[/red] #{failure.index} {failure.op} {failure.path}: {failure.reason}"
        )
    if result.failures:
        raise SystemExit(1)
