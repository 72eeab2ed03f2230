"""graphdelta CLI - graphdelta command."""

from pathlib import Path

import click

from graphdelta.cli.diff import diff_command
from graphdelta.cli.patch import apply_command, patch_command
from graphdelta.config.loader import load_config
from graphdelta.core.errors import GraphDeltaError
from graphdelta.core.logging import configure_logging, set_correlation_id


@click.group()
@click.version_option(version="0.1.0", prog_name="graphdelta")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx: click.Context, verbose: bool) -> None:
    """graphdelta - Diff, patch and version structural code graphs."""
    try:
        config = load_config(Path.cwd())
    except GraphDeltaError as e:
        raise click.ClickException(str(e)) from e

    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["config"] = config

    if verbose:
        configure_logging(level="DEBUG")
    else:
        configure_logging(config=config.logging)
    set_correlation_id()


cli.add_command(diff_command, name="diff")
cli.add_command(patch_command, name="patch")
cli.add_command(apply_command, name="apply")


if __name__ == "__main__":
    cli()
