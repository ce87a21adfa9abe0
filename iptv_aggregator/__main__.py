"""Click-based command line entry point for the IPTV aggregator."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Optional

import click

from . import __version__
from .config import AggregationPaths, settings, setup_logging


def _resolve_paths(source_dir: Optional[Path], output_dir: Optional[Path]) -> AggregationPaths:
    overrides = {}
    if source_dir is not None:
        overrides["source_dir"] = str(source_dir)
    if output_dir is not None:
        overrides["output_dir"] = str(output_dir)
    return AggregationPaths.from_settings(settings.model_copy(update=overrides))


@click.group(help="Aggregate IPTV subscriptions into M3U and TXT playlists")
@click.version_option(__version__)
@click.option("--verbose", is_flag=True, help="Enable verbose logging output.")
@click.pass_context
def cli(ctx: click.Context, verbose: bool) -> None:
    """
    Root CLI group configuring logging before subcommands execute.
    """

    setup_logging("DEBUG" if verbose else None)
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose


source_dir_option = click.option(
    "--source-dir",
    default=None,
    type=click.Path(path_type=Path, file_okay=False),
    help="Directory holding subscribe/alias/logo/template/epg files.",
)
output_dir_option = click.option(
    "--output-dir",
    default=None,
    type=click.Path(path_type=Path, file_okay=False),
    help="Directory receiving output.m3u and output.txt.",
)


@cli.command("run")
@source_dir_option
@output_dir_option
def cli_run(source_dir: Optional[Path], output_dir: Optional[Path]) -> None:
    """Run one aggregation and write the playlists."""

    from .services.aggregation_service import run_aggregation

    paths = _resolve_paths(source_dir, output_dir)
    result = asyncio.run(run_aggregation(paths))
    if "error" in result:
        raise click.ClickException(result["error"])

    logging.getLogger(__name__).info(
        "aggregation completed: %d channels, %d streams, outputs written: %s",
        result["channel_count"],
        result["stream_count"],
        result["outputs_written"],
    )


@cli.command("validate")
@source_dir_option
def cli_validate(source_dir: Optional[Path]) -> None:
    """Check the source files and report errors and warnings."""

    from .services.config_validator_service import validate_source_configs

    summary = validate_source_configs(_resolve_paths(source_dir, None))
    for warning in summary.warnings:
        click.echo(f"WARNING {warning}")
    for error in summary.errors:
        click.echo(f"ERROR   {error}", err=True)
    if summary.has_errors:
        raise click.ClickException(f"validation failed with {len(summary.errors)} error(s)")
    click.echo("validation passed")


@cli.command("serve")
@click.option("--host", default="0.0.0.0", show_default=True)
@click.option("--port", default=3000, show_default=True, type=int, envvar="PORT")
def cli_serve(host: str, port: int) -> None:
    """Start the HTTP API."""

    import uvicorn

    uvicorn.run("iptv_aggregator.main:app", host=host, port=port)


def main() -> None:
    cli(obj={})


if __name__ == "__main__":
    main()
