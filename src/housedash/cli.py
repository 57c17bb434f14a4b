"""Command-line interface for housedash.

This module uses the :mod:`click` library to expose the chart renderer.
``render`` generates every configured chart from a data snapshot and
writes the bitmaps to a directory or a framebuffer device.
``config-check`` only validates the configuration.

Exit status: 0 when every chart was written, 1 when at least one chart
failed, 2 when the configuration is invalid.
"""

from __future__ import annotations

import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

import click

from .config import OUTPUT_DIR_DEFAULT, PROJECT_NAME, RETRY_BASE_SECONDS, RETRY_MAX_ATTEMPTS
from .errors import ConfigError, SinkError
from .loader import load_config
from .logsetup import logger, setup
from .orchestration import ChartState, any_failed, run_charts
from .providers import SnapshotDataSource
from .sink import GEOMETRIES, FileSink, FramebufferSink


def _parse_now(value: Optional[str]) -> Optional[datetime]:
    """Parse ``--now``; naive values are taken as UTC."""
    if value is None:
        return None
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError:
        raise click.BadParameter(f"not an ISO 8601 timestamp: {value!r}", param_hint="--now")
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _exit_config_error(exc: ConfigError) -> None:
    click.echo(f"Configuration error: {exc}", err=True)
    ctx = click.get_current_context()
    ctx.exit(2)


@click.group(help=f"{PROJECT_NAME}: render dashboard charts for small screens.")
def cli() -> None:
    """housedash command-line interface."""
    pass


@cli.command(name="config-check")
@click.option(
    "--config",
    "config_path",
    required=True,
    type=click.Path(path_type=Path, dir_okay=False),
    help="Dashboard configuration (JSON).",
)
@click.option("-v", "--verbose", count=True, help="Increase log verbosity (repeatable).")
def config_check(config_path: Path, verbose: int) -> None:
    """Validate the configuration and list the charts it defines."""
    setup(verbose)
    try:
        config = load_config(config_path)
    except ConfigError as exc:
        _exit_config_error(exc)
        return
    for index, spec in enumerate(config.charts):
        click.echo(f"{index + 1:02} {spec.kind}: {spec.title}")
    click.echo(
        f"OK: {len(config.charts)} chart(s) at "
        f"{config.style.width}x{config.style.height}"
    )


@cli.command()
@click.option(
    "--config",
    "config_path",
    required=True,
    type=click.Path(path_type=Path, dir_okay=False),
    help="Dashboard configuration (JSON).",
)
@click.option(
    "--snapshot",
    "snapshot_path",
    required=True,
    type=click.Path(path_type=Path, dir_okay=False),
    help="JSON data snapshot to render from.",
)
@click.option(
    "--out-dir",
    default=OUTPUT_DIR_DEFAULT,
    show_default=True,
    type=click.Path(path_type=Path, file_okay=False),
    help="Directory receiving 01.bmp, 02.bmp, ...",
)
@click.option(
    "--framebuffer",
    type=click.Path(path_type=Path, dir_okay=False),
    default=None,
    help="Write raw frames to this framebuffer device instead of files.",
)
@click.option(
    "--framebuffer-format",
    type=click.Choice(sorted(GEOMETRIES), case_sensitive=False),
    default="rgb565",
    show_default=True,
    help="Pixel layout of the framebuffer device.",
)
@click.option("--now", "now_text", default=None, help="Render instant (ISO 8601); defaults to now.")
@click.option("--clear", is_flag=True, help="Remove existing bitmaps from the output directory first.")
@click.option(
    "--retry-base",
    type=float,
    default=RETRY_BASE_SECONDS,
    show_default=True,
    help="Base delay in seconds of the fetch retry backoff.",
)
@click.option(
    "--max-attempts",
    type=click.IntRange(min=1),
    default=RETRY_MAX_ATTEMPTS,
    show_default=True,
    help="Fetch attempts per chart.",
)
@click.option("-v", "--verbose", count=True, help="Increase log verbosity (repeatable).")
def render(
    config_path: Path,
    snapshot_path: Path,
    out_dir: Path,
    framebuffer: Optional[Path],
    framebuffer_format: str,
    now_text: Optional[str],
    clear: bool,
    retry_base: float,
    max_attempts: int,
    verbose: int,
) -> None:
    """Render every configured chart.

    Charts are generated concurrently.  A chart whose data cannot be
    fetched is retried with exponential backoff; a chart that still
    fails is reported and the others are written regardless.
    """
    setup(verbose)
    now = _parse_now(now_text)
    try:
        config = load_config(config_path)
    except ConfigError as exc:
        _exit_config_error(exc)
        return

    if framebuffer is not None:
        sink = FramebufferSink(framebuffer, GEOMETRIES[framebuffer_format.lower()])
    else:
        sink = FileSink(out_dir, config.style.resolution)
        if clear:
            try:
                sink.clear()
            except SinkError as exc:
                click.echo(f"Error: {exc}", err=True)
                sys.exit(1)

    outcomes = run_charts(
        config.charts,
        config.style,
        SnapshotDataSource(snapshot_path),
        sink,
        now=now,
        max_attempts=max_attempts,
        base_seconds=retry_base,
    )
    for outcome in outcomes:
        if outcome.state is ChartState.SUCCEEDED:
            click.echo(f"{outcome.index + 1:02} {outcome.title}: {outcome.target}")
        else:
            click.echo(f"{outcome.index + 1:02} {outcome.title}: FAILED ({outcome.error})", err=True)
    if any_failed(outcomes):
        logger.debug("Exiting with status 1")
        sys.exit(1)


__all__ = ["cli"]
