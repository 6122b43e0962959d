"""Command line for batch work on recording metadata files."""

import json
import logging
from pathlib import Path
from typing import Optional

import typer

from .autogen import generate_cursor_keyframes, generate_zoom_keyframes
from .frame_sampler import FrameSampler
from .metadata_file import load_metadata, save_metadata
from .version import __version__
from .zoom_path import migrate_sections

logger = logging.getLogger(__name__)

app = typer.Typer(help="Evaluate and generate cursor / zoom effects for screen recordings.")

LOG_FORMAT = "%(name)s | %(levelname)s | %(message)s"


def setup_logging(verbose: bool = False) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format=LOG_FORMAT)
    # basicConfig is a no-op once handlers exist (e.g. when run via main.py)
    logging.getLogger().setLevel(level)


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"cursorcast {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging."),
    version: Optional[bool] = typer.Option(
        None, "--version", callback=_version_callback, is_eager=True, help="Show the version and exit."
    ),
) -> None:
    setup_logging(verbose)


def _load(path: Path, frame_offset: int = 0):
    try:
        return load_metadata(str(path), frame_offset=frame_offset)
    except ValueError as exc:
        logger.error("%s", exc)
        raise typer.Exit(code=1)


@app.command()
def autogen(
    metadata: Path = typer.Argument(..., help="Metadata JSON file."),
    zoom: bool = typer.Option(False, "--zoom", help="Also zoom in on clicks."),
    replace_zoom: bool = typer.Option(
        False, "--replace-zoom", help="Rebuild the zoom timeline from clicks instead of merging."
    ),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write here instead of in place."),
) -> None:
    """Generate cursor (and optionally zoom) keyframes from click telemetry."""
    meta = _load(metadata)
    before = len(meta.cursor_keyframes)
    meta.cursor_keyframes = generate_cursor_keyframes(
        meta.cursor_keyframes, meta.clicks, meta.duration, meta.frame_rate
    )
    if zoom or replace_zoom:
        meta.zoom_keyframes = generate_zoom_keyframes(
            meta.zoom_keyframes,
            meta.clicks,
            meta.duration,
            meta.frame_rate,
            meta.video.width,
            meta.video.height,
            meta.zoom_config.level,
            replace_existing=replace_zoom,
        )
    path = save_metadata(str(output or metadata), meta)
    typer.echo(f"{before} → {len(meta.cursor_keyframes)} cursor keyframes, "
               f"{len(meta.zoom_keyframes)} zoom keyframes → {path}")


@app.command()
def migrate(
    metadata: Path = typer.Argument(..., help="Metadata JSON file."),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write here instead of in place."),
) -> None:
    """Compile legacy zoom sections into zoom keyframes."""
    meta = _load(metadata)
    count = len(meta.zoom_sections)
    if count == 0:
        typer.echo("No zoom sections to migrate.")
        return
    meta = migrate_sections(meta)
    path = save_metadata(str(output or metadata), meta)
    typer.echo(f"Migrated {count} sections → {len(meta.zoom_keyframes)} zoom keyframes → {path}")


@app.command()
def sample(
    metadata: Path = typer.Argument(..., help="Metadata JSON file."),
    start_frame: int = typer.Option(0, "--start-frame", min=0),
    end_frame: Optional[int] = typer.Option(None, "--end-frame", min=0),
    frame_offset: int = typer.Option(0, "--frame-offset", help="Shift all timestamps by N frames."),
    smooth: bool = typer.Option(False, "--smooth", help="Apply cursor glide while sampling."),
) -> None:
    """Print export-mode frame state as one JSON object per line."""
    meta = _load(metadata, frame_offset)
    sampler = FrameSampler(meta, smoothing=smooth)
    for state in sampler.iter_frames(start_frame, end_frame):
        typer.echo(json.dumps(state.to_dict()))
