"""Command line interface for the SVG describer."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import typer

from svgworks.logging_utils import configure_logging

from ..core import markup
from ..core.config import SvgDescriberConfig, build_runtime_config, load_config
from ..core.describer import create_describer
from ..core.discovery import discover_items
from ..core.models import ItemState
from ..core.runner import SvgDescriberRunner

LOG_PATH = configure_logging("svg_describer")
logger = logging.getLogger(__name__)
logger.debug("SVG describer logging initialised → %s", LOG_PATH)

app = typer.Typer(
    help="Describe SVG illustrations with a vision model and build a catalog."
)


def _resolve_config(**overrides: object) -> SvgDescriberConfig:
    settings = load_config(Path.cwd())
    try:
        return build_runtime_config(settings=settings, **overrides)
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc


@app.command("run")
def run(  # noqa: PLR0913 - CLI surface area is intentional
    input_dir: Optional[Path] = typer.Option(
        None,
        "--input-dir",
        "-i",
        help="Directory of SVG files, or of category subdirectories with --grouped.",
    ),
    grouped: Optional[bool] = typer.Option(  # noqa: FBT001 - clarity over style
        None,
        "--grouped/--flat",
        help="Treat subdirectories as categories and write a grouped catalog.",
    ),
    catalog: Optional[Path] = typer.Option(
        None,
        "--catalog",
        help="Markdown catalog output path (grouped mode only).",
    ),
    output_jsonl: Optional[Path] = typer.Option(
        None,
        "--output-jsonl",
        help="Path to JSONL audit log (defaults to pyproject configuration).",
    ),
    dry_run: Optional[bool] = typer.Option(  # noqa: FBT001 - clarity over style
        None,
        "--dry-run/--no-dry-run",
        help="Describe files but leave SVGs and the catalog untouched.",
    ),
    skip_preflight: bool = typer.Option(
        False,
        "--skip-preflight",
        help="Skip the description backend connectivity check.",
    ),
    timeout: Optional[int] = typer.Option(
        None,
        "--timeout",
        help="Request timeout in seconds.",
    ),
    raster_width: Optional[int] = typer.Option(
        None,
        "--raster-width",
        help="Width in pixels of the PNG sent to the model (0 keeps the SVG size).",
    ),
    background: Optional[str] = typer.Option(
        None,
        "--background",
        help="Colour to flatten transparent renders onto (empty to keep alpha).",
    ),
    svg_exts: Optional[str] = typer.Option(
        None,
        "--svg-exts",
        help="Comma-separated list of file extensions to treat as SVG.",
    ),
) -> None:
    """Annotate every SVG with a <desc> caption."""

    config = _resolve_config(
        input_dir=input_dir,
        grouped=grouped,
        catalog_path=catalog,
        output_jsonl=output_jsonl,
        dry_run=dry_run,
        preflight=False if skip_preflight else None,
        timeout=timeout,
        raster_width=raster_width,
        background=background,
        svg_extensions=svg_exts.split(",") if svg_exts else None,
    )

    runner = SvgDescriberRunner(config)
    try:
        report = runner.run()
    except (OSError, RuntimeError, ValueError) as exc:
        logger.error("Run aborted: %s", exc)
        raise typer.Exit(code=1) from exc

    typer.echo(
        f"Processed {len(report.results)} file(s): "
        f"{report.count(ItemState.PERSISTED)} annotated, "
        f"{report.count(ItemState.SKIPPED)} already described, "
        f"{report.count(ItemState.FAILED)} failed."
    )
    if report.catalog_path:
        typer.echo(f"Catalog written to {report.catalog_path}")


@app.command("check")
def check() -> None:
    """Verify that the configured description backend is reachable."""

    config = _resolve_config()
    describer = create_describer(config)
    try:
        describer.preflight()
    except RuntimeError as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(code=1) from exc
    finally:
        describer.close()
    typer.echo(f"Backend ready: {config.model} at {config.base_url}")


@app.command("strip")
def strip(
    input_dir: Optional[Path] = typer.Option(
        None,
        "--input-dir",
        "-i",
        help="Directory of SVG files, or of category subdirectories with --grouped.",
    ),
    grouped: Optional[bool] = typer.Option(  # noqa: FBT001 - clarity over style
        None,
        "--grouped/--flat",
        help="Walk one level of category subdirectories.",
    ),
    dry_run: bool = typer.Option(
        False,
        "--dry-run",
        help="Report which files carry a description without modifying them.",
    ),
) -> None:
    """Remove <desc> elements so the next run describes the files again."""

    config = _resolve_config(input_dir=input_dir, grouped=grouped)
    try:
        items = discover_items(
            config.input_dir, grouped=config.grouped, extensions=config.svg_extensions
        )
    except OSError as exc:
        logger.error("Cannot list %s: %s", config.input_dir, exc)
        raise typer.Exit(code=1) from exc

    stripped = 0
    for _, path in items:
        try:
            content = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            logger.error("  ✗ Error reading %s: %s", path, exc)
            continue
        if not markup.has_description(content):
            continue
        stripped += 1
        if dry_run:
            typer.echo(f"would strip: {path}")
            continue
        try:
            path.write_text(markup.strip_description(content), encoding="utf-8")
        except OSError as exc:
            logger.error("  ✗ Error writing %s: %s", path, exc)
            stripped -= 1
            continue
        logger.info("Stripped description from %s", path)

    verb = "would be stripped" if dry_run else "stripped"
    typer.echo(f"{stripped} of {len(items)} file(s) {verb}.")


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    app()
