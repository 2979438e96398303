"""Per-file pipeline: read, skip or describe, rewrite, emit a catalog entry."""

from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import Callable, Optional

from . import markup
from .describer import BaseDescriber
from .errors import (
    ITEM_FAILURES,
    DescribeError,
    ExtractError,
    RasterizeError,
    ReadError,
    SvgDescriberError,
    WriteError,
)
from .models import CatalogEntry, ItemResult, ItemState
from .rasterizer import rasterize

logger = logging.getLogger(__name__)

RasterizeFn = Callable[..., bytes]


class ItemProcessor:
    """Run one SVG through the describe-and-annotate pipeline.

    ``process`` never raises for item-level failures: read, rasterize,
    describe and write errors are logged and reported as ``FAILED``.
    """

    def __init__(
        self,
        describer: BaseDescriber,
        *,
        rasterize_fn: Optional[RasterizeFn] = None,
        dry_run: bool = False,
        raster_width: Optional[int] = None,
        background: Optional[str] = None,
    ) -> None:
        self.describer = describer
        self.rasterize_fn = rasterize_fn or rasterize
        self.dry_run = dry_run
        self.raster_width = raster_width
        self.background = background

    def process(self, path: Path, category: Optional[str] = None) -> ItemResult:
        start = time.perf_counter()
        result = ItemResult(path=path, category=category)
        try:
            self._run(result)
        except ITEM_FAILURES as exc:
            self._attach_path(exc, path)
            result.state = ItemState.FAILED
            result.entry = None
            result.error = f"{type(exc).__name__}: {exc}"
            logger.error("  ✗ Error processing %s: %s", path, exc)
            logger.debug("Failure detail for %s", path, exc_info=exc)
        finally:
            result.duration_seconds = time.perf_counter() - start
        return result

    # ------------------------------------------------------------------
    # Stages
    # ------------------------------------------------------------------
    def _run(self, result: ItemResult) -> None:
        raw = self._read(result.path)
        content = self._decode(raw, result.path)

        if markup.has_description(content):
            result.state = ItemState.SKIPPED
            try:
                existing = markup.require_description(content)
            except ExtractError as exc:
                self._attach_path(exc, result.path)
                result.notes.append(f"extract_failed: {exc}")
                logger.warning("  Existing description unusable in %s: %s", result.path, exc)
                return
            result.entry = self._entry(result, existing)
            logger.info("  ↷ already described: \"%s\"", existing)
            return

        raster = self._rasterize(raw, result.path)
        description = self._describe(raster, result.path)
        result.state = ItemState.DESCRIBED
        # Catalog text matches what a later run extracts from the file.
        result.entry = self._entry(result, markup.escape_text(description))

        updated = markup.insert_description(content, description)
        if updated == content:
            result.notes.append("no root <svg> tag; file left unchanged")
            logger.warning("  No root <svg> tag in %s; description not embedded", result.path)
        elif self.dry_run:
            result.notes.append("dry-run: write skipped")
        else:
            self._write(result.path, updated)
            result.state = ItemState.PERSISTED

        logger.info("  → \"%s\"", description)

    def _read(self, path: Path) -> bytes:
        try:
            return path.read_bytes()
        except OSError as exc:
            raise ReadError(f"Could not read file: {exc}", path) from exc

    @staticmethod
    def _decode(raw: bytes, path: Path) -> str:
        try:
            return raw.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise ReadError(f"File is not valid UTF-8: {exc}", path) from exc

    def _rasterize(self, raw: bytes, path: Path) -> bytes:
        try:
            return self.rasterize_fn(
                raw, output_width=self.raster_width, background=self.background
            )
        except RasterizeError:
            raise
        except Exception as exc:  # noqa: BLE001 - adapters may surface any error
            raise RasterizeError(str(exc), path) from exc

    def _describe(self, raster: bytes, path: Path) -> str:
        try:
            return self.describer.describe(raster)
        except DescribeError:
            raise
        except Exception as exc:  # noqa: BLE001 - any backend failure fails the item
            raise DescribeError(str(exc), path) from exc

    @staticmethod
    def _write(path: Path, content: str) -> None:
        try:
            path.write_text(content, encoding="utf-8")
        except OSError as exc:
            raise WriteError(f"Could not write file: {exc}", path) from exc

    @staticmethod
    def _entry(result: ItemResult, description: str) -> CatalogEntry:
        return CatalogEntry(
            name=result.path.stem, description=description, category=result.category
        )

    @staticmethod
    def _attach_path(exc: SvgDescriberError, path: Path) -> None:
        if exc.path is None:
            exc.path = path
