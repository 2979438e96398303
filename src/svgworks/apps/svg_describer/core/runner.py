"""Execution harness for the SVG describer."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import List, Optional, Sequence

from .catalog import CatalogBuilder
from .config import SvgDescriberConfig
from .describer import BaseDescriber, create_describer
from .discovery import SourceItem, discover_items
from .models import ItemResult, ItemState, RunReport
from .processor import ItemProcessor, RasterizeFn

logger = logging.getLogger(__name__)


class SvgDescriberRunner:
    """Coordinate discovery, per-item processing and catalog output."""

    def __init__(
        self,
        config: SvgDescriberConfig,
        *,
        describer: Optional[BaseDescriber] = None,
        rasterize_fn: Optional[RasterizeFn] = None,
    ) -> None:
        self.config = config
        self._describer = describer
        self._rasterize_fn = rasterize_fn

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    def run(self) -> RunReport:
        logger.info(
            "Starting SVG describer run on %s (%s mode, dry_run=%s)",
            self.config.input_dir,
            "grouped" if self.config.grouped else "flat",
            self.config.dry_run,
        )
        results: List[ItemResult] = []
        try:
            # Preflight and listing are the only failures that abort the run.
            if self.config.preflight:
                self.preflight()
            items = self.discover()
            logger.info("Found %d SVG file(s) to process", len(items))

            processor = ItemProcessor(
                self._get_describer(),
                rasterize_fn=self._rasterize_fn,
                dry_run=self.config.dry_run,
                raster_width=self.config.raster_width,
                background=self.config.background,
            )
            for index, (category, path) in enumerate(items, start=1):
                label = f"{category}/{path.name}" if category else path.name
                logger.info("Processing [%d/%d]: %s", index, len(items), label)
                results.append(processor.process(path, category))
        finally:
            self._close_describer()

        report = RunReport(results=results)
        if self.config.grouped:
            catalog = CatalogBuilder()
            catalog.extend(report.entries)
            self._write_catalog(catalog, report)
        self._write_jsonl(results)

        summary = report.summary()
        logger.info(
            "Done! %d described, %d skipped, %d failed (of %d)",
            summary[ItemState.PERSISTED.value] + summary[ItemState.DESCRIBED.value],
            summary[ItemState.SKIPPED.value],
            summary[ItemState.FAILED.value],
            summary["total"],
        )
        return report

    def preflight(self) -> None:
        try:
            self._get_describer().preflight()
        except Exception:
            logger.exception("Preflight checks failed; aborting run")
            raise

    def discover(self) -> List[SourceItem]:
        return discover_items(
            self.config.input_dir,
            grouped=self.config.grouped,
            extensions=self.config.svg_extensions,
        )

    # ------------------------------------------------------------------
    # Outputs
    # ------------------------------------------------------------------
    def _write_catalog(self, catalog: CatalogBuilder, report: RunReport) -> None:
        if self.config.dry_run:
            report.catalog_text = catalog.render()
            logger.info("Dry run: catalog not written (%d entries)", len(catalog))
            return
        report.catalog_text = catalog.write(self.config.catalog_path)
        report.catalog_path = self.config.catalog_path

    def _write_jsonl(self, results: Sequence[ItemResult]) -> None:
        output_path: Optional[Path] = self.config.output_jsonl
        if output_path is None:
            return
        output_path.parent.mkdir(parents=True, exist_ok=True)
        with output_path.open("w", encoding="utf-8") as handle:
            for result in results:
                payload = result.to_json(self.config.json_schema_version)
                handle.write(json.dumps(payload, ensure_ascii=False) + "\n")
        logger.info("Wrote JSONL results to %s", output_path)

    # ------------------------------------------------------------------
    # Lazy accessors
    # ------------------------------------------------------------------
    def _get_describer(self) -> BaseDescriber:
        if self._describer is None:
            self._describer = create_describer(self.config)
        return self._describer

    def _close_describer(self) -> None:
        if self._describer is not None:
            self._describer.close()
