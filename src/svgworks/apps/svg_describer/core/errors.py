"""Error types raised while describing a single SVG item."""

from __future__ import annotations

from pathlib import Path
from typing import Optional


class SvgDescriberError(RuntimeError):
    """Base class for per-item failures."""

    def __init__(self, message: str, path: Optional[Path] = None) -> None:
        super().__init__(message)
        self.path = path


class ReadError(SvgDescriberError):
    """The source file could not be read or decoded."""


class RasterizeError(SvgDescriberError):
    """Vector to raster conversion failed."""


class DescribeError(SvgDescriberError):
    """The description service failed or returned a malformed payload."""


class WriteError(SvgDescriberError):
    """The annotated file could not be written back."""


class ExtractError(SvgDescriberError):
    """A description tag exists but carries no usable text."""


# Failures that mark an item as failed; ExtractError only drops the catalog entry.
ITEM_FAILURES = (ReadError, RasterizeError, DescribeError, WriteError)
