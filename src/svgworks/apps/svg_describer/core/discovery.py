"""Filesystem helpers for locating SVG files, optionally grouped by category."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterator, List, Optional, Sequence, Tuple

logger = logging.getLogger(__name__)

SourceItem = Tuple[Optional[str], Path]


def _matching_files(directory: Path, extensions: Sequence[str]) -> List[Path]:
    allowed = {ext.lower() for ext in extensions}
    return sorted(
        (
            candidate
            for candidate in directory.iterdir()
            if candidate.is_file() and candidate.suffix.lower() in allowed
        ),
        key=lambda path: path.name,
    )


def iter_items(
    root: Path,
    *,
    grouped: bool,
    extensions: Sequence[str] = (".svg",),
) -> Iterator[SourceItem]:
    """Yield ``(category, path)`` pairs for every SVG under *root*.

    Flat mode yields files directly inside *root* with a ``None`` category.
    Grouped mode treats each subdirectory as a category and ignores loose
    files at the top level. Listing errors on *root* propagate.
    """

    if not grouped:
        for path in _matching_files(root, extensions):
            yield None, path
        return

    subdirectories = sorted(
        (child for child in root.iterdir() if child.is_dir()),
        key=lambda path: path.name,
    )
    for subdirectory in subdirectories:
        try:
            files = _matching_files(subdirectory, extensions)
        except OSError as exc:
            logger.warning("Skipping unreadable category %s: %s", subdirectory, exc)
            continue
        if not files:
            logger.debug("No SVG files in %s", subdirectory)
            continue
        for path in files:
            yield subdirectory.name, path


def discover_items(
    root: Path,
    *,
    grouped: bool,
    extensions: Sequence[str] = (".svg",),
) -> List[SourceItem]:
    """Materialise :func:`iter_items` so listing errors surface up front."""

    if not root.exists():
        raise FileNotFoundError(f"Input directory does not exist: {root}")
    if not root.is_dir():
        raise NotADirectoryError(f"Input path is not a directory: {root}")
    return list(iter_items(root, grouped=grouped, extensions=extensions))
