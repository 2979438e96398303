"""Grouped Markdown catalog of described illustrations."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, Iterable, List, Mapping, Sequence

from .models import CatalogEntry

logger = logging.getLogger(__name__)


def category_title(category: str) -> str:
    """Upper-case the first letter only; ``"sea life"`` -> ``"Sea life"``."""

    return category[:1].upper() + category[1:]


def render_catalog(sections: Mapping[str, Sequence[CatalogEntry]]) -> str:
    """Render sections in mapping order, entries sorted by name.

    Names compare by code point, so upper-case names sort before lower-case
    ones (``"Banana"`` precedes ``"apple"``).
    """

    lines: List[str] = []
    for category, entries in sections.items():
        if not entries:
            continue
        lines.append(f"## {category_title(category)}")
        for entry in sorted(entries, key=lambda item: item.name):
            lines.append(f"- **{entry.name}**: {entry.description}")
        lines.append("")
    return "\n".join(lines) + ("\n" if lines else "")


class CatalogBuilder:
    """Accumulate catalog entries per category in first-seen order."""

    def __init__(self) -> None:
        self._sections: Dict[str, List[CatalogEntry]] = {}

    def add(self, entry: CatalogEntry) -> None:
        if entry.category is None:
            raise ValueError(f"Catalog entry '{entry.name}' has no category")
        self._sections.setdefault(entry.category, []).append(entry)

    def extend(self, entries: Iterable[CatalogEntry]) -> None:
        for entry in entries:
            self.add(entry)

    def __len__(self) -> int:
        return sum(len(entries) for entries in self._sections.values())

    def render(self) -> str:
        return render_catalog(self._sections)

    def write(self, path: Path) -> str:
        text = self.render()
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")
        logger.info(
            "Wrote catalog with %d entr%s in %d section(s) to %s",
            len(self),
            "y" if len(self) == 1 else "ies",
            len(self._sections),
            path,
        )
        return text
