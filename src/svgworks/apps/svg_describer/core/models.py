"""Dataclasses and shared models for the SVG describer pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Dict, List, Optional


class ItemState(str, Enum):
    """Lifecycle of a single SVG item within a run."""

    PENDING = "pending"
    SKIPPED = "skipped"
    DESCRIBED = "described"
    PERSISTED = "persisted"
    FAILED = "failed"


@dataclass(frozen=True)
class CatalogEntry:
    """One catalog line: file stem, description and optional category."""

    name: str
    description: str
    category: Optional[str] = None


@dataclass
class ItemResult:
    """Outcome of processing one SVG file."""

    path: Path
    category: Optional[str] = None
    state: ItemState = ItemState.PENDING
    entry: Optional[CatalogEntry] = None
    error: str = ""
    notes: List[str] = field(default_factory=list)
    duration_seconds: float = 0.0

    @property
    def succeeded(self) -> bool:
        return self.state is not ItemState.FAILED

    def to_json(self, schema_version: str) -> Dict[str, object]:
        return {
            "path": str(self.path),
            "category": self.category,
            "state": self.state.value,
            "description": self.entry.description if self.entry else None,
            "error": self.error,
            "notes": "; ".join(self.notes),
            "duration_seconds": round(self.duration_seconds, 4),
            "schema_version": schema_version,
        }


@dataclass
class RunReport:
    """Aggregated result of a batch run."""

    results: List[ItemResult]
    catalog_path: Optional[Path] = None
    catalog_text: str = ""

    def count(self, state: ItemState) -> int:
        return sum(1 for result in self.results if result.state is state)

    @property
    def entries(self) -> List[CatalogEntry]:
        return [result.entry for result in self.results if result.entry is not None]

    def summary(self) -> Dict[str, int]:
        counts = {state.value: self.count(state) for state in ItemState}
        counts["total"] = len(self.results)
        return counts
