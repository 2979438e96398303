"""Sample SVGs and test doubles for the SVG describer tests."""

from __future__ import annotations

from pathlib import Path
from typing import Dict, List, Optional

from svgworks.apps.svg_describer.core.describer import BaseDescriber


CAT_SVG = """<?xml version="1.0" encoding="UTF-8"?>
<svg xmlns="http://www.w3.org/2000/svg" viewBox="0 0 100 100" width="100" height="100">
  <circle cx="50" cy="50" r="40" fill="#FFA500"/>
</svg>
"""

DESCRIBED_SVG = """<svg xmlns="http://www.w3.org/2000/svg" viewBox="0 0 24 24">
  <desc>An existing caption.</desc>
  <rect x="2" y="2" width="20" height="20"/>
</svg>
"""

NO_ROOT_SVG = """<g><circle cx="5" cy="5" r="4"/></g>
"""


class FakeDescriber(BaseDescriber):
    """Return canned descriptions and record every call."""

    def __init__(
        self,
        descriptions: Optional[Dict[int, str]] = None,
        *,
        fail_on: Optional[set] = None,
        default: str = "A cat naps in a sunbeam.",
    ) -> None:
        self.descriptions = descriptions or {}
        self.fail_on = fail_on or set()
        self.default = default
        self.calls: List[bytes] = []
        self.preflight_calls = 0
        self.closed = False

    def describe(self, raster: bytes) -> str:
        self.calls.append(raster)
        call_number = len(self.calls)
        if call_number in self.fail_on:
            raise RuntimeError(f"model unavailable on call {call_number}")
        return self.descriptions.get(call_number, self.default)

    def preflight(self) -> None:
        self.preflight_calls += 1

    def close(self) -> None:
        self.closed = True


class FakeRasterizer:
    """Stand-in for CairoSVG that records the markup it receives."""

    def __init__(self) -> None:
        self.calls: List[bytes] = []

    def __call__(self, markup: bytes, **kwargs) -> bytes:
        self.calls.append(markup)
        return b"\x89PNG fake " + str(len(self.calls)).encode()


def write_svg(path: Path, content: str = CAT_SVG) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    return path
