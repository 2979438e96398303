"""Shared fixtures for the SVG describer tests."""

from __future__ import annotations

from pathlib import Path

import pytest

from svgworks.apps.svg_describer.core import build_runtime_config, load_config

from .helpers import FakeDescriber, FakeRasterizer


@pytest.fixture
def fake_describer() -> FakeDescriber:
    return FakeDescriber()


@pytest.fixture
def fake_rasterizer() -> FakeRasterizer:
    return FakeRasterizer()


@pytest.fixture
def make_config(tmp_path):
    """Build a runtime config isolated from any project pyproject."""

    def _make(input_dir: Path, **overrides):
        settings = load_config(tmp_path)
        overrides.setdefault("catalog_path", tmp_path / "out" / "catalog.md")
        overrides.setdefault("output_jsonl", tmp_path / "out" / "results.jsonl")
        overrides.setdefault("preflight", False)
        return build_runtime_config(settings=settings, input_dir=input_dir, **overrides)

    return _make
