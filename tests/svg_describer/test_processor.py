from __future__ import annotations

import pytest

from svgworks.apps.svg_describer.core import markup
from svgworks.apps.svg_describer.core.errors import RasterizeError, WriteError
from svgworks.apps.svg_describer.core.models import ItemState
from svgworks.apps.svg_describer.core.processor import ItemProcessor

from .helpers import CAT_SVG, DESCRIBED_SVG, NO_ROOT_SVG, FakeDescriber, FakeRasterizer, write_svg


def _processor(describer=None, rasterizer=None, **kwargs) -> ItemProcessor:
    return ItemProcessor(
        describer or FakeDescriber(),
        rasterize_fn=rasterizer or FakeRasterizer(),
        **kwargs,
    )


def test_describes_and_persists_new_file(tmp_path):
    path = write_svg(tmp_path / "cat.svg")
    describer = FakeDescriber(default="A cat naps in a sunbeam.")
    rasterizer = FakeRasterizer()

    result = _processor(describer, rasterizer).process(path, "animals")

    assert result.state is ItemState.PERSISTED
    assert result.entry is not None
    assert result.entry.name == "cat"
    assert result.entry.category == "animals"
    assert result.entry.description == "A cat naps in a sunbeam."
    assert rasterizer.calls == [CAT_SVG.encode("utf-8")]
    assert describer.calls == [b"\x89PNG fake 1"]
    assert path.read_text(encoding="utf-8") == markup.insert_description(
        CAT_SVG, "A cat naps in a sunbeam."
    )


def test_skips_already_described_file(tmp_path):
    path = write_svg(tmp_path / "box.svg", DESCRIBED_SVG)
    describer = FakeDescriber()
    rasterizer = FakeRasterizer()
    before = path.stat().st_mtime_ns

    result = _processor(describer, rasterizer).process(path)

    assert result.state is ItemState.SKIPPED
    assert result.entry is not None
    assert result.entry.description == "An existing caption."
    assert result.entry.category is None
    assert describer.calls == []
    assert rasterizer.calls == []
    assert path.read_text(encoding="utf-8") == DESCRIBED_SVG
    assert path.stat().st_mtime_ns == before


def test_empty_existing_description_is_skipped_without_entry(tmp_path):
    path = write_svg(tmp_path / "blank.svg", "<svg><desc></desc><g/></svg>")
    describer = FakeDescriber()

    result = _processor(describer).process(path)

    assert result.state is ItemState.SKIPPED
    assert result.entry is None
    assert result.succeeded
    assert any("extract_failed" in note for note in result.notes)
    assert describer.calls == []


def test_description_failure_marks_item_failed(tmp_path):
    path = write_svg(tmp_path / "cat.svg")
    describer = FakeDescriber(fail_on={1})

    result = _processor(describer).process(path)

    assert result.state is ItemState.FAILED
    assert result.entry is None
    assert "DescribeError" in result.error
    assert "model unavailable" in result.error
    assert path.read_text(encoding="utf-8") == CAT_SVG


def test_rasterize_failure_marks_item_failed(tmp_path):
    path = write_svg(tmp_path / "broken.svg")
    describer = FakeDescriber()

    def exploding_rasterizer(markup_bytes, **kwargs):
        raise RasterizeError("not an SVG")

    result = _processor(describer, exploding_rasterizer).process(path)

    assert result.state is ItemState.FAILED
    assert result.error.startswith("RasterizeError")
    assert describer.calls == []


def test_unexpected_rasterizer_exception_is_wrapped(tmp_path):
    path = write_svg(tmp_path / "broken.svg")

    def exploding_rasterizer(markup_bytes, **kwargs):
        raise ValueError("bad viewBox")

    result = _processor(rasterizer=exploding_rasterizer).process(path)

    assert result.state is ItemState.FAILED
    assert result.error == "RasterizeError: bad viewBox"


def test_unreadable_file_marks_item_failed(tmp_path):
    result = _processor().process(tmp_path / "missing.svg")

    assert result.state is ItemState.FAILED
    assert result.error.startswith("ReadError")


def test_non_utf8_file_marks_item_failed(tmp_path):
    path = tmp_path / "latin.svg"
    path.write_bytes("<svg><text>caf\xe9</text></svg>".encode("latin-1"))

    result = _processor().process(path)

    assert result.state is ItemState.FAILED
    assert result.error.startswith("ReadError")


def test_write_failure_marks_item_failed(tmp_path, monkeypatch):
    path = write_svg(tmp_path / "cat.svg")

    def failing_write(path, content):
        raise WriteError("disk full", path)

    monkeypatch.setattr(ItemProcessor, "_write", staticmethod(failing_write))
    result = _processor().process(path)

    assert result.state is ItemState.FAILED
    assert result.entry is None
    assert "disk full" in result.error


def test_missing_root_tag_does_not_crash(tmp_path):
    path = write_svg(tmp_path / "fragment.svg", NO_ROOT_SVG)

    result = _processor().process(path, "misc")

    assert result.state is ItemState.DESCRIBED
    assert result.entry is not None
    assert path.read_text(encoding="utf-8") == NO_ROOT_SVG
    assert any("no root" in note for note in result.notes)


def test_dry_run_leaves_file_untouched(tmp_path):
    path = write_svg(tmp_path / "cat.svg")

    result = _processor(dry_run=True).process(path)

    assert result.state is ItemState.DESCRIBED
    assert result.entry is not None
    assert path.read_text(encoding="utf-8") == CAT_SVG


def test_rasterizer_receives_configured_options(tmp_path):
    path = write_svg(tmp_path / "cat.svg")
    seen = {}

    def recording_rasterizer(markup_bytes, **kwargs):
        seen.update(kwargs)
        return b"png"

    _processor(rasterizer=recording_rasterizer, raster_width=512, background="white").process(path)

    assert seen == {"output_width": 512, "background": "white"}


@pytest.mark.parametrize("text", ["Fish & chips <hot>", "Plain text."])
def test_reprocessing_persisted_file_skips(tmp_path, text):
    path = write_svg(tmp_path / "meal.svg")
    first = _processor(FakeDescriber(default=text)).process(path)
    annotated = path.read_text(encoding="utf-8")

    describer = FakeDescriber()
    second = _processor(describer).process(path)

    assert first.state is ItemState.PERSISTED
    assert second.state is ItemState.SKIPPED
    assert describer.calls == []
    assert path.read_text(encoding="utf-8") == annotated
    assert second.entry.description == markup.escape_text(text)
