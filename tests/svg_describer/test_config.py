from __future__ import annotations

import logging
from pathlib import Path

import pytest

from svgworks.apps.svg_describer.core.config import (
    SvgDescriberSettings,
    build_runtime_config,
    is_valid_colour,
    load_config,
    normalise_extensions,
)


def _write_pyproject(directory: Path, body: str) -> None:
    (directory / "pyproject.toml").write_text(
        "[project]\nname = \"demo\"\n\n[tool.svgworks.svg_describer]\n" + body,
        encoding="utf-8",
    )


def test_defaults_without_pyproject(tmp_path):
    settings = load_config(tmp_path)

    assert settings == SvgDescriberSettings()
    assert settings.default_backend == "gemini"
    assert settings.default_model == "gemini-2.5-flash"
    assert settings.svg_extensions == (".svg",)


def test_pyproject_values_are_loaded(tmp_path):
    _write_pyproject(
        tmp_path,
        'default_input_dir = "art"\n'
        "default_grouped = true\n"
        'default_catalog_path = "docs/catalog.md"\n'
        'default_backend = "VLLM"\n'
        'default_base_url = "http://localhost:8000/v1"\n'
        'default_model = "qwen2-vl"\n'
        "default_raster_width = 0\n"
        'default_background = ""\n'
        'svg_extensions = ["SVG", ".svgz"]\n',
    )
    nested = tmp_path / "sub" / "dir"
    nested.mkdir(parents=True)

    settings = load_config(nested)

    assert settings.default_input_dir == Path("art")
    assert settings.default_grouped is True
    assert settings.default_catalog_path == Path("docs/catalog.md")
    assert settings.default_backend == "vllm"
    assert settings.default_base_url == "http://localhost:8000/v1"
    assert settings.default_model == "qwen2-vl"
    assert settings.default_raster_width is None
    assert settings.default_background is None
    assert settings.svg_extensions == (".svg", ".svgz")


def test_environment_overrides_pyproject(tmp_path, monkeypatch):
    _write_pyproject(tmp_path, 'default_model = "from-pyproject"\ndefault_timeout = 30\n')
    monkeypatch.setenv("SVGWORKS_SVG_DESCRIBER__DEFAULT_MODEL", "from-env")
    monkeypatch.setenv("SVGWORKS_SVG_DESCRIBER__DEFAULT_DRY_RUN", "yes")

    settings = load_config(tmp_path)

    assert settings.default_model == "from-env"
    assert settings.default_timeout == 30
    assert settings.default_dry_run is True


def test_empty_jsonl_setting_disables_audit_log(tmp_path, monkeypatch):
    monkeypatch.setenv("SVGWORKS_SVG_DESCRIBER__DEFAULT_OUTPUT_JSONL", "")

    assert load_config(tmp_path).default_output_jsonl is None


def test_invalid_numbers_fall_back_to_defaults(tmp_path, monkeypatch):
    monkeypatch.setenv("SVGWORKS_SVG_DESCRIBER__DEFAULT_TIMEOUT", "soon")

    assert load_config(tmp_path).default_timeout == SvgDescriberSettings().default_timeout


def test_cli_overrides_take_precedence(tmp_path):
    settings = load_config(tmp_path)

    config = build_runtime_config(
        settings=settings,
        input_dir=tmp_path / "svgs",
        grouped=True,
        catalog_path=tmp_path / "catalog.md",
        timeout=5,
        raster_width=300,
        dry_run=True,
        preflight=False,
        svg_extensions=["XML"],
    )

    assert config.input_dir == tmp_path / "svgs"
    assert config.grouped is True
    assert config.catalog_path == tmp_path / "catalog.md"
    assert config.timeout == 5
    assert config.raster_width == 300
    assert config.dry_run is True
    assert config.preflight is False
    assert config.svg_extensions == (".xml",)
    assert config.model == settings.default_model
    assert config.backend == settings.default_backend


def test_missing_input_directory_is_rejected():
    settings = SvgDescriberSettings(default_input_dir=None)

    with pytest.raises(ValueError, match="No input directory"):
        build_runtime_config(settings=settings)


@pytest.mark.parametrize(
    ("values", "expected"),
    [
        (["svg", ".SVG", " .svgz "], (".svg", ".svgz")),
        (["", "  "], ()),
        ([".Svg"], (".svg",)),
    ],
)
def test_normalise_extensions(values, expected):
    assert normalise_extensions(values) == expected


def test_unknown_backend_falls_back_to_default(tmp_path, monkeypatch, caplog):
    monkeypatch.setenv("SVGWORKS_SVG_DESCRIBER__DEFAULT_BACKEND", "openai")

    with caplog.at_level(logging.WARNING):
        settings = load_config(tmp_path)

    assert settings.default_backend == SvgDescriberSettings().default_backend
    assert "Unknown backend 'openai'" in caplog.text


@pytest.mark.parametrize("name", ["vllm", "LMDeploy", " gemini "])
def test_known_backends_are_accepted(tmp_path, monkeypatch, name):
    monkeypatch.setenv("SVGWORKS_SVG_DESCRIBER__DEFAULT_BACKEND", name)

    assert load_config(tmp_path).default_backend == name.strip().lower()


def test_invalid_background_in_pyproject_falls_back(tmp_path, caplog):
    _write_pyproject(tmp_path, 'default_background = "notacolour"\n')

    with caplog.at_level(logging.WARNING):
        settings = load_config(tmp_path)

    assert settings.default_background == SvgDescriberSettings().default_background
    assert "Invalid background colour 'notacolour'" in caplog.text


def test_valid_background_in_pyproject_is_kept(tmp_path):
    _write_pyproject(tmp_path, 'default_background = "#202020"\n')

    assert load_config(tmp_path).default_background == "#202020"


def test_invalid_background_override_is_rejected(tmp_path):
    with pytest.raises(ValueError, match="Invalid background colour"):
        build_runtime_config(
            settings=load_config(tmp_path), input_dir=tmp_path, background="notacolour"
        )


def test_empty_background_override_keeps_alpha(tmp_path):
    config = build_runtime_config(
        settings=load_config(tmp_path), input_dir=tmp_path, background="  "
    )

    assert config.background is None


@pytest.mark.parametrize(
    ("value", "expected"), [("white", True), ("#ff00aa", True), ("notacolour", False)]
)
def test_is_valid_colour(value, expected):
    assert is_valid_colour(value) is expected
