"""Configuration helpers for the SVG describer application."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterable, Optional, Sequence, Tuple
import tomllib

from PIL import ImageColor

from svgworks.libs.vlm import VLMBackend

logger = logging.getLogger(__name__)

_CONFIG_ENV_PREFIX = "SVGWORKS_SVG_DESCRIBER__"


def _find_pyproject(start: Optional[Path] = None) -> Optional[Path]:
    """Locate the nearest ``pyproject.toml`` relative to *start*."""

    current = (start or Path.cwd()).resolve()
    for candidate in [current, *current.parents]:
        pyproject = candidate / "pyproject.toml"
        if pyproject.exists():
            return pyproject
    return None


def _coerce_bool(value: object, default: bool) -> bool:
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return bool(value)
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"1", "true", "yes", "on"}:
            return True
        if lowered in {"0", "false", "no", "off"}:
            return False
    return default


def _coerce_int(value: object, default: int) -> int:
    if value is None:
        return default
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def _coerce_float(value: object, default: float) -> float:
    if value is None:
        return default
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


def _coerce_optional_int(value: object, default: Optional[int]) -> Optional[int]:
    if value is None or value == "":
        return default
    try:
        parsed = int(value)
    except (TypeError, ValueError):
        return default
    return parsed if parsed > 0 else None


def _as_path(value: object) -> Optional[Path]:
    if value is None:
        return None
    if isinstance(value, Path):
        return value
    if isinstance(value, str) and value.strip():
        return Path(value).expanduser()
    return None


def _as_text(value: object, default: str) -> str:
    if value is None:
        return default
    return str(value).strip() or default


def _normalise_iterable(value: object) -> Tuple[str, ...]:
    if value is None:
        return tuple()
    if isinstance(value, str):
        parts = [p.strip() for p in value.split(",")]
    elif isinstance(value, Iterable):
        parts = [str(item).strip() for item in value if item]
    else:
        return tuple()

    return tuple(filter(None, parts))


def is_valid_colour(value: str) -> bool:
    """True when Pillow can parse *value* as a colour (``"white"``, ``"#fff"``)."""

    try:
        ImageColor.getrgb(value)
    except ValueError:
        return False
    return True


def _as_backend(value: object, default: str) -> str:
    name = _as_text(value, default).lower()
    if name in {backend.value for backend in VLMBackend}:
        return name
    logger.warning("Unknown backend %r in configuration; using %r", value, default)
    return default


def _as_background(value: object, default: Optional[str]) -> Optional[str]:
    if value is None:
        return default
    text = str(value).strip()
    if not text:
        return None
    if is_valid_colour(text):
        return text
    logger.warning(
        "Invalid background colour %r in configuration; using %r", value, default
    )
    return default


def normalise_extensions(values: Iterable[str]) -> Tuple[str, ...]:
    """Lower-case extensions and make sure each one starts with a dot."""

    result = []
    for ext in values:
        clean = ext.strip().lower()
        if not clean:
            continue
        result.append(clean if clean.startswith(".") else f".{clean}")
    return tuple(dict.fromkeys(result))


@dataclass(frozen=True)
class SvgDescriberSettings:
    """Default configuration values sourced from project metadata."""

    default_input_dir: Optional[Path] = Path("svg")
    default_grouped: bool = False
    default_catalog_path: Path = Path("outputs/catalog/svg_catalog.md")
    default_output_jsonl: Optional[Path] = Path("outputs/results/svg_describer.jsonl")
    default_backend: str = "gemini"
    default_base_url: str = "https://generativelanguage.googleapis.com/v1beta/openai"
    default_model: str = "gemini-2.5-flash"
    default_api_key: str = "EMPTY"
    default_timeout: int = 120
    default_max_new_tokens: int = 200
    default_temperature: float = 0.2
    default_raster_width: Optional[int] = 1024
    default_background: Optional[str] = "white"
    default_dry_run: bool = False
    default_preflight: bool = True
    svg_extensions: Tuple[str, ...] = (".svg",)
    json_schema_version: str = "1.0"


@dataclass(frozen=True)
class SvgDescriberConfig:
    """Fully resolved runtime configuration for a CLI invocation."""

    input_dir: Path
    grouped: bool
    catalog_path: Path
    output_jsonl: Optional[Path]
    backend: str
    base_url: str
    model: str
    api_key: str
    timeout: int
    max_new_tokens: int
    temperature: float
    raster_width: Optional[int]
    background: Optional[str]
    dry_run: bool
    preflight: bool
    svg_extensions: Tuple[str, ...]
    json_schema_version: str


def _merge_dict(
    base: Dict[str, object], override: Optional[Dict[str, object]]
) -> Dict[str, object]:
    merged = base.copy()
    if not override:
        return merged
    for key, value in override.items():
        if value is None:
            continue
        merged[key] = value
    return merged


def _load_pyproject_settings(start: Optional[Path]) -> Dict[str, object]:
    pyproject = _find_pyproject(start)
    if not pyproject:
        return {}
    try:
        with pyproject.open("rb") as handle:
            data = tomllib.load(handle)
    except (OSError, tomllib.TOMLDecodeError):
        return {}

    tool_cfg = data.get("tool", {}).get("svgworks", {})
    if not isinstance(tool_cfg, dict):
        return {}

    describer_cfg = tool_cfg.get("svg_describer")
    return describer_cfg if isinstance(describer_cfg, dict) else {}


def _load_env_settings() -> Dict[str, object]:
    values: Dict[str, object] = {}
    for env_key, env_value in os.environ.items():
        if not env_key.startswith(_CONFIG_ENV_PREFIX):
            continue
        key = env_key[len(_CONFIG_ENV_PREFIX) :].lower()
        values[key] = env_value
    return values


def load_config(start: Optional[Path] = None) -> SvgDescriberSettings:
    """Load project-level defaults: dataclass < pyproject < environment."""

    defaults = SvgDescriberSettings()
    result: Dict[str, object] = {}
    result = _merge_dict(result, _load_pyproject_settings(start))
    result = _merge_dict(result, _load_env_settings())

    input_dir = _as_path(result.get("default_input_dir")) or defaults.default_input_dir
    catalog_path = (
        _as_path(result.get("default_catalog_path")) or defaults.default_catalog_path
    )
    if "default_output_jsonl" in result:
        # An empty string disables the audit log.
        output_jsonl = _as_path(result.get("default_output_jsonl"))
    else:
        output_jsonl = defaults.default_output_jsonl

    extensions = normalise_extensions(_normalise_iterable(result.get("svg_extensions")))

    return SvgDescriberSettings(
        default_input_dir=input_dir,
        default_grouped=_coerce_bool(
            result.get("default_grouped"), defaults.default_grouped
        ),
        default_catalog_path=catalog_path,
        default_output_jsonl=output_jsonl,
        default_backend=_as_backend(
            result.get("default_backend"), defaults.default_backend
        ),
        default_base_url=_as_text(
            result.get("default_base_url"), defaults.default_base_url
        ),
        default_model=_as_text(result.get("default_model"), defaults.default_model),
        default_api_key=_as_text(
            result.get("default_api_key"), defaults.default_api_key
        ),
        default_timeout=_coerce_int(
            result.get("default_timeout"), defaults.default_timeout
        ),
        default_max_new_tokens=_coerce_int(
            result.get("default_max_new_tokens"), defaults.default_max_new_tokens
        ),
        default_temperature=_coerce_float(
            result.get("default_temperature"), defaults.default_temperature
        ),
        default_raster_width=_coerce_optional_int(
            result.get("default_raster_width"), defaults.default_raster_width
        ),
        default_background=_as_background(
            result.get("default_background"), defaults.default_background
        ),
        default_dry_run=_coerce_bool(
            result.get("default_dry_run"), defaults.default_dry_run
        ),
        default_preflight=_coerce_bool(
            result.get("default_preflight"), defaults.default_preflight
        ),
        svg_extensions=extensions or defaults.svg_extensions,
        json_schema_version=_as_text(
            result.get("json_schema_version"), defaults.json_schema_version
        ),
    )


def build_runtime_config(
    *,
    settings: SvgDescriberSettings,
    input_dir: Optional[Path] = None,
    grouped: Optional[bool] = None,
    catalog_path: Optional[Path] = None,
    output_jsonl: Optional[Path] = None,
    timeout: Optional[int] = None,
    raster_width: Optional[int] = None,
    background: Optional[str] = None,
    dry_run: Optional[bool] = None,
    preflight: Optional[bool] = None,
    svg_extensions: Optional[Sequence[str]] = None,
) -> SvgDescriberConfig:
    """Compose a runtime configuration from defaults and CLI overrides.

    The backend, endpoint and model are deployment settings: they come from
    pyproject or the environment only.
    """

    resolved_input = Path(input_dir).expanduser() if input_dir else settings.default_input_dir
    if resolved_input is None:
        raise ValueError(
            "No input directory provided. Use --input-dir or configure defaults."
        )

    resolved_background = settings.default_background
    if background is not None:
        resolved_background = background.strip() or None
        if resolved_background and not is_valid_colour(resolved_background):
            raise ValueError(f"Invalid background colour {background!r}")

    resolved_extensions = (
        normalise_extensions(svg_extensions) if svg_extensions else ()
    ) or settings.svg_extensions

    return SvgDescriberConfig(
        input_dir=resolved_input,
        grouped=grouped if grouped is not None else settings.default_grouped,
        catalog_path=Path(catalog_path or settings.default_catalog_path).expanduser(),
        output_jsonl=(
            Path(output_jsonl).expanduser()
            if output_jsonl
            else settings.default_output_jsonl
        ),
        backend=settings.default_backend,
        base_url=settings.default_base_url,
        model=settings.default_model,
        api_key=settings.default_api_key,
        timeout=timeout if timeout is not None else settings.default_timeout,
        max_new_tokens=settings.default_max_new_tokens,
        temperature=settings.default_temperature,
        raster_width=(
            raster_width if raster_width is not None else settings.default_raster_width
        ),
        background=resolved_background,
        dry_run=dry_run if dry_run is not None else settings.default_dry_run,
        preflight=preflight if preflight is not None else settings.default_preflight,
        svg_extensions=resolved_extensions,
        json_schema_version=settings.json_schema_version,
    )
