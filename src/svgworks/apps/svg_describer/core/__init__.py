"""Core modules for the SVG describer application."""

from .config import (  # noqa: F401
    SvgDescriberConfig,
    SvgDescriberSettings,
    build_runtime_config,
    load_config,
)
from .runner import SvgDescriberRunner  # noqa: F401

__all__ = [
    "SvgDescriberConfig",
    "SvgDescriberSettings",
    "SvgDescriberRunner",
    "build_runtime_config",
    "load_config",
]
