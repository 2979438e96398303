"""Logging setup shared by the svgworks command line tools."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Optional, Union

__all__ = ["configure_logging", "resolve_level"]

_MANAGED_HANDLER_FLAG = "_svgworks_managed_handler"
_FILE_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# HTTP and image libraries that flood DEBUG output during a batch.
_NOISY_LOGGERS = ("urllib3", "PIL", "cairosvg")


def _default_log_directory() -> Path:
    env_override = os.environ.get("SVGWORKS_LOG_DIR")
    if env_override:
        return Path(env_override).expanduser()

    # Project checkout: keep logs next to pyproject.toml.
    for candidate in Path(__file__).resolve().parents:
        if (candidate / "pyproject.toml").exists() or (candidate / ".git").exists():
            return candidate / "logs"

    return Path.cwd() / "logs"


def resolve_level(level: Union[int, str, None], default: int = logging.INFO) -> int:
    """Turn ``"debug"``, ``"20"`` or ``logging.DEBUG`` into a numeric level."""

    if level is None or level == "":
        return default
    if isinstance(level, int):
        return level
    text = str(level).strip()
    if text.isdigit():
        return int(text)
    value = logging.getLevelName(text.upper())
    return value if isinstance(value, int) else default


def _remove_managed_handlers(logger: logging.Logger) -> None:
    for handler in list(logger.handlers):
        if getattr(handler, _MANAGED_HANDLER_FLAG, False):
            logger.removeHandler(handler)
            handler.close()


def _managed(handler: logging.Handler, level: int, fmt: logging.Formatter) -> logging.Handler:
    handler.setLevel(level)
    handler.setFormatter(fmt)
    setattr(handler, _MANAGED_HANDLER_FLAG, True)
    return handler


def configure_logging(
    log_name: str,
    *,
    level: Union[int, str, None] = None,
    log_dir: Optional[Path] = None,
    include_console: bool = True,
) -> Path:
    """Route root logging to ``<log_dir>/<log_name>.log`` and the console.

    The level comes from *level*, then ``SVGWORKS_LOG_LEVEL``, then INFO.
    Calling this again replaces the handlers installed by the previous call.
    """

    resolved = resolve_level(
        level if level is not None else os.environ.get("SVGWORKS_LOG_LEVEL")
    )
    target_directory = (
        Path(log_dir).expanduser() if log_dir else _default_log_directory()
    )
    target_directory.mkdir(parents=True, exist_ok=True)
    log_path = target_directory / f"{log_name}.log"

    root_logger = logging.getLogger()
    root_logger.setLevel(resolved)
    _remove_managed_handlers(root_logger)

    root_logger.addHandler(
        _managed(
            logging.FileHandler(log_path, encoding="utf-8"),
            resolved,
            logging.Formatter(fmt=_FILE_FORMAT, datefmt=_DATE_FORMAT),
        )
    )
    if include_console:
        # Progress lines only; timestamps live in the file log.
        root_logger.addHandler(
            _managed(logging.StreamHandler(), resolved, logging.Formatter("%(message)s"))
        )

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(resolved, logging.WARNING))

    logging.captureWarnings(True)
    return log_path
