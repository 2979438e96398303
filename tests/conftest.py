import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parent.parent
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))


@pytest.fixture(autouse=True)
def isolated_config_env(monkeypatch):
    """Keep developer environment overrides out of the tests."""

    import os

    for key in list(os.environ):
        if key.startswith("SVGWORKS_SVG_DESCRIBER__"):
            monkeypatch.delenv(key, raising=False)
    yield
