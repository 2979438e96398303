"""SVG describer CLI module.

Available commands:
- run: describe SVG files and (in grouped mode) write the catalog
- check: probe the description backend
- strip: remove existing descriptions
"""

from .main import app

__all__ = ["app"]
