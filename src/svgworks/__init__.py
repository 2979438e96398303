"""svgworks: batch tooling for annotating SVG illustrations."""

__version__ = "0.1.0"
