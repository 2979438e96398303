"""Applications shipped with svgworks."""
