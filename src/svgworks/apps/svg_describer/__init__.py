"""SVG Describer: caption vector illustrations and build a grouped catalog."""
