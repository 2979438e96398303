"""SVG to PNG conversion for the description stage."""

from __future__ import annotations

import io
import logging
from typing import Optional

from PIL import Image, ImageColor

from .errors import RasterizeError

logger = logging.getLogger(__name__)


def rasterize(
    markup: bytes,
    *,
    output_width: Optional[int] = None,
    background: Optional[str] = None,
) -> bytes:
    """Render SVG *markup* to PNG bytes using CairoSVG.

    When *background* is given (any colour Pillow understands) the alpha
    channel is flattened onto it so the model does not receive a transparent
    canvas.
    """

    try:
        import cairosvg
    except (ImportError, OSError) as exc:
        raise RasterizeError(f"CairoSVG is unavailable: {exc}") from exc

    try:
        png_bytes = cairosvg.svg2png(bytestring=markup, output_width=output_width)
    except Exception as exc:  # noqa: BLE001 - cairosvg raises parser-specific types
        raise RasterizeError(f"SVG rendering failed: {exc}") from exc

    if not png_bytes:
        raise RasterizeError("SVG rendering produced no output")

    if background:
        png_bytes = flatten_background(png_bytes, background)
    return png_bytes


def flatten_background(png_bytes: bytes, background: str) -> bytes:
    """Composite a PNG with transparency onto a solid *background* colour."""

    try:
        fill = ImageColor.getrgb(background)
    except ValueError as exc:
        raise RasterizeError(f"Invalid background colour {background!r}") from exc

    try:
        with Image.open(io.BytesIO(png_bytes)) as image:
            rgba = image.convert("RGBA")
            canvas = Image.new("RGBA", rgba.size, fill[:3] + (255,))
            canvas.alpha_composite(rgba)
            buffer = io.BytesIO()
            canvas.convert("RGB").save(buffer, format="PNG")
    except OSError as exc:
        raise RasterizeError(f"Could not flatten rendered image: {exc}") from exc

    logger.debug("Flattened %d-byte raster onto %s", len(png_bytes), background)
    return buffer.getvalue()
