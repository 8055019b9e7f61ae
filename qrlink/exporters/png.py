# -*- coding: utf-8 -*-
"""
PNG Export Module

Rasterizes SVG documents with cairosvg and letterboxes the result onto a
square Pillow canvas ("contain" fit). Output is always lossless PNG.

Functions:
    svg_to_png: SVG string -> square PNG bytes (opaque or transparent)
    svg_to_png_transparent: Shortcut for a transparent letterbox
    svg_to_png_data_url: PNG as a base64 data URI
"""

import base64
import logging
from io import BytesIO

import cairosvg
from PIL import Image

from .. import config
from ..errors import InvalidDimension, RenderError

logger = logging.getLogger(__name__)

PNG_MIMETYPE = 'image/png'

WHITE = (255, 255, 255, 255)
TRANSPARENT = (0, 0, 0, 0)


def check_width(width) -> int:
    """Reject pixel widths outside the rasterizer bounds before any work starts."""
    if isinstance(width, bool) or not isinstance(width, int):
        raise InvalidDimension(f"PNG width must be an integer, got {width!r}")
    if not config.MIN_RASTER_WIDTH <= width <= config.MAX_RASTER_WIDTH:
        raise InvalidDimension(
            f"PNG width must be between {config.MIN_RASTER_WIDTH} and "
            f"{config.MAX_RASTER_WIDTH} pixels, got {width}"
        )
    return width


def _rasterize(svg: str, **size) -> Image.Image:
    try:
        raw = cairosvg.svg2png(bytestring=svg.encode('utf-8'), **size)
        img = Image.open(BytesIO(raw))
        img.load()
    except Exception as ex:
        logger.error(f"SVG rasterization failed: {ex}")
        raise RenderError(f"Could not rasterize SVG: {ex}") from ex
    return img.convert('RGBA')


def svg_to_png(svg: str, width: int, transparent: bool = False) -> bytes:
    """
    Rasterize an SVG to a width x width PNG.

    The SVG keeps its aspect ratio and is centred; any letterbox area is white
    or fully transparent. QR SVGs are square, so they fill the whole canvas.

    Args:
        svg (str): SVG document
        width (int): Output side in pixels
        transparent (bool): Transparent instead of white letterbox

    Returns:
        bytes: PNG image

    Raises:
        InvalidDimension: If width is out of bounds
        RenderError: If the SVG cannot be rendered
    """
    check_width(width)
    if not isinstance(svg, str) or '<svg' not in svg:
        raise RenderError("Input is not an SVG document")

    img = _rasterize(svg, output_width=width)
    if img.height > width:
        img = _rasterize(svg, output_height=width)
    if img.width > width or img.height > width:
        img.thumbnail((width, width), Image.LANCZOS)

    canvas = Image.new('RGBA', (width, width), TRANSPARENT if transparent else WHITE)
    canvas.alpha_composite(img, ((width - img.width) // 2, (width - img.height) // 2))
    if not transparent:
        canvas = canvas.convert('RGB')

    buffer = BytesIO()
    canvas.save(buffer, format='PNG', compress_level=9)
    return buffer.getvalue()


def svg_to_png_transparent(svg: str, width: int) -> bytes:
    return svg_to_png(svg, width, transparent=True)


def svg_to_png_data_url(svg: str, width: int, transparent: bool = False) -> str:
    b64 = base64.b64encode(svg_to_png(svg, width, transparent)).decode('ascii')
    return f"data:{PNG_MIMETYPE};base64,{b64}"


export_to_png = svg_to_png
