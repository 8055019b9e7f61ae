# -*- coding: utf-8 -*-
"""
QR Code Renderer Module

Turns a QRMatrix plus a QRStyleConfig into a styled SVG document: custom data
module shapes, dedicated three-layer finder patterns and an optional centred
logo. A plain renderer without shape handling is provided for fast previews.

Functions:
    build_styled_document: Styled drawing primitives for a matrix
    build_styled_svg: Styled SVG string (alias: render_styled_svg)
    build_simple_svg: Plain square-module SVG string
    logo_to_data_uri: Normalize an uploaded logo into a PNG data URI
    logo_from_data_uri: Same for a logo sent as a base64 data URI
"""

import base64
import logging
from dataclasses import dataclass
from io import BytesIO
from typing import Optional, Union

from PIL import Image as PILImage

from . import config
from .qr_generator import QRMatrix
from .shapes import (FINDER_SIZE, finder_pattern_fragments, finder_pattern_origins,
                     is_finder_pattern, is_finder_separator, module_path)
from .style import QRStyleConfig
from .svg_document import Group, Image, Path, Rect, SVGDocument

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SVGOptions:
    include_xml_declaration: bool = True


def _quiet_zone(style) -> int:
    return max(0, int(style.quiet_zone))


def _logo_ratio(style) -> Optional[float]:
    ratio = getattr(style, 'logo_size_ratio', None)
    if not ratio:
        return None
    return min(max(float(ratio), config.MIN_LOGO_RATIO), config.MAX_LOGO_RATIO)


def build_styled_document(
    matrix: QRMatrix,
    style: QRStyleConfig,
    logo_data_uri: Optional[str] = None
) -> SVGDocument:
    """
    Compose the styled QR code as an ordered list of drawing primitives.

    Paint order is background -> data modules -> finder patterns -> logo.
    Modules inside finder patterns or their separator rings are never drawn by
    the module pass, whatever the module shape, so finders keep their light
    separator ring.

    Args:
        matrix (QRMatrix): Module grid
        style (QRStyleConfig): Validated style; quiet zone and logo ratio are
            clamped if handed out-of-range values
        logo_data_uri (Optional[str]): Image data URI to overlay in the centre.
            Ignored unless the style has a logo size ratio.

    Returns:
        SVGDocument: Document in module units
    """
    size = matrix.size
    quiet_zone = _quiet_zone(style)
    view_box = size + 2 * quiet_zone
    fg = style.foreground_color
    bg = style.background_color

    doc = SVGDocument(view_box=view_box)
    doc.add(Rect(0, 0, view_box, view_box, fill=bg))

    fragments = []
    for row in range(size):
        for col in range(size):
            if is_finder_pattern(row, col, size) or is_finder_separator(row, col, size):
                continue
            if not matrix.get(row, col):
                continue
            fragments.append(module_path(style.module_shape, quiet_zone + col, quiet_zone + row, 1))
    if fragments:
        doc.add(Path(''.join(fragments), fill=fg))

    # A matrix too small to hold a finder only gets the module pass
    if size >= FINDER_SIZE:
        for (r0, c0) in finder_pattern_origins(size):
            doc.extend(finder_pattern_fragments(
                style.eye_shape, quiet_zone + c0, quiet_zone + r0, 1, fg, bg
            ))

    ratio = _logo_ratio(style)
    if logo_data_uri and ratio:
        logo_size = view_box * ratio
        logo_pos = (view_box - logo_size) / 2
        padding = logo_size * config.LOGO_PADDING_RATIO
        doc.add(Rect(logo_pos - padding, logo_pos - padding,
                     logo_size + padding * 2, logo_size + padding * 2, fill=bg))
        doc.add(Image(logo_data_uri, logo_pos, logo_pos, logo_size, logo_size))
    elif logo_data_uri:
        logger.debug("Logo supplied without a logo size ratio; not drawn")

    return doc


def build_styled_svg(
    matrix: QRMatrix,
    style: QRStyleConfig,
    logo_data_uri: Optional[str] = None,
    options: Optional[SVGOptions] = None
) -> str:
    """
    Render a styled QR code as an SVG string.

    Example:
        >>> from qrlink.qr_generator import create_matrix
        >>> svg = build_styled_svg(create_matrix("https://example.com"), QRStyleConfig(module_shape='dots'))
    """
    options = options or SVGOptions()
    doc = build_styled_document(matrix, style, logo_data_uri)
    return doc.to_svg(include_xml_declaration=options.include_xml_declaration)


render_styled_svg = build_styled_svg


def build_simple_svg(matrix: QRMatrix, style, options: Optional[SVGOptions] = None) -> str:
    """
    Render every dark module as a plain unit square under one fill color.

    Only foreground_color, background_color and quiet_zone are read from
    ``style``.
    """
    options = options or SVGOptions()
    size = matrix.size
    quiet_zone = _quiet_zone(style)
    view_box = size + 2 * quiet_zone

    modules = Group(fill=style.foreground_color)
    for row in range(size):
        for col in range(size):
            if matrix.get(row, col):
                modules.children.append(Rect(quiet_zone + col, quiet_zone + row, 1, 1))

    doc = SVGDocument(view_box=view_box)
    doc.add(Rect(0, 0, view_box, view_box, fill=style.background_color))
    doc.add(modules)
    return doc.to_svg(include_xml_declaration=options.include_xml_declaration)


def logo_to_data_uri(logo: Union[PILImage.Image, bytes, BytesIO], max_px: int = config.LOGO_MAX_PIXELS) -> str:
    """
    Normalize a logo into a base64 PNG data URI suitable for the SVG builder.

    Args:
        logo: PIL image, raw image bytes or a file-like object
        max_px (int): Longest side after downscaling

    Returns:
        str: ``data:image/png;base64,...``

    Raises:
        ValueError: If the input is not a readable image
    """
    if isinstance(logo, PILImage.Image):
        img = logo
    else:
        stream = BytesIO(logo) if isinstance(logo, (bytes, bytearray)) else logo
        try:
            img = PILImage.open(stream, formats=config.LOGO_FORMATS)
            img.load()
        except (OSError, SyntaxError, PILImage.DecompressionBombError) as ex:
            raise ValueError(f"Unreadable logo image: {ex}") from ex

    img = img.convert('RGBA')
    img.thumbnail((max_px, max_px), PILImage.LANCZOS)

    buffer = BytesIO()
    img.save(buffer, format='PNG')
    b64 = base64.b64encode(buffer.getvalue()).decode('ascii')
    return f"data:image/png;base64,{b64}"


def logo_from_data_uri(uri: str, max_px: int = config.LOGO_MAX_PIXELS) -> str:
    """
    Re-encode a client supplied ``data:image/...;base64,`` logo as PNG.

    The payload is decoded and goes through logo_to_data_uri like an upload,
    so only raster formats reach the SVG (never nested SVG documents).

    Raises:
        ValueError: If the URI is not a base64 image data URI or not a readable image
    """
    header, sep, payload = uri.partition(',')
    if not sep or not header.startswith('data:image/') or not header.endswith(';base64'):
        raise ValueError("Logo must be a base64 encoded image data URI")
    try:
        raw = base64.b64decode(payload, validate=True)
    except ValueError as ex:
        raise ValueError(f"Invalid base64 logo data: {ex}") from ex
    return logo_to_data_uri(raw, max_px)
