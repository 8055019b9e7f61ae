# -*- coding: utf-8 -*-
"""
PDF Export Module

Composes a single print page with reportlab: white page, the QR rasterized at
print resolution and centred, plus optional bleed with corner crop marks.

Functions:
    page_layout: Page, QR and raster sizes for a set of PDFOptions
    svg_to_pdf: SVG string -> PDF bytes for explicit page options
    create_preset_pdf: SVG string -> PDF bytes for a named preset
    export_to_pdf: Accepts either PDFOptions or a preset name
"""

import logging
import math
from dataclasses import dataclass
from io import BytesIO
from typing import Optional, Union

from reportlab.lib.utils import ImageReader
from reportlab.pdfgen import canvas

from .. import config
from ..errors import InvalidDimension, UnknownPreset
from .png import svg_to_png

logger = logging.getLogger(__name__)

PDF_MIMETYPE = 'application/pdf'


@dataclass(frozen=True)
class PDFOptions:
    """Page geometry in millimetres."""

    page_width: float
    page_height: float
    qr_size: Optional[float] = None
    margin: float = config.DEFAULT_PDF_MARGIN_MM
    bleed: float = 0


@dataclass(frozen=True)
class PageLayout:
    """Resolved geometry in PDF points (72 per inch)."""

    width: float
    height: float
    bleed: float
    qr_size: float
    qr_x: float
    qr_y: float
    raster_px: int


def _number(value, name: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)) or not math.isfinite(value):
        raise InvalidDimension(f"{name} must be a finite number, got {value!r}")
    return float(value)


def page_layout(options: PDFOptions) -> PageLayout:
    """
    Resolve page geometry, rejecting unusable sizes before any rendering.

    Raises:
        InvalidDimension: If page size, margin, bleed or QR size is out of bounds
    """
    page_width = _number(options.page_width, 'page_width')
    page_height = _number(options.page_height, 'page_height')
    margin = _number(options.margin, 'margin')
    bleed = _number(options.bleed, 'bleed')

    for name, value in (('page_width', page_width), ('page_height', page_height)):
        if not 0 < value <= config.MAX_PDF_PAGE_MM:
            raise InvalidDimension(f"{name} must be between 0 and {config.MAX_PDF_PAGE_MM} mm, got {value}")
    if margin < 0 or bleed < 0:
        raise InvalidDimension("margin and bleed cannot be negative")
    if max(page_width, page_height) + bleed * 2 > config.MAX_PDF_PAGE_MM:
        raise InvalidDimension(f"Page including bleed exceeds {config.MAX_PDF_PAGE_MM} mm")

    mm = config.MM_TO_POINTS
    total_width = (page_width + bleed * 2) * mm
    total_height = (page_height + bleed * 2) * mm
    bleed_pts = bleed * mm
    inset = (margin + bleed) * mm

    if options.qr_size is not None:
        qr_size = _number(options.qr_size, 'qr_size') * mm
    else:
        qr_size = min(total_width - inset * 2, total_height - inset * 2)
    if qr_size <= 0:
        raise InvalidDimension("Margins leave no room for the QR code")
    if qr_size > min(total_width, total_height):
        raise InvalidDimension("QR size exceeds the page")

    print_px = math.ceil(qr_size * config.PDF_RASTER_OVERSAMPLE)
    if print_px > config.MAX_RASTER_WIDTH:
        max_mm = config.MAX_RASTER_WIDTH / config.PDF_RASTER_OVERSAMPLE / mm
        raise InvalidDimension(f"QR code larger than {max_mm:.0f} mm cannot be rasterized at print resolution")
    raster_px = max(config.PDF_RASTER_MIN_PX, print_px)

    return PageLayout(
        width=total_width,
        height=total_height,
        bleed=bleed_pts,
        qr_size=qr_size,
        qr_x=(total_width - qr_size) / 2,
        qr_y=(total_height - qr_size) / 2,
        raster_px=raster_px,
    )


def _draw_crop_marks(c: canvas.Canvas, layout: PageLayout) -> None:
    length = config.CROP_MARK_LENGTH_PT
    b = layout.bleed
    left, right = b, layout.width - b
    bottom, top = b, layout.height - b

    c.setStrokeColorRGB(0, 0, 0)
    c.setLineWidth(config.CROP_MARK_THICKNESS_PT)
    # (corner x, corner y, inward x direction, inward y direction)
    for x, y, dx, dy in ((left, top, 1, -1), (right, top, -1, -1),
                         (left, bottom, 1, 1), (right, bottom, -1, 1)):
        c.line(x, y, x, y + dy * length)
        c.line(x, y, x + dx * length, y)


def svg_to_pdf(svg: str, options: PDFOptions) -> bytes:
    """
    Create a one page PDF holding the QR code.

    Args:
        svg (str): Styled SVG document
        options (PDFOptions): Page geometry in millimetres

    Returns:
        bytes: PDF document

    Raises:
        InvalidDimension: If the geometry is unusable
        RenderError: If the SVG cannot be rasterized
    """
    layout = page_layout(options)
    png = svg_to_png(svg, layout.raster_px)

    buffer = BytesIO()
    c = canvas.Canvas(buffer, pagesize=(layout.width, layout.height))
    c.setTitle('QR code')

    c.setFillColorRGB(1, 1, 1)
    c.rect(0, 0, layout.width, layout.height, stroke=0, fill=1)
    c.drawImage(ImageReader(BytesIO(png)), layout.qr_x, layout.qr_y,
                width=layout.qr_size, height=layout.qr_size, mask='auto')

    if layout.bleed > 0:
        _draw_crop_marks(c, layout)

    c.showPage()
    c.save()
    logger.info(
        f"Composed PDF page {options.page_width}x{options.page_height}mm "
        f"(bleed {options.bleed}mm, raster {layout.raster_px}px)"
    )
    return buffer.getvalue()


def preset_options(preset: str) -> PDFOptions:
    try:
        width, height, margin = config.PDF_PRESETS[preset]
    except KeyError:
        raise UnknownPreset(
            f"Unknown PDF preset {preset!r}; choose one of {', '.join(config.PDF_PRESETS)}"
        ) from None
    return PDFOptions(page_width=width, page_height=height, margin=margin)


def create_preset_pdf(svg: str, preset: str) -> bytes:
    return svg_to_pdf(svg, preset_options(preset))


def export_to_pdf(svg: str, options: Union[PDFOptions, str]) -> bytes:
    if isinstance(options, str):
        return create_preset_pdf(svg, options)
    return svg_to_pdf(svg, options)
