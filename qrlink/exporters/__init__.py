# -*- coding: utf-8 -*-
"""
Exporters for styled QR SVG documents.

Modules:
    svg: Byte blobs, data URIs and whitespace/comment optimization
    png: Square PNG rasterization (opaque or transparent)
    pdf: Single page print PDFs with presets, bleed and crop marks
"""

from .pdf import PDFOptions, create_preset_pdf, export_to_pdf, page_layout, svg_to_pdf
from .png import export_to_png, svg_to_png, svg_to_png_data_url, svg_to_png_transparent
from .svg import optimize_svg, svg_to_base64_data_url, svg_to_bytes, svg_to_data_url

__all__ = [
    'PDFOptions',
    'create_preset_pdf',
    'export_to_pdf',
    'page_layout',
    'svg_to_pdf',
    'export_to_png',
    'svg_to_png',
    'svg_to_png_data_url',
    'svg_to_png_transparent',
    'optimize_svg',
    'svg_to_base64_data_url',
    'svg_to_bytes',
    'svg_to_data_url',
]
