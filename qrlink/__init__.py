# -*- coding: utf-8 -*-
"""
qrlink - Core Module

Styled QR codes for managed links: the code encodes a stable redirect URL, so
the destination can change without reprinting.

Modules:
    qr_generator: segno-backed module matrix and managed-link content
    style: Style configuration, validation, warnings and cache hashing
    shapes: Module and finder pattern geometry
    renderer: Styled and plain SVG builders, logo normalization
    exporters: SVG, PNG and PDF export
    url_validator: Destination URL policy (SSRF, protocol and credential checks)
    rate_limiter: Fixed-window request counters
"""

__version__ = "1.0.0"
__author__ = "qrlink Team"

from .errors import (EncodingCapacityExceeded, InvalidDimension, QRLinkError, RenderError,
                     StyleValidationError, UnknownPreset, UrlErrorKind)
from .exporters import (PDFOptions, create_preset_pdf, export_to_pdf, export_to_png,
                        optimize_svg, svg_to_base64_data_url, svg_to_data_url, svg_to_pdf,
                        svg_to_png, svg_to_png_data_url, svg_to_png_transparent)
from .qr_generator import QRMatrix, create_matrix, get_qr_content, recommended_error_correction
from .renderer import (SVGOptions, build_simple_svg, build_styled_document, build_styled_svg,
                       logo_from_data_uri, logo_to_data_uri, render_styled_svg)
from .shapes import finder_pattern_fragments, is_finder_pattern, is_finder_separator, module_path
from .style import QRStyleConfig, parse_style, style_hash, style_warnings
from .url_validator import (UrlValidationResult, validate_redirect_url, validate_url,
                            validate_url_strict)

# Alias matching the public name used by the dashboard/API layer
validate_destination_url = validate_url

__all__ = [
    'EncodingCapacityExceeded',
    'InvalidDimension',
    'QRLinkError',
    'RenderError',
    'StyleValidationError',
    'UnknownPreset',
    'UrlErrorKind',
    'PDFOptions',
    'create_preset_pdf',
    'export_to_pdf',
    'export_to_png',
    'optimize_svg',
    'svg_to_base64_data_url',
    'svg_to_data_url',
    'svg_to_pdf',
    'svg_to_png',
    'svg_to_png_data_url',
    'svg_to_png_transparent',
    'QRMatrix',
    'create_matrix',
    'get_qr_content',
    'recommended_error_correction',
    'SVGOptions',
    'build_simple_svg',
    'build_styled_document',
    'build_styled_svg',
    'logo_from_data_uri',
    'logo_to_data_uri',
    'render_styled_svg',
    'finder_pattern_fragments',
    'is_finder_pattern',
    'is_finder_separator',
    'module_path',
    'QRStyleConfig',
    'parse_style',
    'style_hash',
    'style_warnings',
    'UrlValidationResult',
    'validate_destination_url',
    'validate_redirect_url',
    'validate_url',
    'validate_url_strict',
]
