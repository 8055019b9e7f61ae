#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
qrlink - Flask Web Application

Render, export and validate endpoints for the dashboard, plus the public
redirect resolver for managed links. Storage of codes is not handled here:
deployments plug a lookup callable into app.config['LINK_RESOLVER'].
"""

import logging
import re
from io import BytesIO
from typing import Any, Mapping, Optional, Tuple

from flask import Flask, jsonify, redirect, request, send_file

from qrlink import config
from qrlink.config import settings
from qrlink.errors import (EncodingCapacityExceeded, InvalidDimension, QRLinkError, RenderError,
                           StyleValidationError, UnknownPreset)
from qrlink.exporters import PDFOptions, export_to_pdf, optimize_svg, svg_to_png
from qrlink.exporters.svg import svg_to_bytes
from qrlink.qr_generator import create_matrix, get_qr_content
from qrlink.rate_limiter import RateLimiter, rate_limit_headers
from qrlink.renderer import build_simple_svg, build_styled_svg, logo_from_data_uri, logo_to_data_uri
from qrlink.style import QRStyleConfig, parse_style, style_hash, style_warnings
from qrlink.url_validator import validate_redirect_url, validate_url, validate_url_strict

# Configure logging
logging.basicConfig(level=getattr(logging, settings.log_level, logging.INFO))
logger = logging.getLogger(__name__)

SLUG_RE = re.compile(config.SLUG_PATTERN)


class RequestError(QRLinkError):
    """Bad request parameters that are not style fields."""

    def __init__(self, message: str, field: Optional[str] = None):
        self.field = field
        super().__init__(message)


app = Flask(__name__)
app.config['LINK_RESOLVER'] = None
app.config['RATE_LIMIT_ENABLED'] = settings.rate_limit_enabled

rate_limiter = RateLimiter()


def _client_id(req) -> str:
    forwarded = req.headers.get('X-Forwarded-For')
    if forwarded:
        return forwarded.split(',')[0].strip()
    return req.headers.get('X-Real-IP') or req.remote_addr or 'unknown'


def _check_rate_limit(bucket: str):
    """Return a 429 response when the caller is over the limit, else None."""
    if not app.config.get('RATE_LIMIT_ENABLED'):
        return None
    client = _client_id(request)
    result = rate_limiter.check_bucket(bucket, client)
    if result.success:
        return None
    logger.warning(f"Rate limit exceeded for {bucket} by {client}")
    response = jsonify(error='Too many requests, please try again later')
    response.status_code = 429
    response.headers.update(rate_limit_headers(result))
    return response


def _params() -> Mapping[str, Any]:
    body = request.get_json(silent=True)
    return body if isinstance(body, dict) else request.values


def _read_flag(params: Mapping[str, Any], name: str, default: bool = False) -> bool:
    value = params.get(name)
    if value is None or value == '':
        return default
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in ('1', 'true', 'yes', 'on')


def _read_number(params: Mapping[str, Any], name: str, default=None, cast=float):
    value = params.get(name)
    if value is None or value == '':
        return default
    try:
        if isinstance(value, bool):
            raise ValueError(value)
        number = float(value)
    except (TypeError, ValueError):
        raise InvalidDimension(f"{name} must be a number") from None
    if cast is int:
        # 512.5 is rejected, not truncated
        if not number.is_integer():
            raise InvalidDimension(f"{name} must be a whole number")
        return int(number)
    return number


def _read_content(params: Mapping[str, Any]) -> str:
    """Content to encode: raw text, or a destination/managed link."""
    text = (params.get('text') or '').strip()
    if text:
        return text

    mode = (params.get('mode') or 'direct').strip().lower()
    if mode == 'managed':
        slug = (params.get('slug') or '').strip()
        if not (config.SLUG_MIN_LENGTH <= len(slug) <= config.SLUG_MAX_LENGTH) or not SLUG_RE.match(slug):
            raise RequestError('Slug must be 4-32 lowercase letters, digits or hyphens', field='slug')
        return get_qr_content('managed', '', slug)

    destination = params.get('destination_url') or ''
    result = validate_url(destination)
    if not result.is_valid:
        raise RequestError(result.error, field='destination_url')
    return result.normalized_url


def _read_params(params: Mapping[str, Any]) -> Tuple[str, QRStyleConfig, Optional[str]]:
    """Extract content, validated style and optional logo data URI from a request."""
    content = _read_content(params)
    style = parse_style(params)

    logo_uri = None
    upload = request.files.get('logo')
    if upload is not None and upload.filename:
        try:
            logo_uri = logo_to_data_uri(upload.stream)
            logger.info(f"Logo uploaded: {upload.filename}")
        except ValueError as ex:
            raise RequestError(str(ex), field='logo') from ex
    elif isinstance(params.get('logo_data_uri'), str) and params['logo_data_uri']:
        try:
            logo_uri = logo_from_data_uri(params['logo_data_uri'])
        except ValueError as ex:
            raise RequestError(str(ex), field='logo') from ex

    return content, style, logo_uri


def _render(params: Mapping[str, Any]) -> Tuple[str, QRStyleConfig, bool]:
    content, style, logo_uri = _read_params(params)
    matrix = create_matrix(content, style.error_correction)
    logger.info(
        f"Rendering QR version {matrix.version} with ecc={style.error_correction}, "
        f"modules={style.module_shape}, eyes={style.eye_shape}"
    )
    if _read_flag(params, 'simple'):
        svg = build_simple_svg(matrix, style)
    else:
        svg = build_styled_svg(matrix, style, logo_uri)
    return svg, style, logo_uri is not None


@app.errorhandler(StyleValidationError)
def _style_error(ex):
    return jsonify(error='Invalid style', fields=ex.errors), 400


@app.errorhandler(RequestError)
def _request_error(ex):
    body = {'error': str(ex)}
    if ex.field:
        body['field'] = ex.field
    return jsonify(body), 400


@app.errorhandler(InvalidDimension)
@app.errorhandler(UnknownPreset)
def _dimension_error(ex):
    return jsonify(error=str(ex)), 400


@app.errorhandler(EncodingCapacityExceeded)
def _capacity_error(ex):
    return jsonify(error=str(ex), hint='Shorten the content or lower the error correction level'), 422


@app.errorhandler(RenderError)
def _render_error(ex):
    logger.error(f"Export failed: {ex}")
    return jsonify(error='Export failed'), 500


@app.route('/', methods=['GET'])
def index():
    return jsonify(status='ok', error=request.args.get('error'))


@app.route('/api/validate-url', methods=['POST'])
def api_validate_url():
    limited = _check_rate_limit('url-validate')
    if limited is not None:
        return limited
    params = _params()
    url = params.get('url')
    if not isinstance(url, str) or not url:
        return jsonify(error='URL is required'), 400
    validator = validate_url_strict if _read_flag(params, 'strict') else validate_url
    return jsonify(validator(url).to_dict())


@app.route('/api/render', methods=['GET', 'POST'])
def api_render():
    limited = _check_rate_limit('api')
    if limited is not None:
        return limited
    params = _params()
    svg, style, has_logo = _render(params)
    return jsonify(
        svg=svg,
        style_hash=style_hash(style),
        warnings=style_warnings(style, has_logo=has_logo),
    )


@app.route('/export/svg', methods=['GET', 'POST'])
def export_svg():
    limited = _check_rate_limit('export')
    if limited is not None:
        return limited
    params = _params()
    svg, style, _ = _render(params)
    if _read_flag(params, 'optimize'):
        svg = optimize_svg(svg)
    response = send_file(BytesIO(svg_to_bytes(svg)), as_attachment=True,
                         download_name='qr.svg', mimetype='image/svg+xml')
    response.headers['X-Style-Hash'] = style_hash(style)
    return response


@app.route('/export/png', methods=['GET', 'POST'])
def export_png():
    limited = _check_rate_limit('export')
    if limited is not None:
        return limited
    params = _params()
    size = _read_number(params, 'size', config.DEFAULT_EXPORT_SIZE, cast=int)
    if not config.MIN_EXPORT_SIZE <= size <= config.MAX_EXPORT_SIZE:
        raise InvalidDimension(
            f"size must be between {config.MIN_EXPORT_SIZE} and {config.MAX_EXPORT_SIZE} pixels"
        )
    svg, style, _ = _render(params)
    png = svg_to_png(svg, size, transparent=_read_flag(params, 'transparent'))
    logger.info(f"Exported PNG {size}x{size} ({len(png)} bytes)")
    response = send_file(BytesIO(png), as_attachment=True,
                         download_name=f'qr_{size}.png', mimetype='image/png')
    response.headers['X-Style-Hash'] = style_hash(style)
    return response


@app.route('/export/pdf', methods=['GET', 'POST'])
def export_pdf():
    limited = _check_rate_limit('export')
    if limited is not None:
        return limited
    params = _params()
    preset = (params.get('preset') or '').strip()
    if preset:
        options = preset
    else:
        options = PDFOptions(
            page_width=_read_number(params, 'page_width', config.PDF_PRESETS['a4'][0]),
            page_height=_read_number(params, 'page_height', config.PDF_PRESETS['a4'][1]),
            qr_size=_read_number(params, 'qr_size'),
            margin=_read_number(params, 'margin', config.DEFAULT_PDF_MARGIN_MM),
            bleed=_read_number(params, 'bleed', 0.0),
        )
    svg, style, _ = _render(params)
    pdf = export_to_pdf(svg, options)
    response = send_file(BytesIO(pdf), as_attachment=True,
                         download_name=f"qr_{preset or 'custom'}.pdf", mimetype='application/pdf')
    response.headers['X-Style-Hash'] = style_hash(style)
    return response


def _record_value(record, name: str, default=None):
    if isinstance(record, Mapping):
        return record.get(name, default)
    return getattr(record, name, default)


@app.route('/r/<slug>', methods=['GET'])
def resolve_redirect(slug: str):
    """Send the visitor of a managed code on to its current destination."""
    limited = _check_rate_limit('redirect')
    if limited is not None:
        return limited

    resolver = app.config.get('LINK_RESOLVER')
    record = resolver(slug) if resolver is not None else None
    if record is None:
        return redirect('/?error=qr-not-found')

    if not _record_value(record, 'is_active', True):
        return redirect('/?error=qr-inactive')

    destination = _record_value(record, 'destination_url')
    if not validate_redirect_url(destination):
        # Stored destinations were validated on save; failing now means tampering
        logger.warning(f"Rejected stored redirect destination for slug {slug!r}: {destination!r}")
        return redirect('/?error=invalid-destination')

    return redirect(destination, code=307)


if __name__ == "__main__":
    rate_limiter.start()
    try:
        app.run(debug=True)
    finally:
        rate_limiter.stop()
