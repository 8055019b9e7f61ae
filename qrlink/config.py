# -*- coding: utf-8 -*-
"""
Configuration Module

Rendering defaults, export limits, URL policy lists and rate limits, plus the
few settings read from the process environment.
"""

import os
from typing import Dict, Tuple


# QR code defaults
DEFAULT_ERROR_CORRECTION = 'M'
ERROR_CORRECTION_WITH_LOGO = 'H'
ERROR_CORRECTION_LEVELS = ('L', 'M', 'Q', 'H')   # 7%, 15%, 25%, 30% recovery

DEFAULT_QUIET_ZONE = 4
MIN_QUIET_ZONE = 2
MAX_QUIET_ZONE = 10

DEFAULT_FOREGROUND = '#000000'
DEFAULT_BACKGROUND = '#FFFFFF'

MODULE_SHAPES = ('square', 'rounded', 'dots', 'diamond')
EYE_SHAPES = ('square', 'rounded', 'circle')

# Logo size as a fraction of the full viewbox side. MAX_LOGO_RATIO is the one
# hard ceiling used by the config layer and the renderer alike.
MIN_LOGO_RATIO = 0.10
WARN_LOGO_RATIO = 0.20
MAX_LOGO_RATIO = 0.25
LOGO_PADDING_RATIO = 0.15
LOGO_MAX_PIXELS = 512
LOGO_FORMATS = ('PNG', 'JPEG', 'GIF', 'WEBP')

# Export sizes
EXPORT_FORMATS = ('svg', 'png', 'pdf')
DEFAULT_EXPORT_SIZE = 512
MIN_EXPORT_SIZE = 64
MAX_EXPORT_SIZE = 4096
EXPORT_SIZES = (256, 512, 1024, 2048)

# Rasterizer bounds (checked before any rendering work)
MIN_RASTER_WIDTH = 1
MAX_RASTER_WIDTH = 8192

# PDF composition
MM_PER_INCH = 25.4
POINTS_PER_INCH = 72
MM_TO_POINTS = POINTS_PER_INCH / MM_PER_INCH
DEFAULT_PDF_MARGIN_MM = 10
MAX_PDF_PAGE_MM = 1000
PDF_RASTER_OVERSAMPLE = 4
PDF_RASTER_MIN_PX = 2048
CROP_MARK_LENGTH_PT = 10
CROP_MARK_THICKNESS_PT = 0.5

# name -> (page width mm, page height mm, margin mm)
PDF_PRESETS: Dict[str, Tuple[float, float, float]] = {
    'sticker-50mm': (50, 50, 2),
    'sticker-75mm': (75, 75, 3),
    'sticker-100mm': (100, 100, 5),
    'a4': (210, 297, 20),
}

PDF_PRESET_NAMES = {
    'sticker-50mm': '50mm Sticker',
    'sticker-75mm': '75mm Sticker',
    'sticker-100mm': '100mm Sticker',
    'a4': 'A4 Page',
}

# URL validation
URL_MAX_LENGTH = 2048
ALLOWED_SCHEMES = ('http', 'https')
BLOCKED_HOSTNAMES = (
    'localhost',
    '127.0.0.1',
    '0.0.0.0',
    '::1',
    'metadata.google.internal',
    '169.254.169.254',
)
METADATA_ENDPOINTS = (
    '169.254.169.254',            # AWS / GCP
    'metadata.google.internal',   # GCP
    'metadata.azure.com',         # Azure
    '100.100.100.200',            # Alibaba Cloud
)
BLOCKED_HOST_SUFFIXES = ('.localhost', '.local')

# Rate limits (requests per window)
RATE_LIMIT_WINDOW_SECONDS = 60
RATE_LIMITS = {
    'qr-create': 10,
    'export': 30,
    'api': 60,
    'redirect': 1000,
    'url-validate': 30,
}
RATE_LIMIT_SWEEP_SECONDS = 60

# Managed links
SLUG_MIN_LENGTH = 4
SLUG_MAX_LENGTH = 32
SLUG_PATTERN = r'^[a-z0-9]+(-[a-z0-9]+)*$'


def _env_flag(env, name: str, default: bool) -> bool:
    value = env.get(name)
    if value is None:
        return default
    return value.strip().lower() in ('1', 'true', 'yes', 'on')


class Settings:
    """Values taken from the process environment."""

    def __init__(self, environ=None):
        env = os.environ if environ is None else environ
        self.redirect_base_url = (
            env.get('QR_REDIRECT_BASE_URL') or env.get('PUBLIC_BASE_URL') or ''
        ).rstrip('/')
        self.log_level = (env.get('LOG_LEVEL') or 'INFO').upper()
        self.rate_limit_enabled = _env_flag(env, 'RATE_LIMIT_ENABLED', True)

    def __repr__(self):
        return (f"Settings(redirect_base_url={self.redirect_base_url!r}, "
                f"log_level={self.log_level!r}, rate_limit_enabled={self.rate_limit_enabled!r})")


settings = Settings()
