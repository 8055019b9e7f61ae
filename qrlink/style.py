# -*- coding: utf-8 -*-
"""
QR Style Configuration Module

The config layer that feeds the renderer. Everything user supplied passes
through parse_style() before it reaches the SVG builder, so colors, quiet zone
and logo ratio are always within bounds by the time rendering starts.

Functions:
    parse_style: Build a QRStyleConfig from a loose mapping, rejecting bad fields
    style_warnings: Soft warnings for a valid style (scannability hints)
    style_hash: Stable cache key for exported assets
"""

import hashlib
import json
import re
from dataclasses import asdict, dataclass, replace
from typing import Any, Dict, List, Mapping, Optional

from . import config
from .errors import StyleValidationError

HEX_COLOR_RE = re.compile(r'^#[0-9A-Fa-f]{6}$')

# Accepted aliases for each field (API payloads use snake_case or camelCase)
_FIELD_ALIASES = {
    'foreground_color': ('foreground_color', 'foregroundColor', 'fg'),
    'background_color': ('background_color', 'backgroundColor', 'bg'),
    'error_correction': ('error_correction', 'errorCorrection', 'ecc'),
    'quiet_zone': ('quiet_zone', 'quietZone', 'border'),
    'module_shape': ('module_shape', 'moduleShape'),
    'eye_shape': ('eye_shape', 'eyeShape'),
    'logo_size_ratio': ('logo_size_ratio', 'logoSizeRatio', 'logo_ratio'),
}


@dataclass(frozen=True)
class QRStyleConfig:
    """Visual configuration of one QR code."""

    foreground_color: str = config.DEFAULT_FOREGROUND
    background_color: str = config.DEFAULT_BACKGROUND
    error_correction: str = config.DEFAULT_ERROR_CORRECTION
    quiet_zone: int = config.DEFAULT_QUIET_ZONE
    module_shape: str = 'square'
    eye_shape: str = 'square'
    logo_size_ratio: Optional[float] = None

    def with_changes(self, **changes) -> 'QRStyleConfig':
        return replace(self, **changes)


def is_hex_color(value: Any) -> bool:
    return isinstance(value, str) and bool(HEX_COLOR_RE.match(value))


def _lookup(data: Mapping[str, Any], field: str):
    for key in _FIELD_ALIASES[field]:
        if key in data and data[key] not in (None, ''):
            return data[key]
    return None


def parse_style(data: Optional[Mapping[str, Any]] = None,
                base: Optional[QRStyleConfig] = None) -> QRStyleConfig:
    """
    Validate a loose style mapping and return a QRStyleConfig.

    Missing fields fall back to ``base`` (or the defaults). All invalid fields
    are collected and reported together.

    Args:
        data: Mapping from a request body, form or stored style record
        base: Style supplying values for fields absent from ``data``

    Returns:
        QRStyleConfig: The validated style

    Raises:
        StyleValidationError: If any field is invalid
    """
    data = data or {}
    base = base or QRStyleConfig()
    errors: Dict[str, str] = {}
    values = asdict(base)

    for field in ('foreground_color', 'background_color'):
        raw = _lookup(data, field)
        if raw is None:
            continue
        if is_hex_color(raw):
            values[field] = raw
        else:
            errors[field] = 'Invalid hex color format (use #RRGGBB)'

    raw = _lookup(data, 'error_correction')
    if raw is not None:
        level = str(raw).strip().upper()
        if level in config.ERROR_CORRECTION_LEVELS:
            values['error_correction'] = level
        else:
            errors['error_correction'] = f"Must be one of {', '.join(config.ERROR_CORRECTION_LEVELS)}"

    raw = _lookup(data, 'quiet_zone')
    if raw is not None:
        try:
            if isinstance(raw, bool) or float(raw) != int(float(raw)):
                raise ValueError(raw)
            quiet_zone = int(float(raw))
        except (TypeError, ValueError, OverflowError):
            errors['quiet_zone'] = 'Quiet zone must be an integer'
        else:
            if config.MIN_QUIET_ZONE <= quiet_zone <= config.MAX_QUIET_ZONE:
                values['quiet_zone'] = quiet_zone
            else:
                errors['quiet_zone'] = (
                    f'Quiet zone must be between {config.MIN_QUIET_ZONE} '
                    f'and {config.MAX_QUIET_ZONE} modules'
                )

    for field, allowed in (('module_shape', config.MODULE_SHAPES), ('eye_shape', config.EYE_SHAPES)):
        raw = _lookup(data, field)
        if raw is None:
            continue
        shape = str(raw).strip().lower()
        if shape in allowed:
            values[field] = shape
        else:
            errors[field] = f"Must be one of {', '.join(allowed)}"

    raw = _lookup(data, 'logo_size_ratio')
    if raw is not None:
        try:
            if isinstance(raw, bool):
                raise ValueError(raw)
            ratio = float(raw)
        except (TypeError, ValueError):
            errors['logo_size_ratio'] = 'Logo size ratio must be a number'
        else:
            if config.MIN_LOGO_RATIO <= ratio <= config.MAX_LOGO_RATIO:
                values['logo_size_ratio'] = ratio
            else:
                errors['logo_size_ratio'] = (
                    f'Logo size ratio must be between {config.MIN_LOGO_RATIO:.2f} '
                    f'and {config.MAX_LOGO_RATIO:.2f}'
                )

    if errors:
        raise StyleValidationError(errors)
    return QRStyleConfig(**values)


def style_warnings(style: QRStyleConfig, has_logo: bool = False) -> List[str]:
    """Return human readable hints for a style that is valid but risky to scan."""
    warnings = []
    if style.logo_size_ratio is not None and style.logo_size_ratio > config.WARN_LOGO_RATIO:
        warnings.append(
            f'Logo covers more than {int(config.WARN_LOGO_RATIO * 100)}% of the code; '
            f'test scanning before printing'
        )
    if has_logo and style.error_correction not in ('Q', 'H'):
        warnings.append('Use error correction Q or H when placing a logo')
    if style.foreground_color.lower() == style.background_color.lower():
        warnings.append('Foreground and background colors are identical')
    return warnings


def style_hash(style: QRStyleConfig, logo_fingerprint: Optional[str] = None) -> str:
    """
    Stable short hash of everything that changes the rendered output.

    Callers store it next to exported assets and regenerate when it changes.
    """
    payload = asdict(style)
    payload['foreground_color'] = payload['foreground_color'].upper()
    payload['background_color'] = payload['background_color'].upper()
    payload['logo'] = logo_fingerprint
    encoded = json.dumps(payload, sort_keys=True, separators=(',', ':')).encode('utf-8')
    return hashlib.sha256(encoded).hexdigest()[:16]
