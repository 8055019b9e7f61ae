# -*- coding: utf-8 -*-
"""
Error Types Module

Exceptions raised by the matrix provider, the style config layer and the
exporters. URL validation never raises: its outcomes are modelled as
UrlValidationResult values tagged with a UrlErrorKind.
"""

from enum import Enum
from typing import Dict, Optional


class QRLinkError(Exception):
    """Base class for every error raised by qrlink."""


class EncodingCapacityExceeded(QRLinkError):
    """Content does not fit in a QR symbol at the requested error correction level."""

    def __init__(self, content_length: int, error_correction: str):
        self.content_length = content_length
        self.error_correction = error_correction
        super().__init__(
            f"Content of {content_length} characters does not fit a QR code "
            f"at error correction level {error_correction}"
        )


class ExportError(QRLinkError):
    """Base class for SVG, PNG and PDF export failures."""


class RenderError(ExportError):
    """The SVG handed to the rasterizer or PDF composer could not be rendered."""


class InvalidDimension(ExportError, ValueError):
    """A pixel width or page size is outside the accepted bounds."""


class UnknownPreset(ExportError, KeyError):
    """The requested PDF preset name does not exist."""

    def __str__(self):
        return str(self.args[0]) if self.args else "Unknown preset"


class StyleValidationError(QRLinkError, ValueError):
    """
    Raised by the style config layer when one or more fields are invalid.

    Attributes:
        errors: Mapping of field name -> human readable message
    """

    def __init__(self, errors: Dict[str, str], message: Optional[str] = None):
        self.errors = dict(errors)
        if message is None:
            message = "; ".join(f"{field}: {msg}" for field, msg in sorted(self.errors.items()))
        super().__init__(message)


class UrlErrorKind(str, Enum):
    """Reason a destination URL was rejected."""

    EMPTY_INPUT = "EmptyInput"
    TOO_LONG = "TooLong"
    MALFORMED_URL = "MalformedUrl"
    DISALLOWED_PROTOCOL = "DisallowedProtocol"
    BLOCKED_HOST = "BlockedHost"
    EMBEDDED_CREDENTIALS = "EmbeddedCredentials"
    SINGLE_LABEL_HOST = "SingleLabelHost"

    @property
    def is_policy_rejection(self) -> bool:
        """True for rejections of syntactically fine URLs (security relevant)."""
        return self in (
            UrlErrorKind.DISALLOWED_PROTOCOL,
            UrlErrorKind.BLOCKED_HOST,
            UrlErrorKind.EMBEDDED_CREDENTIALS,
            UrlErrorKind.SINGLE_LABEL_HOST,
        )
