# -*- coding: utf-8 -*-
"""
QR Code Generator Module

Thin wrapper around segno that produces the module matrix every renderer in
this package consumes. Matrix construction itself (data placement, masking,
Reed-Solomon) is left entirely to segno.

Classes:
    QRMatrix: Immutable square module grid with a get(row, col) accessor

Functions:
    make_qr: Generate a segno symbol at exactly the requested error correction
    create_matrix: Generate a QRMatrix for content + error correction level
    get_qr_content: Content to encode for managed or direct mode codes
    recommended_error_correction: Suggested level depending on logo use
"""

import logging
from typing import Iterable, Optional, Sequence

import numpy as np
import segno

from . import config
from .errors import EncodingCapacityExceeded

logger = logging.getLogger(__name__)


class QRMatrix:
    """
    Square boolean module grid (True = dark).

    Backed by a read-only numpy array so the hot loops in the renderer index a
    single contiguous buffer.
    """

    __slots__ = ('_modules', 'version')

    def __init__(self, modules: np.ndarray, version: int = 0):
        modules = np.asarray(modules, dtype=bool)
        if modules.size == 0:
            modules = np.zeros((0, 0), dtype=bool)
        if modules.ndim != 2 or modules.shape[0] != modules.shape[1]:
            raise ValueError(f"QR matrix must be square, got shape {modules.shape}")
        modules = modules.copy()
        modules.setflags(write=False)
        self._modules = modules
        self.version = version

    @classmethod
    def from_rows(cls, rows: Iterable[Sequence], version: int = 0) -> 'QRMatrix':
        """Build a matrix from nested rows of truthy/falsy values."""
        rows = [[bool(cell) for cell in row] for row in rows]
        return cls(np.array(rows, dtype=bool), version=version)

    @classmethod
    def from_segno(cls, symbol: segno.QRCode) -> 'QRMatrix':
        """Build a matrix from a segno symbol (matrix rows are bytearrays of 0/1)."""
        return cls.from_rows((list(row) for row in symbol.matrix), version=symbol.version)

    @property
    def size(self) -> int:
        return self._modules.shape[0]

    @property
    def modules(self) -> np.ndarray:
        return self._modules

    def get(self, row: int, col: int) -> bool:
        if not (0 <= row < self.size and 0 <= col < self.size):
            return False
        return bool(self._modules[row, col])

    def dark_count(self) -> int:
        return int(self._modules.sum())

    def __repr__(self):
        return f"QRMatrix(size={self.size}, version={self.version})"


def make_qr(content: str, ecc: str = config.DEFAULT_ERROR_CORRECTION) -> segno.QRCode:
    """
    Generate a standard (non-micro) QR symbol at exactly the given level.

    Args:
        content (str): Data to encode
        ecc (str): Error correction level ('L', 'M', 'Q', 'H')

    Returns:
        segno.QRCode: Generated symbol

    Raises:
        ValueError: If content is empty or the level is unknown
        EncodingCapacityExceeded: If content does not fit at this level
    """
    level = (ecc or '').strip().upper()
    if level not in config.ERROR_CORRECTION_LEVELS:
        raise ValueError(f"Unknown error correction level: {ecc!r}")
    if not content:
        raise ValueError("Cannot encode empty content")

    try:
        # boost_error stays off: the requested level is honoured, never silently raised
        return segno.make(content, error=level, micro=False, boost_error=False)
    except segno.DataOverflowError as ex:
        logger.info(f"Content of {len(content)} chars exceeds capacity at level {level}")
        raise EncodingCapacityExceeded(len(content), level) from ex


def create_matrix(content: str, error_correction: str = config.DEFAULT_ERROR_CORRECTION) -> QRMatrix:
    """
    Generate the module matrix for ``content``.

    Example:
        >>> matrix = create_matrix("https://qr.example.com/r/menu", "M")
        >>> print(f"Version {matrix.version}: {matrix.size}x{matrix.size} modules")
    """
    symbol = make_qr(content, error_correction)
    matrix = QRMatrix.from_segno(symbol)
    logger.debug(f"Created QR matrix version {matrix.version} ({matrix.size}x{matrix.size})")
    return matrix


def get_qr_content(mode: str, destination_url: str, slug: Optional[str] = None,
                   base_url: Optional[str] = None) -> str:
    """
    Content to encode in the QR code.

    Managed codes encode the redirect service URL ``<base>/r/<slug>`` so the
    destination can change later; direct codes encode the destination itself.
    """
    if mode == 'managed' and slug:
        if base_url is None:
            base_url = config.settings.redirect_base_url
        return f"{base_url.rstrip('/')}/r/{slug}"
    return destination_url


def recommended_error_correction(has_logo: bool) -> str:
    """Higher recovery is recommended when a logo covers part of the code."""
    return config.ERROR_CORRECTION_WITH_LOGO if has_logo else config.DEFAULT_ERROR_CORRECTION
