from __future__ import annotations

import pytest

from qrlink.qr_generator import QRMatrix, create_matrix
from qrlink.style import QRStyleConfig

SEED_CONTENT = "https://qr.example.com/r/menu"


@pytest.fixture
def v1_matrix() -> QRMatrix:
    # Short content at level L always fits version 1 (21x21)
    matrix = create_matrix("HELLO", "L")
    assert matrix.size == 21
    return matrix


@pytest.fixture
def seed_matrix() -> QRMatrix:
    return create_matrix(SEED_CONTENT, "M")


@pytest.fixture
def all_dark_matrix() -> QRMatrix:
    return QRMatrix.from_rows([[1] * 21 for _ in range(21)], version=1)


@pytest.fixture
def default_style() -> QRStyleConfig:
    return QRStyleConfig(
        foreground_color="#000000",
        background_color="#FFFFFF",
        error_correction="M",
        quiet_zone=4,
        module_shape="square",
        eye_shape="square",
    )
