from __future__ import annotations

import pytest

from qrlink.errors import StyleValidationError
from qrlink.style import QRStyleConfig, is_hex_color, parse_style, style_hash, style_warnings


def test_empty_input_gives_defaults() -> None:
    assert parse_style() == QRStyleConfig()
    assert parse_style({}) == QRStyleConfig(
        foreground_color="#000000",
        background_color="#FFFFFF",
        error_correction="M",
        quiet_zone=4,
        module_shape="square",
        eye_shape="square",
        logo_size_ratio=None,
    )


def test_snake_and_camel_case_and_short_aliases() -> None:
    snake = parse_style({"foreground_color": "#112233", "quiet_zone": 6, "module_shape": "dots"})
    camel = parse_style({"foregroundColor": "#112233", "quietZone": "6", "moduleShape": "DOTS"})
    short = parse_style({"fg": "#112233", "border": "6", "moduleShape": " dots "})
    assert snake == camel == short
    assert snake.quiet_zone == 6
    assert snake.module_shape == "dots"


def test_error_correction_is_upper_cased() -> None:
    assert parse_style({"ecc": "h"}).error_correction == "H"


def test_empty_strings_fall_back_to_base() -> None:
    base = QRStyleConfig(foreground_color="#ABCDEF", eye_shape="circle")
    style = parse_style({"fg": "", "eye_shape": None, "bg": "#000000"}, base=base)
    assert style.foreground_color == "#ABCDEF"
    assert style.eye_shape == "circle"
    assert style.background_color == "#000000"


def test_all_field_errors_are_reported_together() -> None:
    with pytest.raises(StyleValidationError) as excinfo:
        parse_style({
            "fg": "red",
            "bg": "#12345",
            "ecc": "X",
            "quiet_zone": 1,
            "module_shape": "hexagon",
            "eye_shape": "star",
            "logo_ratio": 0.5,
        })
    assert set(excinfo.value.errors) == {
        "foreground_color",
        "background_color",
        "error_correction",
        "quiet_zone",
        "module_shape",
        "eye_shape",
        "logo_size_ratio",
    }
    assert "quiet_zone" in str(excinfo.value)


@pytest.mark.parametrize("value", [1, 11, -4, "4.5", "abc", True, "inf", "nan", [4]])
def test_quiet_zone_rejections(value) -> None:
    with pytest.raises(StyleValidationError) as excinfo:
        parse_style({"quiet_zone": value})
    assert list(excinfo.value.errors) == ["quiet_zone"]


@pytest.mark.parametrize("value", [2, 10, "3", 4.0])
def test_quiet_zone_bounds_are_inclusive(value) -> None:
    assert parse_style({"quiet_zone": value}).quiet_zone == int(float(value))


@pytest.mark.parametrize("value", [0.09, 0.26, "nan", "big", False])
def test_logo_ratio_rejections(value) -> None:
    with pytest.raises(StyleValidationError):
        parse_style({"logo_size_ratio": value})


@pytest.mark.parametrize("value", [0.10, 0.2, "0.25"])
def test_logo_ratio_accepted(value) -> None:
    assert parse_style({"logoSizeRatio": value}).logo_size_ratio == pytest.approx(float(value))


def test_hex_colors() -> None:
    assert is_hex_color("#a1B2c3")
    assert not is_hex_color("#a1B2c")
    assert not is_hex_color("a1B2c3")
    assert not is_hex_color("#a1B2c3ff")
    assert not is_hex_color(None)


def test_warnings_for_risky_styles() -> None:
    assert style_warnings(QRStyleConfig()) == []

    big_logo = QRStyleConfig(logo_size_ratio=0.24, error_correction="H")
    warnings = style_warnings(big_logo, has_logo=True)
    assert len(warnings) == 1
    assert "20%" in warnings[0]

    assert len(style_warnings(QRStyleConfig(error_correction="M"), has_logo=True)) == 1
    same = QRStyleConfig(foreground_color="#ffffff", background_color="#FFFFFF")
    assert any("identical" in w for w in style_warnings(same))


def test_style_hash_is_stable_and_sensitive() -> None:
    base = QRStyleConfig()
    assert style_hash(base) == style_hash(QRStyleConfig())
    assert len(style_hash(base)) == 16
    assert style_hash(base.with_changes(foreground_color="#000000")) == style_hash(base)
    assert style_hash(QRStyleConfig(background_color="#ffffff")) == style_hash(QRStyleConfig(background_color="#FFFFFF"))
    assert style_hash(base.with_changes(module_shape="dots")) != style_hash(base)
    assert style_hash(base, logo_fingerprint="abc") != style_hash(base)


def test_style_is_immutable() -> None:
    style = QRStyleConfig()
    with pytest.raises(AttributeError):
        style.quiet_zone = 8
    assert style.with_changes(quiet_zone=8).quiet_zone == 8
    assert style.quiet_zone == 4
