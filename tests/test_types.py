"""Tests for the shared value types."""

import pytest

from qrwidget import (
    ErrorCorrectionLevel, IconSpec, QRCodeSize, RenderConfig, RenderFormat, Status,
)
from qrwidget.errors import ConfigError


@pytest.mark.parametrize("level, percentage, bits", [
    (ErrorCorrectionLevel.L, "7%", 1),
    (ErrorCorrectionLevel.M, "15%", 0),
    (ErrorCorrectionLevel.Q, "25%", 3),
    (ErrorCorrectionLevel.H, "30%", 2),
])
def test_level_properties(level, percentage, bits):
    assert level.percentage == percentage
    assert level.numeric_value == bits
    assert level.recovery == int(percentage[:-1]) / 100.0


def test_level_from_str():
    assert ErrorCorrectionLevel.from_str(" q ") is ErrorCorrectionLevel.Q
    assert ErrorCorrectionLevel.from_str("X") is ErrorCorrectionLevel.M
    assert ErrorCorrectionLevel.from_str(None) is ErrorCorrectionLevel.M


@pytest.mark.parametrize("value, fmt", [
    ("svg", RenderFormat.VECTOR),
    ("Vector", RenderFormat.VECTOR),
    ("canvas", RenderFormat.RASTER),
    ("bitmap", RenderFormat.RASTER),
    (None, RenderFormat.RASTER),
])
def test_format_from_str(value, fmt):
    assert RenderFormat.from_str(value) is fmt


def test_status_predicates():
    assert Status.from_str("EXPIRED").is_expired
    assert Status.from_str("nonsense") is Status.ACTIVE
    assert Status.ACTIVE.is_active
    assert Status.SCANNED.is_scanned and not Status.SCANNED.can_refresh
    assert Status.LOADING.is_loading and Status.LOADING.needs_loading
    assert not Status.EXPIRED.needs_loading
    assert Status.EXPIRED.can_refresh


@pytest.mark.parametrize("value, pixels", [
    ("small", 120), ("Medium", 160), ("large", 200), ("240", 240), (96, 96),
])
def test_size_to_pixels(value, pixels):
    assert QRCodeSize.to_pixels(value) == pixels


def test_size_to_pixels_rejects_garbage():
    with pytest.raises(ConfigError):
        QRCodeSize.to_pixels("huge")


def test_size_from_pixels():
    assert QRCodeSize.from_pixels(120) == "small"
    assert QRCodeSize.from_pixels(200) == "large"
    assert QRCodeSize.from_pixels(333) == "333"


def test_config_from_mapping():
    config = RenderConfig.from_mapping({
        'size': 'large', 'color': ' #1677ff ', 'bg_color': '', 'bordered': 'false',
        'class': 'login-qr', 'style': 'margin: 4px',
    })
    assert config == RenderConfig(
        size_px=200, foreground_color="#1677ff", background_color="transparent",
        bordered=False, class_name="login-qr", style="margin: 4px",
    )


def test_config_from_empty_mapping_uses_defaults():
    assert RenderConfig.from_mapping({}) == RenderConfig()


@pytest.mark.parametrize("opacity", ["lots", None, "0.25", True])
def test_icon_opacity_must_be_numeric(opacity):
    with pytest.raises(ConfigError):
        IconSpec(src="logo.png", opacity=opacity).validate()


def test_icon_opacity_bounds():
    IconSpec(src="logo.png", opacity=0).validate()
    IconSpec(src="logo.png", opacity=1).validate()
    with pytest.raises(ConfigError):
        IconSpec(src="logo.png", opacity=-0.1).validate()


def test_icon_size_must_be_whole_pixels():
    with pytest.raises(ConfigError):
        IconSpec(src="logo.png", width="40").validate()
