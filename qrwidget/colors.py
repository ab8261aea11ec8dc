# -*- coding: utf-8 -*-
"""
QR Widget Colors Module

Validation and parsing of the color strings the host passes in: hex
(#rgb, #rgba, #rrggbb, #rrggbbaa), rgb(), rgba() with a CSS alpha in 0..1,
named colors and 'transparent'.

Functions:
    parse_color: Parse a color string to an RGBA tuple
    is_valid_color: True if parse_color accepts the string
"""

import re
from typing import Tuple

from PIL import ImageColor

from .errors import ConfigError

RGBA = Tuple[int, int, int, int]

TRANSPARENT: RGBA = (0, 0, 0, 0)

# CSS rgba() with a fractional alpha, which ImageColor does not understand
_CSS_RGBA = re.compile(
    r"^rgba\(\s*(\d{1,3})\s*,\s*(\d{1,3})\s*,\s*(\d{1,3})\s*,\s*(\d*\.?\d+)\s*\)$",
    re.IGNORECASE,
)


def parse_color(value: str) -> RGBA:
    """
    Parse a color string into an (r, g, b, a) tuple.

    Args:
        value (str): Hex, rgb(), rgba(), named color or 'transparent'

    Returns:
        RGBA: Channels in 0..255

    Raises:
        ConfigError: If the string is not a recognised color

    Example:
        >>> parse_color('#1677ff')
        (22, 119, 255, 255)
        >>> parse_color('rgba(0, 0, 0, 0.5)')
        (0, 0, 0, 128)
    """
    if not isinstance(value, str) or not value.strip():
        raise ConfigError(f"Invalid color: {value!r}")

    text = value.strip()
    if text.lower() == 'transparent':
        return TRANSPARENT

    match = _CSS_RGBA.match(text)
    if match:
        r, g, b = (int(match.group(i)) for i in range(1, 4))
        alpha = float(match.group(4))
        # rgba(r, g, b, 128) keeps Pillow's 0..255 alpha meaning
        a = int(round(alpha * 255)) if alpha <= 1.0 else int(alpha)
        channels = (r, g, b, a)
    else:
        try:
            channels = ImageColor.getcolor(text, 'RGBA')
        except ValueError as ex:
            raise ConfigError(f"Invalid color {value!r}: {ex}") from ex

    if any(c < 0 or c > 255 for c in channels):
        raise ConfigError(f"Invalid color {value!r}: channel out of range")
    return tuple(channels)


def is_valid_color(value: str) -> bool:
    try:
        parse_color(value)
    except ConfigError:
        return False
    return True

