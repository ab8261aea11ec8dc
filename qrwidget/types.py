# -*- coding: utf-8 -*-
"""
QR Widget Types Module

Value types shared by the encoder, geometry, renderers and overlay.
All of them are immutable; the host owns them and passes them in on every
render call.

Classes:
    ErrorCorrectionLevel: L/M/Q/H redundancy setting
    RenderFormat: Vector (SVG markup) or raster (pixel surface) output
    Status: Overlay status (active, loading, expired, scanned)
    QRCodeSize: Pixel size presets
    IconSpec: Optional icon placed over the symbol
    RenderConfig: Size, colors and border of the rendered symbol
    ModuleMatrix: Square grid of dark/light modules
    OverlayDescriptor: What the status overlay should show
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping, Optional, Sequence, Tuple

import numpy as np

from .errors import ConfigError


class ErrorCorrectionLevel(Enum):
    """
    Error correction level of the QR symbol.

    Higher levels tolerate more damage (or a larger icon) at the cost of a
    bigger matrix for the same content.
    """
    L = "L"
    M = "M"
    Q = "Q"
    H = "H"

    @property
    def percentage(self) -> str:
        return _LEVEL_PERCENTAGE[self]

    @property
    def recovery(self) -> float:
        """Share of codewords that can be restored (0.07 .. 0.30)."""
        return int(self.percentage.rstrip('%')) / 100.0

    @property
    def numeric_value(self) -> int:
        """Level bits as written in the symbol's format information."""
        return _LEVEL_NUMERIC[self]

    @classmethod
    def from_str(cls, value: Optional[str]) -> 'ErrorCorrectionLevel':
        """Parse 'L'/'M'/'Q'/'H' (any case); anything else gives M."""
        try:
            return cls((value or 'M').strip().upper())
        except ValueError:
            return cls.M

    def __str__(self) -> str:
        return self.value


_LEVEL_PERCENTAGE = {
    ErrorCorrectionLevel.L: "7%",
    ErrorCorrectionLevel.M: "15%",
    ErrorCorrectionLevel.Q: "25%",
    ErrorCorrectionLevel.H: "30%",
}

_LEVEL_NUMERIC = {
    ErrorCorrectionLevel.L: 1,
    ErrorCorrectionLevel.M: 0,
    ErrorCorrectionLevel.Q: 3,
    ErrorCorrectionLevel.H: 2,
}


class RenderFormat(Enum):
    """Output backend. Chosen by configuration, never inferred."""
    VECTOR = "svg"
    RASTER = "canvas"

    @classmethod
    def from_str(cls, value: Optional[str]) -> 'RenderFormat':
        """Parse a format name; unknown names fall back to raster."""
        name = (value or '').strip().lower()
        if name in ('svg', 'vector'):
            return cls.VECTOR
        return cls.RASTER

    @property
    def is_vector(self) -> bool:
        return self is RenderFormat.VECTOR

    @property
    def is_raster(self) -> bool:
        return self is RenderFormat.RASTER

    def __str__(self) -> str:
        return self.value


class Status(Enum):
    """Status shown on top of the symbol."""
    ACTIVE = "active"
    LOADING = "loading"
    EXPIRED = "expired"
    SCANNED = "scanned"

    @classmethod
    def from_str(cls, value: Optional[str]) -> 'Status':
        try:
            return cls((value or 'active').strip().lower())
        except ValueError:
            return cls.ACTIVE

    @property
    def is_active(self) -> bool:
        return self is Status.ACTIVE

    @property
    def is_loading(self) -> bool:
        return self is Status.LOADING

    @property
    def is_expired(self) -> bool:
        return self is Status.EXPIRED

    @property
    def is_scanned(self) -> bool:
        return self is Status.SCANNED

    @property
    def can_refresh(self) -> bool:
        return self is Status.EXPIRED

    @property
    def needs_loading(self) -> bool:
        return self is Status.LOADING

    def __str__(self) -> str:
        return self.value


class QRCodeSize:
    """Pixel size presets of the widget."""
    SMALL = 120
    MEDIUM = 160
    LARGE = 200

    _NAMES = {'small': SMALL, 'medium': MEDIUM, 'large': LARGE}

    @classmethod
    def to_pixels(cls, value: Any) -> int:
        """
        Resolve a preset name or a number to pixels.

        Raises:
            ConfigError: If value is neither a preset name nor an integer
        """
        if isinstance(value, str):
            name = value.strip().lower()
            if name in cls._NAMES:
                return cls._NAMES[name]
        try:
            return int(value)
        except (TypeError, ValueError):
            raise ConfigError(f"Invalid QR size: {value!r}")

    @classmethod
    def from_pixels(cls, pixels: int) -> str:
        """Preset name for a pixel size, or the number itself as text."""
        for name, px in cls._NAMES.items():
            if px == pixels:
                return name
        return str(pixels)


@dataclass(frozen=True)
class IconSpec:
    """
    Icon drawn over the symbol.

    When x/y are None the icon is centered. With excavate=True the modules
    under the icon are not drawn.
    """
    src: str
    width: int = 40
    height: int = 40
    x: Optional[int] = None
    y: Optional[int] = None
    excavate: bool = True
    opacity: float = 1.0

    def validate(self) -> None:
        if not self.src:
            raise ConfigError("Icon source must not be empty")
        if not all(isinstance(v, int) and not isinstance(v, bool) for v in (self.width, self.height)):
            raise ConfigError(f"Icon size must be whole pixels, got {self.width!r}x{self.height!r}")
        if self.width <= 0 or self.height <= 0:
            raise ConfigError(f"Icon size must be positive, got {self.width}x{self.height}")
        if isinstance(self.opacity, bool) or not isinstance(self.opacity, (int, float)):
            raise ConfigError(f"Icon opacity must be a number, got {self.opacity!r}")
        if not 0.0 <= self.opacity <= 1.0:
            raise ConfigError(f"Icon opacity must be between 0 and 1, got {self.opacity}")


def _parse_bool(value: Any, default: bool) -> bool:
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in ('1', 'true', 'yes', 'on')


@dataclass(frozen=True)
class RenderConfig:
    """Pixel size, colors and border of the rendered symbol, plus container class and style."""
    size_px: int = QRCodeSize.MEDIUM
    foreground_color: str = "#000000"
    background_color: str = "transparent"
    bordered: bool = True
    border_color: str = "#000000"
    class_name: Optional[str] = None
    style: Optional[str] = None

    @classmethod
    def from_mapping(cls, values: Mapping[str, Any]) -> 'RenderConfig':
        """
        Build a config from request-style string parameters.

        Recognised keys: size, color, bg_color, bordered, border_color, class
        and style.
        Missing or blank values take the defaults; values are validated later
        by the generator, not here.

        Raises:
            ConfigError: If size is neither a preset name nor an integer
        """
        defaults = cls()
        size = values.get('size') or defaults.size_px
        return cls(
            size_px=QRCodeSize.to_pixels(size),
            foreground_color=(values.get('color') or defaults.foreground_color).strip(),
            background_color=(values.get('bg_color') or defaults.background_color).strip(),
            bordered=_parse_bool(values.get('bordered'), defaults.bordered),
            border_color=(values.get('border_color') or defaults.border_color).strip(),
            class_name=values.get('class') or None,
            style=values.get('style') or None,
        )


@dataclass(frozen=True)
class ModuleMatrix:
    """
    Square grid of QR modules (True = dark), without quiet zone.

    Attributes:
        rows: Module rows, top to bottom
        version: QR version (1-40) the encoder selected
        level: Error correction level of the symbol
        mask: Mask pattern (0-7) the encoder selected
    """
    rows: Tuple[Tuple[bool, ...], ...]
    version: int
    level: ErrorCorrectionLevel
    mask: int = 0

    @classmethod
    def from_rows(cls, rows: Sequence[Sequence[int]], version: int,
                  level: ErrorCorrectionLevel, mask: int = 0) -> 'ModuleMatrix':
        return cls(
            rows=tuple(tuple(bool(v) for v in row) for row in rows),
            version=version,
            level=level,
            mask=mask,
        )

    @property
    def side(self) -> int:
        return len(self.rows)

    @property
    def dark_count(self) -> int:
        return sum(sum(row) for row in self.rows)

    def is_dark(self, row: int, col: int) -> bool:
        return self.rows[row][col]

    def to_array(self) -> np.ndarray:
        """Read-only numpy bool array of shape (side, side)."""
        array = np.array(self.rows, dtype=bool)
        array.setflags(write=False)
        return array


@dataclass(frozen=True)
class OverlayDescriptor:
    """What the status overlay shows over the symbol."""
    mask: bool
    message: str
    show_refresh: bool
    icon: Optional[str] = None
    refresh_label: str = ""
    custom: Any = None
