# -*- coding: utf-8 -*-
"""
QR Widget Errors Module

Error taxonomy for the QR code pipeline. Fatal errors are exceptions and stop
the pipeline at the point of failure; non-fatal conditions are plain values
returned next to a valid render output.

Classes:
    QRWidgetError: Base class for everything raised by this package
    CoreError: Base class for fatal pipeline errors
    EncodeError: Encoding failures (empty content, overflow, library errors)
    ConfigError: Invalid colors, sizes or icon settings
    RenderError: Raster surface could not be created
    StatusTransitionError: Status change not allowed by the overlay state machine
    IconWarning: Icon failed to load (non-fatal)
    IconCoverageWarning: Icon hides too much of the symbol (non-fatal)
"""

from dataclasses import dataclass


class QRWidgetError(Exception):
    """Base error for all QR widget operations."""
    pass


class CoreError(QRWidgetError):
    """Fatal error; no output is produced."""
    pass


class EncodeError(CoreError):
    """The content could not be turned into a QR symbol."""
    pass


class EmptyContentError(EncodeError):
    """Content is empty."""

    def __init__(self, message: str = "QR content must not be empty"):
        super().__init__(message)


class ContentTooLargeError(EncodeError):
    """No QR version can hold the content at the requested level."""

    def __init__(self, length: int, level: str, detail: str = ""):
        self.length = length
        self.level = level
        message = f"Content of {length} bytes does not fit any QR version at level {level}"
        if detail:
            message = f"{message} ({detail})"
        super().__init__(message)


class InternalEncodeError(EncodeError):
    """The encoding library failed for another reason."""
    pass


class ConfigError(CoreError):
    """Invalid render configuration."""
    pass


class RenderError(CoreError):
    """The render surface could not be created."""
    pass


class StatusTransitionError(QRWidgetError):
    """Requested status change is not an edge of the overlay state machine."""

    def __init__(self, current, target):
        self.current = current
        self.target = target
        super().__init__(f"Cannot change QR status from {current} to {target}")


@dataclass(frozen=True)
class IconWarning:
    """Icon could not be loaded; the symbol was rendered without it."""
    src: str
    message: str
    code: str = "icon_load_failed"


@dataclass(frozen=True)
class IconCoverageWarning:
    """Icon covers function patterns or more data than the level can recover."""
    message: str
    covered_functional: int = 0
    covered_data: int = 0
    ratio: float = 0.0
    code: str = "icon_coverage"
