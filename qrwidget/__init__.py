# -*- coding: utf-8 -*-
"""
QR Widget - Core Package

Generation and rendering core of an embeddable QR code widget: encodes a
payload into a module matrix, renders it as SVG markup or an RGBA surface
(with an optional icon composited in the background) and describes the
status overlay drawn on top of it.

Modules:
    types: Value types (levels, formats, statuses, configs, matrix)
    encoder: Content -> module matrix, via segno
    functional_areas: Function-pattern masks of a QR symbol
    geometry: Module size, offsets, icon placement and coverage
    vector: SVG renderer
    raster: Pillow renderer with asynchronous icon compositing
    overlay: Status state machine and overlay descriptor
    generator: Orchestrator and refresh action
    colors: Color string parsing
    errors: Error and warning taxonomy
"""

__version__ = "1.0.0"
__author__ = "QR Widget Team"

from .types import (
    ErrorCorrectionLevel, IconSpec, ModuleMatrix, OverlayDescriptor,
    QRCodeSize, RenderConfig, RenderFormat, Status,
)
from .errors import (
    ConfigError, ContentTooLargeError, CoreError, EmptyContentError, EncodeError,
    IconCoverageWarning, IconWarning, InternalEncodeError, QRWidgetError,
    RenderError, StatusTransitionError,
)
from .encoder import encode
from .geometry import Layout, layout
from .vector import render_vector
from .raster import PillowIconLoader, RasterHandle, render_raster
from .overlay import StatusRenderer, overlay_for, transition
from .generator import QRCodeGenerator, QRRequest, RenderOutput, generate

__all__ = [
    'ErrorCorrectionLevel',
    'IconSpec',
    'ModuleMatrix',
    'OverlayDescriptor',
    'QRCodeSize',
    'RenderConfig',
    'RenderFormat',
    'Status',
    'QRWidgetError',
    'CoreError',
    'EncodeError',
    'EmptyContentError',
    'ContentTooLargeError',
    'InternalEncodeError',
    'ConfigError',
    'RenderError',
    'StatusTransitionError',
    'IconWarning',
    'IconCoverageWarning',
    'encode',
    'Layout',
    'layout',
    'render_vector',
    'render_raster',
    'RasterHandle',
    'PillowIconLoader',
    'overlay_for',
    'StatusRenderer',
    'transition',
    'QRCodeGenerator',
    'QRRequest',
    'RenderOutput',
    'generate',
]
