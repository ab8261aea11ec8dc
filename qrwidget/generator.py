# -*- coding: utf-8 -*-
"""
QR Code Generator Module

Public entry point of the package. Validates the configuration, encodes the
content, lays it out, dispatches to the vector or raster renderer and attaches
the status overlay. Also implements the refresh action that brings an expired
symbol back to ACTIVE.

Classes:
    QRRequest: Everything one generate call needs
    RenderOutput: Rendered symbol plus overlay, warnings and refresh hook
    QRCodeGenerator: The orchestrator

Functions:
    generate: Module-level shortcut, one generator per call
"""

import logging
import threading
from concurrent.futures import Executor
from dataclasses import dataclass, replace
from typing import Any, List, Optional, Union

from .colors import parse_color
from .encoder import Content, describe, encode
from .errors import ConfigError, IconCoverageWarning, RenderError
from .geometry import Layout, coverage, layout
from .overlay import RefreshCallback, StatusRenderer, overlay_for, transition
from .raster import IconLoader, RasterHandle, render_raster
from .types import (
    ErrorCorrectionLevel, IconSpec, ModuleMatrix, OverlayDescriptor,
    RenderConfig, RenderFormat, Status,
)
from .vector import render_vector, vector_data_url

logger = logging.getLogger(__name__)

CONTAINER_CLASS = "qr-code"
BORDERED_CLASS = "qr-code-bordered"


@dataclass(frozen=True)
class QRRequest:
    """Inputs of one generate call."""
    config: RenderConfig
    content: Content
    level: ErrorCorrectionLevel = ErrorCorrectionLevel.M
    fmt: RenderFormat = RenderFormat.VECTOR
    icon: Optional[IconSpec] = None
    status: Status = Status.ACTIVE
    on_refresh: Optional[RefreshCallback] = None
    locale: Optional[str] = None
    status_render: Optional[StatusRenderer] = None


class RenderOutput:
    """
    Result of QRCodeGenerator.generate.

    Exactly one of `markup` (vector) and `raster` (raster) is set, matching
    `format`. Warnings are non-fatal; for raster output they include icon
    load failures reported after this object was created.
    """

    def __init__(self, request: QRRequest, matrix: ModuleMatrix, layout: Layout,
                 overlay: OverlayDescriptor, generator: 'QRCodeGenerator',
                 markup: Optional[str] = None, raster: Optional[RasterHandle] = None,
                 warnings: Optional[List[Any]] = None):
        self.request = request
        self.matrix = matrix
        self.layout = layout
        self.overlay = overlay
        self.markup = markup
        self.raster = raster
        self._warnings = list(warnings or [])
        self._generator = generator

    @property
    def format(self) -> RenderFormat:
        return self.request.fmt

    @property
    def status(self) -> Status:
        return self.request.status

    @property
    def is_vector(self) -> bool:
        return self.request.fmt.is_vector

    @property
    def payload(self) -> Union[str, RasterHandle]:
        return self.markup if self.is_vector else self.raster

    @property
    def warnings(self) -> List[Any]:
        if self.raster is not None:
            return self._warnings + list(self.raster.warnings)
        return list(self._warnings)

    @property
    def can_refresh(self) -> bool:
        return self.overlay.show_refresh

    def data_url(self) -> str:
        """Inline-displayable data URL of the symbol (SVG or PNG)."""
        if self.is_vector:
            return vector_data_url(self.markup)
        return self.raster.data_url()

    def container_style(self) -> str:
        """Inline CSS of the widget container, bordered or not, plus the host's own style."""
        style = "position: relative; display: inline-block;"
        config = self.request.config
        if config.bordered:
            style += f" padding: 12px; border: 1px solid {config.border_color}; border-radius: 8px;"
        if config.style:
            style += " " + config.style.strip().rstrip(";") + ";"
        return style

    def container_class(self) -> str:
        """CSS class list of the widget container."""
        classes = [CONTAINER_CLASS]
        if self.request.config.bordered:
            classes.append(BORDERED_CLASS)
        if self.request.config.class_name:
            classes.append(self.request.config.class_name.strip())
        return " ".join(classes)

    def refresh(self, content: Optional[Content] = None) -> 'RenderOutput':
        """Run the refresh action for this output. See QRCodeGenerator.refresh."""
        return self._generator.refresh(self, content=content)


class QRCodeGenerator:
    """
    Orchestrates encode -> layout -> render -> overlay.

    Every render gets a generation number. Raster icon loads started by an
    older render are discarded once a newer render has begun, so the most
    recent symbol is never overwritten by a late icon.

    Usage:
        generator = QRCodeGenerator()
        output = generator.generate(RenderConfig(size_px=160), "https://example.org")
        svg = output.markup

        # later, user clicked refresh on an expired symbol
        output = generator.refresh(output)
    """

    def __init__(self, loader: Optional[IconLoader] = None,
                 executor: Optional[Executor] = None, locale: Optional[str] = None):
        self.loader = loader
        self.executor = executor
        self.locale = locale
        self._generation = 0
        self._lock = threading.Lock()

    @property
    def generation(self) -> int:
        return self._generation

    def _next_generation(self) -> int:
        with self._lock:
            self._generation += 1
            return self._generation

    def is_current(self, generation: int) -> bool:
        with self._lock:
            return generation == self._generation

    def validate(self, config: RenderConfig, icon: Optional[IconSpec] = None) -> None:
        """
        Check a configuration before any encoding work.

        Raises:
            ConfigError: On a non-positive size, a malformed color or invalid
                icon settings
        """
        if isinstance(config.size_px, bool) or not isinstance(config.size_px, int):
            raise ConfigError(f"QR size must be an integer, got {config.size_px!r}")
        if config.size_px <= 0:
            raise ConfigError(f"QR size must be positive, got {config.size_px}")
        parse_color(config.foreground_color)
        parse_color(config.background_color)
        parse_color(config.border_color)
        if icon is not None:
            icon.validate()

    def generate(
        self,
        config: RenderConfig,
        content: Content,
        level: ErrorCorrectionLevel = ErrorCorrectionLevel.M,
        fmt: RenderFormat = RenderFormat.VECTOR,
        icon: Optional[IconSpec] = None,
        status: Status = Status.ACTIVE,
        on_refresh: Optional[RefreshCallback] = None,
        locale: Optional[str] = None,
        status_render: Optional[StatusRenderer] = None
    ) -> RenderOutput:
        """
        Generate a rendered QR symbol with its status overlay.

        Args:
            config (RenderConfig): Size, colors and border
            content (Union[str, bytes]): Payload to encode
            level (ErrorCorrectionLevel): Error correction level
            fmt (RenderFormat): Vector (SVG) or raster output
            icon (Optional[IconSpec]): Icon drawn over the symbol
            status (Status): Status the host currently holds
            on_refresh (Optional[RefreshCallback]): Refresh callback exposed by
                the overlay while the symbol is expired
            locale (Optional[str]): Overlay message locale
            status_render (Optional[StatusRenderer]): Custom overlay content
                replacing the default mask for non-active statuses

        Returns:
            RenderOutput: Rendered symbol, overlay and non-fatal warnings

        Raises:
            ConfigError: Invalid configuration (checked before encoding)
            EncodeError: Empty content, overflow or library failure
            RenderError: The raster surface could not be created

        Example:
            >>> out = QRCodeGenerator().generate(RenderConfig(size_px=160), "https://example.org")
            >>> 'width="160"' in out.markup
            True
        """
        request = QRRequest(
            config=config, content=content, level=level, fmt=fmt, icon=icon,
            status=status, on_refresh=on_refresh, locale=locale,
            status_render=status_render,
        )
        return self.render(request)

    def render(self, request: QRRequest) -> RenderOutput:
        """Run the pipeline for a prepared request."""
        self.validate(request.config, request.icon)

        matrix = encode(request.content, request.level)
        lay = layout(matrix, request.config, request.icon)
        if lay.module_px < 1:
            raise RenderError(
                f"A {lay.size_px}px canvas is too small for a {matrix.side}x{matrix.side} module symbol"
            )
        # Only a render that will produce output supersedes the previous one
        generation = self._next_generation()

        warnings: List[Any] = []
        if lay.icon_cells:
            warning = self._coverage_warning(matrix, lay)
            if warning is not None:
                warnings.append(warning)

        markup = None
        raster = None
        if request.fmt.is_vector:
            markup = render_vector(matrix, lay, request.config)
        else:
            raster = render_raster(
                matrix, lay, request.config,
                loader=self.loader,
                executor=self.executor,
                is_current=lambda: self.is_current(generation),
            )

        overlay = overlay_for(
            request.status, request.on_refresh, request.locale or self.locale,
            status_render=request.status_render,
        )
        info = describe(matrix)
        logger.info(f"Generated {request.fmt.value} QR v{info['version']}-{info['level']} "
                    f"({info['side']}x{info['side']}) at {lay.size_px}px, status={request.status.value}")
        return RenderOutput(
            request=request, matrix=matrix, layout=lay, overlay=overlay,
            generator=self, markup=markup, raster=raster, warnings=warnings,
        )

    def refresh(self, target: Union[RenderOutput, QRRequest],
                content: Optional[Content] = None) -> RenderOutput:
        """
        Refresh action: call the host's on_refresh, then regenerate as ACTIVE.

        New content is taken from the `content` argument, else from the
        callback's return value when it is a str or bytes, else the previous
        content is reused.

        Args:
            target (Union[RenderOutput, QRRequest]): Output or request to refresh
            content (Optional[Union[str, bytes]]): Replacement content

        Returns:
            RenderOutput: Freshly generated output with status ACTIVE
        """
        request = target.request if isinstance(target, RenderOutput) else target

        new_content = content
        if request.on_refresh is not None:
            returned = request.on_refresh()
            if new_content is None and isinstance(returned, (str, bytes)):
                new_content = returned
        if new_content is None:
            new_content = request.content

        status = transition(request.status, Status.ACTIVE, refresh=True)
        logger.info(f"Refreshing QR code (was {request.status.value})")
        return self.render(replace(request, content=new_content, status=status))

    def _coverage_warning(self, matrix: ModuleMatrix, lay: Layout) -> Optional[IconCoverageWarning]:
        cov = coverage(matrix, lay)
        recovery = matrix.level.recovery
        if cov.covered_functional == 0 and cov.ratio <= recovery:
            return None
        if cov.covered_functional:
            message = f"Icon covers {cov.covered_functional} function-pattern modules"
        else:
            message = (f"Icon covers {cov.ratio:.0%} of data modules, more than level "
                       f"{matrix.level.value} recovers ({matrix.level.percentage})")
        logger.warning(message)
        return IconCoverageWarning(
            message=message,
            covered_functional=cov.covered_functional,
            covered_data=cov.covered_data,
            ratio=cov.ratio,
        )


def generate(config: RenderConfig, content: Content, **kwargs) -> RenderOutput:
    """
    QRCodeGenerator.generate on a fresh generator.

    Every call is its own widget, so unrelated callers never discard each
    other's icons. Keep a QRCodeGenerator per widget to get last-write-wins
    between successive renders of the same widget.
    """
    return QRCodeGenerator().generate(config, content, **kwargs)
