# -*- coding: utf-8 -*-
"""
QR Raster Renderer Module

Draws a module matrix into an RGBA pixel surface and, when an icon is
configured, loads the icon in the background and composites it over the
already-drawn grid.

The module grid is available as soon as render_raster returns. The icon load
is the only asynchronous step: it runs on an executor and completes the
handle's `ready` future when it has been composited, has failed, or has been
discarded because a newer render superseded it. A failed icon load never
removes the grid; it adds an IconWarning instead.

Classes:
    IconLoader: Protocol for host image loading
    PillowIconLoader: Loads icons from files, data URLs or raw bytes
    RasterHandle: Surface plus readiness signal of one raster render

Functions:
    render_raster: Draw the grid and start the icon load
"""

import base64
import binascii
import logging
import os
import threading
from concurrent.futures import Executor, Future, ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from io import BytesIO
from typing import Callable, List, Optional, Protocol, Union
from urllib.parse import unquote_to_bytes

import numpy as np
from PIL import Image, ImageDraw

from .colors import parse_color
from .errors import IconWarning, RenderError
from .geometry import Layout, icon_position
from .types import ModuleMatrix, RenderConfig

logger = logging.getLogger(__name__)

IconSource = Union[str, bytes]


class IconLoader(Protocol):
    """Host image-loading primitive used for icons."""

    def load(self, src: IconSource) -> Image.Image:
        """Return the decoded image, or raise on failure."""
        ...


class PillowIconLoader:
    """
    Icon loader backed by Pillow.

    Accepts data URLs (data:image/png;base64,...), local file paths and raw
    image bytes. Remote URLs are not fetched; hosts that need them supply
    their own IconLoader.
    """

    def load(self, src: IconSource) -> Image.Image:
        if isinstance(src, bytes):
            data = src
        elif src.startswith('data:'):
            data = self._decode_data_url(src)
        elif os.path.isfile(src):
            with open(src, 'rb') as f:
                data = f.read()
        else:
            raise FileNotFoundError(f"Icon not found: {src}")

        image = Image.open(BytesIO(data))
        image.load()
        return image.convert('RGBA')

    @staticmethod
    def _decode_data_url(src: str) -> bytes:
        header, sep, payload = src.partition(',')
        if not sep:
            raise ValueError("Malformed data URL: missing ','")
        if header.endswith(';base64'):
            try:
                return base64.b64decode(payload, validate=True)
            except binascii.Error as ex:
                raise ValueError(f"Malformed base64 icon data: {ex}") from ex
        return unquote_to_bytes(payload)


_executor: Optional[ThreadPoolExecutor] = None
_executor_lock = threading.Lock()


def default_executor() -> ThreadPoolExecutor:
    """Shared executor for icon loads, created on first use."""
    global _executor
    with _executor_lock:
        if _executor is None:
            _executor = ThreadPoolExecutor(max_workers=2, thread_name_prefix='qr-icon')
        return _executor


class RasterHandle:
    """
    Result of a raster render.

    The surface already holds the module grid when the handle is returned.
    `ready` resolves (with the handle itself) once icon handling is over;
    without an icon it is resolved immediately.

    Usage:
        handle = render_raster(matrix, lay, config)
        handle.add_done_callback(lambda h: show(h.to_png()))
        if handle.warnings: ...
    """

    def __init__(self, image: Image.Image, layout: Layout, foreground: tuple):
        self._image = image
        self._lock = threading.Lock()
        self.layout = layout
        self.foreground = foreground
        self.ready: Future = Future()
        self.warnings: List[IconWarning] = []
        self.icon_applied = False
        self.stale = False

    @property
    def size(self) -> int:
        return self.layout.size_px

    @property
    def is_ready(self) -> bool:
        return self.ready.done()

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Block until icon handling is over; False on timeout."""
        try:
            self.ready.result(timeout=timeout)
        except FutureTimeoutError:
            return False
        return True

    def add_done_callback(self, fn: Callable[['RasterHandle'], None]) -> None:
        """Call fn(handle) when ready (immediately if it already is)."""
        self.ready.add_done_callback(lambda _future: fn(self))

    def image(self) -> Image.Image:
        """Copy of the current surface."""
        with self._lock:
            return self._image.copy()

    def pixels(self) -> np.ndarray:
        """Current surface as an (size, size, 4) uint8 array."""
        with self._lock:
            return np.array(self._image)

    def to_png(self) -> bytes:
        buf = BytesIO()
        with self._lock:
            self._image.save(buf, format='PNG')
        return buf.getvalue()

    def data_url(self) -> str:
        encoded = base64.b64encode(self.to_png()).decode('ascii')
        return f"data:image/png;base64,{encoded}"

    def _finish(self) -> None:
        if not self.ready.done():
            self.ready.set_result(self)


def _draw_grid(matrix: ModuleMatrix, layout: Layout, background: tuple, foreground: tuple) -> Image.Image:
    size = layout.size_px
    m = layout.module_px
    buf = np.empty((size, size, 4), dtype=np.uint8)
    buf[:, :] = background

    dark = np.array(matrix.rows, dtype=bool)
    for (r, c) in layout.excavated:
        dark[r, c] = False

    # One boolean per pixel of the grid area
    cells = np.repeat(np.repeat(dark, m, axis=0), m, axis=1)
    extent = matrix.side * m
    off = layout.offset
    region = buf[off:off + extent, off:off + extent]
    region[cells] = foreground
    return Image.fromarray(buf)


def _restore_excavated(handle: RasterHandle, matrix: ModuleMatrix) -> None:
    """Draw back the dark modules skipped for an icon that never arrived."""
    lay = handle.layout
    m = lay.module_px
    with handle._lock:
        draw = ImageDraw.Draw(handle._image)
        for (r, c) in sorted(lay.excavated):
            if not matrix.is_dark(r, c):
                continue
            x0, y0 = lay.module_origin(r, c)
            draw.rectangle([x0, y0, x0 + m - 1, y0 + m - 1], fill=handle.foreground)


def _composite_icon(handle: RasterHandle, icon_image: Image.Image) -> None:
    lay = handle.layout
    icon = lay.icon
    x0, y0, x1, y1 = lay.icon_rect
    x, y = icon_position(lay.size_px, icon)

    resized = icon_image.convert('RGBA').resize((icon.width, icon.height), Image.LANCZOS)
    if icon.opacity < 1.0:
        alpha = resized.getchannel('A').point(lambda v: int(round(v * icon.opacity)))
        resized.putalpha(alpha)

    # Keep only the part of the icon that lies on the canvas
    visible = resized.crop((x0 - x, y0 - y, x1 - x, y1 - y))
    with handle._lock:
        handle._image.alpha_composite(visible, dest=(x0, y0))


def _on_icon_loaded(handle: RasterHandle, matrix: ModuleMatrix, future: Future,
                    is_current: Optional[Callable[[], bool]]) -> None:
    src = handle.layout.icon.src
    try:
        if is_current is not None and not is_current():
            handle.stale = True
            logger.debug("Discarding icon load of a superseded QR render")
            # Drop the icon only; the symbol keeps its full grid
            if handle.layout.excavated:
                _restore_excavated(handle, matrix)
            return

        if future.cancelled():
            error: Optional[BaseException] = RuntimeError("icon load cancelled")
        else:
            error = future.exception()

        if error is None:
            try:
                _composite_icon(handle, future.result())
                handle.icon_applied = True
                return
            except (OSError, ValueError) as ex:
                error = ex

        logger.warning(f"QR icon could not be loaded, rendering without it: {error}")
        handle.warnings.append(IconWarning(src=_short_src(src), message=str(error)))
        if handle.layout.excavated:
            _restore_excavated(handle, matrix)
    finally:
        handle._finish()


def _short_src(src: IconSource) -> str:
    text = src if isinstance(src, str) else f"<{len(src)} bytes>"
    return text if len(text) <= 80 else text[:77] + '...'


def render_raster(
    matrix: ModuleMatrix,
    layout: Layout,
    config: RenderConfig,
    loader: Optional[IconLoader] = None,
    executor: Optional[Executor] = None,
    is_current: Optional[Callable[[], bool]] = None
) -> RasterHandle:
    """
    Render a QR matrix into an RGBA surface.

    Args:
        matrix (ModuleMatrix): Encoded symbol
        layout (Layout): Pixel geometry, including the icon placement
        config (RenderConfig): Colors (validated beforehand)
        loader (Optional[IconLoader]): Icon loader; PillowIconLoader by default
        executor (Optional[Executor]): Where the icon load runs; shared
            thread pool by default
        is_current (Optional[Callable[[], bool]]): Returns False once a newer
            render has started, so a late icon is not composited

    Returns:
        RasterHandle: Surface with the module grid; `ready` completes after
        the icon is handled

    Raises:
        RenderError: If the surface cannot be created
    """
    if layout.size_px <= 0:
        raise RenderError(f"Cannot create a {layout.size_px}x{layout.size_px} surface")
    if layout.module_px <= 0:
        raise RenderError(
            f"A {layout.size_px}px surface cannot hold a {layout.side}x{layout.side} module symbol"
        )

    background = parse_color(config.background_color)
    foreground = parse_color(config.foreground_color)
    try:
        image = _draw_grid(matrix, layout, background, foreground)
    except (ValueError, MemoryError) as ex:
        raise RenderError(f"Raster surface creation failed: {ex}") from ex

    handle = RasterHandle(image, layout, foreground)
    if layout.icon is None or layout.icon_rect is None:
        handle._finish()
        return handle

    loader = loader or PillowIconLoader()
    executor = executor or default_executor()
    future = executor.submit(loader.load, layout.icon.src)
    future.add_done_callback(lambda f: _on_icon_loaded(handle, matrix, f, is_current))
    return handle
