# -*- coding: utf-8 -*-
"""
QR Geometry Module

Maps a module matrix onto a square pixel canvas: module size, grid offset,
icon placement and clamping, and the set of modules hidden by the icon.
Everything here is pure and never raises; odd inputs such as an icon larger
than the canvas are clamped.

Functions:
    layout: Compute the Layout of a matrix for a config and optional icon
    coverage: Measure how much of the symbol the icon hides
"""

from dataclasses import dataclass, field
from typing import FrozenSet, Optional, Tuple

from .functional_areas import build_function_mask, count_data_modules
from .types import IconSpec, ModuleMatrix, RenderConfig

Rect = Tuple[int, int, int, int]


@dataclass(frozen=True)
class Layout:
    """
    Pixel geometry of one render.

    Attributes:
        size_px: Canvas edge length
        side: Matrix edge length in modules
        module_px: Edge length of one module, floor(size_px / side)
        offset: Margin that centers the grid on the canvas
        icon: Icon settings, if any
        icon_rect: Clamped icon rectangle (x0, y0, x1, y1), None if not visible
        icon_cells: Modules whose cell intersects the icon rectangle
        excavated: Modules renderers must skip (icon_cells when excavating)
    """
    size_px: int
    side: int
    module_px: int
    offset: int = 0
    icon: Optional[IconSpec] = None
    icon_rect: Optional[Rect] = None
    icon_cells: FrozenSet[Tuple[int, int]] = field(default_factory=frozenset)
    excavated: FrozenSet[Tuple[int, int]] = field(default_factory=frozenset)

    def module_origin(self, row: int, col: int) -> Tuple[int, int]:
        """Top-left pixel (x, y) of module (row, col)."""
        return (self.offset + col * self.module_px, self.offset + row * self.module_px)

    def is_excavated(self, row: int, col: int) -> bool:
        return (row, col) in self.excavated


def _clamp(value: int, low: int, high: int) -> int:
    return max(low, min(high, value))


def icon_position(size_px: int, icon: IconSpec) -> Tuple[int, int]:
    """Icon top-left corner; centered (floor) when x/y are unset."""
    x = icon.x if icon.x is not None else (size_px - icon.width) // 2
    y = icon.y if icon.y is not None else (size_px - icon.height) // 2
    return x, y


def clamp_icon_rect(size_px: int, icon: IconSpec) -> Optional[Rect]:
    """
    Icon rectangle clipped to the canvas.

    Returns:
        Optional[Rect]: (x0, y0, x1, y1) inside [0, size_px], or None when
        nothing of the icon lies on the canvas
    """
    x, y = icon_position(size_px, icon)
    x0 = _clamp(x, 0, size_px)
    y0 = _clamp(y, 0, size_px)
    x1 = _clamp(x + icon.width, 0, size_px)
    y1 = _clamp(y + icon.height, 0, size_px)
    if x1 <= x0 or y1 <= y0:
        return None
    return (x0, y0, x1, y1)


def _cells_under(rect: Rect, side: int, module_px: int, offset: int) -> FrozenSet[Tuple[int, int]]:
    if module_px <= 0:
        return frozenset()
    x0, y0, x1, y1 = rect

    def span(lo: int, hi: int) -> range:
        # Cells [offset + i*m, offset + (i+1)*m) overlapping [lo, hi)
        first = max(0, (lo - offset) // module_px)
        last = min(side - 1, (hi - 1 - offset) // module_px)
        return range(first, last + 1)

    return frozenset((r, c) for r in span(y0, y1) for c in span(x0, x1))


def layout(matrix: ModuleMatrix, config: RenderConfig, icon: Optional[IconSpec] = None) -> Layout:
    """
    Compute the pixel layout of a matrix.

    Args:
        matrix (ModuleMatrix): Encoded symbol
        config (RenderConfig): Canvas size and colors
        icon (Optional[IconSpec]): Icon to place over the symbol

    Returns:
        Layout: Module size, grid offset, icon rectangle and excavated modules

    Example:
        >>> lay = layout(matrix_25, RenderConfig(size_px=160))
        >>> lay.module_px, lay.offset
        (6, 5)
    """
    size_px = config.size_px
    side = matrix.side
    module_px = size_px // side if side else 0
    offset = max(0, (size_px - module_px * side) // 2)

    if icon is None:
        return Layout(size_px=size_px, side=side, module_px=module_px, offset=offset)

    rect = clamp_icon_rect(size_px, icon)
    cells = _cells_under(rect, side, module_px, offset) if rect else frozenset()
    return Layout(
        size_px=size_px,
        side=side,
        module_px=module_px,
        offset=offset,
        icon=icon,
        icon_rect=rect,
        icon_cells=cells,
        excavated=cells if icon.excavate else frozenset(),
    )


@dataclass(frozen=True)
class IconCoverage:
    """How much of the symbol lies under the icon."""
    covered_modules: int
    covered_functional: int
    covered_data: int
    data_modules: int

    @property
    def ratio(self) -> float:
        """Share of data/ECC modules hidden by the icon."""
        if not self.data_modules:
            return 0.0
        return self.covered_data / self.data_modules


def coverage(matrix: ModuleMatrix, lay: Layout) -> IconCoverage:
    """
    Count the modules hidden by the icon, split into function-pattern modules
    (finders, separators, timing, alignment, format and version info) and
    data/ECC modules.
    """
    func_mask, sep_mask = build_function_mask(matrix.side, matrix.version)
    functional = 0
    for (r, c) in lay.icon_cells:
        if func_mask[r][c] or sep_mask[r][c]:
            functional += 1
    data_modules = count_data_modules(matrix.side, matrix.version)
    return IconCoverage(
        covered_modules=len(lay.icon_cells),
        covered_functional=functional,
        covered_data=len(lay.icon_cells) - functional,
        data_modules=data_modules,
    )
