# -*- coding: utf-8 -*-
"""
QR Vector Renderer Module

Serializes a module matrix into SVG markup: a background rectangle, one
rectangle per dark module and, if configured, the icon as an <image> element
placed last so it paints above the modules.

Functions:
    render_vector: Build the SVG document for a matrix and layout
    insert_before_close: Insert markup right before the closing </svg>
    vector_data_url: Wrap SVG markup in a base64 data URL
"""

import base64
from typing import List
from xml.sax.saxutils import quoteattr

from .geometry import Layout
from .types import ModuleMatrix, RenderConfig

SVG_NS = "http://www.w3.org/2000/svg"
CLOSING_TAG = "</svg>"


def _format_opacity(opacity: float) -> str:
    # 1.0 -> "1", 0.5 -> "0.5"
    return f"{float(opacity):g}"


def icon_element(layout: Layout) -> str:
    """<image> element for the layout's icon, or '' when it is not visible."""
    if layout.icon is None or layout.icon_rect is None:
        return ""
    x0, y0, x1, y1 = layout.icon_rect
    return (
        f'<image href={quoteattr(layout.icon.src)} x="{x0}" y="{y0}" '
        f'width="{x1 - x0}" height="{y1 - y0}" '
        f'opacity="{_format_opacity(layout.icon.opacity)}"/>'
    )


def insert_before_close(markup: str, fragment: str) -> str:
    """
    Insert a fragment immediately before the last closing </svg> tag.

    If the tag is missing the fragment is appended.
    """
    pos = markup.rfind(CLOSING_TAG)
    if pos < 0:
        return markup + fragment
    return markup[:pos] + fragment + markup[pos:]


def render_vector(matrix: ModuleMatrix, layout: Layout, config: RenderConfig) -> str:
    """
    Render a QR matrix as SVG markup.

    Z-order is background, modules, icon. Excavated modules are skipped.
    Colors are written exactly as configured; validation happens before
    rendering.

    Args:
        matrix (ModuleMatrix): Encoded symbol
        layout (Layout): Pixel geometry from geometry.layout
        config (RenderConfig): Size and colors

    Returns:
        str: Complete SVG document

    Example:
        >>> svg = render_vector(matrix, layout(matrix, config), config)
        >>> svg.startswith('<svg')
        True
    """
    px = layout.size_px
    scale = layout.module_px
    fg = quoteattr(config.foreground_color)
    bg = quoteattr(config.background_color)

    out: List[str] = []
    out.append(f'<svg xmlns="{SVG_NS}" width="{px}" height="{px}" viewBox="0 0 {px} {px}">')
    out.append(f'<rect width="{px}" height="{px}" fill={bg}/>')

    for r in range(matrix.side):
        row = matrix.rows[r]
        for c in range(matrix.side):
            if not row[c] or layout.is_excavated(r, c):
                continue
            x, y = layout.module_origin(r, c)
            out.append(f'<rect x="{x}" y="{y}" width="{scale}" height="{scale}" fill={fg}/>')

    out.append(CLOSING_TAG)
    markup = "\n".join(out)

    icon = icon_element(layout)
    if icon:
        markup = insert_before_close(markup, icon + "\n")
    return markup


def vector_data_url(markup: str) -> str:
    """data:image/svg+xml;base64 URL for inline display."""
    encoded = base64.b64encode(markup.encode('utf-8')).decode('ascii')
    return f"data:image/svg+xml;base64,{encoded}"
