# -*- coding: utf-8 -*-
"""
QR Code Functional Areas Module

Identifies the function patterns of a QR symbol according to ISO/IEC 18004:
finder patterns, separators, timing patterns, alignment patterns, format
information and version information. An icon that hides these modules makes
the symbol unreadable regardless of the error correction level, so the
geometry layer uses these masks to judge icon coverage.

Functions:
    compute_alignment_centers: Alignment pattern center coordinates
    build_function_mask: Masks of function and separator modules
    count_data_modules: Number of modules available for data and ECC
"""

from typing import List, Tuple


def compute_alignment_centers(version: int) -> List[int]:
    """
    Calculate the center coordinates of alignment patterns for a QR version.

    Alignment patterns are 5x5 modules used to correct perspective distortion.
    Version 1 has none. Centers are spaced by an even step counted back from
    the last position; version 32 uses the irregular step 26.

    Args:
        version (int): QR code version (1-40)

    Returns:
        List[int]: Center coordinates, used for both rows and columns

    Example:
        >>> compute_alignment_centers(7)
        [6, 22, 38]
        >>> compute_alignment_centers(32)
        [6, 34, 60, 86, 112, 138]
    """
    if version == 1:
        return []

    size = 17 + version * 4
    num = version // 7 + 2
    if version == 32:
        step = 26
    else:
        step = (version * 4 + num * 2 + 1) // (num * 2 - 2) * 2

    centers = [6]
    pos = size - 7
    while len(centers) < num:
        centers.insert(1, pos)
        pos -= step
    return centers


def build_function_mask(size: int, version: int) -> Tuple[List[List[bool]], List[List[bool]]]:
    """
    Build masks identifying function modules and finder separators.

    Args:
        size (int): QR code size in modules (21 for v1, 25 for v2, etc.)
        version (int): QR code version (1-40)

    Returns:
        Tuple[List[List[bool]], List[List[bool]]]: (func_mask, sep_mask)
            - func_mask[r][c] = True if module (r,c) belongs to a function pattern
            - sep_mask[r][c] = True if module (r,c) is a finder separator
    """
    func_mask = [[False] * size for _ in range(size)]
    sep_mask = [[False] * size for _ in range(size)]

    def mark(r: int, c: int) -> None:
        if 0 <= r < size and 0 <= c < size:
            func_mask[r][c] = True

    # Finder patterns (7x7) with their 1-module separators
    for (r0, c0) in [(0, 0), (0, size - 7), (size - 7, 0)]:
        for r in range(r0 - 1, r0 + 8):
            for c in range(c0 - 1, c0 + 8):
                if not (0 <= r < size and 0 <= c < size):
                    continue
                if r0 <= r < r0 + 7 and c0 <= c < c0 + 7:
                    func_mask[r][c] = True
                else:
                    sep_mask[r][c] = True

    # Timing patterns
    for i in range(size):
        mark(6, i)
        mark(i, 6)

    # Alignment patterns, except where they would collide with a finder
    centers = compute_alignment_centers(version)
    last = len(centers) - 1
    for i, cy in enumerate(centers):
        for j, cx in enumerate(centers):
            if (i, j) in ((0, 0), (0, last), (last, 0)):
                continue
            for r in range(cy - 2, cy + 3):
                for c in range(cx - 2, cx + 3):
                    mark(r, c)

    # Format information, both copies, plus the dark module
    for i in range(9):
        mark(8, i)
        mark(i, 8)
    for i in range(8):
        mark(8, size - 1 - i)
        mark(size - 1 - i, 8)

    # Version information (v7+), two 6x3 blocks
    if version >= 7:
        for r in range(6):
            for c in range(size - 11, size - 8):
                mark(r, c)
                mark(c, r)

    return func_mask, sep_mask


def count_data_modules(size: int, version: int) -> int:
    """Modules left for data and error correction codewords."""
    func_mask, sep_mask = build_function_mask(size, version)
    return sum(
        1
        for r in range(size)
        for c in range(size)
        if not func_mask[r][c] and not sep_mask[r][c]
    )
