# -*- coding: utf-8 -*-
"""
QR Encoder Module

Turns a payload into a QR module matrix. Reed-Solomon coding, version
selection and mask choice are delegated to segno, a conformant ISO/IEC 18004
implementation; this module fixes the parameters so the result is
deterministic and maps segno's failures onto the package error taxonomy.

Functions:
    encode: Encode content at an error correction level
    make_qr: Thin segno wrapper with the fixed parameters
    describe: Summary metrics of an encoded matrix
"""

import logging
from typing import Any, Dict, Union

import segno

from .errors import ContentTooLargeError, EmptyContentError, InternalEncodeError
from .types import ErrorCorrectionLevel, ModuleMatrix

logger = logging.getLogger(__name__)

Content = Union[str, bytes]


def _to_bytes(content: Content) -> bytes:
    if isinstance(content, bytes):
        return content
    if isinstance(content, str):
        return content.encode('utf-8')
    raise InternalEncodeError(f"Unsupported content type: {type(content).__name__}")


def make_qr(data: bytes, level: ErrorCorrectionLevel) -> segno.QRCode:
    """
    Generate a standard (non-micro) QR symbol in byte mode.

    The minimal version is selected automatically. The error level is kept as
    requested (boost_error=False) and no ECI header is written, so capacities
    match the standard byte-mode table.

    Args:
        data (bytes): Payload
        level (ErrorCorrectionLevel): Requested error correction level

    Returns:
        segno.QRCode: Generated QR code object

    Raises:
        segno.DataOverflowError: If data doesn't fit version 40
    """
    return segno.make(
        data,
        error=level.value,
        version=None,
        mode='byte',
        eci=False,
        mask=None,
        boost_error=False,
        micro=False
    )


def encode(content: Content, level: ErrorCorrectionLevel = ErrorCorrectionLevel.M) -> ModuleMatrix:
    """
    Encode content into a QR module matrix.

    Args:
        content (Union[str, bytes]): Payload; str is encoded as UTF-8
        level (ErrorCorrectionLevel): Error correction level

    Returns:
        ModuleMatrix: Square module grid plus the chosen version and mask

    Raises:
        EmptyContentError: If content is empty
        ContentTooLargeError: If no version holds the content at this level
        InternalEncodeError: For any other encoding failure

    Example:
        >>> matrix = encode("https://example.org", ErrorCorrectionLevel.M)
        >>> matrix.side, matrix.version
        (25, 2)
    """
    data = _to_bytes(content)
    if not data:
        raise EmptyContentError()

    try:
        symbol = make_qr(data, level)
    except segno.DataOverflowError as ex:
        raise ContentTooLargeError(len(data), level.value, str(ex)) from ex
    except (ValueError, TypeError) as ex:
        raise InternalEncodeError(f"QR encoding failed: {ex}") from ex

    matrix = ModuleMatrix.from_rows(
        symbol.matrix,
        version=int(symbol.version),
        level=level,
        mask=int(symbol.mask),
    )
    logger.debug(f"Encoded {len(data)} bytes as version {matrix.version}-{level.value} "
                 f"({matrix.side}x{matrix.side}, mask {matrix.mask})")
    return matrix


def describe(matrix: ModuleMatrix) -> Dict[str, Any]:
    """Size, version and module counts of an encoded matrix."""
    return {
        'version': matrix.version,
        'side': matrix.side,
        'level': matrix.level.value,
        'level_bits': matrix.level.numeric_value,
        'mask': matrix.mask,
        'modules': matrix.side * matrix.side,
        'dark_modules': matrix.dark_count,
    }
