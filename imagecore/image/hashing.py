"""
Content hashing for images.

The digest is CRC-32 (reflected polynomial 0x04C11DB7, initial value
0xFFFFFFFF, final complement) over the raw element bytes, which is the
checksum zlib computes. It is combined with the element kind and the image
dimensions using 32-bit wraparound arithmetic. Not for cryptographic use.
"""

import zlib
from typing import Union

import numpy as np

from imagecore.constants import HashConstants
from imagecore.numerics import ElementKind


def crc32(data: Union[bytes, bytearray, memoryview, np.ndarray]) -> int:
    """
    CRC-32 of a byte buffer.

    Args:
        data: Bytes-like object or contiguous numpy array

    Returns:
        Unsigned 32-bit checksum
    """
    if isinstance(data, np.ndarray):
        data = np.ascontiguousarray(data).view(np.uint8)
    return zlib.crc32(data) & HashConstants.UINT32_MASK


def buffer_hash(data: np.ndarray, kind: ElementKind) -> int:
    """Hash of an element buffer: crc32 * 31 + kind id (mod 2**32)."""
    checksum = crc32(data)
    return (checksum * HashConstants.MULTIPLIER + kind.kind_id) & HashConstants.UINT32_MASK


def content_hash(data: np.ndarray, kind: ElementKind, height: int, width: int) -> int:
    """
    Hash of an image from its buffer and dimensions.

    Two images with equal dimensions and identical element bytes hash
    identically regardless of how they were constructed.
    """
    value = buffer_hash(data, kind)
    value = (value * HashConstants.MULTIPLIER + width) & HashConstants.UINT32_MASK
    value = (value * HashConstants.MULTIPLIER + height) & HashConstants.UINT32_MASK
    return value
