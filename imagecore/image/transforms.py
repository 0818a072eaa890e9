"""
Index transform engine.

Geometric transforms are expressed as selectors mapping a source coordinate
(row, col) of a height x width buffer to a destination linear offset. One
shared scatter copies every element to its destination:

    target[selector(i, j, height, width)] = source[i * width + j]

Selectors operate on whole index grids, so the copy is a single vectorized
assignment.
"""

import logging
from typing import Callable, Dict, Tuple, Union

import numpy as np

from imagecore.enums import FlipDirection, RotationDegree, TransformKind
from imagecore.exceptions import InvalidShape, UnsupportedTransform
from imagecore.utils.enum_converter import coerce_enum

logger = logging.getLogger(__name__)

Selector = Callable[[np.ndarray, np.ndarray, int, int], np.ndarray]


def identity_selector(i, j, height, width):
    return i * width + j


def transpose_selector(i, j, height, width):
    return j * height + i


def rotate_90_selector(i, j, height, width):
    return (width - 1 - j) * height + i


def rotate_180_selector(i, j, height, width):
    return width * height - 1 - (i * width + j)


def rotate_270_selector(i, j, height, width):
    return j * height + (height - i - 1)


def flip_horizontal_selector(i, j, height, width):
    return i * width + (width - 1 - j)


def flip_vertical_selector(i, j, height, width):
    return (height - 1 - i) * width + j


SELECTORS: Dict[TransformKind, Selector] = {
    TransformKind.IDENTITY: identity_selector,
    TransformKind.TRANSPOSE: transpose_selector,
    TransformKind.ROTATE_90: rotate_90_selector,
    TransformKind.ROTATE_180: rotate_180_selector,
    TransformKind.ROTATE_270: rotate_270_selector,
    TransformKind.FLIP_HORIZONTAL: flip_horizontal_selector,
    TransformKind.FLIP_VERTICAL: flip_vertical_selector,
}

_ROTATIONS = {
    RotationDegree.ZERO: TransformKind.IDENTITY,
    RotationDegree.ROTATE_90: TransformKind.ROTATE_90,
    RotationDegree.ROTATE_180: TransformKind.ROTATE_180,
    RotationDegree.ROTATE_270: TransformKind.ROTATE_270,
}

_FLIPS = {
    FlipDirection.HORIZONTAL: TransformKind.FLIP_HORIZONTAL,
    FlipDirection.VERTICAL: TransformKind.FLIP_VERTICAL,
}

# Selectors producing a width x height result
_SWAPPING = frozenset(
    {TransformKind.TRANSPOSE, TransformKind.ROTATE_90, TransformKind.ROTATE_270}
)


def get_selector(kind: Union[TransformKind, str]) -> Selector:
    """Get the selector function for a transform kind."""
    kind = coerce_enum(kind, TransformKind, UnsupportedTransform, normalize=True)
    return SELECTORS[kind]


def rotation_kind(degree: Union[RotationDegree, int, str]) -> TransformKind:
    """
    Map a rotation degree to its transform kind.

    Raises:
        UnsupportedTransform: If degree is not one of 0, 90, 180, 270
    """
    if isinstance(degree, str) and degree.strip().lstrip("-").isdigit():
        degree = int(degree)
    return _ROTATIONS[coerce_enum(degree, RotationDegree, UnsupportedTransform)]


def flip_kind(direction: Union[FlipDirection, str]) -> TransformKind:
    """
    Map a flip direction to its transform kind.

    Raises:
        UnsupportedTransform: If direction is neither horizontal nor vertical
    """
    return _FLIPS[coerce_enum(direction, FlipDirection, UnsupportedTransform, normalize=True)]


def output_shape(height: int, width: int, kind: Union[TransformKind, str]) -> Tuple[int, int]:
    """
    Shape of the buffer a transform produces.

    Returns:
        Tuple of (height, width) after the transform
    """
    kind = coerce_enum(kind, TransformKind, UnsupportedTransform, normalize=True)
    if kind in _SWAPPING:
        return width, height
    return height, width


def transform(
    source: np.ndarray,
    target: np.ndarray,
    height: int,
    width: int,
    selector: Union[Selector, TransformKind, str],
) -> None:
    """
    Scatter a row-major source buffer into target through an index selector.

    Args:
        source: Flat read-only source buffer (row-major, height x width)
        target: Flat writable destination buffer
        height: Source height
        width: Source width
        selector: Selector function or transform kind

    Raises:
        InvalidShape: If a shape precondition fails; nothing is written
    """
    if not callable(selector):
        selector = get_selector(selector)

    if height < 0 or width < 0:
        logger.warning(f"Rejected transform shape {height}x{width}")
        raise InvalidShape(f"Negative transform shape: {height}x{width}")
    if len(target) < len(source):
        raise InvalidShape(f"Target holds {len(target)} elements, source {len(source)}")
    if len(target) < height * width:
        raise InvalidShape(f"Target holds {len(target)} elements, shape needs {height * width}")
    if len(source) < height * width:
        raise InvalidShape(f"Source holds {len(source)} elements, shape needs {height * width}")

    if height == 0 or width == 0:
        return

    rows, cols = np.indices((height, width), dtype=np.int64)
    offsets = selector(rows, cols, height, width)
    target[offsets.ravel()] = source[: height * width]
