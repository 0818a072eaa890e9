"""
Index helpers for bounds-checked element access.
"""

import operator
from typing import Any

from imagecore.exceptions import IndexOutOfRange


def normalize_index(index: Any, length: int, name: str = "Index") -> int:
    """
    Resolve a position against a sequence length.

    Negative positions count from the end, as with Python sequences.

    Args:
        index: Integral position in [-length, length)
        length: Number of addressable elements
        name: Label used in the error message

    Returns:
        Position in [0, length)

    Raises:
        IndexOutOfRange: If index lies outside [-length, length)
        TypeError: If index is not integral
    """
    index = operator.index(index)
    if not -length <= index < length:
        raise IndexOutOfRange(f"{name} {index} outside [-{length}, {length})")
    return index + length if index < 0 else index
