"""
Masked view over an image.

A SubView references its source image plus an ordered list of (row, col)
coordinates. It owns only the coordinate list; every value is read through
the source buffer.
"""

import logging
import operator
from typing import TYPE_CHECKING, Iterable, Iterator, Tuple

import numpy as np

from imagecore.exceptions import IndexOutOfRange, InvalidShape
from imagecore.image.statistics import ImageStatistics
from imagecore.numerics import ElementKind
from imagecore.utils import normalize_index

if TYPE_CHECKING:
    from imagecore.image.dense import Image

logger = logging.getLogger(__name__)


class SubView(ImageStatistics):
    """Read-only selection of image elements with cached statistics."""

    def __init__(self, source: "Image", indices: Iterable[Tuple[int, int]]):
        """
        Initialize SubView

        Args:
            source: Image the coordinates refer to
            indices: (row, col) pairs, non-empty and within source bounds

        Raises:
            InvalidShape: If no coordinate is given
            IndexOutOfRange: If a coordinate lies outside the source
            TypeError: If a coordinate is not integral
        """
        if source is None:
            raise InvalidShape("SubView requires a source image")

        coordinates = tuple(
            (operator.index(row), operator.index(col)) for row, col in indices
        )
        if not coordinates:
            logger.warning("Rejected empty selection")
            raise InvalidShape("A view must select at least one element")

        rows = np.fromiter((row for row, _ in coordinates), dtype=np.int64, count=len(coordinates))
        cols = np.fromiter((col for _, col in coordinates), dtype=np.int64, count=len(coordinates))

        outside = (rows < 0) | (rows >= source.height) | (cols < 0) | (cols >= source.width)
        if outside.any():
            bad = coordinates[int(np.flatnonzero(outside)[0])]
            logger.warning(f"Rejected coordinate {bad} for {source.height}x{source.width} image")
            raise IndexOutOfRange(
                f"Coordinate {bad} outside {source.height}x{source.width} image"
            )

        self._source = source
        self._indices = coordinates
        self._offsets = rows * source.width + cols
        self._init_statistics()

    @property
    def source(self) -> "Image":
        return self._source

    @property
    def indices(self) -> Tuple[Tuple[int, int], ...]:
        return self._indices

    @property
    def kind(self) -> ElementKind:
        return self._source.kind

    @property
    def size(self) -> int:
        return len(self._indices)

    def _selected_values(self) -> np.ndarray:
        return self._source.typed_view()[self._offsets]

    def get(self, index: int):
        """
        Value of the index-th selected coordinate.

        Negative indices count from the end of the selection.

        Raises:
            IndexOutOfRange: If index is outside [-size, size)
        """
        row, col = self._indices[normalize_index(index, self.size, "View index")]
        return self._source.get(row, col)

    def __getitem__(self, index: int):
        return self.get(index)

    def __len__(self) -> int:
        return self.size

    def __iter__(self) -> Iterator:
        return iter(self._selected_values())

    def __repr__(self) -> str:
        return (
            f"SubView(size={self.size}, kind={self.kind.value}, "
            f"source={self._source.height}x{self._source.width})"
        )
