"""
Statistics contract shared by dense images and masked views.

Every reduction is computed over the container's selected elements and
memoized per instance and per field. Each field has its own lock, taken
with double-checked locking:

    read without lock -> already computed? return it
    acquire the field lock -> still unset? compute and store -> release

so a statistic is computed at most once per instance and every caller
observes the same value.
"""

import functools
import logging
import math
import threading
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict

import numpy as np

from imagecore.config import get_settings
from imagecore.constants import ImageConstants
from imagecore.exceptions import OutOfRange
from imagecore.numerics import ElementKind, sub

logger = logging.getLogger(__name__)

_UNSET = object()


def memoized_statistic(field: str) -> Callable:
    """
    Memoize a zero-argument statistic under a per-field lock.

    Args:
        field: Cache slot name, one of ImageConstants.CACHED_STATISTICS
    """

    def decorator(method: Callable) -> Callable:
        @functools.wraps(method)
        def wrapper(self):
            value = self._statistics.get(field, _UNSET)
            if value is not _UNSET:
                return value

            with self._statistic_locks[field]:
                value = self._statistics.get(field, _UNSET)
                if value is _UNSET:
                    value = method(self)
                    self._statistics[field] = value
                    logger.debug(
                        f"Computed {field} over {self.size} {self.kind.value} elements"
                    )
            return value

        return wrapper

    return decorator


def running_sum(values: np.ndarray) -> float:
    """Left-to-right float64 accumulation of values."""
    return float(np.cumsum(values, dtype=np.float64)[-1])


def scan_extremum(values: np.ndarray, largest: bool) -> Any:
    """
    Result of a linear >= (or <=) scan seeded with the first element.

    NaNs after the first element never win a comparison, and among equal
    extremes the last one is kept.
    """
    first = values[0]
    if values.dtype.kind == "f":
        if np.isnan(first):
            return first
        target = np.nanmax(values) if largest else np.nanmin(values)
    else:
        target = values.max() if largest else values.min()

    return values[np.flatnonzero(values == target)[-1]]


class ImageStatistics(ABC):
    """
    Cached reductions over a set of elements of one kind.

    Subclasses provide the element kind, the number of selected elements and
    a flat array of the selected values, and call _init_statistics() from
    their constructor.
    """

    _statistics: Dict[str, Any]
    _statistic_locks: Dict[str, threading.RLock]

    def _init_statistics(self):
        self._statistics = {}
        self._statistic_locks = {
            name: threading.RLock() for name in ImageConstants.CACHED_STATISTICS
        }

    @property
    @abstractmethod
    def kind(self) -> ElementKind:
        """Element kind of the selected values."""

    @property
    @abstractmethod
    def size(self) -> int:
        """Number of selected elements."""

    @abstractmethod
    def _selected_values(self) -> np.ndarray:
        """Flat array of the selected values, in selection order."""

    @memoized_statistic("max")
    def max(self):
        """Largest element (cached)."""
        return scan_extremum(self._selected_values(), largest=True)

    @memoized_statistic("min")
    def min(self):
        """Smallest element (cached)."""
        return scan_extremum(self._selected_values(), largest=False)

    def percentile(self, level):
        """
        Nearest-rank percentile.

        The rank is ceil(level * count / 100), at least 1, and the result is
        the element at that 1-based rank of the ascending sort. No
        interpolation takes place.

        Args:
            level: Percentile level in [0, 100], converted to the element kind

        Returns:
            Selected element

        Raises:
            OutOfRange: If level lies outside [0, 100]
        """
        raw = float(level)
        if not ImageConstants.PERCENTILE_MIN <= raw <= ImageConstants.PERCENTILE_MAX:
            logger.warning(f"Rejected percentile level {level!r}")
            raise OutOfRange(f"Percentile level must lie in [0, 100], got {level!r}")

        kind = self.kind
        level = kind.cast(level)
        if level == kind.literal(ImageConstants.PERCENTILE_MIN):
            return self.min()
        if level == kind.literal(ImageConstants.PERCENTILE_MAX):
            return self.max()

        count = self.size
        rank = math.ceil(float(level) * count / 100.0)
        rank = min(max(rank, ImageConstants.MIN_RANK), count)

        ordered = np.sort(self._selected_values(), kind=get_settings().image.percentile_sort_kind)
        return ordered[rank - 1]

    @memoized_statistic("median")
    def median(self):
        """50th nearest-rank percentile (cached)."""
        return self.percentile(self.kind.literal(ImageConstants.MEDIAN_LEVEL))

    @memoized_statistic("average")
    def _average_raw(self) -> float:
        return running_sum(self._selected_values()) / self.size

    def average(self):
        """Arithmetic mean accumulated in float64, converted to the element kind."""
        return self.kind.cast(self._average_raw())

    @memoized_statistic("variance")
    def _variance_raw(self) -> float:
        count = self.size
        if count < ImageConstants.MIN_VARIANCE_SAMPLES:
            return 0.0

        values = self._selected_values()
        average = self._average_raw()
        if self.kind.is_unsigned:
            # element-kind subtraction would wrap below the average
            deviations = values.astype(np.float64) - average
        else:
            deviations = sub(values, self.kind.cast(average)).astype(np.float64)
        return running_sum(deviations * deviations) / (count - 1)

    def variance(self):
        """
        Sample variance sum((x - avg)^2) / (count - 1), converted to the element kind.

        Deviations are taken in the element kind against the average converted
        to that kind, then squared and summed in float64. Unsigned kinds use
        the float64 average directly.
        """
        return self.kind.cast(self._variance_raw())

    def describe(self) -> Dict[str, Any]:
        """Get all statistics in one dictionary"""
        return {
            "kind": self.kind.value,
            "size": self.size,
            "min": self.min(),
            "max": self.max(),
            "median": self.median(),
            "average": self.average(),
            "variance": self.variance(),
        }
