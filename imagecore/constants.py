"""
Constants for the imagecore engine.
Centralizes the numeric literals used by statistics, hashing and persistence.
"""


# Image Constants
class ImageConstants:
    """Constants related to image shape and statistics."""

    # Shape limits
    MIN_DIMENSION = 1
    MAX_DIMENSION = 2**31 - 1  # persisted as int32

    # Percentile levels
    PERCENTILE_MIN = 0
    PERCENTILE_MAX = 100
    MEDIAN_LEVEL = 50
    MIN_RANK = 1

    # Scale fill divisor for constant images
    MIDPOINT_DIVISOR = 2

    # Largest intermediate product integer scaling keeps in int64
    INT64_MAX = 2**63 - 1

    # Variance needs at least two samples
    MIN_VARIANCE_SAMPLES = 2

    # Names of the memoized statistics, one lock per entry
    CACHED_STATISTICS = ("max", "min", "median", "average", "variance")


# Hash Constants
class HashConstants:
    """Constants for the content hasher."""

    # Combination
    MULTIPLIER = 31
    UINT32_MASK = 0xFFFFFFFF
