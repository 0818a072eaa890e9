"""
Exception taxonomy for the imagecore engine.

Every error is a local, synchronous validation failure. Each class also
derives from the closest built-in exception so generic callers can catch
ValueError/IndexError/TypeError without importing this module.
"""


class ImageError(Exception):
    """Base class for all imagecore errors"""


class TypeNotSupported(ImageError, TypeError):
    """Element kind is outside the closed set of numeric kinds"""


class InvalidShape(ImageError, ValueError):
    """Non-positive width/height, empty selection or transform precondition violated"""


class SizeMismatch(ImageError, ValueError):
    """Supplied data is shorter than the shape requires"""


class IndexOutOfRange(ImageError, IndexError):
    """Element or coordinate access outside the container bounds"""


class OutOfRange(ImageError, ValueError):
    """Percentile level outside [0, 100]"""


class ShapeMismatch(ImageError, ValueError):
    """Binary operation between differently shaped containers"""


class TypeMismatch(ImageError, TypeError):
    """Element kind differs from the one requested"""


class InvalidRange(ImageError, ValueError):
    """Lower bound greater than upper bound"""


class UnsupportedTransform(ImageError, ValueError):
    """Rotation degree or flip direction outside the supported set"""
