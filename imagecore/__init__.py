"""
imagecore - typed dense numeric arrays with cached statistics
"""

from .enums import FlipDirection, RotationDegree, TransformKind
from .exceptions import (
    ImageError,
    IndexOutOfRange,
    InvalidRange,
    InvalidShape,
    OutOfRange,
    ShapeMismatch,
    SizeMismatch,
    TypeMismatch,
    TypeNotSupported,
    UnsupportedTransform,
)
from .image import Image, ImageStatistics, SubView
from .numerics import ElementKind, is_kind_allowed
from .schemas import ImageRecord, Region

__version__ = "1.0.0"

__all__ = [
    "Image",
    "SubView",
    "ImageStatistics",
    "ElementKind",
    "is_kind_allowed",
    "RotationDegree",
    "FlipDirection",
    "TransformKind",
    "ImageRecord",
    "Region",
    "ImageError",
    "TypeNotSupported",
    "InvalidShape",
    "SizeMismatch",
    "IndexOutOfRange",
    "OutOfRange",
    "ShapeMismatch",
    "TypeMismatch",
    "InvalidRange",
    "UnsupportedTransform",
]
