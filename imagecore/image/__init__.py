"""
Image engine - modular architecture.

This package provides the numeric image containers:
- dense: Image, the immutable dense container
- subview: SubView, masked views over an Image
- statistics: cached reductions shared by both containers
- transforms: index selectors and the shared scatter copy
- hashing: CRC-32 content hashing
"""

from imagecore.image.dense import Image
from imagecore.image.statistics import ImageStatistics
from imagecore.image.subview import SubView

__all__ = ["Image", "ImageStatistics", "SubView"]
