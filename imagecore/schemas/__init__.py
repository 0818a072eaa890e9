"""
Schemas Package

Pydantic models for validation and serialization:
- common: Region (rectangular selections)
- image: ImageRecord (persisted image representation)
"""

from .common import Region
from .image import ImageRecord

__all__ = [
    "Region",
    "ImageRecord",
]
