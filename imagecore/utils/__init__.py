"""
Utility modules for core functionality.

Modules:
- enum_converter: Enum parsing and conversion
- region_handler: Region validation and coordinate extraction
- index_utils: Bounds-checked position resolution
"""

from .enum_converter import coerce_enum, enum_to_string
from .index_utils import normalize_index
from .region_handler import RegionHandler

__all__ = [
    "coerce_enum",
    "enum_to_string",
    "RegionHandler",
    "normalize_index",
]
