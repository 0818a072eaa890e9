"""
Persisted image representation.

This module contains the record exchanged with serialization collaborators:
- dimensions as int32
- element kind tag (ElementKind value, e.g. "float64")
- raw row-major element bytes in native byte order
"""

from pydantic import BaseModel, ConfigDict, Field

INT32_MIN = -(2**31)
INT32_MAX = 2**31 - 1


class ImageRecord(BaseModel):
    """Serializable snapshot of an image"""

    model_config = ConfigDict(frozen=True, ser_json_bytes="base64", val_json_bytes="base64")

    width: int = Field(..., ge=INT32_MIN, le=INT32_MAX, description="Number of columns")
    height: int = Field(..., ge=INT32_MIN, le=INT32_MAX, description="Number of rows")
    element_kind: str = Field(..., description="Element kind tag, e.g. 'float64'")
    raw_bytes: bytes = Field(..., description="Row-major element bytes, native byte order")
