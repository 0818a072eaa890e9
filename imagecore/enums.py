"""
Enumerations shared by the transform engine and the containers.
"""

from enum import Enum, IntEnum


class RotationDegree(IntEnum):
    """Counter-clockwise rotation in degrees"""

    ZERO = 0
    ROTATE_90 = 90
    ROTATE_180 = 180
    ROTATE_270 = 270


class FlipDirection(str, Enum):
    """Mirror axis for flips"""

    HORIZONTAL = "horizontal"
    VERTICAL = "vertical"


class TransformKind(str, Enum):
    """Index selectors understood by the transform engine"""

    IDENTITY = "identity"
    TRANSPOSE = "transpose"
    ROTATE_90 = "rotate_90"
    ROTATE_180 = "rotate_180"
    ROTATE_270 = "rotate_270"
    FLIP_HORIZONTAL = "flip_horizontal"
    FLIP_VERTICAL = "flip_vertical"
