"""
Common schema models shared across the package.
"""

from typing import Any, Dict, Iterator, List, Optional, Tuple

from pydantic import BaseModel, Field


class Region(BaseModel):
    """
    Rectangular region of an image.

    x/width run along columns, y/height along rows. The region covers rows
    y..y2-1 and columns x..x2-1.
    """

    x: int = Field(..., ge=0, description="First column")
    y: int = Field(..., ge=0, description="First row")
    width: int = Field(..., gt=0, description="Number of columns")
    height: int = Field(..., gt=0, description="Number of rows")

    def to_dict(self) -> Dict[str, int]:
        """Convert to dictionary."""
        return {"x": self.x, "y": self.y, "width": self.width, "height": self.height}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Region":
        """Create Region from dictionary."""
        return cls(
            x=int(data.get("x", 0)),
            y=int(data.get("y", 0)),
            width=int(data.get("width", 0)),
            height=int(data.get("height", 0)),
        )

    @classmethod
    def full(cls, height: int, width: int) -> "Region":
        """Region covering a whole height x width image."""
        return cls(x=0, y=0, width=width, height=height)

    @property
    def x2(self) -> int:
        """Get right edge coordinate (exclusive)."""
        return self.x + self.width

    @property
    def y2(self) -> int:
        """Get bottom edge coordinate (exclusive)."""
        return self.y + self.height

    @property
    def area_pixels(self) -> int:
        """Get number of covered elements."""
        return self.width * self.height

    def contains_point(self, row: int, col: int) -> bool:
        """Check if coordinate is inside region."""
        return self.y <= row < self.y2 and self.x <= col < self.x2

    def is_valid(self, image_width: int, image_height: int) -> bool:
        """Check if region lies entirely within image bounds."""
        return self.x2 <= image_width and self.y2 <= image_height

    def clip(self, image_width: int, image_height: int) -> Optional["Region"]:
        """
        Clip region to image bounds.

        Returns:
            Clipped region, or None if nothing of it lies inside the image
        """
        x2 = min(self.x2, image_width)
        y2 = min(self.y2, image_height)
        if x2 <= self.x or y2 <= self.y:
            return None
        return Region(x=self.x, y=self.y, width=x2 - self.x, height=y2 - self.y)

    def iter_coordinates(self) -> Iterator[Tuple[int, int]]:
        """Yield (row, col) pairs in row-major order."""
        for row in range(self.y, self.y2):
            for col in range(self.x, self.x2):
                yield row, col

    def coordinates(self) -> List[Tuple[int, int]]:
        """Get all (row, col) pairs in row-major order."""
        return list(self.iter_coordinates())
