"""
Region handler for rectangular selections.

Provides validation of Region models against image bounds and conversion of
regions into coordinate lists for masked views.
"""

import logging
from typing import Dict, List, Optional, Tuple, Union

from pydantic import ValidationError

from imagecore.exceptions import IndexOutOfRange, InvalidShape
from imagecore.schemas import Region

logger = logging.getLogger(__name__)


class RegionHandler:
    """
    Handler for region validation and coordinate extraction.

    - validate_region: Validate region against image bounds
    - region_coordinates: Coordinates covered by a region, optionally clipped
    """

    @staticmethod
    def to_region(region: Union[Region, Dict]) -> Region:
        """
        Convert to Region if needed.

        Raises:
            InvalidShape: If the dictionary does not describe a valid region
        """
        if isinstance(region, Region):
            return region
        try:
            return Region.from_dict(region)
        except (AttributeError, KeyError, ValueError, TypeError, ValidationError) as e:
            raise InvalidShape(f"Invalid region format: {e}") from e

    @staticmethod
    def validate_region(
        region: Union[Region, Dict], image_shape: Optional[Tuple[int, int]] = None
    ) -> Tuple[bool, Optional[str]]:
        """
        Validate region parameters.

        Args:
            region: Region object or dictionary
            image_shape: Optional image shape (height, width)

        Returns:
            Tuple of (is_valid, error_message)
        """
        try:
            region = RegionHandler.to_region(region)
        except InvalidShape as e:
            return False, str(e)

        if image_shape:
            img_height, img_width = image_shape
            if not region.is_valid(img_width, img_height):
                return False, f"Region {region.to_dict()} exceeds image bounds {img_width}x{img_height}"

        return True, None

    @staticmethod
    def region_coordinates(
        region: Union[Region, Dict], image_shape: Tuple[int, int], safe_mode: bool = False
    ) -> List[Tuple[int, int]]:
        """
        Coordinates covered by a region.

        Args:
            region: Region object or dictionary
            image_shape: Image shape (height, width)
            safe_mode: If True, clip region to image bounds instead of failing

        Returns:
            (row, col) pairs in row-major order

        Raises:
            IndexOutOfRange: If the region exceeds the image (strict mode) or
                lies completely outside it (safe mode)
        """
        region = RegionHandler.to_region(region)
        img_height, img_width = image_shape

        if safe_mode:
            clipped = region.clip(img_width, img_height)
            if clipped is None:
                logger.warning(f"Region becomes empty after clipping: {region.to_dict()}")
                raise IndexOutOfRange(f"Region {region.to_dict()} lies outside the image")
            return clipped.coordinates()

        is_valid, error_msg = RegionHandler.validate_region(region, image_shape)
        if not is_valid:
            logger.warning(f"Invalid region: {error_msg}")
            raise IndexOutOfRange(error_msg)

        return region.coordinates()
