"""
Dense image container.

An Image owns a flat, row-major numpy buffer of height * width elements of a
single ElementKind. The buffer is made read-only once construction finishes,
so an Image is an immutable value: every transform, cast and arithmetic
operation returns a new Image, and cached statistics never go stale.
"""

import logging
import operator
from typing import Any, Callable, Dict, Iterable, Iterator, Optional, Sequence, Tuple, Union

import numpy as np

from imagecore.config import get_settings
from imagecore.constants import ImageConstants
from imagecore.enums import FlipDirection, RotationDegree, TransformKind
from imagecore.exceptions import (
    InvalidRange,
    InvalidShape,
    ShapeMismatch,
    SizeMismatch,
    TypeMismatch,
)
from imagecore.image.hashing import content_hash
from imagecore.image.statistics import ImageStatistics
from imagecore.image.subview import SubView
from imagecore.image.transforms import (
    flip_kind,
    get_selector,
    output_shape,
    rotation_kind,
    transform,
)
from imagecore.numerics import ElementKind, add, div, mul, sub
from imagecore.schemas import ImageRecord, Region
from imagecore.utils import RegionHandler, enum_to_string, normalize_index

logger = logging.getLogger(__name__)

Initializer = Callable[[np.ndarray], Any]


def _validate_shape(height: Any, width: Any) -> Tuple[int, int]:
    try:
        height = operator.index(height)
        width = operator.index(width)
    except TypeError as e:
        raise InvalidShape(f"Shape must be integral, got {height!r}x{width!r}") from e

    for name, value in (("height", height), ("width", width)):
        if not ImageConstants.MIN_DIMENSION <= value <= ImageConstants.MAX_DIMENSION:
            logger.warning(f"Rejected {name} {value}")
            raise InvalidShape(f"{name} must lie in [1, {ImageConstants.MAX_DIMENSION}], got {value}")

    return height, width


class Image(ImageStatistics):
    """
    Immutable 2D array of numeric elements.

    Build instances through the factory class methods (from_array,
    from_bytes, create, create_raw, from_2d, zero, from_record).
    """

    def __init__(
        self,
        height: int,
        width: int,
        kind: Any,
        buffer: Optional[np.ndarray] = None,
        *,
        copy: bool = True,
    ):
        """
        Initialize Image

        Args:
            height: Number of rows (>= 1)
            width: Number of columns (>= 1)
            kind: Element kind (ElementKind, dtype or name)
            buffer: Flat buffer of height * width elements of kind. A zeroed
                buffer is allocated when omitted.
            copy: Take a private copy of buffer. Only pass False for a freshly
                allocated array no other code holds a reference to.

        Raises:
            TypeNotSupported: If kind is not an allowed element kind
            InvalidShape: If height or width is not positive
            SizeMismatch: If buffer does not hold height * width elements
        """
        kind = ElementKind.resolve(kind)
        height, width = _validate_shape(height, width)

        if buffer is None:
            buffer = np.zeros(height * width, dtype=kind.dtype)
        else:
            if copy:
                buffer = np.array(np.ravel(buffer), dtype=kind.dtype)
            else:
                buffer = np.ascontiguousarray(buffer, dtype=kind.dtype).reshape(-1)
            if buffer.size != height * width:
                raise SizeMismatch(
                    f"Buffer holds {buffer.size} elements, {height}x{width} needs {height * width}"
                )

        buffer.flags.writeable = False

        self._height = height
        self._width = width
        self._kind = kind
        self._data = buffer
        self._hash: Optional[int] = None
        self._init_statistics()

        logger.debug(f"Created {height}x{width} {kind.value} image")

    # Construction

    @classmethod
    def from_array(
        cls, data: Union[np.ndarray, Sequence], height: int, width: int, kind: Any = None
    ) -> "Image":
        """
        Create image by copying elements.

        Args:
            data: Array or sequence of at least height * width elements,
                read in row-major order; extra elements are ignored
            height: Number of rows
            width: Number of columns
            kind: Element kind (defaults to the dtype of data); values of a
                different dtype are converted with native cast semantics

        Returns:
            New Image

        Raises:
            TypeNotSupported: If the kind is not allowed
            InvalidShape: If height or width is not positive
            SizeMismatch: If data holds fewer than height * width elements
        """
        array = np.asarray(data)
        kind = ElementKind.resolve(array.dtype if kind is None else kind)
        height, width = _validate_shape(height, width)

        flat = array.reshape(-1)
        required = height * width
        if flat.size < required:
            logger.warning(f"Rejected {flat.size} elements for {height}x{width} image")
            raise SizeMismatch(f"Got {flat.size} elements, {height}x{width} needs {required}")

        return cls(height, width, kind, kind.cast_array(flat[:required]), copy=False)

    @classmethod
    def from_bytes(
        cls, data: Union[bytes, bytearray, memoryview, np.ndarray], height: int, width: int, kind: Any
    ) -> "Image":
        """
        Create image by reinterpreting raw bytes as elements of kind.

        Args:
            data: Bytes-like object holding at least height * width * itemsize
                bytes in native byte order
            height: Number of rows
            width: Number of columns
            kind: Element kind

        Returns:
            New Image

        Raises:
            TypeNotSupported: If the kind is not allowed
            InvalidShape: If height or width is not positive
            SizeMismatch: If fewer bytes than required are supplied
        """
        kind = ElementKind.resolve(kind)
        height, width = _validate_shape(height, width)

        raw = np.frombuffer(data, dtype=np.uint8)
        required = height * width * kind.itemsize
        if raw.size < required:
            logger.warning(f"Rejected {raw.size} bytes for {height}x{width} {kind.value} image")
            raise SizeMismatch(f"Got {raw.size} bytes, {height}x{width} {kind.value} needs {required}")

        buffer = np.empty(height * width, dtype=kind.dtype)
        buffer.view(np.uint8)[:] = raw[:required]
        return cls(height, width, kind, buffer, copy=False)

    @classmethod
    def create(cls, initializer: Initializer, height: int, width: int, kind: Any) -> "Image":
        """
        Create image from an initializer callback.

        Args:
            initializer: Called exactly once with a zeroed, writable flat
                buffer of height * width elements to fill in place
                (the image keeps its own copy once the call returns)
            height: Number of rows
            width: Number of columns
            kind: Element kind

        Returns:
            New Image
        """
        if not callable(initializer):
            raise TypeError("initializer must be callable")

        kind = ElementKind.resolve(kind)
        height, width = _validate_shape(height, width)

        buffer = np.zeros(height * width, dtype=kind.dtype)
        initializer(buffer)
        return cls(height, width, kind, buffer)

    @classmethod
    def create_raw(cls, initializer: Initializer, height: int, width: int, kind: Any) -> "Image":
        """
        Create image from an initializer writing raw bytes.

        The initializer is called exactly once with a zeroed, writable uint8
        view over the element buffer (height * width * itemsize bytes). The image
        keeps its own copy of the result, so the buffer can be dropped or reused
        afterwards.
        """
        if not callable(initializer):
            raise TypeError("initializer must be callable")

        kind = ElementKind.resolve(kind)
        height, width = _validate_shape(height, width)

        buffer = np.zeros(height * width, dtype=kind.dtype)
        initializer(buffer.view(np.uint8))
        return cls(height, width, kind, buffer)

    @classmethod
    def from_2d(cls, array: Union[np.ndarray, Sequence[Sequence]], kind: Any = None) -> "Image":
        """
        Create image from a 2D array.

        Raises:
            InvalidShape: If array is not two-dimensional
        """
        array = np.asarray(array)
        if array.ndim != 2:
            raise InvalidShape(f"Expected a 2D array, got {array.ndim} dimensions")
        height, width = array.shape
        return cls.from_array(array, height, width, kind)

    @classmethod
    def zero(cls, height: int, width: int, kind: Any) -> "Image":
        """Create an all-zero image."""
        return cls(height, width, kind)

    @classmethod
    def from_record(cls, record: ImageRecord, kind: Any) -> "Image":
        """
        Restore image from its persisted representation.

        Args:
            record: Persisted record
            kind: Element kind the caller expects

        Returns:
            New Image

        Raises:
            TypeMismatch: If the record's kind tag differs from kind
            InvalidShape: If width or height is below 1
            SizeMismatch: If raw_bytes is shorter than required
        """
        kind = ElementKind.resolve(kind)
        if record.element_kind != kind.value:
            logger.warning(f"Record holds {record.element_kind}, expected {kind.value}")
            raise TypeMismatch(f"Record holds {record.element_kind!r}, expected {kind.value!r}")

        return cls.from_bytes(record.raw_bytes, record.height, record.width, kind)

    def to_record(self) -> ImageRecord:
        """Export image to its persisted representation"""
        return ImageRecord(
            width=self._width,
            height=self._height,
            element_kind=enum_to_string(self._kind),
            raw_bytes=self.to_bytes(),
        )

    # Properties

    @property
    def height(self) -> int:
        return self._height

    @property
    def width(self) -> int:
        return self._width

    @property
    def shape(self) -> Tuple[int, int]:
        return self._height, self._width

    @property
    def kind(self) -> ElementKind:
        return self._kind

    @property
    def dtype(self) -> np.dtype:
        return self._kind.dtype

    @property
    def size(self) -> int:
        return self._height * self._width

    def _selected_values(self) -> np.ndarray:
        return self._data

    # Element access

    def get(self, *index: int):
        """
        Element at (row, col) or at a linear row-major offset.

        Negative positions count from the end, per axis for (row, col).

        Raises:
            IndexOutOfRange: If the position lies outside the image
        """
        if len(index) == 2:
            row = normalize_index(index[0], self._height, "Row")
            col = normalize_index(index[1], self._width, "Column")
            return self._data[row * self._width + col]

        if len(index) == 1:
            return self._data[normalize_index(index[0], self.size, "Offset")]

        raise TypeError(f"get() takes a linear offset or (row, col), got {len(index)} values")

    def __getitem__(self, key: Union[int, Tuple[int, int]]):
        if isinstance(key, tuple):
            return self.get(*key)
        return self.get(key)

    def __len__(self) -> int:
        return self.size

    def __iter__(self) -> Iterator:
        return iter(self._data)

    # Export

    def typed_view(self) -> np.ndarray:
        """Read-only flat view of the elements (no copy)."""
        return self._data

    def byte_view(self) -> np.ndarray:
        """Read-only uint8 view of the element bytes (no copy)."""
        return self._data.view(np.uint8)

    def as_2d(self) -> np.ndarray:
        """Read-only height x width view of the elements (no copy)."""
        return self._data.reshape(self._height, self._width)

    def to_bytes(self) -> bytes:
        """Copy of the element bytes in native byte order."""
        return self._data.tobytes()

    def __bytes__(self) -> bytes:
        return self.to_bytes()

    def copy(self) -> "Image":
        """Create an equal image with its own buffer."""
        return Image(self._height, self._width, self._kind, self._data)

    # Geometric transforms

    def _transformed(self, kind: TransformKind) -> "Image":
        height, width = output_shape(self._height, self._width, kind)
        selector = get_selector(kind)
        target = np.zeros(self.size, dtype=self._kind.dtype)
        transform(self._data, target, self._height, self._width, selector)
        return Image(height, width, self._kind, target, copy=False)

    def transpose(self) -> "Image":
        """Swap rows and columns."""
        return self._transformed(TransformKind.TRANSPOSE)

    def rotate(self, degree: Union[RotationDegree, int]) -> "Image":
        """
        Rotate counter-clockwise by 0, 90, 180 or 270 degrees.

        Raises:
            UnsupportedTransform: For any other degree
        """
        return self._transformed(rotation_kind(degree))

    def flip(self, direction: Union[FlipDirection, str]) -> "Image":
        """
        Mirror horizontally (columns reversed) or vertically (rows reversed).

        Raises:
            UnsupportedTransform: For an unknown direction
        """
        return self._transformed(flip_kind(direction))

    # Casting

    def cast_to(self, kind: Any, caster: Optional[Callable[[Any], Any]] = None) -> "Image":
        """
        Convert every element to another kind.

        Args:
            kind: Target element kind
            caster: Optional element-wise conversion function; its results are
                stored with native cast semantics of the target kind

        Returns:
            New Image of the target kind
        """
        target = ElementKind.resolve(kind)
        if caster is None:
            values = target.cast_array(self._data)
        else:
            values = target.cast_array([caster(value) for value in self._data])
        return Image(self._height, self._width, target, values, copy=False)

    # Element-wise arithmetic

    def clamp(self, low, high) -> "Image":
        """
        Saturate every element into [low, high].

        Raises:
            InvalidRange: If low > high
        """
        low = self._kind.cast(low)
        high = self._kind.cast(high)
        if low > high:
            logger.warning(f"Rejected clamp range [{low}, {high}]")
            raise InvalidRange(f"Lower bound {low} exceeds upper bound {high}")

        clamped = np.clip(self._data, low, high)
        return Image(self._height, self._width, self._kind, clamped, copy=False)

    def scale(self, low, high) -> "Image":
        """
        Linearly map [min(), max()] onto [low, high].

        A constant image is filled with (low + high) / 2, rounded down for
        integer kinds. Integer kinds evaluate
        (x - min) * (high - low) // (max - min) + low exactly; float kinds
        evaluate the same mapping in float64.
        """
        kind = self._kind
        low = kind.cast(low)
        high = kind.cast(high)
        minimum = self.min()
        maximum = self.max()

        if minimum == maximum:
            if kind.is_integer:
                fill = kind.cast((int(low) + int(high)) // ImageConstants.MIDPOINT_DIVISOR)
            else:
                fill = div(add(low, high), kind.literal(ImageConstants.MIDPOINT_DIVISOR))
            filled = np.full(self.size, fill, dtype=kind.dtype)
            return Image(self._height, self._width, kind, filled, copy=False)

        if kind.is_integer:
            scaled = self._scale_integers(int(minimum), int(maximum), int(low), int(high))
        else:
            ratio = (self._data.astype(np.float64) - float(minimum)) / (
                float(maximum) - float(minimum)
            )
            scaled = ratio * (float(high) - float(low)) + float(low)
        return Image(self._height, self._width, kind, kind.cast_array(scaled), copy=False)

    def _scale_integers(self, minimum: int, maximum: int, low: int, high: int) -> np.ndarray:
        span = maximum - minimum
        target = high - low

        # int64 when neither the offsets nor the products can overflow
        if (
            self._kind != ElementKind.UINT64
            and span * max(abs(target), 1) <= ImageConstants.INT64_MAX
        ):
            offsets = self._data.astype(np.int64) - np.int64(minimum)
        else:
            offsets = self._data.astype(object) - minimum

        return offsets * target // span + low

    def add_scalar(self, item) -> "Image":
        values = add(self._data, self._kind.cast(item))
        return Image(self._height, self._width, self._kind, values, copy=False)

    def multiply_by(self, item) -> "Image":
        values = mul(self._data, self._kind.cast(item))
        return Image(self._height, self._width, self._kind, values, copy=False)

    def divide_by(self, item) -> "Image":
        """
        Divide every element by item.

        Raises:
            ZeroDivisionError: If the kind is integer and item is zero
        """
        values = div(self._data, self._kind.cast(item))
        return Image(self._height, self._width, self._kind, values, copy=False)

    def _check_compatible(self, other: "Image") -> None:
        if not isinstance(other, Image):
            raise TypeMismatch(f"Expected Image, got {type(other).__name__}")
        if other.kind != self._kind:
            raise TypeMismatch(f"Kind {other.kind.value} differs from {self._kind.value}")
        if other.shape != self.shape:
            logger.warning(f"Shape mismatch: {self.shape} vs {other.shape}")
            raise ShapeMismatch(f"Shape {other.shape} differs from {self.shape}")

    def add(self, other: "Image") -> "Image":
        """
        Element-wise sum with an image of the same kind and shape.

        Raises:
            TypeMismatch: If other is not an Image of the same kind
            ShapeMismatch: If other has a different shape
        """
        self._check_compatible(other)
        values = add(self._data, other._data)
        return Image(self._height, self._width, self._kind, values, copy=False)

    def subtract(self, other: "Image") -> "Image":
        """
        Element-wise difference with an image of the same kind and shape.

        Raises:
            TypeMismatch: If other is not an Image of the same kind
            ShapeMismatch: If other has a different shape
        """
        self._check_compatible(other)
        values = sub(self._data, other._data)
        return Image(self._height, self._width, self._kind, values, copy=False)

    # Slicing

    def _view_or_self(self, coordinates: Sequence[Tuple[int, int]]) -> ImageStatistics:
        if len(coordinates) == self.size and get_settings().image.return_source_on_full_selection:
            return self
        return SubView(self, coordinates)

    def slice(self, indices: Iterable[Tuple[int, int]]) -> SubView:
        """
        View over explicit (row, col) coordinates.

        Raises:
            InvalidShape: If indices is empty
            IndexOutOfRange: If a coordinate lies outside the image
        """
        return SubView(self, indices)

    def slice_by_value(self, predicate: Callable[[Any], bool]) -> ImageStatistics:
        """
        View over the elements whose value satisfies predicate.

        Returns the image itself when every element is selected.

        Raises:
            InvalidShape: If no element is selected
        """
        width = self._width
        coordinates = [
            divmod(offset, width) for offset, value in enumerate(self._data) if predicate(value)
        ]
        return self._view_or_self(coordinates)

    def slice_by_position(self, predicate: Callable[[int, int, Any], bool]) -> ImageStatistics:
        """
        View over the elements for which predicate(row, col, value) holds.

        Returns the image itself when every element is selected.

        Raises:
            InvalidShape: If no element is selected
        """
        width = self._width
        coordinates = []
        for offset, value in enumerate(self._data):
            row, col = divmod(offset, width)
            if predicate(row, col, value):
                coordinates.append((row, col))
        return self._view_or_self(coordinates)

    def slice_region(self, region: Union[Region, Dict], safe_mode: bool = False) -> ImageStatistics:
        """
        View over a rectangular region.

        Args:
            region: Region object or dictionary (x, y, width, height)
            safe_mode: If True, clip region to image bounds

        Returns:
            SubView, or the image itself when the region covers it entirely

        Raises:
            IndexOutOfRange: If the region exceeds the image in strict mode
        """
        return self._view_or_self(RegionHandler.region_coordinates(region, self.shape, safe_mode))

    # Equality and hashing

    def equals(self, other: Any) -> bool:
        """
        Numeric value equality.

        Requires the same kind and shape; integers compare exactly, floats
        with IEEE semantics (0.0 == -0.0, nan != nan).
        """
        if not isinstance(other, Image) or other.kind != self._kind or other.shape != self.shape:
            return False
        return bool(np.array_equal(self._data, other._data))

    def bitwise_equals(self, other: Any) -> bool:
        """Equality of the raw element bytes, for images of the same kind and shape."""
        if not isinstance(other, Image) or other.kind != self._kind or other.shape != self.shape:
            return False
        return bool(np.array_equal(self.byte_view(), other.byte_view()))

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, Image):
            return NotImplemented
        return self.equals(other)

    def content_hash(self) -> int:
        """CRC-32 based 32-bit hash of elements, kind and dimensions."""
        if self._hash is None:
            self._hash = content_hash(self._data, self._kind, self._height, self._width)
        return self._hash

    def __hash__(self) -> int:
        return self.content_hash()

    def __repr__(self) -> str:
        return f"Image(height={self._height}, width={self._width}, kind={self._kind.value})"
