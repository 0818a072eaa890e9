"""
Numeric element capability.

Defines the closed set of element kinds an image may hold and the arithmetic,
comparison and cast operations the containers rely on. Values are numpy
scalars or arrays of the kind's dtype.

Conversion semantics (numpy ``astype``, native byte order):

    int -> wider int          exact
    int -> narrower int       wraps modulo 2**bits (two's complement)
    signed <-> unsigned       bit pattern reinterpreted modulo 2**bits
    int -> float32/float64    rounds to nearest representable value
    float -> int              truncates toward zero; NaN, inf and out of
                              range values give a platform defined result
    float64 -> float32        rounds to nearest, overflow becomes +/-inf
    float32 -> float64        exact

Arithmetic on integer kinds wraps silently. Integer division is floor
division (Python ``//``) and raises ZeroDivisionError on a zero divisor.
Floating division by zero yields +/-inf or nan.
"""

import logging
from enum import Enum
from typing import Any, List

import numpy as np

from imagecore.exceptions import TypeNotSupported

logger = logging.getLogger(__name__)


class ElementKind(str, Enum):
    """Primitive numeric kinds an image can be built from."""

    FLOAT64 = "float64"
    FLOAT32 = "float32"
    UINT64 = "uint64"
    UINT32 = "uint32"
    UINT16 = "uint16"
    UINT8 = "uint8"
    INT64 = "int64"
    INT32 = "int32"
    INT16 = "int16"
    INT8 = "int8"

    @property
    def dtype(self) -> np.dtype:
        """Native byte order numpy dtype."""
        return np.dtype(self.value)

    @property
    def itemsize(self) -> int:
        return self.dtype.itemsize

    @property
    def kind_id(self) -> int:
        """Stable identifier mixed into the content hash."""
        return list(ElementKind).index(self) + 1

    @property
    def is_integer(self) -> bool:
        return self.dtype.kind in "iu"

    @property
    def is_unsigned(self) -> bool:
        return self.dtype.kind == "u"

    @property
    def is_float(self) -> bool:
        return self.dtype.kind == "f"

    @classmethod
    def allowed(cls) -> List["ElementKind"]:
        """All supported kinds, widest floating kind first."""
        return list(cls)

    @classmethod
    def resolve(cls, value: Any) -> "ElementKind":
        """
        Resolve a kind from an ElementKind, dtype, scalar type or dtype name.

        Args:
            value: ElementKind, numpy dtype, numpy/Python scalar type or name

        Returns:
            Matching ElementKind

        Raises:
            TypeNotSupported: If the value does not name an allowed kind
        """
        if isinstance(value, cls):
            return value
        if value is None:
            raise TypeNotSupported("element kind must not be None")

        try:
            dtype = np.dtype(value)
        except TypeError as e:
            logger.warning(f"Rejected element kind: {value!r}")
            raise TypeNotSupported(f"Unsupported element kind: {value!r}") from e

        if dtype.kind not in "iuf":
            logger.warning(f"Rejected element kind: {dtype}")
            raise TypeNotSupported(f"Unsupported element kind: {dtype}")

        try:
            return cls(dtype.name)
        except ValueError as e:
            logger.warning(f"Rejected element kind: {dtype}")
            raise TypeNotSupported(f"Unsupported element kind: {dtype}") from e

    def cast(self, value: Any) -> np.generic:
        """
        Convert a scalar into this kind using native conversion semantics.

        Args:
            value: Python or numpy scalar

        Returns:
            numpy scalar of this kind
        """
        with np.errstate(over="ignore", invalid="ignore"):
            return np.asarray(value).astype(self.dtype)[()]

    def cast_array(self, values: Any) -> np.ndarray:
        """Convert an array (or sequence) element-wise into a new array of this kind."""
        with np.errstate(over="ignore", invalid="ignore"):
            return np.asarray(values).astype(self.dtype, copy=True)

    def literal(self, value: int) -> np.generic:
        """Small integer literal (0, 1, 2, 50, 100...) expressed in this kind."""
        return self.cast(int(value))

    @property
    def zero(self) -> np.generic:
        return self.literal(0)


def is_kind_allowed(value: Any) -> bool:
    """Check whether value names one of the supported element kinds."""
    try:
        ElementKind.resolve(value)
    except TypeNotSupported:
        return False
    return True


def cast(value: Any, kind: Any) -> np.generic:
    """Convert value into the given kind."""
    return ElementKind.resolve(kind).cast(value)


def _unwrap(result: Any) -> Any:
    if isinstance(result, np.ndarray) and result.ndim == 0:
        return result[()]
    return result


def add(left: Any, right: Any) -> Any:
    with np.errstate(over="ignore"):
        return _unwrap(np.add(left, right))


def sub(left: Any, right: Any) -> Any:
    with np.errstate(over="ignore"):
        return _unwrap(np.subtract(left, right))


def mul(left: Any, right: Any) -> Any:
    with np.errstate(over="ignore"):
        return _unwrap(np.multiply(left, right))


def div(left: Any, right: Any) -> Any:
    """
    Divide with native semantics for the operand kind.

    Raises:
        ZeroDivisionError: If both operands are integer and a divisor is zero
    """
    left = np.asarray(left)
    right = np.asarray(right)

    if left.dtype.kind in "iu" and right.dtype.kind in "iu":
        if np.any(right == 0):
            raise ZeroDivisionError("integer division by zero")
        with np.errstate(over="ignore"):
            return _unwrap(np.floor_divide(left, right))

    with np.errstate(divide="ignore", invalid="ignore", over="ignore"):
        return _unwrap(np.true_divide(left, right))


def neg(value: Any) -> Any:
    with np.errstate(over="ignore"):
        return _unwrap(np.negative(value))


def eq(left: Any, right: Any) -> Any:
    return _unwrap(np.equal(left, right))


def ne(left: Any, right: Any) -> Any:
    return _unwrap(np.not_equal(left, right))


def lt(left: Any, right: Any) -> Any:
    return _unwrap(np.less(left, right))


def le(left: Any, right: Any) -> Any:
    return _unwrap(np.less_equal(left, right))


def gt(left: Any, right: Any) -> Any:
    return _unwrap(np.greater(left, right))


def ge(left: Any, right: Any) -> Any:
    return _unwrap(np.greater_equal(left, right))
