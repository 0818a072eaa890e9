"""
Enum conversion utilities.

Provides standardized methods for converting between enums and strings,
with support for case-insensitive parsing. Unlike lenient parsing with a
fallback, unknown values are reported with the caller's exception type.
"""

from typing import Any, Type, TypeVar

T = TypeVar("T")


def coerce_enum(
    value: Any, enum_class: Type[T], error_class: Type[Exception], normalize: bool = False
) -> T:
    """
    Parse value to enum or raise.

    Args:
        value: Value to parse (enum member, raw value or string)
        enum_class: Enum class to parse to
        error_class: Exception raised when value matches no member
        normalize: Whether to strip and lowercase strings before parsing
            (for case-insensitive matching)

    Returns:
        Parsed enum member

    Example:
        >>> coerce_enum("Horizontal", FlipDirection, UnsupportedTransform, normalize=True)
        >>> # Returns FlipDirection.HORIZONTAL
    """
    # Already an enum instance
    if isinstance(value, enum_class):
        return value

    if value is None:
        raise error_class(f"{enum_class.__name__} value must not be None")

    try:
        raw = value.strip().lower() if normalize and isinstance(value, str) else value
        return enum_class(raw)
    except (ValueError, TypeError) as e:
        raise error_class(f"Invalid {enum_class.__name__}: {value!r}") from e


def enum_to_string(value: Any) -> str:
    """
    Convert enum to string value, or pass through if already string.

    Args:
        value: Enum instance or string

    Returns:
        String value (enum.value if enum, otherwise the value itself)

    Example:
        >>> enum_to_string(ElementKind.FLOAT64)
        >>> # Returns "float64"
    """
    return str(value.value) if hasattr(value, "value") else value
