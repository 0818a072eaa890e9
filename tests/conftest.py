"""
Pytest configuration and fixtures for imagecore tests
"""

import numpy as np
import pytest

from imagecore.config import get_settings
from imagecore.image.dense import Image
from imagecore.numerics import ElementKind


@pytest.fixture(autouse=True)
def fresh_settings():
    """Drop cached settings so environment overrides never leak between tests"""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def double_values():
    """Values of the 4x1 double scenario"""
    return np.array([1.0, 123141, 12333, -149719], dtype=np.float64)


@pytest.fixture
def double_image(double_values):
    """4x1 float64 image"""
    return Image.from_array(double_values, 4, 1, ElementKind.FLOAT64)


@pytest.fixture
def small_image():
    """2x3 int32 image [[1, 2, 3], [4, 5, 6]]"""
    return Image.from_array([1, 2, 3, 4, 5, 6], 2, 3, ElementKind.INT32)


@pytest.fixture
def random_int_image():
    """200x200 int32 image with values spread over [-5000, 5000)"""
    rng = np.random.default_rng(42)
    data = rng.integers(-5000, 5000, size=200 * 200, dtype=np.int32)
    return Image.from_array(data, 200, 200)


@pytest.fixture
def random_float_image():
    """30x40 float64 image of normally distributed values"""
    rng = np.random.default_rng(7)
    return Image.from_2d(rng.normal(loc=10.0, scale=3.0, size=(30, 40)))
