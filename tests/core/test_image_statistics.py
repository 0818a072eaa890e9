"""
Tests for cached image statistics
"""

from concurrent.futures import ThreadPoolExecutor
from unittest.mock import patch

import numpy as np
import pytest

from imagecore.exceptions import OutOfRange
from imagecore.image import statistics
from imagecore.image.dense import Image
from imagecore.numerics import ElementKind


class TestExtrema:
    """Test max() and min()"""

    def test_double_scenario(self, double_image):
        """Test extremes of the 4x1 double image"""
        assert double_image.max() == 123141.0
        assert double_image.min() == -149719.0

    def test_random_image(self, random_int_image):
        """Test extremes agree with numpy"""
        values = random_int_image.typed_view()
        assert random_int_image.max() == values.max()
        assert random_int_image.min() == values.min()
        assert random_int_image.max().dtype == np.int32

    def test_single_element(self):
        """Test a 1x1 image is its own extreme"""
        image = Image.from_array([-3], 1, 1, "int8")
        assert image.max() == image.min() == -3

    def test_last_equal_extreme_wins(self):
        """Test the later of two equal extremes is reported"""
        image = Image.from_array([0.0, -0.0], 1, 2, "float64")
        assert np.signbit(image.max())
        assert np.signbit(image.min())

    def test_nan_after_first(self):
        """Test NaNs after the first element are skipped"""
        image = Image.from_array([1.0, np.nan, 3.0], 1, 3, "float64")
        assert image.max() == 3.0
        assert image.min() == 1.0

    def test_leading_nan(self):
        """Test a leading NaN is never replaced"""
        image = Image.from_array([np.nan, 1.0, 3.0], 1, 3, "float64")
        assert np.isnan(image.max())
        assert np.isnan(image.min())


class TestPercentile:
    """Test nearest-rank percentiles"""

    @pytest.fixture
    def ten(self):
        """1x10 int32 image of 1..10"""
        return Image.from_array(np.arange(1, 11), 1, 10, "int32")

    @pytest.mark.parametrize("level, expected", [(1, 1), (10, 1), (25, 3), (50, 5), (51, 6), (99, 10)])
    def test_levels(self, ten, level, expected):
        """Test rank = ceil(level * count / 100)"""
        assert ten.percentile(level) == expected

    def test_bounds_are_extremes(self, ten):
        """Test 0 and 100 return min and max"""
        assert ten.percentile(0) == 1
        assert ten.percentile(100) == 10

    def test_unsorted_values(self):
        """Test values are ranked, not taken by position"""
        image = Image.from_array([5, 1, 4, 2, 3], 1, 5, "int32")
        assert image.percentile(40) == 2
        assert image.percentile(41) == 3

    def test_level_converted_to_kind(self, ten):
        """Test fractional levels are truncated for integer kinds"""
        assert ten.percentile(25.9) == ten.percentile(25)

    def test_float_level(self):
        """Test fractional levels are kept for float kinds"""
        image = Image.from_array(np.arange(1.0, 11.0), 10, 1, "float64")
        assert image.percentile(20.5) == 3.0

    @pytest.mark.parametrize("level", [-1, 100.5, 101, 1000, float("nan")])
    def test_out_of_range(self, ten, level):
        """Test levels outside [0, 100] are rejected"""
        with pytest.raises(OutOfRange):
            ten.percentile(level)

    def test_out_of_range_before_conversion(self):
        """Test levels are checked before narrowing to the kind"""
        image = Image.from_array([1, 2, 3], 1, 3, "uint8")
        with pytest.raises(OutOfRange):
            image.percentile(300)

    def test_median(self, ten):
        """Test median is the 50th percentile"""
        assert ten.median() == 5
        assert Image.from_array([4, 1, 3, 2], 2, 2, "int64").median() == 2

    @pytest.mark.parametrize("sort_kind", ["mergesort", "heapsort", "stable"])
    def test_sort_kind_setting(self, monkeypatch, sort_kind):
        """Test every configurable sort algorithm ranks the same"""
        monkeypatch.setenv("IMAGECORE_PERCENTILE_SORT_KIND", sort_kind)
        image = Image.from_array([9, 7, 8, 1, 2], 1, 5, "int16")
        assert image.percentile(60) == 7


class TestMoments:
    """Test average() and variance()"""

    def test_double_average(self, double_image):
        """Test average of the 4x1 double image"""
        assert double_image.average() == -3561.0

    def test_integer_average_truncated(self, small_image):
        """Test integer averages are converted to the kind"""
        average = small_image.average()
        assert average == 3
        assert average.dtype == np.int32

    def test_average_does_not_overflow(self):
        """Test accumulation happens outside the element kind"""
        image = Image.from_array([200, 200, 200], 1, 3, "uint8")
        assert image.average() == 200

    def test_float_variance(self):
        """Test sample variance with n - 1 denominator"""
        image = Image.from_array([1.0, 2.0, 3.0, 4.0], 2, 2, "float64")
        assert image.variance() == pytest.approx(5.0 / 3.0)

    def test_signed_variance_uses_kind_average(self):
        """Test deviations are taken against the average in the element kind"""
        assert Image.from_array([1, 2], 1, 2, "int32").variance() == 1
        assert Image.from_array([1, 2, 3, 4], 2, 2, "int32").variance() == 2
        assert Image.from_array([-1, -2], 1, 2, "int64").variance() == 1

    def test_unsigned_variance(self):
        """Test unsigned deviations below the average use the exact float64 average"""
        image = Image.from_array([0, 200], 1, 2, "uint16")
        assert image.variance() == 20000

    def test_single_element_variance(self):
        """Test variance of one element is zero"""
        image = Image.from_array([42.0], 1, 1, "float32")
        assert image.variance() == 0.0

    def test_random_float_image(self, random_float_image):
        """Test moments agree with numpy"""
        values = random_float_image.typed_view()
        assert random_float_image.average() == pytest.approx(values.mean())
        assert random_float_image.variance() == pytest.approx(values.var(ddof=1))

    def test_describe(self, small_image):
        """Test the statistics summary"""
        summary = small_image.describe()
        assert summary["kind"] == "int32"
        assert summary["size"] == 6
        assert summary["min"] == 1
        assert summary["max"] == 6
        assert summary["median"] == 3
        assert summary["average"] == 3
        assert summary["variance"] == 3


class TestCaching:
    """Test statistics are computed once per instance"""

    def test_max_cached(self, random_int_image):
        """Test repeated max() calls scan once"""
        with patch.object(statistics, "scan_extremum", wraps=statistics.scan_extremum) as scan:
            first = random_int_image.max()
            second = random_int_image.max()

        assert first == second
        assert scan.call_count == 1

    def test_min_and_max_cached_separately(self, small_image):
        """Test each field has its own slot"""
        with patch.object(statistics, "scan_extremum", wraps=statistics.scan_extremum) as scan:
            small_image.max()
            small_image.min()
            small_image.max()
            small_image.min()

        assert scan.call_count == 2

    def test_median_cached(self, small_image):
        """Test median() ranks only once"""
        with patch.object(Image, "percentile", autospec=True, side_effect=Image.percentile) as percentile:
            assert small_image.median() == 3
            assert small_image.median() == 3

        assert percentile.call_count == 1

    def test_average_cached(self, small_image):
        """Test average and variance share one accumulation of the average"""
        with patch.object(statistics, "running_sum", wraps=statistics.running_sum) as accumulate:
            small_image.average()
            small_image.variance()
            small_image.average()
            small_image.variance()

        # one pass for the average, one for the squared deviations
        assert accumulate.call_count == 2

    def test_cache_is_per_instance(self, small_image):
        """Test equal images keep separate caches"""
        other = small_image.copy()
        with patch.object(statistics, "scan_extremum", wraps=statistics.scan_extremum) as scan:
            small_image.max()
            other.max()

        assert scan.call_count == 2

    def test_concurrent_first_access(self, random_int_image):
        """Test concurrent callers trigger a single computation"""
        with patch.object(statistics, "scan_extremum", wraps=statistics.scan_extremum) as scan:
            with ThreadPoolExecutor(max_workers=8) as executor:
                results = list(executor.map(lambda _: random_int_image.max(), range(64)))

        assert scan.call_count == 1
        assert len(set(int(value) for value in results)) == 1
