#!/usr/bin/env python3
"""
Tests for longitude folding and circular degree distance.

Properties verified:
1. Folding lands in the requested range: [-180, 180) or [0, 360)
2. Folding is idempotent for every finite input
3. Folding only ever changes a longitude by a multiple of 360
4. In-range values come back unchanged
"""

import math
import os
import sys

import pytest
from hypothesis import given, settings, strategies as st

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from raster_georef.longitude import degree_diff, normalize_longitude

finite_longitudes = st.floats(min_value=-1e6, max_value=1e6, allow_nan=False, allow_infinity=False)


class TestNormalizeLongitude:
    """Example-based folding checks."""

    @pytest.mark.parametrize(
        "lon, center_on_zero, expected",
        [
            (0.0, True, 0.0),
            (179.5, True, 179.5),
            (180.0, True, -180.0),
            (190.0, True, -170.0),
            (-180.0, True, -180.0),
            (-190.0, True, 170.0),
            (540.0, True, -180.0),
            (-725.0, True, -5.0),
            (0.0, False, 0.0),
            (-10.0, False, 350.0),
            (360.0, False, 0.0),
            (359.5, False, 359.5),
            (190.0, False, 190.0),
            (725.0, False, 5.0),
        ],
        ids=[
            "zero-centered-zero", "just-below-180", "180-wraps", "190-wraps",
            "minus-180-stays", "minus-190-wraps", "540-wraps", "minus-725-wraps",
            "zero-centered-180", "minus-10-to-350", "360-to-0", "359.5-stays",
            "190-stays", "725-to-5",
        ],
    )
    def test_examples(self, lon, center_on_zero, expected):
        assert normalize_longitude(lon, center_on_zero) == pytest.approx(expected, abs=1e-9)

    def test_tiny_negative_folds_to_zero_not_360(self):
        """-1e-20 % 360 rounds to 360.0, which is outside [0, 360)."""
        result = normalize_longitude(-1e-20, False)
        assert 0.0 <= result < 360.0

    def test_in_range_value_is_returned_unchanged(self):
        lon = 123.456789012345678
        assert normalize_longitude(lon, True) == lon
        assert normalize_longitude(lon, False) == lon


class TestNormalizeLongitudeProperties:
    """Property-based folding checks."""

    @given(lon=finite_longitudes, center_on_zero=st.booleans())
    @settings(max_examples=500)
    def test_result_in_range(self, lon, center_on_zero):
        result = normalize_longitude(lon, center_on_zero)
        if center_on_zero:
            assert -180.0 <= result < 180.0
        else:
            assert 0.0 <= result < 360.0

    @given(lon=finite_longitudes, center_on_zero=st.booleans())
    @settings(max_examples=500)
    def test_idempotent(self, lon, center_on_zero):
        once = normalize_longitude(lon, center_on_zero)
        assert normalize_longitude(once, center_on_zero) == once

    @given(lon=st.floats(min_value=-1e4, max_value=1e4, allow_nan=False), center_on_zero=st.booleans())
    @settings(max_examples=300)
    def test_changes_by_multiple_of_360(self, lon, center_on_zero):
        shift = (lon - normalize_longitude(lon, center_on_zero)) / 360.0
        assert shift == pytest.approx(round(shift), abs=1e-9)


class TestDegreeDiff:
    """Tests for the smallest circular distance."""

    @pytest.mark.parametrize(
        "a, b, expected",
        [
            (0.0, 0.0, 0.0),
            (170.0, -170.0, 20.0),
            (10.0, 350.0, 20.0),
            (0.0, 180.0, 180.0),
            (-90.0, 90.0, 180.0),
            (720.0, 0.0, 0.0),
            (45.0, 135.0, 90.0),
        ],
    )
    def test_examples(self, a, b, expected):
        assert degree_diff(a, b) == pytest.approx(expected)

    @given(a=finite_longitudes, b=finite_longitudes)
    @settings(max_examples=300)
    def test_symmetric_and_bounded(self, a, b):
        d = degree_diff(a, b)
        assert 0.0 <= d <= 180.0
        assert d == pytest.approx(degree_diff(b, a), abs=1e-6)

    def test_nan_propagates(self):
        assert math.isnan(degree_diff(math.nan, 0.0))
