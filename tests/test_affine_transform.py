#!/usr/bin/env python3
"""
Test suite for the affine pixel <-> projected-plane transforms.

The GDAL GeoTransform standard defines pixel-to-coordinate transformation as:
    Xgeo = GT[0] + P*GT[1] + L*GT[2]
    Ygeo = GT[3] + P*GT[4] + L*GT[5]

Where:
    GT[0]: X-coordinate of upper-left corner (origin easting)
    GT[1]: Pixel width (meters per pixel in X direction)
    GT[2]: Row rotation (typically 0 for north-up images)
    GT[3]: Y-coordinate of upper-left corner (origin northing)
    GT[4]: Column rotation (typically 0 for north-up images)
    GT[5]: Pixel height (meters per pixel in Y direction, typically negative)

The stored 3x3 transform uses pixel-as-point registration; pixel-as-area
images use a variant shifted by half a pixel.
"""

import os
import sys

import numpy as np
import pytest
from hypothesis import given, settings, strategies as st

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from raster_georef.affine_transform import (
    AffineTransformManager,
    PixelInterpretation,
    apply_homogeneous,
    geotransform_to_matrix,
    matrix_to_geotransform,
)
from raster_georef.exceptions import TransformSingularityError

NORTH_UP_GT = [737575.05, 0.15, 0, 4391595.45, 0, -0.15]
ROTATED_GT = [500000, 0.1387, 0.0574, 4400000, 0.0574, -0.1387]


class TestGeotransformEvaluation:
    """Evaluate GDAL geotransforms through the matrix and the manager."""

    @staticmethod
    def _evaluate(gt, px, py):
        manager = AffineTransformManager(geotransform_to_matrix(gt))
        return manager.pixel_to_point((px, py), PixelInterpretation.PIXEL_AS_POINT)

    def test_north_up_raster_origin(self):
        """At pixel (0, 0) the geotransform returns its origin."""
        easting, northing = self._evaluate(NORTH_UP_GT, 0, 0)

        assert easting == pytest.approx(737575.05, abs=0.01), "Easting at origin should match GT[0]"
        assert northing == pytest.approx(4391595.45, abs=0.01), (
            "Northing at origin should match GT[3]"
        )

    def test_north_up_raster_offset_pixel(self):
        # Expected easting = 737575.05 + 10*0.15 = 737576.55
        # Expected northing = 4391595.45 + 20*(-0.15) = 4391592.45
        easting, northing = self._evaluate(NORTH_UP_GT, 10, 20)

        assert easting == pytest.approx(737576.55, abs=0.01)
        assert northing == pytest.approx(4391592.45, abs=0.01)

    def test_rotated_raster(self):
        """Rotation terms GT[2] and GT[4] mix rows and columns."""
        easting, northing = self._evaluate(ROTATED_GT, 50, 75)
        # 500000 + 50*0.1387 + 75*0.0574, 4400000 + 50*0.0574 + 75*(-0.1387)
        assert easting == pytest.approx(500011.24, abs=0.1)
        assert northing == pytest.approx(4399992.47, abs=0.1)

    def test_area_convention_adds_half_pixel(self):
        manager = AffineTransformManager(geotransform_to_matrix(NORTH_UP_GT))
        easting, northing = manager.pixel_to_point((0, 0), PixelInterpretation.PIXEL_AS_AREA)
        assert easting == pytest.approx(737575.05 + 0.075)
        assert northing == pytest.approx(4391595.45 - 0.075)

    def test_wrong_length_rejected(self):
        with pytest.raises(ValueError, match="6 elements"):
            geotransform_to_matrix([1, 2, 3])


class TestGeotransformMatrix:
    """Conversions between the 6-parameter form and the 3x3 matrix."""

    @pytest.mark.parametrize("gt", [NORTH_UP_GT, ROTATED_GT], ids=["north-up", "rotated"])
    def test_matrix_follows_gdal_formula(self, gt):
        matrix = geotransform_to_matrix(gt)
        for px, py in [(0, 0), (10, 20), (1000, 2000), (-3.5, 7.25)]:
            expected = (gt[0] + px * gt[1] + py * gt[2], gt[3] + px * gt[4] + py * gt[5])
            assert apply_homogeneous(matrix, (px, py)) == pytest.approx(expected)

    def test_matrix_to_geotransform_inverts(self):
        matrix = geotransform_to_matrix(ROTATED_GT)
        assert matrix_to_geotransform(matrix) == pytest.approx(tuple(ROTATED_GT))

    def test_non_affine_matrix_has_no_geotransform(self):
        matrix = np.eye(3)
        matrix[2, 0] = 0.01
        with pytest.raises(ValueError, match="not affine"):
            matrix_to_geotransform(matrix)


class TestApplyHomogeneous:
    """Homogeneous application and the denominator guard."""

    def test_projective_division(self):
        matrix = np.array([[2.0, 0, 0], [0, 2.0, 0], [0, 0, 2.0]])
        assert apply_homogeneous(matrix, (3.0, 4.0)) == pytest.approx((3.0, 4.0))

    def test_zero_denominator_raises(self):
        matrix = np.array([[1.0, 0, 0], [0, 1.0, 0], [1.0, 0, 0]])
        with pytest.raises(TransformSingularityError, match="denominator"):
            apply_homogeneous(matrix, (0.0, 5.0))


class TestAffineTransformManager:
    """Test the transform, its area variant and the inverses."""

    def test_default_is_identity(self):
        manager = AffineTransformManager()
        np.testing.assert_array_equal(manager.transform, np.eye(3))
        assert manager.pixel_to_point((3, 4), PixelInterpretation.PIXEL_AS_POINT) == (3.0, 4.0)

    def test_shifted_transform_adds_half_pixel(self):
        manager = AffineTransformManager([[10.0, 0, 100.0], [0, -5.0, 50.0], [0, 0, 1]])
        shifted = manager.shifted_transform
        assert shifted[0, 2] == pytest.approx(105.0)
        assert shifted[1, 2] == pytest.approx(47.5)
        assert shifted[0, 0] == 10.0

    def test_area_and_point_differ_by_half_pixel(self):
        manager = AffineTransformManager([[10.0, 0, 100.0], [0, -5.0, 50.0], [0, 0, 1]])
        area = manager.pixel_to_point((0, 0), PixelInterpretation.PIXEL_AS_AREA)
        point = manager.pixel_to_point((0, 0), PixelInterpretation.PIXEL_AS_POINT)
        assert point == pytest.approx((100.0, 50.0))
        assert area == pytest.approx((105.0, 47.5))

    @pytest.mark.parametrize(
        "interpretation",
        [PixelInterpretation.PIXEL_AS_AREA, PixelInterpretation.PIXEL_AS_POINT],
        ids=["area", "point"],
    )
    def test_round_trip(self, interpretation):
        manager = AffineTransformManager(geotransform_to_matrix(ROTATED_GT))
        for pixel in [(0, 0), (12.5, 99.0), (-40, 3)]:
            point = manager.pixel_to_point(pixel, interpretation)
            assert manager.point_to_pixel(point, interpretation) == pytest.approx(pixel, abs=1e-6)

    def test_inverse_matches_numpy(self):
        transform = geotransform_to_matrix(NORTH_UP_GT)
        manager = AffineTransformManager(transform)
        np.testing.assert_allclose(manager.inverse_transform @ transform, np.eye(3), atol=1e-9)
        np.testing.assert_allclose(
            manager.inverse_shifted_transform @ manager.shifted_transform, np.eye(3), atol=1e-9
        )

    def test_singular_transform_rejected_and_previous_kept(self):
        manager = AffineTransformManager([[2.0, 0, 1.0], [0, 2.0, 1.0], [0, 0, 1]])
        with pytest.raises(TransformSingularityError):
            manager.set_transform([[1.0, 2.0, 0], [2.0, 4.0, 0], [0, 0, 1]])
        assert manager.x_scale == 2.0
        assert manager.pixel_to_point((1, 1), PixelInterpretation.PIXEL_AS_POINT) == (3.0, 3.0)

    @pytest.mark.parametrize(
        "bad",
        [np.eye(2), [[1.0, 0, 0], [0, np.nan, 0], [0, 0, 1]], [[np.inf, 0, 0], [0, 1, 0], [0, 0, 1]]],
        ids=["wrong-shape", "nan", "inf"],
    )
    def test_invalid_matrix_rejected(self, bad):
        with pytest.raises(ValueError):
            AffineTransformManager(bad)

    def test_properties_return_copies(self):
        manager = AffineTransformManager()
        matrix = manager.transform
        matrix[0, 0] = 99.0
        assert manager.x_scale == 1.0

    def test_copy_is_independent(self):
        manager = AffineTransformManager([[3.0, 0, 0], [0, 3.0, 0], [0, 0, 1]])
        other = manager.copy()
        other.set_transform(np.eye(3))
        assert manager.x_scale == 3.0


class TestRoundTripProperties:
    """Property-based round trips through random invertible transforms."""

    @given(
        scale_x=st.floats(min_value=0.01, max_value=1000.0),
        scale_y=st.floats(min_value=-1000.0, max_value=-0.01),
        rotation=st.floats(min_value=-0.5, max_value=0.5),
        origin=st.tuples(st.floats(-1e6, 1e6), st.floats(-1e6, 1e6)),
        pixel=st.tuples(st.floats(-5000, 5000), st.floats(-5000, 5000)),
        interpretation=st.sampled_from(list(PixelInterpretation)),
    )
    @settings(max_examples=200)
    def test_pixel_point_round_trip(self, scale_x, scale_y, rotation, origin, pixel, interpretation):
        gt = [origin[0], scale_x, rotation * abs(scale_y), origin[1], rotation * scale_x, scale_y]
        manager = AffineTransformManager(geotransform_to_matrix(gt))
        point = manager.pixel_to_point(pixel, interpretation)
        back = manager.point_to_pixel(point, interpretation)
        assert back == pytest.approx(pixel, abs=1e-5)
