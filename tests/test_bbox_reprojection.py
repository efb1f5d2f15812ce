#!/usr/bin/env python3
"""
Tests for bounding-box reprojection by sampling.

Covers the sample generators in isolation and the GeoReference bbox methods
built on them: empty inputs, dropped samples, the antimeridian and a pole
inside the sampled region.
"""

import math
import os
import sys

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from raster_georef.affine_transform import PixelInterpretation
from raster_georef.bbox import BoundingBox
from raster_georef.bbox_reprojector import (
    corner_samples,
    grow_from_samples,
    lattice_samples,
    pixel_perimeter_samples,
)
from raster_georef.exceptions import ProjectionEngineError
from raster_georef.georeference import GeoReference


class TestSampleGenerators:
    """Test which samples each generator yields."""

    def test_corner_samples(self):
        corners = set(corner_samples(BoundingBox(0, 1, 2, 3)))
        assert corners == {(0, 1), (2, 3), (0, 3), (2, 1)}

    def test_empty_box_yields_nothing(self):
        assert list(corner_samples(BoundingBox.empty())) == []
        assert list(pixel_perimeter_samples(BoundingBox.empty())) == []
        assert list(lattice_samples(BoundingBox.empty(), 10)) == []

    def test_pixel_perimeter_covers_half_open_edges(self):
        samples = set(pixel_perimeter_samples(BoundingBox(0, 0, 4, 3)))
        # Perimeter of columns 0..3, rows 0..2
        perimeter = {(x, 0) for x in range(4)} | {(x, 2) for x in range(4)}
        perimeter |= {(0, 1), (3, 1)}
        assert perimeter <= samples
        # Outside the half-open box only the diagonal start (4, 0) appears
        outside = {(x, y) for x, y in samples if not (0 <= x < 4 and 0 <= y < 3)}
        assert outside == {(4, 0)}

    def test_pixel_perimeter_includes_diagonals(self):
        samples = set(pixel_perimeter_samples(BoundingBox(0, 0, 10, 10)))
        assert {(i, i) for i in range(10)} <= samples
        assert {(10 - i, i) for i in range(1, 10)} <= samples

    def test_pixel_perimeter_snaps_to_integers(self):
        samples = set(pixel_perimeter_samples(BoundingBox(0.4, 0.4, 2.6, 2.6)))
        assert (0, 0) in samples
        assert (2, 2) in samples

    def test_lattice_samples_edges_include_both_ends(self):
        box = BoundingBox(0.0, 0.0, 10.0, 20.0)
        samples = list(lattice_samples(box, 5))
        xs_on_bottom = sorted({x for x, y in samples if y == 0.0})
        assert xs_on_bottom == pytest.approx([0.0, 2.0, 4.0, 6.0, 8.0, 10.0])
        ys_on_left = sorted({y for x, y in samples if x == 0.0})
        assert ys_on_left == pytest.approx([0.0, 4.0, 8.0, 12.0, 16.0, 20.0])

    def test_lattice_samples_diagonals(self):
        box = BoundingBox(0.0, 0.0, 10.0, 20.0)
        samples = set(lattice_samples(box, 5))
        assert (6.0, 12.0) in samples
        assert (4.0, 12.0) in samples

    @pytest.mark.parametrize("nsamples", [0, -3])
    def test_lattice_samples_rejects_bad_count(self, nsamples):
        with pytest.raises(ValueError, match="nsamples"):
            list(lattice_samples(BoundingBox(0, 0, 1, 1), nsamples))


class TestGrowFromSamples:
    """Test per-sample failure handling."""

    def test_failures_are_dropped(self):
        def convert(sample):
            if sample[0] < 0:
                raise ProjectionEngineError("ProjError", "outside domain")
            return sample

        box = grow_from_samples([(-1, 5), (1, 2), (3, 4)], convert)
        assert box.as_tuple() == (1, 2, 3, 4)

    def test_arithmetic_errors_are_dropped(self):
        box = grow_from_samples([(0, 0), (1, 1)], lambda s: (1 / s[0], 1.0))
        assert box.as_tuple() == (1.0, 1.0, 1.0, 1.0)

    def test_all_failures_give_empty_box(self):
        def convert(sample):
            raise ProjectionEngineError("ProjError", "outside domain")

        assert grow_from_samples([(0, 0), (1, 1)], convert).is_empty

    def test_other_errors_propagate(self):
        def convert(sample):
            raise KeyError("bug")

        with pytest.raises(KeyError):
            grow_from_samples([(0, 0)], convert)


class TestGeoReferenceBBoxes:
    """Bounding-box methods of GeoReference."""

    @pytest.fixture
    def utm(self):
        georef = GeoReference()
        georef.set_utm(33)
        georef.set_transform([[30.0, 0, 400000.0], [0, -30.0, 5000000.0], [0, 0, 1]])
        return georef

    def test_pixel_to_point_bbox_corners(self, utm):
        box = utm.pixel_to_point_bbox(BoundingBox(0, 0, 100, 50))
        # Area registration: pixel (0, 0) is half a pixel in from the point origin
        assert box.xmin == pytest.approx(400015.0)
        assert box.xmax == pytest.approx(403015.0)
        assert box.ymax == pytest.approx(4999985.0)
        assert box.ymin == pytest.approx(4998485.0)

    def test_point_to_pixel_bbox_is_integer(self, utm):
        box = utm.point_to_pixel_bbox(BoundingBox(400020.0, 4998500.0, 403000.0, 4999980.0))
        for value in box.as_tuple():
            assert value == int(value)
        assert box.contains(utm.point_to_pixel((400020.0, 4998500.0)))

    def test_pixel_lonlat_bbox_round_trip_encloses(self, utm):
        pixel_box = BoundingBox(0, 0, 200, 100)
        lonlat_box = utm.pixel_to_lonlat_bbox(pixel_box)
        assert 13.0 < lonlat_box.xmin < lonlat_box.xmax < 14.0
        assert 44.0 < lonlat_box.ymin < lonlat_box.ymax < 46.0

        back = utm.lonlat_to_pixel_bbox(lonlat_box, nsamples=20)
        assert back.xmin <= 0 and back.ymin <= 0
        assert back.xmax >= 199 and back.ymax >= 99

    def test_point_lonlat_bbox(self, utm):
        point_box = BoundingBox(400000.0, 4990000.0, 410000.0, 5000000.0)
        lonlat_box = utm.point_to_lonlat_bbox(point_box, nsamples=10)
        back = utm.lonlat_to_point_bbox(lonlat_box, nsamples=10)
        assert back.xmin <= point_box.xmin + 1e-3
        assert back.xmax >= point_box.xmax - 1e-3
        assert back.ymin <= point_box.ymin + 1e-3
        assert back.ymax >= point_box.ymax - 1e-3

    def test_empty_inputs_give_empty_outputs(self, utm):
        empty = BoundingBox.empty()
        assert utm.pixel_to_point_bbox(empty).is_empty
        assert utm.point_to_pixel_bbox(empty).is_empty
        assert utm.pixel_to_lonlat_bbox(empty).is_empty
        assert utm.lonlat_to_pixel_bbox(empty).is_empty
        assert utm.lonlat_to_point_bbox(empty).is_empty
        assert utm.point_to_lonlat_bbox(empty).is_empty

    def test_unprojected_lonlat_bbox_is_point_bbox(self):
        georef = GeoReference(transform=[[0.5, 0, -10.0], [0, -0.5, 40.0], [0, 0, 1]],
                              pixel_interpretation=PixelInterpretation.PIXEL_AS_POINT)
        box = georef.pixel_to_lonlat_bbox(BoundingBox(0, 0, 10, 10))
        assert box.as_tuple() == pytest.approx((-10.0, 35.0, -5.0, 40.0))

    def test_nsamples_validated(self, utm):
        with pytest.raises(ValueError):
            utm.lonlat_to_point_bbox(BoundingBox(13, 44, 14, 45), nsamples=0)

    def test_antimeridian_footprint_is_continuous(self):
        """An image spanning lon 170 to 210 reports [170, 210], not [-180, 180]."""
        meters_per_degree = 6378137.0 * math.pi / 180.0
        georef = GeoReference(pixel_interpretation=PixelInterpretation.PIXEL_AS_POINT)
        georef.set_equirectangular()
        georef.set_transform([
            [0.1 * meters_per_degree, 0, 170.0 * meters_per_degree],
            [0, -0.1 * meters_per_degree, 10.0 * meters_per_degree],
            [0, 0, 1],
        ])
        assert not georef.center_on_zero
        assert georef.proj4_str.endswith("+over")

        box = georef.pixel_to_lonlat_bbox(BoundingBox(0, 0, 400, 100))
        assert 169.0 < box.xmin < 171.0
        assert 209.0 < box.xmax < 211.0

    def test_orthographic_pole_footprint(self):
        """Pixels off the visible disk are dropped; the pole is still found."""
        georef = GeoReference()
        georef.set_orthographic(center_latitude=90.0, center_longitude=0.0)
        georef.set_transform([[200000.0, 0, -10e6], [0, -200000.0, 10e6], [0, 0, 1]])

        box = georef.pixel_to_lonlat_bbox(BoundingBox(0, 0, 100, 100))
        assert not box.is_empty
        assert box.ymax > 80.0
        assert box.ymin >= -1e-6
