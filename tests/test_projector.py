# tests/test_projector.py

"""Tests for projecting coordinates into point and shape representations."""

import math

import pytest

from core.exceptions import InvalidGeometry
from spatial.geometry import GeoPoint, distance_to_degrees
from spatial.projector import SpatialProjector, default_projector

PARIS_SOUTH = GeoPoint(lat=48.675652, lon=2.384955)


class TestProjection:
    """Test the point/shape pair produced by the projector."""

    def test_point_is_unchanged(self):
        """The canonical point is the input point."""
        projection = SpatialProjector().project(PARIS_SOUTH, 50.0)
        assert projection.point == PARIS_SOUTH

    def test_zero_radius_is_minimal_box(self):
        """Radius 0 gives the degenerate box around the point."""
        shape = default_projector.project(PARIS_SOUTH).shape
        assert shape.is_point
        assert shape.contains_point(PARIS_SOUTH)

    @pytest.mark.parametrize("radius", [0.0, 1.0, 20.0, 1000.0, 10000.0])
    def test_shape_contains_point(self, radius):
        """The shape always contains its generating point."""
        projection = default_projector.project(PARIS_SOUTH, radius)
        assert projection.shape.contains_point(projection.point)

    def test_area_grows_with_radius(self):
        """Larger radii give boxes that contain the smaller ones."""
        radii = [0.0, 5.0, 20.0, 100.0, 2000.0]
        shapes = [default_projector.bounding_box(PARIS_SOUTH, r) for r in radii]
        for smaller, larger in zip(shapes, shapes[1:]):
            assert larger.area > smaller.area
            assert larger.contains(smaller)

    @pytest.mark.parametrize("radius", [-1.0, math.nan, math.inf, "far"])
    def test_invalid_radius(self, radius):
        """Negative or non-finite radii are rejected."""
        with pytest.raises(InvalidGeometry):
            default_projector.project(PARIS_SOUTH, radius)


class TestBoundingBox:
    """Test the circle-to-box computation."""

    def test_latitude_half_height(self):
        """Half the box height is the angular radius."""
        box = default_projector.bounding_box(PARIS_SOUTH, 1000.0)
        expected = distance_to_degrees(1000.0)
        assert box.max_lat - PARIS_SOUTH.lat == pytest.approx(expected)
        assert PARIS_SOUTH.lat - box.min_lat == pytest.approx(expected)

    def test_longitude_widens_away_from_equator(self):
        """Longitude extent is wider than latitude extent at 48 degrees."""
        box = default_projector.bounding_box(PARIS_SOUTH, 1000.0)
        lat_half = box.max_lat - PARIS_SOUTH.lat
        lon_half = box.max_lon - PARIS_SOUTH.lon
        assert lon_half == pytest.approx(lat_half / math.cos(math.radians(PARIS_SOUTH.lat)), rel=1e-6)

    def test_equator_box_is_square(self):
        """At the equator both extents match."""
        box = default_projector.bounding_box(GeoPoint(lat=0.0, lon=0.0), 500.0)
        assert box.max_lon == pytest.approx(box.max_lat)

    def test_pole_covers_all_longitudes(self):
        """A circle reaching a pole spans every longitude."""
        box = default_projector.bounding_box(GeoPoint(lat=89.999, lon=10.0), 1000.0)
        assert box.min_lon == -180.0
        assert box.max_lon == 180.0
        assert box.max_lat == 90.0

    def test_antimeridian_is_clamped(self):
        """Boxes are clamped at +/-180 rather than wrapped."""
        box = default_projector.bounding_box(GeoPoint(lat=0.0, lon=179.9999), 1000.0)
        assert box.max_lon == 180.0
        assert box.min_lon < 179.9999

    def test_square_helper(self):
        """square() is the bounding box around (lat, lon)."""
        square = default_projector.square(PARIS_SOUTH.lat, PARIS_SOUTH.lon, 20.0)
        assert square == default_projector.bounding_box(PARIS_SOUTH, 20.0)
