# tests/test_geometry.py

"""Tests for geographic value types and distance math."""

import math

import pytest

from core.exceptions import InvalidGeometry
from spatial.geometry import (
    EARTH_MEAN_RADIUS_KM,
    DistanceUnit,
    Envelope,
    GeoPoint,
    distance_to_degrees,
    haversine_distance,
)


class TestGeoPoint:
    """Test coordinate validation and ordering."""

    def test_valid_point(self):
        """Points keep latitude and longitude as floats."""
        point = GeoPoint(lat=48.675652, lon=2.384955)
        assert point.lat == 48.675652
        assert point.lon == 2.384955

    @pytest.mark.parametrize("lat, lon", [(-90, -180), (90, 180), (0, 0)])
    def test_range_bounds_are_inclusive(self, lat, lon):
        """The exact range limits are valid."""
        GeoPoint(lat=lat, lon=lon)

    @pytest.mark.parametrize(
        "lat, lon",
        [(90.0001, 0), (-91, 0), (0, 180.5), (0, -181), (math.nan, 0), (0, math.inf), ("x", 0)],
    )
    def test_invalid_coordinates_rejected(self, lat, lon):
        """Out-of-range or non-numeric coordinates raise InvalidGeometry."""
        with pytest.raises(InvalidGeometry):
            GeoPoint(lat=lat, lon=lon)

    def test_lon_lat_order(self):
        """Serialized order is longitude first."""
        point = GeoPoint(lat=48.675652, lon=2.384955)
        assert point.to_lon_lat() == [2.384955, 48.675652]
        assert GeoPoint.from_lon_lat([2.384955, 48.675652]) == point

    def test_from_lon_lat_requires_pair(self):
        """Only two-element sequences parse."""
        with pytest.raises(InvalidGeometry):
            GeoPoint.from_lon_lat([1.0, 2.0, 3.0])

    def test_point_is_immutable(self):
        """GeoPoint is frozen."""
        point = GeoPoint(lat=1.0, lon=2.0)
        with pytest.raises(AttributeError):
            point.lat = 3.0


class TestEnvelope:
    """Test bounding box behaviour."""

    def test_corners_must_be_ordered(self):
        """min corner greater than max corner is rejected."""
        with pytest.raises(InvalidGeometry):
            Envelope(2.0, 0.0, 1.0, 1.0)

    def test_intersects_overlapping(self):
        """Overlapping boxes intersect both ways."""
        a = Envelope(0.0, 0.0, 2.0, 2.0)
        b = Envelope(1.0, 1.0, 3.0, 3.0)
        assert a.intersects(b)
        assert b.intersects(a)

    def test_touching_edges_intersect(self):
        """Intersection uses closed intervals."""
        assert Envelope(0.0, 0.0, 1.0, 1.0).intersects(Envelope(1.0, 0.0, 2.0, 1.0))

    def test_disjoint(self):
        """Separate boxes do not intersect."""
        assert not Envelope(0.0, 0.0, 1.0, 1.0).intersects(Envelope(1.5, 1.5, 2.0, 2.0))

    def test_point_envelope(self):
        """A point envelope has zero area and contains its point."""
        point = GeoPoint(lat=10.0, lon=20.0)
        envelope = Envelope.of_point(point)
        assert envelope.is_point
        assert envelope.area == 0.0
        assert envelope.contains_point(point)
        assert envelope.center == point

    def test_geojson_point(self):
        """Degenerate boxes serialize as point geometries."""
        envelope = Envelope.of_point(GeoPoint(lat=10.0, lon=20.0))
        assert envelope.to_geojson() == {"type": "point", "coordinates": [20.0, 10.0]}
        assert Envelope.from_geojson(envelope.to_geojson()) == envelope

    def test_geojson_envelope(self):
        """Boxes serialize as [[minLon, maxLat], [maxLon, minLat]]."""
        envelope = Envelope(1.0, 2.0, 3.0, 4.0)
        assert envelope.to_geojson() == {"type": "envelope", "coordinates": [[1.0, 4.0], [3.0, 2.0]]}
        assert Envelope.from_geojson(envelope.to_geojson()) == envelope

    def test_geojson_unknown_type(self):
        """Unsupported geometry types are rejected."""
        with pytest.raises(InvalidGeometry):
            Envelope.from_geojson({"type": "polygon", "coordinates": []})


class TestDistances:
    """Test unit conversion and great-circle distance."""

    def test_unit_conversions(self):
        """Units convert to and from meters."""
        assert DistanceUnit.KILOMETERS.to_meters(1) == 1000.0
        assert DistanceUnit.MILES.to_meters(1) == pytest.approx(1609.344)
        assert DistanceUnit.KILOMETERS.from_meters(2500) == 2.5
        assert DistanceUnit("m") is DistanceUnit.METERS

    @pytest.mark.parametrize(
        "text, expected",
        [
            ("1km", (1.0, DistanceUnit.KILOMETERS)),
            ("20m", (20.0, DistanceUnit.METERS)),
            ("2.5 mi", (2.5, DistanceUnit.MILES)),
            ("15", (15.0, DistanceUnit.METERS)),
        ],
    )
    def test_parse(self, text, expected):
        """Compact distances parse into value and unit."""
        assert DistanceUnit.parse(text) == expected

    @pytest.mark.parametrize("text", ["km", "1 parsec", "-3m", ""])
    def test_parse_invalid(self, text):
        """Garbage distances are rejected."""
        with pytest.raises(InvalidGeometry):
            DistanceUnit.parse(text)

    def test_zero_distance(self):
        """A point is at distance 0 from itself."""
        point = GeoPoint(lat=48.675652, lon=2.384955)
        assert haversine_distance(point, point) == 0.0

    def test_one_degree_of_latitude(self):
        """One degree along a meridian is R * pi / 180."""
        expected = EARTH_MEAN_RADIUS_KM * 1000.0 * math.pi / 180.0
        distance = haversine_distance(GeoPoint(lat=0.0, lon=0.0), GeoPoint(lat=1.0, lon=0.0))
        assert distance == pytest.approx(expected)

    def test_symmetric(self):
        """Distance does not depend on argument order."""
        a = GeoPoint(lat=48.675652, lon=2.384955)
        b = GeoPoint(lat=48.676455, lon=2.380899)
        assert haversine_distance(a, b) == pytest.approx(haversine_distance(b, a))
        assert 300.0 < haversine_distance(a, b) < 320.0

    def test_distance_to_degrees(self):
        """Degrees grow linearly with distance."""
        one_km = distance_to_degrees(1000.0)
        assert one_km == pytest.approx(math.degrees(1.0 / EARTH_MEAN_RADIUS_KM))
        assert distance_to_degrees(2000.0) == pytest.approx(2 * one_km)
