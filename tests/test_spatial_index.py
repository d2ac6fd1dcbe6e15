# tests/test_spatial_index.py

"""Tests for the R-tree envelope index."""

from spatial.geometry import Envelope, GeoPoint
from spatial.index import SpatialIndex


def point_box(lat: float, lon: float) -> Envelope:
    return Envelope.of_point(GeoPoint(lat=lat, lon=lon))


class TestSpatialIndexBasics:
    """Test basic spatial index operations."""

    def test_create_spatial_index(self):
        """Can create spatial index."""
        index = SpatialIndex()
        assert index.get_entry_count() == 0

    def test_insert_entries(self):
        """Can insert multiple entries."""
        index = SpatialIndex()
        for i in range(10):
            index.insert(i, point_box(float(i), float(i)))

        assert index.get_entry_count() == 10
        assert index.get(3) == point_box(3.0, 3.0)

    def test_insert_same_key_replaces(self):
        """Re-inserting a key moves the entry."""
        index = SpatialIndex()
        index.insert(1, point_box(0.0, 0.0))
        index.insert(1, point_box(10.0, 10.0))

        assert index.get_entry_count() == 1
        assert index.intersection(Envelope(-1.0, -1.0, 1.0, 1.0)) == []
        assert index.intersection(Envelope(9.0, 9.0, 11.0, 11.0)) == [1]

    def test_remove_entry(self):
        """Can remove an entry."""
        index = SpatialIndex()
        index.insert(7, point_box(1.0, 1.0))
        index.remove(7)

        assert index.get_entry_count() == 0
        assert index.intersection(Envelope(0.0, 0.0, 2.0, 2.0)) == []

    def test_remove_nonexistent_entry(self):
        """Removing an unknown key doesn't raise error."""
        index = SpatialIndex()
        index.remove(42)
        assert index.get_entry_count() == 0

    def test_clear_index(self):
        """Can clear all entries from index."""
        index = SpatialIndex()
        for i in range(5):
            index.insert(i, point_box(float(i), float(i)))

        index.clear()
        assert index.get_entry_count() == 0
        assert index.intersection(Envelope(-180.0, -90.0, 180.0, 90.0)) == []


class TestSpatialQueries:
    """Test envelope intersection queries."""

    def test_query_empty(self):
        """Query on empty index returns empty list."""
        assert SpatialIndex().intersection(Envelope(0.0, 0.0, 1.0, 1.0)) == []

    def test_points_inside_query_box(self):
        """Only points inside the box are returned."""
        index = SpatialIndex()
        for lat in range(5):
            for lon in range(5):
                index.insert(lat * 10 + lon, point_box(float(lat), float(lon)))

        results = sorted(index.intersection(Envelope(0.5, 0.5, 2.5, 2.5)))
        assert results == [11, 12, 21, 22]

    def test_box_entries_overlap(self):
        """Box entries match queries that only overlap them partly."""
        index = SpatialIndex()
        index.insert(1, Envelope(0.0, 0.0, 2.0, 2.0))
        index.insert(2, Envelope(5.0, 5.0, 6.0, 6.0))

        assert index.intersection(Envelope(1.5, 1.5, 3.0, 3.0)) == [1]

    def test_point_query_hits_point_entry(self):
        """A zero-extent query finds a zero-extent entry at the same place."""
        index = SpatialIndex()
        index.insert(9, point_box(48.675652, 2.384955))

        assert index.intersection(point_box(48.675652, 2.384955)) == [9]
