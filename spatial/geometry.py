# spatial/geometry.py

"""Geographic value types and distance math for the spatial layer."""

import math
import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Sequence

from core.exceptions import InvalidGeometry

# Mean Earth radius used for both distance and degree conversions
EARTH_MEAN_RADIUS_KM = 6371.0087714

_DISTANCE_PATTERN = re.compile(r"^\s*([0-9]*\.?[0-9]+(?:[eE][-+]?[0-9]+)?)\s*([a-zA-Z]*)\s*$")


def _finite(value: Any, name: str) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError) as e:
        raise InvalidGeometry(f"{name} must be a number, got {value!r}") from e
    if not math.isfinite(number):
        raise InvalidGeometry(f"{name} must be finite, got {value!r}")
    return number


def validate_latitude(lat: Any) -> float:
    """Validate a latitude in decimal degrees.

    Raises:
        InvalidGeometry: If the latitude is not a number in [-90, 90]
    """
    lat = _finite(lat, "latitude")
    if not -90.0 <= lat <= 90.0:
        raise InvalidGeometry(f"Latitude {lat} out of range [-90, 90]")
    return lat


def validate_longitude(lon: Any) -> float:
    """Validate a longitude in decimal degrees.

    Raises:
        InvalidGeometry: If the longitude is not a number in [-180, 180]
    """
    lon = _finite(lon, "longitude")
    if not -180.0 <= lon <= 180.0:
        raise InvalidGeometry(f"Longitude {lon} out of range [-180, 180]")
    return lon


@dataclass(frozen=True)
class GeoPoint:
    """A WGS-84 coordinate in decimal degrees.

    Serialized longitude first (``[lon, lat]``), the GeoJSON order used by
    both the ``centroid`` and ``shape`` fields.
    """

    lat: float
    lon: float

    def __post_init__(self):
        object.__setattr__(self, "lat", validate_latitude(self.lat))
        object.__setattr__(self, "lon", validate_longitude(self.lon))

    def to_lon_lat(self) -> list[float]:
        return [self.lon, self.lat]

    @classmethod
    def from_lon_lat(cls, coordinates: Sequence[Any]) -> "GeoPoint":
        """Parse a ``[lon, lat]`` pair."""
        if not isinstance(coordinates, (list, tuple)) or len(coordinates) != 2:
            raise InvalidGeometry(f"Expected [lon, lat], got {coordinates!r}")
        return cls(lat=coordinates[1], lon=coordinates[0])


@dataclass(frozen=True)
class Envelope:
    """Axis-aligned bounding box in degrees.

    This is the only shape the index stores. Circles and points are
    reduced to their envelope by the projector.
    """

    min_lon: float
    min_lat: float
    max_lon: float
    max_lat: float

    def __post_init__(self):
        object.__setattr__(self, "min_lon", validate_longitude(self.min_lon))
        object.__setattr__(self, "max_lon", validate_longitude(self.max_lon))
        object.__setattr__(self, "min_lat", validate_latitude(self.min_lat))
        object.__setattr__(self, "max_lat", validate_latitude(self.max_lat))
        if self.min_lon > self.max_lon or self.min_lat > self.max_lat:
            raise InvalidGeometry(
                f"Envelope corners out of order: ({self.min_lon}, {self.min_lat}) "
                f"> ({self.max_lon}, {self.max_lat})"
            )

    @classmethod
    def of_point(cls, point: GeoPoint) -> "Envelope":
        """Minimal envelope around a point (zero width and height)."""
        return cls(point.lon, point.lat, point.lon, point.lat)

    @property
    def center(self) -> GeoPoint:
        return GeoPoint(
            lat=(self.min_lat + self.max_lat) / 2.0,
            lon=(self.min_lon + self.max_lon) / 2.0,
        )

    @property
    def is_point(self) -> bool:
        return self.min_lon == self.max_lon and self.min_lat == self.max_lat

    @property
    def area(self) -> float:
        """Planar area in square degrees."""
        return (self.max_lon - self.min_lon) * (self.max_lat - self.min_lat)

    def intersects(self, other: "Envelope") -> bool:
        """Closed-interval overlap test; touching edges intersect."""
        return (
            self.min_lon <= other.max_lon
            and other.min_lon <= self.max_lon
            and self.min_lat <= other.max_lat
            and other.min_lat <= self.max_lat
        )

    def contains_point(self, point: GeoPoint) -> bool:
        return (
            self.min_lon <= point.lon <= self.max_lon
            and self.min_lat <= point.lat <= self.max_lat
        )

    def contains(self, other: "Envelope") -> bool:
        return (
            self.min_lon <= other.min_lon
            and other.max_lon <= self.max_lon
            and self.min_lat <= other.min_lat
            and other.max_lat <= self.max_lat
        )

    def to_rtree(self) -> tuple[float, float, float, float]:
        """Interleaved (minx, miny, maxx, maxy) bounds for rtree."""
        return (self.min_lon, self.min_lat, self.max_lon, self.max_lat)

    def to_geojson(self) -> dict[str, Any]:
        """Typed geometry object, search-engine flavoured GeoJSON."""
        if self.is_point:
            return {"type": "point", "coordinates": [self.min_lon, self.min_lat]}
        return {
            "type": "envelope",
            "coordinates": [[self.min_lon, self.max_lat], [self.max_lon, self.min_lat]],
        }

    @classmethod
    def from_geojson(cls, geometry: Any) -> "Envelope":
        """Parse a ``point`` or ``envelope`` geometry object."""
        if not isinstance(geometry, dict):
            raise InvalidGeometry(f"Geometry must be an object, got {geometry!r}")
        geometry_type = str(geometry.get("type", "")).lower()
        coordinates = geometry.get("coordinates")
        if geometry_type == "point":
            return cls.of_point(GeoPoint.from_lon_lat(coordinates))
        if geometry_type == "envelope":
            if not isinstance(coordinates, (list, tuple)) or len(coordinates) != 2:
                raise InvalidGeometry(f"Envelope needs two corners, got {coordinates!r}")
            top_left = GeoPoint.from_lon_lat(coordinates[0])
            bottom_right = GeoPoint.from_lon_lat(coordinates[1])
            return cls(top_left.lon, bottom_right.lat, bottom_right.lon, top_left.lat)
        raise InvalidGeometry(f"Unsupported geometry type: {geometry.get('type')!r}")


class DistanceUnit(str, Enum):
    """Distance units accepted by radius filters and distance sorts."""

    MILLIMETERS = "mm"
    CENTIMETERS = "cm"
    METERS = "m"
    KILOMETERS = "km"
    INCH = "in"
    FEET = "ft"
    YARD = "yd"
    MILES = "mi"
    NAUTICAL_MILES = "nmi"

    @property
    def meters(self) -> float:
        """Length of one unit in meters."""
        return _METERS_PER_UNIT[self]

    def to_meters(self, value: float) -> float:
        return value * self.meters

    def from_meters(self, value: float) -> float:
        return value / self.meters

    @classmethod
    def parse(cls, text: str, default: "DistanceUnit | None" = None) -> tuple[float, "DistanceUnit"]:
        """Parse a compact distance such as ``"1km"`` or ``"20m"``.

        Args:
            text: Number followed by an optional unit suffix
            default: Unit used when no suffix is given (meters if None)

        Returns:
            (value, unit) tuple

        Raises:
            InvalidGeometry: If the text cannot be parsed
        """
        match = _DISTANCE_PATTERN.match(text)
        if not match:
            raise InvalidGeometry(f"Cannot parse distance {text!r}")
        value, suffix = match.groups()
        if not suffix:
            return float(value), default or cls.METERS
        try:
            return float(value), cls(suffix.lower())
        except ValueError as e:
            raise InvalidGeometry(f"Unknown distance unit {suffix!r}") from e


_METERS_PER_UNIT = {
    DistanceUnit.MILLIMETERS: 0.001,
    DistanceUnit.CENTIMETERS: 0.01,
    DistanceUnit.METERS: 1.0,
    DistanceUnit.KILOMETERS: 1000.0,
    DistanceUnit.INCH: 0.0254,
    DistanceUnit.FEET: 0.3048,
    DistanceUnit.YARD: 0.9144,
    DistanceUnit.MILES: 1609.344,
    DistanceUnit.NAUTICAL_MILES: 1852.0,
}


def haversine_distance(a: GeoPoint, b: GeoPoint) -> float:
    """Great-circle distance between two points.

    Args:
        a: First point
        b: Second point

    Returns:
        Distance in meters on a sphere of mean Earth radius
    """
    lat1 = math.radians(a.lat)
    lat2 = math.radians(b.lat)
    dlat = lat2 - lat1
    dlon = math.radians(b.lon - a.lon)
    h = math.sin(dlat / 2.0) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(dlon / 2.0) ** 2
    return 2.0 * EARTH_MEAN_RADIUS_KM * 1000.0 * math.asin(min(1.0, math.sqrt(h)))


def distance_to_degrees(distance_m: float) -> float:
    """Convert a surface distance in meters to an angular radius in degrees."""
    return math.degrees((distance_m / 1000.0) / EARTH_MEAN_RADIUS_KM)
