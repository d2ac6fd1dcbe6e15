# spatial/projector.py

"""Projection of a coordinate into the point and shape representations."""

import math
from dataclasses import dataclass

from core.exceptions import InvalidGeometry

from .geometry import Envelope, GeoPoint, distance_to_degrees


@dataclass(frozen=True)
class Projection:
    """Point and bounding shape derived from one coordinate."""

    point: GeoPoint
    shape: Envelope


class SpatialProjector:
    """Derives bounding envelopes from a center and a radius.

    A circle is stored as its axis-aligned bounding box. Radius 0 gives the
    degenerate envelope around the point. The box is computed on a sphere of
    mean Earth radius; longitudes are clamped at +/-180 rather than wrapped,
    so shapes crossing the antimeridian are truncated.
    """

    def project(self, point: GeoPoint, radius_m: float = 0.0) -> Projection:
        """Project a point into its canonical point and bounding shape.

        Args:
            point: Generating coordinate
            radius_m: Circle radius in meters, 0 for the point itself

        Returns:
            Projection with the unchanged point and its envelope

        Raises:
            InvalidGeometry: If the radius is negative or not finite
        """
        return Projection(point=point, shape=self.bounding_box(point, radius_m))

    def bounding_box(self, center: GeoPoint, radius_m: float) -> Envelope:
        """Bounding box of the circle of ``radius_m`` meters around ``center``."""
        try:
            radius_m = float(radius_m)
        except (TypeError, ValueError) as e:
            raise InvalidGeometry(f"Radius must be a number, got {radius_m!r}") from e
        if not math.isfinite(radius_m) or radius_m < 0:
            raise InvalidGeometry(f"Radius must be a finite value >= 0, got {radius_m}")
        if radius_m == 0:
            return Envelope.of_point(center)

        radius_deg = distance_to_degrees(radius_m)
        min_lat = center.lat - radius_deg
        max_lat = center.lat + radius_deg

        if max_lat >= 90.0 or min_lat <= -90.0:
            # Circle covers a pole: every longitude is within reach
            return Envelope(-180.0, max(min_lat, -90.0), 180.0, min(max_lat, 90.0))

        ratio = math.sin(math.radians(radius_deg)) / math.cos(math.radians(center.lat))
        lon_delta = 180.0 if ratio >= 1.0 else math.degrees(math.asin(ratio))
        return Envelope(
            max(center.lon - lon_delta, -180.0),
            min_lat,
            min(center.lon + lon_delta, 180.0),
            max_lat,
        )

    def square(self, lat: float, lon: float, distance_m: float) -> Envelope:
        """Query square of half-width ``distance_m`` centered on (lat, lon)."""
        return self.bounding_box(GeoPoint(lat=lat, lon=lon), distance_m)


default_projector = SpatialProjector()
