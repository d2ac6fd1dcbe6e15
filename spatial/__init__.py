# spatial/__init__.py

"""Spatial layer - coordinates, shapes, projection and R-tree indexing."""

from .geometry import (
    EARTH_MEAN_RADIUS_KM,
    DistanceUnit,
    Envelope,
    GeoPoint,
    distance_to_degrees,
    haversine_distance,
)
from .index import SpatialIndex
from .projector import Projection, SpatialProjector, default_projector

__all__ = [
    "GeoPoint",
    "Envelope",
    "DistanceUnit",
    "EARTH_MEAN_RADIUS_KM",
    "haversine_distance",
    "distance_to_degrees",
    "SpatialIndex",
    "SpatialProjector",
    "Projection",
    "default_projector",
]
