# search/query.py

"""Query predicates and sort specs evaluated by the document store.

Every predicate answers ``matches(document)`` exactly and may expose a
``candidate_box()`` so the store can narrow candidates with its R-trees
before the exact test.
"""

import math
from dataclasses import dataclass, field
from typing import Any, Optional, Union

from core.exceptions import InvalidGeometry, InvalidQuery
from entity.document import EntityType, NodeDocument
from spatial.geometry import DistanceUnit, Envelope, GeoPoint, haversine_distance
from spatial.projector import default_projector

CENTROID_FIELD = "centroid"
SHAPE_FIELD = "shape"


def _as_point(center: Any) -> GeoPoint:
    if isinstance(center, GeoPoint):
        return center
    if isinstance(center, (list, tuple)) and len(center) == 2:
        # (lat, lon) like GeoPoint's argument order
        return GeoPoint(lat=center[0], lon=center[1])
    raise InvalidGeometry(f"Expected a GeoPoint or (lat, lon) pair, got {center!r}")


def _as_unit(unit: Union[DistanceUnit, str]) -> DistanceUnit:
    try:
        return DistanceUnit(unit)
    except ValueError as e:
        raise InvalidGeometry(f"Unknown distance unit {unit!r}") from e


@dataclass(frozen=True)
class CandidateBox:
    """Envelope on one geo field that every match must fall inside."""

    field: str
    envelope: Envelope


class Predicate:
    """Base class for query predicates."""

    def matches(self, document: NodeDocument) -> bool:
        raise NotImplementedError

    def candidate_box(self) -> Optional[CandidateBox]:
        return None

    def geo_fields(self) -> dict[str, str]:
        """Geo fields referenced by this predicate, mapped to required type."""
        return {}


@dataclass(frozen=True)
class MatchAll(Predicate):
    """Matches every document."""

    def matches(self, document: NodeDocument) -> bool:
        return True


@dataclass(frozen=True)
class TagTerm(Predicate):
    """Exact tag match; ``value=None`` only requires the key to exist."""

    key: str
    value: Optional[str] = None

    def __post_init__(self):
        if not isinstance(self.key, str) or not self.key:
            raise InvalidQuery(f"Tag key must be a non-empty string, got {self.key!r}")

    def matches(self, document: NodeDocument) -> bool:
        if self.key not in document.tags:
            return False
        return self.value is None or document.tags[self.key] == self.value


@dataclass(frozen=True)
class GeoShapeFilter(Predicate):
    """Documents whose stored shape intersects ``shape``.

    The stored shape is an envelope, so a node lying just outside the
    query shape can still match when its envelope overlaps it.
    """

    shape: Envelope

    def __post_init__(self):
        if not isinstance(self.shape, Envelope):
            raise InvalidGeometry(f"Shape filter needs an Envelope, got {self.shape!r}")

    def matches(self, document: NodeDocument) -> bool:
        return document.shape.intersects(self.shape)

    def candidate_box(self) -> Optional[CandidateBox]:
        return CandidateBox(SHAPE_FIELD, self.shape)

    def geo_fields(self) -> dict[str, str]:
        return {SHAPE_FIELD: "geo_shape"}


@dataclass(frozen=True)
class GeoDistanceFilter(Predicate):
    """Documents whose centroid lies within ``distance`` of ``center``.

    Uses exact great-circle distance; the bounding box is only used to
    narrow candidates, and not at all when it reaches the antimeridian.
    """

    center: GeoPoint
    distance: float
    unit: DistanceUnit = DistanceUnit.METERS
    distance_m: float = field(init=False, repr=False)

    def __post_init__(self):
        object.__setattr__(self, "center", _as_point(self.center))
        object.__setattr__(self, "unit", _as_unit(self.unit))
        try:
            distance = float(self.distance)
        except (TypeError, ValueError) as e:
            raise InvalidGeometry(f"Distance must be a number, got {self.distance!r}") from e
        if not math.isfinite(distance) or distance <= 0:
            raise InvalidGeometry(f"Distance must be a positive finite value, got {self.distance}")
        object.__setattr__(self, "distance", distance)
        object.__setattr__(self, "distance_m", self.unit.to_meters(distance))

    @classmethod
    def parse(cls, center: GeoPoint, distance: str) -> "GeoDistanceFilter":
        """Build from a compact distance such as ``"1km"``."""
        value, unit = DistanceUnit.parse(distance)
        return cls(center=center, distance=value, unit=unit)

    def matches(self, document: NodeDocument) -> bool:
        return haversine_distance(self.center, document.centroid) <= self.distance_m

    def candidate_box(self) -> Optional[CandidateBox]:
        box = default_projector.bounding_box(self.center, self.distance_m)
        if box.min_lon <= -180.0 or box.max_lon >= 180.0:
            # Clamped at the antimeridian: wrapped centroids lie outside the box
            return None
        return CandidateBox(CENTROID_FIELD, box)

    def geo_fields(self) -> dict[str, str]:
        return {CENTROID_FIELD: "geo_point"}


class And(Predicate):
    """Conjunction of predicates."""

    def __init__(self, *clauses: Predicate):
        if not clauses:
            raise InvalidQuery("And needs at least one clause")
        for clause in clauses:
            if not isinstance(clause, Predicate):
                raise InvalidQuery(f"Not a predicate: {clause!r}")
        self.clauses: tuple[Predicate, ...] = tuple(clauses)

    def __repr__(self) -> str:
        return f"And{self.clauses!r}"

    def __eq__(self, other: object) -> bool:
        return isinstance(other, And) and self.clauses == other.clauses

    def __hash__(self) -> int:
        return hash(self.clauses)

    def matches(self, document: NodeDocument) -> bool:
        return all(clause.matches(document) for clause in self.clauses)

    def candidate_box(self) -> Optional[CandidateBox]:
        # First spatial clause narrows; the rest are checked exactly
        for clause in self.clauses:
            box = clause.candidate_box()
            if box is not None:
                return box
        return None

    def geo_fields(self) -> dict[str, str]:
        fields: dict[str, str] = {}
        for clause in self.clauses:
            fields.update(clause.geo_fields())
        return fields


@dataclass(frozen=True)
class GeoDistanceSort:
    """Ascending great-circle distance from ``center`` to each centroid."""

    center: GeoPoint
    unit: DistanceUnit = DistanceUnit.METERS

    def __post_init__(self):
        object.__setattr__(self, "center", _as_point(self.center))
        object.__setattr__(self, "unit", _as_unit(self.unit))

    def distance(self, document: NodeDocument) -> float:
        """Distance in ``unit``, reported as the hit's sort value."""
        return self.unit.from_meters(haversine_distance(self.center, document.centroid))


@dataclass(frozen=True)
class SearchRequest:
    """Predicate tree plus optional sort and paging."""

    query: Predicate = field(default_factory=MatchAll)
    sort: Optional[GeoDistanceSort] = None
    entity_type: Optional[EntityType] = EntityType.NODE
    size: Optional[int] = None
    offset: int = 0

    def __post_init__(self):
        if not isinstance(self.query, Predicate):
            raise InvalidQuery(f"Not a predicate: {self.query!r}")
        if self.sort is not None and not isinstance(self.sort, GeoDistanceSort):
            raise InvalidQuery(f"Unsupported sort: {self.sort!r}")
        if self.size is not None and self.size < 0:
            raise InvalidQuery(f"size must be >= 0, got {self.size}")
        if self.offset < 0:
            raise InvalidQuery(f"offset must be >= 0, got {self.offset}")

    def geo_fields(self) -> dict[str, str]:
        fields = dict(self.query.geo_fields())
        if self.sort is not None:
            fields[CENTROID_FIELD] = "geo_point"
        return fields
