# search/evaluator.py

"""Spatial query evaluation against a search backend."""

from typing import Optional, Union

from core.config import config
from core.logging import get_logger
from entity.document import EntityType
from spatial.geometry import DistanceUnit, Envelope, GeoPoint

from .backend import SearchBackend, SearchResponse
from .query import (
    And,
    GeoDistanceFilter,
    GeoDistanceSort,
    GeoShapeFilter,
    MatchAll,
    Predicate,
    SearchRequest,
)
from .retry import call_with_retries

Center = Union[GeoPoint, tuple[float, float]]


def _combine(base: Optional[Predicate], clause: Predicate) -> Predicate:
    if base is None or isinstance(base, MatchAll):
        return clause
    return And(base, clause)


class SpatialQueryEvaluator:
    """Builds spatial predicates and runs them on one index.

    Predicates are validated while the request is built, so malformed
    coordinates and non-positive distances never reach the backend.
    Backend errors propagate unchanged; the timeout is passed through as is.
    """

    def __init__(
        self,
        backend: SearchBackend,
        index_name: Optional[str] = None,
        retries: Optional[int] = None,
    ):
        self.backend = backend
        self.index_name = index_name or config.default_index
        self.retries = config.read_retries if retries is None else retries
        self.logger = get_logger(f"{__name__}.SpatialQueryEvaluator")

    async def search(self, request: SearchRequest, timeout: Optional[float] = None) -> SearchResponse:
        """Run a prepared request.

        Args:
            request: Predicate tree with optional sort and paging
            timeout: Seconds before the backend gives up, None to wait

        Returns:
            Ordered search response
        """
        self.logger.debug("evaluator.search", index=self.index_name, query=repr(request.query))
        return await call_with_retries(
            "search",
            lambda: self.backend.search(self.index_name, request, timeout=timeout),
            self.retries,
        )

    async def intersecting(
        self,
        shape: Envelope,
        base: Optional[Predicate] = None,
        entity_type: Optional[EntityType] = EntityType.NODE,
        size: Optional[int] = None,
        timeout: Optional[float] = None,
    ) -> SearchResponse:
        """Documents whose stored shape intersects ``shape``."""
        request = SearchRequest(
            query=_combine(base, GeoShapeFilter(shape)),
            entity_type=entity_type,
            size=size,
        )
        return await self.search(request, timeout=timeout)

    async def within(
        self,
        center: Center,
        distance: float,
        unit: Union[DistanceUnit, str] = DistanceUnit.METERS,
        base: Optional[Predicate] = None,
        sort: bool = False,
        entity_type: Optional[EntityType] = EntityType.NODE,
        size: Optional[int] = None,
        timeout: Optional[float] = None,
    ) -> SearchResponse:
        """Documents whose centroid is within ``distance`` of ``center``.

        Args:
            center: GeoPoint or (lat, lon)
            distance: Positive radius in ``unit``
            unit: Distance unit of ``distance`` and of the sort values
            base: Predicate combined with the radius filter
            sort: Order hits nearest first
            entity_type: Restrict to one entity type, None for all
            size: Maximum number of hits
            timeout: Backend timeout in seconds

        Raises:
            InvalidGeometry: If center or distance is invalid
        """
        radius = GeoDistanceFilter(center=center, distance=distance, unit=unit)
        request = SearchRequest(
            query=_combine(base, radius),
            sort=GeoDistanceSort(center=radius.center, unit=radius.unit) if sort else None,
            entity_type=entity_type,
            size=size,
        )
        return await self.search(request, timeout=timeout)

    async def nearest(
        self,
        center: Center,
        unit: Union[DistanceUnit, str] = DistanceUnit.METERS,
        base: Optional[Predicate] = None,
        entity_type: Optional[EntityType] = EntityType.NODE,
        size: Optional[int] = None,
        timeout: Optional[float] = None,
    ) -> SearchResponse:
        """Matching documents ordered by ascending distance from ``center``."""
        request = SearchRequest(
            query=base or MatchAll(),
            sort=GeoDistanceSort(center=center, unit=unit),
            entity_type=entity_type,
            size=size,
        )
        return await self.search(request, timeout=timeout)
