"""Search layer - document index, admin, writes and spatial queries."""

from .admin import NODE_MAPPING, IndexAdminService
from .backend import (
    GetResponse,
    IndexMapping,
    SearchBackend,
    SearchHit,
    SearchResponse,
)
from .evaluator import SpatialQueryEvaluator
from .query import (
    And,
    GeoDistanceFilter,
    GeoDistanceSort,
    GeoShapeFilter,
    MatchAll,
    Predicate,
    SearchRequest,
    TagTerm,
)
from .store import DocumentStore
from .writer import IndexWriter

__all__ = [
    # Backend
    "SearchBackend",
    "DocumentStore",
    "IndexMapping",
    "GetResponse",
    "SearchHit",
    "SearchResponse",
    # Services
    "IndexAdminService",
    "IndexWriter",
    "SpatialQueryEvaluator",
    "NODE_MAPPING",
    # Query
    "Predicate",
    "MatchAll",
    "TagTerm",
    "GeoShapeFilter",
    "GeoDistanceFilter",
    "GeoDistanceSort",
    "And",
    "SearchRequest",
]
