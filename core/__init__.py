"""Core components - configuration, logging and errors."""

from .config import GeoIndexConfig, config
from .exceptions import (
    DocumentException,
    DuplicateTagKey,
    GeoIndexException,
    GeometryException,
    IndexAlreadyExists,
    IndexException,
    IndexNotFound,
    IndexTimeout,
    IndexUnavailable,
    InvalidDocument,
    InvalidGeometry,
    InvalidMapping,
    InvalidQuery,
    MissingRequiredField,
    QueryException,
)
from .logging import configure_logging, get_logger

__all__ = [
    # Configuration
    "GeoIndexConfig",
    "config",
    "configure_logging",
    "get_logger",
    # Exceptions
    "GeoIndexException",
    "GeometryException",
    "InvalidGeometry",
    "DocumentException",
    "MissingRequiredField",
    "DuplicateTagKey",
    "InvalidDocument",
    "QueryException",
    "InvalidQuery",
    "IndexException",
    "IndexUnavailable",
    "IndexTimeout",
    "IndexNotFound",
    "IndexAlreadyExists",
    "InvalidMapping",
]
