# core/exceptions.py

"""Exception hierarchy for the OSM geospatial index."""


class GeoIndexException(Exception):
    """Base exception for all geo index errors."""

    pass


# Geometry Exceptions
class GeometryException(GeoIndexException):
    """Base exception for coordinate and shape errors."""

    pass


class InvalidGeometry(GeometryException):
    """Raised when a coordinate, shape or distance is malformed or out of range."""

    pass


# Document Exceptions
class DocumentException(GeoIndexException):
    """Base exception for document construction."""

    pass


class MissingRequiredField(DocumentException):
    """Raised when a document is built without all required fields."""

    def __init__(self, fields: list[str]):
        self.fields = list(fields)
        super().__init__(f"Missing required field(s): {', '.join(self.fields)}")


class DuplicateTagKey(DocumentException):
    """Raised when a tag key is added twice to the same document."""

    def __init__(self, key: str):
        self.key = key
        super().__init__(f"Tag key already set: {key!r}")


class InvalidDocument(DocumentException):
    """Raised when a document field has the wrong type or value."""

    pass


# Query Exceptions
class QueryException(GeoIndexException):
    """Base exception for query construction."""

    pass


class InvalidQuery(QueryException):
    """Raised when a query does not fit the index mapping or is malformed."""

    pass


# Index Exceptions
class IndexException(GeoIndexException):
    """Base exception for index store operations."""

    pass


class IndexUnavailable(IndexException):
    """Raised when the index store cannot serve a request."""

    pass


class IndexTimeout(IndexException):
    """Raised when an index store call exceeds its timeout."""

    pass


class IndexNotFound(IndexException):
    """Raised when the requested index does not exist."""

    pass


class IndexAlreadyExists(IndexException):
    """Raised when creating an index whose name is taken."""

    pass


class InvalidMapping(IndexException):
    """Raised when an index mapping schema is malformed."""

    pass
