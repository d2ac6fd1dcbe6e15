# entity/builder.py

"""Builder for node documents."""

from typing import Any, Mapping, Optional

from core.exceptions import DuplicateTagKey, InvalidDocument, MissingRequiredField
from spatial.geometry import GeoPoint
from spatial.projector import SpatialProjector, default_projector

from .document import NodeDocument


class NodeDocumentBuilder:
    """Accumulates node fields and emits an immutable NodeDocument.

    Example:
        >>> NodeDocumentBuilder.create().id(1854801716) \\
        ...     .location(48.675652, 2.384955) \\
        ...     .add_tag("highway", "traffic_signals").build()

    Adding a tag key twice raises DuplicateTagKey; tags are never overwritten.
    """

    def __init__(self, projector: Optional[SpatialProjector] = None):
        self._projector = projector or default_projector
        self._id: Optional[int] = None
        self._location: Optional[GeoPoint] = None
        self._tags: dict[str, str] = {}

    @classmethod
    def create(cls, projector: Optional[SpatialProjector] = None) -> "NodeDocumentBuilder":
        return cls(projector)

    def id(self, node_id: int) -> "NodeDocumentBuilder":
        """Set the OSM node id."""
        if isinstance(node_id, bool) or not isinstance(node_id, int):
            raise InvalidDocument(f"Node id must be an integer, got {node_id!r}")
        if node_id < 0:
            raise InvalidDocument(f"Node id must be >= 0, got {node_id}")
        self._id = node_id
        return self

    def location(self, lat: float, lon: float) -> "NodeDocumentBuilder":
        """Set the node coordinate (validated immediately)."""
        self._location = GeoPoint(lat=lat, lon=lon)
        return self

    def add_tag(self, key: str, value: str) -> "NodeDocumentBuilder":
        """Add one tag.

        Raises:
            DuplicateTagKey: If ``key`` was already added
            InvalidDocument: If key or value is not a string
        """
        if not isinstance(key, str) or not isinstance(value, str):
            raise InvalidDocument(f"Tag key and value must be strings, got {key!r}={value!r}")
        if key in self._tags:
            raise DuplicateTagKey(key)
        self._tags[key] = value
        return self

    def add_tags(self, tags: Mapping[str, Any]) -> "NodeDocumentBuilder":
        """Add several tags; stops at the first invalid or duplicate key."""
        for key, value in tags.items():
            self.add_tag(key, value)
        return self

    def build(self) -> NodeDocument:
        """Snapshot the builder into an immutable document.

        Raises:
            MissingRequiredField: If id or location was never set
        """
        missing = []
        if self._id is None:
            missing.append("id")
        if self._location is None:
            missing.append("location")
        if missing:
            raise MissingRequiredField(missing)

        projection = self._projector.project(self._location)
        return NodeDocument(
            id=self._id,
            centroid=projection.point,
            shape=projection.shape,
            tags=self._tags,
        )
