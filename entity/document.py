# entity/document.py

"""Immutable search documents for OSM entities."""

import json
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, Mapping

from core.exceptions import InvalidDocument, InvalidGeometry
from spatial.geometry import Envelope, GeoPoint
from spatial.projector import default_projector

if TYPE_CHECKING:
    from .builder import NodeDocumentBuilder


class EntityType(str, Enum):
    """OSM entity types that can be indexed."""

    NODE = "node"

    @property
    def index_name(self) -> str:
        """Document type name inside an index."""
        return self.value


@dataclass(frozen=True, eq=True)
class NodeDocument:
    """Indexed form of an OSM node.

    ``shape`` is the envelope the store indexes for intersection queries.
    The serialized ``shape`` is always the generating point; the envelope is
    re-derived from it by the projector when the document is read back.
    """

    id: int
    centroid: GeoPoint
    shape: Envelope
    tags: Mapping[str, str]

    entity_type = EntityType.NODE

    def __post_init__(self):
        # Freeze a private copy so callers cannot mutate tags afterwards
        object.__setattr__(self, "tags", MappingProxyType(dict(self.tags)))

    def __hash__(self) -> int:
        return hash((self.id, self.centroid, self.shape, tuple(sorted(self.tags.items()))))

    @classmethod
    def builder(cls) -> "NodeDocumentBuilder":
        from .builder import NodeDocumentBuilder

        return NodeDocumentBuilder.create()

    @property
    def doc_id(self) -> str:
        """Identifier under which the store keeps this document."""
        return str(self.id)

    def to_source(self) -> dict[str, Any]:
        """Build the source object sent to the index."""
        return {
            "centroid": self.centroid.to_lon_lat(),
            "shape": {"type": "point", "coordinates": self.centroid.to_lon_lat()},
            "tags": dict(self.tags),
        }

    def to_json(self) -> str:
        """Serialize to the compact JSON stored by the index."""
        return json.dumps(self.to_source(), separators=(",", ":"), ensure_ascii=False)

    @classmethod
    def from_source(cls, doc_id: int | str, source: Mapping[str, Any] | str) -> "NodeDocument":
        """Rebuild a document from its stored source.

        Args:
            doc_id: Document identifier
            source: Source object or its JSON string

        Returns:
            Equivalent NodeDocument

        Raises:
            InvalidDocument: If the source is missing fields or malformed
            InvalidGeometry: If stored coordinates are out of range
        """
        if isinstance(source, str):
            try:
                source = json.loads(source)
            except json.JSONDecodeError as e:
                raise InvalidDocument(f"Document {doc_id} source is not valid JSON: {e}") from e
        if not isinstance(source, Mapping):
            raise InvalidDocument(f"Document {doc_id} source must be an object")

        try:
            node_id = int(doc_id)
        except (TypeError, ValueError) as e:
            raise InvalidDocument(f"Document id must be numeric, got {doc_id!r}") from e

        if "centroid" not in source:
            raise InvalidDocument(f"Document {doc_id} has no centroid")
        centroid = GeoPoint.from_lon_lat(source["centroid"])

        shape_source = source.get("shape")
        if shape_source is None:
            shape_point = centroid
        else:
            stored = Envelope.from_geojson(shape_source)
            if not stored.is_point:
                raise InvalidGeometry(f"Document {doc_id} shape must be a point geometry")
            shape_point = stored.center

        tags = source.get("tags") or {}
        if not isinstance(tags, Mapping):
            raise InvalidDocument(f"Document {doc_id} tags must be an object")

        return cls(
            id=node_id,
            centroid=centroid,
            shape=default_projector.project(shape_point).shape,
            tags={str(k): str(v) for k, v in tags.items()},
        )
