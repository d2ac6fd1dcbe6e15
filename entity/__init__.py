"""Entity layer - OSM entities projected into search documents."""

from .builder import NodeDocumentBuilder
from .document import EntityType, NodeDocument

__all__ = [
    "EntityType",
    "NodeDocument",
    "NodeDocumentBuilder",
]
