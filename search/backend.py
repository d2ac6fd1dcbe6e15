# search/backend.py

"""Interface of the document index the geo layer writes to and queries."""

import json
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Optional, Sequence

from core.exceptions import InvalidMapping
from entity.document import EntityType, NodeDocument

from .query import SearchRequest


@dataclass(frozen=True)
class IndexMapping:
    """Field mapping schema of an index.

    Only the ``properties`` object is interpreted; field types other than
    the geo types are accepted and ignored.
    """

    properties: dict[str, dict[str, Any]] = field(default_factory=dict)

    @classmethod
    def parse(cls, mapping: "str | dict[str, Any] | IndexMapping | None") -> "IndexMapping":
        """Parse a mapping given as JSON text or a dict.

        Raises:
            InvalidMapping: If the mapping is not an object with valid properties
        """
        if mapping is None:
            return cls()
        if isinstance(mapping, IndexMapping):
            return mapping
        if isinstance(mapping, str):
            try:
                mapping = json.loads(mapping)
            except json.JSONDecodeError as e:
                raise InvalidMapping(f"Mapping is not valid JSON: {e}") from e
        if not isinstance(mapping, dict):
            raise InvalidMapping("Mapping must be a JSON object")

        properties = mapping.get("properties", {})
        if not isinstance(properties, dict):
            raise InvalidMapping("Mapping 'properties' must be an object")
        for name, definition in properties.items():
            if not isinstance(definition, dict) or "type" not in definition:
                raise InvalidMapping(f"Field {name!r} has no type")
        return cls(properties=dict(properties))

    def field_type(self, name: str) -> Optional[str]:
        definition = self.properties.get(name)
        return definition.get("type") if definition else None

    def to_dict(self) -> dict[str, Any]:
        return {"properties": self.properties}

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), separators=(",", ":"))


@dataclass(frozen=True)
class GetResponse:
    """Result of a realtime get by id."""

    index: str
    entity_type: EntityType
    id: str
    exists: bool
    source_as_string: Optional[str] = None

    @property
    def source(self) -> Optional[dict[str, Any]]:
        return json.loads(self.source_as_string) if self.source_as_string else None

    def to_document(self) -> Optional[NodeDocument]:
        if not self.exists:
            return None
        return NodeDocument.from_source(self.id, self.source_as_string)


@dataclass(frozen=True)
class SearchHit:
    """One matching document; ``sort`` holds the sort value when sorted."""

    id: str
    entity_type: EntityType
    document: NodeDocument
    sort: tuple[float, ...] = ()


@dataclass(frozen=True)
class SearchResponse:
    """Ordered hits of one search call.

    ``total`` counts all matches before paging.
    """

    hits: list[SearchHit]
    total: int

    def __len__(self) -> int:
        return len(self.hits)

    @property
    def ids(self) -> list[str]:
        return [hit.id for hit in self.hits]


class SearchBackend(ABC):
    """Near-real-time document index with geo field support.

    Written documents become visible to ``search`` only after ``refresh``;
    ``get`` is realtime. Failures surface as IndexException subclasses.
    """

    @abstractmethod
    async def create_index(
        self, name: str, shards: int, replicas: int, mapping: IndexMapping
    ) -> None: ...

    @abstractmethod
    async def delete_index(self, name: str) -> None: ...

    @abstractmethod
    async def index_exists(self, name: str) -> bool: ...

    @abstractmethod
    async def get_mapping(self, name: str) -> IndexMapping: ...

    @abstractmethod
    async def index_documents(self, index: str, documents: Sequence[NodeDocument]) -> int:
        """Upsert documents by id; returns the number written."""

    @abstractmethod
    async def refresh(self, index: str) -> None: ...

    @abstractmethod
    async def get(self, index: str, entity_type: EntityType, doc_id: "int | str") -> GetResponse: ...

    @abstractmethod
    async def delete(self, index: str, entity_type: EntityType, doc_id: "int | str") -> bool: ...

    @abstractmethod
    async def count(self, index: str) -> int:
        """Number of searchable (refreshed) documents."""

    @abstractmethod
    async def search(
        self, index: str, request: SearchRequest, timeout: Optional[float] = None
    ) -> SearchResponse: ...
