# search/admin.py

"""Index lifecycle operations."""

from typing import Any, Optional

from core.config import config
from core.exceptions import InvalidMapping
from core.logging import get_logger

from .backend import IndexMapping, SearchBackend

# Mapping every node index needs for shape and distance queries
NODE_MAPPING: dict[str, Any] = {
    "properties": {
        "centroid": {"type": "geo_point"},
        "shape": {"type": "geo_shape"},
    }
}


class IndexAdminService:
    """Creates and drops indices on a search backend."""

    def __init__(self, backend: SearchBackend):
        self.backend = backend
        self.logger = get_logger(f"{__name__}.IndexAdminService")

    async def create_index(
        self,
        name: str,
        shards: Optional[int] = None,
        replicas: Optional[int] = None,
        mapping: "str | dict[str, Any] | IndexMapping | None" = None,
    ) -> IndexMapping:
        """Create an index.

        Args:
            name: Index name
            shards: Primary shard count (config default if None)
            replicas: Replica count (config default if None)
            mapping: Mapping schema as JSON text or dict (NODE_MAPPING if None)

        Returns:
            The parsed mapping the index was created with

        Raises:
            InvalidMapping: If the mapping or shard settings are invalid
            IndexAlreadyExists: If the index exists
        """
        shards = config.default_shards if shards is None else shards
        replicas = config.default_replicas if replicas is None else replicas
        if not name or not isinstance(name, str):
            raise InvalidMapping(f"Index name must be a non-empty string, got {name!r}")
        if shards < 1:
            raise InvalidMapping(f"shards must be >= 1, got {shards}")
        if replicas < 0:
            raise InvalidMapping(f"replicas must be >= 0, got {replicas}")

        parsed = IndexMapping.parse(NODE_MAPPING if mapping is None else mapping)
        await self.backend.create_index(name, shards, replicas, parsed)

        self.logger.info("index_admin.created", index=name, fields=sorted(parsed.properties))
        return parsed

    async def delete_index(self, name: str) -> None:
        await self.backend.delete_index(name)

    async def index_exists(self, name: str) -> bool:
        return await self.backend.index_exists(name)
