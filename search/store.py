# search/store.py

"""SQLite-backed document index with near-real-time geo search."""

import asyncio
import threading
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional, Sequence

import aiosqlite

from core.exceptions import (
    GeoIndexException,
    IndexAlreadyExists,
    IndexNotFound,
    IndexTimeout,
    IndexUnavailable,
    InvalidDocument,
    InvalidQuery,
)
from core.logging import get_logger
from entity.document import EntityType, NodeDocument
from spatial.geometry import Envelope
from spatial.index import SpatialIndex

from .backend import GetResponse, IndexMapping, SearchBackend, SearchHit, SearchResponse
from .query import SHAPE_FIELD, SearchRequest

_NOT_INITIALIZED_ERROR = "Document store is not initialized"


@dataclass(frozen=True)
class _Entry:
    seq: int
    entity_type: EntityType
    doc_id: str
    document: NodeDocument


class _SearchableView:
    """Immutable snapshot of an index as of its last refresh.

    Searches run in worker threads, and R-tree queries on one view are
    serialized by a per-view lock. A search that outlives its timeout is not
    interrupted: its thread finishes in the background and the result is
    discarded.
    """

    def __init__(self, entries: list[_Entry]):
        # Entries arrive in seq (index) order
        self.entries = entries
        self._by_seq = {entry.seq: entry for entry in entries}
        self._lock = threading.Lock()
        self.shapes = SpatialIndex("shape")
        self.centroids = SpatialIndex("centroid")
        for entry in entries:
            self.shapes.insert(entry.seq, entry.document.shape)
            self.centroids.insert(entry.seq, Envelope.of_point(entry.document.centroid))

    def __len__(self) -> int:
        return len(self.entries)

    def search(self, request: SearchRequest) -> SearchResponse:
        box = request.query.candidate_box()
        if box is None:
            candidates = self.entries
        else:
            tree = self.shapes if box.field == SHAPE_FIELD else self.centroids
            with self._lock:
                keys = tree.intersection(box.envelope)
            candidates = sorted((self._by_seq[seq] for seq in keys), key=lambda entry: entry.seq)

        matched = [
            entry
            for entry in candidates
            if (request.entity_type is None or entry.entity_type == request.entity_type)
            and request.query.matches(entry.document)
        ]

        if request.sort is not None:
            keyed = [(request.sort.distance(entry.document), entry) for entry in matched]
            # list.sort is stable: equal distances keep index order
            keyed.sort(key=lambda pair: pair[0])
            hits = [
                SearchHit(entry.doc_id, entry.entity_type, entry.document, (distance,))
                for distance, entry in keyed
            ]
        else:
            hits = [SearchHit(entry.doc_id, entry.entity_type, entry.document) for entry in matched]

        end = None if request.size is None else request.offset + request.size
        return SearchResponse(hits=hits[request.offset:end], total=len(hits))


@dataclass
class _IndexState:
    mapping: IndexMapping
    shards: int
    replicas: int
    view: _SearchableView


class DocumentStore(SearchBackend):
    """Document index persisted with aiosqlite.

    Writes are durable immediately and visible to ``get`` at once; ``search``
    and ``count`` only see documents as of the last ``refresh``.
    """

    def __init__(self, db_path: str):
        self.db_path = db_path
        self._db: Optional[aiosqlite.Connection] = None
        self._indices: dict[str, _IndexState] = {}
        self.logger = get_logger(f"{__name__}.DocumentStore")

    async def initialize(self) -> None:
        """Open the database, create the schema and load existing indices."""
        try:
            self._db = await aiosqlite.connect(self.db_path)
            await self._db.execute(
                """
                CREATE TABLE IF NOT EXISTS indices (
                    name TEXT PRIMARY KEY,
                    shards INTEGER NOT NULL,
                    replicas INTEGER NOT NULL,
                    mapping TEXT NOT NULL,
                    created_at TEXT NOT NULL
                )
            """
            )
            await self._db.execute(
                """
                CREATE TABLE IF NOT EXISTS documents (
                    seq INTEGER PRIMARY KEY AUTOINCREMENT,
                    index_name TEXT NOT NULL,
                    entity_type TEXT NOT NULL,
                    doc_id TEXT NOT NULL,
                    source TEXT NOT NULL,
                    updated_at TEXT NOT NULL,
                    UNIQUE (index_name, entity_type, doc_id)
                )
            """
            )
            await self._db.commit()

            cursor = await self._db.execute("SELECT name, shards, replicas, mapping FROM indices")
            rows = await cursor.fetchall()
        except aiosqlite.Error as e:
            self.logger.error("store.initialize_failed", db_path=self.db_path, error=str(e))
            raise IndexUnavailable(f"Cannot open document store {self.db_path}: {e}") from e

        try:
            for name, shards, replicas, mapping in rows:
                self._indices[name] = _IndexState(
                    mapping=IndexMapping.parse(mapping),
                    shards=shards,
                    replicas=replicas,
                    view=_SearchableView([]),
                )
                await self.refresh(name)
        except GeoIndexException as e:
            self.logger.error("store.load_failed", db_path=self.db_path, error=str(e))
            await self.close()
            if isinstance(e, IndexUnavailable):
                raise
            raise IndexUnavailable(f"Cannot load indices from {self.db_path}: {e}") from e

        self.logger.info("store.initialized", db_path=self.db_path, indices=len(self._indices))

    async def close(self) -> None:
        """Close the database connection."""
        if self._db:
            await self._db.close()
            self._db = None
        self._indices.clear()

    def _require_db(self) -> aiosqlite.Connection:
        if not self._db:
            raise IndexUnavailable(_NOT_INITIALIZED_ERROR)
        return self._db

    def _require_index(self, name: str) -> _IndexState:
        self._require_db()
        state = self._indices.get(name)
        if state is None:
            raise IndexNotFound(f"No such index: {name}")
        return state

    # Admin

    async def create_index(
        self, name: str, shards: int, replicas: int, mapping: IndexMapping
    ) -> None:
        db = self._require_db()
        if name in self._indices:
            raise IndexAlreadyExists(f"Index already exists: {name}")

        try:
            await db.execute(
                "INSERT INTO indices (name, shards, replicas, mapping, created_at) VALUES (?, ?, ?, ?, ?)",
                (name, shards, replicas, mapping.to_json(), datetime.now(timezone.utc).isoformat()),
            )
            await db.commit()
        except aiosqlite.Error as e:
            await db.rollback()
            self.logger.error("index.create_failed", index=name, error=str(e))
            raise IndexUnavailable(f"Failed to create index {name}: {e}") from e

        self._indices[name] = _IndexState(
            mapping=mapping, shards=shards, replicas=replicas, view=_SearchableView([])
        )
        self.logger.info("index.created", index=name, shards=shards, replicas=replicas)

    async def delete_index(self, name: str) -> None:
        self._require_index(name)
        db = self._require_db()
        try:
            await db.execute("DELETE FROM documents WHERE index_name = ?", (name,))
            await db.execute("DELETE FROM indices WHERE name = ?", (name,))
            await db.commit()
        except aiosqlite.Error as e:
            await db.rollback()
            self.logger.error("index.delete_failed", index=name, error=str(e))
            raise IndexUnavailable(f"Failed to delete index {name}: {e}") from e

        del self._indices[name]
        self.logger.info("index.deleted", index=name)

    async def index_exists(self, name: str) -> bool:
        self._require_db()
        return name in self._indices

    async def get_mapping(self, name: str) -> IndexMapping:
        return self._require_index(name).mapping

    # Writes

    async def index_documents(self, index: str, documents: Sequence[NodeDocument]) -> int:
        """Upsert documents in one transaction.

        Args:
            index: Target index name
            documents: Documents to write; all are validated before any write

        Returns:
            Number of documents written

        Raises:
            InvalidDocument: If any item is not a NodeDocument
            IndexNotFound: If the index does not exist
            IndexUnavailable: If the batch cannot be persisted
        """
        for document in documents:
            if not isinstance(document, NodeDocument):
                raise InvalidDocument(f"Cannot index {type(document).__name__}, expected NodeDocument")
        self._require_index(index)
        if not documents:
            return 0

        db = self._require_db()
        now = datetime.now(timezone.utc).isoformat()
        try:
            await db.executemany(
                """
                INSERT INTO documents (index_name, entity_type, doc_id, source, updated_at)
                VALUES (?, ?, ?, ?, ?)
                ON CONFLICT (index_name, entity_type, doc_id)
                DO UPDATE SET source = excluded.source, updated_at = excluded.updated_at
            """,
                [
                    (index, d.entity_type.value, d.doc_id, d.to_json(), now)
                    for d in documents
                ],
            )
            await db.commit()
        except aiosqlite.Error as e:
            await db.rollback()
            self.logger.error(
                "documents.batch_index_failed",
                index=index,
                batch_size=len(documents),
                error=str(e),
            )
            raise IndexUnavailable(f"Failed to index batch of {len(documents)} documents: {e}") from e

        self.logger.info("documents.batch_indexed", index=index, batch_size=len(documents))
        return len(documents)

    async def refresh(self, index: str) -> None:
        """Make every committed document of ``index`` visible to search."""
        state = self._require_index(index)
        db = self._require_db()
        try:
            cursor = await db.execute(
                "SELECT seq, entity_type, doc_id, source FROM documents "
                "WHERE index_name = ? ORDER BY seq ASC",
                (index,),
            )
            rows = await cursor.fetchall()
        except aiosqlite.Error as e:
            self.logger.error("index.refresh_failed", index=index, error=str(e))
            raise IndexUnavailable(f"Failed to refresh index {index}: {e}") from e

        entries = [
            _Entry(
                seq=seq,
                entity_type=EntityType(entity_type),
                doc_id=doc_id,
                document=NodeDocument.from_source(doc_id, source),
            )
            for seq, entity_type, doc_id, source in rows
        ]
        # Swap in one assignment so concurrent searches see old or new, never a mix
        state.view = _SearchableView(entries)
        self.logger.debug("index.refreshed", index=index, documents=len(entries))

    async def get(self, index: str, entity_type: EntityType, doc_id: "int | str") -> GetResponse:
        self._require_index(index)
        db = self._require_db()
        entity_type = EntityType(entity_type)
        try:
            cursor = await db.execute(
                "SELECT source FROM documents WHERE index_name = ? AND entity_type = ? AND doc_id = ?",
                (index, entity_type.value, str(doc_id)),
            )
            row = await cursor.fetchone()
        except aiosqlite.Error as e:
            raise IndexUnavailable(f"Failed to get {entity_type.value}/{doc_id}: {e}") from e

        return GetResponse(
            index=index,
            entity_type=entity_type,
            id=str(doc_id),
            exists=row is not None,
            source_as_string=row[0] if row else None,
        )

    async def delete(self, index: str, entity_type: EntityType, doc_id: "int | str") -> bool:
        self._require_index(index)
        db = self._require_db()
        entity_type = EntityType(entity_type)
        try:
            cursor = await db.execute(
                "DELETE FROM documents WHERE index_name = ? AND entity_type = ? AND doc_id = ?",
                (index, entity_type.value, str(doc_id)),
            )
            await db.commit()
        except aiosqlite.Error as e:
            await db.rollback()
            raise IndexUnavailable(f"Failed to delete {entity_type.value}/{doc_id}: {e}") from e

        deleted = cursor.rowcount > 0
        self.logger.debug("document.deleted", index=index, doc_id=str(doc_id), deleted=deleted)
        return deleted

    # Reads

    async def count(self, index: str) -> int:
        return len(self._require_index(index).view)

    async def search(
        self, index: str, request: SearchRequest, timeout: Optional[float] = None
    ) -> SearchResponse:
        """Run a search against the last refreshed view of ``index``.

        Raises:
            IndexNotFound: If the index does not exist
            InvalidQuery: If the request uses geo fields the mapping lacks
            IndexTimeout: If the search exceeds ``timeout`` seconds
        """
        state = self._require_index(index)
        for name, required in request.geo_fields().items():
            actual = state.mapping.field_type(name)
            if actual != required:
                raise InvalidQuery(
                    f"Field {name!r} is mapped as {actual!r} in index {index}, expected {required!r}"
                )

        view = state.view
        try:
            response = await asyncio.wait_for(asyncio.to_thread(view.search, request), timeout)
        except asyncio.TimeoutError as e:
            self.logger.warning("search.timed_out", index=index, timeout=timeout)
            raise IndexTimeout(f"Search on {index} exceeded {timeout}s") from e

        self.logger.debug(
            "search.completed",
            index=index,
            total=response.total,
            returned=len(response.hits),
        )
        return response
