# search/writer.py

"""Index-write interface used to submit documents."""

from typing import Optional

from core.config import config
from core.exceptions import InvalidDocument
from core.logging import get_logger
from entity.document import NodeDocument

from .backend import SearchBackend
from .retry import call_with_retries


class IndexWriter:
    """Submits documents to a backend and triggers refreshes.

    Store errors propagate unchanged; they are only retried when
    ``retries`` is above zero.
    """

    def __init__(self, backend: SearchBackend, retries: Optional[int] = None):
        self.backend = backend
        self.retries = config.write_retries if retries is None else retries
        self.logger = get_logger(f"{__name__}.IndexWriter")

    async def index(self, index: str, *documents: NodeDocument) -> int:
        """Index one or more documents as a single batch.

        Args:
            index: Target index name
            documents: Documents to upsert by id

        Returns:
            Number of documents written

        Raises:
            InvalidDocument: If any item is not a NodeDocument (nothing is written)
        """
        for document in documents:
            if not isinstance(document, NodeDocument):
                raise InvalidDocument(f"Cannot index {type(document).__name__}, expected NodeDocument")
        if not documents:
            return 0

        batch = list(documents)
        written = await call_with_retries(
            "index_documents",
            lambda: self.backend.index_documents(index, batch),
            self.retries,
        )
        self.logger.debug("writer.indexed", index=index, batch_size=written)
        return written

    async def refresh(self, index: str) -> None:
        """Make recently written documents visible to search."""
        await call_with_retries("refresh", lambda: self.backend.refresh(index), self.retries)
