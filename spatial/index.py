# spatial/index.py

"""Spatial indexing using R-tree for envelope intersection queries."""

import rtree.index

from core.logging import get_logger

from .geometry import Envelope


class SpatialIndex:
    """R-tree based index of envelopes keyed by integer id.

    Points are stored as zero-extent boxes. Queries return keys only;
    callers keep their own key -> object lookup.
    """

    def __init__(self, name: str = "default"):
        """Initialize spatial index with a 2D R-tree backend."""
        self.name = name
        self._rtree = self._new_rtree()

        # Track entry envelopes for removal
        self._entries: dict[int, Envelope] = {}

        self.logger = get_logger(f"{__name__}.SpatialIndex")

    @staticmethod
    def _new_rtree() -> rtree.index.Index:
        properties = rtree.index.Property()
        properties.dimension = 2
        return rtree.index.Index(properties=properties)

    def insert(self, key: int, envelope: Envelope) -> None:
        """Insert an envelope, replacing any previous entry with the same key.

        Args:
            key: Integer entry key
            envelope: Bounding box to index
        """
        if key in self._entries:
            self.remove(key)

        self._rtree.insert(key, envelope.to_rtree())
        self._entries[key] = envelope

    def remove(self, key: int) -> None:
        """Remove an entry; unknown keys are ignored."""
        envelope = self._entries.pop(key, None)
        if envelope is None:
            return
        self._rtree.delete(key, envelope.to_rtree())

    def intersection(self, envelope: Envelope) -> list[int]:
        """Find keys whose envelope intersects the query envelope.

        Args:
            envelope: Query bounding box

        Returns:
            Keys of candidate entries, in no particular order
        """
        return list(self._rtree.intersection(envelope.to_rtree()))

    def get(self, key: int) -> Envelope | None:
        return self._entries.get(key)

    def get_entry_count(self) -> int:
        """Get total number of indexed entries."""
        return len(self._entries)

    def clear(self) -> None:
        """Clear all entries from index."""
        self._rtree = self._new_rtree()
        self._entries.clear()

        self.logger.debug("spatial_index.cleared", name=self.name)
