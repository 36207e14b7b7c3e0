"""
Hot/cold zone migration.
"""

from chunkvault.core.contracts import StorageZone
from chunkvault.index.collection_index import CollectionIndex
from chunkvault.storage.chunk_store import ChunkStore
from chunkvault.storage.stats import StatsAggregator


class ZoneManager:
    """Reclassifies a chunk's metadata between the Hot and Cold zones."""

    def __init__(self, chunk_store: ChunkStore, collection_index: CollectionIndex, stats: StatsAggregator):
        self.chunk_store = chunk_store
        self.collection_index = collection_index
        self.stats = stats

    def migrate(self, collection: str, chunk_id: str, target: StorageZone, now: int) -> bool:
        """
        Move a chunk to `target`.

        Missing chunks and chunks already in `target` are left untouched,
        which makes repeated migrations idempotent.

        Returns:
            True if the zone changed
        """
        meta = self.chunk_store.read_meta(collection, chunk_id)
        if meta is None or meta.zone == target:
            return False

        meta.zone = target
        meta.updated_at = now
        self.chunk_store.save_meta(collection, chunk_id, meta)
        self.collection_index.upsert(collection, chunk_id, meta)
        self.stats.move_zone(to_cold=target == StorageZone.COLD)
        return True
