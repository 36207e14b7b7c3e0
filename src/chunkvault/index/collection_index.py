"""
Per-collection index: an ordered id -> zone/size/version summary.

Entries keep insertion order; an update replaces the entry in place.
Linear scans are fine at tens to low hundreds of entries per collection.
"""

from typing import List

from chunkvault.core.contracts import ChunkMeta, IndexEntry
from chunkvault.storage.ledger import DataKey, LedgerStore, Namespace


class CollectionIndex:
    def __init__(self, ledger: LedgerStore):
        self.ledger = ledger

    def entries(self, collection: str) -> List[IndexEntry]:
        return self.ledger.get(DataKey.collection_index(collection), [])

    def upsert(self, collection: str, chunk_id: str, meta: ChunkMeta):
        """Replace the entry for chunk_id in place, or append it."""
        index = self.entries(collection)
        entry = IndexEntry(
            id=chunk_id,
            zone=meta.zone,
            compressed_size=meta.compressed_size,
            version=meta.version,
        )

        for i, existing in enumerate(index):
            if existing.id == chunk_id:
                index[i] = entry
                break
        else:
            index.append(entry)

        self.ledger.set(DataKey.collection_index(collection), index)

    def remove(self, collection: str, chunk_id: str):
        index = self.entries(collection)
        new_index = [entry for entry in index if entry.id != chunk_id]
        self.ledger.set(DataKey.collection_index(collection), new_index)

    def collections(self) -> List[str]:
        """Names of every collection that has an index list."""
        return [key.parts[0] for key in self.ledger.keys(Namespace.COLLECTION_INDEX)]
