"""
Append-only delta log: opaque patch blobs per chunk key.

Patches are never applied to the stored payload; rebuilding a current value
from base payload + patches is the reader's job.
"""

from typing import List

from chunkvault.storage.ledger import DataKey, LedgerStore


class DeltaLog:
    def __init__(self, ledger: LedgerStore):
        self.ledger = ledger

    def append(self, collection: str, chunk_id: str, patch: bytes) -> int:
        """Append a patch and return the new log length."""
        key = DataKey.delta_log(collection, chunk_id)
        deltas: List[bytes] = self.ledger.get(key, [])
        deltas.append(bytes(patch))
        self.ledger.set(key, deltas)
        return len(deltas)

    def entries(self, collection: str, chunk_id: str) -> List[bytes]:
        return self.ledger.get(DataKey.delta_log(collection, chunk_id), [])

    def clear(self, collection: str, chunk_id: str):
        self.ledger.remove(DataKey.delta_log(collection, chunk_id))
