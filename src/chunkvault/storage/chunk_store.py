"""
Chunk store for chunkvault.

Holds opaque payloads and their metadata records in the ledger.
"""

from typing import Optional

from chunkvault.core.contracts import ChunkMeta, CompressionAlgo, Config, StorageZone
from chunkvault.core.hashing import checksum
from chunkvault.storage.ledger import DataKey, LedgerStore


class ChunkStore:
    """
    Payload + metadata store keyed by (collection, chunk_id).

    Layout:
    - Chunk(collection, id): payload bytes, stored as given by the caller
    - Meta(collection, id): ChunkMeta
    """

    def __init__(self, ledger: LedgerStore, config: Config):
        """
        Initialize chunk store.

        Args:
            ledger: Ledger substrate
            config: Configuration with metadata heuristics
        """
        self.ledger = ledger
        self.config = config

    def build_meta(
        self,
        data: bytes,
        zone: StorageZone,
        compression: CompressionAlgo,
        now: int,
    ) -> ChunkMeta:
        """Build fresh version-1 metadata for a payload."""
        data_len = len(data)
        return ChunkMeta(
            compression=compression,
            original_size=data_len * self.config.original_size_factor,  # estimate, not measured
            compressed_size=data_len,
            checksum=checksum(data),
            zone=zone,
            version=1,
            created_at=now,
            updated_at=now,
        )

    def write_chunk(
        self,
        collection: str,
        chunk_id: str,
        data: bytes,
        zone: StorageZone,
        compression: CompressionAlgo,
        now: int,
    ) -> ChunkMeta:
        """
        Write payload and reset its metadata (full overwrite).

        Args:
            collection: Collection name
            chunk_id: Chunk id
            data: Payload, already encoded by the caller
            zone: Target zone
            compression: Encoding tag recorded in metadata
            now: Logical timestamp

        Returns:
            The metadata that was stored
        """
        meta = self.build_meta(data, zone, compression, now)
        self.ledger.set(DataKey.chunk(collection, chunk_id), bytes(data))
        self.ledger.set(DataKey.meta(collection, chunk_id), meta)
        return meta

    def read_chunk(self, collection: str, chunk_id: str) -> bytes:
        """Return the payload, or b"" if the chunk does not exist."""
        return self.ledger.get(DataKey.chunk(collection, chunk_id), b"")

    def read_meta(self, collection: str, chunk_id: str) -> Optional[ChunkMeta]:
        return self.ledger.get(DataKey.meta(collection, chunk_id))

    def save_meta(self, collection: str, chunk_id: str, meta: ChunkMeta):
        self.ledger.set(DataKey.meta(collection, chunk_id), meta)

    def exists(self, collection: str, chunk_id: str) -> bool:
        return self.ledger.has(DataKey.chunk(collection, chunk_id))

    def remove_chunk(self, collection: str, chunk_id: str) -> Optional[ChunkMeta]:
        """
        Remove payload and metadata.

        Returns:
            The metadata that existed before removal, or None
        """
        meta = self.read_meta(collection, chunk_id)
        self.ledger.remove(DataKey.chunk(collection, chunk_id))
        self.ledger.remove(DataKey.meta(collection, chunk_id))
        return meta

    def verify_chunk(self, collection: str, chunk_id: str) -> bool:
        """Recompute the payload checksum and compare it with the metadata."""
        meta = self.read_meta(collection, chunk_id)
        if meta is None or not self.exists(collection, chunk_id):
            return False
        data = self.read_chunk(collection, chunk_id)
        return len(data) == meta.compressed_size and checksum(data) == meta.checksum
