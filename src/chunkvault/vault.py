"""
Vault: the public facade of chunkvault.

Every mutating call is authorized, then applied inside one ledger
transaction in a fixed order: chunk store, Bloom filter, collection index,
stats. Reads never fail on missing data.
"""

import logging
import threading
import time
from pathlib import Path
from typing import Callable, List, Optional, Sequence

from chunkvault.core.auth import Authorizer, CallerAuthorizer
from chunkvault.core.contracts import (
    ChunkMeta,
    CompressionAlgo,
    Config,
    IndexEntry,
    StorageStats,
    StorageZone,
)
from chunkvault.core.errors import AlreadyInitialized, NotFound, NotInitialized, SizeMismatch
from chunkvault.core.events import log_event
from chunkvault.index.bloom import BloomIndex
from chunkvault.index.collection_index import CollectionIndex
from chunkvault.storage.chunk_store import ChunkStore
from chunkvault.storage.delta_log import DeltaLog
from chunkvault.storage.file_ledger import FileLedger
from chunkvault.storage.ledger import DataKey, LedgerStore, MemoryLedger, Namespace
from chunkvault.storage.stats import StatsAggregator
from chunkvault.storage.zones import ZoneManager

logger = logging.getLogger(__name__)

ADMIN_KEY = DataKey.singleton(Namespace.ADMIN)


def _wall_clock() -> int:
    return int(time.time())


class Vault:
    """
    Compressed key-value store with Bloom existence checks, hot/cold zones,
    delta logging and running stats.
    """

    def __init__(
        self,
        ledger: Optional[LedgerStore] = None,
        config: Optional[Config] = None,
        authorizer: Optional[Authorizer] = None,
        clock: Optional[Callable[[], int]] = None,
    ):
        """
        Initialize vault.

        Args:
            ledger: Ledger substrate (default: fresh MemoryLedger)
            config: Configuration (default: Config())
            authorizer: Admin check strategy (default: CallerAuthorizer)
            clock: Source of logical timestamps (default: unix seconds)
        """
        self.ledger = ledger if ledger is not None else MemoryLedger()
        self.config = config or Config()
        self.authorizer = authorizer or CallerAuthorizer()
        self.clock = clock or _wall_clock

        self.chunk_store = ChunkStore(self.ledger, self.config)
        self.bloom = BloomIndex(self.ledger, self.config)
        self.collection_index = CollectionIndex(self.ledger)
        self.delta_log = DeltaLog(self.ledger)
        self.stats = StatsAggregator(self.ledger, self.config)
        self.zones = ZoneManager(self.chunk_store, self.collection_index, self.stats)

        # One writer at a time; the ledger transaction makes each call atomic
        self._lock = threading.RLock()

    # ── Initialization ─────────────────────────────────────────────

    def initialize(self, admin: str):
        """Set the administrator, an empty Bloom filter and zeroed stats."""
        with self._lock, self.ledger.transaction():
            if self.ledger.has(ADMIN_KEY):
                raise AlreadyInitialized()
            self.ledger.set(ADMIN_KEY, admin)
            self.bloom.initialize()
            self.stats.initialize()
        log_event(logger, "vault.init", admin=admin, bloom_hash=self.config.bloom_hash)

    @property
    def is_initialized(self) -> bool:
        return self.ledger.has(ADMIN_KEY)

    def _require_admin(self, caller: Optional[str]):
        admin = self.ledger.get(ADMIN_KEY)
        if admin is None:
            raise NotInitialized()
        self.authorizer.require_auth(admin, caller)

    # ── Writes ─────────────────────────────────────────────────────

    def _write(
        self,
        collection: str,
        chunk_id: str,
        data: bytes,
        zone: StorageZone,
        compression: Optional[CompressionAlgo],
        now: int,
    ) -> ChunkMeta:
        previous = self.chunk_store.read_meta(collection, chunk_id)
        meta = self.chunk_store.write_chunk(
            collection,
            chunk_id,
            data,
            zone,
            compression or self.config.default_compression,
            now,
        )
        self.bloom.add(collection, chunk_id)
        self.collection_index.upsert(collection, chunk_id, meta)
        if previous is not None:
            # Overwrite: retract the old contribution before adding the new one
            self.stats.record(previous.compressed_size, previous.original_size, False, previous.is_hot)
        self.stats.record(meta.compressed_size, meta.original_size, True, meta.is_hot)
        return meta

    def put(
        self,
        collection: str,
        chunk_id: str,
        data: bytes,
        caller: Optional[str] = None,
        compression: Optional[CompressionAlgo] = None,
    ) -> ChunkMeta:
        """
        Store a pre-compressed payload in the Hot zone (full overwrite).

        Args:
            collection: Collection name
            chunk_id: Chunk id
            data: Payload as encoded by the caller
            caller: Calling principal
            compression: Encoding tag (default: config.default_compression)

        Returns:
            Stored metadata (version 1)
        """
        return self._put(collection, chunk_id, data, StorageZone.HOT, caller, compression, "vault.put")

    def put_zone(
        self,
        collection: str,
        chunk_id: str,
        data: bytes,
        zone: StorageZone,
        caller: Optional[str] = None,
        compression: Optional[CompressionAlgo] = None,
    ) -> ChunkMeta:
        """Store a payload with an explicit zone (full overwrite)."""
        return self._put(collection, chunk_id, data, StorageZone(zone), caller, compression, "vault.put_zone")

    def _put(self, collection, chunk_id, data, zone, caller, compression, event) -> ChunkMeta:
        with self._lock, self.ledger.transaction():
            self._require_admin(caller)
            meta = self._write(collection, chunk_id, data, zone, compression, self.clock())
        log_event(logger, event, collection=collection, chunk_id=chunk_id, size=meta.compressed_size, zone=zone.value)
        return meta

    def batch_put(
        self,
        collections: Sequence[str],
        chunk_ids: Sequence[str],
        values: Sequence[bytes],
        caller: Optional[str] = None,
    ) -> int:
        """
        Write several Hot-zone entries in one transaction.

        The three sequences must have equal length; otherwise nothing is
        written. Entries apply in order and share one timestamp.

        Returns:
            Number of entries written
        """
        with self._lock, self.ledger.transaction():
            self._require_admin(caller)
            count = len(collections)
            if count != len(chunk_ids) or count != len(values):
                raise SizeMismatch(len(collections), len(chunk_ids), len(values))

            now = self.clock()
            for collection, chunk_id, data in zip(collections, chunk_ids, values):
                self._write(collection, chunk_id, data, StorageZone.HOT, None, now)

        log_event(logger, "vault.batch_put", count=count)
        return count

    def delta_update(self, collection: str, chunk_id: str, patch: bytes, caller: Optional[str] = None) -> int:
        """
        Append a patch to the chunk's delta log and bump its version.

        The payload is left untouched.

        Returns:
            New metadata version

        Raises:
            NotFound: If the chunk does not exist
        """
        with self._lock, self.ledger.transaction():
            self._require_admin(caller)
            if not self.chunk_store.exists(collection, chunk_id):
                raise NotFound(collection, chunk_id)

            self.delta_log.append(collection, chunk_id, patch)

            meta = self.chunk_store.read_meta(collection, chunk_id)
            version = 0
            if meta is not None:
                meta.version += 1
                meta.updated_at = self.clock()
                self.chunk_store.save_meta(collection, chunk_id, meta)
                self.collection_index.upsert(collection, chunk_id, meta)
                version = meta.version

        log_event(logger, "vault.delta", collection=collection, chunk_id=chunk_id, patch_size=len(patch))
        return version

    def migrate_to_cold(self, collection: str, chunk_id: str, caller: Optional[str] = None) -> bool:
        """Move a chunk from Hot to Cold. Returns False if nothing changed."""
        return self._migrate(collection, chunk_id, StorageZone.COLD, caller)

    def migrate_to_hot(self, collection: str, chunk_id: str, caller: Optional[str] = None) -> bool:
        """Move a chunk from Cold to Hot. Returns False if nothing changed."""
        return self._migrate(collection, chunk_id, StorageZone.HOT, caller)

    def _migrate(self, collection: str, chunk_id: str, target: StorageZone, caller: Optional[str]) -> bool:
        with self._lock, self.ledger.transaction():
            self._require_admin(caller)
            moved = self.zones.migrate(collection, chunk_id, target, self.clock())
        if moved:
            log_event(logger, "vault.migrate", collection=collection, chunk_id=chunk_id, zone=target.value)
        return moved

    def delete(self, collection: str, chunk_id: str, caller: Optional[str] = None) -> bool:
        """
        Delete payload, metadata and delta log.

        The Bloom filter keeps the key's bits (accepted false positive).
        Deleting a missing key is not an error.

        Returns:
            True if the chunk existed
        """
        with self._lock, self.ledger.transaction():
            self._require_admin(caller)
            meta = self.chunk_store.remove_chunk(collection, chunk_id)
            self.delta_log.clear(collection, chunk_id)
            if meta is not None:
                self.collection_index.remove(collection, chunk_id)
                self.stats.record(meta.compressed_size, meta.original_size, False, meta.is_hot)

        log_event(logger, "vault.delete", collection=collection, chunk_id=chunk_id, existed=meta is not None)
        return meta is not None

    # ── Reads ──────────────────────────────────────────────────────

    def get(self, collection: str, chunk_id: str) -> bytes:
        """Return the stored payload, or b"" when missing. Caller decodes."""
        return self.chunk_store.read_chunk(collection, chunk_id)

    def get_meta(self, collection: str, chunk_id: str) -> Optional[ChunkMeta]:
        return self.chunk_store.read_meta(collection, chunk_id)

    def get_deltas(self, collection: str, chunk_id: str) -> List[bytes]:
        return self.delta_log.entries(collection, chunk_id)

    def bloom_check(self, collection: str, chunk_id: str) -> bool:
        """
        Probabilistic existence check without touching the chunk store.

        False = definitely absent. True = probably present; confirm with has().
        """
        return self.bloom.check(collection, chunk_id)

    def has(self, collection: str, chunk_id: str) -> bool:
        """Definitive existence check."""
        return self.chunk_store.exists(collection, chunk_id)

    def get_index(self, collection: str) -> List[IndexEntry]:
        return self.collection_index.entries(collection)

    def get_stats(self) -> StorageStats:
        return self.stats.current()

    # ── Integrity ──────────────────────────────────────────────────

    def verify(self, collection: str, chunk_id: str) -> bool:
        """Recompute the payload checksum and compare it with the metadata."""
        return ChunkStore(self.ledger.snapshot(), self.config).verify_chunk(collection, chunk_id)

    def validate_invariants(self) -> List[str]:
        """
        Validate index, metadata and stats consistency.

        Returns:
            List of error messages (empty if all valid)
        """
        # All checks read one committed state
        ledger = self.ledger.snapshot()
        chunk_store = ChunkStore(ledger, self.config)
        collection_index = CollectionIndex(ledger)

        errors = []
        metas = {key.parts: ledger.get(key) for key in ledger.keys(Namespace.META)}

        # Every chunk has metadata and exactly one matching index entry
        for key in ledger.keys(Namespace.CHUNK):
            collection, chunk_id = key.parts
            meta = metas.get(key.parts)
            if meta is None:
                errors.append(f"Chunk {collection}/{chunk_id}: missing metadata")
                continue
            matches = [e for e in collection_index.entries(collection) if e.id == chunk_id]
            if len(matches) != 1:
                errors.append(f"Chunk {collection}/{chunk_id}: {len(matches)} index entries (expected 1)")
                continue
            entry = matches[0]
            if (entry.zone, entry.compressed_size, entry.version) != (meta.zone, meta.compressed_size, meta.version):
                errors.append(f"Chunk {collection}/{chunk_id}: index entry does not mirror metadata")

        # No index entry without a chunk
        for collection in collection_index.collections():
            for entry in collection_index.entries(collection):
                if not chunk_store.exists(collection, entry.id):
                    errors.append(f"Index {collection}: orphaned entry {entry.id}")

        # Stats equal the sum over existing chunks
        stats = StatsAggregator(ledger, self.config).current()
        expected = (
            len(metas),
            sum(1 for m in metas.values() if m.is_hot),
            sum(1 for m in metas.values() if not m.is_hot),
            sum(m.compressed_size for m in metas.values()),
            sum(m.original_size for m in metas.values()),
        )
        actual = (
            stats.total_entries,
            stats.hot_entries,
            stats.cold_entries,
            stats.total_bytes_stored,
            stats.total_bytes_original,
        )
        if actual != expected:
            errors.append(f"Stats {actual} disagree with stored metadata {expected}")

        return errors


def open_vault(
    path: Optional[str] = None,
    config: Optional[Config] = None,
    authorizer: Optional[Authorizer] = None,
    clock: Optional[Callable[[], int]] = None,
) -> Vault:
    """
    Open a vault.

    Args:
        path: Ledger snapshot file; None keeps everything in memory
        config: Configuration
        authorizer: Admin check strategy
        clock: Source of logical timestamps

    Returns:
        Vault instance
    """
    config = config or Config()
    ledger = FileLedger(Path(path), zstd_level=config.zstd_level) if path else MemoryLedger()
    return Vault(ledger=ledger, config=config, authorizer=authorizer, clock=clock)
