"""
Ledger-style key-value substrate for chunkvault.

Every persisted value lives under a DataKey: a namespace plus the logical
key parts (collection, id) it is addressed by. Writes made inside
transaction() are buffered and applied together on commit; an exception
escaping the block discards them.
"""

import copy
import threading
from abc import ABC, abstractmethod
from contextlib import contextmanager
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Iterator, List, Optional, Tuple


class Namespace(str, Enum):
    CHUNK = "chunk"  # (collection, id) -> bytes
    META = "meta"  # (collection, id) -> ChunkMeta
    COLLECTION_INDEX = "collection_index"  # (collection,) -> List[IndexEntry]
    BLOOM_FILTER = "bloom_filter"  # () -> bytes
    BLOOM_SEED = "bloom_seed"  # () -> int
    BLOOM_HASH = "bloom_hash"  # () -> str, hash mode the filter was filled with
    STATS = "stats"  # () -> StorageStats
    ADMIN = "admin"  # () -> str
    DELTA_LOG = "delta_log"  # (collection, id) -> List[bytes]


@dataclass(frozen=True)
class DataKey:
    """Typed ledger key."""

    namespace: Namespace
    parts: Tuple[str, ...] = ()

    @classmethod
    def chunk(cls, collection: str, chunk_id: str) -> "DataKey":
        return cls(Namespace.CHUNK, (collection, chunk_id))

    @classmethod
    def meta(cls, collection: str, chunk_id: str) -> "DataKey":
        return cls(Namespace.META, (collection, chunk_id))

    @classmethod
    def collection_index(cls, collection: str) -> "DataKey":
        return cls(Namespace.COLLECTION_INDEX, (collection,))

    @classmethod
    def delta_log(cls, collection: str, chunk_id: str) -> "DataKey":
        return cls(Namespace.DELTA_LOG, (collection, chunk_id))

    @classmethod
    def singleton(cls, namespace: Namespace) -> "DataKey":
        return cls(namespace)


_REMOVED = object()


class LedgerStore(ABC):
    """Abstract typed key-value store with per-call transactions."""

    @abstractmethod
    def get(self, key: DataKey, default: Any = None) -> Any:
        """Return a copy of the value stored under key, or default."""

    @abstractmethod
    def set(self, key: DataKey, value: Any) -> None:
        """Store value under key."""

    @abstractmethod
    def has(self, key: DataKey) -> bool:
        """Return True if key holds a value."""

    @abstractmethod
    def remove(self, key: DataKey) -> None:
        """Remove key; removing a missing key is a no-op."""

    @abstractmethod
    def keys(self, namespace: Namespace) -> List[DataKey]:
        """List committed keys in a namespace."""

    @abstractmethod
    def transaction(self):
        """Context manager grouping writes into one commit."""

    @abstractmethod
    def snapshot(self) -> "LedgerStore":
        """Return a read-only view of the last committed state."""


class MemoryLedger(LedgerStore):
    """
    In-memory ledger.

    Values are deep-copied on the way in and out so callers never alias
    stored state. Pending transaction writes are kept per thread: only the
    writing thread observes them before commit. A commit builds a new dict
    and rebinds it, so readers always see one whole committed state.
    """

    def __init__(self, data: Optional[Dict[DataKey, Any]] = None):
        self._data: Dict[DataKey, Any] = dict(data) if data else {}
        self._local = threading.local()
        self._commit_lock = threading.Lock()

    def _pending(self) -> Optional[Dict[DataKey, Any]]:
        return getattr(self._local, "pending", None)

    def get(self, key: DataKey, default: Any = None) -> Any:
        pending = self._pending()
        if pending is not None and key in pending:
            value = pending[key]
            return default if value is _REMOVED else copy.deepcopy(value)
        data = self._data
        if key not in data:
            return default
        return copy.deepcopy(data[key])

    def set(self, key: DataKey, value: Any) -> None:
        pending = self._pending()
        if pending is not None:
            pending[key] = copy.deepcopy(value)
        else:
            self._apply({key: copy.deepcopy(value)})

    def has(self, key: DataKey) -> bool:
        pending = self._pending()
        if pending is not None and key in pending:
            return pending[key] is not _REMOVED
        return key in self._data

    def remove(self, key: DataKey) -> None:
        pending = self._pending()
        if pending is not None:
            pending[key] = _REMOVED
        else:
            self._apply({key: _REMOVED})

    def keys(self, namespace: Namespace) -> List[DataKey]:
        return [key for key in self._data if key.namespace == namespace]

    def snapshot(self) -> "MemoryLedger":
        return MemoryLedger(self._data)

    @contextmanager
    def transaction(self) -> Iterator["MemoryLedger"]:
        if self._pending() is not None:
            # Nested: join the enclosing transaction
            yield self
            return

        self._local.pending = {}
        try:
            yield self
        except BaseException:
            self._local.pending = None
            raise
        pending = self._local.pending
        self._local.pending = None
        if pending:
            self._apply(pending)

    def _merged(self, changes: Dict[DataKey, Any]) -> Dict[DataKey, Any]:
        data = dict(self._data)
        for key, value in changes.items():
            if value is _REMOVED:
                data.pop(key, None)
            else:
                data[key] = value
        return data

    def _apply(self, changes: Dict[DataKey, Any]) -> None:
        """Commit changes by swapping in a new dict."""
        with self._commit_lock:
            self._data = self._merged(changes)
