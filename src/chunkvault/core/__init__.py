"""
Core contracts, errors, hashing and authorization for chunkvault.
"""

from chunkvault.core.auth import Authorizer, CallerAuthorizer, TrustAllAuthorizer
from chunkvault.core.contracts import (
    ChunkMeta,
    CompressionAlgo,
    Config,
    IndexEntry,
    StorageStats,
    StorageZone,
)
from chunkvault.core.errors import (
    AlreadyInitialized,
    LedgerCorruptError,
    NotFound,
    NotInitialized,
    SizeMismatch,
    Unauthorized,
    VaultError,
)
from chunkvault.core.hashing import bloom_content_hash, bloom_key_hash, checksum

__all__ = [
    "Config",
    "StorageZone",
    "CompressionAlgo",
    "ChunkMeta",
    "IndexEntry",
    "StorageStats",
    "Authorizer",
    "CallerAuthorizer",
    "TrustAllAuthorizer",
    "VaultError",
    "NotInitialized",
    "AlreadyInitialized",
    "Unauthorized",
    "NotFound",
    "SizeMismatch",
    "LedgerCorruptError",
    "checksum",
    "bloom_key_hash",
    "bloom_content_hash",
]
