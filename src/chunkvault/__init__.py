"""
chunkvault - Compressed, metadata-rich key-value store over a ledger substrate.
"""

from chunkvault.core import (
    CallerAuthorizer,
    ChunkMeta,
    CompressionAlgo,
    Config,
    IndexEntry,
    StorageStats,
    StorageZone,
    TrustAllAuthorizer,
    VaultError,
)
from chunkvault.vault import Vault, open_vault

__version__ = "0.1.0"

__all__ = [
    "Vault",
    "open_vault",
    "Config",
    "StorageZone",
    "CompressionAlgo",
    "ChunkMeta",
    "IndexEntry",
    "StorageStats",
    "CallerAuthorizer",
    "TrustAllAuthorizer",
    "VaultError",
]
