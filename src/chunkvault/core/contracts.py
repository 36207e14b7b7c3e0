"""
Core data structures (dataclasses) for chunkvault.

All records persisted by the vault are defined here as explicit dataclasses.
"""

from dataclasses import asdict, dataclass
from enum import Enum
from typing import Any, Dict, Literal


class StorageZone(str, Enum):
    """Placement class of a chunk."""

    HOT = "hot"  # frequently accessed (users, active posts)
    COLD = "cold"  # archival (completed missions, old proofs)


class CompressionAlgo(str, Enum):
    """Tag describing how the caller encoded a payload before storing it."""

    NONE = "none"
    ZSTD = "zstd"  # zstandard, compressed by the caller
    COMPACT = "compact"  # whitespace-stripped JSON


@dataclass
class Config:
    """Configuration for a vault instance."""

    # Bloom filter: 2048 bytes = 16384 bits, k=7 -> ~0.8% FPR at 500 keys
    bloom_size_bytes: int = 2048
    bloom_k: int = 7
    bloom_seed: int = 42
    bloom_hash: Literal["length", "content"] = "length"
    bloom_fpr_per_mille: int = 8  # static estimate reported in stats

    # Metadata heuristics
    original_size_factor: int = 4  # original_size = compressed_size * factor
    default_compression: CompressionAlgo = CompressionAlgo.ZSTD

    # Caller-side compression helpers
    zstd_level: int = 3

    @property
    def bloom_size_bits(self) -> int:
        return self.bloom_size_bytes * 8

    def to_dict(self) -> Dict[str, Any]:
        """Plain JSON-friendly view, enums as their values."""
        data = asdict(self)
        data["default_compression"] = self.default_compression.value
        return data


@dataclass
class ChunkMeta:
    """
    Metadata kept beside every stored payload.

    version starts at 1 and only grows through delta updates; a full
    overwrite via put starts it again at 1.
    """

    compression: CompressionAlgo
    original_size: int  # estimate, compressed_size * original_size_factor
    compressed_size: int  # == len(payload)
    checksum: int  # FNV-1a 64-bit over the payload bytes
    zone: StorageZone
    version: int
    created_at: int  # logical timestamps
    updated_at: int

    @property
    def is_hot(self) -> bool:
        return self.zone == StorageZone.HOT


@dataclass
class IndexEntry:
    """Denormalized per-collection summary of one chunk."""

    id: str
    zone: StorageZone
    compressed_size: int
    version: int


@dataclass
class StorageStats:
    """Running storage totals, maintained incrementally."""

    total_entries: int = 0
    hot_entries: int = 0
    cold_entries: int = 0
    total_bytes_stored: int = 0
    total_bytes_original: int = 0
    compression_ratio: int = 0  # percent, e.g. 75 = 75% smaller
    bloom_false_positive_rate: int = 8  # per-mille, e.g. 10 = 1%
