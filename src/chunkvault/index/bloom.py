"""
Bloom filter existence index for chunkvault.

A single global, additive-only filter: bits are set on writes and never
cleared, so a deleted key may keep testing positive.
"""

from typing import Callable, List, Optional

from chunkvault.core.contracts import Config
from chunkvault.core.hashing import BLOOM_HASHES, probe_positions
from chunkvault.storage.ledger import DataKey, LedgerStore, Namespace

BLOOM_FILTER_KEY = DataKey.singleton(Namespace.BLOOM_FILTER)
BLOOM_SEED_KEY = DataKey.singleton(Namespace.BLOOM_SEED)
BLOOM_HASH_KEY = DataKey.singleton(Namespace.BLOOM_HASH)


class BloomFilter:
    """
    Fixed-size bit array with k seeded probes per key.

    Bit `pos` lives in byte pos // 8 at bit pos % 8. A probe landing past the
    end of the buffer is never set and always reads as unset.
    """

    def __init__(
        self,
        size_bits: int,
        k: int,
        seed: int,
        key_hash: Callable[[str, str, int], int],
        bits: Optional[bytes] = None,
    ):
        self.size_bits = size_bits
        self.k = k
        self.seed = seed
        self.key_hash = key_hash
        self.bits = bytearray(bits) if bits is not None else bytearray((size_bits + 7) // 8)

    def get_bit(self, pos: int) -> bool:
        byte_idx, bit_idx = divmod(pos, 8)
        if byte_idx >= len(self.bits):
            return False
        return bool(self.bits[byte_idx] & (1 << bit_idx))

    def set_bit(self, pos: int):
        byte_idx, bit_idx = divmod(pos, 8)
        if byte_idx < len(self.bits):
            self.bits[byte_idx] |= 1 << bit_idx

    def positions(self, collection: str, chunk_id: str) -> List[int]:
        base_hash = self.key_hash(collection, chunk_id, self.seed)
        return probe_positions(base_hash, self.k, self.size_bits)

    def add(self, collection: str, chunk_id: str):
        for pos in self.positions(collection, chunk_id):
            self.set_bit(pos)

    def might_contain(self, collection: str, chunk_id: str) -> bool:
        """False = definitely absent. True = probably present."""
        return all(self.get_bit(pos) for pos in self.positions(collection, chunk_id))

    def bits_set(self) -> int:
        return sum(bin(byte).count("1") for byte in self.bits)

    def fill_ratio(self) -> float:
        return self.bits_set() / self.size_bits if self.size_bits else 0.0

    def to_bytes(self) -> bytes:
        return bytes(self.bits)


class BloomIndex:
    """Loads, mutates and rewrites the ledger's BloomFilter as a whole."""

    def __init__(self, ledger: LedgerStore, config: Config):
        self.ledger = ledger
        self.config = config

    def initialize(self):
        """Store an all-zero filter plus seed and hash mode."""
        if self.config.bloom_hash not in BLOOM_HASHES:
            raise ValueError(f"Unknown bloom hash mode: {self.config.bloom_hash!r}")
        self.ledger.set(BLOOM_FILTER_KEY, bytes(self.config.bloom_size_bytes))
        self.ledger.set(BLOOM_SEED_KEY, self.config.bloom_seed)
        self.ledger.set(BLOOM_HASH_KEY, self.config.bloom_hash)

    def load(self) -> BloomFilter:
        bits = self.ledger.get(BLOOM_FILTER_KEY)
        if bits is None:
            bits = bytes(self.config.bloom_size_bytes)
        seed = self.ledger.get(BLOOM_SEED_KEY, self.config.bloom_seed)
        mode = self.ledger.get(BLOOM_HASH_KEY, self.config.bloom_hash)
        return BloomFilter(
            size_bits=self.config.bloom_size_bits,
            k=self.config.bloom_k,
            seed=seed,
            key_hash=BLOOM_HASHES[mode],
            bits=bits,
        )

    def add(self, collection: str, chunk_id: str):
        bloom = self.load()
        bloom.add(collection, chunk_id)
        self.ledger.set(BLOOM_FILTER_KEY, bloom.to_bytes())

    def check(self, collection: str, chunk_id: str) -> bool:
        return self.load().might_contain(collection, chunk_id)
