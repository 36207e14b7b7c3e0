"""
Deterministic hashing for chunkvault.

Hash Policy:
- checksum: FNV-1a 64-bit over the payload bytes (integrity signal only)
- bloom_key_hash: seeded FNV-style mix over the UTF-8 byte *lengths* of
  collection and id, plus position salts. Keys whose collection and id have
  the same lengths hash identically.
- bloom_content_hash: seeded xxh64 over "collection\\0id" (opt-in mode)
- probe_positions: double hashing, (base + i * (base >> 16)) mod m
"""

from typing import Callable, Dict, List

import xxhash

U64_MASK = 0xFFFFFFFFFFFFFFFF
FNV_OFFSET_BASIS = 0xCBF29CE484222325
FNV_PRIME = 0x100000001B3


def _mix(hash_value: int, value: int) -> int:
    """XOR value in, then multiply by the FNV prime (wrapping at 2**64)."""
    return ((hash_value ^ value) * FNV_PRIME) & U64_MASK


def checksum(data: bytes) -> int:
    """
    Compute the FNV-1a 64-bit checksum of a payload.

    Args:
        data: Payload bytes

    Returns:
        Unsigned 64-bit checksum
    """
    hash_value = FNV_OFFSET_BASIS
    for byte in data:
        hash_value = _mix(hash_value, byte)
    return hash_value


def bloom_key_hash(collection: str, chunk_id: str, seed: int) -> int:
    """
    Hash a (collection, id) pair for Bloom filter indexing.

    Only the byte lengths of the two strings feed the hash, each followed by
    position-weighted salts. Deterministic for equal inputs.

    Args:
        collection: Collection name
        chunk_id: Chunk id within the collection
        seed: Filter seed

    Returns:
        Unsigned 64-bit base hash
    """
    hash_value = seed & U64_MASK

    col_len = len(collection.encode("utf-8"))
    hash_value = _mix(hash_value, col_len)
    for i in range(col_len):
        hash_value = _mix(hash_value, (i + 1) * 31)

    hash_value = _mix(hash_value, 0xFF)  # separator

    id_len = len(chunk_id.encode("utf-8"))
    hash_value = _mix(hash_value, (id_len * 37) & U64_MASK)
    for i in range(id_len):
        hash_value = _mix(hash_value, (i + 1) * 53)

    return hash_value


def bloom_content_hash(collection: str, chunk_id: str, seed: int) -> int:
    """Hash a (collection, id) pair over its full content with seeded xxh64."""
    key = collection.encode("utf-8") + b"\0" + chunk_id.encode("utf-8")
    return xxhash.xxh64(key, seed=seed & U64_MASK).intdigest()


BLOOM_HASHES: Dict[str, Callable[[str, str, int], int]] = {
    "length": bloom_key_hash,
    "content": bloom_content_hash,
}


def probe_positions(base_hash: int, k: int, size_bits: int) -> List[int]:
    """
    Derive k bit positions from a base hash.

    Args:
        base_hash: 64-bit base hash
        k: Number of probes
        size_bits: Filter size in bits

    Returns:
        List of k bit positions in [0, size_bits)
    """
    step = base_hash >> 16
    return [((base_hash + i * step) & U64_MASK) % size_bits for i in range(k)]
