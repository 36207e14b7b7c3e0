"""
Tests for checksum and Bloom key hashing.
"""

from chunkvault.core.hashing import (
    FNV_OFFSET_BASIS,
    U64_MASK,
    bloom_content_hash,
    bloom_key_hash,
    checksum,
    probe_positions,
)


def test_checksum_known_vectors():
    """FNV-1a 64-bit reference values."""
    assert checksum(b"") == FNV_OFFSET_BASIS
    assert checksum(b"a") == 0xAF63DC4C8601EC8C
    assert checksum(b"foobar") == 0x85944171F73967E8


def test_checksum_is_order_sensitive():
    assert checksum(b"ab") != checksum(b"ba")
    assert checksum(bytes([10, 20, 30])) == checksum(bytes([10, 20, 30]))


def test_checksum_stays_within_u64():
    assert 0 <= checksum(bytes(range(256)) * 4) <= U64_MASK


def test_bloom_key_hash_depends_only_on_lengths():
    """Equal collection/id lengths collide; different lengths do not."""
    assert bloom_key_hash("Users", "U001", 42) == bloom_key_hash("Posts", "P999", 42)
    assert bloom_key_hash("Users", "U001", 42) != bloom_key_hash("Users", "U0001", 42)
    assert bloom_key_hash("Users", "U001", 42) != bloom_key_hash("Usersx", "U001", 42)


def test_bloom_key_hash_separates_collection_and_id():
    assert bloom_key_hash("ab", "abc", 42) != bloom_key_hash("abc", "ab", 42)


def test_bloom_key_hash_depends_on_seed():
    assert bloom_key_hash("Users", "U001", 42) != bloom_key_hash("Users", "U001", 43)


def test_bloom_key_hash_counts_utf8_bytes():
    # "é" is two bytes in UTF-8
    assert bloom_key_hash("c", "é", 42) == bloom_key_hash("c", "ab", 42)


def test_bloom_content_hash_sees_content():
    assert bloom_content_hash("Users", "U001", 42) != bloom_content_hash("Posts", "P999", 42)
    assert bloom_content_hash("Users", "U001", 42) == bloom_content_hash("Users", "U001", 42)


def test_probe_positions():
    positions = probe_positions(0xDEADBEEFCAFEBABE, 7, 16384)
    assert len(positions) == 7
    assert all(0 <= p < 16384 for p in positions)
    assert positions == probe_positions(0xDEADBEEFCAFEBABE, 7, 16384)


def test_probe_positions_double_hashing_formula():
    base = (5 << 16) | 3  # step = 5
    assert probe_positions(base, 4, 16384) == [
        (base + 0) % 16384,
        (base + 5) % 16384,
        (base + 10) % 16384,
        (base + 15) % 16384,
    ]
