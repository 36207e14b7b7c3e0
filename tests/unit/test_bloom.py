"""Tests for the Bloom filter value type and its ledger-backed index."""

import random
import string

from chunkvault.core.contracts import Config
from chunkvault.core.hashing import bloom_content_hash, bloom_key_hash
from chunkvault.index.bloom import BLOOM_FILTER_KEY, BloomFilter, BloomIndex
from chunkvault.storage.ledger import MemoryLedger


def make_filter(key_hash=bloom_key_hash, bits=None) -> BloomFilter:
    return BloomFilter(size_bits=16384, k=7, seed=42, key_hash=key_hash, bits=bits)


def test_empty_filter_reports_absent():
    bloom = make_filter()
    assert len(bloom.to_bytes()) == 2048
    assert bloom.bits_set() == 0
    assert not bloom.might_contain("Users", "DEFINITELY_NOT_HERE")


def test_set_and_get_bit():
    bloom = make_filter()
    bloom.set_bit(0)
    bloom.set_bit(9)
    bloom.set_bit(16383)
    assert bloom.get_bit(0)
    assert bloom.get_bit(9)
    assert bloom.get_bit(16383)
    assert not bloom.get_bit(1)
    assert bloom.to_bytes()[1] == 0b10
    assert bloom.bits_set() == 3


def test_add_then_contains():
    bloom = make_filter()
    bloom.add("Users", "BLOOM_TEST")
    assert bloom.might_contain("Users", "BLOOM_TEST")
    assert 1 <= bloom.bits_set() <= 7


def test_length_hash_collides_on_equal_lengths():
    bloom = make_filter()
    bloom.add("Users", "U001")
    # Same lengths -> same probe positions
    assert bloom.might_contain("Posts", "P999")


def test_content_hash_distinguishes_equal_lengths():
    bloom = make_filter(key_hash=bloom_content_hash)
    bloom.add("Users", "U001")
    assert bloom.might_contain("Users", "U001")
    assert bloom.positions("Users", "U001") != bloom.positions("Posts", "P999")


def test_short_buffer_reads_unset_and_ignores_writes():
    bloom = make_filter(bits=b"")
    bloom.add("Users", "U001")
    assert bloom.to_bytes() == b""
    assert not bloom.might_contain("Users", "U001")


def test_no_false_negatives_for_many_keys():
    rng = random.Random(1)
    keys = [("C" * rng.randint(1, 10), "".join(rng.choices(string.ascii_letters, k=rng.randint(1, 30)))) for _ in range(500)]
    for key_hash in (bloom_key_hash, bloom_content_hash):
        bloom = make_filter(key_hash=key_hash)
        for collection, chunk_id in keys:
            bloom.add(collection, chunk_id)
        assert all(bloom.might_contain(c, i) for c, i in keys)


def test_content_hash_false_positive_rate_is_low():
    """500 keys in 16384 bits with k=7: far below 1% false positives."""
    rng = random.Random(2024)
    alphabet = string.ascii_uppercase + string.digits
    inserted = {("Users", "".join(rng.choices(alphabet, k=12))) for _ in range(500)}
    bloom = make_filter(key_hash=bloom_content_hash)
    for collection, chunk_id in inserted:
        bloom.add(collection, chunk_id)

    probes = [("Posts", "".join(rng.choices(alphabet, k=12))) for _ in range(1000)]
    false_positives = sum(1 for c, i in probes if bloom.might_contain(c, i))
    assert false_positives <= 10


def test_index_initialize_and_persist():
    ledger = MemoryLedger()
    index = BloomIndex(ledger, Config())
    index.initialize()
    assert ledger.get(BLOOM_FILTER_KEY) == bytes(2048)

    index.add("Users", "U001")
    assert index.check("Users", "U001")
    assert ledger.get(BLOOM_FILTER_KEY) != bytes(2048)


def test_index_uses_mode_stored_at_initialize():
    ledger = MemoryLedger()
    BloomIndex(ledger, Config(bloom_hash="content")).initialize()

    # Reopened with a default (length) config: the stored mode wins
    index = BloomIndex(ledger, Config())
    assert index.load().key_hash is bloom_content_hash
