"""Tests for incremental stats aggregation."""

from chunkvault.core.contracts import Config
from chunkvault.storage.ledger import MemoryLedger
from chunkvault.storage.stats import StatsAggregator


def make_stats() -> StatsAggregator:
    stats = StatsAggregator(MemoryLedger(), Config())
    stats.initialize()
    return stats


def test_initial_stats_are_zero_with_static_fpr():
    current = make_stats().current()
    assert current.total_entries == 0
    assert current.compression_ratio == 0
    assert current.bloom_false_positive_rate == 8


def test_uninitialized_ledger_reads_default_stats():
    current = StatsAggregator(MemoryLedger(), Config(bloom_fpr_per_mille=10)).current()
    assert current.total_entries == 0
    assert current.bloom_false_positive_rate == 10


def test_add_and_remove():
    stats = make_stats()
    stats.record(5, 20, is_add=True, is_hot=True)
    stats.record(3, 12, is_add=True, is_hot=False)

    current = stats.current()
    assert (current.total_entries, current.hot_entries, current.cold_entries) == (2, 1, 1)
    assert current.total_bytes_stored == 8
    assert current.total_bytes_original == 32
    assert current.compression_ratio == 75

    stats.record(5, 20, is_add=False, is_hot=True)
    current = stats.current()
    assert (current.total_entries, current.hot_entries, current.cold_entries) == (1, 0, 1)
    assert current.total_bytes_stored == 3


def test_remove_saturates_at_zero():
    stats = make_stats()
    stats.record(5, 20, is_add=False, is_hot=True)
    current = stats.current()
    assert current.total_entries == 0
    assert current.hot_entries == 0
    assert current.total_bytes_stored == 0


def test_ratio_kept_when_original_drops_to_zero():
    stats = make_stats()
    stats.record(5, 20, is_add=True, is_hot=True)
    stats.record(5, 20, is_add=False, is_hot=True)
    assert stats.current().compression_ratio == 75


def test_ratio_uses_integer_division():
    stats = make_stats()
    stats.record(1, 3, is_add=True, is_hot=True)
    # 100 - (1 * 100 // 3) = 100 - 33
    assert stats.current().compression_ratio == 67


def test_move_zone_clamps():
    stats = make_stats()
    stats.move_zone(to_cold=True)
    current = stats.current()
    assert current.hot_entries == 0
    assert current.cold_entries == 1

    stats.move_zone(to_cold=False)
    stats.move_zone(to_cold=False)
    current = stats.current()
    assert current.cold_entries == 0
    assert current.hot_entries == 2
