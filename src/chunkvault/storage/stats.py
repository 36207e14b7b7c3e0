"""
Incremental storage statistics.

Totals are adjusted by add/remove events as writes happen; they are never
recomputed from the stored chunks.
"""

from chunkvault.core.contracts import Config, StorageStats
from chunkvault.storage.ledger import DataKey, LedgerStore, Namespace

STATS_KEY = DataKey.singleton(Namespace.STATS)


class StatsAggregator:
    """Maintains the singleton StorageStats record."""

    def __init__(self, ledger: LedgerStore, config: Config):
        self.ledger = ledger
        self.config = config

    def empty(self) -> StorageStats:
        return StorageStats(bloom_false_positive_rate=self.config.bloom_fpr_per_mille)

    def initialize(self):
        self.ledger.set(STATS_KEY, self.empty())

    def current(self) -> StorageStats:
        return self.ledger.get(STATS_KEY) or self.empty()

    def record(self, compressed_bytes: int, original_bytes: int, is_add: bool, is_hot: bool) -> StorageStats:
        """
        Apply one add or remove event.

        Args:
            compressed_bytes: Stored payload size of the chunk
            original_bytes: Estimated original size of the chunk
            is_add: True when the chunk appears, False when it goes away
            is_hot: Zone of the chunk at the time of the event

        Returns:
            Updated stats
        """
        stats = self.current()

        if is_add:
            stats.total_entries += 1
            if is_hot:
                stats.hot_entries += 1
            else:
                stats.cold_entries += 1
            stats.total_bytes_stored += compressed_bytes
            stats.total_bytes_original += original_bytes
        else:
            # Saturating: counters never drop below zero
            stats.total_entries = max(0, stats.total_entries - 1)
            if is_hot:
                stats.hot_entries = max(0, stats.hot_entries - 1)
            else:
                stats.cold_entries = max(0, stats.cold_entries - 1)
            if stats.total_bytes_stored >= compressed_bytes:
                stats.total_bytes_stored -= compressed_bytes
            if stats.total_bytes_original >= original_bytes:
                stats.total_bytes_original -= original_bytes

        if stats.total_bytes_original > 0:
            stats.compression_ratio = 100 - (stats.total_bytes_stored * 100 // stats.total_bytes_original)

        self.ledger.set(STATS_KEY, stats)
        return stats

    def move_zone(self, to_cold: bool) -> StorageStats:
        """Shift one entry between the hot and cold counters."""
        stats = self.current()
        if to_cold:
            stats.hot_entries = max(0, stats.hot_entries - 1)
            stats.cold_entries += 1
        else:
            stats.cold_entries = max(0, stats.cold_entries - 1)
            stats.hot_entries += 1
        self.ledger.set(STATS_KEY, stats)
        return stats
