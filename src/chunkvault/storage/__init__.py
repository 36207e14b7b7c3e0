"""
Storage layer: ledger substrate, chunk store, delta log, zones, stats and compression.
"""

from chunkvault.storage.chunk_store import ChunkStore
from chunkvault.storage.compression import compress_data, decompress_data
from chunkvault.storage.delta_log import DeltaLog
from chunkvault.storage.file_ledger import FileLedger
from chunkvault.storage.ledger import DataKey, LedgerStore, MemoryLedger, Namespace
from chunkvault.storage.stats import StatsAggregator

__all__ = [
    "ChunkStore",
    "DeltaLog",
    "StatsAggregator",
    "DataKey",
    "Namespace",
    "LedgerStore",
    "MemoryLedger",
    "FileLedger",
    "compress_data",
    "decompress_data",
]
