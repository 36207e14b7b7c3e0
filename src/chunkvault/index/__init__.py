"""
Index layer: Bloom filter existence index and per-collection index.
"""

from chunkvault.index.bloom import BloomFilter, BloomIndex
from chunkvault.index.collection_index import CollectionIndex

__all__ = [
    "BloomFilter",
    "BloomIndex",
    "CollectionIndex",
]
