"""Tests for the per-collection index."""

from chunkvault.core.contracts import ChunkMeta, CompressionAlgo, StorageZone
from chunkvault.index.collection_index import CollectionIndex
from chunkvault.storage.ledger import MemoryLedger


def meta(size: int, zone: StorageZone = StorageZone.HOT, version: int = 1) -> ChunkMeta:
    return ChunkMeta(
        compression=CompressionAlgo.ZSTD,
        original_size=size * 4,
        compressed_size=size,
        checksum=0,
        zone=zone,
        version=version,
        created_at=0,
        updated_at=0,
    )


def test_upsert_appends_in_insertion_order():
    index = CollectionIndex(MemoryLedger())
    index.upsert("Posts", "P2", meta(2))
    index.upsert("Posts", "P1", meta(1))
    index.upsert("Posts", "P3", meta(3))
    assert [e.id for e in index.entries("Posts")] == ["P2", "P1", "P3"]


def test_upsert_replaces_in_place():
    index = CollectionIndex(MemoryLedger())
    index.upsert("Posts", "P1", meta(1))
    index.upsert("Posts", "P2", meta(2))
    index.upsert("Posts", "P1", meta(9, StorageZone.COLD, version=4))

    entries = index.entries("Posts")
    assert [e.id for e in entries] == ["P1", "P2"]
    assert entries[0].zone == StorageZone.COLD
    assert entries[0].compressed_size == 9
    assert entries[0].version == 4


def test_remove_filters_entry():
    index = CollectionIndex(MemoryLedger())
    for chunk_id in ("A", "B", "C"):
        index.upsert("Users", chunk_id, meta(1))
    index.remove("Users", "B")
    index.remove("Users", "missing")
    assert [e.id for e in index.entries("Users")] == ["A", "C"]


def test_collections_are_separate():
    index = CollectionIndex(MemoryLedger())
    index.upsert("Users", "X", meta(1))
    index.upsert("Posts", "X", meta(2))
    assert index.entries("Users")[0].compressed_size == 1
    assert index.entries("Posts")[0].compressed_size == 2
    assert index.entries("Missions") == []
    assert sorted(index.collections()) == ["Posts", "Users"]
