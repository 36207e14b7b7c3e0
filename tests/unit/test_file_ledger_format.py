"""Test that the file ledger snapshot format round-trips and detects corruption."""

import struct

import pytest

from chunkvault.core.contracts import ChunkMeta, CompressionAlgo, IndexEntry, StorageStats, StorageZone
from chunkvault.core.errors import LedgerCorruptError
from chunkvault.storage.file_ledger import (
    HEADER_FORMAT,
    HEADER_SIZE,
    MAGIC,
    FileLedger,
    decode_value,
    encode_value,
)
from chunkvault.storage.ledger import DataKey, Namespace


def sample_meta() -> ChunkMeta:
    return ChunkMeta(
        compression=CompressionAlgo.ZSTD,
        original_size=20,
        compressed_size=5,
        checksum=0xFFFFFFFFFFFFFFFF,
        zone=StorageZone.COLD,
        version=3,
        created_at=1001,
        updated_at=1005,
    )


def test_header_size():
    assert HEADER_SIZE == 13


def test_encode_decode_values():
    values = [
        b"\x00\xff binary",
        sample_meta(),
        [IndexEntry(id="U001", zone=StorageZone.HOT, compressed_size=5, version=1)],
        StorageStats(total_entries=1, hot_entries=1, total_bytes_stored=5, total_bytes_original=20, compression_ratio=75),
        [b"p1", b"p2"],
        42,
        "GADMIN",
    ]
    for value in values:
        assert decode_value(encode_value(value)) == value


def test_encode_rejects_unknown_types():
    with pytest.raises(TypeError):
        encode_value(3.14)


def test_snapshot_round_trip(tmp_path):
    path = tmp_path / "vault.db"
    ledger = FileLedger(path)
    with ledger.transaction():
        ledger.set(DataKey.chunk("Users", "U001"), b"\x0a\x14\x1e")
        ledger.set(DataKey.meta("Users", "U001"), sample_meta())
        ledger.set(DataKey.singleton(Namespace.ADMIN), "GADMIN")
    assert path.exists()

    reopened = FileLedger(path)
    assert reopened.get(DataKey.chunk("Users", "U001")) == b"\x0a\x14\x1e"
    assert reopened.get(DataKey.meta("Users", "U001")) == sample_meta()
    assert reopened.get(DataKey.singleton(Namespace.ADMIN)) == "GADMIN"

    magic, version, _ = struct.unpack(HEADER_FORMAT, path.read_bytes()[:HEADER_SIZE])
    assert magic == MAGIC
    assert version == 1


def test_rolled_back_transaction_writes_nothing(tmp_path):
    path = tmp_path / "vault.db"
    ledger = FileLedger(path)
    with pytest.raises(RuntimeError):
        with ledger.transaction():
            ledger.set(DataKey.chunk("Users", "U001"), b"x")
            raise RuntimeError("abort")
    assert not path.exists()


def test_bad_magic_is_rejected(tmp_path):
    path = tmp_path / "vault.db"
    FileLedger(path).set(DataKey.singleton(Namespace.ADMIN), "GADMIN")
    raw = bytearray(path.read_bytes())
    raw[0:4] = b"XXXX"
    path.write_bytes(bytes(raw))

    with pytest.raises(LedgerCorruptError):
        FileLedger(path)


def test_checksum_mismatch_is_rejected(tmp_path):
    path = tmp_path / "vault.db"
    FileLedger(path).set(DataKey.singleton(Namespace.ADMIN), "GADMIN")
    raw = bytearray(path.read_bytes())
    magic, version, expected = struct.unpack(HEADER_FORMAT, raw[:HEADER_SIZE])
    raw[:HEADER_SIZE] = struct.pack(HEADER_FORMAT, magic, version, expected ^ 1)
    path.write_bytes(bytes(raw))

    with pytest.raises(LedgerCorruptError):
        FileLedger(path)


def test_truncated_file_is_rejected(tmp_path):
    path = tmp_path / "vault.db"
    path.write_bytes(b"CVL")
    with pytest.raises(LedgerCorruptError):
        FileLedger(path)


def test_failed_flush_keeps_previous_state(tmp_path, monkeypatch):
    path = tmp_path / "vault.db"
    ledger = FileLedger(path)
    ledger.set(DataKey.singleton(Namespace.ADMIN), "GADMIN")

    def disk_full(data):
        raise OSError(28, "No space left on device")

    monkeypatch.setattr(ledger, "_flush", disk_full)
    with pytest.raises(OSError):
        with ledger.transaction():
            ledger.set(DataKey.chunk("Users", "U001"), b"lost")
    assert not ledger.has(DataKey.chunk("Users", "U001"))

    monkeypatch.undo()
    ledger.set(DataKey.chunk("Users", "U002"), b"kept")
    reopened = FileLedger(path)
    assert not reopened.has(DataKey.chunk("Users", "U001"))
    assert reopened.get(DataKey.chunk("Users", "U002")) == b"kept"
