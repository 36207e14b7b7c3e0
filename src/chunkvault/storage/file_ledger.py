"""
File-backed ledger for chunkvault.

The whole ledger is one snapshot file, rewritten on every commit:

- header: "<4sBQ" little-endian, no padding
  magic (b"CVLT"), format version (B), xxh64 checksum of the body (Q)
- body: zstd-compressed JSON document with every (namespace, parts, value)

Values are tagged so that bytes, enums and dataclasses survive the JSON
round trip.
"""

import base64
import json
import os
import struct
from dataclasses import asdict
from pathlib import Path
from typing import Any, Dict, List

import xxhash
import zstandard as zstd

from chunkvault.core.contracts import (
    ChunkMeta,
    CompressionAlgo,
    IndexEntry,
    StorageStats,
    StorageZone,
)
from chunkvault.core.errors import LedgerCorruptError
from chunkvault.storage.compression import compress_data, decompress_data
from chunkvault.storage.ledger import DataKey, MemoryLedger, Namespace

HEADER_FORMAT = "<4sBQ"
HEADER_SIZE = struct.calcsize(HEADER_FORMAT)
MAGIC = b"CVLT"
FORMAT_VERSION = 1


def encode_value(value: Any) -> Dict[str, Any]:
    """Encode a ledger value as a tagged JSON-compatible dict."""
    if isinstance(value, (bytes, bytearray)):
        return {"t": "bytes", "v": base64.b64encode(bytes(value)).decode("ascii")}
    if isinstance(value, ChunkMeta):
        fields = asdict(value)
        fields["compression"] = value.compression.value
        fields["zone"] = value.zone.value
        return {"t": "meta", "v": fields}
    if isinstance(value, IndexEntry):
        fields = asdict(value)
        fields["zone"] = value.zone.value
        return {"t": "index_entry", "v": fields}
    if isinstance(value, StorageStats):
        return {"t": "stats", "v": asdict(value)}
    if isinstance(value, list):
        return {"t": "list", "v": [encode_value(item) for item in value]}
    if isinstance(value, bool):
        raise TypeError("bool values are not stored in the ledger")
    if isinstance(value, int):
        return {"t": "int", "v": value}
    if isinstance(value, str):
        return {"t": "str", "v": value}
    raise TypeError(f"Unsupported ledger value type: {type(value).__name__}")


def decode_value(tagged: Dict[str, Any]) -> Any:
    """Decode a tagged dict produced by encode_value."""
    tag = tagged["t"]
    raw = tagged["v"]
    if tag == "bytes":
        return base64.b64decode(raw)
    if tag == "meta":
        return ChunkMeta(
            compression=CompressionAlgo(raw["compression"]),
            original_size=raw["original_size"],
            compressed_size=raw["compressed_size"],
            checksum=raw["checksum"],
            zone=StorageZone(raw["zone"]),
            version=raw["version"],
            created_at=raw["created_at"],
            updated_at=raw["updated_at"],
        )
    if tag == "index_entry":
        return IndexEntry(
            id=raw["id"],
            zone=StorageZone(raw["zone"]),
            compressed_size=raw["compressed_size"],
            version=raw["version"],
        )
    if tag == "stats":
        return StorageStats(**raw)
    if tag == "list":
        return [decode_value(item) for item in raw]
    if tag in ("int", "str"):
        return raw
    raise LedgerCorruptError(f"Unknown value tag: {tag!r}")


class FileLedger(MemoryLedger):
    """MemoryLedger that persists a snapshot file after every commit."""

    def __init__(self, path: Path, zstd_level: int = 3):
        """
        Initialize file ledger.

        Args:
            path: Snapshot file; created on first commit if missing
            zstd_level: zstd level used for the snapshot body
        """
        super().__init__()
        self.path = Path(path)
        self.zstd_level = zstd_level
        if self.path.exists():
            self._data = self._load()

    def _apply(self, changes: Dict[DataKey, Any]) -> None:
        """Persist the new state first; memory only moves if the write succeeded."""
        with self._commit_lock:
            data = self._merged(changes)
            self._flush(data)
            self._data = data

    def _serialize(self, data: Dict[DataKey, Any]) -> bytes:
        entries: List[Dict[str, Any]] = [
            {
                "ns": key.namespace.value,
                "parts": list(key.parts),
                "value": encode_value(value),
            }
            for key, value in data.items()
        ]
        document = {"format": "chunkvault-ledger", "entries": entries}
        return json.dumps(document, separators=(",", ":"), sort_keys=True).encode("utf-8")

    def _flush(self, data: Dict[DataKey, Any]):
        """Write the snapshot to a temp file and atomically replace the target."""
        body = self._serialize(data)
        header = struct.pack(HEADER_FORMAT, MAGIC, FORMAT_VERSION, xxhash.xxh64(body).intdigest())

        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_name(self.path.name + ".tmp")
        with open(tmp_path, "wb") as f:
            f.write(header)
            f.write(compress_data(body, level=self.zstd_level))
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp_path, self.path)

    def _load(self) -> Dict[DataKey, Any]:
        """Read and validate the snapshot file."""
        with open(self.path, "rb") as f:
            raw = f.read()

        if len(raw) < HEADER_SIZE:
            raise LedgerCorruptError(f"{self.path}: truncated header")

        magic, version, expected = struct.unpack(HEADER_FORMAT, raw[:HEADER_SIZE])
        if magic != MAGIC:
            raise LedgerCorruptError(f"{self.path}: bad magic {magic!r}")
        if version != FORMAT_VERSION:
            raise LedgerCorruptError(f"{self.path}: unsupported format version {version}")

        try:
            body = decompress_data(raw[HEADER_SIZE:])
        except zstd.ZstdError as e:
            raise LedgerCorruptError(f"{self.path}: cannot decompress body") from e

        if xxhash.xxh64(body).intdigest() != expected:
            raise LedgerCorruptError(f"{self.path}: checksum mismatch")

        document = json.loads(body.decode("utf-8"))
        data: Dict[DataKey, Any] = {}
        for entry in document["entries"]:
            key = DataKey(Namespace(entry["ns"]), tuple(entry["parts"]))
            data[key] = decode_value(entry["value"])
        return data
