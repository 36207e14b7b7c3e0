"""
Caller-side payload encoding helpers for chunkvault.

The vault stores payloads exactly as given and only records a
CompressionAlgo tag. These helpers produce and undo those encodings for
callers (the CLI, embedding code) and compress the file ledger snapshot.
"""

import json

import zstandard as zstd

from chunkvault.core.contracts import CompressionAlgo


def compress_data(data: bytes, level: int = 3) -> bytes:
    """
    zstd-encode a payload or snapshot body.

    Args:
        data: Raw bytes
        level: zstd level, 1-22

    Returns:
        One zstd frame with the content size in its header
    """
    return zstd.ZstdCompressor(level=level).compress(data)


def decompress_data(frame: bytes) -> bytes:
    """Undo compress_data. Raises zstd.ZstdError on bytes that are not a zstd frame."""
    return zstd.ZstdDecompressor().decompress(frame)


def compact_json(data: bytes) -> bytes:
    """Re-encode a JSON document without insignificant whitespace."""
    document = json.loads(data.decode("utf-8"))
    return json.dumps(document, separators=(",", ":"), ensure_ascii=False).encode("utf-8")


def encode_payload(data: bytes, algo: CompressionAlgo, level: int = 3) -> bytes:
    """Encode raw bytes the way `algo` describes."""
    if algo == CompressionAlgo.ZSTD:
        return compress_data(data, level=level)
    if algo == CompressionAlgo.COMPACT:
        return compact_json(data)
    return data


def decode_payload(data: bytes, algo: CompressionAlgo) -> bytes:
    """
    Undo a caller-side encoding.

    COMPACT payloads are already valid JSON and are returned unchanged.
    """
    if algo == CompressionAlgo.ZSTD:
        return decompress_data(data)
    return data
