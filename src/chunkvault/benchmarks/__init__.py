"""Benchmarks for chunkvault."""

from chunkvault.benchmarks.bloom import run_bloom_benchmarks

__all__ = [
    "run_bloom_benchmarks",
]
