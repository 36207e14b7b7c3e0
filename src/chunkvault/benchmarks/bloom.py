"""
Bloom filter benchmarks for chunkvault.

Measures:
- Empirical false-positive rate on keys that were never inserted
- Filter fill ratio after inserting the synthetic keys
- bloom_check vs has latency
"""

import random
import statistics
import string
import time
from pathlib import Path
from typing import Callable, Dict, List, Optional, Tuple

from chunkvault.benchmarks.reporting import write_json_report
from chunkvault.core.auth import TrustAllAuthorizer
from chunkvault.core.contracts import Config
from chunkvault.vault import Vault

COLLECTIONS = ["Users", "Posts", "Missions", "Proofs", "Badges"]


def synthetic_keys(count: int, rng: random.Random, exclude: frozenset = frozenset()) -> List[Tuple[str, str]]:
    """Generate distinct (collection, id) pairs with ids of varying length."""
    alphabet = string.ascii_uppercase + string.digits
    keys = set()
    while len(keys) < count:
        collection = rng.choice(COLLECTIONS)
        chunk_id = "".join(rng.choice(alphabet) for _ in range(rng.randint(4, 24)))
        key = (collection, chunk_id)
        if key not in exclude:
            keys.add(key)
    return sorted(keys)


def measure_latency(fn: Callable[[str, str], bool], keys: List[Tuple[str, str]], warmup: int = 10) -> Dict[str, float]:
    """
    Measure per-call latency of fn over keys.

    Returns:
        Dict with P50, P95, min, max, mean (in milliseconds); all zero for no keys
    """
    if not keys:
        return dict.fromkeys(("p50", "p95", "min", "max", "mean"), 0.0)

    for collection, chunk_id in keys[:warmup]:
        fn(collection, chunk_id)

    times = []
    for collection, chunk_id in keys:
        start = time.perf_counter()
        fn(collection, chunk_id)
        times.append((time.perf_counter() - start) * 1000)

    times.sort()
    return {
        "p50": statistics.median(times),
        "p95": times[int(len(times) * 0.95)],
        "min": min(times),
        "max": max(times),
        "mean": statistics.mean(times),
    }


def run_bloom_benchmarks(
    num_keys: int = 500,
    num_probes: int = 2000,
    bloom_hash: str = "length",
    seed: int = 7,
    report_json_path: Optional[str] = None,
) -> Dict:
    """
    Fill an in-memory vault and measure Bloom filter behaviour.

    Args:
        num_keys: Number of distinct keys to insert
        num_probes: Number of never-inserted keys to probe
        bloom_hash: Hash mode ("length" or "content")
        seed: RNG seed for key generation
        report_json_path: Optional path for a JSON report

    Returns:
        Dict with benchmark results
    """
    rng = random.Random(seed)
    config = Config(bloom_hash=bloom_hash)
    vault = Vault(config=config, authorizer=TrustAllAuthorizer())
    vault.initialize("bench")

    inserted = synthetic_keys(num_keys, rng)
    vault.batch_put(
        [collection for collection, _ in inserted],
        [chunk_id for _, chunk_id in inserted],
        [chunk_id.encode("utf-8") for _, chunk_id in inserted],
    )
    probes = synthetic_keys(num_probes, rng, exclude=frozenset(inserted))

    false_positives = sum(1 for collection, chunk_id in probes if vault.bloom_check(collection, chunk_id))
    false_negatives = sum(1 for collection, chunk_id in inserted if not vault.bloom_check(collection, chunk_id))

    results = {
        "keys_inserted": num_keys,
        "probes": num_probes,
        "false_positives": false_positives,
        "false_negatives": false_negatives,
        "empirical_fpr": false_positives / num_probes if num_probes else 0.0,
        "fill_ratio": vault.bloom.load().fill_ratio(),
        "bloom_check_latency": measure_latency(vault.bloom_check, probes),
        "has_latency": measure_latency(vault.has, probes),
    }

    if report_json_path:
        write_json_report(Path(report_json_path), "bloom", results, config=config.to_dict())

    return results
