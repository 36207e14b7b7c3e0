"""
Benchmark example for chunkvault.
"""

from chunkvault.benchmarks import run_bloom_benchmarks

# Compare the two Bloom hash modes on the same synthetic keys
for mode in ("length", "content"):
    results = run_bloom_benchmarks(num_keys=500, num_probes=2000, bloom_hash=mode)
    print(f"[{mode}] false positives: {results['false_positives']}/{results['probes']} ({results['empirical_fpr']:.2%})")
    print(f"[{mode}] bloom_check latency (P50): {results['bloom_check_latency']['p50']:.3f} ms")
    print(f"[{mode}] has latency (P50): {results['has_latency']['p50']:.3f} ms")
