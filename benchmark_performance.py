#!/usr/bin/env python3
"""
Performance benchmark suite for py-sortnet package
Compares the sorting networks with NumPy's sort across sizes and batch counts
"""

import argparse
import numpy as np
import time
import sys
from typing import Callable, Dict, List

try:
    import py_sortnet
    print("✅ py-sortnet imported successfully")
except ImportError as e:
    print(f"❌ Failed to import py-sortnet: {e}")
    sys.exit(1)

def time_sort(func: Callable, data: np.ndarray, *args, warmup_runs: int = 1, timing_runs: int = 3, **kwargs):
    """Time an in-place sort on fresh copies of ``data``"""
    for _ in range(warmup_runs):
        func(data.copy(), *args, **kwargs)

    times = []
    for _ in range(timing_runs):
        work = data.copy()
        start = time.perf_counter()
        func(work, *args, **kwargs)
        times.append(time.perf_counter() - start)

    return np.median(times), work

def _numpy_sort_in_place(keys):
    keys.sort(axis=-1)

def benchmark_batch_lengths(device: py_sortnet.Device, batch: int, lengths: List[int]) -> List[Dict]:
    """Benchmark both networks for each batch length"""
    print(f"\n📊 SORTING NETWORK BENCHMARK ({batch} batches)")
    print("=" * 60)

    results = []
    generator = np.random.default_rng(42)

    for n in lengths:
        print(f"\n  Testing {batch} x {n} int32 keys:")
        keys = generator.integers(0, 1 << 20, (batch, n)).astype(np.int32)

        cpu_time, cpu_result = time_sort(_numpy_sort_in_place, keys)
        print(f"    CPU (NumPy sort):   {cpu_time*1000:8.2f}ms")

        for name in ("bitonic", "banyan"):
            func = py_sortnet.SORT_ALGORITHMS[name]
            launches_before = device.launch_count
            net_time, net_result = time_sort(func, keys, device=device)
            launches = (device.launch_count - launches_before) // 4
            correct = np.array_equal(net_result, cpu_result)
            throughput = batch * n / net_time if net_time > 0 else float('inf')

            print(f"    {name:<8}            {net_time*1000:8.2f}ms "
                  f"({throughput:10.3e} elements/s, {launches} launches, correct: {correct})")

            results.append({
                'algorithm': name,
                'size': n,
                'batch': batch,
                'cpu_time': cpu_time,
                'network_time': net_time,
                'ratio': net_time / cpu_time if cpu_time > 0 else float('inf'),
                'throughput': throughput,
                'launches': launches,
                'correct': correct,
            })

    return results

def benchmark_local_size_limits(device: py_sortnet.Device, n: int, limits: List) -> List[Dict]:
    """Compare fused local kernels with the all-global bitonic schedule"""
    print(f"\n📊 BITONIC LOCAL SIZE LIMIT BENCHMARK (length {n})")
    print("=" * 60)

    results = []
    keys = np.random.default_rng(7).uniform(0, 1, (4, n)).astype(np.float32)

    for limit in limits:
        net_time, _ = time_sort(py_sortnet.sort_bitonic, keys, device=device, local_size_limit=limit)
        label = "global only" if limit is None else f"local {limit}"
        print(f"    {label:<14} {net_time*1000:8.2f}ms")
        results.append({'local_size_limit': limit, 'network_time': net_time})

    return results

def summarize_results(all_results: List[Dict]):
    """Summarize benchmark results"""
    print("\n🎯 PERFORMANCE BENCHMARK SUMMARY")
    print("=" * 60)

    for name in ("bitonic", "banyan"):
        alg_results = [r for r in all_results if r.get('algorithm') == name]
        if alg_results:
            avg_ratio = np.mean([r['ratio'] for r in alg_results])
            all_correct = all(r['correct'] for r in alg_results)
            print(f"{name}:")
            print(f"  Average time relative to NumPy: {avg_ratio:.2f}x")
            print(f"  All results correct: {all_correct}")

def main():
    """Run performance benchmark suite"""
    parser = argparse.ArgumentParser(description="Benchmark py-sortnet against NumPy")
    parser.add_argument('--batch', type=int, default=16, help='Batches per sort')
    parser.add_argument('--max-length', type=int, default=4096, help='Largest batch length (power of 2)')
    parser.add_argument('--workers', type=int, help='Device worker threads')
    parser.add_argument('--block-size', type=int, default=py_sortnet.DEFAULT_BLOCK_SIZE,
                        help='Lanes per device block')
    args = parser.parse_args()

    print("⚡ PY-SORTNET PERFORMANCE BENCHMARK SUITE")
    print("=" * 60)
    print("Comparing sorting networks with NumPy's sort")
    print("(Timing includes upload and readback)")

    lengths = []
    n = 8
    while n <= args.max_length:
        lengths.append(n)
        n *= 4

    all_results = []
    with py_sortnet.Device(num_workers=args.workers, block_size=args.block_size) as device:
        try:
            all_results.extend(benchmark_batch_lengths(device, args.batch, lengths))
            benchmark_local_size_limits(device, args.max_length, [None, 64, 256, py_sortnet.DEFAULT_LOCAL_SIZE])
        except (ValueError, py_sortnet.DeviceError) as e:
            print(f"❌ Error: {e}")
            return 1

    summarize_results(all_results)

    print(f"\n🏁 BENCHMARK COMPLETE")
    print("=" * 60)
    print("📝 Note: the networks run a fixed number of launches regardless of the input;")
    print("📊 launch overhead dominates small batches, so batch many sorts together")

    return 0

if __name__ == "__main__":
    sys.exit(main())
