#!/usr/bin/env python3
"""
Example: Sorting Networks

This example demonstrates the bitonic and banyan networks: batched key/value
sorting, tensor sorting along one dimension, the power-of-2 requirement and
the padding helper.
"""

import numpy as np
import time
import py_sortnet

def basic_usage():
    """Key/value sort of one small batch."""
    print("=== Basic Usage: sort_bitonic / sort_banyan ===")

    for name in ("bitonic", "banyan"):
        keys = np.array([3, 1, 4, 1, 5, 9, 2, 6], dtype=np.int32)
        values = np.arange(8, dtype=np.int32)

        py_sortnet.SORT_ALGORITHMS[name](keys, values)

        print(f"{name}:")
        print(f"  keys:   {keys}")
        print(f"  values: {values}  (original positions; the two 1s may come out in either order)")

    print()

def batched_sorting():
    """Many independent batches in one call."""
    print("=== Batched Sorting ===")

    generator = np.random.default_rng(42)
    keys = generator.integers(0, 100, (4, 16), dtype=np.int64)
    values = np.broadcast_to(np.arange(16), keys.shape).copy()
    original = keys.copy()

    py_sortnet.sort_banyan(keys, values, ascending=False)

    for b in range(keys.shape[0]):
        print(f"  batch {b}: {keys[b]}")
    print(f"  Values follow keys: {np.array_equal(np.take_along_axis(original, values, axis=1), keys)}")
    print()

def tensor_sorting():
    """Sort a 3D tensor along each dimension."""
    print("=== Tensor Sort ===")

    tensor = np.random.default_rng(0).integers(0, 1000, (8, 4, 16), dtype=np.int32)

    for axis_name, axis_num in [("sheets", 0), ("rows", 1), ("cols", 2)]:
        tensor_copy = tensor.copy()

        start_time = time.time()
        py_sortnet.tensor_sort(tensor_copy, axis_name, algorithm="bitonic")
        elapsed = time.time() - start_time

        match = np.array_equal(tensor_copy, np.sort(tensor, axis=axis_num))
        print(f"  {axis_name:>6}: {elapsed*1000:6.2f} ms, matches NumPy: {match}")

    print()

def power_of_2_requirements():
    """Demonstrate the power-of-2 batch length requirement."""
    print("=== Power-of-2 Requirements ===")

    for n in (16, 12):
        keys = np.arange(n, dtype=np.float32)[::-1].copy()
        try:
            py_sortnet.sort_bitonic(keys)
            print(f"  length {n}: sorted")
        except ValueError as e:
            print(f"  length {n}: rejected ({e})")

    keys = np.array([5.5, -1.0, 3.25, 0.0, 2.0], dtype=np.float64)
    sorted_keys, sorted_values = py_sortnet.sort_padded(keys, np.arange(5), algorithm="banyan")
    print(f"  sort_padded: {keys} -> {sorted_keys} (origins {sorted_values})")
    print()

def validation_demo():
    """Validate network output the way the benchmark harness does."""
    print("=== Validation ===")

    generator = np.random.default_rng(1)
    keys = generator.integers(0, 64, (8, 64)).astype(np.int32)
    values = np.broadcast_to(np.arange(64), keys.shape).copy()
    reference = py_sortnet.reference_sort(keys)

    out_keys, out_values = keys.copy(), values.copy()
    with py_sortnet.Device(num_workers=4, block_size=128) as device:
        py_sortnet.sort_banyan(out_keys, out_values, device=device)
        print(f"  Kernel launches: {device.launch_count}")

    mismatches = py_sortnet.validate_sort(out_keys, out_values, reference, keys, values)
    print(f"  Mismatches: {mismatches}")
    print()

def main():
    """Run all examples."""
    print("Sorting Network Examples")
    print("=" * 45)

    try:
        basic_usage()
        batched_sorting()
        tensor_sorting()
        power_of_2_requirements()
        validation_demo()

        print("✅ All examples completed successfully!")

    except Exception as e:
        print(f"❌ Error: {e}")
        return 1

    return 0

if __name__ == "__main__":
    exit(main())
