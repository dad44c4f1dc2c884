"""
Test utilities for py-sortnet test suite.

Common functions for validating network output and benchmarking.
"""

import numpy as np
import time
from typing import Callable, Dict, Any

def validate_basic_properties(result, expected_shape, expected_dtype):
    """
    Validate basic properties of a result array.
    """
    assert isinstance(result, np.ndarray), f"Result should be numpy array, got {type(result)}"
    assert result.shape == expected_shape, f"Wrong shape: expected {expected_shape}, got {result.shape}"
    assert result.dtype == expected_dtype, f"Wrong dtype: expected {expected_dtype}, got {result.dtype}"

def get_numpy_reference_sort(keys, ascending=True):
    """NumPy reference: sort along the last axis."""
    result = np.sort(keys, axis=-1)
    if not ascending:
        result = np.flip(result, axis=-1)
    return result

def get_numpy_reference_tensor_sort(tensor, axis_name, ascending=True):
    """
    NumPy reference for 3D tensor sorting.

    Args:
        tensor: 3D array to sort
        axis_name: "sheets", "rows", or "cols"
    """
    if axis_name == "sheets":
        axis = 0
    elif axis_name == "rows":
        axis = 1
    elif axis_name == "cols":
        axis = 2
    else:
        raise ValueError(f"Unknown axis: {axis_name}")

    result = np.sort(tensor, axis=axis)
    if not ascending:
        result = np.flip(result, axis=axis)
    return result

def assert_sorted_with_values(keys_out, values_out, keys_in, values_in, ascending=True):
    """
    Assert that every batch is sorted and each value is still attached to its key.

    Values are compared as (key, value) pair sets per batch, since the networks
    are not stable.
    """
    expected = get_numpy_reference_sort(keys_in, ascending)
    np.testing.assert_array_equal(keys_out, expected)

    k_in = np.asarray(keys_in).reshape(-1, keys_in.shape[-1])
    v_in = np.asarray(values_in).reshape(-1, keys_in.shape[-1])
    k_out = np.asarray(keys_out).reshape(-1, keys_in.shape[-1])
    v_out = np.asarray(values_out).reshape(-1, keys_in.shape[-1])
    for b in range(k_in.shape[0]):
        pairs_in = sorted(zip(k_in[b].tolist(), v_in[b].tolist()))
        pairs_out = sorted(zip(k_out[b].tolist(), v_out[b].tolist()))
        assert pairs_in == pairs_out, f"Key/value binding broken in batch {b}"

def validate_function_error_cases(func: Callable, test_cases: list):
    """
    Test that a function properly raises errors for invalid inputs.

    Args:
        func: The function to test
        test_cases: List of (args, kwargs, expected_exception_type, description)
    """
    for args, kwargs, expected_exception, description in test_cases:
        try:
            func(*args, **kwargs)
            raise AssertionError(f"Expected {expected_exception.__name__} for {description}, but function succeeded")
        except expected_exception:
            pass  # Expected behavior
        except Exception as e:
            raise AssertionError(f"Expected {expected_exception.__name__} for {description}, got {type(e).__name__}: {e}")

def benchmark_function(func: Callable, args: tuple, kwargs: dict = None, warmup_runs: int = 1, timing_runs: int = 3) -> Dict[str, float]:
    """
    Benchmark a function with warmup and multiple timing runs.

    The first positional argument is copied before every run, since the
    sorts are in place.

    Returns:
        Dictionary with timing statistics
    """
    if kwargs is None:
        kwargs = {}

    for _ in range(warmup_runs):
        func(args[0].copy(), *args[1:], **kwargs)

    times = []
    for _ in range(timing_runs):
        data = args[0].copy()
        start_time = time.perf_counter()
        func(data, *args[1:], **kwargs)
        end_time = time.perf_counter()
        times.append(end_time - start_time)

    return {
        'mean_time': np.mean(times),
        'std_time': np.std(times),
        'min_time': np.min(times),
        'max_time': np.max(times),
        'result': data,
    }

def print_performance_summary(results: Dict[str, Any], test_name: str):
    """Print a formatted performance summary."""
    print(f"\n{test_name} Performance Summary:")
    print(f"  Network Time: {results['network_time']*1000:.2f} ms")
    print(f"  NumPy Time:   {results['numpy_time']*1000:.2f} ms")
    print(f"  Ratio:        {results['ratio']:.2f}x")
    print(f"  Accuracy:     {'PASS' if results['accuracy_pass'] else 'FAIL'}")
