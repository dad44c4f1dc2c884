"""
Pytest configuration and fixtures for py-sortnet test suite.

This module provides common fixtures, test data, and configuration
for testing the sorting networks and their primitives.
"""

import pytest
import numpy as np
import sys
import os

# Add the package to the path for testing
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from py_sortnet import Device

# All supported key dtypes for testing
ALL_DTYPES = [
    np.float32, np.float64,
    np.int8, np.int16, np.int32, np.int64,
    np.uint8, np.uint16, np.uint32, np.uint64
]

# Common floating point dtypes
FLOAT_DTYPES = [np.float32, np.float64]

# Common integer dtypes
INT_DTYPES = [np.int8, np.int16, np.int32, np.int64]

# Common unsigned integer dtypes
UINT_DTYPES = [np.uint8, np.uint16, np.uint32, np.uint64]

SORT_ALGORITHM_NAMES = ["bitonic", "banyan"]

# Sort axis options for 3D tensors
SORT_AXES = ["cols", "rows", "sheets"]

# Batch lengths: trivial, below a warp, one warp, several warps, above the local size
TEST_P2_SIZES = [1, 2, 4, 8, 16, 32, 64, 256, 2048]

@pytest.fixture(params=ALL_DTYPES, ids=lambda x: x.__name__)
def dtype_all(request):
    """Fixture providing all supported dtypes."""
    return request.param

@pytest.fixture(params=FLOAT_DTYPES, ids=lambda x: x.__name__)
def dtype_float(request):
    """Fixture providing floating point dtypes."""
    return request.param

@pytest.fixture(params=INT_DTYPES + UINT_DTYPES, ids=lambda x: x.__name__)
def dtype_int(request):
    """Fixture providing integer dtypes."""
    return request.param

@pytest.fixture(params=SORT_ALGORITHM_NAMES)
def algorithm(request):
    """Fixture providing sorting network names."""
    return request.param

@pytest.fixture(params=SORT_AXES)
def sort_axis(request):
    """Fixture providing sort axis options."""
    return request.param

@pytest.fixture(scope="session")
def device():
    """Small-block device shared by the session, so launches span several blocks."""
    dev = Device(num_workers=4, block_size=64)
    yield dev
    dev.close()

@pytest.fixture
def test_input_vector_random():
    """Generate random vector"""
    def _generate(dtype, n, seed=42):
        generator = np.random.default_rng(seed)
        if np.issubdtype(dtype, np.integer):
            vec = generator.integers(0, 100, n).astype(dtype)
        else:
            vec = generator.uniform(low=0, high=1, size=n).astype(dtype)

        return vec
    return _generate

@pytest.fixture
def test_input_batches_random():
    """Generate (batch, n) random keys with per-batch position values"""
    def _generate(dtype, batch, n, key_range=100, seed=42):
        generator = np.random.default_rng(seed)
        if np.issubdtype(dtype, np.integer):
            keys = generator.integers(0, key_range, (batch, n)).astype(dtype)
        else:
            keys = generator.uniform(low=0, high=key_range, size=(batch, n)).astype(dtype)
        values = np.broadcast_to(np.arange(n, dtype=np.int64), (batch, n)).copy()

        return keys, values
    return _generate

@pytest.fixture
def test_input_tensor_3d_random():
    """Generate random tensor_3d"""
    def _generate(dtype, m=8, k=8, n=8):
        generator = np.random.default_rng(42)
        if np.issubdtype(dtype, np.integer):
            vec = generator.integers(0, 100, m * k * n).astype(dtype).reshape(m, k, n)
        else:
            vec = generator.uniform(low=0, high=1, size=m * k * n).astype(dtype).reshape(m, k, n)

        return vec
    return _generate

@pytest.fixture
def performance_sizes():
    """Generate different sizes for performance testing."""
    return [2**i for i in range(6, 15, 2)]

def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests"
    )
    config.addinivalue_line(
        "markers", "performance: marks tests as performance benchmarks"
    )
    config.addinivalue_line(
        "markers", "error_handling: marks tests of invalid input and device failures"
    )

def pytest_collection_modifyitems(config, items):
    """Modify test collection to add markers automatically."""
    for item in items:
        # Mark integration tests
        if "integration" in item.nodeid:
            item.add_marker(pytest.mark.integration)

        # Mark performance tests
        if "performance" in item.nodeid or "benchmark" in item.nodeid:
            item.add_marker(pytest.mark.performance)
            item.add_marker(pytest.mark.slow)

        if "error_handling" in item.nodeid:
            item.add_marker(pytest.mark.error_handling)
