"""
Sorting Network Benchmark Package

This package provides functionality to validate and benchmark the py-sortnet
networks with various problem sizes and data types.

Copyright (c) 2025 Alessandro Baretta
All rights reserved.
"""

from .sortnet_bench import (
    ALGORITHMS,
    DATA_TYPES,
    PROBLEM_SIZES,
    SPECIAL_DATA_TYPES,
    SortNetBench,
    expand_algorithms,
    expand_special_sizes,
    expand_special_types,
)

__version__ = "0.1.0"
__all__ = [
    "SortNetBench",
    "ALGORITHMS",
    "DATA_TYPES",
    "PROBLEM_SIZES",
    "SPECIAL_DATA_TYPES",
    "expand_algorithms",
    "expand_special_sizes",
    "expand_special_types",
]
