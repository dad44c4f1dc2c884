# Copyright (c) 2025 Alessandro Baretta
# All rights reserved.

# source path: py_sortnet/banyan.py

"""
Batcher banyan network for py-sortnet

The comparators are fixed: comparator ``c`` of a batch always joins adjacent
positions ``2c`` and ``2c + 1``. Instead of reaching across the array, the
network moves data between compare launches with the shuffle and butterfly
permutations so that the pair to be compared sits on those two positions.

Stage ``s`` (0 <= s < log2 N) merges bitonic runs of 2**(s+1) elements with
``s + 1`` substages. Positions are only permuted inside aligned blocks of
2**(s+1), so bit ``s + 1`` of a position (bit ``level`` = ``s`` of its
comparator) still names the run and fixes the direction. Routing per stage:

    substage 0          butterfly over 2**(s+1)             pairs differ in bit s
    substages 1..s-1    shuffle over 2**s                   pairs differ in bit s - t
    substage s          shuffle over 2**s, butterfly        pairs differ in bit 0,
                        over 2**(s+1)                       layout back to identity

Every launch, permutation steps included, is followed by a device barrier.
"""

import logging
from typing import Optional

import numpy as np

from .compare_exchange import compare_exchange
from .device import Device, DeviceBuffer
from .network import NetworkSorter, int_log2
from .permutations import route

logger = logging.getLogger(__name__)

def comparator_direction(comparator, level: int, ascending: bool = True):
    """Direction of an in-batch comparator at ``level``: bit ``level`` clear sorts up."""
    return (((comparator >> level) & 1) == 0) == ascending

# Kernels

def _direction_kernel(tid, n, array_length, level, ascending, d_directions):
    tid = tid[tid < n]
    comparator = (tid & (array_length - 1)) >> 1
    d_directions.data[tid] = comparator_direction(comparator, level, ascending)

def _compare_kernel(tid, n_comparators, d_keys, d_values, d_directions):
    tid = tid[tid < n_comparators]
    lo = tid << 1
    values = d_values.data if d_values is not None else None
    compare_exchange(d_keys.data, values, lo, lo + 1, d_directions.data[lo])

class BanyanSorter(NetworkSorter):
    """Banyan (shuffle/butterfly routed) bitonic network."""

    name = "banyan"

    def __init__(self, device: Optional[Device] = None):
        super().__init__(device)

    def _sort(self, d_keys: DeviceBuffer, d_values: Optional[DeviceBuffer],
              array_length: int, ascending: bool) -> None:
        device = self.device
        n = d_keys.size
        stages = int_log2(array_length)

        d_scratch_keys = device.alloc(n, d_keys.dtype)
        d_scratch_values = None
        d_directions = None
        try:
            if d_values is not None:
                d_scratch_values = device.alloc(n, d_values.dtype)
            d_directions = device.alloc(n, np.bool_)

            level = 0
            for stage in range(stages):
                for substage in range(stage + 1):
                    if substage == 0:
                        level = stage
                        route(device, "butterfly", 2 << stage,
                              d_keys, d_values, d_scratch_keys, d_scratch_values)
                    else:
                        route(device, "shuffle", 1 << stage,
                              d_keys, d_values, d_scratch_keys, d_scratch_values)
                        if substage == stage:
                            route(device, "butterfly", 2 << stage,
                                  d_keys, d_values, d_scratch_keys, d_scratch_values)

                    logger.debug(f"banyan: stage={stage} substage={substage} level={level}")
                    device.launch(_direction_kernel, n, n, array_length, level, ascending, d_directions)
                    device.launch(_compare_kernel, n // 2, n // 2, d_keys, d_values, d_directions)
        finally:
            d_scratch_keys.free()
            if d_scratch_values is not None:
                d_scratch_values.free()
            if d_directions is not None:
                d_directions.free()

__all__ = ['BanyanSorter', 'comparator_direction']
