# Copyright (c) 2025 Alessandro Baretta
# All rights reserved.

# source path: py_sortnet/bitonic.py

"""
Bitonic merge network for py-sortnet

For every merge size ``size`` = 2, 4, ..., N and every compare distance
``stride`` = size/2, ..., 1, element ``i`` is compared with ``i ^ stride``.
The pair sorts ascending when bit ``size`` of the in-batch index of ``i`` is
clear, flipped for a descending sort. Before the merge at ``size`` the data
is made of bitonic runs of length ``size``; the merge turns each into a
monotone run.

Each (size, stride) layer is a launch followed by a barrier. Layers whose
stride is below the local size limit touch only aligned chunks of that many
elements, so they are fused into local launches where each block owns its
chunk and runs the layers back to back.
"""

import logging
from typing import List, Optional, Tuple

import numpy as np

from .compare_exchange import compare_exchange
from .device import Device, DeviceBuffer
from .network import NetworkSorter, int_log2, is_power_of_2

logger = logging.getLogger(__name__)

DEFAULT_LOCAL_SIZE = 1024

def _bitonic_layer(keys, values, tid, array_length, size, stride, ascending):
    """One comparator layer for the lanes in ``tid``."""
    partner = tid ^ stride
    active = partner > tid
    lo = tid[active]
    hi = partner[active]
    up = ((lo & (array_length - 1) & size) == 0) == ascending
    compare_exchange(keys, values, lo, hi, up)

# Kernels

def _bitonic_merge_global(tid, n, array_length, size, stride, ascending, d_keys, d_values):
    tid = tid[tid < n]
    values = d_values.data if d_values is not None else None
    _bitonic_layer(d_keys.data, values, tid, array_length, size, stride, ascending)

def _bitonic_sort_local(tid, n, array_length, max_size, ascending, d_keys, d_values):
    # Block owns an aligned chunk of max_size elements (or whole batches of it)
    tid = tid[tid < n]
    keys = d_keys.data
    values = d_values.data if d_values is not None else None
    size = 2
    while size <= max_size:
        stride = size // 2
        while stride > 0:
            _bitonic_layer(keys, values, tid, array_length, size, stride, ascending)
            stride >>= 1
        size <<= 1

def _bitonic_merge_local(tid, n, array_length, size, stride, ascending, d_keys, d_values):
    tid = tid[tid < n]
    keys = d_keys.data
    values = d_values.data if d_values is not None else None
    while stride > 0:
        _bitonic_layer(keys, values, tid, array_length, size, stride, ascending)
        stride >>= 1

class BitonicSorter(NetworkSorter):
    """Bitonic merge sort of batched key/value buffers.

    Args:
        device: Device to launch on (default device if None)
        local_size_limit: Chunk size for fused local launches, a power of 2.
            None runs every layer as its own global launch.
    """

    name = "bitonic"

    def __init__(self, device: Optional[Device] = None,
                 local_size_limit: Optional[int] = DEFAULT_LOCAL_SIZE):
        super().__init__(device)
        if local_size_limit is not None and not is_power_of_2(local_size_limit):
            raise ValueError(f"local_size_limit ({local_size_limit}) must be a power of 2")
        if local_size_limit is not None and local_size_limit < 2:
            raise ValueError("local_size_limit must be at least 2")
        self.local_size_limit = local_size_limit

    def _sort(self, d_keys: DeviceBuffer, d_values: Optional[DeviceBuffer],
              array_length: int, ascending: bool) -> None:
        if self.local_size_limit is None:
            self._sort_global(d_keys, d_values, array_length, ascending)
        else:
            self._sort_local(d_keys, d_values, array_length, ascending)

    def _sort_global(self, d_keys, d_values, array_length, ascending):
        n = d_keys.size
        size = 2
        while size <= array_length:
            stride = size // 2
            while stride > 0:
                self.device.launch(_bitonic_merge_global, n,
                                   n, array_length, size, stride, ascending, d_keys, d_values)
                stride >>= 1
            size <<= 1

    def _sort_local(self, d_keys, d_values, array_length, ascending):
        n = d_keys.size
        limit = self.local_size_limit

        if array_length <= limit:
            # Whole batches fit in one block: a single launch does everything
            self.device.launch(_bitonic_sort_local, n,
                               n, array_length, array_length, ascending, d_keys, d_values,
                               block_size=limit)
            return

        self.device.launch(_bitonic_sort_local, n,
                           n, array_length, limit, ascending, d_keys, d_values,
                           block_size=limit)

        size = 2 * limit
        while size <= array_length:
            stride = size // 2
            while stride > 0:
                if stride >= limit:
                    self.device.launch(_bitonic_merge_global, n,
                                       n, array_length, size, stride, ascending, d_keys, d_values)
                    stride >>= 1
                else:
                    self.device.launch(_bitonic_merge_local, n,
                                       n, array_length, size, stride, ascending, d_keys, d_values,
                                       block_size=limit)
                    break
            size <<= 1

def bitonic_depth(array_length: int) -> int:
    """Number of comparator layers for one batch of ``array_length``."""
    if not is_power_of_2(array_length):
        raise ValueError(f"Sort dimension size ({array_length}) must be a power of 2")
    n = int_log2(array_length)
    return n * (n + 1) // 2

def bitonic_schedule(array_length: int, ascending: bool = True) -> List[List[Tuple[int, int, bool]]]:
    """Comparator layers of the network as ``(lo, hi, ascending)`` triples.

    Layer ``k`` holds ``array_length / 2`` comparators on disjoint pairs.
    """
    if not is_power_of_2(array_length):
        raise ValueError(f"Sort dimension size ({array_length}) must be a power of 2")

    layers = []
    size = 2
    while size <= array_length:
        stride = size // 2
        while stride > 0:
            layer = []
            for i in range(array_length):
                partner = i ^ stride
                if partner > i:
                    layer.append((i, partner, ((i & size) == 0) == ascending))
            layers.append(layer)
            stride >>= 1
        size <<= 1
    return layers

def apply_schedule(keys: np.ndarray, schedule: List[List[Tuple[int, int, bool]]],
                   values: Optional[np.ndarray] = None) -> None:
    """Run a comparator schedule serially on the host (reference path)."""
    for layer in schedule:
        for lo, hi, up in layer:
            compare_exchange(keys, values, lo, hi, up)

__all__ = [
    'DEFAULT_LOCAL_SIZE',
    'BitonicSorter',
    'bitonic_depth',
    'bitonic_schedule',
    'apply_schedule',
]
