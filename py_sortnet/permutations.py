# Copyright (c) 2025 Alessandro Baretta
# All rights reserved.

# source path: py_sortnet/permutations.py

"""
Permutation primitives for py-sortnet

Shuffle and butterfly are pure index maps over a block of ``size`` elements
(``size`` a power of two). Both are bijections on ``[0, size)``; routing data
through them on the device always goes through a scratch buffer:

    scatter (live -> scratch), barrier, copy-back (scratch -> live), barrier

because lanes read positions that other lanes of the same launch overwrite.
"""

import logging
from typing import Callable, Dict, Optional

import numpy as np

from .device import Device, DeviceBuffer

logger = logging.getLogger(__name__)

def _check_size(size: int) -> None:
    if size <= 0 or (size & (size - 1)) != 0:
        raise ValueError(f"Permutation size ({size}) must be a power of 2")

def _check_index(i, size: int) -> None:
    if np.any(np.asarray(i) < 0) or np.any(np.asarray(i) >= size):
        raise ValueError(f"Index out of range for permutation of size {size}")

def shuffle_index(i, size: int):
    """Shuffle map: source of output position ``i`` in the de-interleaved block.

    Output position ``i < size/2`` takes source ``2*i`` and position
    ``i >= size/2`` takes source ``2*(i - size/2) + 1``, so gathering through
    this map moves the even sources to the first half and the odd sources to
    the second half. Scattering through it is the inverse, the perfect shuffle
    that interleaves the two halves.

    Args:
        i: Index or integer numpy array of indices in ``[0, size)``
        size: Block size, a power of 2

    Returns:
        Index (or array) in ``[0, size)``
    """
    _check_size(size)
    _check_index(i, size)
    half = size // 2
    return (i << 1) - (size - 1) * (i >= half)

def butterfly_index(i, size: int):
    """Butterfly map: swap bit 0 and the top bit (log2(size) - 1) of ``i``.

    Indices 0 and ``size - 1`` stay fixed, as does any index whose low and top
    bits agree; the rest are exchanged across the half boundary. The map is
    its own inverse. Sizes 1 and 2 give the identity.
    """
    _check_size(size)
    _check_index(i, size)
    if size <= 2:
        return i
    top = size.bit_length() - 2
    diff = (i ^ (i >> top)) & 1
    return i ^ (diff | (diff << top))

PERMUTATIONS: Dict[str, Callable] = {
    'shuffle': shuffle_index,
    'butterfly': butterfly_index,
}

def permutation_table(kind: str, size: int) -> np.ndarray:
    """Full index table of a permutation for one block."""
    if kind not in PERMUTATIONS:
        raise ValueError(f"Unknown permutation '{kind}', expected one of {sorted(PERMUTATIONS)}")
    return PERMUTATIONS[kind](np.arange(size, dtype=np.int64), size)

def is_bijection(table: np.ndarray) -> bool:
    """True if ``table`` uses every index of ``[0, len(table))`` exactly once."""
    table = np.asarray(table, dtype=np.int64)
    if table.ndim != 1:
        return False
    if np.any((table < 0) | (table >= table.size)):
        return False
    return bool(np.all(np.bincount(table, minlength=table.size) == 1))

# Kernels

def _scatter_kernel(tid, n, size, index_fn, d_src_keys, d_src_values, d_dst_keys, d_dst_values):
    tid = tid[tid < n]
    base = tid & ~(size - 1)
    dst = base + index_fn(tid & (size - 1), size)
    d_dst_keys.data[dst] = d_src_keys.data[tid]
    if d_src_values is not None:
        d_dst_values.data[dst] = d_src_values.data[tid]

def _copy_kernel(tid, n, d_src_keys, d_src_values, d_dst_keys, d_dst_values):
    tid = tid[tid < n]
    d_dst_keys.data[tid] = d_src_keys.data[tid]
    if d_src_values is not None:
        d_dst_values.data[tid] = d_src_values.data[tid]

def copy_buffers(device: Device, d_src_keys: DeviceBuffer, d_src_values: Optional[DeviceBuffer],
                 d_dst_keys: DeviceBuffer, d_dst_values: Optional[DeviceBuffer]) -> None:
    """Device-side copy of a key (and optional value) buffer."""
    n = d_src_keys.size
    device.launch(_copy_kernel, n, n, d_src_keys, d_src_values, d_dst_keys, d_dst_values)

def route(device: Device, kind: str, size: int,
          d_keys: DeviceBuffer, d_values: Optional[DeviceBuffer],
          d_scratch_keys: DeviceBuffer, d_scratch_values: Optional[DeviceBuffer]) -> None:
    """Scatter every aligned block of ``size`` elements through a permutation.

    Element at block offset ``j`` lands at block offset ``index_fn(j, size)``.
    The result ends up back in ``d_keys``/``d_values``; the scratch buffers are
    clobbered.
    """
    if kind not in PERMUTATIONS:
        raise ValueError(f"Unknown permutation '{kind}', expected one of {sorted(PERMUTATIONS)}")
    _check_size(size)
    n = d_keys.size
    if n % size != 0:
        raise ValueError(f"Buffer of {n} elements is not a whole number of blocks of {size}")
    if size <= 2:
        # identity on one or two elements
        return

    logger.debug(f"Route {kind} over blocks of {size}")
    device.launch(_scatter_kernel, n, n, size, PERMUTATIONS[kind],
                  d_keys, d_values, d_scratch_keys, d_scratch_values)
    device.launch(_copy_kernel, n, n,
                  d_scratch_keys, d_scratch_values, d_keys, d_values)

__all__ = [
    'shuffle_index',
    'butterfly_index',
    'PERMUTATIONS',
    'permutation_table',
    'is_bijection',
    'copy_buffers',
    'route',
]
