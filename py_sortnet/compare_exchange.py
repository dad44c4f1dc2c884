# Copyright (c) 2025 Alessandro Baretta
# All rights reserved.

# source path: py_sortnet/compare_exchange.py

"""
Compare-exchange primitive for py-sortnet

The atomic unit of every sorting network: a conditional swap of two elements
according to a direction flag. Operates on many disjoint pairs at once, which
is how one block of lanes executes it.
"""

from typing import Optional, Union

import numpy as np
from numpy.typing import ArrayLike

def compare_exchange(keys: np.ndarray, values: Optional[np.ndarray],
                     lo: ArrayLike, hi: ArrayLike,
                     ascending: Union[bool, ArrayLike] = True) -> None:
    """Order each pair (lo[k], hi[k]) of ``keys`` in place.

    Args:
        keys: Key array, modified in place
        values: Optional value array of the same length, permuted with the keys
        lo: Index (or index array) of the first element of each pair
        hi: Index (or index array) of the second element of each pair
        ascending: Direction per pair (broadcast). True puts the smaller key at
            ``lo``, False puts the larger key at ``lo``.

    Note:
        The comparison is strict, so a pair of equal keys is never swapped and
        equal-key elements keep their positions within one comparator.
        Index pairs must be disjoint; nothing here guards against overlap.
    """
    lo = np.atleast_1d(np.asarray(lo, dtype=np.int64))
    hi = np.atleast_1d(np.asarray(hi, dtype=np.int64))
    if lo.size == 0:
        return
    ascending = np.broadcast_to(np.asarray(ascending, dtype=bool), lo.shape)

    key_lo = keys[lo]
    key_hi = keys[hi]
    swap = np.where(ascending, key_lo > key_hi, key_lo < key_hi)
    if not swap.any():
        return

    lo = lo[swap]
    hi = hi[swap]
    keys[lo] = key_hi[swap]
    keys[hi] = key_lo[swap]

    if values is not None:
        value_lo = values[lo]
        values[lo] = values[hi]
        values[hi] = value_lo

__all__ = ['compare_exchange']
