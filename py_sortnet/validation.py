# Copyright (c) 2025 Alessandro Baretta
# All rights reserved.

# source path: py_sortnet/validation.py

"""
Host-side validation of network output.

Checks network keys position by position against a host reference sort, and
checks per batch that the multiset of (key, value) pairs is unchanged, which
is what "each value is still bound to its key" means for an unstable sort.
"""

import logging
from typing import Optional

import numpy as np

logger = logging.getLogger(__name__)

def _batched(arr: np.ndarray, array_length: int) -> np.ndarray:
    arr = np.asarray(arr)
    if arr.size % array_length != 0:
        raise ValueError(f"Array of {arr.size} elements is not a whole number of batches of {array_length}")
    return arr.reshape(-1, array_length)

def reference_sort(keys: np.ndarray, array_length: Optional[int] = None, ascending: bool = True) -> np.ndarray:
    """Host reference ordering: stable sort of every batch."""
    keys = np.asarray(keys)
    if array_length is None:
        array_length = keys.shape[-1] if keys.ndim > 0 else 1
    if keys.size == 0:
        return keys.copy()
    result = np.sort(_batched(keys, array_length), axis=1, kind="stable")
    if not ascending:
        result = result[:, ::-1]
    return result.reshape(keys.shape)

def is_sorted(keys: np.ndarray, array_length: Optional[int] = None, ascending: bool = True) -> bool:
    """Check that every batch is ordered in the requested direction."""
    keys = np.asarray(keys)
    if array_length is None:
        array_length = keys.shape[-1] if keys.ndim > 0 else 1
    if keys.size == 0:
        return True
    batched = _batched(keys, array_length)
    if ascending:
        return bool(np.all(batched[:, :-1] <= batched[:, 1:]))
    return bool(np.all(batched[:, :-1] >= batched[:, 1:]))

def validate_sort(out_keys: np.ndarray, out_values: Optional[np.ndarray], ref_keys: np.ndarray,
                  in_keys: Optional[np.ndarray] = None, in_values: Optional[np.ndarray] = None,
                  array_length: Optional[int] = None, verbose: bool = False) -> int:
    """Compare network output with the reference.

    Args:
        out_keys: Keys produced by the network
        out_values: Values produced by the network (None to skip the binding check)
        ref_keys: Host reference keys
        in_keys: Keys before sorting (needed for the binding check)
        in_values: Values before sorting (needed for the binding check)
        array_length: Batch length (default: last dimension of ``out_keys``)
        verbose: Log both sequences of every failing batch

    Returns:
        0 if everything matches, otherwise the number of key positions that
        differ from the reference plus the number of batches whose
        (key, value) multiset changed.
    """
    out_keys = np.asarray(out_keys)
    ref_keys = np.asarray(ref_keys)
    if out_keys.shape != ref_keys.shape:
        raise ValueError(f"Shapes do not match: {out_keys.shape} != {ref_keys.shape}")
    if array_length is None:
        array_length = out_keys.shape[-1] if out_keys.ndim > 0 else 1
    if out_keys.size == 0:
        return 0

    out_b = _batched(out_keys, array_length)
    ref_b = _batched(ref_keys, array_length)
    key_diff = out_b != ref_b
    mismatches = int(np.count_nonzero(key_diff))
    bad_batches = set(np.flatnonzero(key_diff.any(axis=1)).tolist())

    check_binding = out_values is not None and in_keys is not None and in_values is not None
    if check_binding:
        in_kb = _batched(in_keys, array_length)
        in_vb = _batched(in_values, array_length)
        out_vb = _batched(out_values, array_length)

        order_in = np.lexsort((in_vb, in_kb), axis=-1)
        order_out = np.lexsort((out_vb, out_b), axis=-1)
        same_keys = np.take_along_axis(in_kb, order_in, axis=1) == np.take_along_axis(out_b, order_out, axis=1)
        same_values = np.take_along_axis(in_vb, order_in, axis=1) == np.take_along_axis(out_vb, order_out, axis=1)
        broken = np.flatnonzero(~np.all(same_keys & same_values, axis=1))
        mismatches += int(broken.size)
        bad_batches.update(broken.tolist())

    if mismatches:
        logger.warning(f"Validation failed: {mismatches} mismatches in {len(bad_batches)} batch(es)")
        if verbose:
            for b in sorted(bad_batches):
                logger.info(f"  batch {b} network:   {out_b[b].tolist()}")
                logger.info(f"  batch {b} reference: {ref_b[b].tolist()}")
                if check_binding:
                    logger.info(f"  batch {b} values:    {out_vb[b].tolist()}")
    return mismatches

__all__ = ['reference_sort', 'is_sorted', 'validate_sort']
