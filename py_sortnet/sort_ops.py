# Copyright (c) 2025 Alessandro Baretta
# All rights reserved.

# source path: py_sortnet/sort_ops.py

"""
Sort operations module for py-sortnet

This module provides high-level Python interfaces for the sorting networks,
uploading NumPy arrays to device buffers, running the selected network and
writing the result back into the caller's arrays.

Keys are sorted in batches along the last axis. Both networks require the
batch length to be a power of 2; sort_padded lifts that restriction for 1D
input by padding explicitly.
"""

import logging
from typing import Callable, Dict, Literal, Optional, Tuple, TypeAlias, TypeVar, Union

import numpy as np
from numpy.typing import NDArray

from .banyan import BanyanSorter
from .bitonic import DEFAULT_LOCAL_SIZE, BitonicSorter
from .device import Device, get_default_device
from .network import NetworkSorter, is_power_of_2

logger = logging.getLogger(__name__)

T = TypeVar('T', bound=np.generic)

# Type mapping for sort operations (all supported key types)
_SORT_TYPE_DISPATCH_MAP = {
    np.dtype(np.float32): 'float32',
    np.dtype(np.float64): 'float64',
    np.dtype(np.int8): 'int8',
    np.dtype(np.int16): 'int16',
    np.dtype(np.int32): 'int32',
    np.dtype(np.int64): 'int64',
    np.dtype(np.uint8): 'uint8',
    np.dtype(np.uint16): 'uint16',
    np.dtype(np.uint32): 'uint32',
    np.dtype(np.uint64): 'uint64',
}

SUPPORTED_DTYPES = list(_SORT_TYPE_DISPATCH_MAP.values())

AXIS: TypeAlias = Literal["cols", "rows", "sheets"]

_AXIS_INDEX = {"sheets": 0, "rows": 1, "cols": 2}

def _validate_sort_inputs(keys: np.ndarray, values: Optional[np.ndarray],
                          array_length: Optional[int]) -> int:
    """Validate inputs for sort operations and return the batch length."""
    if not isinstance(keys, np.ndarray):
        raise ValueError(f"keys must be a numpy array, got {type(keys).__name__}")

    if keys.dtype not in _SORT_TYPE_DISPATCH_MAP:
        raise ValueError(f"Unsupported dtype {keys.dtype}")

    if keys.ndim == 0:
        raise ValueError("keys must have at least 1 dimension")

    if values is not None:
        if not isinstance(values, np.ndarray):
            raise ValueError(f"values must be a numpy array, got {type(values).__name__}")
        if values.shape != keys.shape:
            raise ValueError(f"Shape mismatch: keys {keys.shape} vs values {values.shape}")

    if np.issubdtype(keys.dtype, np.floating) and np.isnan(keys).any():
        raise ValueError("NaN keys are not totally ordered and cannot be sorted")

    if array_length is None:
        array_length = keys.shape[-1]
    elif keys.ndim != 1 and array_length != keys.shape[-1]:
        raise ValueError(
            f"array_length ({array_length}) must match the last dimension ({keys.shape[-1]}) for N-D keys"
        )

    if not is_power_of_2(array_length):
        raise ValueError(f"Sort dimension size ({array_length}) must be a power of 2")

    if keys.size % array_length != 0:
        raise ValueError(f"Key count ({keys.size}) is not a multiple of array_length ({array_length})")

    return array_length

def _run_network(sorter: NetworkSorter, keys: np.ndarray, values: Optional[np.ndarray],
                 array_length: int, ascending: bool) -> None:
    device = sorter.device
    d_keys = device.to_device(keys)
    d_values = None
    try:
        if values is not None:
            d_values = device.to_device(values)
        sorter.sort_in_place(d_keys, d_values, array_length, ascending)

        # Readback only after the whole network completed
        d_keys.copy_to_host(out=keys)
        if d_values is not None:
            d_values.copy_to_host(out=values)
    finally:
        d_keys.free()
        if d_values is not None:
            d_values.free()

def sort_bitonic(keys: Union[NDArray[T], np.ndarray], values: Optional[np.ndarray] = None, *,
                 array_length: Optional[int] = None, ascending: bool = True,
                 device: Optional[Device] = None,
                 local_size_limit: Optional[int] = DEFAULT_LOCAL_SIZE) -> None:
    """Bitonic merge sort of batched keys (in-place operation).

    Args:
        keys: Keys to sort in place. N-D arrays are sorted along the last axis;
            1-D arrays form one batch unless array_length is given.
        values: Optional array of the same shape, permuted along with the keys
        array_length: Batch length for flat 1-D input (default: last dimension)
        ascending: Sort direction
        device: Device to run on (default: process-wide device)
        local_size_limit: Chunk size for fused local launches (None: global only)

    Raises:
        ValueError: If input validation fails or the batch length is not a power of 2
        DeviceError: If allocation or a kernel launch fails

    Note:
        The sort is not stable: equal keys may come out in any order, but every
        value stays attached to its own key.

    Examples:
        >>> keys = np.array([3, 1, 4, 1, 5, 9, 2, 6], dtype=np.int32)
        >>> values = np.arange(8, dtype=np.int32)
        >>> sort_bitonic(keys, values)
        >>> keys
        array([1, 1, 2, 3, 4, 5, 6, 9], dtype=int32)
    """
    array_length = _validate_sort_inputs(keys, values, array_length)
    sorter = BitonicSorter(device, local_size_limit=local_size_limit)
    _run_network(sorter, keys, values, array_length, ascending)

def sort_banyan(keys: Union[NDArray[T], np.ndarray], values: Optional[np.ndarray] = None, *,
                array_length: Optional[int] = None, ascending: bool = True,
                device: Optional[Device] = None) -> None:
    """Banyan network sort of batched keys (in-place operation).

    Same contract as sort_bitonic; the network routes elements with shuffle and
    butterfly permutations between fixed adjacent comparators.
    """
    array_length = _validate_sort_inputs(keys, values, array_length)
    sorter = BanyanSorter(device)
    _run_network(sorter, keys, values, array_length, ascending)

SORT_ALGORITHMS: Dict[str, Callable[..., None]] = {
    'bitonic': sort_bitonic,
    'banyan': sort_banyan,
}

def _get_sort_function(algorithm: str) -> Callable[..., None]:
    if algorithm not in SORT_ALGORITHMS:
        raise ValueError(f"algorithm must be one of: {', '.join(SORT_ALGORITHMS)}")
    return SORT_ALGORITHMS[algorithm]

def _validate_tensor_p2_sort_inputs(tensor: np.ndarray, sort_axis: AXIS) -> None:
    """Validate inputs for tensor sort operations."""
    if not isinstance(tensor, np.ndarray) or tensor.ndim != 3:
        raise ValueError(f"Input array must be 3-dimensional")

    if tensor.dtype not in _SORT_TYPE_DISPATCH_MAP:
        raise ValueError(f"Unsupported dtype {tensor.dtype}")

    if sort_axis not in _AXIS_INDEX:
        raise ValueError(f"sort_axis must be one of: 'cols', 'rows', 'sheets'")

    # Numpy C-contiguous arrays have shape (sheet, row, col)
    target_size = tensor.shape[_AXIS_INDEX[sort_axis]]
    if not is_power_of_2(target_size):
        raise ValueError(f"Sort dimension size ({target_size}) must be a power of 2")
    return

def tensor_sort(tensor: Union[NDArray[T], np.ndarray], sort_axis: AXIS, algorithm: str = "bitonic",
                ascending: bool = True, device: Optional[Device] = None) -> None:
    """3D tensor sort along one dimension (in-place operation).

    Args:
        tensor: 3D tensor to sort in-place (shape: (sheet, row, col))
        sort_axis: Dimension to sort along:
            - "cols": Sort along dimension 2 (third dimension - columns)
            - "rows": Sort along dimension 1 (second dimension - rows)
            - "sheets": Sort along dimension 0 (first dimension - sheets)
        algorithm: "bitonic" or "banyan"
        ascending: Sort direction
        device: Device to run on

    Raises:
        ValueError: If input validation fails or sort dimension size is not a power of 2

    Examples:
        >>> tensor = np.random.randint(0, 100, (4, 8, 16), dtype=np.int32)
        >>> tensor_sort(tensor, "cols")  # every (sheet, row) line of 16 sorted
    """
    _validate_tensor_p2_sort_inputs(tensor, sort_axis)
    func = _get_sort_function(algorithm)

    moved = np.moveaxis(tensor, _AXIS_INDEX[sort_axis], -1)
    work = np.ascontiguousarray(moved)
    func(work, ascending=ascending, device=device)
    moved[...] = work

def sort_padded(keys: np.ndarray, values: Optional[np.ndarray] = None, *, ascending: bool = True,
                algorithm: str = "bitonic",
                device: Optional[Device] = None) -> Tuple[np.ndarray, Optional[np.ndarray]]:
    """Sort a 1-D array of any length by padding it to the next power of 2.

    Padding elements get the dtype's extreme value so they sort to the end;
    they are dropped by identity, not by position, so real keys equal to the
    pad value keep their own values.

    Returns:
        Sorted copies (keys, values); values is None when not given.
    """
    func = _get_sort_function(algorithm)
    keys = np.asarray(keys)
    if keys.ndim != 1:
        raise ValueError("sort_padded only accepts 1D keys")
    if keys.dtype not in _SORT_TYPE_DISPATCH_MAP:
        raise ValueError(f"Unsupported dtype {keys.dtype}")
    if values is not None and np.shape(values) != keys.shape:
        raise ValueError(f"Shape mismatch: keys {keys.shape} vs values {np.shape(values)}")

    n = keys.size
    if n == 0:
        return keys.copy(), (np.asarray(values).copy() if values is not None else None)

    padded_n = 1 << (n - 1).bit_length()
    if np.issubdtype(keys.dtype, np.floating):
        pad_value = np.inf if ascending else -np.inf
    else:
        info = np.iinfo(keys.dtype)
        pad_value = info.max if ascending else info.min

    work_keys = np.full(padded_n, pad_value, dtype=keys.dtype)
    work_keys[:n] = keys
    origin = np.arange(padded_n, dtype=np.int64)
    logger.debug(f"sort_padded: {n} -> {padded_n} elements")

    func(work_keys, origin, ascending=ascending, device=device)

    real = origin < n
    sorted_keys = work_keys[real]
    sorted_values = np.asarray(values)[origin[real]] if values is not None else None
    return sorted_keys, sorted_values

__all__ = [
    'SUPPORTED_DTYPES',
    'SORT_ALGORITHMS',
    'sort_bitonic',
    'sort_banyan',
    'tensor_sort',
    'sort_padded',
]
