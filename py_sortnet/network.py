# Copyright (c) 2025 Alessandro Baretta
# All rights reserved.

# source path: py_sortnet/network.py

"""
Common driver for device-side sorting networks.

A sorter owns no buffers. Callers hand it device buffers holding ``batch``
contiguous batches of ``array_length`` keys (plus optional values) and the
sorter drives its stage loop over them. Preconditions are checked before the
first launch.
"""

import logging
from typing import Optional

from .device import Device, DeviceBuffer, get_default_device
from .permutations import copy_buffers

logger = logging.getLogger(__name__)

def is_power_of_2(n: int) -> bool:
    """Check if a number is a power of 2."""
    return n > 0 and (n & (n - 1)) == 0

def int_log2(n: int) -> int:
    """log2 of a power of 2."""
    return n.bit_length() - 1

class NetworkSorter:
    """Base class for sorting networks run on a ``Device``."""

    name = "network"

    def __init__(self, device: Optional[Device] = None):
        self.device = device if device is not None else get_default_device()

    def sort_in_place(self, d_keys: DeviceBuffer, d_values: Optional[DeviceBuffer],
                      array_length: int, ascending: bool = True) -> None:
        self.sort(d_keys, d_values, d_keys, d_values, array_length, ascending)

    def sort(self, d_dst_keys: DeviceBuffer, d_dst_values: Optional[DeviceBuffer],
             d_src_keys: DeviceBuffer, d_src_values: Optional[DeviceBuffer],
             array_length: int, ascending: bool = True) -> None:
        """Sort every batch of ``d_src_*`` into ``d_dst_*``.

        Args:
            d_dst_keys: Destination keys (may be ``d_src_keys``)
            d_dst_values: Destination values, or None for key-only sorting
            d_src_keys: Source keys, ``batch * array_length`` elements
            d_src_values: Source values, or None
            array_length: Length of one batch, a power of 2
            ascending: Global sort direction

        Raises:
            ValueError: If the length is not a power of 2 or buffer sizes disagree
            DeviceError: If a launch fails
        """
        self._check_buffers(d_dst_keys, d_dst_values, d_src_keys, d_src_values, array_length)

        if d_dst_keys is not d_src_keys:
            copy_buffers(self.device, d_src_keys, d_src_values, d_dst_keys, d_dst_values)

        batch = d_src_keys.size // array_length
        logger.debug(f"{self.name}: sorting {batch} batch(es) of {array_length}, "
                     f"{'ascending' if ascending else 'descending'}")
        if array_length < 2 or batch == 0:
            return
        self._sort(d_dst_keys, d_dst_values, array_length, bool(ascending))

    def _sort(self, d_keys: DeviceBuffer, d_values: Optional[DeviceBuffer],
              array_length: int, ascending: bool) -> None:
        raise NotImplementedError

    @staticmethod
    def _check_buffers(d_dst_keys, d_dst_values, d_src_keys, d_src_values, array_length: int) -> None:
        if not is_power_of_2(array_length):
            raise ValueError(f"Sort dimension size ({array_length}) must be a power of 2")
        if d_src_keys.size % array_length != 0:
            raise ValueError(
                f"Key buffer of {d_src_keys.size} elements is not a whole number of batches of {array_length}"
            )
        if d_dst_keys.size != d_src_keys.size:
            raise ValueError("Source and destination key buffers must have the same size")
        if (d_src_values is None) != (d_dst_values is None):
            raise ValueError("Values must be given for both source and destination, or for neither")
        if d_src_values is not None:
            if d_src_values.size != d_src_keys.size or d_dst_values.size != d_src_keys.size:
                raise ValueError("Value buffers must have the same size as the key buffers")

__all__ = ['is_power_of_2', 'int_log2', 'NetworkSorter']
