# Copyright (c) 2025 Alessandro Baretta
# All rights reserved.

# source path: py_sortnet/device.py

"""
Emulated SIMT device for py-sortnet

A kernel launch is a parallel-for over a flat index space. The index space is
cut into blocks of ``block_size`` lanes; every block is one task on a thread
pool and runs its lanes as a single vectorized numpy operation. ``launch``
returns only after every block has finished, which is the device-wide barrier
between dependent stages. Blocks of one launch are not ordered relative to
each other.

Device memory is a set of explicitly owned ``DeviceBuffer`` handles. Kernels
never reach buffers through globals: the sorters pass them as launch
arguments.
"""

import logging
import os
import threading
from concurrent.futures import ThreadPoolExecutor, wait
from typing import Any, Callable, Optional

import numpy as np

logger = logging.getLogger(__name__)

# Constants for the emulated architecture
WARP_SIZE = 32
DEFAULT_BLOCK_SIZE = 256

class DeviceError(RuntimeError):
    """Fatal device-side failure (allocation, launch, buffer misuse)."""

class DeviceAllocationError(DeviceError):
    """A buffer could not be allocated."""

class KernelLaunchError(DeviceError):
    """A kernel raised inside at least one block."""

class DeviceBuffer:
    """A device allocation owned by whoever allocated it."""

    def __init__(self, device: "Device", data: np.ndarray):
        self._device = device
        self._data = data
        self._freed = False

    @property
    def data(self) -> np.ndarray:
        if self._freed:
            raise DeviceError("Use of a freed device buffer")
        return self._data

    @property
    def size(self) -> int:
        return self._data.size

    @property
    def dtype(self) -> np.dtype:
        return self._data.dtype

    @property
    def nbytes(self) -> int:
        return self._data.nbytes

    @property
    def freed(self) -> bool:
        return self._freed

    def copy_from_host(self, host: np.ndarray) -> None:
        """Upload ``host`` into this buffer (same number of elements)."""
        host = np.asarray(host)
        if host.size != self.size:
            raise ValueError(f"Host array has {host.size} elements, buffer has {self.size}")
        np.copyto(self.data, host.reshape(-1), casting="same_kind")

    def copy_to_host(self, out: Optional[np.ndarray] = None) -> np.ndarray:
        """Read the buffer back. Writes into ``out`` when given."""
        if out is None:
            return self.data.copy()
        if out.size != self.size:
            raise ValueError(f"Output array has {out.size} elements, buffer has {self.size}")
        out[...] = self.data.reshape(out.shape)
        return out

    def free(self) -> None:
        if not self._freed:
            self._device._release(self)
            self._freed = True

    def __repr__(self) -> str:
        state = "freed" if self._freed else f"{self.size} x {self.dtype}"
        return f"DeviceBuffer({state})"

class Device:
    """Thread-pool backed SIMT device.

    Args:
        num_workers: Number of pool threads (default: CPU count)
        block_size: Lanes per block for launches that do not override it
        memory_limit: Maximum bytes allocated at once (None for unlimited)
    """

    def __init__(self, num_workers: Optional[int] = None, block_size: int = DEFAULT_BLOCK_SIZE,
                 memory_limit: Optional[int] = None):
        if block_size <= 0:
            raise ValueError(f"block_size must be positive, got {block_size}")
        if num_workers is not None and num_workers <= 0:
            raise ValueError(f"num_workers must be positive, got {num_workers}")

        self.num_workers = num_workers or os.cpu_count() or 1
        self.block_size = block_size
        self.memory_limit = memory_limit

        self._pool = ThreadPoolExecutor(max_workers=self.num_workers, thread_name_prefix="sortnet-block")
        self._lock = threading.Lock()
        self._allocated = 0
        self.launch_count = 0

        logger.debug(f"Device created: workers={self.num_workers}, block_size={self.block_size}, "
                     f"memory_limit={self.memory_limit}")

    # Memory management

    @property
    def allocated_bytes(self) -> int:
        return self._allocated

    def alloc(self, size: int, dtype) -> DeviceBuffer:
        """Allocate an uninitialized buffer of ``size`` elements."""
        dtype = np.dtype(dtype)
        nbytes = size * dtype.itemsize
        with self._lock:
            if self.memory_limit is not None and self._allocated + nbytes > self.memory_limit:
                raise DeviceAllocationError(
                    f"Cannot allocate {nbytes} bytes: {self._allocated} of {self.memory_limit} in use"
                )
            try:
                data = np.empty(size, dtype=dtype)
            except (MemoryError, ValueError) as e:
                raise DeviceAllocationError(f"Cannot allocate {size} x {dtype}: {e}") from e
            self._allocated += nbytes

        logger.debug(f"Allocated {size} x {dtype} ({nbytes} bytes)")
        return DeviceBuffer(self, data)

    def to_device(self, host: np.ndarray, dtype=None) -> DeviceBuffer:
        """Allocate a buffer and upload ``host`` into it."""
        host = np.asarray(host)
        buf = self.alloc(host.size, dtype if dtype is not None else host.dtype)
        buf.copy_from_host(host)
        return buf

    def _release(self, buf: DeviceBuffer) -> None:
        with self._lock:
            self._allocated -= buf.nbytes

    # Execution

    def launch(self, kernel: Callable[..., Any], n_threads: int, *args: Any,
               block_size: Optional[int] = None) -> None:
        """Run ``kernel(tid, *args)`` over ``[0, n_threads)`` and wait for all blocks.

        ``tid`` is the int64 array of global lane ids of one block. Kernels must
        bounds-check lanes themselves when ``n_threads`` is not a multiple of
        the block size; the last block is simply shorter here.
        """
        if n_threads <= 0:
            return
        block_size = block_size or self.block_size
        n_blocks = (n_threads + block_size - 1) // block_size
        name = getattr(kernel, "__name__", repr(kernel))
        with self._lock:
            self.launch_count += 1
        logger.debug(f"Launch {name}: {n_threads} lanes in {n_blocks} blocks of {block_size}")

        if n_blocks == 1:
            try:
                kernel(np.arange(n_threads, dtype=np.int64), *args)
            except Exception as e:
                raise KernelLaunchError(f"Kernel {name} failed: {e}") from e
            return

        futures = []
        for block in range(n_blocks):
            start = block * block_size
            stop = min(start + block_size, n_threads)
            futures.append(self._pool.submit(kernel, np.arange(start, stop, dtype=np.int64), *args))

        # Global barrier: every block of this launch completes before the next launch
        wait(futures)
        for future in futures:
            error = future.exception()
            if error is not None:
                raise KernelLaunchError(f"Kernel {name} failed: {error}") from error

    def close(self) -> None:
        self._pool.shutdown(wait=True)

    def __enter__(self) -> "Device":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def __repr__(self) -> str:
        return (f"Device(num_workers={self.num_workers}, block_size={self.block_size}, "
                f"memory_limit={self.memory_limit})")

_default_device: Optional[Device] = None
_default_lock = threading.Lock()

def get_default_device() -> Device:
    """Get the process-wide device, creating it on first use."""
    global _default_device
    with _default_lock:
        if _default_device is None:
            _default_device = Device()
        return _default_device

__all__ = [
    'WARP_SIZE',
    'DEFAULT_BLOCK_SIZE',
    'Device',
    'DeviceBuffer',
    'DeviceError',
    'DeviceAllocationError',
    'KernelLaunchError',
    'get_default_device',
]
