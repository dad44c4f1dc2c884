# Copyright (c) 2025 Alessandro Baretta
# All rights reserved.

# source path: py_sortnet/__init__.py

"""
py-sortnet: data-parallel sorting networks

This package provides bitonic and Batcher banyan sorting networks executed on
an emulated SIMT device (thread-pool fan-out with a barrier after every
launch), exposed as functions operating on NumPy arrays.
"""

from .device import *
from .compare_exchange import *
from .permutations import *
from .network import *
from .bitonic import *
from .banyan import *
from .validation import *
from .sort_ops import *

__version__ = "0.1.0"
