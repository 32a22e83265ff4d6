"""Reference database access: storage, resolution and import."""

from .gct import read_gct
from .registry import determine_refdb
from .store import FrameReference, HDF5Reference, ReferenceMatrix, open_refdb, write_refdb

__all__ = [
    "determine_refdb",
    "FrameReference",
    "HDF5Reference",
    "ReferenceMatrix",
    "open_refdb",
    "read_gct",
    "write_refdb",
]
