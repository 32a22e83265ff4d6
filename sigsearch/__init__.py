# sigsearch/__init__.py

"""
Correlation-based gene expression signature search.

This package centralizes:
- config (chunking, workers, reference database locations)
- reference database access (HDF5 / GCTX block reads)
- the chunked correlation search (``gess_cor``) and its result shaping.
"""

from sigsearch import config
from sigsearch.gess import GessResult, QuerySignature, gess_cor

__all__ = ["config", "gess_cor", "GessResult", "QuerySignature"]
