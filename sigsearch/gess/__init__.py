"""Gene expression signature search (GESS) by correlation."""

from .annotate import TargetAnnotator, sep_pcf
from .correlation import CorrelationMethod, correlate
from .cor_search import gess_cor
from .query import QuerySignature
from .result import GessResult

__all__ = [
    "CorrelationMethod",
    "correlate",
    "gess_cor",
    "GessResult",
    "QuerySignature",
    "sep_pcf",
    "TargetAnnotator",
]
