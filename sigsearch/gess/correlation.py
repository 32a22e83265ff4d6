"""
Block correlation engine.

Computes one correlation coefficient between a single query vector and every
column of an aligned reference block, then classifies each score by sign.

Methods:
- pearson: mean-centered covariance normalized by both standard deviations
- spearman: pearson on average ranks (ties share their mean rank)
- kendall: tau-b, pairwise concordance with tie correction

A column whose coefficient is undefined (zero variance, missing values, fewer
than two shared genes) gets a NaN score and the ``undefined`` trend; the rest
of the block is unaffected.
"""

from __future__ import annotations

from enum import Enum
from typing import Callable, Dict, Union

import numpy as np
import pandas as pd
from scipy import stats

from sigsearch.gess.alignment import AlignedPair
from sigsearch.logging_utils import get_logger
from sigsearch.utils.errors import ComputationError, ConfigurationError

logger = get_logger(__name__)

TREND_UP = "up"
TREND_DOWN = "down"
TREND_UNDEFINED = "undefined"

RESULT_COLUMNS = ["set", "trend", "cor_score"]


class CorrelationMethod(str, Enum):
    SPEARMAN = "spearman"
    KENDALL = "kendall"
    PEARSON = "pearson"

    @classmethod
    def resolve(cls, method: Union[str, "CorrelationMethod"]) -> "CorrelationMethod":
        if isinstance(method, cls):
            return method
        try:
            return cls(method)
        except ValueError:
            valid = ", ".join(m.value for m in cls)
            raise ConfigurationError(f"method must be one of {valid}, got {method!r}") from None


def _degenerate(values: np.ndarray, axis: int = 0) -> np.ndarray:
    """True where a vector (or each column) has no spread or holds missing values."""
    with np.errstate(invalid="ignore"):
        spread = np.ptp(values, axis=axis)
    return ~np.isfinite(spread) | (spread == 0)


def _pearson_columns(q: np.ndarray, ref: np.ndarray) -> np.ndarray:
    n_cols = ref.shape[1]
    if q.shape[0] < 2 or _degenerate(q):
        return np.full(n_cols, np.nan)

    qc = q - q.mean()
    rc = ref - ref.mean(axis=0)
    with np.errstate(divide="ignore", invalid="ignore"):
        num = qc @ rc
        den = np.sqrt(qc @ qc) * np.sqrt(np.einsum("ij,ij->j", rc, rc))
        scores = num / den
    scores[_degenerate(ref, axis=0)] = np.nan
    return np.clip(scores, -1.0, 1.0)


def _spearman_columns(q: np.ndarray, ref: np.ndarray) -> np.ndarray:
    # rankdata propagates NaN to the whole column, which then scores as undefined
    q_ranks = stats.rankdata(q, method="average", nan_policy="propagate")
    ref_ranks = stats.rankdata(ref, method="average", axis=0, nan_policy="propagate")
    return _pearson_columns(np.asarray(q_ranks, dtype=float), np.asarray(ref_ranks, dtype=float))


def _kendall_columns(q: np.ndarray, ref: np.ndarray) -> np.ndarray:
    n_cols = ref.shape[1]
    scores = np.full(n_cols, np.nan)
    if q.shape[0] < 2 or _degenerate(q):
        return scores

    bad = _degenerate(ref, axis=0)
    for j in range(n_cols):
        if bad[j]:
            continue
        tau = stats.kendalltau(q, ref[:, j], variant="b").statistic
        scores[j] = tau
    return scores


_ROUTINES: Dict[CorrelationMethod, Callable[[np.ndarray, np.ndarray], np.ndarray]] = {
    CorrelationMethod.SPEARMAN: _spearman_columns,
    CorrelationMethod.KENDALL: _kendall_columns,
    CorrelationMethod.PEARSON: _pearson_columns,
}


def classify_trend(scores: np.ndarray) -> np.ndarray:
    """``up`` for score >= 0, ``down`` for score < 0, ``undefined`` for NaN."""
    scores = np.asarray(scores, dtype=float)
    return np.where(
        np.isnan(scores),
        TREND_UNDEFINED,
        np.where(scores >= 0, TREND_UP, TREND_DOWN),
    )


def correlate(pair: AlignedPair, method: Union[str, CorrelationMethod]) -> pd.DataFrame:
    """Correlate the aligned query with each reference column.

    Returns a frame with columns ``set``, ``trend`` and ``cor_score``, one
    row per reference entry in block column order.
    """
    method = CorrelationMethod.resolve(method)
    try:
        scores = _ROUTINES[method](pair.query, pair.reference)
    except (ValueError, FloatingPointError) as e:
        first = pair.entries[0] if len(pair.entries) else "<empty>"
        raise ComputationError(
            f"{method.value} correlation failed for block starting at {first!r}: {e}"
        ) from e

    n_undefined = int(np.isnan(scores).sum())
    if n_undefined:
        logger.debug(
            "[GESS] %d of %d entries have an undefined %s correlation",
            n_undefined, len(scores), method.value,
        )

    return pd.DataFrame(
        {
            "set": np.asarray(pair.entries, dtype=object),
            "trend": classify_trend(scores),
            "cor_score": scores,
        },
        columns=RESULT_COLUMNS,
    )


__all__ = [
    "CorrelationMethod",
    "correlate",
    "classify_trend",
    "RESULT_COLUMNS",
    "TREND_UP",
    "TREND_DOWN",
    "TREND_UNDEFINED",
]
