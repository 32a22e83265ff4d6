"""
Correlation-based gene expression signature search (``gess_cor``).

The reference database is processed in column blocks of at most
``chunk_size`` entries so peak memory depends on the block width and the
number of genes, never on the size of the database. Each block is read,
aligned to the query on gene ids and correlated independently; the
per-block rows are then concatenated in block order and ranked globally by
absolute correlation.
"""

from __future__ import annotations

import time
from functools import partial
from typing import Iterable, Optional, Union

import numpy as np
import pandas as pd

from sigsearch.config import get_config
from sigsearch.gess.alignment import align
from sigsearch.gess.annotate import TargetAnnotator, sep_pcf
from sigsearch.gess.blocks import ColumnBlock, column_blocks, validate_chunk_size
from sigsearch.gess.correlation import RESULT_COLUMNS, CorrelationMethod, correlate
from sigsearch.gess.query import QuerySignature
from sigsearch.gess.result import GessResult
from sigsearch.logging_utils import get_logger
from sigsearch.refdb.registry import determine_refdb
from sigsearch.refdb.store import ReferenceMatrix, open_refdb
from sigsearch.utils.errors import ComputationError, ConfigurationError, DataError, WorkerError
from sigsearch.utils.parallel import WorkerPool

logger = get_logger(__name__)


def search_block(
    block: ColumnBlock,
    reference: ReferenceMatrix,
    query: pd.Series,
    method: CorrelationMethod,
) -> pd.DataFrame:
    """Read one column block, align it to the query and correlate it."""
    frame = reference.read_block(block.start, block.stop)
    try:
        pair = align(query, frame)
    except DataError as e:
        raise DataError(f"block {block.index} (entries {block.start}..{block.stop - 1}): {e.details}") from e
    logger.debug(
        "[GESS] Block %d: %d entries over %d shared genes", block.index, block.width, pair.n_genes
    )
    return correlate(pair, method)


def rank_results(table: pd.DataFrame) -> pd.DataFrame:
    """Sort by descending |cor_score|; ties keep table order, undefined scores go last."""
    scores = table["cor_score"].to_numpy(dtype=float)
    key = np.where(np.isnan(scores), np.inf, -np.abs(scores))
    order = np.argsort(key, kind="stable")
    return table.iloc[order].reset_index(drop=True)


def cor_sig_search(
    query: pd.Series,
    reference: ReferenceMatrix,
    method: Union[str, CorrelationMethod],
    chunk_size: int,
    pool: WorkerPool,
) -> pd.DataFrame:
    """Correlate the query with every reference column and rank the result.

    Returns the ranked ``set``/``trend``/``cor_score`` table before any
    metadata is attached.
    """
    method = CorrelationMethod.resolve(method)
    blocks = column_blocks(reference.n_entries, chunk_size)
    if not blocks:
        return pd.DataFrame(columns=RESULT_COLUMNS)

    logger.info(
        "[GESS] Searching %d entries in %d block(s) of <=%d with %s (%r)",
        reference.n_entries, len(blocks), blocks[0].width, method.value, pool,
    )
    task = partial(search_block, reference=reference, query=query, method=method)
    try:
        parts = pool.map(task, blocks, desc="gess_cor blocks")
    except WorkerError as e:
        if e.block_index is None:
            raise
        failed = blocks[e.block_index]
        raise WorkerError(
            f"block {failed.index} (entries {failed.start}..{failed.stop - 1}) failed: {e.details}",
            block_index=failed.index,
            entries=reference.colnames[failed.start:failed.stop].tolist(),
        ) from e.__cause__

    table = pd.concat(parts, ignore_index=True)
    if len(table) != reference.n_entries:
        raise ComputationError(
            f"blocks returned {len(table)} rows for {reference.n_entries} reference entries"
        )

    n_undefined = int(table["cor_score"].isna().sum())
    if n_undefined:
        logger.warning(
            "[GESS] %d of %d entries have an undefined correlation (constant or missing values)",
            n_undefined, len(table),
        )
    return rank_results(table)


def gess_cor(
    qsig: QuerySignature,
    method: Optional[str] = None,
    chunk_size: Optional[int] = None,
    ref_trts: Optional[Iterable[str]] = None,
    workers: Optional[int] = None,
    pool: Optional[WorkerPool] = None,
    reference: Optional[ReferenceMatrix] = None,
    annotator: Optional[TargetAnnotator] = None,
) -> GessResult:
    """Correlation-based search of a query signature against a reference database.

    Args:
        qsig: query signature with ``gess_method == "Cor"``
        method: ``spearman`` (default), ``kendall`` or ``pearson``
        chunk_size: reference entries processed per block (default 5000)
        ref_trts: optional entry names restricting the search; unknown names
            raise InputError before anything is computed
        workers: number of parallel workers (default 1, sequential)
        pool: worker pool to use instead of one built from ``workers``;
            giving both is a ConfigurationError
        reference: already opened reference; by default ``qsig.refdb`` is
            resolved and opened
        annotator: drug metadata joiner; by default built from config

    Returns:
        GessResult whose table has one row per searched entry, sorted by
        descending absolute ``cor_score``.
    """
    if not isinstance(qsig, QuerySignature):
        raise ConfigurationError(f"qsig must be a QuerySignature, got {type(qsig).__name__}")
    if qsig.gess_method != "Cor":
        raise ConfigurationError(
            f"the gess_method of qsig must be 'Cor' to use gess_cor, got {qsig.gess_method!r}"
        )

    cfg = get_config()
    method = CorrelationMethod.resolve(method if method is not None else cfg.search.method)
    chunk_size = validate_chunk_size(chunk_size if chunk_size is not None else cfg.search.chunk_size)
    if pool is not None and workers is not None:
        raise ConfigurationError("pass either workers or pool, not both")
    if pool is None:
        pool = WorkerPool(
            workers if workers is not None else cfg.search.workers,
            kind=cfg.search.pool_kind,
            show_progress=cfg.search.show_progress,
        )

    if reference is None:
        reference = open_refdb(determine_refdb(qsig.refdb))
    if ref_trts is not None:
        reference = reference.subset(ref_trts)

    started = time.perf_counter()
    ranked = cor_sig_search(qsig.vector, reference, method, chunk_size, pool)
    table = sep_pcf(ranked)
    annotator = annotator if annotator is not None else TargetAnnotator.from_config(cfg)
    table = annotator.annotate(table)
    logger.info(
        "[GESS] gess_cor finished: %d entries ranked in %.2fs", len(table), time.perf_counter() - started
    )

    return GessResult(result=table, query=qsig.query, gess_method=qsig.gess_method, refdb=str(qsig.refdb))


__all__ = ["gess_cor", "cor_sig_search", "search_block", "rank_results"]
