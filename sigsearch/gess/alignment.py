"""Align a query vector and a reference block on their shared gene identifiers."""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np
import pandas as pd

from sigsearch.utils.errors import DataError


@dataclass(frozen=True)
class AlignedPair:
    """Query values and reference block restricted to the shared genes, row for row."""

    genes: pd.Index
    query: np.ndarray  # (n_genes,)
    reference: np.ndarray  # (n_genes, n_entries)
    entries: pd.Index

    @property
    def n_genes(self) -> int:
        return len(self.genes)


def align(query: pd.Series, block: pd.DataFrame) -> AlignedPair:
    """Intersect gene ids by exact string match, keeping the query's gene order.

    Both sides are re-indexed by label for every block, so no positional
    order is assumed between the query and the reference.
    """
    common = query.index[query.index.isin(block.index)]
    if len(common) == 0:
        raise DataError(
            f"query ({len(query)} genes) and reference block "
            f"({block.shape[0]} genes, {block.shape[1]} entries) share no gene identifiers"
        )
    return AlignedPair(
        genes=common,
        query=query.loc[common].to_numpy(dtype=float),
        reference=block.loc[common].to_numpy(dtype=float),
        entries=block.columns,
    )


__all__ = ["AlignedPair", "align"]
