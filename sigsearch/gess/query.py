"""Query signature object handed to the GESS methods."""

from __future__ import annotations

from typing import Iterable, Union

import pandas as pd
from pandas.api.types import is_numeric_dtype

from sigsearch.utils.errors import ConfigurationError, InputError

GESS_METHODS = ("CMAP", "LINCS", "gCMAP", "Fisher", "Cor")


class QuerySignature:
    """A single-column expression query plus the GESS method and reference database.

    Attributes:
        query: one numeric column, indexed by unique gene identifiers
        gess_method: one of ``GESS_METHODS``
        refdb: reference database name or path
    """

    def __init__(self, query: Union[pd.DataFrame, pd.Series], gess_method: str, refdb: str):
        if isinstance(query, pd.Series):
            query = query.to_frame(name=query.name if query.name is not None else "query")
        if not isinstance(query, pd.DataFrame):
            raise ConfigurationError(
                f"query must be a pandas DataFrame with one numeric column, got {type(query).__name__}"
            )
        if query.shape[1] != 1:
            raise ConfigurationError(f"query must have exactly one column, got {query.shape[1]}")
        if query.empty:
            raise ConfigurationError("query has no genes")
        if not is_numeric_dtype(query.iloc[:, 0]):
            raise ConfigurationError(f"query column {query.columns[0]!r} is not numeric")
        if gess_method not in GESS_METHODS:
            raise ConfigurationError(f"gess_method must be one of {GESS_METHODS}, got {gess_method!r}")

        query = query.astype(float)
        query.index = query.index.astype(str)
        if not query.index.is_unique:
            dupes = query.index[query.index.duplicated()].unique().tolist()[:5]
            raise ConfigurationError(f"query gene identifiers must be unique, duplicated: {dupes}")

        self._query = query
        self.gess_method = gess_method
        self.refdb = refdb

    def __repr__(self) -> str:
        return (
            f"QuerySignature(genes={len(self._query)}, gess_method={self.gess_method!r}, "
            f"refdb={self.refdb!r})"
        )

    @property
    def query(self) -> pd.DataFrame:
        return self._query.copy()

    @property
    def vector(self) -> pd.Series:
        """The query values as a Series indexed by gene id."""
        return self._query.iloc[:, 0]

    @property
    def genes(self) -> pd.Index:
        return self._query.index

    def subset_genes(self, genes: Iterable[str]) -> "QuerySignature":
        """Restrict the query to ``genes`` (e.g. a DEG set or a pathway)."""
        wanted = set(str(g) for g in genes)
        kept = self._query.loc[self._query.index.isin(wanted)]
        if kept.empty:
            raise InputError("none of the requested genes are in the query")
        return QuerySignature(kept, self.gess_method, self.refdb)


__all__ = ["QuerySignature", "GESS_METHODS"]
