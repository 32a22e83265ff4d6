"""Container returned by the GESS methods."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import pandas as pd


@dataclass
class GessResult:
    """
    Ranked search result plus the inputs that produced it.

    Attributes:
        result: ranked table, one row per searched reference entry
        query: the query matrix (one column, gene ids as index)
        gess_method: GESS method tag, e.g. ``Cor``
        refdb: reference database name or path as given by the caller
    """

    result: pd.DataFrame
    query: pd.DataFrame
    gess_method: str
    refdb: str

    def __len__(self) -> int:
        return len(self.result)

    def top(self, n: int = 10) -> pd.DataFrame:
        return self.result.head(n)

    def to_tsv(self, path: str) -> str:
        p = Path(path)
        p.parent.mkdir(parents=True, exist_ok=True)
        self.result.to_csv(p, sep="\t", index=False)
        return str(p)


__all__ = ["GessResult"]
