"""Parsers for GCT expression matrices (LINCS / CMap text format)."""

from __future__ import annotations

from pathlib import Path
from typing import Dict, List

import numpy as np
import pandas as pd

from sigsearch.logging_utils import get_logger
from sigsearch.utils.errors import DataError, InputError, format_error

logger = get_logger(__name__)


def _to_float(v: str) -> float:
    try:
        return float(v)
    except ValueError:
        return np.nan


def read_gct(gct_path: str) -> pd.DataFrame:
    """Parse a GCT file into a genes x entries DataFrame.

    Handles GCT v1.2:
    - line1: #1.2
    - line2: <n_rows>\t<n_cols>
    - line3: Name\tDescription\t<sig_id_1>\t<sig_id_2>...
    - subsequent lines: <gene_id>\t<desc>\t<val1>\t<val2>...

    and GCT v1.3, where line2 also gives the number of row/column metadata
    fields, the header carries the row metadata names, and the column
    metadata lines precede the data rows.

    Gene ids are kept as raw strings; unparsable values become NaN.
    """
    p = Path(gct_path)
    if not p.exists():
        raise InputError(format_error("file_not_found", path=str(p)))

    with p.open("r", encoding="utf-8", errors="replace") as f:
        version = f.readline().strip()
        dims = f.readline().rstrip("\n").split("\t")
        header = f.readline().rstrip("\n").split("\t")

        if version == "#1.3":
            if len(dims) < 4:
                raise DataError(f"{p}: GCT 1.3 dimension line needs 4 fields, got {dims}")
            n_row_meta, n_col_meta = int(dims[2]), int(dims[3])
            first_value = 1 + n_row_meta
            for _ in range(n_col_meta):
                f.readline()
        elif version == "#1.2":
            first_value = 2
        else:
            raise DataError(f"{p}: unsupported GCT version line {version!r}")

        sig_ids = header[first_value:]
        if not sig_ids:
            raise DataError(f"{p}: header has no signature columns")

        genes: List[str] = []
        rows: List[List[float]] = []
        for ln in f:
            parts = ln.rstrip("\n").split("\t")
            if len(parts) < first_value + 1:
                continue
            vals = parts[first_value:]
            if len(vals) != len(sig_ids):
                raise DataError(
                    f"{p}: row {parts[0]!r} has {len(vals)} values, expected {len(sig_ids)}"
                )
            genes.append(parts[0].strip())
            rows.append([_to_float(v) for v in vals])

    expected: Dict[str, int] = {"rows": int(dims[0]), "cols": int(dims[1])}
    if expected["rows"] != len(genes) or expected["cols"] != len(sig_ids):
        logger.warning(
            "[REFDB] %s declares %d x %d but holds %d x %d",
            p, expected["rows"], expected["cols"], len(genes), len(sig_ids),
        )

    return pd.DataFrame(rows, index=pd.Index(genes), columns=sig_ids, dtype=float)


__all__ = ["read_gct"]
