"""Block-readable reference databases (genes x entries expression matrices).

On disk a reference database is an HDF5 file holding

- ``assay``: float matrix of shape ``(n_entries, n_genes)``
- ``rownames``: gene identifiers (strings)
- ``colnames``: entry identifiers, usually ``pert__cell__type``

Entries are HDF5 rows, so a block of reference columns is a contiguous row
slab of the ``assay`` dataset. GCTX files use the same orientation under
``/0/DATA/0/matrix`` and are opened directly.
"""

from __future__ import annotations

from pathlib import Path
from typing import Iterable, List, Optional, Sequence

import h5py
import numpy as np
import pandas as pd

from sigsearch.config import REFDB_ASSAY_DATASET, REFDB_COLNAMES_DATASET, REFDB_ROWNAMES_DATASET
from sigsearch.logging_utils import get_logger
from sigsearch.utils.errors import DataError, InputError, format_error

logger = get_logger(__name__)

GCTX_MATRIX_DATASET = "0/DATA/0/matrix"
GCTX_ROW_IDS_DATASET = "0/META/ROW/id"
GCTX_COL_IDS_DATASET = "0/META/COL/id"


def _decode_list(x) -> list[str]:
    if x is None:
        return []
    out: list[str] = []
    for v in list(x):
        if isinstance(v, (bytes, bytearray)):
            out.append(v.decode("utf-8", errors="replace"))
        else:
            out.append(str(v))
    return out


def _check_unique_rows(rownames: pd.Index, source: str) -> None:
    if not rownames.is_unique:
        dupes = rownames[rownames.duplicated()].unique().tolist()[:5]
        raise DataError(f"{source} has duplicated gene identifiers, e.g. {dupes}")


def _check_unique_entries(colnames: pd.Index, source: str) -> None:
    if not colnames.is_unique:
        dupes = colnames[colnames.duplicated()].unique().tolist()[:5]
        raise DataError(f"{source} has duplicated entry names, e.g. {dupes}")


def resolve_entries(requested: Iterable[str], colnames: pd.Index) -> List[str]:
    """Validate requested entry names against the reference columns.

    Order follows the request; repeated names keep their first occurrence.
    Unknown names raise InputError before any data is read.
    """
    wanted = list(dict.fromkeys(str(t) for t in requested))
    if not wanted:
        raise InputError("ref_trts is empty; pass None to search the full reference")
    known = set(colnames)
    missing = [t for t in wanted if t not in known]
    if missing:
        shown = ", ".join(missing[:10])
        more = f" (+{len(missing) - 10} more)" if len(missing) > 10 else ""
        raise InputError(f"{len(missing)} requested treatment(s) not in the reference: {shown}{more}")
    return wanted


class ReferenceMatrix:
    """Read-only, column-addressable view of a reference database."""

    rownames: pd.Index
    colnames: pd.Index

    @property
    def n_entries(self) -> int:
        return len(self.colnames)

    @property
    def n_genes(self) -> int:
        return len(self.rownames)

    def subset(self, entries: Iterable[str]) -> "ReferenceMatrix":
        raise NotImplementedError

    def read_block(self, start: int, stop: int) -> pd.DataFrame:
        """Materialize columns ``[start, stop)`` as a genes x entries frame."""
        raise NotImplementedError


class FrameReference(ReferenceMatrix):
    """In-memory reference backed by a genes x entries DataFrame."""

    def __init__(self, frame: pd.DataFrame):
        frame = frame.copy()
        frame.index = frame.index.astype(str)
        frame.columns = frame.columns.astype(str)
        _check_unique_rows(frame.index, "reference frame")
        _check_unique_entries(frame.columns, "reference frame")
        self._frame = frame
        self.rownames = frame.index
        self.colnames = frame.columns

    def __repr__(self) -> str:
        return f"FrameReference(genes={self.n_genes}, entries={self.n_entries})"

    def subset(self, entries: Iterable[str]) -> "FrameReference":
        wanted = resolve_entries(entries, self.colnames)
        return FrameReference(self._frame.loc[:, wanted])

    def read_block(self, start: int, stop: int) -> pd.DataFrame:
        return self._frame.iloc[:, start:stop].astype(float)


class HDF5Reference(ReferenceMatrix):
    """Reference stored in an HDF5/GCTX file, read one block at a time.

    Only the path and the labels are held; each ``read_block`` opens the
    file, reads the block's rows and closes it again, so instances can be
    shipped to worker processes and concurrent readers never share a handle.
    """

    def __init__(
        self,
        path: str,
        rownames: Sequence[str],
        colnames: Sequence[str],
        assay_dataset: str = REFDB_ASSAY_DATASET,
        positions: Optional[np.ndarray] = None,
    ):
        self.path = str(path)
        self.assay_dataset = assay_dataset
        self.rownames = pd.Index(rownames)
        self.colnames = pd.Index(colnames)
        # Positions of our columns among the file's rows; None means all, in order
        self._positions = positions
        _check_unique_rows(self.rownames, self.path)
        _check_unique_entries(self.colnames, self.path)

    def __repr__(self) -> str:
        return f"HDF5Reference(path={self.path!r}, genes={self.n_genes}, entries={self.n_entries})"

    def subset(self, entries: Iterable[str]) -> "HDF5Reference":
        wanted = resolve_entries(entries, self.colnames)
        local = self.colnames.get_indexer(wanted)
        positions = local if self._positions is None else self._positions[local]
        return HDF5Reference(
            self.path,
            self.rownames,
            wanted,
            assay_dataset=self.assay_dataset,
            positions=np.asarray(positions, dtype=np.int64),
        )

    def read_block(self, start: int, stop: int) -> pd.DataFrame:
        names = self.colnames[start:stop]
        with h5py.File(self.path, "r") as h5:
            assay = h5[self.assay_dataset]
            if self._positions is None:
                values = np.asarray(assay[start:stop, :], dtype=float)
            else:
                # h5py point selection needs increasing indices; restore request order after reading
                pos = self._positions[start:stop]
                order = np.argsort(pos, kind="stable")
                data = np.asarray(assay[pos[order].tolist(), :], dtype=float)
                values = np.empty_like(data)
                values[order] = data
        if values.shape != (len(names), self.n_genes):
            raise DataError(
                f"{self.path}: block [{start}, {stop}) has shape {values.shape}, "
                f"expected {(len(names), self.n_genes)}"
            )
        logger.debug("[REFDB] Read block [%d, %d) from %s", start, stop, self.path)
        return pd.DataFrame(values.T, index=self.rownames, columns=names)


def open_refdb(
    path: str,
    assay_dataset: str = REFDB_ASSAY_DATASET,
    rownames_dataset: str = REFDB_ROWNAMES_DATASET,
    colnames_dataset: str = REFDB_COLNAMES_DATASET,
) -> HDF5Reference:
    """Open a reference database file (HDF5 refdb layout or GCTX) lazily."""
    p = Path(path)
    if not p.exists():
        raise InputError(format_error("file_not_found", path=str(p)))

    with h5py.File(p, "r") as h5:
        if assay_dataset in h5:
            rownames = _decode_list(h5[rownames_dataset][()])
            colnames = _decode_list(h5[colnames_dataset][()])
        elif GCTX_MATRIX_DATASET in h5:
            assay_dataset = GCTX_MATRIX_DATASET
            rownames = _decode_list(h5[GCTX_ROW_IDS_DATASET][()])
            colnames = _decode_list(h5[GCTX_COL_IDS_DATASET][()])
        else:
            raise InputError(f"{p} has neither an '{assay_dataset}' dataset nor a GCTX matrix")
        shape = h5[assay_dataset].shape

    if len(shape) != 2 or shape != (len(colnames), len(rownames)):
        raise DataError(
            f"{p}: matrix shape {shape} does not match "
            f"{len(colnames)} entries x {len(rownames)} genes"
        )
    logger.info("[REFDB] Opened %s: %d genes x %d entries", p, len(rownames), len(colnames))
    return HDF5Reference(str(p), rownames, colnames, assay_dataset=assay_dataset)


def write_refdb(
    frame: pd.DataFrame,
    path: str,
    compression: Optional[str] = "gzip",
) -> str:
    """Write a genes x entries DataFrame as an HDF5 reference database."""
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    values = np.asarray(frame.to_numpy(dtype=float).T)
    string_dtype = h5py.string_dtype(encoding="utf-8")
    # One entry per chunk row keeps block reads aligned with storage chunks
    chunks = (1, values.shape[1]) if values.size else None
    with h5py.File(p, "w") as h5:
        h5.create_dataset(REFDB_ASSAY_DATASET, data=values, chunks=chunks, compression=compression)
        h5.create_dataset(
            REFDB_ROWNAMES_DATASET,
            data=np.array([str(g) for g in frame.index], dtype=object),
            dtype=string_dtype,
        )
        h5.create_dataset(
            REFDB_COLNAMES_DATASET,
            data=np.array([str(c) for c in frame.columns], dtype=object),
            dtype=string_dtype,
        )
    logger.info("[REFDB] Wrote %s: %d genes x %d entries", p, frame.shape[0], frame.shape[1])
    return str(p)


__all__ = [
    "ReferenceMatrix",
    "FrameReference",
    "HDF5Reference",
    "open_refdb",
    "write_refdb",
    "resolve_entries",
]
