#!/usr/bin/env python3
"""
CLI script to build an HDF5 reference database from an expression matrix.

Accepts GCT (v1.2/1.3) or a CSV/TSV matrix with gene ids in the first
column and one column per reference entry (``pert__cell__type``).

Usage:
    python scripts/build_refdb.py \
      --input data/lincs/level5_subset.gct \
      --output data/refdb/lincs_subset.h5
"""

import argparse
import sys
from pathlib import Path
from typing import List, Optional

import pandas as pd

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from sigsearch.refdb import read_gct, write_refdb
from sigsearch.utils.errors import InputError, SignatureSearchError, format_error


def load_matrix(path: Path) -> pd.DataFrame:
    if not path.is_file():
        raise InputError(format_error("file_not_found", path=str(path)))
    suffix = path.suffix.lower()
    if suffix == ".gct":
        return read_gct(str(path))
    sep = "," if suffix == ".csv" else "\t"
    frame = pd.read_csv(path, sep=sep, index_col=0)
    frame.index = frame.index.astype(str)
    return frame.astype(float)


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        description="Convert a GCT/CSV/TSV expression matrix into an HDF5 reference database."
    )
    parser.add_argument("--input", required=True, help="Input matrix (genes x entries).")
    parser.add_argument("--output", required=True, help="Output .h5 path.")
    parser.add_argument(
        "--no-compression",
        action="store_true",
        help="Store the assay uncompressed (faster reads, larger file).",
    )
    args = parser.parse_args(argv)

    try:
        frame = load_matrix(Path(args.input))
        print(f"Loaded {frame.shape[0]} genes x {frame.shape[1]} entries from {args.input}")
        out = write_refdb(frame, args.output, compression=None if args.no_compression else "gzip")
    except SignatureSearchError as e:
        e.render()
        return 1

    print(f"Wrote reference database to {out}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
