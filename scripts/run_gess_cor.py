#!/usr/bin/env python3
"""
CLI script to run a correlation-based signature search.

Loads a query signature (TSV/CSV: gene id in the first column, one value
column), searches it against a reference database (name or HDF5/GCTX path)
and writes the ranked result table as TSV.

Usage:
    python scripts/run_gess_cor.py \
      --query data/queries/vorinostat_SKB.tsv \
      --refdb lincs \
      --method spearman --chunk-size 5000 --workers 4 \
      --output data/reports/vorinostat_SKB_cor.tsv
"""

import argparse
import sys
from pathlib import Path
from typing import List, Optional

import pandas as pd

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from sigsearch.config import get_config
from sigsearch.gess import QuerySignature, gess_cor
from sigsearch.utils.errors import InputError, SignatureSearchError, format_error
from sigsearch.utils.parallel import POOL_KINDS, WorkerPool


def load_query(path: Path) -> pd.DataFrame:
    """Read a one-column query matrix with gene ids as the index."""
    if not path.is_file():
        raise InputError(format_error("file_not_found", path=str(path)))
    sep = "," if path.suffix.lower() == ".csv" else "\t"
    frame = pd.read_csv(path, sep=sep, index_col=0)
    frame.index = frame.index.astype(str)
    return frame


def parse_trts(value: Optional[str]) -> Optional[List[str]]:
    if not value:
        return None
    return [t.strip() for t in value.split(",") if t.strip()]


def build_parser() -> argparse.ArgumentParser:
    search_cfg = get_config().search
    parser = argparse.ArgumentParser(
        description="Rank reference signatures by correlation with a query signature."
    )
    parser.add_argument("--query", required=True, help="Query TSV/CSV (gene id, value).")
    parser.add_argument("--refdb", required=True, help="Reference database name or file path.")
    parser.add_argument(
        "--method",
        choices=["spearman", "kendall", "pearson"],
        default=search_cfg.method,
        help="Correlation coefficient (default: %(default)s).",
    )
    parser.add_argument("--chunk-size", type=int, default=search_cfg.chunk_size)
    parser.add_argument("--workers", type=int, default=search_cfg.workers)
    parser.add_argument("--pool", choices=list(POOL_KINDS), default=search_cfg.pool_kind)
    parser.add_argument(
        "--ref-trts",
        required=False,
        help="Comma-separated reference entry names to restrict the search to.",
    )
    parser.add_argument("--top", type=int, default=10, help="Rows to print (default: 10).")
    parser.add_argument("--output", required=False, help="Optional path for the ranked TSV.")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        query = load_query(Path(args.query))
        qsig = QuerySignature(query, gess_method="Cor", refdb=args.refdb)
        print(f"Loaded query with {len(query)} genes from {args.query}")

        pool = WorkerPool(args.workers, kind=args.pool, show_progress=get_config().search.show_progress)
        res = gess_cor(
            qsig,
            method=args.method,
            chunk_size=args.chunk_size,
            ref_trts=parse_trts(args.ref_trts),
            pool=pool,
        )
    except SignatureSearchError as e:
        e.render()
        return 1

    print(f"\n{'='*60}")
    print(f"Ranked {len(res)} reference entries by {args.method} correlation")
    print(f"{'='*60}")
    print(res.top(args.top).to_string(index=False))

    if args.output:
        out = res.to_tsv(args.output)
        print(f"\nWrote results to {out}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
