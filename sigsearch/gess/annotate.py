"""Result shaping and drug metadata joins for ranked search tables."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import pandas as pd

from sigsearch.config import AppConfig, get_config
from sigsearch.logging_utils import get_logger
from sigsearch.refdb.fetcher import download_annotation
from sigsearch.utils.errors import InputError, format_error

logger = get_logger(__name__)

PCF_COLUMNS = ["pert", "cell", "type"]
PCF_SEPARATOR = "__"
TARGET_SEPARATOR = "; "


def sep_pcf(table: pd.DataFrame) -> pd.DataFrame:
    """Split ``set`` ids of the form ``pert__cell__type`` into three columns.

    Ids with fewer parts leave the trailing columns null; extra parts stay in
    ``type``. Remaining columns keep their order after the three new ones.
    """
    parts = table["set"].astype(str).str.split(PCF_SEPARATOR, n=2, expand=True)
    parts = parts.reindex(columns=range(3))
    parts.columns = PCF_COLUMNS
    parts.index = table.index
    rest = table.drop(columns="set")
    return pd.concat([parts, rest], axis=1)


def _read_table(path: str) -> pd.DataFrame:
    p = Path(path)
    if not p.exists():
        raise InputError(format_error("file_not_found", path=str(p)))
    sep = "," if p.suffix.lower() == ".csv" else "\t"
    return pd.read_csv(p, sep=sep, dtype=str)


def _require_columns(frame: pd.DataFrame, columns: list[str], source: str) -> None:
    missing = [c for c in columns if c not in frame.columns]
    if missing:
        raise InputError(f"{source} is missing column(s) {missing}")


def _collapse_symbols(values: pd.Series) -> str:
    seen = []
    for v in values:
        for sym in str(v).split(TARGET_SEPARATOR.strip()):
            sym = sym.strip()
            if sym and sym not in seen:
                seen.append(sym)
    return TARGET_SEPARATOR.join(seen)


def collapse_targets(raw: pd.DataFrame, source: str = "targets table") -> pd.DataFrame:
    """Reduce a drug -> target table to one row per drug.

    Drugs listed on several rows get their targets joined with ``"; "`` in
    first-seen order.
    """
    _require_columns(raw, ["drug_name", "t_gn_sym"], source)
    raw = raw.dropna(subset=["drug_name", "t_gn_sym"])
    return raw.groupby("drug_name", sort=False)["t_gn_sym"].agg(_collapse_symbols).reset_index()


def first_pcids(raw: pd.DataFrame, source: str = "pcid table") -> pd.DataFrame:
    """Reduce a drug -> PubChem CID table to one row per drug; first row wins."""
    _require_columns(raw, ["drug_name", "pcid"], source)
    raw = raw.dropna(subset=["drug_name"])
    return raw[["drug_name", "pcid"]].drop_duplicates(subset="drug_name", keep="first")


def load_targets(path: str) -> pd.DataFrame:
    """Load a drug -> target table (``drug_name``, ``t_gn_sym``), one row per drug."""
    return collapse_targets(_read_table(path), path)


def load_pcids(path: str) -> pd.DataFrame:
    """Load a drug -> PubChem CID table (``drug_name``, ``pcid``)."""
    return first_pcids(_read_table(path), path)


class TargetAnnotator:
    """Left-joins drug targets and PubChem CIDs onto a ranked result table.

    Lookup frames are reduced to one row per ``drug_name`` on construction,
    so a join never adds or drops result rows.
    """

    def __init__(self, targets: Optional[pd.DataFrame] = None, pcids: Optional[pd.DataFrame] = None):
        self.targets = collapse_targets(targets) if targets is not None else None
        self.pcids = first_pcids(pcids) if pcids is not None else None

    @classmethod
    def from_config(cls, cfg: Optional[AppConfig] = None) -> "TargetAnnotator":
        cfg = cfg or get_config()
        ann = cfg.annotation
        targets_path = ann.targets_path
        if targets_path is None and ann.targets_url:
            targets_path = download_annotation(ann.targets_url, cfg.refdb.refdb_dir)
        targets = load_targets(targets_path) if targets_path else None
        pcids = load_pcids(ann.pcid_path) if ann.pcid_path else None
        if targets is None:
            logger.info("[GESS] No drug target table configured; t_gn_sym will be empty")
        return cls(targets=targets, pcids=pcids)

    def _join(self, table: pd.DataFrame, lookup: Optional[pd.DataFrame], column: str) -> pd.DataFrame:
        if lookup is None:
            out = table.copy()
            out[column] = None
            return out
        out = table.merge(
            lookup.rename(columns={"drug_name": "pert"}),
            how="left",
            on="pert",
            validate="many_to_one",
        )
        out.index = table.index
        return out

    def annotate(self, table: pd.DataFrame) -> pd.DataFrame:
        out = self._join(table, self.targets, "t_gn_sym")
        return self._join(out, self.pcids, "pcid")


__all__ = [
    "sep_pcf",
    "load_targets",
    "load_pcids",
    "collapse_targets",
    "first_pcids",
    "TargetAnnotator",
    "PCF_COLUMNS",
]
