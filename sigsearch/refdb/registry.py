"""Resolve a reference database argument (name or path) to a local file."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from sigsearch.config import get_config
from sigsearch.logging_utils import get_logger
from sigsearch.refdb.fetcher import download_refdb
from sigsearch.utils.errors import InputError, format_error

logger = get_logger(__name__)

# Databases distributed prebuilt; other names are looked up the same way
KNOWN_REFDBS = ("cmap", "cmap_expr", "lincs", "lincs_expr", "lincs2")

REFDB_SUFFIXES = (".h5", ".hdf5", ".gctx")


def determine_refdb(refdb: str, refdb_dir: Optional[str] = None) -> str:
    """Return a local path for ``refdb``.

    - an existing file path is returned unchanged
    - a bare name is looked up as ``<refdb_dir>/<name>.h5`` and downloaded
      from the configured base URL when missing
    """
    if not refdb:
        raise InputError("refdb must be a database name or a file path")

    p = Path(refdb)
    if p.exists():
        return str(p)
    if p.suffix.lower() in REFDB_SUFFIXES or len(p.parts) > 1:
        raise InputError(format_error("file_not_found", path=str(p)))

    directory = Path(refdb_dir or get_config().refdb.refdb_dir)
    local = directory / f"{refdb}.h5"
    if local.exists():
        return str(local)
    if refdb not in KNOWN_REFDBS:
        logger.info("[REFDB] '%s' is not a bundled database name; trying %s", refdb, local)
    return download_refdb(refdb, str(directory))


__all__ = ["determine_refdb", "KNOWN_REFDBS"]
