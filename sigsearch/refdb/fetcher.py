"""Download helpers for reference databases and annotation tables.

URLs come from configuration so unit tests can mock HTTP and production can
point to a preferred mirror of the prebuilt HDF5 databases.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Optional

import requests

from sigsearch.config import get_config
from sigsearch.logging_utils import get_logger
from sigsearch.utils.errors import InputError, format_error

logger = get_logger(__name__)


def _download(url: str, dest: Path, *, timeout: int = 60) -> None:
    dest.parent.mkdir(parents=True, exist_ok=True)
    tmp = dest.with_suffix(dest.suffix + ".part")
    with requests.get(url, stream=True, timeout=timeout) as r:
        r.raise_for_status()
        with tmp.open("wb") as f:
            for chunk in r.iter_content(chunk_size=1024 * 1024):
                if chunk:
                    f.write(chunk)
    tmp.replace(dest)


def download_refdb(name: str, output_dir: str, base_url: Optional[str] = None) -> str:
    """Download the named reference database ``<base_url>/<name>.h5`` and return its local path.

    An existing local copy is reused.
    """
    base_url = base_url if base_url is not None else get_config().refdb.base_url
    if not base_url:
        raise InputError(
            f"reference database '{name}' is not available locally and "
            "SIGSEARCH_REFDB_BASE_URL is not set"
        )

    dest = Path(output_dir) / f"{name}.h5"
    if dest.exists():
        return str(dest)

    url = f"{base_url.rstrip('/')}/{name}.h5"
    logger.warning("[REFDB] Downloading reference database %s from %s", name, url)
    try:
        _download(url, dest)
    except requests.RequestException as e:
        raise InputError(format_error("network_error", details=f"{url}: {e}")) from e
    return str(dest)


def download_annotation(url: str, output_dir: str) -> str:
    """Download an annotation table (e.g. drug targets) once into ``output_dir``."""
    filename = os.path.basename(url.split("?")[0]) or "annotation.tsv"
    dest = Path(output_dir) / filename
    if not dest.exists():
        logger.warning("[REFDB] Downloading annotation table from %s", url)
        try:
            _download(url, dest)
        except requests.RequestException as e:
            raise InputError(format_error("network_error", details=f"{url}: {e}")) from e
    return str(dest)


__all__ = ["download_refdb", "download_annotation"]
