# sigsearch/config.py

"""
Central configuration for the signature search engine.

Values are read from environment variables (or a .env file) when the config
singleton is first built. Explicit arguments passed to ``gess_cor`` and the
CLIs always win over these defaults.

A .env file in the working directory is loaded on import.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Optional

from dotenv import load_dotenv

from sigsearch.utils.errors import ConfigurationError

load_dotenv()


def _env_bool(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).lower() == "true"


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name, str(default))
    try:
        return int(raw)
    except ValueError:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}") from None


def _env_optional(name: str) -> Optional[str]:
    value = os.getenv(name, "").strip()
    return value or None


# ---------------------------------------------------------
#  Search defaults
# ---------------------------------------------------------

DEFAULT_CHUNK_SIZE = 5000
DEFAULT_WORKERS = 1
DEFAULT_COR_METHOD = "spearman"
DEFAULT_POOL_KIND = "thread"  # thread | process

# HDF5 dataset names used by the R-built reference databases
REFDB_ASSAY_DATASET = "assay"
REFDB_ROWNAMES_DATASET = "rownames"
REFDB_COLNAMES_DATASET = "colnames"


# ---------------------------------------------------------
#  CONFIG STRUCTURES
# ---------------------------------------------------------


@dataclass(frozen=True)
class SearchConfig:
    chunk_size: int = field(
        default_factory=lambda: _env_int("SIGSEARCH_CHUNK_SIZE", DEFAULT_CHUNK_SIZE)
    )
    workers: int = field(
        default_factory=lambda: _env_int("SIGSEARCH_WORKERS", DEFAULT_WORKERS)
    )
    method: str = field(
        default_factory=lambda: os.getenv("SIGSEARCH_COR_METHOD", DEFAULT_COR_METHOD)
    )
    pool_kind: str = field(
        default_factory=lambda: os.getenv("SIGSEARCH_POOL_KIND", DEFAULT_POOL_KIND)
    )
    show_progress: bool = field(default_factory=lambda: _env_bool("SIGSEARCH_SHOW_PROGRESS"))


@dataclass(frozen=True)
class RefDBConfig:
    refdb_dir: str = field(default_factory=lambda: os.getenv("SIGSEARCH_REFDB_DIR", "data/refdb"))
    # Empty string disables downloads of named databases
    base_url: str = field(default_factory=lambda: os.getenv("SIGSEARCH_REFDB_BASE_URL", ""))
    assay_dataset: str = REFDB_ASSAY_DATASET
    rownames_dataset: str = REFDB_ROWNAMES_DATASET
    colnames_dataset: str = REFDB_COLNAMES_DATASET


@dataclass(frozen=True)
class AnnotationConfig:
    targets_path: Optional[str] = field(default_factory=lambda: _env_optional("SIGSEARCH_TARGETS_PATH"))
    targets_url: Optional[str] = field(default_factory=lambda: _env_optional("SIGSEARCH_TARGETS_URL"))
    pcid_path: Optional[str] = field(default_factory=lambda: _env_optional("SIGSEARCH_PCID_PATH"))


@dataclass(frozen=True)
class AppConfig:
    search: SearchConfig
    refdb: RefDBConfig
    annotation: AnnotationConfig


# ---------------------------------------------------------
#  SINGLETON ACCESSOR
# ---------------------------------------------------------

_config_singleton: AppConfig | None = None


def get_config() -> AppConfig:
    global _config_singleton
    if _config_singleton is None:
        _config_singleton = AppConfig(
            search=SearchConfig(),
            refdb=RefDBConfig(),
            annotation=AnnotationConfig(),
        )
    return _config_singleton


def reset_config() -> None:
    """Drop the cached config so the next get_config() re-reads the environment."""
    global _config_singleton
    _config_singleton = None
