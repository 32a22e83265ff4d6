"""
Pytest configuration and fixtures shared by the sigsearch tests.

Provides small reference databases (in memory and as HDF5 files) and keeps
SIGSEARCH_* environment settings from leaking into tests.
"""

import numpy as np
import pandas as pd
import pytest

from sigsearch.config import reset_config
from sigsearch.gess import QuerySignature
from sigsearch.refdb import FrameReference, write_refdb


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow running"
    )


@pytest.fixture(autouse=True)
def clean_config(monkeypatch):
    for name in (
        "SIGSEARCH_CHUNK_SIZE",
        "SIGSEARCH_WORKERS",
        "SIGSEARCH_COR_METHOD",
        "SIGSEARCH_POOL_KIND",
        "SIGSEARCH_SHOW_PROGRESS",
        "SIGSEARCH_REFDB_DIR",
        "SIGSEARCH_REFDB_BASE_URL",
        "SIGSEARCH_TARGETS_PATH",
        "SIGSEARCH_TARGETS_URL",
        "SIGSEARCH_PCID_PATH",
    ):
        monkeypatch.delenv(name, raising=False)
    reset_config()
    yield
    reset_config()


@pytest.fixture
def genes() -> list:
    return [f"g{i}" for i in range(1, 21)]


@pytest.fixture
def reference_frame(genes) -> pd.DataFrame:
    """20 genes x 13 entries with one constant entry and a couple of exact ties."""
    rng = np.random.default_rng(7)
    perts = ["vorinostat", "trichostatin", "sirolimus", "metformin", "aspirin", "imatinib"]
    columns = []
    for p in perts:
        for cell in ("MCF7", "PC3"):
            columns.append(f"{p}__{cell}__trt_cp")
    values = rng.normal(size=(len(genes), len(columns)))
    frame = pd.DataFrame(values, index=genes, columns=columns)
    frame["flat__A375__trt_cp"] = 2.5
    return frame


@pytest.fixture
def query_series(reference_frame) -> pd.Series:
    base = reference_frame["vorinostat__MCF7__trt_cp"]
    noise = np.linspace(-0.3, 0.3, len(base))
    return pd.Series(base.to_numpy() + noise, index=reference_frame.index, name="query")


@pytest.fixture
def qsig(query_series) -> QuerySignature:
    return QuerySignature(query_series.to_frame(), gess_method="Cor", refdb="in-memory")


@pytest.fixture
def frame_reference(reference_frame) -> FrameReference:
    return FrameReference(reference_frame)


@pytest.fixture
def refdb_path(tmp_path, reference_frame) -> str:
    return write_refdb(reference_frame, str(tmp_path / "sample_db.h5"))
