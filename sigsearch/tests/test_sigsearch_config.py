from __future__ import annotations

import pytest

from sigsearch import config
from sigsearch.utils.errors import ConfigurationError


def test_defaults():
    cfg = config.get_config()
    assert cfg.search.chunk_size == 5000
    assert cfg.search.workers == 1
    assert cfg.search.method == "spearman"
    assert cfg.search.pool_kind == "thread"
    assert cfg.search.show_progress is False
    assert cfg.refdb.assay_dataset == "assay"
    assert cfg.annotation.targets_path is None


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("SIGSEARCH_CHUNK_SIZE", "250")
    monkeypatch.setenv("SIGSEARCH_WORKERS", "3")
    monkeypatch.setenv("SIGSEARCH_COR_METHOD", "kendall")
    monkeypatch.setenv("SIGSEARCH_SHOW_PROGRESS", "true")
    monkeypatch.setenv("SIGSEARCH_TARGETS_PATH", "/data/targets.tsv")
    config.reset_config()

    cfg = config.get_config()
    assert cfg.search.chunk_size == 250
    assert cfg.search.workers == 3
    assert cfg.search.method == "kendall"
    assert cfg.search.show_progress is True
    assert cfg.annotation.targets_path == "/data/targets.tsv"


def test_get_config_is_cached(monkeypatch):
    first = config.get_config()
    monkeypatch.setenv("SIGSEARCH_CHUNK_SIZE", "7")
    assert config.get_config() is first
    assert config.get_config().search.chunk_size == 5000


@pytest.mark.parametrize("name", ["SIGSEARCH_CHUNK_SIZE", "SIGSEARCH_WORKERS"])
def test_non_integer_setting_is_configuration_error(monkeypatch, name):
    monkeypatch.setenv(name, "many")
    config.reset_config()
    with pytest.raises(ConfigurationError, match=name):
        config.get_config()
