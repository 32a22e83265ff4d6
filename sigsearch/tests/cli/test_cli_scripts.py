from __future__ import annotations

from pathlib import Path

import pandas as pd

from scripts.build_refdb import main as build_main
from scripts.run_gess_cor import main as run_main
from scripts.run_gess_cor import parse_trts


def _write_query(path: Path, query_series: pd.Series) -> str:
    query_series.to_frame("score").rename_axis("gene").to_csv(path, sep="\t")
    return str(path)


def test_build_refdb_from_tsv(tmp_path, reference_frame):
    matrix = tmp_path / "matrix.tsv"
    reference_frame.rename_axis("gene").to_csv(matrix, sep="\t")
    out = tmp_path / "db.h5"
    assert build_main(["--input", str(matrix), "--output", str(out)]) == 0
    assert out.exists()


def test_build_refdb_missing_input(tmp_path):
    assert build_main(["--input", str(tmp_path / "none.gct"), "--output", str(tmp_path / "db.h5")]) == 1


def test_run_gess_cor_writes_ranked_tsv(tmp_path, refdb_path, query_series, capsys):
    query = _write_query(tmp_path / "query.tsv", query_series)
    out = tmp_path / "out" / "result.tsv"
    code = run_main(
        [
            "--query", query,
            "--refdb", refdb_path,
            "--method", "pearson",
            "--chunk-size", "4",
            "--workers", "2",
            "--output", str(out),
        ]
    )
    assert code == 0
    table = pd.read_csv(out, sep="\t")
    assert len(table) == 13
    assert table.loc[0, "pert"] == "vorinostat"
    assert "Ranked 13 reference entries" in capsys.readouterr().out


def test_run_gess_cor_unknown_trts_exit_code(tmp_path, refdb_path, query_series):
    query = _write_query(tmp_path / "query.tsv", query_series)
    code = run_main(["--query", query, "--refdb", refdb_path, "--ref-trts", "nonexistent_entry"])
    assert code == 1


def test_parse_trts():
    assert parse_trts(None) is None
    assert parse_trts("a, b,,c") == ["a", "b", "c"]
