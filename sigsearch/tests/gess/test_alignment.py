from __future__ import annotations

import numpy as np
import pandas as pd
import pytest

from sigsearch.gess.alignment import align
from sigsearch.utils.errors import DataError


def test_only_shared_genes_are_used():
    query = pd.Series([1.0, 2.0, 3.0], index=["A", "B", "C"])
    block = pd.DataFrame({"e1": [20.0, 30.0, 40.0]}, index=["B", "C", "D"])

    pair = align(query, block)
    assert list(pair.genes) == ["B", "C"]
    assert pair.query.tolist() == [2.0, 3.0]
    assert pair.reference[:, 0].tolist() == [20.0, 30.0]
    assert len(pair.query) == pair.reference.shape[0] == pair.n_genes


def test_rows_follow_query_order_not_block_order():
    query = pd.Series([1.0, 2.0, 3.0], index=["C", "A", "B"])
    block = pd.DataFrame({"e1": [10.0, 20.0, 30.0]}, index=["A", "B", "C"])

    pair = align(query, block)
    assert list(pair.genes) == ["C", "A", "B"]
    np.testing.assert_array_equal(pair.reference[:, 0], [30.0, 10.0, 20.0])


def test_matching_is_exact_and_case_sensitive():
    query = pd.Series([1.0, 2.0], index=["tp53", "EGFR"])
    block = pd.DataFrame({"e1": [1.0, 2.0]}, index=["TP53", "EGFR"])
    assert list(align(query, block).genes) == ["EGFR"]


def test_empty_overlap_raises_data_error():
    query = pd.Series([1.0, 2.0], index=["A", "B"])
    block = pd.DataFrame({"e1": [1.0, 2.0]}, index=["X", "Y"])
    with pytest.raises(DataError, match="share no gene identifiers"):
        align(query, block)


def test_entries_are_kept():
    query = pd.Series([1.0, 2.0], index=["A", "B"])
    block = pd.DataFrame({"e1": [1.0, 2.0], "e2": [2.0, 1.0]}, index=["A", "B"])
    assert list(align(query, block).entries) == ["e1", "e2"]
