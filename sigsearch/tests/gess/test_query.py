from __future__ import annotations

import pandas as pd
import pytest

from sigsearch.gess import QuerySignature
from sigsearch.utils.errors import ConfigurationError, InputError


def _frame(values=(1.0, 2.0, 3.0), genes=("g1", "g2", "g3")):
    return pd.DataFrame({"q": list(values)}, index=list(genes))


def test_valid_query():
    sig = QuerySignature(_frame(), gess_method="Cor", refdb="lincs")
    assert list(sig.genes) == ["g1", "g2", "g3"]
    assert sig.vector.tolist() == [1.0, 2.0, 3.0]
    assert sig.refdb == "lincs"


def test_series_is_accepted():
    sig = QuerySignature(pd.Series([1, 2], index=["a", "b"]), gess_method="Cor", refdb="x")
    assert sig.query.shape == (2, 1)
    assert sig.vector.dtype == float


def test_integer_gene_ids_become_strings():
    sig = QuerySignature(_frame(genes=(5720, 466, 6009)), gess_method="Cor", refdb="x")
    assert list(sig.genes) == ["5720", "466", "6009"]


@pytest.mark.parametrize(
    "query",
    [
        pd.DataFrame({"a": [1.0, 2.0], "b": [3.0, 4.0]}, index=["g1", "g2"]),
        pd.DataFrame({"a": ["x", "y"]}, index=["g1", "g2"]),
        pd.DataFrame({"a": []}, dtype=float),
        [1.0, 2.0, 3.0],
    ],
)
def test_malformed_queries_are_configuration_errors(query):
    with pytest.raises(ConfigurationError):
        QuerySignature(query, gess_method="Cor", refdb="x")


def test_unknown_gess_method():
    with pytest.raises(ConfigurationError, match="gess_method"):
        QuerySignature(_frame(), gess_method="Correlation", refdb="x")


def test_duplicated_genes_rejected():
    with pytest.raises(ConfigurationError, match="unique"):
        QuerySignature(_frame(genes=("g1", "g1", "g2")), gess_method="Cor", refdb="x")


def test_query_property_is_a_copy():
    sig = QuerySignature(_frame(), gess_method="Cor", refdb="x")
    q = sig.query
    q.iloc[0, 0] = 99.0
    assert sig.vector.iloc[0] == 1.0


def test_subset_genes():
    sig = QuerySignature(_frame(), gess_method="Cor", refdb="x")
    sub = sig.subset_genes(["g3", "g1", "zz"])
    assert list(sub.genes) == ["g1", "g3"]
    assert sub.gess_method == "Cor"
    with pytest.raises(InputError):
        sig.subset_genes(["zz"])
