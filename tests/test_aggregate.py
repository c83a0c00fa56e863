"""
Unit tests for the response aggregator in pbmc_tools/aggregate.py.
"""

import pytest

from pbmc_tools.aggregate import AggregationResult, fold_response, group_records, read_records
from pbmc_tools.errors import TransportError
from pbmc_tools.filters import DEGS, GENE_EXPRESSION, MARKERS


def deg(gene, cell_type, p=0.01):
    return {"gene": gene, "log2_fold_change": 1.0, "p_value": p, "cell_type": cell_type, "resolution": "fine"}


def test_keyed_fold_groups_under_requested_key():
    out = []
    payload = {"results": [deg("IL6", "Treg"), deg("TNF", "something-else")]}
    fold_response(payload, DEGS, "Treg", out)
    assert len(out) == 1
    assert out[0]["cell_type"] == "Treg"
    assert [d["gene"] for d in out[0]["degs"]] == ["IL6", "TNF"]
    # the record keeps its own cell_type; only the grouping uses the key
    assert out[0]["degs"][1]["cell_type"] == "something-else"


def test_keyed_fold_with_no_records_still_emits_entry():
    out = []
    fold_response({"results": []}, DEGS, "Treg", out)
    assert out == [{"cell_type": "Treg", "degs": []}]


def test_unfiltered_fold_groups_by_server_cell_type_in_first_seen_order():
    out = []
    payload = {"results": [
        deg("A", "MAIT"),
        deg("B", "Treg"),
        deg("C", "MAIT"),
        deg("D", "pDC"),
    ]}
    fold_response(payload, DEGS, None, out)
    assert [e["cell_type"] for e in out] == ["MAIT", "Treg", "pDC"]
    assert [d["gene"] for d in out[0]["degs"]] == ["A", "C"]
    assert set(out[0]["degs"][0]) == {"gene", "log2_fold_change", "p_value", "cell_type"}


def test_fold_appends_after_existing_entries():
    out = [{"cell_type": "Treg", "degs": []}]
    fold_response({"results": [deg("A", "MAIT")]}, DEGS, "MAIT", out)
    assert [e["cell_type"] for e in out] == ["Treg", "MAIT"]


def test_gene_expression_grouped_by_gene():
    out = []
    payload = {"results": [
        {"gene": "IL6", "celltype": "Treg", "mean_expression": 0.1, "resolution": "fine"},
        {"gene": "TNF", "celltype": "Treg", "mean_expression": 0.5, "resolution": "fine"},
        {"gene": "IL6", "celltype": "MAIT", "mean_expression": 0.2, "resolution": "fine"},
    ]}
    fold_response(payload, GENE_EXPRESSION, None, out)
    assert out == [
        {"gene": "IL6", "expression": [
            {"celltype": "Treg", "mean_expression": 0.1},
            {"celltype": "MAIT", "mean_expression": 0.2},
        ]},
        {"gene": "TNF", "expression": [{"celltype": "Treg", "mean_expression": 0.5}]},
    ]


def test_marker_payload_reads_data_envelope():
    out = []
    payload = {"data": [{"gene": "IL6", "celltype": "Monocyte", "log2_fold_change": 2.0, "adj_p_val": 0.03}]}
    fold_response(payload, MARKERS, "IL6", out)
    assert out == [{"gene": "IL6", "changes": [
        {"cell_type": "Monocyte", "log2_fold_change": 2.0, "p_value": 0.03},
    ]}]


@pytest.mark.parametrize("payload", [
    None,
    [],
    {"data": []},
    {"results": {"not": "a list"}},
])
def test_read_records_rejects_wrong_shape(payload):
    with pytest.raises(TransportError):
        read_records(payload, "results")


def test_group_records_preserves_first_seen_order():
    groups = group_records([{"k": "b"}, {"k": "a"}, {"k": "b"}], "k")
    assert list(groups) == ["b", "a"]
    assert len(groups["b"]) == 2


def test_aggregation_result_branches():
    result = AggregationResult()
    result.branch("fine").append({"x": 1})
    result.branch("broad").append({"y": 2})
    assert result.to_dict() == {"fine": [{"x": 1}], "broad": [{"y": 2}]}
    with pytest.raises(ValueError):
        result.branch("medium")


@pytest.mark.parametrize("records", [[None], [{"cell_type": "Treg"}, "text"], [[1, 2]]])
def test_read_records_rejects_non_object_records(records):
    with pytest.raises(TransportError, match="format"):
        read_records({"results": records}, "results")


def test_unhashable_discriminant_is_a_transport_error():
    with pytest.raises(TransportError, match="format"):
        fold_response({"results": [{"cell_type": ["x"]}]}, DEGS, None, [])
