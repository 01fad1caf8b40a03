"""
Ingestion Layer Tests
=====================

Tests for payload parsing, id normalisation and the builtin curriculum.

TOLERANCE VERIFICATION:
=======================
1. Bad entries are skipped and reported, never fatal
2. Only structurally wrong or unreadable documents are Errors
3. Edges to unknown ids survive ingestion untouched
"""

import json

import pytest

from backend.contracts.base import ErrorCode, NodeKind, UNCATEGORIZED
from backend.core import initialize_graph
from backend.ingestion import (
    IngestionConfig, build_curriculum_graph, curriculum_payload, load_payload, normalize_id, parse_payload
)


class TestNormalizeId:

    @pytest.mark.parametrize("raw, expected", [
        ("sc_open", "open"),
        ("concept_errno", "errno"),
        ("sc__exit", "_exit"),
        ("plain", "plain"),
        ("sc_", "sc_"),
    ])
    def test_prefix_stripping(self, raw, expected):
        assert normalize_id(raw) == expected

    def test_stripping_can_be_disabled(self):
        assert normalize_id("sc_open", IngestionConfig(strip_prefixes=False)) == "sc_open"


class TestParsePayload:

    def test_bare_graph(self):
        result = parse_payload({
            "nodes": [{"id": "sc_fork", "type": "syscall", "label": "fork", "cluster": "process"}],
            "edges": [],
        })
        assert result.is_success
        payload = result.value
        assert payload.nodes[0].node_id == "fork"
        assert payload.nodes[0].kind == NodeKind.SYSCALL
        assert payload.nodes[0].category == "process"
        assert payload.warnings == ()

    def test_knowledge_base_nesting(self):
        result = parse_payload({"syscalls": {}, "knowledgeGraph": {"nodes": [{"id": "sc_kill"}], "edges": []}})
        assert result.is_success
        assert result.value.nodes[0].node_id == "kill"

    def test_defaults_for_missing_fields(self):
        payload = parse_payload({"nodes": [{"id": "concept_zombie", "type": "mystery"}]}).value
        spec = payload.nodes[0]
        assert spec.label == "zombie"
        assert spec.kind == NodeKind.OTHER
        assert spec.category == UNCATEGORIZED

    def test_invalid_nodes_skipped_with_warning(self):
        payload = parse_payload({
            "nodes": [{"label": "no id"}, "junk", {"id": "sc_read"}, {"id": 7}],
            "edges": [],
        }).value
        assert [n.node_id for n in payload.nodes] == ["read"]
        assert payload.warnings == (
            "node[0] skipped: missing or invalid id",
            "node[1] skipped: missing or invalid id",
            "node[3] skipped: missing or invalid id",
        )

    def test_duplicate_node_keeps_first(self):
        payload = parse_payload({
            "nodes": [{"id": "sc_open", "label": "first"}, {"id": "sc_open", "label": "second"}],
        }).value
        assert len(payload.nodes) == 1
        assert payload.nodes[0].label == "first"
        assert payload.warnings == ("node[1] skipped: duplicate id 'open'",)

    def test_edges_missing_endpoint_skipped(self):
        payload = parse_payload({
            "nodes": [{"id": "sc_open"}],
            "edges": [{"source": "sc_open"}, {"source": "sc_open", "target": "sc_close", "type": "lifecycle"}],
        }).value
        assert len(payload.edges) == 1
        assert payload.edges[0].target_id == "close"
        assert payload.edges[0].relation == "lifecycle"
        assert payload.warnings == ("edge[0] skipped: missing source or target",)

    def test_edges_to_unknown_nodes_kept(self):
        payload = parse_payload({
            "nodes": [{"id": "sc_open"}],
            "edges": [{"source": "sc_open", "target": "sc_ghost"}],
        }).value
        assert payload.edges[0].target_id == "ghost"
        assert payload.edges[0].relation == "related"

    def test_clusters(self):
        payload = parse_payload({
            "nodes": [],
            "clusters": {
                "file_io": {"label": "File I/O", "color": "#21409a"},
                "broken": {"label": "No color"},
            },
        }).value
        assert len(payload.clusters) == 1
        assert payload.cluster_map()["file_io"].display_label == "File I/O"
        assert "cluster 'broken' skipped: missing color" in payload.warnings

    @pytest.mark.parametrize("document", [
        [],
        {"knowledgeGraph": "nope"},
        {"nodes": {"id": "sc_open"}},
    ])
    def test_malformed_documents(self, document):
        result = parse_payload(document)
        assert result.is_failure
        assert result.error.code == ErrorCode.MALFORMED_PAYLOAD

    def test_empty_document_is_empty_payload(self):
        result = parse_payload({})
        assert result.is_success
        assert result.value.is_empty


class TestLoadPayload:

    def test_missing_file(self, tmp_path):
        path = tmp_path / "nowhere.json"
        result = load_payload(path)
        assert result.error.code == ErrorCode.SOURCE_NOT_FOUND
        assert ("path", str(path)) in result.error.context

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text("{not json", encoding="utf-8")
        result = load_payload(path)
        assert result.error.code == ErrorCode.SOURCE_UNREADABLE

    def test_valid_file(self, tmp_path):
        path = tmp_path / "graph.json"
        path.write_text(json.dumps(build_curriculum_graph()), encoding="utf-8")
        result = load_payload(str(path))
        assert result.is_success
        assert len(result.value.nodes) == 26


class TestCurriculum:

    def test_size(self):
        payload = curriculum_payload()
        assert len(payload.nodes) == 26
        assert len(payload.edges) == 19
        assert payload.warnings == ()

    def test_every_edge_resolves(self):
        graph = initialize_graph(curriculum_payload(), seed=0)
        assert graph.unresolved_edges() == ()
        assert len(graph.resolved_edges()) == 19

    def test_categories(self):
        graph = initialize_graph(curriculum_payload(), seed=0)
        assert graph.categories == ("file_io", "process", "signals", "fundamentals")

    def test_raw_document_is_prefixed(self):
        document = build_curriculum_graph()
        assert document["nodes"][0]["id"] == "sc_open"
        assert any(n["id"] == "concept_errno" for n in document["nodes"])
