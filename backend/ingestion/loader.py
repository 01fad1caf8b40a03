"""
Graph Payload Loader

Turns a precomputed content document into an immutable GraphPayload.

ACCEPTED SHAPES:
================
1. Bare graph:      {"nodes": [...], "edges": [...], "clusters": {...}}
2. Knowledge base:  {"knowledgeGraph": {"nodes": [...], ...}, ...}

TOLERANCE RULES:
================
- Malformed node/edge entries are skipped and reported as warnings
- Duplicate node ids keep the first occurrence
- Only an unreadable or structurally wrong document is an Error
"""

from __future__ import annotations
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union
import json

from ..contracts.base import Error, ErrorCode, Result, NodeKind, UNCATEGORIZED
from ..contracts.graph import NodeSpec, EdgeSpec, ClusterSpec, GraphPayload


@dataclass(frozen=True)
class IngestionConfig:
    """Configuration for payload ingestion."""
    id_prefixes: Tuple[str, ...] = ("sc_", "concept_")
    strip_prefixes: bool = True
    default_relation: str = "related"


def normalize_id(raw_id: str, config: Optional[IngestionConfig] = None) -> str:
    """
    Strip one known id prefix ("sc_open" -> "open").

    Ids that would become empty are returned unchanged.
    """
    config = config or IngestionConfig()
    if not config.strip_prefixes:
        return raw_id
    for prefix in config.id_prefixes:
        if raw_id.startswith(prefix) and len(raw_id) > len(prefix):
            return raw_id[len(prefix):]
    return raw_id


def parse_payload(document: Mapping[str, Any], config: Optional[IngestionConfig] = None) -> Result:
    """
    Parse a payload document.

    Returns Result.success(GraphPayload) or Result.failure(Error) when the
    document has no usable graph structure.
    """
    config = config or IngestionConfig()

    if not isinstance(document, Mapping):
        return Result.failure(Error.create(
            ErrorCode.MALFORMED_PAYLOAD, "Graph document must be a JSON object"
        ))

    graph = document.get("knowledgeGraph", document)
    if not isinstance(graph, Mapping):
        return Result.failure(Error.create(
            ErrorCode.MALFORMED_PAYLOAD, "knowledgeGraph must be a JSON object"
        ))

    raw_nodes = graph.get("nodes", [])
    raw_edges = graph.get("edges", [])
    if not isinstance(raw_nodes, list) or not isinstance(raw_edges, list):
        return Result.failure(Error.create(
            ErrorCode.MALFORMED_PAYLOAD, "nodes and edges must be lists"
        ))

    warnings: List[str] = []
    nodes: Dict[str, NodeSpec] = {}
    for position, raw in enumerate(raw_nodes):
        spec = _parse_node(raw, config)
        if spec is None:
            warnings.append(f"node[{position}] skipped: missing or invalid id")
            continue
        if spec.node_id in nodes:
            warnings.append(f"node[{position}] skipped: duplicate id '{spec.node_id}'")
            continue
        nodes[spec.node_id] = spec

    edges: List[EdgeSpec] = []
    for position, raw in enumerate(raw_edges):
        edge = _parse_edge(raw, config)
        if edge is None:
            warnings.append(f"edge[{position}] skipped: missing source or target")
            continue
        edges.append(edge)

    clusters = _parse_clusters(graph.get("clusters"), warnings)

    return Result.success(GraphPayload(
        nodes=tuple(nodes.values()),
        edges=tuple(edges),
        clusters=clusters,
        warnings=tuple(warnings),
    ))


def load_payload(path: Union[str, Path], config: Optional[IngestionConfig] = None) -> Result:
    """Read and parse a JSON content file."""
    path = Path(path)
    if not path.exists():
        return Result.failure(
            Error.create(ErrorCode.SOURCE_NOT_FOUND, "Graph file not found").with_context("path", str(path))
        )
    try:
        with open(path, 'r', encoding='utf-8') as f:
            document = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        return Result.failure(
            Error.create(ErrorCode.SOURCE_UNREADABLE, str(e)).with_context("path", str(path))
        )
    return parse_payload(document, config)


# =============================================================================
# ENTRY PARSERS
# =============================================================================

def _parse_node(raw: Any, config: IngestionConfig) -> Optional[NodeSpec]:
    if not isinstance(raw, Mapping):
        return None
    raw_id = raw.get("id")
    if not isinstance(raw_id, str) or not raw_id:
        return None
    node_id = normalize_id(raw_id, config)
    label = raw.get("label")
    if not isinstance(label, str) or not label:
        label = node_id
    category = raw.get("cluster")
    if not isinstance(category, str) or not category:
        category = UNCATEGORIZED
    return NodeSpec(
        node_id=node_id,
        label=label,
        kind=NodeKind.parse(raw.get("type")),
        category=category,
    )


def _parse_edge(raw: Any, config: IngestionConfig) -> Optional[EdgeSpec]:
    if not isinstance(raw, Mapping):
        return None
    source = raw.get("source")
    target = raw.get("target")
    if not isinstance(source, str) or not source or not isinstance(target, str) or not target:
        return None
    relation = raw.get("type")
    if not isinstance(relation, str) or not relation:
        relation = config.default_relation
    return EdgeSpec(
        source_id=normalize_id(source, config),
        target_id=normalize_id(target, config),
        relation=relation,
    )


def _parse_clusters(raw: Any, warnings: List[str]) -> Tuple[ClusterSpec, ...]:
    if raw is None:
        return ()
    if not isinstance(raw, Mapping):
        warnings.append("clusters ignored: expected an object")
        return ()
    clusters = []
    for name, meta in raw.items():
        if not isinstance(meta, Mapping) or not isinstance(meta.get("color"), str):
            warnings.append(f"cluster '{name}' skipped: missing color")
            continue
        label = meta.get("label")
        clusters.append(ClusterSpec(
            name=str(name),
            color=meta["color"],
            label=label if isinstance(label, str) else None,
        ))
    return tuple(clusters)
