"""
Graph Payload Contracts

Immutable description of the static knowledge graph handed to the engine.
This is the shape the ingestion layer produces and the graph model consumes.

PAYLOAD CONTRACT:
=================
- Node ids are already normalised (no "sc_" / "concept_" prefixes)
- Edges may reference ids that are not in the node set; consumers skip them
- Warnings record every entry that was dropped while parsing
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Dict, Optional, Tuple

from .base import NodeKind, UNCATEGORIZED


@dataclass(frozen=True)
class NodeSpec:
    """A single node as described by the content file."""
    node_id: str
    label: str
    kind: NodeKind = NodeKind.OTHER
    category: str = UNCATEGORIZED

    def __post_init__(self):
        if not self.node_id or not isinstance(self.node_id, str):
            raise ValueError("NodeSpec node_id must be a non-empty string")
        if not self.category:
            object.__setattr__(self, 'category', UNCATEGORIZED)


@dataclass(frozen=True)
class EdgeSpec:
    """Directed relation between two node ids."""
    source_id: str
    target_id: str
    relation: str = "related"


@dataclass(frozen=True)
class ClusterSpec:
    """Display metadata for a category."""
    name: str
    color: str
    label: Optional[str] = None

    @property
    def display_label(self) -> str:
        return self.label or self.name.replace('_', ' ')


@dataclass(frozen=True)
class GraphPayload:
    """
    Complete static graph.

    Immutable after construction; the engine never writes back to it.
    """
    nodes: Tuple[NodeSpec, ...] = field(default_factory=tuple)
    edges: Tuple[EdgeSpec, ...] = field(default_factory=tuple)
    clusters: Tuple[ClusterSpec, ...] = field(default_factory=tuple)
    warnings: Tuple[str, ...] = field(default_factory=tuple)

    @property
    def is_empty(self) -> bool:
        return not self.nodes

    def cluster_map(self) -> Dict[str, ClusterSpec]:
        return {c.name: c for c in self.clusters}
