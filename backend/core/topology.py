"""
Topology Engine
===============

Structural analysis of the knowledge graph with NetworkX.

SCOPE:
======
This engine computes TOPOLOGY (geometry), not IMPORTANCE (judgment).

ALLOWED:
- Connected components (clusters of related syscalls/concepts)
- Neighbourhoods (what to highlight next to a node)
- Path finding (how two concepts relate)
- Structural metrics (density, diameter)

Only resolved edges take part; dangling references are ignored exactly as the
simulator and renderer ignore them.
"""

from __future__ import annotations
from typing import List, Optional, Set
from dataclasses import dataclass
import networkx as nx

from .model import GraphState


@dataclass(frozen=True)
class GraphMetrics:
    """Immutable structural metrics for a graph."""
    node_count: int
    edge_count: int
    unresolved_edge_count: int
    density: float
    is_connected: bool
    connected_components_count: int
    diameter: Optional[int] = None  # Only for connected graphs


class TopologyEngine:
    """
    Read-only structural view of a GraphState.

    The graph is undirected: relation direction ("open" uses "read") does not
    change which nodes are adjacent.
    """

    def __init__(self, graph: Optional[GraphState] = None):
        self._graph = nx.Graph()
        self._unresolved = 0
        if graph is not None:
            self.build_graph(graph)

    def build_graph(self, graph: GraphState) -> None:
        """
        Build graph from the model's nodes and resolved edges.

        Replaces internal graph state.
        """
        self._graph = nx.Graph()

        for snapshot in graph.nodes():
            self._graph.add_node(
                snapshot.node_id,
                category=snapshot.category,
                kind=snapshot.kind.value,
            )

        for edge in graph.resolved_edges():
            self._graph.add_edge(edge.source_id, edge.target_id, relation=edge.relation)

        self._unresolved = len(graph.unresolved_edges())

    def neighbors(self, node_id: str) -> Set[str]:
        if node_id not in self._graph:
            return set()
        return set(self._graph.neighbors(node_id))

    def get_connected_components(self) -> List[Set[str]]:
        """
        Identify disjoint subgraphs.

        Returns list of sets of node IDs, largest first.
        """
        if not self._graph:
            return []
        return sorted((set(c) for c in nx.connected_components(self._graph)), key=len, reverse=True)

    def compute_metrics(self) -> GraphMetrics:
        """Compute purely structural metrics."""
        if not self._graph:
            return GraphMetrics(0, 0, self._unresolved, 0.0, False, 0, None)

        is_connected = nx.is_connected(self._graph)

        diameter = None
        if is_connected and len(self._graph) > 1:
            diameter = nx.diameter(self._graph)

        return GraphMetrics(
            node_count=self._graph.number_of_nodes(),
            edge_count=self._graph.number_of_edges(),
            unresolved_edge_count=self._unresolved,
            density=nx.density(self._graph),
            is_connected=is_connected,
            connected_components_count=nx.number_connected_components(self._graph),
            diameter=diameter
        )

    def get_shortest_path(self, start_id: str, end_id: str) -> Optional[List[str]]:
        """Find shortest path between two nodes, or None if unrelated."""
        try:
            return nx.shortest_path(self._graph, source=start_id, target=end_id)
        except (nx.NetworkXNoPath, nx.NodeNotFound):
            return None
