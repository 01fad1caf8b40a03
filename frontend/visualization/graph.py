"""
Graph Visualization Contracts

Responsibility:
Deterministic transformation of the graph model into Renderable Graph Views.
The view is fully resolved: every coordinate, radius, color and label is
computed before anything is painted.
"""

from dataclasses import dataclass
from typing import Optional, Tuple

from frontend.state import AvailabilityState


@dataclass(frozen=True)
class GraphNode:
    """Renderable graph node."""
    node_id: str
    x: float
    y: float
    radius: float
    fill: str
    label: str          # Elided for drawing
    full_label: str
    entity_type: str
    category: str
    is_hovered: bool
    is_selected: bool

    @property
    def is_focal_point(self) -> bool:
        return self.is_hovered or self.is_selected


@dataclass(frozen=True)
class GraphEdge:
    """Renderable graph edge."""
    edge_id: str
    source_id: str
    target_id: str
    x1: float
    y1: float
    x2: float
    y2: float
    thickness: float
    color: str
    label: Optional[str]
    is_highlighted: bool


@dataclass(frozen=True)
class LegendEntry:
    """One swatch of the category legend."""
    category: str
    label: str
    color: str
    x: float
    y: float


@dataclass(frozen=True)
class NetworkGraphView:
    """
    Pre-layouted network graph frame.

    DETERMINISTIC:
    Same graph state + same interaction state = identical view.
    """
    view_id: str
    width: float
    height: float
    background: str
    nodes: Tuple[GraphNode, ...]
    edges: Tuple[GraphEdge, ...]
    legend: Tuple[LegendEntry, ...]
    availability: AvailabilityState
    skipped_edges: int = 0
    skipped_nodes: int = 0

    def find_node(self, node_id: str) -> Optional[GraphNode]:
        for node in self.nodes:
            if node.node_id == node_id:
                return node
        return None

    @property
    def summary(self) -> str:
        return f"{len(self.nodes)} nodes | {len(self.edges)} connections"
