"""
Graph Model
===========

The single owned physical state of the knowledge graph: node identities,
positions, velocities, edges and the pinned (dragged) node.

OWNERSHIP:
==========
- Positions and velocities change only through commit_physics() (simulator)
  or pin() / move_pinned() / unpin() (interaction controller)
- Readers receive frozen NodeSnapshot copies or read-only array views
- Every external mutation bumps `revision`
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Dict, Iterator, List, Optional, Sequence, Tuple
import math

import numpy as np

from ..contracts.base import Vec2, NodeKind
from ..contracts.graph import NodeSpec, EdgeSpec, ClusterSpec, GraphPayload
from .layout_config import LayoutConfig


@dataclass(frozen=True)
class NodeSnapshot:
    """Immutable copy of one node's identity and physical state."""
    index: int
    node_id: str
    label: str
    kind: NodeKind
    category: str
    position: Vec2
    velocity: Vec2

    @property
    def has_position(self) -> bool:
        return self.position.is_finite


class GraphState:
    """
    Authoritative nodes, edges and physical state.

    Edges whose endpoints are not both present are retained (the edge set is
    immutable) but excluded from resolved_edges() and edge_index.
    """

    def __init__(
        self,
        nodes: Sequence[NodeSpec],
        edges: Sequence[EdgeSpec],
        positions: np.ndarray,
        config: LayoutConfig,
        clusters: Sequence[ClusterSpec] = (),
    ):
        self._config = config
        self._nodes: Tuple[NodeSpec, ...] = tuple(nodes)
        self._index: Dict[str, int] = {spec.node_id: i for i, spec in enumerate(self._nodes)}
        if len(self._index) != len(self._nodes):
            raise ValueError("GraphState node ids must be unique")

        positions = np.asarray(positions, dtype=float).reshape(len(self._nodes), 2)
        self._positions = positions.copy()
        self._velocities = np.zeros_like(self._positions)

        self._edges: Tuple[EdgeSpec, ...] = tuple(edges)
        resolved: List[EdgeSpec] = []
        pairs: List[Tuple[int, int]] = []
        for edge in self._edges:
            source = self._index.get(edge.source_id)
            target = self._index.get(edge.target_id)
            if source is None or target is None:
                continue
            resolved.append(edge)
            pairs.append((source, target))
        self._resolved: Tuple[EdgeSpec, ...] = tuple(resolved)
        self._edge_index = np.array(pairs, dtype=int).reshape(len(pairs), 2)

        self._categories: Tuple[str, ...] = tuple(dict.fromkeys(n.category for n in self._nodes))
        self._clusters: Tuple[ClusterSpec, ...] = tuple(clusters)

        self._pinned: Optional[int] = None
        self._revision = 0

    # -------------------------------------------------------------------------
    # Identity
    # -------------------------------------------------------------------------

    @property
    def config(self) -> LayoutConfig:
        return self._config

    @property
    def node_count(self) -> int:
        return len(self._nodes)

    @property
    def is_empty(self) -> bool:
        return not self._nodes

    @property
    def node_ids(self) -> Tuple[str, ...]:
        return tuple(spec.node_id for spec in self._nodes)

    @property
    def categories(self) -> Tuple[str, ...]:
        """Distinct node categories in first-seen order."""
        return self._categories

    @property
    def clusters(self) -> Tuple[ClusterSpec, ...]:
        """Cluster display metadata supplied with the payload."""
        return self._clusters

    @property
    def center(self) -> Vec2:
        cx, cy = self._config.center
        return Vec2(cx, cy)

    @property
    def revision(self) -> int:
        return self._revision

    def has_node(self, node_id: str) -> bool:
        return node_id in self._index

    def index_of(self, node_id: str) -> Optional[int]:
        return self._index.get(node_id)

    def node(self, node_id: str) -> Optional[NodeSnapshot]:
        index = self._index.get(node_id)
        if index is None:
            return None
        return self._snapshot(index)

    def nodes(self) -> Iterator[NodeSnapshot]:
        for index in range(len(self._nodes)):
            yield self._snapshot(index)

    def position_of(self, node_id: str) -> Optional[Vec2]:
        index = self._index.get(node_id)
        if index is None:
            return None
        x, y = self._positions[index]
        return Vec2(float(x), float(y))

    def _snapshot(self, index: int) -> NodeSnapshot:
        spec = self._nodes[index]
        px, py = self._positions[index]
        vx, vy = self._velocities[index]
        return NodeSnapshot(
            index=index,
            node_id=spec.node_id,
            label=spec.label,
            kind=spec.kind,
            category=spec.category,
            position=Vec2(float(px), float(py)),
            velocity=Vec2(float(vx), float(vy)),
        )

    # -------------------------------------------------------------------------
    # Edges
    # -------------------------------------------------------------------------

    @property
    def edges(self) -> Tuple[EdgeSpec, ...]:
        return self._edges

    def resolved_edges(self) -> Tuple[EdgeSpec, ...]:
        return self._resolved

    def unresolved_edges(self) -> Tuple[EdgeSpec, ...]:
        return tuple(e for e in self._edges if not (e.source_id in self._index and e.target_id in self._index))

    @property
    def edge_index(self) -> np.ndarray:
        """(m, 2) array of resolved (source, target) node indices."""
        view = self._edge_index.view()
        view.flags.writeable = False
        return view

    # -------------------------------------------------------------------------
    # Physical state
    # -------------------------------------------------------------------------

    @property
    def positions(self) -> np.ndarray:
        view = self._positions.view()
        view.flags.writeable = False
        return view

    @property
    def velocities(self) -> np.ndarray:
        view = self._velocities.view()
        view.flags.writeable = False
        return view

    def commit_physics(self, positions: np.ndarray, velocities: np.ndarray) -> None:
        """
        Replace positions and velocities after a simulation step.

        The pinned node keeps its current position and zero velocity whatever
        the step produced.
        """
        positions = np.array(positions, dtype=float)
        velocities = np.array(velocities, dtype=float)
        if positions.shape != self._positions.shape or velocities.shape != self._velocities.shape:
            raise ValueError("commit_physics shape mismatch")
        if self._pinned is not None:
            positions[self._pinned] = self._positions[self._pinned]
            velocities[self._pinned] = 0.0
        self._positions = positions
        self._velocities = velocities

    # -------------------------------------------------------------------------
    # Pinning (interaction controller API)
    # -------------------------------------------------------------------------

    @property
    def pinned_id(self) -> Optional[str]:
        if self._pinned is None:
            return None
        return self._nodes[self._pinned].node_id

    @property
    def pinned_index(self) -> Optional[int]:
        return self._pinned

    def pin(self, node_id: str) -> bool:
        """Exclude a node from integration until unpin(); zeroes its velocity."""
        index = self._index.get(node_id)
        if index is None:
            return False
        self._pinned = index
        self._velocities[index] = 0.0
        self._revision += 1
        return True

    def move_pinned(self, x: float, y: float) -> bool:
        """Place the pinned node at (x, y), clamped to the surface extents."""
        if self._pinned is None:
            return False
        if not (math.isfinite(x) and math.isfinite(y)):
            return False
        self._positions[self._pinned] = (
            min(max(x, 0.0), self._config.width),
            min(max(y, 0.0), self._config.height),
        )
        self._velocities[self._pinned] = 0.0
        self._revision += 1
        return True

    def unpin(self) -> Optional[str]:
        released = self.pinned_id
        if self._pinned is not None:
            self._velocities[self._pinned] = 0.0
            self._pinned = None
            self._revision += 1
        return released


# =============================================================================
# CONSTRUCTION
# =============================================================================

def initial_positions(
    nodes: Sequence[NodeSpec],
    config: LayoutConfig,
    rng: np.random.Generator,
) -> np.ndarray:
    """
    Scatter nodes around a circle, one angular sector per category.

    Same-category nodes share an angle and are separated by a random radius
    offset plus per-axis jitter. Results are clamped into the layout bounds.
    """
    n = len(nodes)
    if n == 0:
        return np.zeros((0, 2))

    categories = list(dict.fromkeys(spec.category for spec in nodes))
    sector = {category: i for i, category in enumerate(categories)}
    angles = np.array([sector[spec.category] for spec in nodes], dtype=float)
    angles *= 2.0 * math.pi / len(categories)

    radii = config.base_radius + rng.uniform(0.0, config.radius_spread, n)
    jitter = rng.uniform(-config.jitter, config.jitter, (n, 2))

    cx, cy = config.center
    positions = np.empty((n, 2))
    positions[:, 0] = cx + np.cos(angles) * radii + jitter[:, 0]
    positions[:, 1] = cy + np.sin(angles) * radii + jitter[:, 1]

    min_x, min_y, max_x, max_y = config.bounds
    positions[:, 0] = np.clip(positions[:, 0], min_x, max_x)
    positions[:, 1] = np.clip(positions[:, 1], min_y, max_y)
    return positions


def initialize_graph(
    payload: GraphPayload,
    config: Optional[LayoutConfig] = None,
    rng: Optional[np.random.Generator] = None,
    seed: Optional[int] = None,
) -> GraphState:
    """
    Build the graph model from a static payload.

    Duplicate node ids keep their first occurrence. Velocities start at zero.
    """
    config = config or LayoutConfig()
    rng = rng if rng is not None else np.random.default_rng(seed)

    unique: Dict[str, NodeSpec] = {}
    for spec in payload.nodes:
        unique.setdefault(spec.node_id, spec)
    nodes = list(unique.values())

    positions = initial_positions(nodes, config, rng)
    return GraphState(nodes, payload.edges, positions, config, clusters=payload.clusters)
