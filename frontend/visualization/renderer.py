"""
Graph Renderer

Responsibility:
Produce a frame from the graph model and the interaction state.
Pure read-only consumer: never mutates the model.

Input: GraphState + InteractionState -> Output: NetworkGraphView -> Surface

DRAWING POLICY:
===============
- Edges with an unresolved endpoint are skipped
- Nodes without a finite position are skipped (and so are their edges)
- Unknown categories fall back to a neutral color
Nothing in here raises on graph content.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple
import hashlib
import math

from backend.contracts.events import AuditEventType
from backend.core.model import GraphState
from backend.observability import ObservabilityLayer

from frontend.state import AvailabilityState, InteractionState
from frontend.visualization.graph import GraphNode, GraphEdge, LegendEntry, NetworkGraphView
from frontend.visualization.surface import Surface


DEFAULT_PALETTE: Tuple[Tuple[str, str], ...] = (
    ("file_io", "#21409a"),
    ("process", "#be1e2d"),
    ("signals", "#f9a825"),
    ("fundamentals", "#4caf50"),
    ("errors", "#9c27b0"),
    ("types", "#00bcd4"),
    ("concepts", "#ff5722"),
)


@dataclass(frozen=True)
class RenderConfig:
    """Colors, sizes and legend placement."""
    background: str = "#fafafa"

    edge_color: str = "#e0e0e0"
    edge_width: float = 1.0
    edge_highlight_color: str = "#424242"
    edge_highlight_width: float = 2.0

    primary_radius: float = 20.0
    secondary_radius: float = 15.0
    highlight_growth: float = 3.0
    fallback_color: str = "#424242"
    selected_fill: str = "#1a1a1a"
    outline_color: str = "#1a1a1a"
    outline_width: float = 2.0

    label_color: str = "#ffffff"
    label_size: float = 10.0
    max_label_chars: int = 8

    show_legend: bool = True
    legend_x: float = 10.0
    legend_y: float = 20.0
    legend_spacing: float = 18.0
    legend_swatch: float = 12.0
    legend_text_color: str = "#424242"
    legend_text_size: float = 11.0

    palette: Tuple[Tuple[str, str], ...] = field(default=DEFAULT_PALETTE)

    def __post_init__(self):
        if self.max_label_chars < 2:
            raise ValueError("max_label_chars must be at least 2")
        if self.primary_radius <= 0 or self.secondary_radius <= 0:
            raise ValueError("Node radii must be positive")


def elide_label(label: str, max_chars: int = 8) -> str:
    """Shorten labels longer than max_chars to max_chars - 1 chars plus '..'."""
    if len(label) > max_chars:
        return label[:max_chars - 1] + ".."
    return label


class Renderer:
    """
    Two-phase renderer.

    build_view() resolves everything into an immutable NetworkGraphView;
    paint() replays that view onto any Surface.
    """

    def __init__(self, config: Optional[RenderConfig] = None, observability: Optional[ObservabilityLayer] = None):
        self._config = config or RenderConfig()
        self._observability = observability
        self._palette: Dict[str, str] = dict(self._config.palette)

    @property
    def config(self) -> RenderConfig:
        return self._config

    def color_for(self, graph: GraphState, category: str) -> str:
        """Payload cluster colors win over the default palette."""
        for cluster in graph.clusters:
            if cluster.name == category:
                return cluster.color
        return self._palette.get(category, self._config.fallback_color)

    def legend_label(self, graph: GraphState, category: str) -> str:
        for cluster in graph.clusters:
            if cluster.name == category:
                return cluster.display_label
        return category.replace('_', ' ')

    # -------------------------------------------------------------------------
    # View construction
    # -------------------------------------------------------------------------

    def build_view(self, graph: GraphState, interaction: Optional[InteractionState] = None) -> NetworkGraphView:
        cfg = self._config
        interaction = interaction or InteractionState()

        drawable: Dict[str, Tuple[float, float]] = {}
        nodes: List[GraphNode] = []
        skipped_nodes = 0
        for snapshot in graph.nodes():
            if not snapshot.has_position:
                skipped_nodes += 1
                continue
            x, y = snapshot.position.to_tuple()
            drawable[snapshot.node_id] = (x, y)

            hovered = interaction.is_hovered(snapshot.node_id)
            selected = interaction.is_selected(snapshot.node_id)
            radius = cfg.primary_radius if snapshot.kind.is_primary else cfg.secondary_radius
            if hovered or selected:
                radius += cfg.highlight_growth

            nodes.append(GraphNode(
                node_id=snapshot.node_id,
                x=x,
                y=y,
                radius=radius,
                fill=cfg.selected_fill if selected else self.color_for(graph, snapshot.category),
                label=elide_label(snapshot.label, cfg.max_label_chars),
                full_label=snapshot.label,
                entity_type=snapshot.kind.value,
                category=snapshot.category,
                is_hovered=hovered,
                is_selected=selected,
            ))

        edges: List[GraphEdge] = []
        skipped_edges = 0
        for position, edge in enumerate(graph.edges):
            source = drawable.get(edge.source_id)
            target = drawable.get(edge.target_id)
            if source is None or target is None:
                skipped_edges += 1
                continue
            highlighted = (
                interaction.is_highlighted(edge.source_id)
                or interaction.is_highlighted(edge.target_id)
            )
            edges.append(GraphEdge(
                edge_id=f"edge_{position}",
                source_id=edge.source_id,
                target_id=edge.target_id,
                x1=source[0],
                y1=source[1],
                x2=target[0],
                y2=target[1],
                thickness=cfg.edge_highlight_width if highlighted else cfg.edge_width,
                color=cfg.edge_highlight_color if highlighted else cfg.edge_color,
                label=edge.relation,
                is_highlighted=highlighted,
            ))

        legend: List[LegendEntry] = []
        if cfg.show_legend:
            for i, category in enumerate(graph.categories):
                legend.append(LegendEntry(
                    category=category,
                    label=self.legend_label(graph, category),
                    color=self.color_for(graph, category),
                    x=cfg.legend_x,
                    y=cfg.legend_y + i * cfg.legend_spacing,
                ))

        if not nodes:
            availability = AvailabilityState.EMPTY
        elif skipped_edges or skipped_nodes:
            availability = AvailabilityState.PARTIAL
        else:
            availability = AvailabilityState.PRESENT

        return NetworkGraphView(
            view_id=self._view_id(nodes, interaction),
            width=graph.config.width,
            height=graph.config.height,
            background=cfg.background,
            nodes=tuple(nodes),
            edges=tuple(edges),
            legend=tuple(legend),
            availability=availability,
            skipped_edges=skipped_edges,
            skipped_nodes=skipped_nodes,
        )

    @staticmethod
    def _view_id(nodes: List[GraphNode], interaction: InteractionState) -> str:
        content = "|".join(f"{n.node_id}:{n.x:.3f}:{n.y:.3f}" for n in nodes)
        content += f"|{interaction.hovered_id}|{interaction.selected_id}"
        return f"view_{hashlib.sha256(content.encode('utf-8')).hexdigest()[:12]}"

    # -------------------------------------------------------------------------
    # Painting
    # -------------------------------------------------------------------------

    def paint(self, view: NetworkGraphView, surface: Surface) -> None:
        cfg = self._config
        surface.clear(view.background)

        for edge in view.edges:
            surface.line(edge.x1, edge.y1, edge.x2, edge.y2, edge.color, edge.thickness)

        for node in view.nodes:
            if not (math.isfinite(node.x) and math.isfinite(node.y)):
                continue
            if node.is_focal_point:
                surface.circle(node.x, node.y, node.radius, node.fill, cfg.outline_color, cfg.outline_width)
            else:
                surface.circle(node.x, node.y, node.radius, node.fill)
            surface.text(node.x, node.y, node.label, cfg.label_color, cfg.label_size, bold=node.is_focal_point)

        half = cfg.legend_swatch / 2.0
        for entry in view.legend:
            surface.rect(entry.x, entry.y - half, cfg.legend_swatch, cfg.legend_swatch, entry.color)
            surface.text(
                entry.x + cfg.legend_swatch + 6.0, entry.y, entry.label,
                cfg.legend_text_color, cfg.legend_text_size, align="left",
            )

    def render(
        self,
        graph: GraphState,
        interaction: Optional[InteractionState],
        surface: Surface,
    ) -> NetworkGraphView:
        """Build and paint one frame."""
        view = self.build_view(graph, interaction)
        self.paint(view, surface)
        if self._observability is not None:
            self._observability.metrics.record("frames_rendered_total", 1)
            if view.skipped_edges:
                self._observability.metrics.record("unresolved_edges", view.skipped_edges)
                if self._observability.config.record_every_step:
                    self._observability.audit(
                        "render", AuditEventType.RENDER, "edges_skipped",
                        count=view.skipped_edges,
                    )
        return view
