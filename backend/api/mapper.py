"""
API Mapper
==========

Transforms render views, interaction state and metrics into JSON-ready
dictionaries. No computation happens here beyond field renaming.
"""
from typing import Any, Dict, Optional

from ..core.simulator import StepReport
from ..core.topology import GraphMetrics

from frontend.state import InteractionState
from frontend.visualization.graph import NetworkGraphView


def map_view_to_dto(view: NetworkGraphView) -> Dict[str, Any]:
    """Map a NetworkGraphView to the graph DTO consumed by the page."""
    return {
        "view_id": view.view_id,
        "width": view.width,
        "height": view.height,
        "background": view.background,
        "availability": view.availability.value,
        "summary": view.summary,
        "skipped_edges": view.skipped_edges,
        "skipped_nodes": view.skipped_nodes,
        "nodes": [
            {
                "id": n.node_id,
                "x": round(n.x, 3),
                "y": round(n.y, 3),
                "radius": n.radius,
                "fill": n.fill,
                "label": n.label,
                "full_label": n.full_label,
                "type": n.entity_type,
                "cluster": n.category,
                "hovered": n.is_hovered,
                "selected": n.is_selected,
            }
            for n in view.nodes
        ],
        "edges": [
            {
                "id": e.edge_id,
                "source": e.source_id,
                "target": e.target_id,
                "type": e.label,
                "points": [round(e.x1, 3), round(e.y1, 3), round(e.x2, 3), round(e.y2, 3)],
                "thickness": e.thickness,
                "color": e.color,
                "highlighted": e.is_highlighted,
            }
            for e in view.edges
        ],
        "legend": [
            {"cluster": entry.category, "label": entry.label, "color": entry.color}
            for entry in view.legend
        ],
    }


def map_interaction_to_dto(state: InteractionState, clicked_id: Optional[str] = None) -> Dict[str, Any]:
    return {
        "phase": state.phase.value,
        "hovered": state.hovered_id,
        "selected": state.selected_id,
        "dragged": state.dragged_id,
        "clicked": clicked_id,
    }


def map_report_to_dto(report: Optional[StepReport]) -> Optional[Dict[str, Any]]:
    if report is None:
        return None
    return {
        "iteration": report.iteration,
        "moved_nodes": report.moved_nodes,
        "max_speed": report.max_speed,
        "kinetic_energy": report.kinetic_energy,
        "settled": report.settled,
        "halted": report.halted,
    }


def map_metrics_to_dto(metrics: GraphMetrics) -> Dict[str, Any]:
    return {
        "node_count": metrics.node_count,
        "edge_count": metrics.edge_count,
        "unresolved_edge_count": metrics.unresolved_edge_count,
        "density": metrics.density,
        "is_connected": metrics.is_connected,
        "connected_components_count": metrics.connected_components_count,
        "diameter": metrics.diameter,
    }
