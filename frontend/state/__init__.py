"""
Interaction State Layer

Responsibility:
Transient view state that lives outside the graph model: which node is
hovered, selected and dragged.

PRINCIPLES:
1. Immutable (Frozen) - transitions produce new values
2. No Business Logic
3. No Rendering Logic
"""

from __future__ import annotations
from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional


class AvailabilityState(Enum):
    """
    Availability of a rendered view.

    EXPLICIT ABSENCE:
    =================
    A partial drawing is flagged, never passed off as complete.
    """
    PRESENT = "present"   # Every node and edge drawn
    PARTIAL = "partial"   # Some edges/nodes skipped (unresolved or no position)
    EMPTY = "empty"       # Nothing to draw


class InteractionPhase(Enum):
    """Pointer state machine phases."""
    IDLE = "idle"
    HOVERING = "hovering"
    DRAGGING = "dragging"


@dataclass(frozen=True)
class InteractionState:
    """
    Snapshot of pointer-driven view state.

    selected_id is controlled by the host page; dragged_id is owned by the
    interaction controller for the duration of a drag gesture.
    """
    phase: InteractionPhase = InteractionPhase.IDLE
    hovered_id: Optional[str] = None
    selected_id: Optional[str] = None
    dragged_id: Optional[str] = None

    def is_hovered(self, node_id: str) -> bool:
        return self.hovered_id is not None and self.hovered_id == node_id

    def is_selected(self, node_id: str) -> bool:
        return self.selected_id is not None and self.selected_id == node_id

    def is_highlighted(self, node_id: str) -> bool:
        return self.is_hovered(node_id) or self.is_selected(node_id)

    def with_selection(self, node_id: Optional[str]) -> InteractionState:
        return replace(self, selected_id=node_id)


__all__ = [
    'AvailabilityState',
    'InteractionPhase',
    'InteractionState',
]
