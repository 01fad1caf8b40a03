"""
Interaction Controller

Responsibility:
Translate pointer events into hover, drag and click behaviour.

STATE MACHINE:
==============
    IDLE      --move into pick radius-->   HOVERING
    HOVERING  --move out of pick radius--> IDLE
    HOVERING  --down-->                    DRAGGING   (node pinned)
    DRAGGING  --move-->                    DRAGGING   (node follows pointer)
    DRAGGING  --up-->                      HOVERING | IDLE

A DOWN/UP pair whose pointer travel never exceeds click_threshold is a click.

OWNERSHIP:
==========
The controller never writes node fields. It drives the graph through
pin() / move_pinned() / unpin() and keeps its own InteractionState.
"""

from __future__ import annotations
from dataclasses import dataclass, replace
from typing import Callable, Optional
import math

import numpy as np

from backend.contracts.events import AuditEventType
from backend.core.model import GraphState
from backend.observability import ObservabilityLayer

from frontend.state import InteractionPhase, InteractionState
from frontend.interaction.events import InteractionOutcome, InteractionRequest, PointerAction


ClickCallback = Callable[[str], None]


@dataclass(frozen=True)
class InteractionConfig:
    """Pointer interaction tuning."""
    pick_radius: float = 25.0
    click_threshold: float = 3.0

    def __post_init__(self):
        if self.pick_radius <= 0:
            raise ValueError("pick_radius must be positive")
        if self.click_threshold < 0:
            raise ValueError("click_threshold must be non-negative")


class InteractionController:
    """Pointer state machine bound to one GraphState."""

    def __init__(
        self,
        graph: GraphState,
        config: Optional[InteractionConfig] = None,
        on_click: Optional[ClickCallback] = None,
        observability: Optional[ObservabilityLayer] = None,
    ):
        self._graph = graph
        self._config = config or InteractionConfig()
        self._on_click = on_click
        self._observability = observability
        self._state = InteractionState()
        self._down_at: Optional[tuple] = None
        self._travel = 0.0

    @property
    def state(self) -> InteractionState:
        return self._state

    @property
    def config(self) -> InteractionConfig:
        return self._config

    def set_click_callback(self, callback: Optional[ClickCallback]) -> None:
        self._on_click = callback

    # -------------------------------------------------------------------------
    # Picking
    # -------------------------------------------------------------------------

    def pick(self, x: float, y: float) -> Optional[str]:
        """
        Nearest node whose center lies strictly within pick_radius of (x, y).

        Ties resolve to the first node in iteration order.
        """
        if self._graph.is_empty or not (math.isfinite(x) and math.isfinite(y)):
            return None
        positions = np.asarray(self._graph.positions, dtype=float)
        valid = np.isfinite(positions).all(axis=1)
        dist = np.hypot(positions[:, 0] - x, positions[:, 1] - y)
        dist = np.where(valid, dist, np.inf)
        best = int(np.argmin(dist))
        if dist[best] < self._config.pick_radius:
            return self._graph.node_ids[best]
        return None

    # -------------------------------------------------------------------------
    # Pointer events
    # -------------------------------------------------------------------------

    def pointer_move(self, x: float, y: float) -> InteractionState:
        self._count("move")
        if self._state.phase is InteractionPhase.DRAGGING:
            self._graph.move_pinned(x, y)
            if self._down_at is not None and math.isfinite(x) and math.isfinite(y):
                self._travel = max(self._travel, math.hypot(x - self._down_at[0], y - self._down_at[1]))
            return self._state

        self._hover(self.pick(x, y))
        return self._state

    def pointer_down(self, x: float, y: float) -> InteractionState:
        self._count("down")
        if self._state.phase is InteractionPhase.DRAGGING:
            return self._state

        self._hover(self.pick(x, y))
        hovered = self._state.hovered_id
        if hovered is None or not self._graph.pin(hovered):
            return self._state

        self._down_at = (x, y)
        self._travel = 0.0
        self._state = replace(self._state, phase=InteractionPhase.DRAGGING, dragged_id=hovered)
        self._audit("drag_start", hovered)
        return self._state

    def pointer_up(self, x: Optional[float] = None, y: Optional[float] = None) -> Optional[str]:
        """
        End a drag gesture.

        Returns the clicked node id when the gesture counts as a click.
        """
        self._count("up")
        if self._state.phase is not InteractionPhase.DRAGGING:
            return None

        dragged = self._state.dragged_id
        if x is not None and y is not None and self._down_at is not None:
            self._travel = max(self._travel, math.hypot(x - self._down_at[0], y - self._down_at[1]))
        is_click = self._travel <= self._config.click_threshold

        self._graph.unpin()
        self._down_at = None
        self._travel = 0.0
        self._state = replace(self._state, phase=InteractionPhase.IDLE, dragged_id=None, hovered_id=None)
        if x is not None and y is not None:
            self._hover(self.pick(x, y))
        else:
            self._hover(dragged)

        if not is_click:
            self._audit("drag_end", dragged)
            return None

        self._audit("click", dragged)
        if self._on_click is not None:
            self._on_click(dragged)
        return dragged

    # -------------------------------------------------------------------------
    # Host-controlled selection
    # -------------------------------------------------------------------------

    def select(self, node_id: Optional[str]) -> InteractionState:
        """Set (or clear, with None) the externally selected node."""
        self._state = self._state.with_selection(node_id)
        return self._state

    # -------------------------------------------------------------------------
    # Dispatch
    # -------------------------------------------------------------------------

    def handle(self, request: InteractionRequest) -> InteractionOutcome:
        clicked = None
        action = request.action
        positional = action in (PointerAction.MOVE, PointerAction.DOWN)
        if positional and (request.x is None or request.y is None):
            return InteractionOutcome(request=request, state=self._state)
        if action is PointerAction.MOVE:
            self.pointer_move(request.x, request.y)
        elif action is PointerAction.DOWN:
            self.pointer_down(request.x, request.y)
        elif action is PointerAction.UP:
            clicked = self.pointer_up(request.x, request.y)
        elif action is PointerAction.SELECT:
            self.select(request.node_id)
        elif action is PointerAction.CLEAR_SELECTION:
            self.select(None)
        return InteractionOutcome(request=request, state=self._state, clicked_id=clicked)

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    def _hover(self, node_id: Optional[str]) -> None:
        phase = InteractionPhase.HOVERING if node_id is not None else InteractionPhase.IDLE
        self._state = replace(self._state, phase=phase, hovered_id=node_id)

    def _count(self, action: str) -> None:
        if self._observability is not None:
            self._observability.metrics.record("interaction_events_total", 1, {"action": action})

    def _audit(self, action: str, node_id: Optional[str]) -> None:
        if self._observability is not None:
            self._observability.audit("interaction", AuditEventType.INTERACTION, action, entity_id=node_id)
