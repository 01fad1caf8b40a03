"""
Interaction Contracts

Responsibility:
Define valid pointer actions and their intent.
No execution logic - just pure intent modeling.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from frontend.state import InteractionState


class PointerAction(Enum):
    """Types of user interaction."""
    # Pointer
    MOVE = "move"
    DOWN = "down"
    UP = "up"

    # Host-controlled
    SELECT = "select"
    CLEAR_SELECTION = "clear_selection"


@dataclass(frozen=True)
class InteractionRequest:
    """A specific user intent."""
    action: PointerAction
    x: Optional[float] = None
    y: Optional[float] = None
    node_id: Optional[str] = None  # SELECT only
    request_id: str = ""
    source_component: str = "canvas"


@dataclass(frozen=True)
class InteractionOutcome:
    """State after handling a request, plus the click it produced (if any)."""
    request: InteractionRequest
    state: InteractionState
    clicked_id: Optional[str] = None
