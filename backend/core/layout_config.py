"""
Layout Configuration

Canvas geometry, initial placement, force constants and convergence policy
for the force-directed layout.
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Optional


class ConvergenceMode(Enum):
    """How the layout loop behaves once motion dies down."""
    CONTINUOUS = "continuous"              # Relax every frame, forever
    FREEZE_ON_SETTLE = "freeze_on_settle"  # Stop moving nodes once settled


@dataclass(frozen=True)
class LayoutConfig:
    """Configuration for graph placement and the layout simulator."""
    # Canvas
    width: float = 800.0
    height: float = 500.0
    margin: float = 40.0

    # Initial placement
    base_radius: float = 150.0
    radius_spread: float = 50.0
    jitter: float = 50.0

    # Forces
    repulsion: float = 1000.0
    spring_k: float = 0.01
    gravity: float = 0.001
    min_distance: float = 1.0

    # Integration
    damping: float = 0.9
    step_scale: float = 0.1

    # Convergence
    mode: ConvergenceMode = ConvergenceMode.CONTINUOUS
    settle_threshold: float = 0.05    # max node displacement, units per step
    settle_patience: int = 30         # consecutive quiet steps before freezing
    max_iterations: Optional[int] = None

    # Scalability boundary for pairwise repulsion
    repulsion_node_limit: int = 500

    def __post_init__(self):
        if self.width <= 0 or self.height <= 0:
            raise ValueError("Canvas width and height must be positive")
        if self.margin < 0:
            raise ValueError("margin must be non-negative")
        if 2 * self.margin > min(self.width, self.height):
            raise ValueError("margin leaves no drawable area on the canvas")
        if not 0.0 <= self.damping <= 1.0:
            raise ValueError("damping must be within [0, 1]")
        for name in ('repulsion', 'spring_k', 'gravity', 'step_scale',
                     'base_radius', 'radius_spread', 'jitter', 'settle_threshold'):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} must be non-negative")
        if self.min_distance <= 0:
            raise ValueError("min_distance must be positive")
        if self.settle_patience < 1:
            raise ValueError("settle_patience must be at least 1")
        if self.max_iterations is not None and self.max_iterations < 0:
            raise ValueError("max_iterations must be non-negative")

    @property
    def center(self) -> tuple:
        return (self.width / 2.0, self.height / 2.0)

    @property
    def bounds(self) -> tuple:
        """(min_x, min_y, max_x, max_y) box every free node is clamped into."""
        return (self.margin, self.margin, self.width - self.margin, self.height - self.margin)
