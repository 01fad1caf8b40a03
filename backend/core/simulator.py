"""
Layout Simulator
================

Force-directed relaxation of node positions (spring-electric model).

PER STEP:
=========
1. Repulsion     k_repel / d^2 between every pair, d floored at min_distance
2. Attraction    (other - self) * spring_k along every resolved edge
3. Gravity       (center - self) * gravity
4. Integration   v = v * damping + F * step_scale ; p = p + v
5. Clamping      p into [margin, dim - margin]

The pinned (dragged) node and nodes without a finite position skip 4-5.
Forces are computed from the positions at the start of the step.

SCALABILITY BOUNDARY:
=====================
Repulsion is O(n^2). Graphs above `repulsion_node_limit` nodes should move to
a grid or Barnes-Hut spatial index; the simulator only reports the crossing.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Optional

import numpy as np

from .layout_config import LayoutConfig, ConvergenceMode
from .model import GraphState


@dataclass(frozen=True)
class StepReport:
    """Outcome of one simulator step."""
    iteration: int
    moved_nodes: int
    max_speed: float        # largest node displacement this step
    kinetic_energy: float
    settled: bool
    halted: bool

    @property
    def is_idle(self) -> bool:
        return self.moved_nodes == 0


class LayoutSimulator:
    """
    Stateful stepper over a GraphState.

    Holds only convergence bookkeeping; all physical state lives in the graph.
    """

    def __init__(self, config: Optional[LayoutConfig] = None):
        self._config = config or LayoutConfig()
        self._iteration = 0
        self._since_reheat = 0
        self._quiet_steps = 0
        self._settled = False
        self._seen_revision: Optional[int] = None

    @property
    def config(self) -> LayoutConfig:
        return self._config

    @property
    def iteration(self) -> int:
        return self._iteration

    @property
    def is_settled(self) -> bool:
        return self._settled

    @property
    def is_halted(self) -> bool:
        cap = self._config.max_iterations
        return cap is not None and self._since_reheat >= cap

    def exceeds_scale_limit(self, graph: GraphState) -> bool:
        return graph.node_count > self._config.repulsion_node_limit

    def reheat(self) -> None:
        """Leave the frozen/halted state and restart the iteration budget."""
        self._settled = False
        self._quiet_steps = 0
        self._since_reheat = 0

    # -------------------------------------------------------------------------
    # Forces
    # -------------------------------------------------------------------------

    def compute_forces(self, graph: GraphState) -> np.ndarray:
        """Total force on every node, (n, 2). Nodes without a position get zero."""
        cfg = self._config
        positions = np.asarray(graph.positions, dtype=float)
        n = positions.shape[0]
        forces = np.zeros((n, 2))
        if n == 0:
            return forces

        valid = np.isfinite(positions).all(axis=1)
        safe = np.where(valid[:, None], positions, 0.0)

        # Repulsion
        delta = safe[:, None, :] - safe[None, :, :]
        raw_dist = np.sqrt((delta ** 2).sum(axis=2))
        pair_mask = valid[:, None] & valid[None, :]
        np.fill_diagonal(pair_mask, False)

        coincident = pair_mask & (raw_dist == 0.0)
        if coincident.any():
            # Deterministic separation axis for stacked nodes: lower index goes
            # left, higher index goes right.
            idx = np.arange(n)
            direction = np.sign(idx[:, None] - idx[None, :]).astype(float)
            delta[..., 0] = np.where(coincident, direction, delta[..., 0])
            raw_dist = np.where(coincident, 1.0, raw_dist)

        dist = np.maximum(raw_dist, cfg.min_distance)
        magnitude = np.where(pair_mask, cfg.repulsion / (dist * dist), 0.0)
        forces += (delta / dist[..., None] * magnitude[..., None]).sum(axis=1)

        # Attraction
        edge_index = graph.edge_index
        if len(edge_index):
            src = edge_index[:, 0]
            dst = edge_index[:, 1]
            live = valid[src] & valid[dst]
            src, dst = src[live], dst[live]
            pull = (safe[dst] - safe[src]) * cfg.spring_k
            np.add.at(forces, src, pull)
            np.add.at(forces, dst, -pull)

        # Centering gravity
        cx, cy = cfg.center
        forces[:, 0] += (cx - safe[:, 0]) * cfg.gravity
        forces[:, 1] += (cy - safe[:, 1]) * cfg.gravity

        forces[~valid] = 0.0
        return forces

    # -------------------------------------------------------------------------
    # Step
    # -------------------------------------------------------------------------

    def step(self, graph: GraphState) -> StepReport:
        """Advance the layout by one step and commit the result to the graph."""
        cfg = self._config

        if self._seen_revision is not None and graph.revision != self._seen_revision:
            self.reheat()
        self._seen_revision = graph.revision

        if graph.is_empty or self._settled or self.is_halted:
            return self._report(moved=0, max_speed=0.0, energy=0.0)

        forces = self.compute_forces(graph)
        positions = np.array(graph.positions, dtype=float)
        velocities = np.array(graph.velocities, dtype=float)

        active = np.isfinite(positions).all(axis=1)
        pinned = graph.pinned_index
        if pinned is not None:
            active[pinned] = False

        previous = positions.copy()
        velocities[active] = velocities[active] * cfg.damping + forces[active] * cfg.step_scale
        positions[active] += velocities[active]

        min_x, min_y, max_x, max_y = cfg.bounds
        positions[active, 0] = np.clip(positions[active, 0], min_x, max_x)
        positions[active, 1] = np.clip(positions[active, 1], min_y, max_y)

        graph.commit_physics(positions, velocities)
        self._seen_revision = graph.revision

        # Settling is judged on actual displacement: a node held against the
        # margin keeps its velocity but does not move.
        moved = np.sqrt(((positions[active] - previous[active]) ** 2).sum(axis=1))
        max_speed = float(moved.max()) if moved.size else 0.0
        energy = float(0.5 * (velocities[active] ** 2).sum())

        self._iteration += 1
        self._since_reheat += 1

        if cfg.mode is ConvergenceMode.FREEZE_ON_SETTLE:
            if max_speed < cfg.settle_threshold:
                self._quiet_steps += 1
            else:
                self._quiet_steps = 0
            if self._quiet_steps >= cfg.settle_patience:
                self._settled = True

        return self._report(moved=int(active.sum()), max_speed=max_speed, energy=energy)

    def run(self, graph: GraphState, steps: int) -> StepReport:
        """Step `steps` times (stopping early once frozen or halted)."""
        report = self._report(moved=0, max_speed=0.0, energy=0.0)
        for _ in range(steps):
            report = self.step(graph)
            if report.settled or report.halted:
                break
        return report

    def _report(self, moved: int, max_speed: float, energy: float) -> StepReport:
        return StepReport(
            iteration=self._iteration,
            moved_nodes=moved,
            max_speed=max_speed,
            kinetic_energy=energy,
            settled=self._settled,
            halted=self.is_halted,
        )
