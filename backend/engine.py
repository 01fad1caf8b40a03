"""
Engine Orchestration Module

This module provides the unified interface for coordinating the layout
layers: ingestion -> graph model -> simulator, plus the frame-loop lifecycle.

DESIGN PRINCIPLES:
==================
1. Layers communicate ONLY through contracts
2. The frame loop is an explicit object with start() / stop() / tick()
3. All operations are traceable through observability
4. The GraphState is owned here and lent to collaborators
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Callable, Mapping, Optional, Union

import numpy as np

from .contracts.base import Result
from .contracts.events import AuditEventType
from .contracts.graph import GraphPayload
from .core import (
    GraphState, LayoutConfig, LayoutSimulator, StepReport, TopologyEngine, initialize_graph
)
from .ingestion import IngestionConfig, parse_payload, load_payload
from .observability import ObservabilityLayer, ObservabilityConfig
from .temporal.clock import FrameClock, FrameScheduler


FrameHook = Callable[[StepReport], None]


@dataclass
class EngineConfig:
    """Unified configuration for the layout backend."""
    layout: LayoutConfig = None
    ingestion: IngestionConfig = None
    observability: ObservabilityConfig = None
    seed: Optional[int] = None

    def __post_init__(self):
        self.layout = self.layout or LayoutConfig()
        self.ingestion = self.ingestion or IngestionConfig()
        self.observability = self.observability or ObservabilityConfig()


# =============================================================================
# FRAME LOOP LIFECYCLE
# =============================================================================

class SimulationState(Enum):
    STOPPED = "stopped"
    RUNNING = "running"


class Simulation:
    """
    Repeating "next frame" loop around a LayoutSimulator.

    LIFECYCLE CONTRACT:
    ===================
    - start() registers exactly one pending frame with the scheduler
    - every fired frame ticks once and registers the next one
    - stop() cancels the pending registration; nothing fires afterwards
    - tick() steps synchronously and works whether or not the loop runs
    """

    def __init__(
        self,
        graph: GraphState,
        simulator: LayoutSimulator,
        scheduler: FrameScheduler,
        clock: Optional[FrameClock] = None,
        observability: Optional[ObservabilityLayer] = None,
        on_frame: Optional[FrameHook] = None,
    ):
        self._graph = graph
        self._simulator = simulator
        self._scheduler = scheduler
        self._clock = clock or FrameClock.live()
        self._observability = observability
        self._on_frame = on_frame
        self._state = SimulationState.STOPPED
        self._handle: Optional[object] = None
        self._frames = 0
        self._last_report: Optional[StepReport] = None

    @property
    def state(self) -> SimulationState:
        return self._state

    @property
    def is_running(self) -> bool:
        return self._state is SimulationState.RUNNING

    @property
    def frame_count(self) -> int:
        return self._frames

    @property
    def last_report(self) -> Optional[StepReport]:
        return self._last_report

    def start(self) -> None:
        if self.is_running:
            return
        self._state = SimulationState.RUNNING
        self._handle = self._scheduler.request_frame(self._run_frame)
        self._audit("loop_started")

    def stop(self) -> None:
        if not self.is_running:
            return
        self._state = SimulationState.STOPPED
        if self._handle is not None:
            self._scheduler.cancel_frame(self._handle)
            self._handle = None
        self._audit("loop_stopped", frames=self._frames)

    def tick(self) -> StepReport:
        """Advance exactly one simulation step."""
        started = self._clock.now()
        report = self._simulator.step(self._graph)
        elapsed_ms = (self._clock.now() - started) * 1000.0

        self._last_report = report
        if self._observability is not None:
            metrics = self._observability.metrics
            metrics.record("step_duration_ms", elapsed_ms)
            if report.moved_nodes:
                metrics.record("simulation_steps_total", 1)
                metrics.record("layout_max_speed", report.max_speed)
            if self._observability.config.record_every_step:
                self._audit("step", iteration=report.iteration, max_speed=f"{report.max_speed:.4f}")

        if self._on_frame is not None:
            self._on_frame(report)
        return report

    def _run_frame(self) -> None:
        self._handle = None
        if not self.is_running:
            return
        self._frames += 1
        try:
            self.tick()
        except Exception:
            self._state = SimulationState.STOPPED
            self._audit("loop_failed", frames=self._frames)
            raise
        if self.is_running:
            self._handle = self._scheduler.request_frame(self._run_frame)

    def _audit(self, action: str, **metadata: Any) -> None:
        if self._observability is not None:
            self._observability.audit("simulation", AuditEventType.SIMULATION, action, **metadata)

    def __enter__(self) -> Simulation:
        self.start()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.stop()


# =============================================================================
# LAYOUT ENGINE
# =============================================================================

class LayoutEngine:
    """
    Unified backend for one knowledge graph.

    LAYER FLOW:
    ===========
    1. Ingestion: document -> GraphPayload
    2. Model: GraphPayload -> GraphState (initial placement)
    3. Simulator: GraphState -> relaxed GraphState, one step per frame
    4. Observability: records all layer activity
    """

    def __init__(
        self,
        payload: GraphPayload,
        config: Optional[EngineConfig] = None,
        clock: Optional[FrameClock] = None,
        rng: Optional[np.random.Generator] = None,
    ):
        self._config = config or EngineConfig()
        self._clock = clock or FrameClock.live()
        self._observability = ObservabilityLayer(self._config.observability, self._clock)
        self._payload = payload

        self._graph = initialize_graph(payload, self._config.layout, rng=rng, seed=self._config.seed)
        self._simulator = LayoutSimulator(self._config.layout)

        self._record_ingestion()

    @classmethod
    def from_document(
        cls,
        document: Mapping[str, Any],
        config: Optional[EngineConfig] = None,
        clock: Optional[FrameClock] = None,
    ) -> Result:
        config = config or EngineConfig()
        parsed = parse_payload(document, config.ingestion)
        if parsed.is_failure:
            return parsed
        return Result.success(cls(parsed.value, config, clock))

    @classmethod
    def from_file(
        cls,
        path: Union[str, Path],
        config: Optional[EngineConfig] = None,
        clock: Optional[FrameClock] = None,
    ) -> Result:
        config = config or EngineConfig()
        loaded = load_payload(path, config.ingestion)
        if loaded.is_failure:
            return loaded
        return Result.success(cls(loaded.value, config, clock))

    # -------------------------------------------------------------------------
    # Accessors
    # -------------------------------------------------------------------------

    @property
    def config(self) -> EngineConfig:
        return self._config

    @property
    def clock(self) -> FrameClock:
        return self._clock

    @property
    def payload(self) -> GraphPayload:
        return self._payload

    @property
    def graph(self) -> GraphState:
        return self._graph

    @property
    def simulator(self) -> LayoutSimulator:
        return self._simulator

    @property
    def observability(self) -> ObservabilityLayer:
        return self._observability

    def topology(self) -> TopologyEngine:
        return TopologyEngine(self._graph)

    # -------------------------------------------------------------------------
    # Stepping
    # -------------------------------------------------------------------------

    def create_simulation(self, scheduler: FrameScheduler, on_frame: Optional[FrameHook] = None) -> Simulation:
        return Simulation(
            graph=self._graph,
            simulator=self._simulator,
            scheduler=scheduler,
            clock=self._clock,
            observability=self._observability,
            on_frame=on_frame,
        )

    def step(self, count: int = 1) -> StepReport:
        """Run `count` steps synchronously, outside any frame loop."""
        return self._simulator.run(self._graph, count)

    def reheat(self) -> None:
        self._simulator.reheat()

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    def _record_ingestion(self) -> None:
        obs = self._observability
        for warning in self._payload.warnings:
            obs.audit("ingestion", AuditEventType.INGESTION, "entry_skipped", reason=warning)

        unresolved = self._graph.unresolved_edges()
        obs.metrics.record("unresolved_edges", len(unresolved))
        for edge in unresolved:
            obs.audit(
                "ingestion", AuditEventType.INGESTION, "edge_unresolved",
                source=edge.source_id, target=edge.target_id,
            )

        if self._simulator.exceeds_scale_limit(self._graph):
            obs.audit(
                "system", AuditEventType.SYSTEM, "repulsion_scale_limit_exceeded",
                nodes=self._graph.node_count,
                limit=self._config.layout.repulsion_node_limit,
            )

        obs.audit(
            "system", AuditEventType.SYSTEM, "graph_initialized",
            nodes=self._graph.node_count,
            edges=len(self._graph.resolved_edges()),
            categories=len(self._graph.categories),
        )
