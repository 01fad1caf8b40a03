"""
Graph Session

Responsibility:
Bind one LayoutEngine to a Renderer and an InteractionController so a host
(HTTP server, CLI, notebook) drives a single object.

FLOW PER FRAME:
===============
scheduler -> Simulation.tick() -> (optional) Renderer.render() onto the
session surface. Pointer events go through the controller between frames.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Callable, Optional

from backend.core.simulator import StepReport
from backend.engine import EngineConfig, LayoutEngine, Simulation
from backend.temporal.clock import FrameScheduler

from frontend.interaction.controller import ClickCallback, InteractionConfig, InteractionController
from frontend.state import InteractionState
from frontend.visualization.graph import NetworkGraphView
from frontend.visualization.renderer import RenderConfig, Renderer
from frontend.visualization.surface import Surface


@dataclass
class SessionConfig:
    """Engine, render and interaction configuration in one place."""
    engine: EngineConfig = None
    render: RenderConfig = None
    interaction: InteractionConfig = None

    def __post_init__(self):
        self.engine = self.engine or EngineConfig()
        self.render = self.render or RenderConfig()
        self.interaction = self.interaction or InteractionConfig()


class GraphSession:
    """One interactive knowledge-graph visualization."""

    def __init__(
        self,
        engine: LayoutEngine,
        config: Optional[SessionConfig] = None,
        on_click: Optional[ClickCallback] = None,
    ):
        self._config = config or SessionConfig(engine=engine.config)
        self._engine = engine
        self._renderer = Renderer(self._config.render, engine.observability)
        self._controller = InteractionController(
            engine.graph,
            self._config.interaction,
            on_click=on_click,
            observability=engine.observability,
        )
        self._simulation: Optional[Simulation] = None
        self._surface: Optional[Surface] = None
        self._last_view: Optional[NetworkGraphView] = None

    @property
    def engine(self) -> LayoutEngine:
        return self._engine

    @property
    def renderer(self) -> Renderer:
        return self._renderer

    @property
    def controller(self) -> InteractionController:
        return self._controller

    @property
    def interaction(self) -> InteractionState:
        return self._controller.state

    @property
    def simulation(self) -> Optional[Simulation]:
        return self._simulation

    @property
    def last_view(self) -> Optional[NetworkGraphView]:
        return self._last_view

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    def attach(self, scheduler: FrameScheduler, surface: Optional[Surface] = None) -> Simulation:
        """
        Create (but do not start) the frame loop.

        With a surface, every frame is also painted onto it.
        """
        self.detach()
        self._surface = surface
        self._simulation = self._engine.create_simulation(scheduler, on_frame=self._after_step)
        return self._simulation

    def start(self) -> None:
        if self._simulation is None:
            raise RuntimeError("attach() a scheduler before start()")
        self._simulation.start()

    def stop(self) -> None:
        if self._simulation is not None:
            self._simulation.stop()

    def detach(self) -> None:
        self.stop()
        self._simulation = None
        self._surface = None

    def _after_step(self, report: StepReport) -> None:
        if self._surface is not None:
            self._last_view = self._renderer.render(self._engine.graph, self._controller.state, self._surface)

    # -------------------------------------------------------------------------
    # Frame access
    # -------------------------------------------------------------------------

    def view(self) -> NetworkGraphView:
        self._last_view = self._renderer.build_view(self._engine.graph, self._controller.state)
        return self._last_view

    def render(self, surface: Surface) -> NetworkGraphView:
        self._last_view = self._renderer.render(self._engine.graph, self._controller.state, surface)
        return self._last_view

    # -------------------------------------------------------------------------
    # Interaction shortcuts
    # -------------------------------------------------------------------------

    def pointer_move(self, x: float, y: float) -> InteractionState:
        return self._controller.pointer_move(x, y)

    def pointer_down(self, x: float, y: float) -> InteractionState:
        return self._controller.pointer_down(x, y)

    def pointer_up(self, x: Optional[float] = None, y: Optional[float] = None) -> Optional[str]:
        return self._controller.pointer_up(x, y)

    def select(self, node_id: Optional[str]) -> InteractionState:
        return self._controller.select(node_id)

    def set_click_callback(self, callback: Optional[Callable[[str], None]]) -> None:
        self._controller.set_click_callback(callback)
