"""
Interaction Controller Tests

Pointer state machine: hover picking, drag pinning and click detection.

TEST CATEGORIES:
================
1. Picking - nearest node strictly inside the pick radius
2. Hover - IDLE <-> HOVERING transitions
3. Drag - node follows pointer, pinned against the simulator
4. Click - DOWN/UP pair without travel fires the callback
5. Session - the same flow through GraphSession and requests
"""

import numpy as np
import pytest

from backend.contracts.base import NodeKind
from backend.contracts.graph import EdgeSpec, NodeSpec
from backend.core import GraphState, LayoutConfig, LayoutSimulator
from backend.engine import EngineConfig, LayoutEngine
from backend.ingestion import curriculum_payload
from backend.observability import ObservabilityLayer
from backend.temporal.clock import ManualFrameScheduler

from frontend.interaction.controller import InteractionConfig, InteractionController
from frontend.interaction.events import InteractionRequest, PointerAction
from frontend.session import GraphSession
from frontend.state import InteractionPhase
from frontend.visualization.surface import RecordingSurface


def make_graph():
    specs = [
        NodeSpec("open", "open", NodeKind.SYSCALL, "file_io"),
        NodeSpec("read", "read", NodeKind.SYSCALL, "file_io"),
        NodeSpec("kill", "kill", NodeKind.SYSCALL, "signals"),
    ]
    positions = np.array([[100.0, 100.0], [130.0, 100.0], [400.0, 300.0]])
    return GraphState(specs, [EdgeSpec("open", "read")], positions, LayoutConfig())


@pytest.fixture
def graph():
    return make_graph()


@pytest.fixture
def clicks():
    return []


@pytest.fixture
def observability():
    return ObservabilityLayer()


@pytest.fixture
def controller(graph, clicks, observability):
    return InteractionController(graph, on_click=clicks.append, observability=observability)


# =============================================================================
# PICKING
# =============================================================================

class TestPicking:

    def test_nearest_node_wins(self, controller):
        assert controller.pick(112, 100) == "open"
        assert controller.pick(118, 100) == "read"

    def test_radius_is_strict(self, controller):
        assert controller.pick(400, 325) is None
        assert controller.pick(400, 324.9) == "kill"

    def test_tie_resolves_to_first_node(self, controller):
        assert controller.pick(115, 100) == "open"

    def test_nothing_near(self, controller):
        assert controller.pick(700, 450) is None

    def test_non_finite_pointer(self, controller):
        assert controller.pick(float("nan"), 100) is None

    def test_empty_graph(self):
        empty = GraphState([], [], np.zeros((0, 2)), LayoutConfig())
        assert InteractionController(empty).pick(10, 10) is None


# =============================================================================
# HOVER
# =============================================================================

class TestHover:

    def test_move_onto_node_hovers(self, controller):
        state = controller.pointer_move(402, 298)
        assert state.phase is InteractionPhase.HOVERING
        assert state.hovered_id == "kill"

    def test_move_away_clears_hover(self, controller):
        controller.pointer_move(402, 298)
        state = controller.pointer_move(700, 50)
        assert state.phase is InteractionPhase.IDLE
        assert state.hovered_id is None

    def test_hover_is_deterministic(self, graph):
        first = InteractionController(graph)
        second = InteractionController(graph)
        for x, y in [(90, 90), (115, 100), (140, 110), (410, 290)]:
            assert first.pointer_move(x, y) == second.pointer_move(x, y)

    def test_events_counted(self, controller, observability):
        controller.pointer_move(1, 1)
        controller.pointer_move(2, 2)
        points = observability.metrics.get_metric("interaction_events_total")
        assert [p.labels for p in points] == [(("action", "move"),), (("action", "move"),)]


# =============================================================================
# DRAG
# =============================================================================

class TestDrag:

    def test_down_on_empty_space_does_nothing(self, controller, graph):
        state = controller.pointer_down(700, 450)
        assert state.phase is InteractionPhase.IDLE
        assert graph.pinned_id is None

    def test_down_pins_node(self, controller, graph):
        state = controller.pointer_down(101, 101)
        assert state.phase is InteractionPhase.DRAGGING
        assert state.dragged_id == "open"
        assert graph.pinned_id == "open"

    def test_drag_moves_node(self, controller, graph):
        controller.pointer_down(400, 300)
        controller.pointer_move(600, 200)
        assert graph.position_of("kill").to_tuple() == (600.0, 200.0)

    def test_drag_clamped_to_surface(self, controller, graph):
        controller.pointer_down(400, 300)
        controller.pointer_move(900, -20)
        assert graph.position_of("kill").to_tuple() == (800.0, 0.0)

    def test_dragged_node_ignores_simulation(self, controller, graph):
        simulator = LayoutSimulator(graph.config)
        controller.pointer_down(400, 300)
        controller.pointer_move(600, 200)
        for _ in range(20):
            simulator.step(graph)
        assert graph.position_of("kill").to_tuple() == (600.0, 200.0)

    def test_drag_keeps_node_while_passing_others(self, controller):
        controller.pointer_down(100, 100)
        state = controller.pointer_move(130, 100)
        assert state.dragged_id == "open"
        assert state.hovered_id == "open"

    def test_release_after_drag_is_not_click(self, controller, graph, clicks):
        controller.pointer_down(400, 300)
        controller.pointer_move(500, 300)
        clicked = controller.pointer_up(500, 300)

        assert clicked is None
        assert clicks == []
        assert graph.pinned_id is None
        assert controller.state.phase is InteractionPhase.HOVERING
        assert controller.state.hovered_id == "kill"

    def test_excursion_counts_even_if_pointer_returns(self, controller, clicks):
        controller.pointer_down(400, 300)
        controller.pointer_move(450, 300)
        controller.pointer_move(400, 300)
        assert controller.pointer_up(400, 300) is None
        assert clicks == []

    def test_second_down_while_dragging_ignored(self, controller, graph):
        controller.pointer_down(400, 300)
        state = controller.pointer_down(100, 100)
        assert state.dragged_id == "kill"
        assert graph.pinned_id == "kill"


# =============================================================================
# CLICK
# =============================================================================

class TestClick:

    def test_click_fires_callback(self, controller, clicks):
        controller.pointer_down(130, 101)
        assert controller.pointer_up(131, 101) == "read"
        assert clicks == ["read"]

    def test_up_without_down(self, controller, clicks):
        assert controller.pointer_up(130, 100) is None
        assert clicks == []

    def test_release_without_position_keeps_hover(self, controller):
        controller.pointer_down(400, 300)
        assert controller.pointer_up() == "kill"
        assert controller.state.hovered_id == "kill"

    def test_click_does_not_select(self, controller):
        """Selection belongs to the host page; a click only reports."""
        controller.pointer_down(400, 300)
        controller.pointer_up(400, 300)
        assert controller.state.selected_id is None

    def test_callback_error_propagates_after_release(self, graph):
        def broken(node_id):
            raise RuntimeError(node_id)

        controller = InteractionController(graph, on_click=broken)
        controller.pointer_down(400, 300)
        with pytest.raises(RuntimeError):
            controller.pointer_up(400, 300)
        assert graph.pinned_id is None
        assert controller.state.phase is InteractionPhase.HOVERING

    def test_custom_threshold(self, graph, clicks):
        controller = InteractionController(graph, InteractionConfig(click_threshold=10), on_click=clicks.append)
        controller.pointer_down(400, 300)
        controller.pointer_move(405, 300)
        assert controller.pointer_up(405, 300) == "kill"

    def test_click_audited(self, controller, observability):
        controller.pointer_down(400, 300)
        controller.pointer_up(400, 300)
        actions = [e.action for e in observability.collector("interaction").get_entries()]
        assert actions == ["drag_start", "click"]


# =============================================================================
# HOST SELECTION + REQUEST DISPATCH
# =============================================================================

class TestSelectionAndDispatch:

    def test_select_and_clear(self, controller):
        assert controller.select("open").selected_id == "open"
        assert controller.select(None).selected_id is None

    def test_handle_pointer_sequence(self, controller, clicks):
        controller.handle(InteractionRequest(PointerAction.MOVE, 400, 300))
        controller.handle(InteractionRequest(PointerAction.DOWN, 400, 300))
        outcome = controller.handle(InteractionRequest(PointerAction.UP, 400, 300))
        assert outcome.clicked_id == "kill"
        assert clicks == ["kill"]

    def test_handle_select(self, controller):
        outcome = controller.handle(InteractionRequest(PointerAction.SELECT, node_id="kill"))
        assert outcome.state.selected_id == "kill"
        outcome = controller.handle(InteractionRequest(PointerAction.CLEAR_SELECTION))
        assert outcome.state.selected_id is None

    def test_handle_move_without_coordinates(self, controller):
        outcome = controller.handle(InteractionRequest(PointerAction.MOVE))
        assert outcome.state.phase is InteractionPhase.IDLE

    def test_invalid_config(self):
        with pytest.raises(ValueError):
            InteractionConfig(pick_radius=0)


class TestGraphSession:

    @pytest.fixture
    def session(self):
        engine = LayoutEngine(curriculum_payload(), EngineConfig(seed=4))
        return GraphSession(engine)

    def test_start_requires_attach(self, session):
        with pytest.raises(RuntimeError):
            session.start()

    def test_frames_paint_surface(self, session):
        scheduler = ManualFrameScheduler()
        surface = RecordingSurface(800, 500)
        session.attach(scheduler, surface)
        session.start()
        scheduler.run_frames(3)
        session.stop()

        assert session.simulation.frame_count == 3
        assert session.last_view is not None
        assert len(surface.of_type("circle")) == 26

    def test_drag_during_loop(self, session):
        scheduler = ManualFrameScheduler()
        session.attach(scheduler)
        session.start()

        target = session.engine.graph.position_of("fork")
        session.pointer_down(target.x, target.y)
        session.pointer_move(300.0, 200.0)
        scheduler.run_frames(10)

        assert session.engine.graph.position_of("fork").to_tuple() == (300.0, 200.0)
        clicked = session.pointer_up(300.0, 200.0)
        assert clicked is None
        assert session.engine.graph.pinned_id is None

    def test_selection_highlights_view(self, session):
        session.select("execve")
        view = session.view()
        assert view.find_node("execve").fill == "#1a1a1a"

    def test_click_callback_replaceable(self, session):
        seen = []
        session.set_click_callback(seen.append)
        position = session.engine.graph.position_of("kill")
        session.pointer_down(position.x, position.y)
        session.pointer_up(position.x, position.y)
        assert seen == ["kill"]

    def test_detach_stops_loop(self, session):
        scheduler = ManualFrameScheduler()
        session.attach(scheduler)
        session.start()
        session.detach()
        assert session.simulation is None
        assert scheduler.pending_count == 0
