"""
Layout Simulator Tests
======================

Tests for force computation, integration and convergence policy.

PHYSICS VERIFICATION:
=====================
1. Free nodes never leave the margin box
2. The pinned node is never moved by a step
3. Internal forces cancel; only gravity has a net effect
4. A connected pair settles at the spring/repulsion balance distance
5. Freeze-on-settle and iteration caps stop motion until reheated
"""

import math

import numpy as np
import pytest

from backend.contracts.base import NodeKind
from backend.contracts.graph import NodeSpec, EdgeSpec, GraphPayload
from backend.core import (
    ConvergenceMode, GraphState, LayoutConfig, LayoutSimulator, initialize_graph
)
from backend.ingestion import curriculum_payload


def node(node_id: str, category: str = "file_io") -> NodeSpec:
    return NodeSpec(node_id=node_id, label=node_id, kind=NodeKind.SYSCALL, category=category)


def build(node_ids, edges=(), config=None, seed=0):
    config = config or LayoutConfig()
    payload = GraphPayload(
        nodes=tuple(node(n, category=f"c{i}") for i, n in enumerate(node_ids)),
        edges=tuple(EdgeSpec(s, t) for s, t in edges),
    )
    return initialize_graph(payload, config, seed=seed), LayoutSimulator(config)


def fixed_graph(positions, edges=(), config=None):
    """Graph with explicit positions instead of random placement."""
    config = config or LayoutConfig()
    nodes = [node(f"n{i}") for i in range(len(positions))]
    return GraphState(nodes, [EdgeSpec(s, t) for s, t in edges], np.array(positions, dtype=float), config)


class TestBounds:

    def test_curriculum_stays_inside_margin_box(self):
        config = LayoutConfig()
        graph = initialize_graph(curriculum_payload(), config, seed=11)
        simulator = LayoutSimulator(config)

        min_x, min_y, max_x, max_y = config.bounds
        for _ in range(300):
            simulator.step(graph)
            positions = graph.positions
            assert (positions[:, 0] >= min_x).all() and (positions[:, 0] <= max_x).all()
            assert (positions[:, 1] >= min_y).all() and (positions[:, 1] <= max_y).all()

    def test_strong_repulsion_is_clamped(self):
        config = LayoutConfig(repulsion=1e7)
        graph = fixed_graph([[400, 250], [402, 250], [400, 252]], config=config)
        LayoutSimulator(config).step(graph)

        min_x, min_y, max_x, max_y = config.bounds
        assert np.isfinite(graph.positions).all()
        assert (graph.positions[:, 0] >= min_x).all() and (graph.positions[:, 0] <= max_x).all()
        assert (graph.positions[:, 1] >= min_y).all() and (graph.positions[:, 1] <= max_y).all()


class TestForces:

    def test_internal_forces_cancel(self):
        """Repulsion and springs are pairwise; the net force is gravity alone."""
        config = LayoutConfig()
        positions = [[100, 120], [300, 200], [420, 90], [610, 400]]
        graph = fixed_graph(positions, edges=[("n0", "n1"), ("n1", "n2"), ("n3", "n0")], config=config)

        forces = LayoutSimulator(config).compute_forces(graph)

        cx, cy = config.center
        expected = config.gravity * (np.array([cx, cy]) * len(positions) - np.array(positions).sum(axis=0))
        assert np.allclose(forces.sum(axis=0), expected)

    def test_repulsion_matches_inverse_square(self):
        config = LayoutConfig(gravity=0.0)
        graph = fixed_graph([[300, 250], [400, 250]], config=config)

        forces = LayoutSimulator(config).compute_forces(graph)

        assert forces[0, 0] == pytest.approx(-1000 / 100 ** 2)
        assert forces[1, 0] == pytest.approx(1000 / 100 ** 2)
        assert forces[0, 1] == pytest.approx(0.0)

    def test_spring_pulls_endpoints_together(self):
        config = LayoutConfig(gravity=0.0, repulsion=0.0)
        graph = fixed_graph([[300, 250], [400, 250]], edges=[("n0", "n1")], config=config)

        forces = LayoutSimulator(config).compute_forces(graph)

        assert forces[0, 0] == pytest.approx(100 * 0.01)
        assert forces[1, 0] == pytest.approx(-100 * 0.01)

    def test_unresolved_edges_contribute_nothing(self):
        config = LayoutConfig()
        plain = fixed_graph([[200, 200], [500, 300]], config=config)
        dangling = fixed_graph([[200, 200], [500, 300]], edges=[("n0", "ghost")], config=config)

        simulator = LayoutSimulator(config)
        assert np.allclose(simulator.compute_forces(plain), simulator.compute_forces(dangling))

    def test_coincident_nodes_pushed_apart_along_x(self):
        graph = fixed_graph([[400, 250], [400, 250]])
        LayoutSimulator(graph.config).step(graph)

        positions = graph.positions
        assert np.isfinite(positions).all()
        assert positions[0, 0] < 400 < positions[1, 0]
        assert positions[0, 1] == pytest.approx(positions[1, 1])

    def test_node_without_position_is_inert(self):
        graph = fixed_graph([[math.nan, math.nan], [300, 200], [500, 300]], edges=[("n0", "n1")])
        simulator = LayoutSimulator(graph.config)

        forces = simulator.compute_forces(graph)
        assert not forces[0].any()
        assert np.isfinite(forces).all()

        report = simulator.step(graph)
        assert report.moved_nodes == 2
        assert np.isnan(graph.positions[0]).all()
        assert np.isfinite(graph.positions[1:]).all()


class TestIntegration:

    def test_empty_graph_is_a_no_op(self):
        graph, simulator = build([])
        report = simulator.step(graph)
        assert report.is_idle
        assert report.iteration == 0

    def test_node_at_center_does_not_drift(self):
        graph = fixed_graph([[400.0, 250.0]])
        simulator = LayoutSimulator(graph.config)

        simulator.run(graph, 1000)

        assert graph.position_of("n0").distance_to(graph.center) < 1e-9

    def test_same_cluster_pair_scenario(self):
        payload = GraphPayload(
            nodes=(node("a", category="x"), node("b", category="x")),
            edges=(EdgeSpec("a", "b"),),
        )
        graph = initialize_graph(payload, seed=21)
        simulator = LayoutSimulator(graph.config)

        simulator.run(graph, 500)

        distance = graph.position_of("a").distance_to(graph.position_of("b"))
        assert 20.0 < distance < 100.0

    def test_single_node_drifts_to_center(self):
        graph, simulator = build(["solo"], seed=4)
        start = graph.position_of("solo").distance_to(graph.center)

        simulator.run(graph, 5000)

        assert graph.position_of("solo").distance_to(graph.center) < min(5.0, start)

    def test_pair_settles_at_balance_distance(self):
        """1000 / d^2 = 0.01 d (plus a little gravity) gives d close to 46."""
        graph, simulator = build(["a", "b"], edges=[("a", "b")], seed=9)

        simulator.run(graph, 1500)

        distance = graph.position_of("a").distance_to(graph.position_of("b"))
        assert 40.0 < distance < 52.0

    def test_pinned_node_is_not_moved(self):
        graph, simulator = build(["a", "b", "c"], edges=[("a", "b"), ("b", "c")], seed=2)
        graph.pin("b")
        pinned_at = graph.position_of("b")

        for _ in range(50):
            simulator.step(graph)

        assert graph.position_of("b") == pinned_at
        assert graph.node("b").velocity.to_tuple() == (0.0, 0.0)
        assert graph.position_of("a") != pinned_at

    def test_pinned_node_still_pushes_others(self):
        graph = fixed_graph([[400, 250], [410, 250]])
        graph.pin("n0")
        LayoutSimulator(graph.config).step(graph)
        assert graph.positions[1, 0] > 410

    def test_same_seed_same_trajectory(self):
        first, sim_a = build(["a", "b", "c", "d"], edges=[("a", "b"), ("c", "d")], seed=17)
        second, sim_b = build(["a", "b", "c", "d"], edges=[("a", "b"), ("c", "d")], seed=17)

        sim_a.run(first, 100)
        sim_b.run(second, 100)

        assert np.array_equal(first.positions, second.positions)

    def test_report_describes_step(self):
        graph, simulator = build(["a", "b"], edges=[("a", "b")], seed=1)
        before = np.array(graph.positions)
        report = simulator.step(graph)

        moved = np.sqrt(((np.asarray(graph.positions) - before) ** 2).sum(axis=1))
        velocities = np.asarray(graph.velocities)
        assert report.iteration == 1
        assert report.moved_nodes == 2
        assert report.max_speed == pytest.approx(moved.max())
        assert report.kinetic_energy == pytest.approx(0.5 * (velocities ** 2).sum())

    def test_node_held_at_margin_reports_no_motion(self):
        config = LayoutConfig(gravity=0.0, repulsion=0.0)
        graph = fixed_graph([[40.0, 250.0]], config=config)
        graph.commit_physics(graph.positions, np.array([[-5.0, 0.0]]))

        report = LayoutSimulator(config).step(graph)

        assert graph.position_of("n0").to_tuple() == (40.0, 250.0)
        assert report.max_speed == 0.0
        assert report.kinetic_energy > 0.0


class TestConvergence:

    def test_continuous_mode_never_freezes(self):
        graph, simulator = build(["a", "b"], edges=[("a", "b")])
        simulator.run(graph, 400)
        assert not simulator.is_settled
        assert simulator.iteration == 400

    def test_freeze_on_settle(self):
        config = LayoutConfig(
            mode=ConvergenceMode.FREEZE_ON_SETTLE, settle_threshold=1e9, settle_patience=5
        )
        graph, simulator = build(["a", "b"], edges=[("a", "b")], config=config)

        report = simulator.run(graph, 100)
        assert report.settled
        assert simulator.iteration == 5

        frozen = np.array(graph.positions)
        idle = simulator.step(graph)
        assert idle.is_idle
        assert np.array_equal(graph.positions, frozen)

    def test_drag_reheats_frozen_layout(self):
        config = LayoutConfig(
            mode=ConvergenceMode.FREEZE_ON_SETTLE, settle_threshold=1e9, settle_patience=3
        )
        graph, simulator = build(["a", "b", "c"], edges=[("a", "b")], config=config)
        simulator.run(graph, 10)
        assert simulator.is_settled

        graph.pin("a")
        graph.move_pinned(100.0, 100.0)
        report = simulator.step(graph)

        assert not report.is_idle
        assert report.moved_nodes == 2

    def test_max_iterations_halts(self):
        config = LayoutConfig(max_iterations=10)
        graph, simulator = build(["a", "b"], edges=[("a", "b")], config=config)

        report = simulator.run(graph, 50)
        assert report.halted
        assert simulator.iteration == 10

        assert simulator.step(graph).is_idle
        assert simulator.iteration == 10

        simulator.reheat()
        assert not simulator.step(graph).is_idle
        assert simulator.iteration == 11

    def test_scale_limit(self):
        config = LayoutConfig(repulsion_node_limit=2)
        graph, simulator = build(["a", "b", "c"], config=config)
        assert simulator.exceeds_scale_limit(graph)
