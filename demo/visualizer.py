"""
Knowledge Graph Visualizer (CLI)
================================

Runs the layout loop headless for a fixed number of frames and writes the
final frame as a PNG.

Usage:
    python -m demo.visualizer --steps 300 --seed 7 --out frame.png
    python -m demo.visualizer --graph knowledge-graph.json --mode freeze_on_settle
"""

import argparse
import sys

from backend.core import ConvergenceMode, LayoutConfig
from backend.engine import EngineConfig, LayoutEngine
from backend.ingestion import curriculum_payload
from backend.temporal.clock import ManualFrameScheduler

from frontend.session import GraphSession
from frontend.visualization.raster import RasterSurface


def build_engine(args) -> LayoutEngine:
    config = EngineConfig(
        layout=LayoutConfig(mode=ConvergenceMode(args.mode)),
        seed=args.seed,
    )
    if not args.graph:
        return LayoutEngine(curriculum_payload(config.ingestion), config)

    result = LayoutEngine.from_file(args.graph, config)
    if result.is_failure:
        print(f"[!] {result.error.code.name}: {result.error.message}")
        sys.exit(1)
    return result.value


def run(args) -> GraphSession:
    engine = build_engine(args)
    graph = engine.graph
    print(f"[*] Loaded {graph.node_count} nodes, {len(graph.resolved_edges())} edges")
    for warning in engine.payload.warnings:
        print(f"[!] {warning}")
    if graph.unresolved_edges():
        print(f"[!] {len(graph.unresolved_edges())} edges reference unknown nodes (not drawn)")

    session = GraphSession(engine)
    scheduler = ManualFrameScheduler()
    session.attach(scheduler)
    session.start()
    frames = scheduler.run_frames(args.steps)
    session.stop()

    report = session.simulation.last_report
    print(f"[*] Ran {frames} frames (iteration {engine.simulator.iteration})")
    if report is not None:
        print(f"    max speed: {report.max_speed:.4f} | kinetic energy: {report.kinetic_energy:.4f}")
        if report.settled:
            print("    layout settled")

    metrics = engine.topology().compute_metrics()
    print(f"[*] Components: {metrics.connected_components_count} | density: {metrics.density:.3f}")

    layout = engine.config.layout
    surface = RasterSurface(layout.width, layout.height)
    view = session.render(surface)
    surface.save(args.out)
    print(f"[+] {view.summary} -> {args.out}")
    for entry in view.legend:
        print(f"    {entry.color}  {entry.label}")
    return session


def main():
    parser = argparse.ArgumentParser(description="Knowledge Graph Visualizer")
    parser.add_argument("--steps", type=int, default=300, help="Frames to simulate")
    parser.add_argument("--seed", type=int, default=None, help="Seed for initial placement")
    parser.add_argument("--out", default="frame.png", help="Output PNG path")
    parser.add_argument("--graph", default=None, help="Knowledge graph JSON (default: builtin curriculum)")
    parser.add_argument(
        "--mode",
        default=ConvergenceMode.CONTINUOUS.value,
        choices=[m.value for m in ConvergenceMode],
        help="Convergence behaviour",
    )

    args = parser.parse_args()
    if args.steps < 0:
        parser.error("--steps must be non-negative")
    run(args)


if __name__ == "__main__":
    main()
