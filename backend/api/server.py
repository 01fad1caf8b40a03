"""
Knowledge Graph Engine: Visualization API Server
================================================

Drives one live knowledge-graph session and exposes its frames.

Endpoints:
- GET  /health                   -> Loop status
- GET  /api/v1/graph             -> Current render view (JSON)
- GET  /api/v1/graph/metrics     -> Topology + simulation metrics
- GET  /api/v1/graph/frame.png   -> Current frame as PNG
- POST /api/v1/graph/step        -> Advance the layout synchronously
- POST /api/v1/interaction       -> Pointer event (move / down / up)
- PUT  /api/v1/selection         -> Host-controlled selected node

All handlers are coroutines on the same event loop as the frame loop, so a
pointer event is always applied between two simulation steps.

Usage:
    uvicorn backend.api.server:app --reload
"""
import os
from contextlib import asynccontextmanager
from typing import Literal, Optional

from fastapi import FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import Response
from pydantic import BaseModel

from ..core import ConvergenceMode, LayoutConfig
from ..engine import EngineConfig, LayoutEngine
from ..ingestion import curriculum_payload
from ..temporal.clock import AsyncioFrameScheduler
from .mapper import map_view_to_dto, map_interaction_to_dto, map_report_to_dto, map_metrics_to_dto

from frontend.interaction.events import InteractionRequest, PointerAction
from frontend.session import GraphSession
from frontend.visualization.raster import RasterSurface

# =============================================================================
# INFRASTRUCTURE SETUP
# =============================================================================

# Global Session Instance
session_instance: Optional[GraphSession] = None

# Steps run inline on the event loop shared with the frame loop
MAX_STEPS_PER_REQUEST = 500


def build_session() -> GraphSession:
    """Create the session from environment configuration."""
    seed = os.environ.get("KGE_SEED")
    mode = os.environ.get("KGE_MODE", ConvergenceMode.CONTINUOUS.value)

    config = EngineConfig(
        layout=LayoutConfig(mode=ConvergenceMode(mode)),
        seed=int(seed) if seed else None,
    )

    graph_path = os.environ.get("KGE_GRAPH_PATH")
    if graph_path:
        result = LayoutEngine.from_file(graph_path, config)
        if result.is_failure:
            raise RuntimeError(f"{result.error.code.name}: {result.error.message}")
        engine = result.value
    else:
        engine = LayoutEngine(curriculum_payload(config.ingestion), config)

    return GraphSession(engine, on_click=lambda node_id: print(f"[*] Selected node: {node_id}"))


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create the session and run its frame loop for the app lifetime."""
    global session_instance

    print(f"[*] Initializing knowledge graph from: {os.environ.get('KGE_GRAPH_PATH') or 'builtin curriculum'}")

    try:
        session = build_session()
    except Exception as e:
        print(f"[!] FAILED to initialize graph: {e}")
        raise

    fps = float(os.environ.get("KGE_FPS", "60"))
    session.attach(AsyncioFrameScheduler(fps=fps))
    if os.environ.get("KGE_AUTOSTART", "1") != "0":
        session.start()
        print(f"[*] Layout loop running at {fps:g} fps.")

    session_instance = session
    print("[+] Graph session ready.")

    yield

    print("[*] Stopping layout loop.")
    session.detach()
    session_instance = None

app = FastAPI(
    title="Knowledge Graph Engine API",
    version="0.1.0",
    description="Force-directed knowledge graph of the system programming curriculum",
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT"],
    allow_headers=["*"],
)


class PointerEventBody(BaseModel):
    action: Literal["move", "down", "up"]
    x: float
    y: float


class SelectionBody(BaseModel):
    node_id: Optional[str] = None


def _require_session() -> GraphSession:
    if not session_instance:
        raise HTTPException(status_code=503, detail="Graph session not initialized")
    return session_instance


# =============================================================================
# ENDPOINTS
# =============================================================================

@app.get("/health")
async def health_check():
    """System status."""
    session = _require_session()
    simulation = session.simulation
    return {
        "status": "online",
        "loop": "running" if simulation and simulation.is_running else "stopped",
        "frames": simulation.frame_count if simulation else 0,
    }


@app.get("/api/v1/graph")
async def get_graph():
    """Current render view plus interaction and loop state."""
    session = _require_session()
    simulation = session.simulation
    dto = map_view_to_dto(session.view())
    dto["interaction"] = map_interaction_to_dto(session.interaction)
    dto["simulation"] = {
        "running": bool(simulation and simulation.is_running),
        "frames": simulation.frame_count if simulation else 0,
        "last_step": map_report_to_dto(simulation.last_report if simulation else None),
    }
    return dto


@app.get("/api/v1/graph/metrics")
async def get_metrics():
    """Structural metrics and step timing aggregates."""
    session = _require_session()
    engine = session.engine
    topology = engine.topology()
    return {
        "topology": map_metrics_to_dto(topology.compute_metrics()),
        "components": [sorted(c) for c in topology.get_connected_components()],
        "step_duration_ms": engine.observability.metrics.compute_aggregates("step_duration_ms"),
        "iteration": engine.simulator.iteration,
        "settled": engine.simulator.is_settled,
    }


@app.get("/api/v1/graph/frame.png")
async def get_frame():
    """Paint the current frame onto a raster surface."""
    session = _require_session()
    layout = session.engine.config.layout
    surface = RasterSurface(layout.width, layout.height)
    session.render(surface)
    return Response(content=surface.to_png(), media_type="image/png")


@app.post("/api/v1/graph/step")
async def step_graph(count: int = Query(1, ge=1, le=MAX_STEPS_PER_REQUEST)):
    """Advance the layout `count` steps immediately."""
    session = _require_session()
    report = session.engine.step(count)
    return {
        "step": map_report_to_dto(report),
        "graph": map_view_to_dto(session.view()),
    }


@app.post("/api/v1/interaction")
async def post_interaction(body: PointerEventBody):
    """Feed one pointer event to the interaction controller."""
    session = _require_session()
    request = InteractionRequest(action=PointerAction(body.action), x=body.x, y=body.y, source_component="api")
    outcome = session.controller.handle(request)
    return map_interaction_to_dto(outcome.state, outcome.clicked_id)


@app.put("/api/v1/selection")
async def put_selection(body: SelectionBody):
    """Set or clear the host-selected node."""
    session = _require_session()
    if body.node_id is not None and not session.engine.graph.has_node(body.node_id):
        raise HTTPException(status_code=404, detail=f"Unknown node: {body.node_id}")
    return map_interaction_to_dto(session.select(body.node_id))
