"""
Core Layout Engine

RESPONSIBILITY: Graph model, force-directed relaxation, structural analysis
ALLOWED INPUTS: GraphPayload from the ingestion layer
OUTPUTS: GraphState (mutable physical state), StepReport, GraphMetrics

WHAT THIS LAYER MUST NOT DO:
============================
- Draw anything (visualization layer's job)
- Interpret pointer input (interaction layer's job)
- Read wall time or schedule frames (temporal layer's job)
"""

from .layout_config import LayoutConfig, ConvergenceMode
from .model import GraphState, NodeSnapshot, initialize_graph, initial_positions
from .simulator import LayoutSimulator, StepReport
from .topology import TopologyEngine, GraphMetrics

__all__ = [
    'LayoutConfig',
    'ConvergenceMode',
    'GraphState',
    'NodeSnapshot',
    'initialize_graph',
    'initial_positions',
    'LayoutSimulator',
    'StepReport',
    'TopologyEngine',
    'GraphMetrics',
]
