"""
Knowledge Graph Engine Backend

This package implements the layout side of the curriculum knowledge graph
with hard boundaries between responsibilities. Each layer communicates
only through explicit contracts.

LAYER STRUCTURE:
================

1. INGESTION LAYER (ingestion/)
   - Responsibility: Turn a knowledge-graph document into a GraphPayload
   - Allowed inputs: JSON file, in-memory mapping, builtin curriculum
   - Outputs: GraphPayload (immutable) plus skip warnings
   - MUST NOT: Place nodes or run physics

2. GRAPH MODEL + SIMULATOR (core/)
   - Responsibility: Node positions/velocities, drag pinning, force relaxation
   - Allowed inputs: GraphPayload, LayoutConfig
   - Outputs: Mutated GraphState positions, StepReport per step
   - MUST NOT: Draw, read pointer events, or know about the canvas backend

3. FRAME LOOP (engine.py, temporal/)
   - Responsibility: start() / stop() / tick() lifecycle over a FrameScheduler
   - Allowed inputs: FrameScheduler, FrameClock
   - Outputs: One simulation step per frame
   - MUST NOT: Keep firing after stop()

4. OBSERVABILITY & AUDIT LAYER (observability/)
   - Responsibility: Audit entries and metrics for every layer
   - Allowed inputs: Any layer activity
   - Outputs: AuditLogEntry, MetricPoint
   - MUST NOT: Modify system behavior

5. API (api/)
   - Responsibility: HTTP surface over one GraphSession
   - MUST NOT: Contain layout or rendering logic

CONSTRAINTS ENFORCED:
=====================
- Explicit errors: Ingestion failures are Result values, never silent
- Bounded positions: Free nodes stay inside the canvas margin box
- Single writer: Only the simulator and the drag pin move nodes
"""
