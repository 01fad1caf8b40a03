"""
Observability Event Contracts

Immutable records emitted by the engine layers and consumed by the
observability layer. Records are copies; collectors never hold references to
live engine state.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple


class AuditEventType(Enum):
    """Explicit audit event types."""
    INGESTION = "ingestion"
    SIMULATION = "simulation"
    INTERACTION = "interaction"
    RENDER = "render"
    ERROR = "error"
    SYSTEM = "system"


@dataclass(frozen=True)
class AuditLogEntry:
    """Immutable audit log entry."""
    entry_id: str
    event_type: AuditEventType
    timestamp: float  # FrameClock seconds
    layer: str  # Which layer generated this
    action: str
    entity_id: Optional[str] = None
    metadata: Tuple[Tuple[str, str], ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class MetricPoint:
    """Immutable metric data point."""
    metric_name: str
    value: float
    timestamp: float
    labels: Tuple[Tuple[str, str], ...] = field(default_factory=tuple)
