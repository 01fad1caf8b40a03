"""
Observability & Audit Layer

RESPONSIBILITY: Audit logging and metrics for every engine layer
ALLOWED INPUTS: Copies of events from simulation, interaction, render, ingestion
OUTPUTS: AuditLogEntry streams, MetricPoint series, aggregates

WHAT THIS LAYER MUST NOT DO:
============================
- Modify engine behavior
- Filter or interpret events (only record them)
- Hold references to live GraphState

BOUNDARY ENFORCEMENT:
=====================
- Receives immutable records only
- Timestamps come from the injected FrameClock
- Collectors are bounded ring buffers so a perpetual frame loop cannot grow
  memory without limit
"""

from __future__ import annotations
from collections import deque
from dataclasses import dataclass, field
from typing import Deque, Dict, List, Optional, Tuple
from enum import Enum, auto
import itertools

from ..contracts.events import AuditLogEntry, AuditEventType, MetricPoint
from ..temporal.clock import FrameClock


# =============================================================================
# CONFIGURATION
# =============================================================================

@dataclass(frozen=True)
class ObservabilityConfig:
    """Configuration for observability layer."""
    max_log_entries: int = 5000
    max_metric_points: int = 5000
    record_every_step: bool = False  # audit entry per simulation step

    def __post_init__(self):
        if self.max_log_entries < 1 or self.max_metric_points < 1:
            raise ValueError("Collector capacities must be at least 1")


# =============================================================================
# LOG COLLECTORS (One per layer)
# =============================================================================

class LogCollector:
    """
    Append-only audit log for one layer.

    Oldest entries are evicted once capacity is reached.
    """

    def __init__(self, layer_name: str, capacity: int = 5000):
        self._layer_name = layer_name
        self._entries: Deque[AuditLogEntry] = deque(maxlen=capacity)
        self._sequence: int = 0

    def collect(self, entry: AuditLogEntry):
        """Collect an audit entry (append-only)."""
        self._entries.append(entry)
        self._sequence += 1

    def get_entries(
        self,
        event_type: Optional[AuditEventType] = None,
        action: Optional[str] = None,
    ) -> List[AuditLogEntry]:
        """Get entries, optionally filtered."""
        entries = list(self._entries)
        if event_type:
            entries = [e for e in entries if e.event_type == event_type]
        if action:
            entries = [e for e in entries if e.action == action]
        return entries

    @property
    def layer_name(self) -> str:
        return self._layer_name

    @property
    def entry_count(self) -> int:
        return len(self._entries)

    @property
    def total_collected(self) -> int:
        return self._sequence


# =============================================================================
# METRICS COLLECTOR
# =============================================================================

class MetricType(Enum):
    """Types of metrics."""
    COUNTER = auto()
    GAUGE = auto()
    TIMING = auto()


@dataclass(frozen=True)
class MetricDefinition:
    """Definition of a metric."""
    name: str
    metric_type: MetricType
    description: str
    labels: Tuple[str, ...] = field(default_factory=tuple)


class MetricsCollector:
    """
    Collect metrics from all layers.

    Metrics are append-only time series data points.
    """

    def __init__(self, clock: Optional[FrameClock] = None, capacity: int = 5000):
        self._clock = clock or FrameClock.live()
        self._capacity = capacity
        self._metrics: Dict[str, Deque[MetricPoint]] = {}
        self._definitions: Dict[str, MetricDefinition] = {}
        self._register_default_metrics()

    def _register_default_metrics(self):
        """Register standard metrics."""
        defaults = [
            MetricDefinition(
                name="simulation_steps_total",
                metric_type=MetricType.COUNTER,
                description="Layout steps that moved at least one node"
            ),
            MetricDefinition(
                name="step_duration_ms",
                metric_type=MetricType.TIMING,
                description="Wall time of one layout step in milliseconds"
            ),
            MetricDefinition(
                name="layout_max_speed",
                metric_type=MetricType.GAUGE,
                description="Fastest node speed after a step (units per step)"
            ),
            MetricDefinition(
                name="frames_rendered_total",
                metric_type=MetricType.COUNTER,
                description="Frames painted onto a surface"
            ),
            MetricDefinition(
                name="interaction_events_total",
                metric_type=MetricType.COUNTER,
                description="Pointer events handled",
                labels=("action",)
            ),
            MetricDefinition(
                name="unresolved_edges",
                metric_type=MetricType.GAUGE,
                description="Edges skipped because an endpoint is missing"
            ),
        ]

        for definition in defaults:
            self.register_metric(definition)

    def register_metric(self, definition: MetricDefinition):
        """Register a new metric definition."""
        self._definitions[definition.name] = definition
        if definition.name not in self._metrics:
            self._metrics[definition.name] = deque(maxlen=self._capacity)

    def definition(self, metric_name: str) -> Optional[MetricDefinition]:
        return self._definitions.get(metric_name)

    def record(
        self,
        metric_name: str,
        value: float,
        labels: Optional[Dict[str, str]] = None
    ):
        """Record a metric data point."""
        if metric_name not in self._metrics:
            self._metrics[metric_name] = deque(maxlen=self._capacity)

        label_tuple = tuple(sorted(labels.items())) if labels else ()

        point = MetricPoint(
            metric_name=metric_name,
            value=value,
            timestamp=self._clock.now(),
            labels=label_tuple
        )
        self._metrics[metric_name].append(point)

    def get_metric(self, metric_name: str) -> List[MetricPoint]:
        return list(self._metrics.get(metric_name, ()))

    def get_latest(self, metric_name: str) -> Optional[MetricPoint]:
        """Get the latest value for a metric."""
        points = self._metrics.get(metric_name)
        return points[-1] if points else None

    def compute_aggregates(self, metric_name: str) -> Dict[str, float]:
        """Compute aggregate statistics for a metric."""
        values = [p.value for p in self._metrics.get(metric_name, ())]

        if not values:
            return {}

        return {
            'count': len(values),
            'sum': sum(values),
            'min': min(values),
            'max': max(values),
            'avg': sum(values) / len(values),
        }


# =============================================================================
# UNIFIED FACADE
# =============================================================================

class ObservabilityLayer:
    """
    Single entry point the engine uses to record what happened.

    One LogCollector per layer plus a shared MetricsCollector.
    """

    LAYERS = ("ingestion", "simulation", "interaction", "render", "system")

    def __init__(self, config: Optional[ObservabilityConfig] = None, clock: Optional[FrameClock] = None):
        self._config = config or ObservabilityConfig()
        self._clock = clock or FrameClock.live()
        self._collectors: Dict[str, LogCollector] = {
            layer: LogCollector(layer, self._config.max_log_entries) for layer in self.LAYERS
        }
        self._metrics = MetricsCollector(self._clock, self._config.max_metric_points)
        self._ids = itertools.count(1)

    @property
    def config(self) -> ObservabilityConfig:
        return self._config

    @property
    def metrics(self) -> MetricsCollector:
        return self._metrics

    def collector(self, layer: str) -> LogCollector:
        return self._collectors[layer]

    def audit(
        self,
        layer: str,
        event_type: AuditEventType,
        action: str,
        entity_id: Optional[str] = None,
        **metadata: object,
    ) -> AuditLogEntry:
        """Record an audit entry on a layer's collector and return it."""
        entry = AuditLogEntry(
            entry_id=f"audit_{next(self._ids):08d}",
            event_type=event_type,
            timestamp=self._clock.now(),
            layer=layer,
            action=action,
            entity_id=entity_id,
            metadata=tuple(sorted((k, str(v)) for k, v in metadata.items())),
        )
        self._collectors[layer].collect(entry)
        return entry

    def all_entries(self) -> List[AuditLogEntry]:
        """Every retained entry across layers, oldest first."""
        merged = [e for c in self._collectors.values() for e in c.get_entries()]
        return sorted(merged, key=lambda e: e.entry_id)
