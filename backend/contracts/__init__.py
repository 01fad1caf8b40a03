"""
Contracts Module

This module defines the explicit interfaces and data transfer objects
that form the contracts between layers. All inter-layer communication
MUST use these contracts.

DESIGN PRINCIPLES:
==================
1. All contract types are immutable (frozen dataclasses)
2. Data errors are explicit values (Error / Result), never silent
3. Graph content problems degrade gracefully, they are not errors
"""

from .base import (
    ErrorCode, Error, Result, Vec2, NodeKind, UNCATEGORIZED
)
from .graph import NodeSpec, EdgeSpec, ClusterSpec, GraphPayload
from .events import AuditEventType, AuditLogEntry, MetricPoint

__all__ = [
    'ErrorCode', 'Error', 'Result', 'Vec2', 'NodeKind', 'UNCATEGORIZED',
    'NodeSpec', 'EdgeSpec', 'ClusterSpec', 'GraphPayload',
    'AuditEventType', 'AuditLogEntry', 'MetricPoint',
]
