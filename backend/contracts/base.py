"""
Base Contracts and Shared Types

Error values for the ingestion boundary, the 2D vector used for
positions and velocities, and the node kinds the renderer sizes by.

BOUNDARY ENFORCEMENT:
=====================
- Imported by every layer, imports nothing from the repo
- Frozen dataclasses only; the mutable layout state lives in GraphState
"""

from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional, Tuple
from enum import Enum, auto
import math


# =============================================================================
# ERROR STATES (Explicit, never silent)
# =============================================================================

class ErrorCode(Enum):
    """
    Explicit error codes for deterministic error handling.

    Only the ingestion boundary can fail. Layout, rendering and interaction
    degrade gracefully and never produce errors.
    """
    # Ingestion errors
    SOURCE_NOT_FOUND = auto()
    SOURCE_UNREADABLE = auto()
    MALFORMED_PAYLOAD = auto()


@dataclass(frozen=True)
class Error:
    """
    Immutable error representation with full context.
    Errors are data, not exceptions - they can be stored and queried.
    """
    code: ErrorCode
    message: str
    timestamp: datetime
    context: Tuple[Tuple[str, str], ...] = field(default_factory=tuple)

    def with_context(self, key: str, value: str) -> Error:
        """Return new Error with additional context (immutable)."""
        return Error(
            code=self.code,
            message=self.message,
            timestamp=self.timestamp,
            context=self.context + ((key, value),)
        )

    @staticmethod
    def create(code: ErrorCode, message: str) -> Error:
        return Error(code=code, message=message, timestamp=datetime.now(timezone.utc))


@dataclass(frozen=True)
class Result:
    """
    Generic result type for operations that can fail.
    Either contains a value OR an error, never both.
    """
    value: Optional[object] = None
    error: Optional[Error] = None

    @property
    def is_success(self) -> bool:
        return self.error is None

    @property
    def is_failure(self) -> bool:
        return self.error is not None

    @staticmethod
    def success(value: object) -> Result:
        return Result(value=value, error=None)

    @staticmethod
    def failure(error: Error) -> Result:
        return Result(value=None, error=error)


# =============================================================================
# GEOMETRY
# =============================================================================

@dataclass(frozen=True)
class Vec2:
    """Immutable 2D coordinate / vector in surface units."""
    x: float
    y: float

    @property
    def is_finite(self) -> bool:
        return math.isfinite(self.x) and math.isfinite(self.y)

    def distance_to(self, other: Vec2) -> float:
        return math.hypot(self.x - other.x, self.y - other.y)

    def to_tuple(self) -> Tuple[float, float]:
        return (self.x, self.y)


# =============================================================================
# NODE CLASSIFICATION
# =============================================================================

class NodeKind(Enum):
    """
    Kind of curriculum entity a node stands for.

    Primary entities (system calls) render larger than secondary ones.
    """
    SYSCALL = "syscall"
    CONCEPT = "concept"
    ERRNO = "errno"
    OTHER = "other"

    @classmethod
    def parse(cls, value: Optional[str]) -> NodeKind:
        """Map a raw payload type onto a kind; unknown values are OTHER."""
        for kind in cls:
            if kind.value == value:
                return kind
        return cls.OTHER

    @property
    def is_primary(self) -> bool:
        return self is NodeKind.SYSCALL


UNCATEGORIZED = "uncategorized"
