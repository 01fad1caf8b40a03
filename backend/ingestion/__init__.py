"""
Ingestion Layer

RESPONSIBILITY: Turn the static content document into a GraphPayload
ALLOWED INPUTS: JSON documents (file or already-decoded mapping)
OUTPUTS: Result[GraphPayload] with explicit warnings

WHAT THIS LAYER MUST NOT DO:
============================
- Place nodes or compute layout
- Drop edges to missing nodes (consumers decide how to treat them)
"""

from typing import Optional

from ..contracts.graph import GraphPayload
from .loader import IngestionConfig, normalize_id, parse_payload, load_payload
from .curriculum import build_curriculum_graph


def curriculum_payload(config: Optional[IngestionConfig] = None) -> GraphPayload:
    """Parsed builtin curriculum graph."""
    result = parse_payload(build_curriculum_graph(), config)
    return result.value


__all__ = [
    'IngestionConfig',
    'normalize_id',
    'parse_payload',
    'load_payload',
    'build_curriculum_graph',
    'curriculum_payload',
]
