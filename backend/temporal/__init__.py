"""
Frame Timing Layer
==================

Injectable clocks and frame schedulers for the layout loop.

INVARIANTS:
- No module reads wall time except through FrameClock
- Every frame registration can be cancelled
"""

from .clock import (
    FrameClock, ClockExhausted, FrameCallback,
    FrameScheduler, ManualFrameScheduler, AsyncioFrameScheduler,
)

__all__ = [
    'FrameClock',
    'ClockExhausted',
    'FrameCallback',
    'FrameScheduler',
    'ManualFrameScheduler',
    'AsyncioFrameScheduler',
]
