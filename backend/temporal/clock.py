"""
Frame Clock and Frame Schedulers
================================

Injectable time source and "next frame" schedulers for the layout loop.

GUARANTEES:
- The simulation never reads system time implicitly
- A fixed or replayed clock makes every timestamp deterministic
- Every scheduled frame can be cancelled (no leaked registrations)
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from collections import deque
from typing import Callable, Deque, Dict, List, Optional
import asyncio
import time


FrameCallback = Callable[[], None]

DEFAULT_HISTORY_LIMIT = 1024


class ClockExhausted(Exception):
    """Raised when replay clock runs out of ticks."""
    pass


# =============================================================================
# CLOCK
# =============================================================================

@dataclass
class FrameClock:
    """
    Injectable clock for frame timing.

    MODES:
    ======
    1. LIVE mode: reads time.monotonic()
    2. FIXED mode: advances by a constant interval per read
    3. REPLAY mode: returns a pre-recorded tick sequence

    Live and fixed readings are kept in a window of the most recent
    `history_limit` ticks; the frame loop reads the clock several times per
    frame for the whole life of the view.
    """
    _ticks: List[float] = field(default_factory=list)
    _current_index: int = 0
    _mode: str = "live"
    _interval: float = 0.0
    _start: float = 0.0
    history_limit: int = DEFAULT_HISTORY_LIMIT
    _history: Deque[float] = field(init=False, repr=False)

    def __post_init__(self):
        if self.history_limit < 1:
            raise ValueError("history_limit must be at least 1")
        self._history = deque(maxlen=self.history_limit)

    def now(self) -> float:
        """Get current frame time in seconds."""
        if self._mode == "live":
            current = time.monotonic()
            self._history.append(current)
            self._current_index += 1
            return current
        if self._mode == "fixed":
            current = self._start + self._current_index * self._interval
            self._history.append(current)
            self._current_index += 1
            return current
        if self._current_index >= len(self._ticks):
            raise ClockExhausted(
                f"Replay clock exhausted at index {self._current_index}. "
                f"Recording has {len(self._ticks)} ticks."
            )
        tick = self._ticks[self._current_index]
        self._current_index += 1
        return tick

    def tick_count(self) -> int:
        """Number of ticks read so far (not all of them are retained)."""
        return self._current_index

    def is_live(self) -> bool:
        return self._mode == "live"

    def recorded_ticks(self) -> List[float]:
        """Retained ticks, oldest first: the recent window, or the consumed replay prefix."""
        if self._mode == "replay":
            return list(self._ticks[:self._current_index])
        return list(self._history)

    @classmethod
    def live(cls, history_limit: int = DEFAULT_HISTORY_LIMIT) -> FrameClock:
        """Create clock in LIVE mode (uses the monotonic system clock)."""
        return cls(_mode="live", history_limit=history_limit)

    @classmethod
    def fixed(
        cls,
        interval: float = 1.0 / 60.0,
        start: float = 0.0,
        history_limit: int = DEFAULT_HISTORY_LIMIT
    ) -> FrameClock:
        """Create a deterministic clock advancing `interval` seconds per read."""
        if interval < 0:
            raise ValueError("interval must be non-negative")
        return cls(_mode="fixed", _interval=interval, _start=start, history_limit=history_limit)

    @classmethod
    def replay(cls, ticks: List[float]) -> FrameClock:
        """Create clock in REPLAY mode from a recorded tick sequence."""
        return cls(_ticks=list(ticks), _current_index=0, _mode="replay")

    def __repr__(self) -> str:
        retained = len(self._ticks) if self._mode == "replay" else len(self._history)
        return f"FrameClock({self._mode.upper()}, ticks={retained}, index={self._current_index})"


# =============================================================================
# SCHEDULERS
# =============================================================================

class FrameScheduler(ABC):
    """
    Host "next frame" facility.

    request_frame registers a one-shot callback and returns an opaque handle;
    cancel_frame revokes a registration that has not fired yet.
    """

    @abstractmethod
    def request_frame(self, callback: FrameCallback) -> object:
        pass

    @abstractmethod
    def cancel_frame(self, handle: object) -> None:
        pass


class ManualFrameScheduler(FrameScheduler):
    """
    Scheduler driven explicitly by the caller.

    Frames only fire when run_pending() is called, which makes the loop fully
    deterministic for tests and batch rendering.
    """

    def __init__(self):
        self._pending: Dict[int, FrameCallback] = {}
        self._next_handle = 1

    def request_frame(self, callback: FrameCallback) -> int:
        handle = self._next_handle
        self._next_handle += 1
        self._pending[handle] = callback
        return handle

    def cancel_frame(self, handle: object) -> None:
        self._pending.pop(handle, None)

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    def run_pending(self) -> int:
        """
        Fire every callback registered before this call.

        Callbacks registered while running land in the next frame.
        Returns the number of callbacks fired.
        """
        due = list(self._pending.items())
        self._pending.clear()
        for _, callback in due:
            callback()
        return len(due)

    def run_frames(self, count: int) -> int:
        fired = 0
        for _ in range(count):
            fired += self.run_pending()
        return fired


class AsyncioFrameScheduler(FrameScheduler):
    """
    Scheduler backed by an asyncio event loop.

    Frames are spaced 1/fps seconds apart with loop.call_later, so the
    simulation shares the loop cooperatively with request handlers.
    """

    def __init__(self, fps: float = 60.0, loop: Optional[asyncio.AbstractEventLoop] = None):
        if fps <= 0:
            raise ValueError("fps must be positive")
        self._delay = 1.0 / fps
        self._loop = loop

    def request_frame(self, callback: FrameCallback) -> asyncio.TimerHandle:
        loop = self._loop or asyncio.get_running_loop()
        return loop.call_later(self._delay, callback)

    def cancel_frame(self, handle: object) -> None:
        if handle is not None:
            handle.cancel()
