"""
Frame Clocks
============

Per-frame scheduling primitives that drive simulation runs.

MODES:
======
1. MANUAL mode: frames fire only when the owner advances the clock.
   Deterministic; used by tests and by hosts with their own render loop.
2. ASYNC mode: frames fire on an asyncio event loop at a fixed rate
   (60 Hz by default).

GUARANTEES:
===========
- A callback requested during frame N fires in frame N + 1, never in N
- Callbacks of one frame fire in request order
- Everything runs on one thread; a callback never interleaves with another
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from typing import Callable, List, Optional
import asyncio
import logging


logger = logging.getLogger(__name__)

FrameCallback = Callable[[], None]

DEFAULT_FPS = 60


class FrameBudgetExceeded(Exception):
    """Raised when a bounded drain runs out of frames with work still pending."""
    pass


class FrameScheduler(ABC):
    """Host redraw clock: runs each requested callback once, on the next frame."""

    @abstractmethod
    def request_frame(self, callback: FrameCallback) -> None:
        pass


class ManualFrameClock(FrameScheduler):
    """
    Frame clock advanced explicitly by its owner.

    Same request sequence + same advance() calls = same execution order.
    """

    def __init__(self):
        self._pending: List[FrameCallback] = []
        self._frame_count = 0

    def request_frame(self, callback: FrameCallback) -> None:
        self._pending.append(callback)

    def advance(self) -> int:
        """
        Fire one frame.

        Returns the number of callbacks fired.
        """
        due, self._pending = self._pending, []
        self._frame_count += 1
        for callback in due:
            callback()
        return len(due)

    def run_until_idle(self, max_frames: int = 10_000) -> int:
        """
        Advance until no callback is pending.

        Returns the number of frames fired.
        """
        frames = 0
        while self._pending:
            if frames >= max_frames:
                raise FrameBudgetExceeded(
                    f"{len(self._pending)} callbacks still pending after {frames} frames"
                )
            self.advance()
            frames += 1
        return frames

    @property
    def frame_count(self) -> int:
        return self._frame_count

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    def __repr__(self) -> str:
        return f"ManualFrameClock(frames={self._frame_count}, pending={len(self._pending)})"


class AsyncFrameClock(FrameScheduler):
    """
    Frame clock on an asyncio event loop.

    Requested callbacks are batched and fired together at the next frame
    boundary, 1/fps seconds after the first request of the batch.
    """

    def __init__(
        self,
        fps: float = DEFAULT_FPS,
        loop: Optional[asyncio.AbstractEventLoop] = None
    ):
        if fps <= 0:
            raise ValueError(f"fps must be positive, got {fps}")
        self._interval = 1.0 / fps
        self._loop = loop
        self._pending: List[FrameCallback] = []
        self._handle: Optional[asyncio.TimerHandle] = None
        self._idle: Optional[asyncio.Event] = None
        self._frame_count = 0

    def _get_loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        return self._loop

    def request_frame(self, callback: FrameCallback) -> None:
        self._pending.append(callback)
        if self._handle is None:
            self._handle = self._get_loop().call_later(self._interval, self._fire)
        if self._idle is not None:
            self._idle.clear()

    def _fire(self) -> None:
        self._handle = None
        due, self._pending = self._pending, []
        self._frame_count += 1
        for callback in due:
            callback()
        logger.debug("frame %d fired %d callbacks", self._frame_count, len(due))
        if not self._pending and self._idle is not None:
            self._idle.set()

    async def wait_idle(self) -> None:
        """Wait until a frame fires with nothing requested for the next one."""
        if not self._pending:
            return
        if self._idle is None:
            self._idle = asyncio.Event()
        self._idle.clear()
        await self._idle.wait()

    def cancel(self) -> None:
        """Drop pending callbacks without firing them."""
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None
        self._pending = []
        if self._idle is not None:
            self._idle.set()

    @property
    def frame_count(self) -> int:
        return self._frame_count

    @property
    def pending_count(self) -> int:
        return len(self._pending)
