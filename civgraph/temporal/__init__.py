"""
Temporal Layer
==============

Frame clocks that pace the force simulation.

INVARIANTS:
- One callback at a time, on one thread
- Callbacks requested during a frame fire on the next frame
"""

from .clock import (
    FrameScheduler, ManualFrameClock, AsyncFrameClock,
    FrameBudgetExceeded, DEFAULT_FPS
)

__all__ = [
    'FrameScheduler',
    'ManualFrameClock',
    'AsyncFrameClock',
    'FrameBudgetExceeded',
    'DEFAULT_FPS',
]
