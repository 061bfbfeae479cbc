"""
Observability Layer

RESPONSIBILITY: Recording simulation progress for inspection and replay
ALLOWED INPUTS: TickRecord copies emitted by simulation runs
OUTPUTS: Append-only tick history

WHAT THIS LAYER MUST NOT DO:
============================
- Modify simulation behaviour
- Filter or interpret records while collecting them
- Hold references to live node records
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import List, Optional, Tuple


@dataclass(frozen=True)
class TickRecord:
    """Outcome of one simulation tick."""
    generation: int
    tick_count: int
    alpha: float
    max_velocities: Tuple[float, float]
    continuing: bool


class TickRecorder:
    """
    Append-only collector of tick records.

    One recorder may observe any number of runs; records are kept in
    arrival order and can be filtered by generation.
    """

    def __init__(self, capacity: Optional[int] = None):
        if capacity is not None and capacity <= 0:
            raise ValueError("capacity must be positive")
        self._capacity = capacity
        self._records: List[TickRecord] = []
        self._dropped = 0

    def collect(self, record: TickRecord) -> None:
        self._records.append(record)
        if self._capacity is not None and len(self._records) > self._capacity:
            del self._records[0]
            self._dropped += 1

    def get_records(self, generation: Optional[int] = None) -> List[TickRecord]:
        if generation is None:
            return list(self._records)
        return [r for r in self._records if r.generation == generation]

    def generations(self) -> Tuple[int, ...]:
        seen = dict.fromkeys(r.generation for r in self._records)
        return tuple(seen)

    def last(self) -> Optional[TickRecord]:
        return self._records[-1] if self._records else None

    @property
    def record_count(self) -> int:
        return len(self._records)

    @property
    def dropped_count(self) -> int:
        return self._dropped


__all__ = ['TickRecord', 'TickRecorder']
