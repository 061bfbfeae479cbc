"""
Frame Snapshots
===============

Read-only per-frame views handed from the simulation to renderers.

The simulation owns its node records exclusively; renderers only ever see
these frozen copies.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Dict, Optional, Tuple

from .base import NodeId, RefKind


@dataclass(frozen=True)
class NodePosition:
    """Position of one visible node at the end of a tick."""
    node_id: NodeId
    x: float
    y: float
    text_width: float = 0.0
    text_height: float = 0.0
    pinned: bool = False


@dataclass(frozen=True)
class EdgePosition:
    """Everything a renderer needs to draw one edge."""
    source_id: NodeId
    target_id: NodeId
    source_xy: Tuple[float, float]
    target_xy: Tuple[float, float]
    kind: RefKind
    strength: float


@dataclass(frozen=True)
class LayoutFrame:
    """Immutable snapshot of a simulation state."""
    generation: int
    tick_count: int
    nodes: Tuple[NodePosition, ...]
    edges: Tuple[EdgePosition, ...]
    max_velocities: Tuple[float, float] = (0.0, 0.0)
    
    def position_of(self, node_id: NodeId) -> Optional[Tuple[float, float]]:
        for node in self.nodes:
            if node.node_id == node_id:
                return (node.x, node.y)
        return None
    
    def positions(self) -> Dict[NodeId, Tuple[float, float]]:
        return {node.node_id: (node.x, node.y) for node in self.nodes}
