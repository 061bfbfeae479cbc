"""
Graph Visualization Contracts

Responsibility:
Deterministic transformation of layout frames into renderable graph views.
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Hashable, Optional, Tuple


class AvailabilityState(Enum):
    """
    Availability of a view.

    Missing data MUST be flagged, never guessed.
    """
    PRESENT = "present"     # Positions are available
    MISSING = "missing"     # Nothing to lay out (empty subgraph)


class LineStyle(Enum):
    SOLID = "solid"
    DOTTED = "dotted"


@dataclass(frozen=True)
class GraphNode:
    """Renderable graph node."""
    node_id: Hashable
    x: float
    y: float
    label: str
    category: Optional[str]
    is_focal_point: bool
    pinned: bool


@dataclass(frozen=True)
class GraphEdge:
    """Renderable graph edge, already oriented for drawing."""
    edge_id: str
    source_id: Hashable
    target_id: Hashable
    start: Tuple[float, float]
    end: Tuple[float, float]
    thickness: float
    style: LineStyle
    stroke: str
    has_arrow: bool
    kind: str


@dataclass(frozen=True)
class NetworkGraphView:
    """
    Pre-layouted network graph.

    Elements are in paint order: dimmed edges, then focal edges, then
    boundary nodes, then focal nodes.
    """
    view_id: str
    generation: int
    tick_count: int
    nodes: Tuple[GraphNode, ...]
    edges: Tuple[GraphEdge, ...]
    availability: AvailabilityState
