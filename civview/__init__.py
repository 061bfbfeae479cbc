"""
View Layer

Read-only, immutable view models for graph renderers.

PRINCIPLES:
1. Immutable (Frozen)
2. No physics
3. Positions come from LayoutFrame snapshots only
"""

from .mapper import GraphViewMapper, edge_thickness, edge_stroke
from .visualization.graph import (
    AvailabilityState, LineStyle, GraphNode, GraphEdge, NetworkGraphView
)

__all__ = [
    'GraphViewMapper',
    'edge_thickness',
    'edge_stroke',
    'AvailabilityState',
    'LineStyle',
    'GraphNode',
    'GraphEdge',
    'NetworkGraphView',
]
