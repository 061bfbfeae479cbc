"""
Core Layout Engines

RESPONSIBILITY: Subgraph extraction, force simulation, structural metrics
ALLOWED INPUTS: Contracts (FullGraph, Subgraph), frame schedulers
OUTPUTS: Subgraph, LayoutFrame snapshots, GraphMetrics

WHAT THIS LAYER MUST NOT DO:
============================
- Fetch graph data (the data layer hands over a FullGraph)
- Draw anything (renderers consume LayoutFrame copies)
- Own the frame loop (the host clock calls back into it)
"""

from .extractor import SubgraphExtractor, resolve_mirrored_edges, parent_child_only
from .simulation import (
    SimulationConfig, SimulationNode, SimulationEdge, SimulationStats,
    SimulationState, SimulationRun, SimulationEngine, RunState,
    initialize_graph, place_nodes
)
from .topology import TopologyEngine, GraphMetrics

__all__ = [
    'SubgraphExtractor',
    'resolve_mirrored_edges',
    'parent_child_only',
    'SimulationConfig',
    'SimulationNode',
    'SimulationEdge',
    'SimulationStats',
    'SimulationState',
    'SimulationRun',
    'SimulationEngine',
    'RunState',
    'initialize_graph',
    'place_nodes',
    'TopologyEngine',
    'GraphMetrics',
]
