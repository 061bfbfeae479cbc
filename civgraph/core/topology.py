"""
Topology Engine
===============

Structural metrics of an extracted subgraph.

Reports geometry only: sizes, density, connectedness, diameter. Edge
direction and strength are ignored; a connection is a connection.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import List, Optional, Set

import networkx as nx

from ..contracts.base import NodeId
from ..contracts.graph import Subgraph


@dataclass(frozen=True)
class GraphMetrics:
    """Immutable structural metrics for a subgraph."""
    node_count: int
    edge_count: int
    density: float
    is_connected: bool
    connected_components_count: int
    diameter: Optional[int] = None  # Only for connected graphs


class TopologyEngine:
    """Wraps NetworkX for structural questions about a Subgraph."""

    def __init__(self):
        self._graph = nx.Graph()

    def build_graph(self, subgraph: Subgraph) -> None:
        """Replace the internal graph with the given subgraph."""
        self._graph = nx.Graph()
        self._graph.add_nodes_from(subgraph.nodes)
        for edge in subgraph.edges:
            if edge.is_self_loop:
                continue
            self._graph.add_edge(edge.source_id, edge.target_id, kind=edge.kind.value)

    def get_connected_components(self) -> List[Set[NodeId]]:
        if not self._graph:
            return []
        return [set(c) for c in nx.connected_components(self._graph)]

    def compute_metrics(self) -> GraphMetrics:
        if not self._graph:
            return GraphMetrics(0, 0, 0.0, False, 0, None)

        is_connected = nx.is_connected(self._graph)

        diameter = None
        if is_connected and len(self._graph) > 1:
            diameter = nx.diameter(self._graph)

        return GraphMetrics(
            node_count=self._graph.number_of_nodes(),
            edge_count=self._graph.number_of_edges(),
            density=nx.density(self._graph),
            is_connected=is_connected,
            connected_components_count=nx.number_connected_components(self._graph),
            diameter=diameter
        )

    def get_shortest_path(self, start_id: NodeId, end_id: NodeId) -> Optional[List[NodeId]]:
        try:
            return nx.shortest_path(self._graph, source=start_id, target=end_id)
        except (nx.NetworkXNoPath, nx.NodeNotFound):
            return None

    def clear(self):
        self._graph.clear()
