"""
Layout Frame to View Mapper

Converts simulation snapshots into renderable graph views.

MAPPING BOUNDARY:
=================
This is the ONLY place where layout frames become view models.
Renderers never see SimulationState or SubgraphEdge directly.

MAPPING RULES:
==============
1. Stroke width grows with edge strength
2. Edges between two expanded nodes are solid, all others dotted
3. Parent/child references carry an arrow head pointing at the
   referenced end; ref_to_parent is drawn target -> source
4. Dimmed elements come first in paint order
"""

from __future__ import annotations
from typing import Optional

from civgraph.contracts import LayoutFrame, NodeCatalog, RefKind, Subgraph
from civgraph.contracts.frames import EdgePosition

from .visualization.graph import (
    AvailabilityState, GraphEdge, GraphNode, LineStyle, NetworkGraphView
)


_STROKES = {
    RefKind.REF: "graph-edge",
    RefKind.REF_TO_PARENT: "graph-edge",
    RefKind.REF_TO_CHILD: "graph-edge",
    RefKind.REF_IN_CONTRAST: "graph-edge-in-contrast",
    RefKind.REF_CRITICAL: "graph-edge-critical",
}


def edge_thickness(strength: float) -> float:
    return 1.0 + abs(strength) * 0.5


def edge_stroke(kind: RefKind, style: LineStyle) -> str:
    stroke = _STROKES[kind]
    if style is LineStyle.DOTTED:
        return f"{stroke}-dimmed"
    return stroke


class GraphViewMapper:
    """
    Maps layout frames to NetworkGraphView.

    SINGLE POINT OF CONVERSION:
    ===========================
    All simulation -> renderer conversion goes through this class.
    """

    def __init__(self, catalog: Optional[NodeCatalog] = None):
        self._catalog = catalog or NodeCatalog()

    def map_frame(
        self,
        frame: Optional[LayoutFrame],
        subgraph: Subgraph,
        view_id: Optional[str] = None
    ) -> NetworkGraphView:
        view_id = view_id or f"graph_{subgraph.root_id}"

        if frame is None or not frame.nodes:
            return NetworkGraphView(
                view_id=view_id,
                generation=frame.generation if frame else 0,
                tick_count=frame.tick_count if frame else 0,
                nodes=(),
                edges=(),
                availability=AvailabilityState.MISSING
            )

        expanded = subgraph.expanded_ids

        edges = [self._map_edge(edge, expanded) for edge in frame.edges]
        edges.sort(key=lambda e: e.style is LineStyle.SOLID)

        nodes = []
        for position in frame.nodes:
            meta = self._catalog.get(position.node_id)
            nodes.append(GraphNode(
                node_id=position.node_id,
                x=position.x,
                y=position.y,
                label=meta.label,
                category=meta.category,
                is_focal_point=position.node_id in expanded,
                pinned=position.pinned
            ))
        nodes.sort(key=lambda n: n.is_focal_point)

        return NetworkGraphView(
            view_id=view_id,
            generation=frame.generation,
            tick_count=frame.tick_count,
            nodes=tuple(nodes),
            edges=tuple(edges),
            availability=AvailabilityState.PRESENT
        )

    def _map_edge(self, edge: EdgePosition, expanded) -> GraphEdge:
        if edge.source_id in expanded and edge.target_id in expanded:
            style = LineStyle.SOLID
        else:
            style = LineStyle.DOTTED

        if edge.kind is RefKind.REF_TO_PARENT:
            start, end = edge.target_xy, edge.source_xy
        else:
            start, end = edge.source_xy, edge.target_xy

        return GraphEdge(
            edge_id=f"{edge.source_id}->{edge.target_id}:{edge.kind.value}",
            source_id=edge.source_id,
            target_id=edge.target_id,
            start=start,
            end=end,
            thickness=edge_thickness(edge.strength),
            style=style,
            stroke=edge_stroke(edge.kind, style),
            has_arrow=edge.kind.is_hierarchical,
            kind=edge.kind.value
        )
