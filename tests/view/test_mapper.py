"""
Graph View Mapper Tests
=======================

INVARIANTS TESTED:
1. Views are built only from LayoutFrame snapshots
2. Edges inside the expanded region are solid, boundary edges dotted
3. Parent references are drawn from parent to child
4. Dimmed elements come first in paint order
"""

import pytest

from civgraph.contracts import (
    EdgePosition, LayoutFrame, NodeCatalog, NodeMetadata, NodePosition,
    RefKind, Subgraph, SubgraphEdge
)
from civview import (
    AvailabilityState, GraphViewMapper, LineStyle, edge_stroke, edge_thickness
)


def make_subgraph():
    return Subgraph(
        root_id=1,
        nodes=(1, 2, 3),
        edges=(
            SubgraphEdge(1, 2, 2, RefKind.REF_TO_PARENT),
            SubgraphEdge(2, 3, 1, RefKind.REF_IN_CONTRAST),
        ),
        expanded_ids=frozenset({1, 2})
    )


def make_frame():
    positions = {1: (0.0, 0.0), 2: (30.0, 0.0), 3: (60.0, 10.0)}
    return LayoutFrame(
        generation=4,
        tick_count=12,
        nodes=tuple(NodePosition(node_id, x, y) for node_id, (x, y) in positions.items()),
        edges=(
            EdgePosition(1, 2, positions[1], positions[2], RefKind.REF_TO_PARENT, 2),
            EdgePosition(2, 3, positions[2], positions[3], RefKind.REF_IN_CONTRAST, 1),
        )
    )


@pytest.fixture
def view():
    catalog = NodeCatalog([NodeMetadata(1, "Root idea", category="ideas")])
    return GraphViewMapper(catalog).map_frame(make_frame(), make_subgraph())


class TestStyling:

    def test_thickness(self):
        assert edge_thickness(1) == 1.5
        assert edge_thickness(4) == 3.0

    def test_strokes(self):
        assert edge_stroke(RefKind.REF, LineStyle.SOLID) == "graph-edge"
        assert edge_stroke(RefKind.REF_CRITICAL, LineStyle.SOLID) == "graph-edge-critical"
        assert edge_stroke(RefKind.REF_IN_CONTRAST, LineStyle.DOTTED) == \
            "graph-edge-in-contrast-dimmed"


class TestGraphViewMapper:

    def test_view_header(self, view):
        assert view.view_id == "graph_1"
        assert view.generation == 4
        assert view.tick_count == 12
        assert view.availability is AvailabilityState.PRESENT

    def test_edge_styles(self, view):
        styles = {(e.source_id, e.target_id): e.style for e in view.edges}
        assert styles[(1, 2)] is LineStyle.SOLID
        assert styles[(2, 3)] is LineStyle.DOTTED

    def test_dotted_edges_painted_first(self, view):
        assert [e.style for e in view.edges] == [LineStyle.DOTTED, LineStyle.SOLID]

    def test_parent_reference_reversed(self, view):
        parent_edge = next(e for e in view.edges if e.kind == "ref_to_parent")
        assert parent_edge.start == (30.0, 0.0)
        assert parent_edge.end == (0.0, 0.0)
        assert parent_edge.has_arrow
        assert parent_edge.thickness == 2.0
        assert parent_edge.edge_id == "1->2:ref_to_parent"

    def test_contrast_edge(self, view):
        edge = next(e for e in view.edges if e.kind == "ref_in_contrast")
        assert edge.start == (30.0, 0.0)
        assert not edge.has_arrow
        assert edge.stroke == "graph-edge-in-contrast-dimmed"

    def test_nodes(self, view):
        assert [n.node_id for n in view.nodes] == [3, 1, 2]
        root = next(n for n in view.nodes if n.node_id == 1)
        assert root.label == "Root idea"
        assert root.category == "ideas"
        assert root.is_focal_point
        boundary = view.nodes[0]
        assert boundary.label == "3"
        assert not boundary.is_focal_point

    def test_missing_frame(self):
        view = GraphViewMapper().map_frame(None, Subgraph.empty(7), view_id="custom")
        assert view.view_id == "custom"
        assert view.availability is AvailabilityState.MISSING
        assert view.nodes == ()

    def test_session_frame_maps(self):
        from civgraph import GraphLayoutSession
        from civgraph.contracts import FullGraph
        from civgraph.temporal import ManualFrameClock

        clock = ManualFrameClock()
        session = GraphLayoutSession(
            FullGraph.from_connections([(1, 2, RefKind.REF_TO_CHILD, 1)]), clock
        )
        session.show(1)
        clock.run_until_idle()

        view = GraphViewMapper(session.catalog).map_frame(session.frame(), session.subgraph)
        assert {n.node_id for n in view.nodes} == {1, 2}
        assert view.edges[0].has_arrow
