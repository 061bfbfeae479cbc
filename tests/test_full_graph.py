"""
Full Graph Contract Tests
=========================

INVARIANTS TESTED:
1. Every connection is stored as a forward/mirrored record pair
2. Mirrored records carry the opposing kind and negated strength
3. The packed wire format decodes every known kind code
4. Malformed input fails fast
"""

import logging

import pytest

from civgraph.contracts import (
    AdjacencyRecord, FullGraph, GraphInputError, NodeCatalog, NodeMetadata, RefKind
)


class TestRefKind:

    def test_parent_child_swap(self):
        assert RefKind.REF_TO_PARENT.opposing() is RefKind.REF_TO_CHILD
        assert RefKind.REF_TO_CHILD.opposing() is RefKind.REF_TO_PARENT

    @pytest.mark.parametrize("kind", [RefKind.REF, RefKind.REF_IN_CONTRAST, RefKind.REF_CRITICAL])
    def test_other_kinds_self_opposing(self, kind):
        assert kind.opposing() is kind

    def test_packed_codes(self):
        assert RefKind.from_packed(0) is RefKind.REF
        assert RefKind.from_packed(-1) is RefKind.REF_TO_PARENT
        assert RefKind.from_packed(1) is RefKind.REF_TO_CHILD
        assert RefKind.from_packed(42) is RefKind.REF_IN_CONTRAST
        assert RefKind.from_packed(99) is RefKind.REF_CRITICAL
        for kind in RefKind:
            assert RefKind.from_packed(kind.packed) is kind


class TestFullGraph:

    def test_connection_is_mirrored(self):
        graph = FullGraph()
        graph.add_connection(1, 2, RefKind.REF_TO_CHILD, 3)

        assert graph.neighbors(1) == (AdjacencyRecord(2, RefKind.REF_TO_CHILD, 3),)
        assert graph.neighbors(2) == (AdjacencyRecord(1, RefKind.REF_TO_PARENT, -3),)
        assert graph.neighbors(1)[0].is_forward
        assert not graph.neighbors(2)[0].is_forward

    def test_insertion_order_kept(self):
        graph = FullGraph.from_connections([
            (1, 3, RefKind.REF, 1),
            (1, 2, RefKind.REF, 1),
        ])
        assert [r.neighbor_id for r in graph.neighbors(1)] == [3, 2]

    def test_identical_records_stored_once(self):
        graph = FullGraph()
        graph.add_connection(1, 2, RefKind.REF, 1)
        graph.add_connection(1, 2, RefKind.REF, 1)
        assert len(graph.neighbors(1)) == 1
        assert len(graph.neighbors(2)) == 1

    def test_unknown_node_has_no_neighbors(self):
        graph = FullGraph()
        assert graph.neighbors(7) == ()
        assert 7 not in graph
        assert len(graph) == 0

    @pytest.mark.parametrize("strength", [0, -1])
    def test_non_positive_strength_rejected(self, strength):
        graph = FullGraph()
        with pytest.raises(GraphInputError):
            graph.add_connection(1, 2, RefKind.REF, strength)

    def test_from_packed(self):
        graph = FullGraph.from_packed([
            10, 20, -1, 2,
            20, 30, 99, 1,
        ])
        assert graph.neighbors(10) == (AdjacencyRecord(20, RefKind.REF_TO_PARENT, 2),)
        assert graph.neighbors(20) == (
            AdjacencyRecord(10, RefKind.REF_TO_CHILD, -2),
            AdjacencyRecord(30, RefKind.REF_CRITICAL, 1),
        )
        assert set(graph.node_ids()) == {10, 20, 30}

    def test_from_packed_unknown_kind_degrades(self, caplog):
        with caplog.at_level(logging.WARNING):
            graph = FullGraph.from_packed([1, 2, 7, 1])
        assert graph.neighbors(1)[0].kind is RefKind.REF
        assert "invalid packed ref kind" in caplog.text

    def test_from_packed_requires_quadruples(self):
        with pytest.raises(GraphInputError):
            FullGraph.from_packed([1, 2, 0])


class TestNodeCatalog:

    def test_unknown_id_resolves_to_bare_metadata(self):
        catalog = NodeCatalog()
        meta = catalog.get(5)
        assert meta.label == "5"
        assert meta.category is None
        assert not catalog.is_terminator(5)

    def test_category_filter(self):
        catalog = NodeCatalog([
            NodeMetadata(1, "one", category="ideas"),
            NodeMetadata(2, "two", category="people"),
        ])
        only_ideas = catalog.category_filter("ideas")
        assert only_ideas(1)
        assert not only_ideas(2)
        assert not only_ideas(3)
        assert catalog.category_filter(None)(2)

    def test_terminator_flag(self):
        catalog = NodeCatalog([NodeMetadata(1, "edge of the map", is_terminator=True)])
        assert catalog.is_terminator(1)
        assert len(catalog) == 1
