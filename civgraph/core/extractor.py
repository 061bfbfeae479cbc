"""
Subgraph Extractor
==================

Chooses the bounded region of the full note-link graph to visualise.

RESPONSIBILITY: Round-based traversal from a root, then mirrored-edge
resolution
ALLOWED INPUTS: FullGraph, root id, depth, node/edge predicates
OUTPUTS: Subgraph (immutable)

TRAVERSAL:
==========
Three staged sets - future, active, visited. Each round moves the
unvisited, non-terminator members of future into active, expands every
active node once, then marks it visited. depth bounds the number of rounds,
not the hop count of the final edge list: nodes reached in the last round
and terminators are included but never expanded.

MIRRORED EDGES:
===============
Every relationship inside the explored region is seen twice, once forward
(strength > 0) and once mirrored (strength < 0). Forward records are kept
verbatim. A mirrored record is flipped back and kept only when its forward
pair was never seen, which is exactly the incoming-only case: the forward
endpoint lies outside the explored region.
"""

from __future__ import annotations
from typing import Callable, Dict, Iterable, List, Optional, Set, Tuple
import logging

from ..contracts.base import NodeId, RefKind, GraphInputError
from ..contracts.graph import FullGraph, Subgraph, SubgraphEdge


logger = logging.getLogger(__name__)

RawEdge = Tuple[NodeId, NodeId, RefKind, float]


def parent_child_only(kind: RefKind) -> bool:
    """Edge kind filter restricting expansion to hierarchy references."""
    return kind.is_hierarchical


def _allow_all(_value) -> bool:
    return True


def _never(_node_id) -> bool:
    return False


def resolve_mirrored_edges(raw_edges: Iterable[RawEdge]) -> List[SubgraphEdge]:
    """
    Collapse forward/mirrored record pairs into single positive edges.
    
    Two passes; the second must see every forward pair collected by the
    first, so the input is materialised.
    """
    raw_edges = list(raw_edges)
    forward_pairs: Set[Tuple[NodeId, NodeId]] = set()
    resolved: List[SubgraphEdge] = []
    
    for from_id, to_id, kind, strength in raw_edges:
        if strength > 0:
            resolved.append(SubgraphEdge(from_id, to_id, strength, kind))
            forward_pairs.add((from_id, to_id))
    
    for from_id, to_id, kind, strength in raw_edges:
        if strength < 0 and (to_id, from_id) not in forward_pairs:
            # incoming only
            resolved.append(SubgraphEdge(to_id, from_id, -strength, kind.opposing()))
    
    return resolved


class SubgraphExtractor:
    """
    Bounded breadth-first extraction over a FullGraph.
    
    Stateless: one extractor can serve any number of views.
    """
    
    def extract(
        self,
        full_graph: FullGraph,
        root_id: NodeId,
        depth: int,
        node_filter: Optional[Callable[[NodeId], bool]] = None,
        edge_kind_filter: Optional[Callable[[RefKind], bool]] = None,
        is_terminator: Optional[Callable[[NodeId], bool]] = None
    ) -> Subgraph:
        """
        Compute the nodes and deduplicated edges around root_id.
        
        Args:
            full_graph: Adjacency of the whole knowledge base
            root_id: Node to start from
            depth: Number of expansion rounds
            node_filter: Nodes failing it are never visited or linked
            edge_kind_filter: Adjacency records whose kind fails it are skipped
            is_terminator: Nodes for which it holds are included but not expanded
        """
        if depth < 0:
            raise GraphInputError(f"depth must be non-negative, got {depth}")
        
        node_filter = node_filter or _allow_all
        edge_kind_filter = edge_kind_filter or _allow_all
        is_terminator = is_terminator or _never
        
        if not node_filter(root_id):
            logger.debug("root %r rejected by node filter", root_id)
            return Subgraph.empty(root_id)
        
        # dicts as insertion-ordered sets
        future: Dict[NodeId, None] = {root_id: None}
        visited: Dict[NodeId, None] = {}
        raw_edges: Dict[RawEdge, None] = {}
        
        for _ in range(depth):
            if not future:
                break
            
            active = [
                node_id for node_id in future
                if node_id not in visited and not is_terminator(node_id)
            ]
            future = {}
            
            for active_id in active:
                for record in full_graph.neighbors(active_id):
                    neighbor_id = record.neighbor_id
                    if not node_filter(neighbor_id) or not edge_kind_filter(record.kind):
                        continue
                    raw_edges[(active_id, neighbor_id, record.kind, record.strength)] = None
                    if neighbor_id not in visited:
                        future[neighbor_id] = None
                visited[active_id] = None
        
        edges = resolve_mirrored_edges(raw_edges)
        
        nodes: Dict[NodeId, None] = {root_id: None}
        for edge in edges:
            nodes[edge.source_id] = None
            nodes[edge.target_id] = None
        
        logger.debug(
            "extracted %d nodes, %d edges around %r (depth %d, %d raw records)",
            len(nodes), len(edges), root_id, depth, len(raw_edges)
        )
        
        return Subgraph(
            root_id=root_id,
            nodes=tuple(nodes),
            edges=tuple(edges),
            expanded_ids=frozenset(visited)
        )
