"""
Graph Contracts
===============

Adjacency, subgraph and node-metadata types shared by the extractor,
the simulation and the view layer.

INVARIANTS:
- FullGraph stores every relationship twice: a forward record with positive
  strength on the source, a mirrored record with negative strength and the
  opposing kind on the target
- Subgraph edges always carry strength > 0
"""

from __future__ import annotations
from collections import Counter
from dataclasses import dataclass, field
from typing import Callable, Dict, FrozenSet, Iterable, Iterator, List, Optional, Sequence, Tuple
import logging

from .base import NodeId, RefKind, GraphInputError


logger = logging.getLogger(__name__)


# =============================================================================
# FULL GRAPH (process-wide, read-mostly)
# =============================================================================

@dataclass(frozen=True)
class AdjacencyRecord:
    """One directed view of a relationship, as seen from its owning node."""
    neighbor_id: NodeId
    kind: RefKind
    strength: float
    
    @property
    def is_forward(self) -> bool:
        return self.strength > 0


class FullGraph:
    """
    Adjacency structure over every note-link in the knowledge base.
    
    Built once per page view and only read afterwards.
    """
    
    def __init__(self):
        self._links: Dict[NodeId, List[AdjacencyRecord]] = {}
    
    def add_connection(
        self,
        from_id: NodeId,
        to_id: NodeId,
        kind: RefKind,
        strength: float
    ) -> None:
        """Insert one relationship as a forward/mirrored record pair."""
        if not strength > 0:
            raise GraphInputError(
                f"canonical strength must be positive, got {strength!r} "
                f"for {from_id!r} -> {to_id!r}"
            )
        self._append(from_id, AdjacencyRecord(to_id, kind, strength))
        self._append(to_id, AdjacencyRecord(from_id, kind.opposing(), -strength))
    
    def _append(self, owner: NodeId, record: AdjacencyRecord) -> None:
        records = self._links.setdefault(owner, [])
        if record not in records:
            records.append(record)
    
    def neighbors(self, node_id: NodeId) -> Tuple[AdjacencyRecord, ...]:
        """Adjacency records of a node, in insertion order (empty if unknown)."""
        return tuple(self._links.get(node_id, ()))
    
    def node_ids(self) -> Tuple[NodeId, ...]:
        return tuple(self._links)
    
    def __contains__(self, node_id: object) -> bool:
        return node_id in self._links
    
    def __len__(self) -> int:
        return len(self._links)
    
    @classmethod
    def from_connections(
        cls,
        connections: Iterable[Tuple[NodeId, NodeId, RefKind, float]]
    ) -> FullGraph:
        graph = cls()
        for from_id, to_id, kind, strength in connections:
            graph.add_connection(from_id, to_id, kind, strength)
        return graph
    
    @classmethod
    def from_packed(cls, packed: Sequence[int]) -> FullGraph:
        """
        Decode the flat wire format: repeated (from, to, packed_kind, strength).
        
        Unknown kind codes degrade to a plain reference.
        """
        if len(packed) % 4 != 0:
            raise GraphInputError(
                f"packed connections must come in quadruples, got {len(packed)} values"
            )
        
        graph = cls()
        for i in range(0, len(packed), 4):
            from_id, to_id, code, strength = packed[i:i + 4]
            try:
                kind = RefKind.from_packed(code)
            except KeyError:
                logger.warning("invalid packed ref kind %r on %r -> %r", code, from_id, to_id)
                kind = RefKind.REF
            graph.add_connection(from_id, to_id, kind, strength)
        return graph


# =============================================================================
# SUBGRAPH (extractor output, simulation input)
# =============================================================================

@dataclass(frozen=True)
class SubgraphEdge:
    """Deduplicated edge of an extracted subgraph."""
    source_id: NodeId
    target_id: NodeId
    strength: float
    kind: RefKind
    
    def __post_init__(self):
        if not self.strength > 0:
            raise GraphInputError(f"subgraph edge strength must be positive: {self}")
    
    @property
    def is_self_loop(self) -> bool:
        return self.source_id == self.target_id


@dataclass(frozen=True)
class Subgraph:
    """
    Bounded region of the full graph chosen for display.
    
    nodes keeps discovery order so that layout initialisation is repeatable.
    """
    root_id: NodeId
    nodes: Tuple[NodeId, ...]
    edges: Tuple[SubgraphEdge, ...]
    expanded_ids: FrozenSet[NodeId] = field(default_factory=frozenset)
    
    def __post_init__(self):
        known = set(self.nodes)
        if len(known) != len(self.nodes):
            raise GraphInputError("subgraph nodes must be unique")
        for edge in self.edges:
            if edge.source_id not in known or edge.target_id not in known:
                raise GraphInputError(f"edge endpoint outside subgraph: {edge}")
    
    def __contains__(self, node_id: object) -> bool:
        return node_id in self.nodes
    
    def __iter__(self) -> Iterator[NodeId]:
        return iter(self.nodes)
    
    @property
    def is_empty(self) -> bool:
        return not self.nodes
    
    def degrees(self) -> Counter:
        """Incident edge count per node; self-loops are not counted."""
        count: Counter = Counter()
        for edge in self.edges:
            if edge.is_self_loop:
                continue
            count[edge.source_id] += 1
            count[edge.target_id] += 1
        return count
    
    @classmethod
    def empty(cls, root_id: NodeId) -> Subgraph:
        return cls(root_id=root_id, nodes=(), edges=())


# =============================================================================
# NODE METADATA
# =============================================================================

@dataclass(frozen=True)
class NodeMetadata:
    """Display and traversal metadata for one node (deck)."""
    node_id: NodeId
    label: str
    category: Optional[str] = None
    is_terminator: bool = False


class NodeCatalog:
    """
    Metadata lookup by node id.
    
    Unknown ids resolve to a bare record so that the graph stays drawable
    while metadata is still loading.
    """
    
    def __init__(self, entries: Iterable[NodeMetadata] = ()):
        self._entries: Dict[NodeId, NodeMetadata] = {}
        for entry in entries:
            self._entries[entry.node_id] = entry
    
    def add(self, entry: NodeMetadata) -> None:
        self._entries[entry.node_id] = entry
    
    def get(self, node_id: NodeId) -> NodeMetadata:
        entry = self._entries.get(node_id)
        if entry is None:
            return NodeMetadata(node_id=node_id, label=str(node_id))
        return entry
    
    def is_terminator(self, node_id: NodeId) -> bool:
        return self.get(node_id).is_terminator
    
    def category_filter(self, category: Optional[str]) -> Callable[[NodeId], bool]:
        """Node filter admitting only one category; None admits everything."""
        if category is None:
            return lambda node_id: True
        return lambda node_id: self.get(node_id).category == category
    
    def __len__(self) -> int:
        return len(self._entries)
