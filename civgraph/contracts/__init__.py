"""
Contracts Layer

Immutable types exchanged between the extractor, the simulation engine
and the view layer.
"""

from .base import NodeId, RefKind, GraphInputError
from .graph import (
    AdjacencyRecord, FullGraph, SubgraphEdge, Subgraph,
    NodeMetadata, NodeCatalog
)
from .frames import NodePosition, EdgePosition, LayoutFrame

__all__ = [
    'NodeId',
    'RefKind',
    'GraphInputError',
    'AdjacencyRecord',
    'FullGraph',
    'SubgraphEdge',
    'Subgraph',
    'NodeMetadata',
    'NodeCatalog',
    'NodePosition',
    'EdgePosition',
    'LayoutFrame',
]
