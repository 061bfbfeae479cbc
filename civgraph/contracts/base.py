"""
Base Contracts and Shared Types

These are the foundational types used by every layer of the graph engine.
All types here are IMMUTABLE and represent pure data.

BOUNDARY ENFORCEMENT:
=====================
- This module is READ-ONLY from all layers
- Layers may import types but MUST NOT modify this module
"""

from __future__ import annotations
from enum import Enum
from typing import Hashable


# Node identifiers are whatever the data source hands out (deck ids are ints)
NodeId = Hashable


class GraphInputError(ValueError):
    """Raised when graph input data violates a structural contract."""
    pass


# =============================================================================
# REFERENCE KINDS
# =============================================================================

_PACKED_CODES = {
    0: "ref",
    -1: "ref_to_parent",
    1: "ref_to_child",
    42: "ref_in_contrast",
    99: "ref_critical",
}


class RefKind(Enum):
    """
    Kind of reference between two notes.
    
    Traversing a reference from the other endpoint yields its opposing kind:
    parent and child swap, every other kind is its own opposite.
    """
    REF = "ref"
    REF_TO_PARENT = "ref_to_parent"
    REF_TO_CHILD = "ref_to_child"
    REF_IN_CONTRAST = "ref_in_contrast"
    REF_CRITICAL = "ref_critical"
    
    def opposing(self) -> RefKind:
        if self is RefKind.REF_TO_PARENT:
            return RefKind.REF_TO_CHILD
        if self is RefKind.REF_TO_CHILD:
            return RefKind.REF_TO_PARENT
        return self
    
    @property
    def is_hierarchical(self) -> bool:
        """Parent/child references."""
        return self in (RefKind.REF_TO_PARENT, RefKind.REF_TO_CHILD)
    
    @property
    def packed(self) -> int:
        for code, value in _PACKED_CODES.items():
            if value == self.value:
                return code
        raise AssertionError(f"no packed code for {self}")
    
    @classmethod
    def from_packed(cls, code: int) -> RefKind:
        """
        Decode the integer kind used on the wire.
        
        Raises KeyError for codes outside the enumeration; callers decide
        whether to degrade.
        """
        return cls(_PACKED_CODES[code])
