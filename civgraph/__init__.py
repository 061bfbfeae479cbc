"""
civgraph: connectivity-graph layout engine.

Extracts a bounded subgraph from the note-link graph and lays it out with
a frame-driven force simulation.
"""

from .engine import GraphLayoutSession, LayoutConfig

__version__ = "0.1.0"

__all__ = ['GraphLayoutSession', 'LayoutConfig', '__version__']
