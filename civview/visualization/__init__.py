from .graph import AvailabilityState, LineStyle, GraphNode, GraphEdge, NetworkGraphView

__all__ = ['AvailabilityState', 'LineStyle', 'GraphNode', 'GraphEdge', 'NetworkGraphView']
