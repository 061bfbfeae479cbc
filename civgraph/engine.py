"""
Session Orchestration Module

This module provides the single interface an interactive graph view talks
to: choose what to show, drag nodes, receive frames.

DESIGN PRINCIPLES:
==================
1. Data flows one way: FullGraph -> Subgraph -> SimulationState -> LayoutFrame
2. Each view owns its own SimulationState and generation counter
3. The interaction layer mutates nothing but pins and label extents
4. Switching subgraphs retires the old state so its frames become no-ops
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Callable, Optional
import logging

from .contracts.base import NodeId, GraphInputError
from .contracts.frames import LayoutFrame
from .contracts.graph import FullGraph, NodeCatalog, Subgraph
from .core.extractor import SubgraphExtractor, parent_child_only
from .core.simulation import (
    SimulationConfig, SimulationEngine, SimulationRun, SimulationState
)
from .core.topology import GraphMetrics, TopologyEngine
from .observability import TickRecorder
from .temporal.clock import FrameScheduler


logger = logging.getLogger(__name__)

DEFAULT_DEPTH = 2


@dataclass
class LayoutConfig:
    """Unified configuration for a graph view."""
    simulation: SimulationConfig = None
    default_depth: int = DEFAULT_DEPTH

    def __post_init__(self):
        self.simulation = self.simulation or SimulationConfig()
        if self.default_depth < 0:
            raise ValueError(f"default_depth must be non-negative, got {self.default_depth}")


FrameListener = Callable[[LayoutFrame], None]
RunningListener = Callable[[bool], None]


class GraphLayoutSession:
    """
    Connectivity graph of one view.

    LAYER FLOW:
    ===========
    1. show(): FullGraph -> Subgraph (extractor)
    2. Subgraph -> SimulationState (positions carried over)
    3. SimulationEngine run, one tick per scheduler frame
    4. Every tick: LayoutFrame -> on_frame listener
    """

    def __init__(
        self,
        full_graph: FullGraph,
        scheduler: FrameScheduler,
        catalog: Optional[NodeCatalog] = None,
        config: Optional[LayoutConfig] = None,
        on_frame: Optional[FrameListener] = None,
        on_running_changed: Optional[RunningListener] = None,
        recorder: Optional[TickRecorder] = None
    ):
        self._full_graph = full_graph
        self._catalog = catalog or NodeCatalog()
        self._config = config or LayoutConfig()
        self._on_frame = on_frame
        self._on_running_changed = on_running_changed

        self._extractor = SubgraphExtractor()
        self._engine = SimulationEngine(self._config.simulation, scheduler, recorder)
        self._topology = TopologyEngine()

        self._subgraph: Optional[Subgraph] = None
        self._state: Optional[SimulationState] = None
        self._run: Optional[SimulationRun] = None
        self._running = False

    # =========================================================================
    # SUBGRAPH SELECTION
    # =========================================================================

    def show(
        self,
        root_id: NodeId,
        depth: Optional[int] = None,
        category: Optional[str] = None,
        parent_child_only_edges: bool = False
    ) -> Subgraph:
        """
        Extract the subgraph around root_id and lay it out.

        Nodes that were already visible keep their place.
        """
        depth = self._config.default_depth if depth is None else depth
        subgraph = self._extractor.extract(
            self._full_graph,
            root_id,
            depth,
            node_filter=self._catalog.category_filter(category),
            edge_kind_filter=parent_child_only if parent_child_only_edges else None,
            is_terminator=self._catalog.is_terminator
        )

        previous = self._state
        if previous is not None:
            previous.invalidate()

        self._subgraph = subgraph
        self._state = SimulationState.from_subgraph(subgraph, previous)
        self._topology.build_graph(subgraph)
        self._start()
        return subgraph

    # =========================================================================
    # INTERACTION
    # =========================================================================

    def begin_drag(self, node_id: NodeId, x: float, y: float) -> None:
        """Pin a node under the pointer; wakes a settled simulation."""
        state = self._require_state()
        state.pin(node_id, x, y)
        if not self._running:
            self._start()

    def drag_to(self, node_id: NodeId, x: float, y: float) -> None:
        self._require_state().pin(node_id, x, y)

    def end_drag(self, node_id: NodeId) -> None:
        self._require_state().unpin(node_id)

    def set_label_extent(self, node_id: NodeId, width: float, height: float) -> None:
        self._require_state().set_label_extent(node_id, width, height)

    def close(self) -> None:
        """Detach from the view; frames already scheduled become no-ops."""
        if self._state is not None:
            self._state.invalidate()
        self._run = None
        self._set_running(False)

    # =========================================================================
    # READ ACCESS
    # =========================================================================

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def subgraph(self) -> Optional[Subgraph]:
        return self._subgraph

    @property
    def catalog(self) -> NodeCatalog:
        return self._catalog

    @property
    def current_run(self) -> Optional[SimulationRun]:
        return self._run

    def frame(self) -> Optional[LayoutFrame]:
        """Latest snapshot of the current state."""
        if self._state is None:
            return None
        return self._state.snapshot()

    def metrics(self) -> GraphMetrics:
        return self._topology.compute_metrics()

    # =========================================================================
    # INTERNALS
    # =========================================================================

    def _start(self) -> None:
        state = self._state
        self._run = self._engine.run(
            state,
            on_tick=self._handle_tick,
            on_running_changed=self._set_running
        )
        if self._run is None:
            # nothing to simulate; positions are final already
            self._set_running(False)
            self._emit(state.snapshot())

    def _handle_tick(self, frame: LayoutFrame, generation: int) -> None:
        if self._state is None or generation != self._state.generation:
            return
        self._emit(frame)

    def _emit(self, frame: LayoutFrame) -> None:
        if self._on_frame is not None:
            self._on_frame(frame)

    def _set_running(self, running: bool) -> None:
        if running == self._running:
            return
        self._running = running
        logger.debug("simulation %s", "running" if running else "stopped")
        if self._on_running_changed is not None:
            self._on_running_changed(running)

    def _require_state(self) -> SimulationState:
        if self._state is None:
            raise GraphInputError("no subgraph shown yet")
        return self._state
