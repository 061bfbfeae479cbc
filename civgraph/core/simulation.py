"""
Force Simulation Engine
=======================

Iterative force-directed layout of an extracted subgraph, advanced one
tick per host frame.

RESPONSIBILITY: Node positions for the visible subgraph
ALLOWED INPUTS: SimulationState (built from a Subgraph), frame scheduler
OUTPUTS: LayoutFrame snapshots per tick, running/stopped signal

STATE MACHINE:
==============
Every run() allocates a fresh generation token on the state and returns a
SimulationRun with two states, RUNNING and STOPPED. The host calls step()
once per frame. step() first checks that its generation is still the
state's newest; a superseded run stops silently, without callbacks. A
current run performs exactly one tick and either reports the new frame or
stops and reports "not running".

OWNERSHIP:
==========
Node records belong to the SimulationState. Renderers receive LayoutFrame
copies; the interaction layer may only pin, unpin and set label extents,
and only between frames.
"""

from __future__ import annotations
from collections import Counter
from dataclasses import dataclass, replace
from enum import Enum
from typing import Callable, Dict, Iterable, List, Optional, Tuple
import logging
import math

import numpy as np

from ..contracts.base import NodeId, RefKind, GraphInputError
from ..contracts.graph import Subgraph
from ..contracts.frames import EdgePosition, LayoutFrame, NodePosition
from ..observability import TickRecord, TickRecorder
from ..temporal.clock import FrameScheduler
from .forces import (
    apply_centering, apply_collision, apply_label_collision,
    apply_link_force, apply_many_body, max_abs_velocities
)
from .geometry import is_finite_point, make_rng, spiral_position


logger = logging.getLogger(__name__)


# =============================================================================
# CONFIGURATION
# =============================================================================

ALPHA_MIN = 0.001
ALPHA_DECAY_TICKS = 300
VELOCITY_DECAY = 0.03
LINK_DISTANCE = 30.0
CHARGE = -900.0
DISTANCE_MIN2 = 1.0
COLLIDE_RADIUS = 40.0
LABEL_PUSH_DIVISOR = 32.0
CENTER_STRENGTH_X = 0.1
CENTER_STRENGTH_Y = 0.12
VELOCITY_THRESHOLD = 0.6
WARMUP_TICKS = 5
INITIAL_RADIUS = 10.0


@dataclass(frozen=True)
class SimulationConfig:
    """Physical constants of the layout."""
    alpha_min: float = ALPHA_MIN
    alpha_decay_ticks: int = ALPHA_DECAY_TICKS
    velocity_decay: float = VELOCITY_DECAY
    link_distance: float = LINK_DISTANCE
    charge: float = CHARGE
    distance_min2: float = DISTANCE_MIN2
    collide_radius: float = COLLIDE_RADIUS
    label_push_divisor: float = LABEL_PUSH_DIVISOR
    center_strength_x: float = CENTER_STRENGTH_X
    center_strength_y: float = CENTER_STRENGTH_Y
    velocity_threshold: float = VELOCITY_THRESHOLD
    warmup_ticks: int = WARMUP_TICKS
    initial_radius: float = INITIAL_RADIUS
    seed: Optional[int] = None

    def __post_init__(self):
        if not 0 < self.alpha_min < 1:
            raise ValueError(f"alpha_min must lie in (0, 1), got {self.alpha_min}")
        if self.alpha_decay_ticks <= 0:
            raise ValueError("alpha_decay_ticks must be positive")
        if not 0 <= self.velocity_decay <= 1:
            raise ValueError(f"velocity_decay must lie in [0, 1], got {self.velocity_decay}")
        if self.distance_min2 <= 0:
            raise ValueError("distance_min2 must be positive")
        if self.label_push_divisor == 0:
            raise ValueError("label_push_divisor must be non-zero")

    @property
    def alpha_decay(self) -> float:
        """Per-tick cooling factor reaching alpha_min after alpha_decay_ticks."""
        return 1 - self.alpha_min ** (1 / self.alpha_decay_ticks)


# =============================================================================
# SIMULATION RECORDS
# =============================================================================

@dataclass
class SimulationNode:
    """
    Mutable per-node simulation record.

    fx/fy hold the pinned position while the node is being dragged.
    """
    node_id: NodeId
    x: float = math.nan
    y: float = math.nan
    vx: float = 0.0
    vy: float = 0.0
    fx: Optional[float] = None
    fy: Optional[float] = None
    text_width: float = 0.0
    text_height: float = 0.0

    @property
    def pinned(self) -> bool:
        return self.fx is not None or self.fy is not None


@dataclass(frozen=True)
class SimulationEdge:
    """Edge addressed by node index within one SimulationState."""
    source_index: int
    target_index: int
    strength: float
    kind: RefKind = RefKind.REF

    @property
    def is_self_loop(self) -> bool:
        return self.source_index == self.target_index


@dataclass
class SimulationStats:
    """Cumulative tick count and this tick's per-axis maximum velocity."""
    tick_count: int = 0
    max_velocities: Tuple[float, float] = (0.0, 0.0)


class SimulationState:
    """
    Node set, edge list, statistics and generation counter of one layout.

    At most one generation may mutate the nodes at a time; run() claims the
    state by advancing the generation.
    """

    def __init__(
        self,
        nodes: Iterable[SimulationNode],
        edges: Iterable[SimulationEdge] = ()
    ):
        self._nodes: List[SimulationNode] = list(nodes)
        self._edges: Tuple[SimulationEdge, ...] = tuple(edges)
        self._index: Dict[NodeId, int] = {}
        self._generation = 0
        self.stats = SimulationStats()

        for i, node in enumerate(self._nodes):
            if node.node_id in self._index:
                raise GraphInputError(f"duplicate simulation node {node.node_id!r}")
            self._index[node.node_id] = i

        n = len(self._nodes)
        for edge in self._edges:
            if not (0 <= edge.source_index < n and 0 <= edge.target_index < n):
                raise GraphInputError(f"edge index out of range: {edge}")

    @classmethod
    def from_subgraph(
        cls,
        subgraph: Subgraph,
        previous: Optional[SimulationState] = None
    ) -> SimulationState:
        """
        Build the state for a subgraph.

        Nodes already present in previous keep position, velocity, pin and
        label extent; new nodes start unplaced.
        """
        nodes = []
        for node_id in subgraph.nodes:
            if previous is not None and node_id in previous:
                nodes.append(replace(previous._node(node_id)))
            else:
                nodes.append(SimulationNode(node_id=node_id))

        index = {node.node_id: i for i, node in enumerate(nodes)}
        edges = [
            SimulationEdge(
                source_index=index[edge.source_id],
                target_index=index[edge.target_id],
                strength=edge.strength,
                kind=edge.kind
            )
            for edge in subgraph.edges
        ]
        return cls(nodes, edges)

    # -------------------------------------------------------------------------
    # Read access
    # -------------------------------------------------------------------------

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def edges(self) -> Tuple[SimulationEdge, ...]:
        return self._edges

    @property
    def node_ids(self) -> Tuple[NodeId, ...]:
        return tuple(node.node_id for node in self._nodes)

    @property
    def is_empty(self) -> bool:
        return not self._nodes

    def __len__(self) -> int:
        return len(self._nodes)

    def __contains__(self, node_id: object) -> bool:
        return node_id in self._index

    def index_of(self, node_id: NodeId) -> int:
        return self._index[node_id]

    def position(self, node_id: NodeId) -> Tuple[float, float]:
        node = self._node(node_id)
        return (node.x, node.y)

    def velocity(self, node_id: NodeId) -> Tuple[float, float]:
        node = self._node(node_id)
        return (node.vx, node.vy)

    def is_pinned(self, node_id: NodeId) -> bool:
        return self._node(node_id).pinned

    def snapshot(self) -> LayoutFrame:
        """Immutable copy of every position, for renderers."""
        nodes = tuple(
            NodePosition(
                node_id=node.node_id,
                x=node.x,
                y=node.y,
                text_width=node.text_width,
                text_height=node.text_height,
                pinned=node.pinned
            )
            for node in self._nodes
        )
        edges = tuple(
            EdgePosition(
                source_id=self._nodes[edge.source_index].node_id,
                target_id=self._nodes[edge.target_index].node_id,
                source_xy=(nodes[edge.source_index].x, nodes[edge.source_index].y),
                target_xy=(nodes[edge.target_index].x, nodes[edge.target_index].y),
                kind=edge.kind,
                strength=edge.strength
            )
            for edge in self._edges
        )
        return LayoutFrame(
            generation=self._generation,
            tick_count=self.stats.tick_count,
            nodes=nodes,
            edges=edges,
            max_velocities=self.stats.max_velocities
        )

    # -------------------------------------------------------------------------
    # Interaction (between frames only)
    # -------------------------------------------------------------------------

    def pin(self, node_id: NodeId, x: float, y: float) -> None:
        """Fix a node at (x, y) until unpinned."""
        node = self._node(node_id)
        node.fx = x
        node.fy = y

    def unpin(self, node_id: NodeId) -> None:
        node = self._node(node_id)
        node.fx = None
        node.fy = None

    def set_label_extent(self, node_id: NodeId, width: float, height: float) -> None:
        """Record the rendered size of a node's label."""
        node = self._node(node_id)
        node.text_width = width
        node.text_height = height

    def invalidate(self) -> int:
        """Retire the current generation; pending frames become no-ops."""
        return self._advance_generation()

    # -------------------------------------------------------------------------
    # Engine access
    # -------------------------------------------------------------------------

    def _node(self, node_id: NodeId) -> SimulationNode:
        try:
            return self._nodes[self._index[node_id]]
        except KeyError:
            raise GraphInputError(f"unknown simulation node {node_id!r}") from None

    def _advance_generation(self) -> int:
        self._generation += 1
        return self._generation


# =============================================================================
# INITIALISATION
# =============================================================================

def place_nodes(nodes: List[SimulationNode], initial_radius: float) -> None:
    """
    Snap pinned nodes to their pin and give unplaced nodes a spiral position.

    A node is unplaced when its position is not finite or is shared exactly
    with another node (fresh nodes all arrive at the same point).
    """
    for node in nodes:
        if node.fx is not None:
            node.x = node.fx
        if node.fy is not None:
            node.y = node.fy

    occupied = Counter(
        (node.x, node.y) for node in nodes if is_finite_point(node.x, node.y)
    )
    for index, node in enumerate(nodes):
        if node.pinned:
            continue
        if not is_finite_point(node.x, node.y) or occupied[(node.x, node.y)] > 1:
            node.x, node.y = spiral_position(index, initial_radius)

    for node in nodes:
        if not (math.isfinite(node.vx) and math.isfinite(node.vy)):
            node.vx = node.vy = 0.0


def initialize_graph(
    state: SimulationState,
    config: SimulationConfig
) -> Tuple[List[SimulationEdge], List[float], List[float]]:
    """
    Prepare a state for a run.

    Returns the edges that carry link force (self-loops excluded), the bias
    of each (share of the correction applied to the target) and its
    strength.
    """
    place_nodes(state._nodes, config.initial_radius)

    links = [edge for edge in state.edges if not edge.is_self_loop]

    count: Counter = Counter()
    for edge in links:
        count[edge.source_index] += 1
        count[edge.target_index] += 1

    bias = [
        count[edge.source_index] / (count[edge.source_index] + count[edge.target_index])
        for edge in links
    ]
    strengths = [
        1 / min(count[edge.source_index], count[edge.target_index])
        for edge in links
    ]
    return links, bias, strengths


# =============================================================================
# RUN STATE MACHINE
# =============================================================================

class RunState(Enum):
    RUNNING = "running"
    STOPPED = "stopped"


TickCallback = Callable[[LayoutFrame, int], None]
RunningCallback = Callable[[bool], None]


class SimulationRun:
    """
    One generation of a simulation.

    step() is the only transition and is called once per frame.
    """

    def __init__(
        self,
        state: SimulationState,
        generation: int,
        config: SimulationConfig,
        rng: np.random.Generator,
        on_tick: Optional[TickCallback] = None,
        on_running_changed: Optional[RunningCallback] = None,
        recorder: Optional[TickRecorder] = None
    ):
        self._state = state
        self._generation = generation
        self._config = config
        self._rng = rng
        self._on_tick = on_tick
        self._on_running_changed = on_running_changed
        self._recorder = recorder

        self._alpha = 1.0
        self._status = RunState.RUNNING
        self._links, self._bias, self._strengths = initialize_graph(state, config)

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def alpha(self) -> float:
        return self._alpha

    @property
    def status(self) -> RunState:
        return self._status

    @property
    def is_running(self) -> bool:
        return self._status is RunState.RUNNING

    @property
    def is_current(self) -> bool:
        return self._generation == self._state.generation

    @property
    def bias(self) -> Tuple[float, ...]:
        return tuple(self._bias)

    @property
    def strengths(self) -> Tuple[float, ...]:
        return tuple(self._strengths)

    def step(self) -> bool:
        """
        Advance by one frame.

        Returns True when another frame should be scheduled.
        """
        if self._status is RunState.STOPPED:
            return False

        if not self.is_current:
            logger.debug(
                "generation %d superseded by %d", self._generation, self._state.generation
            )
            self._status = RunState.STOPPED
            return False

        if self._tick():
            if self._on_tick is not None:
                self._on_tick(self._state.snapshot(), self._generation)
            return True

        logger.debug(
            "generation %d settled after %d ticks", self._generation, self._state.stats.tick_count
        )
        self._status = RunState.STOPPED
        if self._on_running_changed is not None:
            self._on_running_changed(False)
        return False

    def run_to_completion(self, max_frames: int = 100_000) -> int:
        """Step without a scheduler until stopped; returns frames stepped."""
        frames = 0
        while frames < max_frames and self.step():
            frames += 1
        return frames

    def _tick(self) -> bool:
        config = self._config
        nodes = self._state._nodes
        stats = self._state.stats
        rng = self._rng

        stats.tick_count += 1
        stats.max_velocities = (0.0, 0.0)

        self._alpha -= self._alpha * config.alpha_decay
        alpha = self._alpha

        apply_link_force(
            nodes, self._links, self._strengths, self._bias,
            alpha, config.link_distance, rng
        )
        apply_many_body(nodes, alpha, config.charge, config.distance_min2, rng)
        apply_collision(nodes, config.collide_radius, rng)
        apply_label_collision(nodes, config.label_push_divisor, rng)
        apply_centering(nodes, alpha, config.center_strength_x, config.center_strength_y)

        stats.max_velocities = max_abs_velocities(nodes)

        for node in nodes:
            if node.fx is None:
                node.vx *= config.velocity_decay
                node.x += node.vx
            else:
                node.x = node.fx
                node.vx = 0.0
                self._alpha = 1.0

            if node.fy is None:
                node.vy *= config.velocity_decay
                node.y += node.vy
            else:
                node.y = node.fy
                node.vy = 0.0
                self._alpha = 1.0

        threshold = config.velocity_threshold
        settled = (
            stats.tick_count > config.warmup_ticks
            and stats.max_velocities[0] < threshold
            and stats.max_velocities[1] < threshold
        )
        continuing = not (self._alpha < config.alpha_min or settled)

        if self._recorder is not None:
            self._recorder.collect(TickRecord(
                generation=self._generation,
                tick_count=stats.tick_count,
                alpha=self._alpha,
                max_velocities=stats.max_velocities,
                continuing=continuing
            ))

        return continuing


# =============================================================================
# ENGINE
# =============================================================================

class SimulationEngine:
    """
    Starts simulation runs and, given a scheduler, drives them frame by frame.

    Without a scheduler the caller owns the loop and calls step() on the
    returned run.
    """

    def __init__(
        self,
        config: Optional[SimulationConfig] = None,
        scheduler: Optional[FrameScheduler] = None,
        recorder: Optional[TickRecorder] = None
    ):
        self._config = config or SimulationConfig()
        self._scheduler = scheduler
        self._recorder = recorder
        self._rng = make_rng(self._config.seed)

    @property
    def config(self) -> SimulationConfig:
        return self._config

    def run(
        self,
        state: SimulationState,
        on_tick: Optional[TickCallback] = None,
        on_running_changed: Optional[RunningCallback] = None
    ) -> Optional[SimulationRun]:
        """
        Start (or supersede) the simulation of a state.

        Returns None, without ticking or signalling, when there is nothing
        to simulate.
        """
        if state.is_empty:
            return None

        if not any(not edge.is_self_loop for edge in state.edges):
            place_nodes(state._nodes, self._config.initial_radius)
            return None

        generation = state._advance_generation()
        run = SimulationRun(
            state, generation, self._config, self._rng,
            on_tick=on_tick,
            on_running_changed=on_running_changed,
            recorder=self._recorder
        )
        logger.debug(
            "starting generation %d over %d nodes, %d edges",
            generation, len(state), len(state.edges)
        )

        if on_running_changed is not None:
            on_running_changed(True)
        if self._scheduler is not None:
            self._schedule(run)
        return run

    def _schedule(self, run: SimulationRun) -> None:
        self._scheduler.request_frame(lambda: self._on_frame(run))

    def _on_frame(self, run: SimulationRun) -> None:
        if run.step():
            self._schedule(run)
