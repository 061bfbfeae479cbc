"""
Per-tick Forces
===============

Each force reads node positions and adds to node velocities in place.
Positions only change during integration, after every force has run.

Forces run in a fixed order every tick:
link -> many-body -> collision -> label collision -> centering
"""

from __future__ import annotations
from typing import TYPE_CHECKING, List, Sequence, Tuple
import math

import numpy as np

from .geometry import jiggle, jiggle_array, labels_overlap

if TYPE_CHECKING:
    from .simulation import SimulationEdge, SimulationNode


def apply_link_force(
    nodes: List[SimulationNode],
    edges: Sequence[SimulationEdge],
    strengths: Sequence[float],
    bias: Sequence[float],
    alpha: float,
    distance: float,
    rng: np.random.Generator
) -> None:
    """
    Pull (or push) linked nodes toward the rest distance.

    The correction is shared between the endpoints by bias, so that the
    better connected endpoint moves less. Edges are processed in order and
    each one sees the velocities left by the previous ones.
    """
    for edge, strength, b in zip(edges, strengths, bias):
        source = nodes[edge.source_index]
        target = nodes[edge.target_index]

        x = target.x + target.vx - source.x - source.vx or jiggle(rng)
        y = target.y + target.vy - source.y - source.vy or jiggle(rng)
        length = math.sqrt(x * x + y * y)
        length = (length - distance) / length * alpha * strength
        x *= length
        y *= length

        target.vx -= x * b
        target.vy -= y * b
        source.vx += x * (1 - b)
        source.vy += y * (1 - b)


def apply_many_body(
    nodes: List[SimulationNode],
    alpha: float,
    charge: float,
    distance_min2: float,
    rng: np.random.Generator
) -> None:
    """
    Inverse-square repulsion over every ordered pair of distinct nodes.

    Row a of the pair matrices holds the push node a receives from every
    other node, so each node accumulates each neighbour exactly once.
    """
    n = len(nodes)
    if n < 2:
        return

    xs = np.fromiter((node.x for node in nodes), dtype=float, count=n)
    ys = np.fromiter((node.y for node in nodes), dtype=float, count=n)

    dx = xs[np.newaxis, :] - xs[:, np.newaxis]
    dy = ys[np.newaxis, :] - ys[:, np.newaxis]
    d2 = dx * dx + dy * dy

    # coincident axes get a jiggle so the direction is never undefined
    jx = jiggle_array(rng, (n, n))
    jy = jiggle_array(rng, (n, n))
    d2 = d2 + np.where(dx == 0.0, jx * jx, 0.0) + np.where(dy == 0.0, jy * jy, 0.0)
    d2 = np.where(d2 < distance_min2, np.sqrt(distance_min2 * d2), d2)

    w = charge * alpha / d2
    np.fill_diagonal(w, 0.0)

    push_x = (dx * w).sum(axis=1)
    push_y = (dy * w).sum(axis=1)
    for node, px, py in zip(nodes, push_x, push_y):
        node.vx += float(px)
        node.vy += float(py)


def apply_collision(
    nodes: List[SimulationNode],
    radius: float,
    rng: np.random.Generator
) -> None:
    """
    Separate nodes whose circles will overlap after this tick's motion.

    All nodes share one radius, so each side of a pair takes half the push.
    """
    reach = radius + radius
    ri2 = radius * radius
    rj2 = radius * radius
    weight = rj2 / (ri2 + rj2)

    n = len(nodes)
    for j in range(n):
        node_b = nodes[j]
        for i in range(j + 1, n):
            node_a = nodes[i]

            x = (node_a.x + node_a.vx) - (node_b.x + node_b.vx)
            y = (node_a.y + node_a.vy) - (node_b.y + node_b.vy)
            l = x * x + y * y
            if l >= reach * reach:
                continue

            if x == 0:
                x = jiggle(rng)
                l += x * x
            if y == 0:
                y = jiggle(rng)
                l += y * y

            l = math.sqrt(l)
            l = (reach - l) / l
            x *= l
            y *= l

            node_a.vx += x * weight
            node_a.vy += y * weight
            node_b.vx -= x * (1 - weight)
            node_b.vy -= y * (1 - weight)


def apply_label_collision(
    nodes: List[SimulationNode],
    push_divisor: float,
    rng: np.random.Generator
) -> None:
    """
    Nudge overlapping text labels apart vertically.

    Only nodes whose label extent has been measured take part.
    """
    n = len(nodes)
    for j in range(n):
        node_b = nodes[j]
        if not (node_b.text_width and node_b.text_height):
            continue
        for i in range(j + 1, n):
            node_a = nodes[i]
            if not (node_a.text_width and node_a.text_height):
                continue

            if not labels_overlap(
                node_a.x, node_a.y, node_a.text_width, node_a.text_height,
                node_b.x, node_b.y, node_b.text_width, node_b.text_height
            ):
                continue

            if node_a.y == node_b.y:
                node_a.vy -= jiggle(rng)
                node_b.vy += jiggle(rng)
            else:
                gap = (node_b.y - node_a.y) / push_divisor
                node_a.vy -= gap
                node_b.vy += gap


def apply_centering(
    nodes: List[SimulationNode],
    alpha: float,
    strength_x: float,
    strength_y: float,
    center: Tuple[float, float] = (0.0, 0.0)
) -> None:
    """Pull every node toward the centre, separately per axis."""
    cx, cy = center
    for node in nodes:
        node.vx += (cx - node.x) * strength_x * alpha
        node.vy += (cy - node.y) * strength_y * alpha


def max_abs_velocities(nodes: List[SimulationNode]) -> Tuple[float, float]:
    """Largest absolute velocity per axis."""
    if not nodes:
        return (0.0, 0.0)
    vx = np.fromiter((node.vx for node in nodes), dtype=float, count=len(nodes))
    vy = np.fromiter((node.vy for node in nodes), dtype=float, count=len(nodes))
    return (float(np.abs(vx).max()), float(np.abs(vy).max()))
