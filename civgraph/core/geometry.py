"""
Geometry helpers shared by the force simulation.
"""

from __future__ import annotations
from typing import Optional, Tuple
import math

import numpy as np


# Golden angle: successive spiral points never line up radially
INITIAL_ANGLE = math.pi * (3 - math.sqrt(5))

JIGGLE_SCALE = 1e-6


def make_rng(seed: Optional[int] = None) -> np.random.Generator:
    return np.random.default_rng(seed)


def jiggle(rng: np.random.Generator) -> float:
    """
    Microscopic random offset in (-5e-7, 5e-7), never exactly zero.
    
    Used wherever two nodes coincide and a direction has to be invented.
    """
    return (rng.random() - 0.5) * JIGGLE_SCALE or JIGGLE_SCALE * 0.5


def jiggle_array(rng: np.random.Generator, shape) -> np.ndarray:
    values = (rng.random(shape) - 0.5) * JIGGLE_SCALE
    return np.where(values == 0.0, JIGGLE_SCALE * 0.5, values)


def spiral_position(index: int, base_radius: float) -> Tuple[float, float]:
    """Deterministic starting point for the index-th unplaced node."""
    radius = base_radius * math.sqrt(0.5 + index)
    angle = index * INITIAL_ANGLE
    return (radius * math.cos(angle), radius * math.sin(angle))


def is_finite_point(x: float, y: float) -> bool:
    return math.isfinite(x) and math.isfinite(y)


def distance(a: Tuple[float, float], b: Tuple[float, float]) -> float:
    return math.hypot(b[0] - a[0], b[1] - a[1])


def spans_overlap(start_a: float, length_a: float, start_b: float, length_b: float) -> bool:
    """
    Overlap of two 1-D spans anchored at their left edge.
    
    Covers partial overlap from either side and full enclosure.
    """
    if start_a < start_b and start_a + length_a > start_b:
        return True
    if start_a >= start_b and start_a + length_a < start_b + length_b:
        return True
    if start_b < start_a and start_b + length_b > start_a:
        return True
    if start_b >= start_a and start_b + length_b < start_a + length_a:
        return True
    return False


def labels_overlap(
    xa: float, ya: float, width_a: float, height_a: float,
    xb: float, yb: float, width_b: float, height_b: float
) -> bool:
    """
    Label boxes overlap when they overlap on both axes.

    Boxes sharing a top edge overlap vertically.
    """
    overlapping_y = (
        ya == yb
        or (ya < yb and ya + height_a > yb)
        or (yb < ya and yb + height_b > ya)
    )
    return overlapping_y and spans_overlap(xa, width_a, xb, width_b)
