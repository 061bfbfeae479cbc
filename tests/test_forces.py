"""
Force Tests
===========

Each force in isolation, on hand-computed two-node configurations.

INVARIANTS TESTED:
1. Forces only touch velocities, never positions
2. Link correction is shared by bias
3. Repulsion and collision are symmetric for equal nodes
4. Label pushes act on y only
"""

import pytest

from civgraph.core.forces import (
    apply_centering, apply_collision, apply_label_collision,
    apply_link_force, apply_many_body, max_abs_velocities
)
from civgraph.core.geometry import make_rng
from civgraph.core.simulation import SimulationEdge, SimulationNode


def make_nodes(*points):
    return [SimulationNode(node_id=i, x=x, y=y) for i, (x, y) in enumerate(points)]


@pytest.fixture
def rng():
    return make_rng(0)


class TestLinkForce:

    def test_stretched_link_pulls_both_ends(self, rng):
        nodes = make_nodes((0.0, 0.0), (60.0, 0.0))
        edges = [SimulationEdge(0, 1, 1.0)]

        apply_link_force(nodes, edges, [1.0], [0.5], alpha=1.0, distance=30.0, rng=rng)

        assert nodes[0].vx == pytest.approx(15.0)
        assert nodes[1].vx == pytest.approx(-15.0)
        assert nodes[0].vy == nodes[1].vy == 0.0
        assert nodes[1].x == 60.0

    def test_compressed_link_pushes(self, rng):
        nodes = make_nodes((0.0, 0.0), (10.0, 0.0))

        apply_link_force(nodes, [SimulationEdge(0, 1, 1.0)], [1.0], [0.5], 1.0, 30.0, rng)

        assert nodes[0].vx < 0
        assert nodes[1].vx > 0

    def test_bias_shifts_correction(self, rng):
        nodes = make_nodes((0.0, 0.0), (60.0, 0.0))

        apply_link_force(nodes, [SimulationEdge(0, 1, 1.0)], [1.0], [0.25], 1.0, 30.0, rng)

        assert nodes[1].vx == pytest.approx(-7.5)
        assert nodes[0].vx == pytest.approx(22.5)

    def test_alpha_and_strength_scale(self, rng):
        nodes = make_nodes((0.0, 0.0), (60.0, 0.0))

        apply_link_force(nodes, [SimulationEdge(0, 1, 1.0)], [0.5], [0.5], 0.5, 30.0, rng)

        assert nodes[1].vx == pytest.approx(-3.75)

    def test_coincident_ends_stay_finite(self, rng):
        nodes = make_nodes((5.0, 5.0), (5.0, 5.0))

        apply_link_force(nodes, [SimulationEdge(0, 1, 1.0)], [1.0], [0.5], 1.0, 30.0, rng)

        for node in nodes:
            assert abs(node.vx) < float("inf")
            assert abs(node.vy) < float("inf")


class TestManyBody:

    def test_pair_repels(self, rng):
        nodes = make_nodes((0.0, 0.0), (10.0, 0.0))

        apply_many_body(nodes, alpha=1.0, charge=-900.0, distance_min2=1.0, rng=rng)

        assert nodes[0].vx == pytest.approx(-90.0)
        assert nodes[1].vx == pytest.approx(90.0)
        assert nodes[0].vy == pytest.approx(0.0)

    def test_single_node_untouched(self, rng):
        nodes = make_nodes((3.0, 4.0))
        apply_many_body(nodes, 1.0, -900.0, 1.0, rng)
        assert (nodes[0].vx, nodes[0].vy) == (0.0, 0.0)

    def test_close_pair_capped(self, rng):
        nodes = make_nodes((0.0, 0.0), (0.5, 0.0))

        apply_many_body(nodes, 1.0, -900.0, 1.0, rng)

        # d2 = 0.25 < 1 is replaced by sqrt(1 * 0.25) = 0.5
        assert nodes[1].vx == pytest.approx(0.5 * 900.0 / 0.5)

    def test_coincident_nodes_separate(self, rng):
        nodes = make_nodes((0.0, 0.0), (0.0, 0.0))

        apply_many_body(nodes, 1.0, -900.0, 1.0, rng)

        for node in nodes:
            assert abs(node.vx) < float("inf")
            assert abs(node.vy) < float("inf")

    def test_three_nodes_accumulate(self, rng):
        nodes = make_nodes((-10.0, 0.0), (0.0, 0.0), (10.0, 0.0))

        apply_many_body(nodes, 1.0, -900.0, 1.0, rng)

        assert nodes[1].vx == pytest.approx(0.0, abs=1e-9)
        assert nodes[0].vx == pytest.approx(-(90.0 + 45.0))
        assert nodes[2].vx == pytest.approx(90.0 + 45.0)


class TestCollision:

    def test_overlapping_pair_separates(self, rng):
        nodes = make_nodes((0.0, 0.0), (10.0, 0.0))

        apply_collision(nodes, radius=40.0, rng=rng)

        assert nodes[0].vx == pytest.approx(-35.0)
        assert nodes[1].vx == pytest.approx(35.0)

    def test_distant_pair_untouched(self, rng):
        nodes = make_nodes((0.0, 0.0), (100.0, 0.0))

        apply_collision(nodes, 40.0, rng)

        assert nodes[0].vx == nodes[1].vx == 0.0

    def test_uses_projected_positions(self, rng):
        # 100 apart now, 70 apart after this tick's motion
        nodes = make_nodes((0.0, 0.0), (100.0, 0.0))
        nodes[1].vx = -30.0

        apply_collision(nodes, 40.0, rng)

        assert nodes[0].vx == pytest.approx(-5.0)
        assert nodes[1].vx == pytest.approx(-30.0 + 5.0)


class TestLabelCollision:

    def measured(self, *points, width=50.0, height=10.0):
        nodes = make_nodes(*points)
        for node in nodes:
            node.text_width = width
            node.text_height = height
        return nodes

    def test_overlapping_labels_pushed_vertically(self, rng):
        nodes = self.measured((0.0, 0.0), (5.0, 4.0))

        apply_label_collision(nodes, push_divisor=32.0, rng=rng)

        assert nodes[0].vy == pytest.approx(-0.125)
        assert nodes[1].vy == pytest.approx(0.125)
        assert nodes[0].vx == nodes[1].vx == 0.0

    def test_same_row_gets_jiggle(self, rng):
        nodes = self.measured((0.0, 0.0), (5.0, 0.0))

        apply_label_collision(nodes, 32.0, rng)

        assert nodes[0].vy != 0.0
        assert nodes[1].vy != 0.0
        assert abs(nodes[0].vy) < 1e-6

    def test_unmeasured_labels_ignored(self, rng):
        nodes = make_nodes((0.0, 0.0), (5.0, 4.0))

        apply_label_collision(nodes, 32.0, rng)

        assert nodes[0].vy == nodes[1].vy == 0.0

    def test_separated_labels_ignored(self, rng):
        nodes = self.measured((0.0, 0.0), (5.0, 40.0))

        apply_label_collision(nodes, 32.0, rng)

        assert nodes[0].vy == nodes[1].vy == 0.0


class TestCentering:

    def test_pull_per_axis(self):
        nodes = make_nodes((10.0, -10.0))

        apply_centering(nodes, alpha=1.0, strength_x=0.1, strength_y=0.12)

        assert nodes[0].vx == pytest.approx(-1.0)
        assert nodes[0].vy == pytest.approx(1.2)

    def test_custom_center(self):
        nodes = make_nodes((0.0, 0.0))

        apply_centering(nodes, 0.5, 0.1, 0.1, center=(20.0, 0.0))

        assert nodes[0].vx == pytest.approx(1.0)


class TestMaxVelocities:

    def test_per_axis_maximum(self):
        nodes = make_nodes((0.0, 0.0), (0.0, 0.0))
        nodes[0].vx, nodes[0].vy = -3.0, 1.0
        nodes[1].vx, nodes[1].vy = 2.0, -4.0

        assert max_abs_velocities(nodes) == (3.0, 4.0)

    def test_empty(self):
        assert max_abs_velocities([]) == (0.0, 0.0)
