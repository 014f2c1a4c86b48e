"""
Contours through grid nodes, along grid edges and across saddle elements.

Single-element cases use the ``unit_square`` fixture, values given per node:
bl=0 (0,0), br=1 (1,0), tl=2 (0,1), tr=3 (1,1).
"""
import math

import numpy as np
import pytest
from numpy.testing import assert_allclose

from pyslsm import Boundary, Mesh, LevelSet
from pyslsm.utils.diagnostics import check_boundary


def segment_coords(b):
    return sorted(tuple(sorted((tuple(np.round(b.points[s.start].coord, 12)),
                                tuple(np.round(b.points[s.end].coord, 12)))))
                  for s in b.segments)


class TestSaddle:
    def test_centre_inside_joins_inside_corners(self, unit_square):
        # bl and tr inside, centre value 0 counts as inside
        _, ls = unit_square([-1.0, 1.0, 1.0, -1.0])
        b = Boundary().discretise(ls)
        assert b.n_points == 4 and b.n_segments == 2
        assert segment_coords(b) == sorted([
            ((0.0, 0.5), (0.5, 1.0)),
            ((0.5, 0.0), (1.0, 0.5)),
        ])
        assert all(p.n_segments == 1 for p in b.points)
        assert b.compute_area_fractions(ls)[0] == pytest.approx(0.75)

    def test_centre_outside_isolates_inside_corners(self, unit_square):
        _, ls = unit_square([-1.0, 2.0, 2.0, -1.0])
        b = Boundary().discretise(ls)
        assert b.n_segments == 2
        coords = {tuple(np.round(p.coord, 12)) for p in b.points}
        expected = {(0.0, 1 / 3), (1 / 3, 0.0), (1.0, 2 / 3), (2 / 3, 1.0)}
        assert coords == {tuple(np.round(c, 12)) for c in expected}
        # each segment cuts off one inside corner
        for seg in b.segments:
            mid = 0.5 * (b.points[seg.start].coord + b.points[seg.end].coord)
            assert mid[0] + mid[1] == pytest.approx(1 / 3) or mid[0] + mid[1] == pytest.approx(5 / 3)
        assert b.compute_area_fractions(ls)[0] == pytest.approx(1 / 9)

    def test_saddle_points_are_shared_with_neighbours(self):
        # checkerboard of signs on a 2x2 grid, interior saddle everywhere
        mesh = Mesh.structured(2.0, 2.0, nx=2, ny=2)
        phi = np.array([-1.0, 1.0, -1.0,
                        1.0, -1.0, 1.0,
                        -1.0, 1.0, -1.0])
        b = Boundary().discretise(LevelSet(mesh, phi))
        assert b.n_points == 12
        assert b.n_segments == 8
        assert len({p.edge for p in b.points}) == 12
        assert check_boundary(b, log=False).ok


class TestContourThroughNodes:
    def test_contour_along_shared_grid_edge(self):
        mesh = Mesh.structured(2.0, 1.0, nx=2, ny=1)
        ls = LevelSet.from_function(mesh, lambda x, y: x - 1.0)
        b = Boundary().discretise(ls)
        assert b.n_points == 2 and b.n_segments == 1
        seg = b.segments[0]
        assert seg.element == 0
        assert seg.weight == 1.0
        assert seg.length == pytest.approx(1.0)
        assert segment_coords(b) == [((1.0, 0.0), (1.0, 1.0))]
        assert all(p.on_node for p in b.points)

    def test_grid_edge_between_two_material_elements_is_laid_once(self):
        mesh = Mesh.structured(2.0, 1.0, nx=2, ny=1)
        ls = LevelSet(mesh, np.array([-1.0, 0.0, -1.0, -1.0, 0.0, -1.0]))
        b = Boundary().discretise(ls)
        assert b.n_segments == 1
        assert b.length == pytest.approx(1.0)

    def test_contour_along_domain_edge(self, unit_square):
        _, ls = unit_square([0.0, -1.0, 0.0, -1.0])
        b = Boundary().discretise(ls)
        assert b.n_segments == 1
        assert b.segments[0].weight == 0.5
        assert b.length == pytest.approx(0.5)
        for p in b.points:
            assert p.is_domain
            assert p.length == pytest.approx(0.25)
            assert b.compute_perimeter(p) == pytest.approx(1.0)

    def test_void_side_of_a_zero_edge_has_no_segment(self, unit_square):
        _, ls = unit_square([0.0, 1.0, 0.0, 1.0])
        b = Boundary().discretise(ls)
        assert b.n_points == 0 and b.n_segments == 0

    def test_diagonal(self, unit_square):
        _, ls = unit_square([0.0, 1.0, -1.0, 0.0])
        b = Boundary().discretise(ls)
        assert b.n_segments == 1
        assert segment_coords(b) == [((0.0, 0.0), (1.0, 1.0))]
        assert b.length == pytest.approx(math.sqrt(2.0))

    def test_diagonal_between_equal_corners_is_dropped(self, unit_square):
        _, ls = unit_square([0.0, 1.0, 1.0, 0.0])
        b = Boundary().discretise(ls)
        assert b.n_points == 0

    def test_tangent_touch_creates_nothing(self, unit_square):
        _, ls = unit_square([0.0, 1.0, 1.0, 1.0])
        b = Boundary().discretise(ls)
        assert b.n_points == 0 and b.n_segments == 0

    def test_touching_node_next_to_a_crossing(self, unit_square):
        _, ls = unit_square([0.0, 1.0, 1.0, -1.0])
        b = Boundary().discretise(ls)
        assert b.n_points == 2
        assert segment_coords(b) == [((0.5, 1.0), (1.0, 0.5))]
        assert not any(p.on_node for p in b.points)

    def test_two_zero_nodes_and_one_crossing(self, unit_square):
        _, ls = unit_square([0.0, 0.0, -1.0, 1.0])
        b = Boundary().discretise(ls)
        assert b.n_segments == 1
        assert segment_coords(b) == [((0.0, 0.0), (0.5, 1.0))]
        assert b.length == pytest.approx(math.sqrt(1.25))

    def test_three_zero_corners_around_material(self, unit_square):
        # tr inside: the contour follows the left and bottom grid edges
        _, ls = unit_square([0.0, 0.0, 0.0, -1.0])
        b = Boundary().discretise(ls)
        assert b.n_points == 3 and b.n_segments == 2
        assert segment_coords(b) == [((0.0, 0.0), (0.0, 1.0)), ((0.0, 0.0), (1.0, 0.0))]
        assert all(s.weight == 0.5 for s in b.segments)
        assert b.length == pytest.approx(1.0)
        corner = next(p for p in b.points if p.edge[0] == 0)
        assert corner.n_segments == 2
        assert corner.length == pytest.approx(0.5)
        assert check_boundary(b, log=False).ok

    def test_three_zero_corners_around_void(self, unit_square):
        _, ls = unit_square([0.0, 0.0, 0.0, 1.0])
        b = Boundary().discretise(ls)
        assert b.n_points == 0 and b.n_segments == 0

    def test_four_zero_corners(self, unit_square):
        _, ls = unit_square([0.0, 0.0, 0.0, 0.0])
        b = Boundary().discretise(ls)
        assert b.n_points == 0 and b.n_segments == 0
        assert b.length == 0.0

    def test_contour_turns_at_a_grid_node(self):
        # material x < 1, y < 1 on a 2x2 grid: the contour bends at node 4 (1, 1)
        mesh = Mesh.structured(2.0, 2.0, nx=2, ny=2)
        ls = LevelSet.from_function(mesh, lambda x, y: max(x - 1.0, y - 1.0))
        b = Boundary().discretise(ls)
        assert segment_coords(b) == [((0.0, 1.0), (1.0, 1.0)), ((1.0, 0.0), (1.0, 1.0))]
        assert all(s.weight == 1.0 and s.element == 0 for s in b.segments)
        assert b.length == pytest.approx(2.0)
        bend = next(p for p in b.points if p.edge[0] == 4)
        assert bend.n_segments == 2 and not bend.is_domain
        report = check_boundary(b, log=False)
        assert report.ok and report.open_ends == 2

    def test_grid_aligned_square(self):
        mesh = Mesh.structured(1.0, 1.0, nx=8, ny=8)
        ls = LevelSet.from_function(mesh, lambda x, y: max(abs(x - 0.5) - 0.25, abs(y - 0.5) - 0.25))
        b = Boundary().discretise(ls)
        assert b.n_points == 16 and b.n_segments == 16
        assert all(p.on_node for p in b.points)
        assert b.length == pytest.approx(2.0)
        report = check_boundary(b, log=False)
        assert report.ok and report.open_ends == 0
        chains = b.polylines()
        assert len(chains) == 1 and chains[0][0] == chains[0][-1]

    def test_node_point_shared_by_four_elements(self):
        mesh = Mesh.structured(2.0, 2.0, nx=2, ny=2)
        ls = LevelSet.from_function(mesh, lambda x, y: (x - 1.0) + (y - 1.0))
        b = Boundary().discretise(ls)
        # contour x + y = 2 runs along the anti-diagonal through nodes 2, 4, 6
        on_node = [p for p in b.points if p.on_node]
        assert sorted(p.edge[0] for p in on_node) == [2, 4, 6]
        assert b.n_segments == 2
        assert b.length == pytest.approx(2.0 * math.sqrt(2.0))
        centre = next(p for p in on_node if p.edge[0] == 4)
        assert centre.n_segments == 2 and not centre.is_domain


def test_edge_point_shared_by_two_elements():
    mesh = Mesh.structured(2.0, 1.0, nx=2, ny=1)
    ls = LevelSet.from_function(mesh, lambda x, y: y - 0.5)
    b = Boundary().discretise(ls)
    assert b.n_points == 3 and b.n_segments == 2
    middle = next(p for p in b.points if not p.is_domain)
    assert_allclose(middle.coord, (1.0, 0.5))
    assert middle.n_segments == 2
    assert sorted(middle.neighbours) == sorted(i for i, p in enumerate(b.points) if p.is_domain)


def test_nearly_equal_values_snap_to_the_node(unit_square):
    _, ls = unit_square([-0.1, 0.2, -0.1, 0.2], velocity=[1.0, 2.0, 3.0, 4.0])
    b = Boundary().discretise(ls, snap_tol=0.5)
    bottom, top = b.points
    assert_allclose(bottom.coord, (0.0, 0.0))
    assert_allclose(top.coord, (0.0, 1.0))
    assert bottom.velocity == 1.0 and top.velocity == 3.0
    assert b.length == pytest.approx(1.0)
