import math

import numpy as np
import pytest
from numpy.testing import assert_allclose

from pyslsm.core import Mesh, LevelSet, CircleLevelSet
from pyslsm.cutters import element_area_fractions, compute_mesh_status


def test_vertical_front():
    mesh = Mesh.structured(1.0, 1.0, nx=4, ny=4)
    phi = mesh.nodes_x_y_pos[:, 0] - 0.3
    fractions = element_area_fractions(mesh, phi).reshape(4, 4)
    for row in fractions:
        assert_allclose(row, [1.0, 0.2, 0.0, 0.0], atol=1e-12)


def test_fractions_are_bounded():
    mesh = Mesh.structured(1.0, 1.0, nx=16, ny=16)
    ls = LevelSet.from_function(mesh, CircleLevelSet(center=(0.4, 0.55), radius=0.27))
    fractions = element_area_fractions(mesh, ls.signed_distance)
    assert np.all(fractions >= 0.0) and np.all(fractions <= 1.0)
    compute_mesh_status(mesh, ls.signed_distance)
    inside = mesh.element_bitset("inside")
    assert inside.cardinality() > 0
    assert np.all(fractions[inside.to_indices()] == 1.0)


@pytest.mark.parametrize("n", [32, 64])
def test_circle_area(n):
    r = 0.3123
    mesh = Mesh.structured(1.0, 1.0, nx=n, ny=n)
    ls = LevelSet.from_function(mesh, CircleLevelSet(center=(0.51, 0.49), radius=r))
    area = float(np.dot(element_area_fractions(mesh, ls.signed_distance), mesh.areas()))
    assert area == pytest.approx(math.pi * r ** 2, rel=1e-2)


def test_zero_values_count_as_material():
    mesh = Mesh.structured(1.0, 1.0, nx=1, ny=1)
    assert element_area_fractions(mesh, np.zeros(4))[0] == 1.0
    assert element_area_fractions(mesh, np.array([0.0, 1.0, 0.0, 1.0]))[0] == 0.0
