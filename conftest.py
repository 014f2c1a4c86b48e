# conftest.py
import matplotlib
import pytest

@pytest.fixture(autouse=True)
def mpl_test_backend():
    """Switch to a non-interactive backend for all tests."""
    matplotlib.use('Agg')


@pytest.fixture
def unit_square():
    """Factory for a single unit-square element carrying the given nodal values.

    Nodes are numbered bl=0 (0,0), br=1 (1,0), tl=2 (0,1), tr=3 (1,1).
    """
    from pyslsm import Mesh, LevelSet

    def _make(values, **kwargs):
        mesh = Mesh.structured(1.0, 1.0, nx=1, ny=1)
        return mesh, LevelSet(mesh, values, **kwargs)
    return _make
