"""pyslsm
Discretised boundary of a level-set zero contour on a fixed structured grid.
"""
from pyslsm.core import (ConfigurationError, Mesh, LevelSet, LevelSetFunction,
                         CircleLevelSet, AffineLevelSet, CompositeLevelSet)
from pyslsm.core.boundary import Boundary, BoundaryPoint, BoundarySegment

__version__ = "0.1.0"
__all__ = ['Boundary', 'BoundaryPoint', 'BoundarySegment', 'ConfigurationError', 'Mesh',
           'LevelSet', 'LevelSetFunction', 'CircleLevelSet', 'AffineLevelSet', 'CompositeLevelSet']
