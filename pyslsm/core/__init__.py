from .errors import ConfigurationError
from .mesh import Mesh
from .topology import Node, Edge, Element
from .levelset import LevelSet, LevelSetFunction, CircleLevelSet, AffineLevelSet, CompositeLevelSet
__all__=['ConfigurationError','Mesh','Node','Edge','Element','LevelSet','LevelSetFunction',
         'CircleLevelSet','AffineLevelSet','CompositeLevelSet']
