import logging
import math

import numpy as np

from pyslsm import Boundary, Mesh, LevelSet, CircleLevelSet
from pyslsm.io.visualization import plot_boundary
from pyslsm.io.vtk import export_boundary_vtk
from pyslsm.utils.diagnostics import check_boundary

logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

R = 0.3123
mesh = Mesh.structured(1.0, 1.0, nx=40, ny=40)
mesh.fix_nodes(np.flatnonzero(mesh.nodes_x_y_pos[:, 1] == 0.0))
ls = LevelSet.from_function(mesh, CircleLevelSet(center=(0.51, 0.49), radius=R),
                            velocity=np.ones(mesh.n_nodes))

boundary = Boundary().discretise(ls)
boundary.compute_normal_vectors(ls)
print(boundary)
print(check_boundary(boundary))
print(f"relative perimeter error: {abs(boundary.length - 2 * math.pi * R) / (2 * math.pi * R):.3e}")

area = float(np.dot(boundary.compute_area_fractions(ls), mesh.areas()))
print(f"material area {area:.6f} (exact {math.pi * R**2:.6f})")

export_boundary_vtk("circle_boundary.vtu", boundary)
plot_boundary(boundary, mesh, plot_normals=True)
