import numpy as np
import meshio


def export_boundary_vtk(filename: str, boundary, *, sensitivities: bool = True):
    """
    Exports a discretised boundary to a VTK (.vtu/.vtk) line mesh.

    Point data: velocity, integral length, inward normal (padded to 3D),
    movement limits, is_domain/is_fixed flags and, if requested, one field per
    sensitivity. Cell data: segment length, weight and owning element.

    Args:
        filename: The path to the output file (e.g. 'results/boundary_001.vtu').
        boundary: The Boundary to write.
        sensitivities: Also write ``sensitivity_<i>`` point fields.
    """
    # 1. Geometry
    points_3d = np.pad(boundary.coords(), ((0, 0), (0, 1)), constant_values=0)
    lines = np.array([[s.start, s.end] for s in boundary.segments], dtype=int).reshape(-1, 2)
    cells = [meshio.CellBlock("line", lines)]

    # 2. Point data
    pts = boundary.points
    normals = np.zeros((len(pts), 3))
    if pts:
        normals[:, :2] = np.array([p.normal for p in pts])
    point_data = {
        "velocity": np.array([p.velocity for p in pts], float),
        "length": np.array([p.length for p in pts], float),
        "normal": normals,
        "negative_limit": np.array([p.negative_limit for p in pts], float),
        "positive_limit": np.array([p.positive_limit for p in pts], float),
        "is_domain": np.array([p.is_domain for p in pts], float),
        "is_fixed": np.array([p.is_fixed for p in pts], float),
    }
    if sensitivities and pts and pts[0].sensitivities.size:
        sens = np.vstack([p.sensitivities for p in pts])
        for i in range(sens.shape[1]):
            point_data[f"sensitivity_{i}"] = sens[:, i]

    # 3. Cell data (one list entry per cell block)
    segs = boundary.segments
    cell_data = {
        "segment_length": [np.array([s.length for s in segs], float)],
        "weight": [np.array([s.weight for s in segs], float)],
        "element": [np.array([s.element for s in segs], float)],
    }

    meshio.write(filename, meshio.Mesh(points_3d, cells, point_data=point_data, cell_data=cell_data))
