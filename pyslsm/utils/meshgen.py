"""pyslsm.utils.meshgen
Structured fixed-grid generators for the level-set domain.
"""
import numpy as np
import numba
from pyslsm.core.topology import Node
from typing import List, Tuple, Optional

__all__ = ["structured_quad"]


@numba.jit(nopython=True, cache=True)
def _translate_coords(coords: np.ndarray, offset: np.ndarray):
    """Translates all node coordinates by a given offset vector."""
    coords[:, 0] += offset[0]
    coords[:, 1] += offset[1]
    return coords


def structured_quad(Lx: float, Ly: float, *, nx: int, ny: int,
                    offset: Optional[Tuple[float, float]] = None, numba_path=True):
    """
    Main wrapper for generating a structured grid of bilinear (Q1) quadrilaterals.

    Nodes are numbered row by row from the bottom-left corner, so node
    ``j * (nx + 1) + i`` sits at ``(i * Lx / nx, j * Ly / ny)``. Elements are
    numbered the same way and their corners are stored CCW starting at the
    bottom-left one.

    Returns:
        tuple: (nodes, elements_corner_nodes)
            nodes (List[Node]): Node objects in global id order.
            elements_corner_nodes (np.ndarray): (nx*ny, 4) corner node ids.
    """
    if nx < 1 or ny < 1:
        raise ValueError("A structured grid needs at least one element per direction.")
    if Lx <= 0.0 or Ly <= 0.0:
        raise ValueError("Domain lengths must be positive.")

    if not numba_path:
        return _structured_q1(Lx, Ly, nx, ny, offset)

    # 1. Call the fast Numba core to get raw NumPy arrays
    nodes_coords, elements_corner_nodes = _structured_q1_numba(float(Lx), float(Ly), int(nx), int(ny))
    if offset is not None:
        nodes_coords = _translate_coords(nodes_coords, np.array(offset, dtype=np.float64))

    # 2. Convert the raw coordinate array back to a list of Node objects
    node_objects = [
        Node(id=i, x=float(coord[0]), y=float(coord[1]))
        for i, coord in enumerate(nodes_coords)
    ]
    return node_objects, elements_corner_nodes


@numba.jit(nopython=True, parallel=True, cache=True)
def _structured_q1_numba(Lx: float, Ly: float, nx: int, ny: int):
    """
    Generates raw data for a structured Q1 quadrilateral grid using Numba.
    """
    num_nodes_x = nx + 1
    num_nodes_y = ny + 1
    nodes_coords = np.zeros((num_nodes_x * num_nodes_y, 2), dtype=np.float64)

    x_coords = np.linspace(0, Lx, num_nodes_x)
    y_coords = np.linspace(0, Ly, num_nodes_y)

    for j in numba.prange(num_nodes_y):
        for i in range(num_nodes_x):
            node_id = j * num_nodes_x + i
            nodes_coords[node_id, 0] = x_coords[i]
            nodes_coords[node_id, 1] = y_coords[j]

    num_elements = nx * ny
    elements_corner_nodes = np.empty((num_elements, 4), dtype=np.int64)

    # Every element writes only its own row, so this loop is safe to parallelize
    for el_idx in numba.prange(num_elements):
        el_j = el_idx // nx
        el_i = el_idx % nx
        bl_gid = el_j * num_nodes_x + el_i
        elements_corner_nodes[el_idx, 0] = bl_gid
        elements_corner_nodes[el_idx, 1] = bl_gid + 1
        elements_corner_nodes[el_idx, 2] = bl_gid + num_nodes_x + 1
        elements_corner_nodes[el_idx, 3] = bl_gid + num_nodes_x

    return nodes_coords, elements_corner_nodes


def _structured_q1(Lx: float, Ly: float, nx: int, ny: int,
                   offset: Optional[Tuple[float, float]] = None) -> Tuple[List[Node], np.ndarray]:
    """Pure Python version of the generator, same numbering."""
    num_nodes_x = nx + 1
    x_coords = np.linspace(0, Lx, num_nodes_x)
    y_coords = np.linspace(0, Ly, ny + 1)
    tx, ty = offset if offset is not None else (0.0, 0.0)

    nodes: List[Node] = []
    for j in range(ny + 1):
        for i in range(num_nodes_x):
            nodes.append(Node(id=len(nodes), x=float(x_coords[i] + tx), y=float(y_coords[j] + ty)))

    get_node_id = lambda ix, iy: iy * num_nodes_x + ix

    elements_corner_nodes = np.empty((nx * ny, 4), dtype=int)
    for el_j in range(ny):
        for el_i in range(nx):
            eid = el_j * nx + el_i
            # Canonical CCW order used for defining local edges.
            elements_corner_nodes[eid] = [
                get_node_id(el_i, el_j),
                get_node_id(el_i + 1, el_j),
                get_node_id(el_i + 1, el_j + 1),
                get_node_id(el_i, el_j + 1),
            ]
    return nodes, elements_corner_nodes
