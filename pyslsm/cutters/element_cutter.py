"""pyslsm.cutters.element_cutter
Node/element status against the zero contour and per-element material area.
"""
import logging
import numpy as np

from pyslsm.core.sideconvention import SIDE
from pyslsm.utils.bitset import BitSet

logger = logging.getLogger(__name__)


def compute_mesh_status(mesh, phi_nodes, tol=None):
    """
    Tags every node 'inside', 'outside' or 'boundary' and every element
    'inside', 'outside' or 'cut'.

    An element is 'cut' unless all four corners are strictly on the same
    side; a corner on the zero contour always makes the element 'cut'.
    The classification is recomputed from scratch and cached as BitSets on
    the mesh (``mesh.node_bitset`` / ``mesh.element_bitset``).

    Returns:
        np.ndarray: ids of the cut elements, ascending.
    """
    if tol is None:
        tol = SIDE.tol
    phi_nodes = np.asarray(phi_nodes, dtype=float)

    node_sign = np.where(np.abs(phi_nodes) <= tol, 0, np.sign(phi_nodes)).astype(int)
    node_tags = np.array(['inside', 'boundary', 'outside'])[node_sign + 1]
    for node, tag in zip(mesh.nodes_list, node_tags):
        node.tag = str(tag)

    elem_sign = node_sign[mesh.corner_connectivity]
    inside_mask = np.all(elem_sign < 0, axis=1)
    outside_mask = np.all(elem_sign > 0, axis=1)
    cut_mask = ~(inside_mask | outside_mask)

    for eid in np.where(inside_mask)[0]: mesh.elements_list[eid].tag = 'inside'
    for eid in np.where(outside_mask)[0]: mesh.elements_list[eid].tag = 'outside'
    for eid in np.where(cut_mask)[0]: mesh.elements_list[eid].tag = 'cut'

    mesh._node_bitsets = {t: BitSet(node_tags == t) for t in ('inside', 'outside', 'boundary')}
    mesh._elem_bitsets = {'inside': BitSet(inside_mask),
                          'outside': BitSet(outside_mask),
                          'cut': BitSet(cut_mask)}

    cut_inds = np.flatnonzero(cut_mask)
    logger.debug(f"Mesh status: {int(inside_mask.sum())} inside, {int(outside_mask.sum())} outside, "
                 f"{cut_inds.size} cut elements; {int((node_sign == 0).sum())} nodes on the contour.")
    return cut_inds


def saddle_cuts_off_odd_corners(corner_phi) -> bool:
    """
    Average-corner tie-break for an element whose corners alternate in sign.

    The centre value is the mean of the four corner values and counts as
    inside when it is <= 0. If the centre has the sign of corners 0 and 2,
    those corners are joined through the centre and corners 1 and 3 are cut
    off by the contour (returns True); otherwise corners 0 and 2 are cut off.
    """
    centre = float(np.mean(corner_phi))
    centre_inside = centre <= 0.0
    even_inside = corner_phi[0] < 0.0
    return centre_inside == even_inside


def _polygon_area(poly) -> float:
    if len(poly) < 3:
        return 0.0
    x, y = np.asarray(poly, dtype=float).T
    return 0.5 * abs(np.dot(x, np.roll(y, -1)) - np.dot(y, np.roll(x, -1)))


def _crossing(xa, xb, pa, pb):
    t = pa / (pa - pb)
    return xa + t * (xb - xa)


def element_area_fractions(mesh, phi_nodes, tol=None) -> np.ndarray:
    """
    Fraction of every element occupied by material (phi <= 0).

    The contour inside each element is the same piecewise-linear one the
    Boundary builds: crossings by linear interpolation along the edges and the
    average-corner tie-break on saddles.
    """
    if tol is None:
        tol = SIDE.tol
    phi_nodes = np.asarray(phi_nodes, dtype=float)
    phi_nodes = np.where(np.abs(phi_nodes) <= tol, 0.0, phi_nodes)
    areas = mesh.areas()
    fractions = np.zeros(len(mesh.elements_list))
    V = mesh.nodes_x_y_pos

    for elem in mesh.elements_list:
        cn = list(elem.corner_nodes)
        p = phi_nodes[cn]
        X = V[cn]
        if np.all(p <= 0.0):
            fractions[elem.id] = 1.0
            continue
        if np.all(p >= 0.0):
            continue

        # Saddle with isolated inside corners: two separate corner triangles.
        signs = np.sign(p)
        if (np.all(signs != 0) and signs[0] == signs[2] and signs[1] == signs[3]
                and signs[0] != signs[1]):
            odd_cut_off = saddle_cuts_off_odd_corners(p)
            isolated = (1, 3) if odd_cut_off else (0, 2)
            if p[isolated[0]] < 0.0:
                kept = 0.0
                for k in isolated:
                    prev_k, next_k = (k - 1) % 4, (k + 1) % 4
                    kept += _polygon_area([X[k],
                                           _crossing(X[k], X[next_k], p[k], p[next_k]),
                                           _crossing(X[k], X[prev_k], p[k], p[prev_k])])
                fractions[elem.id] = min(max(kept / areas[elem.id], 0.0), 1.0)
                continue

        # Walk the perimeter keeping inside/zero corners and sign changes.
        poly = []
        for k in range(4):
            k1 = (k + 1) % 4
            if p[k] <= 0.0:
                poly.append(X[k])
            if p[k] * p[k1] < 0.0:
                poly.append(_crossing(X[k], X[k1], p[k], p[k1]))
        fractions[elem.id] = min(max(_polygon_area(poly) / areas[elem.id], 0.0), 1.0)

    return fractions
