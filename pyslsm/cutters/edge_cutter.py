"""pyslsm.cutters.edge_cutter
Zero crossings on grid edges and the one-point-per-edge cache.

Criteria
--------
1. An edge is cut when its endpoint values have strictly opposite sign.
   Endpoints lying on the contour are node points, not edge crossings.
2. The crossing is found by linear interpolation, t = φ0 / (φ0 - φ1),
   clamped to [0, 1]. When |φ0 - φ1| is too small to divide by, the
   crossing snaps to the endpoint whose value is nearer zero.
3. An interior edge is shared by two elements; the cache makes sure that
   only the first element to visit it (the lower element id, since elements
   are visited in ascending order) creates a point. The other reuses it.
"""
import logging
from typing import Dict, Hashable, Optional, Tuple

import numpy as np

logger = logging.getLogger(__name__)

SNAP_TOL = 1e-14


def interpolate_edge(x0, x1, phi0: float, phi1: float, snap_tol: float = SNAP_TOL):
    """
    Returns ``(t, coord, snapped)`` for the zero crossing between ``x0`` and ``x1``.

    ``t`` is measured from ``x0``. ``snapped`` is True when the denominator
    was degenerate and the crossing was placed on the endpoint nearer zero.
    """
    x0 = np.asarray(x0, dtype=float)
    x1 = np.asarray(x1, dtype=float)
    if abs(phi0 - phi1) < snap_tol:
        t = 0.0 if abs(phi0) <= abs(phi1) else 1.0
        logger.debug(f"Degenerate edge interpolation (φ0={phi0:.3e}, φ1={phi1:.3e}); snapped to t={t}.")
        return t, (x0 if t == 0.0 else x1).copy(), True
    t = phi0 / (phi0 - phi1)
    # Clamp t to the valid range [0, 1] to prevent extrapolation.
    t = max(0.0, min(1.0, t))
    return t, x0 + t * (x1 - x0), False


def edge_key(a: int, b: int) -> Tuple[int, int]:
    """Direction-independent identity of the grid edge joining nodes a and b."""
    return (a, b) if a < b else (b, a)


class EdgePointCache:
    """
    Maps a crossing site (a grid edge key, or a node id) to the index of the
    boundary point created there. Reset on every discretisation.
    """

    def __init__(self):
        self._edges: Dict[Tuple[int, int], int] = {}
        self._nodes: Dict[int, int] = {}
        self._segment_edges: Dict[Tuple[int, int], int] = {}

    def clear(self):
        self._edges.clear()
        self._nodes.clear()
        self._segment_edges.clear()

    # -- edge crossings --
    def lookup_edge(self, a: int, b: int) -> Optional[int]:
        return self._edges.get(edge_key(a, b))

    def register_edge(self, a: int, b: int, point_index: int):
        self._edges[edge_key(a, b)] = point_index

    # -- node-coincident points --
    def lookup_node(self, node_id: int) -> Optional[int]:
        return self._nodes.get(node_id)

    def register_node(self, node_id: int, point_index: int):
        self._nodes[node_id] = point_index

    # -- segments lying on a grid edge --
    def claim_segment_edge(self, a: int, b: int, segment_index: int) -> bool:
        """True if no segment has been laid along this grid edge yet."""
        key = edge_key(a, b)
        if key in self._segment_edges:
            return False
        self._segment_edges[key] = segment_index
        return True

    def __len__(self):
        return len(self._edges) + len(self._nodes)

    def __contains__(self, site: Hashable):
        if isinstance(site, tuple):
            return edge_key(*site) in self._edges
        return site in self._nodes
