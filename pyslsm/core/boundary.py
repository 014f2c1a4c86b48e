"""pyslsm.core.boundary
Piecewise-linear discretisation of the zero contour of a level set.

Boundary points either lie exactly on a node of the fixed grid (when the
signed distance is zero there) or along an element edge where the signed
distance changes sign. Edge points are placed by linear interpolation and
shared between the two elements that own the edge. Each cut element joins
its points with one or two straight segments.

Two different length measures are kept apart on purpose:

* ``BoundaryPoint.length`` (from :meth:`Boundary.compute_point_lengths`) is
  the integral length of a point, half the weighted length of its segments.
  Summed over all points it gives ``Boundary.length``.
* :meth:`Boundary.compute_perimeter` is the plain, unweighted sum of the
  lengths of the segments touching a point.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

import numpy as np

from pyslsm.core.errors import ConfigurationError
from pyslsm.core.sideconvention import SIDE
from pyslsm.cutters.edge_cutter import EdgePointCache, interpolate_edge, SNAP_TOL
from pyslsm.cutters.element_cutter import (compute_mesh_status, element_area_fractions,
                                           saddle_cuts_off_odd_corners)

logger = logging.getLogger(__name__)

# Weight of a segment lying along the outer edge of the fixed grid.
DOMAIN_EDGE_WEIGHT = 0.5


@dataclass(slots=True)
class BoundaryPoint:
    coord: np.ndarray = field(default_factory=lambda: np.zeros(2))
    normal: np.ndarray = field(default_factory=lambda: np.zeros(2))   # inward unit normal
    length: float = 0.0                 # integral length
    velocity: float = 0.0               # normal velocity, positive inwards
    negative_limit: float = 0.0         # largest inward move (<= 0)
    positive_limit: float = 0.0         # largest outward move (>= 0)
    is_domain: bool = False
    is_fixed: bool = False
    segments: List[int] = field(default_factory=list)
    neighbours: List[int] = field(default_factory=list)
    sensitivities: np.ndarray = field(default_factory=lambda: np.zeros(0))
    edge: Tuple[int, int] = (-1, -1)    # bracketing nodes; a node point repeats its node
    t: float = 0.0                      # position along edge, measured from edge[0]

    @property
    def n_segments(self) -> int:
        return len(self.segments)

    @property
    def n_neighbours(self) -> int:
        return len(self.neighbours)

    @property
    def on_node(self) -> bool:
        return self.edge[0] == self.edge[1]


@dataclass(slots=True)
class BoundarySegment:
    start: int
    end: int
    element: int                        # element cut by the segment
    length: float = 0.0
    weight: float = 1.0


class Boundary:
    """
    The discretised zero contour: points, segments and total length.

    Every call to :meth:`discretise` rebuilds the points and segments from
    scratch; nothing survives between calls except the arrays of the last
    result. Normals are computed in a separate pass by
    :meth:`compute_normal_vectors`.
    """

    def __init__(self):
        self.points: List[BoundaryPoint] = []
        self.segments: List[BoundarySegment] = []
        self.length: float = 0.0
        self._cache = EdgePointCache()
        self._is_target = False

    @property
    def n_points(self) -> int:
        return len(self.points)

    @property
    def n_segments(self) -> int:
        return len(self.segments)

    # ------------------------------------------------------------------
    # Discretisation
    # ------------------------------------------------------------------
    def discretise(self, level_set, is_target: bool = False, *, snap_tol: float = SNAP_TOL) -> "Boundary":
        """
        Use linear interpolation to compute the discretised boundary.

        Args:
            level_set: LevelSet holding the nodal fields and the mesh.
            is_target: Discretise the target signed distance instead of the current one.
            snap_tol: Below this |φ0 - φ1| an edge crossing snaps to a node.
        """
        phi = self._check_collaborators(level_set, is_target)
        mesh = level_set.mesh

        self.points = []
        self.segments = []
        self.length = 0.0
        self._cache.clear()
        self._is_target = is_target

        cut_elements = compute_mesh_status(mesh, phi)
        for eid in cut_elements:
            self._build_element_segments(level_set, phi, mesh.elements_list[int(eid)], snap_tol)

        self._link_neighbours()
        self.compute_point_lengths()
        logger.info(f"Discretised boundary: {self.n_points} points, {self.n_segments} segments, "
                    f"length {self.length:.6g}.")
        return self

    def _check_collaborators(self, level_set, is_target: bool) -> np.ndarray:
        mesh = level_set.mesh
        n_nodes = len(mesh.nodes_list)
        phi = np.asarray(level_set.field(is_target), dtype=float)
        if phi.shape != (n_nodes,):
            raise ConfigurationError(f"Signed distance has shape {phi.shape}, expected ({n_nodes},).")
        if np.shape(level_set.velocity) != (n_nodes,):
            raise ConfigurationError(
                f"Velocity has shape {np.shape(level_set.velocity)}, expected ({n_nodes},).")
        sens = np.asarray(level_set.sensitivities)
        if sens.ndim != 2 or sens.shape[0] != n_nodes:
            raise ConfigurationError(
                f"Sensitivities have shape {sens.shape}, expected ({n_nodes}, n_functions).")
        return phi

    def _build_element_segments(self, level_set, phi, elem, snap_tol):
        corners = elem.corner_nodes
        p = phi[list(corners)]
        s = [SIDE.sign(v) for v in p]

        # Crossings in CCW order around the element: corner k, then edge k -> k+1.
        crossings = []
        for k in range(4):
            if s[k] == 0:
                crossings.append(('node', k))
            if s[k] * s[(k + 1) % 4] < 0:
                crossings.append(('edge', k))

        for a, b in self._pair_crossings(crossings, s, p, elem.id):
            weight = 1.0
            if a[0] == 'node' and b[0] == 'node' and (a[1] - b[1]) % 4 in (1, 3):
                # Segment lies on a grid edge shared with the neighbour: lay it once.
                na, nb = corners[a[1]], corners[b[1]]
                if not self._cache.claim_segment_edge(na, nb, self.n_segments):
                    continue
                if level_set.mesh.edge_between(na, nb).is_domain:
                    weight = DOMAIN_EDGE_WEIGHT
            start = self._resolve_point(level_set, phi, corners, a, snap_tol)
            end = self._resolve_point(level_set, phi, corners, b, snap_tol)
            self._add_segment(start, end, elem.id, weight)

    @staticmethod
    def _pair_crossings(crossings, s, p, eid):
        """Decide which crossings of one element are joined by segments."""
        n = len(crossings)
        nodes = [c for c in crossings if c[0] == 'node']
        edges = [c for c in crossings if c[0] == 'edge']

        if n < 2 or len(nodes) == 4:
            # An element with every corner on the contour is left to its
            # neighbours, which lay the grid edges on their material side.
            return []
        if len(nodes) == 3:
            # The contour runs along the two grid edges joining the zero
            # corners; they belong to this element if the fourth corner is inside.
            m = next(k for k in range(4) if s[k] != 0)
            if s[m] > 0:
                return []
            a, b, c = (('node', (m + i) % 4) for i in (1, 2, 3))
            return [(a, b), (b, c)]
        if n == 2:
            a, b = crossings
            if len(nodes) < 2:
                return [(a, b)]
            ka, kb = a[1], b[1]
            if (ka - kb) % 4 in (1, 3):
                # Contour runs along the element edge; it belongs to the material side.
                return [(a, b)] if any(v < 0 for v in s) else []
            # Contour runs along the diagonal only if the other corners disagree.
            o1, o2 = [k for k in range(4) if k not in (ka, kb)]
            return [(a, b)] if s[o1] * s[o2] < 0 else []
        if n == 3:
            if len(nodes) == 1:
                # A lone node point is a tangent touch.
                return [tuple(edges)]
            def _other_corner(k):
                prev_k, next_k = (k - 1) % 4, (k + 1) % 4
                return prev_k if s[prev_k] != 0 else next_k
            keep = next((c for c in nodes if s[_other_corner(c[1])] < 0), nodes[0])
            return [(keep, edges[0])]

        # Saddle: four edge crossings.
        if saddle_cuts_off_odd_corners(p):
            logger.debug(f"Saddle in element {eid}: corners 1 and 3 cut off.")
            return [(edges[0], edges[1]), (edges[2], edges[3])]
        logger.debug(f"Saddle in element {eid}: corners 0 and 2 cut off.")
        return [(edges[3], edges[0]), (edges[1], edges[2])]

    def _resolve_point(self, level_set, phi, corners, crossing, snap_tol) -> int:
        """Index of the point at a crossing, creating it on first visit."""
        kind, k = crossing
        X = level_set.mesh.nodes_x_y_pos
        if kind == 'node':
            nid = corners[k]
            index = self._cache.lookup_node(nid)
            if index is None:
                index = self._new_point(level_set, phi, (nid, nid), 0.0, X[nid].copy())
                self._cache.register_node(nid, index)
            return index

        a, b = corners[k], corners[(k + 1) % 4]
        index = self._cache.lookup_edge(a, b)
        if index is None:
            t, coord, _ = interpolate_edge(X[a], X[b], phi[a], phi[b], snap_tol)
            index = self._new_point(level_set, phi, (a, b), t, coord)
            self._cache.register_edge(a, b, index)
        return index

    def _new_point(self, level_set, phi, edge, t, coord) -> int:
        point = BoundaryPoint(coord=np.asarray(coord, dtype=float), edge=edge, t=float(t))
        self._initialise_point(level_set, phi, point)
        self.points.append(point)
        return len(self.points) - 1

    def _initialise_point(self, level_set, phi, point: BoundaryPoint):
        """Fills velocity, sensitivities, flags and movement limits of a new point."""
        mesh = level_set.mesh
        a, b = point.edge
        t = point.t
        node_a, node_b = mesh.nodes_list[a], mesh.nodes_list[b]

        if a == b or t in (0.0, 1.0):
            src = a if t == 0.0 else b
            point.velocity = float(level_set.velocity[src])
            point.sensitivities = level_set.sensitivities[src].copy()
        else:
            point.velocity = float((1.0 - t) * level_set.velocity[a] + t * level_set.velocity[b])
            point.sensitivities = (1.0 - t) * level_set.sensitivities[a] + t * level_set.sensitivities[b]

        point.is_fixed = bool(node_a.is_fixed or node_b.is_fixed)

        if a == b:
            point.is_domain = bool(node_a.is_domain)
            h = float(mesh.min_incident_edge_length[a])
            point.negative_limit, point.positive_limit = -h, h
            return

        point.is_domain = mesh.edge_between(a, b).is_domain
        X = mesh.nodes_x_y_pos
        dist_a = float(np.linalg.norm(point.coord - X[a]))
        dist_b = float(np.linalg.norm(point.coord - X[b]))
        if phi[a] < phi[b]:
            point.negative_limit, point.positive_limit = -dist_a, dist_b
        else:
            point.negative_limit, point.positive_limit = -dist_b, dist_a

    def _add_segment(self, start: int, end: int, element: int, weight: float = 1.0):
        if start == end:
            return
        segment = BoundarySegment(start=start, end=end, element=int(element), weight=weight)
        segment.length = self.segment_length(segment)
        index = len(self.segments)
        self.segments.append(segment)
        self.points[start].segments.append(index)
        self.points[end].segments.append(index)

    def _link_neighbours(self):
        for index, point in enumerate(self.points):
            point.neighbours = []
            for s in point.segments:
                seg = self.segments[s]
                point.neighbours.append(seg.end if seg.start == index else seg.start)

    # ------------------------------------------------------------------
    # Lengths
    # ------------------------------------------------------------------
    def segment_length(self, segment: BoundarySegment) -> float:
        """Euclidean length of a boundary segment."""
        return float(np.linalg.norm(self.points[segment.end].coord - self.points[segment.start].coord))

    def compute_point_lengths(self):
        """
        Integral length of every point: half the weighted length of its segments.

        Also sets ``self.length`` to the weighted length of all segments, so
        the point lengths sum to the total.
        """
        for point in self.points:
            point.length = 0.5 * sum(self.segments[s].length * self.segments[s].weight
                                     for s in point.segments)
        self.length = float(sum(seg.length * seg.weight for seg in self.segments))

    def compute_perimeter(self, point: BoundaryPoint) -> float:
        """Unweighted sum of the lengths of the segments touching ``point``."""
        return float(sum(self.segments[s].length for s in point.segments))

    # ------------------------------------------------------------------
    # Normals and derived quantities
    # ------------------------------------------------------------------
    def compute_normal_vectors(self, level_set):
        """
        Inward unit normal at every point from the gradient of the signed distance.

        Nodal gradients come from central differences on the grid; an edge
        point blends the gradients of its two bracketing nodes with ``t``.
        """
        grads = level_set.gradient_on_nodes(self._is_target)
        for index, point in enumerate(self.points):
            a, b = point.edge
            g = (1.0 - point.t) * grads[a] + point.t * grads[b]
            nrm = np.linalg.norm(g)
            if nrm < 1e-14:
                logger.warning(f"Vanishing level-set gradient at boundary point {index}; normal left at zero.")
                point.normal = np.zeros(2)
                continue
            point.normal = -g / nrm

    def compute_area_fractions(self, level_set) -> np.ndarray:
        """Material area fraction of every element of the fixed grid."""
        return element_area_fractions(level_set.mesh, level_set.field(self._is_target))

    def polylines(self) -> List[List[int]]:
        """
        Point-index chains obtained by walking the neighbour links.

        Open chains start at a point with a single segment; closed loops
        repeat their first index at the end.
        """
        visited = [False] * self.n_segments
        chains: List[List[int]] = []

        def _walk(start: int) -> List[int]:
            chain = [start]
            current = start
            while True:
                nxt: Optional[int] = None
                for s in self.points[current].segments:
                    if not visited[s]:
                        visited[s] = True
                        seg = self.segments[s]
                        nxt = seg.end if seg.start == current else seg.start
                        break
                if nxt is None:
                    return chain
                chain.append(nxt)
                current = nxt

        for index, point in enumerate(self.points):
            if point.n_segments == 1 and not visited[point.segments[0]]:
                chains.append(_walk(index))
        for s, seg in enumerate(self.segments):
            if not visited[s]:
                chains.append(_walk(seg.start))
        return chains

    def coords(self) -> np.ndarray:
        return np.array([p.coord for p in self.points], dtype=float).reshape(-1, 2)

    def __repr__(self):
        return (f"<Boundary n_points={self.n_points}, n_segments={self.n_segments}, "
                f"length={self.length:.6g}>")
