import numpy as np
from typing import Tuple, List, Dict, Optional, Iterable

from pyslsm.core.errors import ConfigurationError
from pyslsm.core.topology import Edge, Node, Element
from pyslsm.utils.bitset import BitSet


class Mesh:
    """
    Fixed-grid mesh of bilinear quadrilaterals carrying the level-set field.

    This class builds the connectivity graph from the node list and the
    corner connectivity of every element. It identifies shared edges, assigns
    "left" and "right" elements, finds element neighbours and flags the nodes,
    edges and elements that touch the outer boundary of the domain.
    Structured grids additionally carry their node-grid ``shape`` (rows, cols)
    and ``spacing`` (hx, hy), which the level set needs for nodal gradients.
    """
    # Local-corner indices that form each edge, in CCW order.
    _EDGE_TABLE = ((0, 1), (1, 2), (2, 3), (3, 0))

    def __init__(self,
                 nodes,
                 elements_corner_nodes: np.ndarray,
                 *,
                 shape: Optional[Tuple[int, int]] = None,
                 spacing: Optional[Tuple[float, float]] = None):
        if isinstance(nodes, np.ndarray):
            nodes = [Node(id=i, x=float(x), y=float(y)) for i, (x, y) in enumerate(nodes)]
        self.nodes_list: List[Node] = list(nodes)
        self.nodes_x_y_pos = np.array([[n.x, n.y] for n in self.nodes_list], dtype=float).reshape(-1, 2)
        self.corner_connectivity = np.asarray(elements_corner_nodes, dtype=int)
        self.shape = tuple(shape) if shape is not None else None
        self.spacing = tuple(float(h) for h in spacing) if spacing is not None else None
        self._validate()

        self.n_nodes = len(self.nodes_list)
        self.n_elements = len(self.corner_connectivity)
        self.elements_list: List[Element] = []
        self.edges_list: List[Edge] = []
        self._edge_dict: Dict[Tuple[int, int], Edge] = {}
        self._neighbors: List[List[int]] = [[] for _ in range(self.n_elements)]
        self._elem_bitsets: Dict[str, BitSet] = {}
        self._node_bitsets: Dict[str, BitSet] = {}
        self._build_topology()

    @classmethod
    def structured(cls, Lx: float, Ly: float, *, nx: int, ny: int,
                   offset: Optional[Tuple[float, float]] = None, numba_path: bool = True) -> "Mesh":
        """Builds an ``nx`` by ``ny`` grid over ``[0, Lx] x [0, Ly]`` (shifted by ``offset``)."""
        from pyslsm.utils.meshgen import structured_quad
        nodes, corners = structured_quad(Lx, Ly, nx=nx, ny=ny, offset=offset, numba_path=numba_path)
        return cls(nodes, corners, shape=(ny + 1, nx + 1), spacing=(Lx / nx, Ly / ny))

    def _validate(self):
        conn = self.corner_connectivity
        n_nodes = len(self.nodes_list)
        if n_nodes == 0 or conn.size == 0:
            raise ConfigurationError("Mesh needs at least one node and one element.")
        if conn.ndim != 2 or conn.shape[1] != 4:
            raise ConfigurationError(f"Quadrilateral connectivity must have shape (n, 4), got {conn.shape}.")
        if conn.min() < 0 or conn.max() >= n_nodes:
            raise ConfigurationError(
                f"Element connectivity references node ids outside [0, {n_nodes - 1}].")
        for i, n in enumerate(self.nodes_list):
            if n.id != i:
                raise ConfigurationError(f"Node at position {i} carries id {n.id}; ids must be contiguous.")
        if self.shape is not None:
            if self.shape[0] * self.shape[1] != n_nodes:
                raise ConfigurationError(f"Grid shape {self.shape} does not match {n_nodes} nodes.")
            if self.spacing is None or min(self.spacing) <= 0.0:
                raise ConfigurationError("A structured mesh needs positive grid spacing.")

    def _build_topology(self):
        """
        Builds the full mesh topology: Elements, Edges, Neighbors and domain flags.
        """
        # Step 1: Create basic Element objects
        for eid, corners in enumerate(self.corner_connectivity):
            self.elements_list.append(Element(
                id=eid,
                corner_nodes=tuple(int(c) for c in corners),
            ))

        # Step 2: Build map from each edge to the elements that share it
        edge_incidences: Dict[Tuple[int, int], List[int]] = {}
        for eid, corners in enumerate(self.corner_connectivity):
            for c1, c2 in self._EDGE_TABLE:
                key = tuple(sorted((int(corners[c1]), int(corners[c2]))))
                edge_incidences.setdefault(key, []).append(eid)

        # Step 3: Create unique Edge objects
        for edge_gid, ((n_min, n_max), shared_eids) in enumerate(edge_incidences.items()):
            if len(shared_eids) > 2:
                raise ConfigurationError(f"Edge ({n_min}, {n_max}) is shared by more than two elements.")
            left_eid = shared_eids[0]
            left_corners = self.elements_list[left_eid].corner_nodes
            vA, vB = n_min, n_max
            for c1, c2 in self._EDGE_TABLE:
                if {left_corners[c1], left_corners[c2]} == {n_min, n_max}:
                    vA, vB = left_corners[c1], left_corners[c2]
                    break
            right_eid = shared_eids[1] if len(shared_eids) > 1 else None
            length = float(np.linalg.norm(self.nodes_x_y_pos[vB] - self.nodes_x_y_pos[vA]))
            edge_obj = Edge(gid=edge_gid, nodes=(vA, vB), left=left_eid, right=right_eid, length=length)
            self.edges_list.append(edge_obj)
            self._edge_dict[(n_min, n_max)] = edge_obj
            if right_eid is not None:
                self._neighbors[left_eid].append(right_eid)
                self._neighbors[right_eid].append(left_eid)

        # Step 4: Populate each Element's edges and neighbours (edge k joins corner k and k+1)
        for elem in self.elements_list:
            elem.edges = tuple(
                self._edge_dict[tuple(sorted((elem.corner_nodes[c1], elem.corner_nodes[c2])))].gid
                for c1, c2 in self._EDGE_TABLE
            )
            for local_edge_idx, edge_gid in enumerate(elem.edges):
                edge = self.edges_list[edge_gid]
                elem.neighbors[local_edge_idx] = edge.right if edge.left == elem.id else edge.left

        # Step 5: Domain flags and the shortest grid edge at every node
        self.min_incident_edge_length = np.full(len(self.nodes_list), np.inf)
        for edge in self.edges_list:
            for nid in edge.nodes:
                self.min_incident_edge_length[nid] = min(self.min_incident_edge_length[nid], edge.length)
            if edge.is_domain:
                self.elements_list[edge.left].is_domain = True
                for nid in edge.nodes:
                    self.nodes_list[nid].is_domain = True

    # --- Public API ---
    def edge_between(self, a: int, b: int) -> Edge:
        """Return the edge joining nodes ``a`` and ``b`` in either direction."""
        key = (a, b) if a < b else (b, a)
        try:
            return self._edge_dict[key]
        except KeyError:
            raise KeyError(f"Nodes {a} and {b} do not share an element edge.") from None

    def neighbors(self) -> List[List[int]]:
        return self._neighbors

    def fix_nodes(self, node_ids: Iterable[int], fixed: bool = True):
        """Marks nodes as fixed; boundary points created next to them will not move."""
        for nid in node_ids:
            if not 0 <= int(nid) < len(self.nodes_list):
                raise IndexError(f"Node ID {nid} out of range.")
            self.nodes_list[int(nid)].is_fixed = fixed

    def domain_node_mask(self) -> np.ndarray:
        return np.fromiter((n.is_domain for n in self.nodes_list), bool, count=len(self.nodes_list))

    def element_bitset(self, tag: str) -> BitSet:
        """Return cached BitSet of elements with the given classification tag."""
        return self._elem_bitsets.get(tag, BitSet(np.zeros(len(self.elements_list), bool)))

    def node_bitset(self, tag: str) -> BitSet:
        """Return cached BitSet of nodes with the given classification tag."""
        return self._node_bitsets.get(tag, BitSet(np.zeros(len(self.nodes_list), bool)))

    def areas(self) -> np.ndarray:
        """Calculates the geometric area of each element."""
        element_areas = np.zeros(len(self.elements_list))
        for elem in self.elements_list:
            x, y = self.nodes_x_y_pos[list(elem.corner_nodes)].T
            element_areas[elem.id] = 0.5 * np.abs(np.dot(x, np.roll(y, -1)) - np.dot(y, np.roll(x, -1)))
        return element_areas

    def __repr__(self):
        return (f"<Mesh n_nodes={len(self.nodes_list)}, "
                f"n_elems={len(self.elements_list)}, "
                f"n_edges={len(self.edges_list)}, "
                f"shape={self.shape}>")
