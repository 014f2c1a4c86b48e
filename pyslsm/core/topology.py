from dataclasses import dataclass, field
from typing import Tuple, Dict, Optional


class Node:
    def __init__(self, id, x, y, tag=None, is_domain=False, is_fixed=False):
        self.x = x
        self.y = y
        self.id = id
        self.tag = tag                  # 'inside' | 'outside' | 'boundary' after classification
        self.is_domain = is_domain      # lies on the outer edge of the fixed grid
        self.is_fixed = is_fixed        # excluded from boundary movement

    def __repr__(self):
        return f"Node {self.id}({self.x:.3f}, {self.y:.3f}, tag='{self.tag}')"


@dataclass(slots=True)
class Edge:
    gid: int
    nodes: Tuple[int, int]      # Global node indices, CCW as seen from the left element
    left: int                   # Element ID on the left side of the edge
    right: Optional[int]        # Element ID on the right side, None on the domain boundary
    length: float = 0.0

    @property
    def key(self) -> Tuple[int, int]:
        """Direction-independent identity of the edge."""
        a, b = self.nodes
        return (a, b) if a < b else (b, a)

    @property
    def is_domain(self) -> bool:
        return self.right is None


@dataclass(slots=True)
class Element:
    id: int                                  # Element ID
    corner_nodes: Tuple[int, ...]            # Global node ids of the corners, CCW from bottom-left
    tag: str = ""                            # 'inside' | 'outside' | 'cut' after classification
    edges: Tuple[int, ...] = field(default_factory=tuple)   # edge k joins corner k and k+1
    neighbors: Dict[int, Optional[int]] = field(default_factory=dict)
    is_domain: bool = False
