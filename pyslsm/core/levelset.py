"""pyslsm.core.levelset
Analytic signed-distance functions and the nodal level-set field sampled on a fixed grid.
"""
from __future__ import annotations
from typing import Sequence, Tuple, Callable, Optional
import numpy as np

from pyslsm.core.errors import ConfigurationError


class LevelSetFunction:
    """Abstract base class"""
    def __call__(self, x: np.ndarray) -> float:
        raise NotImplementedError
    def evaluate_on_nodes(self, mesh) -> np.ndarray:
        return np.apply_along_axis(self, 1, mesh.nodes_x_y_pos)


class CircleLevelSet(LevelSetFunction):
    """Signed distance to a circle, negative inside the disk."""
    def __init__(self, center: Tuple[float, float] = (0., 0.), radius: float = 1.0):
        self.center = np.asarray(center, dtype=float)
        self.radius = float(radius)
    def __call__(self, x):
        """Signed distance; works for shape (..., 2) or plain (2,)."""
        x = np.asarray(x, dtype=float)
        rel = x - self.center
        # norm along the last axis keeps the leading shape intact
        return np.linalg.norm(rel, axis=-1) - self.radius


class AffineLevelSet(LevelSetFunction):
    """
    φ(x, y) = a * x + b * y + c
    Any straight line: choose (a, b, c) so that φ=0 is the line.
    """
    def __init__(self, a: float, b: float, c: float):
        self.a, self.b, self.c = float(a), float(b), float(c)

    def __call__(self, x: np.ndarray) -> np.ndarray:
        # Works with shape (2,) or (..., 2)
        x = np.asarray(x, dtype=float)
        return self.a * x[..., 0] + self.b * x[..., 1] + self.c


class CompositeLevelSet(LevelSetFunction):
    """Union of several shapes: the pointwise minimum of their level sets."""
    def __init__(self, levelsets: Sequence[LevelSetFunction]):
        self.levelsets = list(levelsets)
        if not self.levelsets:
            raise ValueError("CompositeLevelSet needs at least one level set.")
    def __call__(self, x):
        return np.min(np.stack([np.asarray(ls(x), dtype=float) for ls in self.levelsets]), axis=0)
    def evaluate_on_nodes(self, mesh):
        return np.min(np.vstack([ls.evaluate_on_nodes(mesh) for ls in self.levelsets]), axis=0)


class LevelSet:
    """
    A level set represented by its nodal values on a fixed-grid Mesh.

    Holds the current signed distance, an optional target signed distance,
    and the node-level normal velocity and sensitivities that boundary points
    interpolate from. All arrays are node-indexed and checked against the
    mesh on assignment.
    """

    def __init__(self, mesh, signed_distance, *, target=None, velocity=None,
                 sensitivities=None):
        self.mesh = mesh
        self.signed_distance = self._check_nodal("signed_distance", signed_distance)
        self.target = None if target is None else self._check_nodal("target", target)
        self.velocity = (np.zeros(mesh.n_nodes) if velocity is None
                         else self._check_nodal("velocity", velocity))
        self.sensitivities = self._check_sensitivities(sensitivities)

    @classmethod
    def from_function(cls, mesh, fun: Callable, *, target: Optional[Callable] = None, **kwargs) -> "LevelSet":
        """Samples ``fun`` (and optionally ``target``) at the mesh nodes."""
        def _sample(f):
            if hasattr(f, "evaluate_on_nodes"):
                return f.evaluate_on_nodes(mesh)
            return np.array([float(f(x, y)) for x, y in mesh.nodes_x_y_pos], float)
        return cls(mesh, _sample(fun), target=None if target is None else _sample(target), **kwargs)

    # --------------------- validation ---------------------
    def _check_nodal(self, name: str, values) -> np.ndarray:
        arr = np.asarray(values, dtype=float)
        if arr.ndim != 1 or arr.shape[0] != self.mesh.n_nodes:
            raise ConfigurationError(
                f"{name} must have one value per mesh node ({self.mesh.n_nodes}), got shape {arr.shape}.")
        if not np.all(np.isfinite(arr)):
            raise ConfigurationError(f"{name} contains non-finite values.")
        return arr.copy()

    def _check_sensitivities(self, values) -> np.ndarray:
        if values is None:
            return np.zeros((self.mesh.n_nodes, 0))
        arr = np.asarray(values, dtype=float)
        if arr.ndim == 1:
            arr = arr[:, None]
        if arr.ndim != 2 or arr.shape[0] != self.mesh.n_nodes:
            raise ConfigurationError(
                f"sensitivities must have shape ({self.mesh.n_nodes}, n_functions), got {arr.shape}.")
        return arr.copy()

    # --------------------- population / update ---------------------
    def set_from_array(self, values: np.ndarray, *, is_target: bool = False) -> None:
        """Replace the nodal signed distance (or the target field)."""
        checked = self._check_nodal("target" if is_target else "signed_distance", values)
        if is_target:
            self.target = checked
        else:
            self.signed_distance = checked

    def set_velocity(self, values) -> None:
        self.velocity = self._check_nodal("velocity", values)

    def set_sensitivities(self, values) -> None:
        self.sensitivities = self._check_sensitivities(values)

    @property
    def n_functions(self) -> int:
        return self.sensitivities.shape[1]

    def field(self, is_target: bool = False) -> np.ndarray:
        """The nodal values to discretise: the target field or the current one."""
        if is_target:
            if self.target is None:
                raise ConfigurationError("No target signed distance has been supplied.")
            return self.target
        return self.signed_distance

    def gradient_on_nodes(self, is_target: bool = False) -> np.ndarray:
        """
        ∇φ at every node, shape (n_nodes, 2).

        Central differences at interior nodes, one-sided differences on the
        edge of the domain. Needs the structured grid metadata of the mesh.
        """
        if self.mesh.shape is None:
            raise ConfigurationError("Nodal gradients need a structured mesh (shape and spacing).")
        rows, cols = self.mesh.shape
        hx, hy = self.mesh.spacing
        phi = self.field(is_target).reshape(rows, cols)
        if rows < 2 or cols < 2:
            raise ConfigurationError("Nodal gradients need at least two nodes per grid direction.")
        dphi_dy, dphi_dx = np.gradient(phi, hy, hx)
        return np.column_stack([dphi_dx.ravel(), dphi_dy.ravel()])

    def __repr__(self):
        return (f"<LevelSet n_nodes={self.mesh.n_nodes}, "
                f"target={'yes' if self.target is not None else 'no'}, "
                f"n_functions={self.n_functions}>")
