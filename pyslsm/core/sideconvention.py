# pyslsm/core/sideconvention.py
from dataclasses import dataclass


@dataclass
class SideConvention:
    """
    Defines the convention for classifying nodes relative to a signed distance (phi).

    Material ("inside") is phi < 0, void ("outside") is phi > 0, and nodes with
    abs(phi) <= tol lie on the zero contour.
    """
    # The tolerance for determining if a node lies on the zero contour.
    tol: float = 1e-12

    def is_zero(self, phi: float, tol: float = None) -> bool:
        if tol is None:
            tol = self.tol
        return abs(phi) <= tol

    def sign(self, phi: float, tol: float = None) -> int:
        """Returns -1 inside, +1 outside and 0 on the contour."""
        if self.is_zero(phi, tol):
            return 0
        return -1 if phi < 0.0 else 1


# Global, editable in one place:
SIDE = SideConvention(tol=1e-12)
