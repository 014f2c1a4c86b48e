"""pyslsm.utils.diagnostics
Invariant checks for a discretised Boundary.

Nothing here raises: an inconsistent contour can be legitimate (open ends on
the domain edge, tangent touches), so problems are collected in a report and
logged as warnings for the caller to act on.
"""
import logging
from dataclasses import dataclass, field
from typing import List

import numpy as np
from scipy.spatial import cKDTree

logger = logging.getLogger(__name__)


@dataclass
class BoundaryReport:
    issues: List[str] = field(default_factory=list)
    open_ends: int = 0          # domain points with a single segment

    @property
    def ok(self) -> bool:
        return not self.issues

    def __str__(self):
        if self.ok:
            return f"Boundary consistent ({self.open_ends} open ends on the domain edge)."
        return "\n".join(self.issues)


def check_boundary(boundary, *, tol: float = 1e-9, log: bool = True) -> BoundaryReport:
    """
    Checks the structural invariants of ``boundary``.

    * segment end points and point segment lists reference each other;
    * neighbour lists match segment lists one to one;
    * interior points have exactly two segments, domain points one or two;
    * no two points coincide (one point per grid edge);
    * ``boundary.length`` equals the weighted segment length (relative ``tol``).
    """
    report = BoundaryReport()
    issues = report.issues
    n_points = boundary.n_points

    for s, seg in enumerate(boundary.segments):
        for end in (seg.start, seg.end):
            if not 0 <= end < n_points:
                issues.append(f"Segment {s} references missing point {end}.")
            elif s not in boundary.points[end].segments:
                issues.append(f"Point {end} does not list segment {s}.")

    for i, point in enumerate(boundary.points):
        for s in point.segments:
            if not 0 <= s < boundary.n_segments:
                issues.append(f"Point {i} references missing segment {s}.")
                continue
            seg = boundary.segments[s]
            if i not in (seg.start, seg.end):
                issues.append(f"Point {i} lists segment {s}, which does not end at it.")
        if point.n_neighbours != point.n_segments:
            issues.append(f"Point {i} has {point.n_neighbours} neighbours for {point.n_segments} segments.")
        if point.is_domain:
            if point.n_segments == 1:
                report.open_ends += 1
            elif point.n_segments != 2:
                issues.append(f"Domain point {i} has {point.n_segments} segments.")
        elif point.n_segments != 2:
            issues.append(f"Interior point {i} has {point.n_segments} segments.")

    if n_points > 1:
        pairs = cKDTree(boundary.coords()).query_pairs(r=tol)
        for i, j in sorted(pairs):
            issues.append(f"Points {i} and {j} coincide.")

    weighted = sum(seg.length * seg.weight for seg in boundary.segments)
    if not np.isclose(boundary.length, weighted, rtol=tol, atol=tol):
        issues.append(f"Total length {boundary.length!r} differs from weighted segment sum {weighted!r}.")

    if log:
        for msg in issues:
            logger.warning(msg)
    return report
