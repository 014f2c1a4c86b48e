"""pyslsm.io.visualization"""
import numpy as np
import matplotlib.pyplot as plt
from matplotlib.collections import LineCollection, PolyCollection


_ELEM_FILL = {
    "inside": (0.4, 0.6, 1.0, 0.5),
    "outside": (1.0, 1.0, 1.0, 0.0),
    "cut": (1.0, 0.55, 0.0, 0.5),
}


def _elem_fill(tag):
    return _ELEM_FILL.get(tag, (0.9, 0.9, 0.9, 0.3))


def plot_boundary(boundary, mesh=None, *, plot_normals=False, plot_points=True,
                  elem_tags=True, normal_scale=None, show=True, ax=None):
    """
    Plots a discretised boundary, optionally over the fixed-grid mesh.

    Args:
        boundary (Boundary): The discretised zero contour.
        mesh (Mesh, optional): Draws the element outlines (and fills them by
            classification tag when ``elem_tags`` is True).
        plot_normals (bool): Draw the inward normals as arrows.
        plot_points (bool): Mark the boundary points; domain points in red.
        normal_scale (float, optional): Arrow length; defaults to the mean segment length.
        show (bool): Call plt.show() at the end.
        ax (matplotlib.axes.Axes, optional): An existing axes object to plot on.
    Returns:
        matplotlib.axes.Axes: The axes object containing the plot.
    """
    if ax is None:
        fig, ax = plt.subplots(figsize=(8, 8))

    if mesh is not None:
        polys = [mesh.nodes_x_y_pos[list(e.corner_nodes)] for e in mesh.elements_list]
        faces = [_elem_fill(e.tag) for e in mesh.elements_list] if elem_tags else 'none'
        ax.add_collection(PolyCollection(polys, facecolors=faces,
                                         edgecolors=(0.1, 0.1, 0.1, 0.25),
                                         linewidths=0.5, zorder=1))

    coords = boundary.coords()
    if boundary.n_segments:
        lines = [coords[[seg.start, seg.end]] for seg in boundary.segments]
        colors = ['black' if seg.weight == 1.0 else 'dimgray' for seg in boundary.segments]
        ax.add_collection(LineCollection(lines, colors=colors, linewidths=1.5, zorder=3))

    if plot_points and boundary.n_points:
        domain = np.array([p.is_domain for p in boundary.points])
        ax.plot(coords[~domain, 0], coords[~domain, 1], 'o', color='navy',
                markersize=3, zorder=4, linestyle='None')
        if domain.any():
            ax.plot(coords[domain, 0], coords[domain, 1], 'o', color='red',
                    markersize=4, zorder=4, linestyle='None', label="Domain points")
            ax.legend()

    if plot_normals and boundary.n_points:
        if normal_scale is None:
            normal_scale = (np.mean([s.length for s in boundary.segments])
                            if boundary.n_segments else 1.0)
        normals = np.array([p.normal for p in boundary.points])
        ax.quiver(coords[:, 0], coords[:, 1], normals[:, 0], normals[:, 1],
                  angles='xy', scale_units='xy', scale=1.0 / normal_scale,
                  color='green', width=0.003, zorder=5)

    ax.set_aspect('equal', 'box')
    pts = mesh.nodes_x_y_pos if mesh is not None else coords
    if len(pts):
        xmin, ymin = pts.min(axis=0)
        xmax, ymax = pts.max(axis=0)
        xpad = (xmax - xmin) * 0.05 or 0.1
        ypad = (ymax - ymin) * 0.05 or 0.1
        ax.set_xlim(xmin - xpad, xmax + xpad)
        ax.set_ylim(ymin - ypad, ymax + ypad)
    ax.set_title(f"Boundary: {boundary.n_points} points, length {boundary.length:.4g}")
    ax.set_xlabel("X-coordinate")
    ax.set_ylabel("Y-coordinate")

    if show:
        plt.show()
    return ax
