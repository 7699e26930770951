"""
Visualization utilities for solved homography scenes.

All functions save figures to disk rather than displaying them interactively,
making the module suitable for headless execution.
"""

import os
import numpy as np
import matplotlib
matplotlib.use("Agg")          # non-interactive backend
import matplotlib.pyplot as plt

from planar_homography.geometry.correspondences import LinePair, PointPair
from planar_homography.geometry.homography import HomographySolution


def _bounds(points: np.ndarray, margin: float = 0.15):
    lo = points.min(axis=0)
    hi = points.max(axis=0)
    pad = np.maximum((hi - lo) * margin, 1.0)
    return lo - pad, hi + pad


def _draw_line(ax, line, lo: np.ndarray, hi: np.ndarray, style: str) -> None:
    """Draw ``a*x + b*y + c = 0`` across the rectangle ``lo``..``hi``."""
    if line.is_degenerate:
        return
    if abs(line.b) >= abs(line.a):
        xs = np.array([lo[0], hi[0]])
        ys = -(line.a * xs + line.c) / line.b
    else:
        ys = np.array([lo[1], hi[1]])
        xs = -(line.b * ys + line.c) / line.a
    ax.plot(xs, ys, style, linewidth=1, alpha=0.6)


def _closed(points: np.ndarray) -> np.ndarray:
    return np.vstack([points, points[:1]])


def save_correspondence_plot(solution: HomographySolution, correspondences: list,
                             scene: str, out_dir: str) -> str:
    """Save source and target planes side by side.

    The source panel shows the input points and lines.  The target panel
    shows the target points, the target lines and the source points mapped
    through the solved homography, so any misfit is visible directly.

    Returns
    -------
    str
        Path of the written figure.
    """
    point_pairs = [c for c in correspondences if isinstance(c, PointPair)]
    line_pairs = [c for c in correspondences if isinstance(c, LinePair)]
    if not point_pairs:
        raise ValueError("At least one point correspondence is needed to plot a scene")

    src = np.array([[p.p1.x, p.p1.y] for p in point_pairs], dtype=float)
    dst = np.array([[p.p2.x, p.p2.y] for p in point_pairs], dtype=float)
    mapped = solution.transform(src)

    fig, axes = plt.subplots(1, 2, figsize=(14, 6))

    lo, hi = _bounds(src)
    axes[0].plot(*_closed(src).T, "b-", linewidth=1)
    axes[0].plot(src[:, 0], src[:, 1], "bo", markersize=6)
    for pair in line_pairs:
        _draw_line(axes[0], pair.l1, lo, hi, "m--")
    for idx, (x, y) in enumerate(src):
        axes[0].text(x, y, f" {idx + 1}", color="black", fontsize=9)
    axes[0].set_xlim(lo[0], hi[0]); axes[0].set_ylim(hi[1], lo[1])
    axes[0].set_title(f"{scene} – source ({len(point_pairs)} pts, {len(line_pairs)} lines)")
    axes[0].set_aspect("equal")

    lo, hi = _bounds(np.vstack([dst, mapped]))
    axes[1].plot(*_closed(dst).T, "g-", linewidth=1)
    axes[1].plot(dst[:, 0], dst[:, 1], "go", markersize=8, label="target")
    axes[1].plot(mapped[:, 0], mapped[:, 1], "r+", markersize=10, markeredgewidth=2,
                 label="H · source")
    for pair in line_pairs:
        _draw_line(axes[1], pair.l2, lo, hi, "m--")
    axes[1].set_xlim(lo[0], hi[0]); axes[1].set_ylim(hi[1], lo[1])
    axes[1].set_title(f"{scene} – target  |  σ_min = {float(solution.value):.3g}")
    axes[1].set_aspect("equal")
    axes[1].legend(loc="best")

    plt.tight_layout()
    path = os.path.join(out_dir, scene, "correspondences.png")
    plt.savefig(path, dpi=150, bbox_inches="tight")
    plt.close()
    return path


def save_singular_values(solution: HomographySolution, scene: str, out_dir: str) -> str:
    """Save a log-scale bar chart of the design matrix spectrum."""
    s = np.asarray(solution.singular_values, dtype=float)
    # Exact zeros cannot be drawn on a log axis
    floor = np.finfo(float).tiny
    plt.figure(figsize=(8, 4))
    plt.bar(np.arange(1, s.size + 1), np.maximum(s, floor), edgecolor="black", alpha=0.7)
    plt.yscale("log")
    plt.xlabel("Index")
    plt.ylabel("Singular value")
    plt.title(f"{scene} – design matrix spectrum (rank {solution.numerical_rank()})")
    plt.grid(True, alpha=0.3)
    path = os.path.join(out_dir, scene, "singular_values.png")
    plt.savefig(path, dpi=150, bbox_inches="tight")
    plt.close()
    return path
