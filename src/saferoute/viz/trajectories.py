"""
Static plots of a mirrored ledger.

Paths are drawn in decimal degrees (longitude on x, latitude on y), one
colour per car. Sampled points (the ones the collision test compares)
can be marked to show what the engine actually looks at.
"""

from __future__ import annotations
from pathlib import Path
from typing import TYPE_CHECKING, Sequence

import numpy as np
import matplotlib
import matplotlib.pyplot as plt
from matplotlib.figure import Figure
from matplotlib.axes import Axes

from saferoute.client import to_geo_point
from saferoute.core.collision import SAMPLE_STRIDE

if TYPE_CHECKING:
    from saferoute.observer.mirror import MirroredTrajectory


def _path_arrays(trajectory: "MirroredTrajectory") -> tuple[np.ndarray, np.ndarray]:
    """(longitudes, latitudes) in decimal degrees."""
    points = [to_geo_point(c) for c in trajectory.coordinates]
    lons = np.array([float(p.longitude) for p in points])
    lats = np.array([float(p.latitude) for p in points])
    return lons, lats


def _car_colors(trajectories: Sequence["MirroredTrajectory"]) -> dict[int, tuple]:
    cmap = matplotlib.colormaps["tab10"]
    car_ids = sorted({t.car_id for t in trajectories})
    return {car_id: cmap(i % 10) for i, car_id in enumerate(car_ids)}


def plot_trajectories(
    trajectories: Sequence["MirroredTrajectory"],
    title: str = "Admitted Trajectories",
    ax: Axes | None = None,
    figsize: tuple[float, float] = (8, 8),
    show_start: bool = True,
    show_end: bool = True,
    show_samples: bool = False,
    sample_stride: int = SAMPLE_STRIDE,
) -> tuple[Figure, Axes]:
    """
    Plot mirrored trajectories on lon/lat axes.

    Args:
        trajectories: Mirror contents (e.g. LedgerMirror.trajectories)
        title: Plot title
        ax: Existing axes (creates new if None)
        show_start: Mark first point of each path
        show_end: Mark last point of each path
        show_samples: Mark the points used by the collision test
        sample_stride: Stride used for show_samples

    Returns:
        (fig, ax) tuple
    """
    if ax is None:
        fig, ax = plt.subplots(figsize=figsize)
    else:
        fig = ax.figure

    colors = _car_colors(trajectories)
    labelled: set[int] = set()

    for trajectory in trajectories:
        lons, lats = _path_arrays(trajectory)
        if len(lons) == 0:
            continue
        color = colors[trajectory.car_id]
        label = None
        if trajectory.car_id not in labelled:
            label = f"car {trajectory.car_id}"
            labelled.add(trajectory.car_id)

        ax.plot(lons, lats, color=color, linewidth=2, zorder=2, label=label)

        if show_samples:
            ax.scatter(
                lons[::sample_stride], lats[::sample_stride],
                color=color, s=25, marker="D", zorder=3,
                edgecolors="black", linewidths=0.5,
            )
        if show_start:
            ax.scatter(
                [lons[0]], [lats[0]],
                color=color, s=80, marker="o", zorder=4,
                edgecolors="white", linewidths=1,
            )
        if show_end:
            ax.scatter(
                [lons[-1]], [lats[-1]],
                color=color, s=80, marker="s", zorder=4,
                edgecolors="white", linewidths=1,
            )

    ax.set_title(title)
    ax.set_xlabel("Longitude (°)")
    ax.set_ylabel("Latitude (°)")
    if labelled:
        ax.legend(loc="upper right", fontsize=8)
    ax.grid(True, alpha=0.3)

    return fig, ax


def plot_slot_timeline(
    trajectories: Sequence["MirroredTrajectory"],
    title: str = "Slot Windows",
    ax: Axes | None = None,
    figsize: tuple[float, float] = (10, 4),
) -> tuple[Figure, Axes]:
    """
    Horizontal bars of [start_slot, end_slot) per trajectory index.

    Overlapping bars are the pairs the engine tests spatially.
    """
    if ax is None:
        fig, ax = plt.subplots(figsize=figsize)
    else:
        fig = ax.figure

    colors = _car_colors(trajectories)
    for trajectory in trajectories:
        meta = trajectory.meta
        ax.barh(
            trajectory.index,
            meta.end_slot - meta.start_slot,
            left=meta.start_slot,
            color=colors[trajectory.car_id],
            edgecolor="black",
            linewidth=0.5,
        )
        ax.text(
            meta.start_slot, trajectory.index, f" car {meta.car_id}",
            va="center", ha="left", fontsize=8,
        )

    ax.set_title(title)
    ax.set_xlabel("Slot")
    ax.set_ylabel("Ledger index")
    ax.invert_yaxis()
    ax.grid(True, axis="x", alpha=0.3)

    return fig, ax


def save_figure(fig: Figure, path: str | Path, dpi: int = 150, **kwargs) -> None:
    """Save figure to file."""
    fig.savefig(path, dpi=dpi, bbox_inches="tight", **kwargs)
