"""
Visualization utilities.

- Admitted trajectory plots (longitude/latitude)
- Slot-window timelines
"""

from saferoute.viz.trajectories import (
    plot_trajectories,
    plot_slot_timeline,
    save_figure,
)

__all__ = [
    "plot_trajectories",
    "plot_slot_timeline",
    "save_figure",
]
