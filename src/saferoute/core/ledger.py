"""
Trajectory ledger: the append-only record of admitted trajectories.

Entries are indexed 0, 1, 2, ... in admission order. Once written an
entry never changes and is never removed, so an index stays valid for
the lifetime of the ledger.

Only the collision engine appends. Everyone else reads through
count() / meta() / coordinate().
"""

from __future__ import annotations
from dataclasses import dataclass, field
from functools import cached_property
import logging
import threading
from typing import Iterable, Iterator

import numpy as np

from saferoute.core.errors import (
    EmptyPathError,
    IndexOutOfRangeError,
    InvalidCoordinateError,
    InvalidTrajectoryError,
    InvalidWindowError,
)
from saferoute.core.geometry import Coordinate, as_fixed_array

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TrajectoryMeta:
    """Summary of a stored trajectory, without its coordinates."""

    car_id: int
    start_slot: int
    end_slot: int
    path_length: int


@dataclass(frozen=True)
class Trajectory:
    """
    An admitted path with its slot window.

    Invariants: end_slot > start_slot, path is non-empty.
    """

    car_id: int
    start_slot: int
    end_slot: int
    path: tuple[Coordinate, ...] = field(repr=False)

    def __post_init__(self):
        if not isinstance(self.path, tuple):
            object.__setattr__(self, "path", tuple(self.path))
        if not self.path:
            raise EmptyPathError()
        if self.end_slot <= self.start_slot:
            raise InvalidWindowError(self.start_slot, self.end_slot)

    @property
    def path_length(self) -> int:
        return len(self.path)

    @property
    def meta(self) -> TrajectoryMeta:
        return TrajectoryMeta(
            car_id=self.car_id,
            start_slot=self.start_slot,
            end_slot=self.end_slot,
            path_length=len(self.path),
        )

    @cached_property
    def path_array(self) -> np.ndarray:
        """Read-only [path_length, 2] fixed-point array of the path."""
        arr = as_fixed_array(self.path)
        arr.flags.writeable = False
        return arr


class TrajectoryLedger:
    """
    Append-only, indexed store of trajectories.

    Reads are lock-free: an entry becomes visible only when the fully
    built Trajectory is appended, so a reader never sees a partial write.
    Appends are serialized by an internal lock.
    """

    def __init__(self):
        self._entries: list[Trajectory] = []
        self._append_lock = threading.Lock()

    @classmethod
    def restore(cls, trajectories: Iterable[Trajectory]) -> TrajectoryLedger:
        """
        Rebuild a ledger from stored trajectories, preserving their order.

        Intended for storage collaborators reloading a persisted ledger.
        """
        ledger = cls()
        for trajectory in trajectories:
            if not isinstance(trajectory, Trajectory):
                raise TypeError(f"Expected Trajectory, got {type(trajectory).__name__}")
            ledger.append(trajectory)
        logger.debug(f"Restored ledger with {ledger.count()} trajectories")
        return ledger

    # ─────────────────────────────────────────────────────────────────
    # Reads
    # ─────────────────────────────────────────────────────────────────

    def count(self) -> int:
        """Number of admitted trajectories."""
        return len(self._entries)

    def __len__(self) -> int:
        return self.count()

    def __iter__(self) -> Iterator[Trajectory]:
        return iter(self.snapshot())

    def snapshot(self) -> tuple[Trajectory, ...]:
        """All committed trajectories at this instant, in index order."""
        return tuple(self._entries)

    def trajectory(self, index: int) -> Trajectory:
        """
        Stored trajectory at index.

        Raises:
            IndexOutOfRangeError: index < 0 or index >= count()
        """
        count = len(self._entries)
        if not 0 <= index < count:
            raise IndexOutOfRangeError(index, count)
        return self._entries[index]

    def meta(self, index: int) -> TrajectoryMeta:
        """
        Metadata for the trajectory at index.

        Raises:
            IndexOutOfRangeError: index < 0 or index >= count()
        """
        return self.trajectory(index).meta

    def coordinate(self, traj_index: int, coord_index: int) -> Coordinate:
        """
        One coordinate of a stored path.

        Raises:
            InvalidTrajectoryError: traj_index out of range
            InvalidCoordinateError: coord_index >= path length
        """
        count = len(self._entries)
        if not 0 <= traj_index < count:
            raise InvalidTrajectoryError(traj_index, count)
        path = self._entries[traj_index].path
        if not 0 <= coord_index < len(path):
            raise InvalidCoordinateError(traj_index, coord_index, len(path))
        return path[coord_index]

    # ─────────────────────────────────────────────────────────────────
    # Write
    # ─────────────────────────────────────────────────────────────────

    def append(self, trajectory: Trajectory) -> int:
        """
        Append a trajectory and return its index (the count before appending).

        Called by the collision engine on admission only.
        """
        with self._append_lock:
            index = len(self._entries)
            self._entries.append(trajectory)
        logger.debug(f"Appended trajectory {index} for car {trajectory.car_id}")
        return index
