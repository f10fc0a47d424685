"""
Collision engine: admit or reject a submitted path.

A submission collides with a stored trajectory when BOTH hold:

1. Temporal overlap on half-open slot windows:
       new_start < existing.end_slot  and  existing.start_slot < new_end
2. Sampled spatial proximity: some pair of points, taking every
   SAMPLE_STRIDE-th point of each path starting at index 0, lies at
   distance <= collision_distance (inclusive).

The sampling skips odd-indexed points on both sides. It can miss a
conflict between unsampled points; recorded decisions depend on the
exact stride, so it must not change.

All submissions are evaluated one at a time under a single lock: the
decision is made against a stable ledger and the appended index is
gapless.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from numbers import Integral
import logging
import threading
from typing import Sequence

import numpy as np

from saferoute.core.errors import EmptyPathError, InvalidCarIdError
from saferoute.core.events import EventBus, SubmissionOutcome
from saferoute.core.geometry import Coordinate, pairwise_squared_distances
from saferoute.core.ledger import Trajectory, TrajectoryLedger
from saferoute.core.time_slots import TIME_SLOT_DURATION, slot_window, windows_overlap

logger = logging.getLogger(__name__)


# Fixed-point units (1e-4 degrees, roughly 11 m of latitude).
COLLISION_DISTANCE = 100

# Every second point, starting at index 0.
SAMPLE_STRIDE = 2


@dataclass
class CollisionConfig:
    """Configuration for the collision engine."""

    collision_distance: int = COLLISION_DISTANCE  # Inclusive threshold, fixed-point units
    time_slot_duration: int = TIME_SLOT_DURATION  # Seconds per slot
    sample_stride: int = SAMPLE_STRIDE  # Changing this changes recorded decisions

    def __post_init__(self):
        if self.collision_distance < 0:
            raise ValueError("collision_distance must be non-negative")
        if self.time_slot_duration <= 0:
            raise ValueError("time_slot_duration must be positive")
        if self.sample_stride < 1:
            raise ValueError("sample_stride must be at least 1")


def sample_indices(path_length: int, stride: int = SAMPLE_STRIDE) -> range:
    """Indices of the points that take part in the spatial test."""
    return range(0, path_length, stride)


def sampled_points_collide(
    new_points: np.ndarray,
    existing_points: np.ndarray,
    collision_distance: int,
    stride: int = SAMPLE_STRIDE,
) -> bool:
    """
    True if any sampled pair of points is within collision_distance.

    Works on squared distances: floor(sqrt(d2)) <= D  <=>  d2 < (D + 1)².
    This is the same decision as comparing geometry.distance() against D,
    without a square root per pair.

    Args:
        new_points: [n, 2] fixed-point array of the candidate path
        existing_points: [m, 2] fixed-point array of a stored path
        collision_distance: inclusive threshold D
        stride: sampling stride applied to both paths
    """
    a = new_points[::stride]
    b = existing_points[::stride]
    if len(a) == 0 or len(b) == 0:
        return False
    d2 = pairwise_squared_distances(a, b)
    limit = (collision_distance + 1) ** 2
    return bool(np.any(d2 < limit))


@dataclass
class CollisionEngine:
    """
    Admission control over a trajectory ledger.

    submit() validates, evaluates against every stored trajectory, appends
    on admission and publishes exactly one outcome per evaluated
    submission. Validation failures raise before the ledger is read and
    publish nothing.

    The outcome is posted to the bus while the engine lock is held, so
    events keep submission order, and delivered after it is released.
    Subscribers may read the ledger and may call submit() themselves.
    """

    ledger: TrajectoryLedger = field(default_factory=TrajectoryLedger)
    events: EventBus = field(default_factory=EventBus)
    config: CollisionConfig = field(default_factory=CollisionConfig)

    submissions: int = field(default=0, init=False)
    accepted: int = field(default=0, init=False)
    _lock: threading.Lock = field(default_factory=threading.Lock, init=False, repr=False)

    def submit(
        self,
        car_id: int,
        start_time,
        end_time,
        path: Sequence[Coordinate],
    ) -> SubmissionOutcome:
        """
        Evaluate a submission.

        Args:
            car_id: Unsigned vehicle id
            start_time, end_time: Window in seconds
            path: Fixed-point coordinates, at least one

        Returns:
            The published SubmissionOutcome

        Raises:
            EmptyPathError: path has no coordinates
            InvalidCarIdError: car_id is not a non-negative integer
            InvalidWindowError: end slot <= start slot
        """
        path = tuple(path)
        if not path:
            raise EmptyPathError()
        if isinstance(car_id, bool) or not isinstance(car_id, Integral) or car_id < 0:
            raise InvalidCarIdError(car_id)
        start_slot, end_slot = slot_window(start_time, end_time, self.config.time_slot_duration)

        candidate = Trajectory(
            car_id=int(car_id),
            start_slot=start_slot,
            end_slot=end_slot,
            path=path,
        )

        with self._lock:
            conflict = self.find_conflict(candidate)
            accepted = conflict is None
            if accepted:
                index = self.ledger.append(candidate)
                self.accepted += 1
                logger.info(
                    f"Accepted car {candidate.car_id} slots [{start_slot}, {end_slot}) as trajectory {index}"
                )
            else:
                logger.info(
                    f"Rejected car {candidate.car_id} slots [{start_slot}, {end_slot}): "
                    f"conflicts with trajectory {conflict}"
                )
            self.submissions += 1

            outcome = SubmissionOutcome(
                car_id=candidate.car_id,
                accepted=accepted,
                start_slot=start_slot,
                end_slot=end_slot,
            )
            self.events.post(outcome)

        self.events.deliver_pending()
        return outcome

    def find_conflict(self, candidate: Trajectory) -> int | None:
        """
        Index of the first stored trajectory that collides with candidate.

        Returns None when the candidate is admissible. Read-only.
        """
        cfg = self.config
        for index, existing in enumerate(self.ledger.snapshot()):
            if not windows_overlap(
                candidate.start_slot, candidate.end_slot,
                existing.start_slot, existing.end_slot,
            ):
                continue
            if sampled_points_collide(
                candidate.path_array,
                existing.path_array,
                cfg.collision_distance,
                cfg.sample_stride,
            ):
                return index
        return None
