"""
Core admission engine.

This layer knows nothing about wallets, maps or transports. It only knows:
- Fixed-point coordinates and integer distances
- Integer time slots
- The append-only ledger of admitted trajectories
- The admit/reject rule (slot overlap + sampled proximity)
- One outcome event per evaluated submission
"""

from saferoute.core.errors import (
    SafeRouteError,
    SubmissionValidationError,
    EmptyPathError,
    InvalidWindowError,
    InvalidCarIdError,
    LedgerLookupError,
    IndexOutOfRangeError,
    InvalidTrajectoryError,
    InvalidCoordinateError,
    SnapshotFormatError,
)
from saferoute.core.geometry import SCALE, Coordinate, scale, unscale, isqrt, distance
from saferoute.core.time_slots import TIME_SLOT_DURATION, to_slot, slot_window, windows_overlap
from saferoute.core.ledger import Trajectory, TrajectoryMeta, TrajectoryLedger
from saferoute.core.events import SubmissionOutcome, Subscription, EventBus, EventBusConfig
from saferoute.core.collision import (
    COLLISION_DISTANCE,
    SAMPLE_STRIDE,
    CollisionConfig,
    CollisionEngine,
)
from saferoute.core.persistence import save_ledger, load_ledger

__all__ = [
    "SafeRouteError",
    "SubmissionValidationError",
    "EmptyPathError",
    "InvalidWindowError",
    "InvalidCarIdError",
    "LedgerLookupError",
    "IndexOutOfRangeError",
    "InvalidTrajectoryError",
    "InvalidCoordinateError",
    "SnapshotFormatError",
    "SCALE",
    "Coordinate",
    "scale",
    "unscale",
    "isqrt",
    "distance",
    "TIME_SLOT_DURATION",
    "to_slot",
    "slot_window",
    "windows_overlap",
    "Trajectory",
    "TrajectoryMeta",
    "TrajectoryLedger",
    "SubmissionOutcome",
    "Subscription",
    "EventBus",
    "EventBusConfig",
    "COLLISION_DISTANCE",
    "SAMPLE_STRIDE",
    "CollisionConfig",
    "CollisionEngine",
    "save_ledger",
    "load_ledger",
]
