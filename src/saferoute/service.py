"""
TrajectoryValidationService: the boundary a transport talks to.

Wraps the engine, ledger and event bus behind the operations a remote
caller needs, in decimal degrees rather than fixed-point units:

    submit(car_id, start_time, end_time, path) -> bool
    count() / meta(index) / coordinate(traj_index, coord_index)
    subscribe(callback) / unsubscribe(subscription)
    COLLISION_DISTANCE / TIME_SLOT_DURATION
"""

from __future__ import annotations
from dataclasses import dataclass, field
from pathlib import Path
import logging
from typing import Any, Iterable, Literal

from saferoute.client import GeoPoint, format_path
from saferoute.core.collision import COLLISION_DISTANCE, CollisionConfig, CollisionEngine
from saferoute.core.events import EventBus, EventBusConfig, OutcomeCallback, SubmissionOutcome, Subscription
from saferoute.core.ledger import TrajectoryLedger, TrajectoryMeta
from saferoute.core.persistence import load_ledger, save_ledger
from saferoute.core.time_slots import TIME_SLOT_DURATION

logger = logging.getLogger(__name__)


@dataclass
class ServiceConfig:
    """Configuration for a validation service."""

    collision_distance: int = COLLISION_DISTANCE
    time_slot_duration: int = TIME_SLOT_DURATION
    event_dispatch: Literal["sync", "thread"] = "sync"


class TrajectoryValidationService:
    """
    Admission control for vehicle paths, with an append-only ledger.

    Example:
        service = TrajectoryValidationService()
        service.submit(1, 0, 10, [(40.0, -74.0), (40.001, -74.001)])  # True
        service.count()  # 1
    """

    def __init__(
        self,
        config: ServiceConfig | None = None,
        ledger: TrajectoryLedger | None = None,
    ):
        self.config = config or ServiceConfig()
        self.ledger = ledger if ledger is not None else TrajectoryLedger()
        self.events = EventBus(EventBusConfig(dispatch=self.config.event_dispatch))
        self.engine = CollisionEngine(
            ledger=self.ledger,
            events=self.events,
            config=CollisionConfig(
                collision_distance=self.config.collision_distance,
                time_slot_duration=self.config.time_slot_duration,
            ),
        )
        logger.debug(
            f"Service ready: {self.ledger.count()} trajectories, "
            f"collision_distance={self.config.collision_distance}, dispatch={self.config.event_dispatch}"
        )

    @classmethod
    def from_snapshot(
        cls,
        path: str | Path,
        config: ServiceConfig | None = None,
        allow_pickle: bool = False,
    ) -> TrajectoryValidationService:
        """Start a service on a ledger loaded from save_snapshot() (see load_ledger for allow_pickle)."""
        return cls(config=config, ledger=load_ledger(path, allow_pickle=allow_pickle))

    def save_snapshot(self, path: str | Path) -> Path:
        return save_ledger(self.ledger, path)

    # ─────────────────────────────────────────────────────────────────
    # Constants
    # ─────────────────────────────────────────────────────────────────

    @property
    def COLLISION_DISTANCE(self) -> int:
        """Inclusive collision threshold in fixed-point units."""
        return self.engine.config.collision_distance

    @property
    def TIME_SLOT_DURATION(self) -> int:
        """Seconds per time slot."""
        return self.engine.config.time_slot_duration

    # ─────────────────────────────────────────────────────────────────
    # Write
    # ─────────────────────────────────────────────────────────────────

    def submit(self, car_id: int, start_time, end_time, path: Iterable[Any]) -> bool:
        """
        Submit a path in decimal degrees; True if admitted.

        Raises:
            EmptyPathError, InvalidWindowError, InvalidCarIdError
        """
        return self.submit_outcome(car_id, start_time, end_time, path).accepted

    def submit_outcome(self, car_id: int, start_time, end_time, path: Iterable[Any]) -> SubmissionOutcome:
        """Like submit(), returning the full outcome with its slot window."""
        return self.engine.submit(car_id, start_time, end_time, format_path(path))

    # ─────────────────────────────────────────────────────────────────
    # Reads
    # ─────────────────────────────────────────────────────────────────

    def count(self) -> int:
        return self.ledger.count()

    def meta(self, index: int) -> TrajectoryMeta:
        return self.ledger.meta(index)

    def coordinate(self, traj_index: int, coord_index: int) -> GeoPoint:
        """Stored coordinate in decimal degrees."""
        return GeoPoint.from_coordinate(self.ledger.coordinate(traj_index, coord_index))

    # ─────────────────────────────────────────────────────────────────
    # Events
    # ─────────────────────────────────────────────────────────────────

    def subscribe(self, callback: OutcomeCallback) -> Subscription:
        return self.events.subscribe(callback)

    def unsubscribe(self, subscription: Subscription) -> None:
        self.events.unsubscribe(subscription)

    def close(self) -> None:
        """Deliver queued events and stop the dispatcher."""
        self.events.close()
