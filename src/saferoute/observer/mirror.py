"""
LedgerMirror: an observer's local copy of the ledger.

Events may arrive twice or not at all, so the mirror never patches
itself from event payloads. It reconciles by reading the whole ledger
through count() / meta() / coordinate() and replacing its copy in one
step. Two mirrors that reload from the same ledger hold identical
contents, whatever events each of them saw.

Event handling:
- accepted=True  → schedule a reload after reload_delay seconds
                   (lets the write become visible to remote readers)
- accepted=False → nothing to do, the ledger did not change
"""

from __future__ import annotations
from collections import deque
from dataclasses import dataclass
import logging
import threading
from typing import Any, Callable, Protocol

from saferoute.core.events import SubmissionOutcome, Subscription
from saferoute.core.ledger import TrajectoryMeta

logger = logging.getLogger(__name__)


class LedgerReader(Protocol):
    """Read interface the mirror reloads from."""

    def count(self) -> int:
        ...

    def meta(self, index: int) -> TrajectoryMeta:
        ...

    def coordinate(self, traj_index: int, coord_index: int) -> Any:
        ...


class OutcomeSource(Protocol):
    """Anything that hands out outcome subscriptions."""

    def subscribe(self, callback: Callable[[SubmissionOutcome], None]) -> Subscription:
        ...

    def unsubscribe(self, subscription: Subscription) -> None:
        ...


@dataclass(frozen=True)
class MirroredTrajectory:
    """One ledger entry as seen by an observer."""

    index: int
    meta: TrajectoryMeta
    coordinates: tuple

    @property
    def car_id(self) -> int:
        return self.meta.car_id


@dataclass
class MirrorConfig:
    """Configuration for a ledger mirror."""

    reload_delay: float = 2.0  # Seconds between an accepted event and the reload; 0 = inline
    history_size: int = 50  # Recent events kept for notifications


class LedgerMirror:
    """
    Local mirror of a ledger, kept in sync by wholesale reloads.

    Usage:
        mirror = LedgerMirror(service)
        mirror.attach(service)   # follow outcome events
        mirror.reload()          # initial snapshot
    """

    def __init__(self, reader: LedgerReader, config: MirrorConfig | None = None):
        self.reader = reader
        self.config = config or MirrorConfig()

        self._trajectories: tuple[MirroredTrajectory, ...] = ()
        self._lock = threading.Lock()
        self._reload_lock = threading.Lock()
        self._pending: threading.Timer | None = None
        self._subscription: Subscription | None = None
        self._source: OutcomeSource | None = None

        self.recent_events: deque[SubmissionOutcome] = deque(maxlen=self.config.history_size)
        self.reloads: int = 0

    # ─────────────────────────────────────────────────────────────────
    # Mirror contents
    # ─────────────────────────────────────────────────────────────────

    @property
    def trajectories(self) -> tuple[MirroredTrajectory, ...]:
        """Current mirrored trajectories in index order."""
        return self._trajectories

    def __len__(self) -> int:
        return len(self._trajectories)

    def __getitem__(self, index: int) -> MirroredTrajectory:
        return self._trajectories[index]

    @property
    def last_event(self) -> SubmissionOutcome | None:
        return self.recent_events[-1] if self.recent_events else None

    # ─────────────────────────────────────────────────────────────────
    # Reconciliation
    # ─────────────────────────────────────────────────────────────────

    def reload(self) -> tuple[MirroredTrajectory, ...]:
        """
        Read the full ledger and replace the mirror with it.

        Entries are never removed from the ledger, so reading count()
        first and then every index below it is a consistent snapshot.
        Reloads run one at a time, read and swap together, so a slower
        reload can never replace the result of a later one.
        Errors propagate and leave the previous mirror in place.
        """
        reader = self.reader
        with self._reload_lock:
            n = reader.count()
            fresh = []
            for i in range(n):
                meta = reader.meta(i)
                coordinates = tuple(reader.coordinate(i, j) for j in range(meta.path_length))
                fresh.append(MirroredTrajectory(index=i, meta=meta, coordinates=coordinates))

            with self._lock:
                self._trajectories = tuple(fresh)
                self.reloads += 1
        logger.debug(f"Mirror reloaded {n} trajectories")
        return self._trajectories

    def handle_event(self, outcome: SubmissionOutcome) -> None:
        """Outcome callback: remember the event, reload if the ledger grew."""
        self.recent_events.append(outcome)
        if not outcome.accepted:
            return
        if self.config.reload_delay <= 0:
            self.reload()
        else:
            self.schedule_reload()

    def schedule_reload(self, delay: float | None = None) -> None:
        """Reload after delay seconds; a reload already pending absorbs this one."""
        if delay is None:
            delay = self.config.reload_delay
        with self._lock:
            if self._pending is not None:
                return
            timer = threading.Timer(delay, self._run_scheduled_reload)
            timer.daemon = True
            self._pending = timer
        timer.start()

    @property
    def reload_pending(self) -> bool:
        return self._pending is not None

    def _run_scheduled_reload(self) -> None:
        with self._lock:
            self._pending = None
        try:
            self.reload()
        except Exception as e:
            logger.error(f"Scheduled mirror reload failed: {e}", exc_info=True)

    # ─────────────────────────────────────────────────────────────────
    # Subscription lifecycle
    # ─────────────────────────────────────────────────────────────────

    def attach(self, source: OutcomeSource) -> Subscription:
        """Start following outcome events from source."""
        self.detach()
        self._source = source
        self._subscription = source.subscribe(self.handle_event)
        return self._subscription

    def detach(self) -> None:
        """Stop following events. Safe to call when not attached."""
        if self._source is not None and self._subscription is not None:
            self._source.unsubscribe(self._subscription)
        self._source = None
        self._subscription = None

    def close(self) -> None:
        """Detach and cancel any pending reload."""
        self.detach()
        with self._lock:
            pending, self._pending = self._pending, None
        if pending is not None:
            pending.cancel()
