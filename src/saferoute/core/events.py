"""
Outcome events and the publish/subscribe bus.

Every submission that passes validation produces exactly one
SubmissionOutcome, published in submission order. Delivery to
subscribers is at-least-once from the observer's point of view: an
observer must not rely on seeing each event exactly once, and should
reconcile by reloading the ledger (see saferoute.observer).

Publishing never raises into the submitter. A subscriber that raises is
logged and the remaining subscribers still receive the event.

Publishing is split in two steps so the engine can hold its lock for
the first one only:

    post(outcome)       append to the ordered pending queue
    deliver_pending()   run callbacks, outside any engine lock

In "sync" mode one thread at a time drains the pending queue. A thread
that finds another one draining returns at once and its outcome is
delivered by the drainer, in order. A callback that submits again is
therefore never blocked on itself.
"""

from __future__ import annotations
from collections import deque
from dataclasses import dataclass, field
from itertools import count
import logging
import queue
import threading
from typing import Callable, Literal

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SubmissionOutcome:
    """Result of one submission: accepted or rejected, with its slot window."""

    car_id: int
    accepted: bool
    start_slot: int
    end_slot: int


OutcomeCallback = Callable[[SubmissionOutcome], None]


@dataclass(eq=False)
class Subscription:
    """Handle returned by subscribe(); pass it back to unsubscribe()."""

    callback: OutcomeCallback
    subscription_id: int
    active: bool = field(default=True)


@dataclass
class EventBusConfig:
    """Configuration for the event bus."""

    # "sync": deliver in a publishing thread, after the engine lock is released
    # "thread": hand off to a background dispatcher thread (publish never waits)
    dispatch: Literal["sync", "thread"] = "sync"


_STOP = object()


class EventBus:
    """
    Fan-out of SubmissionOutcome events to registered callbacks.

    The subscriber list is replaced, never mutated in place, so
    subscribe/unsubscribe are safe from any thread and from inside a
    callback. A subscription removed mid-delivery finishes the callback
    it is already running but receives nothing after that.
    """

    def __init__(self, config: EventBusConfig | None = None):
        self.config = config or EventBusConfig()
        self._subscribers: tuple[Subscription, ...] = ()
        self._lock = threading.Lock()
        self._ids = count()

        self._pending: deque[SubmissionOutcome] = deque()
        self._pending_lock = threading.Lock()
        self._draining = False

        self._queue: queue.Queue | None = None
        self._worker: threading.Thread | None = None
        if self.config.dispatch == "thread":
            self._queue = queue.Queue()
            self._worker = threading.Thread(
                target=self._run_dispatcher,
                name="saferoute-event-dispatcher",
                daemon=True,
            )
            self._worker.start()
        elif self.config.dispatch != "sync":
            raise ValueError(f"Unknown dispatch mode: {self.config.dispatch!r}")

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    def subscribe(self, callback: OutcomeCallback) -> Subscription:
        """Register a callback for every future outcome."""
        with self._lock:
            subscription = Subscription(callback=callback, subscription_id=next(self._ids))
            self._subscribers = self._subscribers + (subscription,)
        logger.debug(f"Subscription {subscription.subscription_id} registered")
        return subscription

    def unsubscribe(self, subscription: Subscription) -> None:
        """Stop delivery to a subscription. Unknown or repeated handles are ignored."""
        with self._lock:
            subscription.active = False
            self._subscribers = tuple(s for s in self._subscribers if s is not subscription)

    def publish(self, outcome: SubmissionOutcome) -> None:
        """Deliver an outcome to all current subscribers."""
        self.post(outcome)
        self.deliver_pending()

    def post(self, outcome: SubmissionOutcome) -> None:
        """Queue an outcome in publish order without running any callback."""
        if self._queue is not None:
            self._queue.put(outcome)
        else:
            with self._pending_lock:
                self._pending.append(outcome)

    def deliver_pending(self) -> None:
        """
        Deliver posted outcomes in order (sync mode).

        Returns immediately if another call is already draining; that
        call picks up everything posted before it finishes.
        """
        if self._queue is not None:
            return
        while True:
            with self._pending_lock:
                if self._draining or not self._pending:
                    return
                self._draining = True
                outcome = self._pending.popleft()
            try:
                self._deliver(outcome)
            finally:
                with self._pending_lock:
                    self._draining = False

    def flush(self) -> None:
        """Block until every queued outcome has been delivered."""
        if self._queue is not None:
            self._queue.join()
        else:
            self.deliver_pending()

    def close(self) -> None:
        """Deliver what is queued, then stop the dispatcher thread."""
        if self._queue is None or self._worker is None:
            return
        if self._worker.is_alive():
            self._queue.put(_STOP)
            self._worker.join()

    def _deliver(self, outcome: SubmissionOutcome) -> None:
        for subscription in self._subscribers:
            if not subscription.active:
                continue
            try:
                subscription.callback(outcome)
            except Exception as e:
                logger.error(
                    f"Subscriber {subscription.subscription_id} failed on {outcome}: {e}",
                    exc_info=True,
                )

    def _run_dispatcher(self) -> None:
        while True:
            item = self._queue.get()
            try:
                if item is _STOP:
                    return
                self._deliver(item)
            finally:
                self._queue.task_done()
