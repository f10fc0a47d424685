"""
Pytest configuration and shared fixtures.
"""

import pytest
import matplotlib

matplotlib.use("Agg")


@pytest.fixture
def ledger():
    """An empty ledger."""
    from saferoute.core import TrajectoryLedger
    return TrajectoryLedger()


@pytest.fixture
def engine(ledger):
    """Collision engine with default constants and a sync event bus."""
    from saferoute.core import CollisionEngine, EventBus
    return CollisionEngine(ledger=ledger, events=EventBus())


@pytest.fixture
def service():
    """Validation service with default constants and a sync event bus."""
    from saferoute.service import TrajectoryValidationService
    svc = TrajectoryValidationService()
    yield svc
    svc.close()


@pytest.fixture
def scenario_a_path():
    """Car 1's path in the reference scenarios, decimal degrees."""
    return [(40.0, -74.0), (40.001, -74.001)]


@pytest.fixture
def recorded_events(service):
    """List that collects every outcome the service publishes."""
    events = []
    service.subscribe(events.append)
    return events
