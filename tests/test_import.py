"""Basic import tests to verify package structure."""


def test_import_saferoute():
    """Verify main package imports."""
    import saferoute
    assert saferoute.__version__ == "0.1.0"


def test_import_core():
    """Verify core module structure exists."""
    from saferoute import core
    assert hasattr(core, "__doc__")
    assert hasattr(core, "CollisionEngine")


def test_import_observer():
    """Verify observer module structure exists."""
    from saferoute import observer
    assert hasattr(observer, "LedgerMirror")


def test_import_service():
    from saferoute.service import TrajectoryValidationService
    assert TrajectoryValidationService is not None
