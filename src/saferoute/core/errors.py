"""
Error taxonomy for the admission engine.

Two families:
- Validation errors: the submission itself is malformed. Raised before
  the ledger is read, no event is emitted, nothing changes.
- Lookup errors: a read asked for an index the ledger does not have.
  The ledger never removes entries, so this is always a caller bug or
  a stale cached count.

A collision rejection is NOT an error. It is a normal outcome with
accepted=False.
"""


class SafeRouteError(Exception):
    """Base class for all saferoute errors."""


class SubmissionValidationError(SafeRouteError, ValueError):
    """A submission failed a precondition check."""


class EmptyPathError(SubmissionValidationError):
    """The submitted path has no coordinates."""

    def __init__(self, message: str = "Path cannot be empty"):
        super().__init__(message)


class InvalidWindowError(SubmissionValidationError):
    """The time window maps to an empty or negative slot range."""

    def __init__(self, start_slot: int | None = None, end_slot: int | None = None, message: str | None = None):
        self.start_slot = start_slot
        self.end_slot = end_slot
        if message is None:
            message = f"End slot {end_slot} must be greater than start slot {start_slot}"
        super().__init__(message)


class InvalidCarIdError(SubmissionValidationError):
    """Car ids are unsigned integers."""

    def __init__(self, car_id):
        self.car_id = car_id
        super().__init__(f"Car ID must be a non-negative integer, got {car_id!r}")


class LedgerLookupError(SafeRouteError, LookupError):
    """A ledger read referenced a position that does not exist."""


class IndexOutOfRangeError(LedgerLookupError, IndexError):
    """Trajectory index >= count()."""

    def __init__(self, index: int, count: int):
        self.index = index
        self.count = count
        super().__init__(f"Trajectory index {index} out of range (count={count})")


class InvalidTrajectoryError(LedgerLookupError):
    """Trajectory index >= count() in a coordinate lookup."""

    def __init__(self, traj_index: int, count: int):
        self.traj_index = traj_index
        self.count = count
        super().__init__(f"Invalid trajectory index {traj_index} (count={count})")


class InvalidCoordinateError(LedgerLookupError):
    """Coordinate index >= path length of the trajectory."""

    def __init__(self, traj_index: int, coord_index: int, path_length: int):
        self.traj_index = traj_index
        self.coord_index = coord_index
        self.path_length = path_length
        super().__init__(
            f"Invalid coordinate index {coord_index} for trajectory {traj_index} "
            f"(path length={path_length})"
        )


class SnapshotFormatError(SafeRouteError, ValueError):
    """A persisted ledger snapshot is malformed."""
