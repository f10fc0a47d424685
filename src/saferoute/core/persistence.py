"""
Ledger snapshots on disk.

A snapshot is a numpy .npz archive with one row per trajectory plus a
flat coordinate table:

    car_ids      [n]       int64 (object if too large)
    start_slots  [n]       int64
    end_slots    [n]       int64
    path_offsets [n + 1]   int64   trajectory i owns coords[offsets[i]:offsets[i+1]]
    coords       [total,2] int64 fixed-point (lat, lon)
    format_version         scalar

Loading replays the rows in index order, so indices and contents come
back exactly as saved.
"""

from __future__ import annotations
from pathlib import Path
import logging

import numpy as np

from saferoute.core.errors import SafeRouteError, SnapshotFormatError
from saferoute.core.geometry import Coordinate, as_fixed_array
from saferoute.core.ledger import Trajectory, TrajectoryLedger

logger = logging.getLogger(__name__)


FORMAT_VERSION = 1

_REQUIRED_KEYS = ("car_ids", "start_slots", "end_slots", "path_offsets", "coords", "format_version")


def _int_array(values: list[int]) -> np.ndarray:
    if all(abs(v) < 2 ** 63 for v in values):
        return np.array(values, dtype=np.int64)
    return np.array(values, dtype=object)


def save_ledger(ledger: TrajectoryLedger, path: str | Path) -> Path:
    """
    Write every committed trajectory to an .npz snapshot.

    Returns:
        The path written
    """
    path = Path(path)
    trajectories = ledger.snapshot()

    offsets = [0]
    all_coords: list[Coordinate] = []
    for trajectory in trajectories:
        all_coords.extend(trajectory.path)
        offsets.append(len(all_coords))

    coords = as_fixed_array(all_coords)
    stored_as_objects = coords.dtype == object

    with path.open("wb") as fh:
        np.savez(
            fh,
            car_ids=_int_array([t.car_id for t in trajectories]),
            start_slots=_int_array([t.start_slot for t in trajectories]),
            end_slots=_int_array([t.end_slot for t in trajectories]),
            path_offsets=np.array(offsets, dtype=np.int64),
            coords=coords,
            format_version=np.array(FORMAT_VERSION),
        )
    if stored_as_objects:
        logger.warning(
            f"Snapshot {path} stores coordinates as Python integers (values exceed int64 range); "
            "loading it needs allow_pickle=True"
        )
    logger.info(f"Saved {len(trajectories)} trajectories to {path}")
    return path


def load_ledger(path: str | Path, allow_pickle: bool = False) -> TrajectoryLedger:
    """
    Rebuild a ledger from an .npz snapshot.

    Snapshots of ordinary coordinates hold int64 arrays only and load
    with pickling disabled. A snapshot whose values exceed int64 stores
    them as object arrays, which numpy can only read by unpickling.
    Pass allow_pickle=True for such a snapshot, and only when the file
    is trusted: unpickling a crafted file can run arbitrary code.

    Raises:
        SnapshotFormatError: missing arrays, wrong version, inconsistent
            offsets, or object arrays without allow_pickle
    """
    path = Path(path)
    with np.load(path, allow_pickle=allow_pickle) as data:
        missing = [key for key in _REQUIRED_KEYS if key not in data.files]
        if missing:
            raise SnapshotFormatError(f"Snapshot {path} is missing arrays: {', '.join(missing)}")

        version = int(data["format_version"])
        if version != FORMAT_VERSION:
            raise SnapshotFormatError(f"Unsupported snapshot version {version} in {path}")

        try:
            car_ids = data["car_ids"]
            start_slots = data["start_slots"]
            end_slots = data["end_slots"]
            offsets = data["path_offsets"]
            coords = data["coords"].reshape(-1, 2)
        except ValueError as e:
            raise SnapshotFormatError(
                f"Snapshot {path} holds object arrays; load it with allow_pickle=True if the file is trusted"
            ) from e

    n = len(car_ids)
    if not (len(start_slots) == len(end_slots) == n and len(offsets) == n + 1):
        raise SnapshotFormatError(f"Snapshot {path} has mismatched array lengths")
    if offsets[0] != 0 or offsets[-1] != len(coords) or np.any(np.diff(offsets) < 0):
        raise SnapshotFormatError(f"Snapshot {path} has inconsistent path offsets")

    trajectories = []
    for i in range(n):
        rows = coords[offsets[i]:offsets[i + 1]]
        try:
            trajectories.append(Trajectory(
                car_id=int(car_ids[i]),
                start_slot=int(start_slots[i]),
                end_slot=int(end_slots[i]),
                path=tuple(Coordinate(int(lat), int(lon)) for lat, lon in rows),
            ))
        except SafeRouteError as e:
            raise SnapshotFormatError(f"Snapshot {path} entry {i} is invalid: {e}") from e

    ledger = TrajectoryLedger.restore(trajectories)
    logger.info(f"Loaded {ledger.count()} trajectories from {path}")
    return ledger
