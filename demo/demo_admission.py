#!/usr/bin/env python3
"""
Demo: Admission Control over an Append-Only Ledger

Walks through the reference scenarios:

1. Car 1 claims a path for 0s-10s → accepted as trajectory 0
2. Car 2 overlaps in time and passes within the collision distance → rejected
3. An empty path is refused before the engine runs
4. Car 3 reuses car 1's exact path at 20s-30s → accepted (time disjoint)
5. An observer that missed every event reloads and matches the ledger

Output: output/demo_admission/trajectories.png
"""

import logging
from pathlib import Path

import matplotlib.pyplot as plt

from saferoute.core import EmptyPathError
from saferoute.observer import LedgerMirror, MirrorConfig
from saferoute.service import TrajectoryValidationService
from saferoute.viz import plot_slot_timeline, plot_trajectories, save_figure


def main():
    logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")

    print("=" * 60)
    print("  ADMISSION CONTROL DEMONSTRATION")
    print("=" * 60)

    service = TrajectoryValidationService()
    print(f"\n   COLLISION_DISTANCE = {service.COLLISION_DISTANCE} fixed-point units")
    print(f"   TIME_SLOT_DURATION = {service.TIME_SLOT_DURATION} s")

    # Live observer follows events; late observer sees nothing until it reloads
    live = LedgerMirror(service, MirrorConfig(reload_delay=0))
    live.attach(service)
    late = LedgerMirror(service)

    print("\n1. Car 1, 0s-10s...")
    ok = service.submit(1, 0, 10, [(40.0, -74.0), (40.001, -74.001)])
    print(f"   accepted={ok}, count={service.count()}")

    print("\n2. Car 2, 5s-15s, 5e-5 degrees from car 1's start...")
    outcome = service.submit_outcome(2, 5, 15, [(40.00005, -74.0), (40.01, -74.01)])
    print(f"   {outcome}, count={service.count()}")

    print("\n3. Empty path...")
    try:
        service.submit(4, 0, 10, [])
    except EmptyPathError as e:
        print(f"   refused: {e}")

    print("\n4. Car 3, 20s-30s, same coordinates as car 1...")
    ok = service.submit(3, 20, 30, [(40.0, -74.0), (40.001, -74.001)])
    print(f"   accepted={ok}, count={service.count()}")

    print("\n5. Reconciliation...")
    print(f"   live mirror: {len(live)} trajectories, {len(live.recent_events)} events seen")
    print(f"   late mirror before reload: {len(late)} trajectories")
    late.reload()
    print(f"   late mirror after reload:  {len(late)} trajectories")
    same = [t.meta for t in live.trajectories] == [t.meta for t in late.trajectories]
    print(f"   mirrors agree: {same}")

    output_dir = Path("output/demo_admission")
    output_dir.mkdir(parents=True, exist_ok=True)

    fig, axes = plt.subplots(1, 2, figsize=(14, 6))
    plot_trajectories(late.trajectories, ax=axes[0], show_samples=True)
    plot_slot_timeline(late.trajectories, ax=axes[1])
    fig.tight_layout()
    save_figure(fig, output_dir / "trajectories.png")
    plt.close(fig)
    print(f"\n   Saved {output_dir / 'trajectories.png'}")

    live.close()
    service.close()


if __name__ == "__main__":
    main()
