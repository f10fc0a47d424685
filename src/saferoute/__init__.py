"""
saferoute: admission control for vehicle trajectories

Vehicles submit a path with a time window. The engine admits the path
only if it does not conflict with paths already admitted:

- Coordinates are fixed-point integers (degrees × 1e6)
- Time is bucketed into integer slots
- Two trajectories conflict when their slot windows overlap AND some
  pair of sampled points lies within the collision distance
- Admitted trajectories go to an append-only ledger
- Every submission emits one outcome event; observers mirror the
  ledger by reloading it wholesale
"""

__version__ = "0.1.0"
