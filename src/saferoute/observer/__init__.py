"""
Observers: local mirrors of the ledger.

Observers never see the engine's internal state. They follow outcome
events and reload the ledger through its read operations.
"""

from saferoute.observer.mirror import (
    LedgerMirror,
    LedgerReader,
    MirrorConfig,
    MirroredTrajectory,
    OutcomeSource,
)

__all__ = [
    "LedgerMirror",
    "LedgerReader",
    "MirrorConfig",
    "MirroredTrajectory",
    "OutcomeSource",
]
