"""Access control package: the PIN gate."""

from taka_tracker.access.gate import (
    AccessGate,
    Cancellable,
    GateOutcome,
    GateState,
    Scheduler,
    asyncio_scheduler,
)

__all__ = [
    "AccessGate",
    "Cancellable",
    "GateOutcome",
    "GateState",
    "Scheduler",
    "asyncio_scheduler",
]
