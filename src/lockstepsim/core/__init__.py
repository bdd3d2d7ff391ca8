"""
Core engine primitives.

This layer knows NOTHING about sweeps, statistics or plots.
It only knows:
- Messages in flight and the delay they take
- A time-ordered queue of pending events
- Clients that tick, notify peers, and stall when their buffer runs out
- One dispatcher step that advances simulated time to the next event
"""

from lockstepsim.core.errors import (
    LockstepSimError,
    ConfigurationError,
    ProtocolInvariantError,
    EmptyEventQueueError,
    SimulationDeadlockError,
    ClockOrderError,
)
from lockstepsim.core.latency import LatencyConfig, LatencyModel
from lockstepsim.core.events import Message, UpdateCycleDue, MessageArrived, EventQueue
from lockstepsim.core.client import Client, PendingWait, ArrivalOutcome
from lockstepsim.core.clock import (
    UPDATE_PERIOD_MS,
    SimulationClock,
    SimulationState,
    ProcessedEvent,
    advance_to_next_event,
)
from lockstepsim.core.simulation import (
    SimulationConfig,
    SimulationResult,
    Simulation,
    run_simulation,
)

__all__ = [
    "LockstepSimError",
    "ConfigurationError",
    "ProtocolInvariantError",
    "EmptyEventQueueError",
    "SimulationDeadlockError",
    "ClockOrderError",
    "LatencyConfig",
    "LatencyModel",
    "Message",
    "UpdateCycleDue",
    "MessageArrived",
    "EventQueue",
    "Client",
    "PendingWait",
    "ArrivalOutcome",
    "UPDATE_PERIOD_MS",
    "SimulationClock",
    "SimulationState",
    "ProcessedEvent",
    "advance_to_next_event",
    "SimulationConfig",
    "SimulationResult",
    "Simulation",
    "run_simulation",
]
