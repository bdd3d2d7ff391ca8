"""
Exceptions raised by the lockstep engine.

Configuration problems are caught before a run starts. Everything else
signals that the model itself is inconsistent: a well-formed simulation
never raises them, so callers should treat them as fatal.
"""

from __future__ import annotations


class LockstepSimError(Exception):
    """Base class for all lockstepsim errors."""


class ConfigurationError(LockstepSimError, ValueError):
    """A simulation or latency parameter is out of range."""


class ProtocolInvariantError(LockstepSimError):
    """A message arrived that the destination client was not waiting for."""

    def __init__(self, client_id: int, sending_client: int, target_cycle: int):
        self.client_id = client_id
        self.sending_client = sending_client
        self.target_cycle = target_cycle
        super().__init__(
            f"Client {client_id} received cycle {target_cycle} from client "
            f"{sending_client} but has no matching pending wait"
        )


class EmptyEventQueueError(LockstepSimError):
    """The event queue ran dry before the event budget was spent."""


class SimulationDeadlockError(EmptyEventQueueError):
    """Every client is stalled and nothing is left in flight."""

    def __init__(self, stalled_clients: list[int], elapsed_time: int):
        self.stalled_clients = list(stalled_clients)
        self.elapsed_time = elapsed_time
        super().__init__(
            f"Deadlock at {elapsed_time}ms: clients {self.stalled_clients} "
            f"are all stalled with no pending events"
        )


class ClockOrderError(LockstepSimError):
    """An event was popped with a trigger time behind the clock."""

    def __init__(self, trigger_time: int, elapsed_time: int):
        self.trigger_time = trigger_time
        self.elapsed_time = elapsed_time
        super().__init__(
            f"Event at {trigger_time}ms popped after clock reached {elapsed_time}ms"
        )
