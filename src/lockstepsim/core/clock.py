"""
World clock and event dispatcher.

SimulationClock owns simulated time, the event queue and the latency
model. advance_to_next_event() is the single step of the engine:

1. Pop the earliest event and move the clock to its trigger time
2. Route it to the client's tick or arrival transition
3. Push whatever follow-up events the transition produced
4. Narrate what happened through the module logger

All mutable state lives in one SimulationState passed to every call.
"""

from __future__ import annotations
from dataclasses import dataclass, field
import logging

from lockstepsim.core.client import Client
from lockstepsim.core.errors import (
    ClockOrderError,
    EmptyEventQueueError,
    SimulationDeadlockError,
)
from lockstepsim.core.events import (
    Event,
    EventQueue,
    Message,
    MessageArrived,
    UpdateCycleDue,
)
from lockstepsim.core.latency import LatencyModel

logger = logging.getLogger(__name__)

FPS = 60
UPDATE_PERIOD_MS = 1000 // FPS


class SimulationClock:
    """Simulated milliseconds plus everything scheduled to happen."""

    def __init__(self, latency: LatencyModel):
        self.elapsed_time = 0
        self.queue = EventQueue()
        self.latency = latency

    def schedule_message(self, message: Message) -> int:
        """
        Put a message in flight with a freshly sampled delay.

        Returns the delay in ms.
        """
        delay = self.latency.sample_delay()
        logger.debug(
            "Sending update to client %d from client %d for cycle %d with a delay of %dms...",
            message.dest_client, message.sending_client, message.target_cycle, delay,
        )
        self.queue.push(MessageArrived(self.elapsed_time + delay, message))
        return delay

    def schedule_update_cycle(self, client_id: int, at: int) -> None:
        """Schedule client_id's next tick at absolute time `at`."""
        if at < self.elapsed_time:
            raise ValueError(f"Cannot schedule in the past: {at} < {self.elapsed_time}")
        logger.debug("Scheduling next update cycle for client %d at %dms...", client_id, at)
        self.queue.push(UpdateCycleDue(at, client_id))

    def pop(self) -> Event:
        """
        Remove the earliest event and move the clock to its trigger time.

        Raises:
            ClockOrderError: the event lies before the current time
        """
        event = self.queue.pop_earliest()
        if event.trigger_time < self.elapsed_time:
            raise ClockOrderError(event.trigger_time, self.elapsed_time)
        self.elapsed_time = event.trigger_time
        return event


@dataclass
class ProcessedEvent:
    """Record of one dispatched event, kept for analysis and tests."""

    time: int
    kind: str  # "update_cycle" or "message"
    client_id: int
    cycle: int  # client's cycle after the event (tick) or message target cycle
    sending_client: int | None = None
    stalled: bool = False
    resumed: bool = False
    drained_cycles: list[int] = field(default_factory=list)


@dataclass
class SimulationState:
    """The whole simulated world: one clock and its clients."""

    clock: SimulationClock
    clients: list[Client]
    update_period: int = UPDATE_PERIOD_MS
    history: list[ProcessedEvent] = field(default_factory=list)

    @property
    def elapsed_time(self) -> int:
        return self.clock.elapsed_time

    def stalled_clients(self) -> list[int]:
        return [c.client_id for c in self.clients if c.is_stalled]


def advance_to_next_event(state: SimulationState) -> ProcessedEvent:
    """
    Process exactly one event.

    Raises:
        SimulationDeadlockError: queue empty while every client is stalled
        EmptyEventQueueError: queue empty for any other reason
        ProtocolInvariantError: a message was a duplicate or matched no
            pending wait for a cycle already registered
        ClockOrderError: the earliest event lies before the clock
    """
    clock = state.clock
    if not clock.queue:
        stalled = state.stalled_clients()
        if stalled and len(stalled) == len(state.clients):
            raise SimulationDeadlockError(stalled, clock.elapsed_time)
        raise EmptyEventQueueError(
            f"Event queue ran dry at {clock.elapsed_time}ms with clients still running"
        )

    event = clock.pop()
    logger.info("Event: %s (sim time: %dms)", event.describe(), clock.elapsed_time)

    if isinstance(event, UpdateCycleDue):
        record = _handle_update_cycle(state, event.client_id)
    else:
        record = _handle_message(state, event.message)

    state.history.append(record)
    return record


def _handle_update_cycle(state: SimulationState, client_id: int) -> ProcessedEvent:
    clock = state.clock
    client = state.clients[client_id]
    logger.info("Update cycle %d just completed for client %d", client.current_cycle, client_id)

    outgoing = client.on_update_cycle()
    if outgoing is None:
        logger.info("Client %d has stalled!", client_id)
        return ProcessedEvent(
            time=clock.elapsed_time,
            kind="update_cycle",
            client_id=client_id,
            cycle=client.current_cycle,
            stalled=True,
        )

    for message in outgoing:
        clock.schedule_message(message)
    clock.schedule_update_cycle(client_id, clock.elapsed_time + state.update_period)

    return ProcessedEvent(
        time=clock.elapsed_time,
        kind="update_cycle",
        client_id=client_id,
        cycle=client.current_cycle,
    )


def _handle_message(state: SimulationState, message: Message) -> ProcessedEvent:
    clock = state.clock
    client = state.clients[message.dest_client]

    outcome = client.on_message(message)
    for cycle in outcome.drained_cycles:
        logger.info(
            "Client %d just received all other pending client info for frame %d.",
            client.client_id, cycle,
        )
    if outcome.resumed:
        logger.info("Client %d resumed", client.client_id)
        # Resume immediately rather than waiting for the next tick boundary
        clock.schedule_update_cycle(client.client_id, clock.elapsed_time)

    return ProcessedEvent(
        time=clock.elapsed_time,
        kind="message",
        client_id=client.client_id,
        cycle=message.target_cycle,
        sending_client=message.sending_client,
        resumed=outcome.resumed,
        drained_cycles=list(outcome.drained_cycles),
    )
