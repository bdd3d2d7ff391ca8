"""
Events and the time-ordered queue that holds them.

Two things can happen in the simulated world:
- UpdateCycleDue: a client's periodic local tick has come round
- MessageArrived: a peer's cycle notice reaches its destination

Events are ordered by trigger time only. Ties pop in insertion order,
so a run is fully determined by the latency generator's seed.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Union
import heapq

from lockstepsim.core.errors import EmptyEventQueueError


@dataclass(frozen=True)
class Message:
    """
    Notice that `sending_client` has completed (or seeded) `target_cycle`
    and `dest_client` should learn of it.
    """

    target_cycle: int
    sending_client: int
    dest_client: int


@dataclass(frozen=True)
class UpdateCycleDue:
    """Client `client_id`'s next local update tick."""

    trigger_time: int
    client_id: int

    def describe(self) -> str:
        return f"Update cycle for client {self.client_id}"


@dataclass(frozen=True)
class MessageArrived:
    """A Message reaching its destination client."""

    trigger_time: int
    message: Message

    def describe(self) -> str:
        msg = self.message
        return (
            f"Message arrived for client {msg.dest_client} from client "
            f"{msg.sending_client} for update cycle {msg.target_cycle}"
        )


Event = Union[UpdateCycleDue, MessageArrived]


@dataclass(order=True)
class _QueueEntry:
    trigger_time: int
    seq: int  # tie-breaker: insertion order
    event: Event = field(compare=False)


class EventQueue:
    """Min-heap of pending events keyed by (trigger_time, insertion order)."""

    def __init__(self):
        self._heap: list[_QueueEntry] = []
        self._seq = 0

    def push(self, event: Event) -> None:
        if event.trigger_time < 0:
            raise ValueError(f"Trigger time must be non-negative, got {event.trigger_time}")
        heapq.heappush(self._heap, _QueueEntry(event.trigger_time, self._seq, event))
        self._seq += 1

    def pop_earliest(self) -> Event:
        """Remove and return the earliest event."""
        if not self._heap:
            raise EmptyEventQueueError("No pending events to process")
        return heapq.heappop(self._heap).event

    def peek_time(self) -> int | None:
        """Trigger time of the earliest event, or None when empty."""
        if not self._heap:
            return None
        return self._heap[0].trigger_time

    def pending(self) -> list[Event]:
        """Snapshot of queued events in pop order."""
        return [entry.event for entry in sorted(self._heap)]

    def __len__(self) -> int:
        return len(self._heap)

    def __bool__(self) -> bool:
        return bool(self._heap)
