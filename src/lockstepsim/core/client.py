"""
Client: one participant's view of the lockstep protocol.

A client ticks through update cycles at a fixed rate. Each time it
completes a cycle it tells every peer, and records that it will itself
need the matching notice from every peer before it can get that far.

Bookkeeping:
- pending_waits: (from_client, cycle) notices still outstanding, in
  arrival-of-registration order
- next_cycle_awaited: lowest cycle not yet known to be fully acknowledged
- current_cycle == next_cycle_awaited means the buffer is exhausted:
  the client stalls until peer input catches up
- early_arrivals: notices from a peer that is ahead, for cycles this
  client has not registered yet; expect_cycle() cancels against them

Running ⇄ Stalled is the whole state machine. Stalling is the
backpressure that bounds how far any client runs ahead of the slowest peer.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import NamedTuple

from lockstepsim.core.errors import ProtocolInvariantError
from lockstepsim.core.events import Message


class PendingWait(NamedTuple):
    from_client: int
    cycle: int


@dataclass
class ArrivalOutcome:
    """What a message arrival did to its destination client."""

    drained_cycles: list[int] = field(default_factory=list)
    resumed: bool = False


@dataclass
class Client:
    """Per-participant lockstep state."""

    client_id: int
    lockstep_buffer_depth: int
    peers: list[int]

    current_cycle: int = 0
    next_cycle_awaited: int = 0
    is_stalled: bool = False
    pending_waits: list[PendingWait] = field(default_factory=list)

    # Largest cycle ever registered in pending_waits; bounds the drain
    highest_cycle_expected: int = field(default=-1)
    early_arrivals: list[PendingWait] = field(default_factory=list)

    stall_count: int = field(default=0)
    resume_count: int = field(default=0)

    def expect_cycle(self, cycle: int) -> None:
        """
        Register that every peer's notice for `cycle` is still needed.

        A notice that already arrived early settles its wait on the spot.
        """
        for peer in self.peers:
            wait = PendingWait(peer, cycle)
            if wait in self.early_arrivals:
                self.early_arrivals.remove(wait)
            else:
                self.pending_waits.append(wait)
        self.highest_cycle_expected = max(self.highest_cycle_expected, cycle)

    def on_update_cycle(self) -> list[Message] | None:
        """
        Handle this client's periodic tick.

        Returns:
            Messages to send to peers, or None when the client stalls
            (no messages, and no further tick should be scheduled).
        """
        if self.current_cycle == self.next_cycle_awaited:
            self.is_stalled = True
            self.stall_count += 1
            return None

        self.current_cycle += 1
        target = self.current_cycle + self.lockstep_buffer_depth
        outgoing = [Message(target, self.client_id, peer) for peer in self.peers]
        self.expect_cycle(target)
        return outgoing

    def on_message(self, message: Message) -> ArrivalOutcome:
        """
        Consume a peer's notice and drain every cycle it completes.

        A notice for a cycle beyond highest_cycle_expected comes from a
        peer that is ahead; it is held in early_arrivals until this
        client registers that cycle.

        Raises:
            ProtocolInvariantError: the notice is a duplicate, or names a
                cycle already registered or drained without a matching wait
        """
        wanted = PendingWait(message.sending_client, message.target_cycle)
        if message.target_cycle > self.highest_cycle_expected:
            if wanted in self.early_arrivals:
                raise ProtocolInvariantError(
                    self.client_id, message.sending_client, message.target_cycle
                )
            self.early_arrivals.append(wanted)
        else:
            try:
                # First match keeps the remaining entries in FIFO order
                self.pending_waits.remove(wanted)
            except ValueError:
                raise ProtocolInvariantError(
                    self.client_id, message.sending_client, message.target_cycle
                ) from None

        # A cycle settled by early arrivals is crossed here, like cycle B
        outcome = ArrivalOutcome()
        while (
            self.next_cycle_awaited <= self.highest_cycle_expected
            and not self.is_waiting_on(self.next_cycle_awaited)
        ):
            outcome.drained_cycles.append(self.next_cycle_awaited)
            if self.is_stalled:
                self.is_stalled = False
                self.resume_count += 1
                outcome.resumed = True
            self.next_cycle_awaited += 1

        return outcome

    def is_waiting_on(self, cycle: int) -> bool:
        """True while some peer's notice for `cycle` is outstanding."""
        return any(wait.cycle == cycle for wait in self.pending_waits)

    def waits_by_peer(self) -> dict[int, list[int]]:
        """Outstanding cycles grouped by the peer that owes them."""
        grouped: dict[int, list[int]] = {peer: [] for peer in self.peers}
        for wait in self.pending_waits:
            grouped[wait.from_client].append(wait.cycle)
        return grouped

    @property
    def state(self) -> str:
        return "Stalled" if self.is_stalled else "Running"

    def get_measurements(self) -> dict:
        return {
            "client_id": self.client_id,
            "current_cycle": self.current_cycle,
            "next_cycle_awaited": self.next_cycle_awaited,
            "state": self.state,
            "pending_waits": len(self.pending_waits),
            "early_arrivals": len(self.early_arrivals),
            "stall_count": self.stall_count,
            "resume_count": self.resume_count,
        }
