"""
Simulation driver: build the world, seed it, and pull events.

Initialisation gives every client a consistent starting point:
- for each of the first B cycles (B = lockstep buffer depth), every
  client sends a seed notice to every peer and registers the matching
  waits on itself, so each client starts with B·(N-1) pending waits
- every client's first tick is then scheduled at t = 0

The seed messages are pushed before the ticks, so with zero latency they
are delivered before any client first checks its buffer.
"""

from __future__ import annotations
from dataclasses import dataclass, field
import logging

import numpy as np

from lockstepsim.core.client import Client
from lockstepsim.core.clock import (
    UPDATE_PERIOD_MS,
    ProcessedEvent,
    SimulationClock,
    SimulationState,
    advance_to_next_event,
)
from lockstepsim.core.errors import ConfigurationError
from lockstepsim.core.events import Message
from lockstepsim.core.latency import LatencyConfig, LatencyModel

logger = logging.getLogger(__name__)


@dataclass
class SimulationConfig:
    """Configuration for one lockstep run."""

    lockstep_buffer_depth: int = 3  # Cycles a client may run ahead
    latency: LatencyConfig = field(default_factory=LatencyConfig)
    num_events: int = 100  # Events to process in run()
    num_clients: int = 2
    update_period: int = UPDATE_PERIOD_MS  # Fixed tick interval (ms)
    seed: int | None = None  # Latency generator seed

    def validate(self) -> None:
        if self.lockstep_buffer_depth < 1:
            raise ConfigurationError(
                f"lockstep_buffer_depth must be >= 1, got {self.lockstep_buffer_depth}"
            )
        if self.num_events < 1:
            raise ConfigurationError(f"num_events must be >= 1, got {self.num_events}")
        if self.num_clients < 2:
            raise ConfigurationError(f"num_clients must be >= 2, got {self.num_clients}")
        if self.update_period < 1:
            raise ConfigurationError(f"update_period must be >= 1, got {self.update_period}")
        self.latency.validate()


@dataclass
class SimulationResult:
    """Summary of a finished run."""

    config: SimulationConfig
    events_processed: int
    final_time: int
    final_cycles: list[int]
    stall_counts: list[int]
    resume_counts: list[int]
    history: list[ProcessedEvent]

    @property
    def total_stalls(self) -> int:
        return sum(self.stall_counts)

    def as_dict(self) -> dict:
        return {
            "events_processed": self.events_processed,
            "final_time": self.final_time,
            "final_cycles": list(self.final_cycles),
            "stall_counts": list(self.stall_counts),
            "resume_counts": list(self.resume_counts),
            "total_stalls": self.total_stalls,
        }


class Simulation:
    """
    Owns one SimulationState and steps it forward.

    Usage:
        sim = Simulation(SimulationConfig(lockstep_buffer_depth=2, seed=7))
        result = sim.run()
    """

    def __init__(
        self,
        config: SimulationConfig | None = None,
        rng: np.random.Generator | None = None,
    ):
        self.config = config if config is not None else SimulationConfig()
        self.config.validate()

        latency = LatencyModel(self.config.latency, rng=rng, seed=self.config.seed)
        clients = [
            Client(
                client_id=i,
                lockstep_buffer_depth=self.config.lockstep_buffer_depth,
                peers=[p for p in range(self.config.num_clients) if p != i],
            )
            for i in range(self.config.num_clients)
        ]
        self.state = SimulationState(
            clock=SimulationClock(latency),
            clients=clients,
            update_period=self.config.update_period,
        )
        self.events_processed = 0

        self._seed_initial_cycles()
        self._schedule_first_update_cycles()

    @property
    def clients(self) -> list[Client]:
        return self.state.clients

    @property
    def elapsed_time(self) -> int:
        return self.state.elapsed_time

    def _seed_initial_cycles(self):
        logger.info("Creating initial input cycle update message to initialize the simulation...")
        clock = self.state.clock
        for cycle in range(self.config.lockstep_buffer_depth):
            for sender in self.state.clients:
                for peer in sender.peers:
                    clock.schedule_message(Message(cycle, sender.client_id, peer))
                sender.expect_cycle(cycle)

    def _schedule_first_update_cycles(self):
        for client in self.state.clients:
            self.state.clock.schedule_update_cycle(client.client_id, 0)

    def step(self) -> ProcessedEvent:
        """Process a single event."""
        record = advance_to_next_event(self.state)
        self.events_processed += 1
        return record

    def run(self, num_events: int | None = None) -> SimulationResult:
        """Process `num_events` events (config.num_events by default)."""
        if num_events is None:
            num_events = self.config.num_events
        for _ in range(num_events):
            self.step()
        return self.result()

    def result(self) -> SimulationResult:
        clients = self.state.clients
        return SimulationResult(
            config=self.config,
            events_processed=self.events_processed,
            final_time=self.state.elapsed_time,
            final_cycles=[c.current_cycle for c in clients],
            stall_counts=[c.stall_count for c in clients],
            resume_counts=[c.resume_count for c in clients],
            history=list(self.state.history),
        )


def run_simulation(
    lockstep_buffer_depth: int = 3,
    latency_mean: float = 50.0,
    latency_std: float = 5.0,
    num_events: int = 100,
    num_clients: int = 2,
    seed: int | None = None,
) -> SimulationResult:
    """
    Convenience factory: configure, run and summarise in one call.

    Args:
        lockstep_buffer_depth: Cycles a client may run ahead of peer input
        latency_mean, latency_std: Per-message delay distribution (ms)
        num_events: Events to process
        num_clients: Number of participants
        seed: Latency generator seed
    """
    config = SimulationConfig(
        lockstep_buffer_depth=lockstep_buffer_depth,
        latency=LatencyConfig(mean=latency_mean, std=latency_std),
        num_events=num_events,
        num_clients=num_clients,
        seed=seed,
    )
    return Simulation(config).run()
