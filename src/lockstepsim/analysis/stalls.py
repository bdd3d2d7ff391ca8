"""
Stall episodes and per-run summaries.

Derived from the dispatcher's event history; the engine never sees any
of this. A stall episode starts at the tick where a client finds its
buffer exhausted and ends at the arrival that resumes it.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import TYPE_CHECKING, Sequence

import numpy as np

if TYPE_CHECKING:
    from lockstepsim.core.clock import ProcessedEvent
    from lockstepsim.core.simulation import SimulationResult


@dataclass
class StallEpisode:
    """One Running → Stalled → Running round trip for a client."""

    client_id: int
    cycle: int  # Cycle the client was stuck on
    start: int  # Simulated time the stall was detected
    end: int | None  # Time of the resuming arrival, None if still stalled

    @property
    def duration(self) -> int | None:
        if self.end is None:
            return None
        return self.end - self.start


@dataclass
class RunSummary:
    """Per-client stall statistics for one run."""

    stall_counts: list[int]
    stall_time: list[int]  # Total ms spent stalled (open episodes run to final time)
    stall_fraction: list[float]  # stall_time / final_time
    mean_stall_duration: float  # Over closed episodes, nan when none
    cycles_per_second: list[float]
    final_time: int


def extract_stall_episodes(history: Sequence["ProcessedEvent"]) -> list[StallEpisode]:
    """Pair every stall with the arrival that resumed it."""
    open_episodes: dict[int, StallEpisode] = {}
    episodes: list[StallEpisode] = []

    for record in history:
        if record.kind == "update_cycle" and record.stalled:
            episode = StallEpisode(record.client_id, record.cycle, record.time, None)
            open_episodes[record.client_id] = episode
            episodes.append(episode)
        elif record.kind == "message" and record.resumed:
            episode = open_episodes.pop(record.client_id, None)
            if episode is not None:
                episode.end = record.time

    return episodes


def summarize_run(result: "SimulationResult") -> RunSummary:
    """Compute stall counts, stalled time and progress rate per client."""
    n_clients = len(result.final_cycles)
    final_time = result.final_time
    episodes = extract_stall_episodes(result.history)

    stall_time = [0] * n_clients
    for ep in episodes:
        end = ep.end if ep.end is not None else final_time
        stall_time[ep.client_id] += end - ep.start

    closed = [ep.duration for ep in episodes if ep.duration is not None]
    mean_duration = float(np.mean(closed)) if closed else float("nan")

    if final_time > 0:
        fractions = [t / final_time for t in stall_time]
        rates = [1000.0 * c / final_time for c in result.final_cycles]
    else:
        fractions = [0.0] * n_clients
        rates = [0.0] * n_clients

    return RunSummary(
        stall_counts=list(result.stall_counts),
        stall_time=stall_time,
        stall_fraction=fractions,
        mean_stall_duration=mean_duration,
        cycles_per_second=rates,
        final_time=final_time,
    )


def cycle_progression(
    history: Sequence["ProcessedEvent"], client_id: int
) -> tuple[np.ndarray, np.ndarray]:
    """
    Time series of a client's current cycle, sampled at its own ticks.

    Returns:
        (times, cycles) int64 arrays
    """
    points = [
        (r.time, r.cycle)
        for r in history
        if r.kind == "update_cycle" and r.client_id == client_id
    ]
    if not points:
        return np.zeros(0, dtype=np.int64), np.zeros(0, dtype=np.int64)
    times, cycles = zip(*points)
    return np.asarray(times, dtype=np.int64), np.asarray(cycles, dtype=np.int64)
