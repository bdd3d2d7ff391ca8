"""
Parameter sweeps: how stall frequency responds to buffer depth and latency.

Each (depth, latency_mean) cell is run once per seed. Across seeds we
report the mean stall count with a Student-t 95% confidence interval,
and per depth we fit a line of stall rate against mean latency.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Sequence

import numpy as np
from scipy import stats

from lockstepsim.core.latency import LatencyConfig
from lockstepsim.core.simulation import Simulation, SimulationConfig


@dataclass
class SweepResult:
    """Stall statistics over a depth × latency grid."""

    depths: np.ndarray  # [n_depths]
    latency_means: np.ndarray  # [n_means]
    stall_counts: np.ndarray  # [n_depths, n_means, n_seeds]
    num_events: int
    confidence: float = 0.95

    @property
    def mean_stalls(self) -> np.ndarray:
        return self.stall_counts.mean(axis=2)

    @property
    def stall_rate(self) -> np.ndarray:
        """Mean stalls per processed event."""
        return self.mean_stalls / self.num_events

    def confidence_interval(self) -> tuple[np.ndarray, np.ndarray]:
        """
        Student-t interval of the mean stall count per cell.

        Cells with a single seed or zero spread collapse to the mean.
        """
        mean = self.mean_stalls
        n_seeds = self.stall_counts.shape[2]
        if n_seeds < 2:
            return mean.copy(), mean.copy()

        sem = stats.sem(self.stall_counts, axis=2)
        half = stats.t.ppf(0.5 + self.confidence / 2, df=n_seeds - 1) * sem
        half = np.nan_to_num(half)
        return mean - half, mean + half


@dataclass
class TrendFit:
    """Linear fit of stall rate against mean latency at one buffer depth."""

    depth: int
    slope: float  # Stalls per event per ms of mean latency
    intercept: float
    r_squared: float


def sweep_stalls(
    depths: Sequence[int],
    latency_means: Sequence[float],
    latency_std: float = 5.0,
    num_events: int = 500,
    seeds: Sequence[int] = (0, 1, 2, 3, 4),
    num_clients: int = 2,
) -> SweepResult:
    """
    Run every (depth, mean, seed) combination and collect total stalls.

    Args:
        depths: Buffer depths to try
        latency_means: Mean one-way latencies (ms)
        latency_std: Shared latency standard deviation (ms)
        num_events: Event budget per run
        seeds: Latency generator seeds, one run each
        num_clients: Participants per run
    """
    depths = np.asarray(depths, dtype=np.int64)
    means = np.asarray(latency_means, dtype=np.float64)
    counts = np.zeros((len(depths), len(means), len(seeds)), dtype=np.int64)

    for i, depth in enumerate(depths):
        for j, mean in enumerate(means):
            for k, seed in enumerate(seeds):
                config = SimulationConfig(
                    lockstep_buffer_depth=int(depth),
                    latency=LatencyConfig(mean=float(mean), std=latency_std),
                    num_events=num_events,
                    num_clients=num_clients,
                    seed=int(seed),
                )
                counts[i, j, k] = Simulation(config).run().total_stalls

    return SweepResult(
        depths=depths,
        latency_means=means,
        stall_counts=counts,
        num_events=num_events,
    )


def fit_stall_trend(sweep: SweepResult) -> list[TrendFit]:
    """Fit stall_rate = slope · latency_mean + intercept for each depth."""
    if len(sweep.latency_means) < 2:
        raise ValueError("Need at least two latency means to fit a trend")

    fits = []
    rates = sweep.stall_rate
    for i, depth in enumerate(sweep.depths):
        y = rates[i]
        if np.allclose(y, y[0]):
            # linregress leaves r undefined for a flat response
            fits.append(TrendFit(int(depth), 0.0, float(y[0]), 1.0))
            continue
        slope, intercept, r_value, _, _ = stats.linregress(sweep.latency_means, y)
        fits.append(TrendFit(int(depth), float(slope), float(intercept), float(r_value**2)))
    return fits
