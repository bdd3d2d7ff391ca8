"""
Timeline plots for lockstep runs.

- Cycle progression: each client's current cycle against simulated time,
  with stall episodes shaded
- Stall sweep: mean stalls vs latency, one line per buffer depth
"""

from __future__ import annotations
from pathlib import Path
from typing import TYPE_CHECKING, Sequence

import numpy as np
import matplotlib.pyplot as plt
from matplotlib.figure import Figure
from matplotlib.axes import Axes

from lockstepsim.analysis.stalls import cycle_progression, extract_stall_episodes

if TYPE_CHECKING:
    from lockstepsim.core.clock import ProcessedEvent
    from lockstepsim.analysis.sweep import SweepResult


def plot_cycle_progression(
    history: Sequence["ProcessedEvent"],
    num_clients: int,
    title: str = "Cycle Progression",
    ax: Axes | None = None,
    figsize: tuple[float, float] = (10, 5),
    shade_stalls: bool = True,
) -> tuple[Figure, Axes]:
    """
    Step plot of current_cycle per client.

    Args:
        history: Dispatcher history (SimulationResult.history)
        num_clients: Number of clients in the run
        title: Plot title
        ax: Existing axes (creates new if None)
        shade_stalls: Shade stall episodes in each client's colour

    Returns:
        (fig, ax) tuple
    """
    if ax is None:
        fig, ax = plt.subplots(figsize=figsize)
    else:
        fig = ax.figure

    colors = plt.cm.tab10(np.arange(num_clients) % 10)
    end_time = history[-1].time if history else 0

    for client_id in range(num_clients):
        times, cycles = cycle_progression(history, client_id)
        if len(times) > 0:
            ax.step(times, cycles, where="post", color=colors[client_id],
                    linewidth=2, label=f"Client {client_id}")

    if shade_stalls:
        for ep in extract_stall_episodes(history):
            end = ep.end if ep.end is not None else end_time
            ax.axvspan(ep.start, max(end, ep.start + 1),
                       color=colors[ep.client_id], alpha=0.15)

    ax.set_xlabel("Simulated time (ms)")
    ax.set_ylabel("Current cycle")
    ax.set_title(title)
    ax.grid(True, alpha=0.3)
    if num_clients > 0:
        ax.legend(loc="upper left")

    return fig, ax


def plot_stall_sweep(
    sweep: "SweepResult",
    title: str = "Stalls vs Latency",
    figsize: tuple[float, float] = (10, 6),
    show_ci: bool = True,
) -> Figure:
    """
    Plot mean stall count against mean latency for each buffer depth.

    Returns:
        Figure
    """
    fig, ax = plt.subplots(figsize=figsize)
    mean = sweep.mean_stalls
    low, high = sweep.confidence_interval()

    for i, depth in enumerate(sweep.depths):
        ax.plot(sweep.latency_means, mean[i], "o-", label=f"B = {depth}")
        if show_ci:
            ax.fill_between(sweep.latency_means, low[i], high[i], alpha=0.2)

    ax.set_xlabel("Mean latency (ms)")
    ax.set_ylabel(f"Stalls per {sweep.num_events} events")
    ax.set_title(title)
    ax.legend()
    ax.grid(True, alpha=0.3)

    fig.tight_layout()
    return fig


def save_figure(fig: Figure, path: str | Path, dpi: int = 150, **kwargs) -> None:
    """Save figure to file."""
    fig.savefig(path, dpi=dpi, bbox_inches="tight", **kwargs)
