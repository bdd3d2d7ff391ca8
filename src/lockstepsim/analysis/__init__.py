"""
Analysis layer: derived quantities for reports and plots.

IMPORTANT: This is NOT seen by the engine. One-way derivation only.

- extract_stall_episodes / summarize_run: stall statistics for one run
- sweep_stalls / fit_stall_trend: stall frequency across buffer depth and latency
"""

from lockstepsim.analysis.stalls import (
    StallEpisode,
    RunSummary,
    extract_stall_episodes,
    summarize_run,
    cycle_progression,
)
from lockstepsim.analysis.sweep import (
    SweepResult,
    TrendFit,
    sweep_stalls,
    fit_stall_trend,
)

__all__ = [
    "StallEpisode",
    "RunSummary",
    "extract_stall_episodes",
    "summarize_run",
    "cycle_progression",
    "SweepResult",
    "TrendFit",
    "sweep_stalls",
    "fit_stall_trend",
]
