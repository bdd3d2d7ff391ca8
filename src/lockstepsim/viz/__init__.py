"""
Visualization utilities.

- Cycle progression timelines with stall shading
- Stall-frequency sweeps
"""

from lockstepsim.viz.timeline import (
    plot_cycle_progression,
    plot_stall_sweep,
    save_figure,
)

__all__ = [
    "plot_cycle_progression",
    "plot_stall_sweep",
    "save_figure",
]
