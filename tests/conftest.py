"""
Pytest configuration and shared fixtures.
"""

import pytest
import numpy as np


@pytest.fixture
def zero_latency_config():
    """Two clients, B=3, messages delivered instantly."""
    from lockstepsim.core import SimulationConfig, LatencyConfig
    return SimulationConfig(
        lockstep_buffer_depth=3,
        latency=LatencyConfig(mean=0.0, std=0.0),
        num_events=20,
        num_clients=2,
        seed=0,
    )


@pytest.fixture
def high_latency_config():
    """Two clients, B=1, latency far above the 16ms tick period."""
    from lockstepsim.core import SimulationConfig, LatencyConfig
    return SimulationConfig(
        lockstep_buffer_depth=1,
        latency=LatencyConfig(mean=1000.0, std=50.0),
        num_events=10,
        num_clients=2,
        seed=0,
    )


@pytest.fixture
def rng():
    """Reproducible random number generator."""
    return np.random.default_rng(seed=42)
