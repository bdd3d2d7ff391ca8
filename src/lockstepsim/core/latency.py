"""
Latency model: how long a message spends in flight.

Every message draws an independent delay from Normal(mean, std), in
simulated milliseconds. No serial correlation is modelled.

Samples are truncated toward zero by the integer cast and then clamped
at 0, so a wide distribution can yield zero-delay messages but never
sends one back in time.
"""

from __future__ import annotations
from dataclasses import dataclass
import math

import numpy as np

from lockstepsim.core.errors import ConfigurationError


@dataclass
class LatencyConfig:
    """Configuration for the per-message latency distribution."""

    mean: float = 50.0  # Mean one-way delay (ms)
    std: float = 5.0    # Standard deviation (ms)

    def validate(self) -> None:
        for name in ("mean", "std"):
            value = getattr(self, name)
            if not math.isfinite(value) or value < 0:
                raise ConfigurationError(
                    f"latency {name} must be a non-negative number, got {value!r}"
                )


class LatencyModel:
    """
    Samples message delays from a seeded normal distribution.

    The model owns its generator. Pass `rng` to share a generator with
    the caller, or `seed` to build a fresh reproducible one.
    """

    def __init__(
        self,
        config: LatencyConfig | None = None,
        rng: np.random.Generator | None = None,
        seed: int | None = None,
    ):
        self.config = config if config is not None else LatencyConfig()
        self.config.validate()
        self.rng = rng if rng is not None else np.random.default_rng(seed)

    @property
    def mean(self) -> float:
        return self.config.mean

    @property
    def std(self) -> float:
        return self.config.std

    def sample_delay(self) -> int:
        """Draw one delay in whole milliseconds (always >= 0)."""
        if self.config.std == 0:
            return max(0, int(self.config.mean))
        sample = self.rng.normal(self.config.mean, self.config.std)
        return max(0, int(sample))

    def sample_delays(self, n: int) -> np.ndarray:
        """
        Draw `n` delays at once with the same truncate-then-clamp rule.

        Returns:
            int64 array of shape (n,)
        """
        if self.config.std == 0:
            return np.full(n, max(0, int(self.config.mean)), dtype=np.int64)
        samples = self.rng.normal(self.config.mean, self.config.std, size=n)
        # astype truncates toward zero, matching int()
        return np.maximum(samples.astype(np.int64), 0)
