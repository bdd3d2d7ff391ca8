"""Unit tests for the analysis layer."""

import math

import numpy as np
import pytest

from lockstepsim.analysis import (
    cycle_progression,
    extract_stall_episodes,
    fit_stall_trend,
    summarize_run,
    sweep_stalls,
)
from lockstepsim.core import LatencyConfig, Simulation, SimulationConfig
from lockstepsim.core.clock import ProcessedEvent


def stall(t, client, cycle):
    return ProcessedEvent(time=t, kind="update_cycle", client_id=client, cycle=cycle, stalled=True)


def tick(t, client, cycle):
    return ProcessedEvent(time=t, kind="update_cycle", client_id=client, cycle=cycle)


def arrival(t, client, cycle, resumed=False):
    return ProcessedEvent(time=t, kind="message", client_id=client, cycle=cycle,
                          sending_client=1 - client, resumed=resumed)


@pytest.fixture
def high_latency_result():
    config = SimulationConfig(
        lockstep_buffer_depth=1,
        latency=LatencyConfig(mean=100.0, std=0.0),
        num_events=200,
    )
    return Simulation(config).run()


class TestStallEpisodes:
    """Tests for extract_stall_episodes."""

    def test_pairs_stalls_with_resumes(self):
        history = [
            stall(0, 0, 0),
            stall(0, 1, 0),
            arrival(30, 0, 0, resumed=True),
            tick(30, 0, 1),
            stall(46, 0, 1),
            arrival(50, 1, 2),
        ]
        episodes = extract_stall_episodes(history)

        assert [(e.client_id, e.start, e.end) for e in episodes] == [
            (0, 0, 30), (1, 0, None), (0, 46, None),
        ]
        assert episodes[0].duration == 30
        assert episodes[1].duration is None

    def test_no_stalls(self):
        assert extract_stall_episodes([tick(0, 0, 1), arrival(5, 1, 4)]) == []


class TestRunSummary:
    """Tests for summarize_run on a real run."""

    def test_counts_match_result(self, high_latency_result):
        summary = summarize_run(high_latency_result)
        assert summary.stall_counts == high_latency_result.stall_counts
        assert summary.final_time == high_latency_result.final_time

    def test_fractions_and_durations(self, high_latency_result):
        summary = summarize_run(high_latency_result)
        for frac in summary.stall_fraction:
            assert 0.0 < frac <= 1.0
        assert summary.mean_stall_duration > 0
        assert all(rate > 0 for rate in summary.cycles_per_second)

    def test_zero_latency_summary(self, zero_latency_config):
        summary = summarize_run(Simulation(zero_latency_config).run())
        assert summary.stall_counts == [0, 0]
        assert summary.stall_time == [0, 0]
        assert math.isnan(summary.mean_stall_duration)


class TestCycleProgression:

    def test_series_per_client(self, high_latency_result):
        times, cycles = cycle_progression(high_latency_result.history, 0)
        assert len(times) == len(cycles) > 0
        assert np.all(np.diff(times) >= 0)
        assert np.all(np.diff(cycles) >= 0)

    def test_unknown_client_is_empty(self, high_latency_result):
        times, cycles = cycle_progression(high_latency_result.history, 7)
        assert len(times) == 0 and len(cycles) == 0


class TestSweep:
    """Tests for sweep_stalls and fit_stall_trend."""

    @pytest.fixture
    def sweep(self):
        return sweep_stalls(
            depths=[1, 3],
            latency_means=[0.0, 200.0],
            latency_std=0.0,
            num_events=200,
            seeds=(0, 1),
        )

    def test_shape(self, sweep):
        assert sweep.stall_counts.shape == (2, 2, 2)
        assert sweep.mean_stalls.shape == (2, 2)

    def test_latency_increases_stalls(self, sweep):
        mean = sweep.mean_stalls
        assert np.all(mean[:, 0] == 0)
        assert np.all(mean[:, 1] > 0)

    def test_confidence_interval_collapses_without_spread(self, sweep):
        low, high = sweep.confidence_interval()
        np.testing.assert_allclose(low, sweep.mean_stalls)
        np.testing.assert_allclose(high, sweep.mean_stalls)

    def test_confidence_interval_brackets_mean(self):
        sweep = sweep_stalls(depths=[1], latency_means=[60.0], latency_std=30.0,
                             num_events=300, seeds=range(5))
        low, high = sweep.confidence_interval()
        assert np.all(low <= sweep.mean_stalls)
        assert np.all(sweep.mean_stalls <= high)

    def test_jittery_sweep_completes(self):
        sweep = sweep_stalls(depths=[1, 2, 3], latency_means=[15.0, 30.0, 60.0],
                             latency_std=10.0, num_events=600, seeds=range(8))
        assert sweep.stall_counts.shape == (3, 3, 8)
        assert np.all(sweep.stall_counts >= 0)
        assert len(fit_stall_trend(sweep)) == 3

    def test_trend_fit(self, sweep):
        fits = fit_stall_trend(sweep)
        assert [f.depth for f in fits] == [1, 3]
        for fit in fits:
            assert fit.slope > 0
            assert fit.r_squared == pytest.approx(1.0)

    def test_trend_needs_two_means(self):
        sweep = sweep_stalls(depths=[1], latency_means=[10.0], num_events=50, seeds=(0,))
        with pytest.raises(ValueError):
            fit_stall_trend(sweep)
