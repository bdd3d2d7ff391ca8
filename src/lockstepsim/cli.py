"""Command-line entry point for the lockstep simulator."""

from __future__ import annotations
import argparse
import logging
import sys

from lockstepsim.core import (
    ConfigurationError,
    LatencyConfig,
    LockstepSimError,
    Simulation,
    SimulationConfig,
)

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="lockstepsim",
        description="Simple tool to test some stuff with lockstep",
    )
    parser.add_argument(
        "-b", "--lockstep_buffer_size",
        type=int,
        default=3,
        help="The lockstep buffer size (default: 3)",
    )
    parser.add_argument(
        "-m", "--lat_mean",
        type=float,
        default=50.0,
        help="The mean latency of all packets in ms (default: 50)",
    )
    parser.add_argument(
        "-d", "--lat_std",
        type=float,
        default=5.0,
        help="The standard deviation of the latency for msgs generated (default: 5)",
    )
    parser.add_argument(
        "-n", "--num_events",
        type=int,
        default=100,
        help="The number of events to process in the simulation (default: 100)",
    )
    parser.add_argument(
        "-c", "--clients",
        type=int,
        default=2,
        help="Number of clients taking part (default: 2)",
    )
    parser.add_argument(
        "-s", "--seed",
        type=int,
        default=None,
        help="Seed for the latency generator",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Also log every message send and tick scheduling",
    )
    parser.add_argument(
        "-q", "--quiet",
        action="store_true",
        help="Suppress event narration, print only the summary",
    )
    parser.add_argument(
        "--plot",
        metavar="PATH",
        default=None,
        help="Save a cycle-progression figure to PATH",
    )
    return parser


def configure_logging(verbose: bool = False, quiet: bool = False) -> None:
    if quiet:
        logging.basicConfig(level=logging.WARNING, format="%(levelname)s: %(message)s")
    elif verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(name)s - %(levelname)s - %(message)s")
    else:
        logging.basicConfig(level=logging.INFO, format="%(message)s")


def config_from_args(args: argparse.Namespace) -> SimulationConfig:
    config = SimulationConfig(
        lockstep_buffer_depth=args.lockstep_buffer_size,
        latency=LatencyConfig(mean=args.lat_mean, std=args.lat_std),
        num_events=args.num_events,
        num_clients=args.clients,
        seed=args.seed,
    )
    config.validate()
    return config


def print_summary(result) -> None:
    config = result.config
    print("=" * 60)
    print("  LOCKSTEP SIMULATION SUMMARY")
    print("=" * 60)
    print(f"   Buffer depth: {config.lockstep_buffer_depth}")
    print(f"   Latency: mean={config.latency.mean}ms, std={config.latency.std}ms")
    print(f"   Events processed: {result.events_processed}")
    print(f"   Simulated time: {result.final_time}ms")
    for client_id, (cycle, stalls) in enumerate(zip(result.final_cycles, result.stall_counts)):
        print(f"   Client {client_id}: cycle {cycle}, {stalls} stall(s)")


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(verbose=args.verbose, quiet=args.quiet)

    try:
        config = config_from_args(args)
    except ConfigurationError as e:
        parser.error(str(e))  # exits with status 2

    try:
        result = Simulation(config).run()
    except LockstepSimError as e:
        logger.error("Simulation aborted: %s", e)
        return 1

    print_summary(result)

    if args.plot:
        from lockstepsim.viz import plot_cycle_progression, save_figure

        fig, _ = plot_cycle_progression(result.history, config.num_clients)
        save_figure(fig, args.plot)
        print(f"\n   Saved: {args.plot}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
