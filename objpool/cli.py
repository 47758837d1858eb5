#!/usr/bin/env python3
"""objpool CLI - exercise a pool from the command line."""

import argparse
import itertools
import json
import logging
import sys
from dataclasses import asdict
from pathlib import Path

from pydantic import ValidationError

from objpool.config import PoolConfig, build_pool_config, load_pool_config
from objpool.errors import CapacityExceededError, ConfigurationError
from objpool.pool import Bound, Pool, PoolStats
from objpool.settings import Settings, get_settings, resolve_pool_config

logger = logging.getLogger(__name__)


class Token:
    """Stand-in pooled object; numbered in creation order within one run."""

    def __init__(self, serial: int) -> None:
        self.serial = serial

    def __repr__(self) -> str:
        return f"Token({self.serial})"


def build_config(args: argparse.Namespace, settings: Settings) -> PoolConfig:
    """Merge config sources: --config file, else settings, then CLI flag overrides."""
    if args.config:
        config = load_pool_config(Path(args.config).expanduser())
    else:
        config = resolve_pool_config(settings)

    overrides = {k: v for k, v in (("minimum", args.minimum), ("maximum", args.maximum), ("bound", args.bound)) if v is not None}
    if not overrides:
        return config
    return build_pool_config({**config.model_dump(), **overrides})


def run(config: PoolConfig, borrows: int, hold: bool) -> PoolStats:
    """Build a pool, borrow ``borrows`` instances at once, then return them unless ``hold``."""
    serials = itertools.count(1)
    pool: Pool[Token] = Pool.from_config(lambda: Token(next(serials)), config)
    logger.info(f"Created {pool!r}")

    releases = []
    for i in range(borrows):
        obj, release = pool.borrow()
        logger.debug(f"Borrow {i + 1}/{borrows}: {obj!r}")
        releases.append(release)

    if not hold:
        for release in releases:
            release()

    return pool.stats()


def format_stats(stats: PoolStats) -> str:
    lines = [
        f"bound:       {stats.bound.value}",
        f"minimum:     {stats.minimum if stats.minimum is not None else '-'}",
        f"maximum:     {stats.maximum if stats.maximum is not None else '-'}",
        f"managed:     {stats.managed}",
        f"available:   {stats.available}",
        f"outstanding: {stats.outstanding}",
        f"borrowed:    {stats.borrowed}",
        f"returned:    {stats.returned}",
    ]
    return "\n".join(lines)


def configure_logging(verbose: bool, level_name: str) -> None:
    log_level = logging.DEBUG if verbose else getattr(logging, level_name.upper(), logging.INFO)
    logging.basicConfig(
        level=log_level,
        format="%(levelname)s: %(message)s",
        stream=sys.stderr,
    )


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point.

    Returns:
        Exit code (0=success, 1=configuration error, 2=capacity exceeded)
    """
    parser = argparse.ArgumentParser(
        description="Exercise an objpool pool and print its counters",
        epilog="Examples:\n  objpool --minimum 2 --maximum 3 --borrows 4\n  objpool --bound managed --maximum 3 --borrows 4 --json\n  objpool --config pool.yaml --hold",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--config", default=None, help="YAML pool config (default: POOL_CONFIG or POOL_* variables)")
    parser.add_argument("--minimum", type=int, default=None, help="Instances created up front")
    parser.add_argument("--maximum", type=int, default=None, help="Capacity limit for generating new instances")
    parser.add_argument("--bound", choices=[b.value for b in Bound], default=None, help="What --maximum limits")
    parser.add_argument("--borrows", type=int, default=1, help="Number of instances to borrow at once (default: 1)")
    parser.add_argument("--hold", action="store_true", help="Keep borrowed instances out instead of returning them")
    parser.add_argument("--json", action="store_true", dest="json_output", help="Output counters as JSON")
    parser.add_argument("-v", "--verbose", action="store_true", help="Increase logging verbosity (DEBUG level)")

    args = parser.parse_args(argv)

    try:
        settings = get_settings()
    except ValidationError as e:
        configure_logging(args.verbose, "INFO")
        logger.error(f"Invalid environment settings: {e}")
        return 1

    configure_logging(args.verbose, settings.log_level)

    try:
        config = build_config(args, settings)
        stats = run(config, args.borrows, args.hold)
    except (ConfigurationError, FileNotFoundError) as e:
        logger.error(f"{e}")
        return 1
    except CapacityExceededError as e:
        logger.error(f"{e}")
        if args.json_output:
            print(json.dumps({"status": "error", "error": str(e)}, indent=2))
        return 2

    if args.json_output:
        print(json.dumps({"status": "ok", **asdict(stats), "bound": stats.bound.value, "outstanding": stats.outstanding}, indent=2))
    else:
        print(format_stats(stats))
    return 0


if __name__ == "__main__":
    sys.exit(main())
