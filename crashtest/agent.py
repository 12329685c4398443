#!/usr/bin/env python3
"""Command-line entry point that drives the crash reproduction."""
from __future__ import annotations

import argparse
import logging
from typing import Optional, Sequence

from .config import CrashTestConfig
from .errors import SessionManagerError
from .logging_utils import setup_logging
from .scenario import ensure_terms, run_chained, run_stepwise, status_message, stop_and_reset
from .session import SessionCoordinator
from .simulators import EngineFault, SimulatedNavigationServices, StaticLocationPermission
from .versioning import read_version

LOGGER = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Reproduce the guidance-start crash")
    parser.add_argument(
        "--mode",
        choices=("chained", "stepwise"),
        default="chained",
        help="chained: start guidance after a delay; stepwise: separate actions",
    )
    parser.add_argument("--locale", help="engine locale (overrides CRASHTEST_LOCALE)")
    parser.add_argument(
        "--reset",
        action="store_true",
        help="clean up the session and reset terms acceptance afterwards",
    )
    parser.add_argument("--log-level", help="logging level (overrides CRASHTEST_LOG_LEVEL)")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    config = CrashTestConfig.from_env()
    if args.locale:
        config.locale = args.locale

    setup_logging(level=args.log_level)
    LOGGER.info("crashtest %s (locale=%s, mode=%s)", read_version(), config.locale, args.mode)

    services = SimulatedNavigationServices.from_config(config)
    permissions = StaticLocationPermission(config.location_permission)
    coordinator = SessionCoordinator(
        services,
        permissions,
        route_timeout_s=config.route_timeout_s,
    )

    accepted = ensure_terms(coordinator, config)
    print(status_message(permissions.authorization_status(), accepted))
    if not accepted:
        return 2

    runner = run_chained if args.mode == "chained" else run_stepwise
    try:
        result = runner(coordinator, config)
        print(result.message)
        return 0 if result.guidance_started else 1
    except EngineFault as exc:
        LOGGER.exception("navigation engine crashed while starting guidance")
        print(f"Engine fault: {exc}")
        return 1
    except SessionManagerError as exc:
        LOGGER.error("crash test aborted: %s", exc)
        print(f"Error ({exc.code}): {exc}")
        return 2
    finally:
        if args.reset:
            print(stop_and_reset(coordinator))


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
