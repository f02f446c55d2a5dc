#!/usr/bin/env python3

# ruff: noqa: T201

from __future__ import annotations

import argparse
import logging
import sys
from signal import SIGINT, signal
from typing import TYPE_CHECKING

from dotenv import find_dotenv, load_dotenv

from rsmkit.adapters.events import LoggingEventRecorder
from rsmkit.adapters.http import HttpClusterClient
from rsmkit.app import reconcile_workload
from rsmkit.common.logging import configure_logging
from rsmkit.config import ConfigurationError, get_cluster_config, get_reconcile_config
from rsmkit.domain.model import DEFAULT_NAMESPACE, ObjectKey, Workload

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run one reconciliation pass for a workload")
    parser.add_argument("name", help="Name of the workload to reconcile")
    parser.add_argument(
        "--namespace",
        "-n",
        default=DEFAULT_NAMESPACE,
        help="Namespace of the workload (default: %(default)s)",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Log every dispatched intent",
    )
    return parser.parse_args(list(argv))


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    try:
        parsed_args = _parse_args(sys.argv[1:] if argv is None else argv)
        cluster_config = get_cluster_config()
        reconcile_config = get_reconcile_config()
    except ConfigurationError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        sys.exit(2)

    configure_logging(level=logging.DEBUG if parsed_args.verbose else logging.INFO)
    key = ObjectKey(Workload.KIND, parsed_args.namespace, parsed_args.name)

    try:
        with HttpClusterClient(cluster_config) as client:
            result = reconcile_workload(
                key,
                client=client,
                recorder=LoggingEventRecorder(),
                config=reconcile_config,
            )
    except Exception as e:  # noqa: BLE001
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    if not result.found:
        print(f"{key} not found")
    elif result.noop:
        print(f"{key} is up to date")
    else:
        summary = ", ".join(f"{action}={count}" for action, count in result.dispatched.items())
        print(f"{key}: {summary}")


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    print("\nClosed by user (Ctrl+C)")
    sys.exit(0)


def cli(argv: Sequence[str] | None = None) -> None:
    """Console script entry point: load ``.env`` from the working directory, then run."""
    load_dotenv(find_dotenv(usecwd=True))
    signal(SIGINT, sigint_handler)
    main(argv)


if __name__ == "__main__":
    cli()
