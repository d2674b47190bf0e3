#!/usr/bin/env python3
"""
entrypoint.py
- Command-line entrypoint for the VCPU balancer.
- Usage:
    vcpu-balancer <interval_seconds>

- SIGINT/SIGTERM release the host session and exit with the signal number.
"""

import signal
import sys

from loguru import logger

from vcpu_balancer.core.config import DRY_RUN, LIBVIRT_URI, RUN_ONCE, SCHEDULER_CONFIG_PATH
from vcpu_balancer.core.config_loader import load_scheduler_config, preview_yaml
from vcpu_balancer.core.errors import InvalidIntervalError, SchedulerError
from vcpu_balancer.core.hypervisor import open_session
from vcpu_balancer.main import configure_logging, init_sentry, start_api_thread
from vcpu_balancer.runner import scheduler


def parse_interval(args):
    """
    Validate the argument list: exactly one positive integer (seconds).

    Raises:
        InvalidIntervalError: On a wrong argument count or a bad value.
    """
    if len(args) != 1:
        raise InvalidIntervalError("invalid command line parameters (expected: <interval_seconds>)")
    try:
        interval = int(args[0])
    except ValueError:
        raise InvalidIntervalError(f"Invalid time interval specified: {args[0]!r}") from None
    if interval <= 0:
        raise InvalidIntervalError(f"Invalid time interval specified: {interval}")
    return interval


def handle_exit(signum, frame):
    # SystemExit unwinds through the HostSession context manager, which releases it
    logger.info(f"[cli] Received signal {signum}. Shutting down...")
    sys.exit(signum)


def install_signal_handlers():
    signal.signal(signal.SIGINT, handle_exit)
    signal.signal(signal.SIGTERM, handle_exit)


def main(argv=None):
    args = sys.argv[1:] if argv is None else argv

    try:
        interval = parse_interval(args)
    except InvalidIntervalError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        sys.exit(1)

    configure_logging()
    init_sentry()
    install_signal_handlers()
    logger.info(f"[cli] Time interval specified = {interval}")

    preview_yaml(SCHEDULER_CONFIG_PATH, name="scheduler config")
    try:
        config = load_scheduler_config(SCHEDULER_CONFIG_PATH)
    except ValueError as e:
        logger.critical(f"[cli] Invalid scheduler config: {e}")
        sys.exit(1)

    start_api_thread()

    try:
        with open_session(LIBVIRT_URI) as session:
            scheduler.run(session, interval, config, dry_run=DRY_RUN, max_cycles=1 if RUN_ONCE else None)
    except SchedulerError as e:
        logger.critical(f"[cli] {type(e).__name__}: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
