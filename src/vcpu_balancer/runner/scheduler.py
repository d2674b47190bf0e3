#!/usr/bin/env python3
"""
scheduler.py
- Runs the sampling/balancing control loop against an open HostSession.
- One cycle: snapshot every domain, sleep, snapshot again, compute usage,
  print the report, decide, and rebalance when the decision calls for it.
"""

import time

from loguru import logger

from vcpu_balancer.core.state import HostState
from vcpu_balancer.lib.rebalance import rebalancer
from vcpu_balancer.lib.rebalance.rebalance_decision import evaluate
from vcpu_balancer.lib.sampling.sampler import AFTER, BEFORE, snapshot
from vcpu_balancer.lib.usage.usage_report import print_usage
from vcpu_balancer.lib.usage.utilization import get_statistics

# --- Metrics ---
scheduler_cycles_total = 0
scheduler_last_duration_seconds = 0.0
imbalance_streak = 0


def run_cycle(session, host_state, config, interval, sleep=time.sleep, dry_run=False, report=True,
              clock=time.monotonic_ns):
    """
    Execute one sampling cycle.

    Args:
        session (HostSession): Open session with sample buffers.
        host_state (HostState): Mutated in place.
        config (dict): Loaded scheduler config.
        interval (int): Seconds between the two snapshots.
        sleep (callable): Blocking sleep, replaceable in tests.
        dry_run (bool): Plan rebalances without pinning.
        report (bool): Print the console table.
        clock (callable): Monotonic nanosecond clock for the snapshots.

    Returns:
        tuple[BalanceDecision, list]: The decision and the assignments applied (may be empty).
    """
    global scheduler_cycles_total, scheduler_last_duration_seconds, imbalance_streak

    start_time = time.monotonic()

    for sample in session.samples:
        snapshot(session, sample, BEFORE, host_state, clock=clock)

    sleep(interval)

    for sample in session.samples:
        snapshot(session, sample, AFTER, host_state, clock=clock)

    get_statistics(session.samples, host_state)
    decision = evaluate(host_state, config)

    if report:
        print_usage(session.samples, host_state.cpu_usage, decision)

    assignments = []
    if decision.rebalance:
        assignments = rebalancer.rebalance(session, session.samples, session.core_count, dry_run=dry_run)

    scheduler_cycles_total += 1
    imbalance_streak = host_state.consecutive_imbalanced_cycles
    scheduler_last_duration_seconds = time.monotonic() - start_time
    return decision, assignments


def run(session, interval, config, sleep=time.sleep, dry_run=False, max_cycles=None, clock=time.monotonic_ns):
    """
    Run cycles forever, or `max_cycles` times when given.

    Errors propagate to the caller, which decides how the process exits.
    """
    host_state = HostState(session.core_count)
    logger.info(f"[scheduler] Balancing {len(session.samples)} domain(s) every {interval}s")

    cycles = 0
    while max_cycles is None or cycles < max_cycles:
        decision, assignments = run_cycle(session, host_state, config, interval, sleep=sleep, dry_run=dry_run, clock=clock)
        logger.debug(f"[scheduler] Cycle {cycles + 1}: {decision}, {len(assignments)} assignment(s)")
        cycles += 1
    return host_state
