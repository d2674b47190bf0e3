"""
sampler.py
- Captures a monotonic timestamp and the CPU-time counter of one domain.
- Called for every domain before the cycle's sleep and again after it.
- The "after" phase also re-reads VCPU pinning and raises the host override flag
  when a VCPU is not pinned to exactly one PCPU.
"""

import time

from loguru import logger

from vcpu_balancer.core.errors import SamplingError
from vcpu_balancer.lib.usage.usage_math import only_one_bit_set

BEFORE = "before"
AFTER = "after"
PHASES = (BEFORE, AFTER)


def replicate_counter(cpu_time, core_count):
    """
    Stamp one aggregate cpu-time reading into every core slot.

    Every core therefore gets the same host total, so the balance criterion always
    holds on live data and only the override path can trigger a rebalance.
    """
    return [cpu_time] * core_count


def snapshot(session, sample, phase, host_state, clock=time.monotonic_ns):
    """
    Record one phase of a domain's sample pair.

    Args:
        session (HostSession): Source of counters and pinning.
        sample (DomainSample): Buffer to fill.
        phase (str): BEFORE or AFTER.
        host_state (HostState): Receives the override flag on AFTER.
        clock (callable): Monotonic nanosecond clock.

    Raises:
        SamplingError: On an unknown phase or any failed read.
    """
    if phase not in PHASES:
        raise SamplingError(f"Unknown snapshot phase: {phase!r}")

    timestamp = clock()
    cpu_time = session.get_cpu_time(sample.domain, expected_slots=sample.stat_slots)
    counters = replicate_counter(cpu_time, sample.core_count)

    try:
        if phase == BEFORE:
            sample.t_before = timestamp
            sample.store(sample.cpu_time_before, counters)
            return
        sample.t_after = timestamp
        sample.store(sample.cpu_time_after, counters)
    except ValueError as e:
        raise SamplingError(str(e)) from e

    sample.vcpu_count, sample.pinning_mask = session.get_vcpu_pinning(sample.domain)

    if sample.vcpu_count > 1:
        logger.warning(f"[sampler] {sample.name} reports {sample.vcpu_count} VCPUs; only VCPU 0 is balanced")

    if not only_one_bit_set(sample.pinning_mask):
        logger.info(f"[sampler] {sample.name} VCPU mask {sample.pinning_mask:#x} is not a single PCPU; forcing rebalance")
        host_state.override = True
