"""
utilization.py
- Turns each domain's before/after snapshot into per-core utilization percentages.
- Accumulates every domain's vector into the host-wide per-core totals.
"""

from loguru import logger

from vcpu_balancer.core.errors import SamplingError


def get_elapsed(sample):
    """
    Nanoseconds between the before and after timestamps of a sample.

    Raises:
        SamplingError: If either phase is missing or the interval is not positive.
    """
    if sample.t_before is None or sample.t_after is None:
        raise SamplingError(f"{sample.name}: snapshot pair is incomplete")
    elapsed = sample.t_after - sample.t_before
    if elapsed <= 0:
        raise SamplingError(f"{sample.name}: elapsed time must be positive, got {elapsed} ns")
    return elapsed


def compute_percent(sample, elapsed_ns):
    """
    Per-core utilization of one domain over the sampled interval.

    Args:
        sample (DomainSample): Snapshot pair for the current cycle.
        elapsed_ns (int): Interval length in nanoseconds, must be > 0.

    Returns:
        tuple[list[float], float]: (percent per core, sum of percents)

    Raises:
        SamplingError: On a non-positive interval or a counter that went backwards.
    """
    if elapsed_ns <= 0:
        raise SamplingError(f"{sample.name}: elapsed time must be positive, got {elapsed_ns} ns")

    percent = []
    for core, (before, after) in enumerate(zip(sample.cpu_time_before, sample.cpu_time_after)):
        cpu_delta = after - before
        if cpu_delta < 0:
            raise SamplingError(f"{sample.name}: CPU time went backwards on core {core} ({before} -> {after})")
        percent.append(cpu_delta / elapsed_ns * 100)
    return percent, sum(percent)


def get_statistics(samples, host_state):
    """
    Recompute every domain's utilization and the host totals for this cycle.

    The host totals are zeroed first, then each domain is added in enumeration order.
    Results are stored on each sample (`percent`, `total`).
    """
    host_state.reset_usage()
    for sample in samples:
        elapsed = get_elapsed(sample)
        sample.percent, sample.total = compute_percent(sample, elapsed)
        host_state.add_usage(sample.percent)
        logger.debug(f"[usage] {sample.name}: total={sample.total:.2f}% over {elapsed} ns")
    return host_state.cpu_usage
