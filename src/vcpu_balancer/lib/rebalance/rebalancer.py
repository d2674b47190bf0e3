"""
rebalancer.py
- Computes a new one-PCPU-per-domain assignment and applies it.
- Busiest domains are spread across distinct cores first (round-robin over a
  descending sort). Not an optimal bin-packing once domains outnumber cores.
"""

from loguru import logger

# --- Metrics ---
rebalance_runs_total = 0
pin_changes_total = 0
pin_failures_total = 0


def plan_assignments(domain_totals, core_count):
    """
    Assign each domain one core by descending total utilization.

    Args:
        domain_totals (list[tuple]): (domain id, total utilization) in enumeration order.
        core_count (int): Number of PCPUs.

    Returns:
        list[tuple]: (domain id, core index) in assignment order.
    """
    if core_count <= 0:
        raise ValueError(f"core_count must be positive, got {core_count}")
    ranked = sorted(domain_totals, key=lambda item: item[1], reverse=True)
    return [(domain_id, i % core_count) for i, (domain_id, _) in enumerate(ranked)]


def apply_assignments(session, samples, assignments, dry_run=False):
    """
    Pin every assigned domain's VCPU to its single core.

    Any failure propagates as PinningError; assignments already applied are not
    rolled back.

    Args:
        session (HostSession): Issues the pin commands.
        samples (list[DomainSample]): Looked up by name for the domain handle.
        assignments (list[tuple]): Output of plan_assignments.
        dry_run (bool): Log the plan without pinning.
    """
    global rebalance_runs_total, pin_changes_total, pin_failures_total

    by_name = {sample.name: sample for sample in samples}
    rebalance_runs_total += 1

    for name, core in assignments:
        mask = 1 << core
        if dry_run:
            logger.info(f"[rebalance] Would pin {name} to PCPU {core} (mask {mask:#x})")
            continue
        try:
            session.set_vcpu_pinning(by_name[name].domain, core)
        except Exception:
            pin_failures_total += 1
            raise
        pin_changes_total += 1
        logger.info(f"[rebalance] Pinned {name} to PCPU {core} (mask {mask:#x})")


def rebalance(session, samples, core_count, dry_run=False):
    """Plan from each sample's current total and apply. Returns the assignments."""
    domain_totals = [(sample.name, sample.total) for sample in samples]
    assignments = plan_assignments(domain_totals, core_count)
    apply_assignments(session, samples, assignments, dry_run=dry_run)
    return assignments
