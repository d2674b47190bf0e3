"""
usage_report.py
- Renders the per-domain / per-core utilization table and the scheduler statistics
  block shown on the console after each cycle.
"""

from vcpu_balancer.lib.rebalance.rebalance_decision import OVERRIDE_TRIGGERED
from vcpu_balancer.lib.usage.usage_math import calculate_mean, calculate_stddev

COL = 12
RULE = "=" * 28


def format_table(samples, cpu_usage):
    lines = ["", "-" * 37, ""]
    header = f"{'Domain':>{COL}}{'CPU Mask':>{COL}}"
    header += "".join(f"{'CPU' + str(i):>{COL + 1}}" for i in range(len(cpu_usage)))
    header += f"{'Total':>{COL + 1}}"
    lines.append(header)

    for sample in samples:
        row = f"{sample.name:>{COL}}{sample.pinning_mask:>#{COL}x}"
        row += "".join(f"{value:>{COL}.2f}%" for value in sample.percent)
        row += f"{sample.total:>{COL}.2f}%"
        lines.append(row)

    totals = f"{'CPU Total':>{COL}}{'':>{COL}}"
    totals += "".join(f"{value:>{COL}.2f}%" for value in cpu_usage)
    lines.append(totals)
    return "\n".join(lines)


def format_statistics(cpu_usage, decision):
    mean = calculate_mean(cpu_usage)
    lines = [
        "",
        RULE,
        "== Scheduler Statistics:  ==",
        RULE,
        f"==  Max = {decision.max_usage:.2f}",
        f"==  Mean = {mean:.2f}  StdDev = {calculate_stddev(cpu_usage, mean):.2f}",
        f"==  Load Balanced: {decision.label}",
    ]
    if decision.verdict == OVERRIDE_TRIGGERED:
        lines.append("== Rescheduling!\n== (each VCPU only gets 1 PCPU)")
    elif decision.rebalance:
        lines.append("==  Rescheduling VCPU mappings . . .")
    lines.append(RULE)
    return "\n".join(lines)


def print_usage(samples, cpu_usage, decision):
    print(format_table(samples, cpu_usage))
    print(format_statistics(cpu_usage, decision))
