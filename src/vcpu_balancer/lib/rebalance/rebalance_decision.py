#!/usr/bin/env python3
"""
rebalance_decision.py
- Encapsulates the decision logic for VCPU load rebalancing on one host.
- A pinning violation (override) always wins; otherwise imbalance must persist
  for `hysteresis_cycles` consecutive cycles before a rebalance is requested.
"""

from loguru import logger

from vcpu_balancer.lib.usage.usage_math import check_max_criteria, return_max

# --- Metrics ---
balance_checks_total = 0
balanced_cycles_total = 0
imbalanced_cycles_total = 0
override_triggers_total = 0
hysteresis_triggers_total = 0
last_max_usage_percent = 0.0

# --- Verdicts ---
BALANCED = "balanced"
IMBALANCED = "imbalanced"
OVERRIDE_TRIGGERED = "override_triggered"
NOT_APPLICABLE = "not_applicable"


class BalanceDecision:
    def __init__(self, verdict, label, max_usage):
        self.verdict = verdict
        self.label = label          # console verdict: YES / NO / N/A
        self.max_usage = max_usage

    @property
    def rebalance(self):
        return self.verdict in (IMBALANCED, OVERRIDE_TRIGGERED)

    def __repr__(self):
        return f"BalanceDecision(verdict={self.verdict!r}, label={self.label!r}, max_usage={self.max_usage:.2f})"


# --- Decision Logic ---

def evaluate(host_state, config):
    """
    Decide whether this cycle's per-core totals call for a rebalance.

    Consumes `host_state.override` and updates the hysteresis counter in place.

    Args:
        host_state (HostState): Per-core usage, counter and override flag.
        config (dict): Loaded scheduler config (`default` section).

    Returns:
        BalanceDecision
    """
    global balance_checks_total, balanced_cycles_total, imbalanced_cycles_total
    global override_triggers_total, hysteresis_triggers_total, last_max_usage_percent

    settings = config["default"]
    ratio = settings["balance_ratio"]
    noise_floor = settings["noise_floor_percent"]
    required = settings["hysteresis_cycles"]

    balance_checks_total += 1
    highest = return_max(host_state.cpu_usage)
    last_max_usage_percent = highest

    if host_state.override:
        host_state.override = False
        host_state.consecutive_imbalanced_cycles = 0
        override_triggers_total += 1
        logger.warning("[rebalance] VCPU pinned to more than one PCPU; rebalancing regardless of load")
        return BalanceDecision(OVERRIDE_TRIGGERED, "YES" if check_max_criteria(host_state.cpu_usage, highest, ratio) else "NO", highest)

    if check_max_criteria(host_state.cpu_usage, highest, ratio):
        host_state.consecutive_imbalanced_cycles = 0
        balanced_cycles_total += 1
        return BalanceDecision(BALANCED, "YES", highest)

    if highest > noise_floor:
        imbalanced_cycles_total += 1
        host_state.consecutive_imbalanced_cycles += 1
        streak = host_state.consecutive_imbalanced_cycles
        if streak >= required:
            host_state.consecutive_imbalanced_cycles = 0
            hysteresis_triggers_total += 1
            logger.warning(f"[rebalance] Load imbalanced for {streak} consecutive cycles; rebalancing")
            return BalanceDecision(IMBALANCED, "NO", highest)
        logger.info(f"[rebalance] Load imbalanced ({streak}/{required}); tolerating")
        return BalanceDecision(BALANCED, "NO", highest)

    host_state.consecutive_imbalanced_cycles = 0
    return BalanceDecision(NOT_APPLICABLE, "N/A", highest)
