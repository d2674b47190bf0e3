"""
usage_math.py
- Small numeric helpers used by the balance decision and the usage report.
"""

import math


def return_max(values):
    """Largest value, never below 0. An empty sequence yields 0.0."""
    highest = 0.0
    for value in values:
        if value > highest:
            highest = value
    return highest


def check_max_criteria(values, highest, ratio=2.0):
    """
    True when no value is more than `ratio` times less busy than `highest`.

    Args:
        values (list[float]): Per-core usage.
        highest (float): Max of `values` (see return_max).
        ratio (float): Allowed busiest/least-busy ratio.
    """
    limit = highest / ratio
    for value in values:
        if limit > value:
            return False
    return True


def only_one_bit_set(mask):
    """True if the unsigned int `mask` has exactly one bit set."""
    return mask > 0 and not (mask & (mask - 1))


def calculate_mean(values):
    if not values:
        return 0.0
    return sum(values) / len(values)


def calculate_stddev(values, mean=None):
    """Population standard deviation."""
    if not values:
        return 0.0
    if mean is None:
        mean = calculate_mean(values)
    variance = sum((v - mean) ** 2 for v in values) / len(values)
    return math.sqrt(variance)
