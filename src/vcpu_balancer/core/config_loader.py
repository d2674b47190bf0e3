"""
config_loader.py
- Loads and previews the YAML tuning file for the balance decision.
- Missing keys fall back to the defaults in constants.py.
"""

import os

import yaml
from loguru import logger

from vcpu_balancer.core.constants import (
    DEFAULT_BALANCE_RATIO,
    DEFAULT_HYSTERESIS_CYCLES,
    DEFAULT_NOISE_FLOOR_PERCENT,
)

DEFAULTS = {
    "hysteresis_cycles": DEFAULT_HYSTERESIS_CYCLES,
    "noise_floor_percent": DEFAULT_NOISE_FLOOR_PERCENT,
    "balance_ratio": DEFAULT_BALANCE_RATIO,
}


def load_yaml(path):
    """Safely load a YAML file and return a parsed dict. Returns {} on failure."""
    try:
        with open(path, "r") as f:
            return yaml.safe_load(f) or {}
    except Exception as e:
        logger.error(f"[config] Failed to load {path}: {e}")
        return {}


def preview_yaml(path, name=None):
    """
    Log a human-readable preview of the YAML file contents for debugging.
    Used during startup to verify config presence and structure.
    """
    if not os.path.exists(path):
        logger.warning(f"[config] File not found: {path} (using defaults)")
        return

    try:
        with open(path, "r") as f:
            contents = f.read()
            logger.info(f"\nLoaded {name or path}:\n" + "\n".join(f"| {line}" for line in contents.strip().splitlines()))
    except Exception as e:
        logger.error(f"[config] Could not preview {path}: {e}")


def build_config(raw):
    """
    Merge a raw parsed config over the defaults and validate the result.

    Args:
        raw (dict): Parsed YAML, expected to hold a `default` mapping.

    Returns:
        dict: {"default": {...}} with every tuning key present.

    Raises:
        ValueError: If a tuning value has the wrong type or range.
    """
    section = raw.get("default") if isinstance(raw, dict) else None
    merged = dict(DEFAULTS)
    merged.update(section or {})

    cycles = merged["hysteresis_cycles"]
    if isinstance(cycles, bool) or not isinstance(cycles, int) or cycles < 1:
        raise ValueError(f"hysteresis_cycles must be a positive integer, got {cycles!r}")

    for key in ("noise_floor_percent", "balance_ratio"):
        value = merged[key]
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ValueError(f"{key} must be a number, got {value!r}")
        merged[key] = float(value)

    if merged["noise_floor_percent"] < 0:
        raise ValueError("noise_floor_percent must not be negative")
    if merged["balance_ratio"] <= 1.0:
        raise ValueError("balance_ratio must be greater than 1.0")

    return {"default": merged}


def load_scheduler_config(path):
    """Load the tuning file at `path`, falling back to defaults when it is absent."""
    if not os.path.exists(path):
        logger.debug(f"[config] No tuning file at {path}; using defaults")
        return build_config({})
    return build_config(load_yaml(path))
