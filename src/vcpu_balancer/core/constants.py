"""
constants.py
- Project-wide constants shared across the sampling, decision and rebalance logic.
- Includes the tuned balance thresholds and unit conversions.
"""

# --- Balance Decision Defaults ---
DEFAULT_HYSTERESIS_CYCLES = 3      # consecutive imbalanced cycles before rebalancing
DEFAULT_NOISE_FLOOR_PERCENT = 2.0  # max core usage at or below this is "N/A"
DEFAULT_BALANCE_RATIO = 2.0        # no core may be busier than ratio x any other core

# --- Units ---
NS_PER_SEC = 1_000_000_000

# --- Hypervisor ---
DEFAULT_LIBVIRT_URI = "qemu:///system"
CPU_TIME_FIELD = "cpu_time"        # libvirt VIR_DOMAIN_CPU_STATS_CPUTIME
MANAGED_VCPU = 0                   # single-VCPU domains: only VCPU 0 is pinned
