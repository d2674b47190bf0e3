"""
config.py
- Defines global configuration values derived from environment variables.
- Used by the scheduler loop, the CLI and the metrics API for shared behavior control.
"""

import os

from vcpu_balancer.core.constants import DEFAULT_LIBVIRT_URI


def env_flag(name, default="false"):
    return os.getenv(name, default).lower() == "true"


def env_int(name, default=0):
    try:
        return int(os.getenv(name, default))
    except ValueError:
        return default


# --- Runtime Behavior Flags ---
DEBUG = env_flag("DEBUG")
DRY_RUN = env_flag("DRY_RUN")
RUN_ONCE = env_flag("RUN_ONCE")

# --- Logging ---
LOG_LEVEL = "DEBUG" if DEBUG else "INFO"  # Loguru string levels
LOG_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
    "<level>{message}</level>"
)

# --- Hypervisor ---
LIBVIRT_URI = os.getenv("LIBVIRT_URI", DEFAULT_LIBVIRT_URI)

# --- Config Paths ---
SCHEDULER_CONFIG_PATH = os.getenv("SCHEDULER_CONFIG", "/etc/vcpu-balancer/scheduler.yml")

# --- Metrics API ---
METRICS_HOST = os.getenv("METRICS_HOST", "0.0.0.0")
METRICS_PORT = env_int("METRICS_PORT", 0)  # 0 disables the API thread

# --- Error Reporting ---
SENTRY_DSN = os.getenv("SENTRY_DSN")
