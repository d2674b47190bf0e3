#!/usr/bin/env python3
"""
main.py
- Process-wide setup shared by every entrypoint:
    - Loguru sink and format
    - Optional Sentry error reporting
    - FastAPI health/metrics endpoint served on a daemon thread
"""

import sys
from threading import Thread

import sentry_sdk
import uvicorn
from fastapi import FastAPI
from fastapi.responses import PlainTextResponse
from loguru import logger

from vcpu_balancer import __version__
from vcpu_balancer.core.config import LOG_FORMAT, LOG_LEVEL, METRICS_HOST, METRICS_PORT, SENTRY_DSN
from vcpu_balancer.lib.rebalance import rebalance_decision, rebalancer
from vcpu_balancer.runner import scheduler


# --- Logging Setup ---
def configure_logging(level=LOG_LEVEL):
    logger.remove()
    logger.add(sys.stderr, level=level, colorize=True, format=LOG_FORMAT)


def init_sentry(dsn=SENTRY_DSN):
    if dsn:
        sentry_sdk.init(dsn=dsn, traces_sample_rate=1.0, release=f"vcpu-balancer@{__version__}")
        logger.info("[main] Sentry error reporting enabled")


# --- FastAPI Server ---
api = FastAPI()


@api.get("/healthz")
async def health():
    return {"status": "ok"}


@api.get("/metrics")
async def metrics():
    return PlainTextResponse(
        f"""# HELP scheduler_cycles_total Completed sampling cycles
# TYPE scheduler_cycles_total counter
scheduler_cycles_total {scheduler.scheduler_cycles_total}
# HELP scheduler_last_duration_seconds Duration of the last cycle including the sampling sleep
# TYPE scheduler_last_duration_seconds gauge
scheduler_last_duration_seconds {scheduler.scheduler_last_duration_seconds}
# HELP scheduler_imbalance_streak Current consecutive imbalanced cycles
# TYPE scheduler_imbalance_streak gauge
scheduler_imbalance_streak {scheduler.imbalance_streak}
# HELP balance_checks_total Balance evaluations
# TYPE balance_checks_total counter
balance_checks_total {rebalance_decision.balance_checks_total}
# HELP balanced_cycles_total Cycles judged balanced
# TYPE balanced_cycles_total counter
balanced_cycles_total {rebalance_decision.balanced_cycles_total}
# HELP imbalanced_cycles_total Cycles above the noise floor that failed the balance criterion
# TYPE imbalanced_cycles_total counter
imbalanced_cycles_total {rebalance_decision.imbalanced_cycles_total}
# HELP override_triggers_total Rebalances forced by a multi-PCPU VCPU pinning
# TYPE override_triggers_total counter
override_triggers_total {rebalance_decision.override_triggers_total}
# HELP hysteresis_triggers_total Rebalances triggered by sustained imbalance
# TYPE hysteresis_triggers_total counter
hysteresis_triggers_total {rebalance_decision.hysteresis_triggers_total}
# HELP max_core_usage_percent Busiest PCPU usage in the last cycle
# TYPE max_core_usage_percent gauge
max_core_usage_percent {rebalance_decision.last_max_usage_percent}
# HELP rebalance_runs_total Rebalance plans executed
# TYPE rebalance_runs_total counter
rebalance_runs_total {rebalancer.rebalance_runs_total}
# HELP pin_changes_total Successful VCPU pin changes
# TYPE pin_changes_total counter
pin_changes_total {rebalancer.pin_changes_total}
# HELP pin_failures_total Failed VCPU pin changes
# TYPE pin_failures_total counter
pin_failures_total {rebalancer.pin_failures_total}
""",
        media_type="text/plain"
    )


def start_api(host=METRICS_HOST, port=METRICS_PORT):
    uvicorn.run(api, host=host, port=port, log_level="warning")


def start_api_thread(host=METRICS_HOST, port=METRICS_PORT):
    """Serve the API in the background when a port is configured. Returns the thread or None."""
    if port <= 0:
        return None
    thread = Thread(target=start_api, kwargs={"host": host, "port": port}, daemon=True, name="metrics-api")
    thread.start()
    logger.info(f"[api] Serving /healthz and /metrics on {host}:{port}")
    return thread
