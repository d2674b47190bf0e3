"""
errors.py
- Exception hierarchy for the scheduler.
- Helpers raise; the CLI is the only place that turns an error into a process exit.
"""


class SchedulerError(Exception):
    """Base class for every failure the control loop treats as fatal."""


class HypervisorError(SchedulerError):
    """Connection, topology, listing or probe failure."""


class SamplingError(SchedulerError):
    """CPU-time counters could not be read or are inconsistent."""


class PinningError(SchedulerError):
    """A VCPU pin change was refused by the hypervisor."""


class InvalidIntervalError(SchedulerError):
    """The sampling interval argument is missing or not a positive integer."""
