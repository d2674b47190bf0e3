"""
state.py
- In-memory host state for the balance decision.
- Lives for the process lifetime; never persisted. Stores:
    - cpu_usage: per-core sum of domain percentages for the current cycle
    - consecutive_imbalanced_cycles: hysteresis counter
    - override: a VCPU was seen pinned to other than exactly one PCPU

Only the scheduler loop mutates it.
"""


class HostState:
    def __init__(self, core_count):
        if core_count <= 0:
            raise ValueError(f"core_count must be positive, got {core_count}")
        self.core_count = core_count
        self.cpu_usage = [0.0] * core_count
        self.consecutive_imbalanced_cycles = 0
        self.override = False

    def reset_usage(self):
        """Zero the per-core totals at the start of a cycle."""
        for i in range(self.core_count):
            self.cpu_usage[i] = 0.0

    def add_usage(self, percent):
        """
        Accumulate one domain's per-core percentages into the host totals.

        Args:
            percent (list[float]): One value per core.
        """
        if len(percent) != self.core_count:
            raise ValueError(f"expected {self.core_count} per-core values, got {len(percent)}")
        for i, value in enumerate(percent):
            self.cpu_usage[i] += value

    def __repr__(self):
        return (
            f"HostState(cpu_usage={self.cpu_usage}, "
            f"consecutive_imbalanced_cycles={self.consecutive_imbalanced_cycles}, "
            f"override={self.override})"
        )


class DomainSample:
    """
    Before/after CPU-time snapshot of one domain for the current cycle.

    Buffers are sized once from the host core count and reused every cycle;
    nothing from a previous cycle is kept once it is overwritten.
    """

    def __init__(self, domain, name, core_count, stat_slots=1):
        if core_count <= 0:
            raise ValueError(f"core_count must be positive, got {core_count}")
        self.domain = domain
        self.name = name
        self.core_count = core_count
        self.stat_slots = stat_slots
        self.t_before = None
        self.t_after = None
        self.cpu_time_before = [0] * core_count
        self.cpu_time_after = [0] * core_count
        self.pinning_mask = 0
        self.vcpu_count = 0
        # last computed utilization
        self.percent = [0.0] * core_count
        self.total = 0.0

    def store(self, phase_buffer, counters):
        """Copy `counters` into the before/after buffer with bounds validation."""
        if len(counters) != self.core_count:
            raise ValueError(f"{self.name}: expected {self.core_count} counters, got {len(counters)}")
        phase_buffer[:] = counters

    def release(self):
        self.domain = None
        self.cpu_time_before = []
        self.cpu_time_after = []
        self.percent = []

    def __repr__(self):
        return f"DomainSample(name={self.name!r}, mask={self.pinning_mask:#x}, total={self.total:.2f})"
