"""
Shared fakes standing in for libvirt connection and domain objects.
"""

import pytest

from vcpu_balancer.core.config_loader import build_config
from vcpu_balancer.core.hypervisor import HostSession


class FakeDomain:
    def __init__(self, name, cpu_times=(0,), cpumap=(True,), vcpu_count=1, pin_error=None, stats_error=None):
        self._name = name
        self.cpu_times = list(cpu_times)
        self._initial_cpu_times = list(cpu_times)
        self.cpumap = tuple(cpumap)
        self.vcpu_count = vcpu_count
        self.pin_error = pin_error
        self.stats_error = stats_error
        self.pins = []

    def rewind(self):
        self.cpu_times = list(self._initial_cpu_times)

    def name(self):
        return self._name

    def getCPUStats(self, total):
        if self.stats_error:
            raise self.stats_error
        value = self.cpu_times.pop(0) if len(self.cpu_times) > 1 else self.cpu_times[0]
        return [{"cpu_time": value, "user_time": 0, "system_time": 0}]

    def vcpus(self):
        info = [(i, 1, 0, 0) for i in range(self.vcpu_count)]
        return info, [self.cpumap] * self.vcpu_count

    def pinVcpu(self, vcpu, cpumap):
        if self.pin_error:
            raise self.pin_error
        self.pins.append((vcpu, cpumap))
        self.cpumap = cpumap
        return 0


class FakeConnection:
    def __init__(self, domains, cpus=2):
        self.domains = domains
        self.cpus = cpus
        self.close_calls = 0

    def getInfo(self):
        return ["x86_64", 16384, self.cpus, 2400, 1, 1, self.cpus, 1]

    def listAllDomains(self, flags=0):
        return list(self.domains)

    def close(self):
        self.close_calls += 1
        return 0


def make_session(domains, cpus=2):
    session = HostSession(FakeConnection(domains, cpus=cpus))
    session.init_domains()
    # probing reads the counter once
    for domain in domains:
        domain.rewind()
    return session


class FakeClock:
    """Monotonic ns clock advancing by `step` on every call."""

    def __init__(self, start=0, step=1_000_000_000):
        self.now = start
        self.step = step

    def __call__(self):
        self.now += self.step
        return self.now


@pytest.fixture
def config():
    return build_config({})
