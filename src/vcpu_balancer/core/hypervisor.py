"""
hypervisor.py
- Owns the libvirt connection and every per-domain sample buffer for one host.
- HostSession is a context manager; release runs exactly once on any exit path
  (normal return, signal-driven SystemExit, fatal error).
- libvirt is imported lazily so the decision logic can be used without the binding.

Known limitation: libvirt calls have no timeout. A hung call blocks the loop.
"""

from loguru import logger

from vcpu_balancer.core.constants import CPU_TIME_FIELD, MANAGED_VCPU
from vcpu_balancer.core.errors import HypervisorError, PinningError, SamplingError
from vcpu_balancer.core.state import DomainSample

VIR_CONNECT_LIST_DOMAINS_ACTIVE = 1


def open_session(uri):
    """
    Open a libvirt connection and wrap it in a HostSession.

    Args:
        uri (str): libvirt connection URI, e.g. "qemu:///system".

    Returns:
        HostSession: Session with domains listed and sample buffers allocated.

    Raises:
        HypervisorError: If the binding is missing or the connection fails.
    """
    try:
        import libvirt
    except ImportError as e:
        raise HypervisorError("libvirt-python is not installed (pip install 'vcpu-balancer[libvirt]')") from e

    try:
        conn = libvirt.open(uri)
    except libvirt.libvirtError as e:
        raise HypervisorError(f"Failed to connect to {uri}: {e}") from e
    if conn is None:
        raise HypervisorError(f"Failed to connect to {uri}")

    logger.info(f"[hypervisor] Connected to {uri}")
    session = HostSession(conn)
    try:
        session.init_domains()
    except BaseException:
        # includes SystemExit from a shutdown signal arriving mid-init
        session.close()
        raise
    return session


def cpumap_to_mask(cpumap):
    """Convert a libvirt cpumap (sequence of bools, one per PCPU) to an int bitmask."""
    mask = 0
    for i, allowed in enumerate(cpumap):
        if allowed:
            mask |= 1 << i
    return mask


class HostSession:
    def __init__(self, conn):
        self.conn = conn
        self.domains = []
        self.samples = []
        self.core_count = 0
        self.closed = False

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False

    # --- Topology ---

    def get_core_count(self):
        try:
            cpus = self.conn.getInfo()[2]
        except Exception as e:
            raise HypervisorError(f"Failed to read host node info: {e}") from e
        if cpus <= 0:
            raise HypervisorError(f"Host reported {cpus} CPUs")
        return cpus

    def list_active_domains(self):
        try:
            return list(self.conn.listAllDomains(VIR_CONNECT_LIST_DOMAINS_ACTIVE))
        except Exception as e:
            raise HypervisorError(f"Failed to list active domains: {e}") from e

    def init_domains(self):
        """Read topology, enumerate active domains and size one sample buffer per domain."""
        self.core_count = self.get_core_count()
        self.domains = self.list_active_domains()
        self.samples = []
        for domain in self.domains:
            name = self.domain_name(domain)
            slots = self.probe_cpu_stats(domain)
            self.samples.append(DomainSample(domain, name, self.core_count, slots))
        logger.info(f"[hypervisor] {len(self.domains)} active domain(s) on {self.core_count} PCPU(s)")

    # --- Per-domain reads ---

    def domain_name(self, domain):
        try:
            return domain.name()
        except Exception as e:
            raise HypervisorError(f"Failed to read domain name: {e}") from e

    def probe_cpu_stats(self, domain):
        """
        Probe how many stat slots a domain reports and check the cpu_time field exists.

        Returns:
            int: slot count, later used to bounds-check every read
        """
        try:
            stats = domain.getCPUStats(True)
        except Exception as e:
            raise HypervisorError(f"Failed to probe CPU stats: {e}") from e
        if not stats:
            raise HypervisorError("Domain reported no CPU stat slots")
        if CPU_TIME_FIELD not in stats[0]:
            raise HypervisorError(f"CPU stats are missing the {CPU_TIME_FIELD!r} field")
        return len(stats)

    def get_cpu_time(self, domain, expected_slots=None):
        """
        Return the domain's cumulative CPU time in nanoseconds.

        Args:
            domain: libvirt domain handle.
            expected_slots (int): Slot count from probe_cpu_stats; a different count is rejected.
        """
        try:
            stats = domain.getCPUStats(True)
        except Exception as e:
            raise SamplingError(f"Failed to read CPU stats: {e}") from e
        if expected_slots is not None and len(stats) != expected_slots:
            raise SamplingError(f"Expected {expected_slots} CPU stat slot(s), got {len(stats)}")
        if not stats or CPU_TIME_FIELD not in stats[0]:
            raise SamplingError(f"CPU time statistic {CPU_TIME_FIELD!r} not found")
        return int(stats[0][CPU_TIME_FIELD])

    def get_vcpu_pinning(self, domain):
        """
        Returns:
            tuple[int, int]: (VCPU count, PCPU bitmask of the managed VCPU)
        """
        try:
            info, cpumaps = domain.vcpus()
        except Exception as e:
            raise SamplingError(f"Failed to read VCPU info: {e}") from e
        if not cpumaps:
            raise SamplingError("Domain reported no VCPU pinning maps")
        return len(info), cpumap_to_mask(cpumaps[MANAGED_VCPU])

    # --- Commands ---

    def set_vcpu_pinning(self, domain, core_index):
        """Pin the managed VCPU of `domain` to exactly one PCPU."""
        if not 0 <= core_index < self.core_count:
            raise PinningError(f"core {core_index} is outside 0..{self.core_count - 1}")
        cpumap = tuple(i == core_index for i in range(self.core_count))
        try:
            domain.pinVcpu(MANAGED_VCPU, cpumap)
        except Exception as e:
            raise PinningError(f"Failed to pin VCPU {MANAGED_VCPU} to PCPU {core_index}: {e}") from e

    # --- Release ---

    def close(self):
        """Release sample buffers, the domain list and the connection. Safe to call twice."""
        if self.closed:
            return
        self.closed = True
        for sample in self.samples:
            sample.release()
        self.samples = []
        self.domains = []
        try:
            if self.conn is not None:
                self.conn.close()
                logger.info("[hypervisor] Connection closed")
        except Exception as e:
            logger.error(f"[hypervisor] Failed to close connection cleanly: {e}")
        finally:
            self.conn = None
