"""
vcpu_balancer
- Periodic VCPU-to-PCPU load balancer for a single libvirt/KVM host.
"""

__version__ = "0.3.0"
