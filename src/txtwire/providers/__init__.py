"""DNS providers for ACME challenge validation."""

from txtwire.providers.adapter import Adapter, SequentialAdapter
from txtwire.providers.base import DnsProvider, Sequential, sequential_interval

__all__ = ["Adapter", "DnsProvider", "Sequential", "SequentialAdapter", "sequential_interval"]
