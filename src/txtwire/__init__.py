"""txtwire - DNS provider abstraction for ACME DNS-01 challenges."""

from txtwire.exceptions import DnsProviderError
from txtwire.providers import DnsProvider, sequential_interval
from txtwire.registry import config_template, lookup, lookup_from_env, provider_names

__all__ = [
    "DnsProvider",
    "DnsProviderError",
    "config_template",
    "lookup",
    "lookup_from_env",
    "provider_names",
    "sequential_interval",
]
__version__ = "0.1.0"
