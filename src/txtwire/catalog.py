"""Built-in provider descriptors."""

from txtwire.backends.cloudns import ClouDNSBackend, ClouDNSConfig
from txtwire.backends.hosttech import HosttechBackend, HosttechConfig
from txtwire.backends.httpreq import HttpreqBackend, HttpreqConfig
from txtwire.backends.linode import LinodeBackend, LinodeConfig
from txtwire.backends.powerdns import PowerDnsBackend, PowerDnsConfig
from txtwire.backends.variomedia import VariomediaBackend, VariomediaConfig
from txtwire.backends.vultr import VultrBackend, VultrConfig
from txtwire.registry import ProviderDescriptor

BUILTIN_PROVIDERS = [
    ProviderDescriptor("cloudns", ClouDNSConfig, ClouDNSBackend),
    ProviderDescriptor("hosttech", HosttechConfig, HosttechBackend),
    ProviderDescriptor("httpreq", HttpreqConfig, HttpreqBackend),
    # linodev4 is the name from when the v3 API was still supported
    ProviderDescriptor("linode", LinodeConfig, LinodeBackend, aliases=frozenset({"linodev4"})),
    ProviderDescriptor("pdns", PowerDnsConfig, PowerDnsBackend, aliases=frozenset({"powerdns"})),
    ProviderDescriptor("variomedia", VariomediaConfig, VariomediaBackend),
    ProviderDescriptor("vultr", VultrConfig, VultrBackend),
]
