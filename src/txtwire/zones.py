"""Zone and subdomain resolution for challenge names."""

from collections.abc import Iterable
from typing import Any

import dns.exception
import dns.resolver

from txtwire._logging import get_logger
from txtwire.challenges.dns01 import un_fqdn
from txtwire.exceptions import AmbiguousZoneError, ZoneNotFoundError
from txtwire.models import Zone

logger = get_logger(__name__)


def domain_name_guesses(fqdn: str) -> list[str]:
    """Return a list of progressively less-specific domain names.

    One of these will probably be the zone known to the DNS provider.

    >>> domain_name_guesses("_acme-challenge.foo.example.com.")
    ['_acme-challenge.foo.example.com', 'foo.example.com', 'example.com', 'com']
    """
    labels = un_fqdn(fqdn).split(".")
    return [".".join(labels[i:]) for i in range(len(labels)) if labels[i]]


def find_zone_by_fqdn(fqdn: str, zones: Iterable[Zone], provider: str | None = None) -> Zone:
    """Find the most specific zone covering a FQDN.

    Walks label boundaries from the full name toward the root; the first
    (longest) candidate the account knows wins.

    Args:
        fqdn: Name to resolve, with or without trailing dot.
        zones: Zones known to the backend account.
        provider: Provider name for error messages.

    Returns:
        The matching zone.

    Raises:
        AmbiguousZoneError: If the best match is listed more than once with
            different ids.
        ZoneNotFoundError: If no zone covers the name.
    """
    by_name: dict[str, list[Zone]] = {}
    for zone in zones:
        by_name.setdefault(un_fqdn(zone.name).lower(), []).append(zone)

    for candidate in domain_name_guesses(fqdn.lower()):
        matches = by_name.get(candidate)
        if not matches:
            continue

        ids = list(dict.fromkeys(z.id for z in matches))
        if len(ids) > 1:
            raise AmbiguousZoneError(candidate, ids, provider)

        logger.debug("Zone found", extra={"fqdn": fqdn, "zone": candidate})
        return matches[0]

    raise ZoneNotFoundError(f"no zone found for {fqdn}", provider)


def find_zone_by_soa(fqdn: str, resolver: Any = None, provider: str | None = None) -> str:
    """Find the authoritative zone for a FQDN using public SOA lookups.

    Used by backends without a zone-list API. The first candidate whose SOA
    answer is owned by the candidate itself is the zone apex.

    Args:
        fqdn: Name to resolve, with or without trailing dot.
        resolver: Object with a dnspython compatible ``resolve(qname, rdtype)``.
        provider: Provider name for error messages.

    Returns:
        The zone name, without trailing dot.

    Raises:
        ZoneNotFoundError: If no SOA record is found on the way to the root.
    """
    resolver = resolver or dns.resolver.Resolver()

    for candidate in domain_name_guesses(fqdn):
        try:
            answer = resolver.resolve(candidate + ".", "SOA")
        except (dns.resolver.NXDOMAIN, dns.resolver.NoAnswer):
            continue
        except dns.exception.DNSException as e:
            raise ZoneNotFoundError(f"could not find zone for {fqdn}: {e}", provider) from e

        owner = answer.rrset.name.to_text(omit_final_dot=True)
        if owner.lower() == candidate.lower():
            logger.debug("Zone found via SOA", extra={"fqdn": fqdn, "zone": candidate})
            return candidate

    raise ZoneNotFoundError(f"could not find zone for {fqdn}", provider)


def extract_subdomain(fqdn: str, zone: str, provider: str | None = None) -> str:
    """Strip the zone suffix and its separating dot from a FQDN.

    Args:
        fqdn: Record name, with or without trailing dot.
        zone: Zone name, with or without trailing dot.
        provider: Provider name for error messages.

    Returns:
        The subdomain relative to the zone, "" for the zone apex.

    Raises:
        ZoneNotFoundError: If fqdn is not inside zone.
    """
    name = un_fqdn(fqdn)
    zone_name = un_fqdn(zone)

    if name.lower() == zone_name.lower():
        return ""

    suffix = "." + zone_name
    if not name.lower().endswith(suffix.lower()):
        raise ZoneNotFoundError(f"{fqdn} is not a subdomain of {zone}", provider)

    return name[: -len(suffix)]
