"""Integration tests for the PowerDNS provider (requires PowerDNS in Docker)."""

from collections.abc import Generator

import httpx
import pytest

from txtwire import lookup
from txtwire.challenges.dns01 import compute_dns_txt_value
from txtwire.exceptions import ZoneNotFoundError
from txtwire.providers import Adapter


@pytest.fixture
def powerdns_provider(powerdns_api_url: str, powerdns_api_key: str, powerdns_test_zone: str) -> Generator[Adapter]:
    """Create a PowerDNS provider configured for test PowerDNS.

    The powerdns_test_zone fixture ensures the test zone exists.
    """
    provider = lookup("pdns", {"apiUrl": powerdns_api_url, "apiKey": powerdns_api_key})
    yield provider
    provider.close()


def txt_values(api_url: str, api_key: str, name: str) -> list[str]:
    """Read the TXT values of name straight from the PowerDNS API."""
    response = httpx.get(
        f"{api_url}/api/v1/servers/localhost/zones/example.org.",
        headers={"X-API-Key": api_key},
        timeout=30,
    )
    return [
        record["content"].strip('"')
        for rrset in response.json().get("rrsets", [])
        if rrset["name"] == name and rrset["type"] == "TXT"
        for record in rrset["records"]
    ]


class TestPowerDnsProviderIntegration:
    """Integration tests for the PowerDNS provider against PowerDNS."""

    def test_present_and_clean_up(self, powerdns_provider: Adapter, powerdns_api_url: str, powerdns_api_key: str):
        """Created record should be visible via the API, then gone after clean_up."""
        name = "_acme-challenge.verify.example.org."

        powerdns_provider.present("verify.example.org", "token-1", "token-1.thumb")
        try:
            assert txt_values(powerdns_api_url, powerdns_api_key, name) == [compute_dns_txt_value("token-1.thumb")]
        finally:
            powerdns_provider.clean_up("verify.example.org", "token-1", "token-1.thumb")

        assert txt_values(powerdns_api_url, powerdns_api_key, name) == []

    def test_subdomain_record(self, powerdns_provider: Adapter):
        """Should create record for subdomain in correct zone."""
        powerdns_provider.present("deep.sub.test.example.org", "token", "token.thumb")
        powerdns_provider.clean_up("deep.sub.test.example.org", "token", "token.thumb")

    def test_wildcard_and_base_share_record_set(
        self, powerdns_provider: Adapter, powerdns_api_url: str, powerdns_api_key: str
    ):
        """Both values live in one record set; cleaning one keeps the other."""
        name = "_acme-challenge.shared.example.org."

        powerdns_provider.present("*.shared.example.org", "wild", "wild.thumb")
        powerdns_provider.present("shared.example.org", "base", "base.thumb")
        try:
            assert sorted(txt_values(powerdns_api_url, powerdns_api_key, name)) == sorted(
                [compute_dns_txt_value("wild.thumb"), compute_dns_txt_value("base.thumb")]
            )

            powerdns_provider.clean_up("shared.example.org", "base", "base.thumb")

            assert txt_values(powerdns_api_url, powerdns_api_key, name) == [compute_dns_txt_value("wild.thumb")]
        finally:
            powerdns_provider.clean_up("*.shared.example.org", "wild", "wild.thumb")

    def test_present_twice(self, powerdns_provider: Adapter, powerdns_api_url: str, powerdns_api_key: str):
        """A repeated present does not duplicate the value."""
        name = "_acme-challenge.twice.example.org."

        powerdns_provider.present("twice.example.org", "token", "token.thumb")
        powerdns_provider.present("twice.example.org", "token", "token.thumb")
        try:
            assert len(txt_values(powerdns_api_url, powerdns_api_key, name)) == 1
        finally:
            powerdns_provider.clean_up("twice.example.org", "token", "token.thumb")

    def test_zone_not_found_raises_error(self, powerdns_provider: Adapter):
        with pytest.raises(ZoneNotFoundError, match="No zone found"):
            powerdns_provider.present("unknown.nonexistent.tld", "token", "token.thumb")
