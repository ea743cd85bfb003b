"""Integration tests for PowerDNS API error handling (requires PowerDNS in Docker).

These tests validate real API error responses from PowerDNS. For server-side
errors that cannot be triggered by clients, see the mocked tests in
tests/unit/test_backends.py::TestPowerDns.
"""

from collections.abc import Generator

import pytest

from txtwire import lookup
from txtwire.exceptions import BackendAPIError, MissingCredentialsError
from txtwire.models import TxtRecord, Zone
from txtwire.providers import Adapter


@pytest.fixture
def powerdns_provider(powerdns_api_url: str, powerdns_api_key: str, powerdns_test_zone: str) -> Generator[Adapter]:
    provider = lookup("pdns", {"apiUrl": powerdns_api_url, "apiKey": powerdns_api_key})
    yield provider
    provider.close()


class TestPowerDnsApiErrorsIntegration:
    """Integration tests for PowerDNS API errors using real API responses."""

    def test_wrong_api_key(self, powerdns_api_url: str, powerdns_test_zone: str) -> None:
        """A rejected key surfaces as a BackendAPIError, not a missing zone."""
        provider = lookup("pdns", {"apiUrl": powerdns_api_url, "apiKey": "wrong-key"})

        with pytest.raises(BackendAPIError) as exc_info:
            provider.present("example.org", "token", "token.thumb")

        assert exc_info.value.status_code in (401, 403)

    def test_422_invalid_record_data(self, powerdns_provider: Adapter, powerdns_test_zone: str) -> None:
        """Semantically invalid data (negative TTL) returns 422 Unprocessable Entity."""
        record = TxtRecord(
            zone=Zone(name="example.org", id=powerdns_test_zone),
            name="_acme-challenge.invalid-ttl",
            value="test",
            ttl=-1,
        )

        with pytest.raises(BackendAPIError, match="Unprocessable Entity") as exc_info:
            powerdns_provider.backend.create_txt(record)

        assert exc_info.value.status_code == 422

    def test_404_nonexistent_zone(self, powerdns_provider: Adapter) -> None:
        """PATCH to a zone that does not exist returns 404 Not Found."""
        record = TxtRecord(zone=Zone(name="nonexistent.invalid", id="nonexistent.invalid."), name="x", value="v", ttl=60)

        with pytest.raises(BackendAPIError, match="Not found") as exc_info:
            powerdns_provider.backend.delete_txt(record)

        assert exc_info.value.status_code == 404

    def test_unreachable_server(self) -> None:
        provider = lookup("pdns", {"apiUrl": "http://127.0.0.1:1", "apiKey": "k", "httpTimeout": "1s"})

        with pytest.raises(BackendAPIError, match="API call failed"):
            provider.present("example.org", "token", "token.thumb")

    def test_missing_key_never_calls_server(self, powerdns_api_url: str) -> None:
        with pytest.raises(MissingCredentialsError):
            lookup("pdns", {"apiUrl": powerdns_api_url})
