"""PowerDNS backend for ACME DNS-01 challenges."""

import threading
from datetime import timedelta
from typing import Any

import httpx

from txtwire._logging import get_logger
from txtwire.backends.base import HttpBackend
from txtwire.challenges.dns01 import to_fqdn, un_fqdn
from txtwire.config import Duration, ProviderConfig
from txtwire.exceptions import BackendAPIError, ZoneNotFoundError
from txtwire.models import TxtRecord, Zone
from txtwire.zones import domain_name_guesses

logger = get_logger(__name__)


class PowerDnsConfig(ProviderConfig):
    """Configuration for the PowerDNS authoritative server API."""

    provider_name = "pdns"
    env_namespace = "PDNS"
    required_credentials = ("api_url", "api_key")

    api_url: str | None = None
    api_key: str | None = None
    server_name: str = "localhost"
    propagation_timeout: Duration = timedelta(seconds=120)


class PowerDnsBackend(HttpBackend):
    """Backend for the PowerDNS HTTP API.

    PowerDNS only replaces whole record sets, so adding a value means
    rewriting the set with every current value plus the new one, and
    removing one rewrites the set without it. Records have no id and are
    deleted by value.
    """

    requires_record_id = False

    config: PowerDnsConfig

    def __init__(self, config: PowerDnsConfig, http_client: httpx.Client | None = None):
        super().__init__(config, http_client)
        # rrset updates are read-modify-write
        self._rrset_lock = threading.Lock()

    def base_url(self) -> str:
        return f"{self.config.api_url.rstrip('/')}/api/v1/servers/{self.config.server_name}"

    def headers(self) -> dict[str, str]:
        return {"X-API-Key": self.config.api_key}

    def resolve_zone(self, fqdn: str) -> Zone:
        """Find the apex zone containing the given name.

        Iterates through name parts from most specific to least, testing
        each candidate zone URL.
        """
        for candidate in domain_name_guesses(fqdn):
            zone_id = to_fqdn(candidate)

            logger.debug("Trying zone candidate", extra={"fqdn": fqdn, "candidate": zone_id})

            try:
                response = self._client.get(f"/zones/{zone_id}", params={"rrsets": "false"})
            except httpx.HTTPError as e:
                raise BackendAPIError.from_transport_error(e, self.name) from e

            if response.status_code == 200:
                logger.debug("Zone found", extra={"fqdn": fqdn, "zone": zone_id})
                return Zone(name=candidate, id=self._json(response).get("id", zone_id))
            if response.status_code not in (404, 422):
                raise BackendAPIError.from_response(response, self.name)

        raise ZoneNotFoundError(f"No zone found for domain: {fqdn}", self.name)

    def list_txt(self, zone: Zone, name: str) -> list[TxtRecord]:
        fqdn = self._record_fqdn(zone, name)
        data = self._json(self._request("GET", f"/zones/{zone.id}"))

        records = []
        for rrset in data.get("rrsets", []):
            if rrset.get("type") != "TXT" or rrset.get("name", "").lower() != fqdn.lower():
                continue
            for item in rrset.get("records", []):
                records.append(
                    TxtRecord(
                        zone=zone,
                        name=name,
                        value=_unquote(item.get("content", "")),
                        ttl=rrset.get("ttl", self.config.ttl),
                    )
                )
        return records

    def create_txt(self, record: TxtRecord) -> TxtRecord:
        with self._rrset_lock:
            values = [r.value for r in self.list_txt(record.zone, record.name)]
            if record.value not in values:
                values.append(record.value)
            self._patch_rrset(record, "REPLACE", values)
        return record

    def delete_txt(self, record: TxtRecord) -> None:
        with self._rrset_lock:
            values = [r.value for r in self.list_txt(record.zone, record.name) if r.value != record.value]
            if values:
                self._patch_rrset(record, "REPLACE", values)
            else:
                self._patch_rrset(record, "DELETE", [])

    def _patch_rrset(self, record: TxtRecord, changetype: str, values: list[str]) -> None:
        """Execute a record set change via the PowerDNS API.

        Args:
            record: Record whose set is changed.
            changetype: PowerDNS changetype - "REPLACE" or "DELETE".
            values: Values of the set after the change (REPLACE only).
        """
        if changetype not in ("REPLACE", "DELETE"):
            raise ValueError(f"Invalid changetype: {changetype}. Must be 'REPLACE' or 'DELETE'.")

        rrset: dict[str, Any] = {
            "name": self._record_fqdn(record.zone, record.name),
            "type": "TXT",
            "changetype": changetype,
        }

        if changetype == "REPLACE":
            rrset["ttl"] = record.ttl
            rrset["records"] = [{"content": f'"{value}"', "disabled": False} for value in values]

        self._request("PATCH", f"/zones/{record.zone.id}", json={"rrsets": [rrset]})

    @staticmethod
    def _record_fqdn(zone: Zone, name: str) -> str:
        return to_fqdn(f"{name}.{un_fqdn(zone.name)}" if name else un_fqdn(zone.name))


def _unquote(content: str) -> str:
    if len(content) >= 2 and content[0] == content[-1] == '"':
        return content[1:-1]
    return content
