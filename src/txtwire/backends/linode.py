"""Linode DNS backend (API v4)."""

import json
from collections.abc import Iterator
from datetime import datetime, timedelta
from typing import Any

import httpx

from txtwire.backends.base import HttpBackend
from txtwire.config import Duration, ProviderConfig
from txtwire.exceptions import ZoneNotFoundError
from txtwire.models import TxtRecord, Zone
from txtwire.zones import find_zone_by_soa

_API_BASE = "https://api.linode.com/v4"
_PAGE_SIZE = 500

MIN_TTL = 300
# Linode rebuilds zone files every 15 minutes
DNS_UPDATE_FREQ_MINS = 15
DNS_UPDATE_FUDGE_SECS = 120


class LinodeConfig(ProviderConfig):
    """Configuration for Linode DNS.

    A propagation timeout of zero or less means "until the next zone file
    rebuild", computed when timeout() is called.
    """

    provider_name = "linode"
    env_namespace = "LINODE"
    min_ttl = MIN_TTL
    required_credentials = ("token",)

    token: str | None = None
    ttl: int = MIN_TTL
    propagation_timeout: Duration = timedelta(0)
    polling_interval: Duration = timedelta(seconds=15)


class LinodeBackend(HttpBackend):
    """Backend for Linode domains, authenticated with a personal access token."""

    requires_record_id = False

    config: LinodeConfig

    def __init__(self, config: LinodeConfig, http_client: httpx.Client | None = None, resolver: Any = None):
        super().__init__(config, http_client)
        self._resolver = resolver

    def base_url(self) -> str:
        return _API_BASE

    def headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self.config.token}"}

    def resolve_zone(self, fqdn: str) -> Zone:
        zone_name = find_zone_by_soa(fqdn, self._resolver, self.name)

        response = self._request("GET", "/domains", headers={"X-Filter": json.dumps({"domain": zone_name})})
        domains = self._json(response).get("data", [])
        if not domains:
            raise ZoneNotFoundError(f"domain {zone_name} not found in the Linode account", self.name)

        return Zone(name=zone_name, id=str(domains[0]["id"]))

    def list_txt(self, zone: Zone, name: str) -> list[TxtRecord]:
        return [
            self._to_record(zone, item)
            for item in self._paginate(f"/domains/{zone.id}/records", {"type": "TXT"})
            if item.get("type") == "TXT" and item.get("name", "").lower() == name.lower()
        ]

    def create_txt(self, record: TxtRecord) -> TxtRecord:
        response = self._request(
            "POST",
            f"/domains/{record.zone.id}/records",
            json={"type": "TXT", "name": record.name, "target": record.value, "ttl_sec": record.ttl},
        )
        return self._to_record(record.zone, self._json(response))

    def delete_txt(self, record: TxtRecord) -> None:
        self._request("DELETE", f"/domains/{record.zone.id}/records/{record.id}")

    def timeout(self) -> tuple[timedelta, timedelta]:
        timeout = self.config.propagation_timeout
        if timeout <= timedelta(0):
            # Wait for the next zone file rebuild, plus one TTL and some slack
            mins_remaining = DNS_UPDATE_FREQ_MINS - (datetime.now().minute % DNS_UPDATE_FREQ_MINS)
            timeout = timedelta(minutes=mins_remaining, seconds=MIN_TTL + DNS_UPDATE_FUDGE_SECS)
        return timeout, self.config.polling_interval

    def _paginate(self, path: str, x_filter: dict[str, Any]) -> Iterator[dict[str, Any]]:
        page = 1
        while True:
            response = self._request(
                "GET",
                path,
                params={"page": page, "page_size": _PAGE_SIZE},
                headers={"X-Filter": json.dumps(x_filter)},
            )
            data = self._json(response)
            yield from data.get("data", [])

            if page >= int(data.get("pages", 1)):
                return
            page += 1

    def _to_record(self, zone: Zone, item: dict[str, Any]) -> TxtRecord:
        return TxtRecord(
            zone=zone,
            name=item.get("name", ""),
            value=item.get("target", ""),
            ttl=item.get("ttl_sec", self.config.ttl),
            id=str(item["id"]),
        )
