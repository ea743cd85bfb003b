"""ClouDNS backend."""

from datetime import timedelta
from typing import Any

import httpx

from txtwire._logging import get_logger
from txtwire.backends.base import HttpBackend
from txtwire.config import Duration, ProviderConfig
from txtwire.exceptions import BackendAPIError, RecordExistsError, ZoneNotFoundError
from txtwire.models import TxtRecord, Zone
from txtwire.wait import wait_for
from txtwire.zones import find_zone_by_soa

logger = get_logger(__name__)

_API_BASE = "https://api.cloudns.net/dns/"


class ClouDNSConfig(ProviderConfig):
    """Configuration for ClouDNS.

    Either ``auth_id`` or ``sub_auth_id`` identifies the API user.
    """

    provider_name = "cloudns"
    env_namespace = "CLOUDNS"
    min_ttl = 60
    required_credentials = ("auth_password",)

    auth_id: str | None = None
    sub_auth_id: str | None = None
    auth_password: str | None = None
    ttl: int = 60
    propagation_timeout: Duration = timedelta(seconds=180)
    polling_interval: Duration = timedelta(seconds=10)

    def missing_credentials(self) -> list[str]:
        missing = super().missing_credentials()
        if not (self.auth_id or self.sub_auth_id):
            missing.insert(0, f"authId/{self.env_key('auth_id')} or subAuthId/{self.env_key('sub_auth_id')}")
        return missing


class ClouDNSBackend(HttpBackend):
    """Backend for the ClouDNS HTTP API.

    Failures come back as HTTP 200 with a "Failed" status. After a record is
    added, present() only returns once every nameserver has picked up the
    change.
    """

    requires_record_id = False

    config: ClouDNSConfig

    def __init__(self, config: ClouDNSConfig, http_client: httpx.Client | None = None, resolver: Any = None):
        super().__init__(config, http_client)
        self._resolver = resolver

    def base_url(self) -> str:
        return _API_BASE

    def resolve_zone(self, fqdn: str) -> Zone:
        zone_name = find_zone_by_soa(fqdn, self._resolver, self.name)

        data = self._call("GET", "get-zone-info.json", {"domain-name": zone_name})
        if not (isinstance(data, dict) and data.get("name")):
            raise ZoneNotFoundError(f"zone {zone_name} not found for {fqdn}", self.name)
        return Zone(name=data["name"], id=data["name"])

    def list_txt(self, zone: Zone, name: str) -> list[TxtRecord]:
        data = self._call("GET", "records.json", {"domain-name": zone.name, "host": name, "type": "TXT"})
        # An empty result is a JSON list, a non-empty one a mapping by id
        items = data.values() if isinstance(data, dict) else []
        return [
            TxtRecord(
                zone=zone,
                name=item.get("host", ""),
                value=item.get("record", ""),
                ttl=int(item.get("ttl", self.config.ttl)),
                id=str(item["id"]),
            )
            for item in items
            if item.get("type") == "TXT" and item.get("host", "").lower() == name.lower()
        ]

    def create_txt(self, record: TxtRecord) -> TxtRecord:
        data = self._call(
            "POST",
            "add-record.json",
            {
                "domain-name": record.zone.name,
                "host": record.name,
                "record-type": "TXT",
                "record": record.value,
                "ttl": record.ttl,
            },
        )
        self._wait_nameservers(record.zone)

        record_id = data.get("data", {}).get("id") if isinstance(data, dict) else None
        return record.model_copy(update={"id": str(record_id) if record_id is not None else None})

    def delete_txt(self, record: TxtRecord) -> None:
        self._call("POST", "delete-record.json", {"domain-name": record.zone.name, "record-id": record.id})

    def _call(self, method: str, endpoint: str, params: dict[str, Any]) -> Any:
        """Call an API endpoint with credentials, raising on "Failed" bodies."""
        params = {**params, "auth-password": self.config.auth_password}
        if self.config.sub_auth_id:
            params["sub-auth-id"] = self.config.sub_auth_id
        else:
            params["auth-id"] = self.config.auth_id

        data = self._json(self._request(method, endpoint, params=params))
        if isinstance(data, dict) and data.get("status") == "Failed":
            description = data.get("statusDescription", "unknown error")
            if "already exists" in description.lower():
                raise RecordExistsError(description, self.name)
            raise BackendAPIError(description, self.name)
        return data

    def _wait_nameservers(self, zone: Zone) -> None:
        # More nameservers take part in the sync than are authoritative;
        # the CA's secondary checks fail until all of them are updated.
        def synced() -> bool:
            servers = self._call("GET", "update-status.json", {"domain-name": zone.name})
            updated = sum(1 for s in servers if s.get("updated"))
            logger.info(
                "Nameserver sync progress",
                extra={"provider": self.name, "zone": zone.name, "updated": updated, "total": len(servers)},
            )
            return updated == len(servers)

        wait_for(
            f"nameserver sync on {zone.name}",
            self.config.propagation_timeout,
            self.config.polling_interval,
            synced,
            self.name,
        )
