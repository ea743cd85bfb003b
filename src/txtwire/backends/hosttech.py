"""hosttech DNS backend."""

from datetime import timedelta
from typing import Any

import httpx

from txtwire.backends.base import HttpBackend
from txtwire.config import Duration, ProviderConfig
from txtwire.exceptions import ZoneNotFoundError
from txtwire.models import TxtRecord, Zone
from txtwire.zones import find_zone_by_soa

_API_BASE = "https://api.ns1.hosttech.eu/api/user/v1"


class HosttechConfig(ProviderConfig):
    """Configuration for hosttech DNS."""

    provider_name = "hosttech"
    env_namespace = "HOSTTECH"
    required_credentials = ("api_key",)

    api_key: str | None = None
    ttl: int = 3600
    propagation_timeout: Duration = timedelta(minutes=1)


class HosttechBackend(HttpBackend):
    """Backend for the hosttech DNS API.

    Records can only be deleted by the numeric id returned on creation, so the
    adapter must track it between present and clean_up.
    """

    config: HosttechConfig

    def __init__(self, config: HosttechConfig, http_client: httpx.Client | None = None, resolver: Any = None):
        super().__init__(config, http_client)
        self._resolver = resolver

    def base_url(self) -> str:
        return _API_BASE

    def headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self.config.api_key}"}

    def resolve_zone(self, fqdn: str) -> Zone:
        zone_name = find_zone_by_soa(fqdn, self._resolver, self.name)

        response = self._request("GET", "/zones", params={"query": zone_name})
        for item in self._json(response).get("data", []):
            if item.get("name", "").lower() == zone_name.lower():
                return Zone(name=zone_name, id=str(item["id"]))

        raise ZoneNotFoundError(f"could not find zone {zone_name} in the hosttech account", self.name)

    def create_txt(self, record: TxtRecord) -> TxtRecord:
        response = self._request(
            "POST",
            f"/zones/{record.zone.id}/records",
            json={"type": "TXT", "name": record.name, "text": record.value, "ttl": record.ttl},
        )
        data = self._json(response)["data"]
        return record.model_copy(update={"id": str(data["id"])})

    def delete_txt(self, record: TxtRecord) -> None:
        self._request("DELETE", f"/zones/{record.zone.id}/records/{record.id}")
