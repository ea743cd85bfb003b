"""Vultr DNS backend."""

from collections.abc import Iterator
from typing import Any

from txtwire.backends.base import HttpBackend
from txtwire.config import ProviderConfig
from txtwire.models import TxtRecord, Zone

_API_BASE = "https://api.vultr.com/v2"
_PAGE_SIZE = 25


class VultrConfig(ProviderConfig):
    """Configuration for Vultr DNS."""

    provider_name = "vultr"
    env_namespace = "VULTR"
    required_credentials = ("api_key",)

    api_key: str | None = None


class VultrBackend(HttpBackend):
    """Backend for the Vultr v2 API.

    Zones are looked up in the account domain list; records have numeric ids
    but can be found again by name and value, so no tracking is required.
    """

    requires_record_id = False

    config: VultrConfig

    def base_url(self) -> str:
        return _API_BASE

    def headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self.config.api_key}"}

    def list_zones(self) -> list[Zone]:
        return [Zone(name=d["domain"], id=d["domain"]) for d in self._paginate("/domains", "domains")]

    def list_txt(self, zone: Zone, name: str) -> list[TxtRecord]:
        return [
            self._to_record(zone, item)
            for item in self._paginate(f"/domains/{zone.name}/records", "records")
            if item.get("type") == "TXT" and item.get("name", "").lower() == name.lower()
        ]

    def create_txt(self, record: TxtRecord) -> TxtRecord:
        response = self._request(
            "POST",
            f"/domains/{record.zone.name}/records",
            json={
                "name": record.name,
                "type": "TXT",
                "data": f'"{record.value}"',
                "ttl": record.ttl,
                "priority": 0,
            },
        )
        return self._to_record(record.zone, self._json(response)["record"])

    def delete_txt(self, record: TxtRecord) -> None:
        self._request("DELETE", f"/domains/{record.zone.name}/records/{record.id}")

    def _paginate(self, path: str, key: str) -> Iterator[dict[str, Any]]:
        params: dict[str, Any] = {"per_page": _PAGE_SIZE}
        while True:
            data = self._json(self._request("GET", path, params=params))
            yield from data.get(key, [])

            cursor = data.get("meta", {}).get("links", {}).get("next")
            if not cursor:
                return
            params["cursor"] = cursor

    def _to_record(self, zone: Zone, item: dict[str, Any]) -> TxtRecord:
        return TxtRecord(
            zone=zone,
            name=item.get("name", ""),
            value=item.get("data", "").strip('"'),
            ttl=item.get("ttl", self.config.ttl),
            id=str(item["id"]),
        )
