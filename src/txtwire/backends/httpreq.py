"""HTTP request backend, for self-hosted DNS services exposing two endpoints."""

import httpx

from txtwire.backends.base import HttpBackend
from txtwire.challenges.dns01 import to_fqdn, un_fqdn
from txtwire.config import ProviderConfig
from txtwire.models import TxtRecord, Zone


class HttpreqConfig(ProviderConfig):
    """Configuration for the HTTP request backend.

    ``username`` and ``password`` are optional; Basic auth is only sent when
    both are set.
    """

    provider_name = "httpreq"
    env_namespace = "HTTPREQ"
    required_credentials = ("endpoint",)

    endpoint: str | None = None
    username: str | None = None
    password: str | None = None


class HttpreqBackend(HttpBackend):
    """Backend posting the record name and value to ``/present`` and ``/cleanup``.

    The remote service has no notion of zones, so the whole challenge name is
    treated as the zone and the record lives at its apex.
    """

    requires_record_id = False

    config: HttpreqConfig

    def base_url(self) -> str:
        return self.config.endpoint.rstrip("/")

    def auth(self) -> httpx.Auth | None:
        if self.config.username and self.config.password:
            return httpx.BasicAuth(self.config.username, self.config.password)
        return None

    def resolve_zone(self, fqdn: str) -> Zone:
        return Zone(name=un_fqdn(fqdn))

    def create_txt(self, record: TxtRecord) -> TxtRecord:
        self._request("POST", "/present", json={"fqdn": to_fqdn(record.fqdn), "value": record.value})
        return record

    def delete_txt(self, record: TxtRecord) -> None:
        self._request("POST", "/cleanup", json={"fqdn": to_fqdn(record.fqdn), "value": record.value})
