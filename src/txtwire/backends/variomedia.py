"""Variomedia DNS backend."""

from typing import Any

import httpx

from txtwire._logging import get_logger
from txtwire.backends.base import HttpBackend
from txtwire.config import SequentialConfig
from txtwire.exceptions import BackendAPIError
from txtwire.models import TxtRecord, Zone
from txtwire.wait import wait_for
from txtwire.zones import find_zone_by_soa

logger = get_logger(__name__)

_API_BASE = "https://api.variomedia.de"
_JSON_API = "application/vnd.api+json"


class VariomediaConfig(SequentialConfig):
    """Configuration for Variomedia DNS."""

    provider_name = "variomedia"
    env_namespace = "VARIOMEDIA"
    required_credentials = ("api_token",)

    api_token: str | None = None
    ttl: int = 300


class VariomediaBackend(HttpBackend):
    """Backend for the Variomedia JSON:API.

    Every change is queued as a job; create and delete only return once the
    job is done. The record id is only known from the link in the job
    response, so the adapter must track it.
    """

    config: VariomediaConfig

    def __init__(self, config: VariomediaConfig, http_client: httpx.Client | None = None, resolver: Any = None):
        super().__init__(config, http_client)
        self._resolver = resolver

    def base_url(self) -> str:
        return _API_BASE

    def headers(self) -> dict[str, str]:
        return {
            "Authorization": f"token {self.config.api_token}",
            "Accept": _JSON_API,
            "Content-Type": _JSON_API,
        }

    def resolve_zone(self, fqdn: str) -> Zone:
        zone_name = find_zone_by_soa(fqdn, self._resolver, self.name)
        return Zone(name=zone_name)

    def create_txt(self, record: TxtRecord) -> TxtRecord:
        body = {
            "data": {
                "type": "dns-record",
                "attributes": {
                    "record_type": "TXT",
                    "name": record.name,
                    "domain": record.zone.name,
                    "data": record.value,
                    "ttl": record.ttl,
                },
            }
        }
        job = self._json(self._request("POST", "/dns-records", json=body))["data"]
        self._wait_job(record, job["id"])

        link = job.get("links", {}).get("dns-record", "")
        record_id = link.rstrip("/").rsplit("/", 1)[-1]
        if not record_id:
            raise BackendAPIError(f"no DNS record link in job {job['id']}", self.name)
        return record.model_copy(update={"id": record_id})

    def delete_txt(self, record: TxtRecord) -> None:
        job = self._json(self._request("DELETE", f"/dns-records/{record.id}"))["data"]
        self._wait_job(record, job["id"])

    def _wait_job(self, record: TxtRecord, job_id: str) -> None:
        def job_done() -> bool:
            data = self._json(self._request("GET", f"/queue-jobs/{job_id}"))["data"]
            attributes = data.get("attributes", {})
            logger.info(
                "Queue job status",
                extra={
                    "provider": self.name,
                    "job_id": job_id,
                    "job_type": attributes.get("job_type"),
                    "status": attributes.get("status"),
                },
            )
            return attributes.get("status") == "done"

        wait_for(
            f"apply change on {record.fqdn}",
            self.config.propagation_timeout,
            self.config.polling_interval,
            job_done,
            self.name,
        )
