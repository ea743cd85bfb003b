"""Backend capability interface and shared HTTP plumbing."""

from abc import ABC, abstractmethod
from datetime import timedelta
from typing import Any, ClassVar

import httpx

from txtwire._logging import Timer, get_logger
from txtwire.config import ProviderConfig
from txtwire.exceptions import BackendAPIError, ZoneNotFoundError
from txtwire.models import TxtRecord, Zone
from txtwire.zones import find_zone_by_fqdn

logger = get_logger(__name__)


class Backend(ABC):
    """Narrow set of operations a DNS vendor API must offer.

    Implementations translate these calls to the vendor wire format. Vendor
    quirks (readiness polling, replace-only record sets, composite ids) live
    here; the lifecycle bookkeeping lives in the adapter.

    Attributes:
        requires_record_id: True when delete_txt() needs the id returned by
            create_txt(), False when the backend can delete by name and value.
    """

    requires_record_id: ClassVar[bool] = True

    def __init__(self, config: ProviderConfig):
        self.config = config

    @property
    def name(self) -> str:
        return self.config.provider_name

    def resolve_zone(self, fqdn: str) -> Zone:
        """Find the zone holding fqdn.

        The default walks the account zone list; backends without one
        override this.

        Raises:
            ZoneNotFoundError: If no zone covers fqdn.
        """
        return find_zone_by_fqdn(fqdn, self.list_zones(), self.name)

    def list_zones(self) -> list[Zone]:
        """List the zones of the account.

        Hook for the default resolve_zone(). Backends that override
        resolve_zone() need not implement it.

        Raises:
            ZoneNotFoundError: If the backend has no zone list.
        """
        raise ZoneNotFoundError(f"{self.name} cannot list zones", self.name)

    @abstractmethod
    def create_txt(self, record: TxtRecord) -> TxtRecord:
        """Create a TXT record.

        Args:
            record: Record to create, without id.

        Returns:
            The created record, carrying the backend id when there is one.

        Raises:
            RecordExistsError: If the backend refuses a duplicate.
            BackendAPIError: If the backend call fails.
        """
        ...

    @abstractmethod
    def delete_txt(self, record: TxtRecord) -> None:
        """Delete a TXT record.

        Raises:
            BackendAPIError: If the backend call fails.
        """
        ...

    def list_txt(self, zone: Zone, name: str) -> list[TxtRecord] | None:
        """List TXT records called name in zone.

        Returns:
            The records, or None when the backend cannot list records.
        """
        return None

    def timeout(self) -> tuple[timedelta, timedelta]:
        """Return (propagation timeout, polling interval)."""
        return self.config.propagation_timeout, self.config.polling_interval

    def close(self) -> None:
        """Release resources."""

    def __enter__(self) -> "Backend":
        return self

    def __exit__(self, *args: object) -> None:
        self.close()


class HttpBackend(Backend):
    """Backend talking to a JSON HTTP API through one httpx client.

    Args:
        config: Validated provider configuration.
        http_client: Pre-built client, mainly for tests. When omitted one is
            built from base_url(), headers() and auth().
    """

    def __init__(self, config: ProviderConfig, http_client: httpx.Client | None = None):
        super().__init__(config)
        self._client = http_client or httpx.Client(
            base_url=self.base_url(),
            headers=self.headers(),
            auth=self.auth(),
            timeout=config.http_timeout.total_seconds(),
        )

    def base_url(self) -> str:
        return ""

    def headers(self) -> dict[str, str]:
        return {}

    def auth(self) -> httpx.Auth | None:
        return None

    def _request(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        """Send a request, mapping failures to BackendAPIError.

        Raises:
            BackendAPIError: On transport errors and non-2xx responses.
        """
        try:
            with Timer() as t:
                response = self._client.request(method, url, **kwargs)
        except httpx.HTTPError as e:
            logger.error(
                "Backend request failed",
                extra={"provider": self.name, "method": method, "url": url, "error": str(e)},
            )
            raise BackendAPIError.from_transport_error(e, self.name) from e

        logger.debug(
            "Backend request complete",
            extra={
                "provider": self.name,
                "method": method,
                "url": url,
                "status_code": response.status_code,
                "elapsed_ms": round(t.elapsed_ms, 1),
            },
        )

        if response.is_success:
            return response

        error = BackendAPIError.from_response(response, self.name)
        logger.error(
            "Backend API error",
            extra={"provider": self.name, "status_code": response.status_code, "detail": error.detail},
        )
        raise error

    def _json(self, response: httpx.Response) -> Any:
        """Decode a JSON body, mapping garbage to BackendAPIError."""
        try:
            return response.json()
        except ValueError as e:
            raise BackendAPIError(
                f"unexpected response body: {response.text[:200]!r}", self.name, response.status_code
            ) from e

    def close(self) -> None:
        """Close the underlying HTTP client."""
        self._client.close()
