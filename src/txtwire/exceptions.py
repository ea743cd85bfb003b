"""DNS provider exceptions."""

from typing import Any

import httpx


class DnsProviderError(Exception):
    """Base exception for all DNS provider errors.

    Every error carries the name of the provider that raised it so a caller
    juggling several backends can tell them apart.
    """

    def __init__(self, detail: str, provider: str | None = None):
        self.detail = detail
        self.provider = provider
        super().__init__(f"{provider}: {detail}" if provider else detail)


class ConfigError(DnsProviderError):
    """The provider configuration is missing or invalid."""

    pass


class MissingCredentialsError(ConfigError):
    """One or more required credentials are missing or empty."""

    def __init__(self, missing: list[str], provider: str | None = None):
        self.missing = missing
        super().__init__(
            f"some credentials information are missing: {', '.join(missing)}",
            provider,
        )


class ConfigParseError(ConfigError):
    """A configuration document or value could not be parsed."""

    pass


class TTLTooLowError(ConfigError):
    """The configured TTL is below the backend minimum."""

    def __init__(self, ttl: int, min_ttl: int, provider: str | None = None):
        self.ttl = ttl
        self.min_ttl = min_ttl
        super().__init__(
            f"invalid TTL, TTL ({ttl}) must be greater than or equal to {min_ttl}",
            provider,
        )


class UnrecognizedProviderError(DnsProviderError):
    """No provider is registered under the requested name."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"unrecognized DNS provider: {name}")


class ZoneNotFoundError(DnsProviderError):
    """No zone known to the backend covers the requested name."""

    pass


class AmbiguousZoneError(ZoneNotFoundError):
    """The backend lists the best matching zone name more than once."""

    def __init__(self, zone: str, ids: list[str | None], provider: str | None = None):
        self.zone = zone
        self.ids = ids
        super().__init__(
            f"zone {zone} is ambiguous, the account lists it {len(ids)} times "
            f"(ids: {', '.join(str(i) for i in ids)})",
            provider,
        )


class UnknownRecordError(DnsProviderError):
    """CleanUp was called for a token with no tracked record."""

    def __init__(self, fqdn: str, token: str, provider: str | None = None):
        self.fqdn = fqdn
        self.token = token
        super().__init__(f"unknown record ID for '{fqdn}' '{token}'", provider)


class WaitTimeoutError(DnsProviderError):
    """A readiness condition did not hold before the deadline."""

    pass


class BackendAPIError(DnsProviderError):
    """The backend API rejected a request or could not be reached.

    Wraps HTTP status errors, provider error bodies and transport failures.
    ``status_code`` is None for transport failures.
    """

    def __init__(self, detail: str, provider: str | None = None, status_code: int | None = None):
        self.status_code = status_code
        super().__init__(detail, provider)

    @classmethod
    def from_response(cls, response: httpx.Response, provider: str | None = None) -> "BackendAPIError":
        """Create a BackendAPIError from an HTTP response.

        Routes to RecordExistsError for 409 Conflict.

        Args:
            response: The failed httpx Response.
            provider: Name of the provider that issued the request.

        Returns:
            BackendAPIError instance (or appropriate subclass).
        """
        detail = cls._extract_detail(response)

        status_messages = {
            400: f"Bad Request: {detail}",
            401: f"Unauthorized: {detail}",
            403: f"Forbidden: {detail}",
            404: f"Not found: {detail}",
            409: f"Conflict: {detail}",
            422: f"Unprocessable Entity: {detail}",
            429: f"Too Many Requests: {detail}",
            500: f"Server Error: {detail}",
        }
        message = status_messages.get(
            response.status_code,
            f"Unexpected error ({response.status_code}): {detail}",
        )

        if response.status_code == 409:
            return RecordExistsError(message, provider, response.status_code)
        return cls(message, provider, response.status_code)

    @classmethod
    def from_transport_error(cls, error: httpx.HTTPError, provider: str | None = None) -> "BackendAPIError":
        """Create a BackendAPIError from an httpx transport failure."""
        return cls(f"API call failed: {error}", provider)

    @staticmethod
    def _extract_detail(response: httpx.Response) -> str:
        """Pull a human readable error message out of a response body."""
        try:
            data: Any = response.json()
        except ValueError:
            return response.text or "Unknown error"

        if isinstance(data, dict):
            for key in ("error", "message", "detail", "statusDescription", "errors"):
                value = data.get(key)
                if value:
                    return value if isinstance(value, str) else str(value)
        return response.text or "Unknown error"


class RecordExistsError(BackendAPIError):
    """The backend reports the record already exists."""

    pass
