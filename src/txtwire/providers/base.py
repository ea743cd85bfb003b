"""Abstract base class for DNS providers."""

from abc import ABC, abstractmethod
from datetime import timedelta
from typing import Protocol, runtime_checkable


class DnsProvider(ABC):
    """Abstract interface for DNS providers.

    DNS providers are responsible for creating and deleting TXT records
    used for ACME DNS-01 challenge validation. This is the whole surface an
    ACME client sees, whatever backend sits behind it.
    """

    @abstractmethod
    def present(self, domain: str, token: str, key_auth: str) -> None:
        """Create the TXT record for a DNS-01 challenge.

        Args:
            domain: The domain being validated.
            token: ACME challenge token, correlates present() with clean_up().
            key_auth: ACME key authorization the TXT value is derived from.

        Raises:
            DnsProviderError: If record creation fails.
        """
        ...

    @abstractmethod
    def clean_up(self, domain: str, token: str, key_auth: str) -> None:
        """Remove the TXT record created by present().

        Args:
            domain: The domain being validated.
            token: ACME challenge token given to present().
            key_auth: ACME key authorization given to present().

        Raises:
            DnsProviderError: If record deletion fails.
        """
        ...

    @abstractmethod
    def timeout(self) -> tuple[timedelta, timedelta]:
        """Return (propagation timeout, polling interval).

        Consumed by the caller's propagation check loop.
        """
        ...

    def close(self) -> None:
        """Release resources. Override in subclasses that hold open connections."""

    def __enter__(self) -> "DnsProvider":
        return self

    def __exit__(self, *args: object) -> None:
        self.close()


@runtime_checkable
class Sequential(Protocol):
    """Optional capability of providers that must be used one challenge at a time.

    Callers must serialize present()/clean_up() calls across challenges on
    such a provider, spacing them at least ``sequential()`` apart.
    """

    def sequential(self) -> timedelta: ...


def sequential_interval(provider: DnsProvider) -> timedelta | None:
    """Return the minimum spacing between challenges, None if unrestricted."""
    if isinstance(provider, Sequential):
        return provider.sequential()
    return None
