"""Pydantic models for DNS-01 challenge resources."""

from typing import Literal

from pydantic import BaseModel, ConfigDict


class ChallengeInfo(BaseModel):
    """Derived data for one DNS-01 challenge.

    ``effective_fqdn`` is always in trailing-dot form.
    """

    model_config = ConfigDict(frozen=True)

    domain: str
    effective_fqdn: str
    value: str


class Zone(BaseModel):
    """A DNS zone as known to the backend account."""

    model_config = ConfigDict(frozen=True)

    name: str
    id: str | None = None


class TxtRecord(BaseModel):
    """A TXT record created (or found) on a backend.

    ``name`` is relative to ``zone`` ("" for the apex). ``id`` is whatever the
    backend needs to address the record later, None for backends that delete
    by name and value.
    """

    model_config = ConfigDict(frozen=True)

    zone: Zone
    name: str
    value: str
    ttl: int
    id: str | None = None
    type: Literal["TXT"] = "TXT"

    @property
    def fqdn(self) -> str:
        """Unqualified full name of the record."""
        return f"{self.name}.{self.zone.name}" if self.name else self.zone.name

    def matches(self, other: "TxtRecord") -> bool:
        """Whether both describe the same name and value in the same zone."""
        return (
            self.zone.name.lower() == other.zone.name.lower()
            and self.name.lower() == other.name.lower()
            and self.value == other.value
        )
