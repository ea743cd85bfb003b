"""Pytest fixtures for txtwire test suite."""

import contextlib
import itertools
import logging
import logging.handlers
import os
import threading
from collections.abc import Callable, Generator

import httpx
import pytest

from txtwire.backends.base import Backend
from txtwire.config import ProviderConfig
from txtwire.exceptions import BackendAPIError, RecordExistsError
from txtwire.models import TxtRecord, Zone

# Default URLs for local PowerDNS setup
POWERDNS_API_URL = os.environ.get("POWERDNS_API_URL", "http://localhost:8081")
POWERDNS_API_KEY = os.environ.get("POWERDNS_API_KEY", "test-api-key")


@pytest.fixture(scope="session")
def powerdns_api_url() -> str:
    """Return the PowerDNS API URL."""
    return POWERDNS_API_URL


@pytest.fixture(scope="session")
def powerdns_api_key() -> str:
    """Return the PowerDNS API key."""
    return POWERDNS_API_KEY


@pytest.fixture(scope="session", autouse=False)
def powerdns_test_zone(powerdns_api_url: str, powerdns_api_key: str) -> Generator[str]:
    """Create a test zone in PowerDNS for integration tests.

    This fixture creates the example.org zone via the PowerDNS API
    and cleans it up after all tests complete.
    """
    zone_name = "example.org."
    headers = {
        "X-API-Key": powerdns_api_key,
        "Content-Type": "application/json",
    }

    zone_data = {
        "name": zone_name,
        "kind": "Native",
        "nameservers": ["ns1.example.org."],
        "soa_edit_api": "DEFAULT",
    }

    try:
        response = httpx.post(
            f"{powerdns_api_url}/api/v1/servers/localhost/zones",
            headers=headers,
            json=zone_data,
            timeout=30,
        )
        # 201 = created, 409 = already exists (which is fine)
        if response.status_code not in (201, 409):
            response.raise_for_status()
    except httpx.ConnectError:
        pytest.skip("PowerDNS not available")

    yield zone_name

    # Cleanup: delete the zone (best effort)
    with contextlib.suppress(httpx.HTTPError):
        httpx.delete(
            f"{powerdns_api_url}/api/v1/servers/localhost/zones/{zone_name}",
            headers=headers,
            timeout=30,
        )


class FakeConfig(ProviderConfig):
    """Configuration of the in-memory backend."""

    provider_name = "fake"
    env_namespace = "FAKE"
    min_ttl = 30
    required_credentials = ("api_key",)

    api_key: str | None = None


class FakeBackend(Backend):
    """In-memory backend recording every call.

    Attributes:
        zones: Zones of the fake account.
        store: Records currently held, keyed by id.
        calls: Names of the backend methods called, in order.
        fail_delete: Values whose deletion raises BackendAPIError.
        duplicate_raises: Whether creating an existing record raises
            RecordExistsError instead of adding a second copy.
        listable: Whether list_txt() is supported.
    """

    def __init__(self, config: ProviderConfig, zones: list[Zone] | None = None):
        super().__init__(config)
        self.zones = zones or [Zone(name="example.com", id="1")]
        self.store: dict[str, TxtRecord] = {}
        self.calls: list[str] = []
        self.fail_delete: set[str] = set()
        self.duplicate_raises = False
        self.listable = True
        self._ids = itertools.count(1)
        self._lock = threading.Lock()

    def list_zones(self) -> list[Zone]:
        self.calls.append("list_zones")
        return self.zones

    def list_txt(self, zone: Zone, name: str) -> list[TxtRecord] | None:
        self.calls.append("list_txt")
        if not self.listable:
            return None
        with self._lock:
            return [r for r in self.store.values() if r.zone.name == zone.name and r.name == name]

    def create_txt(self, record: TxtRecord) -> TxtRecord:
        self.calls.append("create_txt")
        with self._lock:
            if self.duplicate_raises and any(r.matches(record) for r in self.store.values()):
                raise RecordExistsError("Conflict: record exists", self.name, 409)
            created = record.model_copy(update={"id": str(next(self._ids))})
            self.store[created.id] = created
        return created

    def delete_txt(self, record: TxtRecord) -> None:
        self.calls.append("delete_txt")
        if record.value in self.fail_delete:
            raise BackendAPIError(f"Server Error: cannot delete {record.value}", self.name, 500)
        with self._lock:
            if record.id is not None:
                self.store.pop(record.id, None)
            else:
                for key in [k for k, r in self.store.items() if r.matches(record)]:
                    del self.store[key]


@pytest.fixture
def fake_config() -> FakeConfig:
    """Return a valid configuration for the in-memory backend."""
    return FakeConfig(api_key="secret")


@pytest.fixture
def fake_backend_factory() -> Callable[..., FakeBackend]:
    """Return a factory building in-memory backends."""

    def factory(config: ProviderConfig, zones: list[Zone] | None = None, requires_record_id: bool = True) -> FakeBackend:
        backend = FakeBackend(config, zones)
        backend.requires_record_id = requires_record_id
        return backend

    return factory


class LogCapture:
    """Helper class to capture and inspect log records."""

    def __init__(self, handler: logging.handlers.MemoryHandler) -> None:
        self._handler = handler

    @property
    def records(self) -> list[logging.LogRecord]:
        """Get all captured log records."""
        return self._handler.buffer

    def get_records(
        self, level: int | None = None, name: str | None = None
    ) -> list[logging.LogRecord]:
        """Get log records filtered by level and/or logger name.

        Args:
            level: Filter by log level (e.g., logging.INFO).
            name: Filter by logger name prefix (e.g., "txtwire.providers").

        Returns:
            List of matching log records.
        """
        records = self.records
        if level is not None:
            records = [r for r in records if r.levelno == level]
        if name is not None:
            records = [r for r in records if r.name.startswith(name)]
        return records

    def get_messages(self, level: int | None = None, name: str | None = None) -> list[str]:
        """Get log messages filtered by level and/or logger name."""
        return [r.getMessage() for r in self.get_records(level, name)]

    def clear(self) -> None:
        """Clear all captured log records."""
        self._handler.buffer.clear()


@pytest.fixture
def log_capture() -> Generator[LogCapture]:
    """Capture logs from the txtwire library during a test.

    Usage:
        def test_something(log_capture):
            # do something that logs
            assert "TXT record created" in log_capture.get_messages(logging.INFO)
    """
    handler = logging.handlers.MemoryHandler(capacity=1000)
    handler.setLevel(logging.DEBUG)

    txtwire_logger = logging.getLogger("txtwire")
    original_level = txtwire_logger.level
    txtwire_logger.setLevel(logging.DEBUG)
    txtwire_logger.addHandler(handler)

    try:
        yield LogCapture(handler)
    finally:
        txtwire_logger.removeHandler(handler)
        txtwire_logger.setLevel(original_level)
        handler.close()
