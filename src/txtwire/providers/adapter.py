"""Generic adapter binding a backend to the DnsProvider contract."""

import threading
from datetime import timedelta

from txtwire._logging import Timer, get_domain_extra, get_logger, reset_domain, set_domain
from txtwire.backends.base import Backend
from txtwire.challenges.dns01 import get_challenge_info
from txtwire.config import ProviderConfig, SequentialConfig
from txtwire.exceptions import DnsProviderError, RecordExistsError, UnknownRecordError
from txtwire.models import ChallengeInfo, TxtRecord
from txtwire.providers.base import DnsProvider
from txtwire.zones import extract_subdomain

logger = get_logger(__name__)


class RecordTracker:
    """Token keyed map of the records created by one adapter.

    Every access goes through the lock. Callers must not do network I/O while
    holding it, which is why only single-step operations are exposed.
    """

    def __init__(self) -> None:
        self._records: dict[str, TxtRecord] = {}
        self._lock = threading.Lock()

    def add(self, token: str, record: TxtRecord) -> None:
        with self._lock:
            self._records[token] = record

    def get(self, token: str) -> TxtRecord | None:
        with self._lock:
            return self._records.get(token)

    def pop(self, token: str) -> TxtRecord | None:
        with self._lock:
            return self._records.pop(token, None)

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)

    def __contains__(self, token: object) -> bool:
        with self._lock:
            return token in self._records


class Adapter(DnsProvider):
    """DnsProvider backed by any Backend.

    One instance may serve several challenges concurrently (e.g. every name
    of a SAN certificate). Records are correlated by ACME token, never by
    domain, since several challenges can share one record name.

    Args:
        backend: Vendor backend.
        config: Validated configuration the backend was built from.
    """

    def __init__(self, backend: Backend, config: ProviderConfig):
        self.backend = backend
        self.config = config
        self.records = RecordTracker()

    @property
    def name(self) -> str:
        return self.config.provider_name

    def present(self, domain: str, token: str, key_auth: str) -> None:
        info = get_challenge_info(domain, key_auth)
        context = set_domain(domain)
        try:
            wanted = self._wanted_record(info)
            record = self._find_existing(wanted)

            if record is not None:
                logger.info(
                    "TXT record already present",
                    extra={"provider": self.name, "record_name": info.effective_fqdn, **get_domain_extra()},
                )
            else:
                try:
                    with Timer() as t:
                        record = self.backend.create_txt(wanted)
                except RecordExistsError:
                    record = self._find_existing(wanted)
                    if record is None:
                        if self.backend.requires_record_id:
                            # Nothing to delete the remote record by later
                            raise
                        record = wanted
                    logger.info(
                        "TXT record already present",
                        extra={"provider": self.name, "record_name": info.effective_fqdn, **get_domain_extra()},
                    )
                else:
                    logger.info(
                        "TXT record created",
                        extra={
                            "provider": self.name,
                            "zone": record.zone.name,
                            "record_name": info.effective_fqdn,
                            "elapsed_ms": round(t.elapsed_ms, 1),
                            **get_domain_extra(),
                        },
                    )

            self.records.add(token, record)
        finally:
            reset_domain(context)

    def clean_up(self, domain: str, token: str, key_auth: str) -> None:
        info = get_challenge_info(domain, key_auth)
        context = set_domain(domain)
        try:
            record = self.records.pop(token)
            if record is not None and record.id is not None:
                targets = [record]
            elif self.backend.requires_record_id:
                raise UnknownRecordError(info.effective_fqdn, token, self.name)
            else:
                # Untracked, or tracked without an id: match by name and value
                wanted = self._wanted_record(info)
                listed = self.backend.list_txt(wanted.zone, wanted.name)
                targets = [wanted] if listed is None else [r for r in listed if r.matches(wanted)]

            if not targets:
                logger.warning(
                    "TXT record not found, skipping delete",
                    extra={"provider": self.name, "record_name": info.effective_fqdn, **get_domain_extra()},
                )
                return

            self._delete_all(targets, info)
        finally:
            reset_domain(context)

    def timeout(self) -> tuple[timedelta, timedelta]:
        return self.backend.timeout()

    def close(self) -> None:
        self.backend.close()

    def _wanted_record(self, info: ChallengeInfo) -> TxtRecord:
        zone = self.backend.resolve_zone(info.effective_fqdn)
        subdomain = extract_subdomain(info.effective_fqdn, zone.name, self.name)
        return TxtRecord(zone=zone, name=subdomain, value=info.value, ttl=self.config.ttl)

    def _find_existing(self, wanted: TxtRecord) -> TxtRecord | None:
        listed = self.backend.list_txt(wanted.zone, wanted.name)
        if not listed:
            return None
        return next((r for r in listed if r.matches(wanted)), None)

    def _delete_all(self, records: list[TxtRecord], info: ChallengeInfo) -> None:
        """Delete every record, then raise the first failure if any."""
        errors: list[DnsProviderError] = []
        for record in records:
            try:
                self.backend.delete_txt(record)
            except DnsProviderError as e:
                errors.append(e)
                logger.error(
                    "TXT record deletion failed",
                    extra={"provider": self.name, "record_name": info.effective_fqdn, "error": str(e)},
                )

        deleted = len(records) - len(errors)
        if deleted:
            logger.info(
                "TXT record deleted",
                extra={
                    "provider": self.name,
                    "record_name": info.effective_fqdn,
                    "count": deleted,
                    **get_domain_extra(),
                },
            )
        if errors:
            raise errors[0]


class SequentialAdapter(Adapter):
    """Adapter for backends that must handle one challenge at a time."""

    config: SequentialConfig

    def sequential(self) -> timedelta:
        return self.config.sequence_interval


def build_adapter(backend: Backend, config: ProviderConfig) -> Adapter:
    """Wrap a backend in the adapter matching its configuration."""
    if isinstance(config, SequentialConfig):
        return SequentialAdapter(backend, config)
    return Adapter(backend, config)
