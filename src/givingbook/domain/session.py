"""Session record domain service."""

import logging
from datetime import date as date_type
from typing import Any, Iterable, Mapping, Optional

from givingbook.database.base import Store
from givingbook.database.mappers import decode_session, encode_session
from givingbook.domain.aggregator import aggregate
from givingbook.domain.entities import (
    SERVICE_TYPES,
    ReconciliationResult,
    ServiceType,
    SessionData,
    SessionRecord,
    Transaction,
)
from givingbook.domain.errors import (
    MissingDateError,
    StorageParseError,
    ValidationError,
    missing_date,
)
from givingbook.domain.ledger import TransactionLedger
from givingbook.domain.reconciliation import evaluate, normalize_cash_counts
from givingbook.utils.date_parser import is_iso_date

logger = logging.getLogger(__name__)

SERVICE_PREFIX = "service_"
KEY_SEPARATOR = "_"
DATE_LENGTH = len("YYYY-MM-DD")


def service_type_value(service_type: str | ServiceType) -> str:
    """Plain string form of a service type."""
    if isinstance(service_type, ServiceType):
        return service_type.value
    return service_type


def session_key(service_type: str | ServiceType, date: str) -> str:
    """Storage key of a session, e.g. "service_2024-01-14_Sunday Morning"."""
    return f"{SERVICE_PREFIX}{date}{KEY_SEPARATOR}{service_type_value(service_type)}"


def parse_session_key(key: str) -> Optional[tuple[str, str]]:
    """Split a storage key into (date, service type).

    The date is always the first 10 characters after the prefix; everything
    after the following separator is the service type, even if it contains
    the separator itself.

    Returns:
        (date, service_type), or None if the key is not a session key
    """
    if not key.startswith(SERVICE_PREFIX):
        return None
    rest = key[len(SERVICE_PREFIX):]
    date = rest[:DATE_LENGTH]
    if not is_iso_date(date) or rest[DATE_LENGTH:DATE_LENGTH + 1] != KEY_SEPARATOR:
        return None
    service_type = rest[DATE_LENGTH + 1:]
    if not service_type:
        return None
    return date, service_type


def is_date_allowed(service_type: str, date: str | date_type) -> bool:
    """Whether a service can take place on a date.

    Sunday services fall on Sundays and the Wednesday prayer meeting on
    Wednesdays; any other service type is unrestricted.
    """
    if isinstance(date, str):
        date = date_type.fromisoformat(date)
    if "Sunday" in service_type:
        return date.weekday() == 6
    if "Wed" in service_type:
        return date.weekday() == 2
    return True


class SessionService:
    """Service for saving and loading giving sessions."""

    def __init__(self, store: Store):
        """Initialize session service.

        Args:
            store: Store instance
        """
        self.store = store

    def save(
        self,
        service_type: str,
        date: str | date_type,
        transactions: Iterable[Transaction],
        cash_counts: Optional[Mapping[Any, Any]] = None,
    ) -> ReconciliationResult:
        """Save a session, replacing any earlier record for the same date and service.

        The record is saved whether or not the cash count balances; the
        returned reconciliation tells the caller which outcome to report.

        Args:
            service_type: One of the SERVICE_TYPES
            date: Session date (YYYY-MM-DD)
            transactions: Rows of every panel
            cash_counts: Denomination to count map

        Returns:
            ReconciliationResult for the saved session

        Raises:
            MissingDateError: If no date was given (nothing is written)
            ValidationError: If the date, service type or counts are invalid
        """
        date = self._require_date(date, "save")
        service_type = self._require_service_type(service_type)
        transactions = list(transactions)

        normalized = normalize_cash_counts(cash_counts)
        counts = {int(d): normalized[int(d)] for d in (cash_counts or {})}

        totals = aggregate(transactions)
        result = evaluate(totals.total, totals.total_electronic, counts)

        self.store.set(session_key(service_type, date), encode_session(transactions, counts))
        logger.info(
            "Saved %s on %s: %d entries, %s",
            service_type,
            date,
            len(transactions),
            result.status.value,
        )
        return result

    def load(self, service_type: str, date: str | date_type) -> Optional[SessionData]:
        """Load a session.

        Legacy records (a bare transaction list) load with empty cash counts.

        Returns:
            SessionData, or None if nothing is saved for this date and service

        Raises:
            MissingDateError: If no date was given
            StorageParseError: If the stored record cannot be read
        """
        date = self._require_date(date, "load")
        key = session_key(service_type, date)
        text = self.store.get(key)
        if text is None:
            return None
        return decode_session(key, text)

    def load_into(self, ledger: TransactionLedger, service_type: str, date: str | date_type) -> bool:
        """Load a session into a ledger.

        The ledger is emptied when nothing is saved, so no stale rows remain.

        Returns:
            True if a record was found
        """
        data = self.load(service_type, date)
        ledger.service_type = service_type_value(service_type)
        ledger.date = self._require_date(date, "load")
        if data is None:
            ledger.reset()
            return False
        ledger.reset(data.transactions, data.cash_counts)
        return True

    def save_ledger(self, ledger: TransactionLedger) -> ReconciliationResult:
        """Save the session a ledger is editing."""
        return self.save(ledger.service_type, ledger.date, ledger.transactions, ledger.cash_counts)

    def delete(self, service_type: str, date: str | date_type) -> bool:
        """Delete a saved session. Returns True if one existed."""
        date = self._require_date(date, "delete")
        deleted = self.store.delete(session_key(service_type, date))
        if deleted:
            logger.info("Deleted %s on %s", service_type_value(service_type), date)
        return deleted

    def list_all(self) -> list[SessionRecord]:
        """List every saved session, newest date first.

        Keys that do not parse and records that cannot be decoded are
        skipped with a warning.
        """
        records = []
        for key in self.store.enumerate_keys(prefix=SERVICE_PREFIX):
            parts = parse_session_key(key)
            if parts is None:
                logger.warning("Skipping malformed session key %r", key)
                continue
            date, service_type = parts

            text = self.store.get(key)
            if text is None:
                continue
            try:
                data = decode_session(key, text)
            except StorageParseError as e:
                logger.warning("Skipping unreadable session record: %s", e)
                continue

            records.append(
                SessionRecord(
                    date=date,
                    service_type=service_type,
                    transactions=data.transactions,
                    cash_counts=data.cash_counts,
                )
            )

        records.sort(key=lambda r: _service_order(r.service_type))
        records.sort(key=lambda r: r.date, reverse=True)
        return records

    def _require_date(self, date: str | date_type | None, action: str) -> str:
        if isinstance(date, date_type):
            return date.isoformat()
        if date is None or not str(date).strip():
            raise MissingDateError(missing_date(action))
        date = str(date).strip()
        if not is_iso_date(date):
            raise ValidationError(f"Invalid date '{date}': expected YYYY-MM-DD")
        return date

    def _require_service_type(self, service_type: str) -> str:
        try:
            return ServiceType(service_type).value
        except ValueError:
            choices = ", ".join(s.value for s in SERVICE_TYPES)
            raise ValidationError(f"Unknown service type '{service_type}' (choose from: {choices})")


def _service_order(service_type: str) -> int:
    for index, known in enumerate(SERVICE_TYPES):
        if known.value == service_type:
            return index
    return len(SERVICE_TYPES)
