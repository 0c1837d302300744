"""In-memory ledger of one giving session being edited."""

import uuid
from dataclasses import replace
from typing import Any, Iterable, Mapping, Optional

from givingbook.domain.aggregator import aggregate, aggregate_by_panel
from givingbook.domain.entities import (
    DENOMINATIONS,
    Fund,
    FundTotals,
    Member,
    ReconciliationResult,
    Transaction,
    TransactionType,
)
from givingbook.domain.errors import NotFoundError, ValidationError, entry_not_found
from givingbook.domain.reconciliation import evaluate
from givingbook.utils.amount_parser import coerce_amount, coerce_count

# Accepted spellings of the non-fund row fields
_FIELD_ALIASES = {
    "member_id": "member_id",
    "memberId": "member_id",
    "guest_name": "guest_name",
    "guestName": "guest_name",
    "gcash": "gcash",
    "GCASH": "gcash",
}


def resolve_field(field: str | Fund) -> str | Fund:
    """Map a field name to a Fund or to a Transaction attribute name.

    Raises:
        ValidationError: If the field is not a fund or an editable row field
    """
    if isinstance(field, Fund):
        return field
    if field in _FIELD_ALIASES:
        return _FIELD_ALIASES[field]
    for fund in Fund:
        if field.lower() == fund.value.lower():
            return fund
    raise ValidationError(f"Unknown field '{field}'")


class TransactionLedger:
    """Transactions and cash counts of the session currently being edited.

    The ledger is the single owner of session state. Totals and the
    reconciliation are derived from it on every call.
    """

    def __init__(
        self,
        service_type: Optional[str] = None,
        date: Optional[str] = None,
        transactions: Iterable[Transaction] = (),
        cash_counts: Optional[Mapping[int, int]] = None,
    ):
        self.service_type = service_type
        self.date = date
        self._transactions: list[Transaction] = list(transactions)
        self._cash_counts: dict[int, int] = dict(cash_counts or {})

    @property
    def transactions(self) -> tuple[Transaction, ...]:
        return tuple(self._transactions)

    @property
    def cash_counts(self) -> dict[int, int]:
        return dict(self._cash_counts)

    def reset(
        self,
        transactions: Iterable[Transaction] = (),
        cash_counts: Optional[Mapping[int, int]] = None,
    ) -> None:
        """Replace all transactions and counts (empty by default)."""
        self._transactions = list(transactions)
        self._cash_counts = dict(cash_counts or {})

    def get(self, entry_id: str) -> Transaction:
        """Return the row with this ID.

        Raises:
            NotFoundError: If the session has no such row
        """
        for txn in self._transactions:
            if txn.id == entry_id:
                return txn
        raise NotFoundError(entry_not_found(entry_id))

    def panel(self, panel: TransactionType) -> list[Transaction]:
        """Rows of one panel, in session order."""
        panel = TransactionType(panel)
        return [txn for txn in self._transactions if txn.type is panel]

    def add_entry(
        self, panel: TransactionType, template: Optional[Mapping[str | Fund, Any]] = None
    ) -> Transaction:
        """Add a new row at the top of the session.

        Args:
            panel: Panel the row belongs to
            template: Optional initial field values, keyed like update()

        Returns:
            The new row

        Raises:
            ValidationError: If the template sets an invalid field or value
        """
        txn = Transaction(id=uuid.uuid4().hex, type=TransactionType(panel))
        for field, value in (template or {}).items():
            txn = self._with_field(txn, field, value)
        self._transactions.insert(0, txn)
        return txn

    def update(self, entry_id: str, field: str | Fund, value: Any) -> Transaction:
        """Set one field of a row.

        Fund and GCASH values are coerced to amounts, blank or invalid input
        reading as 0.

        Raises:
            NotFoundError: If the session has no such row
            ValidationError: If the field is unknown or the value invalid
        """
        index = self._index(entry_id)
        updated = self._with_field(self._transactions[index], field, value)
        self._transactions[index] = updated
        return updated

    def remove(self, entry_id: str) -> Transaction:
        """Remove a row.

        Raises:
            NotFoundError: If the session has no such row
        """
        return self._transactions.pop(self._index(entry_id))

    def set_cash_count(self, denomination: int, count: Any) -> None:
        """Record how many bills or coins of a denomination were counted.

        Raises:
            ValidationError: If the denomination is unknown or the count negative
        """
        try:
            denomination = int(denomination)
        except (TypeError, ValueError):
            raise ValidationError(f"Unknown denomination: {denomination!r}")
        if denomination not in DENOMINATIONS:
            raise ValidationError(f"Unknown denomination: {denomination}")
        count = coerce_count(count)
        if count < 0:
            raise ValidationError(f"Count for {denomination} cannot be negative")
        self._cash_counts[denomination] = count

    def available_members(
        self, panel: TransactionType, members: Iterable[Member], entry_id: Optional[str] = None
    ) -> list[Member]:
        """Members that can still be picked for a row of a panel.

        Excludes members of the other type and members already selected on
        another row of the session. The row's own member stays available.
        """
        member_type = TransactionType(panel).member_type
        if member_type is None:
            return []
        current = None
        if entry_id is not None:
            current = self.get(entry_id).member_id
        taken = {
            txn.member_id for txn in self._transactions if txn.member_id and txn.member_id != current
        }
        return [m for m in members if m.type == member_type and m.id not in taken]

    def totals(self) -> FundTotals:
        """Fund totals across every panel."""
        return aggregate(self._transactions)

    def panel_totals(self) -> dict[TransactionType, FundTotals]:
        """Fund totals for each panel."""
        return aggregate_by_panel(self._transactions)

    def reconcile(self) -> ReconciliationResult:
        """Compare the counted cash with the session's records."""
        totals = self.totals()
        return evaluate(totals.total, totals.total_electronic, self._cash_counts)

    def _index(self, entry_id: str) -> int:
        for index, txn in enumerate(self._transactions):
            if txn.id == entry_id:
                return index
        raise NotFoundError(entry_not_found(entry_id))

    def _with_field(self, txn: Transaction, field: str | Fund, value: Any) -> Transaction:
        target = resolve_field(field)
        if isinstance(target, Fund):
            funds = dict(txn.funds)
            funds[target] = coerce_amount(value)
            return replace(txn, funds=funds)
        if target == "gcash":
            return replace(txn, gcash=coerce_amount(value))
        text = str(value).strip() if value is not None else ""
        return replace(txn, **{target: text or None})
