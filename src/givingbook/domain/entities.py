"""Domain model entities for givingbook.

These are pure data classes representing business concepts, independent of
how records are stored. The JSON payload shapes (including the legacy bare
transaction list) are handled by the database mappers, so nothing in the
domain layer ever sees a stored dictionary.
"""

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Optional

from givingbook.domain.errors import ValidationError


class Fund(str, Enum):
    """Giving categories, in reporting order."""

    TITHES = "Tithes"
    OFFERING = "Offering"
    MISSION = "Mission"
    BUILDING = "Building"
    CCM = "CCM"
    OTHERS = "Others"


class MemberType(str, Enum):
    """Registry membership type."""

    MEMBER = "Member"
    NON_MEMBER = "Non-Member"

    @property
    def code_prefix(self) -> str:
        return "M" if self is MemberType.MEMBER else "N"


class TransactionType(str, Enum):
    """Giving panel a transaction row belongs to."""

    MEMBER = "Member"
    NON_MEMBER = "Non-Member"
    GUEST = "Guest"

    @property
    def member_type(self) -> Optional[MemberType]:
        """Registry type selectable in this panel, or None for guests."""
        if self is TransactionType.GUEST:
            return None
        return MemberType(self.value)


class ServiceType(str, Enum):
    """Services for which giving is collected."""

    SUNDAY_MORNING = "Sunday Morning"
    SUNDAY_AFTERNOON = "Sunday Afternoon"
    PRAYER_MEETING = "Prayer Meeting (Wed)"

    @property
    def short_label(self) -> str:
        return SERVICE_SHORT_LABELS[self]


class ReconciliationStatus(str, Enum):
    """Outcome of comparing counted cash with the recorded figure."""

    BALANCED = "Balanced"
    NOT_BALANCED = "Not Balanced"


FUNDS: tuple[Fund, ...] = tuple(Fund)

SERVICE_TYPES: tuple[ServiceType, ...] = tuple(ServiceType)

SERVICE_SHORT_LABELS = {
    ServiceType.SUNDAY_MORNING: "AM",
    ServiceType.SUNDAY_AFTERNOON: "PM",
    ServiceType.PRAYER_MEETING: "WPM",
}

# Bills and coins used for the physical count, largest first.
DENOMINATIONS: tuple[int, ...] = (1000, 500, 200, 100, 50, 20, 10, 5, 1)

ZERO = Decimal("0")


@dataclass(frozen=True)
class Member:
    """Registry member entity."""

    id: str
    name: str
    code: str
    type: MemberType


@dataclass(frozen=True)
class Transaction:
    """One giving row in a service session.

    Member and Non-Member rows reference a registry member by ``member_id``
    (None until one is selected). Guest rows carry a free-text ``guest_name``.
    ``gcash`` is the electronic part of the gift and is not a fund.
    """

    id: str
    type: TransactionType
    member_id: Optional[str] = None
    guest_name: Optional[str] = None
    funds: dict[Fund, Decimal] = field(default_factory=dict)
    gcash: Decimal = ZERO

    def __post_init__(self):
        if not isinstance(self.type, TransactionType):
            raise ValidationError(f"Invalid transaction type: {self.type!r}")
        if self.type is TransactionType.GUEST and self.member_id:
            raise ValidationError("Guest entries cannot reference a member")
        if self.type is not TransactionType.GUEST and self.guest_name:
            raise ValidationError(f"{self.type.value} entries cannot carry a guest name")
        for fund, amount in self.funds.items():
            if not isinstance(fund, Fund):
                raise ValidationError(f"Unknown fund: {fund!r}")
            if amount < 0:
                raise ValidationError(f"{fund.value} amount cannot be negative")
        if self.gcash < 0:
            raise ValidationError("GCASH amount cannot be negative")

    def amount(self, fund: Fund) -> Decimal:
        """Return the amount given to a fund (0 when absent)."""
        return self.funds.get(fund, ZERO)

    @property
    def row_total(self) -> Decimal:
        """Sum of all fund amounts on this row, excluding GCASH."""
        return sum((self.amount(fund) for fund in FUNDS), ZERO)


@dataclass(frozen=True)
class SessionData:
    """Transactions and cash counts of one saved session."""

    transactions: tuple[Transaction, ...] = ()
    cash_counts: dict[int, int] = field(default_factory=dict)


@dataclass(frozen=True)
class SessionRecord:
    """A saved session together with its key parts."""

    date: str
    service_type: str
    transactions: tuple[Transaction, ...] = ()
    cash_counts: dict[int, int] = field(default_factory=dict)


@dataclass(frozen=True)
class FundTotals:
    """Per-fund sums of a set of transactions."""

    per_fund: dict[Fund, Decimal]
    total: Decimal
    total_electronic: Decimal


@dataclass(frozen=True)
class ReconciliationResult:
    """Comparison of counted cash with the cash expected from the records."""

    expected_cash: Decimal
    actual_cash: Decimal
    discrepancy: Decimal
    status: ReconciliationStatus

    @property
    def is_balanced(self) -> bool:
        return self.status is ReconciliationStatus.BALANCED


@dataclass(frozen=True)
class ServiceSummaryRow:
    """Totals of one service within a monthly report."""

    service_type: str
    per_fund: dict[Fund, Decimal]
    gcash: Decimal
    total: Decimal


@dataclass(frozen=True)
class MonthlyDateGroup:
    """All services recorded on one date of a month."""

    date: str
    services: tuple[ServiceSummaryRow, ...]


@dataclass(frozen=True)
class MonthlyReport:
    """Giving for every recorded service in a calendar month."""

    month: str
    dates: tuple[MonthlyDateGroup, ...]
    per_fund: dict[Fund, Decimal]
    gcash: Decimal
    total: Decimal


@dataclass(frozen=True)
class TrendPoint:
    """Total giving on one date."""

    date: str
    total: Decimal


@dataclass(frozen=True)
class DashboardReport:
    """Headline giving statistics over saved sessions."""

    service_filter: Optional[str]
    total_giving: Decimal
    services_recorded: int
    averages: dict[ServiceType, Decimal]
    fund_breakdown: dict[Fund, Decimal]
    trend: tuple[TrendPoint, ...]
