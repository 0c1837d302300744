"""Cash reconciliation: recorded giving against a physical denomination count.

Everything here is recomputed from scratch on each call; nothing keeps a
running total.
"""

from decimal import Decimal
from typing import Any, Mapping, Optional

from givingbook.domain.entities import (
    DENOMINATIONS,
    ZERO,
    ReconciliationResult,
    ReconciliationStatus,
)
from givingbook.domain.errors import ValidationError
from givingbook.utils.amount_parser import coerce_count


def normalize_cash_counts(cash_counts: Optional[Mapping[Any, Any]]) -> dict[int, int]:
    """Return a count for every denomination, largest first.

    Missing, blank or unparseable counts become 0.

    Raises:
        ValidationError: If a denomination is unknown or a count is negative
    """
    normalized = {denomination: 0 for denomination in DENOMINATIONS}
    for raw_denomination, raw_count in (cash_counts or {}).items():
        try:
            denomination = int(raw_denomination)
        except (TypeError, ValueError):
            raise ValidationError(f"Unknown denomination: {raw_denomination!r}")
        if denomination not in normalized:
            raise ValidationError(f"Unknown denomination: {raw_denomination!r}")
        count = coerce_count(raw_count)
        if count < 0:
            raise ValidationError(f"Count for {denomination} cannot be negative")
        normalized[denomination] = count
    return normalized


def count_cash(cash_counts: Optional[Mapping[Any, Any]]) -> Decimal:
    """Total value of a denomination count."""
    normalized = normalize_cash_counts(cash_counts)
    return Decimal(sum(denomination * count for denomination, count in normalized.items()))


def expected_cash(grand_total: Decimal, total_electronic: Decimal) -> Decimal:
    """Cash that should be in hand: recorded giving less electronic payments, never below 0."""
    return max(ZERO, Decimal(grand_total) - Decimal(total_electronic))


def evaluate(
    grand_total: Decimal,
    total_electronic: Decimal,
    cash_counts: Optional[Mapping[Any, Any]],
) -> ReconciliationResult:
    """Compare counted cash with the cash expected from the records.

    Args:
        grand_total: Sum of all funds across every panel
        total_electronic: Sum of GCASH across every panel
        cash_counts: Denomination to count map (may be sparse)

    Returns:
        ReconciliationResult; discrepancy is actual minus expected
    """
    expected = expected_cash(grand_total, total_electronic)
    actual = count_cash(cash_counts)
    discrepancy = actual - expected
    status = ReconciliationStatus.BALANCED if discrepancy == 0 else ReconciliationStatus.NOT_BALANCED
    return ReconciliationResult(
        expected_cash=expected,
        actual_cash=actual,
        discrepancy=discrepancy,
        status=status,
    )
