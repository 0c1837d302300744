"""Text formatting helpers for CLI output."""

from decimal import Decimal

from givingbook.domain.entities import ReconciliationResult


def format_amount(amount: Decimal) -> str:
    """Format an amount with thousands separators, e.g. 1234.5 -> "1,234.50"."""
    return f"{amount:,.2f}"


def format_signed(amount: Decimal) -> str:
    """Format an amount with an explicit sign for positive values."""
    text = format_amount(amount)
    return f"+{text}" if amount > 0 else text


def format_reconciliation(result: ReconciliationResult) -> list[str]:
    """Lines describing a reconciliation."""
    return [
        f"Expected cash:  {format_amount(result.expected_cash)}",
        f"Actual count:   {format_amount(result.actual_cash)}",
        f"Discrepancy:    {format_signed(result.discrepancy)}",
        f"Status:         {result.status.value}",
    ]
