"""Fund totals over giving transactions."""

from typing import Iterable

from givingbook.domain.entities import (
    FUNDS,
    ZERO,
    FundTotals,
    Transaction,
    TransactionType,
)


def aggregate(transactions: Iterable[Transaction]) -> FundTotals:
    """Sum transactions into per-fund totals, a grand total and a GCASH total.

    Funds are visited in FUNDS order. GCASH is summed separately and never
    counted in the grand total. Decimal addition is exact, so the result does
    not depend on the order of the transactions.

    Args:
        transactions: Transactions of any panel

    Returns:
        FundTotals with every fund present
    """
    per_fund = {fund: ZERO for fund in FUNDS}
    total = ZERO
    total_electronic = ZERO

    for txn in transactions:
        for fund in FUNDS:
            amount = txn.amount(fund)
            per_fund[fund] += amount
            total += amount
        total_electronic += txn.gcash

    return FundTotals(per_fund=per_fund, total=total, total_electronic=total_electronic)


def aggregate_by_panel(transactions: Iterable[Transaction]) -> dict[TransactionType, FundTotals]:
    """Aggregate each panel (Member, Non-Member, Guest) separately."""
    panels: dict[TransactionType, list[Transaction]] = {t: [] for t in TransactionType}
    for txn in transactions:
        panels[txn.type].append(txn)
    return {panel: aggregate(txns) for panel, txns in panels.items()}
