"""Tests for fund aggregation."""

import itertools
from decimal import Decimal

from givingbook.domain.aggregator import aggregate, aggregate_by_panel
from givingbook.domain.entities import FUNDS, Fund, TransactionType


def test_aggregate_empty():
    """Test aggregating no transactions gives zeros for every fund."""
    totals = aggregate([])

    assert set(totals.per_fund) == set(FUNDS)
    assert all(value == Decimal("0") for value in totals.per_fund.values())
    assert totals.total == Decimal("0")
    assert totals.total_electronic == Decimal("0")


def test_aggregate_sums_per_fund(make_transaction):
    """Test per-fund sums and grand total."""
    txns = [
        make_transaction("a", tithes="1000", offering="100"),
        make_transaction("b", tithes="500", mission="50"),
        make_transaction("c", others="25.50"),
    ]

    totals = aggregate(txns)

    assert totals.per_fund[Fund.TITHES] == Decimal("1500")
    assert totals.per_fund[Fund.OFFERING] == Decimal("100")
    assert totals.per_fund[Fund.MISSION] == Decimal("50")
    assert totals.per_fund[Fund.OTHERS] == Decimal("25.50")
    assert totals.per_fund[Fund.BUILDING] == Decimal("0")
    assert totals.total == Decimal("1675.50")


def test_total_equals_sum_of_funds(make_transaction):
    """Test the grand total always equals the sum of per-fund totals."""
    txns = [
        make_transaction("a", tithes="0.10", ccm="0.20", building="0.30"),
        make_transaction("b", offering="1234.56", mission="0.01"),
    ]

    totals = aggregate(txns)

    assert totals.total == sum(totals.per_fund.values(), Decimal("0"))


def test_gcash_excluded_from_total(make_transaction):
    """Test GCASH is summed separately and never counted in the total."""
    txns = [
        make_transaction("a", tithes="1000", gcash="1000"),
        make_transaction("b", offering="200", gcash="200"),
    ]

    totals = aggregate(txns)

    assert totals.total == Decimal("1200")
    assert totals.total_electronic == Decimal("1200")


def test_aggregate_order_independent(make_transaction):
    """Test every ordering of the same transactions gives the same totals."""
    txns = [
        make_transaction("a", tithes="0.10", gcash="0.05"),
        make_transaction("b", tithes="0.20", offering="3.33"),
        make_transaction("c", tithes="0.30", others="7.77", gcash="1"),
    ]
    expected = aggregate(txns)

    for ordering in itertools.permutations(txns):
        assert aggregate(ordering) == expected


def test_aggregate_by_panel(make_transaction):
    """Test each panel is aggregated on its own."""
    txns = [
        make_transaction("a", TransactionType.MEMBER, member_id="m1", tithes="100"),
        make_transaction("b", TransactionType.NON_MEMBER, member_id="n1", tithes="50"),
        make_transaction("c", offering="20"),
    ]

    panels = aggregate_by_panel(txns)

    assert panels[TransactionType.MEMBER].total == Decimal("100")
    assert panels[TransactionType.NON_MEMBER].total == Decimal("50")
    assert panels[TransactionType.GUEST].total == Decimal("20")
    assert sum((p.total for p in panels.values()), Decimal("0")) == aggregate(txns).total
