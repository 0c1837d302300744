"""Summary domain service for monthly reports and dashboard figures."""

from collections import defaultdict
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional, Sequence

from givingbook.database.base import Store
from givingbook.domain.aggregator import aggregate
from givingbook.domain.entities import (
    FUNDS,
    SERVICE_TYPES,
    ZERO,
    DashboardReport,
    MonthlyDateGroup,
    MonthlyReport,
    ServiceSummaryRow,
    SessionRecord,
    TrendPoint,
)
from givingbook.domain.session import SessionService, service_type_value

CENT = Decimal("0.01")


class SummaryService:
    """Service for building giving summaries from saved sessions."""

    def __init__(self, store: Store):
        """Initialize summary service.

        Args:
            store: Store instance
        """
        self.store = store
        self.session_service = SessionService(store)

    def monthly_report(self, month: str) -> MonthlyReport:
        """Build the giving report for one month.

        Args:
            month: Month as "YYYY-MM"

        Returns:
            MonthlyReport with dates ascending and one row per service
        """
        records = [r for r in self.session_service.list_all() if r.date.startswith(month)]
        return self.build_monthly_report(month, records)

    def build_monthly_report(self, month: str, records: Sequence[SessionRecord]) -> MonthlyReport:
        """Build a monthly report from already selected records."""
        by_date: dict[str, list[ServiceSummaryRow]] = defaultdict(list)
        for record in records:
            totals = aggregate(record.transactions)
            by_date[record.date].append(
                ServiceSummaryRow(
                    service_type=record.service_type,
                    per_fund=totals.per_fund,
                    gcash=totals.total_electronic,
                    total=totals.total,
                )
            )

        dates = tuple(
            MonthlyDateGroup(date=date, services=tuple(by_date[date]))
            for date in sorted(by_date)
        )

        per_fund = {fund: ZERO for fund in FUNDS}
        gcash = ZERO
        total = ZERO
        for group in dates:
            for row in group.services:
                for fund in FUNDS:
                    per_fund[fund] += row.per_fund[fund]
                gcash += row.gcash
                total += row.total

        return MonthlyReport(month=month, dates=dates, per_fund=per_fund, gcash=gcash, total=total)

    def dashboard(self, service_type: Optional[str] = None) -> DashboardReport:
        """Build headline giving statistics.

        Totals, fund breakdown and trend follow the service filter. The
        per-service averages always use every saved session.

        Args:
            service_type: Optional service type to restrict the view to
        """
        all_records = self.session_service.list_all()
        service_filter = service_type_value(service_type) if service_type else None
        records = [
            r for r in all_records if service_filter is None or r.service_type == service_filter
        ]

        record_totals = [(record, aggregate(record.transactions)) for record in records]

        total_giving = sum((totals.total for _, totals in record_totals), ZERO)

        fund_breakdown = {fund: ZERO for fund in FUNDS}
        for _, totals in record_totals:
            for fund in FUNDS:
                fund_breakdown[fund] += totals.per_fund[fund]
        fund_breakdown = {fund: value for fund, value in fund_breakdown.items() if value > 0}

        trend_totals: dict[str, Decimal] = defaultdict(lambda: ZERO)
        for record, totals in record_totals:
            trend_totals[record.date] += totals.total
        trend = tuple(TrendPoint(date=date, total=trend_totals[date]) for date in sorted(trend_totals))

        return DashboardReport(
            service_filter=service_filter,
            total_giving=total_giving,
            services_recorded=len(records),
            averages=self.average_by_service(all_records),
            fund_breakdown=fund_breakdown,
            trend=trend,
        )

    def average_by_service(self, records: Sequence[SessionRecord]) -> dict:
        """Average total giving per session for each service type (0 when none)."""
        averages = {}
        for service in SERVICE_TYPES:
            matching = [r for r in records if r.service_type == service.value]
            if not matching:
                averages[service] = ZERO
                continue
            total = sum((aggregate(r.transactions).total for r in matching), ZERO)
            averages[service] = (total / len(matching)).quantize(CENT, rounding=ROUND_HALF_UP)
        return averages
