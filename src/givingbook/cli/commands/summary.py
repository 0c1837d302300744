"""Summary commands."""

import click
from givingbook.cli.formatting import format_amount
from givingbook.domain.entities import FUNDS, ServiceType
from givingbook.domain.summary import SummaryService
from givingbook.utils.date_parser import parse_month

SHORT_LABELS = {s.value: s.short_label for s in ServiceType}


@click.group()
def summary_group():
    """Monthly reports and dashboard figures."""
    pass


@summary_group.command("month")
@click.argument("month", default="this month")
@click.pass_context
def month_summary(ctx, month: str):
    """Show giving per service for a month.

    MONTH is YYYY-MM, "this month" (default), "last month" or a name like
    "March 2024".

    Examples:
        givingbook summary month 2024-01
        givingbook summary month "last month"
    """
    try:
        month_key = parse_month(month)
    except ValueError as e:
        click.echo(f"Error: {e}", err=True)
        ctx.exit(1)

    report = SummaryService(ctx.obj["store"]).monthly_report(month_key)
    if not report.dates:
        click.echo(f"No records for {month_key}.")
        return

    fund_header = " | ".join(f"{fund.value:>10s}" for fund in FUNDS)
    click.echo(f"\nGiving summary for {month_key}")
    click.echo(f"{'Date':10s} | {'Svc':3s} | {fund_header} | {'GCASH':>10s} | {'Total':>11s}")
    click.echo("-" * (10 + 3 + 13 * len(FUNDS) + 32))

    for group in report.dates:
        for row in group.services:
            amounts = " | ".join(f"{format_amount(row.per_fund[fund]):>10s}" for fund in FUNDS)
            label = SHORT_LABELS.get(row.service_type, row.service_type[:3])
            click.echo(
                f"{group.date:10s} | {label:3s} | {amounts} | "
                f"{format_amount(row.gcash):>10s} | {format_amount(row.total):>11s}"
            )

    amounts = " | ".join(f"{format_amount(report.per_fund[fund]):>10s}" for fund in FUNDS)
    click.echo("-" * (10 + 3 + 13 * len(FUNDS) + 32))
    click.echo(
        f"{'TOTAL':10s} | {'':3s} | {amounts} | "
        f"{format_amount(report.gcash):>10s} | {format_amount(report.total):>11s}"
    )


@summary_group.command("dashboard")
@click.option(
    "--service",
    type=click.Choice([s.value for s in ServiceType]),
    help="Only include this service type",
)
@click.pass_context
def dashboard(ctx, service: str | None):
    """Show total giving, averages per service and the giving trend."""
    report = SummaryService(ctx.obj["store"]).dashboard(service)

    click.echo(f"\nDashboard ({report.service_filter or 'All services'})")
    click.echo(f"  Total giving:      {format_amount(report.total_giving)}")
    click.echo(f"  Services recorded: {report.services_recorded}")

    click.echo("\nAverage per service:")
    for service_type, average in report.averages.items():
        click.echo(f"  {service_type.short_label:4s} {format_amount(average):>12s}")

    if report.fund_breakdown:
        click.echo("\nBy fund:")
        for fund, amount in report.fund_breakdown.items():
            click.echo(f"  {fund.value:10s} {format_amount(amount):>12s}")

    if report.trend:
        click.echo("\nTrend:")
        for point in report.trend:
            click.echo(f"  {point.date}  {format_amount(point.total):>12s}")


def register_commands(cli):
    """Register summary commands with main CLI."""
    cli.add_command(summary_group, name="summary")
