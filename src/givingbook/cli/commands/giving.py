"""Giving session commands."""

from decimal import Decimal

import click
from givingbook.cli.error_handling import handle_domain_error
from givingbook.cli.formatting import format_amount, format_reconciliation, format_signed
from givingbook.cli.member_resolution import resolve_member_or_exit
from givingbook.domain.aggregator import aggregate
from givingbook.domain.entities import (
    FUNDS,
    Fund,
    ReconciliationResult,
    ServiceType,
    TransactionType,
)
from givingbook.domain.errors import DomainError, MissingDateError, missing_date
from givingbook.domain.ledger import TransactionLedger, resolve_field
from givingbook.domain.member import MemberService
from givingbook.domain.reconciliation import evaluate
from givingbook.domain.session import SessionService, is_date_allowed
from givingbook.utils.amount_parser import parse_amount
from givingbook.utils.date_parser import parse_date

SERVICE_CHOICE = click.Choice([s.value for s in ServiceType])


def session_options(f):
    """Add the --date and --service options shared by session commands."""
    f = click.option(
        "--service",
        type=SERVICE_CHOICE,
        default=ServiceType.SUNDAY_MORNING.value,
        show_default=True,
        help="Service type",
    )(f)
    f = click.option(
        "--date",
        "session_date",
        help="Session date (YYYY-MM-DD or relative like 'today', 'last sunday')",
    )(f)
    return f


def _resolve_date(ctx: click.Context, session_date: str | None, action: str) -> str:
    if not session_date or not session_date.strip():
        handle_domain_error(ctx, MissingDateError(missing_date(action)))
    try:
        return parse_date(session_date).isoformat()
    except ValueError as e:
        click.echo(f"Error: Invalid date format: {e}", err=True)
        ctx.exit(1)


def _open_ledger(ctx: click.Context, service: str, session_date: str | None, action: str):
    """Load the saved session into a ledger; returns (session_service, ledger)."""
    date = _resolve_date(ctx, session_date, action)
    session_service = SessionService(ctx.obj["store"])
    ledger = TransactionLedger()
    try:
        session_service.load_into(ledger, service, date)
    except DomainError as e:
        handle_domain_error(ctx, e)
    return session_service, ledger


def _resolve_entry(ctx: click.Context, ledger: TransactionLedger, entry: str) -> str:
    """Match a full entry ID or a unique prefix of one."""
    matches = [txn.id for txn in ledger.transactions if txn.id.startswith(entry)]
    if entry in matches:
        return entry
    if len(matches) == 1:
        return matches[0]
    if not matches:
        click.echo(f"Error: Entry '{entry}' not found", err=True)
    else:
        click.echo(f"Error: Entry '{entry}' is ambiguous ({len(matches)} matches)", err=True)
    ctx.exit(1)


def _parse_amount_option(ctx: click.Context, name: str, value: str) -> Decimal:
    try:
        return parse_amount(value)
    except ValueError as e:
        click.echo(f"Error: Invalid amount for {name}: {e}", err=True)
        ctx.exit(1)


def _save(ctx: click.Context, session_service: SessionService, ledger: TransactionLedger) -> None:
    try:
        result = session_service.save_ledger(ledger)
    except DomainError as e:
        handle_domain_error(ctx, e)
    _report_save(ledger, result)


def _report_save(ledger: TransactionLedger, result: ReconciliationResult) -> None:
    if result.is_balanced:
        click.echo(f"Saved record for {ledger.service_type} on {ledger.date}.")
    else:
        click.echo(
            f"Saved record for {ledger.service_type} on {ledger.date}, "
            f"but the cash count is not balanced (discrepancy {format_signed(result.discrepancy)})."
        )
    if not is_date_allowed(ledger.service_type, ledger.date):
        click.echo(f"Warning: {ledger.date} is not a usual day for {ledger.service_type}.", err=True)


@click.group()
def giving_group():
    """Record giving for a service."""
    pass


@giving_group.command("add")
@session_options
@click.option("--member", "member_ref", help="Member code or ID")
@click.option("--guest", help="Guest name")
@click.option("--tithes", help="Tithes amount")
@click.option("--offering", help="Offering amount")
@click.option("--mission", help="Mission amount")
@click.option("--building", help="Building amount")
@click.option("--ccm", help="CCM amount")
@click.option("--others", help="Others amount")
@click.option("--gcash", help="Amount given through GCASH")
@click.pass_context
def add_entry(
    ctx,
    session_date: str | None,
    service: str,
    member_ref: str | None,
    guest: str | None,
    tithes: str | None,
    offering: str | None,
    mission: str | None,
    building: str | None,
    ccm: str | None,
    others: str | None,
    gcash: str | None,
):
    """Add a giving entry for a member or a guest.

    Examples:
        givingbook giving add --date 2024-01-14 --member M0001 --tithes 1000
        givingbook giving add --date 2024-01-14 --guest "Ana Lopez" --offering 200 --gcash 200
    """
    if bool(member_ref) == bool(guest):
        click.echo("Error: Give exactly one of --member or --guest", err=True)
        ctx.exit(1)

    session_service, ledger = _open_ledger(ctx, service, session_date, "save")

    template = {}
    if member_ref:
        member_service = MemberService(ctx.obj["store"])
        member = resolve_member_or_exit(ctx, member_service, member_ref)
        panel = TransactionType(member.type.value)
        if not ledger.available_members(panel, [member]):
            click.echo(
                f"Error: '{member.name}' already has an entry for {service} on {ledger.date}",
                err=True,
            )
            ctx.exit(1)
        template["member_id"] = member.id
        label = member.name
    else:
        panel = TransactionType.GUEST
        template["guest_name"] = guest
        label = guest

    amounts = {
        Fund.TITHES: tithes,
        Fund.OFFERING: offering,
        Fund.MISSION: mission,
        Fund.BUILDING: building,
        Fund.CCM: ccm,
        Fund.OTHERS: others,
        "gcash": gcash,
    }
    for field, value in amounts.items():
        if value is not None:
            name = field.value if isinstance(field, Fund) else "GCASH"
            template[field] = _parse_amount_option(ctx, name, value)

    try:
        txn = ledger.add_entry(panel, template)
    except DomainError as e:
        handle_domain_error(ctx, e)

    click.echo(f"Added {panel.value} entry {txn.id[:8]} for '{label}' ({format_amount(txn.row_total)})")
    _save(ctx, session_service, ledger)


@giving_group.command("set")
@session_options
@click.argument("entry")
@click.argument("field")
@click.argument("value")
@click.pass_context
def set_field(ctx, session_date: str | None, service: str, entry: str, field: str, value: str):
    """Change one field of an entry.

    ENTRY is an entry ID or a unique prefix of one. FIELD is a fund name,
    GCASH, member (code or ID) or guest.

    Examples:
        givingbook giving set --date 2024-01-14 3f2a tithes 1500
        givingbook giving set --date 2024-01-14 3f2a member M0002
    """
    session_service, ledger = _open_ledger(ctx, service, session_date, "save")
    entry_id = _resolve_entry(ctx, ledger, entry)

    aliases = {"member": "member_id", "guest": "guest_name"}
    field = aliases.get(field.lower(), field)
    try:
        target = resolve_field(field)
    except DomainError as e:
        handle_domain_error(ctx, e)

    if target == "member_id":
        member = resolve_member_or_exit(ctx, MemberService(ctx.obj["store"]), value)
        current = ledger.get(entry_id)
        if member.type.value != current.type.value:
            click.echo(f"Error: '{member.name}' cannot be picked in the {current.type.value} panel", err=True)
            ctx.exit(1)
        if member not in ledger.available_members(current.type, [member], entry_id):
            click.echo(f"Error: '{member.name}' already has an entry for this session", err=True)
            ctx.exit(1)
        value = member.id
    elif isinstance(target, Fund) or target == "gcash":
        value = _parse_amount_option(ctx, field, value)

    try:
        txn = ledger.update(entry_id, target, value)
    except DomainError as e:
        handle_domain_error(ctx, e)

    click.echo(f"Updated entry {txn.id[:8]} ({format_amount(txn.row_total)})")
    _save(ctx, session_service, ledger)


@giving_group.command("remove")
@session_options
@click.argument("entry")
@click.pass_context
def remove_entry(ctx, session_date: str | None, service: str, entry: str):
    """Remove an entry from a session."""
    session_service, ledger = _open_ledger(ctx, service, session_date, "save")
    entry_id = _resolve_entry(ctx, ledger, entry)

    ledger.remove(entry_id)
    click.echo(f"Removed entry {entry_id[:8]}")
    _save(ctx, session_service, ledger)


@giving_group.command("count")
@session_options
@click.argument("counts", nargs=-1, required=True, metavar="DENOMINATION=COUNT...")
@click.pass_context
def count_cash(ctx, session_date: str | None, service: str, counts: tuple[str, ...]):
    """Record the physical cash count.

    Examples:
        givingbook giving count --date 2024-01-14 1000=2 500=1 20=3
    """
    session_service, ledger = _open_ledger(ctx, service, session_date, "save")

    for item in counts:
        denomination, sep, count = item.partition("=")
        if not sep or not denomination.strip().isdigit():
            raise click.BadParameter(f"Expected DENOMINATION=COUNT, got '{item}'", param_hint="COUNTS")
        try:
            ledger.set_cash_count(int(denomination), count)
        except DomainError as e:
            handle_domain_error(ctx, e)

    for line in format_reconciliation(ledger.reconcile()):
        click.echo(line)
    _save(ctx, session_service, ledger)


@giving_group.command("show")
@session_options
@click.pass_context
def show_session(ctx, session_date: str | None, service: str):
    """Show the entries, totals and cash reconciliation of a session."""
    date = _resolve_date(ctx, session_date, "load")
    session_service = SessionService(ctx.obj["store"])
    ledger = TransactionLedger()
    try:
        found = session_service.load_into(ledger, service, date)
    except DomainError as e:
        handle_domain_error(ctx, e)

    if not found:
        click.echo(f"No record for {service} on {date}.")
        return

    names = {m.id: m.name for m in MemberService(ctx.obj["store"]).list_members()}
    fund_header = " | ".join(f"{fund.value:>9s}" for fund in FUNDS)

    click.echo(f"\n{service} - {date}")
    for panel in TransactionType:
        rows = ledger.panel(panel)
        if not rows:
            continue
        click.echo(f"\n{panel.value}:")
        click.echo(f"{'Entry':8s} | {'Name':25s} | {fund_header} | {'GCASH':>9s} | {'Total':>10s}")
        click.echo("-" * (8 + 25 + 12 * len(FUNDS) + 30))
        for txn in rows:
            name = txn.guest_name if panel is TransactionType.GUEST else names.get(txn.member_id, "")
            amounts = " | ".join(f"{format_amount(txn.amount(fund)):>9s}" for fund in FUNDS)
            click.echo(
                f"{txn.id[:8]:8s} | {(name or ''):25.25s} | {amounts} | "
                f"{format_amount(txn.gcash):>9s} | {format_amount(txn.row_total):>10s}"
            )

    totals = ledger.totals()
    click.echo("\nTotals:")
    for fund in FUNDS:
        click.echo(f"  {fund.value:10s} {format_amount(totals.per_fund[fund]):>12s}")
    click.echo(f"  {'GCASH':10s} {format_amount(totals.total_electronic):>12s}")
    click.echo(f"  {'Total':10s} {format_amount(totals.total):>12s}")

    click.echo("\nCash count:")
    for line in format_reconciliation(ledger.reconcile()):
        click.echo(f"  {line}")


@giving_group.command("list")
@click.pass_context
def list_sessions(ctx):
    """List saved sessions, newest first."""
    session_service = SessionService(ctx.obj["store"])
    records = session_service.list_all()

    if not records:
        click.echo("No saved records.")
        return

    click.echo(f"\n{'Date':10s} | {'Service':22s} | {'Entries':>7s} | {'Total':>12s} | Status")
    click.echo("-" * 75)
    for record in records:
        totals = aggregate(record.transactions)
        result = evaluate(totals.total, totals.total_electronic, record.cash_counts)
        click.echo(
            f"{record.date:10s} | {record.service_type:22s} | {len(record.transactions):>7d} | "
            f"{format_amount(totals.total):>12s} | {result.status.value}"
        )


@giving_group.command("delete")
@session_options
@click.option("--yes", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def delete_session(ctx, session_date: str | None, service: str, yes: bool):
    """Delete a saved session."""
    date = _resolve_date(ctx, session_date, "delete")

    if not yes and not click.confirm(f"Delete the record for {service} on {date}?"):
        click.echo("Deletion cancelled.")
        return

    session_service = SessionService(ctx.obj["store"])
    if session_service.delete(service, date):
        click.echo(f"Deleted record for {service} on {date}.")
    else:
        click.echo(f"No record for {service} on {date}.")


def register_commands(cli):
    """Register giving commands with main CLI."""
    cli.add_command(giving_group, name="giving")
