"""Member registry commands."""

from dataclasses import replace

import click
from givingbook.cli.error_handling import handle_domain_error
from givingbook.cli.member_resolution import resolve_member_or_exit
from givingbook.domain.entities import MemberType
from givingbook.domain.errors import DomainError
from givingbook.domain.member import MemberService
from givingbook.domain.member_import import MemberImporter

MEMBER_TYPE_CHOICE = click.Choice([t.value for t in MemberType], case_sensitive=False)


def _member_type(value: str) -> MemberType:
    for member_type in MemberType:
        if member_type.value.lower() == value.lower():
            return member_type
    raise click.BadParameter(f"Unknown member type '{value}'")


@click.group()
def member_group():
    """Manage members and non-members."""
    pass


@member_group.command("add")
@click.argument("last_name")
@click.argument("first_name", default="")
@click.option("--mi", "middle_initial", help="Middle initial")
@click.option(
    "--type", "member_type", type=MEMBER_TYPE_CHOICE, default="Member", show_default=True
)
@click.option("--code", help="Member code (defaults to the next free code for the type)")
@click.pass_context
def add_member(ctx, last_name: str, first_name: str, middle_initial: str | None, member_type: str, code: str | None):
    """Add a member to the registry.

    Examples:
        givingbook member add "Dela Cruz" Juan --mi P
        givingbook member add Santos Maria --type Non-Member
        givingbook member add Reyes Ana --code M0145
    """
    service = MemberService(ctx.obj["store"])

    try:
        member = service.create_member(
            last_name=last_name,
            first_name=first_name,
            middle_initial=middle_initial,
            member_type=_member_type(member_type),
            code=code,
        )
    except DomainError as e:
        handle_domain_error(ctx, e)

    click.echo(f"Added {member.type.value} '{member.name}' (Code: {member.code})")


@member_group.command("list")
@click.option("--type", "member_type", type=MEMBER_TYPE_CHOICE, help="Only list this type")
@click.pass_context
def list_members(ctx, member_type: str | None):
    """List registered members."""
    service = MemberService(ctx.obj["store"])

    members = service.list_members(_member_type(member_type) if member_type else None)
    if not members:
        click.echo("No members found.")
        return

    click.echo("\nMembers:")
    click.echo("-" * 60)
    for m in sorted(members, key=lambda m: m.code):
        click.echo(f"{m.code:6s} | {m.name:35s} | {m.type.value}")
    click.echo(f"\n{len(members)} member{'s' if len(members) != 1 else ''}")


@member_group.command("edit")
@click.argument("member", metavar="MEMBER")
@click.option("--name", help='New display name ("Last, First M.")')
@click.option("--code", help="New member code")
@click.option("--type", "member_type", type=MEMBER_TYPE_CHOICE, help="New member type")
@click.pass_context
def edit_member(ctx, member: str, name: str | None, code: str | None, member_type: str | None):
    """Edit a member's name, code or type.

    MEMBER can be a member code or ID.

    Examples:
        givingbook member edit M0001 --name "Dela Cruz, Juan P."
        givingbook member edit M0007 --type Non-Member --code N0012
    """
    service = MemberService(ctx.obj["store"])
    current = resolve_member_or_exit(ctx, service, member)

    if name is None and code is None and member_type is None:
        click.echo("Nothing to change. Use --name, --code or --type.")
        return

    changes = {}
    if name is not None:
        changes["name"] = name
    if code is not None:
        changes["code"] = code
    if member_type is not None:
        changes["type"] = _member_type(member_type)

    try:
        updated = service.update_member(replace(current, **changes))
    except DomainError as e:
        handle_domain_error(ctx, e)

    click.echo(f"Updated '{updated.name}' (Code: {updated.code}, {updated.type.value})")


@member_group.command("delete")
@click.argument("member", metavar="MEMBER")
@click.option("--yes", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def delete_member(ctx, member: str, yes: bool):
    """Delete a member.

    Saved giving entries for the member are kept; they show a blank name.
    """
    service = MemberService(ctx.obj["store"])
    current = resolve_member_or_exit(ctx, service, member)

    if not yes and not click.confirm(f"Delete member '{current.name}' ({current.code})?"):
        click.echo("Deletion cancelled.")
        return

    try:
        service.delete_member(current.id)
    except DomainError as e:
        handle_domain_error(ctx, e)

    click.echo(f"Deleted member '{current.name}'")


@member_group.command("import")
@click.argument("file", type=click.Path(exists=True, dir_okay=False))
@click.option("--yes", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def import_members(ctx, file: str, yes: bool):
    """Import members from an Excel (.xlsx) or CSV file.

    This replaces the current member list.
    """
    service = MemberService(ctx.obj["store"])

    if not yes and not click.confirm("Import members from file? This will replace the current list."):
        click.echo("Import cancelled.")
        return

    click.echo("Reading file...")
    try:
        members = service.import_members(file, MemberImporter())
    except DomainError as e:
        handle_domain_error(ctx, e)

    click.echo(f"Successfully imported {len(members)} members!")


@member_group.command("clear")
@click.option("--yes", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def clear_members(ctx, yes: bool):
    """Delete ALL members."""
    service = MemberService(ctx.obj["store"])

    if not yes and not click.confirm("Are you sure you want to DELETE ALL members? This cannot be undone."):
        click.echo("Clear cancelled.")
        return

    service.clear_members()
    click.echo("All members have been deleted.")


@member_group.command("next-code")
@click.option(
    "--type", "member_type", type=MEMBER_TYPE_CHOICE, default="Member", show_default=True
)
@click.pass_context
def show_next_code(ctx, member_type: str):
    """Show the code the next new member of a type would get."""
    service = MemberService(ctx.obj["store"])
    click.echo(service.next_code(_member_type(member_type)))


def register_commands(cli):
    """Register member commands with main CLI."""
    cli.add_command(member_group, name="member")
