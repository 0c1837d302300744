"""CLI helpers for member resolution and error handling."""

from __future__ import annotations

import click
from givingbook.domain.entities import Member
from givingbook.domain.member import MemberService
from givingbook.utils.member_resolver import resolve_member


def resolve_member_or_exit(ctx: click.Context, member_service: MemberService, member: str) -> Member:
    """Resolve member code or ID, or exit with a CLI error.

    This keeps error messaging and exit behavior consistent across commands.
    """
    try:
        return resolve_member(member_service, member)
    except ValueError as exc:
        click.echo(f"Error: {exc}", err=True)
        ctx.exit(1)
