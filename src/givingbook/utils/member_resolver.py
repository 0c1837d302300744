"""Utility for resolving member codes to members."""

from givingbook.domain.entities import Member
from givingbook.domain.errors import NotFoundError, member_not_found
from givingbook.domain.member import MemberService


def resolve_member(member_service: MemberService, member: str) -> Member:
    """Resolve a member code or ID to a member.

    Args:
        member_service: MemberService instance
        member: Member code (e.g. "M0001", any case) or member ID

    Returns:
        Member entity

    Raises:
        NotFoundError: If no member has this code or ID
    """
    found = member_service.get_member_by_code(member)
    if found is not None:
        return found

    found = member_service.get_member(member.strip())
    if found is not None:
        return found

    raise NotFoundError(member_not_found(member))
