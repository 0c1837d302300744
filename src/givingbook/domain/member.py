"""Member registry domain service."""

import logging
import re
import uuid
from collections import Counter
from dataclasses import replace
from pathlib import Path
from typing import Iterable, Optional, TYPE_CHECKING

from givingbook.database.base import Store
from givingbook.database.mappers import decode_members, encode_members
from givingbook.domain.entities import Member, MemberType
from givingbook.domain.errors import (
    DuplicateCodeError,
    NotFoundError,
    ValidationError,
    duplicate_code,
    member_not_found,
)

if TYPE_CHECKING:
    from givingbook.domain.member_import import MemberImporter

logger = logging.getLogger(__name__)

MEMBERS_KEY = "members"

CODE_PATTERN = re.compile(r"^[MN]\d{4}$")


def format_code(prefix: str, number: int) -> str:
    """Format a member code, e.g. ("M", 145) -> "M0145"."""
    return f"{prefix}{number:04d}"


def code_number(code: str) -> Optional[int]:
    """Numeric part of a code with all non-digits removed, or None if there is none."""
    digits = re.sub(r"\D", "", code or "")
    return int(digits) if digits else None


def next_code(member_type: MemberType, existing_members: Iterable[Member]) -> str:
    """Return the lowest free code for a member type.

    Members count toward a type if they have that type or if their code
    already carries the type's prefix. The first gap in 1, 2, 3, ... among
    their code numbers is used; without a gap, the number after the highest.
    Repeated numbers count once and 0 is ignored, so a code already in the
    registry is never returned even when the registry holds duplicates.

    Examples:
        next_code(MemberType.MEMBER, []) -> "M0001"
        codes M0001, M0003 -> "M0002"
        codes M0001, M0002 -> "M0003"
    """
    member_type = MemberType(member_type)
    prefix = member_type.code_prefix
    numbers = sorted(
        {
            number
            for number in (
                code_number(m.code)
                for m in existing_members
                if m.type == member_type or (m.code or "").startswith(prefix)
            )
            if number is not None and number > 0
        }
    )

    expected = 1
    for number in numbers:
        if number != expected:
            return format_code(prefix, expected)
        expected += 1
    return format_code(prefix, expected)


def format_name(last_name: str, first_name: str, middle_initial: Optional[str] = None) -> str:
    """Format a display name as "Last, First M."."""
    name = f"{last_name.strip()}, {first_name.strip()}"
    middle = (middle_initial or "").strip().rstrip(".")
    if middle:
        name += f" {middle}."
    return name


def validate_code(code: str, member_type: MemberType) -> None:
    """Check a code's format and that its prefix matches the member type.

    Raises:
        ValidationError: If the code is malformed or has the wrong prefix
    """
    if not CODE_PATTERN.match(code):
        raise ValidationError(
            f"Invalid code '{code}': expected M or N followed by 4 digits (e.g. M0001)"
        )
    if code[0] != member_type.code_prefix:
        raise ValidationError(
            f"Code '{code}' does not match type {member_type.value} "
            f"(expected prefix '{member_type.code_prefix}')"
        )


class MemberService:
    """Service for managing the member registry."""

    def __init__(self, store: Store):
        """Initialize member service.

        Args:
            store: Store instance
        """
        self.store = store

    def list_members(self, member_type: Optional[MemberType] = None) -> list[Member]:
        """List members in registry order.

        Args:
            member_type: Optional type filter

        Returns:
            List of member entities
        """
        text = self.store.get(MEMBERS_KEY)
        members = decode_members(MEMBERS_KEY, text) if text else []
        if member_type is not None:
            members = [m for m in members if m.type == member_type]
        return members

    def get_member(self, member_id: str) -> Optional[Member]:
        """Get member by ID, or None if not found."""
        for member in self.list_members():
            if member.id == member_id:
                return member
        return None

    def get_member_by_code(self, code: str) -> Optional[Member]:
        """Get member by code (case-insensitive), or None if not found."""
        code = code.strip().upper()
        for member in self.list_members():
            if member.code.upper() == code:
                return member
        return None

    def next_code(self, member_type: MemberType) -> str:
        """Next free code for a type, based on the current registry."""
        return next_code(member_type, self.list_members())

    def create_member(
        self,
        last_name: str,
        first_name: str,
        middle_initial: Optional[str] = None,
        member_type: MemberType = MemberType.MEMBER,
        code: Optional[str] = None,
    ) -> Member:
        """Create a new member.

        Args:
            last_name: Last name (required)
            first_name: First name
            middle_initial: Optional middle initial
            member_type: Member or Non-Member
            code: Member code; the next free code for the type if omitted

        Returns:
            The created member

        Raises:
            ValidationError: If last name is blank or the code is malformed
            DuplicateCodeError: If the code is already used by any member
        """
        if not last_name or not last_name.strip():
            raise ValidationError("Last name is required.")

        member_type = MemberType(member_type)
        members = self.list_members()
        code = code.strip().upper() if code and code.strip() else next_code(member_type, members)
        if any(m.code.upper() == code for m in members):
            raise DuplicateCodeError(duplicate_code(code))
        validate_code(code, member_type)

        member = Member(
            id=uuid.uuid4().hex,
            name=format_name(last_name, first_name or "", middle_initial),
            code=code,
            type=member_type,
        )
        self._write(members + [member])
        logger.info("Added %s %s (%s)", member.type.value, member.name, member.code)
        return member

    def update_member(self, member: Member) -> Member:
        """Replace a member's name, code and type.

        Args:
            member: Member with the ID of an existing member and the new values

        Returns:
            The stored member

        Raises:
            NotFoundError: If no member has this ID
            ValidationError: If the name is blank or the code is malformed
            DuplicateCodeError: If the code belongs to a different member
        """
        members = self.list_members()
        if not any(m.id == member.id for m in members):
            raise NotFoundError(member_not_found(member.id))
        if not member.name or not member.name.strip():
            raise ValidationError("Name is required.")

        member = replace(member, name=member.name.strip(), code=member.code.strip().upper())
        if any(m.code.upper() == member.code and m.id != member.id for m in members):
            raise DuplicateCodeError(duplicate_code(member.code))
        validate_code(member.code, member.type)

        self._write([member if m.id == member.id else m for m in members])
        logger.info("Updated member %s (%s)", member.name, member.code)
        return member

    def delete_member(self, member_id: str) -> Member:
        """Delete a member.

        Saved transactions that reference the member are left as they are.

        Raises:
            NotFoundError: If no member has this ID
        """
        members = self.list_members()
        removed = next((m for m in members if m.id == member_id), None)
        if removed is None:
            raise NotFoundError(member_not_found(member_id))
        self._write([m for m in members if m.id != member_id])
        logger.info("Deleted member %s (%s)", removed.name, removed.code)
        return removed

    def replace_members(self, members: Iterable[Member]) -> list[Member]:
        """Replace the whole registry.

        Members without an ID get a fresh one. The registry is only written
        once the complete new list has been checked.

        Returns:
            The stored members

        Raises:
            DuplicateCodeError: If two members share a code
        """
        prepared = [m if m.id else replace(m, id=uuid.uuid4().hex) for m in members]

        counts = Counter(m.code for m in prepared)
        duplicates = sorted(code for code, count in counts.items() if count > 1)
        if duplicates:
            raise DuplicateCodeError(
                f"Duplicate codes in member list: {', '.join(duplicates)}"
            )

        self._write(prepared)
        logger.info("Replaced member registry with %d members", len(prepared))
        return prepared

    def clear_members(self) -> None:
        """Delete every member."""
        self.replace_members([])

    def import_members(self, path: str | Path, importer: "MemberImporter") -> list[Member]:
        """Replace the registry with members read from a spreadsheet.

        Nothing is changed unless the whole file was read successfully.

        Raises:
            MemberImportError: If the file cannot be read
            DuplicateCodeError: If the file assigns one code twice
        """
        imported = importer.read_members(path)
        return self.replace_members(imported)

    def _write(self, members: list[Member]) -> None:
        self.store.set(MEMBERS_KEY, encode_members(members))
