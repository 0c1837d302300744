"""Shared domain error messages and error types."""


class DomainError(ValueError):
    """Base class for domain-level errors.

    Subclasses provide semantic categories while preserving ValueError
    compatibility for existing error handling.
    """


class ValidationError(DomainError):
    """Invalid input or failed validation in domain logic."""


class MissingDateError(ValidationError):
    """A session was saved or loaded without a date."""


class NotFoundError(DomainError):
    """Requested domain entity does not exist."""


class ConflictError(DomainError):
    """Domain conflict, such as uniqueness violations."""


class DuplicateCodeError(ConflictError):
    """A member code is already used by another member."""


class StorageParseError(DomainError):
    """A stored value could not be decoded."""


class MemberImportError(DomainError):
    """Reading a member list from a spreadsheet failed."""


def missing_date(action: str = "save") -> str:
    """Return message for a save or load attempted without a date."""
    return f"Please select a date to {action}."


def duplicate_code(code: str) -> str:
    """Return message for a member code collision."""
    return f'Code "{code}" already exists.'


def member_not_found(member: str) -> str:
    """Return message for missing member by ID or code."""
    return f"Member '{member}' not found"


def entry_not_found(entry_id: str) -> str:
    """Return message for missing transaction row."""
    return f"Entry '{entry_id}' not found in this session"


def import_failed(cause: object) -> str:
    """Return message for a failed member import."""
    return f"Import failed: {cause}"


def storage_parse_failed(key: str, cause: object) -> str:
    """Return message for an undecodable stored value."""
    return f"Stored value at '{key}' could not be read: {cause}"
