"""Domain layer for givingbook application."""

# Import services lazily to avoid circular imports through the storage mappers
_SERVICES = {
    "MemberService": "givingbook.domain.member",
    "TransactionLedger": "givingbook.domain.ledger",
    "SessionService": "givingbook.domain.session",
    "SummaryService": "givingbook.domain.summary",
    "MemberImporter": "givingbook.domain.member_import",
}

__all__ = list(_SERVICES)


def __getattr__(name):
    if name in _SERVICES:
        from importlib import import_module

        return getattr(import_module(_SERVICES[name]), name)
    raise AttributeError(f"module '{__name__}' has no attribute '{name}'")
