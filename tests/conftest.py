"""Shared pytest fixtures for givingbook tests."""

import os
import tempfile
from decimal import Decimal

import pytest

from givingbook.database.factories import create_sqlite_store
from givingbook.domain.entities import Fund, MemberType, Transaction, TransactionType
from givingbook.domain.member import MemberService
from givingbook.domain.session import SessionService
from givingbook.domain.summary import SummaryService
from givingbook.logging_config import reset_logging


@pytest.fixture
def temp_db():
    """Create a temporary store for testing."""
    fd, db_path = tempfile.mkstemp(suffix=".db")
    os.close(fd)

    store = create_sqlite_store(database_path=db_path)
    # Store the path for tests that need it
    store.database_path = db_path
    store.connect()
    store.initialize_schema()

    yield store

    store.disconnect()
    if os.path.exists(db_path):
        os.unlink(db_path)


@pytest.fixture(autouse=True)
def _reset_logging():
    """Leave no CLI log handler behind between tests."""
    yield
    reset_logging()


@pytest.fixture
def member_service(temp_db):
    """Create a MemberService with a temporary store."""
    return MemberService(temp_db)


@pytest.fixture
def session_service(temp_db):
    """Create a SessionService with a temporary store."""
    return SessionService(temp_db)


@pytest.fixture
def summary_service(temp_db):
    """Create a SummaryService with a temporary store."""
    return SummaryService(temp_db)


@pytest.fixture
def sample_members(member_service):
    """Register two members and one non-member."""
    return [
        member_service.create_member("Dela Cruz", "Juan", "P"),
        member_service.create_member("Santos", "Maria"),
        member_service.create_member("Reyes", "Ana", member_type=MemberType.NON_MEMBER),
    ]


@pytest.fixture
def make_transaction():
    """Build a transaction from fund amounts given as keyword strings."""

    def _make(
        txn_id="t1",
        txn_type=TransactionType.GUEST,
        member_id=None,
        guest_name=None,
        gcash="0",
        **funds,
    ):
        if txn_type is TransactionType.GUEST and guest_name is None:
            guest_name = "Guest"
        return Transaction(
            id=txn_id,
            type=txn_type,
            member_id=member_id,
            guest_name=guest_name,
            funds={Fund[name.upper()]: Decimal(value) for name, value in funds.items()},
            gcash=Decimal(gcash),
        )

    return _make


@pytest.fixture
def cli_runner():
    """Create a Click CLI test runner."""
    from click.testing import CliRunner

    return CliRunner()
