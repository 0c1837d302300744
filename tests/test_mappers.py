"""Tests for stored payload mappers."""

import json
import logging
from decimal import Decimal

import pytest

from givingbook.database.mappers import (
    cash_counts_from_payload,
    decode_members,
    decode_session,
    encode_members,
    encode_session,
    member_from_payload,
    transaction_from_payload,
    transaction_to_payload,
)
from givingbook.domain.entities import Fund, Member, MemberType, Transaction, TransactionType
from givingbook.domain.errors import StorageParseError


class TestMemberMapper:
    """Tests for member payloads."""

    def test_members_round_trip(self):
        """Test the registry encodes and decodes unchanged."""
        members = [
            Member(id="a", name="Dela Cruz, Juan P.", code="M0001", type=MemberType.MEMBER),
            Member(id="b", name="Reyes, Ana", code="N0001", type=MemberType.NON_MEMBER),
        ]

        assert decode_members("members", encode_members(members)) == members

    def test_member_payload_shape(self):
        """Test the stored member fields."""
        text = encode_members([Member(id="a", name="X", code="M0001", type=MemberType.NON_MEMBER)])

        assert json.loads(text) == [{"id": "a", "name": "X", "code": "M0001", "type": "Non-Member"}]

    def test_member_missing_id(self):
        """Test a member without an id decodes with an empty id."""
        member = member_from_payload({"name": "X", "code": "M0001", "type": "Member"})

        assert member.id == ""

    def test_unknown_member_type(self):
        """Test an unknown member type is a parse error."""
        with pytest.raises(StorageParseError):
            member_from_payload({"id": "a", "name": "X", "code": "M0001", "type": "Visitor"})

    def test_members_not_a_list(self):
        """Test a registry that is not a list is a parse error."""
        with pytest.raises(StorageParseError):
            decode_members("members", json.dumps({"id": "a"}))


class TestTransactionMapper:
    """Tests for transaction payloads."""

    def test_payload_uses_stored_field_names(self):
        """Test funds are keyed by name and GCASH only when given."""
        txn = Transaction(
            id="t1",
            type=TransactionType.MEMBER,
            member_id="m1",
            funds={Fund.TITHES: Decimal("100.50")},
        )

        assert transaction_to_payload(txn) == {
            "id": "t1",
            "type": "Member",
            "memberId": "m1",
            "Tithes": "100.50",
        }

    def test_guest_payload(self):
        """Test guest rows store the guest name."""
        txn = Transaction(id="t1", type=TransactionType.GUEST, guest_name="Visitor", gcash=Decimal("20"))

        payload = transaction_to_payload(txn)

        assert payload["guestName"] == "Visitor"
        assert payload["GCASH"] == "20"
        assert "memberId" not in payload

    def test_blank_and_invalid_fields(self):
        """Test blank funds are absent and invalid ones read as 0."""
        txn = transaction_from_payload(
            {"id": "t1", "type": "Member", "memberId": "", "Tithes": "", "Offering": "abc", "Mission": 30}
        )

        assert txn.member_id is None
        assert Fund.TITHES not in txn.funds
        assert txn.funds[Fund.OFFERING] == Decimal("0")
        assert txn.funds[Fund.MISSION] == Decimal("30")

    def test_unknown_keys_ignored(self):
        """Test keys that are neither funds nor row fields are ignored."""
        txn = transaction_from_payload({"id": "t1", "type": "Guest", "guestName": "X", "tagId": "7", "Tithes": "5"})

        assert txn.row_total == Decimal("5")

    def test_missing_type_inferred(self):
        """Test rows without a type are guests if they have a guest name."""
        assert transaction_from_payload({"id": "a", "guestName": "X"}).type is TransactionType.GUEST
        assert transaction_from_payload({"id": "b", "memberId": "m1"}).type is TransactionType.MEMBER

    def test_missing_id_generated(self):
        """Test rows without an id get one."""
        assert transaction_from_payload({"type": "Member"}).id

    def test_unknown_type(self):
        """Test an unknown transaction type is a parse error."""
        with pytest.raises(StorageParseError):
            transaction_from_payload({"id": "a", "type": "Visitor"})

    def test_negative_amounts_read_as_zero(self, caplog):
        """Test stored negative amounts read as 0 with a warning."""
        with caplog.at_level(logging.WARNING, logger="givingbook"):
            txn = transaction_from_payload({"id": "a", "type": "Member", "Tithes": "-10", "Offering": "5", "GCASH": -3})

        assert txn.amount(Fund.TITHES) == Decimal("0")
        assert txn.amount(Fund.OFFERING) == Decimal("5")
        assert txn.gcash == Decimal("0")
        assert "Tithes" in caplog.text
        assert "GCASH" in caplog.text

    def test_nameless_guest_round_trip(self):
        """Test a guest row without a name decodes with no name."""
        txn = Transaction(id="t1", type=TransactionType.GUEST)

        assert transaction_from_payload(transaction_to_payload(txn)) == txn
        assert transaction_from_payload({"id": "t2", "type": "Guest", "guestName": "  "}).guest_name is None


class TestSessionMapper:
    """Tests for session payloads."""

    def test_current_shape(self):
        """Test sessions are stored as transactions plus cash counts."""
        txn = Transaction(id="t1", type=TransactionType.GUEST, guest_name="X", funds={Fund.CCM: Decimal("5")})

        data = json.loads(encode_session([txn], {1000: 2, 5: 1}))

        assert data == {
            "transactions": [{"id": "t1", "type": "Guest", "guestName": "X", "CCM": "5"}],
            "cashCounts": {"1000": 2, "5": 1},
        }

    def test_decode_current_shape(self):
        """Test decoding the current shape."""
        text = json.dumps(
            {"transactions": [{"id": "t1", "type": "Guest", "guestName": "X"}], "cashCounts": {"500": "2"}}
        )

        data = decode_session("k", text)

        assert len(data.transactions) == 1
        assert data.cash_counts == {500: 2}

    def test_decode_legacy_shape(self):
        """Test a bare list decodes with empty cash counts."""
        data = decode_session("k", json.dumps([{"id": "t1", "memberId": "m1", "Tithes": "10"}]))

        assert data.transactions[0].member_id == "m1"
        assert data.cash_counts == {}

    def test_decode_missing_fields(self):
        """Test an object without fields decodes as an empty session."""
        data = decode_session("k", "{}")

        assert data.transactions == ()
        assert data.cash_counts == {}

    @pytest.mark.parametrize("text", ["{oops", "42", '"text"', '{"transactions": {"a": 1}}', "[1, 2]"])
    def test_decode_unreadable(self, text):
        """Test values of neither shape are parse errors."""
        with pytest.raises(StorageParseError):
            decode_session("k", text)

    def test_cash_counts_drop_unknown_entries(self, caplog):
        """Test unknown denominations and negative counts are dropped with a warning."""
        with caplog.at_level(logging.WARNING, logger="givingbook"):
            counts = cash_counts_from_payload({"1000": 1, "25": 3, "x": 1, "100": -2})

        assert counts == {1000: 1}
        assert "25" in caplog.text
