"""Mapper functions to convert between domain models and stored JSON payloads.

This layer isolates the stored record shapes. Session payloads come in two
versions: the current ``{"transactions": [...], "cashCounts": {...}}`` object
and the legacy bare transaction list. Both are normalized here so nothing
downstream ever sees the legacy shape.
"""

import json
import logging
import uuid
from decimal import Decimal
from typing import Any, Iterable, Mapping

from givingbook.domain import entities as domain
from givingbook.domain.errors import DomainError, StorageParseError, storage_parse_failed
from givingbook.utils.amount_parser import coerce_amount, coerce_count

logger = logging.getLogger(__name__)


def member_to_payload(member: domain.Member) -> dict[str, Any]:
    """Convert domain Member to its stored dictionary."""
    return {
        "id": member.id,
        "name": member.name,
        "code": member.code,
        "type": member.type.value,
    }


def member_from_payload(payload: Mapping[str, Any]) -> domain.Member:
    """Convert a stored member dictionary to a domain Member.

    A missing id comes back as an empty string; the registry assigns one.
    """
    try:
        member_type = domain.MemberType(payload.get("type") or domain.MemberType.MEMBER.value)
    except ValueError:
        raise StorageParseError(f"Unknown member type {payload.get('type')!r}")
    return domain.Member(
        id=str(payload.get("id") or ""),
        name=str(payload.get("name") or ""),
        code=str(payload.get("code") or ""),
        type=member_type,
    )


def encode_members(members: Iterable[domain.Member]) -> str:
    """Encode the member registry for storage."""
    return json.dumps([member_to_payload(m) for m in members])


def decode_members(key: str, text: str) -> list[domain.Member]:
    """Decode the stored member registry."""
    data = _loads(key, text)
    if not isinstance(data, list):
        raise StorageParseError(storage_parse_failed(key, "expected a list of members"))
    members = []
    for item in data:
        if not isinstance(item, dict):
            raise StorageParseError(storage_parse_failed(key, "member entry is not an object"))
        members.append(member_from_payload(item))
    return members


def _amount_to_payload(amount: Decimal) -> str:
    return str(amount)


def transaction_to_payload(txn: domain.Transaction) -> dict[str, Any]:
    """Convert domain Transaction to its stored dictionary."""
    payload: dict[str, Any] = {"id": txn.id, "type": txn.type.value}
    if txn.type is domain.TransactionType.GUEST:
        payload["guestName"] = txn.guest_name or ""
    else:
        payload["memberId"] = txn.member_id or ""
    for fund in domain.FUNDS:
        if fund in txn.funds:
            payload[fund.value] = _amount_to_payload(txn.funds[fund])
    if txn.gcash:
        payload["GCASH"] = _amount_to_payload(txn.gcash)
    return payload


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _stored_amount(value: Any, field: str) -> Decimal:
    amount = coerce_amount(value)
    if amount < 0:
        logger.warning("Reading negative %s amount %r as 0", field, value)
        return Decimal("0")
    return amount


def transaction_from_payload(payload: Mapping[str, Any]) -> domain.Transaction:
    """Convert a stored transaction dictionary to a domain Transaction.

    Blank fund fields are treated as absent; unparseable and negative ones
    read as 0. A blank guest name reads as None.
    Keys that are neither funds nor known row fields are ignored.

    Raises:
        StorageParseError: If the row has an unknown type or inconsistent fields
    """
    raw_type = payload.get("type")
    if raw_type is None:
        raw_type = (
            domain.TransactionType.GUEST.value
            if "guestName" in payload
            else domain.TransactionType.MEMBER.value
        )
    try:
        txn_type = domain.TransactionType(raw_type)
    except ValueError:
        raise StorageParseError(f"Unknown transaction type {raw_type!r}")

    funds = {}
    for fund in domain.FUNDS:
        value = payload.get(fund.value)
        if not _is_blank(value):
            funds[fund] = _stored_amount(value, fund.value)

    member_id = None
    guest_name = None
    if txn_type is domain.TransactionType.GUEST:
        raw_name = payload.get("guestName")
        guest_name = None if _is_blank(raw_name) else str(raw_name)
    elif not _is_blank(payload.get("memberId")):
        member_id = str(payload["memberId"])

    try:
        return domain.Transaction(
            id=str(payload.get("id") or uuid.uuid4().hex),
            type=txn_type,
            member_id=member_id,
            guest_name=guest_name,
            funds=funds,
            gcash=_stored_amount(payload.get("GCASH"), "GCASH"),
        )
    except DomainError as e:
        raise StorageParseError(str(e))


def cash_counts_to_payload(cash_counts: Mapping[int, int]) -> dict[str, int]:
    """Convert a denomination count map to its stored dictionary."""
    return {str(denomination): count for denomination, count in cash_counts.items()}


def cash_counts_from_payload(payload: Mapping[str, Any]) -> dict[int, int]:
    """Convert a stored count map to a denomination count map.

    Unknown denominations and negative counts are dropped with a warning.
    """
    counts: dict[int, int] = {}
    for raw_denomination, raw_count in payload.items():
        try:
            denomination = int(raw_denomination)
        except (TypeError, ValueError):
            denomination = None
        if denomination not in domain.DENOMINATIONS:
            logger.warning("Ignoring unknown denomination %r in stored cash count", raw_denomination)
            continue
        count = coerce_count(raw_count)
        if count < 0:
            logger.warning("Ignoring negative count %r for denomination %d", raw_count, denomination)
            continue
        counts[denomination] = count
    return counts


def encode_session(
    transactions: Iterable[domain.Transaction], cash_counts: Mapping[int, int]
) -> str:
    """Encode a session record in the current object shape."""
    return json.dumps(
        {
            "transactions": [transaction_to_payload(txn) for txn in transactions],
            "cashCounts": cash_counts_to_payload(cash_counts),
        }
    )


def decode_session(key: str, text: str) -> domain.SessionData:
    """Decode a stored session record of either shape.

    Raises:
        StorageParseError: If the value is not valid JSON or has neither shape
    """
    data = _loads(key, text)

    if isinstance(data, list):
        # Legacy shape: bare transaction list, no cash counts
        raw_transactions, raw_counts = data, {}
    elif isinstance(data, dict):
        raw_transactions = data.get("transactions") or []
        raw_counts = data.get("cashCounts") or {}
    else:
        raise StorageParseError(storage_parse_failed(key, "unrecognized record shape"))

    if not isinstance(raw_transactions, list) or not isinstance(raw_counts, dict):
        raise StorageParseError(storage_parse_failed(key, "unrecognized record shape"))

    transactions = []
    for item in raw_transactions:
        if not isinstance(item, dict):
            raise StorageParseError(storage_parse_failed(key, "transaction is not an object"))
        try:
            transactions.append(transaction_from_payload(item))
        except StorageParseError as e:
            raise StorageParseError(storage_parse_failed(key, e))

    return domain.SessionData(
        transactions=tuple(transactions),
        cash_counts=cash_counts_from_payload(raw_counts),
    )


def _loads(key: str, text: str) -> Any:
    try:
        return json.loads(text)
    except (TypeError, ValueError) as e:
        raise StorageParseError(storage_parse_failed(key, e))
