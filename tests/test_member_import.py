"""Tests for importing member lists from spreadsheets."""

import openpyxl
import pytest

from givingbook.domain.entities import MemberType
from givingbook.domain.errors import DuplicateCodeError, MemberImportError
from givingbook.domain.member_import import MemberImporter, reformat_name

MEMBER_CSV = """Name,Code
Juan P. Santos,M0003
Maria Lopez,
Adjustment 2023,
Non Member,
Ana Reyes,
Jose Garcia,N0005
NoName,
"""


@pytest.fixture
def member_csv(tmp_path):
    """Write a member list CSV with a non-member section."""
    path = tmp_path / "members.csv"
    path.write_text(MEMBER_CSV, encoding="utf-8")
    return path


@pytest.fixture
def member_xlsx(tmp_path):
    """Write a member list workbook with numeric codes."""
    path = tmp_path / "members.xlsx"
    wb = openpyxl.Workbook()
    ws = wb.active
    ws.append(["Member Name", "Member Code"])
    ws.append(["Dela Cruz, Juan P.", 145])
    ws.append(["Maria Santos", None])
    ws.append([None, None])
    ws.append(["NON-MEMBER", None])
    ws.append(["Ana Reyes", None])
    wb.save(path)
    return path


def test_reformat_name():
    """Test "First M. Last" becomes "Last, First M."."""
    assert reformat_name("Juan P. Santos") == "Santos, Juan P."
    assert reformat_name("Santos, Juan") == "Santos, Juan"
    assert reformat_name("Cher") == "Cher"


def test_read_csv(member_csv):
    """Test reading a CSV with sections, skipped rows and missing codes."""
    members = MemberImporter().read_members(member_csv)

    assert [(m.name, m.code, m.type) for m in members] == [
        ("Santos, Juan P.", "M0003", MemberType.MEMBER),
        ("Lopez, Maria", "M0001", MemberType.MEMBER),
        ("Reyes, Ana", "N0001", MemberType.NON_MEMBER),
        ("Garcia, Jose", "N0005", MemberType.NON_MEMBER),
    ]
    assert len({m.id for m in members}) == 4


def test_read_xlsx(member_xlsx):
    """Test reading the first sheet of a workbook."""
    members = MemberImporter().read_members(member_xlsx)

    assert [(m.name, m.code, m.type) for m in members] == [
        ("Dela Cruz, Juan P.", "M0145", MemberType.MEMBER),
        ("Santos, Maria", "M0001", MemberType.MEMBER),
        ("Reyes, Ana", "N0001", MemberType.NON_MEMBER),
    ]


def test_first_column_used_without_name_header(tmp_path):
    """Test the first column is the name when no name header exists."""
    path = tmp_path / "list.csv"
    path.write_text("Giver,Notes\nAna Reyes,regular\nJose Garcia,\n", encoding="utf-8")

    members = MemberImporter().read_members(path)

    assert [m.name for m in members] == ["Reyes, Ana", "Garcia, Jose"]
    assert [m.code for m in members] == ["M0001", "M0002"]


def test_unsupported_file_type(tmp_path):
    """Test files other than .xlsx and .csv are rejected."""
    path = tmp_path / "members.txt"
    path.write_text("Name\nAna Reyes\n", encoding="utf-8")

    with pytest.raises(MemberImportError, match="Import failed: unsupported file type"):
        MemberImporter().read_members(path)


def test_unreadable_file_wrapped(tmp_path):
    """Test read failures surface as import errors with the cause."""
    path = tmp_path / "broken.xlsx"
    path.write_text("not a workbook", encoding="utf-8")
    importer = MemberImporter()

    with pytest.raises(MemberImportError, match="^Import failed: "):
        importer.read_members(path)

    assert not importer.in_flight


def test_second_import_rejected_while_running(member_csv, monkeypatch):
    """Test only one import runs at a time."""
    importer = MemberImporter()
    rejected = []

    def reenter(rows):
        with pytest.raises(MemberImportError, match="already in progress"):
            importer.read_members(member_csv)
        rejected.append(True)
        return []

    monkeypatch.setattr(importer, "_rows_to_members", reenter)

    assert importer.read_members(member_csv) == []
    assert rejected == [True]
    assert not importer.in_flight


def test_import_replaces_registry(member_service, sample_members, member_csv):
    """Test a successful import replaces the whole registry."""
    members = member_service.import_members(member_csv, MemberImporter())

    assert member_service.list_members() == members
    assert member_service.get_member(sample_members[0].id) is None


def test_failed_import_keeps_registry(member_service, sample_members, tmp_path):
    """Test a failed import leaves the registry unchanged."""
    before = member_service.list_members()
    path = tmp_path / "members.txt"
    path.write_text("x", encoding="utf-8")

    with pytest.raises(MemberImportError):
        member_service.import_members(path, MemberImporter())

    assert member_service.list_members() == before


def test_import_with_duplicate_codes_keeps_registry(member_service, sample_members, tmp_path):
    """Test a file that repeats a code is rejected as a whole."""
    before = member_service.list_members()
    path = tmp_path / "members.csv"
    path.write_text("Name,Code\nAna Reyes,M0007\nJose Garcia,M0007\n", encoding="utf-8")

    with pytest.raises(DuplicateCodeError, match="M0007"):
        member_service.import_members(path, MemberImporter())

    assert member_service.list_members() == before


def test_first_non_blank_cell_used_without_name_header(tmp_path):
    """Test rows with an empty first cell take the first filled cell as the name."""
    path = tmp_path / "list.csv"
    path.write_text("No.,Giver\n,Ana Reyes\n,Jose Garcia\n", encoding="utf-8")

    members = MemberImporter().read_members(path)

    assert [m.name for m in members] == ["Reyes, Ana", "Garcia, Jose"]
