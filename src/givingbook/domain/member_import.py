"""Member list import from spreadsheets.

Reads the first sheet of an .xlsx workbook, or a .csv file, into member
records. Expected columns are a name column ("Name", "Member Name" or
"Full Name"; otherwise the first column) and an optional "Code" or
"Member Code". Rows are Members until a row whose name mentions
"Non Member" / "Non-Member", which switches the rest of the sheet to
Non-Members. Rows mentioning "Adjustment" or "NoName" are ledger artifacts
and are skipped.
"""

import csv
import logging
import uuid
from pathlib import Path
from typing import Any, Iterator, Optional

import openpyxl

from givingbook.domain.entities import Member, MemberType
from givingbook.domain.errors import MemberImportError, import_failed
from givingbook.domain.member import code_number, format_code, next_code

logger = logging.getLogger(__name__)

NAME_COLUMNS = ("Name", "Member Name", "Full Name")
CODE_COLUMNS = ("Code", "Member Code")
SECTION_MARKERS = ("non member", "non-member")
SKIP_MARKERS = ("adjustment", "noname")


def _cell_text(value: Any) -> str:
    """Normalize a spreadsheet cell to text (145.0 -> "145", None -> "")."""
    if value is None:
        return ""
    if isinstance(value, float) and value == int(value):
        return str(int(value))
    return str(value).strip()


def reformat_name(raw_name: str) -> str:
    """Turn "First M. Last" into "Last, First M."; names with a comma are kept."""
    if "," in raw_name:
        return raw_name
    parts = raw_name.split()
    if len(parts) < 2:
        return raw_name
    return f"{parts[-1]}, {' '.join(parts[:-1])}"


class MemberImporter:
    """Reads member lists from .xlsx and .csv files.

    Only one import runs at a time; a second request while one is in
    progress is rejected.
    """

    def __init__(self):
        self._in_flight = False

    @property
    def in_flight(self) -> bool:
        return self._in_flight

    def read_members(self, path: str | Path) -> list[Member]:
        """Read members from a spreadsheet.

        Codes present in the sheet keep their number under the row's type
        prefix. Rows without a code get the lowest number not yet used for
        their type, once all explicit codes are known.

        Args:
            path: Path to a .xlsx or .csv file

        Returns:
            Members in sheet order, each with a fresh ID

        Raises:
            MemberImportError: If an import is already running or the file
                cannot be read; no members are returned in that case
        """
        if self._in_flight:
            raise MemberImportError("An import is already in progress")
        self._in_flight = True
        try:
            rows = list(self._read_rows(Path(path)))
            members = self._rows_to_members(rows)
        except MemberImportError:
            raise
        except Exception as e:
            logger.warning("Import of %s failed: %s", path, e)
            raise MemberImportError(import_failed(e)) from e
        finally:
            self._in_flight = False

        logger.info("Read %d members from %s", len(members), path)
        return members

    def _read_rows(self, path: Path) -> Iterator[dict[str, str]]:
        suffix = path.suffix.lower()
        if suffix in (".xlsx", ".xlsm"):
            return self._read_xlsx(path)
        if suffix == ".csv":
            return self._read_csv(path)
        raise MemberImportError(import_failed(f"unsupported file type '{path.suffix}'"))

    def _read_xlsx(self, path: Path) -> Iterator[dict[str, str]]:
        wb = openpyxl.load_workbook(path, read_only=True, data_only=True)
        try:
            sheet = wb.worksheets[0]
            rows = sheet.iter_rows(values_only=True)
            header = next(rows, None)
            if header is None:
                return
            headers = [_cell_text(v) or f"Column_{i + 1}" for i, v in enumerate(header)]
            for values in rows:
                cells = [_cell_text(v) for v in values]
                if not any(cells):
                    continue
                yield dict(zip(headers, cells))
        finally:
            wb.close()

    def _read_csv(self, path: Path) -> Iterator[dict[str, str]]:
        with open(path, "r", encoding="utf-8-sig", newline="") as f:
            sample = f.read(1024)
            f.seek(0)
            try:
                dialect = csv.Sniffer().sniff(sample, delimiters=",;\t")
            except csv.Error:
                dialect = csv.excel
            reader = csv.DictReader(f, dialect=dialect)
            for row in reader:
                cells = {k: (v or "").strip() for k, v in row.items() if k is not None}
                if not any(cells.values()):
                    continue
                yield cells

    def _rows_to_members(self, rows: list[dict[str, str]]) -> list[Member]:
        current_type = MemberType.MEMBER
        drafts: list[tuple[str, MemberType, Optional[int]]] = []

        for row_num, row in enumerate(rows, start=2):
            raw_name = self._row_name(row)
            if not raw_name:
                continue
            lowered = raw_name.lower()
            if any(marker in lowered for marker in SECTION_MARKERS):
                current_type = MemberType.NON_MEMBER
                continue
            if any(marker in lowered for marker in SKIP_MARKERS):
                logger.debug("Row %d: skipping %r", row_num, raw_name)
                continue

            raw_code = next((row[c] for c in CODE_COLUMNS if row.get(c)), "")
            number = code_number(raw_code) if raw_code else None
            if raw_code and number is None:
                logger.warning("Row %d: ignoring code %r without digits", row_num, raw_code)
            drafts.append((reformat_name(raw_name), current_type, number))

        members: list[Optional[Member]] = [
            Member(
                id=uuid.uuid4().hex,
                name=name,
                code=format_code(member_type.code_prefix, number),
                type=member_type,
            )
            if number is not None
            else None
            for name, member_type, number in drafts
        ]
        for index, (name, member_type, _) in enumerate(drafts):
            if members[index] is None:
                taken = [m for m in members if m is not None]
                members[index] = Member(
                    id=uuid.uuid4().hex,
                    name=name,
                    code=next_code(member_type, taken),
                    type=member_type,
                )
        return members

    def _row_name(self, row: dict[str, str]) -> str:
        for column in NAME_COLUMNS:
            if row.get(column):
                return row[column].strip()
        return next((value.strip() for value in row.values() if value and value.strip()), "")
