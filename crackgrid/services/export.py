"""
Placed-student roster export to Excel (.xlsx) via openpyxl.

Two scopes:
- Single company: one sheet, no company column
- Whole year: same columns with "Company" first
"""

import io
import re
from typing import Iterable, List, Optional

from openpyxl import Workbook
from openpyxl.utils import get_column_letter

SINGLE_COMPANY_HEADER = ["Full Name", "Branch", "Graduation Year", "LinkedIn URL"]
WHOLE_YEAR_HEADER = ["Company"] + SINGLE_COMPANY_HEADER

SHEET_TITLE = "Placed Students"
XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

# Excel caps column width at 255 characters
MAX_COLUMN_WIDTH = 60


def roster_filename(year: str, company: Optional[str] = None) -> str:
    """
    Filename encoding the export scope.

    placed_students_<company>_<year>.xlsx or placed_students_<year>.xlsx
    """
    if company:
        slug = re.sub(r"[^A-Za-z0-9]+", "_", company).strip("_") or "company"
        return f"placed_students_{slug}_{year}.xlsx"
    return f"placed_students_{year}.xlsx"


def _row_values(row, include_company: bool) -> List:
    values = [row.full_name, row.branch, row.graduation_year, row.linkedin_url]
    if include_company:
        values.insert(0, getattr(row, "company", None))
    return values


def _autosize_columns(ws) -> None:
    """Set each column's width to fit its longest cell."""
    for idx, column in enumerate(ws.iter_cols(values_only=True), start=1):
        longest = max((len(str(v)) for v in column if v is not None), default=0)
        ws.column_dimensions[get_column_letter(idx)].width = min(longest + 2, MAX_COLUMN_WIDTH)


def build_roster_workbook(rows: Iterable, year: str, company: Optional[str] = None) -> Workbook:
    """
    Build the roster workbook.

    Args:
        rows: PlacedStudent or RosterRow objects, written in the given order
        year: Placement year (only used for the sheet title)
        company: Company name for a single-company export, None for a whole year
    """
    include_company = company is None

    wb = Workbook()
    ws = wb.active
    ws.title = f"{SHEET_TITLE} {year}"[:31]

    ws.append(WHOLE_YEAR_HEADER if include_company else SINGLE_COMPANY_HEADER)
    for row in rows:
        ws.append(_row_values(row, include_company))

    _autosize_columns(ws)
    return wb


def roster_xlsx_bytes(rows: Iterable, year: str, company: Optional[str] = None) -> bytes:
    """Serialize the roster workbook to .xlsx bytes."""
    wb = build_roster_workbook(rows, year, company)
    buf = io.BytesIO()
    wb.save(buf)
    return buf.getvalue()
