"""
Roster export endpoint (.xlsx).

With `company` the sheet lists that company's placed students; without it,
every placed student of the year with a leading Company column.
"""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import Response
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from crackgrid.database import get_db
from crackgrid.logger import _log_error, _log_info
from crackgrid.services import db_service
from crackgrid.services.export import XLSX_MEDIA_TYPE, roster_filename, roster_xlsx_bytes


router = APIRouter(prefix="/exports", tags=["Exports"])


@router.get("/roster")
def export_roster(
    year: str = Query(..., min_length=1, description="Placement year"),
    company: Optional[str] = Query(None, description="Company name; omit for the whole year"),
    db: Session = Depends(get_db)
):
    """
    Download placed students as an Excel file.

    **Returns:**
    - 200: .xlsx attachment
    - 404: Unknown company or no placed students
    - 503: Database unavailable
    """
    try:
        if company:
            found = db_service.get_company_by_name(db, company)
            if not found:
                raise HTTPException(status_code=404, detail=f"Company '{company}' not found")
            company = found.name
            rows = db_service.get_placed_students(db, year, found.id)
        else:
            rows = db_service.get_year_roster(db, year)
    except SQLAlchemyError as e:
        _log_error(f"Roster export failed for {year}: {e}")
        raise HTTPException(status_code=503, detail="Failed to load placed students")

    if not rows:
        raise HTTPException(status_code=404, detail="No placed students for this selection")

    filename = roster_filename(year, company)
    content = roster_xlsx_bytes(rows, year, company)
    _log_info(f"Exported {len(rows)} students to {filename}")

    return Response(
        content=content,
        media_type=XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": f"attachment; filename={filename}"}
    )
