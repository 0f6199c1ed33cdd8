"""
Drive detail endpoint: interview document, placed students and photos for
one (year, company) selection.
"""

from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel

from crackgrid.services import catalog
from crackgrid.services.data_access import DataAccess, get_data_access
from crackgrid.services.errors import TransportError
from crackgrid.services.links import embed_url


router = APIRouter(prefix="/placements", tags=["Placements"])


# ============ Response Schemas ============

class StudentResponse(BaseModel):
    full_name: str
    branch: Optional[str]
    graduation_year: Optional[str]
    linkedin_url: Optional[str]


class PhotoResponse(BaseModel):
    id: int
    image_url: str
    caption: Optional[str]


class InterviewDocumentResponse(BaseModel):
    id: int
    title: Optional[str]
    questions_link: str
    preview_url: str
    created_at: Optional[datetime]
    updated_at: Optional[datetime]


class DetailsResponse(BaseModel):
    """Everything shown once a year and a company are selected."""
    year: str
    company: str
    students: list[StudentResponse]
    photos: list[PhotoResponse]
    interview_doc: Optional[InterviewDocumentResponse]


# ============ ENDPOINTS ============

@router.get("/details", response_model=DetailsResponse)
async def get_details(
    year: str = Query(..., min_length=1, description="Placement year"),
    company: str = Query(..., min_length=1, description="Company name as listed in the filters"),
    data_access: DataAccess = Depends(get_data_access)
):
    """
    Combined detail record for a drive.

    **Returns:**
    - 200: Students, photos and (optional) interview document
    - 404: Nothing uploaded for this selection
    - 503: Database unavailable
    """
    try:
        options = await catalog.available_companies(data_access, year)
        option = catalog.find_company(options, company)
        if option is None:
            raise HTTPException(
                status_code=404,
                detail=f"No records for {company} in {year}"
            )
        details = await data_access.get_company_details(year, option.company_id)
    except TransportError:
        raise HTTPException(status_code=503, detail="Error loading document")

    if details.is_empty():
        raise HTTPException(status_code=404, detail="No document found for this selection")

    doc = details.interview_doc
    return DetailsResponse(
        year=year,
        company=option.name,
        students=[StudentResponse(**s.to_dict()) for s in details.students],
        photos=[PhotoResponse(**p.to_dict()) for p in details.photos],
        interview_doc=InterviewDocumentResponse(
            id=doc.id,
            title=doc.title or f"{option.name} Interview Questions",
            questions_link=doc.questions_link,
            preview_url=embed_url(doc.questions_link),
            created_at=doc.created_at,
            updated_at=doc.updated_at,
        ) if doc else None,
    )
