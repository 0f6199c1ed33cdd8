"""
Contribution endpoints.

Students (or the placement cell) add interview documents, placed students
and drive photos here; companies are created on first use.
"""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from crackgrid.database import get_db
from crackgrid.logger import _log_error, _log_info
from crackgrid.services import db_service


router = APIRouter(prefix="/contribute", tags=["Contribute"])

SAVE_FAILED_DETAIL = "Failed to save contribution"


# ============ Request Schemas ============

class DocumentContribution(BaseModel):
    year: str = Field(..., min_length=1, description="Placement year, e.g. '2024'")
    company_name: str = Field(..., min_length=1)
    questions_link: str = Field(..., min_length=1, description="Google Docs link")
    title: Optional[str] = None


class PlacementContribution(BaseModel):
    year: str = Field(..., min_length=1)
    company_name: str = Field(..., min_length=1)
    full_name: str = Field(..., min_length=1)
    branch: Optional[str] = None
    graduation_year: Optional[str] = None
    linkedin_url: Optional[str] = None


class PhotoContribution(BaseModel):
    year: str = Field(..., min_length=1)
    company_name: str = Field(..., min_length=1)
    image_url: str = Field(..., min_length=1)
    caption: Optional[str] = None


class ContributionResponse(BaseModel):
    id: int
    company_id: int


# ============ ENDPOINTS ============

@router.post("/documents", status_code=status.HTTP_201_CREATED, response_model=ContributionResponse)
def contribute_document(payload: DocumentContribution, db: Session = Depends(get_db)):
    """Add or replace the interview document for a drive."""
    try:
        doc = db_service.upsert_interview_document(
            db=db,
            year=payload.year,
            company_name=payload.company_name,
            questions_link=payload.questions_link,
            title=payload.title
        )
    except SQLAlchemyError as e:
        _log_error(f"Saving interview document for {payload.company_name} - {payload.year} failed: {e}")
        raise HTTPException(status_code=503, detail=SAVE_FAILED_DETAIL)

    _log_info(f"Saved interview document for {payload.company_name} - {payload.year}")
    return ContributionResponse(id=doc.id, company_id=doc.company_id)


@router.post("/placements", status_code=status.HTTP_201_CREATED, response_model=ContributionResponse)
def contribute_placement(payload: PlacementContribution, db: Session = Depends(get_db)):
    """Add a placed student."""
    try:
        placement = db_service.add_placement(
            db=db,
            year=payload.year,
            company_name=payload.company_name,
            full_name=payload.full_name,
            branch=payload.branch,
            graduation_year=payload.graduation_year,
            linkedin_url=payload.linkedin_url
        )
    except SQLAlchemyError as e:
        _log_error(f"Saving placement of {payload.full_name} at {payload.company_name} failed: {e}")
        raise HTTPException(status_code=503, detail=SAVE_FAILED_DETAIL)

    return ContributionResponse(id=placement.id, company_id=placement.company_id)


@router.post("/photos", status_code=status.HTTP_201_CREATED, response_model=ContributionResponse)
def contribute_photo(payload: PhotoContribution, db: Session = Depends(get_db)):
    """Add a drive photo."""
    try:
        photo = db_service.add_placement_photo(
            db=db,
            year=payload.year,
            company_name=payload.company_name,
            image_url=payload.image_url,
            caption=payload.caption
        )
    except SQLAlchemyError as e:
        _log_error(f"Saving photo for {payload.company_name} - {payload.year} failed: {e}")
        raise HTTPException(status_code=503, detail=SAVE_FAILED_DETAIL)

    return ContributionResponse(id=photo.id, company_id=photo.company_id)
