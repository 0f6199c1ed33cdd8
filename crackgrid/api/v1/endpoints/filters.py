"""
Filter option endpoints for the year -> company dropdowns.
"""

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel

from crackgrid.services import catalog
from crackgrid.services.data_access import DataAccess, get_data_access
from crackgrid.services.errors import TransportError


router = APIRouter(prefix="/filters", tags=["Filters"])


# ============ Response Schemas ============

class YearsResponse(BaseModel):
    """Years with any interview document or placement, newest first."""
    years: list[str]


class CompaniesResponse(BaseModel):
    """Companies with any record in the selected year, A-Z."""
    year: str
    companies: list[str]


# ============ ENDPOINTS ============

@router.get("/years", response_model=YearsResponse)
async def list_years(data_access: DataAccess = Depends(get_data_access)):
    """
    Year dropdown options.

    **Returns:**
    - 200: Deduplicated years from documents and placements
    - 503: Database unavailable
    """
    try:
        years = await catalog.available_years(data_access)
    except TransportError:
        raise HTTPException(status_code=503, detail="Failed to load years from database")

    return YearsResponse(years=years)


@router.get("/companies", response_model=CompaniesResponse)
async def list_companies(
    year: str = Query(..., min_length=1, description="Placement year, e.g. '2024'"),
    data_access: DataAccess = Depends(get_data_access)
):
    """
    Company dropdown options for a year.

    **Example:**
    ```
    GET /api/v1/filters/companies?year=2024
    ```
    """
    try:
        options = await catalog.available_companies(data_access, year)
    except TransportError:
        raise HTTPException(status_code=503, detail="Failed to load companies")

    return CompaniesResponse(year=year, companies=[o.name for o in options])
