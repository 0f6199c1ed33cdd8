"""
Database service layer for CrackGrid.

Session-level queries behind the data access facade:
- Filter options: year rows and company ids from every record source
- Details: placed students, photos and the interview document for a drive
- Analytics: append view/download events
- Contributions: get-or-create companies, upsert documents, add placements

Functions here raise SQLAlchemy errors as-is; the facade translates them.
"""

from datetime import datetime
from typing import Iterable, List, Optional, Tuple

from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError, NoResultFound
from sqlalchemy import func

from crackgrid.models import (
    Company,
    DocumentAnalytics,
    InterviewDocument,
    Placement,
    PlacementPhoto,
    StudentProfile,
)
from crackgrid.services import types
from crackgrid.services.errors import NotFound
from crackgrid.services.sources import RECORD_SOURCES


# ============ FILTER OPTIONS ============

def list_year_rows(db: Session) -> List[types.YearRow]:
    """Year values from every record source, undeduplicated."""
    rows = []
    for source in RECORD_SOURCES:
        rows.extend(source.years(db))
    return rows


def list_company_ids_for_year(db: Session, year: str) -> List[int]:
    """Company ids seen in `year` across every record source, undeduplicated."""
    ids = []
    for source in RECORD_SOURCES:
        ids.extend(source.company_ids(db, year))
    return ids


def resolve_company_names(db: Session, company_ids: Iterable[int]) -> List[Tuple[int, str]]:
    """Look up display names for a set of company ids."""
    ids = set(company_ids)
    if not ids:
        return []
    rows = db.query(Company.id, Company.name).filter(Company.id.in_(ids)).all()
    return [(r[0], r[1]) for r in rows]


def get_company_by_name(db: Session, name: str) -> Optional[Company]:
    """Case-insensitive company lookup by display name."""
    return db.query(Company).filter(
        func.lower(Company.name) == name.strip().lower()
    ).first()


# ============ DETAILS ============

def get_placed_students(db: Session, year: str, company_id: int) -> List[types.PlacedStudent]:
    """Placed students for a drive, joined with their profiles."""
    rows = db.query(StudentProfile).join(
        Placement, Placement.student_id == StudentProfile.id
    ).filter(
        Placement.year == year,
        Placement.company_id == company_id
    ).order_by(StudentProfile.full_name).all()

    return [
        types.PlacedStudent(
            full_name=r.full_name,
            branch=r.branch,
            graduation_year=r.graduation_year,
            linkedin_url=r.linkedin_url,
        )
        for r in rows
    ]


def get_placement_photos(db: Session, year: str, company_id: int) -> List[types.PlacementPhoto]:
    rows = db.query(PlacementPhoto).filter(
        PlacementPhoto.year == year,
        PlacementPhoto.company_id == company_id
    ).all()
    return [types.PlacementPhoto(id=r.id, image_url=r.image_url, caption=r.caption) for r in rows]


def get_interview_document(db: Session, year: str, company_id: int) -> types.InterviewDocument:
    """
    The single interview document for a drive.

    Raises:
        NotFound: no document has been uploaded for this (year, company)
    """
    try:
        doc = db.query(InterviewDocument).filter(
            InterviewDocument.year == year,
            InterviewDocument.company_id == company_id
        ).one()
    except NoResultFound:
        raise NotFound(f"No interview document for company {company_id} in {year}")

    return types.InterviewDocument(
        id=doc.id,
        title=doc.title,
        questions_link=doc.questions_link,
        created_at=doc.created_at,
        updated_at=doc.updated_at,
    )


def get_company_details(db: Session, year: str, company_id: int) -> types.CompanyDetails:
    """
    Students, photos and interview document for a drive.

    A missing document is returned as None. Any other error propagates and
    nothing is returned.
    """
    students = get_placed_students(db, year, company_id)
    photos = get_placement_photos(db, year, company_id)

    try:
        interview_doc = get_interview_document(db, year, company_id)
    except NotFound:
        interview_doc = None

    return types.CompanyDetails(students=students, photos=photos, interview_doc=interview_doc)


def get_year_roster(db: Session, year: str) -> List[types.RosterRow]:
    """All placed students for a year with their company, for whole-year exports."""
    rows = db.query(StudentProfile, Company.name).join(
        Placement, Placement.student_id == StudentProfile.id
    ).join(
        Company, Company.id == Placement.company_id
    ).filter(
        Placement.year == year
    ).order_by(Company.name, StudentProfile.full_name).all()

    return [
        types.RosterRow(
            full_name=profile.full_name,
            branch=profile.branch,
            graduation_year=profile.graduation_year,
            linkedin_url=profile.linkedin_url,
            company=company_name,
        )
        for profile, company_name in rows
    ]


# ============ ANALYTICS ============

def record_analytics_event(
    db: Session,
    document_id: int,
    action_type: str,
    timestamp: datetime = None
) -> DocumentAnalytics:
    """Append a view/download event for a document."""
    event = DocumentAnalytics(
        document_id=document_id,
        action_type=action_type,
        timestamp=timestamp or datetime.utcnow()
    )
    db.add(event)
    db.commit()
    return event


# ============ CONTRIBUTIONS ============

def get_or_create_company(db: Session, name: str) -> Company:
    """
    Find a company by name or create it.

    Names are stripped before matching so " Acme" and "Acme" are one company.
    """
    normalized = name.strip()

    existing = get_company_by_name(db, normalized)
    if existing:
        return existing

    company = Company(name=normalized)
    db.add(company)

    try:
        db.commit()
        db.refresh(company)
        return company
    except IntegrityError:
        # Race condition - another request created it
        db.rollback()
        return get_company_by_name(db, normalized)


def _find_interview_document(db: Session, year: str, company_id: int) -> Optional[InterviewDocument]:
    return db.query(InterviewDocument).filter(
        InterviewDocument.year == year,
        InterviewDocument.company_id == company_id
    ).first()


def _update_interview_document(
    db: Session,
    doc: InterviewDocument,
    questions_link: str,
    title: Optional[str]
) -> InterviewDocument:
    doc.questions_link = questions_link
    doc.title = title or doc.title
    # updated_at auto-updates via onupdate
    db.commit()
    db.refresh(doc)
    return doc


def upsert_interview_document(
    db: Session,
    year: str,
    company_name: str,
    questions_link: str,
    title: str = None
) -> InterviewDocument:
    """
    Insert or update the interview document for a drive.

    Upsert logic:
    - If a document for (year, company) exists -> replace link and title
    - Otherwise -> create it
    - If a concurrent request inserted it first -> update that row instead
    """
    company = get_or_create_company(db, company_name)

    existing = _find_interview_document(db, year, company.id)
    if existing:
        return _update_interview_document(db, existing, questions_link, title)

    doc = InterviewDocument(
        year=year,
        company_id=company.id,
        title=title,
        questions_link=questions_link
    )
    db.add(doc)

    try:
        db.commit()
    except IntegrityError:
        # Race condition - another request inserted the (year, company) row
        db.rollback()
        existing = _find_interview_document(db, year, company.id)
        if existing is None:
            raise
        return _update_interview_document(db, existing, questions_link, title)

    db.refresh(doc)
    return doc


def add_placement(
    db: Session,
    year: str,
    company_name: str,
    full_name: str,
    branch: str = None,
    graduation_year: str = None,
    linkedin_url: str = None
) -> Placement:
    """Record a placed student, creating the profile and company as needed."""
    company = get_or_create_company(db, company_name)

    student = StudentProfile(
        full_name=full_name.strip(),
        branch=branch,
        graduation_year=graduation_year,
        linkedin_url=linkedin_url
    )
    db.add(student)
    db.flush()

    placement = Placement(year=year, company_id=company.id, student_id=student.id)
    db.add(placement)
    db.commit()
    db.refresh(placement)
    return placement


def add_placement_photo(
    db: Session,
    year: str,
    company_name: str,
    image_url: str,
    caption: str = None
) -> PlacementPhoto:
    company = get_or_create_company(db, company_name)

    photo = PlacementPhoto(year=year, company_id=company.id, image_url=image_url, caption=caption)
    db.add(photo)
    db.commit()
    db.refresh(photo)
    return photo
