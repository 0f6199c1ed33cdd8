"""
Value objects passed between the data access layer and the controller.

These are detached from SQLAlchemy sessions so they can cross the
worker-thread boundary and be kept in controller state safely.
"""

from dataclasses import dataclass, field, asdict
from datetime import datetime
from typing import Optional, List


@dataclass(frozen=True)
class YearRow:
    """A raw year value and the record set it came from."""
    year: str
    source: str


@dataclass(frozen=True)
class CompanyOption:
    """An entry in the company dropdown."""
    company_id: int
    name: str


@dataclass(frozen=True)
class PlacedStudent:
    full_name: str
    branch: Optional[str]
    graduation_year: Optional[str]
    linkedin_url: Optional[str] = None

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class PlacementPhoto:
    id: int
    image_url: str
    caption: Optional[str] = None

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class InterviewDocument:
    id: int
    title: Optional[str]
    questions_link: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "questions_link": self.questions_link,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }


@dataclass(frozen=True)
class CompanyDetails:
    """Everything shown for one (year, company) selection."""
    students: List[PlacedStudent] = field(default_factory=list)
    photos: List[PlacementPhoto] = field(default_factory=list)
    interview_doc: Optional[InterviewDocument] = None

    def is_empty(self) -> bool:
        return not self.students and not self.photos and self.interview_doc is None


@dataclass(frozen=True)
class RosterRow:
    """One line of an exported roster; company is set for whole-year exports."""
    full_name: str
    branch: Optional[str]
    graduation_year: Optional[str]
    linkedin_url: Optional[str] = None
    company: Optional[str] = None
