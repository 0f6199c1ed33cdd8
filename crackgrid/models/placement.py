"""
Placement records: who got placed where, plus the profile of each student.

Card fields shown in the roster:
- full_name, branch, graduation_year, linkedin_url
"""

from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Index
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from crackgrid.database import Base


class StudentProfile(Base):
    """Person profile fields joined into the placed-student roster."""
    __tablename__ = "student_profiles"

    id = Column(Integer, primary_key=True)
    full_name = Column(String(255), nullable=False)
    branch = Column(String(100))  # e.g. "BSc Computer Science"
    graduation_year = Column(String(10))
    linkedin_url = Column(String(512))
    created_at = Column(DateTime, server_default=func.now())

    def __repr__(self):
        return f"<StudentProfile(id={self.id}, name={self.full_name})>"


class Placement(Base):
    """
    One student placed at one company in one placement year.

    Second record set the year and company dropdowns are built from.
    """
    __tablename__ = "placements"

    id = Column(Integer, primary_key=True)
    year = Column(String(10), nullable=False, index=True)
    company_id = Column(Integer, ForeignKey("companies.id"), nullable=False)
    student_id = Column(Integer, ForeignKey("student_profiles.id"), nullable=False)
    created_at = Column(DateTime, server_default=func.now())

    company = relationship("Company")
    student = relationship("StudentProfile")

    __table_args__ = (
        Index("ix_placements_year_company", "year", "company_id"),
    )

    def __repr__(self):
        return f"<Placement(id={self.id}, year={self.year}, company_id={self.company_id})>"


class PlacementPhoto(Base):
    """Gallery photo from a placement drive."""
    __tablename__ = "placement_photos"

    id = Column(Integer, primary_key=True)
    year = Column(String(10), nullable=False)
    company_id = Column(Integer, ForeignKey("companies.id"), nullable=False)
    image_url = Column(String(1024), nullable=False)
    caption = Column(String(512))
    created_at = Column(DateTime, server_default=func.now())

    __table_args__ = (
        Index("ix_placement_photos_year_company", "year", "company_id"),
    )

    def __repr__(self):
        return f"<PlacementPhoto(id={self.id}, year={self.year}, company_id={self.company_id})>"
