"""
InterviewDocument model - one interview-question document per drive.

Students share the questions they were asked as a Google Doc; this table
stores the link for a (year, company) pair. It is also one of the two
record sets the year and company dropdowns are built from.
"""

from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from crackgrid.database import Base


class InterviewDocument(Base):
    """
    Interview questions for a company's drive in a given year.

    At most one row exists per (year, company_id).
    """
    __tablename__ = "interview_documents"

    id = Column(Integer, primary_key=True)

    # ============ SCOPE ============
    year = Column(String(10), nullable=False, index=True)  # e.g. "2024"
    company_id = Column(Integer, ForeignKey("companies.id"), nullable=False, index=True)

    # ============ CONTENT ============
    title = Column(String(255))
    questions_link = Column(String(1024), nullable=False)  # Google Docs URL

    # ============ TIMESTAMPS ============
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    company = relationship("Company")

    __table_args__ = (
        UniqueConstraint("year", "company_id", name="uq_interview_documents_year_company"),
    )

    def __repr__(self):
        return f"<InterviewDocument(id={self.id}, year={self.year}, company_id={self.company_id})>"
