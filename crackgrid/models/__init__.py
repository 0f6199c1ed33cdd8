"""
SQLAlchemy models for CrackGrid.

This package contains:
- Company: company directory (id -> display name)
- InterviewDocument: interview-question document per (year, company)
- StudentProfile / Placement: placed-student roster
- PlacementPhoto: drive photo gallery
- DocumentAnalytics: view/download event log
"""

from crackgrid.models.company import Company
from crackgrid.models.interview_document import InterviewDocument
from crackgrid.models.placement import StudentProfile, Placement, PlacementPhoto
from crackgrid.models.analytics import AnalyticsAction, DocumentAnalytics

__all__ = [
    "Company",
    "InterviewDocument",
    "StudentProfile",
    "Placement",
    "PlacementPhoto",
    "AnalyticsAction",
    "DocumentAnalytics",
]
