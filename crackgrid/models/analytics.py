"""
DocumentAnalytics model - append-only log of document views and downloads.

Written best-effort; nothing in the application reads it back.
"""

import enum

from sqlalchemy import Column, Integer, String, DateTime, ForeignKey
from sqlalchemy.sql import func
from crackgrid.database import Base


class AnalyticsAction(str, enum.Enum):
    """What the student did with the document."""
    VIEW = "view"
    DOWNLOAD = "download"


class DocumentAnalytics(Base):
    __tablename__ = "document_analytics"

    id = Column(Integer, primary_key=True)
    document_id = Column(Integer, ForeignKey("interview_documents.id"), nullable=False, index=True)
    action_type = Column(String(20), nullable=False)  # view, download
    timestamp = Column(DateTime, server_default=func.now())

    def __repr__(self):
        return f"<DocumentAnalytics(document_id={self.document_id}, action={self.action_type})>"
