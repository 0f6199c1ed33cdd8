"""
Company directory.

Every other table refers to companies by id; the name shown in the company
dropdown is resolved through this table.
"""

from sqlalchemy import Column, Integer, String, DateTime
from sqlalchemy.sql import func
from crackgrid.database import Base


class Company(Base):
    """A recruiting company, referenced by documents, placements and photos."""
    __tablename__ = "companies"

    id = Column(Integer, primary_key=True)
    name = Column(String(255), unique=True, nullable=False, index=True)
    created_at = Column(DateTime, server_default=func.now())

    def __repr__(self):
        return f"<Company(id={self.id}, name={self.name})>"
