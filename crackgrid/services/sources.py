"""
Record sets the year and company dropdowns are built from.

Interview documents and placements are independent tables that both carry a
(year, company_id) pair. Each is wrapped in a RecordSource so the catalog can
ask every source the same two questions and merge the answers.
"""

from typing import List

from sqlalchemy.orm import Session

from crackgrid.models import InterviewDocument, Placement
from crackgrid.services.types import YearRow


class RecordSource:
    """
    A table that contributes years and company ids to the filters.

    Subclasses only name the model; the model must have `year` and
    `company_id` columns.
    """
    name: str = ""
    model = None

    def years(self, db: Session) -> List[YearRow]:
        rows = db.query(self.model.year).distinct().all()
        return [YearRow(year=r[0], source=self.name) for r in rows if r[0]]

    def company_ids(self, db: Session, year: str) -> List[int]:
        rows = db.query(self.model.company_id).filter(
            self.model.year == year
        ).distinct().all()
        return [r[0] for r in rows if r[0] is not None]

    def __repr__(self):
        return f"<RecordSource({self.name})>"


class InterviewDocumentSource(RecordSource):
    name = "interview_documents"
    model = InterviewDocument


class PlacementSource(RecordSource):
    name = "placements"
    model = Placement


RECORD_SOURCES: List[RecordSource] = [InterviewDocumentSource(), PlacementSource()]
