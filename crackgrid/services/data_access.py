"""
Data access facade.

The filter controller and the browse endpoints only ever talk to the store
through the five operations of DataAccess. SqlDataAccess implements them on
top of db_service, running each call in a worker thread with its own session
so the event loop never blocks on the database.
"""

import asyncio
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Callable, Iterable, List, Tuple

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from crackgrid.database import SessionLocal
from crackgrid.logger import _log_debug, _log_warning
from crackgrid.services import db_service
from crackgrid.services.errors import TransportError
from crackgrid.services.types import CompanyDetails, YearRow


class DataAccess(ABC):
    """Read queries and the analytics write the controller depends on."""

    @abstractmethod
    async def list_years(self) -> List[YearRow]:
        """Raw year rows from every record source. Raises TransportError."""

    @abstractmethod
    async def list_company_ids_for_year(self, year: str) -> List[int]:
        """Raw company ids for `year` from every record source. Raises TransportError."""

    @abstractmethod
    async def resolve_company_names(self, company_ids: Iterable[int]) -> List[Tuple[int, str]]:
        """(id, name) pairs for the ids that exist in the company directory."""

    @abstractmethod
    async def get_company_details(self, year: str, company_id: int) -> CompanyDetails:
        """Students, photos and document; a missing document is None, not an error."""

    @abstractmethod
    async def record_analytics_event(self, kind: str, subject_id: int, timestamp: datetime) -> None:
        """Append a view/download event. Best effort."""


class SqlDataAccess(DataAccess):
    """DataAccess backed by a SQLAlchemy session factory."""

    def __init__(self, session_factory: Callable[[], Session] = SessionLocal):
        self.session_factory = session_factory

    def _call(self, fn, *args):
        db = self.session_factory()
        try:
            return fn(db, *args)
        except SQLAlchemyError as e:
            raise TransportError(f"{fn.__name__} failed: {e}") from e
        finally:
            db.close()

    async def _run(self, fn, *args):
        return await asyncio.to_thread(self._call, fn, *args)

    async def list_years(self) -> List[YearRow]:
        return await self._run(db_service.list_year_rows)

    async def list_company_ids_for_year(self, year: str) -> List[int]:
        return await self._run(db_service.list_company_ids_for_year, year)

    async def resolve_company_names(self, company_ids: Iterable[int]) -> List[Tuple[int, str]]:
        return await self._run(db_service.resolve_company_names, set(company_ids))

    async def get_company_details(self, year: str, company_id: int) -> CompanyDetails:
        return await self._run(db_service.get_company_details, year, company_id)

    async def record_analytics_event(self, kind: str, subject_id: int, timestamp: datetime) -> None:
        await self._run(db_service.record_analytics_event, subject_id, kind, timestamp)


async def record_event_quietly(
    data_access: DataAccess,
    kind: str,
    subject_id: int,
    timestamp: datetime
) -> bool:
    """
    Record an analytics event, logging and discarding any failure.

    Never raises: the action the event accompanies must go ahead regardless.

    Returns:
        True if the event was written
    """
    try:
        await data_access.record_analytics_event(kind, subject_id, timestamp)
    except Exception as e:
        _log_warning(f"Analytics event '{kind}' for document {subject_id} dropped: {e}")
        return False

    _log_debug(f"Recorded '{kind}' event for document {subject_id}")
    return True


def get_data_access() -> DataAccess:
    """FastAPI dependency returning the default SQL-backed facade."""
    return SqlDataAccess(SessionLocal)
