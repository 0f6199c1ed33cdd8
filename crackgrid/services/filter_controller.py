"""
Cascading year -> company filter controller.

Owns the selection (year, company) and everything derived from it:
- years: option list, survives selection changes until refreshed
- companies: option list for the selected year
- students / photos / interview_doc: details for (year, company)

Selection changes clear dependent state immediately, before the dependent
fetch resolves. Every fetch is tagged with a per-entity request number and
the selection it was issued for; a completion whose tag no longer matches is
discarded, so the latest selection always wins regardless of arrival order.
"""

import asyncio
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import date, datetime, timezone
from enum import Enum
from typing import Callable, List, Optional, Tuple

from crackgrid import config
from crackgrid.logger import _log_debug, _log_error, _log_info, _log_warning
from crackgrid.models import AnalyticsAction
from crackgrid.services import catalog
from crackgrid.services.data_access import DataAccess, record_event_quietly
from crackgrid.services.errors import DataAccessError
from crackgrid.services.links import embed_url
from crackgrid.services.types import (
    CompanyOption,
    InterviewDocument,
    PlacedStudent,
    PlacementPhoto,
)


class ErrorKind(str, Enum):
    """User-facing error states."""
    DATA_UNAVAILABLE = "data_unavailable"  # option lists could not be loaded
    TRANSPORT_ERROR = "transport_error"    # detail fetch failed
    NO_DATA_FOUND = "no_data_found"        # nothing uploaded for this selection


ERROR_MESSAGES = {
    ("years", ErrorKind.DATA_UNAVAILABLE): "Failed to load years from database",
    ("companies", ErrorKind.DATA_UNAVAILABLE): "Failed to load companies",
    ("details", ErrorKind.TRANSPORT_ERROR): "Error loading document",
    ("details", ErrorKind.NO_DATA_FOUND): "No document found for this selection",
}


@dataclass(frozen=True)
class ControllerState:
    """Immutable copy of the controller state, for rendering."""
    year: Optional[str]
    company: Optional[str]
    years: Tuple[str, ...]
    companies: Tuple[str, ...]
    students: Tuple[PlacedStudent, ...]
    photos: Tuple[PlacementPhoto, ...]
    interview_doc: Optional[InterviewDocument]
    loading: bool
    error: Optional[ErrorKind]
    error_message: Optional[str]


class FilterController:
    """
    Selection state machine for the year/company browser.

    Args:
        data_access: Facade used for every fetch
        today: Returns the current date; used for the fallback year window
    """

    def __init__(self, data_access: DataAccess, today: Callable[[], date] = date.today):
        self._data = data_access
        self._today = today

        # ============ SELECTION ============
        self.year: Optional[str] = None
        self.company: Optional[str] = None

        # ============ DERIVED ============
        self.years: List[str] = []
        self.companies: List[CompanyOption] = []
        self.students: List[PlacedStudent] = []
        self.photos: List[PlacementPhoto] = []
        self.interview_doc: Optional[InterviewDocument] = None

        # ============ STATUS ============
        self.error: Optional[ErrorKind] = None
        self.error_message: Optional[str] = None

        self._in_flight_count = 0
        self._years_request = 0
        self._companies_request = 0
        self._details_request = 0
        self._background_tasks = set()

    # ============ STATUS HELPERS ============

    @property
    def loading(self) -> bool:
        return self._in_flight_count > 0

    @property
    def company_names(self) -> List[str]:
        return [c.name for c in self.companies]

    @contextmanager
    def _in_flight(self):
        self._in_flight_count += 1
        try:
            yield
        finally:
            self._in_flight_count -= 1

    def _set_error(self, origin: str, kind: ErrorKind) -> None:
        self.error = kind
        self.error_message = ERROR_MESSAGES[(origin, kind)]

    def _clear_error(self) -> None:
        self.error = None
        self.error_message = None

    def _clear_details(self) -> None:
        # Also invalidates any detail fetch still in flight
        self._details_request += 1
        self.students = []
        self.photos = []
        self.interview_doc = None

    def snapshot(self) -> ControllerState:
        return ControllerState(
            year=self.year,
            company=self.company,
            years=tuple(self.years),
            companies=tuple(self.company_names),
            students=tuple(self.students),
            photos=tuple(self.photos),
            interview_doc=self.interview_doc,
            loading=self.loading,
            error=self.error,
            error_message=self.error_message,
        )

    # ============ YEARS ============

    async def load_years(self) -> None:
        """
        Load the year options from every record source, newest first.

        When the store cannot be reached, the last FALLBACK_YEAR_WINDOW years
        are offered instead so the page stays usable.
        """
        self._years_request += 1
        request = self._years_request
        _log_info("Fetching years")

        with self._in_flight():
            try:
                years = await catalog.available_years(self._data)
            except DataAccessError as e:
                if request != self._years_request:
                    _log_debug("Discarding stale year failure")
                    return
                _log_error(f"Error fetching years: {e}")
                self.years = catalog.fallback_years(self._today().year, config.FALLBACK_YEAR_WINDOW)
                self._set_error("years", ErrorKind.DATA_UNAVAILABLE)
                return

        if request != self._years_request:
            _log_debug("Discarding stale year list")
            return

        self.years = years
        self._clear_error()

    async def select_year(self, year: Optional[str]) -> None:
        """
        Change the selected year.

        Company, details and error are cleared before the company fetch
        starts; an empty year also clears the company list.
        """
        year = year or None
        self.year = year
        self.company = None
        self._clear_details()
        self._clear_error()

        if year:
            await self.load_companies(year)
        else:
            self._companies_request += 1
            self.companies = []

    # ============ COMPANIES ============

    def _companies_stale(self, request: int, year: str) -> bool:
        return request != self._companies_request or self.year != year

    async def load_companies(self, year: str) -> None:
        """Load the company options for `year`, sorted by name."""
        self._companies_request += 1
        request = self._companies_request
        _log_info(f"Fetching companies for year {year}")

        with self._in_flight():
            try:
                companies = await catalog.available_companies(self._data, year)
            except DataAccessError as e:
                if self._companies_stale(request, year):
                    _log_debug(f"Discarding stale company failure for {year}")
                    return
                _log_error(f"Error fetching companies for {year}: {e}")
                self.companies = []
                self._set_error("companies", ErrorKind.DATA_UNAVAILABLE)
                return

        if self._companies_stale(request, year):
            _log_debug(f"Discarding stale company list for {year}")
            return

        self.companies = companies
        self._clear_error()

    async def select_company(self, company: Optional[str]) -> None:
        """
        Change the selected company and load its details.

        Ignored (company stays empty) while no year is selected.
        """
        company = company or None
        if company and not self.year:
            _log_warning(f"Ignoring company '{company}' selected without a year")
            company = None

        self.company = company
        self._clear_details()
        self._clear_error()

        if self.year and company:
            await self.load_details(self.year, company)

    # ============ DETAILS ============

    def _details_stale(self, request: int, year: str, company: str) -> bool:
        return (
            request != self._details_request
            or self.year != year
            or self.company != company
        )

    def _apply_detail_failure(self, kind: ErrorKind) -> None:
        self.students = []
        self.photos = []
        self.interview_doc = None
        self._set_error("details", kind)

    async def load_details(self, year: str, company: str) -> None:
        """
        Load students, photos and the interview document for a drive.

        All or nothing: a failure in any lookup leaves all three empty.
        """
        self._details_request += 1
        request = self._details_request

        option = catalog.find_company(self.companies, company)
        if option is None:
            if not self._details_stale(request, year, company):
                _log_warning(f"Company '{company}' has no records in {year}")
                self._apply_detail_failure(ErrorKind.NO_DATA_FOUND)
            return

        _log_info(f"Fetching details for {option.name} - {year}")

        with self._in_flight():
            try:
                details = await self._data.get_company_details(year, option.company_id)
            except DataAccessError as e:
                if self._details_stale(request, year, company):
                    _log_debug(f"Discarding stale detail failure for {company} - {year}")
                    return
                _log_error(f"Error fetching details for {company} - {year}: {e}")
                self._apply_detail_failure(ErrorKind.TRANSPORT_ERROR)
                return

        if self._details_stale(request, year, company):
            _log_debug(f"Discarding stale details for {company} - {year}")
            return

        if details.is_empty():
            self._apply_detail_failure(ErrorKind.NO_DATA_FOUND)
            return

        self.students = list(details.students)
        self.photos = list(details.photos)
        self.interview_doc = details.interview_doc
        self._clear_error()

    # ============ MANUAL ACTIONS ============

    async def refresh(self) -> None:
        """Reload the option lists; the current selection and details stay."""
        await self.load_years()
        if self.year:
            await self.load_companies(self.year)

    def reset_selections(self) -> None:
        """Clear selection, derived lists and error in one step."""
        self.year = None
        self.company = None
        self._companies_request += 1
        self.companies = []
        self._clear_details()
        self._clear_error()

    # ============ DOCUMENT ACTIONS ============

    def preview_url(self) -> str:
        """Embeddable preview link for the current document, or ''."""
        if self.interview_doc is None:
            return ""
        return embed_url(self.interview_doc.questions_link)

    async def open_document(self, action: AnalyticsAction = AnalyticsAction.VIEW) -> Optional[str]:
        """
        Link to open for the current document.

        The analytics event is written in a detached task whose outcome is
        discarded; the link is returned without waiting for it.
        """
        doc = self.interview_doc
        if doc is None:
            return None

        kind = AnalyticsAction(action).value
        task = asyncio.create_task(
            record_event_quietly(self._data, kind, doc.id, datetime.now(timezone.utc))
        )
        self._background_tasks.add(task)
        task.add_done_callback(self._background_tasks.discard)

        return doc.questions_link

    async def flush_events(self) -> None:
        """Wait for pending analytics writes (used on shutdown)."""
        if self._background_tasks:
            await asyncio.gather(*list(self._background_tasks), return_exceptions=True)
