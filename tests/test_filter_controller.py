"""
Tests for FilterController: cascading selection, error states and
last-selection-wins ordering of concurrent fetches.
"""

import asyncio
import random
from datetime import date

import pytest
from sqlalchemy.exc import OperationalError

from crackgrid.models import AnalyticsAction
from crackgrid.services import db_service
from crackgrid.services.filter_controller import ErrorKind, FilterController
from crackgrid.services.types import (
    CompanyDetails,
    InterviewDocument,
    PlacedStudent,
    PlacementPhoto,
    YearRow,
)

from fakes import FakeDataAccess

ACME_LINK = "https://docs.google.com/document/d/acmeQ23/edit"


def make_fake():
    acme_2023 = CompanyDetails(
        students=[
            PlacedStudent("Asha Patil", "BSc Computer Science", "2023", "https://www.linkedin.com/in/ashapatil"),
            PlacedStudent("Ravi Kumar", "BSc Electronics", "2023"),
        ],
        photos=[PlacementPhoto(id=5, image_url="https://img.example.com/acme.jpg", caption="Offer day")],
        interview_doc=InterviewDocument(id=11, title="Acme Questions", questions_link=ACME_LINK),
    )
    cee_2022 = CompanyDetails(
        students=[PlacedStudent("Meera Joshi", "BCA", "2022")],
    )
    return FakeDataAccess(
        document_years=["2023", "2022"],
        placement_years=["2022", "2021"],
        company_ids={"2023": [1, 2, 2, 3], "2022": [2, 3], "2021": [1]},
        names={1: "Acme", 2: "Beta", 3: "Cee"},
        details={("2023", 1): acme_2023, ("2022", 3): cee_2022},
    )


def make_controller(fake=None):
    return FilterController(fake or make_fake(), today=lambda: date(2026, 10, 17))


# ============ YEARS ============

class TestLoadYears:
    def test_union_deduplicated_newest_first(self):
        ctrl = make_controller()
        asyncio.run(ctrl.load_years())

        assert ctrl.years == ["2023", "2022", "2021"]
        assert ctrl.error is None
        assert not ctrl.loading

    def test_failure_falls_back_to_recent_years(self):
        fake = make_fake()
        fake.fail.add("list_years")
        ctrl = make_controller(fake)
        asyncio.run(ctrl.load_years())

        assert ctrl.years == ["2026", "2025", "2024", "2023", "2022"]
        assert ctrl.error == ErrorKind.DATA_UNAVAILABLE
        assert ctrl.error_message == "Failed to load years from database"
        assert not ctrl.loading

    def test_success_clears_previous_failure(self):
        fake = make_fake()
        fake.fail.add("list_years")
        ctrl = make_controller(fake)

        async def scenario():
            await ctrl.load_years()
            fake.fail.clear()
            await ctrl.load_years()

        asyncio.run(scenario())
        assert ctrl.years == ["2023", "2022", "2021"]
        assert ctrl.error is None

    def test_success_clears_detail_error(self):
        ctrl = make_controller()

        async def scenario():
            await ctrl.select_year("2023")
            await ctrl.select_company("Beta")
            assert ctrl.error == ErrorKind.NO_DATA_FOUND
            await ctrl.load_years()

        asyncio.run(scenario())
        assert ctrl.error is None
        assert ctrl.error_message is None

    def test_loading_while_in_flight(self):
        fake = make_fake()
        ctrl = make_controller(fake)

        async def scenario():
            gate = fake.gate("list_years")
            task = asyncio.create_task(ctrl.load_years())
            await asyncio.sleep(0)
            assert ctrl.loading
            gate.set()
            await task

        asyncio.run(scenario())
        assert not ctrl.loading


# ============ COMPANIES ============

class TestSelectYear:
    def test_loads_companies_sorted_and_deduplicated(self):
        ctrl = make_controller()
        asyncio.run(ctrl.select_year("2023"))

        assert ctrl.year == "2023"
        assert ctrl.company_names == ["Acme", "Beta", "Cee"]
        assert not ctrl.loading

    def test_clears_dependent_state_before_fetch_resolves(self):
        fake = make_fake()
        ctrl = make_controller(fake)

        async def scenario():
            await ctrl.select_year("2023")
            await ctrl.select_company("Acme")
            assert ctrl.students

            gate = fake.gate("list_company_ids_for_year", "2022")
            task = asyncio.create_task(ctrl.select_year("2022"))
            await asyncio.sleep(0)

            assert ctrl.year == "2022"
            assert ctrl.company is None
            assert ctrl.students == []
            assert ctrl.photos == []
            assert ctrl.interview_doc is None
            assert ctrl.error is None
            assert ctrl.loading

            gate.set()
            await task

        asyncio.run(scenario())
        assert ctrl.company_names == ["Beta", "Cee"]

    def test_empty_year_clears_companies_without_fetching(self):
        fake = make_fake()
        ctrl = make_controller(fake)

        async def scenario():
            await ctrl.select_year("2023")
            calls_before = len(fake.calls)
            await ctrl.select_year("")
            return calls_before

        calls_before = asyncio.run(scenario())
        assert ctrl.year is None
        assert ctrl.companies == []
        assert len(fake.calls) == calls_before

    def test_company_failure_empties_list(self):
        fake = make_fake()
        fake.fail.add("resolve_company_names")
        ctrl = make_controller(fake)
        asyncio.run(ctrl.select_year("2023"))

        assert ctrl.companies == []
        assert ctrl.error == ErrorKind.DATA_UNAVAILABLE
        assert ctrl.error_message == "Failed to load companies"
        assert not ctrl.loading

    @pytest.mark.parametrize("first_to_arrive", ["2023", "2022"])
    def test_later_selection_wins_regardless_of_arrival_order(self, first_to_arrive):
        fake = make_fake()
        ctrl = make_controller(fake)

        async def scenario():
            gates = {
                "2023": fake.gate("list_company_ids_for_year", "2023"),
                "2022": fake.gate("list_company_ids_for_year", "2022"),
            }
            tasks = {"2023": asyncio.create_task(ctrl.select_year("2023"))}
            await asyncio.sleep(0)
            tasks["2022"] = asyncio.create_task(ctrl.select_year("2022"))
            await asyncio.sleep(0)

            second_to_arrive = "2022" if first_to_arrive == "2023" else "2023"
            for year in (first_to_arrive, second_to_arrive):
                gates[year].set()
                await tasks[year]

        asyncio.run(scenario())
        assert ctrl.year == "2022"
        assert ctrl.company_names == ["Beta", "Cee"]
        assert not ctrl.loading

    def test_stale_failure_does_not_clobber_newer_year(self):
        fake = make_fake()
        ctrl = make_controller(fake)

        async def scenario():
            gate = fake.gate("list_company_ids_for_year", "2023")
            stale = asyncio.create_task(ctrl.select_year("2023"))
            await asyncio.sleep(0)
            await ctrl.select_year("2022")
            fake.fail.add("list_company_ids_for_year")
            gate.set()
            await stale

        asyncio.run(scenario())
        assert ctrl.company_names == ["Beta", "Cee"]
        assert ctrl.error is None


# ============ DETAILS ============

class TestSelectCompany:
    def test_loads_details(self):
        ctrl = make_controller()

        async def scenario():
            await ctrl.select_year("2023")
            await ctrl.select_company("Acme")

        asyncio.run(scenario())
        assert [s.full_name for s in ctrl.students] == ["Asha Patil", "Ravi Kumar"]
        assert [p.id for p in ctrl.photos] == [5]
        assert ctrl.interview_doc.questions_link == ACME_LINK
        assert ctrl.preview_url() == "https://docs.google.com/document/d/acmeQ23/preview"
        assert ctrl.error is None

    def test_company_without_year_is_ignored(self):
        fake = make_fake()
        ctrl = make_controller(fake)
        asyncio.run(ctrl.select_company("Acme"))

        assert ctrl.company is None
        assert ctrl.year is None
        assert not any(op == "get_company_details" for op, _ in fake.calls)

    def test_clearing_company_clears_details(self):
        ctrl = make_controller()

        async def scenario():
            await ctrl.select_year("2023")
            await ctrl.select_company("Acme")
            await ctrl.select_company(None)

        asyncio.run(scenario())
        assert ctrl.company is None
        assert ctrl.students == []
        assert ctrl.interview_doc is None

    def test_nothing_found_is_reported_distinctly(self):
        ctrl = make_controller()

        async def scenario():
            await ctrl.select_year("2023")
            await ctrl.select_company("Beta")

        asyncio.run(scenario())
        assert ctrl.error == ErrorKind.NO_DATA_FOUND
        assert ctrl.error_message == "No document found for this selection"
        assert ctrl.students == []
        assert ctrl.photos == []
        assert ctrl.interview_doc is None

    def test_unknown_company_name_is_no_data(self):
        ctrl = make_controller()

        async def scenario():
            await ctrl.select_year("2023")
            await ctrl.select_company("Globex")

        asyncio.run(scenario())
        assert ctrl.error == ErrorKind.NO_DATA_FOUND
        assert ctrl.company == "Globex"

    def test_transport_failure_leaves_no_partial_details(self):
        fake = make_fake()
        ctrl = make_controller(fake)

        async def scenario():
            await ctrl.select_year("2023")
            await ctrl.select_company("Acme")
            assert ctrl.students
            fake.fail.add("get_company_details")
            await ctrl.load_details("2023", "Acme")

        asyncio.run(scenario())
        assert ctrl.students == []
        assert ctrl.photos == []
        assert ctrl.interview_doc is None
        assert ctrl.error == ErrorKind.TRANSPORT_ERROR
        assert ctrl.error_message == "Error loading document"
        assert not ctrl.loading

    def test_students_lookup_failure_discards_photos_and_document(self, seeded_db, data_access, monkeypatch):
        ctrl = FilterController(data_access)

        async def scenario():
            await ctrl.select_year("2022")
            await ctrl.select_company("Cee")
            assert ctrl.students and ctrl.photos

            def broken(*args):
                raise OperationalError("SELECT student_profiles", {}, Exception("connection reset"))

            monkeypatch.setattr(db_service, "get_placed_students", broken)
            await ctrl.select_company("Cee")

        asyncio.run(scenario())
        assert ctrl.students == []
        assert ctrl.photos == []
        assert ctrl.interview_doc is None
        assert ctrl.error == ErrorKind.TRANSPORT_ERROR

    def test_later_company_wins(self):
        fake = make_fake()
        ctrl = make_controller(fake)

        async def scenario():
            await ctrl.select_year("2023")
            gate = fake.gate("get_company_details", ("2023", 1))
            stale = asyncio.create_task(ctrl.select_company("Acme"))
            await asyncio.sleep(0)
            await ctrl.select_company("Beta")
            gate.set()
            await stale

        asyncio.run(scenario())
        assert ctrl.company == "Beta"
        assert ctrl.students == []
        assert ctrl.error == ErrorKind.NO_DATA_FOUND

    def test_year_change_discards_in_flight_details(self):
        fake = make_fake()
        ctrl = make_controller(fake)

        async def scenario():
            await ctrl.select_year("2023")
            gate = fake.gate("get_company_details", ("2023", 1))
            stale = asyncio.create_task(ctrl.select_company("Acme"))
            await asyncio.sleep(0)
            await ctrl.select_year("2022")
            gate.set()
            await stale

        asyncio.run(scenario())
        assert ctrl.year == "2022"
        assert ctrl.company is None
        assert ctrl.students == []
        assert ctrl.interview_doc is None
        assert not ctrl.loading


# ============ REFRESH / RESET ============

def test_refresh_reloads_lists_and_keeps_selection():
    fake = make_fake()
    ctrl = make_controller(fake)

    async def scenario():
        await ctrl.load_years()
        await ctrl.select_year("2023")
        await ctrl.select_company("Acme")

        fake.year_rows.append(YearRow(year="2024", source="placements"))
        fake.company_ids["2023"].append(4)
        fake.names[4] = "Delta"
        await ctrl.refresh()

    asyncio.run(scenario())
    assert ctrl.years == ["2024", "2023", "2022", "2021"]
    assert ctrl.company_names == ["Acme", "Beta", "Cee", "Delta"]
    assert ctrl.year == "2023"
    assert ctrl.company == "Acme"
    assert len(ctrl.students) == 2


def test_refresh_without_year_only_reloads_years():
    fake = make_fake()
    ctrl = make_controller(fake)
    asyncio.run(ctrl.refresh())

    assert ctrl.years == ["2023", "2022", "2021"]
    assert not any(op == "list_company_ids_for_year" for op, _ in fake.calls)


def test_refresh_success_clears_earlier_errors():
    fake = make_fake()
    ctrl = make_controller(fake)

    async def scenario():
        await ctrl.select_year("2023")
        await ctrl.select_company("Beta")
        await ctrl.refresh()

    asyncio.run(scenario())
    assert ctrl.error is None
    assert ctrl.company == "Beta"

    fake.fail.add("list_years")
    asyncio.run(ctrl.load_years())
    assert ctrl.error == ErrorKind.DATA_UNAVAILABLE

    fake.fail.clear()
    asyncio.run(ctrl.load_companies("2023"))
    assert ctrl.error is None
    assert ctrl.company_names == ["Acme", "Beta", "Cee"]


def test_reset_selections_is_idempotent():
    ctrl = make_controller()

    async def scenario():
        await ctrl.load_years()
        await ctrl.select_year("2023")
        await ctrl.select_company("Beta")

    asyncio.run(scenario())
    assert ctrl.error == ErrorKind.NO_DATA_FOUND

    ctrl.reset_selections()
    once = ctrl.snapshot()
    ctrl.reset_selections()
    twice = ctrl.snapshot()

    assert once == twice
    assert once.year is None
    assert once.company is None
    assert once.companies == ()
    assert once.students == ()
    assert once.error is None
    assert once.years == ("2023", "2022", "2021")


def test_reset_discards_in_flight_details():
    fake = make_fake()
    ctrl = make_controller(fake)

    async def scenario():
        await ctrl.select_year("2023")
        gate = fake.gate("get_company_details", ("2023", 1))
        task = asyncio.create_task(ctrl.select_company("Acme"))
        await asyncio.sleep(0)
        ctrl.reset_selections()
        gate.set()
        await task

    asyncio.run(scenario())
    assert ctrl.students == []
    assert ctrl.year is None
    assert not ctrl.loading


# ============ INVARIANTS ============

YEAR_CHOICES = [None, "", "2023", "2022", "2021", "1999"]
COMPANY_CHOICES = [None, "", "Acme", "Beta", "Cee", "Globex"]


@pytest.mark.parametrize("seed", range(25))
def test_company_never_set_without_year(seed):
    rng = random.Random(seed)
    ctrl = make_controller()

    async def scenario():
        await ctrl.load_years()
        for _ in range(20):
            op = rng.choice(["year", "company", "company", "reset", "refresh"])
            if op == "year":
                await ctrl.select_year(rng.choice(YEAR_CHOICES))
            elif op == "company":
                await ctrl.select_company(rng.choice(COMPANY_CHOICES))
            elif op == "reset":
                ctrl.reset_selections()
            else:
                await ctrl.refresh()

            assert ctrl.company is None or ctrl.year
            assert not ctrl.loading

    asyncio.run(scenario())


@pytest.mark.parametrize("seed", range(10))
def test_company_never_set_without_year_with_overlapping_requests(seed):
    rng = random.Random(seed)
    ctrl = make_controller()

    async def scenario():
        tasks = []
        for _ in range(15):
            if rng.random() < 0.5:
                tasks.append(asyncio.create_task(ctrl.select_year(rng.choice(YEAR_CHOICES))))
            else:
                tasks.append(asyncio.create_task(ctrl.select_company(rng.choice(COMPANY_CHOICES))))
            await asyncio.sleep(0)
            assert ctrl.company is None or ctrl.year
        await asyncio.gather(*tasks)
        assert ctrl.company is None or ctrl.year
        assert not ctrl.loading

    asyncio.run(scenario())


# ============ DOCUMENT ACTIONS ============

class TestOpenDocument:
    def _select_acme(self, ctrl):
        async def scenario():
            await ctrl.select_year("2023")
            await ctrl.select_company("Acme")
        asyncio.run(scenario())

    def test_records_event_and_returns_link(self):
        fake = make_fake()
        ctrl = make_controller(fake)
        self._select_acme(ctrl)

        async def scenario():
            link = await ctrl.open_document(AnalyticsAction.DOWNLOAD)
            await ctrl.flush_events()
            return link

        assert asyncio.run(scenario()) == ACME_LINK
        assert [(kind, doc_id) for kind, doc_id, _ in fake.events] == [("download", 11)]

    def test_event_failure_does_not_block_link(self):
        fake = make_fake()
        ctrl = make_controller(fake)
        self._select_acme(ctrl)
        fake.fail.add("record_analytics_event")

        async def scenario():
            link = await ctrl.open_document("view")
            await ctrl.flush_events()
            return link

        assert asyncio.run(scenario()) == ACME_LINK
        assert fake.events == []
        assert ctrl.error is None

    def test_no_document_no_event(self):
        fake = make_fake()
        ctrl = make_controller(fake)
        assert asyncio.run(ctrl.open_document()) is None
        assert fake.events == []
        assert ctrl.preview_url() == ""
