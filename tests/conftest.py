"""
Pytest fixtures for CrackGrid tests.

Provides an in-memory SQLite database shared across threads (the facade runs
queries in worker threads), a seeded copy of it, and a FastAPI TestClient
wired to that database.

Seeded data:
    interview documents: 2023 Acme, 2022 Beta
    placements:          2022 Acme (Asha Patil), 2022 Cee (Ravi Kumar),
                         2021 Beta (Meera Joshi)
    photos:              2022 Cee
"""

import os

# Must be set before crackgrid.config is imported
os.environ["DATABASE_URL"] = "sqlite://"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

from crackgrid.database import get_db, init_db, make_engine
from crackgrid.services import db_service
from crackgrid.services.data_access import SqlDataAccess, get_data_access


ACME_LINK = "https://docs.google.com/document/d/acme-2023_Qs/edit?usp=sharing"
BETA_LINK = "https://docs.google.com/document/d/beta2022/edit"


@pytest.fixture()
def engine():
    engine = make_engine("sqlite://")
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture()
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False, autocommit=False)


@pytest.fixture()
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def seeded_db(db):
    db_service.upsert_interview_document(db, "2023", "Acme", ACME_LINK, title="Acme SDE Questions")
    db_service.upsert_interview_document(db, "2022", "Beta", BETA_LINK)
    db_service.add_placement(
        db, "2022", "Acme", "Asha Patil",
        branch="BSc Computer Science", graduation_year="2022",
        linkedin_url="https://www.linkedin.com/in/ashapatil"
    )
    db_service.add_placement(db, "2022", "Cee", "Ravi Kumar", branch="BSc Electronics", graduation_year="2022")
    db_service.add_placement(db, "2021", "Beta", "Meera Joshi", branch="BCA", graduation_year="2021")
    db_service.add_placement_photo(db, "2022", "Cee", "https://img.example.com/cee-2022.jpg", caption="Offer day")
    return db


@pytest.fixture()
def data_access(session_factory):
    return SqlDataAccess(session_factory)


@pytest.fixture()
def client(session_factory, seeded_db):
    from main import app

    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_data_access] = lambda: SqlDataAccess(session_factory)
    yield TestClient(app)
    app.dependency_overrides.clear()
