import pytest
from fastapi.testclient import TestClient

from app.config import Settings
from app.database import init_db
from app.main import create_app
from app.services.job_store import save_jobs
from tests.helpers import API_KEY, SAMPLE_POSTINGS, FakeJSearchClient


@pytest.fixture
def settings():
    return Settings(jsearch_api_key=API_KEY, database_url="sqlite://")


@pytest.fixture
def upstream():
    return FakeJSearchClient()


@pytest.fixture
def app(settings, upstream):
    application = create_app(settings, jsearch_client=upstream)
    init_db(application.state.engine)
    yield application
    application.state.engine.dispose()


@pytest.fixture
def client(app):
    return TestClient(app, headers={"X-RapidAPI-Key": API_KEY})


@pytest.fixture
def db(app):
    session = app.state.session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def seeded(db):
    save_jobs(db, SAMPLE_POSTINGS)
    return db
