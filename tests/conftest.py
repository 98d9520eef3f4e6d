import pytest
from fastapi.testclient import TestClient

from querygate.api.db.database import instantiate_db
from querygate.api.db.session import build_engine, build_session_factory
from querygate.api.services.persisted_state import PersistedRecordRepository
from querygate.core.config import Settings
from querygate.main import create_application
from tests.fakes import FakeMongoClient


@pytest.fixture
def settings(tmp_path) -> Settings:
    """Settings pointing the state database at a temporary SQLite file."""
    test_settings = Settings()
    test_settings.DATABASE_URL = f"sqlite:///{tmp_path / 'state.db'}"
    test_settings.LOG_LEVEL = "DEBUG"
    return test_settings


@pytest.fixture
def client(settings):
    with TestClient(create_application(settings)) as test_client:
        yield test_client


@pytest.fixture
def session_factory(settings):
    engine = build_engine(settings.DATABASE_URL)
    instantiate_db(engine)
    yield build_session_factory(engine)
    engine.dispose()


@pytest.fixture
def repository(session_factory) -> PersistedRecordRepository:
    return PersistedRecordRepository(session_factory)


@pytest.fixture(autouse=True)
def reset_fake_mongo_clients():
    FakeMongoClient.instances = []
    yield
    FakeMongoClient.instances = []
