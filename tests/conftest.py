"""Shared fixtures: in-memory SQLite, sample models and a test client."""

import pytest
from fastapi.testclient import TestClient
from sample_models import SAMPLE_MODELS, SampleBase

from mdd_rest.api import create_app
from mdd_rest.config import Settings
from mdd_rest.database import create_db_engine, create_session_factory
from mdd_rest.registry import ModelInfoRegistry
from mdd_rest.services import ServiceContext

BASE_PATH = "/api/rest"

TEST_SETTINGS = Settings(
    database_url="sqlite://",
    database_echo=False,
    database_create_all=True,
    api_base_path=BASE_PATH,
    page_size_default=10,
    page_size_max=100,
    cors_allowed_origin="http://localhost:9000",
    log_level="DEBUG",
    log_format="human",
)


@pytest.fixture
def engine():
    """A fresh in-memory database per test."""
    engine = create_db_engine("sqlite://", echo=False)
    yield engine
    engine.dispose()


@pytest.fixture
def registry():
    return ModelInfoRegistry.create(SAMPLE_MODELS, base_path=BASE_PATH)


@pytest.fixture
def context(registry):
    return ServiceContext.create(registry)


@pytest.fixture
def session(engine):
    """A session on a database with the sample tables created."""
    SampleBase.metadata.create_all(engine)
    session = create_session_factory(engine)()
    yield session
    session.close()


@pytest.fixture
def app(engine):
    return create_app(models=SAMPLE_MODELS, settings=TEST_SETTINGS, engine=engine)


@pytest.fixture
def client(app):
    """Create a test client; entering it runs the app lifespan."""
    with TestClient(app) as client:
        yield client
