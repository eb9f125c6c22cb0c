"""Pytest configuration and fixtures."""

from typing import List, Optional

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

from app.db.database import Base, IngredientRecord, make_engine
from app.models.recipe import GenerationRequest
from app.services.request_builder import normalize_ingredient_name

SEED_INGREDIENTS = [
    ("Chicken Breast", "Protein", ["pounds", "pieces", "ounces"]),
    ("Rice", "Grains", ["cups", "pounds"]),
    ("Tofu", "Protein", ["blocks", "ounces"]),
    ("Eggs", "Protein", ["pieces", "dozen"]),
    ("Olive Oil", "Oils & Fats", ["tablespoons", "cups"]),
]


class ScriptedGenerationClient:
    """Generation client double: returns canned text or raises a canned error."""

    def __init__(self, response: Optional[str] = None, error: Optional[Exception] = None):
        self.response = response
        self.error = error
        self.calls: List[GenerationRequest] = []

    async def invoke(self, request: GenerationRequest) -> str:
        self.calls.append(request)
        if self.error is not None:
            raise self.error
        return self.response


@pytest.fixture
def engine(tmp_path):
    """File-backed SQLite so every session gets its own connection."""
    engine = make_engine(f"sqlite:///{tmp_path / 'test.db'}")
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False)


@pytest.fixture
def seeded_ids(session_factory):
    """Seed the catalog; returns {name: id}."""
    with session_factory() as session:
        records = [
            IngredientRecord(
                name=name,
                name_normalized=normalize_ingredient_name(name),
                category=category,
                common_units=units,
            )
            for name, category, units in SEED_INGREDIENTS
        ]
        session.add_all(records)
        session.commit()
        return {r.name: r.id for r in records}


@pytest.fixture
def db_session(session_factory):
    with session_factory() as session:
        yield session


@pytest.fixture
def scripted_client():
    """The ScriptedGenerationClient class, for tests that build their own."""
    return ScriptedGenerationClient


@pytest.fixture
def generation_client():
    return ScriptedGenerationClient(response="Sorry, I can't help with that.")


@pytest.fixture
def client(session_factory, generation_client):
    """Test client wired to the test database and the scripted generation client."""
    from app.api.dependencies import get_generation_client, get_session_factory
    from app.db.database import get_db
    from app.main import app
    from app.middleware.rate_limit import limiter

    def _get_db():
        with session_factory() as session:
            yield session

    app.dependency_overrides[get_generation_client] = lambda: generation_client
    app.dependency_overrides[get_session_factory] = lambda: session_factory
    app.dependency_overrides[get_db] = _get_db
    limiter.enabled = False
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
        limiter.enabled = True
