from __future__ import annotations

import os
import sys

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

import importlib

fastapi_app = importlib.import_module("insightdesk.main").app
from insightdesk.db.base import Base
from insightdesk.db.session import get_db
from insightdesk.schemas.identity_provider import ExternalProfile

# Ensure all models are registered with SQLAlchemy metadata
import insightdesk.models  # noqa: F401


@pytest.fixture(scope="session")
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    return engine


@pytest.fixture(scope="function")
def db_session(engine):
    Base.metadata.drop_all(engine)
    Base.metadata.create_all(engine)
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture(scope="function")
def client(engine, db_session):
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    def _override_get_db():
        db = TestingSessionLocal()
        try:
            yield db
        finally:
            db.close()

    fastapi_app.dependency_overrides[get_db] = _override_get_db
    with TestClient(fastapi_app) as test_client:
        yield test_client
    fastapi_app.dependency_overrides.clear()


class FakeIdentityProvider:
    """Stands in for the hosted user API; records every lookup."""

    def __init__(self, profiles: dict[str, ExternalProfile] | None = None):
        self.profiles = dict(profiles or {})
        self.calls: list[str] = []

    def add(self, external_id: str, *emails: str, primary_index: int = 0, **extra) -> None:
        addresses = [
            {"id": f"idn_{external_id}_{i}", "email_address": email}
            for i, email in enumerate(emails)
        ]
        primary = addresses[primary_index]["id"] if addresses else None
        self.profiles[external_id] = ExternalProfile(
            id=external_id,
            email_addresses=addresses,
            primary_email_address_id=primary,
            **extra,
        )

    def __call__(self, external_id: str) -> ExternalProfile:
        self.calls.append(external_id)
        return self.profiles[external_id]


@pytest.fixture
def identity_provider() -> FakeIdentityProvider:
    return FakeIdentityProvider()


@pytest.fixture
def insight_payload() -> dict:
    return {
        "salary_ranges": [
            {"role": "Data Engineer", "min": 90000, "max": 160000, "median": 125000, "location": "US"},
        ],
        "growth_rate": 8.5,
        "demand_level": "High",
        "top_skills": ["Python", "SQL", "Spark"],
        "market_outlook": "Positive",
        "key_trends": ["Lakehouse adoption", "Streaming pipelines"],
        "recommended_skills": ["dbt", "Kafka"],
    }
