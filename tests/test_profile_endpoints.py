from __future__ import annotations

import pytest
from sqlalchemy import func, select

from insightdesk.core.config import settings
from insightdesk.core.errors import UpstreamError
from insightdesk.models.industry_insight import IndustryInsight
from insightdesk.models.users import User
from insightdesk.services import profile_update_service, user_resolver


@pytest.fixture
def wired(monkeypatch, identity_provider, insight_payload):
    monkeypatch.setattr(settings, "AUTH_MODE", "legacy_header")
    monkeypatch.setattr(user_resolver, "fetch_external_profile", identity_provider)
    generated: list[str] = []
    invalidated: list[str] = []

    def fake_generate(industry, timeout_seconds=None):
        generated.append(industry)
        return insight_payload

    monkeypatch.setattr(profile_update_service, "generate_insights", fake_generate)
    monkeypatch.setattr(profile_update_service, "signal_path_stale", invalidated.append)
    return {"generated": generated, "invalidated": invalidated}


def test_update_profile_endpoint_persists_profile_and_insight(client, db_session, identity_provider, wired):
    identity_provider.add("user_api", "api@example.com")

    response = client.put(
        "/profile",
        headers={"X-User-Id": "user_api"},
        json={
            "industry": "tech-software-development",
            "experience": 4,
            "bio": "Full-stack developer",
            "skills": ["TypeScript", " ", "Python"],
        },
    )

    assert response.status_code == 200
    payload = response.json()
    assert payload["email"] == "api@example.com"
    assert payload["industry"] == "tech-software-development"
    assert payload["skills"] == ["TypeScript", "Python"]
    assert wired["generated"] == ["tech-software-development"]
    assert wired["invalidated"] == ["/"]

    count = db_session.execute(select(func.count()).select_from(IndustryInsight)).scalar_one()
    assert count == 1


def test_onboarding_status_endpoint_flips_after_update(client, identity_provider, wired):
    identity_provider.add("user_api", "api@example.com")
    headers = {"X-User-Id": "user_api"}

    before = client.get("/profile/onboarding-status", headers=headers)
    assert before.status_code == 200
    assert before.json() == {"is_onboarded": False}

    client.put(
        "/profile",
        headers=headers,
        json={"industry": "finance-banking", "experience": 2, "bio": "", "skills": []},
    )

    after = client.get("/profile/onboarding-status", headers=headers)
    assert after.json() == {"is_onboarded": True}


def test_read_profile_creates_user_on_first_sight(client, db_session, identity_provider, wired):
    identity_provider.add("user_first", "first@example.com", image_url="https://img.example.com/a.png")

    response = client.get("/profile", headers={"X-User-Id": "user_first"})

    assert response.status_code == 200
    assert response.json()["image_url"] == "https://img.example.com/a.png"
    count = db_session.execute(select(func.count()).select_from(User)).scalar_one()
    assert count == 1


def test_missing_identity_is_rejected_with_401(client, wired):
    response = client.put(
        "/profile",
        json={"industry": "finance-banking", "experience": 2, "bio": "", "skills": []},
    )

    assert response.status_code == 401
    assert response.json()["detail"]["code"] == "UNAUTHORIZED"
    assert wired["generated"] == []


def test_onboarding_status_without_identity_is_401(client, wired):
    response = client.get("/profile/onboarding-status")

    assert response.status_code == 401


def test_identity_provider_outage_maps_to_502(client, monkeypatch, wired):
    def failing_fetch(external_id):
        raise UpstreamError("Identity provider lookup failed with HTTP 503")

    monkeypatch.setattr(user_resolver, "fetch_external_profile", failing_fetch)

    response = client.get("/profile", headers={"X-User-Id": "user_down"})

    assert response.status_code == 502
    assert response.json()["detail"]["code"] == "UPSTREAM_ERROR"


def test_failed_update_returns_generic_message(client, identity_provider, monkeypatch, wired):
    identity_provider.add("user_api", "api@example.com")

    def failing_generate(industry, timeout_seconds=None):
        raise RuntimeError("model quota exhausted")

    monkeypatch.setattr(profile_update_service, "generate_insights", failing_generate)

    response = client.put(
        "/profile",
        headers={"X-User-Id": "user_api"},
        json={"industry": "finance-banking", "experience": 2, "bio": "", "skills": []},
    )

    assert response.status_code == 500
    detail = response.json()["detail"]
    assert detail == {"code": "PROFILE_UPDATE_FAILED", "message": "Failed to update profile"}


def test_blank_industry_is_rejected(client, wired):
    response = client.put(
        "/profile",
        headers={"X-User-Id": "user_api"},
        json={"industry": "   ", "experience": 2, "bio": "", "skills": []},
    )

    assert response.status_code == 422
