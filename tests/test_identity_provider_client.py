from __future__ import annotations

import json

import pytest
import requests

from insightdesk.core.config import settings
from insightdesk.core.errors import ConfigurationError, UpstreamError
from insightdesk.services import identity_provider_client


def _response(status_code: int, body) -> requests.Response:
    response = requests.Response()
    response.status_code = status_code
    response._content = json.dumps(body).encode("utf-8")  # noqa: SLF001
    response.headers["Content-Type"] = "application/json"
    return response


def test_missing_secret_raises_configuration_error_before_request(monkeypatch):
    monkeypatch.setattr(settings, "IDENTITY_PROVIDER_SECRET_KEY", "")

    def _unexpected(*args, **kwargs):
        raise AssertionError("no request expected without a secret")

    monkeypatch.setattr(identity_provider_client.requests, "get", _unexpected)

    with pytest.raises(ConfigurationError):
        identity_provider_client.fetch_external_profile("user_1")


def test_fetch_sends_bearer_secret_and_no_store(monkeypatch):
    monkeypatch.setattr(settings, "IDENTITY_PROVIDER_SECRET_KEY", "sk_test_123")
    monkeypatch.setattr(settings, "IDENTITY_PROVIDER_API_URL", "https://idp.example.com/v1/")
    captured = {}

    def _fake_get(url, headers=None, timeout=None):
        captured["url"] = url
        captured["headers"] = headers
        return _response(
            200,
            {
                "id": "user_1",
                "email_addresses": [
                    {"id": "idn_a", "email_address": "first@example.com"},
                    {"id": "idn_b", "email_address": "primary@example.com"},
                ],
                "primary_email_address_id": "idn_b",
                "first_name": "Ada",
                "unknown_field": True,
            },
        )

    monkeypatch.setattr(identity_provider_client.requests, "get", _fake_get)

    profile = identity_provider_client.fetch_external_profile("user_1")

    assert captured["url"] == "https://idp.example.com/v1/users/user_1"
    assert captured["headers"]["Authorization"] == "Bearer sk_test_123"
    assert captured["headers"]["Cache-Control"] == "no-store"
    assert profile.preferred_email() == "primary@example.com"
    assert profile.display_name() == "Ada"


def test_non_success_status_raises_upstream_error(monkeypatch):
    monkeypatch.setattr(settings, "IDENTITY_PROVIDER_SECRET_KEY", "sk_test_123")
    monkeypatch.setattr(
        identity_provider_client.requests,
        "get",
        lambda url, headers=None, timeout=None: _response(404, {"errors": []}),
    )

    with pytest.raises(UpstreamError):
        identity_provider_client.fetch_external_profile("user_missing")


def test_transport_failure_raises_upstream_error(monkeypatch):
    monkeypatch.setattr(settings, "IDENTITY_PROVIDER_SECRET_KEY", "sk_test_123")

    def _boom(url, headers=None, timeout=None):
        raise requests.ConnectionError("connection refused")

    monkeypatch.setattr(identity_provider_client.requests, "get", _boom)

    with pytest.raises(UpstreamError):
        identity_provider_client.fetch_external_profile("user_1")


def test_preferred_email_falls_back_to_first_address(monkeypatch):
    monkeypatch.setattr(settings, "IDENTITY_PROVIDER_SECRET_KEY", "sk_test_123")
    monkeypatch.setattr(
        identity_provider_client.requests,
        "get",
        lambda url, headers=None, timeout=None: _response(
            200,
            {
                "id": "user_1",
                "email_addresses": [{"id": "idn_a", "email_address": "only@example.com"}],
                "primary_email_address_id": "idn_gone",
            },
        ),
    )

    profile = identity_provider_client.fetch_external_profile("user_1")

    assert profile.preferred_email() == "only@example.com"
