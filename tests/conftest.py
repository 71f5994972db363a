"""Pytest fixtures for lead intake testing.

Provides:
- Settings with every required key set and a default mailbox
- FakeProviders: scripted Turnstile / Resend responses served through
  httpx.MockTransport, recording every outbound request
- A TestClient wired to both through dependency overrides

Usage:
    def test_lead(client, providers):
        response = client.post("/api/lead", data={...})
        assert len(providers.resend_calls) == 1
"""

import json
from typing import List, Union

import httpx
import pytest
from fastapi.testclient import TestClient

from leadintake.api.endpoints.lead import get_intake_service
from leadintake.core.config import Settings, get_settings
from leadintake.core.intake import LeadIntakeService
from leadintake.main import app

TURNSTILE_HOST = "challenges.cloudflare.com"
RESEND_HOST = "api.resend.com"

Scripted = Union[httpx.Response, Exception]


class FakeProviders:
    """Stand-in for both third parties. Unscripted calls succeed."""

    def __init__(self):
        self.requests: List[httpx.Request] = []
        self.turnstile_script: List[Scripted] = []
        self.resend_script: List[Scripted] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if request.url.host == TURNSTILE_HOST:
            return self._next(self.turnstile_script, httpx.Response(200, json={"success": True}))
        if request.url.host == RESEND_HOST:
            return self._next(self.resend_script, httpx.Response(200, json={"id": "email_123"}))
        return httpx.Response(404)

    @staticmethod
    def _next(script: List[Scripted], default: httpx.Response) -> httpx.Response:
        if not script:
            return default
        item = script.pop(0)
        if isinstance(item, Exception):
            raise item
        return item

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    @property
    def turnstile_calls(self) -> List[httpx.Request]:
        return [r for r in self.requests if r.url.host == TURNSTILE_HOST]

    @property
    def resend_calls(self) -> List[httpx.Request]:
        return [r for r in self.requests if r.url.host == RESEND_HOST]

    @property
    def sent_emails(self) -> List[dict]:
        return [json.loads(r.content) for r in self.resend_calls]


def make_settings(**overrides) -> Settings:
    values = dict(
        turnstile_secret_key="test-turnstile-secret",
        resend_api_key="re_test_key",
        resend_from_email="leads@verosboutiqueky.com",
        resend_from_name="Vero's Boutique",
        to_default="owner@verosboutiqueky.com",
        to_early_offer=None,
        to_book_fitting=None,
        to_event_floral=None,
        to_reviews=None,
        to_feedback=None,
    )
    values.update(overrides)
    return Settings(_env_file=None, **values)


@pytest.fixture
def settings() -> Settings:
    return make_settings()


@pytest.fixture
def providers() -> FakeProviders:
    return FakeProviders()


@pytest.fixture
def service(settings, providers) -> LeadIntakeService:
    return LeadIntakeService(settings, transport=providers.transport)


@pytest.fixture
def client(settings, providers):
    """TestClient with settings and outbound HTTP replaced; redirects are not followed"""
    app.dependency_overrides[get_settings] = lambda: settings
    app.dependency_overrides[get_intake_service] = lambda: LeadIntakeService(
        settings, transport=providers.transport
    )
    with TestClient(app, follow_redirects=False) as test_client:
        yield test_client
    app.dependency_overrides.clear()
