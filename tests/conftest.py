"""Pytest fixtures for xraylite tests."""

import json

import httpx
import pytest

from xraylite.api import create_app
from xraylite.config import DEMO_API_TOKEN, DEMO_USERNAME, Settings
from xraylite.jira_client import JiraClient
from xraylite.models import TestCase, TestExecution


class FakeJira:
    """Records requests and answers them with a canned httpx response."""

    def __init__(self, status_code=200, payload=None, content=None, error=None):
        self.status_code = status_code
        self.payload = payload
        self.content = content
        self.error = error
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        if self.content is not None:
            return httpx.Response(self.status_code, content=self.content)
        return httpx.Response(self.status_code, json=self.payload)

    @property
    def last_json(self):
        return json.loads(self.requests[-1].content)


@pytest.fixture
def settings():
    """Settings with real-looking credentials."""
    return Settings(
        jira_base_url="https://test.atlassian.net",
        jira_username="test@example.com",
        jira_api_token="test-token",
        jira_project_key="TEST",
    )


@pytest.fixture
def demo_settings():
    """Settings with the placeholder demo credentials."""
    return Settings(
        jira_base_url="https://test.atlassian.net",
        jira_username=DEMO_USERNAME,
        jira_api_token=DEMO_API_TOKEN,
        jira_project_key="TEST",
    )


@pytest.fixture
def make_client():
    """Build a JiraClient whose HTTP calls go to a FakeJira."""
    clients = []

    def _make(settings, fake):
        client = JiraClient(settings, transport=httpx.MockTransport(fake))
        clients.append(client)
        return client

    yield _make
    for client in clients:
        client.close()


@pytest.fixture
def make_app(make_client):
    """Build a Flask test client backed by a FakeJira."""

    def _make(settings, fake=None):
        fake = fake or FakeJira(status_code=500, payload={"errorMessages": ["unexpected call"]})
        app = create_app(settings, client=make_client(settings, fake))
        app.config["TESTING"] = True
        return app.test_client()

    return _make


@pytest.fixture
def sample_test_case():
    return TestCase(
        summary="Login works",
        description="Open the login page\nSign in with valid credentials",
        priority="High",
        labels=["login", "smoke"],
        test_type="Manual",
    )


@pytest.fixture
def sample_test_execution():
    return TestExecution(
        summary="Sprint 1",
        test_cases=["TEST-1", "TEST-2"],
        environment="QA",
    )


@pytest.fixture
def search_payload():
    """A Jira search response with one fully populated "Test" issue."""
    return {
        "startAt": 0,
        "maxResults": 100,
        "total": 1,
        "issues": [{
            "id": "10042",
            "key": "TEST-42",
            "fields": {
                "summary": "Checkout with saved card",
                "description": {
                    "type": "doc",
                    "version": 1,
                    "content": [{
                        "type": "paragraph",
                        "content": [{"type": "text", "text": "Pay with the default card"}],
                    }],
                },
                "issuetype": {"id": "10100", "name": "Test"},
                "project": {"key": "TEST", "name": "Test Project"},
                "status": {"id": "1", "name": "In Progress"},
                "priority": {"id": "2", "name": "High"},
                "reporter": {"accountId": "abc", "displayName": "Ada Lovelace"},
                "assignee": None,
                "labels": ["checkout"],
                "components": [{"id": "5", "name": "Payments"}],
                "created": "2024-01-15T10:00:00.000+0000",
            },
        }],
    }


@pytest.fixture
def fake_jira():
    """The FakeJira class, for building canned Jira responses."""
    return FakeJira
