"""Tests for Jira API client."""

import base64
import threading
from dataclasses import replace

import httpx
import pytest

from xraylite.jira_client import (
    BackendError,
    BackendStatusError,
    DecodeError,
    JiraClient,
    RequestBuildError,
    TransportError,
)
from xraylite.models import ExecutionStatus, TestCase


@pytest.fixture
def jira_error(fake_jira):
    return fake_jira(status_code=400, payload={
        "errorMessages": [],
        "errors": {"issuetype": "Specify a valid issue type"},
    })


class TestJiraClientConfiguration:
    """Tests for Jira client configuration."""

    def test_base_url_set(self, settings):
        assert JiraClient(settings).base_url == "https://test.atlassian.net"

    def test_is_not_demo_with_real_credentials(self, settings):
        assert JiraClient(settings).is_demo is False

    def test_is_demo_with_placeholder_credentials(self, demo_settings):
        assert JiraClient(demo_settings).is_demo is True

    def test_context_manager_closes_client(self, settings, fake_jira, make_client):
        client = make_client(settings, fake_jira(payload={"issues": []}))
        with client:
            client.list_test_cases()
            assert client._client is not None
        assert client._client is None

    def test_concurrent_first_requests_share_one_client(self, settings, fake_jira, make_client):
        client = make_client(settings, fake_jira(payload={"issues": []}))
        barrier = threading.Barrier(8)
        seen = []

        def first_request():
            barrier.wait()
            seen.append(client._get_client())

        threads = [threading.Thread(target=first_request) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert len(seen) == 8
        assert len({id(c) for c in seen}) == 1


class TestJiraClientAuth:
    """Tests for Jira authentication."""

    def test_generates_auth_header(self, settings):
        header = JiraClient(settings)._get_auth_header()
        assert header.startswith("Basic ")

    def test_auth_header_contains_encoded_credentials(self, settings):
        header = JiraClient(settings)._get_auth_header()
        decoded = base64.b64decode(header.replace("Basic ", "")).decode()
        assert decoded == "test@example.com:test-token"

    def test_requests_carry_headers(self, settings, fake_jira, make_client):
        fake = fake_jira(payload={"issues": []})
        make_client(settings, fake).list_test_cases()

        request = fake.requests[0]
        assert request.headers["Authorization"] == JiraClient(settings)._get_auth_header()
        assert request.headers["Accept"] == "application/json"
        assert request.headers["Content-Type"] == "application/json"


class TestListTestCases:
    """Tests for listing test cases."""

    def test_search_query(self, settings, fake_jira, make_client):
        fake = fake_jira(payload={"issues": []})
        make_client(settings, fake).list_test_cases()

        request = fake.requests[0]
        assert request.method == "GET"
        assert request.url.path == "/rest/api/3/search/jql"
        assert request.url.params["jql"] == 'project = "TEST" AND issuetype = "Test"'
        assert request.url.params["maxResults"] == "100"
        assert request.url.params["fields"] == "*navigable"

    def test_maps_issues(self, settings, fake_jira, make_client, search_payload):
        client = make_client(settings, fake_jira(payload=search_payload))
        test_cases = client.list_test_cases()

        assert len(test_cases) == 1
        assert test_cases[0].key == "TEST-42"
        assert test_cases[0].status == "In Progress"
        assert test_cases[0].reporter == "Ada Lovelace"

    def test_status_error_propagates(self, settings, jira_error, make_client):
        client = make_client(settings, jira_error)
        with pytest.raises(BackendStatusError) as exc_info:
            client.list_test_cases()
        assert exc_info.value.status_code == 400
        assert exc_info.value.errors == {"issuetype": "Specify a valid issue type"}
        assert "HTTP 400" in str(exc_info.value)

    def test_network_error_propagates(self, settings, fake_jira, make_client):
        fake = fake_jira(error=httpx.ConnectError("connection refused"))
        with pytest.raises(TransportError, match="connection refused"):
            make_client(settings, fake).list_test_cases()

    def test_timeout_is_transport_error(self, settings, fake_jira, make_client):
        fake = fake_jira(error=httpx.ReadTimeout("read timed out"))
        with pytest.raises(TransportError, match="timed out"):
            make_client(settings, fake).list_test_cases()

    def test_malformed_body_is_decode_error(self, settings, fake_jira, make_client):
        fake = fake_jira(content=b"<html>not json</html>")
        with pytest.raises(DecodeError):
            make_client(settings, fake).list_test_cases()

    def test_unexpected_shape_is_decode_error(self, settings, fake_jira, make_client):
        fake = fake_jira(payload=["not", "an", "object"])
        with pytest.raises(DecodeError):
            make_client(settings, fake).list_test_cases()

    def test_demo_falls_back_on_status_error(self, demo_settings, jira_error, make_client):
        test_cases = make_client(demo_settings, jira_error).list_test_cases()

        assert [tc.key for tc in test_cases] == ["TEST-1", "TEST-2", "TEST-3"]
        assert len(jira_error.requests) == 1

    def test_demo_falls_back_on_network_error(self, demo_settings, fake_jira, make_client):
        fake = fake_jira(error=httpx.ConnectError("no route"))
        test_cases = make_client(demo_settings, fake).list_test_cases()
        assert len(test_cases) == 3

    def test_demo_falls_back_on_malformed_body(self, demo_settings, fake_jira, make_client):
        fake = fake_jira(content=b"garbage")
        assert len(make_client(demo_settings, fake).list_test_cases()) == 3

    def test_wrongly_typed_total_is_decode_error(self, settings, fake_jira, make_client):
        fake = fake_jira(payload={"issues": [], "total": {"value": 1}})
        with pytest.raises(DecodeError, match="total"):
            make_client(settings, fake).list_test_cases()

    def test_demo_falls_back_on_wrongly_typed_fields(self, demo_settings, fake_jira, make_client):
        fake = fake_jira(payload={"issues": [], "total": {"value": 1}})
        test_cases = make_client(demo_settings, fake).list_test_cases()
        assert [tc.key for tc in test_cases] == ["TEST-1", "TEST-2", "TEST-3"]

    def test_demo_falls_back_on_wrongly_typed_issue(self, demo_settings, fake_jira, make_client):
        fake = fake_jira(payload={"issues": [{"key": "TEST-9", "fields": {"labels": "x"}}]})
        assert len(make_client(demo_settings, fake).list_test_cases()) == 3

    def test_demo_returns_backend_data_on_success(
        self, demo_settings, fake_jira, make_client, search_payload
    ):
        client = make_client(demo_settings, fake_jira(payload=search_payload))
        test_cases = client.list_test_cases()
        assert [tc.key for tc in test_cases] == ["TEST-42"]


class TestCreateTestCase:
    """Tests for test case creation."""

    def test_creates_issue(self, settings, fake_jira, make_client, sample_test_case):
        fake = fake_jira(status_code=201, payload={"id": "10050", "key": "TEST-50", "self": "x"})
        created = make_client(settings, fake).create_test_case(sample_test_case)

        request = fake.requests[0]
        assert request.method == "POST"
        assert request.url.path == "/rest/api/3/issue"
        fields = fake.last_json["fields"]
        assert fields["summary"] == "Login works"
        assert fields["issuetype"] == {"name": "Test"}
        assert fields["project"] == {"key": "TEST"}

        assert created.id == "10050"
        assert created.key == "TEST-50"
        assert created.status == "To Do"
        assert created.created_date is not None
        assert created.labels == ["login", "smoke"]

    def test_does_not_mutate_input(self, settings, fake_jira, make_client, sample_test_case):
        fake = fake_jira(status_code=201, payload={"id": "10050", "key": "TEST-50"})
        make_client(settings, fake).create_test_case(sample_test_case)
        assert sample_test_case.key == ""
        assert sample_test_case.status == ""

    def test_status_error(self, settings, jira_error, make_client, sample_test_case):
        with pytest.raises(BackendStatusError, match="valid issue type"):
            make_client(settings, jira_error).create_test_case(sample_test_case)

    def test_missing_key_in_response(self, settings, fake_jira, make_client, sample_test_case):
        fake = fake_jira(status_code=201, payload={"id": "10050"})
        with pytest.raises(DecodeError):
            make_client(settings, fake).create_test_case(sample_test_case)

    def test_unserializable_payload(self, settings, fake_jira, make_client):
        fake = fake_jira(status_code=201, payload={"id": "1", "key": "TEST-1"})
        tc = TestCase(summary="x", custom_fields={"customfield_1": object()})
        with pytest.raises(RequestBuildError):
            make_client(settings, fake).create_test_case(tc)
        assert fake.requests == []

    def test_demo_skips_network(self, demo_settings, fake_jira, make_client, sample_test_case):
        fake = fake_jira(status_code=500)
        created = make_client(demo_settings, fake).create_test_case(sample_test_case)

        assert fake.requests == []
        assert created.id == "10004"
        assert created.key == "TEST-4"
        assert created.status == "To Do"
        assert created.reporter == "Demo User"
        assert created.summary == sample_test_case.summary
        assert created.description == sample_test_case.description
        assert created.priority == sample_test_case.priority
        assert created.labels == sample_test_case.labels
        assert created.test_type == sample_test_case.test_type


class TestCreateTestExecution:
    """Tests for test execution creation."""

    def test_creates_issue(self, settings, fake_jira, make_client, sample_test_execution):
        fake = fake_jira(status_code=201, payload={"id": "10060", "key": "EXEC-60"})
        created = make_client(settings, fake).create_test_execution(sample_test_execution)

        assert fake.last_json["fields"]["issuetype"] == {"name": "Test Execution"}
        assert created.key == "EXEC-60"
        assert created.status == "To Do"
        assert created.execution_status == ExecutionStatus.TODO
        assert created.start_date is not None
        assert created.test_cases == ["TEST-1", "TEST-2"]
        assert created.environment == "QA"

    def test_sends_configured_custom_fields(
        self, settings, fake_jira, make_client, sample_test_execution
    ):
        settings = replace(settings, test_cases_field="customfield_10200")
        fake = fake_jira(status_code=201, payload={"id": "10060", "key": "EXEC-60"})
        make_client(settings, fake).create_test_execution(sample_test_execution)
        assert fake.last_json["fields"]["customfield_10200"] == ["TEST-1", "TEST-2"]

    def test_status_error(self, settings, jira_error, make_client, sample_test_execution):
        with pytest.raises(BackendError):
            make_client(settings, jira_error).create_test_execution(sample_test_execution)

    def test_demo_skips_network(self, demo_settings, fake_jira, make_client, sample_test_execution):
        fake = fake_jira(status_code=500)
        created = make_client(demo_settings, fake).create_test_execution(sample_test_execution)

        assert fake.requests == []
        assert created.id == "10005"
        assert created.key == "EXEC-1"
        assert created.executed_by == "Demo User"
        assert created.execution_status == ExecutionStatus.TODO
        assert created.start_date is not None


class TestGetTestExecution:
    """Tests for fetching a test execution."""

    def test_fetches_issue(self, settings, fake_jira, make_client):
        fake = fake_jira(payload={
            "id": "10060",
            "key": "EXEC-60",
            "fields": {"summary": "Nightly", "description": "All suites", "status": {"name": "Done"}},
        })
        execution = make_client(settings, fake).get_test_execution("EXEC-60")

        assert fake.requests[0].url.path == "/rest/api/3/issue/EXEC-60"
        assert execution.key == "EXEC-60"
        assert execution.summary == "Nightly"
        assert execution.status == "Done"
        assert execution.test_cases == []

    def test_not_found(self, settings, fake_jira, make_client):
        fake = fake_jira(status_code=404, content=b"Issue does not exist")
        with pytest.raises(BackendStatusError, match="HTTP 404: Issue does not exist"):
            make_client(settings, fake).get_test_execution("EXEC-404")

    def test_demo_echoes_key(self, demo_settings, fake_jira, make_client):
        fake = fake_jira(status_code=500)
        execution = make_client(demo_settings, fake).get_test_execution("EXEC-77")

        assert fake.requests == []
        assert execution.key == "EXEC-77"
        assert execution.summary == "Demo Test Execution"
        statuses = [r.status for r in execution.test_results]
        assert statuses == [ExecutionStatus.PASS, ExecutionStatus.FAIL]
        assert execution.test_results[1].defects == ["BUG-123"]
