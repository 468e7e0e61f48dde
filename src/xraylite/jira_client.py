"""Jira API client for test cases and test executions."""

import base64
import json
import logging
import threading
from dataclasses import replace
from datetime import datetime, timezone
from typing import Any, Callable, Optional, TypeVar

import httpx

from . import demo
from .config import Settings, is_demo_credentials
from .mapping import (
    INITIAL_STATUS,
    TEST_ISSUE_TYPE,
    ExecutionFieldMap,
    build_test_case_request,
    build_test_execution_request,
    issue_to_test_case,
    issue_to_test_execution,
)
from .models import (
    CreateIssueResponse,
    ErrorResponse,
    ExecutionStatus,
    Issue,
    SearchResponse,
    TestCase,
    TestExecution,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

REQUEST_TIMEOUT = 30.0
MAX_RESULTS = 100
# search/jql returns only issue ids unless fields are requested
SEARCH_FIELDS = "*navigable"


class BackendError(Exception):
    """Error communicating with Jira API."""
    pass


class RequestBuildError(BackendError):
    """Request payload could not be serialized."""
    pass


class TransportError(BackendError):
    """Network failure or timeout talking to Jira."""
    pass


class BackendStatusError(BackendError):
    """Jira answered with an HTTP error status."""

    def __init__(
        self,
        status_code: int,
        error_messages: Optional[list[str]] = None,
        errors: Optional[dict[str, str]] = None,
        body: str = "",
    ):
        self.status_code = status_code
        self.error_messages = error_messages or []
        self.errors = errors or {}
        self.body = body
        if self.error_messages or self.errors:
            detail = f"{self.error_messages}, {self.errors}"
            message = f"Jira API error (HTTP {status_code}): {detail}"
        else:
            message = f"HTTP {status_code}: {body}"
        super().__init__(message)


class DecodeError(BackendError):
    """Jira response body was not what we expected."""
    pass


class JiraClient:
    """Client for Jira REST API v3 (Cloud)."""

    def __init__(self, settings: Settings, transport: Optional[httpx.BaseTransport] = None):
        self.base_url = settings.jira_base_url.rstrip("/")
        self.username = settings.jira_username
        self.api_token = settings.jira_api_token
        self.project_key = settings.jira_project_key
        self.field_map = ExecutionFieldMap(
            test_cases=settings.test_cases_field,
            environment=settings.environment_field,
            execution_status=settings.execution_status_field,
        )
        self._transport = transport
        self._client: Optional[httpx.Client] = None
        self._client_lock = threading.Lock()

    @property
    def is_demo(self) -> bool:
        """Check if the placeholder demo credentials are configured."""
        return is_demo_credentials(self.username, self.api_token)

    def _get_auth_header(self) -> str:
        """Generate Basic auth header for Jira Cloud."""
        credentials = f"{self.username}:{self.api_token}"
        encoded = base64.b64encode(credentials.encode()).decode()
        return f"Basic {encoded}"

    def _get_client(self) -> httpx.Client:
        """Get or create HTTP client, shared by all request threads."""
        with self._client_lock:
            if self._client is None:
                self._client = httpx.Client(
                    base_url=f"{self.base_url}/rest/api/3",
                    headers={
                        "Authorization": self._get_auth_header(),
                        "Accept": "application/json",
                        "Content-Type": "application/json",
                    },
                    timeout=REQUEST_TIMEOUT,
                    transport=self._transport,
                )
            return self._client

    def close(self):
        """Close HTTP client."""
        with self._client_lock:
            if self._client:
                self._client.close()
                self._client = None

    def __enter__(self) -> "JiraClient":
        return self

    def __exit__(self, *exc_info):
        self.close()

    def _request(
        self,
        method: str,
        endpoint: str,
        body: Any = None,
        params: Optional[dict] = None,
    ) -> Any:
        """Send one request and return the decoded JSON body (None when empty)."""
        content = None
        if body is not None:
            try:
                content = json.dumps(body).encode()
            except (TypeError, ValueError) as e:
                raise RequestBuildError(f"Failed to serialize request body: {e}") from e

        client = self._get_client()
        logger.debug("Making %s request to: %s/rest/api/3/%s", method, self.base_url, endpoint)
        try:
            response = client.request(method, endpoint, content=content, params=params)
        except httpx.TimeoutException as e:
            raise TransportError(f"Request to {endpoint} timed out: {e}") from e
        except httpx.HTTPError as e:
            raise TransportError(f"Failed to make request to {endpoint}: {e}") from e

        logger.debug("Response status: %d, body length: %d",
                     response.status_code, len(response.content))

        if response.status_code >= 400:
            raise self._status_error(response)

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise DecodeError(f"Failed to parse response from {endpoint}: {e}") from e

    @staticmethod
    def _status_error(response: httpx.Response) -> BackendStatusError:
        try:
            error = ErrorResponse.from_dict(response.json())
        except (TypeError, ValueError):
            return BackendStatusError(response.status_code, body=response.text)
        return BackendStatusError(response.status_code, error.error_messages, error.errors)

    @staticmethod
    def _decode(parser: Callable[[Any], T], data: Any, what: str) -> T:
        try:
            return parser(data)
        except (TypeError, ValueError) as e:
            raise DecodeError(f"Unexpected {what} from Jira: {e}") from e

    def list_test_cases(self) -> list[TestCase]:
        """Fetch up to 100 "Test" issues of the configured project.

        With demo credentials a failed call yields the canned test cases
        instead of an error; a successful call still returns Jira's data.
        """
        logger.info("Fetching test cases from Jira project %s", self.project_key)
        jql = f'project = "{self.project_key}" AND issuetype = "{TEST_ISSUE_TYPE}"'

        try:
            data = self._request("GET", "search/jql", params={
                "jql": jql,
                "maxResults": MAX_RESULTS,
                "fields": SEARCH_FIELDS,
            })
            search = self._decode(SearchResponse.from_dict, data, "search response")
        except BackendError as e:
            if self.is_demo:
                logger.info("Using demo credentials, returning demo test cases (%s)", e)
                return demo.demo_test_cases()
            raise

        test_cases = [issue_to_test_case(issue) for issue in search.issues]
        logger.info("Fetched %d test cases", len(test_cases))
        return test_cases

    def create_test_case(self, tc: TestCase) -> TestCase:
        """Create a "Test" issue; the caller has checked the summary."""
        logger.info("Creating test case: %s", tc.summary)

        if self.is_demo:
            logger.info("Using demo credentials, skipping Jira for test case creation")
            return demo.created_test_case(tc)

        request = build_test_case_request(tc, self.project_key)
        data = self._request("POST", "issue", request.to_dict())
        created = self._decode(CreateIssueResponse.from_dict, data, "create response")

        result = replace(
            tc,
            id=created.id,
            key=created.key,
            status=INITIAL_STATUS,
            created_date=datetime.now(timezone.utc),
        )
        logger.info("Created test case %s", result.key)
        return result

    def create_test_execution(self, te: TestExecution) -> TestExecution:
        """Create a "Test Execution" issue; the caller has checked summary and test cases."""
        logger.info("Creating test execution: %s", te.summary)

        if self.is_demo:
            logger.info("Using demo credentials, skipping Jira for test execution creation")
            return demo.created_test_execution(te)

        request = build_test_execution_request(te, self.project_key, self.field_map)
        data = self._request("POST", "issue", request.to_dict())
        created = self._decode(CreateIssueResponse.from_dict, data, "create response")

        result = replace(
            te,
            id=created.id,
            key=created.key,
            status=INITIAL_STATUS,
            execution_status=ExecutionStatus.TODO,
            start_date=datetime.now(timezone.utc),
        )
        logger.info("Created test execution %s", result.key)
        return result

    def get_test_execution(self, key: str) -> TestExecution:
        """Fetch a test execution issue by key."""
        logger.info("Fetching test execution %s", key)

        if self.is_demo:
            logger.info("Using demo credentials, returning demo test execution")
            return demo.demo_test_execution(key)

        data = self._request("GET", f"issue/{key}")
        issue = self._decode(Issue.from_dict, data, "issue")
        return issue_to_test_execution(issue, self.field_map)
