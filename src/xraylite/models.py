"""Data models for test management entities and Jira issues."""

import re
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Optional, Union

# Open JSON value for custom fields and generic response bodies
JSONValue = Union[str, int, float, bool, None, list["JSONValue"], dict[str, "JSONValue"]]

_OFFSET_WITHOUT_COLON = re.compile(r"([+-]\d{2})(\d{2})$")


class ExecutionStatus(Enum):
    """Progress or outcome of a test execution or a single test result."""
    TODO = "TODO"
    EXECUTING = "EXECUTING"
    PASS = "PASS"
    FAIL = "FAIL"

    @classmethod
    def from_string(cls, value: str) -> "ExecutionStatus":
        """Create status from string, case-insensitive."""
        normalized = value.upper().strip()
        for status in cls:
            if status.value == normalized:
                return status
        raise ValueError(f"Unknown execution status: {value}")


def format_datetime(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


def parse_datetime(value: Any, name: str = "timestamp") -> Optional[datetime]:
    """Parse ISO-8601 timestamps, including Jira's ``+0000`` offsets."""
    if value is None or value == "":
        return None
    if not isinstance(value, str):
        raise ValueError(f"Field '{name}' must be an ISO-8601 string")
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    text = _OFFSET_WITHOUT_COLON.sub(r"\1:\2", text)
    try:
        return datetime.fromisoformat(text)
    except ValueError as e:
        raise ValueError(f"Field '{name}' is not a valid timestamp: {value}") from e


def _get_str(data: dict, name: str) -> str:
    value = data.get(name)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ValueError(f"Field '{name}' must be a string")
    return value


def _get_str_list(data: dict, name: str) -> list[str]:
    value = data.get(name)
    if value is None:
        return []
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise ValueError(f"Field '{name}' must be a list of strings")
    return list(value)


def _get_int(data: dict, name: str) -> int:
    value = data.get(name)
    if value is None:
        return 0
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"Field '{name}' must be an integer")
    return value


def _get_object(data: dict, name: str) -> dict[str, JSONValue]:
    value = data.get(name)
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ValueError(f"Field '{name}' must be an object")
    return dict(value)


def _get_custom_fields(data: dict) -> dict[str, JSONValue]:
    """``customFields`` may only carry fields outside the standard issue fields."""
    custom = _get_object(data, "customFields")
    reserved = sorted(set(custom) & _STANDARD_FIELDS)
    if reserved:
        raise ValueError(f"Field 'customFields' cannot set standard fields: {', '.join(reserved)}")
    return custom


def _get_status(data: dict, name: str) -> Optional[ExecutionStatus]:
    value = _get_str(data, name)
    return ExecutionStatus.from_string(value) if value else None


def _compact(data: dict, keep: tuple[str, ...] = ()) -> dict:
    """Drop empty values, like ``omitempty`` on the wire."""
    return {
        k: v for k, v in data.items()
        if k in keep or v not in (None, "", 0, [], {})
    }


def _require_object(data: Any, what: str) -> dict:
    if not isinstance(data, dict):
        raise ValueError(f"{what} must be a JSON object")
    return data


@dataclass
class TestResult:
    """Outcome of one test case within an execution."""
    __test__ = False
    test_case_key: str
    status: ExecutionStatus
    comment: str = ""
    execution_time: int = 0  # milliseconds
    executed_by: str = ""
    executed_on: Optional[datetime] = None
    defects: list[str] = field(default_factory=list)
    evidence: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return _compact({
            "testCaseKey": self.test_case_key,
            "status": self.status.value,
            "comment": self.comment,
            "executionTime": self.execution_time,
            "executedBy": self.executed_by,
            "executedOn": format_datetime(self.executed_on),
            "defects": self.defects,
            "evidence": self.evidence,
        }, keep=("testCaseKey", "status"))

    @classmethod
    def from_dict(cls, data: Any) -> "TestResult":
        data = _require_object(data, "Test result")
        status = _get_status(data, "status")
        return cls(
            test_case_key=_get_str(data, "testCaseKey"),
            status=status or ExecutionStatus.TODO,
            comment=_get_str(data, "comment"),
            execution_time=_get_int(data, "executionTime"),
            executed_by=_get_str(data, "executedBy"),
            executed_on=parse_datetime(data.get("executedOn"), "executedOn"),
            defects=_get_str_list(data, "defects"),
            evidence=_get_str_list(data, "evidence"),
        )


@dataclass
class TestCase:
    """A single test scenario, stored in Jira as a "Test" issue."""
    __test__ = False
    summary: str
    id: str = ""
    key: str = ""
    description: str = ""
    status: str = ""
    priority: str = ""
    labels: list[str] = field(default_factory=list)
    components: list[str] = field(default_factory=list)
    test_type: str = ""  # Manual, Automated, ...
    created_date: Optional[datetime] = None
    updated_date: Optional[datetime] = None
    reporter: str = ""
    assignee: str = ""
    custom_fields: dict[str, JSONValue] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return _compact({
            "id": self.id,
            "key": self.key,
            "summary": self.summary,
            "description": self.description,
            "status": self.status,
            "priority": self.priority,
            "labels": self.labels,
            "components": self.components,
            "testType": self.test_type,
            "createdDate": format_datetime(self.created_date),
            "updatedDate": format_datetime(self.updated_date),
            "reporter": self.reporter,
            "assignee": self.assignee,
            "customFields": self.custom_fields,
        }, keep=("summary", "description"))

    @classmethod
    def from_dict(cls, data: Any) -> "TestCase":
        data = _require_object(data, "Request body")
        return cls(
            summary=_get_str(data, "summary"),
            id=_get_str(data, "id"),
            key=_get_str(data, "key"),
            description=_get_str(data, "description"),
            status=_get_str(data, "status"),
            priority=_get_str(data, "priority"),
            labels=_get_str_list(data, "labels"),
            components=_get_str_list(data, "components"),
            test_type=_get_str(data, "testType"),
            created_date=parse_datetime(data.get("createdDate"), "createdDate"),
            updated_date=parse_datetime(data.get("updatedDate"), "updatedDate"),
            reporter=_get_str(data, "reporter"),
            assignee=_get_str(data, "assignee"),
            custom_fields=_get_custom_fields(data),
        )


@dataclass
class TestExecution:
    """A run grouping one or more test cases, a "Test Execution" issue in Jira."""
    __test__ = False
    summary: str
    test_cases: list[str] = field(default_factory=list)
    id: str = ""
    key: str = ""
    description: str = ""
    status: str = ""
    execution_status: Optional[ExecutionStatus] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    executed_by: str = ""
    environment: str = ""
    test_results: list[TestResult] = field(default_factory=list)
    custom_fields: dict[str, JSONValue] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return _compact({
            "id": self.id,
            "key": self.key,
            "summary": self.summary,
            "description": self.description,
            "status": self.status,
            "testCases": self.test_cases,
            "executionStatus": self.execution_status.value if self.execution_status else None,
            "startDate": format_datetime(self.start_date),
            "endDate": format_datetime(self.end_date),
            "executedBy": self.executed_by,
            "environment": self.environment,
            "testResults": [r.to_dict() for r in self.test_results],
            "customFields": self.custom_fields,
        }, keep=("summary", "description", "testCases"))

    @classmethod
    def from_dict(cls, data: Any) -> "TestExecution":
        data = _require_object(data, "Request body")
        results = data.get("testResults") or []
        if not isinstance(results, list):
            raise ValueError("Field 'testResults' must be a list")
        return cls(
            summary=_get_str(data, "summary"),
            test_cases=_get_str_list(data, "testCases"),
            id=_get_str(data, "id"),
            key=_get_str(data, "key"),
            description=_get_str(data, "description"),
            status=_get_str(data, "status"),
            execution_status=_get_status(data, "executionStatus"),
            start_date=parse_datetime(data.get("startDate"), "startDate"),
            end_date=parse_datetime(data.get("endDate"), "endDate"),
            executed_by=_get_str(data, "executedBy"),
            environment=_get_str(data, "environment"),
            test_results=[TestResult.from_dict(r) for r in results],
            custom_fields=_get_custom_fields(data),
        )


# Jira side


@dataclass
class NamedRef:
    """Issue type, priority, status or component: Jira objects known by name."""
    name: str
    id: str = ""

    def to_dict(self) -> dict:
        return _compact({"id": self.id, "name": self.name}, keep=("name",))

    @classmethod
    def from_dict(cls, data: Any) -> Optional["NamedRef"]:
        if not isinstance(data, dict):
            return None
        return cls(name=str(data.get("name") or ""), id=str(data.get("id") or ""))


@dataclass
class Project:
    key: str
    name: str = ""

    def to_dict(self) -> dict:
        return _compact({"key": self.key, "name": self.name}, keep=("key",))

    @classmethod
    def from_dict(cls, data: Any) -> Optional["Project"]:
        if not isinstance(data, dict):
            return None
        return cls(key=str(data.get("key") or ""), name=str(data.get("name") or ""))


@dataclass
class User:
    account_id: str = ""
    email_address: str = ""
    display_name: str = ""

    @classmethod
    def from_dict(cls, data: Any) -> Optional["User"]:
        if not isinstance(data, dict):
            return None
        return cls(
            account_id=str(data.get("accountId") or ""),
            email_address=str(data.get("emailAddress") or ""),
            display_name=str(data.get("displayName") or ""),
        )


# Standard fields handled explicitly; everything else is kept as a custom field
_STANDARD_FIELDS = {
    "summary", "description", "issuetype", "project", "priority", "status",
    "reporter", "assignee", "labels", "components", "created", "updated",
}


@dataclass
class IssueFields:
    """The ``fields`` object of a Jira issue."""
    summary: str = ""
    description: JSONValue = None  # plain text or an ADF document
    issue_type: Optional[NamedRef] = None
    project: Optional[Project] = None
    priority: Optional[NamedRef] = None
    status: Optional[NamedRef] = None
    reporter: Optional[User] = None
    assignee: Optional[User] = None
    labels: list[str] = field(default_factory=list)
    components: list[NamedRef] = field(default_factory=list)
    created: Optional[datetime] = None
    updated: Optional[datetime] = None
    custom_fields: dict[str, JSONValue] = field(default_factory=dict)

    def to_dict(self) -> dict:
        """Creation payload form: only fields Jira accepts on create."""
        data = {
            "summary": self.summary,
            "description": self.description,
            "issuetype": self.issue_type.to_dict() if self.issue_type else None,
            "project": self.project.to_dict() if self.project else None,
            "priority": self.priority.to_dict() if self.priority else None,
            "labels": self.labels,
            "components": [c.to_dict() for c in self.components],
        }
        # Standard fields always win over custom ones with the same name
        payload = {k: v for k, v in self.custom_fields.items() if k not in _STANDARD_FIELDS}
        payload.update(_compact(data, keep=("summary",)))
        return payload

    @classmethod
    def from_dict(cls, data: Any) -> "IssueFields":
        data = _require_object(data, "Issue fields")
        labels = data.get("labels") or []
        components = data.get("components") or []
        if not isinstance(labels, list) or not isinstance(components, list):
            raise ValueError("Issue labels and components must be lists")
        return cls(
            summary=str(data.get("summary") or ""),
            description=data.get("description"),
            issue_type=NamedRef.from_dict(data.get("issuetype")),
            project=Project.from_dict(data.get("project")),
            priority=NamedRef.from_dict(data.get("priority")),
            status=NamedRef.from_dict(data.get("status")),
            reporter=User.from_dict(data.get("reporter")),
            assignee=User.from_dict(data.get("assignee")),
            labels=[str(label) for label in labels],
            components=[c for c in (NamedRef.from_dict(c) for c in components) if c],
            created=parse_datetime(data.get("created"), "created"),
            updated=parse_datetime(data.get("updated"), "updated"),
            custom_fields={k: v for k, v in data.items() if k not in _STANDARD_FIELDS},
        )


@dataclass
class Issue:
    """Jira's generic work item."""
    fields: IssueFields
    id: str = ""
    key: str = ""

    def to_dict(self) -> dict:
        return _compact({"id": self.id, "key": self.key, "fields": self.fields.to_dict()})

    @classmethod
    def from_dict(cls, data: Any) -> "Issue":
        data = _require_object(data, "Issue")
        return cls(
            fields=IssueFields.from_dict(data.get("fields") or {}),
            id=str(data.get("id") or ""),
            key=str(data.get("key") or ""),
        )


@dataclass
class CreateIssueRequest:
    fields: IssueFields

    def to_dict(self) -> dict:
        return {"fields": self.fields.to_dict()}


@dataclass
class CreateIssueResponse:
    id: str
    key: str
    self_url: str = ""

    @classmethod
    def from_dict(cls, data: Any) -> "CreateIssueResponse":
        data = _require_object(data, "Create issue response")
        if not data.get("id") or not data.get("key"):
            raise ValueError("Create issue response is missing id or key")
        return cls(id=str(data["id"]), key=str(data["key"]), self_url=str(data.get("self") or ""))


@dataclass
class SearchResponse:
    """Result page of a JQL search."""
    issues: list[Issue] = field(default_factory=list)
    start_at: int = 0
    max_results: int = 0
    total: int = 0
    next_page_token: str = ""
    is_last: bool = True

    @classmethod
    def from_dict(cls, data: Any) -> "SearchResponse":
        data = _require_object(data, "Search response")
        issues = data.get("issues") or []
        if not isinstance(issues, list):
            raise ValueError("Search response 'issues' must be a list")
        return cls(
            issues=[Issue.from_dict(i) for i in issues],
            start_at=_get_int(data, "startAt"),
            max_results=_get_int(data, "maxResults"),
            total=_get_int(data, "total"),
            next_page_token=_get_str(data, "nextPageToken"),
            is_last=bool(data.get("isLast", True)),
        )


@dataclass
class ErrorResponse:
    """Error body Jira returns with 4xx/5xx statuses."""
    error_messages: list[str] = field(default_factory=list)
    errors: dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Any) -> "ErrorResponse":
        data = _require_object(data, "Error response")
        messages = data.get("errorMessages") or []
        errors = data.get("errors") or {}
        if not isinstance(messages, list) or not isinstance(errors, dict):
            raise ValueError("Unrecognized error response")
        return cls(
            error_messages=[str(m) for m in messages],
            errors={str(k): str(v) for k, v in errors.items()},
        )
