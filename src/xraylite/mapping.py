"""Mapping between test management entities and Jira issues."""

import logging
from dataclasses import dataclass
from typing import Optional

from .adf import field_to_text, text_to_adf
from .models import (
    CreateIssueRequest,
    ExecutionStatus,
    Issue,
    IssueFields,
    NamedRef,
    Project,
    TestCase,
    TestExecution,
)

logger = logging.getLogger(__name__)

TEST_ISSUE_TYPE = "Test"
TEST_EXECUTION_ISSUE_TYPE = "Test Execution"

# Workflow status of a freshly created issue
INITIAL_STATUS = "To Do"


@dataclass(frozen=True)
class ExecutionFieldMap:
    """Custom field IDs holding execution metadata Jira has no standard field for.

    A field left unset means the value is client-side only: it is neither
    sent on create nor read back from the issue.
    """
    test_cases: Optional[str] = None
    environment: Optional[str] = None
    execution_status: Optional[str] = None


def _base_fields(summary: str, description: str, issue_type: str, project_key: str) -> IssueFields:
    return IssueFields(
        summary=summary,
        description=text_to_adf(description) if description else None,
        issue_type=NamedRef(name=issue_type),
        project=Project(key=project_key),
    )


def build_test_case_request(tc: TestCase, project_key: str) -> CreateIssueRequest:
    """Build the creation payload for a "Test" issue."""
    fields = _base_fields(tc.summary, tc.description, TEST_ISSUE_TYPE, project_key)
    fields.labels = list(tc.labels)
    fields.components = [NamedRef(name=name) for name in tc.components]
    if tc.priority:
        fields.priority = NamedRef(name=tc.priority)
    fields.custom_fields = dict(tc.custom_fields)
    return CreateIssueRequest(fields=fields)


def build_test_execution_request(
    te: TestExecution,
    project_key: str,
    field_map: Optional[ExecutionFieldMap] = None,
) -> CreateIssueRequest:
    """Build the creation payload for a "Test Execution" issue."""
    field_map = field_map or ExecutionFieldMap()
    fields = _base_fields(te.summary, te.description, TEST_EXECUTION_ISSUE_TYPE, project_key)
    custom = dict(te.custom_fields)
    if field_map.test_cases and te.test_cases:
        custom[field_map.test_cases] = list(te.test_cases)
    if field_map.environment and te.environment:
        custom[field_map.environment] = te.environment
    if field_map.execution_status and te.execution_status:
        custom[field_map.execution_status] = te.execution_status.value
    fields.custom_fields = custom
    return CreateIssueRequest(fields=fields)


def _name(ref: Optional[NamedRef]) -> str:
    return ref.name if ref else ""


def issue_to_test_case(issue: Issue) -> TestCase:
    """Map a Jira issue read back from the API to a TestCase."""
    fields = issue.fields
    return TestCase(
        id=issue.id,
        key=issue.key,
        summary=fields.summary,
        description=field_to_text(fields.description),
        status=_name(fields.status),
        priority=_name(fields.priority),
        labels=list(fields.labels),
        components=[c.name for c in fields.components],
        created_date=fields.created,
        updated_date=fields.updated,
        reporter=fields.reporter.display_name if fields.reporter else "",
        assignee=fields.assignee.display_name if fields.assignee else "",
    )


def _test_case_keys(value) -> list[str]:
    """Test case keys stored either as a list or a comma separated string."""
    if isinstance(value, list):
        return [str(v) for v in value if v]
    if isinstance(value, str):
        return [part.strip() for part in value.split(",") if part.strip()]
    return []


def _option_value(value) -> str:
    """Select-list custom fields come back as ``{"value": ...}`` objects."""
    if isinstance(value, dict):
        return str(value.get("value") or value.get("name") or "")
    return str(value) if value else ""


def issue_to_test_execution(
    issue: Issue,
    field_map: Optional[ExecutionFieldMap] = None,
) -> TestExecution:
    """Map a Jira issue to a TestExecution.

    Only summary, description and workflow status are standard fields; test
    cases, environment and execution status come back only when the matching
    custom fields are configured.
    """
    field_map = field_map or ExecutionFieldMap()
    fields = issue.fields
    te = TestExecution(
        id=issue.id,
        key=issue.key,
        summary=fields.summary,
        description=field_to_text(fields.description),
        status=_name(fields.status),
    )

    custom = fields.custom_fields
    if field_map.test_cases:
        te.test_cases = _test_case_keys(custom.get(field_map.test_cases))
    if field_map.environment:
        te.environment = _option_value(custom.get(field_map.environment))
    if field_map.execution_status:
        raw_status = _option_value(custom.get(field_map.execution_status))
        if raw_status:
            try:
                te.execution_status = ExecutionStatus.from_string(raw_status)
            except ValueError:
                logger.warning("Ignoring unknown execution status %r on %s", raw_status, issue.key)
    return te
