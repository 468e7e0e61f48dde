"""Canned records served when the app runs with demo credentials."""

from dataclasses import replace
from datetime import datetime, timedelta, timezone

from .mapping import INITIAL_STATUS
from .models import ExecutionStatus, TestCase, TestExecution, TestResult

DEMO_USER = "Demo User"


def _now() -> datetime:
    return datetime.now(timezone.utc)


def demo_test_cases() -> list[TestCase]:
    """The three test cases listed when Jira cannot be reached."""
    now = _now()
    return [
        TestCase(
            id="10001",
            key="TEST-1",
            summary="Login functionality test",
            description="Test user login with valid credentials",
            status="To Do",
            priority="High",
            labels=["login", "authentication"],
            test_type="Manual",
            created_date=now - timedelta(days=7),
            reporter=DEMO_USER,
        ),
        TestCase(
            id="10002",
            key="TEST-2",
            summary="Password reset functionality",
            description="Test password reset flow",
            status="In Progress",
            priority="Medium",
            labels=["password", "reset"],
            test_type="Automated",
            created_date=now - timedelta(days=5),
            reporter=DEMO_USER,
        ),
        TestCase(
            id="10003",
            key="TEST-3",
            summary="User registration validation",
            description="Test user registration with various input validations",
            status="Done",
            priority="Medium",
            labels=["registration", "validation"],
            test_type="Manual",
            created_date=now - timedelta(days=3),
            reporter=DEMO_USER,
        ),
    ]


def demo_test_case(key: str) -> TestCase:
    """Single test case echoing the requested key."""
    return TestCase(
        id="10001",
        key=key,
        summary="Sample Test Case",
        description="This is a sample test case",
        status="To Do",
        priority="Medium",
    )


def created_test_case(tc: TestCase) -> TestCase:
    """Pretend creation: copy of the input with placeholder identifiers."""
    return replace(
        tc,
        id="10004",
        key="TEST-4",
        status=INITIAL_STATUS,
        created_date=_now(),
        reporter=DEMO_USER,
    )


def created_test_execution(te: TestExecution) -> TestExecution:
    return replace(
        te,
        id="10005",
        key="EXEC-1",
        status=INITIAL_STATUS,
        execution_status=ExecutionStatus.TODO,
        start_date=_now(),
        executed_by=DEMO_USER,
    )


def demo_test_execution(key: str) -> TestExecution:
    """One execution with a passing and a failing result; ``key`` is echoed."""
    now = _now()
    return TestExecution(
        id="10005",
        key=key,
        summary="Demo Test Execution",
        description="This is a demo test execution",
        status="In Progress",
        test_cases=["TEST-1", "TEST-2"],
        execution_status=ExecutionStatus.EXECUTING,
        start_date=now - timedelta(days=1),
        executed_by=DEMO_USER,
        environment="QA",
        test_results=[
            TestResult(
                test_case_key="TEST-1",
                status=ExecutionStatus.PASS,
                comment="Test passed successfully",
                execution_time=5000,
                executed_by=DEMO_USER,
                executed_on=now,
            ),
            TestResult(
                test_case_key="TEST-2",
                status=ExecutionStatus.FAIL,
                comment="Test failed due to timeout",
                execution_time=10000,
                executed_by=DEMO_USER,
                executed_on=now,
                defects=["BUG-123"],
            ),
        ],
    )


def demo_test_executions() -> list[TestExecution]:
    return [
        TestExecution(
            id="10005",
            key="EXEC-1",
            summary="Sprint 1 Test Execution",
            status="In Progress",
            execution_status=ExecutionStatus.EXECUTING,
            test_cases=["TEST-1", "TEST-2"],
            environment="QA",
        ),
        TestExecution(
            id="10006",
            key="EXEC-2",
            summary="Regression Test Execution",
            status="Done",
            execution_status=ExecutionStatus.PASS,
            test_cases=["TEST-1", "TEST-2", "TEST-3"],
            environment="Staging",
        ),
    ]
