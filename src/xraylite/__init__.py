"""xraylite - test management REST API on top of Jira issues."""

__version__ = "1.0.0"

from .config import Settings
from .jira_client import BackendError, JiraClient
from .models import ExecutionStatus, TestCase, TestExecution, TestResult

__all__ = [
    "__version__",
    "BackendError",
    "ExecutionStatus",
    "JiraClient",
    "Settings",
    "TestCase",
    "TestExecution",
    "TestResult",
]
