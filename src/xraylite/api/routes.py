"""Test management blueprint.

Endpoint groups
───────────────
  Test cases        GET/POST /api/testcases
                    GET      /api/testcases/<key>
  Test executions   GET/POST /api/testexecutions
                    GET      /api/testexecutions/<key>
  Service           GET      /api/health
                    GET      /api/info
"""

import logging
from datetime import datetime, timezone

from flask import Blueprint, current_app, jsonify, request

from .. import __version__, demo
from ..config import Settings
from ..jira_client import BackendError, JiraClient
from ..models import TestCase, TestExecution
from .errors import E, api_error

logger = logging.getLogger(__name__)

api_bp = Blueprint("api", __name__, url_prefix="/api")

API_NAME = "Jira Xray-like Integration API"
API_DESCRIPTION = "Test management on top of Jira issues"

ENDPOINTS = {
    "GET /api/health": "Health check",
    "GET /api/info": "API information",
    "GET /api/testcases": "List all test cases",
    "POST /api/testcases": "Create a new test case",
    "GET /api/testcases/:key": "Get a specific test case",
    "GET /api/testexecutions": "List all test executions",
    "POST /api/testexecutions": "Create a new test execution",
    "GET /api/testexecutions/:key": "Get a specific test execution",
}


def _client() -> JiraClient:
    return current_app.extensions["xraylite.jira_client"]


def _settings() -> Settings:
    return current_app.extensions["xraylite.settings"]


def _backend_failure(message: str, operation: str, target: str, exc: BackendError):
    logger.error("%s: %s", message, exc, extra={"operation": operation, "target": target})
    return api_error(E.BACKEND, message, details=str(exc))


# ══════════════════════════════════════════════════════════════════
# Test cases
# ══════════════════════════════════════════════════════════════════

@api_bp.route("/testcases", methods=["GET"])
def list_test_cases():
    """List the project's test cases."""
    try:
        test_cases = _client().list_test_cases()
    except BackendError as exc:
        return _backend_failure("Failed to fetch test cases", "list_test_cases",
                                _settings().jira_project_key, exc)

    return jsonify({
        "testCases": [tc.to_dict() for tc in test_cases],
        "count": len(test_cases),
        "message": "Test cases retrieved successfully",
    })


@api_bp.route("/testcases", methods=["POST"])
def create_test_case():
    """Create a test case; summary is required."""
    try:
        test_case = TestCase.from_dict(request.get_json(silent=True))
    except ValueError as exc:
        return api_error(E.VALIDATION_INVALID, "Invalid request body", details=str(exc))

    if not test_case.summary.strip():
        return api_error(E.VALIDATION_REQUIRED, "Summary is required")

    try:
        created = _client().create_test_case(test_case)
    except BackendError as exc:
        return _backend_failure("Failed to create test case", "create_test_case",
                                test_case.summary, exc)

    return jsonify({
        "testCase": created.to_dict(),
        "message": "Test case created successfully",
    }), 201


@api_bp.route("/testcases/<key>", methods=["GET"])
def get_test_case(key):
    """Return a sample test case for ``key``; not looked up in Jira."""
    return jsonify({
        "testCase": demo.demo_test_case(key).to_dict(),
        "message": "Test case retrieved successfully",
    })


# ══════════════════════════════════════════════════════════════════
# Test executions
# ══════════════════════════════════════════════════════════════════

@api_bp.route("/testexecutions", methods=["GET"])
def list_test_executions():
    """Return the sample test executions; not looked up in Jira."""
    executions = demo.demo_test_executions()
    return jsonify({
        "testExecutions": [te.to_dict() for te in executions],
        "count": len(executions),
        "message": "Test executions retrieved successfully",
    })


@api_bp.route("/testexecutions", methods=["POST"])
def create_test_execution():
    """Create a test execution; summary and at least one test case are required."""
    try:
        execution = TestExecution.from_dict(request.get_json(silent=True))
    except ValueError as exc:
        return api_error(E.VALIDATION_INVALID, "Invalid request body", details=str(exc))

    if not execution.summary.strip():
        return api_error(E.VALIDATION_REQUIRED, "Summary is required")
    if not execution.test_cases:
        return api_error(E.VALIDATION_REQUIRED, "At least one test case is required")

    try:
        created = _client().create_test_execution(execution)
    except BackendError as exc:
        return _backend_failure("Failed to create test execution", "create_test_execution",
                                execution.summary, exc)

    return jsonify({
        "testExecution": created.to_dict(),
        "message": "Test execution created successfully",
    }), 201


@api_bp.route("/testexecutions/<key>", methods=["GET"])
def get_test_execution(key):
    try:
        execution = _client().get_test_execution(key)
    except BackendError as exc:
        return _backend_failure("Failed to fetch test execution", "get_test_execution", key, exc)

    return jsonify({
        "testExecution": execution.to_dict(),
        "message": "Test execution retrieved successfully",
    })


# ══════════════════════════════════════════════════════════════════
# Service
# ══════════════════════════════════════════════════════════════════

def _jira_summary() -> dict:
    settings = _settings()
    return {
        "base_url": settings.jira_base_url,
        "project_key": settings.jira_project_key,
        "demo_mode": settings.demo_mode,
    }


@api_bp.route("/health", methods=["GET"])
def health():
    """Liveness probe; does not call Jira."""
    return jsonify({
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "jira": _jira_summary(),
    })


@api_bp.route("/info", methods=["GET"])
def info():
    return jsonify({
        "name": API_NAME,
        "version": __version__,
        "description": API_DESCRIPTION,
        "endpoints": ENDPOINTS,
        "example_requests": {
            "create_test_case": {
                "method": "POST",
                "url": "/api/testcases",
                "body": {
                    "summary": "Sample Test Case",
                    "description": "This is a sample test case description",
                    "priority": "High",
                    "labels": ["api", "integration"],
                    "testType": "Manual",
                },
            },
            "create_test_execution": {
                "method": "POST",
                "url": "/api/testexecutions",
                "body": {
                    "summary": "Sample Test Execution",
                    "description": "This is a sample test execution",
                    "testCases": ["TEST-1", "TEST-2"],
                    "environment": "QA",
                },
            },
        },
        "configuration": _jira_summary(),
    })
