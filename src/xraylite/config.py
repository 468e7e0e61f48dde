"""Configuration via environment variables."""

import logging
import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

# Pick up a local .env file if there is one; real environment wins
load_dotenv()

# Jira configuration
JIRA_BASE_URL = os.environ.get("JIRA_BASE_URL", "")
JIRA_USERNAME = os.environ.get("JIRA_USERNAME", "")
JIRA_API_TOKEN = os.environ.get("JIRA_API_TOKEN", "")
JIRA_PROJECT_KEY = os.environ.get("JIRA_PROJECT_KEY", "")

# Optional custom field IDs (e.g., customfield_10200) for execution metadata
JIRA_TEST_CASES_FIELD = os.environ.get("JIRA_TEST_CASES_FIELD", "")
JIRA_ENVIRONMENT_FIELD = os.environ.get("JIRA_ENVIRONMENT_FIELD", "")
JIRA_EXECUTION_STATUS_FIELD = os.environ.get("JIRA_EXECUTION_STATUS_FIELD", "")

# HTTP server
PORT = os.environ.get("PORT", "8080")
CORS_ORIGINS = os.environ.get("CORS_ORIGINS", "*")

# Logging: "readable" for humans, "json" for log aggregation
LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")
LOG_FORMAT = os.environ.get("LOG_FORMAT", "readable")

# Placeholder credentials shipped in .env.sample
DEMO_USERNAME = "demo_user"
DEMO_API_TOKEN = "demo_token_replace_with_actual"

REQUIRED_VARIABLES = ("JIRA_BASE_URL", "JIRA_USERNAME", "JIRA_API_TOKEN", "JIRA_PROJECT_KEY")


class ConfigError(Exception):
    """Required configuration is missing or invalid."""
    pass


def is_demo_credentials(username: str, api_token: str) -> bool:
    """Placeholder credentials switch the client to canned data."""
    return username == DEMO_USERNAME or api_token == DEMO_API_TOKEN


def _parse_port(value) -> int:
    try:
        port = int(value)
    except (TypeError, ValueError):
        raise ConfigError(f"PORT must be an integer, got {value!r}") from None
    if not 0 < port < 65536:
        raise ConfigError(f"PORT must be between 1 and 65535, got {port}")
    return port


@dataclass(frozen=True)
class Settings:
    """Read-only process configuration, built once at startup."""
    jira_base_url: str
    jira_username: str
    jira_api_token: str
    jira_project_key: str
    port: int = 8080
    cors_origins: str = "*"
    test_cases_field: Optional[str] = None
    environment_field: Optional[str] = None
    execution_status_field: Optional[str] = None

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from the module-level values, failing fast on gaps."""
        values = {
            "JIRA_BASE_URL": JIRA_BASE_URL,
            "JIRA_USERNAME": JIRA_USERNAME,
            "JIRA_API_TOKEN": JIRA_API_TOKEN,
            "JIRA_PROJECT_KEY": JIRA_PROJECT_KEY,
        }
        missing = [name for name in REQUIRED_VARIABLES if not values[name]]
        if missing:
            raise ConfigError(
                f"Missing required environment variables: {', '.join(missing)}"
            )

        return cls(
            jira_base_url=JIRA_BASE_URL.rstrip("/"),
            jira_username=JIRA_USERNAME,
            jira_api_token=JIRA_API_TOKEN,
            jira_project_key=JIRA_PROJECT_KEY,
            port=_parse_port(PORT),
            cors_origins=CORS_ORIGINS,
            test_cases_field=JIRA_TEST_CASES_FIELD or None,
            environment_field=JIRA_ENVIRONMENT_FIELD or None,
            execution_status_field=JIRA_EXECUTION_STATUS_FIELD or None,
        )

    @property
    def demo_mode(self) -> bool:
        return is_demo_credentials(self.jira_username, self.jira_api_token)

    def summary_lines(self) -> list[str]:
        """Human-readable configuration summary, without secrets."""
        lines = []
        if self.demo_mode:
            lines.append("WARNING: You are using demo credentials!")
            lines.append("Copy .env.sample to .env and set your real Jira credentials.")
            lines.append("Jira integration is disabled until valid credentials are provided.")
        lines.append(f"Jira Base URL: {self.jira_base_url}")
        lines.append(f"Jira Project Key: {self.jira_project_key}")
        lines.append(f"Server Port: {self.port}")
        return lines

    def log_summary(self) -> None:
        """Log the configuration summary at startup."""
        if self.demo_mode:
            logger.warning("Demo credentials in use, Jira calls are replaced with canned data")
        logger.info("Configuration loaded: base_url=%s project=%s port=%s",
                    self.jira_base_url, self.jira_project_key, self.port)
