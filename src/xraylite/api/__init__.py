"""
Flask application factory.

Usage:
    from xraylite.api import create_app
    app = create_app(Settings.from_env())
    app = create_app(settings, client=JiraClient(settings, transport=...))
"""

import logging
from typing import Optional

from flask import Flask, jsonify, request
from flask_cors import CORS

from .. import __version__
from ..config import Settings
from ..jira_client import JiraClient
from .errors import E, api_error
from .routes import API_DESCRIPTION, API_NAME, api_bp

logger = logging.getLogger(__name__)


def create_app(settings: Settings, client: Optional[JiraClient] = None) -> Flask:
    """
    Create and configure the Flask application.

    Args:
        settings: Validated process configuration.
        client: Jira client to serve requests with; built from ``settings``
                when omitted. Lives as long as the app.

    Returns:
        Configured Flask application instance.
    """
    app = Flask(__name__)
    app.json.sort_keys = False

    app.extensions["xraylite.settings"] = settings
    app.extensions["xraylite.jira_client"] = client or JiraClient(settings)

    cors_origins = settings.cors_origins
    if cors_origins and cors_origins != "*":
        CORS(app, origins=[o.strip() for o in cors_origins.split(",") if o.strip()])
    else:
        CORS(app)

    app.register_blueprint(api_bp)

    @app.route("/")
    def index():
        return jsonify({
            "message": API_NAME,
            "version": __version__,
            "description": API_DESCRIPTION,
            "endpoints": {
                "health": "/api/health",
                "info": "/api/info",
                "testcases": "/api/testcases",
                "testexecutions": "/api/testexecutions",
            },
        })

    @app.errorhandler(404)
    def not_found(e):
        return api_error(E.NOT_FOUND, "Not found", details={"path": request.path})

    @app.errorhandler(405)
    def method_not_allowed(e):
        return api_error(E.METHOD_NOT_ALLOWED, "Method not allowed")

    @app.errorhandler(500)
    def server_error(e):
        logger.error("500 error on %s: %s", request.path, e, exc_info=True)
        return api_error(E.INTERNAL, "Internal server error", details=str(e))

    return app
