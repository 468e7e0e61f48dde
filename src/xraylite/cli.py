"""Command line interface."""

import sys
from typing import Optional

import click

from . import __version__, config
from .config import Settings
from .logging_config import configure_logging


def load_settings() -> Settings:
    """Load settings or exit with the configuration error."""
    try:
        return config.Settings.from_env()
    except config.ConfigError as e:
        click.echo(f"Error: {e}", err=True)
        click.echo("Copy .env.sample to .env and fill in all values.", err=True)
        sys.exit(1)


@click.group()
@click.version_option(__version__, prog_name="xraylite")
def main():
    """Test management REST API backed by Jira."""


@main.command()
@click.option("--host", default="0.0.0.0", show_default=True, help="Interface to bind")
@click.option(
    "-p", "--port",
    type=int,
    default=None,
    help="Port to listen on (default: PORT or 8080)",
)
@click.option("--debug", is_flag=True, default=False, help="Run Flask in debug mode")
def serve(host: str, port: Optional[int], debug: bool):
    """Start the HTTP server."""
    configure_logging(config.LOG_LEVEL, config.LOG_FORMAT)
    settings = load_settings()
    settings.log_summary()

    from .api import create_app
    app = create_app(settings)
    client = app.extensions["xraylite.jira_client"]
    try:
        app.run(host=host, port=port or settings.port, debug=debug)
    finally:
        client.close()


@main.command()
def check():
    """Validate configuration and print a summary."""
    settings = load_settings()
    for line in settings.summary_lines():
        click.echo(line)
    click.echo("Configuration OK")


if __name__ == "__main__":
    main()
