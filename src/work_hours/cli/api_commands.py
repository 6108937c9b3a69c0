"""CLI commands for API management.

This module provides commands for running the Work Hours REST API,
generating tokens, and checking its configuration.
"""

import sys
from pathlib import Path
from typing import Optional

import click

from work_hours.api.auth import create_token_for_user
from work_hours.api.server import run_server
from work_hours.core.config import ConfigManager


def _config_manager(ctx: click.Context) -> ConfigManager:
    if ctx.obj and ctx.obj.get("config") is not None:
        config: ConfigManager = ctx.obj["config"]
        return config
    return ConfigManager()


@click.group()
def api() -> None:
    """API server management commands."""
    pass


@api.command()
@click.option("--host", default=None, help="Host address (default: from config)")
@click.option("--port", type=int, default=None, help="Port number (default: from config)")
@click.option("--reload", is_flag=True, help="Enable auto-reload for development")
@click.option("--ssl-cert", type=click.Path(exists=True), help="Path to SSL certificate file")
@click.option("--ssl-key", type=click.Path(exists=True), help="Path to SSL key file")
@click.pass_context
def serve(
    ctx: click.Context,
    host: Optional[str],
    port: Optional[int],
    reload: bool,
    ssl_cert: Optional[str],
    ssl_key: Optional[str],
) -> None:
    """Start the API server.

    The server reads and writes the data directory set in general.data_dir.

    Examples:
        work-hours api serve
        work-hours api serve --host 0.0.0.0 --port 8080
        work-hours api serve --reload  # Development mode
    """
    config = _config_manager(ctx)

    if not config.get("api.enabled", False):
        click.echo(click.style("API is not enabled in configuration", fg="yellow"), err=True)
        click.echo("\nTo enable the API, run:")
        click.echo("  work-hours config set api.enabled true")
        sys.exit(1)

    config.ensure_api_secret_key()

    final_host = host or config.get("api.host", "localhost")
    final_port = port or config.get("api.port", 8000)

    ssl_cert_path = Path(ssl_cert) if ssl_cert and ssl_key else None
    ssl_key_path = Path(ssl_key) if ssl_cert and ssl_key else None

    protocol = "https" if ssl_cert_path else "http"
    click.echo("Starting Work Hours API server...")
    click.echo(f"   URL: {protocol}://{final_host}:{final_port}")
    click.echo(f"   Docs: {protocol}://{final_host}:{final_port}/docs")
    if reload:
        click.echo("   Mode: Development (auto-reload enabled)")
    click.echo()

    try:
        run_server(
            config=config,
            host=final_host,
            port=final_port,
            reload=reload,
            workers=config.get("api.workers", 1),
            ssl_certfile=ssl_cert_path,
            ssl_keyfile=ssl_key_path,
        )
    except KeyboardInterrupt:
        click.echo("\n\nShutting down API server...")
    except OSError as e:
        click.echo(click.style(f"Error starting server: {e}", fg="red"), err=True)
        sys.exit(1)


@api.group()
def token() -> None:
    """Manage API authentication tokens."""
    pass


@token.command("create")
@click.option("--user-id", default=None, help="Token subject (default: the CLI user)")
@click.pass_context
def create_token_cmd(ctx: click.Context, user_id: Optional[str]) -> None:
    """Create a new authentication token.

    The token's subject is the identity that owns jobs and shifts
    created through the API.

    Examples:
        work-hours api token create
        work-hours api token create --user-id alice
    """
    config = _config_manager(ctx)
    subject = user_id or (ctx.obj or {}).get("user")

    token_data = create_token_for_user(config, user_id=subject)
    expires_hours = token_data["expires_in"] // 3600

    click.echo("Token created successfully!")
    click.echo()
    click.echo(f"Token: {token_data['access_token']}")
    click.echo(f"Expires in: {expires_hours} hours")
    click.echo()
    click.echo("Use this token in API requests:")
    click.echo(f"  Authorization: Bearer {token_data['access_token']}")
    click.echo()
    click.echo("Example curl command:")
    host = config.get("api.host", "localhost")
    port = config.get("api.port", 8000)
    click.echo(
        f'  curl -H "Authorization: Bearer {token_data["access_token"]}" '
        f"http://{host}:{port}/api/v1/jobs/"
    )


@api.command()
@click.pass_context
def status(ctx: click.Context) -> None:
    """Show API configuration status."""
    config = _config_manager(ctx)

    click.echo("Work Hours API Status")
    click.echo("=" * 50)

    enabled = config.get("api.enabled", False)
    click.echo(f"\nAPI Enabled: {enabled}")

    if not enabled:
        click.echo("\nTo enable the API:")
        click.echo("  work-hours config set api.enabled true")
        return

    click.echo("\nServer Configuration:")
    host = config.get("api.host", "localhost")
    port = config.get("api.port", 8000)
    click.echo(f"  Host: {host}")
    click.echo(f"  Port: {port}")
    click.echo(f"  Workers: {config.get('api.workers', 1)}")

    click.echo("\nAuthentication:")
    auth_enabled = config.get("api.authentication.enabled", True)
    click.echo(f"  Enabled: {auth_enabled}")
    if auth_enabled:
        expiry = config.get("api.authentication.token_expiry_hours", 24)
        has_secret = bool(config.get("api.authentication.secret_key"))
        click.echo(f"  Token Expiry: {expiry} hours")
        click.echo(f"  Secret Key: {'Set' if has_secret else 'Not set'}")

    click.echo("\nCORS:")
    cors_enabled = config.get("api.cors.enabled", True)
    click.echo(f"  Enabled: {cors_enabled}")
    if cors_enabled:
        for origin in config.get("api.cors.origins", []):
            click.echo(f"    - {origin}")
