"""CLI interface for email alerts.

Command-line tool for running the signup and subscription management
server and for checking how content items resolve to subscriber lists.
"""

import asyncio
import json
import logging
import sys
from pathlib import Path

import click

from email_alerts.config import Config
from email_alerts.core.errors import ClientError, ServiceError, ServiceUnavailableError

MAX_REDIRECTS = 10


@click.group()
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Enable debug logging",
)
def cli(verbose: bool) -> None:
    """Email alert signup and subscription management."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@cli.command()
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=True, path_type=Path),
    default=None,
    help="Path to configuration file (default: auto-discover email-alerts.toml)",
)
@click.option(
    "--host",
    default=None,
    help="Host to bind to (overrides config)",
)
@click.option(
    "--port",
    "-p",
    type=int,
    default=None,
    help="Port to bind to (overrides config)",
)
@click.option(
    "--notification-service-url",
    default=None,
    help="Notification service base URL (overrides config)",
)
@click.option(
    "--content-store-url",
    default=None,
    help="Content repository base URL (overrides config)",
)
def serve(
    config_path: Path | None,
    host: str | None,
    port: int | None,
    notification_service_url: str | None,
    content_store_url: str | None,
) -> None:
    """Start the API server."""
    from email_alerts.server import run_server

    config = Config.load(config_path).with_overrides(
        host=host,
        port=port,
        notification_service_url=notification_service_url,
        content_store_url=content_store_url,
    )

    click.echo(f"Starting server on {config.server.host}:{config.server.port}")
    click.echo(f"Notification service: {config.notification_service.base_url}")
    click.echo(f"Content store: {config.content_store.base_url}")

    run_server(config)


@cli.command()
@click.argument("path")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=True, path_type=Path),
    default=None,
    help="Path to configuration file (default: auto-discover email-alerts.toml)",
)
@click.option(
    "--create",
    is_flag=True,
    help="Find or create the subscriber list and print the signup URL",
)
def resolve(path: str, config_path: Path | None, create: bool) -> None:
    """Show the subscriber list a content item resolves to."""
    try:
        config = Config.load(config_path)
        asyncio.run(_resolve(config, path, create))
    except ClientError as e:
        click.echo(click.style(f"Error: {e}", fg="red"), err=True)
        sys.exit(1)
    except (ServiceUnavailableError, ServiceError) as e:
        click.echo(click.style(f"Service error: {e}", fg="red"), err=True)
        sys.exit(1)


async def _resolve(config: Config, path: str, create: bool) -> None:
    """Resolve a content path, following redirects.

    Args:
        config: Application configuration
        path: Content item base path
        create: Also find or create the subscriber list
    """
    from email_alerts.clients import (
        ContentStoreClient,
        NotificationServiceClient,
        create_http_client,
    )
    from email_alerts.core.models import RedirectTarget
    from email_alerts.core.signup import ContentItemSignup

    async with (
        create_http_client(timeout=config.content_store.timeout) as store_http,
        create_http_client(
            auth_token=config.notification_service.auth_token,
            timeout=config.notification_service.timeout,
        ) as notification_http,
    ):
        signup = ContentItemSignup(
            ContentStoreClient(store_http, config.content_store.base_url),
            NotificationServiceClient(
                notification_http, config.notification_service.base_url
            ),
        )

        prepared = await signup.prepare(path)
        for _ in range(MAX_REDIRECTS):
            if not isinstance(prepared, RedirectTarget):
                break
            click.echo(f"{path} redirects to {prepared.destination}")
            path = prepared.destination
            prepared = await signup.prepare(path)
        if isinstance(prepared, RedirectTarget):
            raise click.ClickException(f"Too many redirects resolving {path}")

        click.echo(json.dumps(prepared.params.to_dict(), indent=2))

        if create:
            result = await signup.subscribe(prepared)
            click.echo(click.style(f"Subscriber list: {result.slug}", fg="green"))
            click.echo(f"Signup URL: {result.url}")
