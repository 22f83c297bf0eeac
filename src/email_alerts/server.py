"""aiohttp server for email alerts.

Application factory and route registration.
"""

import logging

import httpx
from aiohttp import web

from email_alerts.api.errors import error_middleware
from email_alerts.api.manage import create_manage_routes
from email_alerts.api.signups import create_signups_routes
from email_alerts.app_keys import (
    authenticator_key,
    content_store_key,
    notification_client_key,
    signup_key,
    workflow_key,
)
from email_alerts.auth import Authenticator, HeaderAuthenticator
from email_alerts.clients import (
    ContentStoreClient,
    NotificationServiceClient,
    create_http_client,
)
from email_alerts.config import Config
from email_alerts.core.signup import ContentItemSignup
from email_alerts.core.workflow import SubscriptionWorkflow

logger = logging.getLogger(__name__)

http_clients_key = web.AppKey("http_clients", list[httpx.AsyncClient])


def create_app(
    config: Config,
    *,
    notification_client: NotificationServiceClient | None = None,
    content_store: ContentStoreClient | None = None,
    authenticator: Authenticator | None = None,
) -> web.Application:
    """Create aiohttp application.

    Clients not passed in are built from the configuration and closed on
    application cleanup.

    Args:
        config: Application configuration
        notification_client: Notification service client to use instead
        content_store: Content repository client to use instead
        authenticator: Authentication gate to use instead of the header gate

    Returns:
        Configured aiohttp application
    """
    app = web.Application(middlewares=[error_middleware])
    owned: list[httpx.AsyncClient] = []

    if notification_client is None:
        http_client = create_http_client(
            auth_token=config.notification_service.auth_token,
            timeout=config.notification_service.timeout,
        )
        owned.append(http_client)
        notification_client = NotificationServiceClient(
            http_client, config.notification_service.base_url
        )

    if content_store is None:
        http_client = create_http_client(timeout=config.content_store.timeout)
        owned.append(http_client)
        content_store = ContentStoreClient(http_client, config.content_store.base_url)

    if authenticator is None:
        authenticator = HeaderAuthenticator(config.auth.subscriber_header)

    app[notification_client_key] = notification_client
    app[content_store_key] = content_store
    app[signup_key] = ContentItemSignup(content_store, notification_client)
    app[workflow_key] = SubscriptionWorkflow(notification_client)
    app[authenticator_key] = authenticator
    app[http_clients_key] = owned

    app.router.add_routes(create_signups_routes())
    app.router.add_routes(create_manage_routes())

    app.on_cleanup.append(_close_http_clients)

    return app


async def _close_http_clients(app: web.Application) -> None:
    """Close the httpx clients created by create_app."""
    for client in app[http_clients_key]:
        await client.aclose()


def run_server(config: Config) -> None:
    """Run the server.

    Args:
        config: Application configuration
    """
    app = create_app(config)
    logger.info(f"Starting server on {config.server.host}:{config.server.port}")
    web.run_app(app, host=config.server.host, port=config.server.port)
