"""Authentication gate for subscription management.

Subscribers are authenticated upstream; this module only reads the identity
the gateway forwards with each request.
"""

from collections.abc import Callable

from aiohttp import web

from email_alerts.config import DEFAULT_SUBSCRIBER_HEADER
from email_alerts.core.errors import UnauthenticatedError
from email_alerts.core.models import AuthenticatedIdentity
from email_alerts.core.types import SubscriberId

Authenticator = Callable[[web.Request], AuthenticatedIdentity | None]


class HeaderAuthenticator:
    """Reads the subscriber id forwarded by the gateway in a request header."""

    def __init__(self, header: str = DEFAULT_SUBSCRIBER_HEADER) -> None:
        self.header = header

    def __call__(self, request: web.Request) -> AuthenticatedIdentity | None:
        subscriber_id = request.headers.get(self.header, "").strip()
        if not subscriber_id:
            return None
        return AuthenticatedIdentity(subscriber_id=SubscriberId(subscriber_id))


def require_identity(
    request: web.Request, authenticator: Authenticator
) -> AuthenticatedIdentity:
    """Return the authenticated subscriber for a request.

    Raises:
        UnauthenticatedError: If the request carries no identity
    """
    identity = authenticator(request)
    if identity is None:
        raise UnauthenticatedError("Authentication required")
    return identity
