"""Error responses for the JSON API.

Client errors become 4xx responses carrying their code; failures of the
remote services become a 503 and are never reported as client errors.
"""

import logging
from collections.abc import Awaitable, Callable

from aiohttp import web

from email_alerts.core.errors import (
    ClientError,
    InvalidAddressError,
    ServiceError,
    ServiceUnavailableError,
)

logger = logging.getLogger(__name__)

Handler = Callable[[web.Request], Awaitable[web.StreamResponse]]


@web.middleware
async def error_middleware(
    request: web.Request, handler: Handler
) -> web.StreamResponse:
    try:
        return await handler(request)
    except ClientError as e:
        return client_error_response(e)
    except (ServiceUnavailableError, ServiceError) as e:
        logger.error(f"{request.method} {request.path}: {e}")
        return web.json_response(
            {
                "error": "service_unavailable",
                "message": "Sorry, we’re experiencing technical difficulties",
            },
            status=503,
        )


def client_error_response(error: ClientError) -> web.Response:
    body: dict[str, object] = {"error": error.code, "message": str(error)}
    if isinstance(error, InvalidAddressError):
        # Rejected value for correction, last known good address for context
        body["new_address"] = error.attempted_address
        body["address"] = error.current_address
    return web.json_response(body, status=error.status)
