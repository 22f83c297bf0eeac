"""httpx client construction for remote services."""

import httpx

USER_AGENT = "email-alerts"


def create_http_client(
    *, auth_token: str | None = None, timeout: float = 10.0
) -> httpx.AsyncClient:
    """Create an httpx AsyncClient for a remote service.

    Args:
        auth_token: Optional bearer token sent with every request
        timeout: Request timeout in seconds

    Returns:
        Configured httpx AsyncClient
    """
    headers = {"User-Agent": USER_AGENT}
    if auth_token:
        headers["Authorization"] = f"Bearer {auth_token}"
    return httpx.AsyncClient(headers=headers, timeout=timeout)
