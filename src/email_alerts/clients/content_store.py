"""Content repository API client.

Looks up content item documents by base path.
"""

import logging
from urllib.parse import quote

import httpx

from email_alerts.core.errors import NotFoundError, ServiceUnavailableError
from email_alerts.core.models import ContentItem

logger = logging.getLogger(__name__)


class ContentStoreClient:
    """Async HTTP client for the content repository API."""

    def __init__(self, client: httpx.AsyncClient, base_url: str):
        """Initialize content store client.

        Args:
            client: httpx AsyncClient
            base_url: Content repository base URL
        """
        self.client = client
        self.base_url = base_url.rstrip("/")
        self.api_url = f"{self.base_url}/api/content"

    async def content_item(self, path: str) -> ContentItem:
        """Look up the content item published at a base path.

        Args:
            path: Base path starting with "/"

        Returns:
            Content item document

        Raises:
            NotFoundError: If nothing is published at the path
            ServiceUnavailableError: If the request fails
        """
        logger.info(f"Looking up content item {path}")
        try:
            response = await self.client.get(
                f"{self.api_url}{quote(path)}",
                headers={"Accept": "application/json"},
            )
        except httpx.HTTPError as e:
            logger.error(f"Content store request failed for {path}: {e}")
            raise ServiceUnavailableError(f"Content store unreachable: {e}") from e

        if response.status_code in (404, 410):
            raise NotFoundError(f"Content item not found: {path}")
        if response.status_code >= 400:
            logger.error(f"Error response: {response.text}")
            raise ServiceUnavailableError(
                f"Content store returned {response.status_code} for {path}"
            )

        try:
            data = response.json()
        except ValueError as e:
            raise ServiceUnavailableError(
                f"Content store returned invalid JSON for {path}"
            ) from e
        if not isinstance(data, dict):
            raise ServiceUnavailableError(
                f"Content store returned a non-object body for {path}"
            )
        try:
            return ContentItem.from_dict(data)
        except (TypeError, AttributeError) as e:
            raise ServiceUnavailableError(
                f"Content store returned a malformed content item for {path}"
            ) from e
