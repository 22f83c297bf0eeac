"""Signup to email alerts for an arbitrary content item.

Looks up the requested content item, follows redirect items, resolves the
subscriber list it maps to and finds or creates that list.
"""

import logging
from dataclasses import dataclass
from urllib.parse import urlsplit

from email_alerts.clients.content_store import ContentStoreClient
from email_alerts.clients.notification import NotificationServiceClient
from email_alerts.core.errors import InvalidContentPathError
from email_alerts.core.models import ContentItem, RedirectTarget, SubscriberListParams
from email_alerts.core.resolver import (
    ListResolver,
    is_taxon_with_children,
    subscription_management_url,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SignupPreparation:
    """Content item ready to be subscribed to."""

    content_item: ContentItem
    params: SubscriberListParams

    @property
    def view(self) -> str:
        """Step to present: pick a narrower taxon, or confirm."""
        return "taxon" if is_taxon_with_children(self.content_item) else "confirm"


@dataclass(frozen=True)
class SignupResult:
    """Subscriber list found or created for a content item."""

    slug: str
    url: str


def validate_content_path(path: str | None) -> str:
    """Check that a requested content path is a relative path on this site.

    Raises:
        InvalidContentPathError: If the path is missing, absolute, or
            network-relative
    """
    if not path or not path.startswith("/") or path.startswith("//"):
        raise InvalidContentPathError(path)
    try:
        parts = urlsplit(path)
    except ValueError as e:
        raise InvalidContentPathError(path) from e
    if parts.scheme or parts.netloc:
        raise InvalidContentPathError(path)
    return path


class ContentItemSignup:
    """Signup flow from a content path to a subscriber list."""

    def __init__(
        self,
        content_store: ContentStoreClient,
        notification_service: NotificationServiceClient,
        resolver: ListResolver | None = None,
    ) -> None:
        self.content_store = content_store
        self.notification_service = notification_service
        self.resolver = resolver or ListResolver()

    async def prepare(self, path: str | None) -> SignupPreparation | RedirectTarget:
        """Look up and resolve the content item at a path.

        Returns:
            Preparation for the content item, or the redirect destination
            to prepare instead

        Raises:
            InvalidContentPathError: If the path is not a site path
            NotFoundError: If no content item (or redirect destination) exists
            UnsupportedContentItemError: If the item cannot be subscribed to
        """
        content_path = validate_content_path(path)
        content_item = await self.content_store.content_item(content_path)

        resolved = self.resolver.resolve(content_item)
        if isinstance(resolved, RedirectTarget):
            logger.info(f"{content_path} redirects to {resolved.destination}")
            return resolved
        return SignupPreparation(content_item=content_item, params=resolved)

    async def create(self, path: str | None) -> SignupResult | RedirectTarget:
        """Find or create the subscriber list for the content item at a path.

        Returns:
            Slug and navigation target, or the redirect destination to
            sign up to instead
        """
        prepared = await self.prepare(path)
        if isinstance(prepared, RedirectTarget):
            return prepared
        return await self.subscribe(prepared)

    async def subscribe(self, prepared: SignupPreparation) -> SignupResult:
        """Find or create the subscriber list for a prepared content item."""
        subscriber_list = await self.notification_service.find_or_create_subscriber_list(
            prepared.params
        )
        return SignupResult(
            slug=subscriber_list.slug,
            url=subscription_management_url(subscriber_list.slug),
        )
