"""Content item to subscriber list resolution.

Maps a content item to the parameters identifying the subscriber list that
tracks it in the notification service. The mapping is closed: document types
missing from RELATIONS cannot be subscribed to.
"""

from urllib.parse import urlencode

from email_alerts.core.errors import NotFoundError, UnsupportedContentItemError
from email_alerts.core.models import ContentItem, RedirectTarget, SubscriberListParams

REDIRECT_DOCUMENT_TYPE = "redirect"
TAXON_DOCUMENT_TYPE = "taxon"

# document_type -> link relation tracked by the subscriber list
RELATIONS: dict[str, str] = {
    "taxon": "taxon_tree",
    "organisation": "organisations",
    "person": "people",
    "ministerial_role": "roles",
    "topical_event": "topical_events",
    "topic": "topics",
    "service_manual_topic": "service_manual_topics",
    "service_manual_service_standard": "parent",
}

NEW_SUBSCRIPTION_PATH = "/email/subscriptions/new"


class ListResolver:
    """Resolves content items to subscriber list parameters."""

    def __init__(self, relations: dict[str, str] | None = None) -> None:
        self.relations = dict(RELATIONS if relations is None else relations)

    def resolve(self, content_item: ContentItem) -> SubscriberListParams | RedirectTarget:
        """Resolve a content item.

        Redirects are checked before anything else; the caller must resolve
        the returned destination instead.

        Args:
            content_item: Content item from the content repository

        Returns:
            Subscriber list params, or a RedirectTarget for redirect items

        Raises:
            NotFoundError: If the item is a redirect without a destination
            UnsupportedContentItemError: If no relation tracks the document type
        """
        redirect = redirect_target(content_item)
        if redirect is not None:
            return redirect

        relation = self.relations.get(content_item.document_type)
        if relation is None:
            raise UnsupportedContentItemError(content_item.document_type)

        return SubscriberListParams(
            title=content_item.title,
            links={relation: frozenset([content_item.content_id])},
        )


def redirect_target(content_item: ContentItem) -> RedirectTarget | None:
    """Return where a redirect content item points, if it is one.

    Raises:
        NotFoundError: If the item is a redirect without a destination
    """
    if content_item.document_type != REDIRECT_DOCUMENT_TYPE:
        return None
    # Only the first rule counts, even when a later one has a destination
    destination = None
    if content_item.redirects:
        destination = content_item.redirects[0].destination
    if not destination:
        raise NotFoundError(f"Redirect has no destination: {content_item.base_path}")
    return RedirectTarget(destination=destination)


def is_taxon_with_children(content_item: ContentItem) -> bool:
    """Whether the visitor should be offered narrower taxons first."""
    return (
        content_item.document_type == TAXON_DOCUMENT_TYPE
        and len(content_item.child_taxons) > 0
    )


def subscription_management_url(slug: str) -> str:
    """Build the navigation target for subscribing to a subscriber list."""
    return f"{NEW_SUBSCRIPTION_PATH}?{urlencode({'topic_id': slug})}"
