"""Value objects for content items, subscriber lists and subscriptions.

Everything here is request-scoped: built from a content repository or
notification service response, used once, and dropped.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum
from typing import Any, TypedDict

from email_alerts.core.types import SubscriberId, SubscriptionId


class Frequency(StrEnum):
    """How often a subscriber receives batched notifications."""

    IMMEDIATELY = "immediately"
    DAILY = "daily"
    WEEKLY = "weekly"


@dataclass(frozen=True)
class Redirect:
    """Redirect rule of a content item."""

    destination: str | None = None


@dataclass(frozen=True)
class ChildTaxon:
    """Narrower taxon linked from a taxon content item."""

    title: str
    base_path: str

    def to_dict(self) -> dict[str, str]:
        """Convert to dictionary for JSON serialization."""
        return {"title": self.title, "base_path": self.base_path}


@dataclass(frozen=True)
class ContentItem:
    """Content item document returned by the content repository."""

    document_type: str
    title: str
    content_id: str
    base_path: str = ""
    redirects: tuple[Redirect, ...] = ()
    child_taxons: tuple[ChildTaxon, ...] = ()

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ContentItem:
        """Build a content item from content repository JSON.

        Args:
            data: Content item document

        Returns:
            ContentItem with missing optional fields defaulted
        """
        redirects = tuple(
            Redirect(destination=redirect.get("destination") or None)
            for redirect in data.get("redirects") or []
            if isinstance(redirect, dict)
        )
        links = data.get("links") or {}
        child_taxons = tuple(
            ChildTaxon(title=child.get("title", ""), base_path=child.get("base_path", ""))
            for child in links.get("child_taxons") or []
        )
        return cls(
            document_type=data.get("document_type", ""),
            title=data.get("title", ""),
            content_id=data.get("content_id", ""),
            base_path=data.get("base_path", ""),
            redirects=redirects,
            child_taxons=child_taxons,
        )


class SubscriberListParamsDict(TypedDict):
    """Wire body for the find-or-create subscriber list operation."""

    title: str
    links: dict[str, list[str]]


@dataclass(frozen=True)
class SubscriberListParams:
    """Parameters identifying a subscriber list in the notification service."""

    title: str
    links: dict[str, frozenset[str]]

    def to_dict(self) -> SubscriberListParamsDict:
        """Convert to dictionary for JSON serialization."""
        return {
            "title": self.title,
            "links": {
                relation: sorted(content_ids)
                for relation, content_ids in self.links.items()
            },
        }


@dataclass(frozen=True)
class RedirectTarget:
    """Content item is a redirect; resolve again against the destination."""

    destination: str


@dataclass(frozen=True)
class SubscriberListRef:
    """Subscriber list as identified by the notification service."""

    slug: str


@dataclass(frozen=True)
class AuthenticatedIdentity:
    """Subscriber identity established by the authentication gate."""

    subscriber_id: SubscriberId


@dataclass(frozen=True)
class Subscriber:
    """Subscriber as known to the notification service.

    ``address`` is None when the notification service has no record of the
    subscriber.
    """

    id: SubscriberId
    address: str | None


@dataclass(frozen=True)
class SubscriberList:
    """Subscriber list summary attached to a subscription."""

    title: str
    url: str | None = None


class SubscriptionDict(TypedDict):
    """Dictionary representation of a subscription."""

    id: str
    frequency: str
    created_at: str | None
    subscriber_list: dict[str, str]


@dataclass(frozen=True)
class Subscription:
    """Subscription of a subscriber to one subscriber list."""

    id: SubscriptionId
    frequency: Frequency | str
    subscriber_list: SubscriberList
    created_at: datetime | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Subscription:
        """Build a subscription from notification service JSON.

        Unknown frequency tokens are kept as given; the notification
        service is the source of truth for what it stores.
        """
        raw_frequency = data.get("frequency", Frequency.IMMEDIATELY)
        try:
            frequency: Frequency | str = Frequency(raw_frequency)
        except ValueError:
            frequency = raw_frequency

        raw_list = data.get("subscriber_list") or {}
        return cls(
            id=SubscriptionId(str(data["id"])),
            frequency=frequency,
            subscriber_list=SubscriberList(
                title=raw_list.get("title", ""),
                url=raw_list.get("url"),
            ),
            created_at=parse_timestamp(data.get("created_at")),
        )

    def to_dict(self) -> SubscriptionDict:
        """Convert to dictionary for JSON serialization."""
        subscriber_list = {"title": self.subscriber_list.title}
        if self.subscriber_list.url:
            subscriber_list["url"] = self.subscriber_list.url
        return {
            "id": self.id,
            "frequency": str(self.frequency),
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "subscriber_list": subscriber_list,
        }


@dataclass
class SubscriptionContext:
    """Subscriber state loaded once per request.

    Subscriptions are keyed by id; a subscription is owned by the
    subscriber exactly when its id is a key here.
    """

    identity: AuthenticatedIdentity
    subscriber: Subscriber
    subscriptions: dict[SubscriptionId, Subscription] = field(default_factory=dict)

    @property
    def subscriber_id(self) -> SubscriberId:
        return self.identity.subscriber_id


def parse_timestamp(value: object) -> datetime | None:
    """Parse a notification service timestamp.

    Accepts ISO 8601 and the ``YYYY-MM-DD HH:MM:SS +HH:MM`` form.

    Returns:
        Parsed datetime, or None when missing or unparseable
    """
    if not isinstance(value, str) or not value:
        return None
    try:
        return datetime.fromisoformat(value)
    except ValueError:
        pass
    try:
        return datetime.strptime(value, "%Y-%m-%d %H:%M:%S %z")
    except ValueError:
        return None
