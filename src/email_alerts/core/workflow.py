"""Subscription management for an authenticated subscriber.

Every request starts with load(), which fetches the subscriber and their
subscriptions once and returns a SubscriptionContext. The remaining
operations take that context; none of them keeps state between requests.

Ownership is checked by key presence in the context's subscription map, so a
subscription belonging to someone else is reported exactly like one that
does not exist.
"""

import logging
from dataclasses import dataclass

from email_alerts.clients.notification import NotificationServiceClient
from email_alerts.core import messages
from email_alerts.core.errors import (
    InvalidAddressError,
    InvalidFrequencyError,
    MissingAddressError,
    NotFoundError,
    ServiceNotFoundError,
    ServiceUnprocessableError,
)
from email_alerts.core.models import (
    AuthenticatedIdentity,
    Subscriber,
    Subscription,
    SubscriptionContext,
)
from email_alerts.core.types import SubscriptionId

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SubscriptionsView:
    """Subscriber address and subscriptions for presentation."""

    address: str | None
    subscriptions: list[Subscription]

    def to_dict(self) -> dict[str, object]:
        """Convert to dictionary for JSON serialization."""
        result: dict[str, object] = {
            "address": self.address,
            "subscriptions": [s.to_dict() for s in self.subscriptions],
        }
        if not self.subscriptions:
            result["message"] = messages.NO_SUBSCRIPTIONS
        return result


@dataclass(frozen=True)
class FrequencyChangePrompt:
    """Current state shown before changing a subscription's frequency."""

    subscription: Subscription

    @property
    def current_frequency(self) -> str:
        return str(self.subscription.frequency)


@dataclass(frozen=True)
class FrequencyChanged:
    """Confirmation of a frequency change."""

    subscription_id: SubscriptionId
    subscription_title: str
    frequency: str
    message: str


@dataclass(frozen=True)
class AddressChanged:
    """Confirmation of an address change."""

    address: str
    message: str


@dataclass(frozen=True)
class UnsubscribeAllPrompt:
    """State shown before unsubscribing from everything."""

    address: str | None
    subscription_count: int
    description: str = messages.CONFIRM_UNSUBSCRIBE_ALL


@dataclass(frozen=True)
class UnsubscribedAll:
    """Confirmation of unsubscribing from everything."""

    message: str = messages.UNSUBSCRIBED_ALL
    description: str = messages.UNSUBSCRIBED_ALL_DESCRIPTION


class SubscriptionWorkflow:
    """Subscription management operations backed by the notification service.

    Each operation makes at most one notification service call and never
    retries. ServiceUnavailableError from the client propagates unchanged.
    """

    def __init__(self, notification_service: NotificationServiceClient) -> None:
        self.notification_service = notification_service

    async def load(self, identity: AuthenticatedIdentity) -> SubscriptionContext:
        """Fetch the subscriber's current state.

        A subscriber unknown to the notification service gets an empty
        context; having no subscriptions is not an error.

        Args:
            identity: Authenticated subscriber

        Returns:
            Context to pass to the other operations
        """
        try:
            details = await self.notification_service.get_subscriptions(
                identity.subscriber_id
            )
        except ServiceNotFoundError:
            logger.warning(
                f"Subscriber {identity.subscriber_id} unknown to notification "
                "service, continuing without subscriptions"
            )
            return SubscriptionContext(
                identity=identity,
                subscriber=Subscriber(id=identity.subscriber_id, address=None),
            )

        return SubscriptionContext(
            identity=identity,
            subscriber=details.subscriber,
            subscriptions={s.id: s for s in details.subscriptions},
        )

    def list_subscriptions(self, ctx: SubscriptionContext) -> SubscriptionsView:
        return SubscriptionsView(
            address=ctx.subscriber.address,
            subscriptions=list(ctx.subscriptions.values()),
        )

    def begin_frequency_change(
        self, ctx: SubscriptionContext, subscription_id: str
    ) -> FrequencyChangePrompt:
        """Return the subscription whose frequency is about to change.

        Raises:
            NotFoundError: If the subscriber has no such subscription
        """
        return FrequencyChangePrompt(
            subscription=self._owned_subscription(ctx, subscription_id)
        )

    async def apply_frequency_change(
        self, ctx: SubscriptionContext, subscription_id: str, new_frequency: str | None
    ) -> FrequencyChanged:
        """Change how often a subscription is delivered.

        Args:
            ctx: Loaded subscriber context
            subscription_id: Subscription to change
            new_frequency: Requested frequency token

        Returns:
            Confirmation with a sentence naming the list and frequency

        Raises:
            NotFoundError: If the subscriber has no such subscription
            InvalidFrequencyError: If the frequency is missing or rejected
        """
        subscription = self._owned_subscription(ctx, subscription_id)
        if not new_frequency:
            raise InvalidFrequencyError(messages.INVALID_FREQUENCY)

        try:
            await self.notification_service.change_subscription(
                subscription.id, new_frequency
            )
        except ServiceUnprocessableError as e:
            raise InvalidFrequencyError(messages.INVALID_FREQUENCY) from e
        except ServiceNotFoundError as e:
            raise NotFoundError(messages.SUBSCRIPTION_NOT_FOUND) from e

        title = subscription.subscriber_list.title
        return FrequencyChanged(
            subscription_id=subscription.id,
            subscription_title=title,
            frequency=new_frequency,
            message=messages.FREQUENCY_CHANGED.format(
                subscription_title=title,
                frequency=messages.frequency_text(new_frequency),
            ),
        )

    def begin_address_change(self, ctx: SubscriptionContext) -> str | None:
        return ctx.subscriber.address

    async def apply_address_change(
        self, ctx: SubscriptionContext, new_address: str | None
    ) -> AddressChanged:
        """Change the subscriber's email address.

        Raises:
            MissingAddressError: If the address is empty or blank
            InvalidAddressError: If the notification service rejects it;
                carries both the rejected and the current address
        """
        if new_address is None or not new_address.strip():
            raise MissingAddressError(messages.MISSING_ADDRESS)

        try:
            await self.notification_service.change_subscriber(
                ctx.subscriber_id, new_address
            )
        except ServiceUnprocessableError as e:
            raise InvalidAddressError(
                new_address, ctx.subscriber.address, messages.INVALID_ADDRESS
            ) from e
        except ServiceNotFoundError as e:
            raise NotFoundError(f"Subscriber not found: {ctx.subscriber_id}") from e

        return AddressChanged(
            address=new_address,
            message=messages.ADDRESS_CHANGED.format(address=new_address),
        )

    def confirm_unsubscribe_all(self, ctx: SubscriptionContext) -> UnsubscribeAllPrompt:
        return UnsubscribeAllPrompt(
            address=ctx.subscriber.address,
            subscription_count=len(ctx.subscriptions),
        )

    async def apply_unsubscribe_all(self, ctx: SubscriptionContext) -> UnsubscribedAll:
        """Unsubscribe the subscriber from every list.

        Already being unsubscribed counts as success.
        """
        try:
            await self.notification_service.unsubscribe_subscriber(ctx.subscriber_id)
        except ServiceNotFoundError:
            logger.warning(f"Subscriber {ctx.subscriber_id} already unsubscribed")
        return UnsubscribedAll()

    def _owned_subscription(
        self, ctx: SubscriptionContext, subscription_id: str
    ) -> Subscription:
        subscription = ctx.subscriptions.get(SubscriptionId(subscription_id))
        if subscription is None:
            raise NotFoundError(messages.SUBSCRIPTION_NOT_FOUND)
        return subscription
