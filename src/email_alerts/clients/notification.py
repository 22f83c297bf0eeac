"""Notification service API client.

Async HTTP client for the notification service that stores subscriber lists,
subscribers and subscriptions. HTTP failures are translated into the error
taxonomy: 404 and 422 become service errors the caller decides about,
everything else, malformed bodies included, is a service outage.
"""

import logging
from dataclasses import dataclass
from typing import Any, TypedDict

import httpx

from email_alerts.core.errors import (
    ServiceNotFoundError,
    ServiceUnavailableError,
    ServiceUnprocessableError,
)
from email_alerts.core.models import (
    Subscriber,
    SubscriberListParams,
    SubscriberListRef,
    Subscription,
)
from email_alerts.core.types import SubscriberId, SubscriptionId

logger = logging.getLogger(__name__)


# Notification service response TypedDicts


class SubscriberDict(TypedDict):
    """Subscriber object."""

    id: str
    address: str


class SubscriptionDetailsDict(TypedDict):
    """Response of the subscriber subscriptions endpoint."""

    subscriber: SubscriberDict
    subscriptions: list[dict[str, Any]]


@dataclass(frozen=True)
class SubscriptionDetails:
    """Subscriber with their current subscriptions."""

    subscriber: Subscriber
    subscriptions: list[Subscription]


class NotificationServiceClient:
    """Async HTTP client for the notification service API."""

    def __init__(self, client: httpx.AsyncClient, base_url: str):
        """Initialize notification service client.

        Args:
            client: httpx AsyncClient, carrying auth headers if required
            base_url: Notification service base URL
        """
        self.client = client
        self.base_url = base_url.rstrip("/")

    async def find_or_create_subscriber_list(
        self, params: SubscriberListParams
    ) -> SubscriberListRef:
        """Find the subscriber list matching params, creating it if needed.

        Args:
            params: Subscriber list title and links

        Returns:
            Reference to the subscriber list

        Raises:
            ServiceUnprocessableError: If the service rejects the params
            ServiceUnavailableError: If the request fails
        """
        payload = params.to_dict()
        logger.info(f'Finding or creating subscriber list "{params.title}"')
        logger.debug(f"Payload: {payload}")
        data = await self._request("POST", "/subscriber-lists", json=payload)
        try:
            slug = data["subscriber_list"]["slug"]
        except (KeyError, TypeError) as e:
            raise ServiceUnavailableError(
                f"Subscriber list response has no slug: {data}"
            ) from e
        logger.info(f"Subscriber list slug: {slug}")
        return SubscriberListRef(slug=slug)

    async def get_subscriptions(self, subscriber_id: SubscriberId) -> SubscriptionDetails:
        """Get a subscriber and their active subscriptions.

        Args:
            subscriber_id: Subscriber ID

        Returns:
            Subscriber details with subscriptions in service order

        Raises:
            ServiceNotFoundError: If the subscriber is unknown
            ServiceUnavailableError: If the request fails
        """
        logger.info(f"Getting subscriptions for subscriber {subscriber_id}")
        data: SubscriptionDetailsDict = await self._request(
            "GET", f"/subscribers/{subscriber_id}/subscriptions"
        )

        try:
            raw_subscriber = data.get("subscriber") or {}
            subscriber = Subscriber(
                id=SubscriberId(str(raw_subscriber.get("id", subscriber_id))),
                address=raw_subscriber.get("address"),
            )
            subscriptions = [
                Subscription.from_dict(item) for item in data.get("subscriptions") or []
            ]
        except (KeyError, TypeError, AttributeError) as e:
            raise ServiceUnavailableError(
                f"Malformed subscriptions response for subscriber {subscriber_id}"
            ) from e
        logger.info(
            f"Found {len(subscriptions)} subscriptions for subscriber {subscriber_id}"
        )
        return SubscriptionDetails(subscriber, subscriptions)

    async def change_subscription(
        self, subscription_id: SubscriptionId, frequency: str
    ) -> None:
        """Change how often a subscription is delivered.

        Raises:
            ServiceNotFoundError: If the subscription is unknown
            ServiceUnprocessableError: If the frequency is rejected
            ServiceUnavailableError: If the request fails
        """
        logger.info(f"Changing subscription {subscription_id} to {frequency}")
        await self._request(
            "PATCH", f"/subscriptions/{subscription_id}", json={"frequency": frequency}
        )

    async def change_subscriber(
        self, subscriber_id: SubscriberId, new_address: str
    ) -> Subscriber:
        """Change a subscriber's email address.

        Returns:
            Updated subscriber

        Raises:
            ServiceNotFoundError: If the subscriber is unknown
            ServiceUnprocessableError: If the address is rejected
            ServiceUnavailableError: If the request fails
        """
        logger.info(f"Changing address of subscriber {subscriber_id}")
        data = await self._request(
            "PATCH", f"/subscribers/{subscriber_id}", json={"new_address": new_address}
        )
        raw_subscriber = data.get("subscriber")
        if not isinstance(raw_subscriber, dict):
            raw_subscriber = {}
        return Subscriber(
            id=subscriber_id,
            address=raw_subscriber.get("address", new_address),
        )

    async def unsubscribe_subscriber(self, subscriber_id: SubscriberId) -> None:
        """Unsubscribe a subscriber from every subscriber list.

        Raises:
            ServiceNotFoundError: If the subscriber is unknown or has no
                subscriptions left
            ServiceUnavailableError: If the request fails
        """
        logger.info(f"Unsubscribing subscriber {subscriber_id} from all lists")
        await self._request("DELETE", f"/subscribers/{subscriber_id}")

    async def _request(
        self, method: str, path: str, *, json: Any = None
    ) -> Any:
        """Send a request and decode the JSON body.

        Returns:
            Decoded JSON body, or an empty dict for empty responses
        """
        try:
            response = await self.client.request(
                method,
                f"{self.base_url}{path}",
                json=json,
                headers={"Accept": "application/json"},
            )
        except httpx.HTTPError as e:
            logger.error(f"Notification service request failed: {method} {path}: {e}")
            raise ServiceUnavailableError(
                f"Notification service unreachable: {e}"
            ) from e

        if response.status_code == 404:
            raise ServiceNotFoundError(f"Not found: {method} {path}", 404)
        if response.status_code == 422:
            logger.error(f"Unprocessable response: {response.text}")
            raise ServiceUnprocessableError(
                f"Unprocessable: {method} {path}: {response.text}", 422
            )
        if response.status_code >= 400:
            logger.error(f"Error response: {response.text}")
            raise ServiceUnavailableError(
                f"Notification service returned {response.status_code} "
                f"for {method} {path}"
            )

        if not response.content:
            return {}
        try:
            data = response.json()
        except ValueError as e:
            raise ServiceUnavailableError(
                f"Notification service returned invalid JSON for {method} {path}"
            ) from e
        if not isinstance(data, dict):
            raise ServiceUnavailableError(
                f"Notification service returned a non-object body for {method} {path}"
            )
        return data
