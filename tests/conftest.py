"""Shared test fixtures.

The notification service and content repository are replaced by in-memory
fakes served through httpx.MockTransport, so the real clients are exercised
end to end.
"""

import json
from typing import Any

import httpx
import pytest
from email_alerts.clients import ContentStoreClient, NotificationServiceClient
from email_alerts.config import Config
from email_alerts.core.models import AuthenticatedIdentity
from email_alerts.core.types import SubscriberId

NOTIFICATION_SERVICE_URL = "http://notifications.test"
CONTENT_STORE_URL = "http://content-store.test"

SUBSCRIBER_ID = "1"
SUBSCRIBER_ADDRESS = "test@example.com"
SUBSCRIPTION_ID = "5d1a1f39-8e86-4b5b-9b34-1d3a0c6d2f10"

FREQUENCIES = ("immediately", "daily", "weekly")


class FakeNotificationService:
    """In-memory notification service speaking its HTTP API."""

    def __init__(self) -> None:
        self.slug = "something"
        self.subscribers: dict[str, dict[str, Any]] = {}
        self.requests: list[httpx.Request] = []
        self.overrides: dict[tuple[str, str], httpx.Response] = {}
        self.unavailable = False

    def add_subscriber(
        self,
        subscriber_id: str,
        address: str,
        subscriptions: list[dict[str, Any]] | None = None,
    ) -> None:
        self.subscribers[subscriber_id] = {
            "address": address,
            "subscriptions": list(subscriptions or []),
        }

    def respond_with(self, method: str, path: str, response: httpx.Response) -> None:
        self.overrides[(method, path)] = response

    def calls(self, method: str | None = None) -> list[httpx.Request]:
        return [r for r in self.requests if method is None or r.method == method]

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.unavailable:
            raise httpx.ConnectError("connection refused", request=request)

        method, path = request.method, request.url.path
        if (method, path) in self.overrides:
            return self.overrides[(method, path)]

        parts = path.strip("/").split("/")
        body = json.loads(request.content) if request.content else {}

        if method == "POST" and parts == ["subscriber-lists"]:
            return httpx.Response(
                200,
                json={"subscriber_list": {"slug": self.slug, "title": body["title"]}},
            )

        if parts[0] == "subscribers" and len(parts) >= 2:
            subscriber = self.subscribers.get(parts[1])
            if subscriber is None:
                return httpx.Response(404, json={"error": "Not found"})
            if method == "GET" and parts[2:] == ["subscriptions"]:
                return httpx.Response(
                    200,
                    json={
                        "subscriber": {"id": parts[1], "address": subscriber["address"]},
                        "subscriptions": subscriber["subscriptions"],
                    },
                )
            if method == "PATCH" and len(parts) == 2:
                if "@" not in body.get("new_address", ""):
                    return httpx.Response(422, json={"error": "Invalid address"})
                subscriber["address"] = body["new_address"]
                return httpx.Response(
                    200,
                    json={"subscriber": {"id": parts[1], "address": body["new_address"]}},
                )
            if method == "DELETE" and len(parts) == 2:
                del self.subscribers[parts[1]]
                return httpx.Response(204)

        if method == "PATCH" and parts[0] == "subscriptions" and len(parts) == 2:
            if body.get("frequency") not in FREQUENCIES:
                return httpx.Response(422, json={"error": "Invalid frequency"})
            for subscriber in self.subscribers.values():
                for subscription in subscriber["subscriptions"]:
                    if subscription["id"] == parts[1]:
                        subscription["frequency"] = body["frequency"]
                        return httpx.Response(200, json={"subscription": subscription})
            return httpx.Response(404, json={"error": "Not found"})

        return httpx.Response(404, json={"error": "No route"})


class FakeContentStore:
    """In-memory content repository speaking its HTTP API."""

    def __init__(self) -> None:
        self.items: dict[str, dict[str, Any]] = {}
        self.requests: list[httpx.Request] = []

    def add_item(self, base_path: str, **fields: Any) -> dict[str, Any]:
        item = {"base_path": base_path, "title": "Foo", "content_id": "foo-id"}
        item.update(fields)
        self.items[base_path] = item
        return item

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path.removeprefix("/api/content")
        item = self.items.get(path)
        if item is None:
            return httpx.Response(404, json={"error": "Not found"})
        return httpx.Response(200, json=item)


@pytest.fixture
def notification_service() -> FakeNotificationService:
    """Notification service with one subscriber holding one subscription."""
    service = FakeNotificationService()
    service.add_subscriber(
        SUBSCRIBER_ID,
        SUBSCRIBER_ADDRESS,
        subscriptions=[
            {
                "id": SUBSCRIPTION_ID,
                "frequency": "immediately",
                "created_at": "2019-09-16T02:08:08+01:00",
                "subscriber_list": {"title": "Some thing"},
            }
        ],
    )
    return service


@pytest.fixture
def content_store() -> FakeContentStore:
    return FakeContentStore()


@pytest.fixture
def notification_client(
    notification_service: FakeNotificationService,
) -> NotificationServiceClient:
    http_client = httpx.AsyncClient(
        transport=httpx.MockTransport(notification_service.handler)
    )
    return NotificationServiceClient(http_client, NOTIFICATION_SERVICE_URL)


@pytest.fixture
def content_store_client(content_store: FakeContentStore) -> ContentStoreClient:
    http_client = httpx.AsyncClient(transport=httpx.MockTransport(content_store.handler))
    return ContentStoreClient(http_client, CONTENT_STORE_URL)


@pytest.fixture
def identity() -> AuthenticatedIdentity:
    return AuthenticatedIdentity(subscriber_id=SubscriberId(SUBSCRIBER_ID))


@pytest.fixture
def test_config() -> Config:
    """Configuration pointing at the fake services."""
    return Config().with_overrides(
        notification_service_url=NOTIFICATION_SERVICE_URL,
        content_store_url=CONTENT_STORE_URL,
    )
