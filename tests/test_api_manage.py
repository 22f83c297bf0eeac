"""Tests for subscription management API endpoints."""

import httpx
import pytest
from aiohttp import web
from aiohttp.test_utils import TestClient
from conftest import (
    SUBSCRIBER_ADDRESS,
    SUBSCRIBER_ID,
    SUBSCRIPTION_ID,
    FakeNotificationService,
)
from email_alerts.clients import ContentStoreClient, NotificationServiceClient
from email_alerts.config import Config
from email_alerts.core.models import AuthenticatedIdentity
from email_alerts.core.types import SubscriberId
from email_alerts.server import create_app

AUTH = {"X-Subscriber-Id": SUBSCRIBER_ID}


@pytest.fixture
def client(
    test_config: Config,
    notification_client: NotificationServiceClient,
    content_store_client: ContentStoreClient,
    aiohttp_client,
) -> TestClient:
    """Create test client with the fake services."""
    app = create_app(
        test_config,
        notification_client=notification_client,
        content_store=content_store_client,
    )
    return aiohttp_client(app)


class TestAuthentication:
    """Tests for the authentication gate."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        ("method", "path"),
        [
            ("GET", "/api/manage"),
            ("GET", f"/api/manage/frequency/{SUBSCRIPTION_ID}"),
            ("POST", f"/api/manage/frequency/{SUBSCRIPTION_ID}"),
            ("GET", "/api/manage/address"),
            ("POST", "/api/manage/address"),
            ("GET", "/api/manage/unsubscribe-all"),
            ("POST", "/api/manage/unsubscribe-all"),
        ],
    )
    async def test__no_identity__returns_401_without_service_call(
        self,
        method: str,
        path: str,
        notification_service: FakeNotificationService,
        client,
    ) -> None:
        """Reject requests without a subscriber before calling the service."""
        test_client = await client
        response = await test_client.request(method, path)

        assert response.status == 401
        assert (await response.json())["error"] == "unauthenticated"
        assert notification_service.requests == []

    @pytest.mark.asyncio
    async def test__custom_authenticator__used(
        self,
        test_config: Config,
        notification_client: NotificationServiceClient,
        content_store_client: ContentStoreClient,
        aiohttp_client,
    ) -> None:
        """Use an injected authenticator instead of the header gate."""
        def authenticate(request: web.Request) -> AuthenticatedIdentity | None:
            return AuthenticatedIdentity(subscriber_id=SubscriberId(SUBSCRIBER_ID))

        app = create_app(
            test_config,
            notification_client=notification_client,
            content_store=content_store_client,
            authenticator=authenticate,
        )
        test_client = await aiohttp_client(app)

        response = await test_client.get("/api/manage")

        assert response.status == 200


class TestListSubscriptions:
    """Tests for GET /api/manage."""

    @pytest.mark.asyncio
    async def test__subscriber__returns_address_and_subscriptions(self, client) -> None:
        """Return the subscriber's address and subscriptions."""
        test_client = await client
        response = await test_client.get("/api/manage", headers=AUTH)

        assert response.status == 200
        data = await response.json()
        assert data["address"] == SUBSCRIBER_ADDRESS
        assert [s["subscriber_list"]["title"] for s in data["subscriptions"]] == [
            "Some thing"
        ]
        assert data["subscriptions"][0]["created_at"] == "2019-09-16T02:08:08+01:00"

    @pytest.mark.asyncio
    async def test__list_url__included(
        self, notification_service: FakeNotificationService, client
    ) -> None:
        """Include the subscriber list URL when the service has one."""
        notification_service.add_subscriber(
            "3",
            "results@example.com",
            subscriptions=[
                {
                    "id": "abc",
                    "subscriber_list": {
                        "title": "Results",
                        "url": "/transition-check/results?c%5B%5D=automotive",
                    },
                }
            ],
        )

        test_client = await client
        response = await test_client.get("/api/manage", headers={"X-Subscriber-Id": "3"})

        data = await response.json()
        assert data["subscriptions"][0]["subscriber_list"]["url"] == (
            "/transition-check/results?c%5B%5D=automotive"
        )

    @pytest.mark.asyncio
    async def test__no_subscriptions__empty_list(
        self, notification_service: FakeNotificationService, client
    ) -> None:
        """Return an empty list with a message for a subscriber without subscriptions."""
        notification_service.add_subscriber("2", "nothing@example.com")

        test_client = await client
        response = await test_client.get("/api/manage", headers={"X-Subscriber-Id": "2"})

        assert response.status == 200
        data = await response.json()
        assert data["address"] == "nothing@example.com"
        assert data["subscriptions"] == []
        assert data["message"] == "You aren’t subscribed to any topics."

    @pytest.mark.asyncio
    async def test__service_down__returns_503(
        self, notification_service: FakeNotificationService, client
    ) -> None:
        """Report an unreachable notification service as 503."""
        notification_service.unavailable = True

        test_client = await client
        response = await test_client.get("/api/manage", headers=AUTH)

        assert response.status == 503

    @pytest.mark.asyncio
    async def test__malformed_service_body__returns_503(
        self, notification_service: FakeNotificationService, client
    ) -> None:
        """Report a malformed success body as a service fault, not a 500."""
        notification_service.respond_with(
            "GET",
            f"/subscribers/{SUBSCRIBER_ID}/subscriptions",
            httpx.Response(200, json=[]),
        )

        test_client = await client
        response = await test_client.get("/api/manage", headers=AUTH)

        assert response.status == 503
        assert (await response.json())["error"] == "service_unavailable"


class TestFrequency:
    """Tests for /api/manage/frequency/{id}."""

    @pytest.mark.asyncio
    async def test__get__returns_current_frequency(self, client) -> None:
        """Return the subscription and its current frequency."""
        test_client = await client
        response = await test_client.get(
            f"/api/manage/frequency/{SUBSCRIPTION_ID}", headers=AUTH
        )

        assert response.status == 200
        data = await response.json()
        assert data["current_frequency"] == "immediately"
        assert data["subscription"]["id"] == SUBSCRIPTION_ID

    @pytest.mark.asyncio
    async def test__get_unowned__returns_404(self, client) -> None:
        """Return 404 for a subscription the subscriber does not own."""
        test_client = await client
        response = await test_client.get("/api/manage/frequency/not-mine", headers=AUTH)

        assert response.status == 404

    @pytest.mark.asyncio
    async def test__post__changes_frequency(
        self, notification_service: FakeNotificationService, client
    ) -> None:
        """Change the frequency and confirm with the list title."""
        test_client = await client
        response = await test_client.post(
            f"/api/manage/frequency/{SUBSCRIPTION_ID}",
            json={"new_frequency": "weekly"},
            headers=AUTH,
        )

        assert response.status == 200
        data = await response.json()
        assert data["message"] == "You’ll now get updates about Some thing weekly"
        assert len(notification_service.calls("PATCH")) == 1

    @pytest.mark.asyncio
    async def test__post_invalid_frequency__returns_400(self, client) -> None:
        """Return 400 for a frequency the service rejects."""
        test_client = await client
        response = await test_client.post(
            f"/api/manage/frequency/{SUBSCRIPTION_ID}",
            data={"new_frequency": "foobar"},
            headers=AUTH,
        )

        assert response.status == 400
        assert (await response.json())["error"] == "invalid_frequency"

    @pytest.mark.asyncio
    async def test__post_missing_frequency__returns_400(self, client) -> None:
        """Return 400 when no frequency is given."""
        test_client = await client
        response = await test_client.post(
            f"/api/manage/frequency/{SUBSCRIPTION_ID}", json={}, headers=AUTH
        )

        assert response.status == 400

    @pytest.mark.asyncio
    async def test__post_unowned__returns_404(
        self, notification_service: FakeNotificationService, client
    ) -> None:
        """Return 404 without calling the service for an unowned subscription."""
        test_client = await client
        response = await test_client.post(
            "/api/manage/frequency/not-mine",
            json={"new_frequency": "weekly"},
            headers=AUTH,
        )

        assert response.status == 404
        assert notification_service.calls("PATCH") == []


class TestAddress:
    """Tests for /api/manage/address."""

    @pytest.mark.asyncio
    async def test__get__returns_current_address(self, client) -> None:
        """Return the current address."""
        test_client = await client
        response = await test_client.get("/api/manage/address", headers=AUTH)

        assert response.status == 200
        assert await response.json() == {"address": SUBSCRIBER_ADDRESS}

    @pytest.mark.asyncio
    async def test__post_valid__changes_address(self, client) -> None:
        """Change the address and return the new one."""
        test_client = await client
        response = await test_client.post(
            "/api/manage/address",
            json={"new_address": "test2@example.com"},
            headers=AUTH,
        )

        assert response.status == 200
        data = await response.json()
        assert data["address"] == "test2@example.com"

    @pytest.mark.asyncio
    async def test__post_blank__returns_missing_address(
        self, notification_service: FakeNotificationService, client
    ) -> None:
        """Return 422 without calling the service for a blank address."""
        test_client = await client
        response = await test_client.post(
            "/api/manage/address", data={"new_address": "  "}, headers=AUTH
        )

        assert response.status == 422
        data = await response.json()
        assert data["error"] == "missing_address"
        assert data["message"] == "Enter your email address"
        assert notification_service.calls("PATCH") == []

    @pytest.mark.asyncio
    async def test__post_rejected__echoes_attempted_address(self, client) -> None:
        """Return the rejected and the current address."""
        test_client = await client
        response = await test_client.post(
            "/api/manage/address", json={"new_address": "foobar"}, headers=AUTH
        )

        assert response.status == 422
        data = await response.json()
        assert data["error"] == "invalid_address"
        assert data["new_address"] == "foobar"
        assert data["address"] == SUBSCRIBER_ADDRESS


class TestUnsubscribeAll:
    """Tests for /api/manage/unsubscribe-all."""

    @pytest.mark.asyncio
    async def test__get__returns_confirmation_prompt(
        self, notification_service: FakeNotificationService, client
    ) -> None:
        """Return the prompt without unsubscribing."""
        test_client = await client
        response = await test_client.get("/api/manage/unsubscribe-all", headers=AUTH)

        assert response.status == 200
        data = await response.json()
        assert data["subscription_count"] == 1
        assert notification_service.calls("DELETE") == []

    @pytest.mark.asyncio
    async def test__post__unsubscribes(self, client) -> None:
        """Unsubscribe and advise on the delay."""
        test_client = await client
        response = await test_client.post("/api/manage/unsubscribe-all", headers=AUTH)

        assert response.status == 200
        data = await response.json()
        assert "unsubscribed from all your subscriptions" in data["message"]
        assert data["description"] == (
            "It can take up to an hour for this change to take effect."
        )

    @pytest.mark.asyncio
    async def test__post_twice__second_also_succeeds(self, client) -> None:
        """Succeed again when already unsubscribed."""
        test_client = await client
        first = await test_client.post("/api/manage/unsubscribe-all", headers=AUTH)
        second = await test_client.post("/api/manage/unsubscribe-all", headers=AUTH)

        assert first.status == 200
        assert second.status == 200

        listing = await test_client.get("/api/manage", headers=AUTH)
        assert (await listing.json())["subscriptions"] == []
