"""Clients for the remote services behind email alerts.

This package provides the notification service and content repository
HTTP clients.
"""

from .content_store import ContentStoreClient
from .http import create_http_client
from .notification import NotificationServiceClient, SubscriptionDetails

__all__ = [
    "ContentStoreClient",
    "NotificationServiceClient",
    "SubscriptionDetails",
    "create_http_client",
]
