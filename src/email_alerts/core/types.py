"""Core type definitions."""

from typing import NewType

# Opaque subscriber identifier issued by the notification service
SubscriberId = NewType("SubscriberId", str)

# Subscription identifier, unique across all subscribers
SubscriptionId = NewType("SubscriptionId", str)
