"""Application keys for type-safe app configuration access."""

from aiohttp import web

from email_alerts.auth import Authenticator
from email_alerts.clients import ContentStoreClient, NotificationServiceClient
from email_alerts.core.signup import ContentItemSignup
from email_alerts.core.workflow import SubscriptionWorkflow

notification_client_key = web.AppKey("notification_client", NotificationServiceClient)
content_store_key = web.AppKey("content_store", ContentStoreClient)
signup_key = web.AppKey("signup", ContentItemSignup)
workflow_key = web.AppKey("workflow", SubscriptionWorkflow)
authenticator_key = web.AppKey("authenticator", Authenticator)
