"""Subscription management API endpoints.

Every handler authenticates the subscriber and loads their subscriptions
before running the requested operation.
"""

from aiohttp import web

from email_alerts.api.params import read_params
from email_alerts.app_keys import authenticator_key, workflow_key
from email_alerts.auth import require_identity
from email_alerts.core.models import SubscriptionContext
from email_alerts.core.workflow import SubscriptionWorkflow


def create_manage_routes() -> list[web.RouteDef]:
    return [
        web.get("/api/manage", list_subscriptions),
        web.get("/api/manage/frequency/{id}", update_frequency),
        web.post("/api/manage/frequency/{id}", change_frequency),
        web.get("/api/manage/address", update_address),
        web.post("/api/manage/address", change_address),
        web.get("/api/manage/unsubscribe-all", confirm_unsubscribe_all),
        web.post("/api/manage/unsubscribe-all", confirmed_unsubscribe_all),
    ]


async def _load(request: web.Request) -> tuple[SubscriptionWorkflow, SubscriptionContext]:
    identity = require_identity(request, request.app[authenticator_key])
    workflow = request.app[workflow_key]
    return workflow, await workflow.load(identity)


async def list_subscriptions(request: web.Request) -> web.Response:
    workflow, ctx = await _load(request)
    return web.json_response(workflow.list_subscriptions(ctx).to_dict())


async def update_frequency(request: web.Request) -> web.Response:
    workflow, ctx = await _load(request)
    prompt = workflow.begin_frequency_change(ctx, request.match_info["id"])
    return web.json_response(
        {
            "subscription": prompt.subscription.to_dict(),
            "current_frequency": prompt.current_frequency,
        }
    )


async def change_frequency(request: web.Request) -> web.Response:
    workflow, ctx = await _load(request)
    params = await read_params(request)
    changed = await workflow.apply_frequency_change(
        ctx, request.match_info["id"], params.get("new_frequency")
    )
    return web.json_response(
        {
            "message": changed.message,
            "subscription_id": changed.subscription_id,
            "frequency": changed.frequency,
        }
    )


async def update_address(request: web.Request) -> web.Response:
    workflow, ctx = await _load(request)
    return web.json_response({"address": workflow.begin_address_change(ctx)})


async def change_address(request: web.Request) -> web.Response:
    workflow, ctx = await _load(request)
    params = await read_params(request)
    changed = await workflow.apply_address_change(ctx, params.get("new_address"))
    return web.json_response({"message": changed.message, "address": changed.address})


async def confirm_unsubscribe_all(request: web.Request) -> web.Response:
    workflow, ctx = await _load(request)
    prompt = workflow.confirm_unsubscribe_all(ctx)
    return web.json_response(
        {
            "address": prompt.address,
            "subscription_count": prompt.subscription_count,
            "description": prompt.description,
        }
    )


async def confirmed_unsubscribe_all(request: web.Request) -> web.Response:
    workflow, ctx = await _load(request)
    result = await workflow.apply_unsubscribe_all(ctx)
    return web.json_response(
        {"message": result.message, "description": result.description}
    )
