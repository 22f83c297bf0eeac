"""Content item signup API endpoints.

Lets a visitor subscribe to alerts about any supported content item. The
content item path is given as ``link``; ``topic`` is accepted for backwards
compatibility.
"""

from collections.abc import Mapping
from urllib.parse import urlencode

from aiohttp import web

from email_alerts.api.params import read_params
from email_alerts.app_keys import signup_key
from email_alerts.core.models import RedirectTarget

SIGNUPS_PATH = "/api/signups"


def create_signups_routes() -> list[web.RouteDef]:
    return [
        web.get(SIGNUPS_PATH, get_signup),
        web.post(SIGNUPS_PATH, create_signup),
    ]


async def get_signup(request: web.Request) -> web.Response:
    path = _content_path(request.query)
    signup = request.app[signup_key]

    prepared = await signup.prepare(path)
    if isinstance(prepared, RedirectTarget):
        raise web.HTTPFound(_signup_location(prepared))

    item = prepared.content_item
    return web.json_response(
        {
            "view": prepared.view,
            "title": item.title,
            "content_id": item.content_id,
            "base_path": item.base_path,
            "child_taxons": [child.to_dict() for child in item.child_taxons],
            "params": prepared.params.to_dict(),
        }
    )


async def create_signup(request: web.Request) -> web.Response:
    params = await read_params(request)
    signup = request.app[signup_key]

    result = await signup.create(_content_path(params))
    if isinstance(result, RedirectTarget):
        raise web.HTTPSeeOther(_signup_location(result))

    return web.json_response({"slug": result.slug, "url": result.url})


def _content_path(params: Mapping[str, str]) -> str | None:
    return params.get("link") or params.get("topic")


def _signup_location(redirect: RedirectTarget) -> str:
    return f"{SIGNUPS_PATH}?{urlencode({'link': redirect.destination})}"
