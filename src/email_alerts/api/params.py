"""Request parameter parsing shared by the API handlers."""

from aiohttp import web

from email_alerts.core.errors import InvalidRequestBodyError


async def read_params(request: web.Request) -> dict[str, str]:
    """Merge query string and body parameters.

    Bodies may be JSON objects or form encoded; body values win over the
    query string. Non-string JSON values are ignored.

    Raises:
        InvalidRequestBodyError: If a JSON body is malformed or not an object
    """
    params = {key: value for key, value in request.query.items()}
    if not request.can_read_body:
        return params

    if request.content_type == "application/json":
        try:
            data = await request.json()
        except ValueError as e:
            raise InvalidRequestBodyError("Invalid JSON body") from e
        if not isinstance(data, dict):
            raise InvalidRequestBodyError("JSON body must be an object")
        params.update({k: v for k, v in data.items() if isinstance(v, str)})
    else:
        form = await request.post()
        params.update({k: v for k, v in form.items() if isinstance(v, str)})
    return params
