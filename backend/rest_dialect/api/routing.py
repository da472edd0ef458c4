"""Routing Adapter: exposes path parameters as query parameters for the controller.

Invariants:
    - The controller only reads flattened query parameters; this module is the
      one place where router path params are turned into them
    - Path param "id" becomes the configured id key (":id" by default), any other
      param "<name>" becomes ":<name>"
    - A client-sent query pair whose key collides with a path param key is dropped;
      the router's value is the only one the controller sees
    - All other query parameters are preserved, path params are appended after them
"""

from typing import Awaitable, Callable
from urllib.parse import parse_qsl, urlencode

from fastapi import Request
from fastapi.responses import Response

from rest_dialect.core.query_options import ID_PARAM

Endpoint = Callable[[Request], Awaitable[Response]]


def _query_key(name: str, id_param: str) -> str:
    return id_param if name == "id" else f":{name}"


def path_params_as_query(request: Request, id_param: str = ID_PARAM) -> Request:
    """Return a request whose query string carries each path param under its query key."""
    if not request.path_params:
        return request
    injected = [
        (_query_key(name, id_param), str(value))
        for name, value in request.path_params.items()
    ]
    reserved = {key for key, _ in injected}
    query = request.scope.get("query_string", b"").decode("latin-1")
    kept = [
        (key, value)
        for key, value in parse_qsl(query, keep_blank_values=True)
        if key not in reserved
    ]
    scope = dict(request.scope)
    scope["query_string"] = urlencode(kept + injected).encode("latin-1")
    return Request(scope, request.receive)


def with_path_params(endpoint: Endpoint, id_param: str = ID_PARAM) -> Endpoint:
    """Wrap an endpoint so it sees path params as query params."""

    async def wrapped(request: Request) -> Response:
        return await endpoint(path_params_as_query(request, id_param))

    wrapped.__name__ = getattr(endpoint, "__name__", "endpoint")
    return wrapped
