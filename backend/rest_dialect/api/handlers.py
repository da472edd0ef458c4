"""Handler Factory: binds a repository constructor to a Controller per HTTP verb.

Invariants:
    - A fresh repository and Controller are built for every request
    - The repository constructor receives the inbound Request (request-scoped context)
    - register_resource wires exactly five routes: GET/POST on the collection,
      GET/PUT/DELETE on the item

Design Decisions:
    - Explicit route registration over auto-discovery: callers see every route
      they mount
    - Item routes go through with_path_params so {id} reaches the controller under
      settings.id_param
"""

from typing import Any

from fastapi import APIRouter, Request
from fastapi.responses import Response

from rest_dialect.api.controller import Controller
from rest_dialect.api.routing import Endpoint, with_path_params
from rest_dialect.config import Settings, get_settings
from rest_dialect.core.repository_protocols import RepositoryConstructor


def _endpoint(
    verb: str,
    new_repository: RepositoryConstructor,
    entity_type: Any,
    entity_name: str | None,
    settings: Settings | None,
) -> Endpoint:
    async def handler(request: Request) -> Response:
        controller = Controller(
            new_repository(request), entity_type,
            entity_name=entity_name, settings=settings,
        )
        return await getattr(controller, verb)(request)

    handler.__name__ = f"{verb}_{entity_name or getattr(entity_type, '__name__', 'entity')}"
    return handler


def get(new_repository, entity_type, entity_name=None, settings=None) -> Endpoint:
    """GET /thing/{id}"""
    return _endpoint("get", new_repository, entity_type, entity_name, settings)


def get_all(new_repository, entity_type, entity_name=None, settings=None) -> Endpoint:
    """GET /thing. See https://github.com/typicode/json-server for the query options."""
    return _endpoint("get_all", new_repository, entity_type, entity_name, settings)


def post(new_repository, entity_type, entity_name=None, settings=None) -> Endpoint:
    """POST /thing"""
    return _endpoint("post", new_repository, entity_type, entity_name, settings)


def put(new_repository, entity_type, entity_name=None, settings=None) -> Endpoint:
    """PUT /thing/{id}"""
    return _endpoint("put", new_repository, entity_type, entity_name, settings)


def delete(new_repository, entity_type, entity_name=None, settings=None) -> Endpoint:
    """DELETE /thing/{id}"""
    return _endpoint("delete", new_repository, entity_type, entity_name, settings)


def register_resource(
    router: APIRouter,
    path: str,
    new_repository: RepositoryConstructor,
    entity_type: Any,
    entity_name: str | None = None,
    settings: Settings | None = None,
) -> None:
    """Mount the five dialect routes for one resource on router."""
    settings = settings or get_settings()
    path = path.rstrip("/")
    item_path = f"{path}/{{id}}"
    args = (new_repository, entity_type, entity_name, settings)

    router.add_api_route(
        path, get_all(*args), methods=["GET"], response_model=None,
    )
    router.add_api_route(
        path, post(*args), methods=["POST"], response_model=None,
    )
    router.add_api_route(
        item_path, with_path_params(get(*args), settings.id_param), methods=["GET"],
        response_model=None,
    )
    router.add_api_route(
        item_path, with_path_params(put(*args), settings.id_param), methods=["PUT"],
        response_model=None,
    )
    router.add_api_route(
        item_path, with_path_params(delete(*args), settings.id_param), methods=["DELETE"],
        response_model=None,
    )
