"""Controller: per-verb REST handlers speaking the JSON-Server dialect over a Repository.

Invariants:
    - Each request flows Receive -> Validate-capability -> Invoke-backend -> Map-outcome -> Render,
      exactly once, with no retries
    - Mutating verbs on a repository that is not Persistable answer 405 before reading the body
    - Request bodies are decoded once; a decode failure answers 422 and the backend is not called
    - PUT bodies may omit required fields of a pydantic model; supplied fields are still
      validated and a wrongly typed one answers 422
    - Error mapping is total: (Operation, ErrorKind) pairs not listed in _FAILURES render 500
      with str(exc) and nothing else
    - A failure body carries either "error" or "errors", never both

Design Decisions:
    - Capability detected structurally (runtime_checkable Protocol) at construction time
    - Controller holds no shared mutable state; build one per request
    - count() failure on get_all is logged and absorbed unless settings.strict_count is set
"""

import json
import logging
from enum import Enum
from functools import lru_cache
from typing import Any, Generic, TypeVar

from fastapi import Request
from fastapi.responses import Response
from pydantic import BaseModel, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from rest_dialect.api.render import respond_with_error, respond_with_json
from rest_dialect.config import Settings, get_settings
from rest_dialect.core.errors import (
    ErrorKind, MethodNotAllowedError, PayloadMalformedError, classify,
)
from rest_dialect.core.query_options import parse_options
from rest_dialect.core.repository_protocols import Persistable, Repository
from rest_dialect.infrastructure.observability import request_context

logger = logging.getLogger(__name__)

T = TypeVar("T")


class Operation(str, Enum):
    """Controller verbs, used to key the error mapping."""
    GET = "get"
    GET_ALL = "get_all"
    POST = "post"
    PUT = "put"
    DELETE = "delete"


# (status, message template); template None renders exc.to_response() verbatim
_FAILURES: dict[Operation, dict[ErrorKind, tuple[int, str | None]]] = {
    Operation.GET: {
        ErrorKind.NOT_FOUND: (404, "{entity}(id:{ids}) not found"),
        ErrorKind.PERMISSION_DENIED: (403, "Reading {entity}(id:{ids}): Permission denied"),
    },
    Operation.GET_ALL: {
        ErrorKind.PERMISSION_DENIED: (403, "Error reading {entity}: Permission denied"),
        ErrorKind.INVALID_QUERY: (400, None),
    },
    Operation.POST: {
        ErrorKind.PERMISSION_DENIED: (403, "Saving {entity}: Permission denied"),
        ErrorKind.VALIDATION: (400, None),
    },
    Operation.PUT: {
        ErrorKind.NOT_FOUND: (404, "{entity}(id:{ids}) not found"),
        ErrorKind.PERMISSION_DENIED: (403, "Updating {entity}(id:{ids}): Permission denied"),
        ErrorKind.VALIDATION: (400, None),
    },
    Operation.DELETE: {
        ErrorKind.NOT_FOUND: (404, "{entity}(id:{ids}) not found"),
        ErrorKind.PERMISSION_DENIED: (403, "Deleting {entity}(id:{ids}): Permission denied"),
    },
}


@lru_cache(maxsize=None)
def _adapter_for(entity_type: Any) -> TypeAdapter:
    return TypeAdapter(entity_type)


def _only_top_level_missing(exc: PydanticValidationError) -> bool:
    return all(
        err["type"] == "missing" and len(err["loc"]) == 1
        for err in exc.errors()
    )


def _partial_model(model: type[BaseModel], data: dict) -> BaseModel:
    """Build model from the supplied keys only, validating each one on assignment.

    Keys matching neither a field name nor its alias are skipped; required
    fields that were not supplied stay unset.
    """
    by_key = {}
    for name, info in model.model_fields.items():
        by_key[name] = name
        if info.alias:
            by_key[info.alias] = name

    entity = model.model_construct()
    for key, value in data.items():
        name = by_key.get(key)
        if name is None:
            continue
        model.__pydantic_validator__.validate_assignment(entity, name, value)
    return entity


class Controller(Generic[T]):
    """RESTful handlers for one resource, backed by a Repository[T]."""

    def __init__(
        self,
        repository: Repository[T],
        entity_type: type[T],
        entity_name: str | None = None,
        settings: Settings | None = None,
    ):
        self.repository = repository
        self.persistable: Persistable[T] | None = (
            repository if isinstance(repository, Persistable) else None
        )
        self.entity_type = entity_type
        self.entity_name = entity_name or getattr(
            entity_type, "__name__", "entity",
        )
        self.settings = settings or get_settings()

    # ─── Verbs ──────────────────────────────────────────────────

    async def get(self, request: Request) -> Response:
        """GET /thing/:id"""
        item_id = request.query_params.get(self.settings.id_param, "")
        try:
            entity = await self.repository.read(item_id)
        except Exception as e:
            return self._failure(request, Operation.GET, e, [item_id])
        return respond_with_json(200, entity)

    async def get_all(self, request: Request) -> Response:
        """GET /thing, honouring _start, _end, _sort, _order, _filters and field filters."""
        try:
            options = parse_options(
                request.query_params, id_param=self.settings.id_param,
            )
            entities = await self.repository.read_all(options)
        except Exception as e:
            return self._failure(request, Operation.GET_ALL, e)

        headers = {}
        try:
            total = await self.repository.count(options)
        except Exception as e:
            if self.settings.strict_count:
                return self._failure(request, Operation.GET_ALL, e)
            logger.warning(
                f"Counting {self.entity_name} failed, omitting "
                f"{self.settings.total_count_header}: {e}",
                extra={"entity": self.entity_name, **request_context(request)},
            )
        else:
            headers[self.settings.total_count_header] = str(total)

        return respond_with_json(200, list(entities or []), headers=headers)

    async def post(self, request: Request) -> Response:
        """POST /thing"""
        try:
            repo = self._require_persistable()
            entity, _ = await self._decode_body(request)
        except (MethodNotAllowedError, PayloadMalformedError) as e:
            return self._reject(request, e)
        try:
            new_id = await repo.save(entity)
        except Exception as e:
            return self._failure(request, Operation.POST, e)
        return respond_with_json(200, {"id": new_id})

    async def put(self, request: Request) -> Response:
        """PUT /thing/:id, updating only the fields present in the body."""
        try:
            repo = self._require_persistable()
            entity, fields = await self._decode_body(request, partial=True)
        except (MethodNotAllowedError, PayloadMalformedError) as e:
            return self._reject(request, e)
        item_id = request.query_params.get(self.settings.id_param, "")
        try:
            await repo.update(item_id, entity, *fields)
        except Exception as e:
            return self._failure(request, Operation.PUT, e, [item_id])
        return await self.get(request)

    async def delete(self, request: Request) -> Response:
        """DELETE /thing/:id (the id key may repeat)"""
        try:
            repo = self._require_persistable()
        except MethodNotAllowedError as e:
            return self._reject(request, e)
        ids = request.query_params.getlist(self.settings.id_param)
        try:
            await repo.delete(*ids)
        except Exception as e:
            return self._failure(request, Operation.DELETE, e, ids)
        return respond_with_json(200, {})

    # ─── Helpers ────────────────────────────────────────────────

    def _require_persistable(self) -> Persistable[T]:
        if self.persistable is None:
            raise MethodNotAllowedError()
        return self.persistable

    async def _decode_body(
        self, request: Request, partial: bool = False,
    ) -> tuple[T, list[str]]:
        """Decode the body once into an ordered mapping; return (entity, supplied fields).

        With partial=True, a pydantic model entity may omit required fields.
        """
        raw = await request.body()
        try:
            data = json.loads(raw)
        except ValueError as e:
            raise PayloadMalformedError() from e
        if not isinstance(data, dict):
            raise PayloadMalformedError()
        try:
            entity = _adapter_for(self.entity_type).validate_python(data)
        except PydanticValidationError as e:
            if not (partial and self._is_model() and _only_top_level_missing(e)):
                raise PayloadMalformedError() from e
            try:
                entity = _partial_model(self.entity_type, data)
            except PydanticValidationError as partial_error:
                raise PayloadMalformedError() from partial_error
        return entity, list(data)

    def _is_model(self) -> bool:
        return isinstance(self.entity_type, type) and issubclass(
            self.entity_type, BaseModel,
        )

    def _reject(
        self, request: Request, exc: MethodNotAllowedError | PayloadMalformedError,
    ) -> Response:
        logger.warning(
            f"{exc.message} for {self.entity_name}",
            extra={
                "entity": self.entity_name, "error_code": exc.code,
                "status_code": exc.http_status, **request_context(request),
            },
        )
        return respond_with_json(exc.http_status, exc.to_response())

    def _failure(
        self,
        request: Request,
        operation: Operation,
        exc: Exception,
        ids: list[str] | None = None,
    ) -> Response:
        """Map a backend failure to (status, body). Unlisted kinds become 500."""
        kind = classify(exc)
        resource_id = ",".join(ids) if ids else None
        mapped = _FAILURES[operation].get(kind)
        extra = {
            "entity": self.entity_name, "resource_id": resource_id,
            "error_code": kind.value, **request_context(request),
        }

        if mapped is None:
            logger.error(
                f"{operation.value} {self.entity_name} failed: {exc}",
                exc_info=exc, extra={**extra, "status_code": 500},
            )
            return respond_with_error(500, str(exc))

        status, template = mapped
        if template is None:
            body = exc.to_response()
        else:
            body = {
                "error": template.format(
                    entity=self.entity_name, ids=resource_id or "",
                ),
            }
        logger.warning(
            f"{operation.value} {self.entity_name} rejected: {exc}",
            extra={**extra, "status_code": status},
        )
        return respond_with_json(status, body)
