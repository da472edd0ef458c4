"""Response Renderer: encodes a payload as JSON with a status code."""

from typing import Any, Mapping

from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse


def respond_with_json(
    status_code: int, payload: Any, headers: Mapping[str, str] | None = None,
) -> JSONResponse:
    """Render payload (models, dataclasses, mappings, lists) as application/json."""
    return JSONResponse(
        status_code=status_code,
        content=jsonable_encoder(payload),
        headers=dict(headers) if headers else None,
    )


def respond_with_error(status_code: int, message: str) -> JSONResponse:
    """Render {"error": message}."""
    return respond_with_json(status_code, {"error": message})
