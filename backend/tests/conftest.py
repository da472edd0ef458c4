"""Root conftest: shared fixtures for building requests and repositories.

Design Decisions:
    - make_request builds a raw Starlette Request from an ASGI scope so controller
      tests exercise the real query/body parsing without a running app
"""

import json
import os

import pytest
from starlette.requests import Request

from rest_dialect.config import Settings
from rest_dialect.examples.sample_repository import (
    PersistableSampleRepository, SampleModel, SampleRepository,
)

# Keep a developer's .env or shell from changing dialect behaviour under test
os.environ.pop("REST_DIALECT_STRICT_COUNT", None)
os.environ.pop("REST_DIALECT_ID_PARAM", None)
os.environ.pop("REST_DIALECT_TOTAL_COUNT_HEADER", None)


@pytest.fixture
def make_request():
    """Factory: make_request(method, query="", body=None) -> starlette Request.

    body may be bytes, str, or any JSON-serializable value.
    """
    def _make(method: str = "GET", query: str = "", body=None) -> Request:
        if body is None:
            raw = b""
        elif isinstance(body, bytes):
            raw = body
        elif isinstance(body, str):
            raw = body.encode()
        else:
            raw = json.dumps(body).encode()

        scope = {
            "type": "http",
            "method": method,
            "path": "/thing",
            "root_path": "",
            "scheme": "http",
            "query_string": query.encode(),
            "headers": [(b"content-type", b"application/json")],
            "server": ("test", 80),
        }
        sent = False

        async def receive():
            nonlocal sent
            if sent:
                return {"type": "http.disconnect"}
            sent = True
            return {"type": "http.request", "body": raw, "more_body": False}

        return Request(scope, receive)

    return _make


@pytest.fixture
def settings():
    return Settings(_env_file=None)


@pytest.fixture
def repo():
    return PersistableSampleRepository()


@pytest.fixture
def read_only_repo():
    return SampleRepository()


@pytest.fixture
async def seeded_repo(repo):
    """Persistable repo holding Joe (id 1, age 30) and Cecilia (id 2, age 22)."""
    await repo.save(SampleModel(name="Joe", age=30))
    await repo.save(SampleModel(name="Cecilia", age=22))
    return repo


def decode(response) -> object:
    return json.loads(response.body)


@pytest.fixture
def body_of():
    """Decode a Starlette response body as JSON."""
    return decode
