"""Boundary Protocols: the data contracts a backend implements for the controller.

Invariants:
    - Core NEVER imports from api/ or infrastructure/
    - Repository is the read-only capability; Persistable extends it with mutation
    - A repository instance is built per request and keeps no cross-request state
    - Outcomes other than success are signalled by raising core.errors exceptions

Design Decisions:
    - Protocol over ABC: structural subtyping, backends never inherit from us
    - runtime_checkable so the controller detects Persistable once, at construction
    - Async methods: implementations do IO; the controller awaits each call to completion
"""

from typing import Any, Callable, Protocol, Sequence, TypeVar, runtime_checkable

from rest_dialect.core.query_options import QueryOptions

T = TypeVar("T")


@runtime_checkable
class Repository(Protocol[T]):
    """Read-only data contract: implemented by the integrator."""
    async def count(self, options: QueryOptions) -> int: ...
    async def read(self, item_id: str) -> T: ...
    async def read_all(self, options: QueryOptions) -> Sequence[T]: ...


@runtime_checkable
class Persistable(Repository[T], Protocol[T]):
    """Read-write data contract. Its absence means the resource is read-only."""
    async def save(self, entity: T) -> str: ...
    async def update(self, item_id: str, entity: T, *cols: str) -> None: ...
    async def delete(self, *ids: str) -> None: ...


# Called once per request with the inbound starlette Request.
RepositoryConstructor = Callable[[Any], Repository]
