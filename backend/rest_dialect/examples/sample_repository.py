"""Sample Repositories: in-memory backends showing both capabilities.

Invariants:
    - SampleRepository is read-only (no save/update/delete): controllers answer 405 to mutations
    - PersistableSampleRepository assigns sequential string ids on save
    - delete() checks every id before removing any of them
    - QueryOptions are accepted but not applied (no sorting, paging or filtering)

Design Decisions:
    - threading.Lock around the dict and sequence: ids and shared state belong
      to the backend, not the controller
"""

import threading
from typing import Sequence

from pydantic import BaseModel

from rest_dialect.core.errors import NotFoundError
from rest_dialect.core.query_options import QueryOptions


class SampleModel(BaseModel):
    id: str = ""
    name: str = ""
    age: int = 0


class SampleRepository:
    """Read-only in-memory repository."""

    def __init__(self):
        self._data: dict[str, SampleModel] = {}
        self._seq = 0
        self._lock = threading.Lock()
        self._error: Exception | None = None

    def set_error(self, error: Exception | None) -> None:
        """Force every method to raise error (None clears it)."""
        self._error = error

    def _raise_if_failing(self) -> None:
        if self._error is not None:
            raise self._error

    async def count(self, options: QueryOptions | None = None) -> int:
        self._raise_if_failing()
        with self._lock:
            return len(self._data)

    async def read(self, item_id: str) -> SampleModel:
        self._raise_if_failing()
        with self._lock:
            entity = self._data.get(item_id)
        if entity is None:
            raise NotFoundError()
        return entity.model_copy()

    async def read_all(
        self, options: QueryOptions | None = None,
    ) -> Sequence[SampleModel]:
        self._raise_if_failing()
        with self._lock:
            return [e.model_copy() for e in self._data.values()]


class PersistableSampleRepository(SampleRepository):
    """Read-write repository on top of SampleRepository."""

    async def save(self, entity: SampleModel) -> str:
        self._raise_if_failing()
        with self._lock:
            self._seq += 1
            entity.id = str(self._seq)
            if entity.id in self._data:
                raise RuntimeError("record already exists")
            self._data[entity.id] = entity.model_copy()
        return entity.id

    async def update(self, item_id: str, entity: SampleModel, *cols: str) -> None:
        self._raise_if_failing()
        with self._lock:
            current = self._data.get(item_id)
            if current is None:
                raise NotFoundError()
            if not cols:
                current = entity.model_copy(update={"id": item_id})
            else:
                changes = {
                    col: getattr(entity, col) for col in cols
                    if col in SampleModel.model_fields and col != "id"
                }
                current = current.model_copy(update=changes)
            self._data[item_id] = current

    async def delete(self, *ids: str) -> None:
        self._raise_if_failing()
        with self._lock:
            missing = [item_id for item_id in ids if item_id not in self._data]
            if missing:
                raise NotFoundError()
            for item_id in ids:
                del self._data[item_id]
