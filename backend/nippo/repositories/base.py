"""Repository base.

Repositories are the only layer permitted to query the database. Reads go
through `_execute`, which accepts SELECT statements only; writes go through the
explicit `_add` / `_delete` helpers so every mutation is visible at a glance.
Transactions are committed by the request handler, not here.
"""

from __future__ import annotations

from typing import Any, Generic, Optional, TypeVar

from sqlalchemy.engine import Result
from sqlalchemy.orm import Session
from sqlalchemy.sql import Executable
from sqlalchemy.sql.selectable import Select


class RepositoryMisuse(RuntimeError):
    """Raised when a non-SELECT statement is passed to the read path."""


T = TypeVar("T")


class BaseRepository(Generic[T]):
    def __init__(self, session: Session) -> None:
        self._session = session

    def _assert_select_only(self, stmt: Executable) -> None:
        if not isinstance(stmt, Select):
            raise RepositoryMisuse(
                f"Read path accepts SELECT statements only (got {type(stmt)!r})."
            )

    async def _execute(self, stmt: Executable, *, params: Optional[dict[str, Any]] = None) -> Result[Any]:
        """Execute a SELECT statement."""
        self._assert_select_only(stmt)
        # NOTE: sync session; FastAPI runs these coroutines on the event loop,
        # queries are short point lookups.
        return self._session.execute(stmt, params or {})

    async def _get(self, model: type[T], pk: int) -> Optional[T]:
        return self._session.get(model, pk)

    async def _add(self, obj: T) -> T:
        self._session.add(obj)
        self._session.flush()
        return obj

    async def _delete(self, obj: T) -> None:
        self._session.delete(obj)
        self._session.flush()
