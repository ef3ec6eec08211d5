# =============================================================================
# Record Store Adapter — Protocol + SQLAlchemy Implementation
# =============================================================================
#
# The query engine, bulk delete and CRUD glue talk to storage only through
# the RecordStore protocol. SqlRecordStore implements it on an async
# SQLAlchemy session (PostgreSQL in production, SQLite in tests).
#
# DESIGN DECISION: Protocol (structural typing) over ABC. Tests can hand the
# engine an AsyncMock or any object with the right methods, without
# inheriting from anything.
#
# DESIGN DECISION: Driver errors stop here. Every SQLAlchemyError raised by
# a store call is logged with its full text and re-raised as
# StoreUnavailable, whose message says nothing about the driver. Nothing is
# retried; callers decide whether to try again.
#
# A Predicate is a SQLAlchemy boolean clause built by
# app.services.filters.build_predicate.
#
# ARCHITECTURE:
#   RecordStore (Protocol)
#   └── SqlRecordStore
#       ├── count()        → SELECT count(*) WHERE predicate
#       ├── find()         → ordered, windowed SELECT
#       ├── stream()       → ordered, unwindowed, server-side cursor
#       ├── find_one()     → first match or None
#       ├── delete_many()  → single DELETE ... WHERE id IN (...)
#       └── get/add/delete/flush/commit → single-record glue
# =============================================================================

from __future__ import annotations

import logging
import re
from collections.abc import AsyncIterator, Collection
from typing import Any, Protocol

from sqlalchemy import ColumnElement, delete, func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.models import Person
from app.errors import DuplicateEmailError, StoreUnavailable
from app.services.sorting import Sort

logger = logging.getLogger(__name__)

Predicate = ColumnElement[bool]

# persons.id is a 32-bit INTEGER column
MAX_RECORD_ID = 2**31 - 1

_DECIMAL_ID = re.compile(r"[0-9]{1,10}")


def parse_record_id(raw: Any) -> int | None:
    """
    The id `raw` names, or None when it cannot name a stored record.

    Accepts ints and ASCII decimal strings within 1..MAX_RECORD_ID.
    """
    if isinstance(raw, bool):
        return None
    if isinstance(raw, str):
        text = raw.strip()
        if not _DECIMAL_ID.fullmatch(text):
            return None
        raw = int(text)
    if not isinstance(raw, int):
        return None
    return raw if 1 <= raw <= MAX_RECORD_ID else None


# ---------------------------------------------------------------------------
# Protocol Definition
# ---------------------------------------------------------------------------


class RecordStore(Protocol):
    """Storage operations the query and bulk-operations engine relies on."""

    async def count(self, predicate: Predicate) -> int:
        ...

    async def find(
        self,
        predicate: Predicate,
        sort: Sort,
        offset: int = 0,
        limit: int | None = None,
    ) -> list[Person]:
        """
        Matching records ordered by `sort`, ties broken by insertion order.

        `limit=None` returns every record from `offset` on.
        """
        ...

    def stream(self, predicate: Predicate, sort: Sort) -> AsyncIterator[Person]:
        """Same ordering as find(), yielded lazily without a window."""
        ...

    async def find_one(self, predicate: Predicate) -> Person | None:
        ...

    async def delete_many(self, ids: Collection[int]) -> int:
        """Delete every record whose id is in `ids`; return how many went."""
        ...

    async def get(self, record_id: int) -> Person | None:
        ...

    async def add(self, person: Person) -> Person:
        ...

    async def delete(self, person: Person) -> None:
        ...

    async def flush(self) -> None:
        ...

    async def commit(self) -> None:
        ...


# ---------------------------------------------------------------------------
# Implementation: SQLAlchemy async session
# ---------------------------------------------------------------------------


class SqlRecordStore:
    """RecordStore backed by one request-scoped AsyncSession."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    @staticmethod
    def _ordered(stmt, sort: Sort):
        column = sort.field.column
        primary = column.desc() if sort.descending else column.asc()
        # Person.id ascending is insertion order; it keeps ties stable
        return stmt.order_by(primary, Person.id.asc())

    async def count(self, predicate: Predicate) -> int:
        stmt = select(func.count(Person.id)).where(predicate)
        try:
            result = await self._session.execute(stmt)
        except SQLAlchemyError as e:
            raise _unavailable("count", e) from e
        return result.scalar_one()

    async def find(
        self,
        predicate: Predicate,
        sort: Sort,
        offset: int = 0,
        limit: int | None = None,
    ) -> list[Person]:
        stmt = self._ordered(select(Person).where(predicate), sort)
        if offset:
            stmt = stmt.offset(offset)
        if limit is not None:
            stmt = stmt.limit(limit)
        try:
            result = await self._session.execute(stmt)
        except SQLAlchemyError as e:
            raise _unavailable("find", e) from e
        return list(result.scalars().all())

    async def stream(self, predicate: Predicate, sort: Sort) -> AsyncIterator[Person]:
        stmt = self._ordered(select(Person).where(predicate), sort)
        try:
            result = await self._session.stream_scalars(stmt)
            async for person in result:
                yield person
        except SQLAlchemyError as e:
            raise _unavailable("stream", e) from e

    async def find_one(self, predicate: Predicate) -> Person | None:
        stmt = select(Person).where(predicate).order_by(Person.id.asc()).limit(1)
        try:
            result = await self._session.execute(stmt)
        except SQLAlchemyError as e:
            raise _unavailable("find_one", e) from e
        return result.scalar_one_or_none()

    async def delete_many(self, ids: Collection[int]) -> int:
        stmt = (
            delete(Person)
            .where(Person.id.in_(list(ids)))
            .execution_options(synchronize_session=False)
        )
        try:
            result = await self._session.execute(stmt)
        except SQLAlchemyError as e:
            raise _unavailable("delete_many", e) from e
        return result.rowcount or 0

    async def get(self, record_id: int) -> Person | None:
        try:
            return await self._session.get(Person, record_id)
        except SQLAlchemyError as e:
            raise _unavailable("get", e) from e

    async def add(self, person: Person) -> Person:
        self._session.add(person)
        await self.flush()
        return person

    async def delete(self, person: Person) -> None:
        try:
            await self._session.delete(person)
            await self._session.flush()
        except SQLAlchemyError as e:
            raise _unavailable("delete", e) from e

    async def flush(self) -> None:
        """
        Flush pending changes.

        A unique-constraint violation here can only be the email column
        (another writer won the race past the find_one check).
        """
        try:
            await self._session.flush()
        except IntegrityError as e:
            await self._session.rollback()
            logger.info("Unique constraint rejected write: %s", e.orig)
            raise DuplicateEmailError() from e
        except SQLAlchemyError as e:
            raise _unavailable("flush", e) from e

    async def commit(self) -> None:
        try:
            await self._session.commit()
        except IntegrityError as e:
            await self._session.rollback()
            logger.info("Unique constraint rejected commit: %s", e.orig)
            raise DuplicateEmailError() from e
        except SQLAlchemyError as e:
            raise _unavailable("commit", e) from e


def _unavailable(operation: str, error: SQLAlchemyError) -> StoreUnavailable:
    logger.error("Record store %s failed: %s", operation, error)
    return StoreUnavailable()
