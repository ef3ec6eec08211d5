# =============================================================================
# Query Engine — Filter + Sort + Page in One Retrieval
# =============================================================================
#
# FLOW (paginated):
#   1. build_predicate(term, status, gender)
#   2. store.count(predicate)
#   3. paginate(total, page, limit)        → offset/limit + metadata
#   4. store.find(predicate, sort, offset, limit)
#
# FLOW (export):
#   1. build_predicate(...)
#   2. store.stream(predicate, sort)        → every match, lazily
#
# `list_records` and `search_records` are thin wrappers over `query`; a list
# is a search with no filters. They share every line of paging and sorting.
#
# CONSISTENCY: count (step 2) and window (step 4) are two separate reads
# with no snapshot between them. If another request inserts or deletes
# between the two, the window can be one or two rows off from what the
# count implies, e.g. the last page comes back shorter than expected. This
# is accepted eventual consistency. Do not "fix" it with locks; an adopter
# that needs a single snapshot should run both reads in a REPEATABLE READ
# transaction inside the store adapter.
#
# QuerySpec is also the payload saved by client-side presets
# (app/services/presets.py), so a preset replays as an ordinary query.
# =============================================================================

from __future__ import annotations

import logging
from collections.abc import AsyncIterator, Mapping
from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, Field

from app.config import settings
from app.db.models import Person
from app.services.filters import ALL, build_predicate
from app.services.pager import PageMeta, paginate
from app.services.record_store import Predicate, RecordStore
from app.services.sorting import (
    DEFAULT_SORT_FIELD,
    DEFAULT_SORT_ORDER,
    Sort,
    resolve_sort,
)

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Query Specification
# ---------------------------------------------------------------------------


class QuerySpec(BaseModel):
    """
    Everything one retrieval needs: filters, sort, and page window.

    Filter and sort fields hold the raw caller strings; interpretation
    (sentinels, unknown enum values, unknown sort names) happens when the
    query runs, so a saved spec replays exactly as it was entered.
    """

    term: str = ""
    status: str = ALL
    gender: str = ALL
    sort_field: str = DEFAULT_SORT_FIELD.value
    sort_order: str = DEFAULT_SORT_ORDER.value
    page: int = Field(default=1)
    limit: int = Field(default_factory=lambda: settings.default_page_size)

    @classmethod
    def from_params(cls, params: Mapping[str, Any]) -> QuerySpec:
        """
        Build a spec from loose request parameters.

        Accepts the HTTP spellings (`query`, `sortField`, `sortOrder`) as
        well as the attribute names. Anything missing or unparseable takes
        its default.
        """
        def pick(*names: str) -> Any:
            for name in names:
                value = params.get(name)
                if value is not None:
                    return value
            return None

        default_limit = settings.default_page_size
        return cls(
            term=_as_str(pick("term", "query"), ""),
            status=_as_str(pick("status"), ALL),
            gender=_as_str(pick("gender"), ALL),
            sort_field=_as_str(pick("sort_field", "sortField"), DEFAULT_SORT_FIELD.value),
            sort_order=_as_str(pick("sort_order", "sortOrder"), DEFAULT_SORT_ORDER.value),
            page=_as_positive_int(pick("page"), 1),
            limit=_as_positive_int(pick("limit", "page_size"), default_limit),
        )

    @property
    def sort(self) -> Sort:
        return resolve_sort(self.sort_field, self.sort_order)

    def predicate(self) -> Predicate:
        return build_predicate(self.term, self.status, self.gender)


def _as_str(value: Any, default: str) -> str:
    if value is None:
        return default
    return str(value)


def _as_positive_int(value: Any, default: int) -> int:
    """`int("abc")`, `0` and negatives all become the default."""
    if isinstance(value, bool):
        return default
    try:
        number = int(value)
    except (TypeError, ValueError):
        return default
    return number if number > 0 else default


# ---------------------------------------------------------------------------
# Results
# ---------------------------------------------------------------------------


@dataclass
class QueryResult:
    rows: list[Person]
    total_count: int
    page_meta: PageMeta


# ---------------------------------------------------------------------------
# Engine
# ---------------------------------------------------------------------------


class QueryEngine:
    """Stateless; build one per request around that request's store."""

    def __init__(self, store: RecordStore, max_page_size: int | None = None) -> None:
        self._store = store
        self._max_page_size = (
            max_page_size if max_page_size is not None else settings.max_page_size
        )

    async def query(self, spec: QuerySpec) -> QueryResult:
        predicate = spec.predicate()
        sort = spec.sort

        total = await self._store.count(predicate)
        meta = paginate(total, spec.page, spec.limit, self._max_page_size)

        rows = await self._store.find(
            predicate, sort, offset=meta.offset, limit=meta.limit,
        )

        logger.debug(
            "Query term=%r status=%s gender=%s sort=%s/%s page=%d: %d of %d",
            spec.term, spec.status, spec.gender,
            sort.field.value, sort.order.value, meta.page, len(rows), total,
        )
        return QueryResult(rows=rows, total_count=total, page_meta=meta)

    def iter_records(self, spec: QuerySpec) -> AsyncIterator[Person]:
        """
        Every matching record in sort order, with no page window.

        The iterator is single-use; call again to restart from the top.
        """
        return self._store.stream(spec.predicate(), spec.sort)

    async def list_records(
        self,
        page: int = 1,
        limit: int | None = None,
        sort_field: str | None = None,
        sort_order: str | None = None,
    ) -> QueryResult:
        spec = QuerySpec.from_params({
            "page": page,
            "limit": limit,
            "sort_field": sort_field,
            "sort_order": sort_order,
        })
        return await self.query(spec)

    async def search_records(
        self,
        term: str | None = None,
        status: str | None = None,
        gender: str | None = None,
        page: int = 1,
        limit: int | None = None,
        sort_field: str | None = None,
        sort_order: str | None = None,
    ) -> QueryResult:
        spec = QuerySpec.from_params({
            "term": term,
            "status": status,
            "gender": gender,
            "page": page,
            "limit": limit,
            "sort_field": sort_field,
            "sort_order": sort_order,
        })
        return await self.query(spec)
