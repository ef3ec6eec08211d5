# =============================================================================
# Unit Tests — Query Engine
# =============================================================================
#
# Test groups:
#   1. QuerySpec parameter coercion (pure)
#   2. Sort resolution (pure)
#   3. Paginated queries against SQLite: list/search parity, ordering,
#      tie-break stability, out-of-range pages
#   4. Unpaginated iteration for export
# =============================================================================

from __future__ import annotations

import asyncio
from datetime import UTC, datetime, timedelta

from app.db.models import Gender, Person, PersonStatus
from app.services.query_engine import QueryEngine, QuerySpec
from app.services.sorting import (
    SortField,
    SortOrder,
    resolve_sort,
    resolve_sort_field,
    resolve_sort_order,
)


def _run(coro):
    """Helper to run async functions in sync tests."""
    return asyncio.run(coro)


BASE_TIME = datetime(2024, 6, 1, tzinfo=UTC)


# ---------------------------------------------------------------------------
# 1. QuerySpec
# ---------------------------------------------------------------------------


class TestQuerySpecFromParams:
    def test_defaults(self):
        spec = QuerySpec.from_params({})
        assert spec.term == ""
        assert spec.status == "all"
        assert spec.gender == "all"
        assert spec.sort_field == "createdAt"
        assert spec.sort_order == "desc"
        assert spec.page == 1
        assert spec.limit == 10

    def test_http_spellings(self):
        spec = QuerySpec.from_params({
            "query": "ana", "sortField": "firstName", "sortOrder": "asc",
            "page": "3", "limit": "25",
        })
        assert spec.term == "ana"
        assert spec.sort_field == "firstName"
        assert spec.sort_order == "asc"
        assert spec.page == 3
        assert spec.limit == 25

    def test_noisy_numbers_fall_back(self):
        spec = QuerySpec.from_params({"page": "abc", "limit": "-5"})
        assert spec.page == 1
        assert spec.limit == 10

    def test_zero_page_falls_back(self):
        assert QuerySpec.from_params({"page": 0}).page == 1

    def test_booleans_are_not_numbers(self):
        assert QuerySpec.from_params({"limit": True}).limit == 10


# ---------------------------------------------------------------------------
# 2. Sort resolution
# ---------------------------------------------------------------------------


class TestSortResolution:
    def test_camel_case_name(self):
        assert resolve_sort_field("firstName") is SortField.FIRST_NAME

    def test_snake_case_name(self):
        assert resolve_sort_field("date_of_birth") is SortField.DATE_OF_BIRTH

    def test_unknown_field_falls_back_to_created_at(self):
        assert resolve_sort_field("password_hash") is SortField.CREATED_AT
        assert resolve_sort_field("__class__") is SortField.CREATED_AT
        assert resolve_sort_field(None) is SortField.CREATED_AT

    def test_order(self):
        assert resolve_sort_order("asc") is SortOrder.ASC
        assert resolve_sort_order("ASC") is SortOrder.ASC
        assert resolve_sort_order("desc") is SortOrder.DESC
        assert resolve_sort_order("sideways") is SortOrder.DESC
        assert resolve_sort_order(None) is SortOrder.DESC

    def test_resolved_sort_is_descending_by_default(self):
        assert resolve_sort(None, None).descending is True


# ---------------------------------------------------------------------------
# 3. Paginated queries
# ---------------------------------------------------------------------------


class TestQuery:
    def test_list_and_search_agree_on_empty_spec(self, open_store, make_person):
        people = [make_person(i) for i in range(1, 8)]

        async def scenario():
            async with open_store(people) as store:
                engine = QueryEngine(store)
                listed = await engine.list_records(page=2, limit=3)
                searched = await engine.search_records(page=2, limit=3)
                return listed, searched

        listed, searched = _run(scenario())
        assert [p.id for p in listed.rows] == [p.id for p in searched.rows]
        assert listed.page_meta == searched.page_meta
        assert listed.total_count == searched.total_count == 7

    def test_default_order_is_newest_first(self, open_store, make_person):
        people = [make_person(i) for i in range(1, 4)]

        async def scenario():
            async with open_store(people) as store:
                result = await QueryEngine(store).query(QuerySpec())
                return [p.first_name for p in result.rows]

        assert _run(scenario()) == ["Person3", "Person2", "Person1"]

    def test_unknown_sort_field_uses_created_at(self, open_store, make_person):
        people = [make_person(i) for i in range(1, 4)]

        async def scenario():
            async with open_store(people) as store:
                result = await QueryEngine(store).query(
                    QuerySpec(sort_field="nope", sort_order="asc"),
                )
                return [p.first_name for p in result.rows]

        assert _run(scenario()) == ["Person1", "Person2", "Person3"]

    def test_sort_by_first_name_ascending(self, open_store, make_person):
        people = [
            make_person(1, first_name="Carla"),
            make_person(2, first_name="Ana"),
            make_person(3, first_name="Bruno"),
        ]

        async def scenario():
            async with open_store(people) as store:
                result = await QueryEngine(store).query(
                    QuerySpec(sort_field="firstName", sort_order="asc"),
                )
                return [p.first_name for p in result.rows]

        assert _run(scenario()) == ["Ana", "Bruno", "Carla"]

    def test_ties_keep_store_order_across_calls(self, open_store, make_person):
        """Five records with equal status keep insertion order, every time."""
        people = [
            make_person(i, created_at=BASE_TIME - timedelta(days=i))
            for i in range(1, 6)
        ]
        spec = QuerySpec(sort_field="status", sort_order="asc")

        async def scenario():
            async with open_store(people) as store:
                engine = QueryEngine(store)
                first = await engine.query(spec)
                second = await engine.query(spec)
                return [p.id for p in first.rows], [p.id for p in second.rows]

        first, second = _run(scenario())
        assert first == second
        assert first == sorted(first)

    def test_ties_keep_store_order_when_descending(self, open_store, make_person):
        people = [make_person(i, gender=Gender.FEMALE) for i in range(1, 6)]

        async def scenario():
            async with open_store(people) as store:
                result = await QueryEngine(store).query(
                    QuerySpec(sort_field="gender", sort_order="desc"),
                )
                return [p.id for p in result.rows]

        ids = _run(scenario())
        assert ids == sorted(ids)

    def test_enum_sort_is_alphabetical(self, open_store, make_person):
        """Gender sorts by its stored text, not by declaration order."""
        people = [
            make_person(1, first_name="M", gender=Gender.MALE),
            make_person(2, first_name="O", gender=Gender.OTHER),
            make_person(3, first_name="F", gender=Gender.FEMALE),
        ]

        async def scenario():
            async with open_store(people) as store:
                result = await QueryEngine(store).query(
                    QuerySpec(sort_field="gender", sort_order="asc"),
                )
                return [p.first_name for p in result.rows]

        assert _run(scenario()) == ["F", "M", "O"]
        assert Person.__table__.c.gender.type.native_enum is False
        assert Person.__table__.c.status.type.native_enum is False

    def test_page_beyond_range_is_empty(self, open_store, make_person):
        people = [make_person(i) for i in range(1, 6)]

        async def scenario():
            async with open_store(people) as store:
                return await QueryEngine(store).query(
                    QuerySpec(page=3 + 5, limit=2),
                )

        result = _run(scenario())
        assert result.rows == []
        assert result.total_count == 5
        assert result.page_meta.total_pages == 3
        assert result.page_meta.has_next is False
        assert result.page_meta.has_prev is True

    def test_window_and_count_use_same_filter(self, open_store, make_person):
        people = [
            make_person(i, status=PersonStatus.INACTIVE if i % 2 else PersonStatus.ACTIVE)
            for i in range(1, 8)
        ]

        async def scenario():
            async with open_store(people) as store:
                return await QueryEngine(store).search_records(
                    status="Inactive", limit=3,
                )

        result = _run(scenario())
        assert result.total_count == 4
        assert len(result.rows) == 3
        assert all(p.status is PersonStatus.INACTIVE for p in result.rows)
        assert result.page_meta.has_next is True

    def test_page_size_is_capped(self, open_store, make_person):
        people = [make_person(i) for i in range(1, 6)]

        async def scenario():
            async with open_store(people) as store:
                return await QueryEngine(store, max_page_size=2).query(
                    QuerySpec(limit=50),
                )

        result = _run(scenario())
        assert len(result.rows) == 2
        assert result.page_meta.page_size == 2
        assert result.page_meta.total_pages == 3


# ---------------------------------------------------------------------------
# 4. Unpaginated iteration
# ---------------------------------------------------------------------------


class TestIterRecords:
    def test_yields_every_match_in_order(self, open_store, make_person):
        people = [make_person(i) for i in range(1, 16)]

        async def scenario():
            async with open_store(people) as store:
                engine = QueryEngine(store)
                spec = QuerySpec(sort_order="asc", limit=2)
                return [p.first_name async for p in engine.iter_records(spec)]

        names = _run(scenario())
        assert len(names) == 15
        assert names[0] == "Person1"
        assert names[-1] == "Person15"

    def test_restarts_when_called_again(self, open_store, make_person):
        people = [make_person(i) for i in range(1, 4)]

        async def scenario():
            async with open_store(people) as store:
                engine = QueryEngine(store)
                first = [p.id async for p in engine.iter_records(QuerySpec())]
                second = [p.id async for p in engine.iter_records(QuerySpec())]
                return first, second

        first, second = _run(scenario())
        assert first == second
        assert len(first) == 3
