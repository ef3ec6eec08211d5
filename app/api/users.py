# =============================================================================
# Users API — List, Search, Export, Bulk Delete, CRUD
# =============================================================================
#
# Every handler is thin: read parameters, call the service, map the result
# to a response model. Domain errors (app/errors.py) propagate and are
# rendered by the handlers in app/api/errors.py.
#
# DESIGN DECISION: List/search/export query parameters are declared as
# optional strings and interpreted by QuerySpec.from_params. A typed
# `page: int` would make FastAPI reject "?page=abc" with a 422, while noisy
# query parameters should fall back to defaults.
#
# Static paths (/search, /export, /bulk-delete) are registered before
# /{record_id} so they are never captured as an id.
# =============================================================================

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Query, Response

from app.api.deps import (
    get_app_settings,
    get_csv_exporter,
    get_query_engine,
    get_record_store,
)
from app.config import Settings
from app.errors import NotFoundFailure
from app.models.requests import BulkDeleteRequest, PersonWrite
from app.models.responses import (
    BulkDeleteResponse,
    MessageResponse,
    PaginationResponse,
    PersonEnvelope,
    PersonListResponse,
    PersonResponse,
)
from app.services import records
from app.services.bulk_delete import delete_many
from app.services.csv_export import CsvExporter
from app.services.query_engine import QueryEngine, QueryResult, QuerySpec
from app.services.record_store import RecordStore, parse_record_id

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/users", tags=["Users"])


def _to_list_response(result: QueryResult) -> PersonListResponse:
    return PersonListResponse(
        data=[PersonResponse.from_record(p) for p in result.rows],
        pagination=PaginationResponse.from_meta(result.page_meta),
    )


def _parse_id(raw: str) -> int:
    """Ids are opaque to callers; anything that is not one is simply not found."""
    record_id = parse_record_id(raw)
    if record_id is None:
        raise NotFoundFailure()
    return record_id


# ---------------------------------------------------------------------------
# GET /api/users — List
# ---------------------------------------------------------------------------


@router.get(
    "",
    response_model=PersonListResponse,
    summary="List users",
    description="Paginated, sorted list of every user. Same paging and sort "
    "rules as /search with no filters.",
)
async def list_users(
    page: str | None = Query(default=None),
    limit: str | None = Query(default=None),
    sort_field: str | None = Query(default=None, alias="sortField"),
    sort_order: str | None = Query(default=None, alias="sortOrder"),
    engine: QueryEngine = Depends(get_query_engine),
    settings: Settings = Depends(get_app_settings),
) -> PersonListResponse:
    spec = QuerySpec.from_params({
        "page": page,
        "limit": limit if limit is not None else settings.default_page_size,
        "sort_field": sort_field,
        "sort_order": sort_order,
    })
    return _to_list_response(await engine.query(spec))


# ---------------------------------------------------------------------------
# GET /api/users/search — Search
# ---------------------------------------------------------------------------


@router.get(
    "/search",
    response_model=PersonListResponse,
    summary="Search users",
    description=(
        "Free-text search over first name, last name, email and phone, "
        "with optional status and gender filters ('all' = no filter)."
    ),
)
async def search_users(
    query: str | None = Query(default=None, description="Search term"),
    term: str | None = Query(default=None, description="Alias of `query`"),
    status: str | None = Query(default=None),
    gender: str | None = Query(default=None),
    page: str | None = Query(default=None),
    limit: str | None = Query(default=None),
    sort_field: str | None = Query(default=None, alias="sortField"),
    sort_order: str | None = Query(default=None, alias="sortOrder"),
    engine: QueryEngine = Depends(get_query_engine),
    settings: Settings = Depends(get_app_settings),
) -> PersonListResponse:
    spec = QuerySpec.from_params({
        "term": query if query is not None else term,
        "status": status,
        "gender": gender,
        "page": page,
        "limit": limit if limit is not None else settings.default_page_size,
        "sort_field": sort_field,
        "sort_order": sort_order,
    })
    return _to_list_response(await engine.query(spec))


# ---------------------------------------------------------------------------
# GET /api/users/export — CSV Export
# ---------------------------------------------------------------------------


@router.get(
    "/export",
    response_class=Response,
    summary="Export users to CSV",
    responses={200: {"content": {"text/csv": {}}}},
)
async def export_users(
    query: str | None = Query(default=None),
    term: str | None = Query(default=None),
    status: str | None = Query(default=None),
    gender: str | None = Query(default=None),
    sort_field: str | None = Query(default=None, alias="sortField"),
    sort_order: str | None = Query(default=None, alias="sortOrder"),
    exporter: CsvExporter = Depends(get_csv_exporter),
    settings: Settings = Depends(get_app_settings),
) -> Response:
    """
    The body is assembled before responding: the rows are read on this
    request's session, which closes once the handler returns.
    """
    spec = QuerySpec.from_params({
        "term": query if query is not None else term,
        "status": status,
        "gender": gender,
        "sort_field": sort_field,
        "sort_order": sort_order,
    })
    chunks = await exporter.export(spec)
    body = b"".join([chunk async for chunk in chunks])

    return Response(
        content=body,
        media_type="text/csv",
        headers={
            "Content-Disposition": f'attachment; filename="{settings.export_filename}"',
        },
    )


# ---------------------------------------------------------------------------
# POST /api/users/bulk-delete — Bulk Delete
# ---------------------------------------------------------------------------


@router.post(
    "/bulk-delete",
    response_model=BulkDeleteResponse,
    summary="Delete many users",
    description="Ids that match no user are ignored; the response counts "
    "only users actually deleted.",
)
async def bulk_delete_users(
    request: BulkDeleteRequest,
    store: RecordStore = Depends(get_record_store),
) -> BulkDeleteResponse:
    deleted = await delete_many(store, request.ids)
    await store.commit()
    return BulkDeleteResponse(
        message=f"Deleted {deleted} user(s)",
        deleted_count=deleted,
    )


# ---------------------------------------------------------------------------
# POST /api/users — Create
# ---------------------------------------------------------------------------


@router.post(
    "",
    response_model=PersonEnvelope,
    status_code=201,
    summary="Create a user",
)
async def create_user(
    request: PersonWrite,
    store: RecordStore = Depends(get_record_store),
    settings: Settings = Depends(get_app_settings),
) -> PersonEnvelope:
    person = await records.create_record(
        store, request, default_country=settings.default_country,
    )
    return PersonEnvelope(
        message="User created successfully",
        data=PersonResponse.from_record(person),
    )


# ---------------------------------------------------------------------------
# GET / PUT / DELETE /api/users/{record_id}
# ---------------------------------------------------------------------------


@router.get(
    "/{record_id}",
    response_model=PersonEnvelope,
    summary="Get a user",
)
async def get_user(
    record_id: str,
    store: RecordStore = Depends(get_record_store),
) -> PersonEnvelope:
    person = await records.get_record(store, _parse_id(record_id))
    return PersonEnvelope(data=PersonResponse.from_record(person))


@router.put(
    "/{record_id}",
    response_model=PersonEnvelope,
    summary="Replace a user",
)
async def update_user(
    record_id: str,
    request: PersonWrite,
    store: RecordStore = Depends(get_record_store),
    settings: Settings = Depends(get_app_settings),
) -> PersonEnvelope:
    person = await records.update_record(
        store,
        _parse_id(record_id),
        request,
        default_country=settings.default_country,
    )
    return PersonEnvelope(
        message="User updated successfully",
        data=PersonResponse.from_record(person),
    )


@router.delete(
    "/{record_id}",
    response_model=MessageResponse,
    summary="Delete a user",
)
async def delete_user(
    record_id: str,
    store: RecordStore = Depends(get_record_store),
) -> MessageResponse:
    await records.delete_record(store, _parse_id(record_id))
    return MessageResponse(message="User deleted successfully")
