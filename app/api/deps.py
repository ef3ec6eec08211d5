# =============================================================================
# API Dependencies — Per-Request Store and Engine
# =============================================================================
#
# Each request gets its own SqlRecordStore around its own session, and a
# QueryEngine / CsvExporter built on top of it. Nothing is shared between
# requests, so handlers can run concurrently without locks.
#
# Swap the store with app.dependency_overrides[get_record_store].
# =============================================================================

from __future__ import annotations

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import Settings
from app.db.engine import get_async_session
from app.services.csv_export import CsvExporter
from app.services.query_engine import QueryEngine
from app.services.record_store import RecordStore, SqlRecordStore


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_record_store(
    session: AsyncSession = Depends(get_async_session),
) -> RecordStore:
    return SqlRecordStore(session)


def get_query_engine(
    store: RecordStore = Depends(get_record_store),
    settings: Settings = Depends(get_app_settings),
) -> QueryEngine:
    return QueryEngine(store, max_page_size=settings.max_page_size)


def get_csv_exporter(
    engine: QueryEngine = Depends(get_query_engine),
    settings: Settings = Depends(get_app_settings),
) -> CsvExporter:
    return CsvExporter(engine, date_format=settings.export_date_format)
