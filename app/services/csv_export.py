# =============================================================================
# CSV Exporter
# =============================================================================
#
# Runs the query engine without a page window and writes every matching
# record as one CSV row. Column order is fixed:
#
#   First Name, Last Name, Email, Phone, Date of Birth, Gender, Street,
#   City, State, Zip Code, Country, Status, Created At
#
# Dates use settings.export_date_format (month/day/year by default).
# Missing optional values (street) are written as empty cells.
#
# An empty result raises NoRowsError before a single byte is produced;
# callers report "nothing to export" instead of sending a header-only file.
# =============================================================================

from __future__ import annotations

import csv
import io
import logging
from collections.abc import AsyncIterator, Callable
from datetime import date

from app.config import settings
from app.db.models import Person
from app.errors import NoRowsError
from app.services.query_engine import QueryEngine, QuerySpec

logger = logging.getLogger(__name__)


def _enum_value(value) -> str:
    return getattr(value, "value", value) or ""


# (header, value getter) pairs in output order
COLUMNS: list[tuple[str, Callable[[Person, str], str]]] = [
    ("First Name", lambda p, fmt: p.first_name),
    ("Last Name", lambda p, fmt: p.last_name),
    ("Email", lambda p, fmt: p.email),
    ("Phone", lambda p, fmt: p.phone),
    ("Date of Birth", lambda p, fmt: format_date(p.date_of_birth, fmt)),
    ("Gender", lambda p, fmt: _enum_value(p.gender)),
    ("Street", lambda p, fmt: p.street or ""),
    ("City", lambda p, fmt: p.city or ""),
    ("State", lambda p, fmt: p.state or ""),
    ("Zip Code", lambda p, fmt: p.zip_code or ""),
    ("Country", lambda p, fmt: p.country or ""),
    ("Status", lambda p, fmt: _enum_value(p.status)),
    ("Created At", lambda p, fmt: format_date(p.created_at, fmt)),
]

HEADERS = [header for header, _ in COLUMNS]


def format_date(value: date | None, fmt: str) -> str:
    if value is None:
        return ""
    return value.strftime(fmt)


class CsvExporter:
    def __init__(self, engine: QueryEngine, date_format: str | None = None) -> None:
        self._engine = engine
        self._date_format = date_format or settings.export_date_format

    async def export(self, spec: QuerySpec) -> AsyncIterator[bytes]:
        """
        Start an export and return its byte chunks.

        The first record is fetched here, so NoRowsError surfaces from this
        await rather than partway through the stream.
        """
        records = self._engine.iter_records(spec)
        first = await anext(records, None)
        if first is None:
            logger.info("Export found no rows for term=%r", spec.term)
            raise NoRowsError()
        return self._render(first, records)

    async def _render(
        self, first: Person, rest: AsyncIterator[Person],
    ) -> AsyncIterator[bytes]:
        buffer = io.StringIO()
        writer = csv.writer(buffer)

        def take() -> bytes:
            chunk = buffer.getvalue().encode("utf-8")
            buffer.seek(0)
            buffer.truncate(0)
            return chunk

        writer.writerow(HEADERS)
        writer.writerow(self.row(first))
        yield take()

        count = 1
        async for person in rest:
            writer.writerow(self.row(person))
            count += 1
            yield take()

        logger.info("Exported %d record(s)", count)

    def row(self, person: Person) -> list[str]:
        return [getter(person, self._date_format) for _, getter in COLUMNS]
