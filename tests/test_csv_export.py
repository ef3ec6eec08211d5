# =============================================================================
# Unit Tests — CSV Exporter
# =============================================================================

from __future__ import annotations

import asyncio
import csv
import io
from datetime import date

import pytest

from app.db.models import PersonStatus
from app.errors import NoRowsError
from app.services.csv_export import HEADERS, CsvExporter
from app.services.query_engine import QueryEngine, QuerySpec

EXPECTED_HEADERS = [
    "First Name", "Last Name", "Email", "Phone", "Date of Birth", "Gender",
    "Street", "City", "State", "Zip Code", "Country", "Status", "Created At",
]


def _run(coro):
    """Helper to run async functions in sync tests."""
    return asyncio.run(coro)


def _export(open_store, people, spec: QuerySpec, date_format: str = "%m/%d/%Y") -> str:
    async def scenario():
        async with open_store(people) as store:
            exporter = CsvExporter(QueryEngine(store), date_format=date_format)
            chunks = await exporter.export(spec)
            return b"".join([chunk async for chunk in chunks]).decode("utf-8")

    return _run(scenario())


class TestCsvExport:
    def test_header_order_is_fixed(self):
        assert HEADERS == EXPECTED_HEADERS

    def test_no_rows_raises(self, open_store, make_person):
        with pytest.raises(NoRowsError):
            _export(open_store, [make_person(1)], QuerySpec(term="nobody-matches"))

    def test_empty_store_raises(self, open_store):
        with pytest.raises(NoRowsError):
            _export(open_store, [], QuerySpec())

    def test_three_rows_four_lines(self, open_store, make_person):
        people = [make_person(i) for i in range(1, 4)]
        text = _export(open_store, people, QuerySpec())

        lines = text.splitlines()
        assert len(lines) == 4
        assert next(csv.reader([lines[0]])) == EXPECTED_HEADERS

    def test_row_values(self, open_store, make_person):
        person = make_person(
            1,
            first_name="Ana",
            last_name="Silva",
            email="ana@acme.org",
            phone="9876543210",
            date_of_birth=date(1994, 3, 12),
            street=None,
        )
        rows = list(csv.reader(io.StringIO(_export(open_store, [person], QuerySpec()))))

        assert rows[1] == [
            "Ana", "Silva", "ana@acme.org", "9876543210", "03/12/1994", "Male",
            "", "Pune", "MH", "411001", "India", "Active", "01/01/2024",
        ]

    def test_missing_street_is_empty_not_null(self, open_store, make_person):
        text = _export(open_store, [make_person(1, street=None)], QuerySpec())
        assert "None" not in text
        assert "null" not in text

    def test_export_ignores_paging(self, open_store, make_person):
        people = [make_person(i) for i in range(1, 16)]
        text = _export(open_store, people, QuerySpec(page=3, limit=2))
        assert len(text.splitlines()) == 16

    def test_export_applies_filter_and_sort(self, open_store, make_person):
        people = [
            make_person(1, first_name="Zed"),
            make_person(2, first_name="Amy", status=PersonStatus.INACTIVE),
            make_person(3, first_name="Bea"),
        ]
        text = _export(
            open_store,
            people,
            QuerySpec(status="Active", sort_field="firstName", sort_order="asc"),
        )
        rows = list(csv.reader(io.StringIO(text)))
        assert [r[0] for r in rows[1:]] == ["Bea", "Zed"]

    def test_values_with_commas_are_quoted(self, open_store, make_person):
        text = _export(open_store, [make_person(1, street="4, Park Lane")], QuerySpec())
        rows = list(csv.reader(io.StringIO(text)))
        assert rows[1][6] == "4, Park Lane"

    def test_custom_date_format(self, open_store, make_person):
        person = make_person(1, date_of_birth=date(1994, 3, 12))
        text = _export(open_store, [person], QuerySpec(), date_format="%d.%m.%Y")
        assert "12.03.1994" in text
