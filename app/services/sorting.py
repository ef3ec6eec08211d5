# =============================================================================
# Sort Keys — Closed Enumeration of Sortable Fields
# =============================================================================
#
# Callers name a sort field by its public name ("createdAt", "firstName",
# or the snake_case spelling). Only the names listed here are accepted;
# each maps to one column on Person. Internal column names are never taken
# straight from the request.
#
# Unknown names and unknown directions fall back to the defaults
# (created_at, descending) instead of failing the request.
# =============================================================================

from __future__ import annotations

import enum
from dataclasses import dataclass

from sqlalchemy.orm import InstrumentedAttribute

from app.db.models import Person


class SortField(str, enum.Enum):
    FIRST_NAME = "firstName"
    LAST_NAME = "lastName"
    EMAIL = "email"
    PHONE = "phone"
    DATE_OF_BIRTH = "dateOfBirth"
    GENDER = "gender"
    STATUS = "status"
    CITY = "city"
    STATE = "state"
    ZIP_CODE = "zipCode"
    COUNTRY = "country"
    CREATED_AT = "createdAt"
    UPDATED_AT = "updatedAt"

    @property
    def column(self) -> InstrumentedAttribute:
        return _COLUMNS[self]


class SortOrder(str, enum.Enum):
    ASC = "asc"
    DESC = "desc"


DEFAULT_SORT_FIELD = SortField.CREATED_AT
DEFAULT_SORT_ORDER = SortOrder.DESC

_COLUMNS: dict[SortField, InstrumentedAttribute] = {
    SortField.FIRST_NAME: Person.first_name,
    SortField.LAST_NAME: Person.last_name,
    SortField.EMAIL: Person.email,
    SortField.PHONE: Person.phone,
    SortField.DATE_OF_BIRTH: Person.date_of_birth,
    SortField.GENDER: Person.gender,
    SortField.STATUS: Person.status,
    SortField.CITY: Person.city,
    SortField.STATE: Person.state,
    SortField.ZIP_CODE: Person.zip_code,
    SortField.COUNTRY: Person.country,
    SortField.CREATED_AT: Person.created_at,
    SortField.UPDATED_AT: Person.updated_at,
}

# Public names plus their snake_case spellings
_ALIASES: dict[str, SortField] = {}
for _field in SortField:
    _ALIASES[_field.value] = _field
    _ALIASES[_COLUMNS[_field].key] = _field


@dataclass(frozen=True)
class Sort:
    """A resolved sort: always a known field and a known direction."""

    field: SortField = DEFAULT_SORT_FIELD
    order: SortOrder = DEFAULT_SORT_ORDER

    @property
    def descending(self) -> bool:
        return self.order is SortOrder.DESC


def resolve_sort_field(name: str | None) -> SortField:
    if not name:
        return DEFAULT_SORT_FIELD
    return _ALIASES.get(name.strip(), DEFAULT_SORT_FIELD)


def resolve_sort_order(value: str | None) -> SortOrder:
    """Only "asc" ascends; anything else, including garbage, descends."""
    if value is not None and value.strip().lower() == SortOrder.ASC.value:
        return SortOrder.ASC
    return SortOrder.DESC


def resolve_sort(field: str | None, order: str | None) -> Sort:
    return Sort(field=resolve_sort_field(field), order=resolve_sort_order(order))
