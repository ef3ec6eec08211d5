# =============================================================================
# Filter Builder — Query Parameters → Predicate
# =============================================================================
#
# Turns the three recognised filter parameters into one SQLAlchemy boolean
# clause:
#
#   term    → first_name OR last_name OR email OR phone contains term
#             (case-insensitive substring)
#   status  → status == value      (skipped when absent, "all", or unknown)
#   gender  → gender == value      (skipped when absent, "all", or unknown)
#
# The parts are ANDed together. With no parts the predicate is TRUE and
# matches every record.
#
# Case folding follows the backend: PostgreSQL ILIKE folds accented
# letters ("Ángel" matches "ángel"), SQLite only folds ASCII letters.
#
# DESIGN DECISION: This function never raises. Query parameters come from
# end users and are noisy, so anything unrecognised is dropped rather than
# rejected. The same builder serves list, search and export so the three
# can never disagree about which records match.
# =============================================================================

from __future__ import annotations

import enum
from typing import TypeVar

from sqlalchemy import and_, or_, true

from app.db.models import Gender, Person, PersonStatus
from app.services.record_store import Predicate

ALL = "all"

E = TypeVar("E", bound=enum.Enum)

# Columns the free-text term is matched against
TEXT_COLUMNS = (Person.first_name, Person.last_name, Person.email, Person.phone)

_LIKE_ESCAPE = "\\"


def build_predicate(
    term: str | None = None,
    status: str | None = None,
    gender: str | None = None,
) -> Predicate:
    clauses = []

    text_clause = _term_clause(term)
    if text_clause is not None:
        clauses.append(text_clause)

    status_value = parse_enum_filter(PersonStatus, status)
    if status_value is not None:
        clauses.append(Person.status == status_value)

    gender_value = parse_enum_filter(Gender, gender)
    if gender_value is not None:
        clauses.append(Person.gender == gender_value)

    if not clauses:
        return true()
    return and_(*clauses)


def parse_enum_filter(enum_cls: type[E], value: str | None) -> E | None:
    """
    Exact match against the enum's values ("Active", "Male", ...).

    Returns None for absent values, the "all" sentinel, and anything that
    is not a defined value.
    """
    if not isinstance(value, str) or value == ALL:
        return None
    try:
        return enum_cls(value)
    except ValueError:
        return None


def _term_clause(term: str | None) -> Predicate | None:
    if not isinstance(term, str):
        return None
    term = term.strip()
    if not term:
        return None

    pattern = f"%{escape_like(term)}%"
    return or_(
        *(column.ilike(pattern, escape=_LIKE_ESCAPE) for column in TEXT_COLUMNS)
    )


def escape_like(value: str) -> str:
    """Make %, _ and the escape character match themselves."""
    return (
        value.replace(_LIKE_ESCAPE, _LIKE_ESCAPE * 2)
        .replace("%", f"{_LIKE_ESCAPE}%")
        .replace("_", f"{_LIKE_ESCAPE}_")
    )
